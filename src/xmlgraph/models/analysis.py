#!/usr/bin/env python3

import enum
from typing import Any, Literal

from pydantic import Field

from .base import CamelModel

AttributeType = Literal[
    "string", "number", "boolean", "date", "array", "object", "id-reference", "xpath-reference"
]
Frequency = Literal["low", "medium", "high"]


class SpecialPattern(enum.Flag):
    """Structural classification of an element type, computed once per instance."""

    NONE = 0
    ALTERNATIVE = enum.auto()
    ANNOTATION = enum.auto()
    TRANSLATION = enum.auto()
    CHOICE = enum.auto()
    IGNORED = enum.auto()
    IGNORED_SUBTREE = enum.auto()


class SpecialPatterns(CamelModel):
    is_alternative: bool = False
    is_annotation: bool = False
    is_translation: bool = False
    is_choice: bool = False
    is_ignored: bool = False
    is_ignored_subtree: bool = False

    @classmethod
    def from_flag(cls, flag: SpecialPattern) -> "SpecialPatterns":
        return cls(
            is_alternative=bool(flag & SpecialPattern.ALTERNATIVE),
            is_annotation=bool(flag & SpecialPattern.ANNOTATION),
            is_translation=bool(flag & SpecialPattern.TRANSLATION),
            is_choice=bool(flag & SpecialPattern.CHOICE),
            is_ignored=bool(flag & SpecialPattern.IGNORED),
            is_ignored_subtree=bool(flag & SpecialPattern.IGNORED_SUBTREE),
        )

    def to_flag(self) -> SpecialPattern:
        flag = SpecialPattern.NONE
        for field_name, member in _PATTERN_FIELDS.items():
            if getattr(self, field_name):
                flag |= member
        return flag


_PATTERN_FIELDS = {
    "is_alternative": SpecialPattern.ALTERNATIVE,
    "is_annotation": SpecialPattern.ANNOTATION,
    "is_translation": SpecialPattern.TRANSLATION,
    "is_choice": SpecialPattern.CHOICE,
    "is_ignored": SpecialPattern.IGNORED,
    "is_ignored_subtree": SpecialPattern.IGNORED_SUBTREE,
}


class TextContentPatterns(CamelModel):
    whitespace_preserved: bool = False
    mixed_content: bool = False
    character_level: bool = False
    sign_level: bool = False


class AttributeAnalysis(CamelModel):
    type: AttributeType = "string"
    required: bool = False
    sample_values: list[Any] = []  # At most five observed values
    is_reference: bool = False
    reference_target: str | None = None


class ReferencePatterns(CamelModel):
    incoming: list[str] = []  # Attribute names that may point at this element type
    outgoing: list[str] = []  # Attribute names on this element type that point elsewhere


class XmlElementType(CamelModel):
    name: str
    count: int = 0
    attributes: list[str] = []
    children: list[str] = []
    namespace: str | None = None
    has_text_content: bool = False
    has_tail_content: bool = False
    text_content_patterns: TextContentPatterns = Field(default_factory=TextContentPatterns)
    attribute_analysis: dict[str, AttributeAnalysis] = {}
    reference_patterns: ReferencePatterns = Field(default_factory=ReferencePatterns)
    special_patterns: SpecialPatterns = Field(default_factory=SpecialPatterns)


class XmlRelationshipPattern(CamelModel):
    from_: str = Field(alias="from")
    to: str
    type: str  # Primary candidate, always relationship_types[0]
    frequency: Frequency = "low"
    is_direct: bool = True
    via_attribute: str | None = None
    relationship_types: list[str] = []


class XmlStructureAnalysis(CamelModel):
    element_types: list[XmlElementType] = []
    relationship_patterns: list[XmlRelationshipPattern] = []
    root_elements: list[str] = []
    namespaces: dict[str, str] = {}  # prefix -> URI; default namespace under "default"
    total_elements: int = 0
    max_depth: int = 0
    reference_attributes: list[str] = []
    ignored_elements: list[str] = []
    ignored_subtrees: list[str] = []

    def get_element_type(self, name: str) -> XmlElementType | None:
        for element_type in self.element_types:
            if element_type.name == name:
                return element_type
        return None


class PatternRules(CamelModel):
    alternative_attributes: list[str] = []
    annotation_attributes: list[str] = []
    translation_attributes: list[str] = []
    choice_indicators: list[str] = []


class TextPatternRules(CamelModel):
    character_level_elements: list[str] = []
    sign_level_elements: list[str] = []


class XmlAnalysisRules(CamelModel):
    """User-tunable hints for the structural analyzer.

    Every field is optional on input; missing fields take the empty defaults.
    """

    ignored_elements: list[str] = []
    ignored_subtrees: list[str] = []
    reference_attributes: list[str] = []  # Added to the built-in reference vocabulary
    pattern_rules: PatternRules = Field(default_factory=PatternRules)
    relationship_type_mappings: dict[str, list[str]] = {}  # attribute name -> relationship types
    text_content_rules: TextPatternRules = Field(default_factory=TextPatternRules)


class XmlElementInfo(CamelModel):
    """Vocabulary of a document without structural analysis."""

    element_names: list[str] = []
    attribute_names: list[str] = []
    root_elements: list[str] = []
