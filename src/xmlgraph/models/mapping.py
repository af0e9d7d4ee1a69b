#!/usr/bin/env python3
"""Mapping configuration: how XML elements, attributes and text become graph data.

The JSON form of these models is the import/export format used by the model
builder UI, so every field keeps its camelCase name on the wire.
"""

from typing import Annotated, Any, Literal, Union

from pydantic import Field

from .base import CamelModel
from .graph import PropertyType

TransformKind = Literal["direct", "first", "last", "join", "count", "fixed", "map"]
InheritTransform = Literal["direct", "fixed", "map"]
ChildOrder = Literal["document", "reverse", "custom"]


# Text content and tokenization


class TokenPropertyMapping(CamelModel):
    source: Literal["index", "text", "whitespace", "fixed"]
    value: str | None = None  # Literal for the fixed source
    property_key: str


class PropertyInheritanceRule(CamelModel):
    from_ancestor: str | None = None  # Nearest ancestor element with this name
    from_attribute: str | None = None
    from_parent: bool | None = None
    property_key: str
    property_type: Literal["string", "number", "boolean", "date"] = "string"
    transform: InheritTransform | None = None
    fixed_value: str | None = None
    value_map: dict[str, str] | None = None


class TokenizationContextRule(CamelModel):
    when_ancestor: list[str] | None = None
    when_parent: list[str] | None = None
    when_inside: list[str] | None = None
    target_node_label: str | None = None
    target_node_type: str | None = None
    split_by: str | None = None
    inherit_properties: list[PropertyInheritanceRule] | None = None


class TokenizeConfig(CamelModel):
    enabled: bool = True
    split_by: str | None = None  # "" or None splits into single characters
    target_node_label: str
    target_node_type: str
    properties: dict[str, TokenPropertyMapping] | None = None
    context_rules: list[TokenizationContextRule] | None = None


class TextContentRule(CamelModel):
    include: bool = True
    property_key: str | None = None  # Store text on the element's node under this key
    tokenize: TokenizeConfig | None = None

    @property
    def tokenizes(self) -> bool:
        return self.tokenize is not None and self.tokenize.enabled


# Conditional and recursive processing


class ChildCountRange(CamelModel):
    min: int | None = None
    max: int | None = None


class ElementCondition(CamelModel):
    """Predicates over one element; every predicate that is set must hold."""

    has_children: list[str] | None = None  # At least one of these children
    has_all_children: list[str] | None = None
    has_no_children: list[str] | None = None
    has_ancestor: list[str] | None = None
    has_attribute: list[str] | None = None  # At least one of these attributes
    has_text_content: bool | None = None
    child_count: ChildCountRange | None = None


class CreateNodeAction(CamelModel):
    node_label: str
    node_type: str
    superclass_names: list[str] | None = None


class ProcessChildren(CamelModel):
    include: list[str] | None = None
    exclude: list[str] | None = None
    process_all: bool | None = None


class TextProcessingStages(CamelModel):
    """Text rules run before and after an element's children.

    on_tail is accepted and round-trips, but tail text is never processed.
    """

    before_children: TextContentRule | None = None
    after_children: TextContentRule | None = None
    on_tail: TextContentRule | None = None


class ChildProcessingRule(CamelModel):
    """How an element's children are selected, ordered and bounded.

    order "custom" is accepted and round-trips; children keep document order.
    """

    process_children: ProcessChildren | None = None
    order: ChildOrder | None = None
    text_processing: TextProcessingStages | None = None
    max_depth: int | None = None


class ConditionalAction(CamelModel):
    create_node: CreateNodeAction | None = None
    skip: bool | None = None
    text_processing: TextContentRule | None = None
    child_processing: ChildProcessingRule | None = None


class ConditionalRule(CamelModel):
    condition: ElementCondition
    action: ConditionalAction


class PropertySource(CamelModel):
    type: Literal[
        "child-element",
        "ancestor-element",
        "child-attribute",
        "ancestor-attribute",
        "child-text",
        "ancestor-text",
    ]
    element_name: str | None = None
    attribute_name: str | None = None
    xpath: str | None = None


class PropertyMappingRule(CamelModel):
    source: PropertySource
    target_property: str
    target_property_type: PropertyType = "string"
    transform: TransformKind | None = None
    transform_value: str | None = None  # Fixed value, or join separator
    value_map: dict[str, str] | None = None


# Element and attribute mappings


class AttributeMapping(CamelModel):
    include: bool = True
    property_key: str
    property_type: PropertyType = "string"
    required: bool = False
    is_reference: bool | None = None
    reference_target: str | None = None  # Node label the reference points at
    semantic: dict[str, Any] | None = None


class ElementMapping(CamelModel):
    include: bool = True
    node_label: str
    node_type: str
    superclass_names: list[str] | None = None
    attribute_mappings: dict[str, AttributeMapping] = {}
    process_text_content: bool = False
    conditional_rules: list[ConditionalRule] | None = None
    child_processing_rules: list[ChildProcessingRule] | None = None
    property_mappings: list[PropertyMappingRule] | None = None
    semantic: dict[str, Any] | None = None


# Relationship mappings


class CurrentElementSource(CamelModel):
    type: Literal["current-element"] = "current-element"


class ParentElementSource(CamelModel):
    type: Literal["parent-element"] = "parent-element"


class AttributeSource(CamelModel):
    type: Literal["attribute"] = "attribute"
    attribute: str


class XPathSource(CamelModel):
    type: Literal["xpath"] = "xpath"
    xpath: str


RelationshipSource = Annotated[
    Union[CurrentElementSource, ParentElementSource, AttributeSource, XPathSource],
    Field(discriminator="type"),
]


class ChildElementTarget(CamelModel):
    type: Literal["child-element"] = "child-element"
    element_name: str


class SiblingElementTarget(CamelModel):
    type: Literal["sibling-element"] = "sibling-element"
    element_name: str


class ReferenceTarget(CamelModel):
    type: Literal["reference"] = "reference"
    attribute: str


class XPathTarget(CamelModel):
    type: Literal["xpath"] = "xpath"
    xpath: str


class FixedTarget(CamelModel):
    type: Literal["fixed"] = "fixed"
    node_label: str


RelationshipTarget = Annotated[
    Union[ChildElementTarget, SiblingElementTarget, ReferenceTarget, XPathTarget, FixedTarget],
    Field(discriminator="type"),
]


class RelationshipPropertyMapping(CamelModel):
    source: Literal["attribute", "text", "xpath", "fixed"]
    source_path: str | None = None  # Attribute name, XPath, or fixed value
    property_key: str
    transform: Literal["string", "number", "boolean", "date", "split", "join"] | None = None


class RelationshipMapping(CamelModel):
    include: bool = True
    relationship_type: str
    source: RelationshipSource = Field(default_factory=CurrentElementSource)
    target: RelationshipTarget
    properties: dict[str, RelationshipPropertyMapping] | None = None
    semantic: dict[str, Any] | None = None

    @property
    def is_hierarchical(self) -> bool:
        """Parent-to-child relationship created when the child is visited."""
        return self.source.type == "current-element" and self.target.type == "child-element"


class ReferenceRule(CamelModel):
    """Accepted and round-tripped; the converter builds references from relationship mappings."""

    attribute: str
    reference_type: Literal["id", "xpath", "uri"] = "id"
    target_node_label: str
    relationship_type: str | None = None


class MappingConfig(CamelModel):
    version: str = "1.0.0"
    schema_id: str | None = None
    element_mappings: dict[str, ElementMapping] = {}
    relationship_mappings: dict[str, list[RelationshipMapping]] = {}
    text_content_rules: dict[str, TextContentRule] = {}
    reference_rules: dict[str, ReferenceRule] = {}
