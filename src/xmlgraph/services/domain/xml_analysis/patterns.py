#!/usr/bin/env python3
"""Heuristics used by the structural analyzer.

Attribute-name matching is case-insensitive throughout. Pattern rule lists
match on equality or substring, so a rule entry "corresp" also catches an
attribute named "correspondsTo".
"""

import re

# Import Element type from standard library for type hints
from xml.etree.ElementTree import Element

from ....models.analysis import AttributeType, SpecialPattern, XmlAnalysisRules
from ....utils.xml_utils import local_name

# Built-in reference vocabulary, extended by XmlAnalysisRules.reference_attributes
REFERENCE_ATTRIBUTES = ["id", "xml:id", "target", "corresp", "units", "ref", "href", "source", "link", "pointer"]

# Attributes that mark an element as an id holder for incoming reference analysis
ID_ATTRIBUTES = ("id", "xmlid", "{http://www.w3.org/XML/1998/namespace}id")

# Relationship types guessed from an attribute name when no rule maps it
FALLBACK_RELATIONSHIP_TYPES: list[tuple[tuple[str, ...], list[str]]] = [
    (("target", "point"), ["annotates", "refersTo"]),
    (("corresp", "correspond"), ["refersTo", "mentions"]),
    (("unit", "group"), ["refersTo"]),
    (("ref", "link"), ["refersTo", "mentions"]),
    (("source", "origin"), ["refersTo"]),
]
DEFAULT_REFERENCE_RELATIONSHIP = ["refersTo"]

SIGN_LEVEL_CHILD_HINTS = ("format", "style", "mark")

_BARE_IDENTIFIER = re.compile(r"^[a-zA-Z][a-zA-Z0-9_-]*$")
# ASCII decimal literals only; hex, Infinity, NaN and digit separators are not numbers
DECIMAL_NUMBER = re.compile(r"^\s*[-+]?(\d+\.?\d*|\.\d+)([eE][-+]?\d+)?\s*$", re.ASCII)
_ISO_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}")
_US_DATE = re.compile(r"^\d{2}/\d{2}/\d{4}")


def matches_any(name: str, candidates: list[str]) -> bool:
    """True if name equals or contains any candidate, ignoring case."""
    lowered = name.lower()
    return any(lowered == c.lower() or c.lower() in lowered for c in candidates if c)


def is_reference_value(value: str) -> bool:
    """Does an attribute value look like it points at another element?"""
    if value.startswith("#") or _BARE_IDENTIFIER.match(value):
        return True
    if " " in value:
        return all(part.startswith("#") or part[:1].isascii() and part[:1].isalpha() for part in value.split(" "))
    return False


def is_reference_attribute_name(name: str, vocabulary: list[str]) -> bool:
    lowered = name.lower()
    return any(lowered == ref.lower() or lowered == f"xml:{ref.lower()}" for ref in vocabulary)


def infer_type(value: str) -> AttributeType:
    """Infer a property type from a single attribute value."""
    if value in ("true", "false"):
        return "boolean"
    if DECIMAL_NUMBER.match(value):
        return "number"
    if _ISO_DATE.match(value) or _US_DATE.match(value):
        return "date"
    return "string"


def reference_type(value: str) -> AttributeType:
    return "xpath-reference" if "@" in value or "//" in value else "id-reference"


def has_id_attribute(elem: Element) -> bool:
    return any(elem.attrib.get(key) for key in ID_ATTRIBUTES)


def detect_special_patterns(
    elem: Element,
    name: str,
    attribute_names: list[str],
    has_text: bool,
    rules: XmlAnalysisRules,
) -> SpecialPattern:
    """Classify one element instance.

    Args:
        elem: The element being analyzed
        name: Its local name
        attribute_names: Local names of its attributes
        has_text: Whether it carries non-whitespace direct text
        rules: Merged analysis rules

    Returns:
        Flags describing the instance
    """
    pattern_rules = rules.pattern_rules
    children = list(elem)
    has_nodes = bool(elem.text) or len(children) > 0
    flags = SpecialPattern.NONE

    has_annotation_attr = any(matches_any(a, pattern_rules.annotation_attributes) for a in attribute_names)
    has_translation_attr = any(matches_any(a, pattern_rules.translation_attributes) for a in attribute_names)

    if any(matches_any(a, pattern_rules.alternative_attributes) for a in attribute_names):
        flags |= SpecialPattern.ALTERNATIVE
    if has_annotation_attr and (has_text or has_nodes):
        flags |= SpecialPattern.ANNOTATION
    if has_translation_attr and (has_text or has_nodes):
        flags |= SpecialPattern.TRANSLATION

    if len(children) > 1 and (_all_similar(name, children) or _all_choice_marked(children, pattern_rules.choice_indicators)):
        flags |= SpecialPattern.CHOICE

    if (
        not has_text
        and not children
        and len(attribute_names) <= 1
        and all(a.lower() == "id" or "xml" in a.lower() for a in attribute_names)
    ):
        flags |= SpecialPattern.IGNORED

    ignored_subtrees = {s.lower() for s in rules.ignored_subtrees}
    if name.lower() in ignored_subtrees or (
        SpecialPattern.ANNOTATION in flags and not has_text and not children
    ):
        flags |= SpecialPattern.IGNORED_SUBTREE

    return flags


def _all_similar(name: str, children: list[Element]) -> bool:
    lowered = name.lower()
    for child in children:
        child_name = local_name(child.tag).lower()
        if not (child_name == lowered or lowered in child_name or child_name in lowered):
            return False
    return True


def _all_choice_marked(children: list[Element], indicators: list[str]) -> bool:
    if not indicators:
        return False
    wanted = {ci.lower() for ci in indicators}
    return all(
        any(local_name(key).lower() in wanted and "alt" in value.lower() for key, value in child.attrib.items())
        for child in children
    )


def is_character_level(name: str, has_text: bool, elem: Element, parent: Element | None, rules: XmlAnalysisRules) -> bool:
    if any(name.lower() == e.lower() for e in rules.text_content_rules.character_level_elements):
        return True
    return has_text and len(elem) == 0 and parent is not None and len(parent) > 1


def is_sign_level(name: str, has_text: bool, elem: Element, rules: XmlAnalysisRules) -> bool:
    if any(name.lower() == e.lower() for e in rules.text_content_rules.sign_level_elements):
        return True
    if not has_text:
        return False
    return all(
        any(hint in local_name(child.tag).lower() for hint in SIGN_LEVEL_CHILD_HINTS) for child in elem
    )


def relationship_candidates(
    flags: SpecialPattern,
    attribute_names: list[str],
    vocabulary: list[str],
    type_mappings: dict[str, list[str]],
) -> tuple[list[str], str | None]:
    """Rank relationship types for a parent -> child pattern.

    Returns:
        (candidate types with "contains" first, attribute that suggested a reference type)
    """
    candidates = ["contains"]
    if SpecialPattern.ALTERNATIVE in flags:
        candidates += ["alternative", "expressedAs"]
    if SpecialPattern.ANNOTATION in flags:
        candidates += ["annotates", "annotatedBy"]
    if SpecialPattern.TRANSLATION in flags:
        candidates.append("translatedAs")

    for attr_name in attribute_names:
        if not matches_any(attr_name, vocabulary):
            continue
        candidates += _reference_relationship_types(attr_name, type_mappings)
        return candidates, attr_name

    return candidates, None


def _reference_relationship_types(attr_name: str, type_mappings: dict[str, list[str]]) -> list[str]:
    lowered = attr_name.lower()
    mapped = type_mappings.get(lowered) or type_mappings.get(attr_name)
    if not mapped:
        for key, types in type_mappings.items():
            if key.lower() in lowered or lowered in key.lower():
                mapped = types
                break
    if mapped:
        return list(mapped)

    for hints, types in FALLBACK_RELATIONSHIP_TYPES:
        if any(hint in lowered for hint in hints):
            return list(types)
    return list(DEFAULT_REFERENCE_RELATIONSHIP)
