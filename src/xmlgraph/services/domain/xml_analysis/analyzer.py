#!/usr/bin/env python3
"""XML structure analyzer.

Walks an arbitrary XML document once and infers its vocabulary: element
types with attribute statistics, text-content patterns, heuristic special
patterns, parent -> child relationship patterns and reference attributes.
The result seeds default mappings and the builder quick-import path.
"""

import logging
import re
from collections import Counter
from dataclasses import dataclass, field
from typing import Any

# Import Element type from standard library for type hints
from xml.etree.ElementTree import Element

from ....models.analysis import (
    AttributeAnalysis,
    SpecialPattern,
    SpecialPatterns,
    XmlAnalysisRules,
    XmlElementType,
    XmlRelationshipPattern,
    XmlStructureAnalysis,
)
from ....utils.xml_utils import direct_text_nodes, local_name, namespace_of, parse_ns, parse_xml, text_content
from .patterns import (
    REFERENCE_ATTRIBUTES,
    detect_special_patterns,
    has_id_attribute,
    infer_type,
    is_character_level,
    is_reference_attribute_name,
    is_reference_value,
    is_sign_level,
    reference_type,
    relationship_candidates,
)

logger = logging.getLogger(__name__)

MAX_SAMPLE_VALUES = 5

# Share of instances an attribute must appear on to be marked required
REQUIRED_ATTRIBUTE_RATIO = 0.8

# Distinct pattern counts after which re-sighted patterns move up a frequency bucket
MEDIUM_FREQUENCY_PATTERNS = 10
HIGH_FREQUENCY_PATTERNS = 50

_WHITESPACE_RUN = re.compile(r"\s{2,}")


@dataclass
class _TypeAccumulator:
    """Running statistics for one element type during the walk."""

    element_type: XmlElementType
    attribute_occurrences: Counter = field(default_factory=Counter)
    any_flags: SpecialPattern = SpecialPattern.NONE
    always_ignored: bool = True
    has_id: bool = False

    def add_flags(self, flags: SpecialPattern):
        self.any_flags |= flags & ~SpecialPattern.IGNORED
        self.always_ignored = self.always_ignored and SpecialPattern.IGNORED in flags

    @property
    def flags(self) -> SpecialPattern:
        if self.always_ignored:
            return self.any_flags | SpecialPattern.IGNORED
        return self.any_flags


def get_default_analysis_rules() -> XmlAnalysisRules:
    """Empty rule set; the built-in reference vocabulary still applies."""
    return XmlAnalysisRules()


def _coerce_rules(rules: XmlAnalysisRules | dict[str, Any] | None) -> XmlAnalysisRules:
    if rules is None:
        return get_default_analysis_rules()
    if isinstance(rules, XmlAnalysisRules):
        return rules
    return XmlAnalysisRules.model_validate(rules)


def analyze_structure(
    xml_text: str, rules: XmlAnalysisRules | dict[str, Any] | None = None
) -> XmlStructureAnalysis:
    """Analyze the structure of an XML document.

    Args:
        xml_text: XML document content
        rules: Optional analysis rules (model or camelCase dict); missing
            fields take defaults

    Returns:
        Structural analysis of the document

    Raises:
        XmlError: If the document cannot be parsed
    """
    analysis_rules = _coerce_rules(rules)
    root = parse_xml(xml_text)

    vocabulary = REFERENCE_ATTRIBUTES + list(analysis_rules.reference_attributes)
    ignored_elements = {name.lower() for name in analysis_rules.ignored_elements}
    ignored_subtrees = {name.lower() for name in analysis_rules.ignored_subtrees}

    types: dict[str, _TypeAccumulator] = {}
    patterns: dict[str, XmlRelationshipPattern] = {}
    root_elements: list[str] = []
    reference_attributes: dict[str, None] = {}
    referencing_attributes: dict[str, None] = {}
    total_elements = 0
    max_depth = 0

    # Frames: (element, depth, recorded parent name, actual parent element)
    stack: list[tuple[Element, int, str | None, Element | None]] = [(root, 0, None, None)]
    while stack:
        elem, depth, parent_name, parent_elem = stack.pop()
        total_elements += 1
        max_depth = max(max_depth, depth)
        name = local_name(elem.tag)
        lowered = name.lower()

        if lowered in ignored_elements:
            logger.debug(f"Skipping ignored element <{name}> at depth {depth}")
            if lowered not in ignored_subtrees:
                _push_children(stack, elem, depth, parent_name)
            continue

        if depth == 0 and name not in root_elements:
            root_elements.append(name)

        acc = types.get(name)
        if acc is None:
            acc = _TypeAccumulator(XmlElementType(name=name, namespace=namespace_of(elem.tag)))
            types[name] = acc
        element_type = acc.element_type
        element_type.count += 1

        attribute_names = _record_attributes(acc, elem, vocabulary, reference_attributes)
        for attr_key, value in elem.attrib.items():
            if is_reference_value(value):
                referencing_attributes[local_name(attr_key)] = None
        if has_id_attribute(elem):
            acc.has_id = True

        has_text = _record_text(element_type, elem, parent_elem, name, analysis_rules)
        acc.add_flags(detect_special_patterns(elem, name, attribute_names, has_text, analysis_rules))

        if parent_name:
            _record_pattern(patterns, parent_name, name, acc, attribute_names, vocabulary, analysis_rules)
            parent_acc = types.get(parent_name)
            if parent_acc and name not in parent_acc.element_type.children:
                parent_acc.element_type.children.append(name)

        if lowered in ignored_subtrees:
            logger.debug(f"Not descending into ignored subtree <{name}>")
            continue
        _push_children(stack, elem, depth, name)

    incoming = list(referencing_attributes)
    for acc in types.values():
        element_type = acc.element_type
        element_type.special_patterns = SpecialPatterns.from_flag(acc.flags)
        if acc.has_id:
            element_type.reference_patterns.incoming = list(incoming)
        for attr_name, attr_analysis in element_type.attribute_analysis.items():
            ratio = acc.attribute_occurrences[attr_name] / element_type.count
            attr_analysis.required = ratio >= REQUIRED_ATTRIBUTE_RATIO

    element_types = sorted(
        (acc.element_type for acc in types.values() if SpecialPattern.IGNORED not in acc.flags),
        key=lambda et: et.count,
        reverse=True,
    )
    auto_ignored = [
        acc.element_type.name
        for acc in types.values()
        if SpecialPattern.IGNORED in acc.flags and acc.element_type.name not in analysis_rules.ignored_elements
    ]
    detected_subtrees = [
        acc.element_type.name
        for acc in types.values()
        if SpecialPattern.IGNORED_SUBTREE in acc.flags and acc.element_type.name not in analysis_rules.ignored_subtrees
    ]

    logger.info(
        f"Analyzed {total_elements} elements: {len(element_types)} element types, "
        f"{len(patterns)} relationship patterns, max depth {max_depth}"
    )

    return XmlStructureAnalysis(
        element_types=element_types,
        relationship_patterns=list(patterns.values()),
        root_elements=root_elements,
        namespaces=parse_ns(xml_text),
        total_elements=total_elements,
        max_depth=max_depth,
        reference_attributes=list(reference_attributes),
        ignored_elements=list(analysis_rules.ignored_elements) + auto_ignored,
        ignored_subtrees=list(analysis_rules.ignored_subtrees) + detected_subtrees,
    )


def _push_children(stack: list, elem: Element, depth: int, parent_name: str | None):
    # Reversed so children pop in document order
    for child in reversed(list(elem)):
        stack.append((child, depth + 1, parent_name, elem))


def _record_attributes(
    acc: _TypeAccumulator, elem: Element, vocabulary: list[str], reference_attributes: dict[str, None]
) -> list[str]:
    element_type = acc.element_type
    seen: list[str] = []
    for attr_key, value in elem.attrib.items():
        attr_name = local_name(attr_key)
        if attr_name in seen:
            continue
        seen.append(attr_name)

        if attr_name not in element_type.attributes:
            element_type.attributes.append(attr_name)

        analysis = element_type.attribute_analysis.get(attr_name)
        if analysis is None:
            is_reference = is_reference_attribute_name(attr_name, vocabulary) or is_reference_value(value)
            target = value[1:] if value.startswith("#") else value
            analysis = AttributeAnalysis(
                type=reference_type(value) if is_reference else infer_type(value),
                is_reference=is_reference,
                reference_target=target if is_reference else None,
            )
            element_type.attribute_analysis[attr_name] = analysis
            if is_reference:
                reference_attributes[attr_name] = None

        if len(analysis.sample_values) < MAX_SAMPLE_VALUES:
            analysis.sample_values.append(value)
        acc.attribute_occurrences[attr_name] += 1

        if analysis.is_reference and attr_name not in element_type.reference_patterns.outgoing:
            element_type.reference_patterns.outgoing.append(attr_name)
    return seen


def _record_text(
    element_type: XmlElementType, elem: Element, parent: Element | None, name: str, rules: XmlAnalysisRules
) -> bool:
    """Fold one instance's text signals into the type. Returns whether it has direct text."""
    has_text = any(text.strip() for text in direct_text_nodes(elem))
    has_tail = bool(elem.tail and elem.tail.strip())
    content = text_content(elem)
    whitespace_preserved = bool(_WHITESPACE_RUN.search(content)) or "\n" in content or "\t" in content

    patterns = element_type.text_content_patterns
    element_type.has_text_content = element_type.has_text_content or has_text
    element_type.has_tail_content = element_type.has_tail_content or has_tail
    patterns.mixed_content = patterns.mixed_content or (has_text and len(elem) > 0)
    patterns.whitespace_preserved = patterns.whitespace_preserved or whitespace_preserved
    patterns.character_level = patterns.character_level or is_character_level(name, has_text, elem, parent, rules)
    patterns.sign_level = patterns.sign_level or is_sign_level(name, has_text, elem, rules)
    return has_text


def _record_pattern(
    patterns: dict[str, XmlRelationshipPattern],
    parent_name: str,
    name: str,
    acc: _TypeAccumulator,
    attribute_names: list[str],
    vocabulary: list[str],
    rules: XmlAnalysisRules,
):
    key = f"{parent_name}->{name}"
    pattern = patterns.get(key)
    if pattern is None:
        candidates, via_attribute = relationship_candidates(
            acc.any_flags, attribute_names, vocabulary, rules.relationship_type_mappings
        )
        patterns[key] = XmlRelationshipPattern(
            from_=parent_name,
            to=name,
            type=candidates[0],
            frequency="low",
            is_direct=True,
            via_attribute=via_attribute,
            relationship_types=candidates,
        )
        return

    if pattern.frequency == "low" and len(patterns) > MEDIUM_FREQUENCY_PATTERNS:
        pattern.frequency = "medium"
    elif pattern.frequency == "medium" and len(patterns) > HIGH_FREQUENCY_PATTERNS:
        pattern.frequency = "high"
