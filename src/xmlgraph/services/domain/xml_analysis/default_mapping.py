#!/usr/bin/env python3
"""Seed a MappingConfig from a structural analysis.

Everything is generated switched off: the user opts elements and text in
explicitly, while plain attributes and ids are pre-selected so enabling an
element gives a useful node straight away.
"""

import logging
import re

from ....models.analysis import XmlStructureAnalysis
from ....models.mapping import AttributeMapping, ElementMapping, MappingConfig, TextContentRule

logger = logging.getLogger(__name__)

_WORD_SEPARATORS = re.compile(r"[-_\s]+")

DEFAULT_TEXT_PROPERTY = "content"


def to_pascal_case(name: str) -> str:
    """'pers-name' -> 'PersName'; each word is capitalized and the rest lowercased."""
    return "".join(word[:1].upper() + word[1:].lower() for word in _WORD_SEPARATORS.split(name))


def to_camel_case(name: str) -> str:
    pascal = to_pascal_case(name)
    return pascal[:1].lower() + pascal[1:]


def generate_default_mapping(analysis: XmlStructureAnalysis, version: str = "1.0.0") -> MappingConfig:
    """Generate a default mapping configuration from an analysis.

    Args:
        analysis: Result of analyze_structure()
        version: Version string stamped on the mapping

    Returns:
        Mapping with one excluded element mapping per non-ignored element type
    """
    mapping = MappingConfig(version=version)

    for element_type in analysis.element_types:
        if element_type.special_patterns.is_ignored:
            continue

        label = to_pascal_case(element_type.name)
        attribute_mappings = {}
        for attr_name in element_type.attributes:
            attr_analysis = element_type.attribute_analysis[attr_name]
            is_reference = attr_analysis.is_reference
            property_type = "string" if is_reference or attr_analysis.type.endswith("-reference") else attr_analysis.type
            attribute_mappings[attr_name] = AttributeMapping(
                include=not is_reference or attr_name.lower() == "id",
                property_key=to_camel_case(attr_name),
                property_type=property_type,
                required=attr_analysis.required,
                is_reference=is_reference,
            )

        mapping.element_mappings[element_type.name] = ElementMapping(
            include=False,
            node_label=label,
            node_type=label,
            superclass_names=[],
            attribute_mappings=attribute_mappings,
            process_text_content=False,
        )

        patterns = element_type.text_content_patterns
        if element_type.has_text_content or patterns.character_level or patterns.sign_level:
            mapping.text_content_rules[element_type.name] = TextContentRule(
                include=False, property_key=DEFAULT_TEXT_PROPERTY
            )

    logger.info(
        f"Generated default mapping for {len(mapping.element_mappings)} element types "
        f"({len(mapping.text_content_rules)} with text rules)"
    )
    return mapping
