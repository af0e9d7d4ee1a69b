#!/usr/bin/env python3
"""Quick-import path: build a graph model straight from analysis + mapping.

Unlike the converter this does not read instance data. It produces one node
per included element mapping and one relationship per included relationship
mapping, annotated with the statistics the model builder displays, and it
skips schema validation and conditional rules entirely.
"""

import logging
from collections import Counter
from typing import Any

from ....models.analysis import XmlStructureAnalysis
from ....models.graph import Node, Property, Relationship
from ....models.mapping import MappingConfig, RelationshipMapping
from ..xml_analysis.default_mapping import to_camel_case

logger = logging.getLogger(__name__)


def _builder_properties(
    element_name: str, mapping: MappingConfig, analysis: XmlStructureAnalysis
) -> tuple[list[Property], dict[str, Any]]:
    element_mapping = mapping.element_mappings[element_name]
    element_type = analysis.get_element_type(element_name)

    attr_names = list(element_mapping.attribute_mappings)
    if element_type is not None:
        attr_names.extend(name for name in element_type.attributes if name not in element_mapping.attribute_mappings)

    properties = []
    property_semantics = {}
    for attr_name in attr_names:
        mapped = element_mapping.attribute_mappings.get(attr_name)
        if mapped is not None and not mapped.include:
            continue
        attr_analysis = element_type.attribute_analysis.get(attr_name) if element_type else None

        if mapped is not None:
            key = mapped.property_key
            prop_type = mapped.property_type
            required = mapped.required
            is_reference = bool(mapped.is_reference)
        else:
            key = to_camel_case(attr_name)
            prop_type = attr_analysis.type if attr_analysis else "string"
            required = attr_analysis.required if attr_analysis else False
            is_reference = attr_analysis.is_reference if attr_analysis else False
        if prop_type.endswith("-reference"):
            prop_type = "string"

        description = f"From XML attribute: {attr_name}"
        if is_reference:
            description += " (reference)"
        properties.append(Property(key=key, type=prop_type, required=required, description=description))

        if mapped is not None and mapped.semantic:
            property_semantics[key] = mapped.semantic

    return properties, property_semantics


def _parent_chain(element_name: str, analysis: XmlStructureAnalysis) -> tuple[str | None, list[str]]:
    """Most common parent of an element and the ancestors above it."""
    parent_counts = Counter(p.from_ for p in analysis.relationship_patterns if p.to == element_name)
    if not parent_counts:
        return None, []
    parent = parent_counts.most_common(1)[0][0]

    first_parent = {}
    for pattern in analysis.relationship_patterns:
        first_parent.setdefault(pattern.to, pattern.from_)

    ancestors = []
    visited = {element_name}
    current = parent
    while current and current not in visited:
        visited.add(current)
        ancestors.append(current)
        current = first_parent.get(current)
    return parent, ancestors


def _element_data(element_name: str, mapping: MappingConfig, analysis: XmlStructureAnalysis, property_semantics):
    element_mapping = mapping.element_mappings[element_name]
    element_type = analysis.get_element_type(element_name)

    data: dict[str, Any] = {
        "sourceElement": element_name,
        "xmlNamespace": element_type.namespace if element_type else None,
        "superclassNames": list(element_mapping.superclass_names or []),
        "semantic": element_mapping.semantic,
        "propertySemantics": property_semantics,
    }
    if element_type is None:
        return data

    data["xmlTypeStatistics"] = {
        "count": element_type.count,
        "attributesCount": len(element_type.attributes),
        "childrenCount": len(element_type.children),
        "hasTextContent": element_type.has_text_content,
    }
    # Per-child counts are not tracked by the analyzer
    data["xmlChildren"] = [{"name": child, "count": 0} for child in element_type.children]

    parent, ancestors = _parent_chain(element_name, analysis)
    if parent is not None:
        data["xmlParent"] = parent
    if ancestors:
        data["xmlAncestors"] = ancestors
    return data


def _resolve_target_element(
    element_name: str, rel_mapping: RelationshipMapping, mapping: MappingConfig, included: dict[str, str]
) -> tuple[str | None, str | None]:
    """Element name a relationship mapping points at, plus the attribute it goes through."""
    target = rel_mapping.target

    if target.type in ("child-element", "sibling-element"):
        return target.element_name, None

    if target.type == "reference":
        attr_mapping = mapping.element_mappings[element_name].attribute_mappings.get(target.attribute)
        label = attr_mapping.reference_target if attr_mapping else None
        return _element_for_label(label, mapping, included), target.attribute

    if target.type == "fixed":
        return _element_for_label(target.node_label, mapping, included), None

    return None, None


def _element_for_label(label: str | None, mapping: MappingConfig, included: dict[str, str]) -> str | None:
    if not label:
        return None
    for name in included:
        if mapping.element_mappings[name].node_label == label:
            return name
    return None


def convert_to_builder_format(
    analysis: XmlStructureAnalysis, mapping: MappingConfig
) -> tuple[list[Node], list[Relationship]]:
    """Build model-builder nodes and relationships from an analysis and mapping.

    Args:
        analysis: Result of analyze_structure()
        mapping: Mapping whose included elements become nodes

    Returns:
        (nodes, relationships) with ids node-N and rel-N
    """
    nodes = []
    node_ids: dict[str, str] = {}

    for element_name, element_mapping in mapping.element_mappings.items():
        if not element_mapping.include:
            continue
        node_id = f"node-{len(nodes)}"
        node_ids[element_name] = node_id

        properties, property_semantics = _builder_properties(element_name, mapping, analysis)
        nodes.append(
            Node(
                id=node_id,
                label=element_mapping.node_label,
                type=element_mapping.node_type,
                properties=properties,
                data=_element_data(element_name, mapping, analysis, property_semantics),
            )
        )

    relationships = []
    for element_name, rel_mappings in mapping.relationship_mappings.items():
        if element_name not in node_ids:
            continue
        for rel_mapping in rel_mappings:
            if not rel_mapping.include:
                continue
            target_element, via_attribute = _resolve_target_element(element_name, rel_mapping, mapping, node_ids)
            if target_element not in node_ids:
                logger.debug(f"Skipping {rel_mapping.relationship_type} from {element_name}: target not included")
                continue

            relationships.append(
                Relationship(
                    id=f"rel-{len(relationships)}",
                    type=rel_mapping.relationship_type,
                    from_=node_ids[element_name],
                    to=node_ids[target_element],
                    data={
                        "sourcePattern": f"{element_name}->{target_element}",
                        "viaAttribute": via_attribute,
                        "semantic": rel_mapping.semantic,
                    },
                )
            )

    logger.info(f"Builder format: {len(nodes)} nodes, {len(relationships)} relationships")
    return nodes, relationships
