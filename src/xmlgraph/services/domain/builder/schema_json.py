#!/usr/bin/env python3
"""Derive a SchemaJson from model-builder nodes and relationships."""

from ....models.graph import Node, Property, Relationship
from ....models.schema import SchemaJson, SchemaNode, SchemaProperty, SchemaRelation

# Builder property type -> schema datatype
PROPERTY_TYPE_TO_DATATYPE = {
    "string": "string",
    "number": "integer",
    "boolean": "boolean",
    "date": "date",
    "array": "array",
    "object": "uri",
}


def _schema_property(prop: Property) -> SchemaProperty:
    return SchemaProperty(
        name=prop.key,
        datatype=PROPERTY_TYPE_TO_DATATYPE.get(prop.type, "string"),
        values=[prop.default_value] if prop.default_value else [],
        required=prop.required,
    )


def _append_unique(table: dict[str, list[str]], key: str, value: str):
    values = table.setdefault(key, [])
    if value not in values:
        values.append(value)


def convert_builder_to_schema_json(nodes: list[Node], relationships: list[Relationship]) -> SchemaJson:
    """Build a schema with one node type per label and one relation per type.

    A later node with the same label replaces an earlier one. Relationships
    whose endpoints are not among the nodes are ignored. The first
    relationship of a type defines that relation's properties.
    """
    schema = SchemaJson()
    for node in nodes:
        schema.nodes[node.label] = SchemaNode(
            name=node.label,
            superclass_names=[node.type] if node.type != node.label else [],
            properties={prop.key: _schema_property(prop) for prop in node.properties},
            relations_out={},
            relations_in={},
        )

    nodes_by_id = {node.id: node for node in nodes}
    for rel in relationships:
        from_node = nodes_by_id.get(rel.from_)
        to_node = nodes_by_id.get(rel.to)
        if from_node is None or to_node is None:
            continue

        relation = schema.relations.get(rel.type)
        if relation is None:
            properties = {prop.key: _schema_property(prop) for prop in rel.properties or []}
            relation = SchemaRelation(name=rel.type, properties=properties or None, domains={})
            schema.relations[rel.type] = relation
        _append_unique(relation.domains, from_node.label, to_node.label)

        _append_unique(schema.nodes[from_node.label].relations_out, rel.type, to_node.label)
        _append_unique(schema.nodes[to_node.label].relations_in, rel.type, from_node.label)

    return schema
