#!/usr/bin/env python3
"""
Mapping validation against a target graph schema.

Checks that every included element, attribute, relationship and text rule
of a MappingConfig refers to node labels, properties and relation types that
exist in the SchemaJson, and that declared property types are compatible
with the schema datatypes. Validation is pure and never raises: all problems
are accumulated and returned so the caller can show them together.
"""

import logging
from typing import Any

from pydantic import BaseModel, ValidationError

from ....models.graph import ConversionError, ErrorType
from ....models.mapping import MappingConfig
from ....models.schema import SchemaJson

logger = logging.getLogger(__name__)

# Mapping property type -> schema datatypes it may be stored as
TYPE_COMPATIBILITY: dict[str, set[str]] = {
    "string": {"string", "uri"},
    "number": {"integer", "number", "float"},
    "boolean": {"boolean"},
    "date": {"date", "datetime"},
    "array": {"array"},
    "object": {"object", "uri"},
}


def is_type_compatible(mapping_type: str, schema_type: str) -> bool:
    """Check if a mapping property type can be stored as a schema datatype.

    Unknown mapping types are only compatible with an identically named datatype.
    """
    mapping_type = mapping_type.lower()
    compatible = TYPE_COMPATIBILITY.get(mapping_type, {mapping_type})
    return schema_type.lower() in compatible


def as_model(model_cls: type[BaseModel], value: Any) -> BaseModel:
    """Return value as a model_cls instance, validating camelCase dicts."""
    if isinstance(value, model_cls):
        return value
    return model_cls.model_validate(value or {})


def model_errors(error_type: ErrorType, exc: ValidationError) -> list[ConversionError]:
    """Turn a pydantic ValidationError into one ConversionError per problem.

    The problem location is reported as a dotted path of camelCase keys; for
    keyed sections (elementMappings, nodes, ...) the key is the element.
    """
    errors = []
    for problem in exc.errors():
        loc = problem.get("loc", ())
        location = ".".join(str(part) for part in loc)
        element = loc[1] if len(loc) > 1 and isinstance(loc[1], str) else None
        message = f'Invalid {error_type} at "{location}": {problem["msg"]}' if location else problem["msg"]
        errors.append(ConversionError(type=error_type, message=message, element=element, path=location or None))
    return errors


def _coerce(mapping: Any, schema: Any) -> tuple[MappingConfig | None, SchemaJson | None, list[ConversionError]]:
    errors: list[ConversionError] = []
    try:
        mapping = as_model(MappingConfig, mapping)
    except ValidationError as e:
        errors.extend(model_errors("mapping", e))
        mapping = None
    try:
        schema = as_model(SchemaJson, schema)
    except ValidationError as e:
        errors.extend(model_errors("schema", e))
        schema = None
    return mapping, schema, errors


class MappingValidator:
    """Validates mapping configurations against a schema."""

    @staticmethod
    def validate(
        mapping: MappingConfig | dict[str, Any], schema: SchemaJson | dict[str, Any]
    ) -> list[ConversionError]:
        """Validate a mapping config against a schema.

        Args:
            mapping: Mapping configuration to check (model or camelCase dict)
            schema: Target graph schema (model or camelCase dict)

        Returns:
            All problems found, in mapping order; empty when the mapping is usable.
            A dict that is not a well-formed document yields mapping or schema
            errors instead of raising.
        """
        mapping, schema, errors = _coerce(mapping, schema)
        if errors:
            logger.info(f"Mapping validation rejected malformed input: {len(errors)} problem(s)")
            return errors

        errors.extend(_validate_element_mappings(mapping, schema))
        errors.extend(_validate_relationship_mappings(mapping, schema))
        errors.extend(_validate_text_rules(mapping, schema))

        if errors:
            logger.info(f"Mapping validation found {len(errors)} problem(s)")
        return errors

    @staticmethod
    def validate_required_properties(
        mapping: MappingConfig | dict[str, Any], schema: SchemaJson | dict[str, Any]
    ) -> list[ConversionError]:
        """Report required schema properties that no included mapping supplies.

        These errors are advisory; convert() does not run this check.
        """
        mapping, schema, errors = _coerce(mapping, schema)
        if errors:
            return errors

        for element_name, element_mapping in mapping.element_mappings.items():
            if not element_mapping.include:
                continue
            schema_node = schema.nodes.get(element_mapping.node_label)
            if schema_node is None:
                continue

            mapped_keys = {
                attr.property_key for attr in element_mapping.attribute_mappings.values() if attr.include
            }
            text_rule = mapping.text_content_rules.get(element_name)
            if text_rule and text_rule.include and text_rule.property_key:
                mapped_keys.add(text_rule.property_key)

            for prop_key, schema_prop in schema_node.properties.items():
                if schema_prop.required and prop_key not in mapped_keys:
                    errors.append(
                        ConversionError(
                            type="validation",
                            message=(
                                f'Required property "{prop_key}" for node "{element_mapping.node_label}" '
                                f'(element "{element_name}") is not mapped'
                            ),
                            element=element_name,
                        )
                    )

        return errors


def _validate_element_mappings(mapping: MappingConfig, schema: SchemaJson) -> list[ConversionError]:
    errors = []

    for element_name, element_mapping in mapping.element_mappings.items():
        if not element_mapping.include:
            continue

        schema_node = schema.nodes.get(element_mapping.node_label)
        if schema_node is None:
            errors.append(
                ConversionError(
                    type="schema",
                    message=(
                        f'Element "{element_name}" maps to node label "{element_mapping.node_label}" '
                        f"which does not exist in schema"
                    ),
                    element=element_name,
                )
            )
            continue

        if schema_node.name != element_mapping.node_type:
            errors.append(
                ConversionError(
                    type="schema",
                    message=(
                        f'Element "{element_name}" maps to node type "{element_mapping.node_type}" '
                        f'but schema has "{schema_node.name}"'
                    ),
                    element=element_name,
                )
            )

        for attr_name, attr_mapping in element_mapping.attribute_mappings.items():
            if not attr_mapping.include:
                continue
            path = f"@{attr_name}"

            schema_prop = schema_node.properties.get(attr_mapping.property_key)
            if schema_prop is None:
                errors.append(
                    ConversionError(
                        type="schema",
                        message=(
                            f'Element "{element_name}" attribute "{attr_name}" maps to property '
                            f'"{attr_mapping.property_key}" which does not exist in node "{element_mapping.node_label}"'
                        ),
                        element=element_name,
                        path=path,
                    )
                )
                continue

            if not is_type_compatible(attr_mapping.property_type, schema_prop.datatype):
                errors.append(
                    ConversionError(
                        type="validation",
                        message=(
                            f'Element "{element_name}" attribute "{attr_name}" type "{attr_mapping.property_type}" '
                            f'is not compatible with schema property type "{schema_prop.datatype}"'
                        ),
                        element=element_name,
                        path=path,
                    )
                )

            target = attr_mapping.reference_target
            if attr_mapping.is_reference and target and target not in schema.nodes:
                errors.append(
                    ConversionError(
                        type="schema",
                        message=(
                            f'Element "{element_name}" attribute "{attr_name}" references node "{target}" '
                            f"which does not exist in schema"
                        ),
                        element=element_name,
                        path=path,
                    )
                )

    return errors


def _validate_relationship_mappings(mapping: MappingConfig, schema: SchemaJson) -> list[ConversionError]:
    errors = []

    for element_name, relationship_mappings in mapping.relationship_mappings.items():
        for rel_mapping in relationship_mappings:
            if not rel_mapping.include:
                continue
            rel_type = rel_mapping.relationship_type

            schema_relation = schema.relations.get(rel_type)
            if schema_relation is None:
                errors.append(
                    ConversionError(
                        type="schema",
                        message=f'Element "{element_name}" uses relationship type "{rel_type}" which does not exist in schema',
                        element=element_name,
                    )
                )
                continue

            relation_props = schema_relation.properties or {}
            for prop_key in (rel_mapping.properties or {}):
                if prop_key not in relation_props:
                    errors.append(
                        ConversionError(
                            type="schema",
                            message=f'Relationship "{rel_type}" property "{prop_key}" does not exist in schema',
                            element=element_name,
                        )
                    )

            if rel_mapping.target.type == "fixed" and rel_mapping.target.node_label not in schema.nodes:
                errors.append(
                    ConversionError(
                        type="schema",
                        message=(
                            f'Element "{element_name}" relationship "{rel_type}" targets node '
                            f'"{rel_mapping.target.node_label}" which does not exist in schema'
                        ),
                        element=element_name,
                    )
                )

    return errors


def _validate_text_rules(mapping: MappingConfig, schema: SchemaJson) -> list[ConversionError]:
    errors = []

    for element_name, text_rule in mapping.text_content_rules.items():
        if not text_rule.include:
            continue

        element_mapping = mapping.element_mappings.get(element_name)
        if element_mapping is None or not element_mapping.include:
            errors.append(
                ConversionError(
                    type="mapping",
                    message=f'Text content rule for "{element_name}" but element is not mapped',
                    element=element_name,
                )
            )
            continue

        schema_node = schema.nodes.get(element_mapping.node_label)
        if text_rule.property_key and schema_node is not None and text_rule.property_key not in schema_node.properties:
            errors.append(
                ConversionError(
                    type="schema",
                    message=(
                        f'Element "{element_name}" text content maps to property "{text_rule.property_key}" '
                        f'which does not exist in node "{element_mapping.node_label}"'
                    ),
                    element=element_name,
                )
            )

        if text_rule.tokenizes and text_rule.tokenize.target_node_label not in schema.nodes:
            errors.append(
                ConversionError(
                    type="schema",
                    message=(
                        f'Element "{element_name}" tokenization targets node '
                        f'"{text_rule.tokenize.target_node_label}" which does not exist in schema'
                    ),
                    element=element_name,
                )
            )

    return errors


def validate(mapping: MappingConfig | dict[str, Any], schema: SchemaJson | dict[str, Any]) -> list[ConversionError]:
    """Validate a mapping against a schema. See MappingValidator.validate."""
    return MappingValidator.validate(mapping, schema)


def validate_required_properties(
    mapping: MappingConfig | dict[str, Any], schema: SchemaJson | dict[str, Any]
) -> list[ConversionError]:
    """Report unmapped required properties. See MappingValidator.validate_required_properties."""
    return MappingValidator.validate_required_properties(mapping, schema)
