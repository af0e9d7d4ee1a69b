"""Shared fixtures: a small schema and mapping used across converter tests."""

import pytest

from xmlgraph.models.mapping import MappingConfig
from xmlgraph.models.schema import SchemaJson


@pytest.fixture
def schema() -> SchemaJson:
    return SchemaJson.model_validate(
        {
            "nodes": {
                "Person": {
                    "name": "Person",
                    "properties": {
                        "name": {"datatype": "string"},
                        "age": {"datatype": "integer"},
                        "active": {"datatype": "boolean"},
                        "born": {"datatype": "date"},
                        "tags": {"datatype": "array"},
                        "personId": {"datatype": "string"},
                        "bio": {"datatype": "string"},
                    },
                },
                "Address": {"name": "Address", "properties": {"city": {"datatype": "string"}}},
                "Item": {"name": "Item", "properties": {"itemId": {"datatype": "string"}}},
                "Sign": {
                    "name": "Sign",
                    "properties": {
                        "text": {"datatype": "string", "required": True},
                        "whitespace": {"datatype": "string"},
                        "index": {"datatype": "integer"},
                        "damage": {"datatype": "string"},
                    },
                },
                "Word": {"name": "Word", "properties": {"text": {"datatype": "string"}}},
                "Line": {"name": "Line", "properties": {"content": {"datatype": "string"}}},
            },
            "relations": {
                "contains": {"name": "contains"},
                "refersTo": {"name": "refersTo", "properties": {"certainty": {"datatype": "string"}}},
            },
        }
    )


@pytest.fixture
def person_mapping() -> MappingConfig:
    return MappingConfig.model_validate(
        {
            "elementMappings": {
                "person": {
                    "include": True,
                    "nodeLabel": "Person",
                    "nodeType": "Person",
                    "attributeMappings": {
                        "name": {"include": True, "propertyKey": "name", "propertyType": "string"},
                    },
                },
                "address": {
                    "include": True,
                    "nodeLabel": "Address",
                    "nodeType": "Address",
                    "attributeMappings": {"city": {"propertyKey": "city"}},
                },
            },
            "relationshipMappings": {
                "person": [
                    {
                        "include": True,
                        "relationshipType": "contains",
                        "source": {"type": "current-element"},
                        "target": {"type": "child-element", "elementName": "address"},
                    }
                ]
            },
        }
    )
