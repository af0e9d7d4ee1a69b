#!/usr/bin/env python3
"""Tests for mapping, schema and rules file loading."""

import json

import pytest

from xmlgraph.core.errors import MappingLoadError
from xmlgraph.models.mapping import MappingConfig
from xmlgraph.services.domain.mapping import dump_model, load_mapping, load_model_from_dict, load_rules, load_schema

MAPPING_YAML = """\
elementMappings:
  person:
    nodeLabel: Person
    nodeType: Person
    attributeMappings:
      name:
        propertyKey: name
relationshipMappings:
  person:
    - relationshipType: refersTo
      target:
        type: reference
        attribute: ref
"""


class TestLoadFiles:
    def test_load_mapping_yaml(self, tmp_path):
        path = tmp_path / "mapping.yaml"
        path.write_text(MAPPING_YAML, encoding="utf-8")

        mapping = load_mapping(path)

        assert mapping.element_mappings["person"].attribute_mappings["name"].property_key == "name"
        rel = mapping.relationship_mappings["person"][0]
        assert rel.source.type == "current-element"
        assert rel.target.type == "reference"

    def test_load_schema_json(self, tmp_path):
        path = tmp_path / "schema.json"
        path.write_text(json.dumps({"nodes": {"Person": {"name": "Person"}}, "relations": {}}), encoding="utf-8")

        schema = load_schema(str(path))

        assert list(schema.nodes) == ["Person"]

    def test_load_rules_accepts_empty_file(self, tmp_path):
        path = tmp_path / "rules.yaml"
        path.write_text("", encoding="utf-8")

        rules = load_rules(path)

        assert rules.ignored_elements == []

    def test_missing_file(self, tmp_path):
        path = tmp_path / "absent.yaml"

        with pytest.raises(MappingLoadError) as exc_info:
            load_mapping(path)

        assert exc_info.value.path == str(path)
        assert str(exc_info.value).startswith(f"{path}: Cannot read file")

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "schema.json"
        path.write_text("{not json", encoding="utf-8")

        with pytest.raises(MappingLoadError, match="Invalid json content"):
            load_schema(path)

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "mapping.yaml"
        path.write_text("elementMappings: [unclosed", encoding="utf-8")

        with pytest.raises(MappingLoadError, match="Invalid yaml content"):
            load_mapping(path)

    def test_model_validation_error(self, tmp_path):
        path = tmp_path / "mapping.yaml"
        path.write_text("elementMappings:\n  person:\n    nodeType: Person\n", encoding="utf-8")

        with pytest.raises(MappingLoadError, match="Invalid MappingConfig"):
            load_mapping(path)


class TestLoadModelFromDict:
    def test_none_gives_defaults(self):
        assert load_model_from_dict(MappingConfig, None) == MappingConfig()

    def test_non_mapping_top_level(self):
        with pytest.raises(MappingLoadError, match="got list"):
            load_model_from_dict(MappingConfig, [1, 2], "inline")


class TestDumpModel:
    """dump_model writes camelCase keys that load back to an equal model."""

    @pytest.mark.parametrize("suffix", [".json", ".yaml"])
    def test_dump_and_reload(self, tmp_path, person_mapping, suffix):
        path = dump_model(person_mapping, tmp_path / f"mapping{suffix}")

        text = path.read_text(encoding="utf-8")
        assert "elementMappings" in text
        assert "element_mappings" not in text
        assert load_mapping(path) == person_mapping
