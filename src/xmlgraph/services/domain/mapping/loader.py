#!/usr/bin/env python3
"""Read and write mapping, schema and analysis-rule files.

Files ending in .json are read as JSON; everything else goes through
yaml.safe_load, which also accepts plain JSON documents.
"""

import json
import logging
from pathlib import Path
from typing import Any, TypeVar

import yaml
from pydantic import BaseModel, ValidationError

from ....core.errors import MappingLoadError
from ....models.analysis import XmlAnalysisRules
from ....models.base import CamelModel
from ....models.mapping import MappingConfig
from ....models.schema import SchemaJson

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

JSON_SUFFIXES = {".json"}


def _read_document(path: Path) -> Any:
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise MappingLoadError(f"Cannot read file: {e.strerror or e}", str(path)) from e

    try:
        if path.suffix.lower() in JSON_SUFFIXES:
            return json.loads(text)
        return yaml.safe_load(text)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise MappingLoadError(f"Invalid {path.suffix.lstrip('.') or 'YAML'} content: {e}", str(path)) from e


def load_model_from_dict(model_cls: type[ModelT], data: dict[str, Any] | None, source: str | None = None) -> ModelT:
    """Validate a plain dictionary into a model.

    Raises:
        MappingLoadError: If the data does not match the model
    """
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise MappingLoadError(f"Expected a mapping at the top level, got {type(data).__name__}", source)
    try:
        return model_cls.model_validate(data)
    except ValidationError as e:
        raise MappingLoadError(f"Invalid {model_cls.__name__}: {e}", source) from e


def load_mapping(path: str | Path) -> MappingConfig:
    """Load a MappingConfig from a YAML or JSON file."""
    path = Path(path)
    mapping = load_model_from_dict(MappingConfig, _read_document(path), str(path))
    logger.info(
        f"Loaded mapping {path.name}: {len(mapping.element_mappings)} element mappings, "
        f"{sum(len(r) for r in mapping.relationship_mappings.values())} relationship mappings"
    )
    return mapping


def load_schema(path: str | Path) -> SchemaJson:
    """Load a SchemaJson from a YAML or JSON file."""
    path = Path(path)
    schema = load_model_from_dict(SchemaJson, _read_document(path), str(path))
    logger.info(f"Loaded schema {path.name}: {len(schema.nodes)} node types, {len(schema.relations)} relation types")
    return schema


def load_rules(path: str | Path) -> XmlAnalysisRules:
    """Load XmlAnalysisRules from a YAML or JSON file."""
    path = Path(path)
    return load_model_from_dict(XmlAnalysisRules, _read_document(path), str(path))


def dump_model(model: CamelModel, path: str | Path, indent: int = 2) -> Path:
    """Write a model with camelCase keys; the suffix picks JSON or YAML."""
    path = Path(path)
    data = model.to_json_dict()
    if path.suffix.lower() in JSON_SUFFIXES:
        path.write_text(json.dumps(data, indent=indent, ensure_ascii=False) + "\n", encoding="utf-8")
    else:
        path.write_text(yaml.safe_dump(data, sort_keys=False, allow_unicode=True), encoding="utf-8")
    logger.debug(f"Wrote {type(model).__name__} to {path}")
    return path
