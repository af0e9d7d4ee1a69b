"""
Model Builder Domain

Quick-import path from an XML analysis and mapping to model-builder nodes
and relationships, and derivation of a SchemaJson from such a model.
"""

from .builder_format import convert_to_builder_format
from .schema_json import convert_builder_to_schema_json

__all__ = ["convert_to_builder_format", "convert_builder_to_schema_json"]
