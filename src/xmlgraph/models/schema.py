#!/usr/bin/env python3

from typing import Any

from .base import CamelModel


class SchemaProperty(CamelModel):
    name: str | None = None
    datatype: str = "string"  # string, integer, number, float, boolean, date, datetime, array, object, uri
    values: list[Any] | None = None
    required: bool = False


class SchemaNode(CamelModel):
    name: str  # Node type name; mappings must use it as nodeType
    superclass_names: list[str] | None = None
    properties: dict[str, SchemaProperty] = {}
    relations_out: dict[str, list[str]] | None = None
    relations_in: dict[str, list[str]] | None = None


class SchemaRelation(CamelModel):
    name: str | None = None
    properties: dict[str, SchemaProperty] | None = None
    domains: dict[str, list[str]] | None = None  # source label -> target labels


class SchemaJson(CamelModel):
    """Target graph type system. Read-only input to validation and conversion."""

    nodes: dict[str, SchemaNode] = {}
    relations: dict[str, SchemaRelation] = {}
