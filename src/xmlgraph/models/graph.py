#!/usr/bin/env python3

from typing import Any, Literal

from pydantic import Field

from .base import CamelModel

PropertyType = Literal["string", "number", "boolean", "date", "array", "object"]

ErrorType = Literal["xml", "schema", "validation", "mapping"]
WarningType = Literal["missing-property", "unmapped-element", "invalid-reference"]


class Property(CamelModel):
    key: str
    type: PropertyType = "string"
    required: bool = False
    default_value: Any = None  # Value extracted from the document
    description: str | None = None


class Node(CamelModel):
    id: str  # node_N, unique within one conversion run
    label: str
    type: str
    properties: list[Property] = []
    data: dict[str, Any] | None = None  # Opaque metadata (semantic annotations, builder statistics)

    def get_property(self, key: str) -> Property | None:
        for prop in self.properties:
            if prop.key == key:
                return prop
        return None


class Relationship(CamelModel):
    id: str  # rel_N, unique within one conversion run
    type: str
    from_: str = Field(alias="from")
    to: str
    properties: list[Property] | None = None
    data: dict[str, Any] | None = None


class ConversionError(CamelModel):
    type: ErrorType
    message: str
    element: str | None = None
    path: str | None = None  # e.g. "@attr" for attribute-level problems


class ConversionWarning(CamelModel):
    type: WarningType
    message: str
    element: str | None = None
    path: str | None = None


class ConversionResult(CamelModel):
    """Outcome of one conversion; all four lists are always present."""

    nodes: list[Node] = []
    relationships: list[Relationship] = []
    errors: list[ConversionError] = []
    warnings: list[ConversionWarning] = []

    @property
    def ok(self) -> bool:
        return not self.errors
