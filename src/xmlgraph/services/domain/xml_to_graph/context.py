#!/usr/bin/env python3
"""Mutable state owned by a single conversion run."""

from dataclasses import dataclass, field
from typing import Any

# Import Element type from standard library for type hints
from xml.etree.ElementTree import Element

from ....models.graph import (
    ConversionError,
    ConversionResult,
    ConversionWarning,
    ErrorType,
    Node,
    Property,
    Relationship,
    WarningType,
)
from ....models.mapping import RelationshipMapping


@dataclass
class PendingRelationship:
    """A relationship whose target is resolved once the whole tree was walked."""

    source: Node
    element: Element
    element_name: str
    mapping: RelationshipMapping


@dataclass
class ConversionContext:
    """Counters, collected graph items and lookup tables for one run.

    Node and relationship ids come from counters that start at 0, so the same
    inputs always give the same ids. Nothing here outlives the run.
    """

    parent_map: dict[Element, Element] = field(default_factory=dict)
    nodes: list[Node] = field(default_factory=list)
    relationships: list[Relationship] = field(default_factory=list)
    errors: list[ConversionError] = field(default_factory=list)
    warnings: list[ConversionWarning] = field(default_factory=list)

    # Element identity -> node created for it
    element_nodes: dict[Element, Node] = field(default_factory=dict)
    # id / xml:id attribute value -> node
    id_nodes: dict[str, Node] = field(default_factory=dict)
    pending: list[PendingRelationship] = field(default_factory=list)

    elements_visited: int = 0
    node_counter: int = 0
    relationship_counter: int = 0
    _reported: set[tuple[str, str]] = field(default_factory=set)
    _unmapped_seen: set[str] = field(default_factory=set)

    @classmethod
    def for_tree(cls, root: Element) -> "ConversionContext":
        return cls(parent_map={child: parent for parent in root.iter() for child in parent})

    def parent_of(self, elem: Element) -> Element | None:
        return self.parent_map.get(elem)

    def ancestors_of(self, elem: Element):
        """Yield ancestors nearest first."""
        parent = self.parent_map.get(elem)
        while parent is not None:
            yield parent
            parent = self.parent_map.get(parent)

    def add_node(self, label: str, node_type: str, properties: list[Property], data: dict[str, Any] | None) -> Node:
        node = Node(
            id=f"node_{self.node_counter}",
            label=label,
            type=node_type,
            properties=properties,
            data=data or None,
        )
        self.node_counter += 1
        self.nodes.append(node)
        return node

    def add_relationship(
        self,
        rel_type: str,
        source: Node,
        target: Node,
        properties: list[Property] | None = None,
        data: dict[str, Any] | None = None,
    ) -> Relationship:
        relationship = Relationship(
            id=f"rel_{self.relationship_counter}",
            type=rel_type,
            from_=source.id,
            to=target.id,
            properties=properties or None,
            data=data or None,
        )
        self.relationship_counter += 1
        self.relationships.append(relationship)
        return relationship

    def error(self, error_type: ErrorType, message: str, element: str | None = None, path: str | None = None):
        self.errors.append(ConversionError(type=error_type, message=message, element=element, path=path))

    def error_once(self, error_type: ErrorType, message: str, element: str | None = None):
        """Record a schema lookup failure only the first time it happens."""
        key = (error_type, message)
        if key in self._reported:
            return
        self._reported.add(key)
        self.error(error_type, message, element)

    def warn(self, warning_type: WarningType, message: str, element: str | None = None, path: str | None = None):
        self.warnings.append(ConversionWarning(type=warning_type, message=message, element=element, path=path))

    def warn_unmapped(self, element_name: str):
        if element_name in self._unmapped_seen:
            return
        self._unmapped_seen.add(element_name)
        self.warn("unmapped-element", f'Element "{element_name}" has no mapping', element_name)

    def result(self) -> ConversionResult:
        return ConversionResult(
            nodes=self.nodes,
            relationships=self.relationships,
            errors=self.errors,
            warnings=self.warnings,
        )
