#!/usr/bin/env python3
"""Rule-driven XML to property-graph converter.

This module turns an XML document into schema-typed nodes and relationships
using a MappingConfig. The mapping is validated against the SchemaJson before
anything is walked; a mapping with any validation error produces no graph.

The document is walked depth-first, parent before children, with an explicit
stack so deep documents do not hit the interpreter recursion limit. Every
element gets an enter frame and, when it produced a node, an exit frame that
runs after its children (after-children text and non-hierarchical
relationships).
"""

import logging
from typing import Any, NamedTuple

# Import Element type from standard library for type hints
from xml.etree.ElementTree import Element

from pydantic import ValidationError

from ....core.config import ConversionOptions, conversion_config
from ....core.errors import ElementLimitExceeded, XmlError
from ....models.graph import ConversionError, ConversionResult, Node, Property
from ....models.mapping import (
    ChildProcessingRule,
    CreateNodeAction,
    ElementMapping,
    MappingConfig,
    PropertySource,
    RelationshipMapping,
    RelationshipPropertyMapping,
    TextContentRule,
)
from ....models.schema import SchemaJson
from ....utils.xml_utils import get_attribute, local_name, parse_xml, text_content
from ..mapping.validator import as_model, model_errors, validate
from .conditions import find_conditional_rule
from .context import ConversionContext, PendingRelationship
from .tokens import find_context_rule, inherited_properties, token_properties, tokenize
from .values import apply_transform, convert_value, datatype_to_property_type

logger = logging.getLogger(__name__)

# Relationship type linking an element's node to its token nodes
TOKEN_RELATIONSHIP = "contains"

ID_ATTRIBUTES = ("id", "xml:id")


class _Enter(NamedTuple):
    element: Element
    parent_node: Node | None
    depth: int


class _Exit(NamedTuple):
    element: Element
    element_name: str
    node: Node
    text_rule: TextContentRule | None
    child_rule: ChildProcessingRule | None


class XmlConverter:
    """Convert one XML document into a ConversionResult.

    The XML is parsed when the converter is created. Each convert() call
    starts from a fresh ConversionContext, so repeated calls return equal
    results with the same ids.
    """

    def __init__(
        self,
        xml_text: str,
        schema: SchemaJson | dict[str, Any],
        mapping: MappingConfig | dict[str, Any],
        options: ConversionOptions | None = None,
    ):
        self.options = options or conversion_config.get_conversion_options()

        # Malformed dict inputs are reported by convert(), not raised here
        self._load_errors: list[ConversionError] = []
        self.schema: SchemaJson | None = None
        self.mapping: MappingConfig | None = None
        try:
            self.mapping = as_model(MappingConfig, mapping)
        except ValidationError as e:
            logger.warning(f"Mapping document is malformed: {e.error_count()} problem(s)")
            self._load_errors.extend(model_errors("mapping", e))
        try:
            self.schema = as_model(SchemaJson, schema)
        except ValidationError as e:
            logger.warning(f"Schema document is malformed: {e.error_count()} problem(s)")
            self._load_errors.extend(model_errors("schema", e))

        self._root: Element | None = None
        self._parse_error: XmlError | None = None
        try:
            self._root = parse_xml(xml_text)
        except XmlError as e:
            logger.warning(f"Could not parse XML for conversion: {e}")
            self._parse_error = e

    def convert(self) -> ConversionResult:
        """Run validation, then walk the document.

        Returns:
            The graph plus any errors and warnings. Validation errors, parse
            errors, malformed mapping or schema documents and unexpected failures
            all return an empty graph.
        """
        if self._load_errors:
            return ConversionResult(errors=list(self._load_errors))

        validation_errors = validate(self.mapping, self.schema)
        if validation_errors:
            logger.info(f"Conversion skipped: mapping has {len(validation_errors)} validation error(s)")
            return ConversionResult(errors=validation_errors)

        if self._parse_error is not None:
            return ConversionResult(errors=[ConversionError(type="xml", message=str(self._parse_error))])

        context = ConversionContext.for_tree(self._root)
        try:
            self._walk(context)
            self._resolve_pending(context)
        except ElementLimitExceeded as e:
            logger.warning(f"Conversion aborted: {e}")
            return ConversionResult(errors=[ConversionError(type="xml", message=str(e))])
        except Exception as e:
            logger.exception(f"Unexpected failure while converting XML: {e}")
            return ConversionResult(errors=[ConversionError(type="xml", message=f"Conversion error: {e}")])

        logger.info(
            f"Converted {context.elements_visited} elements into {len(context.nodes)} nodes and "
            f"{len(context.relationships)} relationships "
            f"({len(context.errors)} errors, {len(context.warnings)} warnings)"
        )
        return context.result()

    # Traversal

    def _walk(self, context: ConversionContext):
        stack: list[_Enter | _Exit] = [_Enter(self._root, None, 0)]
        while stack:
            frame = stack.pop()
            if isinstance(frame, _Exit):
                self._leave_element(frame, context)
            else:
                self._enter_element(frame, stack, context)

    def _enter_element(self, frame: _Enter, stack: list, context: ConversionContext):
        elem, parent_node, depth = frame

        context.elements_visited += 1
        limit = self.options.max_elements
        if limit and context.elements_visited > limit:
            raise ElementLimitExceeded(f"Element limit exceeded: document has more than {limit} elements")

        name = local_name(elem.tag)
        element_mapping = self.mapping.element_mappings.get(name)
        if element_mapping is None or not element_mapping.include:
            if element_mapping is None and self.options.warn_unmapped_elements:
                context.warn_unmapped(name)
            self._push_children(stack, list(elem), parent_node, depth)
            return

        conditional = find_conditional_rule(elem, element_mapping.conditional_rules, context)
        action = conditional.action if conditional else None
        if action is not None and action.skip:
            logger.debug(f"Conditional rule skips {name}; visiting its children")
            self._push_children(stack, list(elem), parent_node, depth)
            return

        if action is not None and action.child_processing is not None:
            child_rule = action.child_processing
        elif element_mapping.child_processing_rules:
            child_rule = element_mapping.child_processing_rules[0]
        else:
            child_rule = None

        node = self._create_node(elem, name, element_mapping, action.create_node if action else None, context)
        if node is None:
            self._push_children(stack, list(elem), parent_node, depth)
            return

        self._apply_property_mappings(elem, node, element_mapping, context)
        context.element_nodes[elem] = node
        self._register_id(elem, node, context)
        self._link_to_parent(elem, name, node, parent_node, context)

        if action is not None and action.text_processing is not None:
            text_rule = action.text_processing
        else:
            text_rule = self.mapping.text_content_rules.get(name)
        if text_rule is not None and text_rule.include:
            stages = child_rule.text_processing if child_rule else None
            if stages is not None and stages.before_children is not None:
                self._process_text(elem, name, node, stages.before_children, context)
            else:
                self._process_text(elem, name, node, text_rule, context)

        stack.append(_Exit(elem, name, node, text_rule, child_rule))

        if child_rule is not None and child_rule.max_depth is not None and depth >= child_rule.max_depth:
            logger.debug(f"Depth limit {child_rule.max_depth} reached at {name}; children not visited")
            return
        self._push_children(stack, self._select_children(elem, child_rule), node, depth)

    def _leave_element(self, frame: _Exit, context: ConversionContext):
        elem, name, node, text_rule, child_rule = frame

        stages = child_rule.text_processing if child_rule else None
        if text_rule is not None and stages is not None and stages.after_children is not None:
            self._process_text(elem, name, node, stages.after_children, context)

        for rel_mapping in self.mapping.relationship_mappings.get(name, []):
            # Hierarchical mappings were applied when each child was entered
            if rel_mapping.include and not rel_mapping.is_hierarchical:
                self._process_relationship(elem, name, node, rel_mapping, context)

    @staticmethod
    def _push_children(stack: list, children: list[Element], parent_node: Node | None, depth: int):
        # Reversed so the first child is popped first
        for child in reversed(children):
            stack.append(_Enter(child, parent_node, depth + 1))

    @staticmethod
    def _select_children(elem: Element, child_rule: ChildProcessingRule | None) -> list[Element]:
        children = list(elem)
        if child_rule is None:
            return children

        # A non-empty include list wins over exclude; empty lists filter nothing
        selection = child_rule.process_children
        if selection is not None and not selection.process_all:
            if selection.include:
                children = [c for c in children if local_name(c.tag) in selection.include]
            elif selection.exclude:
                children = [c for c in children if local_name(c.tag) not in selection.exclude]

        if child_rule.order == "reverse":
            children.reverse()
        return children

    # Nodes

    def _create_node(
        self,
        elem: Element,
        name: str,
        element_mapping: ElementMapping,
        override: CreateNodeAction | None,
        context: ConversionContext,
    ) -> Node | None:
        if override is not None:
            label = override.node_label
            node_type = override.node_type
            superclass_names = override.superclass_names or element_mapping.superclass_names
        else:
            label = element_mapping.node_label
            node_type = element_mapping.node_type
            superclass_names = element_mapping.superclass_names

        if label not in self.schema.nodes:
            context.error_once("schema", f'Node label "{label}" not found in schema', name)
            return None

        properties = []
        property_semantics = {}
        for attr_name, attr_mapping in element_mapping.attribute_mappings.items():
            if not attr_mapping.include:
                continue

            raw_value = get_attribute(elem, attr_name)
            if raw_value is None:
                if attr_mapping.required:
                    context.warn(
                        "missing-property",
                        f'Required attribute "{attr_name}" missing on element "{name}"',
                        name,
                        f"@{attr_name}",
                    )
                continue

            properties.append(
                Property(
                    key=attr_mapping.property_key,
                    type=attr_mapping.property_type,
                    required=attr_mapping.required,
                    default_value=convert_value(raw_value, attr_mapping.property_type),
                )
            )
            if attr_mapping.semantic:
                property_semantics[attr_mapping.property_key] = attr_mapping.semantic

        data = {}
        if element_mapping.semantic:
            data["semantic"] = element_mapping.semantic
        if property_semantics:
            data["propertySemantics"] = property_semantics
        if superclass_names:
            data["superclassNames"] = list(superclass_names)

        return context.add_node(label, node_type, properties, data)

    def _apply_property_mappings(
        self, elem: Element, node: Node, element_mapping: ElementMapping, context: ConversionContext
    ):
        for rule in element_mapping.property_mappings or []:
            values = self._property_source_values(elem, rule.source, context)
            if not values:
                continue
            value = apply_transform(values, rule)
            if value is None:
                continue

            existing = node.get_property(rule.target_property)
            if existing is not None:
                existing.default_value = value
            else:
                node.properties.append(
                    Property(key=rule.target_property, type=rule.target_property_type, default_value=value)
                )

    @staticmethod
    def _property_source_values(elem: Element, source: PropertySource, context: ConversionContext) -> list[str]:
        """Values a property source yields, in document order.

        Child sources yield one value per matching child; ancestor sources
        yield the value of the nearest matching ancestor only.
        """
        if not source.element_name:
            return []

        if source.type in ("child-element", "child-text", "child-attribute"):
            matches = [child for child in elem if local_name(child.tag) == source.element_name]
        else:
            matches = []
            for ancestor in context.ancestors_of(elem):
                if local_name(ancestor.tag) == source.element_name:
                    matches.append(ancestor)
                    break

        if source.type in ("child-attribute", "ancestor-attribute"):
            if not source.attribute_name:
                return []
            values = (get_attribute(match, source.attribute_name) for match in matches)
            return [value for value in values if value is not None]
        return [text_content(match) for match in matches]

    @staticmethod
    def _register_id(elem: Element, node: Node, context: ConversionContext):
        for attr_name in ID_ATTRIBUTES:
            element_id = get_attribute(elem, attr_name)
            if element_id:
                context.id_nodes[element_id] = node
                return

    # Text

    def _process_text(
        self, elem: Element, name: str, node: Node, text_rule: TextContentRule, context: ConversionContext
    ):
        text = text_content(elem)
        if not text:
            return

        if not text_rule.tokenizes:
            if text_rule.property_key:
                node.properties.append(Property(key=text_rule.property_key, type="string", default_value=text))
            return

        config = text_rule.tokenize
        context_rule = find_context_rule(elem, config.context_rules, context)
        label = config.target_node_label
        node_type = config.target_node_type
        split_by = config.split_by
        inheritance = None
        if context_rule is not None:
            label = context_rule.target_node_label or label
            node_type = context_rule.target_node_type or node_type
            if context_rule.split_by is not None:
                split_by = context_rule.split_by
            inheritance = context_rule.inherit_properties

        schema_node = self.schema.nodes.get(label)
        if schema_node is None:
            context.error("schema", f'Tokenization target node "{label}" not found in schema', name)
            return

        inherited = inherited_properties(elem, inheritance, context)
        tokens = tokenize(text, split_by)
        for index, token in enumerate(tokens):
            properties = token_properties(token, index, config, schema_node)
            properties.extend(prop.model_copy() for prop in inherited)
            token_node = context.add_node(label, node_type, properties, None)
            self._create_relationship(node, token_node, TOKEN_RELATIONSHIP, None, None, elem, name, context)

        logger.debug(f"Tokenized {name} into {len(tokens)} {label} node(s)")

    # Relationships

    def _link_to_parent(
        self, elem: Element, name: str, node: Node, parent_node: Node | None, context: ConversionContext
    ):
        if parent_node is None:
            return
        parent_elem = context.parent_of(elem)
        if parent_elem is None:
            return

        parent_name = local_name(parent_elem.tag)
        parent_mapping = self.mapping.element_mappings.get(parent_name)
        if parent_mapping is None or not parent_mapping.include:
            return

        for rel_mapping in self.mapping.relationship_mappings.get(parent_name, []):
            if rel_mapping.include and rel_mapping.is_hierarchical and rel_mapping.target.element_name == name:
                self._create_relationship(
                    parent_node,
                    node,
                    rel_mapping.relationship_type,
                    rel_mapping.properties,
                    rel_mapping.semantic,
                    parent_elem,
                    parent_name,
                    context,
                )
                return

    def _process_relationship(
        self, elem: Element, name: str, node: Node, rel_mapping: RelationshipMapping, context: ConversionContext
    ):
        source = node
        if rel_mapping.source.type == "parent-element":
            parent_elem = context.parent_of(elem)
            source = context.element_nodes.get(parent_elem) if parent_elem is not None else None
            if source is None:
                logger.debug(f"{rel_mapping.relationship_type} on {name}: parent element has no node")
                return

        target_type = rel_mapping.target.type
        if target_type == "fixed":
            context.warn("invalid-reference", "Fixed target relationships not yet fully implemented", name)
            return
        if target_type == "xpath":
            context.warn(
                "invalid-reference", f'XPath relationship target "{rel_mapping.target.xpath}" is not supported', name
            )
            return

        if target_type in ("reference", "sibling-element") and self.options.resolve_forward_references:
            context.pending.append(PendingRelationship(source, elem, name, rel_mapping))
            return

        target = self._resolve_target(elem, rel_mapping, context)
        if target is None:
            logger.debug(f"{rel_mapping.relationship_type} on {name}: target not resolved")
            return
        self._create_relationship(
            source,
            target,
            rel_mapping.relationship_type,
            rel_mapping.properties,
            rel_mapping.semantic,
            elem,
            name,
            context,
        )

    @staticmethod
    def _resolve_target(elem: Element, rel_mapping: RelationshipMapping, context: ConversionContext) -> Node | None:
        target = rel_mapping.target

        if target.type == "child-element":
            for child in elem:
                if local_name(child.tag) == target.element_name:
                    return context.element_nodes.get(child)
            return None

        if target.type == "sibling-element":
            parent_elem = context.parent_of(elem)
            if parent_elem is None:
                return None
            for sibling in parent_elem:
                if sibling is not elem and local_name(sibling.tag) == target.element_name:
                    sibling_node = context.element_nodes.get(sibling)
                    if sibling_node is not None:
                        return sibling_node
            return None

        if target.type == "reference":
            ref_value = get_attribute(elem, target.attribute)
            if not ref_value:
                return None
            if ref_value.startswith("#"):
                ref_value = ref_value[1:]
            return context.id_nodes.get(ref_value)

        return None

    def _resolve_pending(self, context: ConversionContext):
        """Resolve deferred relationships now that every id is registered."""
        for pending in context.pending:
            rel_mapping = pending.mapping
            target = self._resolve_target(pending.element, rel_mapping, context)
            if target is None:
                context.warn(
                    "invalid-reference",
                    f'Relationship "{rel_mapping.relationship_type}" on element "{pending.element_name}" '
                    f"has no resolvable target",
                    pending.element_name,
                )
                continue
            self._create_relationship(
                pending.source,
                target,
                rel_mapping.relationship_type,
                rel_mapping.properties,
                rel_mapping.semantic,
                pending.element,
                pending.element_name,
                context,
            )

    def _create_relationship(
        self,
        source: Node,
        target: Node,
        rel_type: str,
        property_mappings: dict[str, RelationshipPropertyMapping] | None,
        semantic: dict[str, Any] | None,
        elem: Element,
        element_name: str,
        context: ConversionContext,
    ):
        schema_relation = self.schema.relations.get(rel_type)
        if schema_relation is None:
            context.error_once("schema", f'Relationship type "{rel_type}" not found in schema', element_name)
            return None

        schema_properties = schema_relation.properties or {}
        properties = []
        for key, prop_mapping in (property_mappings or {}).items():
            schema_prop = schema_properties.get(key)
            if schema_prop is None:
                continue
            properties.append(
                Property(
                    key=key,
                    type=datatype_to_property_type(schema_prop.datatype),
                    required=schema_prop.required,
                    default_value=_relationship_property_value(elem, prop_mapping),
                )
            )

        data = {"semantic": semantic} if semantic else None
        return context.add_relationship(rel_type, source, target, properties, data)


def _relationship_property_value(elem: Element, prop_mapping: RelationshipPropertyMapping) -> Any:
    if prop_mapping.source == "fixed":
        value = prop_mapping.source_path
    elif prop_mapping.source == "attribute" and prop_mapping.source_path:
        value = get_attribute(elem, prop_mapping.source_path)
    elif prop_mapping.source == "text":
        value = text_content(elem).strip() or None
    else:
        value = None

    if isinstance(value, str) and prop_mapping.transform in ("number", "boolean", "date"):
        return convert_value(value, prop_mapping.transform)
    if isinstance(value, str) and prop_mapping.transform == "split":
        return convert_value(value, "array")
    return value


def convert_xml_to_graph(
    xml_text: str,
    schema: SchemaJson | dict[str, Any],
    mapping: MappingConfig | dict[str, Any],
    options: ConversionOptions | None = None,
) -> ConversionResult:
    """Convert an XML document into schema-typed nodes and relationships.

    Args:
        xml_text: XML document content
        schema: Target graph schema (model or camelCase dict)
        mapping: Mapping configuration (model or camelCase dict)
        options: Per-call switches; defaults come from the environment

    Returns:
        ConversionResult; never raises for bad input
    """
    return XmlConverter(xml_text, schema, mapping, options).convert()
