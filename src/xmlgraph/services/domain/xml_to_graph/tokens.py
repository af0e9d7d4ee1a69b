#!/usr/bin/env python3
"""Splitting element text into tokens and building per-token properties."""

from dataclasses import dataclass

# Import Element type from standard library for type hints
from xml.etree.ElementTree import Element

from ....models.graph import Property
from ....models.mapping import PropertyInheritanceRule, TokenizationContextRule, TokenizeConfig
from ....models.schema import SchemaNode
from ....utils.xml_utils import get_attribute, local_name
from .context import ConversionContext
from .values import infer_property_type


@dataclass(frozen=True)
class Token:
    text: str
    whitespace: str  # Delimiter that followed the token in the source text


def tokenize(text: str, split_by: str | None) -> list[Token]:
    """Split text into tokens.

    An empty or missing delimiter gives one token per character (Unicode
    code point). Otherwise the text is split literally and the delimiter is
    kept as whitespace on every token except the last.
    """
    if not split_by:
        return [Token(char, "") for char in text]

    parts = text.split(split_by)
    last = len(parts) - 1
    return [Token(part, split_by if index < last else "") for index, part in enumerate(parts)]


def find_context_rule(
    elem: Element, rules: list[TokenizationContextRule] | None, context: ConversionContext
) -> TokenizationContextRule | None:
    """First context rule that applies to the element, in list order.

    Each rule is checked for whenAncestor, then whenParent, then whenInside;
    the first of those that matches selects the rule.
    """
    if not rules:
        return None

    ancestors = [local_name(ancestor.tag) for ancestor in context.ancestors_of(elem)]
    parent_name = ancestors[0] if ancestors else None

    for rule in rules:
        if rule.when_ancestor and any(name in ancestors for name in rule.when_ancestor):
            return rule
        if rule.when_parent and parent_name and parent_name in rule.when_parent:
            return rule
        if rule.when_inside and any(name in ancestors for name in rule.when_inside):
            return rule
    return None


def token_properties(token: Token, index: int, config: TokenizeConfig, schema_node: SchemaNode) -> list[Property]:
    """Properties copied onto one token node."""
    if not config.properties:
        text_prop = schema_node.properties.get("text")
        if text_prop is None:
            return []
        return [Property(key="text", type="string", required=text_prop.required, default_value=token.text)]

    properties = []
    for mapping in config.properties.values():
        if mapping.source == "text":
            value = token.text
        elif mapping.source == "whitespace":
            value = token.whitespace
        elif mapping.source == "index":
            value = index
        else:
            value = mapping.value
        properties.append(Property(key=mapping.property_key, type=infer_property_type(value), default_value=value))
    return properties


def _inheritance_source(elem: Element, rule: PropertyInheritanceRule, context: ConversionContext) -> Element | None:
    if rule.from_ancestor:
        for ancestor in context.ancestors_of(elem):
            if local_name(ancestor.tag) == rule.from_ancestor:
                return ancestor
        return None
    if rule.from_parent:
        return context.parent_of(elem)
    return None


def inherited_properties(
    elem: Element, rules: list[PropertyInheritanceRule] | None, context: ConversionContext
) -> list[Property]:
    """Properties tokens of elem inherit from an ancestor or the parent.

    With fromAttribute the source element's attribute must be present. A
    fixed transform without fromAttribute applies whenever the source element
    exists.
    """
    properties = []
    for rule in rules or []:
        source = _inheritance_source(elem, rule, context)
        if source is None:
            continue

        value = get_attribute(source, rule.from_attribute) if rule.from_attribute else None
        if rule.transform == "fixed" and rule.fixed_value is not None:
            if rule.from_attribute and value is None:
                continue
            value = rule.fixed_value
        elif value is not None and rule.transform == "map" and rule.value_map:
            value = rule.value_map.get(value) or value

        if value is None:
            continue
        properties.append(Property(key=rule.property_key, type=rule.property_type, default_value=value))
    return properties
