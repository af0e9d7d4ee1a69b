#!/usr/bin/env python3
"""Evaluation of ElementCondition predicates for conditional element rules.

A condition holds when every predicate it sets is satisfied. Predicates left
unset are ignored, so an empty condition matches every element.
"""

from typing import Any, Callable

# Import Element type from standard library for type hints
from xml.etree.ElementTree import Element

from ....models.mapping import ChildCountRange, ConditionalRule, ElementCondition
from ....utils.xml_utils import child_names, get_attribute, local_name, text_content
from .context import ConversionContext


def _has_children(elem: Element, names: list[str], context: ConversionContext) -> bool:
    present = set(child_names(elem))
    return any(name in present for name in names)


def _has_all_children(elem: Element, names: list[str], context: ConversionContext) -> bool:
    present = set(child_names(elem))
    return all(name in present for name in names)


def _has_no_children(elem: Element, names: list[str], context: ConversionContext) -> bool:
    present = set(child_names(elem))
    return not any(name in present for name in names)


def _has_ancestor(elem: Element, names: list[str], context: ConversionContext) -> bool:
    ancestors = {local_name(ancestor.tag) for ancestor in context.ancestors_of(elem)}
    return any(name in ancestors for name in names)


def _has_attribute(elem: Element, names: list[str], context: ConversionContext) -> bool:
    return any(get_attribute(elem, name) is not None for name in names)


def _has_text_content(elem: Element, expected: bool, context: ConversionContext) -> bool:
    return bool(text_content(elem).strip()) == expected


def _child_count(elem: Element, bounds: ChildCountRange, context: ConversionContext) -> bool:
    count = len(elem)
    if bounds.min is not None and count < bounds.min:
        return False
    if bounds.max is not None and count > bounds.max:
        return False
    return True


# ElementCondition field -> predicate
CONDITION_CHECKS: dict[str, Callable[[Element, Any, ConversionContext], bool]] = {
    "has_children": _has_children,
    "has_all_children": _has_all_children,
    "has_no_children": _has_no_children,
    "has_ancestor": _has_ancestor,
    "has_attribute": _has_attribute,
    "has_text_content": _has_text_content,
    "child_count": _child_count,
}


def matches_condition(elem: Element, condition: ElementCondition, context: ConversionContext) -> bool:
    for field_name, check in CONDITION_CHECKS.items():
        value = getattr(condition, field_name)
        if value is not None and not check(elem, value, context):
            return False
    return True


def find_conditional_rule(
    elem: Element, rules: list[ConditionalRule] | None, context: ConversionContext
) -> ConditionalRule | None:
    """Return the first rule whose condition matches, in list order."""
    for rule in rules or []:
        if matches_condition(elem, rule.condition, context):
            return rule
    return None
