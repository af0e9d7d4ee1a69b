#!/usr/bin/env python3
"""Programmatic helpers for common tokenization set-ups.

These edit a MappingConfig in place, the same way the rule editors do:

    <damage degree="high"><seg>abc</seg></damage>

With configure_character_tokenization(mapping, "seg", "Sign") followed by
add_ancestor_inheritance(mapping, "seg", "damage", "degree", "damage"), the
seg text becomes three Sign nodes (a, b, c), each with damage="high".
"""

import logging

from ....models.mapping import (
    MappingConfig,
    PropertyInheritanceRule,
    TextContentRule,
    TokenizationContextRule,
    TokenizeConfig,
    TokenPropertyMapping,
)

logger = logging.getLogger(__name__)

DEFAULT_TOKEN_PROPERTIES = ("text", "whitespace", "index")


def _token_properties(sources: tuple[str, ...]) -> dict[str, TokenPropertyMapping]:
    return {source: TokenPropertyMapping(source=source, property_key=source) for source in sources}


def configure_tokenization(
    mapping: MappingConfig,
    element_name: str,
    node_label: str,
    split_by: str = "",
    token_properties: tuple[str, ...] = DEFAULT_TOKEN_PROPERTIES,
    context_rules: list[TokenizationContextRule] | None = None,
) -> TextContentRule:
    """Tokenize an element's text into nodes labelled node_label.

    An existing tokenizing rule keeps its target and properties; only its
    context rules are replaced when new ones are given. A rule that exists
    but does not tokenize is left untouched.

    Args:
        mapping: Mapping to edit
        element_name: Element whose text is tokenized
        node_label: Label and type of the token nodes
        split_by: Delimiter; "" produces one token per character
        token_properties: Token sources copied onto each token node
        context_rules: Optional context-dependent overrides

    Returns:
        The text rule now registered for the element
    """
    existing = mapping.text_content_rules.get(element_name)
    if existing is not None:
        if existing.tokenize is not None and context_rules is not None:
            existing.tokenize.context_rules = list(context_rules)
        elif existing.tokenize is None:
            logger.warning(f"Text rule for {element_name} does not tokenize; leaving it unchanged")
        return existing

    rule = TextContentRule(
        include=True,
        tokenize=TokenizeConfig(
            enabled=True,
            split_by=split_by,
            target_node_label=node_label,
            target_node_type=node_label,
            properties=_token_properties(token_properties),
            context_rules=list(context_rules) if context_rules else None,
        ),
    )
    mapping.text_content_rules[element_name] = rule
    return rule


def configure_character_tokenization(
    mapping: MappingConfig, element_name: str, node_label: str = "Character"
) -> TextContentRule:
    """One node per character, with text/whitespace/index properties."""
    return configure_tokenization(mapping, element_name, node_label, split_by="")


def configure_word_tokenization(mapping: MappingConfig, element_name: str, node_label: str = "Word") -> TextContentRule:
    """One node per space-separated word; the space is kept as whitespace."""
    return configure_tokenization(mapping, element_name, node_label, split_by=" ")


def add_context_rule_to_tokenization(
    mapping: MappingConfig, element_name: str, context_rule: TokenizationContextRule | dict
) -> bool:
    """Append a context rule to an element's tokenization.

    Returns:
        False if the element has no tokenizing text rule
    """
    rule = mapping.text_content_rules.get(element_name)
    if rule is None or rule.tokenize is None:
        logger.warning(f"No tokenization rule found for {element_name}")
        return False

    if isinstance(context_rule, dict):
        context_rule = TokenizationContextRule.model_validate(context_rule)
    if rule.tokenize.context_rules is None:
        rule.tokenize.context_rules = []
    rule.tokenize.context_rules.append(context_rule)
    return True


def add_ancestor_inheritance(
    mapping: MappingConfig,
    element_name: str,
    ancestor: str,
    attribute: str | None,
    property_key: str,
    value_map: dict[str, str] | None = None,
    fixed_value: str | None = None,
) -> bool:
    """Tokens inside `ancestor` inherit a property from it.

    With an attribute the ancestor's attribute value is copied (optionally
    through value_map). With fixed_value the token gets that literal
    whenever it sits inside the ancestor; the attribute may then be None.
    """
    if fixed_value is not None:
        transform = "fixed"
    elif value_map:
        transform = "map"
    else:
        transform = "direct"

    inheritance = PropertyInheritanceRule(
        from_ancestor=ancestor,
        from_attribute=attribute,
        property_key=property_key,
        property_type="boolean" if fixed_value in ("true", "false") else "string",
        transform=transform,
        fixed_value=fixed_value,
        value_map=value_map,
    )
    return add_context_rule_to_tokenization(
        mapping,
        element_name,
        TokenizationContextRule(when_inside=[ancestor], inherit_properties=[inheritance]),
    )
