#!/usr/bin/env python3
"""Unit tests for text content rules and tokenization."""

import pytest

from xmlgraph.models.mapping import MappingConfig
from xmlgraph.services.domain.xml_to_graph import convert_xml_to_graph, tokenize

from tests.utils.graph_helpers import (
    assert_node_count,
    assert_node_exists,
    nodes_with_label,
    property_values,
)


def _line_mapping(text_rule: dict, **line_extra) -> MappingConfig:
    """Mapping with <line> -> Line and one text content rule for line."""
    line = {"nodeLabel": "Line", "nodeType": "Line"}
    line.update(line_extra)
    return MappingConfig.model_validate(
        {"elementMappings": {"line": line}, "textContentRules": {"line": text_rule}}
    )


def _char_rule(**tokenize_extra) -> dict:
    tokenize_config = {"splitBy": "", "targetNodeLabel": "Sign", "targetNodeType": "Sign"}
    tokenize_config.update(tokenize_extra)
    return {"tokenize": tokenize_config}


class TestTokenize:
    """tokenize() splitting rules."""

    def test_empty_delimiter_splits_code_points(self):
        assert [t.text for t in tokenize("a😀b", "")] == ["a", "😀", "b"]

    def test_delimiter_kept_as_whitespace_except_last(self):
        tokens = tokenize("ab cd ef", " ")

        assert [(t.text, t.whitespace) for t in tokens] == [("ab", " "), ("cd", " "), ("ef", "")]

    def test_none_delimiter_behaves_like_empty(self):
        assert len(tokenize("xyz", None)) == 3

    @pytest.mark.parametrize(
        "text,expected",
        [
            (" a", ["", "a"]),
            ("a ", ["a", ""]),
            ("a  b", ["a", "", "b"]),
            ("  ", ["", "", ""]),
            ("ab", ["ab"]),
        ],
    )
    def test_split_keeps_empty_tokens(self, text, expected):
        """Leading, trailing and repeated delimiters each produce an empty token."""
        tokens = tokenize(text, " ")

        assert [t.text for t in tokens] == expected
        assert len(tokens) == len(text.split(" "))

    def test_multi_character_delimiter(self):
        tokens = tokenize("a--b----c", "--")

        assert [(t.text, t.whitespace) for t in tokens] == [("a", "--"), ("b", "--"), ("", "--"), ("c", "")]


class TestTextContent:
    """Text stored as a property and tokenized into child nodes."""

    def test_text_stored_as_property(self, schema):
        mapping = _line_mapping({"propertyKey": "content"})

        result = convert_xml_to_graph("<doc><line>hello <b>world</b></line></doc>", schema, mapping)

        assert_node_exists(result, "Line", {"content": "hello world"})

    def test_character_count_matches_code_points(self, schema):
        """One Sign and one contains relationship per character, emoji included."""
        text = "a😀b"
        result = convert_xml_to_graph(f"<doc><line>{text}</line></doc>", schema, _line_mapping(_char_rule()))

        signs = nodes_with_label(result, "Sign")
        assert len(signs) == len(text) == 3
        assert [property_values(s)["text"] for s in signs] == ["a", "😀", "b"]
        line = nodes_with_label(result, "Line")[0]
        assert [r.from_ for r in result.relationships] == [line.id] * 3
        assert [r.to for r in result.relationships] == [s.id for s in signs]
        assert {r.type for r in result.relationships} == {"contains"}

    def test_default_text_property_carries_required_flag(self, schema):
        result = convert_xml_to_graph("<doc><line>a</line></doc>", schema, _line_mapping(_char_rule()))

        prop = nodes_with_label(result, "Sign")[0].properties[0]
        assert (prop.key, prop.required, prop.default_value) == ("text", True, "a")

    def test_word_tokens_with_whitespace_and_index(self, schema):
        properties = {
            "text": {"source": "text", "propertyKey": "text"},
            "ws": {"source": "whitespace", "propertyKey": "whitespace"},
            "idx": {"source": "index", "propertyKey": "index"},
            "dmg": {"source": "fixed", "value": "none", "propertyKey": "damage"},
        }
        mapping = _line_mapping(_char_rule(splitBy=" ", properties=properties))

        result = convert_xml_to_graph("<doc><line>ab cd</line></doc>", schema, mapping)

        signs = [property_values(s) for s in nodes_with_label(result, "Sign")]
        assert signs == [
            {"text": "ab", "whitespace": " ", "index": 0, "damage": "none"},
            {"text": "cd", "whitespace": "", "index": 1, "damage": "none"},
        ]
        assert nodes_with_label(result, "Sign")[0].get_property("index").type == "number"

    @pytest.mark.parametrize("text", [" a", "a ", "a  b", "a b c"])
    def test_word_token_count_follows_split(self, schema, text):
        mapping = _line_mapping(_char_rule(splitBy=" "))

        result = convert_xml_to_graph(f"<doc><line>{text}</line></doc>", schema, mapping)

        signs = nodes_with_label(result, "Sign")
        assert [property_values(s)["text"] for s in signs] == text.split(" ")
        assert len(result.relationships) == len(text.split(" "))

    def test_empty_text_creates_no_tokens(self, schema):
        result = convert_xml_to_graph("<doc><line/></doc>", schema, _line_mapping(_char_rule()))

        assert_node_count(result, 1, "Line")
        assert_node_count(result, 0, "Sign")
        assert result.relationships == []


class TestTokenizationContext:
    """Context rules switch token targets and add inherited properties."""

    def _context_mapping(self, context_rule: dict) -> MappingConfig:
        return _line_mapping(_char_rule(contextRules=[context_rule]))

    def test_when_ancestor_switches_target(self, schema):
        mapping = self._context_mapping(
            {"whenAncestor": ["damaged"], "targetNodeLabel": "Word", "targetNodeType": "Word", "splitBy": " "}
        )
        xml = "<doc><damaged><line>ab cd</line></damaged><line>ef</line></doc>"

        result = convert_xml_to_graph(xml, schema, mapping)

        assert [property_values(w)["text"] for w in nodes_with_label(result, "Word")] == ["ab", "cd"]
        assert [property_values(s)["text"] for s in nodes_with_label(result, "Sign")] == ["e", "f"]
        # Word.text is not required
        assert nodes_with_label(result, "Word")[0].properties[0].required is False

    def test_when_parent_only_matches_direct_parent(self, schema):
        mapping = self._context_mapping({"whenParent": ["damaged"], "targetNodeLabel": "Word", "targetNodeType": "Word"})
        xml = "<doc><damaged><seg><line>a</line></seg></damaged><damaged><line>b</line></damaged></doc>"

        result = convert_xml_to_graph(xml, schema, mapping)

        assert [property_values(w)["text"] for w in nodes_with_label(result, "Word")] == ["b"]
        assert [property_values(s)["text"] for s in nodes_with_label(result, "Sign")] == ["a"]

    def test_inherit_attribute_from_ancestor(self, schema):
        mapping = self._context_mapping(
            {
                "whenInside": ["damaged"],
                "inheritProperties": [
                    {"fromAncestor": "damaged", "fromAttribute": "kind", "propertyKey": "damage"},
                ],
            }
        )
        xml = '<doc><damaged kind="erased"><seg><line>ab</line></seg></damaged></doc>'

        result = convert_xml_to_graph(xml, schema, mapping)

        assert [property_values(s) for s in nodes_with_label(result, "Sign")] == [
            {"text": "a", "damage": "erased"},
            {"text": "b", "damage": "erased"},
        ]

    def test_inherit_with_value_map(self, schema):
        mapping = self._context_mapping(
            {
                "whenParent": ["damaged"],
                "inheritProperties": [
                    {
                        "fromParent": True,
                        "fromAttribute": "kind",
                        "propertyKey": "damage",
                        "transform": "map",
                        "valueMap": {"x": "partial"},
                    }
                ],
            }
        )

        result = convert_xml_to_graph('<doc><damaged kind="x"><line>a</line></damaged></doc>', schema, mapping)

        assert_node_exists(result, "Sign", {"damage": "partial"})

    def test_fixed_inheritance_without_attribute(self, schema):
        mapping = self._context_mapping(
            {
                "whenAncestor": ["damaged"],
                "inheritProperties": [
                    {"fromAncestor": "damaged", "propertyKey": "damage", "transform": "fixed", "fixedValue": "yes"}
                ],
            }
        )

        result = convert_xml_to_graph("<doc><damaged><line>a</line></damaged></doc>", schema, mapping)

        assert_node_exists(result, "Sign", {"damage": "yes"})

    def test_missing_inherited_attribute_is_skipped(self, schema):
        mapping = self._context_mapping(
            {
                "whenAncestor": ["damaged"],
                "inheritProperties": [{"fromAncestor": "damaged", "fromAttribute": "kind", "propertyKey": "damage"}],
            }
        )

        result = convert_xml_to_graph("<doc><damaged><line>a</line></damaged></doc>", schema, mapping)

        assert property_values(nodes_with_label(result, "Sign")[0]) == {"text": "a"}

    def test_unknown_context_target_reports_error_per_element(self, schema):
        mapping = self._context_mapping({"whenAncestor": ["damaged"], "targetNodeLabel": "Ghost", "targetNodeType": "Ghost"})
        xml = "<doc><damaged><line>a</line><line>b</line></damaged></doc>"

        result = convert_xml_to_graph(xml, schema, mapping)

        assert [e.message for e in result.errors] == ['Tokenization target node "Ghost" not found in schema'] * 2
        assert all(e.type == "schema" for e in result.errors)
        assert_node_count(result, 2, "Line")
        assert_node_count(result, 0, "Ghost")

    def test_missing_contains_relation_reported_once(self, schema):
        del schema.relations["contains"]

        result = convert_xml_to_graph("<doc><line>abc</line></doc>", schema, _line_mapping(_char_rule()))

        assert_node_count(result, 3, "Sign")
        assert result.relationships == []
        assert [e.message for e in result.errors] == ['Relationship type "contains" not found in schema']


class TestTextProcessingStages:
    """Child processing text stages and conditional text rules."""

    def test_before_children_replaces_mapped_rule(self, schema):
        mapping = _line_mapping(
            _char_rule(),
            childProcessingRules=[{"textProcessing": {"beforeChildren": {"propertyKey": "content"}}}],
        )

        result = convert_xml_to_graph("<doc><line>ab</line></doc>", schema, mapping)

        assert_node_exists(result, "Line", {"content": "ab"})
        assert_node_count(result, 0, "Sign")

    def test_after_children_runs_in_addition(self, schema):
        mapping = _line_mapping(
            _char_rule(),
            childProcessingRules=[{"textProcessing": {"afterChildren": {"propertyKey": "content"}}}],
        )

        result = convert_xml_to_graph("<doc><line>ab</line></doc>", schema, mapping)

        assert_node_exists(result, "Line", {"content": "ab"})
        assert_node_count(result, 2, "Sign")

    def test_on_tail_stage_is_not_applied(self, schema):
        mapping = _line_mapping(
            _char_rule(),
            childProcessingRules=[{"textProcessing": {"onTail": {"propertyKey": "content"}}}],
        )

        result = convert_xml_to_graph("<doc><line>ab</line>tail</doc>", schema, mapping)

        assert property_values(nodes_with_label(result, "Line")[0]) == {}
        assert_node_count(result, 2, "Sign")

    def test_conditional_text_processing_overrides_rule(self, schema):
        mapping = _line_mapping(
            _char_rule(),
            conditionalRules=[
                {"condition": {"hasAttribute": ["plain"]}, "action": {"textProcessing": {"propertyKey": "content"}}}
            ],
        )
        xml = '<doc><line plain="1">ab</line><line>cd</line></doc>'

        result = convert_xml_to_graph(xml, schema, mapping)

        lines = [property_values(n) for n in nodes_with_label(result, "Line")]
        assert lines == [{"content": "ab"}, {}]
        assert [property_values(s)["text"] for s in nodes_with_label(result, "Sign")] == ["c", "d"]

    def test_excluded_text_rule_is_ignored(self, schema):
        mapping = _line_mapping({"include": False, "propertyKey": "content"})

        result = convert_xml_to_graph("<doc><line>ab</line></doc>", schema, mapping)

        assert property_values(nodes_with_label(result, "Line")[0]) == {}
