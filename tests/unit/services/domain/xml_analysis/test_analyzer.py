#!/usr/bin/env python3
"""Tests for the XML structure analyzer."""

import pytest

from xmlgraph.core.errors import XmlError
from xmlgraph.services.domain.xml_analysis import analyze_structure


def _repeated(with_attr: int, total: int = 10) -> str:
    elements = ['<e a="1"/>'] * with_attr + ["<e/>"] * (total - with_attr)
    return "<root>" + "".join(elements) + "</root>"


class TestElementTypes:
    """Element type discovery and attribute statistics."""

    def test_counts_and_ordering(self):
        """Element types are ordered by instance count, most frequent first."""
        analysis = analyze_structure(_repeated(8))

        assert [et.name for et in analysis.element_types] == ["e", "root"]
        assert analysis.get_element_type("e").count == 10
        assert analysis.total_elements == 11
        assert analysis.max_depth == 1
        assert analysis.root_elements == ["root"]

    def test_attribute_required_at_eighty_percent(self):
        analysis = analyze_structure(_repeated(8))

        attr = analysis.get_element_type("e").attribute_analysis["a"]
        assert attr.required is True
        assert attr.type == "number"
        assert attr.is_reference is False

    def test_attribute_not_required_below_eighty_percent(self):
        analysis = analyze_structure(_repeated(7))

        assert analysis.get_element_type("e").attribute_analysis["a"].required is False

    def test_sample_values_capped_at_five(self):
        xml = "<root>" + "".join(f'<e a="{i}">t</e>' for i in range(8)) + "</root>"

        analysis = analyze_structure(xml)

        assert analysis.get_element_type("e").attribute_analysis["a"].sample_values == ["0", "1", "2", "3", "4"]

    def test_children_recorded_once(self):
        analysis = analyze_structure("<root><p>a</p><p>b</p><q>c</q></root>")

        assert analysis.get_element_type("root").children == ["p", "q"]

    def test_malformed_xml_raises(self):
        with pytest.raises(XmlError):
            analyze_structure("<root><unclosed></root>")


class TestIgnoreRules:
    """User and automatic ignore handling."""

    def test_ignored_element_is_transparent(self):
        """An ignored element is skipped but its children attach to the nearest recorded parent."""
        analysis = analyze_structure("<root><wrap><item>x</item></wrap></root>", {"ignoredElements": ["wrap"]})

        assert analysis.get_element_type("wrap") is None
        assert [(p.from_, p.to) for p in analysis.relationship_patterns] == [("root", "item")]
        assert analysis.ignored_elements == ["wrap"]
        assert analysis.total_elements == 3

    def test_ignored_subtree_is_not_descended(self):
        analysis = analyze_structure(
            "<root><note><x>1</x></note><p>t</p></root>", {"ignoredSubtrees": ["note"]}
        )

        assert analysis.get_element_type("x") is None
        assert analysis.get_element_type("note").special_patterns.is_ignored_subtree is True
        assert analysis.ignored_subtrees == ["note"]
        assert analysis.total_elements == 3

    def test_empty_marker_elements_are_auto_ignored(self):
        analysis = analyze_structure('<root><lb/><lb xml:id="l2"/><p>t</p></root>')

        assert analysis.get_element_type("lb") is None
        assert "lb" in analysis.ignored_elements

    def test_type_kept_when_any_instance_is_meaningful(self):
        analysis = analyze_structure("<root><lb/><lb>text</lb></root>")

        assert analysis.get_element_type("lb").special_patterns.is_ignored is False


class TestTextPatterns:
    def test_mixed_content_and_tail(self):
        analysis = analyze_structure("<root><p>hello <hi>x</hi> world</p></root>")

        p = analysis.get_element_type("p")
        assert p.has_text_content is True
        assert p.text_content_patterns.mixed_content is True
        assert analysis.get_element_type("hi").has_tail_content is True

    def test_character_level_siblings(self):
        analysis = analyze_structure("<root><w><c>a</c><c>b</c></w></root>")

        assert analysis.get_element_type("c").text_content_patterns.character_level is True
        assert analysis.get_element_type("w").text_content_patterns.character_level is False

    def test_sign_level_from_rules(self):
        analysis = analyze_structure(
            "<root><g>x</g><g>y</g></root>", {"textContentRules": {"signLevelElements": ["g"]}}
        )

        assert analysis.get_element_type("g").text_content_patterns.sign_level is True

    def test_whitespace_preserved(self):
        analysis = analyze_structure("<root><pre>a  b</pre></root>")

        assert analysis.get_element_type("pre").text_content_patterns.whitespace_preserved is True


class TestPatternsAndReferences:
    """Relationship patterns, special patterns and reference detection."""

    def test_references_between_elements(self):
        xml = '<root><w xml:id="w1">a</w><ptr target="#w1">x</ptr></root>'

        analysis = analyze_structure(xml)

        ptr = analysis.get_element_type("ptr")
        target = ptr.attribute_analysis["target"]
        assert (target.type, target.is_reference, target.reference_target) == ("id-reference", True, "w1")
        assert ptr.reference_patterns.outgoing == ["target"]
        assert analysis.reference_attributes == ["id", "target"]
        assert analysis.get_element_type("w").reference_patterns.incoming == ["id", "target"]

    def test_reference_target_strips_one_hash(self):
        analysis = analyze_structure('<root><ptr target="##w1">x</ptr></root>')

        target = analysis.get_element_type("ptr").attribute_analysis["target"]
        assert target.reference_target == "#w1"

    def test_reference_attribute_adds_relationship_candidates(self):
        analysis = analyze_structure('<root><ptr target="#w1">x</ptr></root>')

        pattern = analysis.relationship_patterns[0]
        assert pattern.type == "contains"
        assert pattern.via_attribute == "target"
        assert pattern.relationship_types == ["contains", "annotates", "refersTo"]

    def test_relationship_type_mappings_override_fallback(self):
        analysis = analyze_structure(
            '<root><seg correspondsTo="#s1">x</seg></root>',
            {"relationshipTypeMappings": {"corresp": ["parallel"]}},
        )

        assert analysis.relationship_patterns[0].relationship_types == ["contains", "parallel"]

    def test_annotation_pattern(self):
        analysis = analyze_structure(
            '<root><note resp="ed">text</note></root>', {"patternRules": {"annotationAttributes": ["resp"]}}
        )

        assert analysis.get_element_type("note").special_patterns.is_annotation is True
        assert analysis.relationship_patterns[0].relationship_types[:3] == ["contains", "annotates", "annotatedBy"]

    def test_choice_from_similar_children(self):
        analysis = analyze_structure("<root><list><listItem>a</listItem><listItem>b</listItem></list></root>")

        assert analysis.get_element_type("list").special_patterns.is_choice is True

    def test_frequency_rises_with_distinct_patterns(self):
        """A pattern seen again after more than ten distinct patterns exist becomes medium."""
        children = "".join(f"<c{i}>t</c{i}>" for i in range(12))
        analysis = analyze_structure(f"<root>{children}<c0>t</c0></root>")

        frequencies = {p.to: p.frequency for p in analysis.relationship_patterns}
        assert frequencies["c0"] == "medium"
        assert frequencies["c1"] == "low"

    def test_namespaces(self):
        xml = '<tei:TEI xmlns:tei="urn:tei" xmlns="urn:default"><tei:w>a</tei:w></tei:TEI>'

        analysis = analyze_structure(xml)

        assert analysis.namespaces == {"tei": "urn:tei", "default": "urn:default"}
        assert analysis.root_elements == ["TEI"]
        assert analysis.get_element_type("w").namespace == "urn:tei"
