#!/usr/bin/env python3
"""Tests for the analyzer heuristics."""

import pytest

from xmlgraph.models.analysis import SpecialPattern
from xmlgraph.services.domain.xml_analysis.patterns import (
    REFERENCE_ATTRIBUTES,
    infer_type,
    is_reference_value,
    matches_any,
    reference_type,
    relationship_candidates,
)


class TestValueHeuristics:
    @pytest.mark.parametrize(
        "value,expected",
        [
            ("#w1", True),
            ("w1", True),
            ("12", False),
            ("#a #b", True),
            ("a b", True),
            ("1 2", False),
            ("x 2", False),
        ],
    )
    def test_is_reference_value(self, value, expected):
        assert is_reference_value(value) is expected

    @pytest.mark.parametrize(
        "value,expected",
        [
            ("true", "boolean"),
            ("3.5", "number"),
            ("-2", "number"),
            ("2024-01-01", "date"),
            ("01/02/2024", "date"),
            ("abc", "string"),
            ("0x10", "string"),
            ("Infinity", "string"),
        ],
    )
    def test_infer_type(self, value, expected):
        assert infer_type(value) == expected

    def test_reference_type(self):
        assert reference_type("//w[@n='1']") == "xpath-reference"
        assert reference_type("w1") == "id-reference"

    def test_matches_any_is_case_insensitive_substring(self):
        assert matches_any("correspondsTo", ["CORRESP"]) is True
        assert matches_any("n", ["corresp", ""]) is False


class TestRelationshipCandidates:
    def test_plain_child_contains_only(self):
        assert relationship_candidates(SpecialPattern.NONE, ["n"], REFERENCE_ATTRIBUTES, {}) == (["contains"], None)

    def test_flags_add_candidates_in_order(self):
        flags = SpecialPattern.ALTERNATIVE | SpecialPattern.TRANSLATION

        candidates, via = relationship_candidates(flags, [], REFERENCE_ATTRIBUTES, {})

        assert candidates == ["contains", "alternative", "expressedAs", "translatedAs"]
        assert via is None

    def test_first_reference_attribute_wins(self):
        candidates, via = relationship_candidates(
            SpecialPattern.NONE, ["source", "target"], REFERENCE_ATTRIBUTES, {}
        )

        assert via == "source"
        assert candidates == ["contains", "refersTo"]

    def test_id_reference_defaults_to_refers_to(self):
        candidates, via = relationship_candidates(SpecialPattern.NONE, ["id"], REFERENCE_ATTRIBUTES, {})

        assert (candidates, via) == (["contains", "refersTo"], "id")
