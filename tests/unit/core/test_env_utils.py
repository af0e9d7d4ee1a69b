#!/usr/bin/env python3
"""Tests for environment variable helpers."""

import os
from unittest.mock import patch

import pytest

from xmlgraph.core.env_utils import getenv_bool, getenv_clean, getenv_int, getenv_list


class TestGetenvClean:
    @patch.dict(os.environ, {"XG_VALUE": "debug\r\n"})
    def test_strips_line_endings(self):
        assert getenv_clean("XG_VALUE", "INFO") == "debug"

    @patch.dict(os.environ, {}, clear=True)
    def test_default_when_unset(self):
        assert getenv_clean("XG_VALUE", "INFO") == "INFO"
        assert getenv_clean("XG_VALUE") is None


class TestGetenvBool:
    @pytest.mark.parametrize("raw,expected", [("TRUE", True), ("on", True), ("0", False), ("No", False)])
    def test_recognised_values(self, raw, expected):
        with patch.dict(os.environ, {"XG_FLAG": raw}):
            assert getenv_bool("XG_FLAG", not expected) is expected

    @patch.dict(os.environ, {"XG_FLAG": "maybe"})
    def test_unexpected_value_uses_default(self):
        assert getenv_bool("XG_FLAG", True) is True

    @patch.dict(os.environ, {}, clear=True)
    def test_unset_uses_default(self):
        assert getenv_bool("XG_FLAG") is False


class TestGetenvInt:
    @patch.dict(os.environ, {"XG_NUM": " 42 "})
    def test_parses_integer(self):
        assert getenv_int("XG_NUM", 1) == 42

    @patch.dict(os.environ, {"XG_NUM": ""})
    def test_empty_uses_default(self):
        assert getenv_int("XG_NUM", 7) == 7

    @patch.dict(os.environ, {"XG_NUM": "2"})
    def test_minimum(self):
        assert getenv_int("XG_NUM", 5, minimum=3) == 5
        assert getenv_int("XG_NUM", 5, minimum=2) == 2


class TestGetenvList:
    @patch.dict(os.environ, {"XG_LIST": "a; b ;;c"})
    def test_custom_separator(self):
        assert getenv_list("XG_LIST", separator=";") == ["a", "b", "c"]

    @patch.dict(os.environ, {"XG_LIST": " , "})
    def test_blank_items_give_default(self):
        assert getenv_list("XG_LIST", ["x"]) == ["x"]
