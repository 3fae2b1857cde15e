"""Tests for inkexpr.postprocessing: normalize_expression()."""

import pytest

from inkexpr.config import DEFAULT_SUBSTITUTIONS, PipelineConfig
from inkexpr.postprocessing import apply_substitutions, normalize_expression


# ── Absent / empty input ──────────────────────────────────────────────────────


class TestEmptyInput:
    def test_none_gives_empty_string(self):
        assert normalize_expression(None) == ""

    def test_empty_string(self):
        assert normalize_expression("") == ""

    def test_whitespace_only(self):
        assert normalize_expression(" \n\t \n") == ""

    def test_lone_equals_sign(self):
        assert normalize_expression("=") == ""


# ── Whitespace ────────────────────────────────────────────────────────────────


class TestWhitespace:
    def test_spaces_between_tokens_removed(self):
        assert normalize_expression("12 + 7") == "12+7"

    def test_trailing_newline_from_engine_removed(self):
        assert normalize_expression("12+7\n\x0c") == "12+7"

    def test_internal_newlines_removed(self):
        assert normalize_expression("3\n*\n4") == "3*4"


# ── Character confusions ──────────────────────────────────────────────────────


class TestSubstitutions:
    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("O", "0"), ("o", "0"),
            ("l", "1"), ("I", "1"), ("|", "1"),
            ("S", "5"), ("s", "5"),
            ("Z", "2"), ("z", "2"),
            ("g", "9"), ("q", "9"),
            ("B", "8"),
            ("x", "*"), ("X", "*"),
            (":", "/"), ("÷", "/"),
            ("?", "2"),
        ],
    )
    def test_default_table(self, raw, expected):
        assert normalize_expression(raw) == expected

    def test_mixed_expression(self):
        assert normalize_expression("lO x S : 2") == "10*5/2"

    def test_case_sensitive(self):
        # Uppercase G and Q are not in the table.
        assert normalize_expression("G+Q") == "G+Q"

    def test_replacement_never_rematched(self):
        table = (("a", "b"), ("b", "c"))
        assert apply_substitutions("ab", table) == "bc"

    def test_first_pair_wins_for_duplicate_keys(self):
        table = (("a", "1"), ("a", "2"))
        assert apply_substitutions("a", table) == "1"

    def test_custom_table(self):
        assert normalize_expression("7t3", substitutions=(("t", "+"),)) == "7+3"

    def test_empty_table_disables_substitution(self):
        assert normalize_expression("lO", substitutions=()) == "lO"

    def test_default_table_is_pipeline_config_default(self):
        assert PipelineConfig().substitutions == DEFAULT_SUBSTITUTIONS


class TestPassThrough:
    @pytest.mark.parametrize("raw", ["0123456789", "+-*/^().!", "3.14*2", "2^10", "5!"])
    def test_whitelisted_characters_unchanged(self, raw):
        assert normalize_expression(raw) == raw

    @pytest.mark.parametrize("raw", ["a+b", "7%3", "π", "[1]", "~"])
    def test_unknown_characters_kept(self, raw):
        assert normalize_expression(raw) == raw


# ── Trailing equals ───────────────────────────────────────────────────────────


class TestTrailingEquals:
    def test_trailing_equals_stripped(self):
        assert normalize_expression("12+7=") == "12+7"

    def test_substitution_runs_before_strip(self):
        assert normalize_expression("1O+5=") == "10+5"

    def test_only_one_equals_stripped(self):
        assert normalize_expression("4==") == "4="

    def test_inner_equals_kept(self):
        assert normalize_expression("2+2=4") == "2+2=4"

    def test_equals_followed_by_space_stripped(self):
        assert normalize_expression("9-3 = ") == "9-3"


# ── Unopened closing parentheses ──────────────────────────────────────────────


class TestUnopenedParens:
    def test_close_without_open_becomes_two(self):
        assert normalize_expression("5)+2") == "52+2"

    def test_substitution_then_paren_repair(self):
        assert normalize_expression("8x2)") == "8*22"

    def test_every_close_replaced(self):
        assert normalize_expression("1)+3)") == "12+32"

    def test_balanced_parens_untouched(self):
        assert normalize_expression("(1+2)*3") == "(1+2)*3"

    def test_any_open_paren_disables_repair(self):
        assert normalize_expression("(1+2))") == "(1+2))"

    def test_open_without_close_left_alone(self):
        assert normalize_expression("(1+2") == "(1+2"

    def test_equals_strip_before_paren_repair(self):
        assert normalize_expression("3)=") == "32"


# ── Determinism ───────────────────────────────────────────────────────────────


class TestDeterminism:
    @pytest.mark.parametrize("raw", ["1O+5=", "8x2)", " l2 ÷ 4 ", "?+?"])
    def test_same_input_same_output(self, raw):
        assert normalize_expression(raw) == normalize_expression(raw)

    def test_result_is_stable_under_renormalization(self):
        once = normalize_expression("lO x S : 2=")
        assert normalize_expression(once) == once
