"""
tests/test_parsing.py

Scalar coercion and period ordering helpers.
"""

from __future__ import annotations

import pytest

from dashboard.parsing import (
    UNKNOWN_MONTH,
    canonicalize_name,
    coerce_number,
    coerce_text,
    compare_periods,
    format_int,
    month_index,
    round_half_up,
    short_label,
    sort_periods,
    split_period,
)


# ---------------------------------------------------------------------------
# coerce_text
# ---------------------------------------------------------------------------


class TestCoerceText:
    def test_none_and_nan_are_empty(self) -> None:
        assert coerce_text(None) == ""
        assert coerce_text(float("nan")) == ""

    def test_trims_and_stringifies(self) -> None:
        assert coerce_text("  July 2021 ") == "July 2021"
        assert coerce_text(12) == "12"

    def test_integral_float_has_no_decimal_suffix(self) -> None:
        assert coerce_text(2021.0) == "2021"
        assert coerce_text(2.5) == "2.5"


# ---------------------------------------------------------------------------
# canonicalize_name
# ---------------------------------------------------------------------------


class TestCanonicalizeName:
    def test_strips_punctuation_and_province_word(self) -> None:
        assert canonicalize_name("Badakhshan Province") == "badakhshan"
        assert canonicalize_name("  BADAKHSHAN_province. ") == "badakhshan"
        assert canonicalize_name("Nimroz-Province") == "nimroz"

    def test_collapses_whitespace(self) -> None:
        assert canonicalize_name("Maidan   Wardak") == "maidan wardak"
        assert canonicalize_name("Maidan.Wardak") == "maidan wardak"

    def test_keeps_province_inside_other_words(self) -> None:
        assert canonicalize_name("Provinces") == "provinces"

    @pytest.mark.parametrize(
        "value",
        ["Badakhshan Province", "a.b-c_d", "  Province  of  Kabul ", "province", "Zone 7", "", None],
    )
    def test_idempotent(self, value) -> None:
        once = canonicalize_name(value)
        assert canonicalize_name(once) == once

    def test_does_not_alter_alphanumerics(self) -> None:
        assert canonicalize_name("abc123") == "abc123"


# ---------------------------------------------------------------------------
# coerce_number
# ---------------------------------------------------------------------------


class TestCoerceNumber:
    @pytest.mark.parametrize(
        "raw, clean",
        [("3,400", "3400"), ("1 200", "1200"), (" 12,345,678 ", "12345678"), ("1, 000.5", "1000.5")],
    )
    def test_separators_and_whitespace_are_ignored(self, raw: str, clean: str) -> None:
        assert coerce_number(raw) == coerce_number(clean)
        assert coerce_number(raw) is not None

    def test_numbers_pass_through(self) -> None:
        assert coerce_number(1200) == 1200.0
        assert coerce_number(-2.5) == -2.5
        assert coerce_number("1e3") == 1000.0

    @pytest.mark.parametrize("value", [None, "", "   ", "n/a", "abc", "NaN", "inf", "-Infinity", float("nan"), True])
    def test_rejects_empty_and_non_finite(self, value) -> None:
        assert coerce_number(value) is None

    @pytest.mark.parametrize("value", ["۱۴۰۰", "١٢٣", "１２３", "12５"])
    def test_non_ascii_digits_are_text(self, value: str) -> None:
        assert coerce_number(value) is None

    def test_never_raises_on_odd_input(self) -> None:
        assert coerce_number(object()) is None
        assert coerce_number([1, 2]) is None


# ---------------------------------------------------------------------------
# month_index / formatting
# ---------------------------------------------------------------------------


class TestMonthIndex:
    def test_known_months(self) -> None:
        assert month_index("January") == 1
        assert month_index("december") == 12
        assert month_index("  MAY ") == 5

    def test_unknown_month_sorts_last(self) -> None:
        assert month_index("Jan") == UNKNOWN_MONTH
        assert month_index("") == UNKNOWN_MONTH
        assert month_index("Q1") > month_index("December")


class TestFormatting:
    def test_round_half_up(self) -> None:
        assert round_half_up(2.5) == 3
        assert round_half_up(2.4) == 2
        assert round_half_up("1,234.5") == 1235

    @pytest.mark.parametrize("value, expected", [(-2.5, -2), (-2.4, -2), (-2.6, -3), (-0.5, 0), ("-1,234.5", -1234)])
    def test_round_half_up_negative_ties_go_up(self, value, expected: int) -> None:
        assert round_half_up(value) == expected

    def test_format_int_groups_thousands(self) -> None:
        assert format_int(1234567.4) == "1,234,567"
        assert format_int("12,345.5") == "12,346"

    def test_format_int_malformed_is_zero(self) -> None:
        assert format_int("n/a") == "0"
        assert format_int(None) == "0"

    def test_short_label(self) -> None:
        assert short_label("Visits") == "Visits"
        long = "x" * 60
        out = short_label(long)
        assert len(out) == 53
        assert out.endswith("…")


# ---------------------------------------------------------------------------
# Periods
# ---------------------------------------------------------------------------


class TestSplitPeriod:
    def test_month_and_year(self) -> None:
        assert split_period("July 2021") == ("July", "2021")

    def test_single_token_is_month(self) -> None:
        assert split_period("2021") == ("2021", "")

    def test_empty(self) -> None:
        assert split_period("  ") == ("", "")
        assert split_period(None) == ("", "")

    def test_extra_tokens_are_discarded(self) -> None:
        parts = split_period("July 2021 (revised)")
        assert parts.month == "July"
        assert parts.year == "2021"


class TestComparePeriods:
    def test_sort_by_year_then_month(self) -> None:
        periods = ["March 2021", "January 2022", "December 2020"]
        assert sort_periods(periods) == ["December 2020", "March 2021", "January 2022"]

    def test_non_numeric_year_sorts_as_zero(self) -> None:
        assert sort_periods(["January 2021", "Baseline"]) == ["Baseline", "January 2021"]

    def test_unknown_month_after_real_months(self) -> None:
        assert sort_periods(["Annual 2021", "June 2021"]) == ["June 2021", "Annual 2021"]

    def test_comparator_sign(self) -> None:
        assert compare_periods("May 2021", "June 2021") < 0
        assert compare_periods("June 2022", "May 2021") > 0
        assert compare_periods("May 2021", "May 2021") == 0

    def test_total_order_matches_year_month_key(self) -> None:
        periods = ["June 2020", "January 2021", "February 2020", "December 2019", "March 2021"]
        expected = sorted(periods, key=lambda p: (int(p.split()[1]), month_index(p.split()[0])))
        assert sort_periods(periods) == expected
