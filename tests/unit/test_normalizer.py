"""Unit tests for cell normalization"""
import pytest

from dashboard.normalizer import normalize_cell, normalize_header, normalize_row, to_number


class TestNormalizeCell:
    """normalize_cell is pure and total"""

    @pytest.mark.parametrize("raw, expected", [
        ("", 0),
        ("1,5", 1.5),
        ("abc", "abc"),
        ("  2,0  ", 2.0),
    ])
    def test_documented_examples(self, raw, expected):
        assert normalize_cell(raw) == expected

    def test_blank_and_missing_cells_are_zero(self):
        assert normalize_cell("   ") == 0.0
        assert normalize_cell("\t") == 0.0
        assert normalize_cell(None) == 0.0

    def test_numbers_come_back_as_float(self):
        assert isinstance(normalize_cell("3"), float)
        assert normalize_cell("-0,25") == -0.25
        assert normalize_cell("1e3") == 1000.0
        assert normalize_cell("12.75") == 12.75

    def test_only_first_comma_is_a_decimal_separator(self):
        assert normalize_cell("1,5,3") == "1.5,3"

    def test_text_is_trimmed(self):
        assert normalize_cell("  kWh ") == "kWh"

    @pytest.mark.parametrize("raw", ["inf", "nan", "1_000", "1e999", "0x10"])
    def test_non_decimal_or_non_finite_stays_text(self, raw):
        assert normalize_cell(raw) == raw


class TestRowHelpers:
    def test_header_is_trimmed(self):
        assert normalize_header("  Signal A ") == "Signal A"

    def test_row_has_every_header_key(self):
        row = normalize_row({"Discrete Time": "1", "Energy Lost": "0,5"},
                            ["Discrete Time", "Signal A", "Energy Lost"])

        assert row == {"Discrete Time": 1.0, "Signal A": 0.0, "Energy Lost": 0.5}
        assert list(row) == ["Discrete Time", "Signal A", "Energy Lost"]

    def test_to_number(self):
        assert to_number(2.5) == 2.5
        assert to_number("kWh") == 0.0
