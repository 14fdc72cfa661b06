"""Tests for currency/percentage parsing and formatting."""

import math

import numpy as np
import pytest

from src.utils.value_parsing import (
    format_currency,
    format_percent_change,
    parse_currency,
    parse_percentage,
    percent_change,
)


@pytest.mark.parametrize("raw, expected", [
    ("£1,234.50", 1234.50),
    ("£1,300.00", 1300.0),
    ("1234", 1234.0),
    (" £12.30 ", 12.30),
    ("-£45.10", -45.10),
    (987.65, 987.65),
    (42, 42.0),
])
def test_parse_currency_reads_amounts(raw, expected):
    assert parse_currency(raw) == pytest.approx(expected)


@pytest.mark.parametrize("raw", [None, "", "   ", "N/A", "£", float("nan"), np.nan, "(£12.00)"])
def test_parse_currency_degrades_to_zero(raw):
    assert parse_currency(raw) == 0.0


def test_parse_currency_reads_leading_number_like_parse_float():
    assert parse_currency("£12.50 est.") == pytest.approx(12.5)


@pytest.mark.parametrize("raw, expected", [
    ("12.5%", 12.5),
    ("7%", 7.0),
    (3.2, 3.2),
    (None, 0.0),
    ("", 0.0),
    ("n/a", 0.0),
])
def test_parse_percentage(raw, expected):
    assert parse_percentage(raw) == pytest.approx(expected)


def test_format_currency_uses_pound_and_thousands_separator():
    assert format_currency(1234567.891) == "£1,234,567.89"
    assert format_currency(0) == "£0.00"
    assert format_currency(5.5) == "£5.50"


@pytest.mark.parametrize("value", [0.0, 0.01, 12.34, 999.99, 1234.5, 98765.43, 1000000.0])
def test_currency_parsing_reverses_formatting(value):
    assert parse_currency(format_currency(value)) == value


def test_percent_change_matches_worked_example():
    change = percent_change(parse_currency("£1,300.00"), parse_currency("£1,234.50"))
    assert change == pytest.approx(5.3058, rel=1e-4)


def test_percent_change_zero_denominator_is_nan():
    assert math.isnan(percent_change(100.0, 0.0))
    assert math.isnan(percent_change(0.0, 0.0))


def test_format_percent_change_renders_nan_as_na():
    assert format_percent_change(float("nan")) == "N/A"
    assert format_percent_change(5.3058) == "5.3%"
    assert format_percent_change(-2.25, decimals=2) == "-2.25%"
