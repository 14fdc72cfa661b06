"""Parsing and formatting helpers for spreadsheet currency and percentage values.

Spreadsheet exports mix raw numbers with strings such as ``"£1,234.50"`` or
``"12.3%"``. Parsing is lenient: anything absent or unreadable becomes 0 so a
dashboard can always be rendered.
"""

from __future__ import annotations

import math
import re
from typing import Any

import pandas as pd

CURRENCY_SYMBOL = "£"

# Leading decimal number, the way a browser's parseFloat reads a prefix
_LEADING_NUMBER = re.compile(r"^[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?")


def _parse_number(text: str) -> float:
    match = _LEADING_NUMBER.match(text.strip())
    if not match:
        return 0.0
    value = float(match.group(0))
    return value if math.isfinite(value) else 0.0


def is_missing(value: Any) -> bool:
    """True for None, blank strings and NaN."""
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() == ""
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False


def parse_currency(value: Any) -> float:
    """
    Parse a currency value such as ``"£1,234.50"`` into a float.

    Args:
        value: Raw cell value (string, number or None)

    Returns:
        Parsed amount, or 0.0 when the value is absent or unparseable
    """
    if is_missing(value):
        return 0.0
    if isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        return float(value) if math.isfinite(value) else 0.0

    text = str(value).replace(CURRENCY_SYMBOL, "").replace(",", "")
    return _parse_number(text)


def parse_percentage(value: Any) -> float:
    """Parse a percentage value such as ``"12.3%"``; absent values are 0.0."""
    if is_missing(value):
        return 0.0
    if isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        return float(value) if math.isfinite(value) else 0.0

    return _parse_number(str(value).replace("%", ""))


def format_currency(value: float) -> str:
    """Format an amount as ``£`` + thousands-separated two-decimal value."""
    return f"{CURRENCY_SYMBOL}{value:,.2f}"


def percent_change(new: float, old: float) -> float:
    """
    Relative change ``(new / old - 1) * 100``.

    A zero denominator yields NaN rather than raising.
    """
    if old == 0:
        return float("nan")
    return (new / old - 1) * 100


def format_percent_change(value: float, decimals: int = 1) -> str:
    """Format a percent change for display; NaN renders as ``N/A``."""
    if value is None or pd.isna(value):
        return "N/A"
    return f"{value:.{decimals}f}%"
