"""Tests for input parsing and display formatting helpers."""

from __future__ import annotations

import pytest

from src.core.datum import (
    BLANK_FLOAT,
    BLANK_INT,
    format_float,
    format_int,
    parse_float,
    parse_int,
)
from src.core.errors import ParseError


@pytest.mark.parametrize("text", [None, "", "   ", "null", " NULL "])
def test_parse_blank_text_yields_sentinel(text: str | None) -> None:
    """Blank and null-equivalent text is not an error."""
    assert parse_int(text) == BLANK_INT
    assert parse_float(text) == BLANK_FLOAT


def test_parse_int_trims_and_strips_plus() -> None:
    """Whitespace and one leading plus sign are ignored."""
    assert parse_int(" +12 ") == 12
    assert parse_int("-7") == -7
    assert parse_int("0") == 0


@pytest.mark.parametrize("text", ["abc", "12a", "1.5", "+ 3", "1_000", "++", "++5x"])
def test_parse_int_rejects_malformed_text(text: str) -> None:
    """Anything non-blank that is not an integer raises."""
    with pytest.raises(ParseError):
        parse_int(text)


def test_parse_float_accepts_decimal_forms() -> None:
    """Fractions, leading dots and exponents parse."""
    assert parse_float("2.50") == 2.5
    assert parse_float(" +1e3 ") == 1000.0
    assert parse_float(".5") == 0.5
    assert parse_float("4") == 4.0


@pytest.mark.parametrize("text", ["abc", "nan", "inf", "1.2.3", "1,5"])
def test_parse_float_rejects_malformed_text(text: str) -> None:
    """Only plain decimal notation is accepted."""
    with pytest.raises(ParseError):
        parse_float(text)


def test_parse_error_is_value_error() -> None:
    """Callers catching ``ValueError`` also catch parse failures."""
    assert issubclass(ParseError, ValueError)


def test_format_int_hides_blank() -> None:
    """Blank integers render as empty text."""
    assert format_int(-1) == ""
    assert format_int(None) == ""
    assert format_int(42) == "42"


@pytest.mark.parametrize(
    ("value", "precision", "expected"),
    [
        (3.0, 2, "3"),
        (3.14159, 2, "3.14"),
        (2.999, 2, "2.99"),
        (-1.0, 2, ""),
        (None, 2, ""),
        (2.5, -1, "2.5"),
        (3.0, 0, "3.0"),
    ],
)
def test_format_float(value: float | None, precision: int, expected: str) -> None:
    """Floats are truncated to precision; integral values drop the fraction."""
    assert format_float(value, precision) == expected
