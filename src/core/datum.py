"""Field-level value holder with provenance state.

A ``Datum`` stores one field of a record together with the provenance of its
value: set explicitly by the user, inherited from a related record, or
calculated from sibling fields. Nullness is a property of the value, never of
the state, so an explicit ``set`` of a blank value yields a datum that is
``CONCRETE`` but still null.

Values are held internally as plain optionals (``None`` means "no value").
The legacy per-type sentinels (``-1``, ``-1.0``, ``"null"``, epoch-zero date,
...) are accepted on input and reproduced by :meth:`Datum.raw_value` for
callers that still speak the sentinel encoding.
"""

from __future__ import annotations

import math
import re
from datetime import date, datetime
from enum import Enum
from numbers import Integral, Real
from typing import Any, Generic, TypeVar

import numpy as np

from src.core.errors import ParseError

T = TypeVar("T")

BLANK_INT = -1
BLANK_FLOAT = -1.0
BLANK_DATE = date(1970, 1, 1)

_INT_PATTERN = re.compile(r"[+-]?[0-9]+")
_FLOAT_PATTERN = re.compile(r"[+-]?(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?")
_TRUE_TEXT = frozenset({"true", "t", "yes", "y", "1"})
_FALSE_TEXT = frozenset({"false", "f", "no", "n", "0"})
_UNCHANGED = object()


class DatumState(str, Enum):
    """Provenance of a datum value."""

    UNSET = "unset"
    CONCRETE = "concrete"
    INHERITED = "inherited"
    CALCULATED = "calculated"


class TriState(str, Enum):
    """Three-valued boolean stored by boolean fields."""

    TRUE = "true"
    FALSE = "false"
    UNKNOWN = "unknown"

    def __bool__(self) -> bool:
        return self is TriState.TRUE

    @classmethod
    def from_bool(cls, value: bool | None) -> "TriState":
        """Map ``True``/``False``/``None`` to the matching member."""
        if value is None:
            return cls.UNKNOWN
        return cls.TRUE if value else cls.FALSE


def is_null_text(text: str | None) -> bool:
    """Return whether text is blank or spells ``null`` in any case."""
    if text is None:
        return True
    stripped = text.strip()
    return stripped == "" or stripped.lower() == "null"


def _strip_sign(text: str) -> str:
    cleaned = text.strip()
    if cleaned.startswith("+"):
        cleaned = cleaned[1:]
    return cleaned


def parse_int(text: str | None) -> int:
    """Parse integer text entered at an input boundary.

    Parameters
    ----------
    text : str | None
        Raw user or file text.

    Returns
    -------
    int
        Parsed value, or ``BLANK_INT`` for blank/null-equivalent text.

    Raises
    ------
    ParseError
        Raised when non-blank text is not a valid integer.

    Examples
    --------
    >>> parse_int(" +12 ")
    12
    >>> parse_int("")
    -1
    """
    if is_null_text(text):
        return BLANK_INT
    cleaned = _strip_sign(text)
    if not _INT_PATTERN.fullmatch(cleaned):
        raise ParseError(f"Invalid integer text: {text!r}")
    return int(cleaned)


def parse_float(text: str | None) -> float:
    """Parse decimal text entered at an input boundary.

    Same rules as :func:`parse_int`; accepts an optional fraction and
    exponent. Blank/null-equivalent text yields ``BLANK_FLOAT``.
    """
    if is_null_text(text):
        return BLANK_FLOAT
    cleaned = _strip_sign(text)
    if not _FLOAT_PATTERN.fullmatch(cleaned):
        raise ParseError(f"Invalid decimal text: {text!r}")
    return float(cleaned)


def format_int(value: int | None) -> str:
    """Render an integer for display; blank values render as ``""``."""
    if value is None or value == BLANK_INT:
        return ""
    return str(int(value))


def format_float(value: float | None, precision: int = -1) -> str:
    """Render a float for display.

    Parameters
    ----------
    value : float | None
        Value to render; ``None`` and ``BLANK_FLOAT`` render as ``""``.
    precision : int, optional
        Number of decimals kept. Values below 1 leave the number unrounded.
        Extra decimals are truncated, not rounded.

    Returns
    -------
    str
        Display text.

    Examples
    --------
    >>> format_float(3.0, 2)
    '3'
    >>> format_float(3.14159, 2)
    '3.14'
    """
    if value is None or value == BLANK_FLOAT:
        return ""
    number = float(value)
    if precision < 1 or not math.isfinite(number):
        return str(number)
    if math.floor(number) == number:
        return str(int(number))
    factor = 10.0**precision
    return str(float(np.trunc(number * factor) / factor))


def _is_bool(value: Any) -> bool:
    return isinstance(value, (bool, np.bool_))


def _coerce_int(value: Any) -> int | None:
    if isinstance(value, str):
        parsed = parse_int(value)
    elif _is_bool(value):
        raise TypeError(f"Cannot store boolean {value!r} in an integer field")
    elif isinstance(value, Integral):
        parsed = int(value)
    elif isinstance(value, Real) and float(value).is_integer():
        parsed = int(value)
    else:
        raise TypeError(f"Cannot store {value!r} in an integer field")
    return None if parsed == BLANK_INT else parsed


def _coerce_float(value: Any) -> float | None:
    if isinstance(value, str):
        parsed = parse_float(value)
    elif _is_bool(value):
        raise TypeError(f"Cannot store boolean {value!r} in a float field")
    elif isinstance(value, Real):
        parsed = float(value)
    else:
        raise TypeError(f"Cannot store {value!r} in a float field")
    if parsed == BLANK_FLOAT or math.isnan(parsed):
        return None
    return parsed


def _coerce_boolean(value: Any) -> bool | None:
    if isinstance(value, TriState):
        return None if value is TriState.UNKNOWN else value is TriState.TRUE
    if _is_bool(value):
        return bool(value)
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in _TRUE_TEXT:
            return True
        if lowered in _FALSE_TEXT:
            return False
        if is_null_text(value) or lowered == "unknown":
            return None
        raise ParseError(f"Invalid boolean text: {value!r}")
    if isinstance(value, Integral) and int(value) in (0, 1):
        return bool(value)
    raise TypeError(f"Cannot store {value!r} in a boolean field")


def _coerce_string(value: Any) -> str | None:
    text = value if isinstance(value, str) else str(value)
    # whitespace is user text here; only "" and "null" are blank
    return None if text == "" or text.lower() == "null" else text


def _coerce_date(value: Any) -> date | None:
    if isinstance(value, datetime):
        parsed = value.date()
    elif isinstance(value, date):
        parsed = value
    elif isinstance(value, str):
        if is_null_text(value):
            return None
        try:
            parsed = datetime.fromisoformat(value.strip()).date()
        except ValueError as exc:
            raise ParseError(f"Invalid date text: {value!r}") from exc
    else:
        raise TypeError(f"Cannot store {value!r} in a date field")
    return None if parsed == BLANK_DATE else parsed


def _coerce_int_list(value: Any) -> list[int] | None:
    if isinstance(value, (str, bytes)):
        raise TypeError(f"Cannot store {value!r} in an id list field")
    items = [int(item) for item in value]
    return items or None


class FieldType(str, Enum):
    """Value type of a record field and its blank-value policy."""

    INT = "int"
    FLOAT = "float"
    BOOLEAN = "boolean"
    STRING = "string"
    DATE = "date"
    INT_LIST = "int_list"

    @property
    def sentinel(self) -> Any:
        """Legacy value standing for "no value" in this type."""
        if self is FieldType.INT_LIST:
            return []
        return _SENTINELS[self]

    def coerce(self, value: Any) -> Any:
        """Convert an incoming value to its stored form (``None`` if blank).

        Raises
        ------
        ParseError
            Raised for malformed text.
        TypeError
            Raised for objects the type cannot hold.
        """
        if value is None:
            return None
        return _COERCERS[self](value)

    def to_raw(self, value: Any) -> Any:
        """Convert a stored value to its sentinel-encoded raw form."""
        if value is None:
            return self.sentinel
        if self is FieldType.BOOLEAN:
            return TriState.from_bool(value)
        if self is FieldType.INT_LIST:
            return list(value)
        return value

    def display(self, value: Any) -> Any:
        """Convert a stored value to its display/edit form."""
        if self is FieldType.STRING:
            return "" if value is None else value
        if self is FieldType.BOOLEAN:
            return bool(value)
        if self is FieldType.INT_LIST:
            return [] if value is None else list(value)
        return value


_SENTINELS = {
    FieldType.INT: BLANK_INT,
    FieldType.FLOAT: BLANK_FLOAT,
    FieldType.BOOLEAN: TriState.UNKNOWN,
    FieldType.STRING: "",
    FieldType.DATE: BLANK_DATE,
}

_COERCERS = {
    FieldType.INT: _coerce_int,
    FieldType.FLOAT: _coerce_float,
    FieldType.BOOLEAN: _coerce_boolean,
    FieldType.STRING: _coerce_string,
    FieldType.DATE: _coerce_date,
    FieldType.INT_LIST: _coerce_int_list,
}


class Datum(Generic[T]):
    """One record field: a typed value plus its provenance state.

    Parameters
    ----------
    property_number : int
        Slot index of the field inside its record.
    name : str
        Field name, also used as the storage column name.
    field_type : FieldType
        Value type and blank-value policy.

    Examples
    --------
    >>> days = Datum(5, "maturity", FieldType.INT)
    >>> days.is_null()
    True
    >>> days.mark_inherited(60)
    >>> days.is_inherited(), days.is_concrete()
    (True, False)
    >>> days.set(55)
    >>> days.state
    <DatumState.CONCRETE: 'concrete'>
    """

    def __init__(self, property_number: int, name: str, field_type: FieldType) -> None:
        self.property_number = property_number
        self.name = name
        self.field_type = field_type
        self.state = DatumState.UNSET
        self._value: T | None = None

    @property
    def value(self) -> T | None:
        """Stored value, ``None`` when blank."""
        return self._value

    def set(self, value: Any) -> None:
        """Store an explicit value; always promotes the datum to ``CONCRETE``."""
        self._value = self.field_type.coerce(value)
        self.state = DatumState.CONCRETE

    def mark_inherited(self, value: Any) -> None:
        """Store a value copied from a related record."""
        self._value = self.field_type.coerce(value)
        self.state = DatumState.INHERITED

    def mark_calculated(self, value: Any = _UNCHANGED) -> None:
        """Mark the value as derived from sibling fields, optionally replacing it."""
        if value is not _UNCHANGED:
            self._value = self.field_type.coerce(value)
        self.state = DatumState.CALCULATED

    def clear(self) -> None:
        """Forget the value and return to ``UNSET``."""
        self._value = None
        self.state = DatumState.UNSET

    def raw_value(self) -> Any:
        """Literal stored value, with the type sentinel standing for blank."""
        return self.field_type.to_raw(self._value)

    def normalized_value(self) -> Any:
        """Display/edit form of the value."""
        return self.field_type.display(self._value)

    def is_null(self) -> bool:
        return self.state is DatumState.UNSET or self._value is None

    def is_not_null(self) -> bool:
        return not self.is_null()

    def is_concrete(self) -> bool:
        return self.state is DatumState.CONCRETE and not self.is_null()

    def is_calculated(self) -> bool:
        return self.state is DatumState.CALCULATED

    def is_inherited(self) -> bool:
        return self.state is DatumState.INHERITED

    def __repr__(self) -> str:
        return (
            f"Datum({self.property_number}, {self.name}={self._value!r}, "
            f"{self.state.value})"
        )
