"""Tests for record identity, slot lookup and typed accessors."""

from __future__ import annotations

import pytest

from src.core import (
    BLANK_INT,
    CROP,
    PROP_COMMON_ID,
    PROP_ID,
    CropProperty,
    DatumState,
    Record,
    TriState,
)


def test_blank_record_is_single_with_sentinel_id() -> None:
    """Factory builds an unset single record."""
    crop = CROP.new_record()

    assert crop.get_id() == BLANK_INT
    assert crop.is_single_record()
    assert not crop.represents_multi
    assert crop.get_common_ids() == []
    assert all(datum.state is DatumState.UNSET for datum in crop)


def test_set_id_in_single_mode() -> None:
    """Single records expose their stored id."""
    crop = CROP.new_record()
    crop.set_id(5)

    assert crop.get_id() == 5
    assert crop.datum(PROP_ID).value == 5


def test_common_ids_force_multi_record_mode() -> None:
    """A non-empty batch hides the single id and ignores id writes."""
    crop = CROP.new_record()
    crop.set_id(5)
    crop.set_common_ids([3, 4])

    assert crop.represents_multi
    assert not crop.is_single_record()
    assert crop.get_id() == BLANK_INT
    assert crop.get_common_ids() == [3, 4]

    crop.set_id(9)
    crop.set_represents_single_record()
    assert crop.get_id() == 5


def test_empty_common_ids_keep_single_mode() -> None:
    """Only a non-empty batch switches modes."""
    crop = CROP.new_record()
    crop.set_common_ids([])

    assert crop.is_single_record()


def test_common_ids_are_returned_as_copy() -> None:
    """Mutating the returned list does not change the batch."""
    crop = CROP.new_record()
    crop.set_common_ids([3, 4])
    crop.get_common_ids().append(99)

    assert crop.get_common_ids() == [3, 4]


def test_identity_properties_are_addressable() -> None:
    """Identity datums are reachable through property numbers."""
    crop = CROP.new_record()
    crop.set(PROP_ID, 8)
    crop.set(PROP_COMMON_ID, [1, 2])

    assert crop.datum(PROP_COMMON_ID).value == [1, 2]
    crop.set_represents_single_record()
    assert crop.get_id() == 8


@pytest.mark.parametrize("prop", [-5, 18, 99])
def test_unknown_property_is_absent(prop: int) -> None:
    """Unknown property numbers yield ``None`` and never raise."""
    crop = CROP.new_record()

    assert crop.datum(prop) is None
    assert crop.get(prop) is None
    assert crop.get_state_of(prop) is None


def test_set_on_unknown_property_is_ignored(tomato_crop: Record) -> None:
    """Writes to absent slots leave the record unchanged."""
    tomato_crop.set(99, "x")

    assert tomato_crop.get(99) is None
    assert tomato_crop.get(CropProperty.CROP_NAME) == "Tomato"


def test_typed_accessors_follow_raw_output_mode() -> None:
    """Raw mode returns sentinels, display mode returns normalized values."""
    crop = CROP.new_record()

    assert crop.get_int(CropProperty.MATURITY) is None
    assert crop.get_boolean(CropProperty.TRANSPLANT) is False
    assert crop.get(CropProperty.CROP_NAME) == ""

    crop.raw_output = True
    assert crop.get_int(CropProperty.MATURITY) == -1
    assert crop.get_float(CropProperty.YIELD_P_FOOT) == -1.0
    assert crop.get_boolean(CropProperty.TRANSPLANT) is TriState.UNKNOWN

    crop.set(CropProperty.MATURITY, 60)
    assert crop.get_int(CropProperty.MATURITY) == 60
    assert crop.get_state_of(CropProperty.MATURITY) is DatumState.CONCRETE


def test_record_exposes_presentation_helpers() -> None:
    """Formatting and parsing helpers are callable from a record."""
    crop = CROP.new_record()

    assert crop.format_float(3.14159, 2) == "3.14"
    assert crop.format_int(-1) == ""
    assert Record.parse_int(" +3") == 3


def test_records_are_unhashable(tomato_crop: Record) -> None:
    """Structural equality makes records unsuitable as dict keys."""
    with pytest.raises(TypeError):
        hash(tomato_crop)


def test_str_lists_populated_fields(tomato_crop: Record) -> None:
    """Debug rendering shows the description and non-null fields."""
    text = str(tomato_crop)

    assert text.splitlines()[0] == "Crop #1: Tomato"
    assert "maturity = 60 [concrete]" in text
    assert "var_name" not in text
