"""Tests for merging edited values into a canonical record."""

from __future__ import annotations

from src.core import CROP, CropProperty, DatumState, Record


def _build_changes(**values: object) -> Record:
    """Build a crop record holding edited values."""
    changes = CROP.new_record()
    changes.set_id(1)
    for name, value in values.items():
        changes.set(CropProperty[name.upper()], value)
    return changes


def _snapshot(record: Record) -> list[tuple[str, object, DatumState]]:
    """Return ``(name, value, state)`` for every field slot."""
    return [(datum.name, datum.value, datum.state) for datum in record]


def test_merge_promotes_changed_values_to_concrete() -> None:
    """Merged values are explicit writes."""
    base = CROP.new_record()
    base.inherit(CropProperty.MATURITY, 60)

    result = base.merge(_build_changes(maturity=45))

    assert result is base
    assert base.get(CropProperty.MATURITY) == 45
    assert base.get_state_of(CropProperty.MATURITY) is DatumState.CONCRETE
    assert base.changed_properties == [CropProperty.MATURITY]


def test_merge_keeps_equal_inherited_value() -> None:
    """Unchanged values keep their provenance."""
    base = CROP.new_record()
    base.inherit(CropProperty.MATURITY, 60)

    base.merge(_build_changes(maturity=60))

    assert base.datum(CropProperty.MATURITY).is_inherited()
    assert base.changed_properties == []


def test_blank_change_does_not_erase_value(tomato_crop: Record) -> None:
    """Merging never clears a value."""
    tomato_crop.merge(_build_changes(crop_name="Tomato"))

    assert tomato_crop.get(CropProperty.MATURITY) == 60
    assert tomato_crop.get(CropProperty.TRANSPLANT) is True


def test_calculated_value_only_yields_to_concrete_change() -> None:
    """Derived values are replaced by explicit edits only."""
    base = CROP.new_record()
    base.datum(CropProperty.MATURITY).mark_calculated(60)
    inherited_change = CROP.new_record()
    inherited_change.inherit(CropProperty.MATURITY, 45)

    base.merge(inherited_change)
    assert base.get(CropProperty.MATURITY) == 60
    assert base.datum(CropProperty.MATURITY).is_calculated()

    base.merge(_build_changes(maturity=45))
    assert base.get(CropProperty.MATURITY) == 45
    assert base.datum(CropProperty.MATURITY).is_concrete()


def test_merge_is_idempotent(tomato_crop: Record) -> None:
    """Merging the same changes twice equals merging once."""
    changes = _build_changes(maturity=75, fam_name="Solanaceae")

    tomato_crop.merge(changes)
    once = _snapshot(tomato_crop)
    assert tomato_crop.changed_properties == [CropProperty.FAM_NAME, CropProperty.MATURITY]

    tomato_crop.merge(changes)

    assert _snapshot(tomato_crop) == once
    assert tomato_crop.changed_properties == []


def test_changed_properties_cover_latest_merge_only(tomato_crop: Record) -> None:
    """Each merge reports only the fields it changed."""
    tomato_crop.merge(_build_changes(maturity=75, fam_name="Solanaceae"))
    tomato_crop.merge(_build_changes(maturity=80))

    assert tomato_crop.changed_properties == [CropProperty.MATURITY]
