"""Tests for multi-record batch editing."""

from __future__ import annotations

import pytest

from src.core import (
    BATCH_DIFF_ID,
    BLANK_INT,
    CROP,
    PLANTING,
    CropProperty,
    Record,
    apply_batch_changes,
    build_batch_record,
)


def _build_lettuce(record_id: int, variety: str) -> Record:
    """Build a lettuce crop with a 50 day maturity."""
    crop = CROP.new_record()
    crop.set_id(record_id)
    crop.set(CropProperty.CROP_NAME, "Lettuce")
    crop.set(CropProperty.VAR_NAME, variety)
    crop.set(CropProperty.MATURITY, 50)
    return crop


def test_batch_keeps_shared_values_only() -> None:
    """Fields identical across members become concrete batch values."""
    records = [_build_lettuce(1, "Romaine"), _build_lettuce(2, "Butterhead")]

    batch = build_batch_record(records)

    assert batch.represents_multi
    assert batch.get_id() == BLANK_INT
    assert batch.get_common_ids() == [1, 2]
    assert batch.get(CropProperty.CROP_NAME) == "Lettuce"
    assert batch.get(CropProperty.MATURITY) == 50
    assert batch.datum(CropProperty.VAR_NAME).is_null()


def test_batch_rejects_empty_and_mixed_input() -> None:
    """A batch needs members of a single kind."""
    with pytest.raises(ValueError):
        build_batch_record([])
    with pytest.raises(ValueError):
        build_batch_record([_build_lettuce(1, "Romaine"), PLANTING.new_record()])


def test_batch_diff_reports_batch_marker() -> None:
    """Edits to a batch diff with the generic batch id."""
    records = [_build_lettuce(1, "Romaine"), _build_lettuce(2, "Butterhead")]
    batch = build_batch_record(records)
    edited = build_batch_record(records)
    edited.set(CropProperty.MATURITY, 55)

    delta = batch.diff(edited)

    assert delta.get_id() == BATCH_DIFF_ID
    assert delta.get(CropProperty.MATURITY) == 55


def test_apply_batch_changes_updates_every_member() -> None:
    """Batch edits reach each member without touching their own values."""
    records = [_build_lettuce(1, "Romaine"), _build_lettuce(2, "Butterhead")]
    changes = build_batch_record(records)
    changes.set(CropProperty.MATURITY, 55)

    apply_batch_changes(changes, records)

    assert [r.get(CropProperty.MATURITY) for r in records] == [55, 55]
    assert [r.get(CropProperty.VAR_NAME) for r in records] == ["Romaine", "Butterhead"]
    assert all(r.get_id() in (1, 2) for r in records)
