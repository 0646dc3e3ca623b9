"""Bulk editing through multi-record batches."""

from __future__ import annotations

from typing import Sequence

from loguru import logger

from src.core.record import Record


def build_batch_record(records: Sequence[Record]) -> Record:
    """Build a multi-record standing for ``records``.

    Parameters
    ----------
    records : Sequence[Record]
        Single records of one kind.

    Returns
    -------
    Record
        Blank record of the shared kind holding, as concrete values, every
        field whose non-null value is identical across ``records``. Its
        common IDs are the records' IDs.

    Raises
    ------
    ValueError
        Raised when ``records`` is empty or mixes kinds.
    """
    if not records:
        raise ValueError("Cannot build a batch from no records")
    kind = records[0].kind
    if any(record.kind != kind for record in records):
        raise ValueError("Cannot build a batch from records of different kinds")

    batch = kind.new_record()
    first, rest = records[0], records[1:]
    for datum in first.iterator():
        if datum.is_null():
            continue
        shared = all(
            other.datum(datum.property_number).is_not_null()
            and other.datum(datum.property_number).raw_value() == datum.raw_value()
            for other in rest
        )
        if shared:
            batch.set(datum.property_number, datum.value)
    batch.set_common_ids([record.get_id() for record in records])
    logger.debug(f"Built {kind.label.lower()} batch for ids {batch.get_common_ids()}")
    return batch


def apply_batch_changes(changes: Record, records: Sequence[Record]) -> Sequence[Record]:
    """Merge ``changes`` into every record and refresh their calculations."""
    for record in records:
        record.merge(changes)
        record.finish_up()
    logger.info(f"Applied batch changes to {len(records)} records")
    return records
