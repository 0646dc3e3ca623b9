"""Records: fixed tables of datums with identity and reconciliation.

A record is built blank by its kind, populated by explicit ``set`` calls,
inheritance or a bulk load, and compared or reconciled against another record
of the same kind with :meth:`Record.diff`, :meth:`Record.inherit_from` and
:meth:`Record.merge`.
"""

from __future__ import annotations

from typing import Any, Iterator

from loguru import logger

from src.core.datum import (
    BLANK_INT,
    Datum,
    DatumState,
    FieldType,
    format_float,
    format_int,
    parse_float,
    parse_int,
)
from src.core.kinds import ALL_PROPERTIES, PROP_COMMON_ID, PROP_ID, RecordKind

BATCH_DIFF_ID = 1


class RecordIterator:
    """Forward-only traversal of a record's populated field slots.

    Yields datums for property numbers ``0 .. kind.last_valid_property()`` in
    ascending order, skipping absent slots and properties hidden by the
    kind's display filter. Create a fresh iterator for every traversal; the
    record must not be mutated while one is in progress.

    Parameters
    ----------
    record : Record
        Record to traverse.
    display_only : bool, optional
        Hide fields the kind marks as not displayed.
    """

    def __init__(self, record: "Record", display_only: bool = False) -> None:
        self._record = record
        self._display_only = display_only
        self._current_prop = -1

    def __iter__(self) -> "RecordIterator":
        return self

    def __next__(self) -> Datum:
        kind = self._record.kind
        last_prop = kind.last_valid_property()
        while self._current_prop < last_prop:
            self._current_prop += 1
            if kind.ignore_this_property(self._current_prop, self._display_only):
                continue
            datum = self._record.slot(self._current_prop)
            if datum is not None:
                return datum
        raise StopIteration


class Record:
    """Ordered table of datums for one record kind.

    A record either stands for a single stored entity, identified by
    :meth:`get_id`, or for a batch of entities sharing the same field values
    (multi-record mode, entered by :meth:`set_common_ids`). In multi-record
    mode the single ID is hidden: :meth:`get_id` returns ``BLANK_INT`` and
    :meth:`set_id` does nothing.

    Parameters
    ----------
    kind : RecordKind
        Field table and behaviour of the record.
    raw_output : bool, optional
        Whether typed accessors return raw, sentinel-encoded values.

    Examples
    --------
    >>> from src.core.kinds import CROP, CropProperty
    >>> crop = CROP.new_record()
    >>> crop.set(CropProperty.CROP_NAME, "Tomato")
    >>> crop.get(CropProperty.CROP_NAME)
    'Tomato'
    >>> crop.get_int(CropProperty.MATURITY) is None
    True
    """

    # rendering helpers, kept on the record for presentation callers
    format_int = staticmethod(format_int)
    format_float = staticmethod(format_float)
    parse_int = staticmethod(parse_int)
    parse_float = staticmethod(parse_float)

    def __init__(self, kind: RecordKind, raw_output: bool = False) -> None:
        self.kind = kind
        self.raw_output = raw_output
        self.changed_properties: list[int] = []
        self._id: Datum[int] = Datum(PROP_ID, "id", FieldType.INT)
        self._common_ids: Datum[list[int]] = Datum(
            PROP_COMMON_ID, "common_ids", FieldType.INT_LIST
        )
        self._slots: list[Datum | None] = [None] * (kind.last_valid_property() + 1)
        for spec in kind.fields:
            self._slots[spec.prop] = Datum(spec.prop, spec.name, spec.field_type)

    # ---------- identity ----------

    def get_id(self) -> int:
        """Return the record ID, or ``BLANK_INT`` when unset or in batch mode."""
        if self.represents_multi:
            return BLANK_INT
        return self._id.raw_value()

    def set_id(self, record_id: int) -> None:
        """Set the record ID; ignored in multi-record mode."""
        if self.represents_multi:
            return
        self._id.set(record_id)

    @property
    def represents_multi(self) -> bool:
        """Whether the record stands for a batch of records."""
        return self._common_ids.is_not_null()

    def is_single_record(self) -> bool:
        return not self.represents_multi

    def get_common_ids(self) -> list[int]:
        """Return the IDs of the batch, or an empty list for a single record."""
        return self._common_ids.normalized_value()

    def set_common_ids(self, ids: list[int]) -> None:
        """Record the batch IDs; a non-empty list enters multi-record mode."""
        self._common_ids.set(list(ids))

    def set_represents_single_record(self) -> None:
        """Leave multi-record mode, forgetting the batch IDs."""
        self._common_ids.set(None)

    # ---------- slot access ----------

    def slot(self, prop: int) -> Datum | None:
        """Return the field-table datum at ``prop``, ``None`` when absent."""
        if 0 <= prop < len(self._slots):
            return self._slots[prop]
        return None

    def datum(self, prop: int) -> Datum | None:
        """Return the datum for ``prop``, including identity properties.

        Unknown or out-of-range property numbers yield ``None``.
        """
        if prop == PROP_ID:
            return self._id
        if prop == PROP_COMMON_ID:
            return self._common_ids
        return self.slot(prop)

    def iterator(self, display_only: bool = False) -> RecordIterator:
        return RecordIterator(self, display_only=display_only)

    def __iter__(self) -> Iterator[Datum]:
        return RecordIterator(self)

    def set(self, prop: int, value: Any) -> None:
        """Store an explicit value, promoting the field to ``CONCRETE``."""
        if prop == PROP_ID:
            self.set_id(value)
            return
        if prop == PROP_COMMON_ID:
            self.set_common_ids(value or [])
            return
        datum = self.slot(prop)
        if datum is None:
            logger.warning(f"{self.kind.label}: ignoring write to unknown property {prop}")
            return
        datum.set(value)

    def inherit(self, prop: int, value: Any) -> None:
        """Store a value copied from a related record."""
        datum = self.slot(prop)
        if datum is None:
            logger.warning(f"{self.kind.label}: ignoring inherit of unknown property {prop}")
            return
        datum.mark_inherited(value)

    def add_changed_property(self, prop: int) -> None:
        self.changed_properties.append(prop)

    # ---------- typed accessors ----------

    def get(self, prop: int) -> Any:
        """Return the value of ``prop`` honouring :attr:`raw_output`."""
        datum = self.datum(prop)
        if datum is None:
            return None
        if self.raw_output:
            return datum.raw_value()
        return datum.normalized_value()

    def get_int(self, prop: int) -> int | None:
        return self.get(prop)

    def get_float(self, prop: int) -> float | None:
        return self.get(prop)

    def get_boolean(self, prop: int) -> Any:
        return self.get(prop)

    def get_state_of(self, prop: int) -> DatumState | None:
        datum = self.datum(prop)
        return None if datum is None else datum.state

    # ---------- calculations ----------

    def update_calculations(self, prop: int = ALL_PROPERTIES) -> None:
        """Recompute derived fields depending on ``prop``.

        Parameters
        ----------
        prop : int, optional
            Property whose dependents are refreshed; ``ALL_PROPERTIES``
            refreshes every derived field. Targets refreshed on the way count
            as changed, so derivations reading them are refreshed too.
            Concrete values are never replaced. A calculated value whose
            derivation no longer applies, e.g. after an input was blanked,
            is cleared.
        """
        changed = {prop}
        for calc in self.kind.calculations:
            if ALL_PROPERTIES not in changed and changed.isdisjoint(calc.inputs):
                continue
            target = self.slot(calc.target)
            if target is None or target.is_concrete():
                continue
            inputs = [self.datum(input_prop) for input_prop in calc.inputs]
            if any(datum is None or datum.is_null() for datum in inputs):
                value = None
            else:
                value = calc.compute(self)
            if value is None:
                if target.is_calculated():
                    logger.debug(f"Clearing stale {target.name}")
                    target.clear()
                    changed.add(calc.target)
                continue
            target.mark_calculated(value)
            changed.add(calc.target)

    def finish_up(self) -> None:
        """Bring every derived field up to date after a bulk change."""
        self.update_calculations(ALL_PROPERTIES)

    # ---------- reconciliation ----------

    @staticmethod
    def _differs(this: Datum, that: Datum) -> bool:
        # (null and that) or ((both non-null) and unequal); "and" binds tighter
        return (this.is_null() and that.is_not_null()) or (
            (this.is_not_null() and that.is_not_null())
            and this.raw_value() != that.raw_value()
        )

    def diff(self, other: "Record", delta: "Record | None" = None) -> "Record":
        """Collect the fields of ``other`` that differ from this record.

        Parameters
        ----------
        other : Record
            Record compared against, of the same kind.
        delta : Record | None, optional
            Record receiving the differing values; a blank record of this
            kind is created when omitted.

        Returns
        -------
        Record
            ``delta``. Its ID stays ``BLANK_INT`` when nothing differs;
            otherwise it is ``BATCH_DIFF_ID`` for a multi-record and this
            record's ID for a single record.
        """
        if delta is None:
            delta = self.kind.new_record()
        logger.debug(f"Calculating difference between:\n{self}\n{other}")

        diffs_exist = False
        for this_datum in self.iterator():
            that_datum = other.datum(this_datum.property_number)
            if that_datum is None or that_datum.field_type is not this_datum.field_type:
                continue
            if this_datum.is_calculated() and not that_datum.is_concrete():
                continue
            if self._differs(this_datum, that_datum):
                delta.set(that_datum.property_number, that_datum.value)
                diffs_exist = True

        if diffs_exist:
            logger.debug(f"Differences exist: {delta}")
            if self.represents_multi:
                delta.set_id(BATCH_DIFF_ID)
            else:
                delta.set_id(self.get_id())
        return delta

    def inherit_from(self, source: "Record") -> "Record":
        """Fill blank or inherited fields from ``source``.

        Only the kind's inheritable properties are considered, in order.
        Concrete values are never overwritten; previously inherited values
        are replaced by any non-null value of the new source. A source
        without an ID carries nothing to inherit.
        """
        if source.get_id() == BLANK_INT:
            return self
        logger.debug(f"{self} inheriting from {source}")

        for prop in self.kind.list_of_inheritable_properties():
            this_datum = self.datum(prop)
            that_datum = source.datum(prop)
            if this_datum is None or this_datum.is_concrete() or that_datum is None:
                continue
            if (this_datum.is_null() or this_datum.is_inherited()) and that_datum.is_not_null():
                self.inherit(prop, that_datum.value)
        return self

    def merge(self, changes: "Record") -> "Record":
        """Fold the differing values of ``changes`` into this record.

        Uses the same matching rule as :meth:`diff`; every merged field is
        set explicitly and therefore becomes ``CONCRETE``. :attr:`changed_properties`
        lists the fields changed by this merge only.
        """
        logger.debug(f"Merging records:\n{self}\n{changes}")
        self.changed_properties = []

        for this_datum in self.iterator():
            prop = this_datum.property_number
            changed_datum = changes.datum(prop)
            if changed_datum is None or changed_datum.field_type is not this_datum.field_type:
                continue
            if this_datum.is_calculated() and not changed_datum.is_concrete():
                continue
            if self._differs(this_datum, changed_datum):
                logger.debug(f"Recording difference for {this_datum.name} => {changed_datum.value!r}")
                self.set(prop, changed_datum.value)
                self.add_changed_property(prop)
        return self

    def project(self, kind: RecordKind) -> "Record":
        """Copy this record's ID and same-named fields into a record of ``kind``.

        Field states are preserved, so the projection can stand in as an
        inheritance source, e.g. a crop projected onto the planting kind.
        """
        projected = kind.new_record(raw_output=self.raw_output)
        projected.set_id(self.get_id())
        by_name = {spec.name: spec.prop for spec in kind.fields}
        for datum in self.iterator():
            prop = by_name.get(datum.name)
            if prop is None or datum.is_null():
                continue
            target = projected.slot(prop)
            if target.field_type is not datum.field_type:
                continue
            if datum.is_inherited():
                target.mark_inherited(datum.value)
            elif datum.is_calculated():
                target.mark_calculated(datum.value)
            else:
                target.set(datum.value)
        return projected

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Record):
            return NotImplemented
        if other.kind != self.kind:
            return False
        return self.diff(other).get_id() == BLANK_INT

    __hash__ = None

    # ---------- rendering ----------

    def __str__(self) -> str:
        lines = [self.kind.describe(self)]
        for datum in self.iterator():
            if datum.is_not_null():
                lines.append(f"  {datum.name} = {datum.value!r} [{datum.state.value}]")
        return "\n".join(lines)

    def __repr__(self) -> str:
        return f"<Record {self.kind.describe(self)}>"
