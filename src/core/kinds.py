"""Record kinds: the field tables of crop and planting records.

Each kind is a frozen value carrying its own field table, the ordered list of
properties a record may inherit from a related record, the fields hidden in
display-only traversals, and the calculations run after mutations.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import timedelta
from enum import IntEnum
from functools import cached_property
from typing import TYPE_CHECKING, Any, Callable

from src.core.datum import FieldType

if TYPE_CHECKING:
    from src.core.record import Record

ALL_PROPERTIES = -1
PROP_ID = 0
PROP_COMMON_ID = 1
BED_LENGTH_FEET = 100.0


class CropProperty(IntEnum):
    """Property numbers of crop records."""

    ID = PROP_ID
    COMMON_ID = PROP_COMMON_ID
    CROP_NAME = 2
    VAR_NAME = 3
    FAM_NAME = 4
    DESCRIPTION = 5
    MATURITY = 6
    TRANSPLANT = 7
    ROWS_P_BED = 8
    SPACE_INROW = 9
    TIME_TO_TP = 10
    FLAT_SIZE = 11
    YIELD_P_FOOT = 12
    CROP_UNIT = 13
    CROP_UNIT_VALUE = 14
    KEYWORDS = 15
    OTHER_REQ = 16
    NOTES = 17


class PlantingProperty(IntEnum):
    """Property numbers of planting records."""

    ID = PROP_ID
    COMMON_ID = PROP_COMMON_ID
    CROP_NAME = 2
    VAR_NAME = 3
    LOCATION = 4
    MATURITY = 5
    TRANSPLANT = 6
    DATE_PLANT = 7
    DATE_TP = 8
    DATE_HARVEST = 9
    DONE_PLANTING = 10
    DONE_HARVEST = 11
    ROWS_P_BED = 12
    SPACE_INROW = 13
    TIME_TO_TP = 14
    BEDS_PLANTED = 15
    ROWFT_PLANTED = 16
    PLANTS_NEEDED = 17
    YIELD_P_FOOT = 18
    TOTAL_YIELD = 19
    CROP_UNIT = 20
    NOTES = 21
    IGNORE = 22


@dataclass(frozen=True)
class FieldSpec:
    """Definition of one field slot.

    Parameters
    ----------
    prop : int
        Property number (slot index).
    name : str
        Field and storage column name.
    field_type : FieldType
        Value type of the slot.
    display : bool
        Whether display-only traversals show the field.
    """

    prop: int
    name: str
    field_type: FieldType
    display: bool = True


@dataclass(frozen=True)
class Calculation:
    """Derived field: ``target`` is recomputed when any of ``inputs`` change.

    ``compute`` receives the record and returns the new value, or ``None``
    when the derivation does not apply.
    """

    target: int
    inputs: tuple[int, ...]
    compute: Callable[["Record"], Any]


@dataclass(frozen=True)
class RecordKind:
    """Closed description of one record variant.

    Parameters
    ----------
    name : str
        Registry key, e.g. ``"crop"``.
    label : str
        Human readable label used by :meth:`describe`.
    fields : tuple[FieldSpec, ...]
        Field table in property order.
    inheritable : tuple[int, ...]
        Properties filled by ``inherit_from``, processed in this order.
    title_fields : tuple[int, ...]
        Properties shown in the one-line description.
    calculations : tuple[Calculation, ...]
        Derived fields, evaluated in order.
    """

    name: str
    label: str
    fields: tuple[FieldSpec, ...]
    inheritable: tuple[int, ...]
    title_fields: tuple[int, ...] = ()
    calculations: tuple[Calculation, ...] = ()

    def __post_init__(self) -> None:
        props = [spec.prop for spec in self.fields]
        if len(set(props)) != len(props):
            raise ValueError(f"{self.name}: duplicate property numbers")
        if any(prop in (PROP_ID, PROP_COMMON_ID) or prop < 0 for prop in props):
            raise ValueError(f"{self.name}: field table overlaps identity properties")
        if len(set(self.inheritable)) != len(self.inheritable):
            raise ValueError(f"{self.name}: inheritable properties repeat")
        unknown = set(self.inheritable) - set(props)
        if unknown:
            raise ValueError(f"{self.name}: unknown inheritable properties {sorted(unknown)}")

    @cached_property
    def _by_prop(self) -> dict[int, FieldSpec]:
        return {spec.prop: spec for spec in self.fields}

    def field(self, prop: int) -> FieldSpec | None:
        """Return the field definition for ``prop``, ``None`` when undefined."""
        return self._by_prop.get(prop)

    def last_valid_property(self) -> int:
        return max(self._by_prop)

    def list_of_inheritable_properties(self) -> list[int]:
        return list(self.inheritable)

    def ignore_this_property(self, prop: int, display_only: bool = False) -> bool:
        """Return whether a traversal should hide ``prop``."""
        spec = self.field(prop)
        return display_only and spec is not None and not spec.display

    def describe(self, record: "Record") -> str:
        """One-line description of a record of this kind."""
        if record.represents_multi:
            return f"{self.label} batch of {len(record.get_common_ids())}"
        titles = []
        for prop in self.title_fields:
            datum = record.datum(prop)
            if datum is not None and datum.is_not_null():
                titles.append(str(datum.value))
        return f"{self.label} #{record.get_id()}: {' '.join(titles) or '(blank)'}"

    def new_record(self, raw_output: bool = False) -> "Record":
        """Build a blank record of this kind (all slots unset)."""
        from src.core.record import Record

        return Record(self, raw_output=raw_output)


def _value(record: "Record", prop: int) -> Any:
    return record.datum(prop).value


def _harvest_from_planting(record: "Record") -> Any:
    # a planting date backed out of the harvest date cannot derive it again
    if record.datum(PlantingProperty.DATE_PLANT).is_calculated():
        return None
    return _value(record, PlantingProperty.DATE_PLANT) + timedelta(
        days=_value(record, PlantingProperty.MATURITY)
    )


def _planting_from_harvest(record: "Record") -> Any:
    if not record.datum(PlantingProperty.DATE_HARVEST).is_concrete():
        return None
    return _value(record, PlantingProperty.DATE_HARVEST) - timedelta(
        days=_value(record, PlantingProperty.MATURITY)
    )


def _transplant_date(record: "Record") -> Any:
    if not _value(record, PlantingProperty.TRANSPLANT):
        return None
    return _value(record, PlantingProperty.DATE_PLANT) + timedelta(
        weeks=_value(record, PlantingProperty.TIME_TO_TP)
    )


def _row_feet(record: "Record") -> float:
    beds = _value(record, PlantingProperty.BEDS_PLANTED)
    return beds * _value(record, PlantingProperty.ROWS_P_BED) * BED_LENGTH_FEET


def _plants_needed(record: "Record") -> Any:
    spacing = _value(record, PlantingProperty.SPACE_INROW)
    if spacing <= 0:
        return None
    return math.ceil(_value(record, PlantingProperty.ROWFT_PLANTED) * 12 / spacing)


def _total_yield(record: "Record") -> float:
    return _value(record, PlantingProperty.ROWFT_PLANTED) * _value(
        record, PlantingProperty.YIELD_P_FOOT
    )


_S = FieldType.STRING
_I = FieldType.INT
_F = FieldType.FLOAT
_B = FieldType.BOOLEAN
_D = FieldType.DATE

CROP = RecordKind(
    name="crop",
    label="Crop",
    fields=(
        FieldSpec(CropProperty.CROP_NAME, "crop_name", _S),
        FieldSpec(CropProperty.VAR_NAME, "var_name", _S),
        FieldSpec(CropProperty.FAM_NAME, "fam_name", _S),
        FieldSpec(CropProperty.DESCRIPTION, "description", _S),
        FieldSpec(CropProperty.MATURITY, "maturity", _I),
        FieldSpec(CropProperty.TRANSPLANT, "transplant", _B),
        FieldSpec(CropProperty.ROWS_P_BED, "rows_p_bed", _I),
        FieldSpec(CropProperty.SPACE_INROW, "space_inrow", _I),
        FieldSpec(CropProperty.TIME_TO_TP, "time_to_tp", _I),
        FieldSpec(CropProperty.FLAT_SIZE, "flat_size", _S),
        FieldSpec(CropProperty.YIELD_P_FOOT, "yield_p_foot", _F),
        FieldSpec(CropProperty.CROP_UNIT, "crop_unit", _S),
        FieldSpec(CropProperty.CROP_UNIT_VALUE, "crop_unit_value", _F),
        FieldSpec(CropProperty.KEYWORDS, "keywords", _S, display=False),
        FieldSpec(CropProperty.OTHER_REQ, "other_req", _S, display=False),
        FieldSpec(CropProperty.NOTES, "notes", _S, display=False),
    ),
    # a variety inherits from its parent crop entry
    inheritable=(
        CropProperty.FAM_NAME,
        CropProperty.DESCRIPTION,
        CropProperty.MATURITY,
        CropProperty.TRANSPLANT,
        CropProperty.ROWS_P_BED,
        CropProperty.SPACE_INROW,
        CropProperty.TIME_TO_TP,
        CropProperty.FLAT_SIZE,
        CropProperty.YIELD_P_FOOT,
        CropProperty.CROP_UNIT,
        CropProperty.CROP_UNIT_VALUE,
    ),
    title_fields=(CropProperty.CROP_NAME, CropProperty.VAR_NAME),
)

PLANTING = RecordKind(
    name="planting",
    label="Planting",
    fields=(
        FieldSpec(PlantingProperty.CROP_NAME, "crop_name", _S),
        FieldSpec(PlantingProperty.VAR_NAME, "var_name", _S),
        FieldSpec(PlantingProperty.LOCATION, "location", _S),
        FieldSpec(PlantingProperty.MATURITY, "maturity", _I),
        FieldSpec(PlantingProperty.TRANSPLANT, "transplant", _B),
        FieldSpec(PlantingProperty.DATE_PLANT, "date_plant", _D),
        FieldSpec(PlantingProperty.DATE_TP, "date_tp", _D),
        FieldSpec(PlantingProperty.DATE_HARVEST, "date_harvest", _D),
        FieldSpec(PlantingProperty.DONE_PLANTING, "done_planting", _B),
        FieldSpec(PlantingProperty.DONE_HARVEST, "done_harvest", _B),
        FieldSpec(PlantingProperty.ROWS_P_BED, "rows_p_bed", _I),
        FieldSpec(PlantingProperty.SPACE_INROW, "space_inrow", _I),
        FieldSpec(PlantingProperty.TIME_TO_TP, "time_to_tp", _I),
        FieldSpec(PlantingProperty.BEDS_PLANTED, "beds_planted", _F),
        FieldSpec(PlantingProperty.ROWFT_PLANTED, "rowft_planted", _F),
        FieldSpec(PlantingProperty.PLANTS_NEEDED, "plants_needed", _I),
        FieldSpec(PlantingProperty.YIELD_P_FOOT, "yield_p_foot", _F),
        FieldSpec(PlantingProperty.TOTAL_YIELD, "total_yield", _F),
        FieldSpec(PlantingProperty.CROP_UNIT, "crop_unit", _S),
        FieldSpec(PlantingProperty.NOTES, "notes", _S, display=False),
        FieldSpec(PlantingProperty.IGNORE, "ignore", _B, display=False),
    ),
    # a planting inherits growing defaults from its crop or variety
    inheritable=(
        PlantingProperty.MATURITY,
        PlantingProperty.TRANSPLANT,
        PlantingProperty.ROWS_P_BED,
        PlantingProperty.SPACE_INROW,
        PlantingProperty.TIME_TO_TP,
        PlantingProperty.YIELD_P_FOOT,
        PlantingProperty.CROP_UNIT,
    ),
    title_fields=(
        PlantingProperty.CROP_NAME,
        PlantingProperty.VAR_NAME,
        PlantingProperty.LOCATION,
    ),
    calculations=(
        Calculation(
            PlantingProperty.DATE_HARVEST,
            (PlantingProperty.DATE_PLANT, PlantingProperty.MATURITY),
            _harvest_from_planting,
        ),
        Calculation(
            PlantingProperty.DATE_PLANT,
            (PlantingProperty.DATE_HARVEST, PlantingProperty.MATURITY),
            _planting_from_harvest,
        ),
        Calculation(
            PlantingProperty.DATE_TP,
            (
                PlantingProperty.DATE_PLANT,
                PlantingProperty.TRANSPLANT,
                PlantingProperty.TIME_TO_TP,
            ),
            _transplant_date,
        ),
        Calculation(
            PlantingProperty.ROWFT_PLANTED,
            (PlantingProperty.BEDS_PLANTED, PlantingProperty.ROWS_P_BED),
            _row_feet,
        ),
        Calculation(
            PlantingProperty.PLANTS_NEEDED,
            (PlantingProperty.ROWFT_PLANTED, PlantingProperty.SPACE_INROW),
            _plants_needed,
        ),
        Calculation(
            PlantingProperty.TOTAL_YIELD,
            (PlantingProperty.ROWFT_PLANTED, PlantingProperty.YIELD_P_FOOT),
            _total_yield,
        ),
    ),
)

KINDS: dict[str, RecordKind] = {CROP.name: CROP, PLANTING.name: PLANTING}


def get_kind(name: str) -> RecordKind:
    """Look up a record kind by registry name.

    Raises
    ------
    ValueError
        Raised when ``name`` is not a known kind.
    """
    try:
        return KINDS[name.lower()]
    except KeyError:
        raise ValueError(f"Unknown record kind: {name}") from None
