"""Record core: datums with provenance, record kinds and reconciliation."""

from src.core.batch import apply_batch_changes, build_batch_record
from src.core.datum import (
    BLANK_DATE,
    BLANK_FLOAT,
    BLANK_INT,
    Datum,
    DatumState,
    FieldType,
    TriState,
    format_float,
    format_int,
    parse_float,
    parse_int,
)
from src.core.errors import ParseError
from src.core.kinds import (
    ALL_PROPERTIES,
    CROP,
    PLANTING,
    PROP_COMMON_ID,
    PROP_ID,
    CropProperty,
    FieldSpec,
    PlantingProperty,
    RecordKind,
    get_kind,
)
from src.core.record import BATCH_DIFF_ID, Record, RecordIterator

__all__ = [
    "ALL_PROPERTIES",
    "BATCH_DIFF_ID",
    "BLANK_DATE",
    "BLANK_FLOAT",
    "BLANK_INT",
    "CROP",
    "CropProperty",
    "Datum",
    "DatumState",
    "FieldSpec",
    "FieldType",
    "PLANTING",
    "PROP_COMMON_ID",
    "PROP_ID",
    "ParseError",
    "PlantingProperty",
    "Record",
    "RecordIterator",
    "RecordKind",
    "TriState",
    "apply_batch_changes",
    "build_batch_record",
    "format_float",
    "format_int",
    "get_kind",
    "parse_float",
    "parse_int",
]
