"""pandas helpers mapping records to and from tables.

This is the only place where the legacy sentinel encoding of blank values
(``-1``, ``-1.0``, epoch-zero dates, ...) is written out; reading accepts both
sentinels and missing cells as blank.
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Any, Sequence

import pandas as pd
from loguru import logger

from src.core.datum import BLANK_INT
from src.core.kinds import RecordKind
from src.core.record import Record

ID_COLUMN = "id"


def _is_missing(cell: Any) -> bool:
    """Return whether a table cell holds no value."""
    return cell is None or (pd.api.types.is_scalar(cell) and bool(pd.isna(cell)))


def _to_cell(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    return value


def table_columns(kind: RecordKind) -> list[str]:
    """Return the table columns of ``kind``: ``id`` then fields in property order."""
    return [ID_COLUMN] + [spec.name for spec in sorted(kind.fields, key=lambda s: s.prop)]


def records_to_dataframe(
    records: Sequence[Record],
    kind: RecordKind | None = None,
    encode_sentinels: bool = True,
) -> pd.DataFrame:
    """Convert records to a table, one row per record.

    Parameters
    ----------
    records : Sequence[Record]
        Records of a single kind.
    kind : RecordKind | None, optional
        Kind defining the columns; taken from the first record when omitted.
    encode_sentinels : bool, optional
        Write blank values as their legacy sentinel instead of ``None``.

    Returns
    -------
    pandas.DataFrame
        Object-typed table with the columns of :func:`table_columns`.

    Raises
    ------
    ValueError
        Raised when ``records`` is empty and no ``kind`` is given.
    """
    if kind is None:
        if not records:
            raise ValueError("A kind is required to tabulate no records")
        kind = records[0].kind
    columns = table_columns(kind)

    rows = []
    for record in records:
        record_id = record.get_id()
        if not encode_sentinels and record_id == BLANK_INT:
            record_id = None
        row: dict[str, Any] = {ID_COLUMN: record_id}
        for spec in kind.fields:
            datum = record.slot(spec.prop)
            value = datum.raw_value() if encode_sentinels else datum.value
            row[spec.name] = _to_cell(value)
        rows.append(row)

    if not rows:
        return pd.DataFrame(columns=columns, dtype=object)
    return pd.DataFrame(rows, columns=columns, dtype=object)


def records_from_dataframe(table: pd.DataFrame, kind: RecordKind) -> list[Record]:
    """Load records from a table.

    Parameters
    ----------
    table : pandas.DataFrame
        Table with an optional ``id`` column and field-name columns.
    kind : RecordKind
        Kind of the records to build.

    Returns
    -------
    list[Record]
        One record per row. Missing and sentinel cells stay unset, other
        cells become concrete values; derived fields are calculated.

    Raises
    ------
    ParseError
        Raised when a cell holds malformed text for its field type.
    """
    specs = {spec.name: spec for spec in kind.fields}
    unknown = [col for col in table.columns if col != ID_COLUMN and col not in specs]
    if unknown:
        logger.debug(f"Ignoring unknown {kind.name} columns: {unknown}")

    records = []
    for row in table.to_dict(orient="records"):
        record = kind.new_record()
        record_id = row.get(ID_COLUMN)
        if not _is_missing(record_id):
            record.set_id(record_id)
        for name, spec in specs.items():
            cell = row.get(name)
            if _is_missing(cell):
                continue
            value = spec.field_type.coerce(cell)
            if value is None:
                continue
            record.set(spec.prop, value)
        record.finish_up()
        records.append(record)

    logger.debug(f"Loaded {len(records)} {kind.name} records")
    return records


def save_records_csv(
    records: Sequence[Record],
    output_path: str | Path,
    kind: RecordKind | None = None,
) -> Path:
    """Write records to a CSV file, creating parent folders.

    Returns
    -------
    pathlib.Path
        Written file path.
    """
    path_obj = Path(output_path)
    path_obj.parent.mkdir(parents=True, exist_ok=True)
    records_to_dataframe(records, kind=kind).to_csv(path_obj, index=False)
    logger.info(f"Saved {len(records)} records to {path_obj}")
    return path_obj


def load_records_csv(input_path: str | Path, kind: RecordKind) -> list[Record]:
    """Read records of ``kind`` from a CSV file.

    Raises
    ------
    FileNotFoundError
        Raised when the file does not exist.
    """
    path_obj = Path(input_path)
    if not path_obj.exists():
        raise FileNotFoundError(f"Record file not found: {path_obj}")
    table = pd.read_csv(path_obj, dtype=str)
    return records_from_dataframe(table, kind)
