"""Utility package exports for CropPlanRecords."""

from src.utils.record_io import (
    load_records_csv,
    records_from_dataframe,
    records_to_dataframe,
    save_records_csv,
    table_columns,
)

__all__ = [
    "load_records_csv",
    "records_from_dataframe",
    "records_to_dataframe",
    "save_records_csv",
    "table_columns",
]
