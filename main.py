#!/usr/bin/env python
"""
CropPlanRecords - reconcile crop and planting record tables.

Main entry point for the command line tool.

Usage
-----
    python main.py diff crop crops_a.csv crops_b.csv
    python main.py merge planting plan.csv edits.csv -o merged.csv
    python main.py inherit plantings.csv crops.csv -o filled.csv
"""

import argparse
import sys


def _configure_logging(level: str, log_file: str | None) -> None:
    from loguru import logger

    logger.remove()
    logger.add(
        sys.stderr,
        format="<green>{time:HH:mm:ss}</green> | "
               "<level>{level: <8}</level> | "
               "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
               "<level>{message}</level>",
        level=level,
    )
    if log_file:
        logger.add(log_file, level="DEBUG")


def build_parser() -> argparse.ArgumentParser:
    """Build the command line parser."""
    parser = argparse.ArgumentParser(
        description="Diff, merge and inherit crop planning records."
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to config JSON (default: ./config.json).",
    )
    commands = parser.add_subparsers(dest="command", required=True)

    diff_cmd = commands.add_parser("diff", help="Show fields that differ by id.")
    diff_cmd.add_argument("kind", choices=["crop", "planting"])
    diff_cmd.add_argument("base")
    diff_cmd.add_argument("other")

    merge_cmd = commands.add_parser("merge", help="Merge edited records by id.")
    merge_cmd.add_argument("kind", choices=["crop", "planting"])
    merge_cmd.add_argument("base")
    merge_cmd.add_argument("changes")
    merge_cmd.add_argument("-o", "--output", required=True)

    inherit_cmd = commands.add_parser(
        "inherit", help="Fill planting defaults from matching crops."
    )
    inherit_cmd.add_argument("plantings")
    inherit_cmd.add_argument("crops")
    inherit_cmd.add_argument("-o", "--output", required=True)
    return parser


def _by_id(records: list) -> dict:
    return {record.get_id(): record for record in records if record.get_id() != -1}


def _render_value(record, datum, precision: int) -> str:
    from src.core import FieldType

    if record.raw_output:
        return str(record.get(datum.property_number))
    if datum.field_type is FieldType.FLOAT:
        return record.format_float(datum.value, precision)
    if datum.field_type is FieldType.INT:
        return record.format_int(datum.value)
    return str(datum.normalized_value())


def run_diff(args, cfg) -> int:
    from src.core import get_kind
    from src.utils.record_io import load_records_csv

    kind = get_kind(args.kind)
    others = _by_id(load_records_csv(args.other, kind))
    for record_id, record in _by_id(load_records_csv(args.base, kind)).items():
        other = others.get(record_id)
        if other is None:
            continue
        delta = record.diff(other)
        delta.raw_output = cfg.display.raw_output
        if delta.get_id() == -1:
            continue
        print(kind.describe(record))
        for datum in delta.iterator(display_only=True):
            if datum.is_not_null():
                print(f"  {datum.name}: {_render_value(delta, datum, cfg.display.float_precision)}")
    return 0


def run_merge(args, cfg) -> int:
    from loguru import logger

    from src.core import get_kind
    from src.utils.record_io import load_records_csv, save_records_csv

    kind = get_kind(args.kind)
    base = load_records_csv(args.base, kind)
    changes = _by_id(load_records_csv(args.changes, kind))
    for record in base:
        edited = changes.get(record.get_id())
        if edited is None:
            continue
        record.merge(edited)
        record.finish_up()
        if record.changed_properties:
            logger.info(f"{kind.describe(record)}: {len(record.changed_properties)} fields merged")
    save_records_csv(base, args.output, kind=kind)
    return 0


def run_inherit(args, cfg) -> int:
    from src.core import CROP, PLANTING, CropProperty, PlantingProperty
    from src.utils.record_io import load_records_csv, save_records_csv

    crops = load_records_csv(args.crops, CROP)
    by_name = {
        (
            crop.datum(CropProperty.CROP_NAME).normalized_value().lower(),
            crop.datum(CropProperty.VAR_NAME).normalized_value().lower(),
        ): crop
        for crop in crops
    }
    plantings = load_records_csv(args.plantings, PLANTING)
    for planting in plantings:
        crop_name = planting.datum(PlantingProperty.CROP_NAME).normalized_value().lower()
        var_name = planting.datum(PlantingProperty.VAR_NAME).normalized_value().lower()
        source = by_name.get((crop_name, var_name)) or by_name.get((crop_name, ""))
        if source is None:
            continue
        planting.inherit_from(source.project(PLANTING))
        planting.finish_up()
    save_records_csv(plantings, args.output, kind=PLANTING)
    return 0


COMMANDS = {"diff": run_diff, "merge": run_merge, "inherit": run_inherit}


def main(argv: list[str] | None = None) -> int:
    """
    Main entry point for CropPlanRecords.

    Returns
    -------
    int
        Exit code (0 for success, non-zero for error).
    """
    from loguru import logger
    from pydantic import ValidationError

    from src.config import AppConfig
    from src.core import ParseError

    args = build_parser().parse_args(argv)
    try:
        cfg = AppConfig.load(args.config)
    except ValidationError as e:
        print(f"Invalid config: {e}", file=sys.stderr)
        return 1
    _configure_logging(cfg.log.level, cfg.log.file)

    logger.info(f"Running {args.command}")
    try:
        exit_code = COMMANDS[args.command](args, cfg)
    except (FileNotFoundError, ParseError) as e:
        logger.error(f"{args.command} failed: {e}")
        return 1

    logger.info(f"{args.command} exited with code: {exit_code}")
    return exit_code


if __name__ == "__main__":
    sys.exit(main())
