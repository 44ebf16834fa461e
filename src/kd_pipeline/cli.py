"""CLI entrypoint for the KanjiDamage extraction pipeline.

Usage:
  kd-pipeline download [--cache-dir DIR]
  kd-pipeline extract [--cache-dir DIR] [--workers N] [--no-usage-check ...]
  kd-pipeline export [--cache-dir DIR] [--header]
"""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Sequence

from kd_pipeline.config import GateConfig, PipelineConfig
from kd_pipeline.download import download_pages
from kd_pipeline.io.csv_io import export_anki_csv
from kd_pipeline.io.json_io import read_records_json, write_records_json
from kd_pipeline.pipeline import (
    ACCEPTED,
    INCOMPLETE,
    REJECTED,
    UNREADABLE,
    PipelineResult,
    run_pipeline,
)
from kd_pipeline.reporting.report_md import build_report_md, format_integer_ranges
from kd_pipeline.validation import StructuralDefectError


def setup_logging(verbose: int) -> None:
    """Set up logging based on verbosity level."""

    if verbose == 0:
        level = logging.WARNING
    elif verbose == 1:
        level = logging.INFO
    else:
        level = logging.DEBUG

    logging.basicConfig(level=level, format="%(levelname)s:%(name)s:%(message)s")


def _format_table(headers: Sequence[str], data_rows: Sequence[Sequence[str]]) -> str:
    """Format rows as an ASCII table for terminal output.

    Args:
        headers: Table headers.
        data_rows: Row values.

    Returns:
        Monospace table string.
    """

    widths = [len(header) for header in headers]
    for row in data_rows:
        for idx, value in enumerate(row):
            widths[idx] = max(widths[idx], len(value))

    header_line = " | ".join(header.ljust(widths[idx]) for idx, header in enumerate(headers))
    separator_line = "-+-".join("-" * width for width in widths)
    body_lines = [
        " | ".join(value.ljust(widths[idx]) for idx, value in enumerate(row)) for row in data_rows
    ]
    return "\n".join([header_line, separator_line, *body_lines])


def build_arg_parser() -> argparse.ArgumentParser:
    """Construct CLI argument parser.

    Returns:
        Configured parser with ``download``, ``extract`` and ``export`` commands.
    """

    parser = argparse.ArgumentParser(
        description="Build Anki vocabulary data from KanjiDamage pages."
    )
    parser.add_argument(
        "--cache-dir",
        type=Path,
        default=Path("cache"),
        help="Directory holding html/, data.json, audit.log and CSV output.",
    )
    parser.add_argument(
        "-v", "--verbose", action="count", default=0, help="Increase log verbosity (-v, -vv)."
    )
    commands = parser.add_subparsers(dest="command", required=True)

    commands.add_parser("download", help="Download missing kanji pages into the HTML cache.")

    extract = commands.add_parser("extract", help="Extract records from cached pages into data.json.")
    extract.add_argument("--workers", type=int, default=8, help="Number of concurrent workers.")
    extract.add_argument(
        "--no-content-check",
        action="store_true",
        help="Keep records with nothing beyond headword and meaning.",
    )
    extract.add_argument(
        "--no-single-glyph-check",
        action="store_true",
        help="Keep records whose headword is longer than one character.",
    )
    extract.add_argument(
        "--no-usage-check",
        action="store_true",
        help="Keep records without onyomi, kunyomi or jukugo.",
    )

    export = commands.add_parser("export", help="Write Anki CSV files from data.json.")
    export.add_argument("--header", action="store_true", help="Write a header row in each CSV.")
    return parser


def config_from_args(args: argparse.Namespace) -> PipelineConfig:
    """Translate parsed arguments into a :class:`PipelineConfig`."""

    gate = GateConfig(
        require_content=not getattr(args, "no_content_check", False),
        require_single_glyph=not getattr(args, "no_single_glyph_check", False),
        require_usage=not getattr(args, "no_usage_check", False),
    )
    return PipelineConfig(cache_dir=args.cache_dir, workers=getattr(args, "workers", 8), gate=gate)


def _print_summary(result: PipelineResult) -> None:
    """Print outcome counts and index continuity for an extraction run."""

    rows = [
        [status, str(result.count(status))]
        for status in (ACCEPTED, REJECTED, INCOMPLETE, UNREADABLE)
    ]
    print(_format_table(["status", "pages"], rows))

    if result.missing_indexes:
        print(
            "WARNING: Missing index values "
            f"({len(result.missing_indexes)}): {format_integer_ranges(list(result.missing_indexes))}"
        )
    if result.duplicate_indexes:
        print(
            "WARNING: Duplicated index values "
            f"({len(result.duplicate_indexes)}): {format_integer_ranges(list(result.duplicate_indexes))}"
        )


def _run_extract(config: PipelineConfig) -> None:
    config.audit_path.unlink(missing_ok=True)
    try:
        result = run_pipeline(config, audit_path=config.audit_path)
    except StructuralDefectError as exc:
        raise SystemExit(f"Structural defect, aborting run:\n{exc}") from exc
    except FileNotFoundError as exc:
        raise SystemExit(str(exc)) from exc

    write_records_json(result.records, config.data_path)
    config.report_path.write_text(build_report_md(result), encoding="utf-8")

    print(f"Wrote {len(result.records)} records to {config.data_path}")
    print(f"Wrote report to {config.report_path}")
    print(f"Audit log: {config.audit_path}")
    _print_summary(result)


def _run_export(config: PipelineConfig, include_header: bool) -> None:
    try:
        records = read_records_json(config.data_path)
    except FileNotFoundError as exc:
        raise SystemExit(str(exc)) from exc
    except StructuralDefectError as exc:
        raise SystemExit(f"Structural defect in data cache:\n{exc}") from exc

    notes = export_anki_csv(
        records,
        meanings_path=config.meanings_csv_path,
        onyomis_path=config.onyomis_csv_path,
        vocabs_path=config.vocabs_csv_path,
        include_header=include_header,
    )
    print(f"Wrote {len(notes.meanings)} meaning notes to {config.meanings_csv_path}")
    print(f"Wrote {len(notes.onyomis)} onyomi notes to {config.onyomis_csv_path}")
    print(f"Wrote {len(notes.vocabs)} vocabulary notes to {config.vocabs_csv_path}")


def main(argv: Sequence[str] | None = None) -> int:
    """Run CLI workflow from arguments through artifact generation.

    Returns:
        Zero exit status on success.
    """

    parser = build_arg_parser()
    args = parser.parse_args(argv)
    setup_logging(args.verbose)
    config = config_from_args(args)

    if args.command == "download":
        written = download_pages(config.html_dir)
        print(f"Downloaded {len(written)} pages into {config.html_dir}")
    elif args.command == "extract":
        _run_extract(config)
    else:
        _run_export(config, include_header=args.header)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
