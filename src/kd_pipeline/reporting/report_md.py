"""Markdown report generation for extraction run summaries."""

from __future__ import annotations

from collections import Counter
from typing import Iterable, Sequence

from kd_pipeline.audit import HEURISTIC, REQUIRED
from kd_pipeline.pipeline import ACCEPTED, INCOMPLETE, REJECTED, UNREADABLE, PipelineResult


def _markdown_table(headers: Sequence[str], rows: Iterable[Sequence[str]]) -> str:
    """Render a deterministic GitHub-flavored markdown table.

    Args:
        headers: Table header labels.
        rows: Table body rows as string sequences.

    Returns:
        Markdown table text.
    """

    line_header = "| " + " | ".join(headers) + " |"
    line_sep = "| " + " | ".join("---" for _ in headers) + " |"
    body = ["| " + " | ".join(cell.replace("|", "\\|") for cell in row) + " |" for row in rows]
    return "\n".join([line_header, line_sep, *body])


def format_integer_ranges(values: Sequence[int]) -> str:
    """Format sorted integers as compact ranges like ``3-5, 8, 10-12``."""

    if not values:
        return ""

    ranges: list[str] = []
    start = values[0]
    prev = values[0]

    for value in values[1:]:
        if value == prev + 1:
            prev = value
            continue
        ranges.append(f"{start}-{prev}" if start != prev else str(start))
        start = value
        prev = value

    ranges.append(f"{start}-{prev}" if start != prev else str(start))
    return ", ".join(ranges)


def build_report_md(result: PipelineResult) -> str:
    """Build the extraction markdown report for one pipeline run.

    Args:
        result: Pipeline result with outcomes and accepted records.

    Returns:
        Full markdown content with summary tables.
    """

    status_rows = [
        (status, str(result.count(status)))
        for status in (ACCEPTED, REJECTED, INCOMPLETE, UNREADABLE)
    ]

    star_counts = Counter(record.stars for record in result.records)
    star_rows = [(str(stars), str(star_counts[stars])) for stars in sorted(star_counts)]

    def audit_rows(tag: str) -> list[tuple[str, str]]:
        return [
            (outcome.source, event.message)
            for outcome in result.outcomes
            for event in outcome.events
            if event.tag == tag
        ]

    sections = [
        "# Extraction Report",
        "",
        "## Pages by outcome",
        _markdown_table(["status", "page_count"], status_rows),
        "",
        "## Accepted records by usefulness",
        _markdown_table(["stars", "record_count"], star_rows),
        "",
        "## Index continuity",
        f"- missing: {format_integer_ranges(list(result.missing_indexes)) or 'none'}",
        f"- duplicated: {format_integer_ranges(list(result.duplicate_indexes)) or 'none'}",
        "",
        "## Missing required fields",
        _markdown_table(["source", "message"], audit_rows(REQUIRED)),
        "",
        "## Heuristic rejections",
        _markdown_table(["source", "message"], audit_rows(HEURISTIC)),
    ]

    return "\n".join(sections) + "\n"
