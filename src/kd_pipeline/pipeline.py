"""Top-level orchestration: extract, validate and gate every cached page."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
import logging
from pathlib import Path
from typing import Sequence

from kd_pipeline.audit import HEURISTIC, AuditEvent, AuditTrail, append_audit_lines
from kd_pipeline.builder import build_page_record
from kd_pipeline.config import PipelineConfig
from kd_pipeline.document.query import DOCUMENT_READ_ERRORS, PageDocument, load_html
from kd_pipeline.heuristics import apply_gate, enabled_checks
from kd_pipeline.maybe import Absent, Maybe, Present
from kd_pipeline.models import PageRecord
from kd_pipeline.validation import duplicate_indexes, missing_indexes, validate_page_mapping

logger = logging.getLogger(__name__)

ACCEPTED = "accepted"
REJECTED = "rejected"
INCOMPLETE = "incomplete"
UNREADABLE = "unreadable"


@dataclass(frozen=True)
class DocumentOutcome:
    """What happened to one input page.

    Attributes:
        source: Page identifier (file path).
        position: Discovery position, used to break index ties.
        status: One of ``accepted``, ``rejected``, ``incomplete``, ``unreadable``.
        record: Accepted record, or ``Absent``.
        events: Audit events raised while processing the page.
    """

    source: str
    position: int
    status: str
    record: Maybe[PageRecord]
    events: tuple[AuditEvent, ...]


@dataclass(frozen=True)
class PipelineResult:
    """Result bundle returned by :func:`run_pipeline`.

    Attributes:
        records: Accepted records sorted by index, ties in discovery order.
        outcomes: Per-page outcomes in discovery order.
        missing_indexes: Gaps in the accepted index range.
        duplicate_indexes: Indexes claimed by several accepted records.
    """

    records: tuple[PageRecord, ...]
    outcomes: tuple[DocumentOutcome, ...]
    missing_indexes: tuple[int, ...]
    duplicate_indexes: tuple[int, ...]

    def count(self, status: str) -> int:
        return sum(1 for outcome in self.outcomes if outcome.status == status)

    @property
    def events(self) -> tuple[AuditEvent, ...]:
        return tuple(event for outcome in self.outcomes for event in outcome.events)


def process_page(
    page: PageDocument, config: PipelineConfig, audit: AuditTrail
) -> Maybe[PageRecord]:
    """Build, validate and gate one parsed page.

    Raises:
        StructuralDefectError: If the built record does not match its shape.
    """

    return (
        build_page_record(page, config.alphabet, audit)
        .map(validate_page_mapping)
        .and_then(lambda record: apply_gate(record, audit, enabled_checks(config.gate)))
    )


def process_document(path: Path, position: int, config: PipelineConfig) -> DocumentOutcome:
    """Read one cached page and run it through :func:`process_page`.

    A page that cannot be read or parsed is audited and skipped rather than raised.
    """

    audit = AuditTrail(source=str(path))
    try:
        page = load_html(path)
    except DOCUMENT_READ_ERRORS as exc:
        audit.required(f"{path}: unreadable document ({exc})")
        return DocumentOutcome(str(path), position, UNREADABLE, Absent(), tuple(audit.events))

    record = process_page(page, config, audit)
    if isinstance(record, Present):
        status = ACCEPTED
    elif audit.events and audit.events[-1].tag == HEURISTIC:
        status = REJECTED
    else:
        status = INCOMPLETE
    return DocumentOutcome(str(path), position, status, record, tuple(audit.events))


def discover_pages(html_dir: Path) -> list[Path]:
    """List cached pages in a stable (sorted) order.

    Raises:
        FileNotFoundError: If ``html_dir`` does not exist.
    """

    if not html_dir.is_dir():
        raise FileNotFoundError(f"HTML cache directory not found: {html_dir}")
    return sorted(path for path in html_dir.iterdir() if path.is_file() and path.suffix == ".html")


def sort_records(outcomes: Sequence[DocumentOutcome]) -> list[PageRecord]:
    """Accepted records ordered by index, ties broken by discovery position."""

    accepted = [
        (outcome.record.value, outcome.position)
        for outcome in outcomes
        if isinstance(outcome.record, Present)
    ]
    accepted.sort(key=lambda item: (item[0].index, item[1]))
    return [record for record, _ in accepted]


def run_pipeline(
    config: PipelineConfig,
    paths: Sequence[Path] | None = None,
    audit_path: Path | None = None,
) -> PipelineResult:
    """Process every page concurrently and collect accepted records.

    Args:
        config: Run configuration; ``config.workers`` bounds the thread pool.
        paths: Pages to process; defaults to the sorted HTML cache listing.
        audit_path: File receiving audit lines as pages finish; ``None`` skips it.

    Returns:
        ``PipelineResult`` with sorted records and per-page outcomes.

    Raises:
        StructuralDefectError: If any built record is structurally invalid. The
            remaining queued pages are cancelled.
    """

    pages = list(paths) if paths is not None else discover_pages(config.html_dir)
    logger.info("Processing %d pages with %d workers", len(pages), config.workers)

    outcomes: list[DocumentOutcome] = []
    with ThreadPoolExecutor(max_workers=max(1, config.workers)) as executor:
        futures = [
            executor.submit(process_document, path, position, config)
            for position, path in enumerate(pages)
        ]
        try:
            for future in as_completed(futures):
                outcome = future.result()
                if audit_path is not None:
                    append_audit_lines(audit_path, outcome.events)
                logger.debug("%s: %s", outcome.source, outcome.status)
                outcomes.append(outcome)
        except BaseException:
            for future in futures:
                future.cancel()
            raise

    outcomes.sort(key=lambda outcome: outcome.position)
    records = sort_records(outcomes)
    return PipelineResult(
        records=tuple(records),
        outcomes=tuple(outcomes),
        missing_indexes=tuple(missing_indexes(records)),
        duplicate_indexes=tuple(duplicate_indexes(records)),
    )
