"""JSON data cache read/write helpers."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Sequence

from kd_pipeline.maybe import maybe_from_json
from kd_pipeline.models import PageRecord
from kd_pipeline.validation import CACHED_PAGE_SHAPE, validate_page_mapping


def write_records_json(records: Sequence[PageRecord], output_path: Path) -> None:
    """Write accepted records as a JSON array, keeping non-ASCII text readable.

    Only the freeform ``components`` text is written; ``component_parts`` stays
    in memory.

    Args:
        records: Accepted records in output order.
        output_path: Destination JSON file path.
    """

    output_path.parent.mkdir(parents=True, exist_ok=True)
    payload = [record.to_json() for record in records]
    with output_path.open("w", encoding="utf-8") as handle:
        json.dump(payload, handle, ensure_ascii=False, indent=2)
        handle.write("\n")


def _decode_record(item: Any) -> Any:
    if not isinstance(item, dict):
        return item
    decoded = dict(item)
    if isinstance(decoded.get("onyomi"), dict):
        decoded["onyomi"] = maybe_from_json(decoded["onyomi"])
    return decoded


def read_records_json(input_path: Path) -> list[PageRecord]:
    """Read a JSON data cache back into validated records.

    Raises:
        FileNotFoundError: If ``input_path`` does not exist.
        ValueError: If the file is not a JSON array.
        StructuralDefectError: If any record does not match the page shape.
    """

    if not input_path.exists():
        raise FileNotFoundError(f"Data cache not found: {input_path}")

    with input_path.open("r", encoding="utf-8") as handle:
        payload = json.load(handle)

    if not isinstance(payload, list):
        raise ValueError(f"Expected a JSON array in {input_path}")
    return [validate_page_mapping(_decode_record(item), CACHED_PAGE_SHAPE) for item in payload]
