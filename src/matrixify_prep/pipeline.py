"""Run-level orchestration for the four input modes.

Each entry point decodes its input, runs the matching transform with a fresh
``Diagnostics`` channel and returns a ``PipelineResult`` holding the full
Matrixify CSV. Per-record problems end up in ``result.diagnostics``; run-level
problems raise a ``PipelineError`` subclass.
"""
from __future__ import annotations
from enum import Enum
from typing import Callable, Dict, List, Optional

from .diagnostics import Diagnostics, EventCallback
from .errors import EmptyInputError, ExtractionError, NoProcessableRecordsError, PipelineError
from .io import parse_csv_records, parse_json_records
from .models import PipelineResult
from .settings import PipelineOptions
from .transform import (
    project,
    transform_export,
    transform_extracted,
    transform_flexible,
    transform_structured,
)


class Mode(str, Enum):
    STRUCTURED = "structured"
    FLEXIBLE = "flexible"
    EXTRACTED = "extracted"
    EXPORT = "export"


Extractor = Callable[[str], Dict]

_TRANSFORMS = {
    Mode.STRUCTURED: transform_structured,
    Mode.FLEXIBLE: transform_flexible,
    Mode.EXPORT: transform_export,
}


def _finish(mode: Mode, rows: List[dict], product_count: int, diagnostics: Diagnostics) -> PipelineResult:
    if not rows:
        raise NoProcessableRecordsError("No processable product data was found in the input.")
    diagnostics.info(f"Processed {product_count} unique products into {len(rows)} rows.")
    return PipelineResult(
        mode=mode.value,
        csv_text=project(rows),
        rows=rows,
        product_count=product_count,
        diagnostics=diagnostics.events,
    )


def _run_records(mode: Mode, records: List[dict], options: Optional[PipelineOptions], diagnostics: Diagnostics) -> PipelineResult:
    records = [r for r in records if isinstance(r, dict)]
    if not records:
        raise EmptyInputError("The input contains no data rows.", stage="field")
    diagnostics.info(f"Found {len(records)} records. Starting {mode.value} processing.")
    rows, product_count = _TRANSFORMS[mode](records, options or PipelineOptions(), diagnostics)
    return _finish(mode, rows, product_count, diagnostics)


def _require_text(text: Optional[str]) -> str:
    if text is None or not text.strip():
        raise EmptyInputError("The input file is empty.", stage="file")
    return text


def process_json(text: str, options: Optional[PipelineOptions] = None, on_event: Optional[EventCallback] = None) -> PipelineResult:
    diagnostics = Diagnostics(on_event)
    records = parse_json_records(_require_text(text))
    return _run_records(Mode.STRUCTURED, records, options, diagnostics)


def process_records(records: List[dict], options: Optional[PipelineOptions] = None, on_event: Optional[EventCallback] = None) -> PipelineResult:
    return _run_records(Mode.FLEXIBLE, list(records), options, Diagnostics(on_event))


def process_csv(text: str, options: Optional[PipelineOptions] = None, on_event: Optional[EventCallback] = None) -> PipelineResult:
    diagnostics = Diagnostics(on_event)
    records = parse_csv_records(_require_text(text), diagnostics)
    return _run_records(Mode.FLEXIBLE, records, options, diagnostics)


def process_export_records(records: List[dict], options: Optional[PipelineOptions] = None, on_event: Optional[EventCallback] = None) -> PipelineResult:
    return _run_records(Mode.EXPORT, list(records), options, Diagnostics(on_event))


def process_export(text: str, options: Optional[PipelineOptions] = None, on_event: Optional[EventCallback] = None) -> PipelineResult:
    diagnostics = Diagnostics(on_event)
    records = parse_csv_records(_require_text(text), diagnostics)
    return _run_records(Mode.EXPORT, records, options, diagnostics)


def process_extracted(record: Optional[dict], options: Optional[PipelineOptions] = None, on_event: Optional[EventCallback] = None) -> PipelineResult:
    diagnostics = Diagnostics(on_event)
    return _extracted(record, options, diagnostics)


def _extracted(record: Optional[dict], options: Optional[PipelineOptions], diagnostics: Diagnostics) -> PipelineResult:
    if not record:
        raise EmptyInputError("The extracted record has no fields.", stage="field")
    rows, product_count = transform_extracted(record, options or PipelineOptions(), diagnostics)
    return _finish(Mode.EXTRACTED, rows, product_count, diagnostics)


def process_raw_text(
    raw_text: str,
    extractor: Extractor,
    options: Optional[PipelineOptions] = None,
    on_event: Optional[EventCallback] = None,
) -> PipelineResult:
    diagnostics = Diagnostics(on_event)
    raw_text = _require_text(raw_text)
    diagnostics.info("Sending product text for field extraction.", kind="extraction")
    try:
        record = extractor(raw_text)
    except PipelineError:
        raise
    except Exception as e:
        raise ExtractionError(f"Field extraction failed: {e}") from e
    if not isinstance(record, dict):
        raise ExtractionError(f"Extractor returned {type(record).__name__}, expected a mapping")
    return _extracted(record, options, diagnostics)


def run(
    mode,
    payload,
    options: Optional[PipelineOptions] = None,
    extractor: Optional[Extractor] = None,
    on_event: Optional[EventCallback] = None,
) -> PipelineResult:
    """Dispatch on ``mode``.

    ``payload`` is decoded text for every mode, or an already decoded list of
    records (flexible/export) or a single record (extracted).
    """
    mode = Mode(mode)
    if mode == Mode.STRUCTURED:
        if isinstance(payload, list):
            return _run_records(mode, payload, options, Diagnostics(on_event))
        return process_json(payload, options, on_event)
    if mode == Mode.FLEXIBLE:
        if isinstance(payload, list):
            return process_records(payload, options, on_event)
        return process_csv(payload, options, on_event)
    if mode == Mode.EXPORT:
        if isinstance(payload, list):
            return process_export_records(payload, options, on_event)
        return process_export(payload, options, on_event)
    if isinstance(payload, dict):
        return process_extracted(payload, options, on_event)
    if extractor is None:
        raise ValueError("Extracted mode with raw text requires an extractor")
    return process_raw_text(payload, extractor, options, on_event)
