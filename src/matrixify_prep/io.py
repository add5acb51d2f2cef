from __future__ import annotations
import csv
import json
import numbers
from io import StringIO
from pathlib import Path
from typing import Iterable, List, Optional

from .diagnostics import Diagnostics
from .errors import CsvParseWarning, MalformedInputError


def parse_json_records(text: str) -> list:
    """Decode a structured export: a top-level array, or an object whose
    ``data`` field is the array of products."""
    try:
        payload = json.loads(text)
    except json.JSONDecodeError as e:
        raise MalformedInputError(f"Invalid JSON file: {e}") from e
    if isinstance(payload, dict):
        payload = payload.get("data")
    if not isinstance(payload, list):
        raise MalformedInputError('No product array found in the JSON (expected a list or a "data" array).')
    return [p for p in payload if isinstance(p, dict)]


def parse_csv_records(text: str, diagnostics: Optional[Diagnostics] = None) -> list:
    """Read header-keyed rows, skipping fully blank lines.

    Rows with too many or too few cells are kept (extras dropped, missing
    cells blank) and reported as parse warnings.
    """
    text = text.lstrip("\ufeff")
    reader = csv.DictReader(StringIO(text, newline=""))
    if not reader.fieldnames:
        return []
    rows: list = []
    for raw in reader:
        extra = raw.pop(None, None)
        short = any(v is None for v in raw.values())
        d = {k: ("" if v is None else v) for k, v in raw.items() if k is not None}
        if not any(str(v).strip() for v in d.values()):
            continue
        if (extra or short) and diagnostics is not None:
            diagnostics.warn(
                CsvParseWarning,
                f"Row {reader.line_num} has {'too many' if extra else 'too few'} fields",
                row=len(rows) + 1,
            )
        rows.append(d)
    return rows


def _val_to_str(v) -> str:
    # Normalize Excel numeric cells: 5225.0 -> '5225'
    if isinstance(v, bool):
        return "TRUE" if v else "FALSE"
    if isinstance(v, numbers.Number):
        if float(v).is_integer():
            return str(int(v))
        return str(v)
    return "" if v is None else str(v)


def _read_rows_xlsx(input_path: Path) -> list:
    from openpyxl import load_workbook

    wb = load_workbook(filename=str(input_path), read_only=True, data_only=True)
    all_rows: list = []
    try:
        for ws in wb.worksheets:
            sheet_rows = [[_val_to_str(v) for v in row] for row in ws.iter_rows(values_only=True)]
            header: list = []
            start = 0
            for i, row in enumerate(sheet_rows):
                if any(c.strip() for c in row):
                    header = [c.strip() for c in row]
                    start = i + 1
                    break
            if not header:
                continue
            for raw in sheet_rows[start:]:
                if not any(c.strip() for c in raw):
                    continue
                d = {}
                for i, name in enumerate(header):
                    if not name:
                        continue
                    d[name] = raw[i].strip() if i < len(raw) else ""
                all_rows.append(d)
    finally:
        wb.close()
    return all_rows


def read_text(input_path: Path) -> str:
    return input_path.read_text(encoding="utf-8-sig")


def read_any_rows(input_path: Path, diagnostics: Optional[Diagnostics] = None) -> list:
    ext = input_path.suffix.lower()
    if ext == ".json":
        return parse_json_records(read_text(input_path))
    if ext in (".xlsx", ".xlsm", ".xltx", ".xltm"):
        return _read_rows_xlsx(input_path)
    # default try CSV
    return parse_csv_records(read_text(input_path), diagnostics)


def format_cell(value) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    return str(value)


def project_rows(rows: Iterable[dict], fieldnames: List[str]) -> str:
    """Serialize rows under a fixed header; absent columns become empty fields."""
    out = StringIO(newline="")
    writer = csv.DictWriter(out, fieldnames=fieldnames, restval="", extrasaction="ignore", lineterminator="\r\n")
    writer.writeheader()
    for r in rows:
        writer.writerow({k: format_cell(r.get(k)) for k in fieldnames})
    return out.getvalue()


def write_matrixify_csv(output_path: Path, csv_text: str) -> None:
    # BOM so spreadsheet apps detect UTF-8 for Japanese text.
    with output_path.open("w", newline="", encoding="utf-8-sig") as f:
        f.write(csv_text)
