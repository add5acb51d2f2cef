from __future__ import annotations
import argparse
import json
import logging
from dataclasses import replace
from pathlib import Path
from typing import List, Optional

from .errors import MalformedInputError, PipelineError
from .extract import make_extractor
from .io import read_any_rows, read_text, write_matrixify_csv
from .pipeline import Mode, run
from .settings import ExtractorConfig, PipelineOptions, load_env_file, load_settings


log = logging.getLogger(__name__)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    env_only = argparse.ArgumentParser(add_help=False)
    env_only.add_argument("--env-file", default=None, help="Path to .env file (default: .env in the working directory when present)")

    p = argparse.ArgumentParser(
        description="Normalize product exports into a Matrixify (Shopify) import CSV.",
        parents=[env_only],
    )
    p.add_argument("--mode", required=True, choices=[m.value for m in Mode], help="Input mode")
    p.add_argument("--input", required=True, help="Input file (.json, .csv, .xlsx, or raw text for extracted mode)")
    p.add_argument("--output", required=True, help="Path to output Matrixify CSV")
    p.add_argument("--settings", default="", help="JSON settings file merged over the defaults")
    p.add_argument("--vendor", default="", help="Vendor used when a record has none")
    p.add_argument("--no-variant-image", action="store_true", help="Flexible mode: leave Variant Image blank")
    p.add_argument("-v", "--verbose", action="count", default=0, help="-v for info, -vv for debug")
    return p.parse_args(argv)


def _load_payload(mode: Mode, path: Path):
    if mode == Mode.EXTRACTED:
        if path.suffix.lower() == ".json":
            try:
                return json.loads(read_text(path))
            except json.JSONDecodeError as e:
                raise MalformedInputError(f"Invalid JSON file: {e}") from e
        return read_text(path)
    if mode in (Mode.FLEXIBLE, Mode.EXPORT) and path.suffix.lower() == ".json":
        return read_any_rows(path)
    if path.suffix.lower() in (".xlsx", ".xlsm", ".xltx", ".xltm"):
        return read_any_rows(path)
    return read_text(path)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    level = logging.WARNING
    if args.verbose == 1:
        level = logging.INFO
    elif args.verbose >= 2:
        level = logging.DEBUG
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(message)s")

    load_env_file(args.env_file)
    settings = load_settings(Path(args.settings) if args.settings else None)
    options = PipelineOptions.from_env(settings)
    overrides = {}
    if args.vendor:
        overrides["vendor_fallback"] = args.vendor
    if args.no_variant_image:
        overrides["variant_image_from_main"] = False
    if overrides:
        options = replace(options, **overrides)

    mode = Mode(args.mode)
    input_path = Path(args.input)
    if not input_path.exists():
        log.error(f"Input not found: {input_path}")
        return 2

    extractor = make_extractor(ExtractorConfig.from_env()) if mode == Mode.EXTRACTED else None
    try:
        payload = _load_payload(mode, input_path)
        result = run(mode, payload, options=options, extractor=extractor)
    except PipelineError as e:
        log.error(f"{type(e).__name__}: {e}")
        return 2

    output_path = Path(args.output)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    write_matrixify_csv(output_path, result.csv_text)
    skipped = len(result.warnings())
    print(f"Wrote {result.row_count} rows ({result.product_count} products, {skipped} warnings) to {output_path}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
