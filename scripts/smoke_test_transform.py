#!/usr/bin/env python3
"""Basic smoke test for the normalization pipeline.

Runs the JSON mode on an inline sample and checks the fixed header and row
expansion. No network and no LLM calls.
"""
import json
from pathlib import Path
import sys

ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT / 'src'))

from matrixify_prep.pipeline import process_json  # type: ignore
from matrixify_prep.transform import HEADERS  # type: ignore


SAMPLE = [
    {
        "productId": "207",
        "productName": "TUXEDO",
        "brandName": "WITH A WISH",
        "mainImage": "http://x/1.jpg",
        "thumbnailImages": ["http://x/2.jpg", "http://x/1.jpg"],
    },
    {"productId": "208", "productName": "Morning Coat"},
]


def main() -> int:
    result = process_json(json.dumps(SAMPLE))
    if not result.rows:
        print("Smoke test failed: no rows produced")
        return 1
    header = result.csv_text.splitlines()[0]
    if header != ",".join(HEADERS):
        print(f"Smoke test failed: unexpected header {header}")
        return 1
    print(f"Smoke test ok: {result.row_count} rows for {result.product_count} products")
    print("Headers:", HEADERS)
    return 0


if __name__ == '__main__':
    raise SystemExit(main())
