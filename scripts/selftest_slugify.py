#!/usr/bin/env python3
"""Self-test for handle generation helpers.

No network required. Validates deterministic behavior of the slug functions.
"""
from pathlib import Path
import sys

ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT / 'src'))

from matrixify_prep.normalize import slugify, slugify_cjk  # type: ignore
from matrixify_prep.transform import extracted_handle  # type: ignore


def main() -> int:
    assert slugify('D747 Satin Twill Dress - Burgundy') == 'd747-satin-twill-dress-burgundy'
    assert slugify('Crème Brûlée & Co.') == 'creme-brulee-and-co'
    assert slugify(slugify('Crème Brûlée & Co.')) == 'creme-brulee-and-co'
    # Latin variant drops CJK entirely; the relaxed one keeps it
    assert slugify('ドレス') == ''
    assert slugify_cjk('ドレス Black') == 'ドレス-black'
    assert extracted_handle('', '') == 'product'
    print('Self-test ok: slugify, slugify_cjk and extracted_handle pass basic checks')
    return 0


if __name__ == '__main__':
    raise SystemExit(main())
