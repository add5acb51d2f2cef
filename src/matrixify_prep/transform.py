from __future__ import annotations
from typing import Callable, Dict, Iterable, Iterator, List, Optional, Tuple

from .describe import build_body_html, build_body_paragraphs, build_tags
from .diagnostics import Diagnostics
from .errors import (
    DuplicateKeyWarning,
    HandleGenerationWarning,
    MissingBusinessKeyWarning,
    MissingHandleWarning,
)
from .io import project_rows
from .mapping import (
    EXTRACTED_COLUMN_MAP,
    FLEXIBLE_COLUMN_MAP,
    STRUCTURED_COLUMN_MAP,
    product_from_record,
    resolve_field,
)
from .models import CanonicalProduct
from .normalize import clean_price, slugify, slugify_cjk
from .settings import PipelineOptions


HEADERS = [
    "Handle",
    "Title",
    "Vendor",
    "Published",
    "Body (HTML)",
    "Tags",
    "Image Src",
    "Variant Image",
    "Image Position",
    "Option1 Name",
    "Option1 Value",
    "Variant SKU",
    "Variant Price",
    "Variant Grams",
    "Variant Inventory Qty",
    "Variant Requires Shipping",
    "Variant Taxable",
    "Gift Card",
]

# Spreadsheet exports leave these blank on rows that repeat the row above.
FORWARD_FILL_COLUMNS = ["Title", "Vendor", "Option1 Name"]

EXPORT_DEFAULTS: Dict[str, str] = {
    "Vendor": "Your-Store",
    "Published": "TRUE",
    "Option1 Name": "Title",
    "Option1 Value": "Default Title",
    "Variant Grams": "0",
    "Variant Inventory Policy": "deny",
    "Variant Fulfillment Service": "manual",
    "Variant Inventory Qty": "0",
    "Variant Price": "0",
    "Variant Requires Shipping": "TRUE",
    "Variant Taxable": "TRUE",
    "Gift Card": "FALSE",
    "Body (HTML)": "",
    "Tags": "",
}

Row = Dict[str, object]


def _blank(val) -> bool:
    return val is None or str(val).strip() == ""


def primary_row(
    product: CanonicalProduct,
    handle: str,
    title: str,
    body_html: str,
    tags: str,
    options: PipelineOptions,
    option1_name: Optional[str] = None,
    option1_value: Optional[str] = None,
) -> Row:
    return {
        "Handle": handle,
        "Title": title,
        "Body (HTML)": body_html,
        "Vendor": product.vendor.strip() or options.vendor_fallback,
        "Tags": tags,
        "Published": True,
        "Option1 Name": option1_name or options.option1_name,
        "Option1 Value": option1_value or product.size.strip() or options.option1_value_default,
        "Variant SKU": product.id,
        "Variant Price": clean_price(product.price) or options.default_price,
        "Variant Grams": options.default_grams,
        "Variant Inventory Qty": options.default_qty,
        "Variant Requires Shipping": True,
        "Variant Taxable": True,
        "Gift Card": False,
    }


def expand_product(
    product: CanonicalProduct,
    base: Row,
    variant_image: bool = False,
    include_images: bool = True,
) -> List[Row]:
    """Primary row followed by one continuation row per extra image.

    With ``include_images=False`` only the primary row is produced; it is
    used for further variants of a product whose images were already
    emitted.
    """
    row = dict(base)
    images = product.image_list()
    if variant_image:
        row["Variant Image"] = images[0] if images else ""
    if not include_images or not images:
        return [row]

    row["Image Src"] = images[0]
    row["Image Position"] = 1
    rows = [row]
    for pos, url in enumerate(images[1:], start=2):
        rows.append({"Handle": base["Handle"], "Image Src": url, "Image Position": pos})
    return rows


def dedupe_records(
    records: Iterable[dict],
    key_fn: Callable[[dict], Optional[str]],
    diagnostics: Diagnostics,
) -> Iterator[Tuple[int, dict, str]]:
    """Yield ``(row_number, record, key)`` for the first record of each key.

    Records with a blank key or a key already seen in this call are reported
    and dropped; later duplicates are never merged into the first.
    """
    seen = set()
    for i, rec in enumerate(records, start=1):
        key = key_fn(rec)
        key = key.strip() if key else ""
        if not key:
            diagnostics.warn(MissingBusinessKeyWarning, f"Row {i} is missing a product ID, skipping", row=i)
            continue
        if key in seen:
            diagnostics.warn(DuplicateKeyWarning, f"Duplicate SKU found, skipping: {key}", row=i, value=key)
            continue
        seen.add(key)
        yield i, rec, key


def forward_fill(rows: Iterable[dict], columns: List[str] = FORWARD_FILL_COLUMNS) -> List[dict]:
    last = {c: "" for c in columns}
    out = []
    for row in rows:
        new = dict(row)
        for c in columns:
            if _blank(new.get(c)):
                new[c] = last[c]
            else:
                last[c] = new[c]
        out.append(new)
    return out


def apply_export_defaults(
    rows: Iterable[dict],
    diagnostics: Diagnostics,
    defaults: Dict[str, str] = EXPORT_DEFAULTS,
) -> List[dict]:
    out = []
    for i, row in enumerate(rows, start=1):
        if _blank(row.get("Handle")):
            diagnostics.warn(MissingHandleWarning, f"Skipping row {i} with empty Handle. Title: {row.get('Title') or ''}", row=i)
            continue
        new = dict(row)
        for k, v in defaults.items():
            if _blank(new.get(k)):
                new[k] = v
        out.append(new)
    return out


def transform_structured(records: List[dict], options: PipelineOptions, diagnostics: Diagnostics) -> Tuple[List[Row], int]:
    out_rows: List[Row] = []
    handles_with_images = set()
    for i, rec in enumerate(records, start=1):
        product = product_from_record(rec, STRUCTURED_COLUMN_MAP)
        if product is None:
            diagnostics.warn(MissingBusinessKeyWarning, f"Product {i} has no productId, skipping", row=i)
            continue
        handle = slugify(product.name) or product.id
        base = primary_row(
            product,
            handle=handle,
            title=product.name,
            body_html=build_body_html(product, options.caution_label, options.material_label),
            tags=build_tags([product.color, product.material, product.fit]),
            options=options,
        )
        first_time = handle not in handles_with_images
        out_rows.extend(expand_product(product, base, variant_image=True, include_images=first_time))
        if first_time and product.image_list():
            handles_with_images.add(handle)
    product_count = len({r["Handle"] for r in out_rows})
    return out_rows, product_count


def transform_flexible(records: List[dict], options: PipelineOptions, diagnostics: Diagnostics) -> Tuple[List[Row], int]:
    out_rows: List[Row] = []
    products = 0
    key_fn = lambda r: resolve_field(r, "product_id", FLEXIBLE_COLUMN_MAP)  # noqa: E731
    for i, rec, style_no in dedupe_records(records, key_fn, diagnostics):
        product = product_from_record(rec, FLEXIBLE_COLUMN_MAP)
        title = f"{product.name} - {style_no}"
        handle = slugify(title) or slugify(style_no)
        if not handle:
            diagnostics.warn(HandleGenerationWarning, f"Could not generate handle for row {i}, skipping", row=i, value=style_no)
            continue
        base = primary_row(
            product,
            handle=handle,
            title=title,
            body_html=build_body_html(product, options.caution_label, options.material_label),
            tags=build_tags([product.color, product.material, product.fit]),
            options=options,
        )
        out_rows.extend(expand_product(product, base, variant_image=options.variant_image_from_main))
        products += 1
    return out_rows, products


def extracted_handle(name: str, color: str) -> str:
    # names made only of dropped symbols fall back to the placeholder name
    return slugify_cjk(f"{name or 'product'} {color or ''}") or slugify_cjk(f"product {color or ''}")


def transform_extracted(record: dict, options: PipelineOptions, diagnostics: Diagnostics) -> Tuple[List[Row], int]:
    # productId only fills Variant SKU here; it is not a dedup key
    product = product_from_record(record, EXTRACTED_COLUMN_MAP, require_id=False)
    title = f"{product.name} {product.color}".strip()
    handle = extracted_handle(product.name.strip(), product.color.strip())
    if product.name.strip() and not slugify_cjk(f"{product.name} {product.color}"):
        diagnostics.warn(
            HandleGenerationWarning,
            f"Name {product.name!r} gives an empty handle, using {handle!r}",
            row=1,
            value=product.name,
        )
    base = primary_row(
        product,
        handle=handle,
        title=title,
        body_html=build_body_paragraphs(product, options.caution_heading),
        tags=build_tags([product.vendor, product.material, product.name]),
        options=options,
        option1_name=options.color_option_name,
        option1_value=product.color.strip(),
    )
    return expand_product(product, base, variant_image=False), 1


def transform_export(rows: List[dict], options: PipelineOptions, diagnostics: Diagnostics) -> Tuple[List[Row], int]:
    filled = forward_fill(rows)
    diagnostics.info(f"Forward-filled {', '.join(FORWARD_FILL_COLUMNS)}.")
    defaults = dict(EXPORT_DEFAULTS, Vendor=options.vendor_fallback)
    out_rows = apply_export_defaults(filled, diagnostics, defaults)
    diagnostics.info(f"Applied column defaults. Rows kept: {len(out_rows)}")
    product_count = len({str(r["Handle"]).strip() for r in out_rows})
    return out_rows, product_count


def project(rows: List[Row]) -> str:
    return project_rows(rows, HEADERS)
