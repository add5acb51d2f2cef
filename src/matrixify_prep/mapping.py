from __future__ import annotations
import re
from typing import Dict, List, Optional

from .models import CanonicalProduct


# Canonical field -> accepted source column names, first non-blank wins.
FLEXIBLE_COLUMN_MAP: Dict[str, List[str]] = {
    "product_id": ["productID", "productId", "productId_1"],
    "name": ["name", "productName"],
    "description": ["description"],
    "caution": ["caution"],
    "material": ["material"],
    "main_image": ["mainImage", "image"],
    "thumbnail_images": ["thumbnailImages"],
    "color": ["color"],
    "size": ["size"],
    "fit": ["fitLevel"],
    "brand": ["brandName"],
    "price": ["price"],
}

STRUCTURED_COLUMN_MAP: Dict[str, List[str]] = {
    "product_id": ["productId", "id"],
    "name": ["productName", "name"],
    "description": ["description"],
    "caution": ["caution"],
    "material": ["material"],
    "main_image": ["mainImage"],
    "thumbnail_images": ["thumbnailImages"],
    "color": ["color"],
    "size": ["size"],
    "fit": ["fitLevel"],
    "brand": ["brandName"],
    "price": ["price"],
}

EXTRACTED_COLUMN_MAP: Dict[str, List[str]] = {
    "product_id": ["productId", "sku"],
    "name": ["productName"],
    "description": ["description"],
    "caution": ["caution"],
    "material": ["material"],
    "main_image": ["mainImage"],
    "thumbnail_images": [],
    "color": ["color"],
    "size": [],
    "fit": [],
    "brand": ["vendor", "brandName"],
    "price": ["price"],
}

_LIST_SPLIT = re.compile(r"[;,]")


def _present(val) -> bool:
    return val is not None and str(val).strip() != ""


def resolve_field(record: dict, key: str, column_map: Dict[str, List[str]] = FLEXIBLE_COLUMN_MAP) -> Optional[str]:
    for col in column_map[key]:
        val = record.get(col)
        if _present(val):
            return str(val)
    return None


def resolve_list(record: dict, key: str, column_map: Dict[str, List[str]] = FLEXIBLE_COLUMN_MAP) -> List[str]:
    """Resolve a multi-valued field.

    JSON sources carry real arrays; spreadsheet exports pack the values into
    one cell separated by ``;`` or ``,``.
    """
    for col in column_map[key]:
        val = record.get(col)
        if isinstance(val, (list, tuple)):
            items = [str(v).strip() for v in val if _present(v)]
        elif _present(val):
            items = [v.strip() for v in _LIST_SPLIT.split(str(val)) if v.strip()]
        else:
            continue
        if items:
            return items
    return []


def product_from_record(
    record: dict,
    column_map: Dict[str, List[str]] = FLEXIBLE_COLUMN_MAP,
    require_id: bool = True,
) -> Optional[CanonicalProduct]:
    """Build a CanonicalProduct, or None when the business key is blank and
    ``require_id`` is set. Otherwise a blank key becomes an empty id."""
    pid = resolve_field(record, "product_id", column_map)
    if pid is None:
        if require_id:
            return None
        pid = ""

    def get(key: str) -> str:
        return resolve_field(record, key, column_map) or ""

    return CanonicalProduct(
        id=pid.strip(),
        name=get("name"),
        description=get("description"),
        caution=get("caution"),
        material=get("material"),
        color=get("color"),
        size=get("size"),
        fit=get("fit"),
        vendor=get("brand"),
        main_image=get("main_image").strip(),
        thumbnail_images=resolve_list(record, "thumbnail_images", column_map),
        price=get("price"),
    )
