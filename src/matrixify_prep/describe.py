from __future__ import annotations
from typing import Iterable

from .models import CanonicalProduct
from .normalize import html_lines


def build_body_html(product: CanonicalProduct, caution_label: str = "注意", material_label: str = "素材") -> str:
    parts = []
    if product.description:
        parts.append(html_lines(product.description))
    if product.caution:
        parts.append(f"<br><br><strong>{caution_label}:</strong> {html_lines(product.caution)}")
    if product.material:
        parts.append(f"<br><br><strong>{material_label}:</strong> {html_lines(product.material)}")
    return "".join(parts)


def build_body_paragraphs(product: CanonicalProduct, caution_heading: str = "【ご注意】") -> str:
    """Paragraph layout used for single extracted records."""
    description = f"<p>{html_lines(product.description, '<br />')}</p>" if product.description else ""
    caution = ""
    if product.caution:
        caution = f"<p><strong>{caution_heading}</strong><br />{html_lines(product.caution, '<br />')}</p>"
    return f"{description}\n{caution}".strip()


def build_tags(values: Iterable[str]) -> str:
    return ", ".join(v.strip() for v in values if v and v.strip())
