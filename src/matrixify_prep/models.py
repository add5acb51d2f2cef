from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class CanonicalProduct(BaseModel):
    id: str
    name: str = ""
    description: str = ""
    caution: str = ""
    material: str = ""
    color: str = ""
    size: str = ""
    fit: str = ""
    vendor: str = ""
    main_image: str = ""
    thumbnail_images: List[str] = Field(default_factory=list)
    price: str = ""

    def image_list(self) -> List[str]:
        """Main image followed by thumbnails, blanks and exact repeats dropped."""
        images: List[str] = []
        for url in [self.main_image, *self.thumbnail_images]:
            url = (url or "").strip()
            if url and url not in images:
                images.append(url)
        return images


class Diagnostic(BaseModel):
    level: str = "warning"
    kind: str
    message: str
    row: Optional[int] = None
    value: Optional[str] = None


class PipelineResult(BaseModel):
    mode: str
    csv_text: str
    rows: List[Dict[str, Any]] = Field(default_factory=list)
    product_count: int = 0
    diagnostics: List[Diagnostic] = Field(default_factory=list)

    @property
    def row_count(self) -> int:
        return len(self.rows)

    def warnings(self) -> List[Diagnostic]:
        return [d for d in self.diagnostics if d.level == "warning"]
