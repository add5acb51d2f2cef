from __future__ import annotations
import json
import logging
import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Dict, Optional

from dotenv import load_dotenv


log = logging.getLogger(__name__)


def default_settings() -> Dict:
    return {
        "vendor_fallback": "Your-Store",
        "option1_name": "Size",
        "option1_value_default": "Default Title",
        "color_option_name": "カラー",
        "default_price": "0.00",
        "default_grams": 0,
        "default_qty": 0,
        "caution_label": "注意",
        "material_label": "素材",
        "caution_heading": "【ご注意】",
        "variant_image_from_main": True,
    }


def load_settings(path: Optional[Path]) -> Dict:
    """Merge a JSON settings file over the defaults. Missing file -> defaults."""
    base = default_settings()
    if not path:
        return base
    p = Path(path)
    if not p.exists():
        log.warning(f"Settings file not found, using defaults: {p}")
        return base
    data = json.loads(p.read_text(encoding="utf-8"))
    base.update(data or {})
    return base


def load_env_file(env_path: Optional[str]) -> None:
    if env_path is None:
        # try default .env in cwd if present
        default_env = Path.cwd() / ".env"
        if default_env.exists():
            load_dotenv(default_env, override=True)
        return
    p = Path(env_path)
    if p.exists():
        load_dotenv(p, override=True)
    else:
        log.warning(f"Env file not found: {p}")


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class PipelineOptions:
    vendor_fallback: str = "Your-Store"
    option1_name: str = "Size"
    option1_value_default: str = "Default Title"
    color_option_name: str = "カラー"
    default_price: str = "0.00"
    default_grams: int = 0
    default_qty: int = 0
    caution_label: str = "注意"
    material_label: str = "素材"
    caution_heading: str = "【ご注意】"
    # Flexible-CSV mode only: copy the first image into "Variant Image".
    variant_image_from_main: bool = True

    @classmethod
    def from_settings(cls, data: Dict) -> "PipelineOptions":
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in known})

    @classmethod
    def from_env(cls, base: Optional[Dict] = None) -> "PipelineOptions":
        data = dict(base or default_settings())
        vendor = os.getenv("VENDOR", "").strip()
        if vendor:
            data["vendor_fallback"] = vendor
        data["default_price"] = os.getenv("MATRIXIFY_DEFAULT_PRICE", str(data["default_price"]))
        data["default_grams"] = int(os.getenv("MATRIXIFY_DEFAULT_GRAMS", str(data["default_grams"])))
        data["default_qty"] = int(os.getenv("MATRIXIFY_DEFAULT_QTY", str(data["default_qty"])))
        data["variant_image_from_main"] = _env_bool("MATRIXIFY_VARIANT_IMAGE", bool(data["variant_image_from_main"]))
        return cls.from_settings(data)


@dataclass
class ExtractorConfig:
    base_url: str = "https://api.openai.com"
    model: str = "gpt-4o-mini"
    api_key: str = ""
    api_key_env: str = "OPENAI_API_KEY"
    temperature: float = 0.0
    max_tokens: int = 1024
    timeout: int = 30
    max_retries: int = 3

    @classmethod
    def from_env(cls) -> "ExtractorConfig":
        api_key_env = os.getenv("LLM_API_KEY_ENV", "OPENAI_API_KEY")
        return cls(
            base_url=os.getenv("LLM_BASE_URL", "https://api.openai.com"),
            model=os.getenv("LLM_MODEL", "gpt-4o-mini"),
            api_key=os.getenv("LLM_API_KEY", "") or os.getenv(api_key_env, ""),
            api_key_env=api_key_env,
            temperature=float(os.getenv("LLM_TEMPERATURE", "0")),
            max_tokens=int(os.getenv("LLM_MAX_TOKENS", "1024")),
            timeout=int(os.getenv("LLM_TIMEOUT", "30")),
            max_retries=int(os.getenv("LLM_MAX_RETRIES", "3")),
        )

    @property
    def is_local(self) -> bool:
        return self.base_url.startswith("http://127.0.0.1") or self.base_url.startswith("http://localhost")
