"""OpenAI-compatible extraction of raw product fields from pasted text.

The model is asked to copy values out of the text verbatim; every
transformation into Matrixify columns happens in ``transform``.
"""
from __future__ import annotations
import json
import logging
import re
import time
from typing import Callable, Dict, List, Optional

import requests

from .errors import ExtractionError
from .settings import ExtractorConfig


log = logging.getLogger(__name__)

EXTRACTION_FIELDS = {
    "productId": "The product ID / SKU / style number.",
    "productName": "The product name.",
    "description": "The product description, as written.",
    "caution": "Care or caution notes. Empty string when absent.",
    "color": "The colour name.",
    "material": "The material / fabric.",
    "vendor": "The brand name.",
    "mainImage": "URL of the main product image.",
}

_FENCE = re.compile(r"^```(\w*)?\s*\n?(.*?)\n?\s*```$", re.DOTALL)


def build_extraction_messages(raw_text: str) -> List[Dict]:
    field_lines = "\n".join(f"- {k}: {v}" for k, v in EXTRACTION_FIELDS.items())
    system = (
        "You extract data from e-commerce product text. "
        "Return ONLY a JSON object with exactly these string keys. "
        "Copy values verbatim from the text; do not translate, rewrite or invent anything."
    )
    user = f"Fields:\n{field_lines}\n\n---\n{raw_text}\n---"
    return [{"role": "system", "content": system}, {"role": "user", "content": user}]


def parse_json_reply(text: str) -> Dict:
    s = (text or "").strip()
    m = _FENCE.match(s)
    if m and m.group(2):
        s = m.group(2).strip()
    try:
        data = json.loads(s)
    except json.JSONDecodeError as e:
        raise ExtractionError(f"Model did not return valid JSON: {e}") from e
    if not isinstance(data, dict):
        raise ExtractionError(f"Expected a JSON object from the model, got {type(data).__name__}")
    return data


def build_session(cfg: ExtractorConfig) -> requests.Session:
    s = requests.Session()
    s.headers.update({"Content-Type": "application/json", "Accept": "application/json"})
    if cfg.api_key:
        s.headers["Authorization"] = f"Bearer {cfg.api_key}"
    return s


def _post_chat(session: requests.Session, cfg: ExtractorConfig, payload: Dict) -> requests.Response:
    url = cfg.base_url.rstrip("/") + "/v1/chat/completions"
    backoff = 1.0
    attempt = 0
    while True:
        resp = session.post(url, data=json.dumps(payload), timeout=cfg.timeout)
        if resp.status_code == 429 and attempt < cfg.max_retries:
            attempt += 1
            retry_after = float(resp.headers.get("Retry-After", backoff))
            log.info(f"Rate limited, retrying in {retry_after}s ({attempt}/{cfg.max_retries})")
            time.sleep(retry_after)
            backoff = min(backoff * 2, 10.0)
            continue
        return resp


def extract_product(raw_text: str, cfg: ExtractorConfig, session: Optional[requests.Session] = None) -> Dict:
    if not cfg.api_key and not cfg.is_local:
        raise ExtractionError(f"No API key configured (set {cfg.api_key_env} or LLM_API_KEY)")
    session = session or build_session(cfg)
    payload = {
        "model": cfg.model,
        "messages": build_extraction_messages(raw_text),
        "temperature": cfg.temperature,
        "max_tokens": cfg.max_tokens,
        "response_format": {"type": "json_object"},
    }
    log.info(f"Requesting structured extraction from model={cfg.model}")
    try:
        resp = _post_chat(session, cfg, payload)
        resp.raise_for_status()
        parsed = resp.json()
    except (requests.RequestException, ValueError) as e:
        raise ExtractionError(f"Extraction request failed: {e}") from e
    if not isinstance(parsed, dict):
        raise ExtractionError(f"Unexpected response payload: {type(parsed).__name__}")
    content = ((parsed.get("choices") or [{}])[0].get("message") or {}).get("content") or ""
    if not content.strip():
        raise ExtractionError("Model returned an empty response")
    return parse_json_reply(content)


def make_extractor(cfg: ExtractorConfig, session: Optional[requests.Session] = None) -> Callable[[str], Dict]:
    return lambda raw_text: extract_product(raw_text, cfg, session=session)
