"""Helpers for the JSON-encoded TEXT columns of the catalog tables."""
import json
import logging
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)


def _loads(raw: Any) -> Any:
    if raw is None:
        return None
    if isinstance(raw, (list, dict)):
        return raw
    if isinstance(raw, bytes):
        raw = raw.decode('utf-8', errors='replace')
    if not isinstance(raw, str) or not raw.strip():
        return None
    return json.loads(raw)


def parse_json_list(raw: Any) -> List[Any]:
    """Decode a JSON array column; anything else yields an empty list."""
    try:
        value = _loads(raw)
    except ValueError:
        logger.debug(f"Malformed JSON array column: {raw!r}")
        return []
    return value if isinstance(value, list) else []


def parse_json_object(raw: Any) -> Dict[str, Any]:
    """Decode a JSON object column; anything else yields an empty dict."""
    try:
        value = _loads(raw)
    except ValueError:
        logger.debug(f"Malformed JSON object column: {raw!r}")
        return {}
    return value if isinstance(value, dict) else {}


def parse_image_list(raw: Any) -> List[str]:
    """
    Decode an image column into a list of URLs.

    The column normally holds a JSON array of URLs, but older rows store a
    single bare URL. Blank and null entries are dropped.
    """
    if raw is None:
        return []
    try:
        value = _loads(raw)
    except ValueError:
        value = raw if isinstance(raw, str) else None

    if isinstance(value, list):
        return [url for url in value if isinstance(url, str) and url.strip()]
    if isinstance(value, str) and value.strip() and value.strip() != '[]':
        return [value.strip()]
    return []


def primary_image(raw: Any) -> Optional[str]:
    images = parse_image_list(raw)
    return images[0] if images else None


def dump_json_column(value: Any, default: str = '[]') -> str:
    """Encode a value for a JSON TEXT column."""
    if value is None:
        return default
    if isinstance(value, str):
        return value
    return json.dumps(value, separators=(',', ':'))
