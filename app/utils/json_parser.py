# app/utils/json_parser.py
"""
Helpers for parsing JSON frames from the live alert feed and loosely
structured JSON request payloads.
"""

import json
from typing import Optional, Any, Union


def safe_parse_json(raw: Union[bytes, str]) -> Optional[Any]:
    """Parse JSON bytes or text safely. Returns None on error."""
    try:
        if isinstance(raw, bytes):
            raw = raw.decode("utf-8", errors="replace")
        return json.loads(raw)
    except (json.JSONDecodeError, UnicodeDecodeError, TypeError):
        return None


def as_dict(value: Any) -> dict:
    """Return value if it is a dict, otherwise an empty dict."""
    return value if isinstance(value, dict) else {}
