"""JSON helpers."""
import json
from typing import Any


def safe_parse_json(text: str, default: Any = None) -> Any:
    """Parse JSON text, returning ``default`` when it is not valid JSON.

    Pass a sentinel as ``default`` to tell a literal ``null`` apart from
    unparseable text.
    """
    try:
        return json.loads(text)
    except (TypeError, ValueError):
        return default
