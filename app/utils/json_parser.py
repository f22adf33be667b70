# app/utils/json_parser.py
"""
Helpers for reading loosely-shaped JSON records from the open-data sensor feed.
Field names vary between dataset revisions, so lookups go through alias lists.
"""

import math
from typing import Any, Optional


def first_present(record: dict, aliases: tuple[str, ...], default: Any = None) -> Any:
    """
    Return the first non-empty value among `aliases` (in priority order).
    None, "" and whitespace-only strings count as empty; 0 does not.
    """
    for key in aliases:
        value = record.get(key)
        if value is None:
            continue
        if isinstance(value, str) and not value.strip():
            continue
        return value
    return default


def to_float(value: Any) -> Optional[float]:
    """Coerce a JSON number or numeric string to float. Returns None when impossible."""
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None
