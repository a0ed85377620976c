"""
Field coercion helpers for raw Firestore documents.

Documents are free-form dicts written by several client versions; these
helpers turn each field into the type the records declare, with a neutral
default when the field is missing or has the wrong shape.
"""
import math
from typing import Any, Dict, List, Optional


def text(data: Dict, *keys: str, default: str = '') -> str:
    """First non-empty string among keys, stripped."""
    for key in keys:
        value = data.get(key)
        if isinstance(value, str) and value.strip():
            return value.strip()
    return default


def flag(value: Any) -> bool:
    """Strict truthiness: only real True (or 'true') counts."""
    if isinstance(value, str):
        return value.strip().lower() == 'true'
    return value is True


def truthy(value: Any) -> bool:
    """Loose truthiness as the web client writes it: any non-empty, non-zero value."""
    if isinstance(value, float) and math.isnan(value):
        return False
    return bool(value)


def number(value: Any, default: float = 0.0) -> float:
    if isinstance(value, bool) or value is None:
        return default
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value.strip())
        except ValueError:
            return default
    return default


def optional_number(value: Any) -> Optional[float]:
    if isinstance(value, bool) or value is None:
        return None
    result = number(value, default=float('nan'))
    return None if result != result else result


def integer(value: Any, default: int = 0) -> int:
    return int(number(value, default=float(default)))


def str_list(value: Any) -> List[str]:
    """List of non-empty strings; anything else is dropped."""
    if isinstance(value, str):
        return [value.strip()] if value.strip() else []
    if not isinstance(value, (list, tuple)):
        return []
    return [v.strip() for v in value if isinstance(v, str) and v.strip()]


def nested(data: Any, *path: str) -> Any:
    """Walk a dotted path through nested dicts, None when any hop is missing."""
    current = data
    for key in path:
        if not isinstance(current, dict):
            return None
        current = current.get(key)
    return current
