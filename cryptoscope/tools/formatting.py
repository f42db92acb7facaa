"""Reshaping helpers shared by the market and DeFi tools."""

from __future__ import annotations

import math
from datetime import datetime, timezone
from typing import Any, Optional, Sequence

NOT_AVAILABLE = "N/A"


def to_number(value: Any) -> Optional[float]:
    """Finite float from an int/float/numeric string, else None."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        cleaned = value.replace("$", "").replace(",", "").strip()
        if not cleaned:
            return None
        try:
            number = float(cleaned)
        except ValueError:
            return None
    else:
        return None
    return number if math.isfinite(number) else None


def format_percent(value: Any, digits: int = 2) -> str:
    """54.3189 -> '54.32%'; missing or non-numeric -> 'N/A'."""
    number = to_number(value)
    if number is None:
        return NOT_AVAILABLE
    return f"{number:.{digits}f}%"


def percent_change(current: Any, baseline: Any) -> str:
    """Relative change from baseline, guarded against a zero or missing baseline."""
    start = to_number(baseline)
    end = to_number(current)
    if start is None or end is None or start == 0:
        return NOT_AVAILABLE
    return format_percent((end - start) / start * 100)


def upper(value: Any) -> Optional[str]:
    return value.upper() if isinstance(value, str) else None


def sort_key(value: Any) -> float:
    """Missing values sort as zero."""
    return to_number(value) or 0.0


def ms_to_iso(timestamp_ms: Any) -> Optional[str]:
    number = to_number(timestamp_ms)
    if number is None:
        return None
    return datetime.fromtimestamp(number / 1000, tz=timezone.utc).isoformat()


def seconds_to_date(timestamp_s: Any) -> Optional[str]:
    number = to_number(timestamp_s)
    if number is None:
        return None
    return datetime.fromtimestamp(number, tz=timezone.utc).date().isoformat()


def seconds_to_iso(timestamp_s: Any) -> Optional[str]:
    number = to_number(timestamp_s)
    if number is None:
        return None
    return datetime.fromtimestamp(number, tz=timezone.utc).isoformat()


def truncate(text: Any, length: int) -> Optional[str]:
    return text[:length] if isinstance(text, str) else None


def head(items: Any, count: int) -> list:
    """First `count` entries of a list, or an empty list for anything else."""
    return list(items[:count]) if isinstance(items, list) else []


def last(items: Sequence[Any]) -> Any:
    return items[-1] if items else None


def as_dict(value: Any) -> dict:
    return value if isinstance(value, dict) else {}


def as_list(value: Any) -> list:
    return value if isinstance(value, list) else []
