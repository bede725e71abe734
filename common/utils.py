"""
common.utils

Utility helper functions.
"""
from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation


def parse_amount(v) -> Decimal:
    """
    Parse a transfer value (int, decimal string or 0x hex) into a non-negative Decimal.
    """
    if v is None:
        raise ValueError("transfer value is missing")
    if isinstance(v, bool):
        raise ValueError(f"invalid transfer value {v!r}")
    if isinstance(v, str) and v.lower().startswith("0x"):
        return Decimal(int(v, 16))
    try:
        d = Decimal(str(v).strip())
    except InvalidOperation:
        raise ValueError(f"invalid transfer value {v!r}")
    if not d.is_finite() or d < 0:
        raise ValueError(f"transfer value must be a non-negative decimal, got {v!r}")
    return d


def as_int(v) -> int:
    """Block numbers arrive as ints, decimal text or 0x hex."""
    if isinstance(v, str) and v.lower().startswith("0x"):
        return int(v, 16)
    return int(v)


def as_decstr(v) -> str:
    """Return a plain base 10 string, no exponent, for any accepted amount."""
    d = parse_amount(v)
    s = format(d, "f")
    if "." in s:
        s = s.rstrip("0").rstrip(".")
    return s or "0"


def as_datetime(v) -> datetime | None:
    """
    Coerce a db timestamp (datetime, ISO text or epoch seconds) to an aware UTC datetime.
    Naive values are taken as UTC.
    """
    if v is None or v == "":
        return None
    if isinstance(v, datetime):
        dt = v
    elif isinstance(v, (int, float)):
        return datetime.fromtimestamp(v, tz=timezone.utc)
    else:
        s = str(v).strip().replace("Z", "+00:00")
        dt = datetime.fromisoformat(s)
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def iso(v) -> str | None:
    dt = as_datetime(v)
    return dt.isoformat() if dt else None


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def to_float(v, default: float = 0.0) -> float:
    if v is None:
        return default
    try:
        return float(v)
    except (TypeError, ValueError):
        return default
