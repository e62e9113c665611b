"""Coercion helpers for loosely-typed listing rows."""

import re
from typing import Any

_NON_DIGITS = re.compile(r"[^0-9]")


def normalize_price(value: Any) -> int:
    """
    Reduce a stored price to a digit-only, non-negative integer.

    Accepts plain numbers, numeric strings and legacy strings carrying currency
    symbols or words ("₹1,234", "45 Lakhs"). Anything that leaves no digits
    behind normalizes to 0; this never raises.
    """
    if value is None or isinstance(value, bool):
        return 0

    if isinstance(value, float):
        if value != value or value in (float("inf"), float("-inf")):
            return 0
        value = int(value)

    digits = _NON_DIGITS.sub("", str(value))
    if not digits:
        return 0

    try:
        return int(digits)
    except ValueError:
        return 0


def coerce_string(value: Any) -> str | None:
    """Coerce a value to a stripped string."""
    if value is None:
        return None

    if isinstance(value, str):
        trimmed = value.strip()
        return trimmed if trimmed else None

    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)

    return None


def coerce_price(value: Any) -> int | float | str:
    """Keep a stored price as-is when usable, otherwise fall back to an empty string."""
    if isinstance(value, bool):
        return ""
    if isinstance(value, (int, float)):
        return value
    return coerce_string(value) or ""


def coerce_bool(value: Any) -> bool | None:
    """Coerce a value to a boolean."""
    if isinstance(value, bool):
        return value

    if isinstance(value, str):
        lower = value.strip().lower()
        if lower in ("true", "1", "yes", "y", "t", "on", "enabled"):
            return True
        if lower in ("false", "0", "no", "n", "f", "off", "disabled"):
            return False

    return None
