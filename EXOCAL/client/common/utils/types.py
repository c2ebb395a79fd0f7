from __future__ import annotations

from typing import Any


TRUE_VALUES = {"1", "true", "yes", "y", "on"}
FALSE_VALUES = {"0", "false", "no", "n", "off"}


# -----------------------------------------------------------------------------
def clamp(value: float, minimum: float | None, maximum: float | None) -> float:
    if minimum is not None and value < minimum:
        return minimum
    if maximum is not None and value > maximum:
        return maximum
    return value


# -----------------------------------------------------------------------------
def coerce_bool(value: Any, default: bool) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return bool(value)
    if isinstance(value, str):
        normalized = value.strip().lower()
        if normalized in TRUE_VALUES:
            return True
        if normalized in FALSE_VALUES:
            return False
    return default


# -----------------------------------------------------------------------------
def coerce_int(
    value: Any,
    default: int,
    minimum: int | None = None,
    maximum: int | None = None,
) -> int:
    if isinstance(value, bool) or value is None:
        return default
    try:
        converted = int(str(value).strip()) if isinstance(value, str) else int(value)
    except (TypeError, ValueError):
        return default
    return int(clamp(converted, minimum, maximum))


# -----------------------------------------------------------------------------
def coerce_float(
    value: Any,
    default: float,
    minimum: float | None = None,
    maximum: float | None = None,
) -> float:
    if isinstance(value, bool) or value is None:
        return default
    try:
        converted = float(value)
    except (TypeError, ValueError):
        return default
    if converted != converted:
        return default
    return float(clamp(converted, minimum, maximum))


# -----------------------------------------------------------------------------
def coerce_int_or_none(value: Any, minimum: int | None = None) -> int | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        converted = int(str(value).strip()) if isinstance(value, str) else int(value)
    except (TypeError, ValueError):
        return None
    if minimum is not None and converted < minimum:
        return None
    return converted


# -----------------------------------------------------------------------------
def coerce_bounded_int(value: Any, default: int, minimum: int, maximum: int) -> int:
    """Parse an integer, returning the default instead of clamping when the
    value is missing, non-numeric or outside the inclusive range."""
    if isinstance(value, bool) or value is None:
        return default
    try:
        converted = int(str(value).strip()) if isinstance(value, str) else int(value)
    except (TypeError, ValueError):
        return default
    if converted < minimum or converted > maximum:
        return default
    return converted


# -----------------------------------------------------------------------------
def coerce_str(value: Any, default: str) -> str:
    if value is None:
        return default
    text = str(value).strip()
    return text if text else default


# -----------------------------------------------------------------------------
def coerce_str_or_none(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None
