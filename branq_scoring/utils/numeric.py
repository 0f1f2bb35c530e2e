"""Numeric helpers shared by the factor calculators"""

import math
import re
from typing import Any

_NON_NUMERIC = re.compile(r"[^\d.\-]")


def finite(value: float, default: float = 0.0) -> float:
    """Replace NaN/inf with a default"""
    try:
        value = float(value)
    except (TypeError, ValueError):
        return default
    return value if math.isfinite(value) else default


def clamp(value: float, low: float = 0.0, high: float = 100.0) -> float:
    return max(low, min(high, finite(value, low)))


def safe_div(numerator: float, denominator: float, default: float = 0.0) -> float:
    """Divide, returning default when the denominator is zero or the result is not finite"""
    if not denominator:
        return default
    return finite(numerator / denominator, default)


def lerp_band(position: float, low: float, high: float) -> float:
    """
    Map a 0-1 position into the [low, high] score band.

    Positions outside 0-1 are clamped, so callers can pass raw
    "how far into the range" fractions without guarding them first.
    """
    position = clamp(position, 0.0, 1.0)
    return low + (high - low) * position


def round_half_up(value: float) -> int:
    """Round halves upwards (2.5 -> 3) rather than to the nearest even integer"""
    return int(math.floor(finite(value) + 0.5))


def to_score(value: float) -> int:
    """Round a raw score and clamp it to 0-100"""
    return round_half_up(clamp(value))


def parse_decimal(raw: Any) -> float:
    """
    Parse an amount that may arrive as a number or a decorated string.

    Strings are stripped of anything that is not part of a number
    ("1,234.5 SOL" -> 1234.5). Booleans, None and unparsable values become 0.
    """
    if raw is None or isinstance(raw, bool):
        return 0.0
    if isinstance(raw, (int, float)):
        return finite(raw)
    if isinstance(raw, str):
        cleaned = _NON_NUMERIC.sub("", raw)
        if not cleaned:
            return 0.0
        try:
            return finite(float(cleaned))
        except ValueError:
            return 0.0
    return 0.0


def parse_int(raw: Any) -> int:
    """Parse an integer-like field (timestamps, lamports); anything else is 0"""
    value = parse_decimal(raw)
    return int(value) if value else 0
