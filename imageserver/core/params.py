"""
Query parameter coercion.

Query values arrive as raw strings. Absent, blank or non-numeric values parse
to ``None`` so callers can fall back to their own defaults.
"""

import math
from typing import Optional


def parse_number(raw: Optional[str]) -> Optional[float]:
    if raw is None:
        return None
    try:
        value = float(raw.strip())
    except ValueError:
        return None
    if math.isnan(value) or math.isinf(value):
        return None
    return value


def parse_positive_float(raw: Optional[str]) -> Optional[float]:
    value = parse_number(raw)
    if value is None or value <= 0:
        return None
    return value


def parse_positive_int(raw: Optional[str]) -> Optional[int]:
    """Parse a positive integer; fractional input is truncated."""
    value = parse_positive_float(raw)
    if value is None:
        return None
    value = int(value)
    return value if value > 0 else None


def parse_flag(raw: Optional[str]) -> bool:
    # Only the exact string "true" enables a flag.
    return raw == "true"
