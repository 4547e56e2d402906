"""Shared utility helpers used across sumo-career modules.

Centralises small clamping primitives that the rank rules and the
strength model would otherwise duplicate.
"""

from __future__ import annotations

import math


def clamp_int(value: int, minimum: int, maximum: int) -> int:
    """Clamp *value* to the inclusive ``[minimum, maximum]`` range."""
    return max(minimum, min(maximum, int(value)))


def clamp_float(value: float, minimum: float, maximum: float) -> float:
    """Clamp *value* to the inclusive ``[minimum, maximum]`` range."""
    return max(minimum, min(maximum, float(value)))


def round_half_up(value: float) -> int:
    """Round *value* to the nearest integer, halves toward ``+inf``.

    Python's ``round`` uses banker's rounding, which would shift rule
    boundaries that were tuned against half-up rounding.
    """
    return int(math.floor(float(value) + 0.5))


def coerce_int(value: object) -> int | None:
    """Safely coerce *value* to ``int``, returning ``None`` on failure."""
    if value is None:
        return None
    try:
        return int(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return None
