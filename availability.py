"""Availability values and shifts.

Saved availability comes in several shapes: legacy booleans from the days
before AM/PM support, ``"am"``/``"pm"``/``"both"`` strings, or nothing at all.
Everything is folded into :class:`Availability` once, at the boundary.
"""

from __future__ import annotations

from enum import Enum
from typing import Dict, Mapping

MORNING = "morning"
EVENING = "evening"
SHIFTS = (MORNING, EVENING)


class Availability(Enum):
    BOTH = "both"
    MORNING = "am"
    EVENING = "pm"
    UNAVAILABLE = "none"

    def covers(self, shift: str) -> bool:
        if self is Availability.BOTH:
            return True
        return (self is Availability.MORNING and shift == MORNING) or (
            self is Availability.EVENING and shift == EVENING
        )


_ALIASES = {
    "both": Availability.BOTH,
    "am": Availability.MORNING,
    "morning": Availability.MORNING,
    "pm": Availability.EVENING,
    "evening": Availability.EVENING,
}


def normalize_availability(value) -> Availability:
    if isinstance(value, Availability):
        return value
    if value is True:
        return Availability.BOTH
    if isinstance(value, str):
        return _ALIASES.get(value.strip().lower(), Availability.UNAVAILABLE)
    return Availability.UNAVAILABLE


def is_available(value, shift: str) -> bool:
    return normalize_availability(value).covers(shift)


def normalize_availability_record(record: Mapping | None) -> Dict[str, Dict[str, Availability]]:
    """Normalize ``date -> person -> raw value`` into a fresh nested dict."""
    out: Dict[str, Dict[str, Availability]] = {}
    for day, people in (record or {}).items():
        out[str(day)] = {str(p): normalize_availability(v) for p, v in (people or {}).items()}
    return out
