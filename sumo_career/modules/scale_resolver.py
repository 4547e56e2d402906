"""Banzuke scale resolution.

Turns an optional per-run ``ScaleConfiguration`` into concrete numbered
maxima and slot offsets that define the single global order spanning every
division.  Defaults come from ``rules/banzuke_scale.json``.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from functools import lru_cache

from sumo_career.constants import (
    LOWER_DIVISIONS,
    MAEZUMO,
    MAKUUCHI,
    RANKED_DIVISIONS,
)
from sumo_career.models import ScaleConfiguration
from sumo_career.rules_registry import load_rule_set
from sumo_career.utils import clamp_int


@dataclass(frozen=True)
class ResolvedScale:
    """Concrete slot layout for one run.

    ``maxima`` holds the largest rank number per ranked division (for
    Makuuchi this is the Maegashira maximum).  ``offsets`` holds the first
    global slot of each division; Maezumo's offset equals ``total_slots``.
    """

    slots: dict[str, int]
    maxima: dict[str, int]
    offsets: dict[str, int]
    special_slots: int

    @property
    def total_slots(self) -> int:
        return self.offsets[MAEZUMO]

    @property
    def bottom_slot(self) -> int:
        return self.total_slots - 1

    def numbered_start(self, division: str) -> int:
        """First slot holding a numbered rank of *division*."""
        if division == MAKUUCHI:
            return self.special_slots
        return self.offsets[division]

    def division_end(self, division: str) -> int:
        """Last slot (inclusive) of a ranked *division*."""
        return self.numbered_start(division) + self.maxima[division] * 2 - 1

    def clamp_number(self, division: str, number: int | None) -> int:
        return clamp_int(number if number is not None else 1, 1, self.maxima[division])

    @property
    def lower_offsets(self) -> dict[str, int]:
        """Offsets of the lower divisions relative to the top of Makushita."""
        base = self.offsets[LOWER_DIVISIONS[0]]
        return {division: self.offsets[division] - base for division in LOWER_DIVISIONS}

    @property
    def lower_total(self) -> int:
        return self.total_slots - self.offsets[LOWER_DIVISIONS[0]]


def _default_slots() -> dict[str, int]:
    return {str(k): int(v) for k, v in load_rule_set("banzuke_scale")["default_slots"].items()}


def resolve_division_slots(division: str, config: ScaleConfiguration | None = None) -> int:
    """Return the slot count for *division*, falling back to the default."""
    if division == MAEZUMO:
        return 1
    override = config.slots_for(division) if config is not None else None
    raw = override if override is not None else _default_slots()[division]
    return max(1, int(math.floor(raw)))


def max_number(division: str, slots: int) -> int:
    """Largest rank number available in *division* given its slot count."""
    if division == MAEZUMO:
        return 1
    special = int(load_rule_set("banzuke_scale")["special_slots"])
    if division == MAKUUCHI:
        usable = max(2, slots - special)
        return max(1, usable // 2)
    return max(1, math.ceil(max(1, slots) / 2))


@lru_cache(maxsize=64)
def resolve_scale(config: ScaleConfiguration | None = None) -> ResolvedScale:
    """Resolve *config* into the global slot layout.

    Unset divisions use the defaults (42/28/120/180/200/60 slots).  The
    result is cached per configuration since ``ScaleConfiguration`` is
    immutable.
    """
    special = int(load_rule_set("banzuke_scale")["special_slots"])
    slots = {division: resolve_division_slots(division, config) for division in RANKED_DIVISIONS}
    maxima = {division: max_number(division, slots[division]) for division in RANKED_DIVISIONS}

    offsets: dict[str, int] = {MAKUUCHI: 0}
    cursor = special + maxima[MAKUUCHI] * 2
    for division in RANKED_DIVISIONS[1:]:
        offsets[division] = cursor
        cursor += maxima[division] * 2
    offsets[MAEZUMO] = cursor

    return ResolvedScale(slots=slots, maxima=maxima, offsets=offsets, special_slots=special)
