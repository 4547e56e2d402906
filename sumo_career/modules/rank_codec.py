"""Rank position codec.

Maps a ``Rank`` to its integer slot on the global banzuke order and back.
Slots 0-7 hold the four named top-division ranks (East on even slots, West
on odd ones); numbered ranks follow two slots per number.  Maezumo encodes
to ``total_slots`` and is never produced by ``decode_slot``.

Also provides the ordering and display helpers used for sorting ranks.
"""

from __future__ import annotations

from sumo_career.constants import (
    EAST,
    MAEZUMO,
    MAKUUCHI,
    NUMBERED_NAME_BY_DIVISION,
    RANKED_DIVISIONS,
    SANYAKU_NAMES,
    SPECIAL_RANK_NAMES,
    WEST,
)
from sumo_career.models import Rank, ScaleConfiguration
from sumo_career.modules.scale_resolver import ResolvedScale, resolve_scale
from sumo_career.utils import clamp_int


def _scale(scale: ResolvedScale | ScaleConfiguration | None) -> ResolvedScale:
    if isinstance(scale, ResolvedScale):
        return scale
    return resolve_scale(scale)


def clamp_slot(slot: int, scale: ResolvedScale | ScaleConfiguration | None = None) -> int:
    """Clamp *slot* into the ranked domain ``[0, bottom_slot]``."""
    return clamp_int(slot, 0, _scale(scale).bottom_slot)


def encode_rank(rank: Rank, scale: ResolvedScale | ScaleConfiguration | None = None) -> int:
    """Return the global slot of *rank*; out-of-range numbers are clamped."""
    resolved = _scale(scale)
    side_offset = 1 if rank.side == WEST else 0
    if rank.division == MAEZUMO:
        return resolved.total_slots
    if rank.name in SPECIAL_RANK_NAMES:
        return SPECIAL_RANK_NAMES.index(rank.name) * 2 + side_offset
    number = resolved.clamp_number(rank.division, rank.number)
    return resolved.numbered_start(rank.division) + (number - 1) * 2 + side_offset


def decode_slot(slot: int, scale: ResolvedScale | ScaleConfiguration | None = None) -> Rank:
    """Return the rank at *slot*, clamping out-of-range slots to the nearest end."""
    resolved = _scale(scale)
    bounded = clamp_int(slot, 0, resolved.bottom_slot)
    side = EAST if bounded % 2 == 0 else WEST
    if bounded < resolved.special_slots:
        return Rank(division=MAKUUCHI, name=SPECIAL_RANK_NAMES[bounded // 2], side=side)
    for division in RANKED_DIVISIONS:
        if bounded <= resolved.division_end(division):
            relative = bounded - resolved.numbered_start(division)
            return Rank(
                division=division,
                name=NUMBERED_NAME_BY_DIVISION[division],
                number=relative // 2 + 1,
                side=EAST if relative % 2 == 0 else WEST,
            )
    # unreachable while bottom_slot is the end of the last ranked division
    last = RANKED_DIVISIONS[-1]
    return Rank(division=last, name=last, number=resolved.maxima[last], side=WEST)


def canonical_rank(rank: Rank, scale: ResolvedScale | ScaleConfiguration | None = None) -> Rank:
    """Clamp the number of *rank* into its division, keeping its side."""
    if rank.division == MAEZUMO or rank.is_special:
        return rank
    resolved = _scale(scale)
    return rank.with_number(resolved.clamp_number(rank.division, rank.number))


def rank_order_value(rank: Rank, scale: ResolvedScale | ScaleConfiguration | None = None) -> int:
    """Side-independent order value; smaller is higher on the banzuke."""
    return encode_rank(rank.with_side(EAST), scale) // 2


def rank_sort_key(rank: Rank, scale: ResolvedScale | ScaleConfiguration | None = None) -> int:
    return encode_rank(rank, scale)


def compare_ranks(
    first: Rank,
    second: Rank,
    scale: ResolvedScale | ScaleConfiguration | None = None,
) -> int:
    """Return -1 if *first* ranks higher than *second*, 1 if lower, else 0."""
    left = encode_rank(first, scale)
    right = encode_rank(second, scale)
    return (left > right) - (left < right)


def is_sanyaku(rank: Rank) -> bool:
    return rank.division == MAKUUCHI and rank.name in SANYAKU_NAMES


def format_rank(rank: Rank) -> str:
    """Human-readable label, e.g. ``"East Maegashira 3"``."""
    parts: list[str] = []
    if rank.side:
        parts.append(rank.side)
    parts.append(rank.name)
    if rank.number is not None and not rank.is_special:
        parts.append(str(rank.number))
    return " ".join(parts)
