"""Record-direction guards.

Applied to every candidate rank after the division rules run:

* a losing record never moves up, and in the strict divisions it always
  moves down by a deficit-scaled number of slots;
* a winning record in the strict divisions never moves down.

Each guard reports whether it changed the candidate so the rank engine can
recompute the transition event from the final slot delta.
"""

from __future__ import annotations

from dataclasses import dataclass

from sumo_career.constants import (
    EVENT_DEMOTION,
    EVENT_PROMOTION,
    MAEZUMO,
    STRICT_DEMOTION_DIVISIONS,
    STRICT_NON_DEMOTION_DIVISIONS,
)
from sumo_career.models import CompetitionRecord, Rank
from sumo_career.modules.rank_codec import decode_slot, encode_rank
from sumo_career.modules.scale_resolver import ResolvedScale
from sumo_career.utils import clamp_int


@dataclass(frozen=True)
class GuardResult:
    next_rank: Rank
    adjusted: bool = False


def forced_demotion_slots(record: CompetitionRecord) -> int:
    """Slots a losing record must drop in a strict-demotion division."""
    deficit = max(1, record.total_losses - record.bounded_wins)
    if record.fully_absent:
        return clamp_int(deficit * 2 + 2, 2, 20)
    return clamp_int(deficit * 2, 2, 14)


def apply_losing_record_guard(
    record: CompetitionRecord,
    candidate: Rank,
    scale: ResolvedScale,
) -> GuardResult:
    current = record.rank
    if current.division == MAEZUMO:
        return GuardResult(next_rank=candidate)
    if record.bounded_wins >= record.total_losses:
        return GuardResult(next_rank=candidate)

    current_slot = encode_rank(current, scale)
    candidate_slot = encode_rank(candidate, scale)
    if candidate_slot > current_slot:
        return GuardResult(next_rank=candidate)

    strict = current.division in STRICT_DEMOTION_DIVISIONS
    if not strict and candidate_slot == current_slot:
        return GuardResult(next_rank=candidate)

    drop = forced_demotion_slots(record) if strict else 1
    forced_slot = clamp_int(current_slot + drop, 0, scale.bottom_slot)
    if forced_slot <= current_slot:
        # already on the bottom slot; hold instead of moving up
        return GuardResult(next_rank=current, adjusted=candidate_slot != current_slot)
    return GuardResult(
        next_rank=decode_slot(forced_slot, scale),
        adjusted=forced_slot != candidate_slot,
    )


def apply_winning_record_guard(
    record: CompetitionRecord,
    candidate: Rank,
    scale: ResolvedScale,
) -> GuardResult:
    current = record.rank
    if current.division == MAEZUMO:
        return GuardResult(next_rank=candidate)
    if record.bounded_wins <= record.total_losses:
        return GuardResult(next_rank=candidate)
    if current.division not in STRICT_NON_DEMOTION_DIVISIONS:
        return GuardResult(next_rank=candidate)

    if encode_rank(candidate, scale) <= encode_rank(current, scale):
        return GuardResult(next_rank=candidate)
    return GuardResult(next_rank=current, adjusted=True)


def apply_direction_guards(
    record: CompetitionRecord,
    candidate: Rank,
    event: str | None,
    scale: ResolvedScale,
) -> tuple[Rank, str | None]:
    """Run both guards and return the final rank and event tag."""
    losing = apply_losing_record_guard(record, candidate, scale)
    winning = apply_winning_record_guard(record, losing.next_rank, scale)
    if not (losing.adjusted or winning.adjusted):
        return winning.next_rank, event

    current_slot = encode_rank(record.rank, scale)
    final_slot = encode_rank(winning.next_rank, scale)
    if final_slot > current_slot:
        return winning.next_rank, EVENT_DEMOTION
    if final_slot < current_slot:
        return winning.next_rank, EVENT_PROMOTION
    return winning.next_rank, None
