"""Lower-division (Makushita to Jonokuchi) transition rules.

The four seven-bout divisions are treated as one continuous position axis.
A record moves the competitor by a win-indexed slot delta whose magnitude
depends on where in the division they stand: near the top, promotions move
less and demotions move more; near the bottom the reverse.  Extreme records
get a small bounded random shift that reproduces the slot shuffling of a
real banzuke.  Tables live in ``rules/lower_division.json``.
"""

from __future__ import annotations

import random
from dataclasses import dataclass
from functools import lru_cache

from sumo_career.constants import (
    EAST,
    EVENT_DEMOTION,
    EVENT_PROMOTION,
    EVENT_PROMOTION_TO_JONOKUCHI,
    JONIDAN,
    JONOKUCHI,
    LOWER_DIVISIONS,
    MAEZUMO,
    MAKUSHITA,
    SANDANME,
    WEST,
)
from sumo_career.models import CompetitionRecord, LowerDivisionQuota, Rank, RuleOutcome, TransitionOptions
from sumo_career.modules.scale_resolver import ResolvedScale
from sumo_career.rules_registry import load_rule_set
from sumo_career.utils import clamp_int, round_half_up


@dataclass(frozen=True)
class DeltaSpec:
    """Range of number movement for one win count; ``sign`` 1 moves up."""

    minimum: int
    maximum: int
    sign: int


def _parse_table(raw: dict) -> dict[int, DeltaSpec]:
    return {
        int(wins): DeltaSpec(minimum=int(spec["min"]), maximum=int(spec["max"]), sign=int(spec["sign"]))
        for wins, spec in raw.items()
    }


@lru_cache(maxsize=8)
def delta_table(division: str) -> dict[int, DeltaSpec]:
    """Win-indexed movement table for *division* with its overrides merged in."""
    rules = load_rule_set("lower_division")
    if division == MAKUSHITA:
        return _parse_table(rules["makushita_deltas"])
    table = _parse_table(rules["default_deltas"])
    table.update(_parse_table(rules["division_overrides"].get(division, {})))
    return table


def delta_spec(division: str, wins: int) -> DeltaSpec | None:
    """Return the movement range for *wins* in *division*, honouring overrides."""
    return delta_table(division).get(wins)


def rank_progress(division: str, number: int, scale: ResolvedScale) -> float:
    """Normalized position inside *division*: 0.0 at the top, 1.0 at the bottom."""
    maximum = scale.maxima[division]
    if maximum <= 1:
        return 0.0
    return (clamp_int(number, 1, maximum) - 1) / (maximum - 1)


def number_delta(record: CompetitionRecord, scale: ResolvedScale) -> int:
    """Signed number movement for *record*; positive means promotion."""
    division = record.rank.division
    spec = delta_spec(division, record.bounded_wins)
    if spec is None:
        return 0
    progress = rank_progress(division, scale.clamp_number(division, record.rank.number), scale)
    intensity = progress if spec.sign > 0 else 1.0 - progress
    value = round_half_up(spec.minimum + (spec.maximum - spec.minimum) * intensity)
    return value * spec.sign


def _linear_position(division: str, number: int, side: str | None, scale: ResolvedScale) -> int:
    offset = scale.lower_offsets[division]
    return offset + (scale.clamp_number(division, number) - 1) * 2 + (1 if side == WEST else 0)


def _rank_from_linear_position(position: int, scale: ResolvedScale) -> Rank:
    bounded = clamp_int(position, 0, scale.lower_total - 1)
    for division in LOWER_DIVISIONS:
        start = scale.lower_offsets[division]
        end = start + scale.maxima[division] * 2 - 1
        if start <= bounded <= end:
            relative = bounded - start
            return Rank(
                division=division,
                name=division,
                number=relative // 2 + 1,
                side=EAST if relative % 2 == 0 else WEST,
            )
    return Rank(division=JONOKUCHI, name=JONOKUCHI, number=scale.maxima[JONOKUCHI], side=WEST)


def _extreme_shift(
    wins: int,
    losses: int,
    progress: float,
    rng: random.Random,
) -> int:
    policy = load_rule_set("lower_division")["extreme"]
    extreme_promotion = wins >= int(policy["promotion_min_wins"])
    extreme_demotion = (
        wins <= int(policy["demotion_max_wins"]) or losses >= int(policy["demotion_min_losses"])
    )
    if not (extreme_promotion or extreme_demotion):
        return 0

    if extreme_promotion:
        if progress >= float(policy["promotion_top_progress"]):
            bias = -1
        elif progress <= float(policy["promotion_bottom_progress"]):
            bias = 1
        else:
            bias = 0
    else:
        if progress <= float(policy["demotion_top_progress"]):
            bias = 1
        elif progress >= float(policy["demotion_bottom_progress"]):
            bias = -1
        else:
            bias = 0

    jitter = 0
    if rng.random() < float(policy["jitter_chance"]):
        jitter = -1 if rng.random() < 0.5 else 1
    max_shift = int(policy["max_shift"])
    return clamp_int(bias + jitter, -max_shift, max_shift)


def _promotion_blocked(division: str, quota: LowerDivisionQuota | None) -> bool:
    if quota is None:
        return False
    flags = {
        SANDANME: quota.can_promote_to_makushita,
        JONIDAN: quota.can_promote_to_sandanme,
        JONOKUCHI: quota.can_promote_to_jonidan,
    }
    return flags.get(division) is False


def _demotion_blocked(division: str, quota: LowerDivisionQuota | None) -> bool:
    if quota is None:
        return False
    flags = {
        MAKUSHITA: quota.can_demote_to_sandanme,
        SANDANME: quota.can_demote_to_jonidan,
        JONIDAN: quota.can_demote_to_jonokuchi,
    }
    return flags.get(division) is False


def maezumo_change(record: CompetitionRecord, scale: ResolvedScale) -> RuleOutcome:
    """Entry into Jonokuchi for anyone who did not sit out all of Maezumo."""
    if record.absences >= record.scheduled_bouts:
        return RuleOutcome(next_rank=record.rank)
    ratio = float(load_rule_set("banzuke_scale")["maezumo_entry_ratio"])
    number = clamp_int(round_half_up(scale.maxima[JONOKUCHI] * ratio), 1, scale.maxima[JONOKUCHI])
    return RuleOutcome(
        next_rank=Rank(division=JONOKUCHI, name=JONOKUCHI, number=number, side=EAST),
        event=EVENT_PROMOTION_TO_JONOKUCHI,
    )


def lower_division_change(
    record: CompetitionRecord,
    scale: ResolvedScale,
    options: TransitionOptions | None = None,
    rng: random.Random | None = None,
) -> RuleOutcome:
    """Candidate next rank for a Makushita-to-Jonokuchi (or Maezumo) record."""
    randomizer = rng or random.Random()
    current = record.rank
    if current.division == MAEZUMO:
        return maezumo_change(record, scale)
    if current.division not in LOWER_DIVISIONS:
        return RuleOutcome(next_rank=current)

    quota = options.lower_division_quota if options is not None else None
    division = current.division
    wins = record.bounded_wins
    losses = record.total_losses
    number = scale.clamp_number(division, current.number)
    side = current.side or EAST
    progress = rank_progress(division, number, scale)

    current_position = _linear_position(division, number, side, scale)
    next_position = current_position - number_delta(record, scale) * 2
    nudge_raw = quota.enemy_half_step_nudge if quota is not None else 0.0
    next_position += clamp_int(round_half_up(nudge_raw or 0.0), -1, 1)
    next_position += _extreme_shift(wins, losses, progress, randomizer)

    # Jonokuchi never falls back into Maezumo.
    next_position = clamp_int(next_position, 0, scale.lower_total - 1)

    division_start = scale.lower_offsets[division]
    division_end = division_start + scale.maxima[division] * 2 - 1
    if _promotion_blocked(division, quota) and next_position < division_start:
        next_position = division_start
    if _demotion_blocked(division, quota) and next_position > division_end:
        next_position = division_end

    if losses > wins and next_position < current_position:
        next_position = current_position

    target = _rank_from_linear_position(next_position, scale)
    if division == MAKUSHITA and wins == record.scheduled_bouts and target.division == MAKUSHITA:
        cap = int(load_rule_set("lower_division")["perfect_record_makushita_cap"])
        target = Rank(
            division=MAKUSHITA,
            name=MAKUSHITA,
            number=min(target.number or cap, cap),
            side=EAST,
        )

    current_index = LOWER_DIVISIONS.index(division)
    target_index = LOWER_DIVISIONS.index(target.division)
    if target_index < current_index:
        event = EVENT_PROMOTION
    elif target_index > current_index:
        event = EVENT_DEMOTION
    else:
        event = None
    return RuleOutcome(next_rank=target, event=event)
