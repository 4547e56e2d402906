"""Top-division (Makuuchi) transition rules.

Covers Sekiwake, Komusubi and Maegashira.  Yokozuna and Ozeki are handled
by the rank engine before these rules run.  Thresholds are read from
``rules/top_division.json``.
"""

from __future__ import annotations

import math

from sumo_career.constants import (
    EAST,
    EVENT_DEMOTION_TO_JURYO,
    EVENT_DEMOTION_TO_KOMUSUBI,
    EVENT_DEMOTION_TO_MAEGASHIRA,
    EVENT_PROMOTION_TO_KOMUSUBI,
    EVENT_PROMOTION_TO_MAKUUCHI,
    EVENT_PROMOTION_TO_OZEKI,
    EVENT_PROMOTION_TO_SEKIWAKE,
    JURYO,
    KOMUSUBI,
    MAEGASHIRA,
    MAKUUCHI,
    OZEKI,
    SEKIWAKE,
)
from sumo_career.models import CompetitionRecord, Rank, RuleOutcome, TransitionOptions
from sumo_career.modules.scale_resolver import ResolvedScale
from sumo_career.rules_registry import load_rule_set
from sumo_career.utils import clamp_int

_PROMOTION_EVENTS = {
    SEKIWAKE: EVENT_PROMOTION_TO_SEKIWAKE,
    KOMUSUBI: EVENT_PROMOTION_TO_KOMUSUBI,
}


def _sanyaku(name: str) -> Rank:
    return Rank(division=MAKUUCHI, name=name, side=EAST)


def _maegashira(number: int, scale: ResolvedScale) -> Rank:
    return Rank(
        division=MAKUUCHI,
        name=MAEGASHIRA,
        number=scale.clamp_number(MAKUUCHI, number),
        side=EAST,
    )


def resolve_assigned_event(current: Rank, assigned: Rank) -> str | None:
    """Event tag for an externally assigned top-division rank."""
    if current.division != assigned.division:
        if current.division == JURYO and assigned.division == MAKUUCHI:
            return EVENT_PROMOTION_TO_MAKUUCHI
        if current.division == MAKUUCHI and assigned.division == JURYO:
            return EVENT_DEMOTION_TO_JURYO
        return None
    if current.division != MAKUUCHI or current.name == assigned.name:
        return None
    if assigned.name == OZEKI:
        return EVENT_PROMOTION_TO_OZEKI
    if assigned.name == SEKIWAKE:
        return EVENT_PROMOTION_TO_SEKIWAKE
    if assigned.name == KOMUSUBI:
        return EVENT_DEMOTION_TO_KOMUSUBI if current.name == SEKIWAKE else EVENT_PROMOTION_TO_KOMUSUBI
    if assigned.name == MAEGASHIRA:
        return EVENT_DEMOTION_TO_MAEGASHIRA
    return None


def _enforced_sanyaku(record: CompetitionRecord, target_name: str) -> RuleOutcome:
    current = record.rank
    if current.name == target_name:
        return RuleOutcome(next_rank=current)
    if target_name == SEKIWAKE:
        return RuleOutcome(next_rank=_sanyaku(SEKIWAKE), event=EVENT_PROMOTION_TO_SEKIWAKE)
    event = EVENT_DEMOTION_TO_KOMUSUBI if current.name == SEKIWAKE else EVENT_PROMOTION_TO_KOMUSUBI
    return RuleOutcome(next_rank=_sanyaku(KOMUSUBI), event=event)


def _sanyaku_change(record: CompetitionRecord, scale: ResolvedScale) -> RuleOutcome:
    rules = load_rule_set("top_division")
    wins = record.bounded_wins
    current = record.rank
    if current.name == SEKIWAKE:
        policy = rules["sekiwake"]
        if wins >= int(policy["retain_min_wins"]):
            return RuleOutcome(next_rank=current)
        if wins >= int(policy["komusubi_min_wins"]):
            return RuleOutcome(next_rank=_sanyaku(KOMUSUBI), event=EVENT_DEMOTION_TO_KOMUSUBI)
        return RuleOutcome(
            next_rank=_maegashira(1 + (8 - wins), scale),
            event=EVENT_DEMOTION_TO_MAEGASHIRA,
        )

    policy = rules["komusubi"]
    if wins >= int(policy["sekiwake_min_wins"]):
        return RuleOutcome(next_rank=_sanyaku(SEKIWAKE), event=EVENT_PROMOTION_TO_SEKIWAKE)
    if wins >= int(policy["retain_min_wins"]):
        return RuleOutcome(next_rank=current)
    return RuleOutcome(
        next_rank=_maegashira(1 + (8 - wins), scale),
        event=EVENT_DEMOTION_TO_MAEGASHIRA,
    )


def should_demote_to_juryo(number: int, wins: int) -> bool:
    """Whether a Maegashira record falls into the demotion-to-Juryo table."""
    if wins == 0:
        return True
    for row in load_rule_set("top_division")["juryo_demotion"]:
        if number >= int(row["min_number"]) and wins <= int(row["max_wins"]):
            return True
    return False


def _scaled_move(number: int, diff: int) -> int:
    scaling = load_rule_set("top_division")["move_scaling"]
    upper_band = number <= int(scaling["upper_band_max_number"])
    if diff > 0:
        factor = float(scaling["promotion_upper" if upper_band else "promotion_lower"])
        return max(1, math.floor(diff * factor))
    if diff < 0:
        factor = float(scaling["demotion_upper" if upper_band else "demotion_lower"])
        return math.ceil(diff * factor)
    return 0


def makuuchi_change(
    record: CompetitionRecord,
    scale: ResolvedScale,
    options: TransitionOptions | None = None,
) -> RuleOutcome:
    """Candidate next rank for a Sekiwake, Komusubi or Maegashira record."""
    current = record.rank
    quota = options.top_division_quota if options is not None else None

    if quota is not None and quota.enforced_sanyaku in (SEKIWAKE, KOMUSUBI):
        if current.name in (SEKIWAKE, KOMUSUBI, MAEGASHIRA):
            return _enforced_sanyaku(record, quota.enforced_sanyaku)

    if current.name in (SEKIWAKE, KOMUSUBI):
        return _sanyaku_change(record, scale)
    if current.name != MAEGASHIRA:
        return RuleOutcome(next_rank=current)

    rules = load_rule_set("top_division")
    wins = record.bounded_wins
    losses = record.total_losses
    number = scale.clamp_number(MAKUUCHI, current.number)

    for row in rules["maegashira_promotion"]:
        if number <= int(row["max_number"]) and wins >= int(row["min_wins"]):
            target = str(row["target"])
            return RuleOutcome(next_rank=_sanyaku(target), event=_PROMOTION_EVENTS[target])

    demotion_blocked = quota is not None and quota.can_demote_to_juryo is False
    if should_demote_to_juryo(number, wins) and not demotion_blocked:
        severity = max(0, losses - wins)
        anchor = int(rules["juryo_demotion_anchor"])
        juryo_number = clamp_int((number - anchor) + severity // 2, 1, scale.maxima[JURYO])
        return RuleOutcome(
            next_rank=Rank(division=JURYO, name=JURYO, number=juryo_number, side=EAST),
            event=EVENT_DEMOTION_TO_JURYO,
        )

    move = _scaled_move(number, record.score_diff)
    new_number = clamp_int(number - move, 1, scale.maxima[MAKUUCHI])
    return RuleOutcome(next_rank=current.with_number(new_number))
