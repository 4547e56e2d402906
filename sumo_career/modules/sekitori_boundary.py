"""Sekitori boundary rules.

Handles movement inside Juryo, promotion from Juryo to Makuuchi, demotion
from Juryo to Makushita and promotion from upper Makushita into Juryo.
External quota signals can block a crossing, and ``can_demote_to_makushita``
set to ``True`` forces a losing Juryo record out of the salaried tier.
"""

from __future__ import annotations

import math

from sumo_career.constants import (
    EAST,
    EVENT_DEMOTION_TO_MAKUSHITA,
    EVENT_PROMOTION_TO_JURYO,
    EVENT_PROMOTION_TO_MAKUUCHI,
    JURYO,
    MAEGASHIRA,
    MAKUSHITA,
    MAKUUCHI,
    WEST,
)
from sumo_career.models import CompetitionRecord, Rank, RuleOutcome, TransitionOptions
from sumo_career.modules.scale_resolver import ResolvedScale
from sumo_career.rules_registry import load_rule_set
from sumo_career.utils import clamp_int, round_half_up


def _half_step_nudge(raw: float | None) -> int:
    return clamp_int(round_half_up(raw or 0.0), -1, 1)


def should_demote_to_makushita(number: int, wins: int) -> bool:
    """Whether a Juryo record falls into the demotion-to-Makushita table."""
    for row in load_rule_set("sekitori_boundary")["makushita_demotion"]:
        if number >= int(row["min_number"]) and wins <= int(row["max_wins"]):
            return True
    return False


def _makuuchi_promotion_number(number: int, wins: int, scale: ResolvedScale) -> int | None:
    for row in load_rule_set("sekitori_boundary")["makuuchi_promotion"]:
        min_wins = int(row["min_wins"])
        if number <= int(row["max_number"]) and wins >= min_wins:
            target = int(row["base_number"]) - (wins - min_wins)
            return clamp_int(target, int(row["floor_number"]), scale.maxima[MAKUUCHI])
    return None


def _makushita_demotion_number(number: int, wins: int, losses: int, scale: ResolvedScale) -> int:
    rules = load_rule_set("sekitori_boundary")
    deficit = max(0, losses - wins)
    rank_risk = max(0, number - int(rules["makushita_demotion_risk_anchor"]))
    power = float(rules["makushita_demotion_severity_power"])
    severity = max(0, round_half_up(math.pow(deficit, power)) - 1)
    return clamp_int(1 + rank_risk + severity, 1, scale.maxima[MAKUSHITA])


def juryo_change(
    record: CompetitionRecord,
    scale: ResolvedScale,
    options: TransitionOptions | None = None,
) -> RuleOutcome:
    """Candidate next rank for a Juryo record."""
    current = record.rank
    top_quota = options.top_division_quota if options is not None else None
    sekitori_quota = options.sekitori_quota if options is not None else None
    promotion_blocked = top_quota is not None and top_quota.can_promote_to_makuuchi is False
    demotion_blocked = (
        sekitori_quota is not None and sekitori_quota.can_demote_to_makushita is False
    )

    wins = record.bounded_wins
    losses = record.total_losses
    number = scale.clamp_number(JURYO, current.number)

    if not promotion_blocked:
        makuuchi_number = _makuuchi_promotion_number(number, wins, scale)
        if makuuchi_number is not None:
            return RuleOutcome(
                next_rank=Rank(division=MAKUUCHI, name=MAEGASHIRA, number=makuuchi_number, side=EAST),
                event=EVENT_PROMOTION_TO_MAKUUCHI,
            )

    forced_by_quota = (
        sekitori_quota is not None
        and sekitori_quota.can_demote_to_makushita is True
        and losses > wins
    )
    if (should_demote_to_makushita(number, wins) or forced_by_quota) and not demotion_blocked:
        return RuleOutcome(
            next_rank=Rank(
                division=MAKUSHITA,
                name=MAKUSHITA,
                number=_makushita_demotion_number(number, wins, losses, scale),
                side=EAST,
            ),
            event=EVENT_DEMOTION_TO_MAKUSHITA,
        )

    scaling = load_rule_set("sekitori_boundary")["juryo_move_scaling"]
    diff = record.score_diff
    move = diff
    if diff > 0:
        move = max(1, math.floor(diff * float(scaling["promotion"])))
    if diff < 0:
        move = math.ceil(diff * float(scaling["demotion"]))
    juryo_max = scale.maxima[JURYO]
    new_number = clamp_int(number - move, 1, juryo_max)
    if move > 0:
        base_side = EAST
    elif move < 0:
        base_side = WEST
    else:
        base_side = WEST if current.side == WEST else EAST

    position = (new_number - 1) * 2 + (1 if base_side == WEST else 0)
    nudge = _half_step_nudge(sekitori_quota.enemy_half_step_nudge if sekitori_quota else 0.0)
    position = clamp_int(position + nudge, 0, juryo_max * 2 - 1)
    return RuleOutcome(
        next_rank=Rank(
            division=JURYO,
            name=JURYO,
            number=position // 2 + 1,
            side=EAST if position % 2 == 0 else WEST,
        )
    )


def makushita_promotion(
    record: CompetitionRecord,
    scale: ResolvedScale,
    options: TransitionOptions | None = None,
) -> RuleOutcome | None:
    """Promotion from upper Makushita into Juryo, or ``None`` when it does not apply."""
    quota = options.sekitori_quota if options is not None else None
    if quota is not None and quota.can_promote_to_juryo is False:
        return None
    rules = load_rule_set("sekitori_boundary")
    number = scale.clamp_number(MAKUSHITA, record.rank.number)
    wins = record.bounded_wins
    for row in rules["juryo_promotion"]:
        if number <= int(row["max_number"]) and wins >= int(row["min_wins"]):
            entry = scale.clamp_number(JURYO, int(rules["juryo_entry_number"]))
            return RuleOutcome(
                next_rank=Rank(division=JURYO, name=JURYO, number=entry, side=EAST),
                event=EVENT_PROMOTION_TO_JURYO,
            )
    return None


def normalize_assigned_rank(
    record: CompetitionRecord,
    assigned: Rank | None,
    scale: ResolvedScale,
    options: TransitionOptions | None = None,
) -> Rank | None:
    """Keep an assigned Juryo-to-Makushita drop no deeper than the rule's own target."""
    if assigned is None:
        return None
    if record.rank.division != JURYO or assigned.division != MAKUSHITA:
        return assigned
    calibrated = juryo_change(record, scale, options).next_rank
    if calibrated.division != MAKUSHITA:
        return assigned
    makushita_max = scale.maxima[MAKUSHITA]
    number = min(
        assigned.number if assigned.number is not None else makushita_max,
        calibrated.number if calibrated.number is not None else makushita_max,
    )
    return Rank(division=MAKUSHITA, name=MAKUSHITA, number=number, side=EAST)
