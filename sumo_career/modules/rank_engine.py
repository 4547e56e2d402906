"""Next-rank computation for one finalized tournament record.

Precedence, first match wins:

1. Yokozuna never drops.
2. Ozeki: Yokozuna promotion when the external criterion holds, retention
   on eight wins, otherwise kadoban and, if already kadoban, demotion to
   Sekiwake with the reinstatement flag set.
3. A Sekiwake/Komusubi with the reinstatement flag and ten wins returns to
   Ozeki.
4. Three straight sanyaku tournaments totalling 33 wins (ten in the latest)
   earn Ozeki.
5. An externally assigned next rank, when it is a real change and does not
   hand out an unearned Yokozuna or Ozeki.
6. The standard rule for the current division.

Every candidate then passes through the direction guards and side
assignment.
"""

from __future__ import annotations

import logging
import random
from collections.abc import Sequence

from sumo_career.constants import (
    EAST,
    EVENT_DEMOTION,
    EVENT_DEMOTION_TO_SEKIWAKE,
    EVENT_KADOBAN,
    EVENT_PROMOTION,
    EVENT_PROMOTION_TO_OZEKI,
    EVENT_PROMOTION_TO_YOKOZUNA,
    FIXED_SIDE_DIVISIONS,
    JURYO,
    MAEZUMO,
    MAKUSHITA,
    MAKUUCHI,
    OZEKI,
    SANYAKU_NAMES,
    SEKIWAKE,
    SEKITORI_DIVISIONS,
    WEST,
    YOKOZUNA,
)
from sumo_career.models import (
    CompetitionRecord,
    Rank,
    RuleOutcome,
    TransitionOptions,
    TransitionResult,
)
from sumo_career.modules.direction_guard import apply_direction_guards
from sumo_career.modules.lower_division import lower_division_change
from sumo_career.modules.rank_codec import canonical_rank, format_rank, is_sanyaku, rank_order_value
from sumo_career.modules.scale_resolver import ResolvedScale, resolve_scale
from sumo_career.modules.sekitori_boundary import juryo_change, makushita_promotion, normalize_assigned_rank
from sumo_career.modules.top_division import makuuchi_change, resolve_assigned_event

logger = logging.getLogger(__name__)

OZEKI_RETAIN_MIN_WINS = 8
OZEKI_RETURN_MIN_WINS = 10
OZEKI_CHAIN_TOTAL_WINS = 33
OZEKI_CHAIN_LATEST_WINS = 10


def _top_rank(name: str) -> Rank:
    return Rank(division=MAKUUCHI, name=name, side=EAST)


def can_promote_to_ozeki_by_wins(
    record: CompetitionRecord,
    past_records: Sequence[CompetitionRecord],
) -> bool:
    """Three consecutive sanyaku records with 33 total wins and 10 in the latest.

    Only the two newest entries of *past_records* are inspected; whether
    they were actually consecutive tournaments is the caller's concern.
    """
    if len(past_records) < 2:
        return False
    chain = [record, past_records[0], past_records[1]]
    if not all(is_sanyaku(item.rank) for item in chain):
        return False
    total = sum(item.bounded_wins for item in chain)
    return total >= OZEKI_CHAIN_TOTAL_WINS and record.bounded_wins >= OZEKI_CHAIN_LATEST_WINS


def _is_real_change(current: Rank, assigned: Rank) -> bool:
    return (
        assigned.division != current.division
        or assigned.name != current.name
        or assigned.number != current.number
        or assigned.side != current.side
    )


def _unearned_promotion(
    assigned: Rank,
    record: CompetitionRecord,
    past_records: Sequence[CompetitionRecord],
    options: TransitionOptions,
) -> bool:
    if assigned.name == YOKOZUNA:
        return record.rank.name != OZEKI or not options.yokozuna_promotion
    if assigned.name == OZEKI:
        return not can_promote_to_ozeki_by_wins(record, past_records)
    return False


def _boundary_event(current: Rank, assigned: Rank, scale: ResolvedScale) -> str | None:
    current_value = rank_order_value(current, scale)
    assigned_value = rank_order_value(assigned, scale)
    if assigned_value < current_value:
        return EVENT_PROMOTION
    if assigned_value > current_value:
        return EVENT_DEMOTION
    return None


def standard_change(
    record: CompetitionRecord,
    scale: ResolvedScale,
    options: TransitionOptions | None = None,
    rng: random.Random | None = None,
) -> RuleOutcome:
    """Dispatch *record* to the rule set of its division."""
    division = record.rank.division
    if division == MAKUUCHI:
        return makuuchi_change(record, scale, options)
    if division == JURYO:
        return juryo_change(record, scale, options)
    if division == MAKUSHITA:
        promoted = makushita_promotion(record, scale, options)
        if promoted is not None:
            return promoted
    return lower_division_change(record, scale, options, rng)


def _override_outcome(
    record: CompetitionRecord,
    past_records: Sequence[CompetitionRecord],
    scale: ResolvedScale,
    options: TransitionOptions,
) -> RuleOutcome | None:
    current = record.rank

    top_quota = options.top_division_quota
    assigned_top = top_quota.assigned_next_rank if top_quota is not None else None
    if assigned_top is not None and current.division in SEKITORI_DIVISIONS:
        assigned_top = canonical_rank(assigned_top, scale)
        if not _is_real_change(current, assigned_top):
            logger.debug("Ignoring assigned rank %s: no change", format_rank(assigned_top))
        elif _unearned_promotion(assigned_top, record, past_records, options):
            logger.debug("Rejecting unearned assigned rank %s", format_rank(assigned_top))
        else:
            return RuleOutcome(
                next_rank=assigned_top,
                event=resolve_assigned_event(current, assigned_top),
            )

    if current.division == MAEZUMO:
        return None
    sekitori_quota = options.sekitori_quota
    lower_quota = options.lower_division_quota
    raw_boundary = (
        options.boundary_assigned_next_rank
        or (sekitori_quota.assigned_next_rank if sekitori_quota is not None else None)
        or (lower_quota.assigned_next_rank if lower_quota is not None else None)
    )
    assigned = normalize_assigned_rank(record, raw_boundary, scale, options)
    if assigned is None:
        return None
    assigned = canonical_rank(assigned, scale)
    if not _is_real_change(current, assigned):
        logger.debug("Ignoring boundary rank %s: no change", format_rank(assigned))
        return None
    if _unearned_promotion(assigned, record, past_records, options):
        logger.debug("Rejecting unearned boundary rank %s", format_rank(assigned))
        return None
    return RuleOutcome(next_rank=assigned, event=_boundary_event(current, assigned, scale))


def assign_side(
    record: CompetitionRecord,
    candidate: Rank,
    scale: ResolvedScale,
    rng: random.Random,
) -> Rank:
    """Decide East/West for *candidate* given the direction of the move."""
    if candidate.division == MAEZUMO:
        return candidate
    current = record.rank
    if (
        current.division in FIXED_SIDE_DIVISIONS
        and candidate.division in FIXED_SIDE_DIVISIONS
        and candidate.side is not None
    ):
        return candidate

    current_value = rank_order_value(current, scale)
    candidate_value = rank_order_value(candidate, scale)
    wins = record.bounded_wins
    losses = record.total_losses
    if candidate_value < current_value:
        side = EAST
    elif candidate_value > current_value:
        side = WEST
    elif wins > losses:
        side = EAST
    elif wins < losses:
        side = WEST
    else:
        side = current.side or candidate.side or (EAST if rng.random() < 0.5 else WEST)
    return candidate.with_side(side)


def _finalize(
    record: CompetitionRecord,
    outcome: RuleOutcome,
    scale: ResolvedScale,
    rng: random.Random,
) -> TransitionResult:
    candidate = canonical_rank(outcome.next_rank, scale)
    guarded, event = apply_direction_guards(record, candidate, outcome.event, scale)
    final_rank = assign_side(record, guarded, scale, rng)
    logger.debug(
        "%s %d-%d-%d -> %s (%s)",
        format_rank(record.rank),
        record.wins,
        record.losses,
        record.absences,
        format_rank(final_rank),
        event or "no event",
    )
    return TransitionResult(
        next_rank=final_rank,
        event=event,
        kadoban=outcome.kadoban,
        ozeki_return=outcome.ozeki_return,
    )


def next_rank(
    record: CompetitionRecord,
    past_records: Sequence[CompetitionRecord] = (),
    kadoban: bool = False,
    rng: random.Random | None = None,
    options: TransitionOptions | None = None,
) -> TransitionResult:
    """Compute the rank for the next tournament from *record*.

    *past_records* are the preceding records, newest first.  *kadoban* is
    the Ozeki on-notice flag carried from the previous tournament.  All
    randomness comes from *rng*; pass a seeded ``random.Random`` for
    reproducible results.
    """
    randomizer = rng or random.Random()
    opts = options or TransitionOptions()
    scale = resolve_scale(opts.scale)
    current = record.rank
    wins = record.bounded_wins

    if current.name == YOKOZUNA:
        return _finalize(record, RuleOutcome(next_rank=current), scale, randomizer)

    if current.name == OZEKI:
        if opts.yokozuna_promotion:
            outcome = RuleOutcome(next_rank=_top_rank(YOKOZUNA), event=EVENT_PROMOTION_TO_YOKOZUNA)
        elif wins >= OZEKI_RETAIN_MIN_WINS:
            outcome = RuleOutcome(next_rank=current)
        elif kadoban:
            outcome = RuleOutcome(
                next_rank=_top_rank(SEKIWAKE),
                event=EVENT_DEMOTION_TO_SEKIWAKE,
                ozeki_return=True,
            )
        else:
            outcome = RuleOutcome(next_rank=current, event=EVENT_KADOBAN, kadoban=True)
        return _finalize(record, outcome, scale, randomizer)

    if current.name in SANYAKU_NAMES and opts.ozeki_return and wins >= OZEKI_RETURN_MIN_WINS:
        outcome = RuleOutcome(next_rank=_top_rank(OZEKI), event=EVENT_PROMOTION_TO_OZEKI)
        return _finalize(record, outcome, scale, randomizer)

    if can_promote_to_ozeki_by_wins(record, past_records):
        outcome = RuleOutcome(next_rank=_top_rank(OZEKI), event=EVENT_PROMOTION_TO_OZEKI)
        return _finalize(record, outcome, scale, randomizer)

    override = _override_outcome(record, past_records, scale, opts)
    if override is not None:
        return _finalize(record, override, scale, randomizer)

    return _finalize(record, standard_change(record, scale, opts, randomizer), scale, randomizer)
