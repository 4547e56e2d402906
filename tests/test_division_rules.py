import random

import pytest

from sumo_career.constants import (
    EVENT_DEMOTION,
    EVENT_DEMOTION_TO_JURYO,
    EVENT_DEMOTION_TO_KOMUSUBI,
    EVENT_DEMOTION_TO_MAEGASHIRA,
    EVENT_DEMOTION_TO_MAKUSHITA,
    EVENT_PROMOTION,
    EVENT_PROMOTION_TO_JONOKUCHI,
    EVENT_PROMOTION_TO_JURYO,
    EVENT_PROMOTION_TO_KOMUSUBI,
    EVENT_PROMOTION_TO_MAKUUCHI,
    EVENT_PROMOTION_TO_OZEKI,
    EVENT_PROMOTION_TO_SEKIWAKE,
    JONIDAN,
    JONOKUCHI,
    JURYO,
    KOMUSUBI,
    MAEGASHIRA,
    MAEZUMO,
    MAKUSHITA,
    MAKUUCHI,
    OZEKI,
    SANDANME,
    SEKIWAKE,
)
from sumo_career.models import (
    CompetitionRecord,
    LowerDivisionQuota,
    Rank,
    SekitoriQuota,
    TopDivisionQuota,
    TransitionOptions,
)
from sumo_career.modules.lower_division import (
    DeltaSpec,
    delta_spec,
    delta_table,
    lower_division_change,
    number_delta,
    rank_progress,
)
from sumo_career.modules.rank_codec import encode_rank
from sumo_career.modules.scale_resolver import resolve_scale
from sumo_career.modules.sekitori_boundary import (
    juryo_change,
    makushita_promotion,
    normalize_assigned_rank,
    should_demote_to_makushita,
)
from sumo_career.modules.top_division import makuuchi_change, resolve_assigned_event, should_demote_to_juryo


def _record(division: str, name: str, number: int | None, wins: int, losses: int, side: str = "East") -> CompetitionRecord:
    return CompetitionRecord(rank=Rank(division, name, number, side), wins=wins, losses=losses)


def _maegashira(number: int, wins: int, side: str = "East") -> CompetitionRecord:
    return _record(MAKUUCHI, MAEGASHIRA, number, wins, 15 - wins, side)


def _juryo(number: int, wins: int, side: str = "East") -> CompetitionRecord:
    return _record(JURYO, JURYO, number, wins, 15 - wins, side)


# ---------------------------------------------------------------------------
# Makuuchi
# ---------------------------------------------------------------------------

def test_maegashira_one_with_ten_wins_reaches_komusubi() -> None:
    outcome = makuuchi_change(_maegashira(1, 10), resolve_scale())

    assert outcome.next_rank.name == KOMUSUBI
    assert outcome.event == EVENT_PROMOTION_TO_KOMUSUBI


def test_maegashira_two_with_twelve_wins_reaches_sekiwake() -> None:
    outcome = makuuchi_change(_maegashira(2, 12), resolve_scale())

    assert outcome.next_rank.name == SEKIWAKE
    assert outcome.event == EVENT_PROMOTION_TO_SEKIWAKE


@pytest.mark.parametrize(
    "number,wins,expected",
    [
        (8, 8, 7),
        (3, 5, 10),
        (5, 9, 3),
        (16, 7, 17),
    ],
)
def test_maegashira_moves_by_scaled_score(number: int, wins: int, expected: int) -> None:
    options = TransitionOptions(top_division_quota=TopDivisionQuota(can_demote_to_juryo=False))

    outcome = makuuchi_change(_maegashira(number, wins), resolve_scale(), options)

    assert outcome.next_rank.name == MAEGASHIRA
    assert outcome.next_rank.number == expected
    assert outcome.event is None


def test_bottom_maegashira_losing_record_drops_to_juryo() -> None:
    outcome = makuuchi_change(_maegashira(16, 7), resolve_scale())

    assert outcome.next_rank == Rank(JURYO, JURYO, 4, "East")
    assert outcome.event == EVENT_DEMOTION_TO_JURYO


def test_winless_maegashira_always_drops_to_juryo() -> None:
    outcome = makuuchi_change(_maegashira(3, 0), resolve_scale())

    assert outcome.next_rank == Rank(JURYO, JURYO, 1, "East")


@pytest.mark.parametrize(
    "number,wins,expected",
    [(16, 7, True), (15, 7, False), (14, 5, True), (12, 4, True), (12, 5, False), (1, 0, True)],
)
def test_should_demote_to_juryo_table(number: int, wins: int, expected: bool) -> None:
    assert should_demote_to_juryo(number, wins) is expected


def test_sekiwake_transitions() -> None:
    scale = resolve_scale()

    kept = makuuchi_change(_record(MAKUUCHI, SEKIWAKE, None, 8, 7), scale)
    komusubi = makuuchi_change(_record(MAKUUCHI, SEKIWAKE, None, 7, 8), scale)
    maegashira = makuuchi_change(_record(MAKUUCHI, SEKIWAKE, None, 5, 10), scale)

    assert kept.next_rank.name == SEKIWAKE and kept.event is None
    assert komusubi.next_rank.name == KOMUSUBI
    assert komusubi.event == EVENT_DEMOTION_TO_KOMUSUBI
    assert maegashira.next_rank == Rank(MAKUUCHI, MAEGASHIRA, 4, "East")
    assert maegashira.event == EVENT_DEMOTION_TO_MAEGASHIRA


def test_komusubi_with_ten_wins_reaches_sekiwake() -> None:
    outcome = makuuchi_change(_record(MAKUUCHI, KOMUSUBI, None, 10, 5), resolve_scale())

    assert outcome.next_rank.name == SEKIWAKE


def test_assigned_ozeki_is_tagged_as_promotion() -> None:
    event = resolve_assigned_event(Rank(MAKUUCHI, SEKIWAKE, side="East"), Rank(MAKUUCHI, OZEKI, side="East"))

    assert event == EVENT_PROMOTION_TO_OZEKI


def test_enforced_sanyaku_overrides_maegashira_rules() -> None:
    options = TransitionOptions(top_division_quota=TopDivisionQuota(enforced_sanyaku=SEKIWAKE))

    outcome = makuuchi_change(_maegashira(4, 9), resolve_scale(), options)

    assert outcome.next_rank.name == SEKIWAKE
    assert outcome.event == EVENT_PROMOTION_TO_SEKIWAKE


# ---------------------------------------------------------------------------
# Juryo and the salaried boundary
# ---------------------------------------------------------------------------

@pytest.mark.parametrize(
    "number,wins,expected",
    [(1, 10, 16), (1, 12, 14), (2, 11, 15), (3, 12, 14), (5, 13, 12)],
)
def test_juryo_promotion_to_makuuchi(number: int, wins: int, expected: int) -> None:
    outcome = juryo_change(_juryo(number, wins), resolve_scale())

    assert outcome.next_rank == Rank(MAKUUCHI, MAEGASHIRA, expected, "East")
    assert outcome.event == EVENT_PROMOTION_TO_MAKUUCHI


def test_juryo_promotion_blocked_by_quota_stays_in_juryo() -> None:
    options = TransitionOptions(top_division_quota=TopDivisionQuota(can_promote_to_makuuchi=False))

    outcome = juryo_change(_juryo(1, 10), resolve_scale(), options)

    assert outcome.next_rank == Rank(JURYO, JURYO, 1, "East")
    assert outcome.event is None


def test_bottom_juryo_losing_record_drops_to_makushita() -> None:
    outcome = juryo_change(_juryo(14, 7), resolve_scale())

    assert outcome.next_rank == Rank(MAKUSHITA, MAKUSHITA, 5, "East")
    assert outcome.event == EVENT_DEMOTION_TO_MAKUSHITA


def test_forced_quota_demotion_from_mid_juryo() -> None:
    record = _juryo(11, 6)
    assert not should_demote_to_makushita(11, 6)

    options = TransitionOptions(sekitori_quota=SekitoriQuota(can_demote_to_makushita=True))
    outcome = juryo_change(record, resolve_scale(), options)

    assert outcome.next_rank == Rank(MAKUSHITA, MAKUSHITA, 5, "East")


def test_blocked_quota_demotion_keeps_juryo() -> None:
    options = TransitionOptions(sekitori_quota=SekitoriQuota(can_demote_to_makushita=False))

    outcome = juryo_change(_juryo(14, 7), resolve_scale(), options)

    assert outcome.next_rank == Rank(JURYO, JURYO, 14, "West")


def test_juryo_half_step_nudge() -> None:
    options = TransitionOptions(sekitori_quota=SekitoriQuota(enemy_half_step_nudge=1.0))

    plain = juryo_change(_juryo(8, 9), resolve_scale())
    nudged = juryo_change(_juryo(8, 9), resolve_scale(), options)

    assert plain.next_rank == Rank(JURYO, JURYO, 5, "East")
    assert nudged.next_rank == Rank(JURYO, JURYO, 5, "West")


@pytest.mark.parametrize(
    "number,wins,promoted",
    [(15, 7, True), (1, 4, True), (5, 6, True), (6, 6, False), (2, 5, False), (16, 7, False)],
)
def test_makushita_promotion_to_juryo(number: int, wins: int, promoted: bool) -> None:
    record = _record(MAKUSHITA, MAKUSHITA, number, wins, 7 - wins)

    outcome = makushita_promotion(record, resolve_scale())

    if promoted:
        assert outcome is not None
        assert outcome.next_rank == Rank(JURYO, JURYO, 14, "East")
        assert outcome.event == EVENT_PROMOTION_TO_JURYO
    else:
        assert outcome is None


def test_makushita_promotion_blocked_by_quota() -> None:
    options = TransitionOptions(sekitori_quota=SekitoriQuota(can_promote_to_juryo=False))

    assert makushita_promotion(_record(MAKUSHITA, MAKUSHITA, 1, 7, 0), resolve_scale(), options) is None


def test_assigned_makushita_drop_is_no_deeper_than_rule_target() -> None:
    scale = resolve_scale()
    record = _juryo(14, 7)

    deep = normalize_assigned_rank(record, Rank(MAKUSHITA, MAKUSHITA, 20, "West"), scale)
    shallow = normalize_assigned_rank(record, Rank(MAKUSHITA, MAKUSHITA, 2, "West"), scale)
    juryo = normalize_assigned_rank(record, Rank(JURYO, JURYO, 13, "West"), scale)

    assert deep == Rank(MAKUSHITA, MAKUSHITA, 5, "East")
    assert shallow == Rank(MAKUSHITA, MAKUSHITA, 2, "East")
    assert juryo == Rank(JURYO, JURYO, 13, "West")
    assert normalize_assigned_rank(record, None, scale) is None


# ---------------------------------------------------------------------------
# Lower divisions
# ---------------------------------------------------------------------------

def test_rank_progress_spans_division() -> None:
    scale = resolve_scale()

    assert rank_progress(MAKUSHITA, 1, scale) == 0.0
    assert rank_progress(MAKUSHITA, 60, scale) == 1.0


def test_delta_tables_merge_overrides_and_are_cached() -> None:
    assert delta_spec(JONIDAN, 4) == DeltaSpec(minimum=6, maximum=10, sign=1)
    assert delta_spec(JONIDAN, 3) == DeltaSpec(minimum=8, maximum=14, sign=-1)
    assert delta_spec(MAKUSHITA, 9) is None
    assert delta_table(SANDANME) is delta_table(SANDANME)


def test_number_delta_depends_on_position() -> None:
    scale = resolve_scale()

    assert number_delta(_record(MAKUSHITA, MAKUSHITA, 1, 7, 0), scale) == 22
    assert number_delta(_record(MAKUSHITA, MAKUSHITA, 60, 7, 0), scale) == 34
    assert number_delta(_record(SANDANME, SANDANME, 1, 0, 7), scale) == -72
    assert number_delta(_record(SANDANME, SANDANME, 45, 3, 4), scale) == -11


def test_non_extreme_lower_records_are_deterministic() -> None:
    scale = resolve_scale()

    sandanme = lower_division_change(_record(SANDANME, SANDANME, 45, 3, 4), scale, rng=random.Random(1))
    jonidan = lower_division_change(_record(JONIDAN, JONIDAN, 10, 4, 3), scale, rng=random.Random(2))

    assert sandanme.next_rank == Rank(SANDANME, SANDANME, 56, "East")
    assert sandanme.event is None
    assert jonidan.next_rank == Rank(JONIDAN, JONIDAN, 4, "East")


@pytest.mark.parametrize("seed", range(12))
def test_strong_sandanme_record_crosses_into_makushita(seed: int) -> None:
    outcome = lower_division_change(
        _record(SANDANME, SANDANME, 3, 6, 1),
        resolve_scale(),
        rng=random.Random(seed),
    )

    assert outcome.next_rank.division == MAKUSHITA
    assert outcome.next_rank.number in (47, 48)
    assert outcome.event == EVENT_PROMOTION


@pytest.mark.parametrize("seed", range(12))
def test_blocked_promotion_stops_at_division_top(seed: int) -> None:
    options = TransitionOptions(lower_division_quota=LowerDivisionQuota(can_promote_to_makushita=False))

    outcome = lower_division_change(
        _record(SANDANME, SANDANME, 3, 6, 1),
        resolve_scale(),
        options,
        rng=random.Random(seed),
    )

    assert outcome.next_rank == Rank(SANDANME, SANDANME, 1, "East")
    assert outcome.event is None


@pytest.mark.parametrize("seed", range(12))
def test_blocked_demotion_stops_at_division_bottom(seed: int) -> None:
    record = _record(MAKUSHITA, MAKUSHITA, 58, 1, 6)
    options = TransitionOptions(lower_division_quota=LowerDivisionQuota(can_demote_to_sandanme=False))

    free = lower_division_change(record, resolve_scale(), rng=random.Random(seed))
    blocked = lower_division_change(record, resolve_scale(), options, rng=random.Random(seed))

    assert free.next_rank.division == SANDANME
    assert free.event == EVENT_DEMOTION
    assert blocked.next_rank == Rank(MAKUSHITA, MAKUSHITA, 60, "West")


@pytest.mark.parametrize("seed", range(12))
def test_perfect_makushita_record_is_capped(seed: int) -> None:
    outcome = lower_division_change(
        _record(MAKUSHITA, MAKUSHITA, 60, 7, 0),
        resolve_scale(),
        rng=random.Random(seed),
    )

    assert outcome.next_rank == Rank(MAKUSHITA, MAKUSHITA, 15, "East")


@pytest.mark.parametrize("seed", range(20))
def test_losing_lower_record_never_moves_up(seed: int) -> None:
    rng = random.Random(seed)
    division = rng.choice([MAKUSHITA, SANDANME, JONIDAN])
    number = rng.randint(1, 60)
    wins = rng.randint(0, 3)
    current = Rank(division, division, number, rng.choice(["East", "West"]))
    options = TransitionOptions(lower_division_quota=LowerDivisionQuota(enemy_half_step_nudge=-1.0))
    scale = resolve_scale()

    outcome = lower_division_change(
        CompetitionRecord(rank=current, wins=wins, losses=7 - wins),
        scale,
        options,
        rng=rng,
    )

    assert encode_rank(outcome.next_rank, scale) >= encode_rank(current, scale)


def test_maezumo_entry_into_jonokuchi() -> None:
    record = CompetitionRecord(rank=Rank(MAEZUMO, MAEZUMO), wins=2, losses=1)

    outcome = lower_division_change(record, resolve_scale())

    assert outcome.next_rank == Rank(JONOKUCHI, JONOKUCHI, 20, "East")
    assert outcome.event == EVENT_PROMOTION_TO_JONOKUCHI


def test_fully_absent_maezumo_stays() -> None:
    record = CompetitionRecord(rank=Rank(MAEZUMO, MAEZUMO), wins=0, losses=0, absences=3)

    outcome = lower_division_change(record, resolve_scale())

    assert outcome.next_rank == Rank(MAEZUMO, MAEZUMO)
    assert outcome.event is None
