#!/usr/bin/env python3
"""Quick banzuke calibration checks.

Runs ``next_rank`` over a grid of representative ranks and records with many
seeds and reports, per case, the spread of resulting ranks and how often a
record-direction rule was broken.  Use it after touching a rule table in
``sumo_career/rules`` to see whether movement stays in a realistic band.
"""

from __future__ import annotations

import argparse
import logging
import random
import statistics
import sys
from collections import Counter
from dataclasses import dataclass
from pathlib import Path


def _bootstrap_project_path() -> None:
    root = Path(__file__).resolve().parents[1]
    candidate = str(root)
    if candidate not in sys.path:
        sys.path.insert(0, candidate)


_bootstrap_project_path()

from sumo_career.constants import (
    JONIDAN,
    JONOKUCHI,
    JURYO,
    KOMUSUBI,
    MAEGASHIRA,
    MAKUSHITA,
    MAKUUCHI,
    SANDANME,
    SEKIWAKE,
    STRICT_DEMOTION_DIVISIONS,
    STRICT_NON_DEMOTION_DIVISIONS,
)
from sumo_career.models import CompetitionRecord, Rank
from sumo_career.modules.rank_codec import encode_rank, format_rank
from sumo_career.modules.rank_engine import next_rank


@dataclass(frozen=True)
class CheckCase:
    rank: Rank
    wins: int
    losses: int
    absences: int = 0


@dataclass(frozen=True)
class CaseReport:
    label: str
    slot_moves: list[int]
    outcomes: Counter
    direction_violations: int


def _case_grid() -> list[CheckCase]:
    cases: list[CheckCase] = [
        CheckCase(Rank(MAKUUCHI, SEKIWAKE, side="East"), 7, 8),
        CheckCase(Rank(MAKUUCHI, KOMUSUBI, side="West"), 9, 6),
        CheckCase(Rank(MAKUUCHI, MAEGASHIRA, 8, "East"), 8, 7),
        CheckCase(Rank(MAKUUCHI, MAEGASHIRA, 16, "West"), 6, 9),
        CheckCase(Rank(JURYO, JURYO, 1, "East"), 10, 5),
        CheckCase(Rank(JURYO, JURYO, 13, "West"), 6, 9),
        CheckCase(Rank(JURYO, JURYO, 7, "East"), 0, 0, 15),
    ]
    for division in (MAKUSHITA, SANDANME, JONIDAN, JONOKUCHI):
        for wins in (7, 4, 3, 0):
            cases.append(CheckCase(Rank(division, division, 10, "East"), wins, 7 - wins))
    return cases


def _violates_direction(case: CheckCase, before: int, after: int) -> bool:
    losses = case.losses + case.absences
    division = case.rank.division
    if case.wins > losses and division in STRICT_NON_DEMOTION_DIVISIONS:
        return after > before
    if case.wins < losses and division in STRICT_DEMOTION_DIVISIONS:
        return after < before
    return False


def run_case(case: CheckCase, runs: int) -> CaseReport:
    record = CompetitionRecord(
        rank=case.rank,
        wins=case.wins,
        losses=case.losses,
        absences=case.absences,
    )
    before = encode_rank(case.rank)
    moves: list[int] = []
    outcomes: Counter = Counter()
    violations = 0
    for seed in range(runs):
        result = next_rank(record, rng=random.Random(seed))
        after = encode_rank(result.next_rank)
        moves.append(before - after)
        outcomes[format_rank(result.next_rank)] += 1
        if _violates_direction(case, before, after):
            violations += 1
    label = f"{format_rank(case.rank)} {case.wins}-{case.losses}-{case.absences}"
    return CaseReport(label=label, slot_moves=moves, outcomes=outcomes, direction_violations=violations)


def _print_report(report: CaseReport) -> None:
    common = ", ".join(f"{name} x{count}" for name, count in report.outcomes.most_common(3))
    print(
        f"{report.label:<32} move avg {statistics.mean(report.slot_moves):+7.2f} "
        f"min {min(report.slot_moves):+4d} max {max(report.slot_moves):+4d} "
        f"violations {report.direction_violations} | {common}"
    )


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run banzuke calibration checks.")
    parser.add_argument(
        "--runs",
        type=int,
        default=200,
        help="Seeds per case (default: 200).",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Log every transition at DEBUG level.",
    )
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    if args.runs < 1:
        raise SystemExit("--runs must be >= 1")
    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")

    reports = [run_case(case, args.runs) for case in _case_grid()]
    print(f"Banzuke checks | runs per case: {args.runs}")
    for report in reports:
        _print_report(report)
    total_violations = sum(report.direction_violations for report in reports)
    if total_violations:
        raise SystemExit(f"{total_violations} record-direction violations found")


if __name__ == "__main__":
    main()
