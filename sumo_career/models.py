from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from sumo_career.constants import (
    BOUTS_BY_DIVISION,
    DIVISIONS,
    NUMBERED_NAME_BY_DIVISION,
    RANK_NAMES_BY_DIVISION,
    SIDES,
    SPECIAL_RANK_NAMES,
)
from sumo_career.utils import clamp_int, coerce_int


class RankConfigurationError(ValueError):
    """A rank names a division, rank name or side that does not exist."""


@dataclass(frozen=True)
class Rank:
    division: str
    name: str
    number: int | None = None
    side: str | None = None

    def __post_init__(self) -> None:
        if self.division not in DIVISIONS:
            raise RankConfigurationError(f"Unknown division: {self.division!r}")
        if self.name not in RANK_NAMES_BY_DIVISION[self.division]:
            raise RankConfigurationError(
                f"Rank name {self.name!r} does not belong to division {self.division}"
            )
        if self.name in SPECIAL_RANK_NAMES and self.number is not None:
            raise RankConfigurationError(f"{self.name} ranks are never numbered")
        if self.name in NUMBERED_NAME_BY_DIVISION.values() and self.number is None:
            raise RankConfigurationError(f"{self.name} ranks need a number")
        if self.side is not None and self.side not in SIDES:
            raise RankConfigurationError(f"Unknown side: {self.side!r}")

    @property
    def is_special(self) -> bool:
        return self.name in SPECIAL_RANK_NAMES

    def with_side(self, side: str | None) -> "Rank":
        return Rank(division=self.division, name=self.name, number=self.number, side=side)

    def with_number(self, number: int | None) -> "Rank":
        return Rank(division=self.division, name=self.name, number=number, side=self.side)

    def to_dict(self) -> dict[str, Any]:
        return {
            "division": self.division,
            "name": self.name,
            "number": self.number,
            "side": self.side,
        }

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> "Rank":
        return cls(
            division=str(payload["division"]),
            name=str(payload["name"]),
            number=coerce_int(payload.get("number")),
            side=payload.get("side"),
        )


@dataclass
class CompetitionRecord:
    rank: Rank
    wins: int
    losses: int
    absences: int = 0
    championship: bool = False
    special_prizes: list[str] = field(default_factory=list)
    gold_stars: int = 0
    win_method_counts: dict[str, int] = field(default_factory=dict)

    @property
    def scheduled_bouts(self) -> int:
        return BOUTS_BY_DIVISION[self.rank.division]

    @property
    def bounded_wins(self) -> int:
        return clamp_int(self.wins, 0, self.scheduled_bouts)

    @property
    def total_losses(self) -> int:
        """Losses plus absences plus any scheduled bouts left unaccounted for."""
        losses = max(0, int(self.losses))
        absences = max(0, int(self.absences))
        unplayed = max(0, self.scheduled_bouts - (self.bounded_wins + losses + absences))
        return losses + absences + unplayed

    @property
    def score_diff(self) -> int:
        return self.bounded_wins - self.total_losses

    @property
    def fully_absent(self) -> bool:
        return self.absences >= self.scheduled_bouts

    def to_dict(self) -> dict[str, Any]:
        return {
            "rank": self.rank.to_dict(),
            "wins": self.wins,
            "losses": self.losses,
            "absences": self.absences,
            "championship": self.championship,
            "special_prizes": list(self.special_prizes),
            "gold_stars": self.gold_stars,
            "win_method_counts": dict(self.win_method_counts),
        }

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> "CompetitionRecord":
        return cls(
            rank=Rank.from_dict(payload["rank"]),
            wins=int(payload.get("wins", 0)),
            losses=int(payload.get("losses", 0)),
            absences=int(payload.get("absences", 0)),
            championship=bool(payload.get("championship", False)),
            special_prizes=[str(item) for item in payload.get("special_prizes", [])],
            gold_stars=int(payload.get("gold_stars", 0)),
            win_method_counts={
                str(key): int(value)
                for key, value in payload.get("win_method_counts", {}).items()
            },
        )


@dataclass(frozen=True)
class ScaleConfiguration:
    """Per-run override of division slot counts; ``None`` keeps the default."""

    makuuchi: int | None = None
    juryo: int | None = None
    makushita: int | None = None
    sandanme: int | None = None
    jonidan: int | None = None
    jonokuchi: int | None = None

    def slots_for(self, division: str) -> int | None:
        return getattr(self, division.lower(), None)


@dataclass(frozen=True)
class TopDivisionQuota:
    can_promote_to_makuuchi: bool | None = None
    can_demote_to_juryo: bool | None = None
    enforced_sanyaku: str | None = None
    assigned_next_rank: Rank | None = None


@dataclass(frozen=True)
class SekitoriQuota:
    can_promote_to_juryo: bool | None = None
    can_demote_to_makushita: bool | None = None
    enemy_half_step_nudge: float = 0.0
    assigned_next_rank: Rank | None = None


@dataclass(frozen=True)
class LowerDivisionQuota:
    can_promote_to_makushita: bool | None = None
    can_demote_to_sandanme: bool | None = None
    can_promote_to_sandanme: bool | None = None
    can_demote_to_jonidan: bool | None = None
    can_promote_to_jonidan: bool | None = None
    can_demote_to_jonokuchi: bool | None = None
    enemy_half_step_nudge: float = 0.0
    assigned_next_rank: Rank | None = None


@dataclass(frozen=True)
class TransitionOptions:
    top_division_quota: TopDivisionQuota | None = None
    sekitori_quota: SekitoriQuota | None = None
    lower_division_quota: LowerDivisionQuota | None = None
    boundary_assigned_next_rank: Rank | None = None
    ozeki_return: bool = False
    yokozuna_promotion: bool = False
    scale: ScaleConfiguration | None = None


@dataclass(frozen=True)
class RuleOutcome:
    """Candidate produced by a division rule before guards and side assignment."""

    next_rank: Rank
    event: str | None = None
    kadoban: bool = False
    ozeki_return: bool = False


@dataclass(frozen=True)
class TransitionResult:
    next_rank: Rank
    event: str | None = None
    kadoban: bool = False
    ozeki_return: bool = False


@dataclass(frozen=True)
class RatingState:
    ability: float
    form: float = 0.0
    uncertainty: float = 1.5

    def to_dict(self) -> dict[str, float]:
        return {
            "ability": self.ability,
            "form": self.form,
            "uncertainty": self.uncertainty,
        }

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> "RatingState":
        return cls(
            ability=float(payload["ability"]),
            form=float(payload.get("form", 0.0)),
            uncertainty=float(payload.get("uncertainty", 1.5)),
        )


@dataclass
class Stats:
    tsuki: float
    oshi: float
    kumi: float
    nage: float
    koshi: float
    deashi: float
    waza: float
    power: float

    def to_dict(self) -> dict[str, float]:
        return {
            "tsuki": self.tsuki,
            "oshi": self.oshi,
            "kumi": self.kumi,
            "nage": self.nage,
            "koshi": self.koshi,
            "deashi": self.deashi,
            "waza": self.waza,
            "power": self.power,
        }

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> "Stats":
        return cls(
            tsuki=float(payload["tsuki"]),
            oshi=float(payload["oshi"]),
            kumi=float(payload["kumi"]),
            nage=float(payload["nage"]),
            koshi=float(payload["koshi"]),
            deashi=float(payload["deashi"]),
            waza=float(payload["waza"]),
            power=float(payload["power"]),
        )


@dataclass(frozen=True)
class BodyMetrics:
    height_cm: float
    weight_kg: float
