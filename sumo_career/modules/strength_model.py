"""Continuous strength model.

Turns a competitor's attributes, rank and persisted rating into a single
ability number, converts an ability gap into a bout win probability, and
scores win/loss streak momentum.  All constants come from
``rules/strength_model.json``.
"""

from __future__ import annotations

import math

from sumo_career.constants import MAKUUCHI, MAEZUMO, SPECIAL_RANK_NAMES, WEST
from sumo_career.models import BodyMetrics, RatingState, Rank, Stats
from sumo_career.rules_registry import rule_section
from sumo_career.utils import clamp_float, clamp_int


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _rules(section: str) -> dict:
    return rule_section("strength_model", section)


def _band_slot(rank: Rank, slots: int) -> int:
    """1-based position of *rank* inside its division's ability band."""
    side_offset = 1 if rank.side == WEST else 0
    if rank.division == MAKUUCHI:
        if rank.name in SPECIAL_RANK_NAMES:
            return SPECIAL_RANK_NAMES.index(rank.name) * 2 + 1 + side_offset
        maegashira_max = max(1, (slots - 8) // 2)
        number = clamp_int(rank.number or 1, 1, maegashira_max)
        return 8 + (number - 1) * 2 + side_offset + 1
    number = clamp_int(rank.number or 1, 1, math.ceil(slots / 2))
    return clamp_int((number - 1) * 2 + side_offset + 1, 1, slots)


def body_score(body: BodyMetrics) -> float:
    """Linear size score relative to the reference build."""
    rules = _rules("body")
    return (body.height_cm - float(rules["reference_height_cm"])) * float(rules["height_weight"]) + (
        body.weight_kg - float(rules["reference_weight_kg"])
    ) * float(rules["weight_weight"])


def style_edge(mine: str | None, other: str | None) -> float:
    """Matchup bonus: PUSH beats TECHNIQUE beats GRAPPLE beats PUSH."""
    styles = _rules("styles")
    dominance: dict[str, str] = styles["dominance"]
    neutral = set(styles["neutral"])
    for style in (mine, other):
        if style is not None and style not in dominance and style not in neutral:
            raise ValueError(f"Unknown style: {style}")
    if mine is None or other is None or mine in neutral or other in neutral or mine == other:
        return 0.0
    bonus = float(_rules("bout")["style_edge_bonus"])
    return bonus if dominance[mine] == other else -bonus


def bounded_uncertainty(value: float | None) -> float:
    """Clamp a rating uncertainty into the configured range."""
    rules = _rules("uncertainty")
    if value is None or not math.isfinite(value):
        return float(rules["default"])
    return clamp_float(value, float(rules["min"]), float(rules["max"]))


def signed_streak(win_streak: int, loss_streak: int) -> int:
    """Collapse separate streak counters into one signed streak."""
    if win_streak > 0:
        return win_streak
    if loss_streak > 0:
        return -loss_streak
    return 0


# ---------------------------------------------------------------------------
# Ability
# ---------------------------------------------------------------------------

def rank_baseline_ability(rank: Rank) -> float:
    """Ability implied by *rank* alone, interpolated inside the division band."""
    band = _rules("ability_bands")[rank.division]
    top = float(band["top"])
    bottom = float(band["bottom"])
    slots = int(band["slots"])
    if rank.division == MAEZUMO or slots <= 1:
        return top
    progress = (_band_slot(rank, slots) - 1) / (slots - 1)
    return top - (top - bottom) * progress


def ability_from_stats(
    stats: Stats,
    condition: float,
    body: BodyMetrics,
    baseline: float | None = None,
) -> float:
    """Baseline shifted by attribute mean, condition and body size."""
    rules = _rules("stats")
    if baseline is None:
        baseline = float(rules["default_baseline"])
    values = list(stats.to_dict().values())
    average = sum(values) / len(values)
    stats_delta = (average - float(rules["center"])) * float(rules["weight"])
    condition_bias = (condition - 50.0) * float(rules["condition_weight"])
    body_bias = body_score(body) * float(rules["body_weight"])
    return baseline + stats_delta + condition_bias + body_bias


def player_ability(
    rank: Rank,
    stats: Stats,
    condition: float,
    body: BodyMetrics,
    rating: RatingState | None = None,
    bonus: float = 0.0,
) -> float:
    """Effective ability for the player's next bout.

    Without a persisted *rating* the derived ability plus the capped trait
    bonus is used directly.  Otherwise the persisted ability is blended with
    a rank anchor (baseline plus a clamped, damped derived offset); higher
    uncertainty shifts weight away from the persisted value.
    """
    blend = _rules("blend")
    baseline = rank_baseline_ability(rank)
    derived = ability_from_stats(stats, condition, body, baseline)
    cap = float(blend["trait_bonus_cap"])
    trait_bonus = clamp_float(bonus * float(blend["trait_bonus_weight"]), -cap, cap)
    if rating is None:
        return derived + trait_bonus

    uncertainty = bounded_uncertainty(rating.uncertainty)
    anchor_weight = clamp_float(
        float(blend["rating_anchor_weight"])
        - (uncertainty - float(blend["uncertainty_center"])) * float(blend["uncertainty_shift"]),
        float(blend["anchor_weight_min"]),
        float(blend["anchor_weight_max"]),
    )
    offset = clamp_float(
        derived - baseline,
        float(blend["derived_offset_min"]),
        float(blend["derived_offset_max"]),
    ) * float(blend["derived_offset_weight"])
    anchor = baseline + offset
    form_term = rating.form * float(blend["form_weight"])
    return rating.ability * anchor_weight + anchor * (1.0 - anchor_weight) + trait_bonus + form_term


# ---------------------------------------------------------------------------
# Bout probability and momentum
# ---------------------------------------------------------------------------

def bout_win_probability(
    attacker_ability: float,
    defender_ability: float,
    attacker_style: str | None = None,
    defender_style: str | None = None,
    injury_penalty: float = 0.0,
    bonus: float = 0.0,
) -> float:
    """Probability that the attacker wins, clamped to ``[0.03, 0.97]``."""
    rules = _rules("bout")
    gap = (
        attacker_ability
        - defender_ability
        + style_edge(attacker_style, defender_style)
        + bonus
        - max(0.0, injury_penalty) * float(rules["injury_penalty_scale"])
    )
    soft_cap = float(rules["diff_soft_cap"])
    capped = soft_cap * math.tanh(gap / soft_cap)
    probability = 1.0 / (1.0 + math.exp(-float(rules["logistic_scale"]) * capped))
    return clamp_float(probability, float(rules["min_probability"]), float(rules["max_probability"]))


def momentum_bonus(streak: int) -> float:
    """Ability bonus for a signed streak (positive wins, negative losses)."""
    rules = _rules("momentum")
    magnitude = abs(int(streak))
    activation = int(rules["activation"])
    if magnitude < activation:
        return 0.0
    extra = magnitude - activation
    value = (
        float(rules["base"])
        + float(rules["power_coefficient"]) * math.pow(extra, float(rules["power_exponent"]))
        + float(rules["quadratic_coefficient"]) * extra * extra
    )
    value = min(float(rules["cap"]), value)
    return value if streak > 0 else -value
