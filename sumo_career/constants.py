"""Shared banzuke constants.

Centralises division names, rank names and transition event tags that are
referenced by multiple modules so they have a single source of truth.
"""

from __future__ import annotations

# ---------------------------------------------------------------------------
# Divisions
# ---------------------------------------------------------------------------
MAKUUCHI: str = "Makuuchi"
JURYO: str = "Juryo"
MAKUSHITA: str = "Makushita"
SANDANME: str = "Sandanme"
JONIDAN: str = "Jonidan"
JONOKUCHI: str = "Jonokuchi"
MAEZUMO: str = "Maezumo"

DIVISIONS: tuple[str, ...] = (
    MAKUUCHI,
    JURYO,
    MAKUSHITA,
    SANDANME,
    JONIDAN,
    JONOKUCHI,
    MAEZUMO,
)
"""Every division from the top of the banzuke down to the entry feeder."""

RANKED_DIVISIONS: tuple[str, ...] = DIVISIONS[:-1]
"""Divisions that carry numbered slots on the banzuke."""

LOWER_DIVISIONS: tuple[str, ...] = (MAKUSHITA, SANDANME, JONIDAN, JONOKUCHI)
"""Seven-bout divisions below the salaried tier."""

SEKITORI_DIVISIONS: tuple[str, ...] = (MAKUUCHI, JURYO)
"""Salaried divisions."""

BOUTS_BY_DIVISION: dict[str, int] = {
    MAKUUCHI: 15,
    JURYO: 15,
    MAKUSHITA: 7,
    SANDANME: 7,
    JONIDAN: 7,
    JONOKUCHI: 7,
    MAEZUMO: 3,
}
"""Scheduled bouts per tournament."""

# ---------------------------------------------------------------------------
# Rank names
# ---------------------------------------------------------------------------
YOKOZUNA: str = "Yokozuna"
OZEKI: str = "Ozeki"
SEKIWAKE: str = "Sekiwake"
KOMUSUBI: str = "Komusubi"
MAEGASHIRA: str = "Maegashira"

SPECIAL_RANK_NAMES: tuple[str, ...] = (YOKOZUNA, OZEKI, SEKIWAKE, KOMUSUBI)
"""Top-division names that never carry a number, in banzuke order."""

SANYAKU_NAMES: tuple[str, ...] = (SEKIWAKE, KOMUSUBI)

RANK_NAMES_BY_DIVISION: dict[str, tuple[str, ...]] = {
    MAKUUCHI: SPECIAL_RANK_NAMES + (MAEGASHIRA,),
    JURYO: (JURYO,),
    MAKUSHITA: (MAKUSHITA,),
    SANDANME: (SANDANME,),
    JONIDAN: (JONIDAN,),
    JONOKUCHI: (JONOKUCHI,),
    MAEZUMO: (MAEZUMO,),
}

NUMBERED_NAME_BY_DIVISION: dict[str, str] = {
    MAKUUCHI: MAEGASHIRA,
    JURYO: JURYO,
    MAKUSHITA: MAKUSHITA,
    SANDANME: SANDANME,
    JONIDAN: JONIDAN,
    JONOKUCHI: JONOKUCHI,
}

EAST: str = "East"
WEST: str = "West"
SIDES: tuple[str, ...] = (EAST, WEST)

# ---------------------------------------------------------------------------
# Guard policy
# ---------------------------------------------------------------------------
STRICT_DEMOTION_DIVISIONS: frozenset[str] = frozenset(
    {JURYO, MAKUSHITA, SANDANME, JONIDAN, JONOKUCHI}
)
"""A losing record in these divisions must move the rank down."""

STRICT_NON_DEMOTION_DIVISIONS: frozenset[str] = frozenset(
    {JURYO, MAKUSHITA, SANDANME, JONIDAN, JONOKUCHI}
)
"""A winning record in these divisions must never move the rank down."""

FIXED_SIDE_DIVISIONS: frozenset[str] = frozenset(
    {JURYO, MAKUSHITA, SANDANME, JONIDAN, JONOKUCHI}
)
"""Divisions whose rules already decide the side of the next rank."""

# ---------------------------------------------------------------------------
# Transition events
# ---------------------------------------------------------------------------
EVENT_PROMOTION: str = "PROMOTION"
EVENT_DEMOTION: str = "DEMOTION"
EVENT_KADOBAN: str = "KADOBAN"
EVENT_PROMOTION_TO_YOKOZUNA: str = "PROMOTION_TO_YOKOZUNA"
EVENT_PROMOTION_TO_OZEKI: str = "PROMOTION_TO_OZEKI"
EVENT_PROMOTION_TO_SEKIWAKE: str = "PROMOTION_TO_SEKIWAKE"
EVENT_PROMOTION_TO_KOMUSUBI: str = "PROMOTION_TO_KOMUSUBI"
EVENT_DEMOTION_TO_SEKIWAKE: str = "DEMOTION_TO_SEKIWAKE"
EVENT_DEMOTION_TO_KOMUSUBI: str = "DEMOTION_TO_KOMUSUBI"
EVENT_DEMOTION_TO_MAEGASHIRA: str = "DEMOTION_TO_MAEGASHIRA"
EVENT_PROMOTION_TO_MAKUUCHI: str = "PROMOTION_TO_MAKUUCHI"
EVENT_DEMOTION_TO_JURYO: str = "DEMOTION_TO_JURYO"
EVENT_PROMOTION_TO_JURYO: str = "PROMOTION_TO_JURYO"
EVENT_DEMOTION_TO_MAKUSHITA: str = "DEMOTION_TO_MAKUSHITA"
EVENT_PROMOTION_TO_JONOKUCHI: str = "PROMOTION_TO_JONOKUCHI"
