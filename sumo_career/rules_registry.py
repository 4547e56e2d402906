"""Rule-set loader.

Banzuke thresholds and strength-model constants live in JSON files under
``sumo_career/rules``; every engine module reads them through this cache so
a rule set is parsed once per process.
"""

from __future__ import annotations

import json
from functools import lru_cache
from pathlib import Path
from typing import Any

PACKAGE_ROOT = Path(__file__).resolve().parent
RULES_DIR = PACKAGE_ROOT / "rules"


@lru_cache(maxsize=32)
def load_rule_set(name: str) -> dict[str, Any]:
    path = RULES_DIR / f"{name}.json"
    if not path.exists():
        raise FileNotFoundError(f"Rule set not found: {path}")
    with path.open("r", encoding="utf-8") as handle:
        return json.load(handle)


def rule_section(name: str, section: str) -> Any:
    """Return one top-level section of rule set *name*.

    Raises ``ValueError`` when the section is missing so that a broken rule
    file surfaces at the call site instead of as a ``KeyError`` deep inside
    a rank computation.
    """
    rules = load_rule_set(name)
    if section not in rules:
        raise ValueError(f"Rule set {name!r} has no section {section!r}")
    return rules[section]
