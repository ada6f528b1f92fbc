"""core/progression.py — XP curve, level lookup and cost helpers.

All pure functions.  Levels are never stored; they are derived from XP
on every read so the curve is the single source of truth.
"""

from __future__ import annotations
import math
from dataclasses import dataclass
from typing import Mapping, MutableMapping

MAX_LEVEL = 99


def clamp(lo: float, value: float, hi: float) -> float:
    return max(lo, min(hi, value))


def xp_for_level(level: int) -> int:
    """Total XP needed to *reach* *level* (level 1 is free)."""
    return math.floor(40 * level * level + 60 * level)


def level_from_xp(xp: float, max_level: int = MAX_LEVEL) -> int:
    level = 1
    for nxt in range(2, max_level + 1):
        if xp < xp_for_level(nxt):
            return level
        level = nxt
    return max_level


@dataclass(frozen=True)
class LevelProgress:
    level: int
    xp_into_level: float
    xp_for_next: int
    pct: float


def next_level_progress(xp: float, max_level: int = MAX_LEVEL) -> LevelProgress:
    level = level_from_xp(xp, max_level)
    if level >= max_level:
        return LevelProgress(level, 0.0, 0, 1.0)
    xp_this = xp_for_level(level)
    xp_next = xp_for_level(level + 1)
    into = max(0.0, xp - xp_this)
    span = xp_next - xp_this
    return LevelProgress(level, into, span, into / span if span > 0 else 0.0)


# ── Costs ────────────────────────────────────────────────────────────

def scale_cost(base: Mapping[str, float], scale: float, level: int) -> dict[str, int]:
    """Cost of reaching *level*: ``ceil(v * scale^(level-1))`` per resource."""
    factor = scale ** max(0, level - 1)
    return {rid: math.ceil(v * factor) for rid, v in base.items()}


def can_afford(resources: Mapping[str, float], cost: Mapping[str, float]) -> bool:
    return all(resources.get(rid, 0) >= v for rid, v in cost.items())


def pay_cost(resources: MutableMapping[str, float], cost: Mapping[str, float]) -> bool:
    """Debit *cost* only if all of it is affordable.  Returns success."""
    if not can_afford(resources, cost):
        return False
    for rid, v in cost.items():
        resources[rid] = resources.get(rid, 0) - v
    return True
