"""components.item_registry — Equipment lookups over the catalog.

This is the only components module with real business logic (tier
durability, tool perks, effective gear tiers) so it lives on its own.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import TYPE_CHECKING

from core.constants import ARMOR_SLOTS

if TYPE_CHECKING:
    from components.player import PlayerState
    from core.data import Catalog


@dataclass(frozen=True)
class ToolPerks:
    gather_speed_bonus: float = 0.0
    no_durability_chance: float = 0.0
    double_resource_chance: float = 0.0

    def scaled(self, mult: float) -> "ToolPerks":
        return ToolPerks(self.gather_speed_bonus * mult,
                         self.no_durability_chance * mult,
                         self.double_resource_chance * mult)


def max_durability(catalog: "Catalog", item_id: str) -> int:
    item = catalog.items.get(item_id)
    return item.durability if item else 0


def tool_perks_for_tier(tier: int) -> ToolPerks:
    if not tier:
        return ToolPerks()
    speed = 0.1 if tier >= 5 else 0.05 if tier >= 3 else 0.0
    no_dur = 0.05 if tier >= 7 else 0.0
    double = 0.1 if tier >= 10 else 0.05 if tier >= 9 else 0.0
    return ToolPerks(speed, no_dur, double)


def tool_perks(state: "PlayerState", catalog: "Catalog", slot: str) -> ToolPerks:
    """Perks of the tool in *slot*, halved while it is broken."""
    eq = state.equipment.get(slot)
    if eq is None:
        return ToolPerks()
    perks = tool_perks_for_tier(catalog.item(eq.item_id).tier)
    return perks.scaled(0.5) if eq.durability <= 0 else perks


def effective_tier(state: "PlayerState", catalog: "Catalog", slot: str) -> float:
    """Tier of the item in *slot* (0 when empty, half when broken)."""
    eq = state.equipment.get(slot)
    if eq is None:
        return 0.0
    tier = float(catalog.item(eq.item_id).tier)
    return tier * 0.5 if eq.durability <= 0 else tier


def weapon_tier(state: "PlayerState", catalog: "Catalog") -> float:
    return effective_tier(state, catalog, "weapon")


def armor_tier(state: "PlayerState", catalog: "Catalog") -> float:
    """Mean effective tier over the five armor slots (empty slots count 0)."""
    return sum(effective_tier(state, catalog, s) for s in ARMOR_SLOTS) / len(ARMOR_SLOTS)
