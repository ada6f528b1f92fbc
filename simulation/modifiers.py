"""simulation/modifiers.py — Building and legacy bonuses.

``compute_modifiers`` is recomputed on every read; nothing caches it,
so a building upgrade is visible to the very next tick.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import TYPE_CHECKING

from core.progression import level_from_xp, clamp
from components.item_registry import weapon_tier, armor_tier

if TYPE_CHECKING:
    from components.player import PlayerState
    from core.data import Catalog


@dataclass(frozen=True)
class Modifiers:
    global_xp_mult: float
    gather_yield_mult: float
    gather_xp_mult: float
    smithing_speed_mult: float
    cooking_speed_mult: float
    alchemy_speed_mult: float
    combat_power_mult: float
    loot_mult: float
    injury_chance_mult: float
    storage_cap: float

    def speed_for(self, skill_id: str) -> float:
        if skill_id == "smithing":
            return self.smithing_speed_mult
        if skill_id == "cooking":
            return self.cooking_speed_mult
        if skill_id == "alchemy":
            return self.alchemy_speed_mult
        return 1.0


def compute_modifiers(state: "PlayerState") -> Modifiers:
    b = state.buildings.get
    legacy = state.legacy

    global_xp = legacy.global_xp_mult * (1 + 0.02 * b("townHall", 0))
    return Modifiers(
        global_xp_mult=global_xp,
        gather_yield_mult=legacy.global_yield_mult * (1 + 0.07 * b("workshop", 0)),
        gather_xp_mult=global_xp,
        smithing_speed_mult=1 + 0.08 * b("forge", 0),
        cooking_speed_mult=1 + 0.1 * b("campfire", 0),
        alchemy_speed_mult=1 + 0.08 * b("alchemistHut", 0),
        combat_power_mult=1 + 0.07 * b("barracks", 0),
        loot_mult=1 + 0.05 * b("scoutLodge", 0) + 0.03 * b("alchemistHut", 0),
        injury_chance_mult=1 - min(0.35, 0.04 * b("scoutLodge", 0)),
        storage_cap=200.0 + 250.0 * b("storehouse", 0),
    )


# ── Player combat numbers ────────────────────────────────────────────

@dataclass(frozen=True)
class PlayerCombat:
    power: float
    toughness: float
    combat_level: int
    max_hp: int
    attack_interval: float


def compute_player_combat(state: "PlayerState", catalog: "Catalog") -> PlayerCombat:
    mods = compute_modifiers(state)
    lvl = level_from_xp(state.skills.get("combat", 0.0))
    weapon = weapon_tier(state, catalog)
    armor = armor_tier(state, catalog)
    power = (1 + lvl * 0.18 + weapon * 0.45) * mods.combat_power_mult
    toughness = 1 + lvl * 0.12 + armor * 0.5
    max_hp = int(30 + lvl * 8 + armor * 10)
    interval = clamp(0.45, 1.15 / (0.75 + power / 6), 1.2)
    return PlayerCombat(power, toughness, lvl, max_hp, interval)
