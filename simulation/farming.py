"""simulation/farming.py — Crop patches.

Patches ripen against the simulation clock, so crops planted before
closing the game are ready after offline catch-up.
"""

from __future__ import annotations
import math
from typing import TYPE_CHECKING

from core.rng import random_int
from simulation.ledger import add_resource, add_xp, push_log, skill_level

if TYPE_CHECKING:
    from components.player import PlayerState
    from components.rpg import FarmPatch
    from core.data import Catalog, CropDef, FarmingRules


def crop_yield(crop: "CropDef", farming_level: int, rules: "FarmingRules", rand) -> int:
    base = crop.yield_min + random_int(rand, 0, crop.yield_max - crop.yield_min + 1)
    margin = farming_level - crop.level
    bonus = max(0, math.floor(margin / rules.level_bonus_step))
    pure_chance = min(rules.pure_chance_cap, max(0.0, margin / rules.pure_chance_divisor))
    pure = 1 if rand() < pure_chance else 0
    return base + bonus + pure


def find_patch(state: "PlayerState", patch_id: str) -> "FarmPatch | None":
    return next((p for p in state.farming if p.id == patch_id), None)


def is_ready(state: "PlayerState", patch: "FarmPatch") -> bool:
    return patch.crop_id is not None and state.meta.sim_time_ms >= patch.ready_at


def plant(state: "PlayerState", catalog: "Catalog", crop_id: str, patch_id: str) -> bool:
    crop = catalog.crops.get(crop_id)
    patch = find_patch(state, patch_id)
    if crop is None or patch is None or patch.crop_id is not None:
        return False
    if skill_level(state, "farming") < crop.level:
        return False
    now = state.meta.sim_time_ms
    patch.crop_id = crop.id
    patch.planted_at = now
    patch.ready_at = now + crop.grow_sec * 1000
    push_log(state, f"Planted {crop.name}.")
    return True


def harvest(state: "PlayerState", catalog: "Catalog", patch_id: str) -> int:
    """Harvest a ripe patch.  Returns the amount credited."""
    patch = find_patch(state, patch_id)
    if patch is None or not is_ready(state, patch):
        return 0
    crop = catalog.crops.get(patch.crop_id)
    if crop is None:
        return 0

    amount = crop_yield(crop, skill_level(state, "farming"), catalog.farming, state.rng.random)
    added = int(add_resource(state, crop.id, amount))
    add_xp(state, catalog, "farming", crop.tier * catalog.farming.xp_per_tier)
    patch.crop_id = None
    patch.planted_at = 0.0
    patch.ready_at = 0.0
    push_log(state, f"Harvested {added} {crop.name}.")
    return added
