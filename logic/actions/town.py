"""logic/actions/town.py — Buildings, farm patches and prestige."""

from __future__ import annotations
import dataclasses
import math
from typing import TYPE_CHECKING

from core.constants import TAB_PRESTIGE
from core.progression import pay_cost, scale_cost, level_from_xp
from components.player import create_default_state
from simulation.farming import harvest, plant
from simulation.ledger import push_log

if TYPE_CHECKING:
    from components.player import PlayerState
    from core.data import Catalog

LEGACY_UPGRADE_MULT = 1.05


# ── Buildings ────────────────────────────────────────────────────────

def building_next_cost(state: "PlayerState", catalog: "Catalog",
                       building_id: str) -> dict[str, int]:
    b = catalog.building(building_id)
    return scale_cost(b.base_cost, b.cost_scale, state.buildings.get(building_id, 0) + 1)


def upgrade_building(state: "PlayerState", catalog: "Catalog", building_id: str) -> None:
    b = catalog.buildings.get(building_id)
    if b is None:
        return
    if not pay_cost(state.resources, building_next_cost(state, catalog, building_id)):
        return
    state.buildings[building_id] = state.buildings.get(building_id, 0) + 1
    push_log(state, f"Upgraded {b.name} to level {state.buildings[building_id]}.")


# ── Farming ──────────────────────────────────────────────────────────

def plant_crop(state: "PlayerState", catalog: "Catalog", crop_id: str, patch_id: str) -> None:
    plant(state, catalog, crop_id, patch_id)


def harvest_crop(state: "PlayerState", catalog: "Catalog", patch_id: str) -> None:
    harvest(state, catalog, patch_id)


# ── Prestige ─────────────────────────────────────────────────────────

def can_prestige(state: "PlayerState") -> bool:
    return state.buildings.get("townHall", 0) >= 1 and state.stats.bosses_defeated >= 1


def prestige_gain(state: "PlayerState") -> int:
    hall = state.buildings.get("townHall", 0)
    bosses = state.stats.bosses_defeated
    total_levels = sum(level_from_xp(xp) for xp in state.skills.values())
    return max(1, math.floor(bosses * 2 + hall + total_levels / 25))


def found_new_settlement(state: "PlayerState", catalog: "Catalog",
                         now: float | None = None) -> bool:
    """Reset everything except the legacy block, which gains points.

    *now* is wall-clock epoch ms for the new save stamps; it defaults to
    the host's last tick stamp.  The simulated clock carries on unbroken.
    """
    if not can_prestige(state):
        return False
    gain = prestige_gain(state)
    legacy = dataclasses.replace(state.legacy, points=state.legacy.points + gain)
    if now is None:
        now = state.meta.last_tick_at

    fresh = create_default_state(catalog, now=now, seed=state.rng.next_u32())
    fresh.meta.sim_time_ms = state.meta.sim_time_ms
    fresh.legacy = legacy
    fresh.tab = TAB_PRESTIGE
    for f in dataclasses.fields(fresh):
        setattr(state, f.name, getattr(fresh, f.name))

    plural = "" if gain == 1 else "s"
    push_log(state, f"Founded a new settlement. Gained {gain} legacy point{plural}.")
    return True


def buy_legacy_upgrade(state: "PlayerState", catalog: "Catalog", upgrade_id: str) -> bool:
    legacy = state.legacy
    if legacy.points < 1:
        return False
    if upgrade_id == "xp":
        legacy.points -= 1
        legacy.global_xp_mult *= LEGACY_UPGRADE_MULT
        push_log(state, "Legacy: +5% global XP.")
        return True
    if upgrade_id == "yield":
        legacy.points -= 1
        legacy.global_yield_mult *= LEGACY_UPGRADE_MULT
        push_log(state, "Legacy: +5% global yield.")
        return True
    return False
