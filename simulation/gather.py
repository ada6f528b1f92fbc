"""simulation/gather.py — Per-tick gathering (woodcutting, mining, fishing, scavenging).

Woodcutting, mining and fishing yield continuously: a fraction of a
unit every tick.  Scavenging is interval-gated: each completed 2 s
interval rolls the zone's loot table.  Any of them stops the activity
when storage is full, crediting only what fit.
"""

from __future__ import annotations
import math
from typing import TYPE_CHECKING

from core.constants import ACT_IDLE
from components.item_registry import tool_perks, ToolPerks
from simulation.modifiers import compute_modifiers, Modifiers
from simulation.ledger import (
    add_resource, add_xp, apply_durability_loss, efficiency, push_log,
    resource_room,
)

if TYPE_CHECKING:
    from components.player import PlayerState
    from core.data import Catalog

MIN_INTERVAL_SEC = 0.2
TOOL_SLOT = {"woodcutting": "axe", "mining": "pickaxe"}


def stop_for_storage(state: "PlayerState", name: str) -> None:
    state.activity.type = ACT_IDLE
    state.activity.gather_progress_sec = 0.0
    push_log(state, f"Storage full for {name}. Activity stopped.")


def tick_gather(state: "PlayerState", catalog: "Catalog", dt: float) -> None:
    act = state.activity
    skill = catalog.skills.get(act.gather_skill)
    if skill is None:
        return

    mods = compute_modifiers(state)
    eff = efficiency(state)

    interval = max(MIN_INTERVAL_SEC, act.gather_interval_sec)
    elapsed = act.gather_progress_sec + dt * eff
    actions = math.floor(elapsed / interval)
    act.gather_progress_sec = elapsed % interval

    if skill.id == "scavenging":
        _tick_scavenging(state, catalog, mods, actions)
        return

    if skill.id == "mining":
        node = catalog.mining_nodes.get(act.gather_resource)
        if node is None:
            return
        target, name = node.id, node.name
    elif skill.id == "fishing":
        fish = catalog.fish.get(act.gather_resource)
        if fish is None:
            return
        target, name = fish.id, fish.name
    else:
        if not skill.yields:
            return
        target = act.gather_resource or next(iter(skill.yields))
        name = catalog.display_name(target)

    if resource_room(state, target) <= 0:
        stop_for_storage(state, name)
        return

    slot = TOOL_SLOT.get(skill.id)
    perks = tool_perks(state, catalog, slot) if slot else ToolPerks()

    yield_per_sec = skill.base_yield_per_second * mods.gather_yield_mult * eff
    yield_per_sec *= 1 + perks.gather_speed_bonus
    final_yield = yield_per_sec * (1 + perks.double_resource_chance) * dt

    added = add_resource(state, target, final_yield)
    if added <= 0:
        stop_for_storage(state, name)
        return
    ratio = added / final_yield if final_yield > 0 else 0.0

    if skill.id == "mining":
        xp_per_sec = node.xp * yield_per_sec * mods.gather_xp_mult
    elif skill.id == "fishing":
        xp_per_sec = fish.fishing_xp * yield_per_sec * mods.gather_xp_mult
    else:
        xp_per_sec = (skill.base_xp_per_second * mods.gather_xp_mult * eff
                      * (1 + perks.gather_speed_bonus))
    add_xp(state, catalog, skill.id, xp_per_sec * dt * ratio)

    if slot:
        loss = yield_per_sec * dt * (1 - perks.no_durability_chance)
        apply_durability_loss(state, catalog, slot, loss)

    if added < final_yield:
        stop_for_storage(state, name)


def _tick_scavenging(state: "PlayerState", catalog: "Catalog",
                     mods: Modifiers, actions: int) -> None:
    zone = catalog.loot.get(state.activity.gather_resource)
    if zone is None:
        return
    if not any(resource_room(state, rid) > 0 for rid in zone.items()):
        stop_for_storage(state, zone.name)
        return

    total_rolls = max(0, round(actions * zone.rolls * mods.gather_yield_mult))
    gained = 0
    for _ in range(total_rolls):
        reagent = zone.pick(state.rng.random)
        if reagent and add_resource(state, reagent, 1) > 0:
            gained += 1
    if gained:
        add_xp(state, catalog, "scavenging", zone.xp * gained * mods.gather_xp_mult)
