"""simulation/craft.py — Per-tick crafting (smelting, smithing, cooking, brewing).

Inputs are paid once when a cycle starts, never per tick slice, so
switching activity mid-cycle cannot leave a half-paid craft behind.
Running out of inputs, or finishing a cycle into a full store, stops
the craft and says so in the log.
"""

from __future__ import annotations
from typing import TYPE_CHECKING

from core.constants import ACT_IDLE
from core.progression import pay_cost
from simulation.modifiers import compute_modifiers
from simulation.ledger import add_resource, add_xp, efficiency, push_log, skill_level

if TYPE_CHECKING:
    from components.player import PlayerState
    from core.data import Catalog, RecipeDef

MAX_CYCLES_PER_TICK = 100


def burn_chance_pct(cooking_level: int, fish_level: int) -> float:
    """Percent chance to burn: 35 at parity, 2 less per level of margin."""
    return max(0, 35 - (cooking_level - fish_level) * 2)


def stop_craft(state: "PlayerState", msg: str) -> None:
    state.activity.type = ACT_IDLE
    if state.activity.craft is not None:
        state.activity.craft.in_progress = False
        state.activity.craft.remaining_sec = 0.0
    push_log(state, msg)


def tick_craft(state: "PlayerState", catalog: "Catalog", dt: float) -> None:
    craft = state.activity.craft
    if craft is None:
        return
    recipe = catalog.recipes.get(craft.recipe_id)
    if recipe is None:
        return
    # Building lost or never built: stall silently.
    if state.buildings.get(recipe.requires_building, 0) <= 0:
        return

    mods = compute_modifiers(state)
    remaining = dt * mods.speed_for(recipe.skill) * efficiency(state)

    cycles = 0
    while remaining > 0 and cycles < MAX_CYCLES_PER_TICK:
        cycles += 1
        if not craft.in_progress:
            if not pay_cost(state.resources, recipe.inputs):
                stop_craft(state, f"Out of materials for {recipe.name}. Crafting stopped.")
                return
            craft.in_progress = True
            craft.remaining_sec = recipe.duration_sec

        step = min(remaining, craft.remaining_sec)
        craft.remaining_sec -= step
        remaining -= step
        if craft.remaining_sec > 0:
            continue

        craft.in_progress = False
        lost = _complete_cycle(state, catalog, recipe, mods.global_xp_mult)
        if lost:
            stop_craft(state, f"Storage full for {catalog.display_name(lost)}. "
                              f"Crafting stopped.")
            return


def _complete_cycle(state: "PlayerState", catalog: "Catalog",
                    recipe: "RecipeDef", xp_mult: float) -> str | None:
    """Credit one finished cycle.  Returns an output id that did not fit."""
    if recipe.special == "cookFish":
        chance = burn_chance_pct(skill_level(state, "cooking"), recipe.fish_level)
        burnt = state.rng.random() * 100 < chance
        out = recipe.burnt_id if burnt else recipe.cooked_id
        added = add_resource(state, out, 1)
        add_xp(state, catalog, recipe.skill, recipe.xp * (0.25 if burnt else 1.0) * xp_mult)
        return out if added < 1 else None

    lost = None
    for rid, amount in recipe.outputs.items():
        if add_resource(state, rid, amount) < amount and lost is None:
            lost = rid
    add_xp(state, catalog, recipe.skill, recipe.xp * xp_mult)
    return lost
