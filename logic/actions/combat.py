"""logic/actions/combat.py — Player controls for the active fight.

Every action targets whichever encounter is live: the current
expedition room's, or the dungeon encounter/boss.  With no fight in
progress they do nothing.
"""

from __future__ import annotations
from typing import TYPE_CHECKING

from simulation.combat import eat_food
from simulation.potions import consume_potion, pick_combat_potion

if TYPE_CHECKING:
    from components.combat import CombatEncounter
    from components.player import PlayerState
    from core.data import Catalog

MAX_QUEUED_ATTACKS = 1


def active_encounter(state: "PlayerState") -> "CombatEncounter | None":
    if state.expedition is not None and state.expedition.room is not None:
        enc = state.expedition.room.combat
        if enc is not None and not enc.finished:
            return enc
    if state.dungeon is not None and state.dungeon.encounter is not None:
        enc = state.dungeon.encounter
        if not enc.finished:
            return enc
    return None


def queue_attack(state: "PlayerState", catalog: "Catalog") -> None:
    """Manual mode only; ignored until the player's swing is ready."""
    enc = active_encounter(state)
    if enc is None or enc.auto_fight or enc.player_cd > 0:
        return
    enc.player_queued = min(MAX_QUEUED_ATTACKS, enc.player_queued + 1)


def toggle_auto_fight(state: "PlayerState", catalog: "Catalog") -> None:
    enc = active_encounter(state)
    if enc is None:
        return
    enc.auto_fight = not enc.auto_fight
    enc.player_queued = 0


def use_combat_food(state: "PlayerState", catalog: "Catalog",
                    food_id: str | None = None) -> None:
    enc = active_encounter(state)
    if enc is None:
        return
    eat_food(state, catalog, enc, food_id)


def use_combat_potion(state: "PlayerState", catalog: "Catalog",
                      potion_id: str | None = None) -> None:
    enc = active_encounter(state)
    if enc is None:
        return
    if potion_id:
        potion = catalog.potions.get(potion_id)
    else:
        potion = pick_combat_potion(state, catalog, enc)
    if potion is None:
        return
    consume_potion(state, potion, enc)
