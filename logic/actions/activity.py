"""logic/actions/activity.py — Switching what the player is doing.

Only one activity runs at a time.  Starting any activity ends an
active expedition or dungeon run first.
"""

from __future__ import annotations
from typing import TYPE_CHECKING

from core.constants import ACT_CRAFT, ACT_GATHER, ACT_IDLE
from components.simulation import CraftProgress
from simulation.dungeon import exit_dungeon, move_dungeon, start_dungeon
from simulation.expedition import (
    choose_expedition_option, start_expedition, stop_expedition,
)
from simulation.ledger import push_log, skill_level

if TYPE_CHECKING:
    from components.player import PlayerState
    from core.data import Catalog

GATHER_INTERVAL_SEC = 1.0
SCAVENGE_INTERVAL_SEC = 2.0


def _end_runs(state: "PlayerState") -> None:
    stop_expedition(state)
    exit_dungeon(state)


def set_activity_idle(state: "PlayerState", catalog: "Catalog") -> None:
    _end_runs(state)
    state.activity.type = ACT_IDLE
    push_log(state, "Now idle.")


# ── Gathering ────────────────────────────────────────────────────────

def _gather_target(state: "PlayerState", catalog: "Catalog", skill_id: str,
                   target_id: str | None) -> tuple[str, str] | None:
    """Resolve ``(target_id, label)`` for *skill_id*, level-checked."""
    level = skill_level(state, skill_id)
    wanted = target_id or state.activity.gather_resource

    if skill_id == "mining":
        table = catalog.mining_nodes
    elif skill_id == "fishing":
        table = catalog.fish
    elif skill_id == "scavenging":
        table = catalog.loot.tables
    else:
        skill = catalog.skills[skill_id]
        if not skill.yields:
            return None
        rid = target_id if target_id in skill.yields else next(iter(skill.yields))
        return rid, ""

    if not table:
        return None
    node = table.get(wanted) or next(iter(table.values()))
    if level < node.level:
        return None
    return node.id, node.name


def start_gather(state: "PlayerState", catalog: "Catalog", skill_id: str,
                 target_id: str | None = None) -> None:
    if skill_id not in catalog.skills:
        return
    target = _gather_target(state, catalog, skill_id, target_id)
    if target is None:
        return
    rid, label = target

    _end_runs(state)
    act = state.activity
    act.type = ACT_GATHER
    act.gather_skill = skill_id
    act.gather_resource = rid
    act.gather_progress_sec = 0.0
    act.gather_interval_sec = SCAVENGE_INTERVAL_SEC if skill_id == "scavenging" else GATHER_INTERVAL_SEC
    suffix = f" ({label})" if label else ""
    push_log(state, f"Gathering: {catalog.skills[skill_id].name}{suffix}.")


def select_mining_target(state: "PlayerState", catalog: "Catalog", node_id: str) -> None:
    node = catalog.mining_nodes.get(node_id)
    if node is None or skill_level(state, "mining") < node.level:
        return
    state.activity.gather_resource = node_id
    if state.activity.type == ACT_GATHER and state.activity.gather_skill == "mining":
        push_log(state, f"Mining: {node.name}.")


# ── Crafting ─────────────────────────────────────────────────────────

def start_craft(state: "PlayerState", catalog: "Catalog", recipe_id: str) -> None:
    recipe = catalog.recipes.get(recipe_id)
    if recipe is None:
        return
    if state.buildings.get(recipe.requires_building, 0) <= 0:
        return
    if skill_level(state, recipe.skill) < recipe.requires_level:
        return

    _end_runs(state)
    state.activity.type = ACT_CRAFT
    state.activity.craft = CraftProgress(recipe_id=recipe.id)
    push_log(state, f"Crafting: {recipe.name}.")


# ── Runs ─────────────────────────────────────────────────────────────

def begin_expedition(state: "PlayerState", catalog: "Catalog", risk: int = 1) -> None:
    if state.expedition is not None:
        return
    exit_dungeon(state)
    start_expedition(state, catalog, risk)


def end_expedition(state: "PlayerState", catalog: "Catalog") -> None:
    stop_expedition(state)


def choose_route(state: "PlayerState", catalog: "Catalog", option_id: str) -> None:
    choose_expedition_option(state, option_id)


def enter_dungeon(state: "PlayerState", catalog: "Catalog") -> None:
    if state.dungeon is not None:
        return
    stop_expedition(state)
    start_dungeon(state, catalog)


def leave_dungeon(state: "PlayerState", catalog: "Catalog") -> None:
    exit_dungeon(state)


def dungeon_move(state: "PlayerState", catalog: "Catalog", dx: int, dy: int) -> None:
    move_dungeon(state, catalog, dx, dy)
