"""simulation/world_sim.py — Top-level simulation step and offline catch-up.

``tick_simulation`` is the single entry point the host loop calls with a
small fixed ``dt``.  It advances the simulation clock, expires timed
effects, and dispatches to exactly one activity handler.

``run_offline_progress`` replays a wall-clock gap as 1-second ticks
through the very same function, so closing the game and leaving it open
produce identical state.

Usage in core/app.py::

    tick_simulation(self.state, self.catalog, step)

    # On load:
    ran = run_offline_progress(self.state, self.catalog, gap_seconds)
"""

from __future__ import annotations
from typing import TYPE_CHECKING

from core import tuning
from core.constants import (
    ACT_CRAFT, ACT_DUNGEON, ACT_EXPEDITION, ACT_GATHER, ACT_IDLE, MS_PER_SECOND,
)
from simulation.craft import tick_craft
from simulation.dungeon import tick_dungeon
from simulation.expedition import tick_expedition
from simulation.gather import tick_gather
from simulation.ledger import add_resource
from simulation.potions import expire_potion

if TYPE_CHECKING:
    from components.player import PlayerState
    from core.data import Catalog


def tick_simulation(state: "PlayerState", catalog: "Catalog", dt: float) -> None:
    """Advance *state* by *dt* simulated seconds (clamped to ``[0, 1]``)."""
    dt = max(0.0, min(float(tuning.get("sim", "max_dt", 1.0)), dt))

    state.meta.sim_time_ms += dt * MS_PER_SECOND
    expire_potion(state)
    if state.injured_until <= state.meta.sim_time_ms:
        state.injured_until = 0.0

    kind = state.activity.type
    if kind == ACT_GATHER:
        tick_gather(state, catalog, dt)
    elif kind == ACT_CRAFT:
        tick_craft(state, catalog, dt)
    elif kind == ACT_EXPEDITION:
        tick_expedition(state, catalog, dt)
    elif kind == ACT_DUNGEON:
        tick_dungeon(state, catalog, dt)

    _tick_trickle(state, dt)


def _tick_trickle(state: "PlayerState", dt: float) -> None:
    """Idle workshop income, checked after the activity handler ran."""
    level = state.buildings.get("workshop", 0)
    if level <= 0 or state.activity.type != ACT_IDLE:
        return
    add_resource(state, "wood", dt * float(tuning.get("sim.trickle", "wood_per_level", 0.08)) * level)
    ore_id = tuning.get("sim.trickle", "ore_id", "dullstoneOre")
    add_resource(state, ore_id, dt * float(tuning.get("sim.trickle", "ore_per_level", 0.06)) * level)


def has_pending_choice(state: "PlayerState") -> bool:
    return state.expedition is not None and state.expedition.pending_choice is not None


def run_offline_progress(state: "PlayerState", catalog: "Catalog", seconds: float) -> float:
    """Replay up to *seconds* (capped) as fixed steps.  Returns seconds simulated.

    Stops early when an expedition is waiting on a route choice; the
    choice is left for the player.
    """
    max_seconds = float(tuning.get("offline", "max_seconds", 8 * 3600))
    step = float(tuning.get("offline", "step", 1.0))
    total = max(0.0, min(max_seconds, seconds))
    if total <= 1:
        return 0.0

    simulated = 0.0
    while simulated + step <= total:
        if has_pending_choice(state):
            break
        tick_simulation(state, catalog, step)
        simulated += step
    return simulated
