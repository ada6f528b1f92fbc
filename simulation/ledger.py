"""simulation/ledger.py — Bounded resource writes, XP, durability, logging.

Every write into ``state.resources`` made by the simulation goes
through here so quantities stay inside ``[0, storage_cap]``.
"""

from __future__ import annotations
from typing import TYPE_CHECKING

from core.constants import MS_PER_SECOND
from core.progression import level_from_xp
from core import tuning
from components.item_registry import max_durability
from simulation.modifiers import compute_modifiers

if TYPE_CHECKING:
    from components.player import PlayerState
    from core.data import Catalog


# ── Log ──────────────────────────────────────────────────────────────

def push_log(state: "PlayerState", msg: str) -> None:
    state.log.record(msg, t=state.meta.sim_time_ms)


# ── Resources ────────────────────────────────────────────────────────

def storage_cap(state: "PlayerState") -> float:
    return compute_modifiers(state).storage_cap


def resource_room(state: "PlayerState", resource_id: str) -> float:
    return max(0.0, storage_cap(state) - state.resources.get(resource_id, 0.0))


def add_resource(state: "PlayerState", resource_id: str, amount: float) -> float:
    """Credit up to the room left under the cap.  Returns what was added."""
    if amount <= 0:
        return 0.0
    added = float(min(resource_room(state, resource_id), amount))
    if added <= 0:
        return 0.0
    state.resources[resource_id] = state.resources.get(resource_id, 0.0) + added
    return added


def add_resource_capped(state: "PlayerState", resource_id: str, amount: float) -> None:
    """Loot-style write: clamp the result into ``[0, cap]``."""
    nxt = state.resources.get(resource_id, 0.0) + amount
    state.resources[resource_id] = max(0.0, min(storage_cap(state), nxt))


def take_resource(state: "PlayerState", resource_id: str, amount: float = 1) -> bool:
    """Debit *amount* if it is all there.  Returns success."""
    if state.resources.get(resource_id, 0.0) < amount:
        return False
    state.resources[resource_id] -= amount
    return True


# ── Skills ───────────────────────────────────────────────────────────

def add_xp(state: "PlayerState", catalog: "Catalog", skill_id: str, amount: float) -> None:
    if amount <= 0:
        return
    before = level_from_xp(state.skills.get(skill_id, 0.0))
    state.skills[skill_id] = state.skills.get(skill_id, 0.0) + amount
    after = level_from_xp(state.skills[skill_id])
    if after > before:
        name = catalog.skills[skill_id].name if skill_id in catalog.skills else skill_id
        push_log(state, f"{name} reached level {after}!")


def skill_level(state: "PlayerState", skill_id: str) -> int:
    return level_from_xp(state.skills.get(skill_id, 0.0))


# ── Equipment ────────────────────────────────────────────────────────

def apply_durability_loss(state: "PlayerState", catalog: "Catalog",
                          slot: str, amount: float) -> None:
    eq = state.equipment.get(slot)
    if eq is None or amount <= 0:
        return
    before = min(eq.durability, max_durability(catalog, eq.item_id))
    eq.durability = max(0.0, before - amount)
    if before > 0 and eq.durability <= 0:
        push_log(state, f"Broken {catalog.display_name(eq.item_id)}.")


# ── Injury ───────────────────────────────────────────────────────────

def is_injured(state: "PlayerState") -> bool:
    return state.injured_until > state.meta.sim_time_ms


def efficiency(state: "PlayerState") -> float:
    """Progress multiplier: reduced while injured."""
    return float(tuning.get("injury", "efficiency", 0.6)) if is_injured(state) else 1.0


def apply_injury_if_any(state: "PlayerState", base_chance: float) -> bool:
    """Roll an injury on the master cursor; resistant towns roll lower."""
    chance = base_chance * compute_modifiers(state).injury_chance_mult
    if state.rng.random() > chance:
        return False
    duration = float(tuning.get("injury", "duration_sec", 60.0))
    now = state.meta.sim_time_ms
    state.injured_until = max(state.injured_until, now + duration * MS_PER_SECOND)
    push_log(state, f"Injury! Efficiency reduced for {duration:g}s.")
    return True
