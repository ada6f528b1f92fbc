"""components.player — The root PlayerState tree.

One instance per game.  Every tick and every action mutates it in
place; the host owns it and is the only thing that saves it.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from components.dev_log import GameLog, player_log
from components.resources import Meta, Legacy, PotionState, RunStats
from components.rpg import EquippedItem, FarmPatch
from components.simulation import Activity, ExpeditionRun, DungeonRun
from core.constants import EQUIPMENT_SLOTS, TAB_TOWN
from core.rng import RngCursor, MASK32

if TYPE_CHECKING:
    from core.data import Catalog

SAVE_VERSION = 1


@dataclass
class PlayerState:
    version: int = SAVE_VERSION
    meta: Meta = field(default_factory=Meta)
    resources: dict[str, float] = field(default_factory=dict)
    skills: dict[str, float] = field(default_factory=dict)       # skill id → XP
    buildings: dict[str, int] = field(default_factory=dict)      # building id → level
    equipment: dict[str, EquippedItem | None] = field(default_factory=dict)
    activity: Activity = field(default_factory=Activity)
    expedition: ExpeditionRun | None = None
    dungeon: DungeonRun | None = None
    stats: RunStats = field(default_factory=RunStats)
    potion: PotionState = field(default_factory=PotionState)
    farming: list[FarmPatch] = field(default_factory=list)
    legacy: Legacy = field(default_factory=Legacy)
    rng: RngCursor = field(default_factory=RngCursor)
    log: GameLog = field(default_factory=player_log)
    tab: str = TAB_TOWN
    injured_until: float = 0.0      # sim ms


def create_default_state(catalog: "Catalog", now: float = 0.0,
                         seed: int | None = None) -> PlayerState:
    """Fresh state: every catalog id present, starting stock applied.

    *now* is epoch ms; *seed* seeds the master RNG cursor (derived from
    *now* when omitted so two new games differ).
    """
    if seed is None:
        seed = int(now) & MASK32

    state = PlayerState()
    state.meta = Meta(created_at=now, updated_at=now, last_tick_at=now, sim_time_ms=now)
    state.resources = {rid: 0.0 for rid in catalog.resources}
    for rid, amount in catalog.start.items():
        state.resources[rid] = float(amount)
    state.skills = {sid: 0.0 for sid in catalog.skills}
    state.buildings = {bid: 0 for bid in catalog.buildings}
    state.equipment = {slot: None for slot in EQUIPMENT_SLOTS}
    state.farming = [FarmPatch(id=f"patch{i + 1}") for i in range(catalog.farming.patches)]
    state.rng = RngCursor(t=seed)
    return state
