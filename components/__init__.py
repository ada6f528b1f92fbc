"""components — Plain dataclasses making up the PlayerState tree.

Submodules
----------
dev_log        GameLog (bounded message ring buffer)
resources      Meta, Legacy, ActivePotion, PotionCooldowns, PotionState, RunStats
rpg            EquippedItem, FarmPatch
combat         HitRecord, CombatEncounter
simulation     CraftProgress, Activity, ChoiceOption, PendingChoice, Room,
               ExpeditionRun, DungeonRun
player         PlayerState, create_default_state, SAVE_VERSION
item_registry  ToolPerks and equipment tier lookups

All public names are re-exported here so code can do
``from components import PlayerState``.
"""

# ── Logs ─────────────────────────────────────────────────────────────
from components.dev_log import GameLog

# ── State-wide singletons ────────────────────────────────────────────
from components.resources import (
    Meta, Legacy, ActivePotion, PotionCooldowns, PotionState, RunStats,
)

# ── RPG ──────────────────────────────────────────────────────────────
from components.rpg import EquippedItem, FarmPatch

# ── Combat ───────────────────────────────────────────────────────────
from components.combat import HitRecord, CombatEncounter

# ── Activity / runs ──────────────────────────────────────────────────
from components.simulation import (
    CraftProgress, Activity, ChoiceOption, PendingChoice, Room,
    ExpeditionRun, DungeonRun,
)

# ── Root ─────────────────────────────────────────────────────────────
from components.player import PlayerState, create_default_state, SAVE_VERSION

# ── Registries ───────────────────────────────────────────────────────
from components.item_registry import ToolPerks

__all__ = [
    # logs
    "GameLog",
    # resources
    "Meta", "Legacy", "ActivePotion", "PotionCooldowns", "PotionState", "RunStats",
    # rpg
    "EquippedItem", "FarmPatch",
    # combat
    "HitRecord", "CombatEncounter",
    # simulation
    "CraftProgress", "Activity", "ChoiceOption", "PendingChoice", "Room",
    "ExpeditionRun", "DungeonRun",
    # root
    "PlayerState", "create_default_state", "SAVE_VERSION",
    # registries
    "ToolPerks",
]
