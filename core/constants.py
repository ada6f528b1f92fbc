"""core/constants.py — Shared constants used across the codebase.

Centralises magic identifiers so there's exactly one place to change them.

Time Units
----------
    Wall clock / save stamps    ms  (epoch milliseconds)
    Simulated clock             ms  (``Meta.sim_time_ms``)
    Durations, dt, cooldowns    s   (seconds)

Anything compared against ``sim_time_ms`` must be converted with
``MS_PER_SECOND`` first.
"""

MS_PER_SECOND = 1000.0

# ── Activities ──────────────────────────────────────────────────────
ACT_IDLE = "idle"
ACT_GATHER = "gather"
ACT_CRAFT = "craft"
ACT_EXPEDITION = "expedition"
ACT_DUNGEON = "dungeon"

# ── Equipment slots ─────────────────────────────────────────────────
ARMOR_SLOTS = ("head", "chest", "legs", "boots", "shield")
TOOL_SLOTS = ("pickaxe", "axe")
EQUIPMENT_SLOTS = ("weapon", *ARMOR_SLOTS, *TOOL_SLOTS)

# ── Expedition rooms ────────────────────────────────────────────────
ROOM_COMBAT = "combat"
ROOM_EVENT = "event"
ROOM_REST = "rest"
ROOM_TREASURE = "treasure"
ROOM_BOSS = "boss"

# ── Dungeon tiles / modes ───────────────────────────────────────────
TILE_WALL = "wall"
TILE_FLOOR = "floor"
TILE_BOSS = "boss"

MODE_EXPLORE = "explore"
MODE_ENCOUNTER = "encounter"
MODE_BOSS = "boss"

# ── Potion kinds ────────────────────────────────────────────────────
POTION_HEAL = "heal"
POTION_REGEN = "regen"
POTION_ACCURACY = "accuracy"

# ── Host tabs ───────────────────────────────────────────────────────
TAB_TOWN = "town"
TAB_PRESTIGE = "prestige"
