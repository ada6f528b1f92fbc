"""components.simulation — Activity state machine and adventure runs."""

from __future__ import annotations
from dataclasses import dataclass, field

from components.combat import CombatEncounter
from components.dev_log import GameLog, feed_log
from core.constants import ACT_IDLE, MODE_EXPLORE
from core.rng import RngCursor


# ── Activity ─────────────────────────────────────────────────────────

@dataclass
class CraftProgress:
    """Payment is per cycle: ``in_progress`` is True only after the
    cycle's inputs were debited."""
    recipe_id: str = ""
    in_progress: bool = False
    remaining_sec: float = 0.0


@dataclass
class Activity:
    """Tagged union: ``type`` selects which fields are meaningful."""
    type: str = ACT_IDLE
    gather_skill: str = ""
    gather_resource: str = ""        # wood / mining node / fish / scavenging zone
    gather_progress_sec: float = 0.0
    gather_interval_sec: float = 1.0
    craft: CraftProgress | None = None


# ── Expedition ───────────────────────────────────────────────────────

@dataclass
class ChoiceOption:
    id: str = ""
    name: str = ""
    loot_mult: float = 1.0
    difficulty_add: int = 0


@dataclass
class PendingChoice:
    kind: str = "route"
    options: list[ChoiceOption] = field(default_factory=list)


@dataclass
class Room:
    type: str = ""
    difficulty: int = 1
    duration_sec: float = 0.0
    progress_sec: float = 0.0
    loot_mult: float = 1.0
    resolved: bool = False
    seed: int = 0
    prompted: bool = False
    combat: CombatEncounter | None = None


@dataclass
class ExpeditionRun:
    seed: int = 0
    risk: int = 1
    room_index: int = 0
    room_count: int = 0
    room: Room | None = None
    pending_choice: PendingChoice | None = None
    next_room_mod: ChoiceOption | None = None
    feed: GameLog = field(default_factory=feed_log)


# ── Dungeon ──────────────────────────────────────────────────────────

@dataclass
class DungeonRun:
    seed: int = 0
    width: int = 0
    height: int = 0
    grid: list[list[str]] = field(default_factory=list)   # grid[y][x]
    discovered: list[bool] = field(default_factory=list)  # y * width + x
    player_x: int = 0
    player_y: int = 0
    boss_x: int = 0
    boss_y: int = 0
    steps: int = 0
    encounter_cooldown: int = 0
    mode: str = MODE_EXPLORE
    encounter: CombatEncounter | None = None
    rng: RngCursor = field(default_factory=RngCursor)
    feed: GameLog = field(default_factory=feed_log)

    def tile(self, x: int, y: int) -> str:
        return self.grid[y][x]

    def is_discovered(self, x: int, y: int) -> bool:
        return self.discovered[y * self.width + x]

    def discover(self, x: int, y: int) -> None:
        self.discovered[y * self.width + x] = True
