"""simulation/dungeon.py — Seeded room-and-corridor dungeon crawl.

The grid is carved once at dungeon start from the run seed: up to
eight non-overlapping rooms, each joined to the previous one by an
L-shaped corridor (horizontal, then vertical).  The last room's center
is the boss tile.  Exploration is move-driven; fights run on the shared
combat engine every tick.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import TYPE_CHECKING

from core import tuning
from core.constants import (
    ACT_DUNGEON, ACT_IDLE, MODE_BOSS, MODE_ENCOUNTER, MODE_EXPLORE, TAB_TOWN,
    TILE_BOSS, TILE_FLOOR, TILE_WALL,
)
from core.rng import RngCursor, mulberry32, random_int, MASK32
from components.simulation import DungeonRun
from simulation.combat import (
    DEFEAT, VICTORY, apply_defeat, award_victory, new_encounter, tick_encounter,
)
from simulation.ledger import push_log

if TYPE_CHECKING:
    from components.player import PlayerState
    from core.data import Catalog


ENEMY_NAMES = ("Slime", "Cave Rat", "Goblin", "Sporeling", "Rock Beetle")
BOSS_NAME = "Green Slime"
BOSS_HP = 120
BOSS_POWER = 3.2
ENEMY_INTERVAL = 2.4
ENCOUNTER_SALT = 0xBEEF
DUNGEON_RISK = 1


# ═══════════════════════════════════════════════════════════════════════
#  Generation
# ═══════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class Rect:
    x: int
    y: int
    w: int
    h: int

    def center(self) -> tuple[int, int]:
        return self.x + self.w // 2, self.y + self.h // 2

    def overlaps(self, other: "Rect") -> bool:
        """Overlap test padded by one tile so rooms never touch."""
        return (self.x - 1 < other.x + other.w
                and self.x + self.w + 1 > other.x
                and self.y - 1 < other.y + other.h
                and self.y + self.h + 1 > other.y)


@dataclass
class DungeonLayout:
    grid: list[list[str]]
    rooms: list[Rect]
    start: tuple[int, int]
    boss: tuple[int, int]
    width: int
    height: int


def _carve_room(grid: list[list[str]], room: Rect) -> None:
    for y in range(room.y, room.y + room.h):
        for x in range(room.x, room.x + room.w):
            grid[y][x] = TILE_FLOOR


def _carve_corridor(grid: list[list[str]], x1: int, y1: int, x2: int, y2: int) -> None:
    x, y = x1, y1
    while x != x2:
        grid[y][x] = TILE_FLOOR
        x += 1 if x2 > x else -1
    while y != y2:
        grid[y][x] = TILE_FLOOR
        y += 1 if y2 > y else -1
    grid[y][x] = TILE_FLOOR


def generate_dungeon(seed: int, width: int | None = None,
                     height: int | None = None) -> DungeonLayout:
    """Pure: the same seed and size always carve the same dungeon."""
    width = int(tuning.get("dungeon", "width", 25)) if width is None else width
    height = int(tuning.get("dungeon", "height", 17)) if height is None else height
    max_rooms = int(tuning.get("dungeon", "max_rooms", 8))
    min_size = int(tuning.get("dungeon", "min_room", 4))
    max_size = int(tuning.get("dungeon", "max_room", 7))
    max_tries = int(tuning.get("dungeon", "placement_tries", 120))

    rand = mulberry32(seed & MASK32)
    grid = [[TILE_WALL] * width for _ in range(height)]
    rooms: list[Rect] = []

    tries = 0
    while len(rooms) < max_rooms and tries < max_tries:
        tries += 1
        w = random_int(rand, min_size, max_size + 1)
        h = random_int(rand, min_size, max_size + 1)
        x = random_int(rand, 1, width - w - 1)
        y = random_int(rand, 1, height - h - 1)
        room = Rect(x, y, w, h)
        if any(r.overlaps(room) for r in rooms):
            continue
        _carve_room(grid, room)
        if rooms:
            px, py = rooms[-1].center()
            nx, ny = room.center()
            _carve_corridor(grid, px, py, nx, ny)
        rooms.append(room)

    if not rooms:
        fallback = Rect(2, 2, width - 4, height - 4)
        _carve_room(grid, fallback)
        rooms.append(fallback)

    bx, by = rooms[-1].center()
    grid[by][bx] = TILE_BOSS
    return DungeonLayout(grid=grid, rooms=rooms, start=rooms[0].center(),
                         boss=(bx, by), width=width, height=height)


def is_walkable(tile: str) -> bool:
    return tile in (TILE_FLOOR, TILE_BOSS)


# ═══════════════════════════════════════════════════════════════════════
#  Lifecycle
# ═══════════════════════════════════════════════════════════════════════

def _feed(state: "PlayerState", run: DungeonRun, msg: str) -> None:
    run.feed.record(msg, t=state.meta.sim_time_ms)


def start_dungeon(state: "PlayerState", catalog: "Catalog") -> None:
    if state.dungeon is not None or state.expedition is not None:
        return
    seed = state.rng.next_u32() & 0x7FFFFFFF
    layout = generate_dungeon(seed)
    sx, sy = layout.start
    bx, by = layout.boss
    run = DungeonRun(
        seed=seed,
        width=layout.width,
        height=layout.height,
        grid=layout.grid,
        discovered=[False] * (layout.width * layout.height),
        player_x=sx,
        player_y=sy,
        boss_x=bx,
        boss_y=by,
        rng=RngCursor(t=(seed ^ ENCOUNTER_SALT) & MASK32),
    )
    run.discover(sx, sy)
    state.dungeon = run
    state.activity.type = ACT_DUNGEON
    push_log(state, "Entered the dungeon.")


def exit_dungeon(state: "PlayerState") -> None:
    if state.dungeon is None:
        return
    state.dungeon = None
    state.activity.type = ACT_IDLE
    state.tab = TAB_TOWN
    push_log(state, "Left the dungeon.")


def _complete_dungeon(state: "PlayerState") -> None:
    state.dungeon = None
    state.activity.type = ACT_IDLE
    state.tab = TAB_TOWN
    state.stats.dungeons_completed += 1
    push_log(state, "Dungeon completed.")


# ═══════════════════════════════════════════════════════════════════════
#  Movement
# ═══════════════════════════════════════════════════════════════════════

def move_dungeon(state: "PlayerState", catalog: "Catalog", dx: int, dy: int) -> None:
    run = state.dungeon
    if run is None or run.mode != MODE_EXPLORE:
        return
    nx, ny = run.player_x + dx, run.player_y + dy
    if nx < 0 or ny < 0 or nx >= run.width or ny >= run.height:
        return
    tile = run.tile(nx, ny)
    if not is_walkable(tile):
        return

    was_discovered = run.is_discovered(nx, ny)
    run.player_x, run.player_y = nx, ny
    run.discover(nx, ny)
    run.steps += 1
    if run.encounter_cooldown > 0:
        run.encounter_cooldown -= 1

    if tile == TILE_BOSS:
        _start_boss(state, catalog, run)
        return

    chance = float(tuning.get("dungeon", "encounter_chance", 0.18))
    if was_discovered or run.encounter_cooldown > 0:
        return
    if run.rng.random() >= chance:
        return
    per = int(tuning.get("dungeon", "steps_per_difficulty", 8))
    _start_encounter(state, catalog, run, 1 + run.steps // per)


def _start_encounter(state: "PlayerState", catalog: "Catalog",
                     run: DungeonRun, difficulty: int) -> None:
    name = ENEMY_NAMES[random_int(run.rng.random, 0, len(ENEMY_NAMES))]
    run.mode = MODE_ENCOUNTER
    run.encounter = new_encounter(
        state, catalog,
        enemy_name=name,
        enemy_power=1 + difficulty * 1.4,
        enemy_max_hp=int(16 + difficulty * 12),
        enemy_interval=ENEMY_INTERVAL,
        difficulty=difficulty,
        is_boss=False,
        player_cd=0.0,
        enemy_cd=0.8,
        seed=run.rng.next_u32(),
    )
    run.encounter_cooldown = int(tuning.get("dungeon", "encounter_cooldown", 2))
    _feed(state, run, "An enemy blocks your path.")


def _start_boss(state: "PlayerState", catalog: "Catalog", run: DungeonRun) -> None:
    run.mode = MODE_BOSS
    run.encounter = new_encounter(
        state, catalog,
        enemy_name=BOSS_NAME,
        enemy_power=BOSS_POWER,
        enemy_max_hp=BOSS_HP,
        enemy_interval=ENEMY_INTERVAL,
        difficulty=int(tuning.get("dungeon", "boss_difficulty", 4)),
        is_boss=True,
        player_cd=0.0,
        enemy_cd=1.2,
        seed=run.rng.next_u32(),
    )
    _feed(state, run, f"{BOSS_NAME} emerges from the shadows.")


# ═══════════════════════════════════════════════════════════════════════
#  Tick
# ═══════════════════════════════════════════════════════════════════════

def tick_dungeon(state: "PlayerState", catalog: "Catalog", dt: float) -> None:
    run = state.dungeon
    if run is None or run.mode == MODE_EXPLORE or run.encounter is None:
        return
    enc = run.encounter
    outcome = tick_encounter(state, catalog, enc, dt)

    if outcome == DEFEAT:
        _feed(state, run, "You are forced to retreat!")
        apply_defeat(state, DUNGEON_RISK)
        exit_dungeon(state)
        return
    if outcome != VICTORY:
        return

    xp, loot = award_victory(state, catalog, enc, DUNGEON_RISK, 1.0)
    _feed(state, run, f"Loot: {loot.describe()}.")
    if enc.is_boss:
        push_log(state, f"{enc.enemy_name} defeated: +{int(xp)} combat XP, +{loot.gold} gold.")
        _complete_dungeon(state)
        return
    run.mode = MODE_EXPLORE
    run.encounter = None
    _feed(state, run, "Enemy defeated.")
