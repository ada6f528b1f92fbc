"""simulation/expedition.py — Seeded room-by-room expeditions.

A run is ``8 + 2 * risk`` rooms.  Each room is generated from
``mulberry32(seed + index * 1337)``: the last is always the boss, the
rest roll combat / event / rest / treasure.  Event rooms raise a route
choice and hold the run until the player answers; that is the only
place a run ever waits on the player.
"""

from __future__ import annotations
from typing import TYPE_CHECKING

from core import tuning
from core.constants import (
    ACT_IDLE, ACT_EXPEDITION, ROOM_BOSS, ROOM_COMBAT, ROOM_EVENT, ROOM_REST,
    ROOM_TREASURE,
)
from core.progression import clamp
from core.rng import mulberry32, random_int, MASK32
from components.simulation import ChoiceOption, ExpeditionRun, PendingChoice, Room
from simulation.combat import (
    DEFEAT, VICTORY, apply_defeat, award_loot, award_victory, new_encounter,
    tick_encounter,
)
from simulation.ledger import efficiency, push_log, take_resource

if TYPE_CHECKING:
    from components.player import PlayerState
    from core.data import Catalog


# ── Configuration ────────────────────────────────────────────────────

ENEMIES_BY_TIER = (
    ("Slime", "Boar", "Wolf", "Giant Rat"),
    ("Bandit", "Giant Spider", "Skeletal Scout", "Wild Stag"),
    ("Cultist", "Ogre", "Stone Golem", "Warg"),
)
BOSSES = ("Feral Alpha", "Ruin Warden", "Ancient Stag")

ROOM_SEED_STRIDE = 1337
NAME_SALT = 0x9E3779B9
COMBAT_SALT = 0xDEADBEEF

ROUTE_OPTIONS = (
    ChoiceOption(id="safe", name="Safe path", loot_mult=0.9, difficulty_add=-1),
    ChoiceOption(id="risky", name="Risky path", loot_mult=1.35, difficulty_add=1),
)


def room_count_for(risk: int) -> int:
    return 8 + 2 * risk


def clamp_risk(risk: int) -> int:
    return int(clamp(1, int(risk), 3))


def _feed(state: "PlayerState", run: ExpeditionRun, msg: str) -> None:
    run.feed.record(msg, t=state.meta.sim_time_ms)


# ── Generation ───────────────────────────────────────────────────────

def roll_room_type(rand, room_index: int, room_count: int) -> str:
    if room_index == room_count - 1:
        return ROOM_BOSS
    r = rand()
    if r < 0.55:
        return ROOM_COMBAT
    if r < 0.70:
        return ROOM_EVENT
    if r < 0.85:
        return ROOM_REST
    return ROOM_TREASURE


def make_room(seed: int, room_index: int, room_count: int, risk: int,
              mod: ChoiceOption | None = None) -> Room:
    """Pure: the same arguments always produce the same room."""
    rand = mulberry32((seed + room_index * ROOM_SEED_STRIDE) & MASK32)
    room_type = roll_room_type(rand, room_index, room_count)
    base = 1 + int(room_index / max(1, room_count - 1) * (2 + risk))
    difficulty = base + random_int(rand, 0, 2)
    if mod is not None:
        difficulty += mod.difficulty_add
    difficulty = max(1, difficulty)

    if room_type == ROOM_REST:
        duration = float(tuning.get("expedition", "rest_sec", 6.0))
    elif room_type == ROOM_TREASURE:
        duration = float(tuning.get("expedition", "treasure_sec", 3.0))
    elif room_type == ROOM_EVENT:
        duration = 0.0
    else:
        duration = 1.0

    return Room(
        type=room_type,
        difficulty=difficulty,
        duration_sec=duration,
        loot_mult=mod.loot_mult if mod is not None else 1.0,
        seed=(seed + room_index * ROOM_SEED_STRIDE + (difficulty << 8)) & MASK32,
    )


def pick_enemy_name(seed: int, difficulty: int, is_boss: bool) -> str:
    rand = mulberry32((seed ^ NAME_SALT) & MASK32)
    if is_boss:
        return BOSSES[random_int(rand, 0, len(BOSSES))]
    tier = int(clamp(0, (difficulty - 1) // 2, len(ENEMIES_BY_TIER) - 1))
    names = ENEMIES_BY_TIER[tier]
    return names[random_int(rand, 0, len(names))]


def _next_room(run: ExpeditionRun) -> Room:
    """Build the room at ``run.room_index``; the choice modifier is spent."""
    room = make_room(run.seed, run.room_index, run.room_count, run.risk, run.next_room_mod)
    run.next_room_mod = None
    return room


# ── Lifecycle ────────────────────────────────────────────────────────

def start_expedition(state: "PlayerState", catalog: "Catalog", risk: int = 1) -> None:
    if state.expedition is not None or state.dungeon is not None:
        return
    if not take_resource(state, "rations", 1):
        take_resource(state, "meat", 1)

    risk = clamp_risk(risk)
    run = ExpeditionRun(
        seed=state.rng.next_u32() & 0x7FFFFFFF,
        risk=risk,
        room_count=room_count_for(risk),
    )
    run.room = _next_room(run)
    state.expedition = run
    state.activity.type = ACT_EXPEDITION
    push_log(state, f"Expedition started (Risk {risk}).")
    _feed(state, run, f"You head out (Risk {risk}).")


def stop_expedition(state: "PlayerState") -> None:
    if state.expedition is None:
        return
    state.expedition = None
    state.activity.type = ACT_IDLE
    push_log(state, "Expedition ended.")


def _advance(state: "PlayerState", run: ExpeditionRun) -> None:
    state.stats.rooms_cleared += 1
    run.room_index += 1
    if run.room_index >= run.room_count:
        _feed(state, run, "Expedition complete. Back to town.")
        stop_expedition(state)
        push_log(state, "Expedition complete. Back to town.")
        return
    run.room = _next_room(run)


def choose_expedition_option(state: "PlayerState", option_id: str) -> None:
    run = state.expedition
    if run is None or run.pending_choice is None:
        return
    opt = next((o for o in run.pending_choice.options if o.id == option_id), None)
    if opt is None:
        return
    run.next_room_mod = ChoiceOption(opt.id, opt.name, opt.loot_mult, opt.difficulty_add)
    run.pending_choice = None
    push_log(state, f"Chose: {opt.name}.")
    _feed(state, run, f"You choose: {opt.name}.")

    if run.room is not None and run.room.type == ROOM_EVENT:
        _advance(state, run)
    elif run.room is None:
        run.room = _next_room(run)


# ── Tick ─────────────────────────────────────────────────────────────

def tick_expedition(state: "PlayerState", catalog: "Catalog", dt: float) -> None:
    run = state.expedition
    if run is None or run.pending_choice is not None:
        return
    if run.room is None:
        run.room = _next_room(run)
    room = run.room

    if room.type == ROOM_EVENT:
        if not room.prompted:
            room.prompted = True
            _feed(state, run, "A fork in the path... choose your route.")
        run.pending_choice = PendingChoice(
            kind="route",
            options=[ChoiceOption(o.id, o.name, o.loot_mult, o.difficulty_add)
                     for o in ROUTE_OPTIONS],
        )
        return

    scaled = dt * efficiency(state)

    if room.type == ROOM_REST:
        room.progress_sec += scaled
        if room.progress_sec >= room.duration_sec:
            if take_resource(state, "rations", 1):
                push_log(state, "Rested and used 1 ration.")
                _feed(state, run, "You rest and eat a ration.")
            else:
                push_log(state, "Rested (no rations).")
                _feed(state, run, "You rest for a moment.")
            room.resolved = True

    elif room.type == ROOM_TREASURE:
        room.progress_sec += scaled
        if room.progress_sec >= room.duration_sec:
            loot = award_loot(state, room.difficulty, False, room.loot_mult)
            push_log(state, f"Found treasure: {loot.describe()}.")
            _feed(state, run, "You find a hidden cache.")
            _feed(state, run, f"Loot: {loot.describe()}.")
            room.resolved = True

    else:
        _tick_combat_room(state, catalog, run, room, scaled)
        if state.expedition is not run:
            return      # retreated

    if room.resolved:
        _advance(state, run)


def _ensure_encounter(state: "PlayerState", catalog: "Catalog",
                      run: ExpeditionRun, room: Room) -> None:
    if room.combat is not None:
        return
    is_boss = room.type == ROOM_BOSS
    power = 1 + room.difficulty * (1.2 + 0.35 * run.risk) + (4 if is_boss else 0)
    room.combat = new_encounter(
        state, catalog,
        enemy_name=pick_enemy_name(room.seed, room.difficulty, is_boss),
        enemy_power=power,
        enemy_max_hp=int(18 + room.difficulty * 14 + (75 if is_boss else 0)),
        enemy_interval=clamp(0.6, 1.35 / (0.7 + power / 7), 1.5),
        difficulty=room.difficulty,
        is_boss=is_boss,
        player_cd=0.1,
        enemy_cd=0.7,
        seed=(room.seed ^ COMBAT_SALT) & MASK32,
    )
    _feed(state, run, f"{room.combat.enemy_name} appears!")


def _tick_combat_room(state: "PlayerState", catalog: "Catalog", run: ExpeditionRun,
                      room: Room, dt: float) -> None:
    _ensure_encounter(state, catalog, run, room)
    enc = room.combat
    outcome = tick_encounter(state, catalog, enc, dt)

    if outcome == DEFEAT:
        _feed(state, run, "You are forced to retreat!")
        apply_defeat(state, run.risk)
        stop_expedition(state)
        push_log(state, "You retreated from the expedition.")
        return
    if outcome != VICTORY:
        return

    xp, loot = award_victory(state, catalog, enc, run.risk, room.loot_mult)
    _feed(state, run, f"Defeated {enc.enemy_name}.")
    _feed(state, run, f"Loot: {loot.describe()}.")
    label = "Boss defeated" if enc.is_boss else "Won fight"
    push_log(state, f"{label}: +{int(xp)} combat XP, +{loot.gold} gold.")
    room.resolved = True
    if enc.is_boss:
        state.stats.bosses_defeated += 1
