"""simulation/combat.py — Cooldown-scheduled combat resolution.

One turn loop serves expedition rooms, dungeon encounters and the
dungeon boss.  Both sides carry a cooldown that ``dt`` drains; whoever
is at or below zero acts (ties go to the player) and re-arms by its
attack interval.  Every roll comes from the encounter's own cursor, so
the same ticks always replay the same fight.

The number of resolutions per tick is capped, which keeps tick time
bounded no matter how large a cooldown deficit ``dt`` creates.
"""

from __future__ import annotations
import math
from dataclasses import dataclass
from typing import TYPE_CHECKING

from core import tuning
from core.constants import ARMOR_SLOTS, MS_PER_SECOND
from core.progression import clamp
from core.rng import RngCursor
from components.combat import CombatEncounter, HitRecord
from simulation.modifiers import compute_modifiers, compute_player_combat
from simulation.ledger import (
    add_resource_capped, add_xp, apply_durability_loss, apply_injury_if_any,
    take_resource,
)
from simulation.potions import (
    accuracy_bonus, consume_potion, has_buff_active, tick_regen,
)

if TYPE_CHECKING:
    from components.player import PlayerState
    from core.data import Catalog


# ── Outcomes ─────────────────────────────────────────────────────────

ONGOING = "ongoing"
VICTORY = "victory"
DEFEAT = "defeat"


@dataclass
class Loot:
    gold: int = 0
    meat: int = 0
    herbs: int = 0

    def describe(self) -> str:
        parts = [f"+{self.gold} gold"]
        if self.meat:
            parts.append(f"+{self.meat} meat")
        if self.herbs:
            parts.append(f"+{self.herbs} herbs")
        return ", ".join(parts)


# ── Configuration ────────────────────────────────────────────────────

HIT_BASE, HIT_SLOPE, HIT_MIN, HIT_MAX = 0.72, 0.04, 0.55, 0.95
DODGE_BASE, DODGE_SLOPE, DODGE_MIN, DODGE_MAX = 0.06, 0.02, 0.03, 0.22
CRIT_BASE, CRIT_SLOPE, CRIT_MIN, CRIT_MAX = 0.06, 0.02, 0.04, 0.18
CRIT_MULT = 1.6
PLAYER_DODGE_BASE, PLAYER_DODGE_PER_LVL = 0.08, 0.002
PLAYER_DODGE_MIN, PLAYER_DODGE_MAX = 0.05, 0.25
ACCURACY_CAP = 0.99
WEAPON_WEAR_PER_HIT = 1.0
ARMOR_WEAR_PER_BLOW = 1.0
DEFEAT_INJURY_BASE, DEFEAT_INJURY_PER_RISK = 0.25, 0.05


# ── Setup ────────────────────────────────────────────────────────────

def new_encounter(state: "PlayerState", catalog: "Catalog", *,
                  enemy_name: str, enemy_power: float, enemy_max_hp: int,
                  enemy_interval: float, difficulty: int, is_boss: bool,
                  player_cd: float, enemy_cd: float, seed: int) -> CombatEncounter:
    pc = compute_player_combat(state, catalog)
    return CombatEncounter(
        enemy_name=enemy_name,
        enemy_power=enemy_power,
        enemy_hp=enemy_max_hp,
        enemy_max_hp=enemy_max_hp,
        enemy_interval=enemy_interval,
        difficulty=difficulty,
        is_boss=is_boss,
        player_hp=pc.max_hp,
        player_max_hp=pc.max_hp,
        player_power=pc.power,
        player_toughness=pc.toughness,
        player_interval=pc.attack_interval,
        player_cd=player_cd,
        enemy_cd=enemy_cd,
        rng=RngCursor(t=seed),
        buff_potion_used=has_buff_active(state),
    )


def refresh_player(state: "PlayerState", catalog: "Catalog", enc: CombatEncounter) -> None:
    """Re-read gear and level; current HP never exceeds the new max."""
    pc = compute_player_combat(state, catalog)
    enc.player_power = pc.power
    enc.player_toughness = pc.toughness
    enc.player_interval = pc.attack_interval
    enc.player_max_hp = pc.max_hp
    enc.player_hp = min(enc.player_hp, enc.player_max_hp)


def _say(state: "PlayerState", enc: CombatEncounter, msg: str) -> None:
    enc.log.record(msg, t=state.meta.sim_time_ms)


def _record_hit(state: "PlayerState", enc: CombatEncounter, target: str,
                amount: int, crit: bool) -> None:
    enc.hit_seq += 1
    rec = HitRecord(amount=amount, crit=crit, at=state.meta.sim_time_ms, seq=enc.hit_seq)
    if target == "enemy":
        enc.last_enemy_hit = rec
    else:
        enc.last_player_hit = rec


# ── Turn loop ────────────────────────────────────────────────────────

def tick_encounter(state: "PlayerState", catalog: "Catalog",
                   enc: CombatEncounter, dt: float) -> str:
    """Advance *enc* by *dt* seconds.  Returns ONGOING, VICTORY or DEFEAT."""
    if enc.enemy_hp <= 0:
        return VICTORY
    if enc.player_hp <= 0:
        return DEFEAT

    refresh_player(state, catalog, enc)
    if not enc.started:
        enc.started = True
        _say(state, enc, f"{enc.enemy_name} appears!")

    tick_regen(state, enc)
    if enc.auto_fight:
        _auto_sustain(state, catalog, enc)

    enc.player_cd -= dt
    enc.enemy_cd -= dt
    if not enc.auto_fight and enc.player_queued <= 0:
        # No banked swings while waiting for a manual attack.
        enc.player_cd = max(enc.player_cd, 0.0)

    if enc.auto_fight:
        cap = int(tuning.get("combat", "auto_resolutions", 10))
    else:
        cap = int(tuning.get("combat", "manual_resolutions", 20))

    combat_level = compute_player_combat(state, catalog).combat_level
    for _ in range(cap):
        player_ready = enc.player_cd <= 0 and (enc.auto_fight or enc.player_queued > 0)
        enemy_ready = enc.enemy_cd <= 0
        if not player_ready and not enemy_ready:
            break
        if player_ready and (not enemy_ready or enc.player_cd <= enc.enemy_cd):
            _player_attack(state, catalog, enc)
        else:
            _enemy_attack(state, catalog, enc, combat_level)
        if enc.finished:
            break

    if enc.enemy_hp <= 0:
        _say(state, enc, f"Defeated {enc.enemy_name}.")
        return VICTORY
    if enc.player_hp <= 0:
        _say(state, enc, "You are forced to retreat!")
        return DEFEAT
    return ONGOING


def _player_attack(state: "PlayerState", catalog: "Catalog", enc: CombatEncounter) -> None:
    enc.player_cd += enc.player_interval
    if not enc.auto_fight:
        enc.player_queued = max(0, enc.player_queued - 1)

    diff = enc.player_power - enc.enemy_power
    hit_chance = clamp(HIT_MIN, HIT_BASE + diff * HIT_SLOPE, HIT_MAX)
    hit_chance = min(ACCURACY_CAP, hit_chance + accuracy_bonus(state))
    if enc.rng.random() > hit_chance:
        _say(state, enc, "You miss.")
        return

    dodge = clamp(DODGE_MIN, DODGE_BASE - diff * DODGE_SLOPE, DODGE_MAX)
    if enc.rng.random() < dodge:
        _say(state, enc, f"{enc.enemy_name} dodges.")
        return

    crit_chance = clamp(CRIT_MIN, CRIT_BASE + diff * CRIT_SLOPE, CRIT_MAX)
    crit = enc.rng.random() < crit_chance
    base = (0.75 + enc.rng.random() * 0.5) * (2 + enc.player_power * 3.0)
    dmg = max(1, math.floor(base * (CRIT_MULT if crit else 1.0)))
    enc.enemy_hp = max(0, enc.enemy_hp - dmg)
    _record_hit(state, enc, "enemy", dmg, crit)
    apply_durability_loss(state, catalog, "weapon", WEAPON_WEAR_PER_HIT)
    _say(state, enc, f"You hit {enc.enemy_name} for {dmg}{' (crit)' if crit else ''}.")


def _enemy_attack(state: "PlayerState", catalog: "Catalog",
                  enc: CombatEncounter, combat_level: int) -> None:
    enc.enemy_cd += enc.enemy_interval

    dodge = clamp(PLAYER_DODGE_MIN, PLAYER_DODGE_BASE + combat_level * PLAYER_DODGE_PER_LVL,
                  PLAYER_DODGE_MAX)
    if enc.rng.random() < dodge:
        _say(state, enc, "You dodge.")
        return

    for slot in ARMOR_SLOTS:
        apply_durability_loss(state, catalog, slot, ARMOR_WEAR_PER_BLOW)

    base = (0.8 + enc.rng.random() * 0.45) * (1 + enc.enemy_power * 2.2)
    dmg = max(0, math.floor(base - enc.player_toughness * 1.2))
    if dmg <= 0:
        _say(state, enc, f"{enc.enemy_name} strikes, but you block it.")
        return
    enc.player_hp = max(0, enc.player_hp - dmg)
    enc.damage_taken += dmg
    _record_hit(state, enc, "player", dmg, False)
    _say(state, enc, f"{enc.enemy_name} hits you for {dmg}.")


# ── Sustain ──────────────────────────────────────────────────────────

def eat_food(state: "PlayerState", catalog: "Catalog", enc: CombatEncounter,
             food_id: str | None = None) -> bool:
    """Eat *food_id* (or the best-healing food owned).  Returns success."""
    food = None
    if food_id:
        res = catalog.resources.get(food_id)
        if res is not None and res.heal > 0 and state.resources.get(food_id, 0) >= 1:
            food = res
    if food is None:
        food = next((f for f in catalog.foods() if state.resources.get(f.id, 0) >= 1), None)
    if food is None or not take_resource(state, food.id, 1):
        return False
    enc.player_hp = min(enc.player_max_hp, enc.player_hp + food.heal)
    _say(state, enc, f"You eat {food.name} and heal {food.heal}.")
    return True


def _auto_sustain(state: "PlayerState", catalog: "Catalog", enc: CombatEncounter) -> None:
    threshold = float(tuning.get("combat", "auto_eat_threshold", 0.35))
    if enc.player_hp / max(1, enc.player_max_hp) >= threshold:
        return
    cooldown_ms = float(tuning.get("combat", "auto_eat_cooldown_sec", 3.0)) * MS_PER_SECOND
    now = state.meta.sim_time_ms
    if now - enc.last_auto_eat_at < cooldown_ms:
        return

    heals = sorted((p for p in catalog.potions.values() if p.kind == "heal"),
                   key=lambda p: p.amount, reverse=True)
    before = enc.player_hp
    used = any(consume_potion(state, p, enc) for p in heals
               if state.resources.get(p.id, 0) >= 1)
    if not used:
        used = eat_food(state, catalog, enc)
    if used:
        enc.last_auto_eat_at = now
        _say(state, enc, f"Auto-heal: +{enc.player_hp - before} HP.")


# ── Rewards ──────────────────────────────────────────────────────────

def award_loot(state: "PlayerState", difficulty: int, is_boss: bool,
               loot_mult: float) -> Loot:
    total = compute_modifiers(state).loot_mult * loot_mult
    gold = math.ceil((6 + 5 * difficulty + (20 if is_boss else 0)) * total)
    meat = math.ceil((1 + difficulty * 0.6) * total) if state.rng.random() < 0.65 else 0
    herbs = math.ceil((1 + difficulty * 0.4) * total) if state.rng.random() < 0.4 else 0
    add_resource_capped(state, "gold", gold)
    add_resource_capped(state, "meat", meat)
    add_resource_capped(state, "herbs", herbs)
    return Loot(gold, meat, herbs)


def award_victory(state: "PlayerState", catalog: "Catalog", enc: CombatEncounter,
                  risk: int, loot_mult: float) -> tuple[float, Loot]:
    """Combat XP, loot and the post-fight injury roll.  Returns (xp, loot)."""
    base_xp = ((12 + 7 * enc.difficulty + (35 if enc.is_boss else 0))
               * (0.9 + 0.1 * risk))
    add_xp(state, catalog, "combat", base_xp * compute_modifiers(state).global_xp_mult)
    loot = award_loot(state, enc.difficulty, enc.is_boss, loot_mult)

    danger = max(0.1, enc.enemy_power / max(0.5, enc.player_toughness))
    took = enc.damage_taken / max(1, enc.player_max_hp)
    chance = min(0.42, 0.06 * danger + 0.18 * took + 0.03 * risk
                 + (0.04 if enc.is_boss else 0.0))
    apply_injury_if_any(state, chance)
    return base_xp, loot


def apply_defeat(state: "PlayerState", risk: int) -> None:
    apply_injury_if_any(state, DEFEAT_INJURY_BASE + DEFEAT_INJURY_PER_RISK * risk)
