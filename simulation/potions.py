"""simulation/potions.py — Drinking potions and ticking their timed effects.

Heal potions act instantly and share a 30 s cooldown.  Regen and
accuracy potions become ``state.potion.active`` until their end time;
only one such buff may be drunk per fight.
"""

from __future__ import annotations
from typing import TYPE_CHECKING

from core.constants import MS_PER_SECOND, POTION_HEAL, POTION_REGEN, POTION_ACCURACY
from components.resources import ActivePotion
from simulation.ledger import push_log

if TYPE_CHECKING:
    from components.combat import CombatEncounter
    from components.player import PlayerState
    from core.data import Catalog, PotionDef


def on_cooldown(state: "PlayerState", potion: "PotionDef") -> bool:
    now = state.meta.sim_time_ms
    cds = state.potion.cooldowns
    if potion.kind == POTION_HEAL:
        return now < cds.healing_until
    if potion.kind == POTION_REGEN:
        return now < cds.regen_until
    return False


def consume_potion(state: "PlayerState", potion: "PotionDef",
                   enc: "CombatEncounter | None" = None) -> bool:
    """Drink *potion* if allowed.  Returns True when one was used."""
    if enc is not None and potion.kind != POTION_HEAL and enc.buff_potion_used:
        return False
    if on_cooldown(state, potion):
        return False
    if state.resources.get(potion.id, 0) < 1:
        return False

    state.resources[potion.id] -= 1
    now = state.meta.sim_time_ms
    cds = state.potion.cooldowns

    if potion.kind == POTION_HEAL:
        cds.healing_until = now + potion.cooldown_sec * MS_PER_SECOND
        if enc is not None:
            enc.player_hp = min(enc.player_max_hp, enc.player_hp + int(potion.amount))
    else:
        if potion.kind == POTION_REGEN:
            cds.regen_until = now + potion.cooldown_sec * MS_PER_SECOND
        state.potion.active = ActivePotion(
            potion_id=potion.id,
            kind=potion.kind,
            amount=potion.amount,
            interval_sec=potion.interval_sec,
            started_at=now,
            ends_at=now + potion.duration_sec * MS_PER_SECOND,
            next_tick_at=now + potion.interval_sec * MS_PER_SECOND,
        )
        if enc is not None:
            enc.buff_potion_used = True

    push_log(state, f"Drank {potion.name}.")
    return True


def expire_potion(state: "PlayerState") -> None:
    active = state.potion.active
    if active is not None and state.meta.sim_time_ms >= active.ends_at:
        state.potion.active = None


def tick_regen(state: "PlayerState", enc: "CombatEncounter") -> None:
    """Apply every regen pulse that fell due up to the current sim time."""
    active = state.potion.active
    if active is None or active.kind != POTION_REGEN or active.interval_sec <= 0:
        return
    now = state.meta.sim_time_ms
    step = active.interval_sec * MS_PER_SECOND
    while active.next_tick_at <= now and active.next_tick_at <= active.ends_at:
        enc.player_hp = min(enc.player_max_hp, enc.player_hp + int(active.amount))
        active.next_tick_at += step


def accuracy_bonus(state: "PlayerState") -> float:
    active = state.potion.active
    if active is None or active.kind != POTION_ACCURACY:
        return 0.0
    return active.amount


def has_buff_active(state: "PlayerState") -> bool:
    active = state.potion.active
    return active is not None and active.kind != POTION_HEAL


def pick_combat_potion(state: "PlayerState", catalog: "Catalog",
                       enc: "CombatEncounter") -> "PotionDef | None":
    """Best owned potion for the moment: heal when hurt, else a buff."""
    owned = [p for p in catalog.potions.values() if state.resources.get(p.id, 0) >= 1]
    heals = sorted((p for p in owned if p.kind == POTION_HEAL),
                   key=lambda p: p.amount, reverse=True)
    buffs = [p for p in owned if p.kind != POTION_HEAL]
    if enc.player_hp < enc.player_max_hp and heals:
        return heals[0]
    if buffs:
        return buffs[0]
    return heals[0] if heals else None
