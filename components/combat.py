"""components.combat — Live combat encounter state."""

from __future__ import annotations
from dataclasses import dataclass, field

from components.dev_log import GameLog, feed_log
from core.rng import RngCursor


@dataclass
class HitRecord:
    """Last landed blow on one side, for presentation (hit flashes)."""
    amount: int = 0
    crit: bool = False
    at: float = 0.0     # sim ms
    seq: int = 0


@dataclass
class CombatEncounter:
    """One fight, owned by the room or dungeon cell that spawned it.

    Player numbers are snapshots refreshed from equipment on every
    tick; the RNG cursor is private to the fight so replaying the same
    ticks replays the same blows.
    """
    enemy_name: str = ""
    enemy_power: float = 1.0
    enemy_hp: int = 1
    enemy_max_hp: int = 1
    enemy_interval: float = 1.0
    difficulty: int = 1
    is_boss: bool = False

    player_hp: int = 1
    player_max_hp: int = 1
    player_power: float = 1.0
    player_toughness: float = 1.0
    player_interval: float = 1.0

    player_cd: float = 0.0
    enemy_cd: float = 0.0
    rng: RngCursor = field(default_factory=RngCursor)
    damage_taken: int = 0
    started: bool = False

    auto_fight: bool = True
    player_queued: int = 0
    last_auto_eat_at: float = -1e18
    buff_potion_used: bool = False

    hit_seq: int = 0
    last_enemy_hit: HitRecord | None = None
    last_player_hit: HitRecord | None = None
    log: GameLog = field(default_factory=feed_log)

    @property
    def finished(self) -> bool:
        return self.enemy_hp <= 0 or self.player_hp <= 0
