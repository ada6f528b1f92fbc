"""components.resources — State-wide singletons (clock, prestige, potion timers)."""

from __future__ import annotations
from dataclasses import dataclass, field


@dataclass
class Meta:
    """Timestamps.  Wall-clock stamps are epoch ms; ``sim_time_ms`` is the
    simulated clock every time-based rule reads (potions, injuries,
    crops).  It only moves inside ``tick_simulation``, so offline
    catch-up and live play advance it identically.
    """
    created_at: float = 0.0
    updated_at: float = 0.0
    last_tick_at: float = 0.0
    sim_time_ms: float = 0.0


@dataclass
class Legacy:
    """Prestige currency and permanent multipliers.  Survives a reset."""
    points: int = 0
    global_xp_mult: float = 1.0
    global_yield_mult: float = 1.0


@dataclass
class ActivePotion:
    """A timed potion buff (regen or accuracy)."""
    potion_id: str = ""
    kind: str = ""
    amount: float = 0.0
    interval_sec: float = 0.0
    started_at: float = 0.0
    ends_at: float = 0.0
    next_tick_at: float = 0.0


@dataclass
class PotionCooldowns:
    healing_until: float = 0.0
    regen_until: float = 0.0


@dataclass
class PotionState:
    active: ActivePotion | None = None
    cooldowns: PotionCooldowns = field(default_factory=PotionCooldowns)


@dataclass
class RunStats:
    """Cumulative adventuring record (read by prestige)."""
    rooms_cleared: int = 0
    bosses_defeated: int = 0
    dungeons_completed: int = 0
