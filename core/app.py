"""
core/app.py — Headless host loop

Owns the one PlayerState and the catalog, and is the only thing that
ticks, saves or notifies.  Frame time is accumulated and spent in
fixed sub-steps; every tick batch and every action is atomic with
respect to saving and to event handlers.

    app = GameApp(load_catalog("data"), save_path=get_save_file(0))
    app.load()
    app.dispatch(start_gather, "woodcutting")
    app.run(seconds=60)
"""

from __future__ import annotations
import math
import time
from pathlib import Path
from typing import Callable

import pygame

from core import tuning
from core.data import Catalog
from core.events import (
    EventBus, OfflineProgress, SaveDiscarded, StateChanged, StateLoaded, StateSaved,
)
from core.save import load_state, save_state
from components.player import PlayerState, create_default_state
from simulation.ledger import push_log
from simulation.world_sim import run_offline_progress, tick_simulation


def wall_clock_ms() -> float:
    return time.time() * 1000.0


class GameApp:
    def __init__(self, catalog: Catalog, save_path: str | Path | None = None,
                 clock: Callable[[], float] = wall_clock_ms):
        self.catalog = catalog
        self.save_path = Path(save_path) if save_path is not None else None
        self.clock = clock
        self.bus = EventBus()
        self.state: PlayerState = create_default_state(catalog, now=clock())
        self.dirty = False
        self.running = False
        self._acc = 0.0
        self._last_save_at = clock()

    # -- Tunables --

    @property
    def step(self) -> float:
        return float(tuning.get("host", "step", 0.1))

    # -- Persistence --

    def load(self) -> PlayerState:
        """Load the save (or start fresh), then catch up offline time."""
        now = self.clock()
        loaded = None
        if self.save_path is not None and self.save_path.exists():
            loaded = load_state(self.save_path)
            if loaded is None:
                self.bus.emit(SaveDiscarded(path=str(self.save_path)))

        if loaded is None:
            self.state = create_default_state(self.catalog, now=now)
            self.dirty = True
        else:
            self.state = loaded
            self.dirty = False
        self.bus.emit(StateLoaded(fresh=loaded is None))

        self.catch_up(now)
        self.bus.drain()
        return self.state

    def catch_up(self, now: float) -> float:
        """Simulate the wall-clock gap since the last tick."""
        gap = max(0.0, (now - self.state.meta.last_tick_at) / 1000.0)
        ran = run_offline_progress(self.state, self.catalog, gap)
        if ran >= float(tuning.get("offline", "log_threshold", 10)):
            push_log(self.state, f"Offline progress: simulated {math.floor(ran)}s.")
            print(f"[APP] Offline progress: simulated {math.floor(ran)}s")
        if ran > 0:
            self.bus.emit(OfflineProgress(seconds=ran))
        self.state.meta.last_tick_at = now
        self._mark_changed("offline")
        return ran

    def save(self, force: bool = False) -> bool:
        """Write the state if it changed since the last save."""
        if self.save_path is None or not (self.dirty or force):
            return False
        save_state(self.state, self.save_path)
        self.dirty = False
        self._last_save_at = self.clock()
        self.bus.emit(StateSaved(path=str(self.save_path)))
        self.bus.drain()
        return True

    def maybe_autosave(self, now: float | None = None) -> bool:
        now = self.clock() if now is None else now
        interval_ms = float(tuning.get("host", "autosave_sec", 5.0)) * 1000.0
        if now - self._last_save_at < interval_ms:
            return False
        self._last_save_at = now
        return self.save()

    def hard_reset(self) -> None:
        # Queued events describe the state being thrown away.
        self.bus.clear()
        self.state = create_default_state(self.catalog, now=self.clock())
        self._acc = 0.0
        self._mark_changed("reset")
        self.save()
        self.bus.drain()

    # -- Simulation --

    def advance(self, frame_dt: float) -> int:
        """Spend *frame_dt* seconds of wall time.  Returns ticks run."""
        max_dt = float(tuning.get("host", "max_frame_dt", 0.5))
        max_steps = int(tuning.get("host", "max_steps", 20))
        step = self.step

        self._acc += max(0.0, min(max_dt, frame_dt))
        if self._acc < step:
            return 0
        steps = min(max_steps, math.floor(self._acc / step))
        self._acc -= steps * step

        for _ in range(steps):
            tick_simulation(self.state, self.catalog, step)
        self.state.meta.last_tick_at = self.clock()
        self._mark_changed("tick")
        self.bus.drain()
        return steps

    def dispatch(self, action: Callable, *args):
        """Run one action entry point against the state."""
        result = action(self.state, self.catalog, *args)
        self._mark_changed(getattr(action, "__name__", "action"))
        self.bus.drain()
        return result

    def _mark_changed(self, reason: str) -> None:
        self.state.meta.updated_at = self.clock()
        self.dirty = True
        self.bus.emit(StateChanged(reason=reason, sim_time_ms=self.state.meta.sim_time_ms))

    # -- Main loop --

    def run(self, seconds: float | None = None) -> None:
        """Tick in real time until stopped (or for *seconds*), then save."""
        pygame.init()
        clock = pygame.time.Clock()
        fps = int(tuning.get("host", "fps", 10))
        self.running = True
        elapsed = 0.0
        try:
            while self.running:
                dt = clock.tick(fps) / 1000.0
                elapsed += dt
                self.advance(dt)
                self.maybe_autosave()
                if seconds is not None and elapsed >= seconds:
                    self.running = False
        except KeyboardInterrupt:
            print("[APP] Interrupted")
        finally:
            self.running = False
            self.save()
            pygame.quit()
