"""components.dev_log — Bounded message logs stored on the state.

A ring buffer used three ways: the player's activity log
(``PlayerState.log``, 80 entries), each expedition/dungeon run's feed
(40 entries) and each combat encounter's blow-by-blow log (40 entries).
Because they live inside the state tree they are saved and restored
with it.

Usage:
    state.log.record("Upgraded Workshop to level 1.", t=state.meta.sim_time_ms)
    for entry in state.log.recent(5):
        print(entry["msg"])

Each entry is a dict:
    {"t": float, "msg": str}
"""

from __future__ import annotations
from dataclasses import dataclass, field

from core import tuning


@dataclass
class GameLog:
    """Ring buffer of timestamped messages, newest last."""

    entries: list[dict] = field(default_factory=list)
    max_entries: int = 80

    def record(self, msg: str, *, t: float = 0.0) -> None:
        self.entries.append({"t": t, "msg": msg})
        if len(self.entries) > self.max_entries:
            self.entries = self.entries[-self.max_entries:]

    def recent(self, n: int = 10) -> list[dict]:
        """Return the *n* most recent entries (newest last)."""
        return self.entries[-n:]

    def messages(self) -> list[str]:
        return [e["msg"] for e in self.entries]

    def last(self) -> str | None:
        return self.entries[-1]["msg"] if self.entries else None

    def __len__(self) -> int:
        return len(self.entries)


def player_log() -> GameLog:
    """The player's activity log, sized by ``[log] max_entries``."""
    return GameLog(max_entries=int(tuning.get("log", "max_entries", 80)))


def feed_log() -> GameLog:
    """A run feed or combat log, sized by ``[log] feed_entries``."""
    return GameLog(max_entries=int(tuning.get("log", "feed_entries", 40)))
