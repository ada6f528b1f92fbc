"""core/events.py — Lightweight event bus.

Decouples the host loop, which *signals* that the state changed, from
observers (a renderer, a logger, tests) that *react* to it.  The bus is
owned by ``GameApp``::

    from core.events import EventBus, StateChanged
    app.bus.subscribe("StateChanged", redraw)

The host emits during ``advance()`` / ``dispatch()`` and drains once at
the end, so a handler never observes a half-completed tick.

Design rules:
  - Events are plain dataclasses — no behaviour.
  - ``emit()`` is O(1) (just appends).
  - ``drain()`` processes all queued events in FIFO order.
  - Handlers may emit new events; the same drain delivers them.
"""

from __future__ import annotations
import traceback
from dataclasses import dataclass
from typing import Any, Callable
from collections import defaultdict, deque


# ═══════════════════════════════════════════════════════════════════
#  Event definitions
# ═══════════════════════════════════════════════════════════════════

@dataclass
class StateChanged:
    """A tick batch or an action mutated the state."""
    reason: str = "tick"          # "tick" or the action name
    sim_time_ms: float = 0.0


@dataclass
class StateLoaded:
    """A save was loaded (``fresh`` = no usable save, new state created)."""
    fresh: bool = False


@dataclass
class StateSaved:
    path: str = ""


@dataclass
class SaveDiscarded:
    """A save existed but failed to read, parse or version-check."""
    path: str = ""


@dataclass
class OfflineProgress:
    """Offline catch-up ran ``seconds`` of simulation on load."""
    seconds: float = 0.0


# ═══════════════════════════════════════════════════════════════════
#  Event Bus
# ═══════════════════════════════════════════════════════════════════

Handler = Callable[[Any], None]


class EventBus:
    """FIFO queue of state notifications, drained by the host."""

    MAX_PASSES = 1000

    def __init__(self):
        self._pending: deque = deque()
        self._handlers: dict[str, list[Handler]] = defaultdict(list)
        self._counts: dict[str, int] = defaultdict(int)

    def emit(self, event) -> None:
        self._pending.append(event)

    def subscribe(self, event_type: str, handler: Handler) -> None:
        """Call *handler* for every event whose class is named *event_type*."""
        self._handlers[event_type].append(handler)

    def unsubscribe(self, event_type: str, handler: Handler) -> bool:
        handlers = self._handlers.get(event_type, [])
        if handler not in handlers:
            return False
        handlers.remove(handler)
        return True

    def drain(self) -> int:
        """Deliver every queued event, including ones emitted by handlers.

        Returns the number of events delivered.  A handler that raises is
        reported and skipped; the remaining handlers and events still run.
        """
        delivered = 0
        passes = 0
        while self._pending and passes < self.MAX_PASSES:
            passes += 1
            batch = list(self._pending)
            self._pending.clear()
            for event in batch:
                self._deliver(event)
            delivered += len(batch)
        return delivered

    def _deliver(self, event) -> None:
        name = type(event).__name__
        self._counts[name] += 1
        for handler in list(self._handlers.get(name, ())):
            try:
                handler(event)
            except Exception as exc:
                print(f"[EVENT] {name} handler {getattr(handler, '__name__', handler)!r} failed: {exc}")
                traceback.print_exc()

    def clear(self) -> None:
        self._pending.clear()

    def stats(self) -> dict[str, int]:
        """Delivered events so far, by class name."""
        return dict(self._counts)

    def pending_count(self) -> int:
        return len(self._pending)

    def __repr__(self) -> str:
        return f"EventBus(pending={len(self._pending)}, types={len(self._handlers)})"
