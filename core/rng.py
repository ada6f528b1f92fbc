"""core/rng.py — Deterministic, serializable random streams (mulberry32).

Every roll that changes saved state goes through one of these.  The
whole generator state is a single 32-bit integer, so a cursor can be
stored in a save file and resumed bit-exactly::

    from core.rng import RngCursor, mulberry32, random_int

    cur = RngCursor(t=seed)
    r = cur.random()              # float in [0, 1), advances cur.t

    rand = mulberry32(seed)       # throwaway closure for generators
    idx = random_int(rand, 0, 4)  # 0..3
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Callable

MASK32 = 0xFFFFFFFF
_GOLDEN = 0x6D2B79F5
_SCALE = 4294967296.0   # 2 ** 32


def _imul(a: int, b: int) -> int:
    """32-bit wrapping multiply (low 32 bits only)."""
    return (a * b) & MASK32


def mulberry32_next(t: int) -> tuple[float, int]:
    """Pure step: ``(value in [0, 1), next_state)`` for state *t*."""
    t = (t + _GOLDEN) & MASK32
    x = _imul(t ^ (t >> 15), 1 | t)
    x ^= (x + _imul(x ^ (x >> 7), 61 | x)) & MASK32
    return ((x ^ (x >> 14)) & MASK32) / _SCALE, t


@dataclass
class RngCursor:
    """Mutable handle around one mulberry32 state word."""
    t: int = 0

    def __post_init__(self):
        self.t &= MASK32

    def random(self) -> float:
        value, self.t = mulberry32_next(self.t)
        return value

    def next_u32(self) -> int:
        return int(self.random() * _SCALE) & MASK32

    def fork(self, salt: int = 0) -> "RngCursor":
        """Independent child cursor seeded from this stream."""
        return RngCursor(t=(self.next_u32() ^ salt) & MASK32)


def mulberry32(seed: int) -> Callable[[], float]:
    """Closure form, for generators that only live for one call."""
    cursor = RngCursor(t=seed)
    return cursor.random


def random_int(rand: Callable[[], float], lo: int, hi_exclusive: int) -> int:
    """Uniform integer in ``[lo, hi_exclusive)`` drawn from *rand*."""
    return int(rand() * (hi_exclusive - lo)) + lo
