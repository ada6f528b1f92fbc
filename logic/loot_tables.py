"""Loot table system — seeded weighted tables for scavenging zones.

Entries reference real resource ids from the content catalog.  Rolls
draw from a caller-supplied RNG so every pick is replayable.

Usage:
    # At startup (core.data.build_catalog does this):
    mgr = LootTableManager.from_dict(raw["tables"])

    # At runtime:
    zone = catalog.loot.get("ashFields")
    reagent = zone.pick(state.rng.random)      # → "mossclump"
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Callable


@dataclass
class _Entry:
    item: str
    weight: float = 1.0


@dataclass
class ScavengeTable:
    """One scavenging zone: level gate, XP per unit and weighted entries."""
    id: str = ""
    name: str = ""
    description: str = ""
    level: int = 1
    xp: float = 0.0
    rolls: int = 1
    entries: list[_Entry] = field(default_factory=list)

    def items(self) -> list[str]:
        return [e.item for e in self.entries]

    def pick(self, rand: Callable[[], float]) -> str | None:
        """Weighted choice of one entry's item id, or None when empty."""
        if not self.entries:
            return None
        total = sum(e.weight for e in self.entries)
        r = rand() * total
        cur = 0.0
        for e in self.entries:
            cur += e.weight
            if r < cur:
                return e.item
        return self.entries[-1].item


class LootTableManager:
    """Catalog member — stores every scavenging table, in file order."""

    def __init__(self):
        self.tables: dict[str, ScavengeTable] = {}

    # ── public API ──────────────────────────────────────────────────

    def get(self, table_id: str) -> ScavengeTable | None:
        return self.tables.get(table_id)

    def __len__(self) -> int:
        return len(self.tables)

    # ── loading ─────────────────────────────────────────────────────

    @classmethod
    def from_dict(cls, data: dict) -> "LootTableManager":
        mgr = cls()
        for tid, tdata in data.items():
            entries = [
                _Entry(item=e["item"], weight=float(e.get("weight", 1)))
                for e in tdata.get("entries", [])
            ]
            mgr.tables[tid] = ScavengeTable(
                id=tid,
                name=tdata.get("name", tid),
                description=tdata.get("description", ""),
                level=int(tdata.get("level", 1)),
                xp=float(tdata.get("xp", 0)),
                rolls=int(tdata.get("rolls", 1)),
                entries=entries,
            )
        return mgr
