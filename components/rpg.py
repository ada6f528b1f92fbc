"""components.rpg — Equipment and farm plots."""

from __future__ import annotations
from dataclasses import dataclass


@dataclass
class EquippedItem:
    """One filled equipment slot.

    ``durability`` stays within ``[0, max_durability(item_id)]``; at 0
    the item is broken (tools keep working at half their perks, weapons
    and armor count half their tier).
    """
    item_id: str = ""
    durability: float = 0.0


@dataclass
class FarmPatch:
    id: str = ""
    crop_id: str | None = None
    planted_at: float = 0.0     # sim ms
    ready_at: float = 0.0       # sim ms
