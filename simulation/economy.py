"""simulation/economy.py — Sell prices for ores, bars and smithed items.

Prices come from the catalog's ``[prices]`` table, indexed by metal
tier.  Items are priced by size class (small / medium / large).
Anything else (wood, food, reagents) has no sell value.
"""

from __future__ import annotations
from typing import TYPE_CHECKING

from components.item_registry import max_durability

if TYPE_CHECKING:
    from core.data import Catalog


def _tier_price(table: tuple[float, ...], tier: int) -> float:
    if 1 <= tier <= len(table):
        return float(table[tier - 1])
    return 0.0


def sell_price(catalog: "Catalog", resource_id: str) -> float:
    """Gold per unit of *resource_id* (0 when it cannot be sold)."""
    prices = catalog.prices
    node = catalog.mining_nodes.get(resource_id)
    if node is not None:
        return _tier_price(prices.ore, node.tier)
    bar = catalog.bars.get(resource_id)
    if bar is not None:
        return _tier_price(prices.bar, bar.tier)
    item = catalog.items.get(resource_id)
    if item is not None:
        return _tier_price(prices.by_size.get(item.size, ()), item.tier)
    return 0.0


def sell_price_equipped(catalog: "Catalog", item_id: str, durability: float) -> float:
    """Worn gear below the worn-out share of its durability sells for 0."""
    base = sell_price(catalog, item_id)
    max_dur = max_durability(catalog, item_id)
    if max_dur <= 0:
        return base
    if durability / max_dur < catalog.prices.worn_out_fraction:
        return 0.0
    return base
