"""logic/actions/inventory.py — Equipment, repairs, selling and potions."""

from __future__ import annotations
from typing import TYPE_CHECKING

from core.progression import pay_cost
from components.item_registry import max_durability
from components.rpg import EquippedItem
from logic.actions.combat import active_encounter
from simulation.economy import sell_price, sell_price_equipped
from simulation.ledger import (
    add_resource, add_resource_capped, add_xp, push_log, resource_room,
)
from simulation.potions import consume_potion

if TYPE_CHECKING:
    from components.player import PlayerState
    from core.data import Catalog

REPAIR_XP_SHARE = 0.25


def _fmt_gold(amount: float) -> str:
    return f"{amount:g}"


# ── Equipment ────────────────────────────────────────────────────────

def equip_item(state: "PlayerState", catalog: "Catalog", item_id: str) -> None:
    item = catalog.items.get(item_id)
    if item is None or state.resources.get(item_id, 0) < 1:
        return
    current = state.equipment.get(item.slot)
    if current is not None and current.item_id == item_id:
        return
    if current is not None and resource_room(state, current.item_id) < 1:
        push_log(state, f"No room to store {catalog.display_name(current.item_id)}.")
        return

    state.resources[item_id] -= 1
    if current is not None:
        add_resource(state, current.item_id, 1)
    state.equipment[item.slot] = EquippedItem(item_id=item_id,
                                              durability=float(item.durability))
    push_log(state, f"Equipped {item.name}.")


def unequip_item(state: "PlayerState", catalog: "Catalog", slot: str) -> None:
    current = state.equipment.get(slot)
    if current is None:
        return
    name = catalog.display_name(current.item_id)
    if resource_room(state, current.item_id) < 1:
        push_log(state, f"No room to store {name}.")
        return
    add_resource(state, current.item_id, 1)
    state.equipment[slot] = None
    push_log(state, f"Unequipped {name}.")


def repair_item(state: "PlayerState", catalog: "Catalog", slot: str) -> None:
    current = state.equipment.get(slot)
    if current is None:
        return
    item = catalog.items.get(current.item_id)
    if item is None or state.buildings.get("forge", 0) <= 0:
        return
    full = max_durability(catalog, item.id)
    if current.durability >= full:
        return
    if not pay_cost(state.resources, {item.bar_id: 1}):
        return
    current.durability = float(full)
    add_xp(state, catalog, "smithing", item.xp * REPAIR_XP_SHARE)
    push_log(state, f"Repaired {item.name}.")


# ── Selling ──────────────────────────────────────────────────────────

def sell_resource(state: "PlayerState", catalog: "Catalog", resource_id: str,
                  amount: int = 1) -> None:
    if amount <= 0 or state.resources.get(resource_id, 0) < amount:
        return
    price = sell_price(catalog, resource_id)
    if price <= 0:
        return
    gold = price * amount
    state.resources[resource_id] -= amount
    add_resource_capped(state, "gold", gold)
    push_log(state, f"Sold {amount} {catalog.display_name(resource_id)} "
                    f"for {_fmt_gold(gold)} gold.")


def sell_equipped_item(state: "PlayerState", catalog: "Catalog", slot: str) -> None:
    current = state.equipment.get(slot)
    if current is None:
        return
    price = sell_price_equipped(catalog, current.item_id, current.durability)
    if price <= 0:
        return
    add_resource_capped(state, "gold", price)
    state.equipment[slot] = None
    push_log(state, f"Sold equipped {catalog.display_name(current.item_id)} "
                    f"for {_fmt_gold(price)} gold.")


# ── Potions ──────────────────────────────────────────────────────────

def drink_potion(state: "PlayerState", catalog: "Catalog", potion_id: str) -> None:
    """Drink in town (buff timer only) or inside whichever fight is active."""
    potion = catalog.potions.get(potion_id)
    if potion is None:
        return
    consume_potion(state, potion, active_encounter(state))
