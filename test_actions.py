"""test_actions.py — Player action entry points.

Covers:
1. Buildings: scaled costs, all-or-nothing payment
2. Equipment: equip / swap / unequip / repair
3. Selling resources and equipped gear
4. Potions drunk in town
5. Farming patches
6. Prestige: founding a new settlement and spending legacy points
7. Starting an activity ends any running expedition or dungeon

Run:  python test_actions.py
"""
from __future__ import annotations
import sys, traceback
from pathlib import Path

from core.tuning import load as _load_tuning
_load_tuning()

from core.constants import ACT_DUNGEON, ACT_GATHER, ACT_IDLE, POTION_REGEN, TAB_PRESTIGE
from core.data import load_catalog
from components.player import create_default_state
from logic.actions import (
    begin_expedition, building_next_cost, buy_legacy_upgrade, drink_potion,
    enter_dungeon, equip_item, found_new_settlement, harvest_crop, plant_crop,
    repair_item, sell_equipped_item, sell_resource, set_activity_idle, start_gather,
    unequip_item, upgrade_building,
)
from logic.actions.town import can_prestige, prestige_gain

ROOT = Path(__file__).resolve().parent
CATALOG = load_catalog(ROOT / "data")


# ── Test harness ─────────────────────────────────────────────────────

_passed = 0
_failed = 0

def ok(label: str):
    global _passed
    _passed += 1
    print(f"  [PASS] {label}")

def fail(label: str, detail: str = ""):
    global _failed
    _failed += 1
    msg = f"  [FAIL] {label}"
    if detail:
        msg += f": {detail}"
    print(msg)

def check(cond: bool, label: str, detail: str = ""):
    if cond:
        ok(label)
    else:
        fail(label, detail)
        raise AssertionError(f"{label}: {detail}" if detail else label)


def _fresh(seed: int = 1):
    return create_default_state(CATALOG, now=0.0, seed=seed)


# ═══════════════════════════════════════════════════════════════════
#  Buildings
# ═══════════════════════════════════════════════════════════════════

def test_upgrade_building():
    print("\n=== Town: upgrades ===")
    state = _fresh()
    check(building_next_cost(state, CATALOG, "workshop") == {"wood": 15, "dullstoneOre": 5},
          "level 1 costs the base")
    upgrade_building(state, CATALOG, "workshop")
    check(state.buildings["workshop"] == 1, "built")
    check(state.log.last() == "Upgraded Workshop to level 1.", "upgrade logged")
    check(building_next_cost(state, CATALOG, "workshop") == {"wood": 24, "dullstoneOre": 8},
          "level 2 cost scaled by 1.6")

    before = dict(state.resources)
    upgrade_building(state, CATALOG, "workshop")
    check(state.buildings["workshop"] == 1, "cannot afford level 2")
    check(state.resources == before, "nothing spent on a failed upgrade")

    upgrade_building(state, CATALOG, "moonBase")
    check("moonBase" not in state.buildings, "unknown buildings ignored")


# ═══════════════════════════════════════════════════════════════════
#  Equipment
# ═══════════════════════════════════════════════════════════════════

def test_equip_swap_unequip():
    print("\n=== Inventory: equipment ===")
    state = _fresh()
    equip_item(state, CATALOG, "dullflickDagger")
    check(state.equipment["weapon"] is None, "cannot equip what you do not own")

    state.resources["dullflickDagger"] = 1.0
    state.resources["dullflickSword"] = 1.0
    equip_item(state, CATALOG, "dullflickDagger")
    weapon = state.equipment["weapon"]
    check(weapon is not None and weapon.item_id == "dullflickDagger", "dagger equipped")
    check(weapon.durability == 2000, "equipped at full durability")
    check(state.resources["dullflickDagger"] == 0, "taken from storage")

    equip_item(state, CATALOG, "dullflickSword")
    check(state.equipment["weapon"].item_id == "dullflickSword", "sword swapped in")
    check(state.resources["dullflickDagger"] == 1, "dagger returned to storage")

    unequip_item(state, CATALOG, "weapon")
    check(state.equipment["weapon"] is None, "slot emptied")
    check(state.resources["dullflickSword"] == 1, "sword returned to storage")


def test_equipment_respects_storage_cap():
    print("\n=== Inventory: full storage ===")
    state = _fresh()
    cap = 200.0
    state.resources["dullflickDagger"] = 1.0
    state.resources["dullflickSword"] = 1.0
    equip_item(state, CATALOG, "dullflickDagger")

    state.resources["dullflickDagger"] = cap
    unequip_item(state, CATALOG, "weapon")
    check(state.resources["dullflickDagger"] == cap, "stack stays at the cap",
          f"dagger={state.resources['dullflickDagger']}")
    check(state.equipment["weapon"] is not None, "dagger stays equipped")
    dagger = CATALOG.display_name("dullflickDagger")
    check(state.log.last() == f"No room to store {dagger}.", "refusal logged",
          f"last={state.log.last()!r}")

    equip_item(state, CATALOG, "dullflickSword")
    check(state.equipment["weapon"].item_id == "dullflickDagger", "swap refused while full")
    check(state.resources["dullflickSword"] == 1, "sword left in storage")
    check(state.resources["dullflickDagger"] <= cap, "never above the cap")

    state.resources["dullflickDagger"] = cap - 1
    unequip_item(state, CATALOG, "weapon")
    check(state.resources["dullflickDagger"] == cap, "last free unit used")
    check(state.equipment["weapon"] is None, "unequipped once there is room")


def test_repair():
    print("\n=== Inventory: repair ===")
    state = _fresh()
    state.resources["dullflickDagger"] = 1.0
    equip_item(state, CATALOG, "dullflickDagger")
    state.equipment["weapon"].durability = 10.0
    state.resources["dullflickBar"] = 1.0

    repair_item(state, CATALOG, "weapon")
    check(state.equipment["weapon"].durability == 10.0, "no forge, no repair")

    state.buildings["forge"] = 1
    repair_item(state, CATALOG, "weapon")
    check(state.equipment["weapon"].durability == 2000.0, "restored to full")
    check(state.resources["dullflickBar"] == 0, "one bar spent")
    check(state.skills["smithing"] == 15, "quarter of the smithing XP")

    state.resources["dullflickBar"] = 1.0
    repair_item(state, CATALOG, "weapon")
    check(state.resources["dullflickBar"] == 1, "full items are not repaired")


# ═══════════════════════════════════════════════════════════════════
#  Selling
# ═══════════════════════════════════════════════════════════════════

def test_sell_resource():
    print("\n=== Inventory: selling ===")
    state = _fresh()
    sell_resource(state, CATALOG, "dullstoneOre", 5)
    check(state.resources["dullstoneOre"] == 3, "ore sold")
    check(abs(state.resources["gold"] - 0.5) < 1e-9, "0.1 gold each")
    check(state.log.last() == "Sold 5 Dullstone Ore for 0.5 gold.", "sale logged",
          f"last={state.log.last()!r}")

    sell_resource(state, CATALOG, "dullstoneOre", 10)
    check(state.resources["dullstoneOre"] == 3, "cannot sell more than owned")
    sell_resource(state, CATALOG, "wood", 1)
    check(state.resources["wood"] == 20, "unsellable resources are kept")


def test_sell_equipped():
    print("\n=== Inventory: selling equipped gear ===")
    state = _fresh()
    state.resources["dullflickDagger"] = 1.0
    equip_item(state, CATALOG, "dullflickDagger")
    state.equipment["weapon"].durability = 100.0
    sell_equipped_item(state, CATALOG, "weapon")
    check(state.equipment["weapon"] is not None, "worn-out gear is not bought")
    check(state.resources["gold"] == 0, "no gold")

    state.equipment["weapon"].durability = 2000.0
    sell_equipped_item(state, CATALOG, "weapon")
    check(state.equipment["weapon"] is None, "sold off the body")
    check(abs(state.resources["gold"] - 0.5) < 1e-9, "small tier-1 price")


# ═══════════════════════════════════════════════════════════════════
#  Potions
# ═══════════════════════════════════════════════════════════════════

def test_drink_potion_in_town():
    print("\n=== Inventory: potions in town ===")
    state = _fresh()
    state.resources["regenTonic"] = 2.0
    drink_potion(state, CATALOG, "regenTonic")
    active = state.potion.active
    check(active is not None and active.kind == POTION_REGEN, "regen buff active")
    check(active.ends_at == 30_000, "lasts 30 s of sim time")
    check(state.resources["regenTonic"] == 1, "one drunk")

    drink_potion(state, CATALOG, "regenTonic")
    check(state.resources["regenTonic"] == 1, "regen cooldown blocks a second")
    drink_potion(state, CATALOG, "healingPotion")
    check(state.resources["healingPotion"] == 0, "cannot drink what you do not have")


# ═══════════════════════════════════════════════════════════════════
#  Farming
# ═══════════════════════════════════════════════════════════════════

def test_farming_patches():
    print("\n=== Town: farming ===")
    state = _fresh()
    check(len(state.farming) == 3, "three patches")
    plant_crop(state, CATALOG, "moonsage", "patch1")
    check(state.farming[0].crop_id is None, "level-20 crop refused")
    plant_crop(state, CATALOG, "sunleaf", "patch1")
    check(state.farming[0].crop_id == "sunleaf", "sunleaf planted")
    check(state.log.last() == "Planted Sunleaf.", "planting logged")
    plant_crop(state, CATALOG, "sunleaf", "patch1")
    check(state.log.last() == "Planted Sunleaf.", "occupied patch refused")

    harvest_crop(state, CATALOG, "patch1")
    check(state.farming[0].crop_id == "sunleaf", "unripe crops stay")
    state.meta.sim_time_ms += 1800 * 1000
    harvest_crop(state, CATALOG, "patch1")
    got = state.resources["sunleaf"]
    check(3 <= got <= 5, "yield within the crop range", f"got={got}")
    check(state.log.last() == f"Harvested {int(got)} Sunleaf.", "harvest logged")


# ═══════════════════════════════════════════════════════════════════
#  Prestige
# ═══════════════════════════════════════════════════════════════════

def test_found_new_settlement():
    print("\n=== Town: prestige ===")
    state = _fresh()
    check(not can_prestige(state), "locked without a town hall and a boss")
    check(not found_new_settlement(state, CATALOG), "refused")

    state.buildings["townHall"] = 1
    state.stats.bosses_defeated = 1
    state.resources["gold"] = 150.0
    state.legacy.points = 2
    state.meta.last_tick_at = 1_700_000_000_000.0
    state.meta.sim_time_ms = 86_400_000.0
    check(can_prestige(state), "unlocked")
    gain = prestige_gain(state)
    check(gain == 3, "2 per boss + hall level + total levels / 25", f"gain={gain}")

    check(found_new_settlement(state, CATALOG), "settlement founded")
    check(state.legacy.points == 5, "points carried over and gained")
    check(state.buildings["townHall"] == 0 and state.stats.bosses_defeated == 0, "progress reset")
    check(state.resources["gold"] == 0 and state.resources["wood"] == 20, "stock reset to the start")
    check(state.tab == TAB_PRESTIGE, "shown the prestige tab")
    check(state.meta.created_at == 1_700_000_000_000.0, "stamped with the wall clock",
          f"created_at={state.meta.created_at}")
    check(state.meta.last_tick_at == 1_700_000_000_000.0, "no offline gap opened")
    check(state.meta.sim_time_ms == 86_400_000.0, "simulated clock carries on")
    check(state.log.last() == "Founded a new settlement. Gained 3 legacy points.",
          "founding logged", f"last={state.log.last()!r}")


def test_legacy_upgrades():
    print("\n=== Town: legacy upgrades ===")
    state = _fresh()
    check(not buy_legacy_upgrade(state, CATALOG, "xp"), "no points, no upgrade")
    state.legacy.points = 2
    check(buy_legacy_upgrade(state, CATALOG, "xp"), "XP upgrade bought")
    check(abs(state.legacy.global_xp_mult - 1.05) < 1e-9, "+5% XP")
    check(buy_legacy_upgrade(state, CATALOG, "yield"), "yield upgrade bought")
    check(abs(state.legacy.global_yield_mult - 1.05) < 1e-9, "+5% yield")
    check(state.legacy.points == 0, "both points spent")

    state.legacy.points = 1
    check(not buy_legacy_upgrade(state, CATALOG, "luck"), "unknown upgrade refused")
    check(state.legacy.points == 1, "nothing spent on an unknown upgrade")


# ═══════════════════════════════════════════════════════════════════
#  Activity switching
# ═══════════════════════════════════════════════════════════════════

def test_activity_switch_ends_runs():
    print("\n=== Activity: switching ends runs ===")
    state = _fresh()
    begin_expedition(state, CATALOG, 1)
    start_gather(state, CATALOG, "woodcutting")
    check(state.expedition is None, "expedition ended")
    check(state.activity.type == ACT_GATHER, "now gathering")
    check("Expedition ended." in state.log.messages(), "end logged")

    begin_expedition(state, CATALOG, 1)
    enter_dungeon(state, CATALOG)
    check(state.expedition is None and state.dungeon is not None, "expedition swapped for dungeon")
    check(state.activity.type == ACT_DUNGEON, "in the dungeon")

    set_activity_idle(state, CATALOG)
    check(state.dungeon is None and state.activity.type == ACT_IDLE, "idle")
    check(state.log.last() == "Now idle.", "idle logged")


if __name__ == "__main__":
    sections = [
        ("Upgrades", test_upgrade_building),
        ("Equipment", test_equip_swap_unequip),
        ("Full storage", test_equipment_respects_storage_cap),
        ("Repair", test_repair),
        ("Selling", test_sell_resource),
        ("Selling equipped", test_sell_equipped),
        ("Potions", test_drink_potion_in_town),
        ("Farming", test_farming_patches),
        ("Prestige", test_found_new_settlement),
        ("Legacy", test_legacy_upgrades),
        ("Activity switching", test_activity_switch_ends_runs),
    ]
    for name, fn in sections:
        try:
            fn()
        except Exception:
            _failed += 1
            print(f"\n  [CRASH] {name}: unhandled exception:")
            traceback.print_exc()

    total = _passed + _failed
    print(f"\n{'=' * 60}")
    print(f"  Actions: {_passed} passed, {_failed} failed  (total {total})")
    print(f"{'=' * 60}")
    sys.exit(1 if _failed else 0)
