"""test_gather_craft.py — Continuous gathering and cycle-paid crafting.

Covers:
1. Woodcutting / mining / fishing yield and XP per tick
2. Scavenging rolls only on completed intervals
3. Storage-full stops the activity, crediting only what fit
4. Craft inputs are paid per cycle, never partially; running short stops the craft
5. Craft output into a full store is logged and stops the craft
6. Fish cooking burn chance

Run:  python test_gather_craft.py
"""
from __future__ import annotations
import sys, traceback
from pathlib import Path

from core.tuning import load as _load_tuning
_load_tuning()

from core.constants import ACT_CRAFT, ACT_GATHER, ACT_IDLE
from core.data import load_catalog
from components.player import create_default_state
from simulation.craft import burn_chance_pct
from simulation.ledger import storage_cap
from simulation.world_sim import tick_simulation
from logic.actions import select_mining_target, start_craft, start_gather, upgrade_building

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


def _tick(state, seconds: int, dt: float = 1.0):
    for _ in range(seconds):
        tick_simulation(state, CATALOG, dt)


# ═══════════════════════════════════════════════════════════════════
#  Gathering
# ═══════════════════════════════════════════════════════════════════

def test_woodcutting_with_workshop():
    print("\n=== Gather: woodcutting with a level-1 workshop ===")
    state = _fresh()
    upgrade_building(state, CATALOG, "workshop")
    check(state.buildings["workshop"] == 1, "workshop built")
    check(state.resources["wood"] == 5, "cost paid", f"wood={state.resources['wood']}")

    start_gather(state, CATALOG, "woodcutting")
    check(state.activity.type == ACT_GATHER, "gathering")
    _tick(state, 10)
    wood = state.resources["wood"]
    check(abs(wood - 15.7) < 1e-6, "1.07 wood per second for 10 s", f"wood={wood}")
    xp = state.skills["woodcutting"]
    check(abs(xp - 30.0) < 1e-6, "3 XP per second", f"xp={xp}")


def test_mining_node():
    print("\n=== Gather: mining ===")
    state = _fresh()
    start_gather(state, CATALOG, "mining", "dullstoneOre")
    check(state.activity.gather_resource == "dullstoneOre", "target node selected")
    _tick(state, 1)
    check(abs(state.resources["dullstoneOre"] - 8.8) < 1e-9, "0.8 ore per second",
          f"ore={state.resources['dullstoneOre']}")
    check(abs(state.skills["mining"] - 4.0) < 1e-9, "node XP scales with yield",
          f"xp={state.skills['mining']}")


def test_mining_level_gate():
    print("\n=== Gather: level gate ===")
    state = _fresh()
    start_gather(state, CATALOG, "mining", "grayveinOre")
    check(state.activity.type == ACT_IDLE, "a level-10 node refuses a level-1 miner")
    start_gather(state, CATALOG, "alchemy")
    check(state.activity.type == ACT_IDLE, "a skill with nothing to gather is refused")
    start_gather(state, CATALOG, "nonsense")
    check(state.activity.type == ACT_IDLE, "unknown skills are refused")


def test_select_mining_target():
    print("\n=== Gather: switching mining target ===")
    state = _fresh()
    select_mining_target(state, CATALOG, "flickerOre")
    check(state.activity.gather_resource == "flickerOre", "target kept while idle")
    check(state.log.last() != "Mining: Flicker Ore.", "no log while not mining")

    start_gather(state, CATALOG, "mining", "dullstoneOre")
    select_mining_target(state, CATALOG, "flickerOre")
    check(state.activity.gather_resource == "flickerOre", "switched mid-activity")
    check(state.log.last() == "Mining: Flicker Ore.", "switch logged",
          f"last={state.log.last()!r}")

    select_mining_target(state, CATALOG, "grayveinOre")
    check(state.activity.gather_resource == "flickerOre", "level-10 node refused")
    select_mining_target(state, CATALOG, "noSuchOre")
    check(state.activity.gather_resource == "flickerOre", "unknown node refused")

    _tick(state, 1)
    check(state.resources["flickerOre"] > 0, "new node yields ore")


def test_fishing_defaults_to_first_spot():
    print("\n=== Gather: fishing ===")
    state = _fresh()
    start_gather(state, CATALOG, "fishing")
    check(state.activity.gather_resource == "pebblefin", "first fishing spot chosen")
    _tick(state, 2)
    check(abs(state.resources["pebblefin"] - 1.0) < 1e-9, "0.5 fish per second")
    check(abs(state.skills["fishing"] - 8.0) < 1e-9, "fish XP scales with yield")


def test_scavenging_interval():
    print("\n=== Gather: scavenging rolls per completed interval ===")
    state = _fresh()
    start_gather(state, CATALOG, "scavenging", "ashFields")
    zone = ("ashpowder", "mossclump", "rustshard")
    _tick(state, 1)
    check(sum(state.resources[r] for r in zone) == 0, "nothing before the 2 s interval")
    _tick(state, 1)
    check(sum(state.resources[r] for r in zone) == 1, "one reagent per interval")
    check(state.skills["scavenging"] == 6, "zone XP per reagent")
    _tick(state, 4)
    check(sum(state.resources[r] for r in zone) == 3, "three intervals, three reagents")


def test_storage_full_stops():
    print("\n=== Gather: storage full ===")
    state = _fresh()
    state.buildings["workshop"] = 1
    state.resources["wood"] = 199.5
    start_gather(state, CATALOG, "woodcutting")
    _tick(state, 1)
    check(state.resources["wood"] == 200, "filled exactly to the cap")
    check(state.activity.type == ACT_IDLE, "activity stopped")
    check(state.log.last() == "Storage full for Wood. Activity stopped.", "stop logged",
          f"last={state.log.last()!r}")


# ═══════════════════════════════════════════════════════════════════
#  Crafting
# ═══════════════════════════════════════════════════════════════════

def test_craft_requires_building():
    print("\n=== Craft: building gate ===")
    state = _fresh()
    start_craft(state, CATALOG, "cookRations")
    check(state.activity.type == ACT_IDLE, "no campfire, no cooking")
    start_craft(state, CATALOG, "noSuchRecipe")
    check(state.activity.type == ACT_IDLE, "unknown recipe refused")


def test_craft_pays_per_cycle():
    print("\n=== Craft: inputs are paid whole or not at all ===")
    state = _fresh()
    state.buildings["campfire"] = 1
    state.resources["meat"] = 3.0
    start_craft(state, CATALOG, "cookRations")
    check(state.activity.type == ACT_CRAFT, "crafting")

    _tick(state, 2)
    check(state.resources["rations"] == 1, "one ration after 2 s at 1.1x speed",
          f"rations={state.resources['rations']}")
    check(state.resources["meat"] == 1, "one cycle's meat spent")
    check(state.skills["cooking"] == 7, "recipe XP on completion")
    check(not state.activity.craft.in_progress, "short one meat: no second cycle")
    check(state.activity.type == ACT_IDLE, "crafting stopped")
    check(state.log.last() == "Out of materials for Cook Rations. Crafting stopped.",
          "stop logged", f"last={state.log.last()!r}")


def test_craft_output_storage_full():
    print("\n=== Craft: output into full storage ===")
    state = _fresh()
    state.buildings["campfire"] = 1
    cap = storage_cap(state)
    state.resources["meat"] = 4.0
    state.resources["rations"] = cap
    start_craft(state, CATALOG, "cookRations")
    _tick(state, 2)
    check(state.resources["rations"] == cap, "stack held at the cap")
    check(state.resources["meat"] == 2, "only the finished cycle was paid",
          f"meat={state.resources['meat']}")
    check(state.activity.type == ACT_IDLE, "crafting stopped")
    check(state.log.last() == "Storage full for Rations. Crafting stopped.",
          "lost output logged", f"last={state.log.last()!r}")


def test_fish_cooking():
    print("\n=== Craft: cooking fish ===")
    check(burn_chance_pct(1, 1) == 35, "35% at parity")
    check(burn_chance_pct(10, 1) == 17, "2% less per level of margin")
    check(burn_chance_pct(20, 1) == 0, "never below zero")

    state = _fresh(seed=3)
    state.buildings["campfire"] = 1
    state.resources["pebblefin"] = 3.0
    start_craft(state, CATALOG, "cookPebblefin")
    _tick(state, 4)
    done = state.resources["cookedPebblefin"] + state.resources["burntPebblefin"]
    check(done == 2, "two fish finished in 4.4 s of work", f"done={done}")
    check(state.resources["pebblefin"] == 0, "the third fish was paid for its cycle")
    check(state.activity.craft.in_progress, "third cycle underway")


if __name__ == "__main__":
    sections = [
        ("Woodcutting", test_woodcutting_with_workshop),
        ("Mining", test_mining_node),
        ("Level gate", test_mining_level_gate),
        ("Mining target", test_select_mining_target),
        ("Fishing", test_fishing_defaults_to_first_spot),
        ("Scavenging", test_scavenging_interval),
        ("Storage full", test_storage_full_stops),
        ("Craft building gate", test_craft_requires_building),
        ("Craft per-cycle payment", test_craft_pays_per_cycle),
        ("Craft output full", test_craft_output_storage_full),
        ("Fish cooking", test_fish_cooking),
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
    print(f"  Gather / Craft: {_passed} passed, {_failed} failed  (total {total})")
    print(f"{'=' * 60}")
    sys.exit(1 if _failed else 0)
