"""test_modifiers_ledger.py — Building bonuses, bounded resource writes, XP and wear.

Covers:
1. compute_modifiers reflects building levels and legacy multipliers
2. Player combat numbers derive from level and gear
3. Resource writes never leave [0, storage cap]
4. Level-up logging, durability loss and injuries
5. Log sizes come from [log] tuning

Run:  python test_modifiers_ledger.py
"""
from __future__ import annotations
import sys, tempfile, traceback
from pathlib import Path

from core.tuning import load as _load_tuning
_load_tuning()

from core.data import load_catalog
from core.progression import xp_for_level
from components.dev_log import feed_log, player_log
from components.player import create_default_state
from components.rpg import EquippedItem
from components.simulation import ExpeditionRun
from components.item_registry import tool_perks, tool_perks_for_tier, weapon_tier
from simulation.modifiers import compute_modifiers, compute_player_combat
from simulation.ledger import (
    add_resource, add_resource_capped, add_xp, apply_durability_loss,
    apply_injury_if_any, efficiency, is_injured, storage_cap, take_resource,
)

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
#  Modifiers
# ═══════════════════════════════════════════════════════════════════

def test_default_modifiers():
    print("\n=== Modifiers: fresh town ===")
    mods = compute_modifiers(_fresh())
    check(mods.gather_yield_mult == 1.0, "no yield bonus without buildings")
    check(mods.global_xp_mult == 1.0, "no XP bonus without buildings")
    check(mods.storage_cap == 200, "base storage cap is 200", f"cap={mods.storage_cap}")
    check(mods.speed_for("woodcutting") == 1.0, "gathering skills have no craft speed")


def test_building_modifiers():
    print("\n=== Modifiers: buildings and legacy ===")
    state = _fresh()
    state.buildings["workshop"] = 2
    state.buildings["campfire"] = 3
    state.buildings["storehouse"] = 1
    state.buildings["scoutLodge"] = 20
    state.legacy.global_yield_mult = 1.05
    mods = compute_modifiers(state)
    check(abs(mods.gather_yield_mult - 1.05 * 1.14) < 1e-9, "workshop and legacy multiply yield",
          f"got {mods.gather_yield_mult}")
    check(abs(mods.speed_for("cooking") - 1.3) < 1e-9, "campfire speeds cooking")
    check(mods.storage_cap == 450, "storehouse raises the cap", f"cap={mods.storage_cap}")
    check(abs(mods.injury_chance_mult - 0.65) < 1e-9, "injury reduction caps at 35%")


def test_player_combat_numbers():
    print("\n=== Modifiers: player combat ===")
    state = _fresh()
    pc = compute_player_combat(state, CATALOG)
    check(pc.combat_level == 1, "level 1 with no XP")
    check(pc.max_hp == 38, "30 + 8 per level", f"max_hp={pc.max_hp}")
    check(abs(pc.power - 1.18) < 1e-9, "power from level only", f"power={pc.power}")

    state.equipment["weapon"] = EquippedItem(item_id="dullflickDagger", durability=2000.0)
    check(compute_player_combat(state, CATALOG).power > pc.power, "a weapon raises power")
    state.equipment["weapon"].durability = 0.0
    check(weapon_tier(state, CATALOG) == 0.5, "a broken weapon counts half its tier")

    state.skills["combat"] = float(xp_for_level(99))
    strong = compute_player_combat(state, CATALOG)
    check(strong.combat_level == 99, "level follows combat XP")
    check(0.45 <= strong.attack_interval <= 1.2, "attack interval stays clamped")


def test_tool_perks():
    print("\n=== Modifiers: tool perks ===")
    check(tool_perks_for_tier(1).gather_speed_bonus == 0.0, "tier 1 tools have no perks")
    check(tool_perks_for_tier(5).gather_speed_bonus == 0.1, "tier 5 tools gather faster")
    check(tool_perks_for_tier(10).double_resource_chance == 0.1, "tier 10 tools double up")

    state = _fresh()
    state.equipment["axe"] = EquippedItem(item_id="darkironAxe", durability=0.0)
    check(tool_perks(state, CATALOG, "axe").gather_speed_bonus == 0.05,
          "a broken tool keeps half its perks")


# ═══════════════════════════════════════════════════════════════════
#  Ledger
# ═══════════════════════════════════════════════════════════════════

def test_add_resource_respects_cap():
    print("\n=== Ledger: storage cap ===")
    state = _fresh()
    state.resources["wood"] = 195.0
    added = add_resource(state, "wood", 10)
    check(added == 5.0, "only the room under the cap is credited", f"added={added}")
    check(state.resources["wood"] == storage_cap(state), "wood sits exactly at the cap")
    check(add_resource(state, "wood", 1) == 0.0, "nothing fits once full")
    check(add_resource(state, "wood", -3) == 0.0, "negative amounts are ignored")


def test_add_resource_capped_clamps_both_ends():
    print("\n=== Ledger: capped writes ===")
    state = _fresh()
    add_resource_capped(state, "gold", 500)
    check(state.resources["gold"] == 200, "clamped to the cap")
    add_resource_capped(state, "gold", -1000)
    check(state.resources["gold"] == 0, "clamped at zero")


def test_take_resource():
    print("\n=== Ledger: take_resource ===")
    state = _fresh()
    check(take_resource(state, "meat", 2), "takes what is there")
    check(state.resources["meat"] == 3, "meat debited")
    check(not take_resource(state, "meat", 4), "refuses an overdraft")
    check(state.resources["meat"] == 3, "nothing debited on refusal")


def test_level_up_logged():
    print("\n=== Ledger: level-up log ===")
    state = _fresh()
    add_xp(state, CATALOG, "woodcutting", 100)
    check(state.log.last() is None, "no log below the threshold")
    add_xp(state, CATALOG, "woodcutting", 200)
    check(state.log.last() == "Woodcutting reached level 2!", "level-up is logged",
          f"last={state.log.last()!r}")
    add_xp(state, CATALOG, "woodcutting", 0)
    check(state.skills["woodcutting"] == 300, "zero XP is a no-op")


def test_durability_loss_breaks_item():
    print("\n=== Ledger: durability ===")
    state = _fresh()
    state.equipment["weapon"] = EquippedItem(item_id="dullflickDagger", durability=3.0)
    apply_durability_loss(state, CATALOG, "weapon", 1.0)
    check(state.equipment["weapon"].durability == 2.0, "wear subtracts")
    apply_durability_loss(state, CATALOG, "weapon", 10.0)
    check(state.equipment["weapon"].durability == 0.0, "floors at zero")
    check(state.log.last() == "Broken Dullflick Dagger.", "breaking is logged once",
          f"last={state.log.last()!r}")
    count = len(state.log)
    apply_durability_loss(state, CATALOG, "weapon", 1.0)
    check(len(state.log) == count, "an already broken item does not log again")
    apply_durability_loss(state, CATALOG, "head", 5.0)
    check(state.equipment["head"] is None, "empty slots are untouched")


def test_injury():
    print("\n=== Ledger: injury ===")
    state = _fresh()
    check(not is_injured(state) and efficiency(state) == 1.0, "healthy at start")
    check(apply_injury_if_any(state, 1.0), "certain injury lands")
    check(is_injured(state), "injured after the roll")
    check(abs(efficiency(state) - 0.6) < 1e-9, "efficiency reduced while injured")
    check(state.injured_until == state.meta.sim_time_ms + 60_000, "lasts 60 simulated seconds")


def test_log_sizes_follow_tuning():
    print("\n=== Ledger: log sizes ===")
    check(player_log().max_entries == 80, "player log keeps 80 entries")
    check(ExpeditionRun().feed.max_entries == 40, "run feeds keep 40 entries")

    with tempfile.TemporaryDirectory() as tmp:
        path = Path(tmp) / "tuning.toml"
        path.write_text("[log]\nmax_entries = 5\nfeed_entries = 3\n", encoding="utf-8")
        try:
            _load_tuning(path)
            feed = feed_log()
            for i in range(6):
                feed.record(f"line {i}")
            check(feed.max_entries == 3, "feed size read from [log] feed_entries")
            check(feed.messages() == ["line 3", "line 4", "line 5"], "oldest lines dropped")
            check(_fresh().log.max_entries == 5, "player log read from [log] max_entries")
        finally:
            _load_tuning()


if __name__ == "__main__":
    sections = [
        ("Default modifiers", test_default_modifiers),
        ("Building modifiers", test_building_modifiers),
        ("Player combat", test_player_combat_numbers),
        ("Tool perks", test_tool_perks),
        ("Storage cap", test_add_resource_respects_cap),
        ("Capped writes", test_add_resource_capped_clamps_both_ends),
        ("take_resource", test_take_resource),
        ("Level-up log", test_level_up_logged),
        ("Durability", test_durability_loss_breaks_item),
        ("Injury", test_injury),
        ("Log sizes", test_log_sizes_follow_tuning),
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
    print(f"  Modifiers / Ledger: {_passed} passed, {_failed} failed  (total {total})")
    print(f"{'=' * 60}")
    sys.exit(1 if _failed else 0)
