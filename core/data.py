"""
core/data.py — TOML → typed content catalog

Reads every content file under ``data/`` and builds one immutable-ish
``Catalog`` of dataclasses.  The simulation never touches raw dicts:
ids are resolved here, once, and anything that points at an unknown id
raises ``CatalogError`` before the first tick runs.

You define game content in .toml files.
You define the shapes in this module.
``build_catalog`` connects them and derives the generated families
(ores, bars and gear per metal tier; raw/cooked/burnt fish; smelting,
smithing, cooking and brewing recipes).

Usage:
    catalog = load_catalog("data")           # every *.toml except tuning.toml
    catalog = build_catalog(raw_dict)        # fixture catalogs in tests
    node = catalog.mining_node("flickerOre") # KeyError on unknown ids
"""

from __future__ import annotations
try:
    import tomllib
except ModuleNotFoundError:  # Python < 3.11
    import tomli as tomllib
from dataclasses import dataclass, field
from pathlib import Path

from core.constants import (
    EQUIPMENT_SLOTS, POTION_HEAL, POTION_REGEN, POTION_ACCURACY,
)
from logic.loot_tables import LootTableManager


class CatalogError(ValueError):
    """Content data is malformed or references an unknown id."""


# ═══════════════════════════════════════════════════════════════════
#  Definitions
# ═══════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class SkillDef:
    id: str
    name: str
    base_xp_per_second: float = 0.0
    base_yield_per_second: float = 0.0
    yields: dict[str, float] = field(default_factory=dict)


@dataclass(frozen=True)
class ResourceDef:
    id: str
    name: str
    kind: str = "basic"      # basic | reagent | ore | bar | item | fish | food | potion | crop
    tier: int = 0
    food: bool = False
    heal: int = 0


@dataclass(frozen=True)
class BuildingDef:
    id: str
    name: str
    desc: str
    base_cost: dict[str, float]
    cost_scale: float


@dataclass(frozen=True)
class RecipeDef:
    id: str
    name: str
    skill: str
    duration_sec: float
    inputs: dict[str, float]
    outputs: dict[str, float]
    xp: float
    requires_building: str
    requires_level: int = 1
    special: str = ""        # "cookFish" → burn roll picks cooked/burnt output
    fish_level: int = 1
    cooked_id: str = ""
    burnt_id: str = ""


@dataclass(frozen=True)
class MiningNode:
    id: str
    name: str
    level: int
    xp: float
    tier: int


@dataclass(frozen=True)
class BarDef:
    id: str
    name: str
    level: int
    tier: int
    xp: float
    ore_cost: dict[str, float]


@dataclass(frozen=True)
class ItemDef:
    id: str
    name: str
    slot: str
    type: str
    size: str
    tier: int
    bar_cost: int
    bar_id: str
    smithing_level: int
    xp: float
    durability: int


@dataclass(frozen=True)
class FishDef:
    id: str
    name: str
    level: int
    fishing_xp: float
    cooking_level: int
    cooking_xp: float
    heal: int
    cooked_id: str
    burnt_id: str


@dataclass(frozen=True)
class PotionDef:
    id: str
    name: str
    kind: str
    amount: float
    level: int
    ingredients: dict[str, float]
    xp: float
    duration_sec: float = 0.0
    interval_sec: float = 0.0
    cooldown_sec: float = 0.0


@dataclass(frozen=True)
class CropDef:
    id: str
    name: str
    tier: int
    level: int
    grow_sec: float
    yield_min: int
    yield_max: int


@dataclass(frozen=True)
class FarmingRules:
    patches: int = 3
    xp_per_tier: float = 12.0
    level_bonus_step: int = 20
    pure_chance_divisor: float = 120.0
    pure_chance_cap: float = 0.25


@dataclass(frozen=True)
class PriceTable:
    ore: tuple[float, ...] = ()
    bar: tuple[float, ...] = ()
    by_size: dict[str, tuple[float, ...]] = field(default_factory=dict)
    worn_out_fraction: float = 0.2


# ═══════════════════════════════════════════════════════════════════
#  Catalog
# ═══════════════════════════════════════════════════════════════════

@dataclass
class Catalog:
    """Every static content table, keyed by id, in file order."""
    skills: dict[str, SkillDef] = field(default_factory=dict)
    resources: dict[str, ResourceDef] = field(default_factory=dict)
    buildings: dict[str, BuildingDef] = field(default_factory=dict)
    recipes: dict[str, RecipeDef] = field(default_factory=dict)
    mining_nodes: dict[str, MiningNode] = field(default_factory=dict)
    bars: dict[str, BarDef] = field(default_factory=dict)
    items: dict[str, ItemDef] = field(default_factory=dict)
    fish: dict[str, FishDef] = field(default_factory=dict)
    potions: dict[str, PotionDef] = field(default_factory=dict)
    crops: dict[str, CropDef] = field(default_factory=dict)
    loot: LootTableManager = field(default_factory=LootTableManager)
    farming: FarmingRules = field(default_factory=FarmingRules)
    prices: PriceTable = field(default_factory=PriceTable)
    start: dict[str, float] = field(default_factory=dict)

    # ── typed lookups (KeyError on unknown ids) ─────────────────────

    def skill(self, skill_id: str) -> SkillDef:
        return self.skills[skill_id]

    def resource(self, resource_id: str) -> ResourceDef:
        return self.resources[resource_id]

    def building(self, building_id: str) -> BuildingDef:
        return self.buildings[building_id]

    def recipe(self, recipe_id: str) -> RecipeDef:
        return self.recipes[recipe_id]

    def mining_node(self, node_id: str) -> MiningNode:
        return self.mining_nodes[node_id]

    def item(self, item_id: str) -> ItemDef:
        return self.items[item_id]

    def potion(self, potion_id: str) -> PotionDef:
        return self.potions[potion_id]

    def crop(self, crop_id: str) -> CropDef:
        return self.crops[crop_id]

    # ── helpers ─────────────────────────────────────────────────────

    def display_name(self, resource_id: str) -> str:
        res = self.resources.get(resource_id)
        return res.name if res else resource_id

    def foods(self) -> list[ResourceDef]:
        """Edible resources that heal in combat, best heal first."""
        healers = [r for r in self.resources.values() if r.heal > 0]
        return sorted(healers, key=lambda r: r.heal, reverse=True)


# ═══════════════════════════════════════════════════════════════════
#  Loading
# ═══════════════════════════════════════════════════════════════════

def load_catalog(data_dir: str | Path = "data") -> Catalog:
    """Merge every ``*.toml`` in *data_dir* (except tuning) and build."""
    data_dir = Path(data_dir)
    if not data_dir.is_dir():
        raise CatalogError(f"content directory not found: {data_dir}")

    raw: dict = {}
    for path in sorted(data_dir.glob("*.toml")):
        if path.name == "tuning.toml":
            continue
        with open(path, "rb") as f:
            chunk = tomllib.load(f)
        for key, value in chunk.items():
            if key in raw:
                raise CatalogError(f"{path.name}: top-level table [{key}] defined twice")
            raw[key] = value

    catalog = build_catalog(raw)
    print(f"[DATA] Loaded {len(catalog.resources)} resources, "
          f"{len(catalog.recipes)} recipes, {len(catalog.items)} items, "
          f"{len(catalog.loot)} scavenging zones from {data_dir}")
    return catalog


def build_catalog(raw: dict) -> Catalog:
    """Build and validate a Catalog from an already-parsed dict."""
    try:
        return _build(raw)
    except KeyError as exc:
        raise CatalogError(f"missing required key {exc}") from exc


def _build(raw: dict) -> Catalog:
    cat = Catalog()

    for sid, s in raw.get("skills", {}).items():
        cat.skills[sid] = SkillDef(
            id=sid,
            name=s.get("name", sid),
            base_xp_per_second=float(s.get("base_xp_per_second", 0)),
            base_yield_per_second=float(s.get("base_yield_per_second", 0)),
            yields={k: float(v) for k, v in s.get("yields", {}).items()},
        )

    for rid, r in raw.get("resources", {}).items():
        _add_resource(cat, ResourceDef(
            id=rid,
            name=r.get("name", rid),
            kind=r.get("kind", "basic"),
            food=bool(r.get("food", False)),
            heal=int(r.get("heal", 0)),
        ))

    _build_tiers(cat, raw)
    _build_fish(cat, raw)
    _build_crops(cat, raw)
    _build_potions(cat, raw)

    for bid, b in raw.get("buildings", {}).items():
        cat.buildings[bid] = BuildingDef(
            id=bid,
            name=b.get("name", bid),
            desc=b.get("desc", ""),
            base_cost=dict(b.get("base_cost", {})),
            cost_scale=float(b.get("cost_scale", 1.0)),
        )

    for rid, r in raw.get("recipes", {}).items():
        _add_recipe(cat, RecipeDef(
            id=rid,
            name=r.get("name", rid),
            skill=r["skill"],
            duration_sec=float(r["duration_sec"]),
            inputs=dict(r.get("inputs", {})),
            outputs=dict(r.get("outputs", {})),
            xp=float(r.get("xp", 0)),
            requires_building=r["requires_building"],
            requires_level=int(r.get("requires_level", 1)),
        ))
    _generate_recipes(cat, raw.get("recipe_templates", {}))

    cat.loot = LootTableManager.from_dict(raw.get("tables", {}))
    cat.start = dict(raw.get("start", {}))

    _validate(cat)
    return cat


# ── Families ─────────────────────────────────────────────────────────

def _add_resource(cat: Catalog, res: ResourceDef) -> None:
    if res.id in cat.resources:
        raise CatalogError(f"duplicate resource id: {res.id}")
    cat.resources[res.id] = res


def _add_recipe(cat: Catalog, recipe: RecipeDef) -> None:
    if recipe.id in cat.recipes:
        raise CatalogError(f"duplicate recipe id: {recipe.id}")
    cat.recipes[recipe.id] = recipe


def _cap(s: str) -> str:
    return s[:1].upper() + s[1:]


def _id_segment(label: str) -> str:
    return "".join(ch for ch in label if ch.isalnum())


def _build_tiers(cat: Catalog, raw: dict) -> None:
    shapes = raw.get("gear_shapes", [])
    for t in raw.get("tiers", []):
        tier = int(t["tier"])
        bar_raw = t["bar"]
        bar = BarDef(
            id=bar_raw["id"],
            name=bar_raw["name"],
            level=int(bar_raw.get("level", 1)),
            tier=tier,
            xp=7 * float(t["tier_xp"]),
            ore_cost=dict(bar_raw.get("ore_cost", {})),
        )
        cat.bars[bar.id] = bar
        _add_resource(cat, ResourceDef(id=bar.id, name=bar.name, kind="bar", tier=tier))

        for ore in t.get("ores", []):
            node = MiningNode(id=ore["id"], name=ore["name"], level=int(ore["level"]),
                              xp=float(ore["xp"]), tier=tier)
            cat.mining_nodes[node.id] = node
            _add_resource(cat, ResourceDef(id=node.id, name=node.name, kind="ore", tier=tier))

        overrides = t.get("label_overrides", {})
        levels = t.get("item_levels", {})
        for shape in shapes:
            key = shape["key"]
            if key not in levels:
                continue
            label = overrides.get(key, shape["label"])
            item = ItemDef(
                id=f"{t['key']}{_id_segment(label)}",
                name=f"{t['name']} {label}",
                slot=shape["slot"],
                type=key,
                size=shape.get("size", "small"),
                tier=tier,
                bar_cost=int(shape["bars"]),
                bar_id=bar.id,
                smithing_level=int(levels[key]),
                xp=12 * float(t["tier_xp"]) * int(shape["bars"]),
                durability=int(t["durability"]),
            )
            cat.items[item.id] = item
            _add_resource(cat, ResourceDef(id=item.id, name=item.name, kind="item", tier=tier))

    prices = raw.get("prices", {})
    cat.prices = PriceTable(
        ore=tuple(prices.get("ore", ())),
        bar=tuple(prices.get("bar", ())),
        by_size={size: tuple(prices.get(size, ())) for size in ("small", "medium", "large")},
        worn_out_fraction=float(prices.get("worn_out_fraction", 0.2)),
    )


def _build_fish(cat: Catalog, raw: dict) -> None:
    for f in raw.get("fish", []):
        fid = f["id"]
        fish = FishDef(
            id=fid,
            name=f.get("name", fid),
            level=int(f["level"]),
            fishing_xp=float(f["fishing_xp"]),
            cooking_level=int(f.get("cooking_level", f["level"])),
            cooking_xp=float(f["cooking_xp"]),
            heal=int(f.get("heal", 0)),
            cooked_id=f"cooked{_cap(fid)}",
            burnt_id=f"burnt{_cap(fid)}",
        )
        cat.fish[fid] = fish
        _add_resource(cat, ResourceDef(id=fid, name=fish.name, kind="fish"))
        _add_resource(cat, ResourceDef(id=fish.cooked_id, name=f"Cooked {fish.name}",
                                       kind="food", food=True, heal=fish.heal))
        _add_resource(cat, ResourceDef(id=fish.burnt_id, name=f"Burnt {fish.name}", kind="fish"))


def _build_crops(cat: Catalog, raw: dict) -> None:
    for c in raw.get("crops", []):
        crop = CropDef(
            id=c["id"],
            name=c.get("name", c["id"]),
            tier=int(c["tier"]),
            level=int(c.get("level", 1)),
            grow_sec=float(c["grow_sec"]),
            yield_min=int(c["yield_min"]),
            yield_max=int(c["yield_max"]),
        )
        if crop.yield_max < crop.yield_min:
            raise CatalogError(f"crop {crop.id}: yield_max < yield_min")
        cat.crops[crop.id] = crop
        _add_resource(cat, ResourceDef(id=crop.id, name=crop.name, kind="crop", tier=crop.tier))

    rules = raw.get("farming", {})
    cat.farming = FarmingRules(
        patches=int(rules.get("patches", 3)),
        xp_per_tier=float(rules.get("xp_per_tier", 12)),
        level_bonus_step=int(rules.get("level_bonus_step", 20)),
        pure_chance_divisor=float(rules.get("pure_chance_divisor", 120)),
        pure_chance_cap=float(rules.get("pure_chance_cap", 0.25)),
    )


def _build_potions(cat: Catalog, raw: dict) -> None:
    for p in raw.get("potions", []):
        kind = p["kind"]
        if kind not in (POTION_HEAL, POTION_REGEN, POTION_ACCURACY):
            raise CatalogError(f"potion {p['id']}: unknown kind {kind!r}")
        default_cd = 30.0 if kind == POTION_HEAL else 60.0 if kind == POTION_REGEN else 0.0
        potion = PotionDef(
            id=p["id"],
            name=p.get("name", p["id"]),
            kind=kind,
            amount=float(p["amount"]),
            level=int(p.get("level", 1)),
            ingredients=dict(p.get("ingredients", {})),
            xp=float(p.get("xp", 0)),
            duration_sec=float(p.get("duration_sec", 0)),
            interval_sec=float(p.get("interval_sec", 0)),
            cooldown_sec=float(p.get("cooldown_sec", default_cd)),
        )
        cat.potions[potion.id] = potion
        _add_resource(cat, ResourceDef(id=potion.id, name=potion.name, kind="potion"))


def _generate_recipes(cat: Catalog, templates: dict) -> None:
    smelt = templates.get("smelt")
    if smelt:
        for bar in cat.bars.values():
            _add_recipe(cat, RecipeDef(
                id=f"smelt{_cap(bar.id)}",
                name=f"Smelt {bar.name}",
                skill=smelt["skill"],
                duration_sec=float(smelt["duration_sec"]),
                inputs=dict(bar.ore_cost),
                outputs={bar.id: 1},
                xp=bar.xp,
                requires_building=smelt["requires_building"],
                requires_level=bar.level,
            ))

    smith = templates.get("smith")
    if smith:
        for item in cat.items.values():
            _add_recipe(cat, RecipeDef(
                id=f"smith{_cap(item.id)}",
                name=f"Smith {item.name}",
                skill=smith["skill"],
                duration_sec=float(smith["base_duration_sec"])
                + float(smith.get("duration_per_bar", 0)) * item.bar_cost,
                inputs={item.bar_id: item.bar_cost},
                outputs={item.id: 1},
                xp=item.xp,
                requires_building=smith["requires_building"],
                requires_level=item.smithing_level,
            ))

    cook = templates.get("cook")
    if cook:
        for fish in cat.fish.values():
            _add_recipe(cat, RecipeDef(
                id=f"cook{_cap(fish.id)}",
                name=f"Cook {fish.name}",
                skill=cook["skill"],
                duration_sec=float(cook["duration_sec"]),
                inputs={fish.id: 1},
                outputs={},
                xp=fish.cooking_xp,
                requires_building=cook["requires_building"],
                requires_level=fish.cooking_level,
                special="cookFish",
                fish_level=fish.level,
                cooked_id=fish.cooked_id,
                burnt_id=fish.burnt_id,
            ))

    brew = templates.get("brew")
    if brew:
        for potion in cat.potions.values():
            _add_recipe(cat, RecipeDef(
                id=f"brew{_cap(potion.id)}",
                name=f"Brew {potion.name}",
                skill=brew["skill"],
                duration_sec=float(brew["duration_sec"]),
                inputs=dict(potion.ingredients),
                outputs={potion.id: 1},
                xp=potion.xp,
                requires_building=brew["requires_building"],
                requires_level=potion.level,
            ))


# ── Validation ───────────────────────────────────────────────────────

def _check_ids(where: str, ids, known) -> None:
    for rid in ids:
        if rid not in known:
            raise CatalogError(f"{where}: unknown resource id {rid!r}")


def _validate(cat: Catalog) -> None:
    res = cat.resources
    for skill in cat.skills.values():
        _check_ids(f"skill {skill.id}", skill.yields, res)
    for b in cat.buildings.values():
        _check_ids(f"building {b.id}", b.base_cost, res)
    for r in cat.recipes.values():
        if r.skill not in cat.skills:
            raise CatalogError(f"recipe {r.id}: unknown skill {r.skill!r}")
        if r.requires_building not in cat.buildings:
            raise CatalogError(f"recipe {r.id}: unknown building {r.requires_building!r}")
        _check_ids(f"recipe {r.id}", r.inputs, res)
        _check_ids(f"recipe {r.id}", r.outputs, res)
        if r.special == "cookFish":
            _check_ids(f"recipe {r.id}", (r.cooked_id, r.burnt_id), res)
    for bar in cat.bars.values():
        _check_ids(f"bar {bar.id}", bar.ore_cost, res)
    for item in cat.items.values():
        if item.slot not in EQUIPMENT_SLOTS:
            raise CatalogError(f"item {item.id}: unknown slot {item.slot!r}")
    for p in cat.potions.values():
        _check_ids(f"potion {p.id}", p.ingredients, res)
    for table in cat.loot.tables.values():
        _check_ids(f"loot table {table.id}", table.items(), res)
    _check_ids("start", cat.start, res)
