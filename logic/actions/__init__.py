"""logic/actions — Player action entry points.

Every action has the signature ``action(state, catalog, *args)``,
mutates the state in place and silently does nothing when a
precondition fails (unknown id, level too low, not enough resources,
already in that state).  The host calls them through
``GameApp.dispatch``.

Public API (re-exported here)
-----------------------------
Activity   ``set_activity_idle``, ``start_gather``, ``select_mining_target``,
           ``start_craft``, ``begin_expedition``, ``end_expedition``,
           ``choose_route``, ``enter_dungeon``, ``leave_dungeon``,
           ``dungeon_move``
Town       ``building_next_cost``, ``upgrade_building``, ``plant_crop``,
           ``harvest_crop``, ``found_new_settlement``, ``buy_legacy_upgrade``
Inventory  ``equip_item``, ``unequip_item``, ``repair_item``,
           ``sell_resource``, ``sell_equipped_item``, ``drink_potion``
Combat     ``queue_attack``, ``toggle_auto_fight``, ``use_combat_food``,
           ``use_combat_potion``
"""

from __future__ import annotations

from logic.actions.combat import (                  # noqa: F401
    active_encounter, queue_attack, toggle_auto_fight, use_combat_food,
    use_combat_potion,
)
from logic.actions.activity import (                # noqa: F401
    set_activity_idle, start_gather, select_mining_target, start_craft,
    begin_expedition, end_expedition, choose_route, enter_dungeon,
    leave_dungeon, dungeon_move,
)
from logic.actions.town import (                    # noqa: F401
    building_next_cost, upgrade_building, plant_crop, harvest_crop,
    found_new_settlement, buy_legacy_upgrade,
)
from logic.actions.inventory import (               # noqa: F401
    equip_item, unequip_item, repair_item, sell_resource,
    sell_equipped_item, drink_potion,
)
