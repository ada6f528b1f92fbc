"""simulation — The deterministic idle-game simulation core.

Everything here is a plain function over ``(state, catalog, ...)``.
Nothing blocks, sleeps or reads the wall clock: waiting is always an
accumulated counter advanced by an explicit ``dt``.

Submodules
----------
modifiers   Building and legacy multipliers, player combat numbers
ledger      Bounded resource writes, XP, durability, injuries, log
gather      Woodcutting, mining, fishing, scavenging ticks
craft       Smelting, smithing, cooking, brewing ticks
potions     Potion consumption and timed effects
combat      Shared cooldown-scheduled combat engine
expedition  Seeded room-by-room expeditions
dungeon     Seeded grid dungeon crawl
farming     Crop patches
economy     Sell prices
world_sim   tick_simulation and offline catch-up
"""
