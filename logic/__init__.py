"""logic — Player-facing game logic.

Subpackages
-----------
actions/    — player action entry points (activity, town, inventory, combat)

Top-level modules
-----------------
loot_tables     — seeded scavenging loot table manager
"""
