"""
Tierlist Builder

Ranks scored items into tiers and lays them out on a column grid where
crafting chains line up vertically and dependency edges never form cycles.
"""

__version__ = "0.3.0"
