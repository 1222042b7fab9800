"""
ColumnLayoutEngine - assigns an integer column to every grouped item.

Groups occupy disjoint, contiguous column ranges laid out left to right
in group order; the next group starts at (max column used + 1 + spacing).

Within a group:
- Isolated / tag groups stack each tier's members from the group start,
  so the Nth member of every tier shares a column.
- Progression chains follow their dependencies: an item reuses the column
  of its right-most lower-tier ingredient when that column is free in its
  own tier, and is never placed left of any assigned ingredient.
"""

from collections import defaultdict
from typing import Dict, List, Set, Iterable

from tierlist_builder.core.group import ItemGroup, GroupType
from tierlist_builder.core.item import UNKNOWN_TIER
from tierlist_builder.core.log import report
from tierlist_builder.recipe_graph import RecipeGraph

# Blank columns between groups
PROGRESSION_SPACING = 1
TIER_SPACING = 2


def group_spacing_for(chain_mode: bool) -> int:
    return PROGRESSION_SPACING if chain_mode else TIER_SPACING


def assign_sequential_columns(
    group: ItemGroup,
    tier_map: Dict[str, int],
    score_map: Dict[str, float],
    start_column: int,
) -> None:
    """
    Stack each tier's members left to right from start_column.

    Members are ordered by tier, then namespace, then score ascending
    (weaker first), then id.
    """
    ordered = sorted(group.items, key=lambda item: (
        tier_map.get(item.item_id, UNKNOWN_TIER),
        item.namespace,
        score_map.get(item.item_id, item.score),
        item.item_id,
    ))

    by_tier: Dict[int, List[str]] = defaultdict(list)
    for item in ordered:
        by_tier[tier_map.get(item.item_id, UNKNOWN_TIER)].append(item.item_id)

    for tier_items in by_tier.values():
        for i, item_id in enumerate(tier_items):
            group.set_column(item_id, start_column + i)


def assign_chain_columns(
    chain: Iterable[str],
    graph: RecipeGraph,
    tier_map: Dict[str, int],
    score_map: Dict[str, float],
) -> Dict[str, int]:
    """
    Assign chain-relative columns (starting at 0) following dependencies.

    Args:
        chain: Member ids of one progression chain
        graph: output -> ingredients
        tier_map: item id -> tier
        score_map: item id -> score

    Returns:
        Dict of item id -> relative column
    """
    members = set(chain)
    columns: Dict[str, int] = {}
    occupied: Dict[int, Set[int]] = defaultdict(set)  # tier -> columns in use

    visit_order = sorted(members, key=lambda i: (
        tier_map.get(i, UNKNOWN_TIER),
        score_map.get(i, 0.0),
        i,
    ))

    next_column = 0
    for item_id in visit_order:
        item_tier = tier_map.get(item_id, UNKNOWN_TIER)
        assigned_deps = sorted(
            dep for dep in graph.get(item_id, ())
            if dep in members and dep in columns
        )

        # Right-most lower-tier ingredient whose column is free in this tier
        column = None
        best = -1
        for dep in assigned_deps:
            dep_column = columns[dep]
            lower_tier = tier_map.get(dep, UNKNOWN_TIER) < item_tier
            if lower_tier and dep_column not in occupied[item_tier] and dep_column > best:
                best = dep_column
                column = dep_column

        if column is None:
            column = next_column
            next_column += 1

        # Never left of an ingredient
        if assigned_deps:
            max_dep_column = max(columns[dep] for dep in assigned_deps)
            if column < max_dep_column:
                column = max_dep_column
                while column in occupied[item_tier]:
                    column += 1
                if column >= next_column:
                    next_column = column + 1

        columns[item_id] = column
        occupied[item_tier].add(column)

    return columns


def assign_progression_columns(
    group: ItemGroup,
    graph: RecipeGraph,
    tier_map: Dict[str, int],
    score_map: Dict[str, float],
    start_column: int,
) -> None:
    """Chain columns shifted so the left-most lands on start_column."""
    if not group.chain_ids:
        return
    relative = assign_chain_columns(group.chain_ids, graph, tier_map, score_map)
    if not relative:
        return
    offset = start_column - min(relative.values())
    for item_id in sorted(relative):
        group.set_column(item_id, relative[item_id] + offset)


def calculate_layout(
    groups: List[ItemGroup],
    graph: RecipeGraph,
    tier_map: Dict[str, int],
    score_map: Dict[str, float],
    group_spacing: int,
) -> Dict[str, int]:
    """
    Assign columns to every group in order.

    Args:
        groups: Ordered groups from the chain grouper
        graph: Recipe graph (used by progression chains)
        tier_map: item id -> tier
        score_map: item id -> score
        group_spacing: Blank columns between groups

    Returns:
        Global item id -> column mapping
    """
    next_start = 0
    assignments: Dict[str, int] = {}

    for group in groups:
        if group.is_empty():
            continue

        if group.group_type == GroupType.PROGRESSION_CHAIN:
            assign_progression_columns(group, graph, tier_map, score_map, next_start)
        else:
            assign_sequential_columns(group, tier_map, score_map, next_start)

        if group.column_assignments:
            max_column = max(group.column_assignments.values())
        else:
            max_column = next_start - 1
        next_start = max_column + 1 + group_spacing
        assignments.update(group.column_assignments)

    report("ColumnLayout", f"Calculated layout for {len(groups)} groups "
           f"({len(assignments)} items, spacing {group_spacing})")
    return assignments
