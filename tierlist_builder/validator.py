"""
Validator Module for the tierlist builder

Validates that a generated layout has correct structure:
- Groups partition the item set
- No two items share a (group, tier, column) slot
- Chain members never sit left of a lower-tier same-chain ingredient
- Accepted dependency edges contain no cycle
- Chain membership agrees with graph connectivity
"""

from typing import List, Dict, Any, Set, Tuple

import networkx as nx

from tierlist_builder.core.group import ItemGroup, GroupType
from tierlist_builder.core.union_find import UnionFind
from tierlist_builder.recipe_graph import RecipeGraph


class LayoutValidationResult:
    """Result of layout validation."""

    def __init__(self):
        self.valid = True
        self.total_items = 0
        self.total_groups = 0
        self.duplicates: List[str] = []
        self.missing: List[str] = []
        self.column_collisions: List[Tuple[int, int, int]] = []  # (group, tier, column)
        self.order_violations: List[Tuple[str, str]] = []  # (dependent, ingredient)
        self.cycles: List[List[str]] = []
        self.warnings: List[str] = []
        self.errors: List[str] = []

    def add_error(self, msg: str):
        self.errors.append(msg)
        self.valid = False

    def add_warning(self, msg: str):
        self.warnings.append(msg)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'valid': self.valid,
            'total_items': self.total_items,
            'total_groups': self.total_groups,
            'duplicates': self.duplicates,
            'missing': self.missing,
            'column_collisions': [list(c) for c in self.column_collisions],
            'order_violations': [list(v) for v in self.order_violations],
            'cycles': self.cycles,
            'warnings': self.warnings,
            'errors': self.errors,
        }


def check_partition(groups: List[ItemGroup], item_ids: Set[str], result: LayoutValidationResult) -> None:
    seen: Set[str] = set()
    for group in groups:
        for item_id in group.item_ids:
            if item_id in seen:
                result.duplicates.append(item_id)
            seen.add(item_id)

    result.missing = sorted(item_ids - seen)
    if result.duplicates:
        result.add_error(f"{len(result.duplicates)} item(s) in more than one group: {result.duplicates[:5]}")
    if result.missing:
        result.add_error(f"{len(result.missing)} item(s) in no group: {result.missing[:5]}")
    extra = seen - item_ids
    if extra:
        result.add_warning(f"{len(extra)} grouped item(s) not in the item set")


def check_columns(groups: List[ItemGroup], tier_map: Dict[str, int], result: LayoutValidationResult) -> None:
    for index, group in enumerate(groups):
        slots: Dict[Tuple[int, int], str] = {}
        for item_id in group.item_ids:
            column = group.column_assignments.get(item_id)
            if column is None:
                result.add_error(f"Group {index}: {item_id} has no column")
                continue
            if column < 0:
                result.add_error(f"Group {index}: {item_id} has negative column {column}")
            slot = (tier_map.get(item_id, 0), column)
            if slot in slots:
                result.column_collisions.append((index, slot[0], slot[1]))
                result.add_error(f"Group {index}: {slots[slot]} and {item_id} share tier {slot[0]} column {slot[1]}")
            else:
                slots[slot] = item_id

    # Group column ranges must not overlap
    ranges = [(g.column_range(), i) for i, g in enumerate(groups) if g.column_range()]
    ranges.sort()
    for (a, ia), (b, ib) in zip(ranges, ranges[1:]):
        if b[0] <= a[1]:
            result.add_error(f"Groups {ia} and {ib} overlap in columns {b[0]}-{a[1]}")


def check_dependency_order(
    groups: List[ItemGroup],
    graph: RecipeGraph,
    tier_map: Dict[str, int],
    result: LayoutValidationResult,
) -> None:
    for group in groups:
        if group.group_type != GroupType.PROGRESSION_CHAIN:
            continue
        columns = group.column_assignments
        members = group.chain_ids or frozenset()
        for dependent in sorted(members):
            for ingredient in sorted(graph.get(dependent, ())):
                if ingredient not in members:
                    continue
                if tier_map.get(ingredient, 0) >= tier_map.get(dependent, 0):
                    continue
                if columns.get(dependent, 0) < columns.get(ingredient, 0):
                    result.order_violations.append((dependent, ingredient))
                    result.add_error(f"{dependent} (column {columns.get(dependent)}) is left of "
                                     f"its ingredient {ingredient} (column {columns.get(ingredient)})")


def detect_cycles(edges: List[Tuple[str, str]]) -> List[List[str]]:
    """
    Detect cycles in the dependency edge set.

    Args:
        edges: (dependent, dependency) pairs

    Returns:
        List of cycles (each cycle is a list of item ids)
    """
    graph = nx.DiGraph()
    graph.add_edges_from(edges)
    if nx.is_directed_acyclic_graph(graph):
        return []
    return [sorted(c) for c in nx.simple_cycles(graph)]


def check_chain_connectivity(groups: List[ItemGroup], graph: RecipeGraph, result: LayoutValidationResult) -> None:
    """Chains must be exactly the connected components of the recipe graph."""
    chains = [g for g in groups if g.group_type == GroupType.PROGRESSION_CHAIN]
    if not chains:
        return

    chained = set()
    for g in chains:
        chained.update(g.chain_ids or ())

    uf = UnionFind(chained)
    for output, ingredients in graph.items():
        for ingredient in ingredients:
            if output in chained and ingredient in chained:
                uf.union(output, ingredient)

    expected = {frozenset(c) for c in uf.groups()}
    actual = {frozenset(g.chain_ids or ()) for g in chains}
    if expected != actual:
        result.add_error(f"Chain partition differs from graph connectivity "
                         f"({len(actual)} chains vs {len(expected)} components)")


def validate_layout(
    groups: List[ItemGroup],
    item_ids: Set[str],
    tier_map: Dict[str, int],
    graph: RecipeGraph,
    edges: List[Tuple[str, str]],
) -> LayoutValidationResult:
    """
    Validate one kind's layout.

    Args:
        groups: Laid out groups
        item_ids: All item ids of the kind
        tier_map: item id -> tier
        graph: Recipe graph used for the run
        edges: Accepted (dependent, dependency) pairs

    Returns:
        LayoutValidationResult with validation details
    """
    result = LayoutValidationResult()
    result.total_items = len(item_ids)
    result.total_groups = len(groups)

    check_partition(groups, item_ids, result)
    check_columns(groups, tier_map, result)
    check_dependency_order(groups, graph, tier_map, result)
    check_chain_connectivity(groups, graph, result)

    cycles = detect_cycles(edges)
    if cycles:
        result.cycles = cycles
        result.add_error(f"Found {len(cycles)} cycle(s) in dependency edges")

    return result


def get_validation_summary(results: Dict[str, LayoutValidationResult]) -> Dict[str, Any]:
    """Get a summary of validation results across all item kinds."""
    return {
        'all_valid': all(r.valid for r in results.values()),
        'total_kinds': len(results),
        'valid_kinds': sum(1 for r in results.values() if r.valid),
        'total_items': sum(r.total_items for r in results.values()),
        'total_errors': sum(len(r.errors) for r in results.values()),
        'total_warnings': sum(len(r.warnings) for r in results.values()),
        'kinds': {name: r.to_dict() for name, r in results.items()},
    }
