"""
ChainGrouper - partitions items into layout groups.

Two mutually exclusive modes:
- Chain mode: items connected by crafting relationships form progression
  chains; everything else lands in one isolated group.
- Tag mode: ordered tag descriptors claim items first-match-wins; the rest
  land in one isolated group.

Chain mode is used only when progression is enabled AND the recipe graph
has at least one relationship.
"""

from collections import deque
from typing import Dict, List, Set, Optional, Tuple

from tierlist_builder.core.group import ItemGroup
from tierlist_builder.core.item import TieredItem, UNKNOWN_TIER
from tierlist_builder.core.log import report
from tierlist_builder.recipe_graph import RecipeGraph, build_reverse_graph
from tierlist_builder.tags import TagDescriptor


def classify_items(graph: RecipeGraph, item_ids: Set[str]) -> Tuple[Set[str], Set[str], RecipeGraph]:
    """
    Split the item set by dependency role.

    Returns:
        (has_dependency, used_as_dependency, reverse_graph)
    """
    reverse = build_reverse_graph(graph, item_ids)
    has_dependency = {
        output for output, ingredients in graph.items()
        if output in item_ids and any(i in item_ids for i in ingredients)
    }
    used_as_dependency = set(reverse.keys())
    return has_dependency, used_as_dependency, reverse


def _collect_chain(
    start: str,
    graph: RecipeGraph,
    reverse: RecipeGraph,
    item_ids: Set[str],
    has_dependency: Set[str],
    used_as_dependency: Set[str],
) -> Set[str]:
    """Worklist traversal from start over ingredient and dependent links."""
    chain: Set[str] = set()
    queue = deque([start])

    while queue:
        current = queue.popleft()
        if current in chain:
            continue
        if current not in has_dependency and current not in used_as_dependency:
            continue
        chain.add(current)

        for ingredient in sorted(graph.get(current, ())):
            if ingredient in item_ids and ingredient in used_as_dependency and ingredient not in chain:
                queue.append(ingredient)

        for dependent in sorted(reverse.get(current, ())):
            if dependent in item_ids and dependent in has_dependency and dependent not in chain:
                queue.append(dependent)

    return chain


def find_chains(
    item_ids: Set[str],
    graph: RecipeGraph,
    tier_map: Dict[str, int],
) -> List[Set[str]]:
    """
    Find maximal dependency chains.

    Args:
        item_ids: Relevant item ids
        graph: output -> ingredients
        tier_map: item id -> tier

    Returns:
        Chains ordered by minimum member tier (ties by smallest member id)
    """
    has_dependency, used_as_dependency, reverse = classify_items(graph, item_ids)

    def tier_of(item_id: str) -> int:
        return tier_map.get(item_id, UNKNOWN_TIER)

    chains: List[Set[str]] = []
    claimed: Set[str] = set()

    for item_id in sorted(has_dependency, key=lambda i: (tier_of(i), i)):
        if item_id in claimed:
            continue
        chain = _collect_chain(item_id, graph, reverse, item_ids, has_dependency, used_as_dependency)
        if chain:
            chains.append(chain)
            claimed.update(chain)

    # Ingredients never reached from an output become singleton chains
    for item_id in sorted(used_as_dependency):
        if item_id not in claimed:
            chains.append({item_id})
            claimed.add(item_id)

    chains.sort(key=lambda c: (min(tier_of(i) for i in c), min(c)))
    return chains


def build_progression_groups(
    tiered_items: List[TieredItem],
    graph: RecipeGraph,
    tier_map: Dict[str, int],
) -> List[ItemGroup]:
    """One PROGRESSION_CHAIN group per chain, then one ISOLATED group."""
    item_ids = {t.item_id for t in tiered_items}
    chains = find_chains(item_ids, graph, tier_map)

    groups: List[ItemGroup] = []
    in_chain: Set[str] = set()
    for chain in chains:
        members = [t.item for t in tiered_items if t.item_id in chain]
        if members:
            groups.append(ItemGroup.progression_chain(members, chain))
            in_chain.update(chain)

    isolated = [t.item for t in tiered_items if t.item_id not in in_chain]
    if isolated:
        groups.append(ItemGroup.isolated(isolated))

    report("ChainGrouper", f"Built {len(groups)} progression groups: "
           f"{len(chains)} chains + {len(isolated)} isolated items")
    return groups


def build_tag_groups(
    tiered_items: List[TieredItem],
    descriptors: List[TagDescriptor],
) -> List[ItemGroup]:
    """One TAG_GROUP per descriptor with matches (first match wins), then ISOLATED."""
    groups: List[ItemGroup] = []
    claimed: Set[str] = set()

    for descriptor in descriptors:
        members = []
        for t in tiered_items:
            if t.item_id in claimed:
                continue
            if descriptor.matches(t.item):
                members.append(t.item)
                claimed.add(t.item_id)
        if members:
            groups.append(ItemGroup.tag_group(members, descriptor))

    isolated = [t.item for t in tiered_items if t.item_id not in claimed]
    if isolated:
        groups.append(ItemGroup.isolated(isolated))

    report("ChainGrouper", f"Built {len(groups)} tag-based groups: "
           f"{len(groups) - (1 if isolated else 0)} tag groups + {len(isolated)} isolated items")
    return groups


def uses_chain_mode(progression_enabled: bool, graph: Optional[RecipeGraph]) -> bool:
    return bool(progression_enabled and graph)


def build_groups(
    tiered_items: List[TieredItem],
    graph: Optional[RecipeGraph],
    tier_map: Dict[str, int],
    progression_enabled: bool,
    descriptors: Optional[List[TagDescriptor]] = None,
) -> List[ItemGroup]:
    """
    Build layout groups for one generation run.

    Args:
        tiered_items: All tiered items (tier order)
        graph: Recipe graph, may be empty
        tier_map: item id -> tier
        progression_enabled: Config flag for chain mode
        descriptors: Ordered tag descriptors for tag mode

    Returns:
        Ordered groups forming a partition of the items
    """
    if uses_chain_mode(progression_enabled, graph):
        return build_progression_groups(tiered_items, graph, tier_map)
    return build_tag_groups(tiered_items, descriptors or [])
