"""
Recipe graph construction and dependency graph sources.

A RecipeGraph maps an output item id to the set of ingredient ids that
craft it, restricted to the working item set. A graph source is any
callable taking the item id set and returning such a mapping.

Recipe records (as exported by a recipe viewer) look like:
    {
        "id": "minecraft:iron_sword",
        "category": "minecraft:crafting",
        "output": "minecraft:iron_sword",
        "inputs": [["minecraft:iron_ingot"], ["minecraft:iron_ingot"], ["minecraft:stick"]]
    }
Each input slot lists the alternative item ids it accepts.
"""

from collections import defaultdict
from typing import Dict, Set, List, Any, Callable, Iterable, Optional

from tierlist_builder.core.log import log, report
from tierlist_builder.errors import GraphSourceError

RecipeGraph = Dict[str, Set[str]]
GraphSource = Callable[[Set[str]], RecipeGraph]

# Recipe ids containing this are cosmetic (armor trims) and never progression
COSMETIC_RECIPE_MARKER = "trim"


def restrict_graph(graph: Dict[str, Iterable[str]], item_ids: Set[str]) -> RecipeGraph:
    """Keep only in-set outputs and ingredients; drop self loops and empty entries."""
    restricted: RecipeGraph = {}
    for output, ingredients in graph.items():
        if output not in item_ids:
            continue
        kept = {i for i in ingredients if i in item_ids and i != output}
        if kept:
            restricted[output] = kept
    return restricted


def build_reverse_graph(graph: RecipeGraph, item_ids: Set[str]) -> RecipeGraph:
    """ingredient -> outputs that consume it, restricted to item_ids."""
    reverse: RecipeGraph = defaultdict(set)
    for output, ingredients in graph.items():
        for ingredient in ingredients:
            if ingredient in item_ids:
                reverse[ingredient].add(output)
    return dict(reverse)


def is_real_recipe(recipe: Dict[str, Any], skipped_categories: Iterable[str]) -> bool:
    """False for skipped categories and cosmetic recipes."""
    if recipe.get('category', '') in set(skipped_categories):
        return False
    if COSMETIC_RECIPE_MARKER in str(recipe.get('id') or ''):
        return False
    return True


def build_recipe_graph(
    recipes: List[Dict[str, Any]],
    item_ids: Iterable[str],
    skipped_categories: Optional[Iterable[str]] = None,
) -> RecipeGraph:
    """
    Build output -> ingredients from recipe records.

    Args:
        recipes: Recipe records (id, category, output, inputs)
        item_ids: Relevant item ids; everything else is ignored
        skipped_categories: Recipe categories that never count

    Returns:
        RecipeGraph restricted to item_ids
    """
    relevant = set(item_ids)
    skipped = list(skipped_categories or [])
    graph: RecipeGraph = defaultdict(set)
    skipped_count = 0

    if skipped:
        log(f"Skipping recipe categories: {', '.join(skipped)}")

    for recipe in recipes:
        output = recipe.get('output')
        if output not in relevant:
            continue
        if not is_real_recipe(recipe, skipped):
            skipped_count += 1
            continue

        for slot in recipe.get('inputs', []):
            alternatives = slot if isinstance(slot, (list, tuple)) else [slot]
            for ingredient in alternatives:
                # Self-referential recipes (repair, dye) are not progression
                if not ingredient or ingredient == output:
                    continue
                if ingredient in relevant:
                    graph[output].add(ingredient)

    log(f"Recipe lookup found {len(graph)} outputs with relevant ingredients "
        f"({skipped_count} recipes skipped)")
    return dict(graph)


class RecipeGraphSource:
    """Graph source backed by an in-memory list of recipe records."""

    def __init__(self, recipes: List[Dict[str, Any]], skipped_categories: Optional[Iterable[str]] = None):
        self.recipes = list(recipes)
        self.skipped_categories = list(skipped_categories or [])

    def __call__(self, item_ids: Set[str]) -> RecipeGraph:
        return build_recipe_graph(self.recipes, item_ids, self.skipped_categories)


def static_graph_source(graph: Dict[str, Iterable[str]]) -> GraphSource:
    """Graph source returning a fixed mapping (restricted per call)."""
    def source(item_ids: Set[str]) -> RecipeGraph:
        return restrict_graph(graph, item_ids)
    return source


def fetch_recipe_graph(source: Optional[GraphSource], item_ids: Set[str]) -> RecipeGraph:
    """
    Call a graph source and restrict its result to item_ids.

    Raises:
        GraphSourceError: the source raised or returned something other than a mapping
    """
    if source is None:
        return {}
    try:
        raw = source(set(item_ids))
    except Exception as e:
        raise GraphSourceError(f"graph source failed: {type(e).__name__}: {e}") from e

    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise GraphSourceError(f"graph source returned {type(raw).__name__}, expected a mapping")

    graph = restrict_graph(raw, set(item_ids))
    report("RecipeGraph", f"Detected {len(graph)} recipe relationships")
    return graph
