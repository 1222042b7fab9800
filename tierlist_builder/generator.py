"""
Tierlist generation pipeline.

Runs one item kind end to end:
  tiers -> groups -> columns -> grid placement -> dependency edges -> validation

Every enabled kind (weapons, armor) is an independent run: an empty item
set, a failing graph source or even an unexpected error in one kind never
affects another.

Reuses:
  - tier_assigner (assign_tiers, load_overrides)
  - chain_grouper (build_groups)
  - column_layout (calculate_layout)
  - grid_mapper (GridPositionMapper)
  - edge_builder (DependencyEdgeBuilder)
  - validator (validate_layout, get_validation_summary)
"""

from datetime import datetime
from typing import Dict, List, Any, Optional
from dataclasses import dataclass, field

from tierlist_builder.chain_grouper import build_groups, uses_chain_mode
from tierlist_builder.column_layout import calculate_layout, group_spacing_for
from tierlist_builder.config import TierlistConfig, load_config
from tierlist_builder.core.group import ItemGroup
from tierlist_builder.core.item import Item, TieredItem
from tierlist_builder.core.log import log, report
from tierlist_builder.edge_builder import DependencyEdge, DependencyEdgeBuilder
from tierlist_builder.errors import GenerationError, GraphSourceError
from tierlist_builder.grid_mapper import GridPositionMapper, RenderPlan
from tierlist_builder.item_filter import filter_from_config
from tierlist_builder.recipe_graph import (
    GraphSource, RecipeGraph, RecipeGraphSource, fetch_recipe_graph, static_graph_source,
)
from tierlist_builder.scoring import ItemKind, kinds_from_config
from tierlist_builder.tags import descriptors_from_entries, parse_tag_entries
from tierlist_builder.tier_assigner import (
    assign_tiers, build_score_map, build_tier_map, flatten_tiers, load_overrides,
)
from tierlist_builder.validator import LayoutValidationResult, get_validation_summary, validate_layout

GENERATOR_NAME = "TierlistBuilder (chain-aligned)"


@dataclass
class KindResult:
    """Outcome of one item kind's generation run."""

    kind: str
    skipped: bool = False
    mode: str = "tag"
    tiers: Dict[int, List[TieredItem]] = field(default_factory=dict)
    groups: List[ItemGroup] = field(default_factory=list)
    columns: Dict[str, int] = field(default_factory=dict)
    graph: RecipeGraph = field(default_factory=dict)
    edges: List[DependencyEdge] = field(default_factory=list)
    skipped_cycles: List[List[str]] = field(default_factory=list)
    plan: Optional[RenderPlan] = None
    validation: Optional[LayoutValidationResult] = None
    degraded: Optional[str] = None
    error: Optional[str] = None

    def tier_of(self, item_id: str) -> Optional[int]:
        for tier, items in self.tiers.items():
            if any(t.item_id == item_id for t in items):
                return tier
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'kind': self.kind,
            'skipped': self.skipped,
            'mode': self.mode,
            'tiers': {str(tier): [t.item_id for t in items] for tier, items in self.tiers.items()},
            'groups': [g.to_dict() for g in self.groups],
            'columns': dict(sorted(self.columns.items())),
            'edges': [e.to_dict() for e in self.edges],
            'skipped_cycles': self.skipped_cycles,
            'plan': self.plan.to_dict() if self.plan else None,
            'validation': self.validation.to_dict() if self.validation else None,
            'degraded': self.degraded,
            'error': self.error,
        }


def _dedupe(items: List[Item], kind_name: str) -> List[Item]:
    seen = set()
    unique = []
    for item in items:
        if item.item_id in seen:
            report("Generator", f"WARNING: Duplicate {kind_name} item {item.item_id} ignored")
            continue
        seen.add(item.item_id)
        unique.append(item)
    return unique


def _run_kind(
    kind: ItemKind,
    items: List[Item],
    config: TierlistConfig,
    graph_source: Optional[GraphSource],
) -> KindResult:
    result = KindResult(kind=kind.name)
    items = _dedupe(items, kind.name)
    item_ids = {item.item_id for item in items}

    # 1. Tiers
    overrides = load_overrides(config.overrides_for(kind.name), known_ids=item_ids, kind=kind.name)
    result.tiers = assign_tiers(items, kind.tier_strategy, overrides)
    tiered = flatten_tiers(result.tiers)
    tier_map = build_tier_map(result.tiers)
    score_map = build_score_map(result.tiers)

    # 2. Recipe graph (progression mode only)
    if config.enable_progression_alignment:
        try:
            result.graph = fetch_recipe_graph(graph_source, item_ids)
        except GraphSourceError as e:
            result.degraded = str(e)
            report("Generator", f"WARNING: {e}; continuing without progression alignment")

    chain_mode = uses_chain_mode(config.enable_progression_alignment, result.graph)
    result.mode = "chain" if chain_mode else "tag"

    # 3. Groups
    tag_entries = parse_tag_entries(config.tags)
    result.groups = build_groups(
        tiered, result.graph, tier_map, config.enable_progression_alignment,
        descriptors_from_entries(tag_entries),
    )

    # 4. Columns
    result.columns = calculate_layout(
        result.groups, result.graph, tier_map, score_map, group_spacing_for(chain_mode),
    )

    # 5. Grid placement
    mapper = GridPositionMapper.from_spacing(config.spacing())
    result.plan = mapper.place(result.tiers, result.columns, kind.label, tag_entries)
    if not chain_mode:
        result.plan.headers = mapper.place_headers(result.groups, result.columns)

    # 6. Dependency edges between placed items
    if chain_mode:
        builder = DependencyEdgeBuilder()
        result.edges = builder.build(result.graph, result.plan.by_id())
        result.skipped_cycles = builder.skipped_cycles

    # 7. Validation
    result.validation = validate_layout(
        result.groups, item_ids, tier_map, result.graph,
        [(e.dependent, e.dependency) for e in result.edges],
    )
    if not result.validation.valid:
        report("Generator", f"WARNING: {kind.name} layout failed validation: {result.validation.errors[:3]}")

    return result


def generate_kind(
    kind: ItemKind,
    items: List[Item],
    config: Optional[TierlistConfig] = None,
    graph_source: Optional[GraphSource] = None,
) -> KindResult:
    """
    Generate one tierlist.

    Args:
        kind: Item kind policies (score, tier strategy, labels)
        items: Scored items of this kind
        config: Run configuration (defaults if None)
        graph_source: Callable item ids -> recipe graph

    Returns:
        KindResult; skipped=True when there are no items

    Raises:
        GenerationError: any unexpected failure inside the run
    """
    config = config or TierlistConfig()
    report("Generator", f"Generating {kind.name} tierlist "
           f"(progression: {config.enable_progression_alignment})...")

    if not items:
        report("Generator", f"WARNING: No {kind.name} found, skipping tierlist generation")
        return KindResult(kind=kind.name, skipped=True)

    try:
        result = _run_kind(kind, items, config, graph_source)
    except Exception as e:
        log(f"{kind.name} generation failed: {type(e).__name__}: {e}")
        raise GenerationError(kind.name, e) from e

    report("Generator", f"{kind.name} tierlist generated with {len(result.tiers)} tiers, "
           f"{len(result.groups)} groups, {len(result.edges)} edges")
    return result


def generate_tierlists(
    items_by_kind: Dict[str, List[Item]],
    config: Optional[TierlistConfig] = None,
    graph_source: Optional[GraphSource] = None,
    kinds: Optional[Dict[str, ItemKind]] = None,
) -> Dict[str, KindResult]:
    """
    Generate every enabled kind as an isolated run.

    Args:
        items_by_kind: kind name -> items
        config: Run configuration
        graph_source: Shared recipe graph source
        kinds: Kind policies (default: enabled kinds from config)

    Returns:
        kind name -> KindResult (failed kinds carry error text)
    """
    config = config or TierlistConfig()
    kinds = kinds if kinds is not None else kinds_from_config(config)
    results: Dict[str, KindResult] = {}

    for name, kind in kinds.items():
        try:
            results[name] = generate_kind(kind, items_by_kind.get(name, []), config, graph_source)
        except GenerationError as e:
            report("Generator", f"ERROR: {e}")
            results[name] = KindResult(kind=name, error=str(e))

    return results


def _items_for_kind(raw_items: List[Dict[str, Any]], kind: ItemKind, item_filter) -> List[Item]:
    items = []
    for raw in raw_items:
        item_id = raw.get('id') or raw.get('itemId')
        if not item_id:
            continue
        declared = raw.get('kind')
        if declared is not None and declared != kind.name:
            continue

        # A supplied score wins over the attribute-based score model
        has_score = 'score' in raw
        score = raw['score'] if has_score else kind.score(raw)
        has_attribute = has_score or declared is not None or score > 0
        if item_filter.accepts(kind.name, item_id, raw.get('tags', []), has_attribute):
            items.append(Item.from_dict(raw, score=float(score)))
    return items


def _graph_source_from_data(data: Dict[str, Any], config: TierlistConfig) -> Optional[GraphSource]:
    if data.get('graph'):
        return static_graph_source(data['graph'])
    if data.get('recipes'):
        return RecipeGraphSource(data['recipes'], config.get_filter('skipped_recipe_categories', []))
    return None


def generate_from_data(data: Dict[str, Any], config_dict: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """
    Build tierlists from host JSON.

    Args:
        data: {"items": [...], "graph": {...}} or {"items": [...], "recipes": [...]}
        config_dict: Configuration dict from the host

    Returns:
        dict: JSON-ready output {kinds: {name: {...}}, validation, ...}
    """
    config = load_config(config_dict or {})
    raw_items = data.get('items', [])
    log(f"generate_from_data: {len(raw_items)} raw items")

    item_filter = filter_from_config(config.filters)
    log(f"Item filter configured: {item_filter.get_stats()}")

    kinds = kinds_from_config(config)
    items_by_kind = {name: _items_for_kind(raw_items, kind, item_filter) for name, kind in kinds.items()}

    results = generate_tierlists(items_by_kind, config, _graph_source_from_data(data, config), kinds)

    validations = {name: r.validation for name, r in results.items() if r.validation is not None}
    summary = get_validation_summary(validations)

    return {
        'version': '1.0',
        'generatedAt': datetime.now().isoformat(),
        'generator': GENERATOR_NAME,
        'kinds': {name: r.to_dict() for name, r in results.items()},
        'validation': {
            'all_valid': summary['all_valid'],
            'total_items': summary['total_items'],
            'total_errors': summary['total_errors'],
        },
        'config': config.to_dict(),
    }
