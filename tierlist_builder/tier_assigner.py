"""
TierAssigner - buckets scored items into integer tiers.

Manual overrides take precedence over the kind's tier strategy. Override
entries come from config as "namespace:item=tier" strings; bad entries are
logged and skipped, never fatal.
"""

from collections import defaultdict
from typing import Dict, List, Optional, Iterable, Tuple

from thefuzz import process

from tierlist_builder.core.item import Item, TieredItem
from tierlist_builder.core.log import log, report
from tierlist_builder.errors import ConfigError

# Minimum fuzzy score before an unknown override id gets a suggestion
SUGGESTION_MIN_SCORE = 80


def parse_override(entry: str) -> Tuple[str, int]:
    """
    Parse one override string.

    Args:
        entry: Text of the form "namespace:item=tier"

    Returns:
        (item_id, tier)

    Raises:
        ConfigError: malformed entry, non-integer or negative tier
    """
    if not isinstance(entry, str):
        raise ConfigError(f"override must be a string, got {type(entry).__name__}")

    parts = entry.split('=')
    if len(parts) != 2:
        raise ConfigError(f"expected 'namespace:item=tier', got {entry!r}")

    item_id = parts[0].strip()
    if not item_id:
        raise ConfigError(f"empty item id in override {entry!r}")

    try:
        tier = int(parts[1].strip())
    except ValueError:
        raise ConfigError(f"tier is not an integer in override {entry!r}")

    if tier < 0:
        raise ConfigError(f"tier must be non-negative for {item_id} (got {tier})")

    return item_id, tier


def suggest_item_id(item_id: str, known_ids: Iterable[str]) -> Optional[str]:
    """Closest known id to a misspelled one, or None."""
    choices = list(known_ids)
    if not choices:
        return None
    match = process.extractOne(item_id, choices)
    if match and match[1] >= SUGGESTION_MIN_SCORE:
        return match[0]
    return None


def load_overrides(
    entries: Iterable[str],
    known_ids: Optional[Iterable[str]] = None,
    kind: str = "weapon",
) -> Dict[str, int]:
    """
    Build an override table from config strings.

    Args:
        entries: Override strings
        known_ids: If given, ids outside this set are skipped
        kind: Item kind name used in log messages

    Returns:
        Dict mapping item id to tier
    """
    overrides: Dict[str, int] = {}
    known = set(known_ids) if known_ids is not None else None

    for entry in entries:
        try:
            item_id, tier = parse_override(entry)
        except ConfigError as e:
            report("TierAssigner", f"WARNING: Invalid {kind} tier override skipped: {e}")
            continue

        if known is not None and item_id not in known:
            suggestion = suggest_item_id(item_id, known)
            hint = f" (did you mean '{suggestion}'?)" if suggestion else ""
            report("TierAssigner", f"WARNING: Item '{item_id}' not found, skipping {kind} tier override{hint}")
            continue

        overrides[item_id] = tier
        log(f"Loaded {kind} tier override: {item_id} = tier {tier}")

    log(f"Loaded {len(overrides)} {kind} tier overrides")
    return overrides


def assign_tiers(
    items: List[Item],
    strategy,
    overrides: Optional[Dict[str, int]] = None,
) -> Dict[int, List[TieredItem]]:
    """
    Assign every item a tier.

    Args:
        items: Scored items
        strategy: Tier strategy with tiers(scores) (floor or round)
        overrides: Optional item id -> tier table, checked first

    Returns:
        Dict of tier -> items, keys ascending, each list ordered by
        descending score then id
    """
    overrides = overrides or {}
    formula_tiers = strategy.tiers(item.score for item in items)

    buckets: Dict[int, List[TieredItem]] = defaultdict(list)
    overridden = 0
    for item, formula_tier in zip(items, formula_tiers):
        if item.item_id in overrides:
            tier = overrides[item.item_id]
            overridden += 1
        else:
            tier = formula_tier
        buckets[tier].append(TieredItem(item=item, tier=tier, row=0))

    result: Dict[int, List[TieredItem]] = {}
    for tier in sorted(buckets):
        result[tier] = sorted(buckets[tier], key=lambda t: (-t.score, t.item_id))

    report("TierAssigner", f"Assigned {len(items)} items to {len(result)} tiers ({overridden} overridden)")
    return result


def flatten_tiers(tiers: Dict[int, List[TieredItem]]) -> List[TieredItem]:
    """All tiered items in tier order."""
    flat = []
    for tier in sorted(tiers):
        flat.extend(tiers[tier])
    return flat


def build_tier_map(tiers: Dict[int, List[TieredItem]]) -> Dict[str, int]:
    return {t.item_id: t.tier for tier_items in tiers.values() for t in tier_items}


def build_score_map(tiers: Dict[int, List[TieredItem]]) -> Dict[str, float]:
    return {t.item_id: t.score for tier_items in tiers.values() for t in tier_items}
