from typing import Dict, Iterable, List, Optional

from tierlist_builder.core.item import Item, TieredItem


def make_item(item_id: str, score: float = 1.0, tags: Optional[Iterable[str]] = None) -> Item:
    payload = {"tags": list(tags)} if tags else {}
    return Item(item_id=item_id, score=score, payload=payload)


def make_tiered(rows) -> Dict[int, List[TieredItem]]:
    """(id, score, tier[, tags]) tuples -> tier -> tiered items."""
    tiers: Dict[int, List[TieredItem]] = {}
    for row in rows:
        item_id, score, tier = row[:3]
        tags = row[3] if len(row) > 3 else None
        tiers.setdefault(tier, []).append(TieredItem(item=make_item(item_id, score, tags), tier=tier))
    return {tier: tiers[tier] for tier in sorted(tiers)}


def flat(tiers: Dict[int, List[TieredItem]]) -> List[TieredItem]:
    return [t for tier in sorted(tiers) for t in tiers[tier]]


def tier_map(tiers: Dict[int, List[TieredItem]]) -> Dict[str, int]:
    return {t.item_id: t.tier for t in flat(tiers)}


def score_map(tiers: Dict[int, List[TieredItem]]) -> Dict[str, float]:
    return {t.item_id: t.score for t in flat(tiers)}
