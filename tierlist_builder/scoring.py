"""
Score models, tier strategies and tier labels for each item kind.

An ItemKind bundles the policies one tierlist needs:
- score_fn: raw attribute dict -> scalar score
- tier_strategy: score -> integer tier
- label_fn: tier -> marker label text
"""

from typing import Dict, Any, Callable, Iterable, List, Optional
from dataclasses import dataclass

import numpy as np

from tierlist_builder.config import TierlistConfig, DEFAULT_TIER_MULTIPLIER

ARMOR_TOUGHNESS_WEIGHT = 0.6


# =============================================================================
# SCORE MODELS
# =============================================================================

def _attr(attributes: Dict[str, Any], *names: str) -> float:
    for name in names:
        if name in attributes and attributes[name] is not None:
            return float(attributes[name])
    return 0.0


def weapon_dps(attributes: Dict[str, Any]) -> float:
    """Damage per second: attack damage * attack speed."""
    damage = _attr(attributes, 'damage', 'attackDamage', 'attack_damage')
    speed = _attr(attributes, 'attackSpeed', 'attack_speed')
    return max(0.0, damage * speed)


def armor_score(attributes: Dict[str, Any]) -> float:
    """Armor value plus weighted toughness."""
    armor = _attr(attributes, 'armor')
    toughness = _attr(attributes, 'toughness', 'armorToughness', 'armor_toughness')
    return max(0.0, armor + toughness * ARMOR_TOUGHNESS_WEIGHT)


# =============================================================================
# TIER STRATEGIES
# =============================================================================

class FloorTierStrategy:
    """tier = floor(score / multiplier). Used for damage-like scores."""

    name = "floor"

    def __init__(self, multiplier: float = DEFAULT_TIER_MULTIPLIER):
        if multiplier <= 0:
            raise ValueError(f"tier multiplier must be positive, got {multiplier}")
        self.multiplier = multiplier

    def tier(self, score: float) -> int:
        return self.tiers([score])[0]

    def tiers(self, scores: Iterable[float]) -> List[int]:
        arr = np.asarray(list(scores), dtype=float)
        return np.floor(arr / self.multiplier).astype(int).tolist()

    def __repr__(self):
        return f"FloorTierStrategy({self.multiplier})"


class RoundTierStrategy:
    """tier = round(score), halves rounding up. Used for armor scores."""

    name = "round"

    def tier(self, score: float) -> int:
        return self.tiers([score])[0]

    def tiers(self, scores: Iterable[float]) -> List[int]:
        arr = np.asarray(list(scores), dtype=float)
        return np.floor(arr + 0.5).astype(int).tolist()

    def __repr__(self):
        return "RoundTierStrategy()"


# =============================================================================
# TIER LABELS
# =============================================================================

def dps_range_label(multiplier: float) -> Callable[[int], str]:
    def label(tier: int) -> str:
        return "[%d] DPS: [%.1f-%.1f)" % (tier, tier * multiplier, (tier + 1) * multiplier)
    return label


def armor_label(tier: int) -> str:
    return "[%d] Armor: %d" % (tier, tier)


# =============================================================================
# ITEM KINDS
# =============================================================================

@dataclass
class ItemKind:
    """Policy bundle for one independent tierlist."""

    name: str
    score_fn: Callable[[Dict[str, Any]], float]
    tier_strategy: Any
    label_fn: Callable[[int], str]
    chapter_id: str = ""
    chapter_title: str = ""

    def score(self, attributes: Dict[str, Any]) -> float:
        return self.score_fn(attributes)

    def label(self, tier: int) -> str:
        return self.label_fn(tier)


def weapon_kind(config: Optional[TierlistConfig] = None) -> ItemKind:
    config = config or TierlistConfig()
    return ItemKind(
        name="weapons",
        score_fn=weapon_dps,
        tier_strategy=FloorTierStrategy(config.tier_multiplier),
        label_fn=dps_range_label(config.tier_multiplier),
        chapter_id=config.chapters.get('weapon_chapter_id', ''),
        chapter_title=config.chapters.get('weapon_chapter_title', ''),
    )


def armor_kind(config: Optional[TierlistConfig] = None) -> ItemKind:
    config = config or TierlistConfig()
    return ItemKind(
        name="armor",
        score_fn=armor_score,
        tier_strategy=RoundTierStrategy(),
        label_fn=armor_label,
        chapter_id=config.chapters.get('armor_chapter_id', ''),
        chapter_title=config.chapters.get('armor_chapter_title', ''),
    )


def kinds_from_config(config: TierlistConfig) -> Dict[str, ItemKind]:
    """Enabled item kinds, keyed by name."""
    kinds = {}
    if config.enable_weapon_tierlist:
        kinds['weapons'] = weapon_kind(config)
    if config.enable_armor_tierlist:
        kinds['armor'] = armor_kind(config)
    return kinds
