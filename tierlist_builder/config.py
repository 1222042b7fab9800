"""
Configuration schema and defaults for the tierlist builder.

Provides validation and default values for all configuration options.
Host configs arrive as JSON with camelCase keys; both camelCase and
snake_case spellings are accepted.
"""

import json
import re
from pathlib import Path
from typing import Dict, Any, List, Union
from dataclasses import dataclass, field, asdict

from tierlist_builder.core.log import log


DEFAULT_TIER_MULTIPLIER = 1.6
ROWS_PER_TIER = 1

DEFAULT_FILTERS = {
    "weapon_tags": [],
    "armor_tags": [],
    "weapon_items": [],
    "armor_items": [],
    "use_attribute_detection": True,
    "skipped_items": [],
    "skipped_recipe_categories": ["emi:anvil_repairing"],
}

DEFAULT_CHAPTERS = {
    "weapon_chapter_id": "weapon_tierlist",
    "weapon_chapter_title": "Weapon Tierlist",
    "armor_chapter_id": "armor_tierlist",
    "armor_chapter_title": "Armor Tierlist",
}

# [tags (comma separated), label letter, color letter]
DEFAULT_TAG_ENTRIES = [
    ["c:tools/melee_weapons,minecraft:swords", "S", "c"],
    ["minecraft:axes", "A", "6"],
    ["c:tools/ranged_weapons,c:tools/bows,c:tools/crossbows", "R", "a"],
    ["c:tools/tridents,c:tools/spears", "T", "b"],
]


def _camel_to_snake(name: str) -> str:
    return re.sub(r'(?<!^)(?=[A-Z])', '_', name).lower()


def _normalize_keys(d: Dict[str, Any]) -> Dict[str, Any]:
    """Convert top-level and nested dict keys from camelCase to snake_case."""
    result = {}
    for key, value in d.items():
        if isinstance(value, dict):
            value = _normalize_keys(value)
        result[_camel_to_snake(key)] = value
    return result


def _as_bool(value: Any, default: bool) -> bool:
    """Host JSON may carry flags as strings ("false", "0", "off")."""
    if value is None:
        return default
    if isinstance(value, str):
        text = value.strip().lower()
        if text in ("false", "0", "no", "off", ""):
            return False
        if text in ("true", "1", "yes", "on"):
            return True
        log(f"Config: unrecognized flag {value!r}, using {default}")
        return default
    return bool(value)


def _clamp(value: Any, low: float, high: float, default: float) -> float:
    try:
        value = float(value)
    except (TypeError, ValueError):
        log(f"Config: non-numeric value {value!r}, using {default}")
        return default
    return max(low, min(high, value))


@dataclass
class TierlistConfig:
    """Complete configuration for one generation invocation."""

    # Read by the host mod only; carried through to_dict for it
    auto_generate_on_start: bool = True

    # Kinds
    enable_weapon_tierlist: bool = True
    enable_armor_tierlist: bool = True

    # Chain mode (true) or tag mode (false)
    enable_progression_alignment: bool = True

    # Tiering
    tier_multiplier: float = DEFAULT_TIER_MULTIPLIER
    rows_per_tier: int = ROWS_PER_TIER

    # Grid spacing
    quest_spacing_x: float = 1.0
    quest_spacing_y: float = 1.0
    tier_spacing_y: float = 1.0

    # Overrides, "namespace:item=tier"
    weapon_tier_overrides: List[str] = field(default_factory=list)
    armor_tier_overrides: List[str] = field(default_factory=list)

    # Item filtering and recipe extraction
    filters: Dict[str, Any] = field(default_factory=lambda: {
        key: list(value) if isinstance(value, list) else value
        for key, value in DEFAULT_FILTERS.items()
    })

    # Tag mode entries
    tags: List[List[str]] = field(default_factory=lambda: [list(e) for e in DEFAULT_TAG_ENTRIES])

    chapters: Dict[str, str] = field(default_factory=lambda: dict(DEFAULT_CHAPTERS))

    # Raw config dictionary (for accessing non-typed fields)
    _raw_config: Dict[str, Any] = field(default_factory=dict)

    def get_raw(self, key: str, default: Any = None) -> Any:
        """Get a raw config value that may not be in the typed schema."""
        return self._raw_config.get(key, default)

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> 'TierlistConfig':
        """Create config from dictionary, using defaults for missing keys."""
        n = _normalize_keys(d)

        # Filters may arrive flat (as in the host config file) or nested
        filters = {k: list(v) if isinstance(v, list) else v for k, v in DEFAULT_FILTERS.items()}
        for key in DEFAULT_FILTERS:
            if key in n:
                filters[key] = n[key]
        if 'skipped_emi_categories' in n:
            filters['skipped_recipe_categories'] = n['skipped_emi_categories']
        nested_filters = n.get('filters') or {}
        if 'skipped_emi_categories' in nested_filters:
            nested_filters = dict(nested_filters)
            nested_filters['skipped_recipe_categories'] = nested_filters.pop('skipped_emi_categories')
        filters.update(nested_filters)

        chapters = dict(DEFAULT_CHAPTERS)
        chapters.update(n.get('chapters') or {})

        cfg = cls(
            auto_generate_on_start=_as_bool(n.get('auto_generate_on_start'), True),
            enable_weapon_tierlist=_as_bool(n.get('enable_weapon_tierlist'), True),
            enable_armor_tierlist=_as_bool(n.get('enable_armor_tierlist'), True),
            enable_progression_alignment=_as_bool(n.get('enable_progression_alignment'), True),
            tier_multiplier=n.get('tier_multiplier', DEFAULT_TIER_MULTIPLIER),
            rows_per_tier=ROWS_PER_TIER,
            quest_spacing_x=n.get('quest_spacing_x', 1.0),
            quest_spacing_y=n.get('quest_spacing_y', 1.0),
            tier_spacing_y=n.get('tier_spacing_y', 1.0),
            weapon_tier_overrides=list(n.get('weapon_tier_overrides', [])),
            armor_tier_overrides=list(n.get('armor_tier_overrides', [])),
            filters=filters,
            tags=[list(e) for e in n.get('tags', DEFAULT_TAG_ENTRIES)],
            chapters=chapters,
            _raw_config=d,
        )

        # Clamp ranges to safe bounds
        cfg.tier_multiplier = _clamp(cfg.tier_multiplier, 0.1, 100.0, DEFAULT_TIER_MULTIPLIER)
        cfg.quest_spacing_x = _clamp(cfg.quest_spacing_x, 1.0, 5.0, 1.0)
        cfg.quest_spacing_y = _clamp(cfg.quest_spacing_y, 1.0, 5.0, 1.0)
        cfg.tier_spacing_y = _clamp(cfg.tier_spacing_y, 1.0, 10.0, 1.0)

        return cfg

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary (excluding raw config)."""
        d = asdict(self)
        d.pop('_raw_config', None)
        return d

    def get_filter(self, key: str, default: Any = None) -> Any:
        return self.filters.get(key, default)

    def overrides_for(self, kind_name: str) -> List[str]:
        """Override strings for 'weapons'/'weapon' or 'armor'."""
        if kind_name.startswith('weapon'):
            return list(self.weapon_tier_overrides)
        return list(self.armor_tier_overrides)

    def spacing(self) -> Dict[str, float]:
        """Spacing values in the shape the grid mapper takes."""
        return {
            'rows_per_tier': self.rows_per_tier,
            'quest_spacing_x': self.quest_spacing_x,
            'quest_spacing_y': self.quest_spacing_y,
            'tier_spacing_y': self.tier_spacing_y,
        }


def load_config(source: Union[None, Dict[str, Any], str, Path] = None) -> TierlistConfig:
    """
    Load configuration from a dictionary or JSON file, or return defaults.

    Args:
        source: None, a configuration dictionary, or a path to a JSON file.
            A missing file yields the defaults.

    Returns:
        TierlistConfig instance
    """
    if source is None:
        return TierlistConfig()
    if isinstance(source, dict):
        return TierlistConfig.from_dict(source)

    path = Path(source)
    if not path.exists():
        log(f"Config file {path} not found, using defaults")
        return TierlistConfig()
    with open(path, 'r', encoding='utf-8') as f:
        data = json.load(f)
    log(f"Loaded config from {path}: {len(data)} keys")
    return TierlistConfig.from_dict(data)


def merge_configs(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """
    Layer one host config over another.

    Keys are normalized to snake_case first, so "tierMultiplier" in the
    override replaces "tier_multiplier" in the base. Nested dicts (filters,
    chapters) merge key by key.
    """
    result = _normalize_keys(base)
    for key, value in _normalize_keys(override).items():
        if isinstance(result.get(key), dict) and isinstance(value, dict):
            result[key] = merge_configs(result[key], value)
        else:
            result[key] = value
    return result
