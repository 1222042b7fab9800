"""
ItemFilter - decides which scanned items belong to a tierlist.

Decision order for one item:
1. skipped items are always excluded
2. manually listed items are included
3. items carrying any configured tag are included
4. otherwise attribute detection decides, but only when it is enabled and
   no tags or items are configured for the kind
"""

from typing import Dict, Iterable, List, Set

from tierlist_builder.core.log import log

NAMESPACE_SEPARATOR = ':'


def _valid_id(value: str) -> bool:
    if not value or value.count(NAMESPACE_SEPARATOR) > 1:
        return False
    return all(part and ' ' not in part for part in value.split(NAMESPACE_SEPARATOR))


class ItemFilter:
    """Per-kind tag, item and skip lists."""

    def __init__(self, use_attribute_detection: bool = True):
        self.use_attribute_detection = use_attribute_detection
        self.tags: Dict[str, Set[str]] = {}
        self.items: Dict[str, Set[str]] = {}
        self.skipped_items: Set[str] = set()

    def _load(self, values: Iterable[str], what: str) -> Set[str]:
        loaded = set()
        for value in values:
            value = str(value).strip()
            if _valid_id(value):
                loaded.add(value)
            else:
                log(f"Invalid {what} '{value}' skipped")
        log(f"Loaded {len(loaded)} {what}s")
        return loaded

    def load_tags(self, kind: str, tags: Iterable[str]) -> None:
        self.tags[kind] = self._load(tags, f"{kind} tag")

    def load_items(self, kind: str, items: Iterable[str]) -> None:
        self.items[kind] = self._load(items, f"{kind} item")

    def load_skipped_items(self, items: Iterable[str]) -> None:
        self.skipped_items = self._load(items, "skipped item")

    def accepts(self, kind: str, item_id: str, item_tags: Iterable[str], has_attribute: bool) -> bool:
        if item_id in self.skipped_items:
            return False

        kind_items = self.items.get(kind, set())
        if item_id in kind_items:
            return True

        kind_tags = self.tags.get(kind, set())
        if kind_tags and any(tag in kind_tags for tag in item_tags):
            return True

        if self.use_attribute_detection and not kind_tags and not kind_items:
            return has_attribute

        return False

    def get_stats(self) -> str:
        parts: List[str] = []
        for kind in sorted(set(self.tags) | set(self.items)):
            parts.append(f"{kind}: {len(self.tags.get(kind, ()))} tags, {len(self.items.get(kind, ()))} items")
        parts.append(f"skipped items: {len(self.skipped_items)}")
        parts.append(f"attribute detection: {'enabled' if self.use_attribute_detection else 'disabled'}")
        return " | ".join(parts)


def filter_from_config(filters: Dict[str, object]) -> ItemFilter:
    """Build an ItemFilter from the config 'filters' dict."""
    item_filter = ItemFilter(bool(filters.get('use_attribute_detection', True)))
    item_filter.load_skipped_items(filters.get('skipped_items', []))
    item_filter.load_tags('weapons', filters.get('weapon_tags', []))
    item_filter.load_items('weapons', filters.get('weapon_items', []))
    item_filter.load_tags('armor', filters.get('armor_tags', []))
    item_filter.load_items('armor', filters.get('armor_items', []))
    return item_filter
