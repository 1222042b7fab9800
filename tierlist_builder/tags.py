"""
Tag entries and tag descriptors for tag-mode grouping.

Config entries look like:
    ["c:tools/melee_weapons,minecraft:swords", "S", "c"]
    ["minecraft:axes", "A", "6", "minecraft:diamond_axe", "Axes"]

The first three fields are tags (comma separated), a label letter and a
color letter; the optional last two name a header item and title.
"""

from typing import Any, Callable, List, Optional, Sequence
from dataclasses import dataclass, field

from tierlist_builder.core.item import Item
from tierlist_builder.core.log import report
from tierlist_builder.errors import ConfigError


@dataclass(frozen=True)
class TagEntry:
    tags: tuple
    label: str
    color: str
    header_item: Optional[str] = None
    header_title: Optional[str] = None

    @classmethod
    def from_list(cls, entry: Sequence[str]) -> 'TagEntry':
        if not isinstance(entry, (list, tuple)) or len(entry) not in (3, 4, 5):
            raise ConfigError(f"tag entry needs [tags, label, color, (header item, header title)], got {entry!r}")

        tags = tuple(t.strip() for t in str(entry[0]).split(',') if t.strip())
        if not tags:
            raise ConfigError(f"tag entry has no tags: {entry!r}")

        label, color = str(entry[1]), str(entry[2])
        if not label or not color:
            raise ConfigError(f"tag entry needs a label and color letter: {entry!r}")

        header_item = str(entry[3]) if len(entry) > 3 and entry[3] else None
        header_title = str(entry[4]) if len(entry) > 4 and entry[4] else None
        return cls(tags=tags, label=label[0], color=color[0],
                   header_item=header_item, header_title=header_title or header_item)

    def has_header(self) -> bool:
        return bool(self.header_item)

    def matches(self, item: Item) -> bool:
        item_tags = set(item.tags)
        return any(tag in item_tags for tag in self.tags)


@dataclass
class TagDescriptor:
    """An ordered grouping rule: match predicates, a label, an optional header."""

    predicates: List[Callable[[Item], bool]]
    label: str
    header: Optional[str] = None
    entry: Optional[TagEntry] = field(default=None, repr=False)

    @classmethod
    def from_entry(cls, entry: TagEntry) -> 'TagDescriptor':
        return cls(predicates=[entry.matches], label=entry.label,
                   header=entry.header_title if entry.has_header() else None, entry=entry)

    def matches(self, item: Item) -> bool:
        return any(predicate(item) for predicate in self.predicates)


def parse_tag_entries(raw_entries: List[Any]) -> List[TagEntry]:
    """Parse config tag entries, skipping malformed ones."""
    entries = []
    for raw in raw_entries:
        try:
            entries.append(TagEntry.from_list(raw))
        except ConfigError as e:
            report("Tags", f"WARNING: Skipping tag entry: {e}")
    return entries


def descriptors_from_entries(entries: List[TagEntry]) -> List[TagDescriptor]:
    return [TagDescriptor.from_entry(entry) for entry in entries]


def tag_index(item: Item, entries: Sequence[TagEntry]) -> int:
    """Index of the first entry matching the item, or -1."""
    for i, entry in enumerate(entries):
        if entry.matches(item):
            return i
    return -1
