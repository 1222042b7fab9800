"""
ItemGroup - the partition unit for column layout.

A generation run produces either progression chains or tag groups
(never both), followed by at most one isolated group.
"""

from enum import Enum
from typing import Dict, Any, List, Optional, FrozenSet
from dataclasses import dataclass, field

from tierlist_builder.core.item import Item
from tierlist_builder.tags import TagDescriptor


class GroupType(Enum):
    PROGRESSION_CHAIN = "progression_chain"
    TAG_GROUP = "tag_group"
    ISOLATED = "isolated"


@dataclass
class ItemGroup:
    """A set of items laid out as one contiguous column block."""

    group_type: GroupType
    items: List[Item] = field(default_factory=list)

    # Chain members (PROGRESSION_CHAIN only)
    chain_ids: Optional[FrozenSet[str]] = None

    # Matching tag descriptor (TAG_GROUP only)
    tag_descriptor: Optional[TagDescriptor] = None

    # Filled in by the column layout engine
    column_assignments: Dict[str, int] = field(default_factory=dict)

    @classmethod
    def progression_chain(cls, items: List[Item], chain_ids) -> 'ItemGroup':
        return cls(GroupType.PROGRESSION_CHAIN, list(items), chain_ids=frozenset(chain_ids))

    @classmethod
    def tag_group(cls, items: List[Item], tag_descriptor: TagDescriptor) -> 'ItemGroup':
        return cls(GroupType.TAG_GROUP, list(items), tag_descriptor=tag_descriptor)

    @classmethod
    def isolated(cls, items: List[Item]) -> 'ItemGroup':
        return cls(GroupType.ISOLATED, list(items))

    @property
    def item_ids(self) -> List[str]:
        return [item.item_id for item in self.items]

    def is_empty(self) -> bool:
        return not self.items

    def set_column(self, item_id: str, column: int) -> None:
        self.column_assignments[item_id] = column

    def column_range(self) -> Optional[tuple]:
        """(min, max) assigned column, or None before layout."""
        if not self.column_assignments:
            return None
        columns = self.column_assignments.values()
        return min(columns), max(columns)

    def label(self) -> str:
        if self.group_type == GroupType.TAG_GROUP and self.tag_descriptor is not None:
            return self.tag_descriptor.label
        if self.group_type == GroupType.PROGRESSION_CHAIN:
            return f"chain({len(self.items)})"
        return "isolated"

    def to_dict(self) -> Dict[str, Any]:
        return {
            'type': self.group_type.value,
            'label': self.label(),
            'items': self.item_ids,
            'columns': dict(self.column_assignments),
        }
