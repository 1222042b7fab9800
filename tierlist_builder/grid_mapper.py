"""
GridPositionMapper - converts (tier index, row, column) into x/y coordinates.

tier index is the position of a tier among the tiers that actually hold
items, so sparse tier numbers leave no vertical gaps.
"""

from typing import Dict, Any, List, Optional, Sequence
from dataclasses import dataclass, field

from tierlist_builder.core.group import ItemGroup, GroupType
from tierlist_builder.core.item import TieredItem, PlacedItem
from tierlist_builder.tags import TagEntry, tag_index

# Tier markers sit left of column 0
TIER_MARKER_X = -2.0
# Tag group headers sit above the first row
HEADER_Y = -4.0


def tier_base_y(tier_index: int, rows_per_tier: int, quest_spacing_y: float, tier_spacing_y: float) -> float:
    return tier_index * (rows_per_tier * quest_spacing_y + tier_spacing_y)


def item_y(base_y: float, row: int, quest_spacing_y: float) -> float:
    return base_y + row * quest_spacing_y


def item_x(column: int, quest_spacing_x: float) -> float:
    return column * quest_spacing_x


def tier_indices(tiers: Sequence[int]) -> Dict[int, int]:
    """tier number -> sequential index among the given (non-empty) tiers."""
    return {tier: i for i, tier in enumerate(sorted(set(tiers)))}


@dataclass
class TierMarker:
    tier: int
    label: str
    x: float
    y: float

    def to_dict(self) -> Dict[str, Any]:
        return {'tier': self.tier, 'label': self.label, 'x': self.x, 'y': self.y}


@dataclass
class GroupHeader:
    label: str
    item: Optional[str]
    title: Optional[str]
    x: float
    y: float
    columns: tuple

    def to_dict(self) -> Dict[str, Any]:
        return {
            'label': self.label,
            'item': self.item,
            'title': self.title,
            'x': self.x,
            'y': self.y,
            'columns': list(self.columns),
        }


@dataclass
class RenderPlan:
    """Everything the external renderer needs for one tierlist."""

    items: List[PlacedItem] = field(default_factory=list)
    markers: List[TierMarker] = field(default_factory=list)
    headers: List[GroupHeader] = field(default_factory=list)
    row_backgrounds: List[Dict[str, Any]] = field(default_factory=list)

    def by_id(self) -> Dict[str, PlacedItem]:
        return {p.item_id: p for p in self.items}

    def to_dict(self) -> Dict[str, Any]:
        return {
            'items': [p.to_dict() for p in self.items],
            'markers': [m.to_dict() for m in self.markers],
            'headers': [h.to_dict() for h in self.headers],
            'rows': list(self.row_backgrounds),
        }


class GridPositionMapper:
    """Places tiered items on the grid using configured spacing."""

    def __init__(
        self,
        rows_per_tier: int = 1,
        quest_spacing_x: float = 1.0,
        quest_spacing_y: float = 1.0,
        tier_spacing_y: float = 1.0,
    ):
        self.rows_per_tier = rows_per_tier
        self.quest_spacing_x = quest_spacing_x
        self.quest_spacing_y = quest_spacing_y
        self.tier_spacing_y = tier_spacing_y

    @classmethod
    def from_spacing(cls, spacing: Dict[str, Any]) -> 'GridPositionMapper':
        return cls(**spacing)

    def tier_base_y(self, tier_index: int) -> float:
        return tier_base_y(tier_index, self.rows_per_tier, self.quest_spacing_y, self.tier_spacing_y)

    def item_y(self, base_y: float, row: int) -> float:
        return item_y(base_y, row, self.quest_spacing_y)

    def item_x(self, column: int) -> float:
        return item_x(column, self.quest_spacing_x)

    def _order_row(
        self,
        row_items: List[TieredItem],
        columns: Dict[str, int],
        tag_entries: Sequence[TagEntry],
    ) -> List[TieredItem]:
        """Assigned column first (unassigned = -1), then tag order, then weaker first."""
        if columns:
            return sorted(row_items, key=lambda t: (
                columns.get(t.item_id, -1),
                tag_index(t.item, tag_entries),
                t.score,
                t.item_id,
            ))
        return sorted(row_items, key=lambda t: (tag_index(t.item, tag_entries), t.score, t.item_id))

    def place(
        self,
        tiers: Dict[int, List[TieredItem]],
        columns: Dict[str, int],
        label_fn=None,
        tag_entries: Sequence[TagEntry] = (),
    ) -> RenderPlan:
        """
        Build the render plan for one tierlist.

        Args:
            tiers: tier -> tiered items
            columns: item id -> assigned column
            label_fn: tier -> marker label
            tag_entries: Config tag entries (row ordering)

        Returns:
            RenderPlan with items, tier markers and row backgrounds
        """
        plan = RenderPlan()
        indices = tier_indices([t for t, items in tiers.items() if items])

        for tier, index in sorted(indices.items(), key=lambda kv: kv[1]):
            base_y = self.tier_base_y(index)
            label = label_fn(tier) if label_fn else str(tier)
            plan.markers.append(TierMarker(tier=tier, label=label, x=TIER_MARKER_X, y=base_y))

            rows: Dict[int, List[TieredItem]] = {}
            for t in tiers[tier]:
                rows.setdefault(t.row, []).append(t)

            for row in range(self.rows_per_tier):
                row_items = rows.get(row)
                if not row_items:
                    continue
                y = self.item_y(base_y, row)
                next_auto_column = 0
                for t in self._order_row(row_items, columns, tag_entries):
                    if t.item_id in columns:
                        column = columns[t.item_id]
                        next_auto_column = max(next_auto_column, column + 1)
                    else:
                        column = next_auto_column
                        next_auto_column += 1
                    plan.items.append(PlacedItem(
                        item_id=t.item_id, tier=tier, row=row, column=column,
                        x=self.item_x(column), y=y,
                    ))

                global_row = index * self.rows_per_tier + row
                plan.row_backgrounds.append({
                    'row': global_row,
                    'shade': 'light' if global_row % 2 == 0 else 'dark',
                    'x': TIER_MARKER_X,
                    'y': y,
                })

        return plan

    def place_headers(self, groups: List[ItemGroup], columns: Dict[str, int]) -> List[GroupHeader]:
        """Headers centered over tag groups whose entry names a header item."""
        headers = []
        for group in groups:
            if group.group_type != GroupType.TAG_GROUP or group.tag_descriptor is None:
                continue
            entry = group.tag_descriptor.entry
            if entry is None or not entry.has_header():
                continue

            used = [columns[i] for i in group.item_ids if i in columns]
            if not used:
                continue
            min_col, max_col = min(used), max(used)
            center = (min_col + max_col) / 2.0
            headers.append(GroupHeader(
                label=entry.label,
                item=entry.header_item,
                title=entry.header_title,
                x=center * self.quest_spacing_x,
                y=HEADER_Y,
                columns=(min_col, max_col),
            ))
        return headers
