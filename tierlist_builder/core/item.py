"""
Item records flowing through the tierlist pipeline.

Each item carries:
- An opaque namespaced identifier (``namespace:path``)
- A non-negative scalar score
- A kind-specific payload (attributes, tags) the core never inspects
"""

from typing import Dict, Any, List, Optional
from dataclasses import dataclass, field

DEFAULT_NAMESPACE = "minecraft"

# Sort and bucket key for items missing from a tier map
UNKNOWN_TIER = 2 ** 31 - 1


@dataclass(frozen=True)
class Item:
    """A scored game object. Immutable once scanned."""

    item_id: str
    score: float = 0.0
    payload: Dict[str, Any] = field(default_factory=dict, compare=False, hash=False)

    def __post_init__(self):
        # Negative tiers are impossible once scores are clamped here
        if self.score < 0:
            object.__setattr__(self, 'score', 0.0)

    @classmethod
    def from_dict(cls, d: Dict[str, Any], score: Optional[float] = None) -> 'Item':
        """Create an Item from a host dictionary ({"id", "score", ...})."""
        item_id = d.get('id') or d.get('itemId') or ''
        if score is None:
            score = float(d.get('score', 0.0))
        payload = {k: v for k, v in d.items() if k not in ('id', 'itemId', 'score')}
        return cls(item_id=item_id, score=float(score), payload=payload)

    @property
    def namespace(self) -> str:
        if ':' in self.item_id:
            return self.item_id.split(':', 1)[0]
        return DEFAULT_NAMESPACE

    @property
    def tags(self) -> List[str]:
        return list(self.payload.get('tags', []))

    def to_dict(self) -> Dict[str, Any]:
        return {'id': self.item_id, 'score': self.score}


@dataclass(frozen=True)
class TieredItem:
    """An item with its tier and row. Row is always 0."""

    item: Item
    tier: int
    row: int = 0

    @property
    def item_id(self) -> str:
        return self.item.item_id

    @property
    def score(self) -> float:
        return self.item.score


@dataclass
class PlacedItem:
    """Final grid record handed to the renderer."""

    item_id: str
    tier: int
    row: int
    column: int
    x: float
    y: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.item_id,
            'tier': self.tier,
            'row': self.row,
            'column': self.column,
            'x': self.x,
            'y': self.y,
        }
