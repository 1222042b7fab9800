"""
Disjoint-set forest with path compression and union by rank.
"""

from typing import Dict, Hashable, List, Iterable


class UnionFind:
    """Connectivity over hashable keys. Unknown keys are added on first use."""

    def __init__(self, keys: Iterable[Hashable] = ()):
        self.parent: Dict[Hashable, Hashable] = {}
        self.rank: Dict[Hashable, int] = {}
        for key in keys:
            self.add(key)

    def add(self, key: Hashable) -> None:
        if key not in self.parent:
            self.parent[key] = key
            self.rank[key] = 0

    def find(self, key: Hashable) -> Hashable:
        self.add(key)
        root = key
        while self.parent[root] != root:
            root = self.parent[root]
        # Path compression
        while self.parent[key] != root:
            self.parent[key], key = root, self.parent[key]
        return root

    def union(self, a: Hashable, b: Hashable) -> bool:
        """Merge the sets holding a and b. Returns False if already joined."""
        root_a, root_b = self.find(a), self.find(b)
        if root_a == root_b:
            return False
        if self.rank[root_a] < self.rank[root_b]:
            root_a, root_b = root_b, root_a
        self.parent[root_b] = root_a
        if self.rank[root_a] == self.rank[root_b]:
            self.rank[root_a] += 1
        return True

    def connected(self, a: Hashable, b: Hashable) -> bool:
        return self.find(a) == self.find(b)

    def groups(self) -> List[List[Hashable]]:
        """All sets, each sorted, ordered by their smallest member."""
        by_root: Dict[Hashable, List[Hashable]] = {}
        for key in self.parent:
            by_root.setdefault(self.find(key), []).append(key)
        return sorted((sorted(members) for members in by_root.values()), key=lambda g: g[0])
