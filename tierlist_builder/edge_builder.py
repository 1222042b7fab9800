"""
DependencyEdgeBuilder - wires "dependent requires ingredient" edges.

Edges are validated before insertion: if the ingredient can already reach
the dependent through accepted edges, the new edge would close a cycle and
is dropped. Which edge of a cycle survives depends on insertion order, so
pairs are always processed in sorted order (outputs, then ingredients).
"""

from typing import Dict, Any, List, Optional, Tuple
from dataclasses import dataclass

import networkx as nx

from tierlist_builder.core.log import log, report
from tierlist_builder.recipe_graph import RecipeGraph


@dataclass(frozen=True)
class DependencyEdge:
    """dependent requires dependency."""

    dependent: str
    dependency: str

    def to_dict(self) -> Dict[str, str]:
        return {'dependent': self.dependent, 'dependency': self.dependency}


class DependencyEdgeBuilder:
    """Accumulates acyclic dependency edges between rendered nodes."""

    def __init__(self):
        self.graph = nx.DiGraph()
        self.edges: List[DependencyEdge] = []
        self.skipped_cycles: List[List[str]] = []

    def find_dependency_path(self, source: str, target: str) -> Optional[List[str]]:
        """Path source -> ... -> target over accepted edges, or None."""
        if source not in self.graph or target not in self.graph:
            return None
        try:
            return nx.shortest_path(self.graph, source, target)
        except nx.NetworkXNoPath:
            return None

    def add_edge(self, dependent: str, dependency: str) -> bool:
        """
        Accept dependent -> dependency unless it would close a cycle.

        Returns:
            True if the edge was accepted
        """
        if dependent == dependency:
            return False
        if self.graph.has_edge(dependent, dependency):
            return True

        path = self.find_dependency_path(dependency, dependent)
        if path is not None:
            cycle = path + [dependency]
            self.skipped_cycles.append(cycle)
            report("EdgeBuilder", f"WARNING: Skipping dependency {dependency} -> {dependent} "
                   f"to avoid circular dependency. Cycle: {' -> '.join(cycle)}")
            return False

        self.graph.add_edge(dependent, dependency)
        self.edges.append(DependencyEdge(dependent, dependency))
        log(f"Added dependency: {dependency} -> {dependent}")
        return True

    def build(self, graph: RecipeGraph, rendered: Dict[str, Any]) -> List[DependencyEdge]:
        """
        Create edges for every recipe pair where both items were rendered.

        Args:
            graph: output -> ingredients
            rendered: item id -> rendered node handle

        Returns:
            Accepted edges in insertion order
        """
        for output in sorted(graph):
            if output not in rendered:
                continue
            for ingredient in sorted(graph[output]):
                if ingredient in rendered:
                    self.add_edge(output, ingredient)

        report("EdgeBuilder", f"Created {len(self.edges)} dependencies "
               f"({len(self.skipped_cycles)} skipped to avoid cycles)")
        return list(self.edges)

    def edge_pairs(self) -> List[Tuple[str, str]]:
        return [(e.dependent, e.dependency) for e in self.edges]


def build_edges(graph: RecipeGraph, rendered: Dict[str, Any]) -> List[DependencyEdge]:
    """Convenience wrapper: fresh builder, build, return edges."""
    return DependencyEdgeBuilder().build(graph, rendered)
