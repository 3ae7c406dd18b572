"""A directed graph of integer nodes held as adjacency lists."""

from __future__ import annotations

from collections import defaultdict


class Graph:
    """Directed graph; parallel edges are allowed and kept in insertion order."""

    def __init__(self) -> None:
        self._adj: defaultdict[int, list[int]] = defaultdict(list)

    def add_edge(self, from_node: int, to_node: int) -> None:
        """Add a directed edge ``from_node -> to_node``."""
        self._adj[from_node].append(to_node)

    def get_edges(self, node: int) -> list[int]:
        """Return the targets of the edges leaving ``node``."""
        return list(self._adj.get(node, ()))

    def remove_edge(self, from_node: int, to_node: int) -> None:
        """Remove the first directed edge ``from_node -> to_node``, if present."""
        neighbours = self._adj.get(from_node)
        if neighbours and to_node in neighbours:
            neighbours.remove(to_node)