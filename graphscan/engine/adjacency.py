"""Adjacency index: node id -> neighbor set, built once from node and edge lists.

The index is the only structure the similarity engine reads. It is built in
the constructor and never mutated afterwards; every lookup hands out a
frozenset, so the index can be shared read-only.

Identifiers are ``int`` or ``str`` values. They are compared by equality only.
Where a deterministic iteration order is needed, ids are sorted by their
position in the original node list (see ``AdjacencyIndex.ordered``), never by
value, so mixed int/str graphs work the same as homogeneous ones.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any, Union

from graphscan.exceptions import UnknownNodeError

NodeId = Union[int, str]


def check_node_id(value: Any, what: str = "Node id") -> None:
    """Raise TypeError unless value is a usable node identifier."""
    # bool is an int subclass
    if isinstance(value, bool) or not isinstance(value, (int, str)):
        raise TypeError(f"{what} must be an int or a string, got: {type(value).__name__}")


@dataclass(frozen=True)
class Node:
    """A graph vertex.

    Attributes:
        id: Unique identifier (int or str)

    Raises:
        TypeError: If id is not an int or a string
    """

    id: NodeId

    def __post_init__(self) -> None:
        check_node_id(self.id)


@dataclass(frozen=True)
class Edge:
    """A connection from source to target.

    Direction is only honoured when the index is built with
    ``use_direction=True``. The optional ``id`` is carried for the caller's
    benefit and ignored by the algorithm.

    Raises:
        TypeError: If source or target is not an int or a string
    """

    source: NodeId
    target: NodeId
    id: Any = None

    def __post_init__(self) -> None:
        check_node_id(self.source, "Edge source")
        check_node_id(self.target, "Edge target")


class AdjacencyIndex:
    """Mapping from node id to the set of its neighbors.

    With ``use_direction=False`` (the default) every edge contributes a
    neighbor relation in both directions; with ``use_direction=True`` only
    source -> target.

    Duplicate node ids collapse to their first occurrence. Duplicate edges
    are absorbed by set semantics. A self-loop makes the node its own
    neighbor.

    Raises:
        UnknownNodeError: If an edge references a node id missing from nodes
    """

    def __init__(
        self,
        nodes: Iterable[Node],
        edges: Iterable[Edge],
        use_direction: bool = False,
    ) -> None:
        self.use_direction = use_direction
        self._position: dict[NodeId, int] = {}
        build: dict[NodeId, set[NodeId]] = {}

        for node in nodes:
            if node.id in self._position:
                continue
            self._position[node.id] = len(self._position)
            build[node.id] = set()

        edge_count = 0
        for edge in edges:
            if edge.source not in build:
                raise UnknownNodeError(edge.source, "edge source")
            if edge.target not in build:
                raise UnknownNodeError(edge.target, "edge target")
            build[edge.source].add(edge.target)
            if not use_direction:
                build[edge.target].add(edge.source)
            edge_count += 1

        self._edge_count = edge_count
        self._neighbors: dict[NodeId, frozenset[NodeId]] = {
            node_id: frozenset(neighbors) for node_id, neighbors in build.items()
        }
        self._closed: dict[NodeId, frozenset[NodeId]] = {
            node_id: neighbors | {node_id} for node_id, neighbors in self._neighbors.items()
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any], use_direction: bool = False) -> AdjacencyIndex:
        """Build from ``{"nodes": [{"id": ...}], "edges": [{"source": ..., "target": ...}]}``."""
        nodes = [Node(id=n["id"]) for n in data.get("nodes", [])]
        edges = [
            Edge(source=e["source"], target=e["target"], id=e.get("id"))
            for e in data.get("edges", [])
        ]
        return cls(nodes, edges, use_direction=use_direction)

    def __len__(self) -> int:
        return len(self._position)

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._position

    def __repr__(self) -> str:
        return (
            f"AdjacencyIndex(nodes={len(self)}, edges={self._edge_count}, "
            f"use_direction={self.use_direction})"
        )

    @property
    def node_ids(self) -> list[NodeId]:
        """Node ids in original node-list order."""
        return list(self._position)

    @property
    def edge_count(self) -> int:
        """Number of edges consumed at construction (duplicates included)."""
        return self._edge_count

    def has_node(self, node_id: NodeId) -> bool:
        return node_id in self._position

    def position(self, node_id: NodeId) -> int:
        """Index of node_id in the original node list."""
        try:
            return self._position[node_id]
        except KeyError:
            raise UnknownNodeError(node_id) from None

    def ordered(self, node_ids: Iterable[NodeId]) -> list[NodeId]:
        """Return node_ids sorted by their position in the original node list."""
        return sorted(node_ids, key=self.position)

    def neighbors(self, node_id: NodeId) -> frozenset[NodeId]:
        """Open neighborhood of node_id."""
        try:
            return self._neighbors[node_id]
        except KeyError:
            raise UnknownNodeError(node_id) from None

    def degree(self, node_id: NodeId) -> int:
        return len(self.neighbors(node_id))

    def common_neighbors(self, a: NodeId, b: NodeId) -> frozenset[NodeId]:
        """Neighbors shared by a and b (open neighborhoods)."""
        return self.neighbors(a) & self.neighbors(b)

    def vertex_structure(self, node_id: NodeId) -> frozenset[NodeId]:
        """Closed neighborhood: the neighbors of node_id plus node_id itself."""
        try:
            return self._closed[node_id]
        except KeyError:
            raise UnknownNodeError(node_id) from None
