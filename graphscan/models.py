"""Pydantic models for the graphscan public API.

These are thin wrappers over the engine types (graphscan.engine), providing
Pydantic validation and serialization for the client-facing API.
"""

from __future__ import annotations

from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, StrictInt, StrictStr

from graphscan.engine.assignments import NodeStatus

Identifier = Union[StrictInt, StrictStr]


class GraphNode(BaseModel):
    """A vertex of the input graph."""

    id: Identifier


class GraphEdge(BaseModel):
    """A connection between two vertices.

    ``id`` is optional and ignored by the clustering.
    """

    source: Identifier
    target: Identifier
    id: Optional[Any] = None


class Graph(BaseModel):
    """The input graph: an ordered node list and an edge list.

    Node order drives cluster discovery order, so it is preserved as given.
    """

    nodes: list[GraphNode] = Field(default_factory=list)
    edges: list[GraphEdge] = Field(default_factory=list)

    def __repr__(self) -> str:
        return f"Graph(nodes={len(self.nodes)}, edges={len(self.edges)})"


class ScanSettings(BaseModel):
    """Clustering configuration.

    use_direction: If True, an edge only makes its target a neighbor of its
    source. If False (default), edges are symmetric.
    """

    model_config = ConfigDict(frozen=True)

    use_direction: bool = False


class ClusteringStats(BaseModel):
    """Summary counts for a clustering result."""

    node_count: int
    cluster_count: int
    member_count: int
    hub_count: int
    outlier_count: int
    cluster_sizes: dict[int, int]


class ClusteringResult(BaseModel):
    """Result of a SCAN run.

    Every node of the input graph appears in exactly one of: a cluster's
    member list, ``hubs``, ``outliers``.
    """

    model_config = ConfigDict(frozen=True)

    hubs: list[Identifier] = Field(default_factory=list)
    outliers: list[Identifier] = Field(default_factory=list)
    by_cluster: dict[int, list[Identifier]] = Field(default_factory=dict)
    by_node: dict[Identifier, int] = Field(default_factory=dict)

    @property
    def clusters(self) -> list[list[Identifier]]:
        """Member lists ordered by cluster id."""
        return [self.by_cluster[cid] for cid in sorted(self.by_cluster)]

    def status_of(self, node_id: Identifier) -> NodeStatus:
        if node_id in self.by_node:
            return NodeStatus.MEMBER
        if node_id in self.hubs:
            return NodeStatus.HUB
        if node_id in self.outliers:
            return NodeStatus.OUTLIER
        return NodeStatus.UNVISITED

    def stats(self) -> ClusteringStats:
        member_count = len(self.by_node)
        return ClusteringStats(
            node_count=member_count + len(self.hubs) + len(self.outliers),
            cluster_count=len(self.by_cluster),
            member_count=member_count,
            hub_count=len(self.hubs),
            outlier_count=len(self.outliers),
            cluster_sizes={cid: len(members) for cid, members in self.by_cluster.items()},
        )
