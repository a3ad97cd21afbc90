"""graphscan client — the primary interface for clustering a graph."""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Any, Union

from graphscan.engine.adjacency import AdjacencyIndex
from graphscan.engine.adjacency import Edge as CoreEdge
from graphscan.engine.adjacency import Node as CoreNode
from graphscan.engine.assignments import ScanResult
from graphscan.engine.driver import scan_index, validate_parameters
from graphscan.engine.persistence import FormatType, load_graph
from graphscan.engine.predicates import direct_structure_reachable, is_core
from graphscan.engine.similarity import SimilarityEngine
from graphscan.models import ClusteringResult, Graph, GraphEdge, GraphNode, ScanSettings

GraphLike = Union[Graph, Mapping[str, Any]]
SettingsLike = Union[ScanSettings, Mapping[str, Any], None]

# --- Conversion helpers: engine types <-> pydantic models ---


def _graph_to_core(graph: Graph) -> tuple[list[CoreNode], list[CoreEdge]]:
    nodes = [CoreNode(id=n.id) for n in graph.nodes]
    edges = [CoreEdge(source=e.source, target=e.target, id=e.id) for e in graph.edges]
    return nodes, edges


def _core_to_graph(nodes: list[CoreNode], edges: list[CoreEdge]) -> Graph:
    return Graph(
        nodes=[GraphNode(id=n.id) for n in nodes],
        edges=[GraphEdge(source=e.source, target=e.target, id=e.id) for e in edges],
    )


def _result_to_model(result: ScanResult) -> ClusteringResult:
    return ClusteringResult(
        hubs=list(result.hubs),
        outliers=list(result.outliers),
        by_cluster={cid: list(members) for cid, members in result.by_cluster.items()},
        by_node=dict(result.by_node),
    )


def _coerce_graph(graph: GraphLike) -> Graph:
    if isinstance(graph, Graph):
        return graph
    return Graph.model_validate(graph)


def _coerce_settings(config: SettingsLike) -> ScanSettings:
    if config is None:
        return ScanSettings()
    if isinstance(config, ScanSettings):
        return config
    return ScanSettings.model_validate(config)


def cluster(
    graph: GraphLike,
    epsilon: float,
    mu: int,
    config: SettingsLike = None,
) -> ClusteringResult:
    """Run SCAN over a graph.

    Args:
        graph: A Graph model or a mapping with "nodes" and "edges"
        epsilon: Similarity threshold in (0, 1]
        mu: Minimum epsilon-neighborhood size for a core, >= 1
        config: ScanSettings, a mapping of its fields, or None for defaults

    Returns:
        ClusteringResult with clusters, hubs and outliers

    Raises:
        InvalidParameterError: If epsilon or mu is out of range
        UnknownNodeError: If an edge references a node not in the node list
        pydantic.ValidationError: If graph or config is malformed
    """
    validate_parameters(epsilon, mu)
    return GraphScan(graph, config).cluster(epsilon, mu)


class GraphScan:
    """A graph prepared for structural clustering.

    Builds the adjacency index once; similarity queries and clustering runs
    reuse it.

    Example:
        ```python
        gs = GraphScan({"nodes": [{"id": 1}, {"id": 2}], "edges": [{"source": 1, "target": 2}]})
        gs.structural_similarity(1, 2)   # 1.0
        result = gs.cluster(epsilon=0.7, mu=2)
        ```
    """

    def __init__(self, graph: GraphLike, config: SettingsLike = None) -> None:
        self._graph = _coerce_graph(graph)
        self.settings = _coerce_settings(config)
        nodes, edges = _graph_to_core(self._graph)
        self._index = AdjacencyIndex(nodes, edges, use_direction=self.settings.use_direction)
        self._engine = SimilarityEngine(self._index)

    @classmethod
    def from_file(
        cls,
        path: str | Path,
        format: FormatType = "json",
        config: SettingsLike = None,
    ) -> GraphScan:
        """Load a graph file (see graphscan.engine.persistence for formats)."""
        nodes, edges = load_graph(path, format=format)
        return cls(_core_to_graph(nodes, edges), config)

    def __repr__(self) -> str:
        return (
            f"GraphScan(nodes={len(self._index)}, edges={self._index.edge_count}, "
            f"use_direction={self.settings.use_direction})"
        )

    @property
    def graph(self) -> Graph:
        return self._graph

    @property
    def index(self) -> AdjacencyIndex:
        return self._index

    @property
    def node_ids(self) -> list:
        return self._index.node_ids

    def resolve_id(self, raw: str) -> Any:
        """Map a textual id (e.g. from a command line) to a node id of this graph.

        A string that is itself a node id wins; otherwise a numeric string
        matches the integer id. Unmatched input is returned unchanged, so a
        later lookup raises UnknownNodeError.
        """
        if raw in self._index:
            return raw
        try:
            as_int = int(raw)
        except ValueError:
            return raw
        return as_int if as_int in self._index else raw

    # ========== Similarity ==========

    def neighbors(self, node_id: Any) -> set:
        return set(self._index.neighbors(node_id))

    def common_neighbors(self, a: Any, b: Any) -> set:
        return set(self._index.common_neighbors(a, b))

    def vertex_structure(self, node_id: Any) -> set:
        return set(self._index.vertex_structure(node_id))

    def structural_similarity(self, u: Any, v: Any) -> float:
        return self._engine.structural_similarity(u, v)

    def epsilon_neighborhood(self, node_id: Any, epsilon: float) -> set:
        return set(self._engine.epsilon_neighborhood(node_id, epsilon))

    def is_core(self, node_id: Any, epsilon: float, mu: int) -> bool:
        return is_core(self._engine, node_id, epsilon, mu)

    def direct_structure_reachable(self, node_id: Any, epsilon: float, mu: int) -> set:
        return set(direct_structure_reachable(self._engine, node_id, epsilon, mu))

    # ========== Clustering ==========

    def cluster(self, epsilon: float, mu: int) -> ClusteringResult:
        """Run SCAN with the given parameters."""
        return _result_to_model(scan_index(self._index, epsilon, mu))

    def stats(self) -> dict[str, Any]:
        """Node and edge counts of the prepared graph."""
        return {
            "node_count": len(self._index),
            "edge_count": self._index.edge_count,
            "use_direction": self.settings.use_direction,
        }
