"""Graph loading and result saving.

Two input formats are understood:

json:
    {"nodes": [{"id": 1}, ...], "edges": [{"source": 1, "target": 2}, ...]}

hif:
    A Hypergraph Interchange Format document restricted to binary edges.
    Every edge must have exactly two node incidences. If the incidences carry
    ``tail``/``head`` directions they give source/target, otherwise incidence
    order does. Nodes only mentioned in incidences are added after the
    declared ones.

Results are written as JSON. Cluster ids and node ids become JSON object
keys, which JSON turns into strings; ``by_node`` is therefore written as a
list of ``[node_id, cluster_id]`` pairs so node id types survive a round trip.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Literal

from graphscan.engine.adjacency import Edge, Node
from graphscan.engine.assignments import ScanResult

FormatType = Literal["json", "hif"]

RESULT_FORMAT_VERSION = "1.0"


def _validate_path(path: str | Path) -> Path:
    """Resolve path to an absolute Path.

    Raises:
        ValueError: If the path contains null bytes
    """
    path_str = str(path)
    if "\x00" in path_str:
        raise ValueError(f"Invalid path (contains null bytes): {path_str!r}")
    return Path(path_str).resolve()


def graph_from_dict(data: dict[str, Any]) -> tuple[list[Node], list[Edge]]:
    """Convert a ``{"nodes": [...], "edges": [...]}`` mapping to engine types.

    Raises:
        ValueError: If a node or edge entry lacks a required field
    """
    if not isinstance(data, dict):
        raise ValueError(f"Graph document must be an object, got: {type(data).__name__}")
    nodes: list[Node] = []
    for i, node_data in enumerate(data.get("nodes", [])):
        if "id" not in node_data:
            raise ValueError(f"Node entry {i} has no 'id' field")
        nodes.append(Node(id=node_data["id"]))
    edges: list[Edge] = []
    for i, edge_data in enumerate(data.get("edges", [])):
        if "source" not in edge_data or "target" not in edge_data:
            raise ValueError(f"Edge entry {i} needs both 'source' and 'target'")
        edges.append(
            Edge(source=edge_data["source"], target=edge_data["target"], id=edge_data.get("id"))
        )
    return nodes, edges


def graph_from_hif(data: dict[str, Any]) -> tuple[list[Node], list[Edge]]:
    """Convert a HIF document with binary edges to engine types.

    Raises:
        ValueError: If any edge does not have exactly two node incidences
    """
    nodes: list[Node] = []
    seen: set[Any] = set()

    def _add_node(node_id: Any) -> None:
        if node_id not in seen:
            seen.add(node_id)
            nodes.append(Node(id=node_id))

    for hif_node in data.get("nodes", []):
        _add_node(hif_node["node"])

    # edge id -> list of (node id, direction), in document order
    incidences: dict[Any, list[tuple[Any, str | None]]] = {}
    for hif_edge in data.get("edges", []):
        incidences.setdefault(hif_edge["edge"], [])
    for hif_inc in data.get("incidences", []):
        node_id = hif_inc["node"]
        _add_node(node_id)
        incidences.setdefault(hif_inc["edge"], []).append((node_id, hif_inc.get("direction")))

    edges: list[Edge] = []
    for edge_id, members in incidences.items():
        if len(members) != 2:
            raise ValueError(
                f"HIF edge {edge_id!r} has {len(members)} node incidences; "
                "only binary edges can be clustered"
            )
        (first, first_dir), (second, second_dir) = members
        if first_dir == "head" or second_dir == "tail":
            first, second = second, first
        edges.append(Edge(source=first, target=second, id=edge_id))
    return nodes, edges


def load_graph(path: str | Path, format: FormatType = "json") -> tuple[list[Node], list[Edge]]:
    """Read a graph file.

    Args:
        path: File to read
        format: "json" for the plain nodes/edges layout, "hif" for HIF

    Returns:
        Tuple of (nodes, edges)

    Raises:
        ValueError: If the format is unknown or the document is malformed
        FileNotFoundError: If the file does not exist
    """
    if format not in ("json", "hif"):
        raise ValueError(f"Unknown graph format: {format!r}")
    resolved = _validate_path(path)
    with open(resolved, encoding="utf-8") as f:
        data = json.load(f)
    if format == "hif":
        return graph_from_hif(data)
    return graph_from_dict(data)


def result_to_dict(result: ScanResult) -> dict[str, Any]:
    """Plain-JSON view of a ScanResult.

    Also accepts a graphscan.models.ClusteringResult, which exposes the same
    four fields.
    """
    return {
        "version": RESULT_FORMAT_VERSION,
        "hubs": list(result.hubs),
        "outliers": list(result.outliers),
        "clusters": [
            {"id": cluster_id, "members": list(members)}
            for cluster_id, members in result.by_cluster.items()
        ],
        "by_node": [[node_id, cluster_id] for node_id, cluster_id in result.by_node.items()],
    }


def save_result(result: ScanResult, path: str | Path) -> Path:
    """Write a clustering result as JSON and return the resolved path."""
    resolved = _validate_path(path)
    resolved.parent.mkdir(parents=True, exist_ok=True)
    with open(resolved, "w", encoding="utf-8") as f:
        json.dump(result_to_dict(result), f, indent=2)
    return resolved
