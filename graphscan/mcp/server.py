"""graphscan MCP server — exposes structural clustering as tools for AI agents."""

from __future__ import annotations

import functools
import logging
import os
import sys
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager
from typing import Any

from mcp.server.fastmcp import FastMCP

from graphscan.client import GraphScan
from graphscan.engine.driver import validate_parameters

# All logging goes to stderr; stdout carries JSON-RPC
logging.basicConfig(stream=sys.stderr, level=logging.INFO, format="%(levelname)s: %(message)s")
logger = logging.getLogger("graphscan.mcp")

# ---------------------------------------------------------------------------
# Default graph, loaded once from GRAPHSCAN_GRAPH_PATH if set
# ---------------------------------------------------------------------------

_DEFAULT_GRAPH: GraphScan | None = None


@asynccontextmanager
async def app_lifespan(server: FastMCP) -> AsyncIterator[dict]:
    global _DEFAULT_GRAPH
    graph_path = os.environ.get("GRAPHSCAN_GRAPH_PATH")
    if graph_path:
        graph_format = os.environ.get("GRAPHSCAN_GRAPH_FORMAT", "json")
        logger.info("Loading default graph: %s (%s)", graph_path, graph_format)
        _DEFAULT_GRAPH = GraphScan.from_file(graph_path, format=graph_format)
    try:
        yield {}
    finally:
        _DEFAULT_GRAPH = None


mcp = FastMCP(
    "graphscan",
    instructions=(
        "graphscan runs SCAN structural clustering on a graph. "
        "Pass the graph inline as nodes ([{'id': ...}]) and edges "
        "([{'source': ..., 'target': ...}]), or omit both to use the server's default graph. "
        "epsilon is a similarity threshold in (0, 1]; mu is the minimum epsilon-neighborhood "
        "size (>= 1) for a node to seed a cluster. Results list clusters, hubs "
        "(nodes bridging several clusters) and outliers."
    ),
    lifespan=app_lifespan,
)


def _get_graph(
    nodes: list[dict[str, Any]] | None,
    edges: list[dict[str, Any]] | None,
    use_direction: bool,
) -> GraphScan:
    """Build a GraphScan from inline data, or return the default graph."""
    if nodes is not None:
        return GraphScan(
            {"nodes": nodes, "edges": edges or []}, {"use_direction": use_direction}
        )
    if _DEFAULT_GRAPH is None:
        raise RuntimeError("No graph given and no default graph loaded (set GRAPHSCAN_GRAPH_PATH)")
    if use_direction != _DEFAULT_GRAPH.settings.use_direction:
        return GraphScan(_DEFAULT_GRAPH.graph, {"use_direction": use_direction})
    return _DEFAULT_GRAPH


def _node(gs: GraphScan, node_id: int | str) -> Any:
    """Match a JSON string id such as "7" to an integer node id when needed."""
    return gs.resolve_id(node_id) if isinstance(node_id, str) else node_id


def _safe_tool(fn: Callable[..., dict]) -> Callable[..., dict]:
    @functools.wraps(fn)
    def wrapper(*args: Any, **kwargs: Any) -> dict:
        try:
            return fn(*args, **kwargs)
        except Exception as exc:
            logger.exception("Tool %s failed", fn.__name__)
            return {"error": True, "message": f"{type(exc).__name__}: {exc}"}
    return wrapper


# ===================================================================
# Tools (4)
# ===================================================================


@mcp.tool()
@_safe_tool
def cluster_graph(
    epsilon: float,
    mu: int,
    nodes: list[dict[str, Any]] | None = None,
    edges: list[dict[str, Any]] | None = None,
    use_direction: bool = False,
) -> dict:
    """Cluster a graph into clusters, hubs and outliers with SCAN.

    Args:
        epsilon: Structural similarity threshold in (0, 1].
        mu: Minimum epsilon-neighborhood size for a core node (>= 1).
        nodes: Node list, e.g. [{"id": 1}, {"id": 2}]. Omit to use the default graph.
        edges: Edge list, e.g. [{"source": 1, "target": 2}].
        use_direction: Treat edges as source -> target only.
    """
    gs = _get_graph(nodes, edges, use_direction)
    result = gs.cluster(epsilon, mu)
    return {
        "clusters": [
            {"id": cid, "members": members} for cid, members in result.by_cluster.items()
        ],
        "hubs": result.hubs,
        "outliers": result.outliers,
        "stats": result.stats().model_dump(),
    }


@mcp.tool()
@_safe_tool
def structural_similarity(
    u: int | str,
    v: int | str,
    nodes: list[dict[str, Any]] | None = None,
    edges: list[dict[str, Any]] | None = None,
    use_direction: bool = False,
) -> dict:
    """Structural similarity of two nodes (overlap of closed neighborhoods, 0 to 1).

    Args:
        u: First node id.
        v: Second node id.
        nodes: Node list. Omit to use the default graph.
        edges: Edge list.
        use_direction: Treat edges as source -> target only.
    """
    gs = _get_graph(nodes, edges, use_direction)
    u, v = _node(gs, u), _node(gs, v)
    return {"u": u, "v": v, "similarity": gs.structural_similarity(u, v)}


@mcp.tool()
@_safe_tool
def epsilon_neighborhood(
    node_id: int | str,
    epsilon: float,
    mu: int | None = None,
    nodes: list[dict[str, Any]] | None = None,
    edges: list[dict[str, Any]] | None = None,
    use_direction: bool = False,
) -> dict:
    """Nodes of a node's closed neighborhood with similarity >= epsilon.

    Args:
        node_id: The node to inspect.
        epsilon: Structural similarity threshold in (0, 1].
        mu: If given, also report whether the node is a core at (epsilon, mu).
        nodes: Node list. Omit to use the default graph.
        edges: Edge list.
        use_direction: Treat edges as source -> target only.
    """
    if mu is not None:
        validate_parameters(epsilon, mu)
    gs = _get_graph(nodes, edges, use_direction)
    node_id = _node(gs, node_id)
    members = gs.index.ordered(gs.epsilon_neighborhood(node_id, epsilon))
    payload: dict[str, Any] = {"node_id": node_id, "neighborhood": members}
    if mu is not None:
        payload["is_core"] = gs.is_core(node_id, epsilon, mu)
    return payload


@mcp.tool()
@_safe_tool
def graph_stats(
    nodes: list[dict[str, Any]] | None = None,
    edges: list[dict[str, Any]] | None = None,
    use_direction: bool = False,
) -> dict:
    """Node and edge counts of a graph.

    Args:
        nodes: Node list. Omit to use the default graph.
        edges: Edge list.
        use_direction: Treat edges as source -> target only.
    """
    return _get_graph(nodes, edges, use_direction).stats()


# ===================================================================
# Resources (1)
# ===================================================================


@mcp.resource("graphscan://about")
def about_resource() -> str:
    """SCAN parameter and output reference."""
    return (
        "# graphscan\n\n"
        "## Structural similarity\n"
        "sim(u, v) = |S(u) & S(v)| / sqrt(|S(u)| * |S(v)|), where S(x) is x plus its neighbors.\n\n"
        "## Parameters\n"
        "- `epsilon`: similarity threshold in (0, 1]; ties count as similar\n"
        "- `mu`: a node is a core when at least `mu` nodes of S(x) (x included) "
        "have similarity >= epsilon\n\n"
        "## Output\n"
        "- `clusters`: grown from cores through structure-reachable nodes\n"
        "- `hubs`: non-members whose neighborhood touches two or more clusters\n"
        "- `outliers`: every other non-member\n"
    )


# ===================================================================
# Entry point
# ===================================================================


def run_server() -> None:
    """Run the graphscan MCP server over stdio."""
    mcp.run(transport="stdio")
