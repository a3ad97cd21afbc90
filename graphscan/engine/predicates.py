"""Core and reachability predicates built on the similarity engine."""

from __future__ import annotations

from typing import TYPE_CHECKING

from graphscan.engine.adjacency import NodeId
from graphscan.engine.similarity import SimilarityEngine

if TYPE_CHECKING:
    from graphscan.engine.assignments import ClusterAssignments


def is_core(engine: SimilarityEngine, node_id: NodeId, epsilon: float, mu: int) -> bool:
    """True if the epsilon-neighborhood of node_id has at least mu members."""
    return len(engine.epsilon_neighborhood(node_id, epsilon)) >= mu


def direct_structure_reachable(
    engine: SimilarityEngine,
    node_id: NodeId,
    epsilon: float,
    mu: int,
) -> frozenset[NodeId]:
    """Nodes directly structure-reachable from node_id.

    Empty for a non-core. For a core this is its epsilon-neighborhood, which
    includes node_id itself.
    """
    neighborhood = engine.epsilon_neighborhood(node_id, epsilon)
    if len(neighborhood) < mu:
        return frozenset()
    return neighborhood


def is_direct_structure_reachable(
    engine: SimilarityEngine,
    source: NodeId,
    target: NodeId,
    epsilon: float,
    mu: int,
) -> bool:
    """True if target is directly structure-reachable from source."""
    return target in direct_structure_reachable(engine, source, epsilon, mu)


def is_hub(engine: SimilarityEngine, node_id: NodeId, assignments: ClusterAssignments) -> bool:
    """True if the closed neighborhood of node_id touches two or more clusters.

    Neighbors without a cluster are ignored.
    """
    cluster_ids: set[int] = set()
    for neighbor in engine.vertex_structure(node_id):
        cluster_id = assignments.cluster_of(neighbor)
        if cluster_id is not None:
            cluster_ids.add(cluster_id)
            if len(cluster_ids) > 1:
                return True
    return False
