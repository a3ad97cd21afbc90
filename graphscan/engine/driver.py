"""SCAN clustering driver.

Walks the nodes in node-list order. Each unclassified core seeds a new
cluster, which is grown breadth-first through a FIFO worklist of cores:
every node directly structure-reachable from a popped core joins the cluster
if it is still unassigned. Non-cores that no expansion reaches are
classified at the end as hubs (closed neighborhood touches two or more
clusters) or outliers.

Termination:
    A node enters the worklist at most once per run (tracked by ``enqueued``),
    so the number of pops is bounded by the node count even on cyclic graphs.

Determinism:
    Sets are always iterated through ``AdjacencyIndex.ordered``, so for a
    fixed node list the result is identical across runs and hash seeds.
"""

from __future__ import annotations

import logging
import numbers
from collections import deque
from collections.abc import Iterable

from graphscan.engine.adjacency import AdjacencyIndex, Edge, Node, NodeId
from graphscan.engine.assignments import ClusterAssignments, ScanResult
from graphscan.engine.predicates import is_hub
from graphscan.engine.similarity import SimilarityEngine
from graphscan.exceptions import InvalidParameterError

logger = logging.getLogger(__name__)


def validate_parameters(epsilon: float, mu: int) -> None:
    """Reject epsilon outside (0, 1] and mu below 1.

    Raises:
        InvalidParameterError: If either parameter is out of range or mistyped
    """
    if isinstance(epsilon, bool) or not isinstance(epsilon, numbers.Real):
        raise InvalidParameterError(f"epsilon must be a real number, got: {type(epsilon).__name__}")
    # NaN fails both comparisons and lands here too
    if not 0.0 < epsilon <= 1.0:
        raise InvalidParameterError(f"epsilon must be in (0, 1], got: {epsilon}")
    if isinstance(mu, bool) or not isinstance(mu, numbers.Integral):
        raise InvalidParameterError(f"mu must be an integer, got: {type(mu).__name__}")
    if mu < 1:
        raise InvalidParameterError(f"mu must be >= 1, got: {mu}")


def scan(
    nodes: Iterable[Node],
    edges: Iterable[Edge],
    epsilon: float,
    mu: int,
    use_direction: bool = False,
) -> ScanResult:
    """Cluster a graph given as engine Node/Edge lists.

    Parameters are validated before the index is built.

    Raises:
        InvalidParameterError: If epsilon or mu is out of range
        UnknownNodeError: If an edge references a node not in nodes
    """
    validate_parameters(epsilon, mu)
    index = AdjacencyIndex(nodes, edges, use_direction=use_direction)
    return scan_index(index, epsilon, mu)


def scan_index(index: AdjacencyIndex, epsilon: float, mu: int) -> ScanResult:
    """Cluster a prebuilt AdjacencyIndex."""
    validate_parameters(epsilon, mu)
    engine = SimilarityEngine(index)
    assignments = ClusterAssignments()

    neighborhoods = {v: engine.epsilon_neighborhood(v, epsilon) for v in index.node_ids}
    cores = {v for v, members in neighborhoods.items() if len(members) >= mu}
    logger.debug(
        "Found %d core nodes out of %d (epsilon=%s, mu=%s)",
        len(cores),
        len(index),
        epsilon,
        mu,
    )

    # Insertion-ordered set of nodes not (yet) in any cluster
    candidates: dict[NodeId, None] = {}

    for v in index.node_ids:
        if assignments.cluster_of(v) is not None:
            continue
        if v not in cores:
            candidates[v] = None
            continue

        cluster_id = assignments.new_cluster()
        seed = index.ordered(neighborhoods[v])
        worklist: deque[NodeId] = deque(seed)
        enqueued: set[NodeId] = set(seed)
        size = 0

        while worklist:
            y = worklist.popleft()
            # A non-core seed directly reaches nothing
            reachable = neighborhoods[y] if y in cores else ()
            for x in index.ordered(reachable):
                if not assignments.try_add_to_cluster(cluster_id, x):
                    continue
                size += 1
                candidates.pop(x, None)
                if x in cores and x not in enqueued:
                    enqueued.add(x)
                    worklist.append(x)

        logger.debug(
            "Cluster %d seeded at %r: %d members",
            cluster_id,
            v,
            size,
        )

    for v in candidates:
        if is_hub(engine, v, assignments):
            assignments.add_hub(v)
        else:
            assignments.add_outlier(v)

    result = assignments.freeze()
    logger.info(
        "SCAN finished: %d clusters, %d hubs, %d outliers over %d nodes",
        result.cluster_count,
        len(result.hubs),
        len(result.outliers),
        len(index),
    )
    return result
