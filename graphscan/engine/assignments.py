"""Cluster assignment store.

Records, for one clustering run, which cluster each member node belongs to
and which nodes ended up as hubs or outliers.

Invariant:
    A node is classified exactly once. Every mutation goes through ``_claim``,
    which checks the single classified set and raises
    DoubleClassificationError before touching any registry.

Thread Safety:
    ``_claim`` and the registry update that follows it run under an internal
    RLock, so check-unassigned-then-assign is indivisible. Concurrent writers
    can never claim the same node twice.
"""

from __future__ import annotations

import threading
from collections.abc import Generator, Mapping
from contextlib import contextmanager
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any

from graphscan.engine.adjacency import NodeId
from graphscan.exceptions import DoubleClassificationError


class NodeStatus(str, Enum):
    """Per-node state during and after a clustering run."""

    UNVISITED = "unvisited"
    MEMBER = "member"
    HUB = "hub"
    OUTLIER = "outlier"


@dataclass(frozen=True)
class ScanResult:
    """Immutable outcome of a clustering run.

    Attributes:
        hubs: Non-members touching two or more clusters, in classification order
        outliers: Remaining non-members, in classification order
        by_cluster: Cluster id (0-based, dense) -> members in discovery order
        by_node: Member node id -> cluster id
    """

    hubs: tuple[NodeId, ...] = ()
    outliers: tuple[NodeId, ...] = ()
    by_cluster: Mapping[int, tuple[NodeId, ...]] = field(
        default_factory=lambda: MappingProxyType({})
    )
    by_node: Mapping[NodeId, int] = field(default_factory=lambda: MappingProxyType({}))

    # Mapping fields cannot be hashed
    __hash__ = None  # type: ignore[assignment]

    @property
    def cluster_count(self) -> int:
        return len(self.by_cluster)

    def status_of(self, node_id: NodeId) -> NodeStatus:
        if node_id in self.by_node:
            return NodeStatus.MEMBER
        if node_id in self.hubs:
            return NodeStatus.HUB
        if node_id in self.outliers:
            return NodeStatus.OUTLIER
        return NodeStatus.UNVISITED


class ClusterAssignments:
    """Mutable registry of cluster members, hubs and outliers for one run."""

    def __init__(self) -> None:
        self._by_cluster: dict[int, list[NodeId]] = {}
        self._by_node: dict[NodeId, int] = {}
        self._status: dict[NodeId, NodeStatus] = {}
        self._hubs: list[NodeId] = []
        self._outliers: list[NodeId] = []
        self._lock = threading.RLock()

    def __getstate__(self) -> dict[str, Any]:
        """Support for pickle/deepcopy - exclude the lock."""
        state = self.__dict__.copy()
        del state["_lock"]
        return state

    def __setstate__(self, state: dict[str, Any]) -> None:
        self.__dict__.update(state)
        self._lock = threading.RLock()

    @contextmanager
    def batch(self) -> Generator[None, None, None]:
        """Hold the lock across several operations.

        Other threads see either none or all of the changes made inside the
        block. There is no rollback: if an exception escapes, earlier changes
        persist.
        """
        with self._lock:
            yield

    # ========== Classification ==========

    def _claim(self, node_id: NodeId, status: NodeStatus) -> None:
        """Mark node_id as classified. Caller must hold the lock."""
        current = self._status.get(node_id)
        if current is not None:
            raise DoubleClassificationError(node_id, current.value, status.value)
        self._status[node_id] = status

    def new_cluster(self) -> int:
        """Allocate the next cluster id (0-based, dense)."""
        with self._lock:
            cluster_id = len(self._by_cluster)
            self._by_cluster[cluster_id] = []
            return cluster_id

    def add_to_cluster(self, cluster_id: int, node_id: NodeId) -> None:
        """Make node_id a member of cluster_id.

        Raises:
            ValueError: If cluster_id was never allocated
            DoubleClassificationError: If node_id is already classified
        """
        with self._lock:
            if cluster_id not in self._by_cluster:
                raise ValueError(f"Unknown cluster id: {cluster_id!r}")
            self._claim(node_id, NodeStatus.MEMBER)
            self._by_cluster[cluster_id].append(node_id)
            self._by_node[node_id] = cluster_id

    def try_add_to_cluster(self, cluster_id: int, node_id: NodeId) -> bool:
        """Claim node_id for cluster_id if it is still unclassified.

        Returns:
            True if the node was added, False if it was already classified
        """
        with self._lock:
            if node_id in self._status:
                return False
            self.add_to_cluster(cluster_id, node_id)
            return True

    def add_hub(self, node_id: NodeId) -> None:
        with self._lock:
            self._claim(node_id, NodeStatus.HUB)
            self._hubs.append(node_id)

    def add_outlier(self, node_id: NodeId) -> None:
        with self._lock:
            self._claim(node_id, NodeStatus.OUTLIER)
            self._outliers.append(node_id)

    # ========== Queries ==========

    def cluster_of(self, node_id: NodeId) -> int | None:
        """Cluster id of node_id, or None if it is not a cluster member."""
        with self._lock:
            return self._by_node.get(node_id)

    def status_of(self, node_id: NodeId) -> NodeStatus:
        with self._lock:
            return self._status.get(node_id, NodeStatus.UNVISITED)

    def is_classified(self, node_id: NodeId) -> bool:
        with self._lock:
            return node_id in self._status

    @property
    def cluster_count(self) -> int:
        with self._lock:
            return len(self._by_cluster)

    @property
    def hubs(self) -> list[NodeId]:
        with self._lock:
            return list(self._hubs)

    @property
    def outliers(self) -> list[NodeId]:
        with self._lock:
            return list(self._outliers)

    @property
    def by_cluster(self) -> dict[int, list[NodeId]]:
        with self._lock:
            return {cid: list(members) for cid, members in self._by_cluster.items()}

    @property
    def by_node(self) -> dict[NodeId, int]:
        with self._lock:
            return dict(self._by_node)

    def freeze(self) -> ScanResult:
        """Snapshot the registries into an immutable ScanResult."""
        with self._lock:
            return ScanResult(
                hubs=tuple(self._hubs),
                outliers=tuple(self._outliers),
                by_cluster=MappingProxyType(
                    {cid: tuple(members) for cid, members in self._by_cluster.items()}
                ),
                by_node=MappingProxyType(dict(self._by_node)),
            )
