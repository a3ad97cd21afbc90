"""Structural similarity over closed neighborhoods.

    sim(u, v) = |S(u) & S(v)| / sqrt(|S(u)| * |S(v)|)

where S(x) is the vertex structure (closed neighborhood) of x. S(x) always
contains x, so the denominator is never zero and the result lies in [0, 1].

References:
- Xu, Yuruk, Feng, Schweiger: "SCAN: A Structural Clustering Algorithm for
  Networks" (KDD 2007)
"""

from __future__ import annotations

import math

from graphscan.engine.adjacency import AdjacencyIndex, NodeId


class SimilarityEngine:
    """Similarity queries over a read-only AdjacencyIndex."""

    def __init__(self, index: AdjacencyIndex) -> None:
        self.index = index

    def vertex_structure(self, node_id: NodeId) -> frozenset[NodeId]:
        return self.index.vertex_structure(node_id)

    def common_neighbors(self, u: NodeId, v: NodeId) -> frozenset[NodeId]:
        return self.index.common_neighbors(u, v)

    def structural_similarity(self, u: NodeId, v: NodeId) -> float:
        """Cosine-like overlap of the closed neighborhoods of u and v.

        Arguments are put in node-list order before evaluating, so
        ``structural_similarity(u, v) == structural_similarity(v, u)`` holds
        exactly, not just up to rounding.

        Raises:
            UnknownNodeError: If u or v is not in the index
        """
        if self.index.position(v) < self.index.position(u):
            u, v = v, u
        su = self.index.vertex_structure(u)
        sv = self.index.vertex_structure(v)
        shared = len(su & sv)
        return shared / math.sqrt(len(su) * len(sv))

    def epsilon_neighborhood(self, node_id: NodeId, epsilon: float) -> frozenset[NodeId]:
        """Members of S(node_id) whose similarity to node_id is >= epsilon.

        node_id itself is always included for epsilon <= 1.
        """
        return frozenset(
            w
            for w in self.index.vertex_structure(node_id)
            if self.structural_similarity(node_id, w) >= epsilon
        )
