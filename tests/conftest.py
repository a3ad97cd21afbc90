"""Shared fixtures for graphscan tests."""

import pytest

from graphscan.engine import AdjacencyIndex, Edge, Node, SimilarityEngine

REFERENCE_EDGES = [
    (0, 1), (0, 4), (0, 5), (0, 6),
    (1, 2), (1, 5),
    (2, 3), (2, 5),
    (3, 4), (3, 5), (3, 6),
    (4, 5), (4, 6),
    (6, 7), (6, 10), (6, 11),
    (7, 8), (7, 11), (7, 12),
    (8, 9), (8, 12),
    (9, 10), (9, 12), (9, 13),
    (10, 11), (10, 12),
]  # fmt: skip


def make_graph(node_ids, edge_pairs):
    """Plain-dict graph in the public input layout."""
    return {
        "nodes": [{"id": n} for n in node_ids],
        "edges": [
            {"id": i, "source": s, "target": t} for i, (s, t) in enumerate(edge_pairs)
        ],
    }


def make_core(node_ids, edge_pairs):
    """Engine Node/Edge lists."""
    return [Node(n) for n in node_ids], [Edge(s, t) for s, t in edge_pairs]


@pytest.fixture()
def triangle_graph():
    """Triangle 1-2-3 plus isolated node 4."""
    return make_graph([1, 2, 3, 4], [(1, 2), (1, 3), (2, 3)])


@pytest.fixture()
def triangle_index():
    nodes, edges = make_core([1, 2, 3, 4], [(1, 2), (1, 3), (2, 3)])
    return AdjacencyIndex(nodes, edges)


@pytest.fixture()
def triangle_engine(triangle_index):
    return SimilarityEngine(triangle_index)


@pytest.fixture()
def reference_graph():
    """14-node graph: a dense block 0-5, a dense block 7-12, node 6 between
    them and node 13 hanging off 9.

    Closed-neighborhood similarities worth knowing:
        sim(4, 6) = 4/sqrt(35) ~ 0.676    sim(6, 11) = 4/sqrt(28) ~ 0.756
        sim(7, 12) = sim(9, 10) = sim(10, 12) = 0.6 exactly
        sim(9, 13) = 2/sqrt(10) ~ 0.632
    """
    return make_graph(list(range(14)), REFERENCE_EDGES)


@pytest.fixture()
def reference_index():
    return AdjacencyIndex(*make_core(list(range(14)), REFERENCE_EDGES))


@pytest.fixture()
def two_cliques_graph():
    """Two 4-cliques {0..3} and {4..7}; node 8 touches 0 and 4; node 9 hangs off 8.

    At epsilon=0.75, mu=3: clusters {0..3} and {4..7}, hub 8, outlier 9.
    """
    edges = []
    for block in ([0, 1, 2, 3], [4, 5, 6, 7]):
        for i, a in enumerate(block):
            for b in block[i + 1 :]:
                edges.append((a, b))
    edges += [(8, 0), (8, 4), (9, 8)]
    return make_graph(list(range(10)), edges)


@pytest.fixture()
def named_graph():
    """String ids: a 4-clique of people, a bridge 'dana', a loner 'eve'."""
    people = ["alice", "bob", "carol", "dave"]
    edges = [(a, b) for i, a in enumerate(people) for b in people[i + 1 :]]
    edges += [("dana", "alice"), ("eve", "dana")]
    return make_graph(people + ["dana", "eve"], edges)
