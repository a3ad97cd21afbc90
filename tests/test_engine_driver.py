"""Tests for the SCAN clustering driver."""

import logging

import pytest

from graphscan.engine import (
    AdjacencyIndex,
    ClusterAssignments,
    Edge,
    Node,
    NodeStatus,
    SimilarityEngine,
    scan,
    scan_index,
)
from graphscan.exceptions import InvalidParameterError, UnknownNodeError

from tests.conftest import REFERENCE_EDGES, make_core


def _partition_is_complete(result, node_ids):
    """Every node appears in exactly one of: a cluster, hubs, outliers."""
    seen = []
    for members in result.by_cluster.values():
        seen.extend(members)
    seen.extend(result.hubs)
    seen.extend(result.outliers)
    return sorted(seen, key=str) == sorted(node_ids, key=str)


@pytest.fixture()
def reference_core():
    return make_core(list(range(14)), REFERENCE_EDGES)


class TestReferenceGraph:
    """End-to-end runs on the 14-node reference graph."""

    def test_hubs_and_outlier(self, reference_core):
        result = scan(*reference_core, epsilon=0.7, mu=2)

        assert [set(m) for m in result.by_cluster.values()] == [
            {0, 1, 2, 3, 4, 5},
            {6, 11},
            {8, 9, 12},
        ]
        assert result.hubs == (7, 10)
        assert result.outliers == (13,)

    def test_discovery_order_within_clusters(self, reference_core):
        result = scan(*reference_core, epsilon=0.7, mu=2)
        assert result.by_cluster[0] == (0, 4, 5, 3, 1, 2)
        assert result.by_cluster[1] == (6, 11)
        assert result.by_cluster[2] == (8, 12, 9)

    def test_two_blocks(self, reference_core):
        result = scan(*reference_core, epsilon=0.6, mu=4)

        assert result.by_cluster[0] == (0, 1, 4, 5, 2, 3, 6)
        assert result.by_cluster[1] == (7, 8, 11, 12, 9, 10, 13)
        assert result.hubs == ()
        assert result.outliers == ()

    def test_non_core_is_absorbed_but_not_expanded(self, reference_core):
        # 6 is reached from core 4 but is not itself a core at mu=4,
        # so its neighbor 11 is left for the second cluster
        result = scan(*reference_core, epsilon=0.6, mu=4)
        assert result.by_node[6] == 0
        assert result.by_node[11] == 1

    def test_outliers_only_next_to_one_cluster(self, reference_core):
        result = scan(*reference_core, epsilon=0.7, mu=3)

        assert set(result.by_cluster[0]) == {0, 1, 2, 3, 4, 5}
        assert set(result.by_cluster[1]) == {8, 9, 12}
        assert result.hubs == ()
        assert result.outliers == (6, 7, 10, 11, 13)

    def test_everything_merges_at_low_mu(self, reference_core):
        result = scan(*reference_core, epsilon=0.6, mu=3)
        assert result.cluster_count == 1
        assert set(result.by_cluster[0]) == set(range(14))

    @pytest.mark.parametrize(
        ("epsilon", "mu"),
        [(0.5, 2), (0.6, 3), (0.6, 4), (0.7, 2), (0.7, 3), (0.9, 2), (1.0, 1), (1.0, 10)],
    )
    def test_partition_complete(self, reference_core, epsilon, mu):
        result = scan(*reference_core, epsilon=epsilon, mu=mu)
        assert _partition_is_complete(result, list(range(14)))


class TestHubAndOutlier:
    def test_two_cliques(self, two_cliques_graph):
        index = AdjacencyIndex.from_dict(two_cliques_graph)
        result = scan_index(index, epsilon=0.75, mu=3)

        assert dict(result.by_cluster) == {0: (0, 1, 2, 3), 1: (4, 5, 6, 7)}
        assert result.hubs == (8,)
        assert result.outliers == (9,)
        assert result.status_of(8) is NodeStatus.HUB
        assert result.status_of(9) is NodeStatus.OUTLIER

    def test_no_cores_means_all_outliers(self, triangle_index):
        result = scan_index(triangle_index, epsilon=1.0, mu=4)
        assert result.cluster_count == 0
        assert result.hubs == ()
        assert result.outliers == (1, 2, 3, 4)

    def test_triangle_cluster(self, triangle_index):
        result = scan_index(triangle_index, epsilon=1.0, mu=3)
        assert dict(result.by_cluster) == {0: (1, 2, 3)}
        assert result.outliers == (4,)

    def test_mu_one_makes_singletons(self, triangle_index):
        result = scan_index(triangle_index, epsilon=1.0, mu=1)
        assert dict(result.by_cluster) == {0: (1, 2, 3), 1: (4,)}


class TestTermination:
    """The worklist must drain on graphs full of cycles."""

    def test_ring(self):
        n = 50
        nodes, edges = make_core(list(range(n)), [(i, (i + 1) % n) for i in range(n)])
        # every node: S = {i-1, i, i+1}, sim to each neighbor = 2/3
        result = scan(nodes, edges, epsilon=0.6, mu=2)
        assert result.cluster_count == 1
        assert len(result.by_cluster[0]) == n
        assert len(set(result.by_cluster[0])) == n

    def test_complete_graph(self):
        ids = list(range(12))
        pairs = [(a, b) for a in ids for b in ids if a < b]
        result = scan(*make_core(ids, pairs), epsilon=1.0, mu=2)
        assert dict(result.by_cluster) == {0: tuple(ids)}

    def test_self_loops_and_duplicates(self):
        pairs = [(0, 0), (0, 1), (1, 0), (1, 2), (2, 0), (2, 2), (0, 1)]
        result = scan(*make_core([0, 1, 2], pairs), epsilon=0.9, mu=2)
        assert dict(result.by_cluster) == {0: (0, 1, 2)}


class TestDeterminism:
    def test_repeat_runs_identical(self, reference_core):
        first = scan(*reference_core, epsilon=0.7, mu=2)
        second = scan(*reference_core, epsilon=0.7, mu=2)
        assert first == second

    def test_classification_independent_of_node_order(self, reference_core):
        nodes, edges = reference_core
        forward = scan(nodes, edges, epsilon=0.7, mu=2)
        backward = scan(list(reversed(nodes)), edges, epsilon=0.7, mu=2)

        assert set(forward.hubs) == set(backward.hubs)
        assert set(forward.outliers) == set(backward.outliers)
        assert {frozenset(m) for m in forward.by_cluster.values()} == {
            frozenset(m) for m in backward.by_cluster.values()
        }

    def test_string_ids_stable(self, named_graph):
        index = AdjacencyIndex.from_dict(named_graph)
        result = scan_index(index, epsilon=0.75, mu=3)
        assert dict(result.by_cluster) == {0: ("alice", "bob", "carol", "dave")}
        assert result.hubs == ()
        assert result.outliers == ("dana", "eve")


class TestDirected:
    def test_direction_changes_the_result(self):
        ids = [1, 2, 3, 4]
        pairs = [(1, 2), (1, 3), (2, 3)]
        undirected = scan(*make_core(ids, pairs), epsilon=1.0, mu=3)
        directed = scan(*make_core(ids, pairs), epsilon=1.0, mu=3, use_direction=True)

        assert dict(undirected.by_cluster) == {0: (1, 2, 3)}
        assert directed.cluster_count == 0
        assert directed.outliers == (1, 2, 3, 4)


class TestParameters:
    """Parameters are checked before any work is done."""

    @pytest.mark.parametrize("epsilon", [0, 0.0, -0.1, 1.0001, 2, float("nan"), True])
    def test_bad_epsilon(self, triangle_index, epsilon):
        with pytest.raises(InvalidParameterError, match="epsilon"):
            scan_index(triangle_index, epsilon=epsilon, mu=2)

    @pytest.mark.parametrize("mu", [0, -3, 2.0, True, "3"])
    def test_bad_mu(self, triangle_index, mu):
        with pytest.raises(InvalidParameterError, match="mu"):
            scan_index(triangle_index, epsilon=0.5, mu=mu)

    def test_invalid_parameter_is_value_error(self, triangle_index):
        with pytest.raises(ValueError):
            scan_index(triangle_index, epsilon=0.5, mu=0)

    def test_parameters_checked_before_index_build(self):
        # The edge references an unknown node, but the bad mu is reported first
        with pytest.raises(InvalidParameterError):
            scan([Node(1)], [Edge(1, 2)], epsilon=0.5, mu=0)

    def test_unknown_edge_endpoint(self):
        with pytest.raises(UnknownNodeError):
            scan([Node(1)], [Edge(1, 2)], epsilon=0.5, mu=1)

    def test_boundary_values_accepted(self, triangle_index):
        scan_index(triangle_index, epsilon=1.0, mu=1)
        scan_index(triangle_index, epsilon=1e-9, mu=1)
        scan_index(triangle_index, epsilon=1, mu=1)


class TestLogging:
    def test_summary_logged(self, triangle_index, caplog):
        with caplog.at_level(logging.DEBUG, logger="graphscan.engine.driver"):
            scan_index(triangle_index, epsilon=1.0, mu=3)
        messages = [r.getMessage() for r in caplog.records]
        assert any("SCAN finished: 1 clusters, 0 hubs, 1 outliers" in m for m in messages)
        assert any("Cluster 0 seeded at 1" in m for m in messages)

    def test_cluster_size_logged(self, reference_index, caplog):
        with caplog.at_level(logging.DEBUG, logger="graphscan.engine.driver"):
            scan_index(reference_index, epsilon=0.7, mu=2)
        messages = [r.getMessage() for r in caplog.records]
        assert "Cluster 0 seeded at 0: 6 members" in messages
        assert "Cluster 1 seeded at 6: 2 members" in messages
        assert "Cluster 2 seeded at 8: 3 members" in messages


class TestSinglePass:
    """The expansion loop does no work proportional to earlier clusters."""

    def test_member_snapshot_never_taken(self, monkeypatch):
        def fail(self):
            raise AssertionError("by_cluster snapshot taken during clustering")

        monkeypatch.setattr(ClusterAssignments, "by_cluster", property(fail))
        nodes = [Node(i) for i in range(200)]
        result = scan(nodes, [], epsilon=1.0, mu=1)
        assert result.cluster_count == 200

    def test_neighborhoods_computed_once_per_node(self, reference_core, monkeypatch):
        calls = []
        original = SimilarityEngine.epsilon_neighborhood

        def counting(self, node_id, epsilon):
            calls.append(node_id)
            return original(self, node_id, epsilon)

        monkeypatch.setattr(SimilarityEngine, "epsilon_neighborhood", counting)
        nodes, edges = reference_core
        scan(nodes, edges, epsilon=0.6, mu=3)
        assert sorted(calls) == list(range(14))
