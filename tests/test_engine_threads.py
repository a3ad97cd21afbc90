"""Thread safety tests for ClusterAssignments.

Many threads race to claim the same nodes; each node must end up claimed
exactly once and the registries must stay consistent.
"""

import threading
from concurrent.futures import ThreadPoolExecutor

from graphscan.engine import AdjacencyIndex, ClusterAssignments, scan_index
from graphscan.exceptions import DoubleClassificationError

from tests.conftest import REFERENCE_EDGES, make_core


class TestClaimRaces:
    def test_concurrent_try_add_claims_each_node_once(self):
        store = ClusterAssignments()
        num_threads = 8
        cluster_ids = [store.new_cluster() for _ in range(num_threads)]
        node_ids = list(range(500))
        wins: dict[int, list[int]] = {cid: [] for cid in cluster_ids}
        errors: list[Exception] = []
        barrier = threading.Barrier(num_threads)

        def claim_all(cid: int):
            try:
                barrier.wait()
                for node_id in node_ids:
                    if store.try_add_to_cluster(cid, node_id):
                        wins[cid].append(node_id)
            except Exception as e:
                errors.append(e)

        threads = [threading.Thread(target=claim_all, args=(cid,)) for cid in cluster_ids]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert not errors, f"Errors during concurrent claims: {errors}"
        claimed = [n for won in wins.values() for n in won]
        assert sorted(claimed) == node_ids
        by_node = store.by_node
        for cid, won in wins.items():
            assert store.by_cluster[cid] == won
            assert all(by_node[n] == cid for n in won)

    def test_concurrent_strict_adds_raise_for_losers(self):
        store = ClusterAssignments()
        cid = store.new_cluster()
        outcomes: list[str] = []
        lock = threading.Lock()

        def claim(kind: str):
            try:
                if kind == "member":
                    store.add_to_cluster(cid, "contested")
                elif kind == "hub":
                    store.add_hub("contested")
                else:
                    store.add_outlier("contested")
                result = "won"
            except DoubleClassificationError:
                result = "lost"
            with lock:
                outcomes.append(result)

        with ThreadPoolExecutor(max_workers=6) as executor:
            list(executor.map(claim, ["member", "hub", "outlier"] * 10))

        assert outcomes.count("won") == 1
        assert outcomes.count("lost") == 29
        total = len(store.by_node) + len(store.hubs) + len(store.outliers)
        assert total == 1

    def test_batch_holds_lock(self):
        store = ClusterAssignments()
        cid = store.new_cluster()
        seen_inside: list[int] = []

        def reader():
            seen_inside.append(len(store.by_cluster[cid]))

        with store.batch():
            store.add_to_cluster(cid, 1)
            t = threading.Thread(target=reader)
            t.start()
            # reader blocks on the lock until the batch ends
            t.join(timeout=0.2)
            assert t.is_alive()
            store.add_to_cluster(cid, 2)
        t.join()
        assert seen_inside == [2]


class TestSharedIndex:
    def test_parallel_runs_over_one_index(self):
        """The index is read-only, so independent runs can share it."""
        index = AdjacencyIndex(*make_core(list(range(14)), REFERENCE_EDGES))
        expected = scan_index(index, 0.7, 2)

        with ThreadPoolExecutor(max_workers=4) as executor:
            results = list(executor.map(lambda _: scan_index(index, 0.7, 2), range(16)))

        assert all(r == expected for r in results)
