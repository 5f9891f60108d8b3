import pytest

from autocluster import AlgorithmState, ClusteringOrchestrator

from utils import time_block
from data_gen import make_blobs


def _payload_groups(result):
    return [tuple(m.payload for m in cluster.members) for cluster in result.clusters]


@pytest.mark.parametrize("mode", ["kmeans", "kmedoids"])
def test_i3_two_runs_same_results(seed_all, mode):
    """
    Identical input and parameters give identical k, score, representatives
    and membership, independent of worker scheduling.
    """
    data, _ = make_blobs([(0, 0), (3, 1), (1, 4), (5, 5)], n_per=25, spread=0.9, seed=seed_all)

    results = []
    for workers in (1, 4):
        with ClusteringOrchestrator(mode=mode, max_workers=workers) as orch:
            with time_block("I3-" + mode, meta={"n": len(data), "workers": workers}):
                results.append(orch.evaluate(data, timeout=60))

    first, second = results
    assert first.k == second.k
    assert first.score == second.score
    assert first.representatives == second.representatives
    assert _payload_groups(first) == _payload_groups(second)


def test_i3_cancel_large_batch_delivers_nothing(seed_all):
    """
    Cancelling right after submission resolves the batch to None, never
    calls the delegate, and leaves no task running.
    """

    class Delegate:
        calls = 0

        def did_finish_clustering(self, result):
            Delegate.calls += 1

    delegate = Delegate()
    data, _ = make_blobs([(0, 0), (4, 4), (8, 0)], n_per=400, spread=1.5, seed=seed_all)

    with ClusteringOrchestrator(mode='kmedoids', delegate=delegate, max_workers=2) as orch:
        batch = orch.run(data)
        batch.cancel()
        assert batch.result(timeout=120) is None
        assert all(task.state in (AlgorithmState.INITIALIZED, AlgorithmState.CANCELLED,
                                  AlgorithmState.SCORED)
                   for task in batch.tasks)
        assert all(task.state is not AlgorithmState.SCORED or task.score is not None
                   for task in batch.tasks)

    assert Delegate.calls == 0
