import threading

import numpy as np
import pytest
import torch

from autocluster import AlgorithmState, CancellationToken, KMedoids, Location
from autocluster.algorithms import DistanceMatrix, MedoidStrategy
from autocluster.base import InitializationStrategy
from autocluster.initialization import FirstKInit, PamBuildInit

from data_gen import make_blobs, make_line, make_points
from utils import assert_partition, total_deviation


def _medoid_values(task):
    return sorted(rep[0] for rep in task.medoids)


def test_build_picks_most_central_then_best_addition():
    points = Location.stack([Location([v]) for v in (0.0, 1.0, 2.0, 10.0)])
    assert PamBuildInit().initialize(points, 2) == [1, 3]


def test_four_collinear_points():
    data = make_line([0.0, 1.0, 2.0, 10.0])
    task = KMedoids(k=2, data=data).run()

    assert task.state is AlgorithmState.SCORED
    assert _medoid_values(task) == [1.0, 10.0]
    groups = sorted(sorted(m.location[0] for m in c.members) for c in task.clusters)
    assert groups == [[0.0, 1.0, 2.0], [10.0]]


def test_swap_phase_repairs_poor_seeding():
    data = make_line([0.0, 1.0, 2.0, 10.0, 11.0, 12.0])
    task = KMedoids(k=2, data=data, initialization=FirstKInit()).run()
    assert _medoid_values(task) == [1.0, 11.0]
    assert total_deviation(task.locations, task.medoid_indices) == pytest.approx(4.0)


def test_medoids_are_members_of_their_own_cluster():
    data, _ = make_blobs([(0, 0), (4, 0), (2, 4)], n_per=12, spread=0.8, seed=7)
    task = KMedoids(k=3, data=data).run()
    for cluster in task.clusters:
        assert any(m.location == cluster.representative for m in cluster.members)
        assert any(cluster.representative == p.location for p in data)


def test_total_deltas_match_brute_force(rng):
    locations = [Location(rng.normal(size=2)) for _ in range(30)]
    strategy = MedoidStrategy(locations)
    medoids = [0, 5, 10]
    proximity = strategy.proximities(medoids)
    candidates = torch.tensor([i for i in range(30) if i not in medoids])

    deltas = strategy.total_deltas(candidates, proximity, len(medoids))
    before = total_deviation(locations, medoids)
    for row, candidate in enumerate(candidates.tolist()):
        for slot in range(len(medoids)):
            swapped = list(medoids)
            swapped[slot] = candidate
            expected = total_deviation(locations, swapped) - before
            assert deltas[row, slot].item() == pytest.approx(expected, abs=1e-9)


def test_result_is_swap_local_optimum():
    data, _ = make_blobs([(0, 0), (3, 3)], n_per=10, spread=1.0, seed=21)
    task = KMedoids(k=2, data=data, max_iterations=50).run()
    assert task.state is AlgorithmState.SCORED

    medoids = task.medoid_indices
    best = total_deviation(task.locations, medoids)
    for candidate in range(len(data)):
        if candidate in medoids:
            continue
        for slot in range(len(medoids)):
            swapped = list(medoids)
            swapped[slot] = candidate
            assert total_deviation(task.locations, swapped) >= best - 1e-6


def test_swap_phase_never_increases_deviation():
    data, _ = make_blobs([(0, 0), (2, 2), (4, 0)], n_per=8, spread=1.2, seed=4)
    task = KMedoids(k=3, data=data).run()
    build = PamBuildInit().initialize(task.points, 3)
    assert total_deviation(task.locations, task.medoid_indices) <= \
        total_deviation(task.locations, build) + 1e-9


def test_fewer_distinct_locations_than_k_warns_and_shrinks():
    data = make_points([(0.0, 0.0)] * 3 + [(5.0, 5.0)] * 2)
    with pytest.warns(RuntimeWarning):
        task = KMedoids(k=3, data=data).run()
    result = task.to_result()
    assert result.n_clusters == 2
    assert_partition(result, data)


def test_single_medoid_is_most_central_point():
    data = make_line([0.0, 4.0, 5.0, 6.0, 20.0])
    task = KMedoids(k=1, data=data).run()
    assert _medoid_values(task) == [5.0]
    assert task.n_iter_ == 1


def test_identical_input_gives_identical_output():
    data, _ = make_blobs([(0, 0), (5, 5)], n_per=15, seed=9)
    a = KMedoids(k=2, data=data).run()
    b = KMedoids(k=2, data=data).run()
    assert a.medoid_indices == b.medoid_indices
    assert a.score == b.score


def test_classification_uses_nearest_medoid(rng):
    locations = [Location(rng.uniform(-5, 5, size=2)) for _ in range(20)]
    strategy = MedoidStrategy(locations)
    reps = strategy.initialize(3)
    labels = strategy.classify(reps).numpy()
    D = np.array([[p.distance(r) for r in reps] for p in locations])
    np.testing.assert_array_equal(labels, D.argmin(axis=1))


@pytest.mark.parametrize("kwargs", [{"swap_tolerance": -1.0}, {"chunk_size": 0}])
def test_invalid_strategy_parameters(kwargs):
    with pytest.raises(ValueError):
        MedoidStrategy([Location([0.0]), Location([1.0])], **kwargs)


class GatedBuild(InitializationStrategy):
    """PAM BUILD that pauses until another thread lets it continue."""

    def __init__(self):
        self.started = threading.Event()
        self.release = threading.Event()

    def initialize(self, points, n_clusters, **kwargs):
        self.started.set()
        assert self.release.wait(10)
        return PamBuildInit().initialize(points, n_clusters, **kwargs)


def test_cancel_from_another_thread_during_run():
    data, _ = make_blobs([(0, 0), (5, 5)], n_per=20, seed=6)
    token = CancellationToken()
    gate = GatedBuild()
    task = KMedoids(k=2, data=data, cancel_token=token, initialization=gate)

    worker = threading.Thread(target=task.run)
    worker.start()
    assert gate.started.wait(10)
    assert task.state is AlgorithmState.RUNNING

    token.cancel()
    gate.release.set()
    worker.join(10)

    assert not worker.is_alive()
    assert task.state is AlgorithmState.CANCELLED
    assert task.score is None
    assert task.clusters == []


def test_swap_phase_stops_when_cancelled():
    token = CancellationToken()
    strategy = MedoidStrategy([Location([v]) for v in (0.0, 1.0, 2.0, 10.0, 11.0, 12.0)],
                              cancel_token=token, initialization=FirstKInit())
    strategy.initialize(2)
    token.cancel()
    # the first-k medoids can be improved, but no swap is made after cancellation
    assert strategy.update_representatives([]) is None
    assert strategy.medoid_indices == [0, 1]


def test_shared_distance_matrix_is_computed_once():
    data, _ = make_blobs([(0, 0), (4, 4)], n_per=8, seed=2)
    shared = DistanceMatrix.for_data(data)
    first = KMedoids(k=2, data=data, distance_matrix=shared).run()
    second = KMedoids(k=3, data=data, distance_matrix=shared).run()
    assert first.strategy.distances is second.strategy.distances
    assert first.medoid_indices == KMedoids(k=2, data=data).run().medoid_indices


def test_distance_matrix_must_cover_the_data():
    shared = DistanceMatrix([Location([0.0]), Location([1.0])])
    with pytest.raises(ValueError):
        MedoidStrategy([Location([0.0]), Location([1.0]), Location([2.0])],
                       distance_matrix=shared)
