"""
Comparison of the clustering modes and validation scores in autocluster.

This example demonstrates:
1. K-means with the Davies-Bouldin Index
2. K-means with the Silhouette Score
3. K-medoids with the Davies-Bouldin Index
4. K-medoids with the Silhouette Score

Each combination evaluates k = 2..8 concurrently and keeps the best k.
"""

import threading
from time import time

import matplotlib.pyplot as plt
import numpy as np
import torch

# Add parent directory to path
import sys
sys.path.append('..')

from autocluster import (
    ClusteringBuilder, DataPoint, GeoLocation, Location, plot_clustering_result
)


def generate_synthetic_data(n_clusters=4, samples_per_cluster=60, spread=0.8,
                            random_state=42):
    """Gaussian blobs with random centers, shuffled.

    Returns DataPoints whose payload is the true blob index.
    """
    torch.manual_seed(random_state)

    centers = torch.rand(n_clusters, 2) * 20
    data_list = []
    true_labels = []

    for k in range(n_clusters):
        points = centers[k] + torch.randn(samples_per_cluster, 2) * spread
        data_list.append(points)
        true_labels.extend([k] * samples_per_cluster)

    X = torch.cat(data_list, dim=0)
    true_labels = torch.tensor(true_labels)

    perm = torch.randperm(len(X))
    X = X[perm]
    true_labels = true_labels[perm]

    return [DataPoint(Location(x), payload=int(y)) for x, y in zip(X, true_labels)]


def purity(result):
    """Fraction of points whose cluster's majority label matches their own."""
    matched = 0
    total = 0
    for cluster in result.clusters:
        labels = np.array([member.payload for member in cluster.members])
        matched += np.bincount(labels).max()
        total += labels.size
    return matched / max(total, 1)


def evaluate_configuration(data, mode, validation):
    """Run one orchestrator configuration and report the selected result."""
    print(f"\n{'='*50}")
    print(f"Testing {mode} / {validation}")
    print('='*50)

    orchestrator = (ClusteringBuilder()
                    .with_mode(mode)
                    .with_validation(validation)
                    .with_max_iterations(50)
                    .build())

    start_time = time()
    with orchestrator:
        batch = orchestrator.run(data)
        result = batch.result()
    run_time = time() - start_time

    scores = {task.k: task.score for task in batch.tasks if task.is_usable}
    print(f"Run time: {run_time:.3f}s")
    print("Scores: " + ", ".join(f"k={k}: {s:.3f}" for k, s in scores.items()))
    print(f"Selected k: {result.k} ({result.n_clusters} non-empty clusters)")
    print(f"Purity: {purity(result):.3f}")

    return {
        'name': f"{mode}/{validation}",
        'time': run_time,
        'k': result.k,
        'score': result.score,
        'purity': purity(result),
        'result': result
    }


def plot_results(results):
    """Plot the selected clustering of every configuration."""
    fig, axes = plt.subplots(2, 2, figsize=(12, 10))

    for ax, res in zip(axes.ravel(), results):
        plot_clustering_result(res['result'], ax=ax, show_legend=False,
                               title=f"{res['name']}: k={res['k']}")

    plt.tight_layout()
    return fig


class PrintingDelegate:
    """Receives results on the completion thread, like a UI view model would."""

    def __init__(self):
        self.done = threading.Event()

    def did_finish_clustering(self, result):
        print(f"\nDelegate on {threading.current_thread().name}: "
              f"{result.n_clusters} marker groups")
        for cluster in result.clusters:
            rep = cluster.representative
            print(f"  ({rep.latitude:.3f}, {rep.longitude:.3f}): {cluster.size} markers")
        self.done.set()


def geo_markers_demo():
    """Group map markers with K-medoids so every group center is a real marker."""
    rng = np.random.default_rng(0)
    cities = [(48.8566, 2.3522), (50.8503, 4.3517), (52.3676, 4.9041)]
    markers = [
        DataPoint(GeoLocation(lat + dlat, lon + dlon))
        for lat, lon in cities
        for dlat, dlon in rng.normal(scale=0.1, size=(25, 2))
    ]

    delegate = PrintingDelegate()
    orchestrator = (ClusteringBuilder()
                    .with_kmedoids()
                    .with_silhouette()
                    .with_k_range(range(2, 6))
                    .with_delegate(delegate)
                    .build())
    with orchestrator:
        orchestrator.run(markers)
        delegate.done.wait()


def main():
    """Run comparison of all configurations."""
    print("Generating synthetic data...")
    data = generate_synthetic_data()
    print(f"Data: {len(data)} points in 2 dimensions, 4 true clusters")

    results = [
        evaluate_configuration(data, mode, validation)
        for mode in ('kmeans', 'kmedoids')
        for validation in ('dbi', 'silhouette')
    ]

    print(f"\n{'='*50}")
    print("Summary")
    print('='*50)
    print(f"{'Configuration':<22}{'k':>4}{'score':>10}{'purity':>10}{'time':>10}")
    for res in results:
        print(f"{res['name']:<22}{res['k']:>4}{res['score']:>10.3f}"
              f"{res['purity']:>10.3f}{res['time']:>9.3f}s")

    fig = plot_results(results)
    plt.savefig('algorithm_comparison.png', dpi=150)

    geo_markers_demo()

    plt.show()


if __name__ == "__main__":
    main()
