"""
Internal clustering quality metrics.

Both scores work directly on cluster lists and use the metric of the
clusters' Location type. Empty clusters carry no points and are left out.
"""

from typing import List, Type

import torch
from torch import Tensor

from ..base.cluster import Cluster
from ..base.location import Location, metric_of


def _non_empty(clusters: List[Cluster]) -> List[Cluster]:
    return [cluster for cluster in clusters if not cluster.is_empty]


def _member_points(cluster: Cluster) -> Tensor:
    return Location.stack([member.location for member in cluster.members])


def _metric(clusters: List[Cluster]) -> Type[Location]:
    return metric_of(cluster.representative for cluster in clusters)


def davies_bouldin_index(clusters: List[Cluster]) -> float:
    """Compute the Davies-Bouldin Index.

    Lower values indicate compact, well separated clusters. For each cluster
    the worst ratio ``(s_i + s_j) / d(r_i, r_j)`` against any other cluster is
    taken, where ``s`` is the mean member distance to the representative.
    Pairs whose representatives coincide have no defined ratio and are
    skipped.

    Args:
        clusters: Finished clusters

    Returns:
        Mean worst-case ratio; 0 with fewer than two non-empty clusters
    """
    clusters = _non_empty(clusters)
    n_clusters = len(clusters)
    if n_clusters < 2:
        return 0.0

    metric = _metric(clusters)

    # Within-cluster scatter
    scatter = torch.zeros(n_clusters, dtype=torch.float64)
    for k, cluster in enumerate(clusters):
        rep = Location.stack([cluster.representative])
        scatter[k] = metric.pairwise_distances(_member_points(cluster), rep).mean()

    # Between-representative distances
    reps = Location.stack([cluster.representative for cluster in clusters])
    rep_distances = metric.pairwise_distances(reps, reps)

    db_values = torch.zeros(n_clusters, dtype=torch.float64)
    for i in range(n_clusters):
        ratios = []
        for j in range(n_clusters):
            if i != j and rep_distances[i, j] > 0:
                ratios.append((scatter[i] + scatter[j]) / rep_distances[i, j])
        if ratios:
            db_values[i] = torch.stack(ratios).max()

    return db_values.mean().item()


def silhouette_score(clusters: List[Cluster]) -> float:
    """Compute the mean Silhouette Coefficient.

    For each point, ``a`` is the mean distance to the other members of its
    cluster (0 for a singleton) and ``b`` the smallest mean distance to the
    members of another cluster (0 if there is none). The point scores
    ``(b - a) / max(a, b)``, or 0 when both are 0.

    Args:
        clusters: Finished clusters

    Returns:
        Mean coefficient in [-1, 1]; 0 when there are no points
    """
    clusters = _non_empty(clusters)
    if not clusters:
        return 0.0

    metric = _metric(clusters)

    sizes = [cluster.size for cluster in clusters]
    labels = torch.repeat_interleave(torch.arange(len(clusters)), torch.tensor(sizes))
    points = torch.cat([_member_points(cluster) for cluster in clusters])
    distances = metric.pairwise_distances(points, points)

    # (n, K) mean distance from each point to each cluster
    sums = torch.zeros(points.shape[0], len(clusters), dtype=torch.float64)
    sums.index_add_(1, labels, distances)
    counts = torch.tensor(sizes, dtype=torch.float64)

    n_points = points.shape[0]
    own = sums[torch.arange(n_points), labels]
    own_counts = counts[labels]
    a = torch.where(own_counts > 1, own / (own_counts - 1).clamp(min=1), torch.zeros_like(own))

    if len(clusters) > 1:
        means = sums / counts.unsqueeze(0)
        means[torch.arange(n_points), labels] = float('inf')
        b = means.min(dim=1).values
    else:
        b = torch.zeros(n_points, dtype=torch.float64)

    denominator = torch.maximum(a, b)
    safe = denominator.clamp(min=torch.finfo(torch.float64).tiny)
    values = torch.where(denominator > 0, (b - a) / safe, torch.zeros_like(a))
    return values.mean().item()
