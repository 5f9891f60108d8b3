"""
PAM BUILD initialization for medoid-based clustering.

Greedy O(k n^2) construction from Kaufman & Rousseeuw's Partitioning Around
Medoids: start from the most central point, then keep adding the point that
lowers the total deviation the most.
"""

from typing import List, Optional, Type
import warnings

import torch
from torch import Tensor

from ..base.interfaces import InitializationStrategy
from ..base.location import Location


class PamBuildInit(InitializationStrategy):
    """PAM BUILD medoid selection.

    Algorithm:
    1. First medoid: the point with the smallest total distance to all points
    2. Track each point's distance to its nearest chosen medoid
    3. Add the non-medoid whose deviation change
       ``sum_o min(0, d(c, o) - nearest(o))`` is most negative
    4. Stop at ``n_clusters`` medoids or when no candidate improves
    """

    def initialize(self, points: Tensor, n_clusters: int,
                   distances: Optional[Tensor] = None,
                   metric: Type[Location] = Location,
                   **kwargs) -> List[int]:
        """Select medoid indices.

        Args:
            points: (n, d) data points
            n_clusters: Number of medoids wanted
            distances: Optional precomputed (n, n) distance matrix
            metric: Location class supplying the metric when ``distances``
                is not given

        Returns:
            Medoid indices in selection order; fewer than ``n_clusters``
            when the remaining points cannot lower the total deviation
        """
        n_points = points.shape[0]
        if n_points == 0 or n_clusters < 1:
            return []

        if distances is None:
            distances = metric.pairwise_distances(points, points)

        # Step 1: most central point (first one on ties)
        first = int(torch.argmin(distances.sum(dim=1)))
        medoids = [first]
        is_medoid = torch.zeros(n_points, dtype=torch.bool)
        is_medoid[first] = True

        # Step 2: distance of every point to its nearest medoid
        nearest = distances[first].clone()

        # Step 3: greedy additions
        while len(medoids) < n_clusters:
            # Row c holds the gain of adding candidate c
            deltas = torch.clamp(distances - nearest.unsqueeze(0), max=0.0).sum(dim=1)
            deltas[is_medoid] = 0.0

            best = int(torch.argmin(deltas))
            if not deltas[best] < 0:
                break

            medoids.append(best)
            is_medoid[best] = True

            # Step 4: refresh nearest distances
            nearest = torch.minimum(nearest, distances[best])

        if len(medoids) < n_clusters:
            warnings.warn(
                f"PAM BUILD found only {len(medoids)} of {n_clusters} medoids; "
                "the remaining points duplicate existing medoids",
                RuntimeWarning
            )

        return medoids
