"""
Deterministic initialization from the first points of the input.
"""

from typing import List

from torch import Tensor

from ..base.interfaces import InitializationStrategy


class FirstKInit(InitializationStrategy):
    """Use the first ``n_clusters`` points, in input order, as representatives.

    No randomness: identical input always yields identical seeds. Input that
    starts with many near-duplicate points gives poor seeds.
    """

    def initialize(self, points: Tensor, n_clusters: int, **kwargs) -> List[int]:
        """
        Args:
            points: (n, d) data points
            n_clusters: Number of clusters

        Returns:
            ``[0, 1, ..., min(n_clusters, n) - 1]``
        """
        return list(range(min(n_clusters, points.shape[0])))
