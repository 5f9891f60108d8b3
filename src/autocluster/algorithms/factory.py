"""
Factory for single clustering tasks.
"""

from typing import Optional, Sequence, TypeVar, Union

from ..base.clustering_base import ClusteringAlgorithm
from ..base.data_structures import ClusteringMode, ValidationType
from ..utils.cancellation import CancellationToken
from .kmeans import KMeans
from .kmedoids import DistanceMatrix, KMedoids

T = TypeVar('T')


def create_algorithm(mode: Union[ClusteringMode, str],
                     k: int,
                     data: Sequence[T],
                     max_iterations: int = 20,
                     validation_type: Union[ValidationType, str] = ValidationType.DBI,
                     cancel_token: Optional[CancellationToken] = None,
                     swap_tolerance: float = 1e-6,
                     distance_matrix: Optional[DistanceMatrix] = None,
                     verbose: int = 0) -> ClusteringAlgorithm[T]:
    """Create one clustering task for a fixed ``k``.

    ``distance_matrix`` is only used by K-medoids.

    Example:
        >>> task = create_algorithm('kmedoids', 3, points).run()
        >>> task.to_result().clusters
    """
    mode = ClusteringMode.parse(mode)
    if mode is ClusteringMode.KMEANS:
        return KMeans(
            k, data,
            max_iterations=max_iterations,
            validation_type=validation_type,
            cancel_token=cancel_token,
            verbose=verbose
        )
    return KMedoids(
        k, data,
        max_iterations=max_iterations,
        validation_type=validation_type,
        cancel_token=cancel_token,
        swap_tolerance=swap_tolerance,
        distance_matrix=distance_matrix,
        verbose=verbose
    )
