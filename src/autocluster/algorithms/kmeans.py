"""
K-means clustering algorithm.

Lloyd's iteration over centroids, built on the shared ClusteringAlgorithm
loop. Seeding is deterministic (first k points), so identical input always
gives identical clusters.
"""

from typing import List, Optional, Sequence, Tuple, Type, TypeVar, Union

import torch
from torch import Tensor

from ..base.cluster import Cluster
from ..base.clustering_base import ClusteringAlgorithm
from ..base.data_structures import ClusteringMode, ValidationType
from ..base.interfaces import InitializationStrategy, RepresentativeStrategy
from ..base.location import Location
from ..initialization.first_k import FirstKInit
from ..utils.cancellation import CancellationToken
from ..validation import get_validation_method

T = TypeVar('T')


class CentroidStrategy(RepresentativeStrategy):
    """Representatives are the means of their members.

    Args:
        locations: Locations of the task's data points
        metric: Location class supplying the distance
        initialization: Seeding strategy (first k points by default)
    """

    def __init__(self, locations: List[Location], metric: Type[Location] = Location,
                 initialization: Optional[InitializationStrategy] = None):
        self.locations = locations
        self.metric = metric
        self.points = Location.stack(locations)
        self.initialization = initialization if initialization is not None else FirstKInit()

    @property
    def accumulates_sum(self) -> bool:
        return True

    def initialize(self, n_clusters: int) -> List[Location]:
        indices = self.initialization.initialize(self.points, n_clusters)
        return [self.locations[i] for i in indices]

    def classify(self, representatives: List[Location]) -> Tensor:
        return self._nearest(self.points, representatives)

    def update_representatives(self, clusters: List[Cluster]
                               ) -> Optional[Tuple[List[Location], Tensor]]:
        """Move every centroid to the mean of its members.

        A member whose nearest updated centroid is not its own cluster's
        triggers a full rebuild. Otherwise the clusters adopt their updated
        centroids in place and None is returned.
        """
        updated = [cluster.center for cluster in clusters]

        if not self._is_changed(clusters, updated):
            for cluster in clusters:
                cluster.update_centroid()
            return None

        return updated, self.classify(updated)

    def _is_changed(self, clusters: List[Cluster], updated: List[Location]) -> bool:
        """Whether any member would move under the updated centroids. O(kn)"""
        for index, cluster in enumerate(clusters):
            if cluster.is_empty:
                continue
            member_points = Location.stack([member.location for member in cluster.members])
            if (self._nearest(member_points, updated) != index).any():
                return True
        return False

    def _nearest(self, points: Tensor, representatives: List[Location]) -> Tensor:
        # argmin returns the first minimum, so ties go to the lowest index
        distances = self.metric.pairwise_distances(points, Location.stack(representatives))
        return torch.argmin(distances, dim=1)


class KMeans(ClusteringAlgorithm[T]):
    """K-means clustering task.

    Partitions the data into ``k`` clusters whose representatives are the
    means of their members.

    Parameters
    ----------
    k : int
        Number of clusters
    data : sequence of ClusterData
        Points exposing ``location``
    max_iterations : int, default=20
        Maximum number of update iterations
    validation_type : ValidationType or str, default='dbi'
        Score computed for the finished clustering
    cancel_token : CancellationToken, optional
        Token polled between phases
    initialization : InitializationStrategy, optional
        Seeding strategy; first k points by default
    verbose : int, default=0
        Verbosity level

    Attributes
    ----------
    clusters : list of Cluster
        Clusters after ``run``
    score : float or None
        Validation score; None until scored or when cancelled
    n_iter_ : int
        Number of iterations run
    """

    mode = ClusteringMode.KMEANS

    def __init__(self,
                 k: int,
                 data: Sequence[T],
                 max_iterations: int = 20,
                 validation_type: Union[ValidationType, str] = ValidationType.DBI,
                 cancel_token: Optional[CancellationToken] = None,
                 initialization: Optional[InitializationStrategy] = None,
                 verbose: int = 0):
        super().__init__(
            k=k,
            data=data,
            max_iterations=max_iterations,
            validation_type=validation_type,
            cancel_token=cancel_token,
            verbose=verbose
        )
        self.initialization = initialization

    def _create_components(self) -> None:
        """Create K-means specific components."""
        self.strategy = CentroidStrategy(
            self.locations, self.metric, initialization=self.initialization
        )
        self.validation_method = get_validation_method(self.validation_type)

    @property
    def centroids(self) -> List[Location]:
        return self.representatives
