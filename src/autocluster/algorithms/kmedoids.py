"""
K-medoids clustering algorithm.

PAM BUILD seeding followed by a FastPAM1-style swap phase. Representatives
are always actual data points, so any metric supplied by the Location type
works, not only ones where averaging makes sense.
"""

from dataclasses import dataclass
import threading
from typing import List, Optional, Sequence, Tuple, Type, TypeVar, Union

import torch
from torch import Tensor

from ..base.cluster import Cluster
from ..base.clustering_base import ClusteringAlgorithm
from ..base.data_structures import ClusteringMode, ValidationType
from ..base.interfaces import InitializationStrategy, RepresentativeStrategy
from ..base.location import Location, metric_of
from ..initialization.pam_build import PamBuildInit
from ..utils.cancellation import CancellationToken
from ..validation import get_validation_method

T = TypeVar('T')


@dataclass
class MedoidProximity:
    """Each point's nearest and second-nearest medoid distances.

    Attributes:
        nearest_index: (n,) slot of the nearest medoid
        nearest_distance: (n,) distance to it
        second_distance: (n,) distance to the second-nearest medoid; equal to
            ``nearest_distance`` when there is a single medoid
    """
    nearest_index: Tensor
    nearest_distance: Tensor
    second_distance: Tensor


class DistanceMatrix:
    """Pairwise distances of one data set, shared read-only between tasks.

    The (n, n) matrix is computed by the first task that asks for it; every
    other K-medoids task of the same batch reuses that tensor instead of
    holding its own copy.

    Args:
        locations: Locations of the data points
        metric: Location class supplying the distance
    """

    def __init__(self, locations: List[Location], metric: Type[Location] = Location):
        self.locations = locations
        self.metric = metric
        self._lock = threading.Lock()
        self._matrix: Optional[Tensor] = None

    @classmethod
    def for_data(cls, data: Sequence[T]) -> 'DistanceMatrix':
        locations = [point.location for point in data]
        return cls(locations, metric_of(locations))

    @property
    def size(self) -> int:
        return len(self.locations)

    def get(self) -> Tensor:
        with self._lock:
            if self._matrix is None:
                points = Location.stack(self.locations)
                self._matrix = self.metric.pairwise_distances(points, points)
            return self._matrix


class MedoidStrategy(RepresentativeStrategy):
    """Representatives are data points minimizing total member distance.

    Args:
        locations: Locations of the task's data points
        metric: Location class supplying the distance
        cancel_token: Polled between swaps
        swap_tolerance: A swap is applied only when it lowers the total
            deviation by more than this
        chunk_size: Candidates evaluated per batched delta computation
        initialization: Seeding strategy (PAM BUILD by default)
        distance_matrix: Shared distances of ``locations``; computed
            privately if None
    """

    def __init__(self,
                 locations: List[Location],
                 metric: Type[Location] = Location,
                 cancel_token: Optional[CancellationToken] = None,
                 swap_tolerance: float = 1e-6,
                 chunk_size: int = 512,
                 initialization: Optional[InitializationStrategy] = None,
                 distance_matrix: Optional[DistanceMatrix] = None):
        if swap_tolerance < 0:
            raise ValueError(f"swap_tolerance must be non-negative, got {swap_tolerance}")
        if chunk_size < 1:
            raise ValueError(f"chunk_size must be positive, got {chunk_size}")

        self.locations = locations
        self.metric = metric
        self.cancel_token = cancel_token
        self.swap_tolerance = swap_tolerance
        self.chunk_size = chunk_size
        self.initialization = initialization if initialization is not None else PamBuildInit()

        self.points = Location.stack(locations)
        if distance_matrix is None:
            distance_matrix = DistanceMatrix(locations, metric)
        elif distance_matrix.size != len(locations):
            raise ValueError(
                f"distance_matrix covers {distance_matrix.size} points, expected {len(locations)}"
            )
        self.distances = distance_matrix.get()
        self.medoid_indices: List[int] = []

    @property
    def accumulates_sum(self) -> bool:
        return False

    def initialize(self, n_clusters: int) -> List[Location]:
        self.medoid_indices = self.initialization.initialize(
            self.points, n_clusters, distances=self.distances, metric=self.metric
        )
        return [self.locations[i] for i in self.medoid_indices]

    def classify(self, representatives: List[Location]) -> Tensor:
        distances = self.metric.pairwise_distances(self.points, Location.stack(representatives))
        return torch.argmin(distances, dim=1)

    def update_representatives(self, clusters: List[Cluster]
                               ) -> Optional[Tuple[List[Location], Tensor]]:
        """Run the swap phase until no single swap lowers the total deviation.

        Each pass applies the first improving (candidate, slot) swap found in
        input order, then rescans with the refreshed proximities.

        Returns:
            The new medoids and the assignment they induce, or None when no
            swap was made (or the task was cancelled mid-phase)
        """
        medoids = list(self.medoid_indices)
        # A single BUILD medoid already minimizes total deviation
        if len(medoids) < 2:
            return None

        proximity = self.proximities(medoids)
        changed = False

        while True:
            if self.cancel_token is not None and self.cancel_token.cancelled:
                return None

            swap = self._first_improving_swap(medoids, proximity)
            if swap is None:
                break

            candidate, slot = swap
            medoids[slot] = candidate
            changed = True
            proximity = self.proximities(medoids)

        if not changed:
            return None

        self.medoid_indices = medoids
        return [self.locations[i] for i in medoids], proximity.nearest_index

    def proximities(self, medoids: List[int]) -> MedoidProximity:
        """Nearest and second-nearest medoid of every point. O(kn log k)"""
        to_medoids = self.distances[:, medoids]
        values, indices = torch.sort(to_medoids, dim=1, stable=True)
        second = values[:, 1] if len(medoids) >= 2 else values[:, 0]
        return MedoidProximity(
            nearest_index=indices[:, 0],
            nearest_distance=values[:, 0],
            second_distance=second
        )

    def total_deltas(self, candidates: Tensor, proximity: MedoidProximity,
                     n_medoids: int) -> Tensor:
        """Change in total deviation for swapping each candidate into each slot.

        Combines the removal loss of every medoid (members fall back to their
        second-nearest medoid) with the gain shared by all slots from points
        that move to the candidate.

        Args:
            candidates: (c,) indices of non-medoid points
            proximity: Current proximities
            n_medoids: Number of medoid slots

        Returns:
            (c, n_medoids) deltas; negative means the swap improves
        """
        d_candidate = self.distances[candidates]
        nearest = proximity.nearest_distance.unsqueeze(0)
        second = proximity.second_distance.unsqueeze(0)
        zeros = torch.zeros_like(d_candidate)

        closer = d_candidate < nearest
        between = ~closer & (d_candidate < second)

        shared_gain = torch.where(closer, d_candidate - nearest, zeros).sum(dim=1)

        removal_loss = torch.zeros(n_medoids, dtype=torch.float64)
        removal_loss.index_add_(0, proximity.nearest_index,
                                proximity.second_distance - proximity.nearest_distance)

        adjustment = torch.where(closer, (nearest - second).expand_as(d_candidate),
                                 torch.where(between, d_candidate - second, zeros))
        loss = removal_loss.unsqueeze(0).repeat(candidates.shape[0], 1)
        loss.index_add_(1, proximity.nearest_index, adjustment)

        return loss + shared_gain.unsqueeze(1)

    def _first_improving_swap(self, medoids: List[int],
                              proximity: MedoidProximity) -> Optional[Tuple[int, int]]:
        """First (candidate, slot) in input order whose delta beats the tolerance."""
        medoid_points = self.points[medoids]
        # Points sharing a medoid's location cannot be swapped in
        coincides = (self.points.unsqueeze(1) == medoid_points.unsqueeze(0)).all(dim=2).any(dim=1)
        candidates = torch.nonzero(~coincides).flatten()

        for start in range(0, candidates.shape[0], self.chunk_size):
            chunk = candidates[start:start + self.chunk_size]
            deltas = self.total_deltas(chunk, proximity, len(medoids))
            improving = deltas < -self.swap_tolerance
            rows = torch.nonzero(improving.any(dim=1)).flatten()
            if rows.shape[0] > 0:
                row = int(rows[0])
                slot = int(torch.argmax(improving[row].to(torch.uint8)))
                return int(chunk[row]), slot

        return None


class KMedoids(ClusteringAlgorithm[T]):
    """K-medoids (PAM) clustering task.

    Parameters
    ----------
    k : int
        Number of clusters; fewer come out when the data holds fewer than
        ``k`` distinct locations
    data : sequence of ClusterData
        Points exposing ``location``
    max_iterations : int, default=20
        Maximum number of swap phases
    validation_type : ValidationType or str, default='dbi'
        Score computed for the finished clustering
    cancel_token : CancellationToken, optional
        Token polled between phases and between swaps
    swap_tolerance : float, default=1e-6
        Minimum decrease in total deviation for a swap to count
    initialization : InitializationStrategy, optional
        Seeding strategy; PAM BUILD by default
    distance_matrix : DistanceMatrix, optional
        Distances of ``data`` shared with other tasks on the same data
    verbose : int, default=0
        Verbosity level
    """

    mode = ClusteringMode.KMEDOIDS

    def __init__(self,
                 k: int,
                 data: Sequence[T],
                 max_iterations: int = 20,
                 validation_type: Union[ValidationType, str] = ValidationType.DBI,
                 cancel_token: Optional[CancellationToken] = None,
                 swap_tolerance: float = 1e-6,
                 initialization: Optional[InitializationStrategy] = None,
                 distance_matrix: Optional[DistanceMatrix] = None,
                 verbose: int = 0):
        super().__init__(
            k=k,
            data=data,
            max_iterations=max_iterations,
            validation_type=validation_type,
            cancel_token=cancel_token,
            verbose=verbose
        )
        self.swap_tolerance = swap_tolerance
        self.initialization = initialization
        self.distance_matrix = distance_matrix

    def _create_components(self) -> None:
        """Create K-medoids specific components."""
        self.strategy = MedoidStrategy(
            self.locations,
            self.metric,
            cancel_token=self.cancel_token,
            swap_tolerance=self.swap_tolerance,
            initialization=self.initialization,
            distance_matrix=self.distance_matrix
        )
        self.validation_method = get_validation_method(self.validation_type)

    @property
    def medoids(self) -> List[Location]:
        return self.representatives

    @property
    def medoid_indices(self) -> List[int]:
        """Data indices of the current medoids."""
        if self.strategy is None:
            return []
        return list(self.strategy.medoid_indices)
