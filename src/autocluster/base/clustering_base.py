"""
Base class for clustering tasks in autocluster.

Provides the common skeleton shared by KMeans and KMedoids: initialize
representatives, alternate update and reclassification until nothing moves,
then score the result. Algorithm specifics live in a RepresentativeStrategy.
"""

from abc import abstractmethod
from typing import Generic, List, Optional, Sequence, Type, TypeVar, Union
import time
import warnings

from torch import Tensor

from .cluster import Cluster
from .data_structures import (
    AlgorithmState, ClusteringMode, ClusteringResult, ClusterResult, ValidationType
)
from .interfaces import RepresentativeStrategy, ValidationMethod
from .location import Location, metric_of
from ..utils.cancellation import CancellationToken

T = TypeVar('T')


class ClusteringAlgorithm(Generic[T]):
    """One clustering task for a fixed number of clusters.

    Subclasses need to specify, in ``_create_components``:
    - ``self.strategy``: the representative strategy
    - ``self.validation_method``: the quality score

    The task is single-use: ``run`` takes it from INITIALIZED to SCORED (or
    CANCELLED). It only reads ``data``; its clusters are private to it.
    """

    mode: ClusteringMode

    def __init__(self,
                 k: int,
                 data: Sequence[T],
                 max_iterations: int = 20,
                 validation_type: Union[ValidationType, str] = ValidationType.DBI,
                 cancel_token: Optional[CancellationToken] = None,
                 verbose: int = 0):
        """
        Args:
            k: Number of clusters
            data: Points exposing ``location``
            max_iterations: Cap on update iterations
            validation_type: Score used to rate the finished clustering
            cancel_token: Token polled at every checkpoint
            verbose: Verbosity level (0=silent, 1=progress, 2=detailed)
        """
        if k < 1:
            raise ValueError(f"k must be positive, got {k}")
        if max_iterations < 1:
            raise ValueError(f"max_iterations must be positive, got {max_iterations}")

        self.k = k
        self.data = data
        self.max_iterations = max_iterations
        self.validation_type = ValidationType.parse(validation_type)
        self.cancel_token = cancel_token if cancel_token is not None else CancellationToken()
        self.verbose = verbose

        self.locations: List[Location] = [point.location for point in data]
        self.metric: Type[Location] = metric_of(self.locations)
        self.points: Tensor = Location.stack(self.locations)

        # These will be set by subclasses
        self.strategy: Optional[RepresentativeStrategy] = None
        self.validation_method: Optional[ValidationMethod] = None

        # Run state
        self.clusters: List[Cluster[T]] = []
        self.score: Optional[float] = None
        self.changed = False
        self.n_iter_ = 0
        self.state = AlgorithmState.INITIALIZED
        self.elapsed_ = 0.0

    @abstractmethod
    def _create_components(self) -> None:
        """Create ``self.strategy`` and ``self.validation_method``."""
        pass

    @property
    def cancelled(self) -> bool:
        return self.cancel_token.cancelled

    @property
    def is_usable(self) -> bool:
        """Whether the task finished and scored without being cancelled."""
        return self.state is AlgorithmState.SCORED and self.score is not None

    @property
    def representatives(self) -> List[Location]:
        return [cluster.representative for cluster in self.clusters]

    def run(self) -> 'ClusteringAlgorithm[T]':
        """Run the task to a terminal state and score it.

        Returns:
            Self
        """
        if self.state is not AlgorithmState.INITIALIZED:
            raise RuntimeError(f"Task already ran (state={self.state.value})")

        start_time = time.time()
        try:
            if self._checkpoint():
                return self
            self.state = AlgorithmState.RUNNING
            self._create_components()

            if self.verbose >= 2:
                print(f"[{self.mode.value} k={self.k}] initializing {len(self.data)} points")
            representatives = self.strategy.initialize(self.k)

            if self._checkpoint():
                return self
            self.clusters = self._generate_clusters(
                representatives, self.strategy.classify(representatives)
            )

            while True:
                if self._checkpoint():
                    return self
                self._run_iteration()
                if not (self.changed and self.n_iter_ < self.max_iterations):
                    break

            if self._checkpoint():
                return self
            if self.changed:
                self.state = AlgorithmState.ITERATION_LIMIT_REACHED
                if self.verbose:
                    warnings.warn(
                        f"{self.mode.value} k={self.k} did not converge "
                        f"after {self.max_iterations} iterations"
                    )
            else:
                self.state = AlgorithmState.CONVERGED

            self.score = self.validation_method.compute(self.clusters)
            self.state = AlgorithmState.SCORED
        finally:
            self.elapsed_ = time.time() - start_time

        if self.verbose:
            print(f"[{self.mode.value} k={self.k}] {self.validation_type.value} = "
                  f"{self.score:.6f} after {self.n_iter_} iterations ({self.elapsed_:.3f}s)")
        return self

    def _run_iteration(self) -> None:
        """Update representatives and rebuild the clusters if anything moved."""
        update = self.strategy.update_representatives(self.clusters)
        self.n_iter_ += 1
        self.changed = update is not None

        if self.changed:
            representatives, assignments = update
            self.clusters = self._generate_clusters(representatives, assignments)

        if self.verbose >= 2:
            sizes = [cluster.size for cluster in self.clusters]
            print(f"[{self.mode.value} k={self.k}] iteration {self.n_iter_:3d}: "
                  f"changed={self.changed} sizes={sizes}")

    def _checkpoint(self) -> bool:
        """Poll the cancellation token; on cancellation drop all results."""
        if not self.cancel_token.cancelled:
            return False
        self.state = AlgorithmState.CANCELLED
        self.score = None
        self.clusters = []
        return True

    def _generate_clusters(self, representatives: List[Location],
                           assignments: Tensor) -> List[Cluster[T]]:
        """Create fresh clusters and insert every point into its assigned one."""
        clusters = [
            Cluster(representative, accumulate=self.strategy.accumulates_sum)
            for representative in representatives
        ]
        for point, index in zip(self.data, assignments.tolist()):
            clusters[index].insert(point)
        return clusters

    def to_result(self) -> ClusteringResult[T]:
        """Package the scored clusters, dropping empty ones."""
        if not self.is_usable:
            raise RuntimeError(f"No usable result (state={self.state.value})")
        clusters = tuple(
            ClusterResult(cluster.representative, tuple(cluster.members))
            for cluster in self.clusters
            if not cluster.is_empty
        )
        return ClusteringResult(
            score=self.score,
            clusters=clusters,
            k=self.k,
            mode=self.mode,
            validation_type=self.validation_type,
            n_iter=self.n_iter_
        )

    def __repr__(self) -> str:
        return (f"{type(self).__name__}(k={self.k}, n={len(self.data)}, "
                f"state={self.state.value}, score={self.score})")
