"""
Core data structures shared by the clustering algorithms and the orchestrator.

Holds the configuration enums, the per-task state machine, and the immutable
result containers handed to callers.
"""

from typing import Generic, Tuple, TypeVar, Union
from dataclasses import dataclass
from enum import Enum

from .location import Location

T = TypeVar('T')


class ClusteringMode(Enum):
    """Which representative the clusters use."""
    KMEANS = 'kmeans'        # centroids (mean of members)
    KMEDOIDS = 'kmedoids'    # medoids (actual data points)

    @classmethod
    def parse(cls, value: Union['ClusteringMode', str]) -> 'ClusteringMode':
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower().replace('-', ''))
        except ValueError:
            raise ValueError(f"Unknown clustering mode: {value!r}") from None


class ValidationType(Enum):
    """Internal quality score used to compare candidate cluster counts."""
    DBI = 'dbi'                  # Davies-Bouldin Index, lower is better
    SILHOUETTE = 'silhouette'    # Silhouette Score, higher is better

    @classmethod
    def parse(cls, value: Union['ValidationType', str]) -> 'ValidationType':
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            raise ValueError(f"Unknown validation type: {value!r}") from None


class AlgorithmState(Enum):
    """Lifecycle of one clustering task."""
    INITIALIZED = 'initialized'
    RUNNING = 'running'
    CONVERGED = 'converged'
    ITERATION_LIMIT_REACHED = 'iteration_limit_reached'
    CANCELLED = 'cancelled'
    SCORED = 'scored'


@dataclass(frozen=True)
class ClusterResult(Generic[T]):
    """One non-empty cluster of a finished clustering."""
    representative: Location
    members: Tuple[T, ...]

    @property
    def size(self) -> int:
        return len(self.members)


@dataclass(frozen=True)
class ClusteringResult(Generic[T]):
    """Outcome of the best-scoring candidate cluster count.

    Attributes:
        score: Value of the validation method that selected this result
        clusters: Non-empty clusters, in the algorithm's cluster order
        k: Requested cluster count of the winning task
        mode: Algorithm that produced the clusters
        validation_type: Validation method behind ``score``
        n_iter: Iterations the winning task ran
    """
    score: float
    clusters: Tuple[ClusterResult[T], ...]
    k: int
    mode: ClusteringMode
    validation_type: ValidationType
    n_iter: int = 0

    @property
    def n_clusters(self) -> int:
        return len(self.clusters)

    @property
    def representatives(self) -> Tuple[Location, ...]:
        return tuple(cluster.representative for cluster in self.clusters)
