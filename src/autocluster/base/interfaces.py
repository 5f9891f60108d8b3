"""
Core interfaces for the autocluster algorithms.

This module defines the capability callers' points must provide and the
abstract components a clustering algorithm is assembled from, so that KMeans
and KMedoids share one outer iterate/cancel/score loop.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, List, Optional, Protocol, Tuple, runtime_checkable

from torch import Tensor

from .location import Location
from .cluster import Cluster


@runtime_checkable
class ClusterData(Protocol):
    """Anything that can report a location.

    Equality is defined by the caller; it is used to remove a specific point
    from a cluster.
    """

    @property
    def location(self) -> Location:
        ...


@dataclass(frozen=True)
class DataPoint:
    """Ready-made ClusterData: a location with an optional payload."""
    location: Location
    payload: Any = None


@runtime_checkable
class ClusteringDelegate(Protocol):
    """Receiver of a finished clustering.

    The orchestrator holds delegates by weak reference, so a class using
    ``__slots__`` must include ``__weakref__``.
    """

    def did_finish_clustering(self, result: Any) -> None:
        ...


class InitializationStrategy(ABC):
    """Abstract base class for choosing initial representatives."""

    @abstractmethod
    def initialize(self, points: Tensor, n_clusters: int, **kwargs) -> List[int]:
        """Pick initial representatives among the data points.

        Args:
            points: (n, d) coordinates of the data points
            n_clusters: Number of representatives wanted
            **kwargs: Strategy-specific parameters

        Returns:
            Indices of the chosen points; may be shorter than ``n_clusters``
            when the data does not support that many distinct representatives
        """
        pass


class RepresentativeStrategy(ABC):
    """How one algorithm picks, assigns to, and moves its representatives.

    A strategy instance belongs to a single task and only reads the task's
    data.
    """

    @abstractmethod
    def initialize(self, n_clusters: int) -> List[Location]:
        """Choose the initial representatives."""
        pass

    @abstractmethod
    def classify(self, representatives: List[Location]) -> Tensor:
        """Assign every data point to its nearest representative.

        Returns:
            (n,) long tensor of representative indices; ties go to the
            lowest index
        """
        pass

    @abstractmethod
    def update_representatives(self, clusters: List[Cluster]
                               ) -> Optional[Tuple[List[Location], Tensor]]:
        """Move representatives according to current membership.

        Returns:
            None if no member would change cluster, otherwise the new
            representatives and the (n,) assignment under them
        """
        pass

    @property
    @abstractmethod
    def accumulates_sum(self) -> bool:
        """Whether clusters should track location sums (centroid mode)."""
        pass


class ValidationMethod(ABC):
    """Abstract base class for internal clustering quality scores."""

    @abstractmethod
    def compute(self, clusters: List[Cluster]) -> float:
        """Score a finished cluster list."""
        pass

    @property
    @abstractmethod
    def minimize(self) -> bool:
        """Whether lower scores are better."""
        pass
