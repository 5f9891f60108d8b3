"""Base classes and interfaces for autocluster algorithms."""

from .location import Location, GeoLocation, metric_of
from .cluster import Cluster

from .interfaces import (
    ClusterData,
    DataPoint,
    ClusteringDelegate,
    InitializationStrategy,
    RepresentativeStrategy,
    ValidationMethod
)

from .data_structures import (
    ClusteringMode,
    ValidationType,
    AlgorithmState,
    ClusterResult,
    ClusteringResult
)

from .clustering_base import ClusteringAlgorithm

__all__ = [
    # Values
    'Location',
    'GeoLocation',
    'metric_of',
    'Cluster',

    # Interfaces
    'ClusterData',
    'DataPoint',
    'ClusteringDelegate',
    'InitializationStrategy',
    'RepresentativeStrategy',
    'ValidationMethod',

    # Data structures
    'ClusteringMode',
    'ValidationType',
    'AlgorithmState',
    'ClusterResult',
    'ClusteringResult',

    # Base algorithm
    'ClusteringAlgorithm'
]
