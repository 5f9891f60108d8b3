"""
autocluster: pick the number of clusters for you.

This package partitions points that expose a ``location`` into groups and
chooses the group count by internal validation:
- K-means (centroid representatives, deterministic seeding)
- K-medoids (PAM BUILD + swap, representatives are real data points)
- Davies-Bouldin Index and Silhouette Score to compare candidate k

Example usage:
    >>> from autocluster import ClusteringOrchestrator, DataPoint, Location
    >>>
    >>> points = [DataPoint(Location([x, y])) for x, y in coordinates]
    >>>
    >>> with ClusteringOrchestrator(mode='kmedoids', validation_type='silhouette') as orchestrator:
    ...     result = orchestrator.run(points).result()
    >>>
    >>> for cluster in result.clusters:
    ...     print(cluster.representative, len(cluster.members))
"""

__version__ = '0.1.0'

# Import main algorithms
from .algorithms.kmeans import KMeans
from .algorithms.kmedoids import KMedoids
from .algorithms.factory import create_algorithm

# Orchestration and configuration
from .orchestrator import ClusteringOrchestrator, ClusteringBatch, select_optimal
from .builder import ClusteringBuilder

# Validation
from .validation import DaviesBouldinIndex, SilhouetteScore, get_validation_method

# Import visualization
from .visualization import plot_clustering_result

# Convenience imports
from .base import (
    Location,
    GeoLocation,
    Cluster,
    ClusterData,
    DataPoint,
    ClusteringDelegate,
    ClusteringAlgorithm,
    ClusteringMode,
    ValidationType,
    AlgorithmState,
    ClusterResult,
    ClusteringResult
)
from .utils import CancellationToken

__all__ = [
    # Algorithms
    'KMeans',
    'KMedoids',
    'create_algorithm',

    # Orchestration
    'ClusteringOrchestrator',
    'ClusteringBatch',
    'ClusteringBuilder',
    'select_optimal',

    # Validation
    'DaviesBouldinIndex',
    'SilhouetteScore',
    'get_validation_method',

    # Core data structures
    'Location',
    'GeoLocation',
    'Cluster',
    'ClusterData',
    'DataPoint',
    'ClusteringDelegate',
    'ClusteringAlgorithm',
    'ClusteringMode',
    'ValidationType',
    'AlgorithmState',
    'ClusterResult',
    'ClusteringResult',
    'CancellationToken',

    # Visualization
    'plot_clustering_result',

    # Version
    '__version__'
]
