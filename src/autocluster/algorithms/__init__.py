"""Clustering algorithm implementations."""

from .kmeans import KMeans, CentroidStrategy
from .kmedoids import KMedoids, MedoidStrategy, MedoidProximity, DistanceMatrix
from .factory import create_algorithm

__all__ = [
    'KMeans',
    'KMedoids',
    'CentroidStrategy',
    'MedoidStrategy',
    'MedoidProximity',
    'DistanceMatrix',
    'create_algorithm'
]
