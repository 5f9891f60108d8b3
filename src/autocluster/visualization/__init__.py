"""Visualization utilities for clustering results."""

from .plot_clusters import plot_clustering_result

__all__ = [
    'plot_clustering_result'
]
