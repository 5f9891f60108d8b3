"""Utility functions for autocluster."""

from .cancellation import CancellationToken
from .metrics import davies_bouldin_index, silhouette_score

__all__ = [
    'CancellationToken',
    'davies_bouldin_index',
    'silhouette_score'
]
