"""Initialization strategies for clustering algorithms."""

from .first_k import FirstKInit
from .pam_build import PamBuildInit

__all__ = [
    'FirstKInit',
    'PamBuildInit'
]
