"""
Silhouette Score validation.
"""

from typing import List

from ..base.cluster import Cluster
from ..base.interfaces import ValidationMethod
from ..utils.metrics import silhouette_score


class SilhouetteScore(ValidationMethod):
    """Mean silhouette coefficient in [-1, 1]; higher is better."""

    def compute(self, clusters: List[Cluster]) -> float:
        return silhouette_score(clusters)

    @property
    def minimize(self) -> bool:
        return False
