"""
Davies-Bouldin Index validation.
"""

from typing import List

from ..base.cluster import Cluster
from ..base.interfaces import ValidationMethod
from ..utils.metrics import davies_bouldin_index


class DaviesBouldinIndex(ValidationMethod):
    """Compactness-to-separation ratio; lower is better and never negative."""

    def compute(self, clusters: List[Cluster]) -> float:
        return davies_bouldin_index(clusters)

    @property
    def minimize(self) -> bool:
        return True
