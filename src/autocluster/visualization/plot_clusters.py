"""
Cluster visualization utilities.

Plots a ClusteringResult in 2D: members colored by cluster, representatives
drawn as large markers on top.
"""

from typing import List, Optional

import matplotlib.pyplot as plt
import numpy as np

from ..base.data_structures import ClusteringResult


def plot_clustering_result(result: ClusteringResult,
                           ax: Optional[plt.Axes] = None,
                           colors: Optional[List] = None,
                           alpha: float = 0.7,
                           representative_marker: str = 'X',
                           representative_size: int = 200,
                           point_size: int = 50,
                           show_legend: bool = True,
                           title: Optional[str] = None) -> plt.Axes:
    """Plot 2D clustering results.

    Args:
        result: Clustering to draw; locations must be 2D (for GeoLocation the
            x axis is latitude and the y axis longitude)
        ax: Matplotlib axes (created if None)
        colors: List of colors for clusters
        alpha: Point transparency
        representative_marker: Marker for representatives
        representative_size: Size of representative markers
        point_size: Size of data points
        show_legend: Whether to show legend
        title: Plot title (defaults to k and score)

    Returns:
        Matplotlib axes
    """
    for cluster in result.clusters:
        if cluster.representative.dimension != 2:
            raise ValueError(
                f"Can only plot 2D locations, got {cluster.representative.dimension}D"
            )

    if ax is None:
        fig, ax = plt.subplots(figsize=(8, 6))

    n_clusters = result.n_clusters
    if colors is None:
        cmap = plt.get_cmap('tab10' if n_clusters <= 10 else 'tab20')
        colors = [cmap(i % cmap.N) for i in range(n_clusters)]

    for i, cluster in enumerate(result.clusters):
        points = np.array([member.location.tolist() for member in cluster.members])
        color = colors[i % len(colors)]
        ax.scatter(points[:, 0], points[:, 1],
                   c=[color],
                   s=point_size,
                   alpha=alpha,
                   edgecolors='black',
                   linewidth=0.5,
                   label=f'Cluster {i} ({cluster.size})')

        rep = cluster.representative.tolist()
        ax.scatter([rep[0]], [rep[1]],
                   c=[color],
                   marker=representative_marker,
                   s=representative_size,
                   edgecolors='black',
                   linewidth=2)

    if title is None:
        title = (f"{result.mode.value}: k={result.k}, "
                 f"{result.validation_type.value}={result.score:.3f}")
    ax.set_title(title)

    if show_legend and n_clusters > 0:
        ax.legend()

    return ax
