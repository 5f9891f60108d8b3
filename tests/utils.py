# tests/utils.py
"""
Small, reusable helpers used across the autocluster test suite.

Functions:
- labels_from_result(result, n): per-point cluster index, using payload indices.
- assert_partition(result, data): every input point appears in exactly one cluster.
- same_grouping(y_pred, y_true): True if the labelings induce the same partition.
- total_deviation(locations, medoid_indices): sum of distances to the nearest medoid.
- time_block(label, meta=None): context manager that prints wall-clock time with optional metadata.
- print_timing(label, seconds, **meta): convenience printer for timings (used by time_block).
"""

from __future__ import annotations

import json
import time
from collections import Counter
from contextlib import contextmanager
from typing import Any, Dict, Sequence

import numpy as np

from autocluster import ClusteringResult, Location


def labels_from_result(result: ClusteringResult, n: int) -> np.ndarray:
    """
    Cluster index of every input point, -1 for points missing from the result.

    Assumes each DataPoint's payload is its input index (see data_gen).
    """
    labels = np.full(n, -1, dtype=np.int64)
    for k, cluster in enumerate(result.clusters):
        for member in cluster.members:
            labels[member.payload] = k
    return labels


def assert_partition(result: ClusteringResult, data: Sequence[Any]) -> None:
    """Each element of ``data`` occurs in exactly one cluster, and nothing else does."""
    seen = Counter()
    for cluster in result.clusters:
        assert cluster.members, "Result contains an empty cluster"
        seen.update(member.payload for member in cluster.members)
    assert sum(seen.values()) == len(data)
    assert set(seen) == {point.payload for point in data}
    assert all(count == 1 for count in seen.values())


def same_grouping(y_pred: np.ndarray, y_true: np.ndarray) -> bool:
    """
    Whether two labelings induce the same partition (labels may be permuted).
    """
    y_pred = np.asarray(y_pred)
    y_true = np.asarray(y_true)
    if y_pred.shape != y_true.shape:
        return False
    forward: Dict[int, int] = {}
    backward: Dict[int, int] = {}
    for p, t in zip(y_pred.tolist(), y_true.tolist()):
        if forward.setdefault(p, t) != t or backward.setdefault(t, p) != p:
            return False
    return True


def total_deviation(locations: Sequence[Location], medoid_indices: Sequence[int]) -> float:
    """Sum over points of the distance to the nearest medoid."""
    metric = type(locations[0])
    points = Location.stack(locations)
    distances = metric.pairwise_distances(points, points[list(medoid_indices)])
    return float(distances.min(dim=1).values.sum())


@contextmanager
def time_block(label: str, meta: Dict[str, Any] | None = None):
    """
    Context manager to time a block and print a single-line summary.

    Example
    -------
    >>> with time_block("kmedoids", {"n": 400, "k": 3}):
    ...     task.run()

    Output
    ------
    [timing] kmedoids {"n":400,"k":3} 0.123s
    """
    t0 = time.perf_counter()
    try:
        yield
    finally:
        dt = time.perf_counter() - t0
        print_timing(label, dt, **(meta or {}))


def print_timing(label: str, seconds: float, **meta: Any) -> None:
    """
    Print timing in a compact, machine-readable single line.

    Example:
    [timing] fit {"n":400,"k":3} 0.123s
    """
    meta_str = ""
    if meta:
        # Compact JSON to make it easy to parse if needed
        try:
            meta_str = " " + json.dumps(meta, separators=(",", ":"))
        except TypeError:
            meta_str = " " + repr(meta)
    print(f"[timing] {label}{meta_str} {seconds:.3f}s")
