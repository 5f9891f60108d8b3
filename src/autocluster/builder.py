"""
Builder pattern for configuring a clustering orchestrator.

Provides a fluent interface over the orchestrator's defaults so that callers
can set everything once and then simply call ``run(data)``.
"""

from concurrent.futures import Executor
from typing import Any, Iterable, Optional, Union
import weakref

from .base.data_structures import ClusteringMode, ValidationType
from .orchestrator import DEFAULT_K_RANGE, ClusteringOrchestrator


class ClusteringBuilder:
    """Fluent builder for ClusteringOrchestrator.

    Examples
    --------
    >>> # Map markers grouped around real markers, chosen by silhouette
    >>> orchestrator = (ClusteringBuilder()
    ...     .with_kmedoids()
    ...     .with_silhouette()
    ...     .with_k_range(range(2, 6))
    ...     .build())

    >>> # Centroids, DBI, more iterations, small pool
    >>> orchestrator = (ClusteringBuilder()
    ...     .with_kmeans()
    ...     .with_max_iterations(50)
    ...     .with_max_workers(2)
    ...     .build())
    """

    def __init__(self):
        """Initialize builder with defaults."""
        self._mode = ClusteringMode.KMEANS
        self._validation_type = ValidationType.DBI
        self._max_iterations = 20
        self._k_range: Iterable[int] = DEFAULT_K_RANGE
        self._max_workers: Optional[int] = None
        self._swap_tolerance = 1e-6
        self._delegate: Optional[Any] = None
        self._completion_executor: Optional[Executor] = None
        self._verbose = 0

    def with_mode(self, mode: Union[ClusteringMode, str]) -> 'ClusteringBuilder':
        """Set the clustering algorithm."""
        self._mode = ClusteringMode.parse(mode)
        return self

    def with_kmeans(self) -> 'ClusteringBuilder':
        """Use centroid-based clustering."""
        return self.with_mode(ClusteringMode.KMEANS)

    def with_kmedoids(self) -> 'ClusteringBuilder':
        """Use medoid-based clustering."""
        return self.with_mode(ClusteringMode.KMEDOIDS)

    def with_validation(self, validation_type: Union[ValidationType, str]) -> 'ClusteringBuilder':
        """Set the score used to pick the number of clusters."""
        self._validation_type = ValidationType.parse(validation_type)
        return self

    def with_dbi(self) -> 'ClusteringBuilder':
        """Pick k by lowest Davies-Bouldin Index."""
        return self.with_validation(ValidationType.DBI)

    def with_silhouette(self) -> 'ClusteringBuilder':
        """Pick k by highest Silhouette Score."""
        return self.with_validation(ValidationType.SILHOUETTE)

    def with_max_iterations(self, max_iterations: int) -> 'ClusteringBuilder':
        if max_iterations < 1:
            raise ValueError(f"max_iterations must be positive, got {max_iterations}")
        self._max_iterations = max_iterations
        return self

    def with_k_range(self, k_range: Iterable[int]) -> 'ClusteringBuilder':
        """Set the candidate cluster counts (values below 2 are never evaluated)."""
        k_range = list(k_range)
        if not k_range:
            raise ValueError("k_range must not be empty")
        self._k_range = k_range
        return self

    def with_max_workers(self, max_workers: int) -> 'ClusteringBuilder':
        if max_workers < 1:
            raise ValueError(f"max_workers must be positive, got {max_workers}")
        self._max_workers = max_workers
        return self

    def with_swap_tolerance(self, swap_tolerance: float) -> 'ClusteringBuilder':
        if swap_tolerance < 0:
            raise ValueError(f"swap_tolerance must be non-negative, got {swap_tolerance}")
        self._swap_tolerance = swap_tolerance
        return self

    def with_delegate(self, delegate: Any) -> 'ClusteringBuilder':
        """Set the result receiver (held weakly by the orchestrator)."""
        if not hasattr(delegate, 'did_finish_clustering'):
            raise ValueError("delegate must define did_finish_clustering(result)")
        try:
            weakref.ref(delegate)
        except TypeError:
            raise ValueError(
                f"delegate must support weak references, got {type(delegate).__name__}"
            ) from None
        self._delegate = delegate
        return self

    def with_completion_executor(self, executor: Executor) -> 'ClusteringBuilder':
        """Set where the delegate is called (e.g. a UI-thread executor)."""
        self._completion_executor = executor
        return self

    def with_verbose(self, verbose: int = 1) -> 'ClusteringBuilder':
        self._verbose = verbose
        return self

    def build(self) -> ClusteringOrchestrator:
        """Create the configured orchestrator."""
        return ClusteringOrchestrator(
            mode=self._mode,
            validation_type=self._validation_type,
            max_iterations=self._max_iterations,
            k_range=self._k_range,
            max_workers=self._max_workers,
            swap_tolerance=self._swap_tolerance,
            delegate=self._delegate,
            completion_executor=self._completion_executor,
            verbose=self._verbose
        )
