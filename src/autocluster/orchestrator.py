"""
Orchestration of candidate cluster counts.

Runs one clustering task per candidate k on a worker pool, joins them behind
a barrier, keeps the best-scoring one, and hands it to the delegate on a
completion executor that is never the worker pool.
"""

from concurrent.futures import Executor, Future, ThreadPoolExecutor, wait
from typing import Any, Generic, Iterable, List, Optional, Sequence, TypeVar, Union
import threading
import time
import weakref

from .algorithms.factory import create_algorithm
from .algorithms.kmedoids import DistanceMatrix
from .base.clustering_base import ClusteringAlgorithm
from .base.data_structures import ClusteringMode, ClusteringResult, ValidationType
from .utils.cancellation import CancellationToken
from .validation import get_validation_method

T = TypeVar('T')

DEFAULT_K_RANGE = range(2, 9)


def candidate_ks(k_range: Iterable[int], n_points: int) -> List[int]:
    """Candidate cluster counts that can be evaluated on ``n_points`` points."""
    return [k for k in k_range if 2 <= k <= n_points]


def select_optimal(tasks: Sequence[ClusteringAlgorithm],
                   validation_type: Union[ValidationType, str]
                   ) -> Optional[ClusteringAlgorithm]:
    """Best usable task: lowest score if the validation minimizes, else highest.

    Ties keep the earliest task. Cancelled or unscored tasks are ignored.
    """
    usable = [task for task in tasks if task.is_usable]
    if not usable:
        return None
    if get_validation_method(validation_type).minimize:
        return min(usable, key=lambda task: task.score)
    return max(usable, key=lambda task: task.score)


class ClusteringBatch(Generic[T]):
    """Handle to one ``run`` call.

    Resolves to the selected ClusteringResult, or to None when nothing was
    selected (no candidate k, cancellation, or no usable task). Exceptions
    raised by a task or by the delegate propagate through ``result``.
    """

    def __init__(self, ks: List[int], token: CancellationToken):
        self.ks = ks
        self.token = token
        self.tasks: List[ClusteringAlgorithm[T]] = []
        self._task_futures: List[Future] = []
        self._future: Future = Future()

    def cancel(self) -> None:
        """Stop the batch; no result will be delivered afterwards."""
        self.token.cancel()
        for future in self._task_futures:
            future.cancel()

    @property
    def cancelled(self) -> bool:
        return self.token.cancelled

    def done(self) -> bool:
        return self._future.done()

    def result(self, timeout: Optional[float] = None) -> Optional[ClusteringResult[T]]:
        return self._future.result(timeout)

    def add_done_callback(self, fn) -> None:
        self._future.add_done_callback(lambda _: fn(self))

    def _resolve(self, result: Optional[ClusteringResult[T]]) -> None:
        if not self._future.done():
            self._future.set_result(result)

    def _fail(self, exc: BaseException) -> None:
        if not self._future.done():
            self._future.set_exception(exc)

    def __repr__(self) -> str:
        status = 'cancelled' if self.cancelled else ('done' if self.done() else 'running')
        return f"ClusteringBatch(ks={self.ks}, {status})"


class ClusteringOrchestrator(Generic[T]):
    """Evaluate several cluster counts concurrently and keep the best.

    At most one batch is active: every ``run`` cancels the previous batch
    before submitting its own. The delegate is held by weak reference, so
    the orchestrator never keeps it alive; if it is gone, delivery is
    dropped.

    Args:
        mode: Default algorithm for ``run``
        validation_type: Default validation score for ``run``
        max_iterations: Default iteration cap per task
        k_range: Default candidate cluster counts
        max_workers: Size of the worker pool (executor default if None)
        swap_tolerance: K-medoids swap tolerance
        delegate: Receiver with ``did_finish_clustering(result)``
        completion_executor: Where the delegate is called; a dedicated
            single-thread executor by default
        verbose: Verbosity level (0=silent, 1=progress, 2=detailed)

    Example:
        >>> orchestrator = ClusteringOrchestrator(delegate=view_model)
        >>> batch = orchestrator.run(markers, mode='kmedoids', validation_type='silhouette')
        >>> result = batch.result()
    """

    def __init__(self,
                 mode: Union[ClusteringMode, str] = ClusteringMode.KMEANS,
                 validation_type: Union[ValidationType, str] = ValidationType.DBI,
                 max_iterations: int = 20,
                 k_range: Iterable[int] = DEFAULT_K_RANGE,
                 max_workers: Optional[int] = None,
                 swap_tolerance: float = 1e-6,
                 delegate: Optional[Any] = None,
                 completion_executor: Optional[Executor] = None,
                 verbose: int = 0):
        if max_iterations < 1:
            raise ValueError(f"max_iterations must be positive, got {max_iterations}")

        self.mode = ClusteringMode.parse(mode)
        self.validation_type = ValidationType.parse(validation_type)
        self.max_iterations = max_iterations
        self.k_range = k_range
        self.swap_tolerance = swap_tolerance
        self.verbose = verbose

        self._executor = ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix='autocluster-worker'
        )
        self._join_executor = ThreadPoolExecutor(
            max_workers=1, thread_name_prefix='autocluster-join'
        )
        self._owns_completion_executor = completion_executor is None
        if completion_executor is None:
            completion_executor = ThreadPoolExecutor(
                max_workers=1, thread_name_prefix='autocluster-completion'
            )
        self._completion_executor = completion_executor

        self._lock = threading.Lock()
        self._current_batch: Optional[ClusteringBatch[T]] = None
        self._delegate_ref: Optional[weakref.ref] = None
        self.delegate = delegate

    @property
    def delegate(self) -> Optional[Any]:
        if self._delegate_ref is None:
            return None
        return self._delegate_ref()

    @delegate.setter
    def delegate(self, value: Optional[Any]) -> None:
        if value is None:
            self._delegate_ref = None
            return
        try:
            self._delegate_ref = weakref.ref(value)
        except TypeError:
            raise ValueError(
                f"delegate must support weak references, got {type(value).__name__}"
            ) from None

    @property
    def current_batch(self) -> Optional[ClusteringBatch[T]]:
        return self._current_batch

    def run(self,
            data: Sequence[T],
            mode: Optional[Union[ClusteringMode, str]] = None,
            validation_type: Optional[Union[ValidationType, str]] = None,
            max_iterations: Optional[int] = None,
            k_range: Optional[Iterable[int]] = None) -> ClusteringBatch[T]:
        """Start evaluating every candidate k; returns without waiting.

        Args:
            data: Points exposing ``location``
            mode: Algorithm (orchestrator default if None)
            validation_type: Score used to pick k (orchestrator default if None)
            max_iterations: Iteration cap per task (orchestrator default if None)
            k_range: Candidate cluster counts; only ``2 <= k <= len(data)``
                are evaluated (orchestrator default if None)

        Returns:
            Handle resolving to the selected result
        """
        mode = ClusteringMode.parse(mode if mode is not None else self.mode)
        validation_type = ValidationType.parse(
            validation_type if validation_type is not None else self.validation_type
        )
        max_iterations = max_iterations if max_iterations is not None else self.max_iterations
        k_range = k_range if k_range is not None else self.k_range
        data = tuple(data)

        with self._lock:
            token = CancellationToken()
            batch: ClusteringBatch[T] = ClusteringBatch(candidate_ks(k_range, len(data)), token)
            shared = DistanceMatrix.for_data(data) if (
                mode is ClusteringMode.KMEDOIDS and batch.ks) else None

            # Tasks are built before the active batch is replaced
            batch.tasks = [
                create_algorithm(
                    mode, k, data,
                    max_iterations=max_iterations,
                    validation_type=validation_type,
                    cancel_token=token,
                    swap_tolerance=self.swap_tolerance,
                    distance_matrix=shared,
                    verbose=max(self.verbose - 1, 0)
                )
                for k in batch.ks
            ]

            if self._current_batch is not None:
                self._current_batch.cancel()
            self._current_batch = batch

            if not batch.ks:
                if self.verbose:
                    print(f"No candidate k for {len(data)} points; nothing to do")
                batch._resolve(None)
                return batch

            if self.verbose:
                print(f"Evaluating k={batch.ks} with {mode.value}/{validation_type.value} "
                      f"on {len(data)} points")

            batch._task_futures = [self._executor.submit(task.run) for task in batch.tasks]
            self._join_executor.submit(self._join, batch, validation_type, time.time())

        return batch

    def evaluate(self, data: Sequence[T], timeout: Optional[float] = None,
                 **kwargs) -> Optional[ClusteringResult[T]]:
        """Run and wait for the selected result."""
        return self.run(data, **kwargs).result(timeout)

    def cancel(self) -> None:
        """Cancel the active batch, if any."""
        with self._lock:
            if self._current_batch is not None:
                self._current_batch.cancel()

    def shutdown(self, wait: bool = True) -> None:
        """Cancel the active batch and release the executors."""
        self.cancel()
        self._executor.shutdown(wait=wait)
        self._join_executor.shutdown(wait=wait)
        if self._owns_completion_executor:
            self._completion_executor.shutdown(wait=wait)

    def __enter__(self) -> 'ClusteringOrchestrator[T]':
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.shutdown(wait=True)

    def _join(self, batch: ClusteringBatch[T], validation_type: ValidationType,
              start_time: float) -> None:
        """Barrier: wait for every task of ``batch``, then select and dispatch."""
        wait(batch._task_futures)

        if batch.cancelled:
            batch._resolve(None)
            return

        for future in batch._task_futures:
            if not future.cancelled() and future.exception() is not None:
                batch._fail(future.exception())
                return

        best = select_optimal(batch.tasks, validation_type)
        if best is None:
            batch._resolve(None)
            return

        result = best.to_result()
        if self.verbose:
            print(f"Selected k={best.k} ({validation_type.value} = {best.score:.6f}, "
                  f"{result.n_clusters} clusters) in {time.time() - start_time:.3f}s")

        try:
            self._completion_executor.submit(self._deliver, batch, result)
        except RuntimeError as exc:
            # Completion executor already shut down
            batch._fail(exc)

    def _deliver(self, batch: ClusteringBatch[T], result: ClusteringResult[T]) -> None:
        """Runs on the completion executor; calls the delegate at most once."""
        if batch.cancelled:
            batch._resolve(None)
            return

        delegate = self.delegate
        if delegate is not None:
            try:
                delegate.did_finish_clustering(result)
            except Exception as exc:
                batch._fail(exc)
                return
        batch._resolve(result)
