"""
Cooperative cancellation for clustering tasks.

A token is created per batch, handed to every task of that batch at
construction, and polled by the tasks at their checkpoints. Only the owning
batch ever cancels it.
"""

import threading
from concurrent.futures import CancelledError


class CancellationToken:
    """One-way cancellation flag safe to share across threads."""

    def __init__(self):
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise CancelledError()

    def __repr__(self) -> str:
        return f"CancellationToken(cancelled={self.cancelled})"
