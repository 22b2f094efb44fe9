"""Worker pool handle passed to the decoder.

The orchestrator creates one pool per run from the requested thread count and
never looks inside it; decoders may fan per-frame work out with :meth:`map`.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Callable, Iterable
from concurrent.futures import ThreadPoolExecutor
from typing import Any, TypeVar

T = TypeVar("T")
R = TypeVar("R")

logger = logging.getLogger(__name__)


def default_num_worker_threads() -> int:
    """Return the machine default worker count."""
    return os.cpu_count() or 1


def resolve_num_threads(requested: int) -> int:
    """Map a requested thread count to the actual worker count.

    ``-1`` selects the machine default, ``0`` disables parallelism.
    """
    if requested < -1:
        raise ValueError(f"num_threads must be -1, 0 or positive, got {requested}")
    if requested == -1:
        return default_num_worker_threads()
    return requested


class WorkerPool:
    """Thread pool with a serial fallback when no workers are requested."""

    def __init__(self, num_threads: int = -1):
        self.num_worker_threads = resolve_num_threads(num_threads)
        self._executor: ThreadPoolExecutor | None = None

    def __enter__(self) -> WorkerPool:
        if self.num_worker_threads > 0:
            self._executor = ThreadPoolExecutor(
                max_workers=self.num_worker_threads,
                thread_name_prefix="decodelab-worker",
            )
        logger.debug(f"Worker pool started with {self.num_worker_threads} threads")
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def close(self) -> None:
        if self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None

    def map(self, func: Callable[[T], R], items: Iterable[T]) -> list[R]:
        """Apply *func* to every item, preserving order."""
        if self._executor is None:
            return [func(item) for item in items]
        return list(self._executor.map(func, items))
