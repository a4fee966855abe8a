"""A fixed-size pool of worker threads fed from a shared job queue."""

from __future__ import annotations

import queue
import threading
from typing import Callable, List, Optional

__all__ = ["ThreadPool"]

_STOP = object()


class ThreadPool:
    """Run submitted callables on ``nums`` worker threads.

    A job that raises ends its worker; ``shutdown()`` re-raises the first
    such exception after all workers have finished.
    """

    def __init__(self, nums: int) -> None:
        if nums < 0:
            raise ValueError("the number of workers must not be negative")
        self._jobs: queue.SimpleQueue = queue.SimpleQueue()
        self._state = threading.Lock()
        self._closed = False
        self._errors: List[BaseException] = []
        self._threads = [
            threading.Thread(target=self._work, name=f"pool-worker-{i}", daemon=True)
            for i in range(nums)
        ]
        for thread in self._threads:
            thread.start()

    def _work(self) -> None:
        while True:
            job = self._jobs.get()
            if job is _STOP:
                return
            try:
                job()
            except BaseException as exc:
                with self._state:
                    self._errors.append(exc)
                return

    def execute(self, closure: Callable[[], object]) -> None:
        """Submit ``closure`` to be run by a worker."""
        with self._state:
            if self._closed:
                raise RuntimeError("thread pool is shut down")
            self._jobs.put(closure)

    def shutdown(self) -> None:
        """Finish all submitted jobs and join every worker."""
        with self._state:
            if self._closed:
                return
            self._closed = True
        for _ in self._threads:
            self._jobs.put(_STOP)
        for thread in self._threads:
            thread.join()
        first: Optional[BaseException] = self._errors[0] if self._errors else None
        if first is not None:
            raise first

    def __enter__(self) -> ThreadPool:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.shutdown()

    def __repr__(self) -> str:
        return f"ThreadPool(workers={len(self._threads)}, closed={self._closed})"