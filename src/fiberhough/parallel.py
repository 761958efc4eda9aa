"""
Fork-join parallel map shared by every data-parallel stage.

A stage hands the pool a function of a task index and a task count; the
pool runs all tasks, waits for every one of them, and returns the
results in index order. Completion order never leaks to the caller.
"""

import threading
from concurrent.futures import ThreadPoolExecutor, wait, FIRST_EXCEPTION

from fiberhough.errors import ParallelTaskError
from fiberhough.tracer import get_tracer


class WorkerPool:
    """
    Reusable fixed-size thread pool.
    
    The executor is created on first use and kept until close(), so the
    stages of a run (and successive runs) share the same workers.
    """
    
    def __init__(self, max_workers=None):
        self.max_workers = max_workers
        self._executor = None
        self._lock = threading.Lock()
    
    def _get_executor(self):
        with self._lock:
            if self._executor is None:
                self._executor = ThreadPoolExecutor(
                    max_workers=self.max_workers,
                    thread_name_prefix="fiberhough",
                )
            return self._executor
    
    def map(self, func, count, stage="parallel"):
        """
        Run func(i) for every i in range(count) and return the results in order.
        
        If any task raises, queued tasks are cancelled and a single
        ParallelTaskError is raised for the stage; no partial result is
        returned.
        """
        if count <= 0:
            return []
        
        executor = self._get_executor()
        futures = [executor.submit(func, i) for i in range(count)]
        done, _ = wait(futures, return_when=FIRST_EXCEPTION)
        
        for index, future in enumerate(futures):
            if future in done and not future.cancelled() and future.exception() is not None:
                for pending in futures:
                    pending.cancel()
                # let already running tasks drain before reporting
                wait(futures)
                cause = future.exception()
                get_tracer().event(
                    f"Task {index} of stage '{stage}' failed: {type(cause).__name__}",
                    level="ERROR",
                )
                raise ParallelTaskError(stage, index, cause) from cause
        
        return [future.result() for future in futures]
    
    def close(self):
        """Shut the executor down; the pool can be reused afterwards."""
        with self._lock:
            if self._executor is not None:
                self._executor.shutdown(wait=True)
                self._executor = None
    
    def __enter__(self):
        return self
    
    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False


# Process-wide default pool
_pool = WorkerPool()


def get_pool():
    """Get the shared default worker pool."""
    return _pool


def configure_pool(max_workers=None):
    """Resize the shared default worker pool."""
    global _pool
    if max_workers != _pool.max_workers:
        _pool.close()
        _pool = WorkerPool(max_workers=max_workers)
    return _pool
