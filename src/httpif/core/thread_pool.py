"""
=============================================================================
THREAD POOL
=============================================================================

A fixed set of worker threads pulling tasks from one bounded queue.

    ┌─────────────────────────────────────────────────────────────────────┐
    │   accept loop ──submit()──►  [task] [task] [task] ...  (queue_size) │
    │                                   │                                  │
    │                                   │ get()                            │
    │                                   ▼                                  │
    │               Worker-0   Worker-1   ...   Worker-(n-1)               │
    └─────────────────────────────────────────────────────────────────────┘

submit() never blocks: when the queue is full it returns False and the
caller answers the client with 503 Service Unavailable.

Shutdown uses the "poison pill" pattern: one None per worker is queued,
and a worker that receives None exits its loop.

=============================================================================
"""

import logging
import queue
import threading
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Optional


logger = logging.getLogger(__name__)


@dataclass
class Task:
    """A deferred call: func(*args)."""

    func: Callable[..., Any]
    args: tuple = ()
    submitted_at: float = field(default_factory=time.time)


class Worker(threading.Thread):
    """
    Pulls tasks from the queue until it receives the poison pill.

    A task that raises is logged and counted; the worker carries on with
    the next one.
    """

    def __init__(self, task_queue: "queue.Queue[Optional[Task]]", worker_id: int):
        # Daemon threads never keep the interpreter alive on their own
        super().__init__(name=f"Worker-{worker_id}", daemon=True)
        self.task_queue = task_queue
        self.worker_id = worker_id

        self.busy = False
        self.tasks_completed = 0
        self.tasks_failed = 0

    def run(self):
        logger.debug(f"Worker {self.worker_id} started")

        while True:
            task = self.task_queue.get()
            try:
                if task is None:
                    break
                self._execute_task(task)
            finally:
                self.task_queue.task_done()

        logger.debug(f"Worker {self.worker_id} stopped")

    def _execute_task(self, task: Task):
        self.busy = True
        start_time = time.time()
        try:
            task.func(*task.args)
            self.tasks_completed += 1
            logger.debug(
                f"Worker {self.worker_id} completed task in {time.time() - start_time:.3f}s "
                f"(queued {start_time - task.submitted_at:.3f}s)"
            )
        except Exception as e:
            self.tasks_failed += 1
            logger.exception(f"Worker {self.worker_id} task failed: {e}")
        finally:
            self.busy = False


class ThreadPool:
    """
    Fixed-size thread pool.

    Usage:
        pool = ThreadPool(workers=4, queue_size=100)
        pool.start()

        if not pool.submit(handle_connection, conn):
            ...  # queue full, reject the client

        pool.shutdown()
    """

    def __init__(self, workers: int = 4, queue_size: int = 100):
        self.workers = workers
        self._task_queue: "queue.Queue[Optional[Task]]" = queue.Queue(maxsize=queue_size)
        self._workers: list[Worker] = []
        self._started = False
        self._shutdown = False

    def start(self):
        if self._started:
            return

        logger.info(f"Starting thread pool with {self.workers} workers")
        for worker_id in range(self.workers):
            worker = Worker(self._task_queue, worker_id)
            self._workers.append(worker)
            worker.start()

        self._started = True
        self._shutdown = False

    def submit(self, func: Callable[..., Any], *args: Any) -> bool:
        """
        Queue func(*args) for a worker.

        Returns:
            True if queued, False if the queue is full.

        Raises:
            RuntimeError: The pool is not running.
        """
        if not self._started or self._shutdown:
            raise RuntimeError("Thread pool is not running")

        try:
            self._task_queue.put(Task(func=func, args=args), block=False)
            return True
        except queue.Full:
            return False

    def shutdown(self, wait: bool = True, timeout: float = 5.0):
        """
        Stop the workers.

        Args:
            wait: Let queued tasks finish before the workers exit.
            timeout: Seconds to wait for each worker thread to exit.
        """
        if not self._started:
            return

        logger.info("Shutting down thread pool...")
        self._shutdown = True

        if not wait:
            # Abandon whatever is still queued
            while True:
                try:
                    self._task_queue.get_nowait()
                    self._task_queue.task_done()
                except queue.Empty:
                    break

        # Pills queue behind pending tasks, so those finish first
        for _ in self._workers:
            self._task_queue.put(None)

        for worker in self._workers:
            worker.join(timeout=timeout)
            if worker.is_alive():
                logger.warning(f"Worker {worker.worker_id} did not stop within {timeout}s")

        self._workers.clear()
        self._started = False
        logger.info("Thread pool shutdown complete")

    @property
    def busy_workers(self) -> int:
        return sum(1 for w in self._workers if w.busy)

    @property
    def queued(self) -> int:
        return self._task_queue.qsize()

    @property
    def stats(self) -> dict:
        return {
            "workers": {"total": len(self._workers), "busy": self.busy_workers},
            "tasks": {
                "queued": self.queued,
                "completed": sum(w.tasks_completed for w in self._workers),
                "failed": sum(w.tasks_failed for w in self._workers),
            },
        }
