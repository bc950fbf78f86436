"""
Worker pool executing crawl tasks.

Workers pull directly from the frontier's single queue; taking a task off the
queue is the hand-off, so a task is never held by anyone but the worker that
runs it.
"""

import asyncio
import logging
from enum import Enum
from typing import List, Optional

from .context import CrawlContext
from ..storage.sitemap import OutputWriteError


class WorkerState(Enum):
    """Worker lifecycle states."""
    IDLE = "idle"
    RUNNING = "running"
    STOPPED = "stopped"


class Worker:
    """
    Long-lived execution unit running one task at a time.

    Idle -> Running when it takes a task, Running -> Idle when the task
    returns. Stopped is terminal and only reached through ``stop()`` or a
    failed sitemap write.
    """

    def __init__(self, worker_id: str, context: CrawlContext):
        self.worker_id = worker_id
        self.context = context
        self.state = WorkerState.IDLE
        self.tasks_run = 0
        self.logger = logging.getLogger(__name__)
        self._handle: Optional[asyncio.Task] = None

    def start(self) -> asyncio.Task:
        """Start the worker loop on the running event loop."""
        if self._handle is None:
            self._handle = asyncio.create_task(self._run(), name=self.worker_id)
        return self._handle

    async def _run(self):
        self.logger.debug(f"Worker {self.worker_id} started")
        try:
            while True:
                self.state = WorkerState.IDLE
                task = await self.context.frontier.next_task()

                self.state = WorkerState.RUNNING
                try:
                    await task.execute(self.context)
                except OutputWriteError:
                    self.logger.error(f"Worker {self.worker_id} stopping: sitemap is unwritable")
                    raise
                except Exception as e:
                    # The task has already completed itself; keep the worker alive.
                    self.logger.error(f"Worker {self.worker_id} error running {task!r}: {e}",
                                      exc_info=True)
                self.tasks_run += 1
        finally:
            self.state = WorkerState.STOPPED
            self.logger.debug(f"Worker {self.worker_id} stopped after {self.tasks_run} tasks")

    async def stop(self):
        """Stop the worker, cancelling it if it is waiting for work."""
        if self._handle is not None and not self._handle.done():
            self._handle.cancel()
        if self._handle is not None:
            await asyncio.gather(self._handle, return_exceptions=True)
        self.state = WorkerState.STOPPED


class Dispatcher:
    """Starts and stops a fixed-size pool of workers sharing one frontier."""

    def __init__(self, context: CrawlContext, num_workers: int):
        if num_workers < 1:
            raise ValueError("At least one worker is required")
        self.context = context
        self.workers = [Worker(f"worker-{i}", context) for i in range(num_workers)]
        self.logger = logging.getLogger(__name__)

    def start(self) -> List[asyncio.Task]:
        """Start every worker and return their handles."""
        handles = [worker.start() for worker in self.workers]
        self.logger.info(f"Started {len(self.workers)} workers")
        return handles

    async def stop(self):
        """Stop every worker."""
        await asyncio.gather(*(worker.stop() for worker in self.workers))
        self.logger.debug("All workers stopped")

    @property
    def states(self) -> List[WorkerState]:
        return [worker.state for worker in self.workers]
