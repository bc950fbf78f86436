"""
Frontier of pending crawl tasks with completion tracking.

The frontier pairs a bounded queue with a counter of outstanding work: every
admitted task increments it, every finished task decrements it. The crawl is
over when the counter reaches zero, which can happen while the queue has been
empty for a long time (tasks still running) and never before every admitted
task has finished.
"""

import asyncio
import logging
from typing import Optional

from ..utils.monitoring import CrawlMetrics


class URLFrontier:
    """
    Bounded multi-producer/multi-consumer task queue.

    Admission beyond capacity drops the task without counting it: the caller
    is not told and does not retry, and any crawling that task would have led
    to is lost.
    """

    def __init__(self, capacity: int, metrics: Optional[CrawlMetrics] = None):
        if capacity < 1:
            raise ValueError("Frontier capacity must be at least 1")
        self.capacity = capacity
        self.metrics = metrics
        self.logger = logging.getLogger(__name__)

        # asyncio.Queue counts unfinished tasks itself: put() increments,
        # task_done() decrements and join() waits for zero.
        self._queue: asyncio.Queue = asyncio.Queue(maxsize=capacity)
        self._outstanding = 0
        self._dropped = 0

    def admit(self, task) -> bool:
        """
        Add a task if the queue is below capacity.

        Returns:
            True if the task was queued and counted, False if it was dropped
        """
        try:
            self._queue.put_nowait(task)
        except asyncio.QueueFull:
            self._dropped += 1
            self.logger.warning(f"Frontier full ({self.capacity} tasks), dropping {task!r}")
            if self.metrics:
                self.metrics.tasks_dropped.labels(task_type=type(task).__name__).inc()
            return False

        self._outstanding += 1
        if self.metrics:
            self.metrics.queue_length.set(self._queue.qsize())
        return True

    async def next_task(self):
        """Wait for and remove the next pending task."""
        task = await self._queue.get()
        if self.metrics:
            self.metrics.queue_length.set(self._queue.qsize())
        return task

    def complete(self):
        """Mark one admitted task as finished."""
        self._queue.task_done()
        self._outstanding -= 1

    async def wait(self):
        """Wait until every admitted task has completed."""
        await self._queue.join()

    @property
    def queue_length(self) -> int:
        """Tasks admitted but not yet picked up by a worker."""
        return self._queue.qsize()

    @property
    def outstanding(self) -> int:
        """Tasks admitted but not yet completed."""
        return self._outstanding

    @property
    def dropped(self) -> int:
        """Tasks rejected because the queue was full."""
        return self._dropped
