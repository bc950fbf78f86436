"""
Sitemap output: one JSON object per crawled page, newline delimited.
"""

import asyncio
import json
import logging
import sys
import time
from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, Optional, TextIO

from ..utils.monitoring import CrawlMetrics


class OutputWriteError(Exception):
    """The sitemap could not be written. Fatal to the crawl."""
    pass


@dataclass(frozen=True)
class PageRecord:
    """Links and assets found on one crawled page."""
    url: str
    links: FrozenSet[str] = field(default_factory=frozenset)
    assets: FrozenSet[str] = field(default_factory=frozenset)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the output shape. Sets are rendered as sorted arrays."""
        return {
            'Link': self.url,
            'Links': sorted(self.links),
            'Assets': sorted(self.assets)
        }


class SitemapWriter:
    """
    Appends page records to the output stream under an exclusive lock and
    reports progress after every record.
    """

    def __init__(self, stream: TextIO, stats, frontier=None,
                 progress_stream: Optional[TextIO] = None,
                 metrics: Optional[CrawlMetrics] = None):
        self.stream = stream
        self.stats = stats
        self.frontier = frontier
        self.progress_stream = progress_stream if progress_stream is not None else sys.stdout
        self.metrics = metrics
        self.lock = asyncio.Lock()
        self.logger = logging.getLogger(__name__)

    async def append(self, record: PageRecord):
        """
        Write one record.

        Raises:
            OutputWriteError: if the output stream cannot be written
        """
        line = json.dumps(record.to_dict(), ensure_ascii=False)

        async with self.lock:
            try:
                self.stream.write(line + '\n')
                self.stream.flush()
            except (OSError, ValueError) as e:
                self.logger.error(f"Failed to write record for {record.url}: {e}")
                raise OutputWriteError(f"Failed to write sitemap: {e}") from e

            self.stats.crawled_pages += 1
            if self.metrics:
                self.metrics.pages_crawled.inc()
            self._report_progress()

    def _report_progress(self):
        elapsed = time.time() - self.stats.start_time
        speed = self.stats.crawled_pages / elapsed if elapsed > 0 else 0.0
        queue_length = self.frontier.queue_length if self.frontier is not None else 0

        self.progress_stream.write(
            f"\r{self.stats.crawled_pages} / {self.stats.total_pages} crawled. "
            f"job queue length: {queue_length}, speed: {speed:f} pages/s "
        )
        self.progress_stream.flush()
