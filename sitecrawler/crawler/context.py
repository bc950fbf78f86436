"""
Shared crawl state passed explicitly to every task.
"""

import time
from dataclasses import dataclass, field

from .fetcher import WebFetcher
from .parser import LinkExtractor
from .url_frontier import URLFrontier
from ..storage.sitemap import SitemapWriter
from ..storage.visited import VisitedSet
from ..utils.monitoring import CrawlMetrics


@dataclass
class CrawlStats:
    """Progress counters. Monotonic; not used for correctness."""
    start_time: float = field(default_factory=time.time)
    total_pages: int = 0
    crawled_pages: int = 0
    fetch_errors: int = 0

    @property
    def elapsed_time(self) -> float:
        return time.time() - self.start_time

    @property
    def pages_per_second(self) -> float:
        elapsed = self.elapsed_time
        return self.crawled_pages / elapsed if elapsed > 0 else 0.0


@dataclass
class CrawlContext:
    """Everything a task needs to run and to produce follow-up tasks."""
    target_host: str
    frontier: URLFrontier
    visited: VisitedSet
    sink: SitemapWriter
    fetcher: WebFetcher
    extractor: LinkExtractor
    stats: CrawlStats
    metrics: CrawlMetrics
