"""
Crawl driver: seeds the frontier, runs the worker pool and waits for the
crawl to run out of work.
"""

import asyncio
import logging
from typing import List, Optional, TextIO

from .context import CrawlContext, CrawlStats
from .fetcher import WebFetcher
from .parser import LinkExtractor, canonicalize_url, url_host
from .tasks import AdmitTask
from .url_frontier import URLFrontier
from .worker import Dispatcher
from ..storage.sitemap import SitemapWriter
from ..storage.visited import VisitedSet
from ..utils.config import Config
from ..utils.monitoring import CrawlMetrics


class CrawlerScheduler:
    """
    Runs one crawl of a single host.

    Completion is detected by the frontier's outstanding-work counter, so the
    number of pages does not need to be known in advance.
    """

    def __init__(self, config: Config, output: TextIO,
                 progress_stream: Optional[TextIO] = None,
                 metrics: Optional[CrawlMetrics] = None,
                 fetcher: Optional[WebFetcher] = None):
        self.config = config
        self.output = output
        self.progress_stream = progress_stream
        self.metrics = metrics or CrawlMetrics()
        self.logger = logging.getLogger(__name__)

        crawler_config = config.crawler
        self.fetcher = fetcher or WebFetcher(
            user_agent=crawler_config.user_agent,
            request_timeout=crawler_config.request_timeout,
            max_connections=crawler_config.max_workers,
            max_content_size=crawler_config.max_content_size
        )

        self.stats = CrawlStats()
        self.context: Optional[CrawlContext] = None

    def _build_context(self) -> CrawlContext:
        crawler_config = self.config.crawler
        frontier = URLFrontier(crawler_config.max_queued_tasks, self.metrics)

        return CrawlContext(
            target_host=url_host(crawler_config.root_url),
            frontier=frontier,
            visited=VisitedSet(),
            sink=SitemapWriter(self.output, self.stats, frontier,
                               progress_stream=self.progress_stream,
                               metrics=self.metrics),
            fetcher=self.fetcher,
            extractor=LinkExtractor(),
            stats=self.stats,
            metrics=self.metrics
        )

    def _seed(self, ctx: CrawlContext):
        """Queue the canonical root URL for admission like any discovered link."""
        root_url = self.config.crawler.root_url
        ctx.frontier.admit(AdmitTask(url=canonicalize_url(root_url, root_url)))

    async def crawl(self) -> CrawlStats:
        """
        Crawl until no task produces further work.

        Raises:
            OutputWriteError: if the sitemap could not be written
        """
        self.stats = CrawlStats()
        self.context = ctx = self._build_context()

        self.logger.info(f"Crawling {self.config.crawler.root_url} "
                         f"(host={ctx.target_host}, workers={self.config.crawler.max_workers}, "
                         f"max queued tasks={self.config.crawler.max_queued_tasks})")

        async with self.fetcher:
            self._seed(ctx)

            dispatcher = Dispatcher(ctx, self.config.crawler.max_workers)
            workers = dispatcher.start()
            try:
                await self._wait_for_completion(ctx.frontier, workers)
            finally:
                await dispatcher.stop()

        self._log_final_stats()
        return self.stats

    async def _wait_for_completion(self, frontier: URLFrontier, workers: List[asyncio.Task]):
        """Wait for the outstanding-work counter to reach zero or a worker to die."""
        finished = asyncio.create_task(frontier.wait())
        done, _ = await asyncio.wait([finished, *workers], return_when=asyncio.FIRST_COMPLETED)

        for worker in workers:
            if worker in done and not worker.cancelled() and worker.exception() is not None:
                finished.cancel()
                raise worker.exception()

        if finished not in done:
            finished.cancel()
            raise RuntimeError("Worker pool stopped before the crawl completed")

    def _log_final_stats(self):
        """Log final crawl statistics."""
        frontier = self.context.frontier

        self.logger.info("=== CRAWL COMPLETED ===")
        self.logger.info(f"Pages admitted: {self.stats.total_pages}")
        self.logger.info(f"Pages crawled: {self.stats.crawled_pages}")
        self.logger.info(f"Fetch errors: {self.stats.fetch_errors}")
        self.logger.info(f"Tasks dropped (frontier full): {frontier.dropped}")
        self.logger.info(f"Total time: {self.stats.elapsed_time:.2f} seconds")
        self.logger.info(f"Average rate: {self.stats.pages_per_second:.2f} pages/s")
        self.logger.info(f"Fetcher stats: {self.fetcher.get_stats()}")
        self.logger.debug(f"Metrics: {self.metrics.get_current_values()}")
