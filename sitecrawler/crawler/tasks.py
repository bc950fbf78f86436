"""
Crawl tasks.

A crawl is a chain of three task kinds: ``FetchTask`` downloads a page and
produces an ``ExtractLinksTask``, which records the page and produces one
``AdmitTask`` per link, which decides whether the link becomes a new
``FetchTask``. Every task calls ``frontier.complete()`` exactly once when it
finishes, whatever the outcome.
"""

import logging
from dataclasses import dataclass, field
from typing import Union

from .context import CrawlContext
from .parser import url_host
from ..storage.sitemap import PageRecord


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FetchTask:
    """Download a page."""
    url: str

    async def execute(self, ctx: CrawlContext):
        try:
            result = await ctx.fetcher.fetch(self.url)
            if result.ok:
                ctx.frontier.admit(ExtractLinksTask(url=self.url, body=result.content))
            else:
                # Abandon the page; fetch failures are never retried or surfaced.
                ctx.stats.fetch_errors += 1
                ctx.metrics.fetch_errors.inc()
                logger.debug(f"Abandoning {self.url}: {result.error}")
        finally:
            ctx.frontier.complete()


@dataclass(frozen=True)
class ExtractLinksTask:
    """Collect a downloaded page's links and assets and write its record."""
    url: str
    body: str = field(repr=False)

    async def execute(self, ctx: CrawlContext):
        try:
            extracted = ctx.extractor.extract(self.url, self.body)

            for link in extracted.links:
                ctx.frontier.admit(AdmitTask(url=link))

            await ctx.sink.append(PageRecord(
                url=self.url,
                links=frozenset(extracted.links),
                assets=frozenset(extracted.assets)
            ))
        finally:
            ctx.frontier.complete()


@dataclass(frozen=True)
class AdmitTask:
    """
    Queue a discovered link for fetching if it is new and on the target host.

    This is the only task that reads or writes the visited set.
    """
    url: str

    async def execute(self, ctx: CrawlContext):
        try:
            async with ctx.visited.lock:
                if self.url in ctx.visited or url_host(self.url) != ctx.target_host:
                    return

                ctx.visited.add(self.url)
                ctx.stats.total_pages += 1
                ctx.metrics.pages_admitted.inc()
                ctx.frontier.admit(FetchTask(url=self.url))
        finally:
            ctx.frontier.complete()


Task = Union[FetchTask, ExtractLinksTask, AdmitTask]
