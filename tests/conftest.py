import io

import pytest
from aiohttp import web

from sitecrawler.crawler.context import CrawlContext, CrawlStats
from sitecrawler.crawler.fetcher import WebFetcher
from sitecrawler.crawler.parser import LinkExtractor
from sitecrawler.crawler.url_frontier import URLFrontier
from sitecrawler.storage.sitemap import SitemapWriter
from sitecrawler.storage.visited import VisitedSet
from sitecrawler.utils.monitoring import CrawlMetrics


@pytest.fixture
def make_context():
    """Factory for a crawl context writing to in-memory streams.

    Call it inside the test coroutine so locks and queues belong to the
    test's event loop.
    """

    def _make(target_host="google.com", capacity=10, output=None):
        stats = CrawlStats()
        metrics = CrawlMetrics()
        frontier = URLFrontier(capacity, metrics)
        sink = SitemapWriter(
            output if output is not None else io.StringIO(),
            stats,
            frontier,
            progress_stream=io.StringIO(),
            metrics=metrics,
        )
        return CrawlContext(
            target_host=target_host,
            frontier=frontier,
            visited=VisitedSet(),
            sink=sink,
            fetcher=WebFetcher(user_agent="sitecrawler-tests", request_timeout=5),
            extractor=LinkExtractor(),
            stats=stats,
            metrics=metrics,
        )

    return _make


async def run_task(ctx, task):
    """Admit a task, take it back off the frontier and run it.

    Follow-up tasks stay queued for inspection. Returns the sitemap output.
    """
    assert ctx.frontier.admit(task)
    assert await ctx.frontier.next_task() is task
    await task.execute(ctx)
    return ctx.sink.stream.getvalue()


async def drain(frontier):
    """Remove and return every queued task."""
    tasks = []
    while frontier.queue_length:
        tasks.append(await frontier.next_task())
    return tasks


def make_site(pages, status=None):
    """aiohttp application serving ``pages`` (path -> HTML) and 404 otherwise."""
    status = status or {}

    async def handler(request):
        if request.path not in pages:
            raise web.HTTPNotFound()
        return web.Response(
            text=pages[request.path],
            status=status.get(request.path, 200),
            content_type="text/html",
        )

    app = web.Application()
    app.router.add_get("/{tail:.*}", handler)
    return app
