import io
import json

import pytest

from sitecrawler.crawler.context import CrawlStats
from sitecrawler.storage.sitemap import OutputWriteError, PageRecord, SitemapWriter


def test_page_record_output_shape():
    record = PageRecord(
        url="http://example.com/",
        links=frozenset({"http://example.com/x"}),
        assets=frozenset({"http://example.com/y.png", "http://example.com/a.js"}),
    )

    assert record.to_dict() == {
        "Link": "http://example.com/",
        "Links": ["http://example.com/x"],
        "Assets": ["http://example.com/a.js", "http://example.com/y.png"],
    }


@pytest.mark.asyncio
async def test_append_writes_one_line_per_record_and_reports_progress():
    output, progress = io.StringIO(), io.StringIO()
    stats = CrawlStats(total_pages=3)
    writer = SitemapWriter(output, stats, progress_stream=progress)

    await writer.append(PageRecord(url="http://example.com/"))
    await writer.append(PageRecord(url="http://example.com/a", links=frozenset({"http://example.com/"})))

    lines = output.getvalue().splitlines()
    assert [json.loads(line)["Link"] for line in lines] == ["http://example.com/", "http://example.com/a"]
    assert stats.crawled_pages == 2

    last_update = progress.getvalue().split("\r")[-1]
    assert last_update.startswith("2 / 3 crawled. job queue length: 0, speed: ")
    assert last_update.endswith(" pages/s ")


@pytest.mark.asyncio
async def test_append_failure_is_fatal():
    output = io.StringIO()
    output.close()
    stats = CrawlStats()
    writer = SitemapWriter(output, stats, progress_stream=io.StringIO())

    with pytest.raises(OutputWriteError):
        await writer.append(PageRecord(url="http://example.com/"))

    assert stats.crawled_pages == 0
