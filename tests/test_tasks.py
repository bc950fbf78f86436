import json

import pytest
from aiohttp import test_utils

from conftest import drain, make_site, run_task
from sitecrawler.crawler.tasks import AdmitTask, ExtractLinksTask, FetchTask


@pytest.mark.asyncio
async def test_fetch_valid_page_produces_extract_task(make_context):
    site = make_site({"/": "<html><body>hello</body></html>"})
    async with test_utils.TestServer(site) as server:
        url = str(server.make_url("/"))
        ctx = make_context(target_host=f"{server.host}:{server.port}")

        async with ctx.fetcher:
            await run_task(ctx, FetchTask(url=url))

    follow_ups = await drain(ctx.frontier)
    assert len(follow_ups) == 1
    assert isinstance(follow_ups[0], ExtractLinksTask)
    assert follow_ups[0].url == url
    assert "<html" in follow_ups[0].body
    assert ctx.frontier.outstanding == 1


@pytest.mark.asyncio
async def test_fetch_invalid_url_produces_nothing(make_context):
    ctx = make_context()

    async with ctx.fetcher:
        await run_task(ctx, FetchTask(url="google.com/"))

    assert ctx.frontier.queue_length == 0
    assert ctx.frontier.outstanding == 0
    assert ctx.stats.fetch_errors == 1


@pytest.mark.asyncio
async def test_fetch_non_success_status_is_abandoned(make_context):
    site = make_site({"/gone": "<html></html>"}, status={"/gone": 500})
    async with test_utils.TestServer(site) as server:
        ctx = make_context()

        async with ctx.fetcher:
            await run_task(ctx, FetchTask(url=str(server.make_url("/gone"))))
            await run_task(ctx, FetchTask(url=str(server.make_url("/missing"))))

    assert ctx.frontier.queue_length == 0
    assert ctx.frontier.outstanding == 0
    assert ctx.stats.fetch_errors == 2


@pytest.mark.asyncio
async def test_extract_none(make_context):
    ctx = make_context()

    output = await run_task(ctx, ExtractLinksTask(url="http://google.com/", body="<html></html>"))

    assert ctx.frontier.queue_length == 0
    assert json.loads(output) == {"Link": "http://google.com/", "Links": [], "Assets": []}


@pytest.mark.asyncio
async def test_extract_a(make_context):
    ctx = make_context()
    body = '<html><a href="link_destination"></a></html>'

    output = await run_task(ctx, ExtractLinksTask(url="http://google.com/", body=body))

    follow_ups = await drain(ctx.frontier)
    assert follow_ups == [AdmitTask(url="http://google.com/link_destination")]
    assert '"Links": ["http://google.com/link_destination"]' in output


@pytest.mark.asyncio
async def test_extract_link_element_is_a_link(make_context):
    ctx = make_context()
    body = '<html><link href="link_destination"></html>'

    output = await run_task(ctx, ExtractLinksTask(url="http://google.com/", body=body))

    assert await drain(ctx.frontier) == [AdmitTask(url="http://google.com/link_destination")]
    record = json.loads(output)
    assert record["Links"] == ["http://google.com/link_destination"]
    assert record["Assets"] == []


@pytest.mark.asyncio
@pytest.mark.parametrize("body", [
    '<html><script src="link_destination"></script></html>',
    '<html><img src="link_destination"></html>',
])
async def test_extract_assets_never_produce_follow_ups(make_context, body):
    ctx = make_context()

    output = await run_task(ctx, ExtractLinksTask(url="http://google.com/", body=body))

    assert ctx.frontier.queue_length == 0
    record = json.loads(output)
    assert record["Links"] == []
    assert record["Assets"] == ["http://google.com/link_destination"]


@pytest.mark.asyncio
async def test_extract_admits_each_unique_link_once(make_context):
    ctx = make_context()
    body = '<a href="/a"></a><a href="/a#frag"></a><a href="/b?q=1"></a><link href="/b">'

    output = await run_task(ctx, ExtractLinksTask(url="http://google.com/", body=body))

    follow_ups = await drain(ctx.frontier)
    assert len(follow_ups) == 2
    assert set(follow_ups) == {
        AdmitTask(url="http://google.com/a"),
        AdmitTask(url="http://google.com/b"),
    }
    assert json.loads(output)["Links"] == ["http://google.com/a", "http://google.com/b"]
    assert ctx.stats.crawled_pages == 1


@pytest.mark.asyncio
async def test_admit_in_domain(make_context):
    ctx = make_context(target_host="google.com")
    link = "http://google.com/hi.jpg"

    await run_task(ctx, AdmitTask(url=link))

    assert await drain(ctx.frontier) == [FetchTask(url=link)]
    assert link in ctx.visited
    assert ctx.stats.total_pages == 1


@pytest.mark.asyncio
async def test_admit_out_of_domain(make_context):
    ctx = make_context(target_host="google.com")

    await run_task(ctx, AdmitTask(url="http://hello.com/hi.jpg"))

    assert ctx.frontier.queue_length == 0
    assert len(ctx.visited) == 0
    assert ctx.stats.total_pages == 0


@pytest.mark.asyncio
async def test_admit_same_url_twice_yields_one_fetch(make_context):
    ctx = make_context(target_host="google.com")
    link = "http://google.com/page"

    await run_task(ctx, AdmitTask(url=link))
    follow_ups = await drain(ctx.frontier)
    await run_task(ctx, AdmitTask(url=link))
    follow_ups += await drain(ctx.frontier)

    assert follow_ups == [FetchTask(url=link)]
    assert len(ctx.visited) == 1
    assert ctx.stats.total_pages == 1


@pytest.mark.asyncio
async def test_admit_out_of_domain_even_when_unvisited_on_other_host(make_context):
    ctx = make_context(target_host="google.com:8080")

    await run_task(ctx, AdmitTask(url="http://google.com/page"))

    assert ctx.frontier.queue_length == 0
