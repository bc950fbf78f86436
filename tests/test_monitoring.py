from sitecrawler.utils.monitoring import CrawlMetrics


def test_metrics_use_private_registries():
    first, second = CrawlMetrics(), CrawlMetrics()

    first.pages_crawled.inc()
    first.queue_length.set(4)

    assert first.get_current_values()["crawler_pages_crawled_total"] == 1
    assert first.get_current_values()["crawler_frontier_queue_length"] == 4
    assert second.get_current_values()["crawler_pages_crawled_total"] == 0
