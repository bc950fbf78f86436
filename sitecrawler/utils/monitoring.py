"""
Prometheus metrics for the crawler.
"""

import logging
from typing import Dict

from prometheus_client import CollectorRegistry, Counter, Gauge, start_http_server


class CrawlMetrics:
    """
    Crawl counters backed by a private Prometheus registry.

    Each instance owns its registry so several crawls (or tests) in one
    process never collide on metric names.
    """

    def __init__(self):
        self.logger = logging.getLogger(__name__)
        self.registry = CollectorRegistry()

        self.pages_admitted = Counter(
            'crawler_pages_admitted_total',
            'Pages admitted for fetching',
            registry=self.registry
        )
        self.pages_crawled = Counter(
            'crawler_pages_crawled_total',
            'Page records written to the sitemap',
            registry=self.registry
        )
        self.fetch_errors = Counter(
            'crawler_fetch_errors_total',
            'Fetches abandoned because of an error',
            registry=self.registry
        )
        self.tasks_dropped = Counter(
            'crawler_tasks_dropped_total',
            'Tasks dropped because the frontier was full',
            ['task_type'],
            registry=self.registry
        )
        self.queue_length = Gauge(
            'crawler_frontier_queue_length',
            'Tasks waiting in the frontier',
            registry=self.registry
        )

    def start_server(self, port: int):
        """Expose the registry over HTTP."""
        start_http_server(port, registry=self.registry)
        self.logger.info(f"Prometheus metrics server started on port {port}")

    def get_current_values(self) -> Dict[str, float]:
        """Get current values of all samples, keyed by sample name."""
        values = {}
        for metric in self.registry.collect():
            for sample in metric.samples:
                if sample.name.endswith('_created'):
                    continue
                if sample.labels:
                    label_str = ','.join(f"{k}={v}" for k, v in sorted(sample.labels.items()))
                    values[f"{sample.name}{{{label_str}}}"] = sample.value
                else:
                    values[sample.name] = sample.value
        return values
