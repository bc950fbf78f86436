"""
Crawl engine components.
"""

from .url_frontier import URLFrontier
from .fetcher import WebFetcher, FetchResult
from .parser import LinkExtractor, ExtractedLinks, canonicalize_url, url_host
from .context import CrawlContext, CrawlStats
from .tasks import AdmitTask, ExtractLinksTask, FetchTask, Task
from .worker import Dispatcher, Worker, WorkerState
from .scheduler import CrawlerScheduler

__all__ = [
    'URLFrontier',
    'WebFetcher', 'FetchResult',
    'LinkExtractor', 'ExtractedLinks', 'canonicalize_url', 'url_host',
    'CrawlContext', 'CrawlStats',
    'AdmitTask', 'ExtractLinksTask', 'FetchTask', 'Task',
    'Dispatcher', 'Worker', 'WorkerState',
    'CrawlerScheduler'
]
