"""
Storage layer for the crawler: the visited-URL set and the sitemap writer.
"""

from .sitemap import OutputWriteError, PageRecord, SitemapWriter
from .visited import VisitedSet

__all__ = ['OutputWriteError', 'PageRecord', 'SitemapWriter', 'VisitedSet']
