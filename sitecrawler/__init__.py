"""
Single-domain sitemap crawler

Crawls every page reachable from a root URL on the same host and writes one
JSON record per page listing its links and assets.
"""

__version__ = "1.0.0"
__description__ = "A concurrent single-domain crawler producing newline-delimited JSON sitemaps"
