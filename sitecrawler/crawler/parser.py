"""
Link and asset extraction from HTML documents.
"""

import logging
from typing import Dict, List
from urllib.parse import urljoin, urlsplit, urlunsplit
from dataclasses import dataclass, field
from bs4 import BeautifulSoup, SoupStrainer


# Opening tags we inspect, and the attribute carrying the reference.
LINK_TAGS = {'a': 'href', 'link': 'href'}
ASSET_TAGS = {'script': 'src', 'img': 'src'}


def canonicalize_url(href: str, base_url: str) -> str:
    """
    Resolve a reference against the page URL and strip query and fragment.

    A reference that cannot be parsed falls back to the page URL itself.
    """
    try:
        parsed = urlsplit(urljoin(base_url, href))
    except ValueError:
        return base_url
    return urlunsplit((parsed.scheme, parsed.netloc, parsed.path, '', ''))


def url_host(url: str) -> str:
    """Host (with port, without credentials) of a URL, lower-cased."""
    try:
        netloc = urlsplit(url).netloc
    except ValueError:
        return ''
    return netloc.rpartition('@')[2].lower()


@dataclass
class ExtractedLinks:
    """Unique resolved references found in one document, in document order."""
    links: List[str] = field(default_factory=list)
    assets: List[str] = field(default_factory=list)


class LinkExtractor:
    """
    Tokenizes HTML and collects link-class and asset-class references.

    ``a`` and ``link`` elements contribute their ``href`` to links, ``script``
    and ``img`` elements contribute their ``src`` to assets.
    """

    def __init__(self, features: str = 'lxml'):
        self.features = features
        self.logger = logging.getLogger(__name__)
        self._tag_names = list(LINK_TAGS) + list(ASSET_TAGS)
        self._strainer = SoupStrainer(self._tag_names)

    def extract(self, url: str, html_content: str) -> ExtractedLinks:
        """
        Extract references from a document.

        Args:
            url: The resolved URL of the page, used as the base for relative references
            html_content: Raw document body

        Returns:
            ExtractedLinks with canonical absolute URLs
        """
        links: Dict[str, None] = {}
        assets: Dict[str, None] = {}

        soup = BeautifulSoup(html_content, self.features, parse_only=self._strainer)

        for tag in soup.find_all(self._tag_names):
            if tag.name in LINK_TAGS:
                target = links
                value = tag.get(LINK_TAGS[tag.name])
            else:
                target = assets
                value = tag.get(ASSET_TAGS[tag.name])

            if not value or not value.strip():
                continue

            target[canonicalize_url(value.strip(), url)] = None

        self.logger.debug(f"Extracted {len(links)} links and {len(assets)} assets from {url}")

        return ExtractedLinks(links=list(links), assets=list(assets))
