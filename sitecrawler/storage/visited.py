"""
Shared record of URLs already admitted for crawling.
"""

import asyncio
from typing import Set


class VisitedSet:
    """
    Monotonically growing set of canonical URLs.

    Callers check and mark under ``lock`` so two concurrent admissions of the
    same URL produce exactly one winner.
    """

    def __init__(self):
        self.lock = asyncio.Lock()
        self._urls: Set[str] = set()

    def add(self, url: str):
        """Mark a URL as visited. Callers hold ``lock``."""
        self._urls.add(url)

    def __contains__(self, url: str) -> bool:
        return url in self._urls

    def __len__(self) -> int:
        return len(self._urls)
