"""
In-memory collaborators for exercising the crawler without a network.
"""
from __future__ import annotations

import threading
from collections import Counter
from typing import Dict, Optional, Tuple

import pytest
from bs4 import BeautifulSoup

from imgcrawler.fetcher import FetchResult


class FakeFetcher:
    """Serves pages and images from dictionaries and counts every request."""

    def __init__(
        self,
        pages: Optional[Dict[str, str]] = None,
        images: Optional[Dict[str, Tuple[bytes, Optional[str]]]] = None,
    ) -> None:
        self.pages = pages or {}
        self.images = images or {}
        self.page_requests: Counter = Counter()
        self.image_requests: Counter = Counter()
        self._lock = threading.Lock()

    def fetch_page(self, url: str) -> FetchResult:
        with self._lock:
            self.page_requests[url] += 1
        if url not in self.pages:
            return FetchResult(url=url, final_url=url, status_code=404, error="HTTP 404")
        return FetchResult(
            url=url,
            final_url=url,
            status_code=200,
            content_type="text/html",
            document=BeautifulSoup(self.pages[url], "lxml"),
        )

    def fetch_bytes(self, url: str) -> FetchResult:
        with self._lock:
            self.image_requests[url] += 1
        if url not in self.images:
            return FetchResult(url=url, final_url=url, error="ConnectionError: refused")
        content, content_type = self.images[url]
        return FetchResult(
            url=url, final_url=url, status_code=200, content_type=content_type, content=content
        )


class MemoryStorage:
    def __init__(self) -> None:
        self.saved: Dict[str, bytes] = {}
        self.writes: Counter = Counter()
        self._lock = threading.Lock()

    def save(self, name: str, data: bytes) -> str:
        with self._lock:
            self.saved[name] = data
            self.writes[name] += 1
        return name


@pytest.fixture
def storage() -> MemoryStorage:
    return MemoryStorage()


@pytest.fixture
def fake_fetcher():
    return FakeFetcher
