"""
Thread-safe claim sets for page and image URLs.
"""
from __future__ import annotations

import threading
from typing import Set


class DedupRegistry:
    """
    Records which page and image URLs have been claimed during a crawl run.

    A claim is an atomic check-and-insert: for any URL exactly one caller of
    ``claim_page`` (or ``claim_image``) gets ``True``. Pages and images live in
    separate namespaces, and nothing is ever removed.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._pages: Set[str] = set()
        self._images: Set[str] = set()

    def _claim(self, claimed: Set[str], url: str) -> bool:
        with self._lock:
            if url in claimed:
                return False
            claimed.add(url)
            return True

    def claim_page(self, url: str) -> bool:
        """Return True if this call is the first to claim the page URL."""
        return self._claim(self._pages, url)

    def claim_image(self, url: str) -> bool:
        """Return True if this call is the first to claim the image URL."""
        return self._claim(self._images, url)

    def is_page_claimed(self, url: str) -> bool:
        with self._lock:
            return url in self._pages

    def is_image_claimed(self, url: str) -> bool:
        with self._lock:
            return url in self._images

    @property
    def pages_claimed(self) -> int:
        with self._lock:
            return len(self._pages)

    @property
    def images_claimed(self) -> int:
        with self._lock:
            return len(self._images)
