"""
Core crawling engine: frontier, worker pool and statistics.
"""
from __future__ import annotations

import logging
import threading
from collections import defaultdict
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Callable, Dict, Optional, Protocol

from imgcrawler.config import CrawlConfig
from imgcrawler.fetcher import FetchResult, PageFetcher
from imgcrawler.images import select_image
from imgcrawler.links import ScopeFilter, classify_links, resolve_images, resolve_links
from imgcrawler.registry import DedupRegistry
from imgcrawler.storage import DirectoryWriter

logger = logging.getLogger(__name__)


class Fetcher(Protocol):
    def fetch_page(self, url: str) -> FetchResult: ...

    def fetch_bytes(self, url: str) -> FetchResult: ...


class Storage(Protocol):
    def save(self, name: str, data: bytes) -> object: ...


@dataclass(slots=True)
class CrawlStats:
    """Statistics collected during crawl for summary output."""
    pages_crawled: int = 0
    pages_failed: int = 0
    images_saved: int = 0
    images_skipped: int = 0
    images_failed: int = 0
    error_counts: Dict[str, int] = field(default_factory=lambda: defaultdict(int))

    def record_error(self, status_code: Optional[int]) -> None:
        """Record an error by status code category."""
        if status_code is None:
            self.error_counts["connection_error"] += 1
        elif status_code >= 400:
            self.error_counts[str(status_code)] += 1


class Crawler:
    """
    Crawls every seed within its own scope using a fixed pool of worker threads.

    Pages are claimed in the registry before submission, so each page is
    fetched at most once per run; images are claimed the same way before
    their download task is submitted. Discovered links go back to the pool
    as new tasks instead of being followed inline.

    Completion is tracked with an active-task counter: it is incremented
    before each submission and decremented when a task finishes, and the
    crawl is over when it drops back to zero.
    """

    def __init__(
        self,
        config: CrawlConfig,
        fetcher: Optional[Fetcher] = None,
        registry: Optional[DedupRegistry] = None,
        storage: Optional[Storage] = None,
    ) -> None:
        self.config = config
        self._owns_fetcher = fetcher is None
        self.fetcher = fetcher or PageFetcher(user_agent=config.user_agent, timeout=config.timeout)
        self.registry = registry or DedupRegistry()
        self.storage = storage or DirectoryWriter(config.output_dir)
        self.stats = CrawlStats()

        self._executor: Optional[ThreadPoolExecutor] = None
        self._lock = threading.Lock()
        self._active = 0
        self._done = threading.Event()
        self._stop = threading.Event()

    # -- lifecycle -----------------------------------------------------

    def run(self) -> CrawlStats:
        """Crawl all seeds to completion and return the collected statistics."""
        self._done.clear()
        self._executor = ThreadPoolExecutor(
            max_workers=self.config.workers, thread_name_prefix="crawler"
        )
        # The seeding loop holds one token so the counter cannot reach zero
        # while seeds are still being submitted
        with self._lock:
            self._active += 1
        try:
            try:
                for seed in self.config.seeds:
                    if self.registry.claim_page(seed):
                        self._submit(self._process_page, seed, ScopeFilter(seed))
                    else:
                        logger.info("Duplicate seed skipped: %s", seed)
            finally:
                self._task_done()
            self._done.wait()
        finally:
            self._executor.shutdown(wait=True)
            self._executor = None
            if self._owns_fetcher:
                self.fetcher.close()
        return self.stats

    def stop(self) -> None:
        """Ask workers to stop; queued tasks finish without doing any work."""
        if not self._stop.is_set():
            logger.warning("Stop requested, draining remaining tasks")
        self._stop.set()

    @property
    def stopped(self) -> bool:
        return self._stop.is_set()

    # -- task bookkeeping ----------------------------------------------

    def _submit(self, fn: Callable[..., None], *args: object) -> None:
        if self._stop.is_set():
            return
        with self._lock:
            self._active += 1
        try:
            self._executor.submit(self._run_task, fn, *args)
        except RuntimeError:
            # Executor already shut down
            self._task_done()
            raise

    def _run_task(self, fn: Callable[..., None], *args: object) -> None:
        try:
            if not self._stop.is_set():
                fn(*args)
        except Exception:
            logger.exception("Unexpected error in crawl task %s%r", fn.__name__, args)
        finally:
            self._task_done()

    def _task_done(self) -> None:
        with self._lock:
            self._active -= 1
            if self._active == 0:
                self._done.set()

    # -- workers -------------------------------------------------------

    def _process_page(self, url: str, scope: ScopeFilter) -> None:
        logger.info("Processing page: %s", url)
        result = self.fetcher.fetch_page(url)
        if not result.ok:
            logger.warning("Failed to fetch page %s: %s", url, result.error)
            with self._lock:
                self.stats.pages_failed += 1
                self.stats.record_error(result.status_code)
            return

        with self._lock:
            self.stats.pages_crawled += 1

        document = result.document
        if document is None:
            return
        base_url = result.final_url or url

        for src in resolve_images(document, base_url):
            if self.registry.claim_image(src):
                self._submit(self._download_image, src)

        new_links = 0
        for target in classify_links(resolve_links(document, base_url), scope):
            if self.registry.claim_page(target):
                self._submit(self._process_page, target, scope)
                new_links += 1
        logger.debug("%s: +%d new links", url, new_links)

    def _download_image(self, src: str) -> None:
        result = self.fetcher.fetch_bytes(src)
        if not result.ok:
            logger.warning("Failed to fetch image %s: %s", src, result.error)
            with self._lock:
                self.stats.images_failed += 1
                self.stats.record_error(result.status_code)
            return

        name = select_image(src, result.content_type, self.config.image_formats)
        if name is None:
            logger.debug("Image skipped (%s): %s", result.content_type, src)
            with self._lock:
                self.stats.images_skipped += 1
            return

        try:
            path = self.storage.save(name, result.content or b"")
        except OSError as e:
            logger.warning("Couldn't save image %s as %s: %s", src, name, e)
            with self._lock:
                self.stats.images_failed += 1
                self.stats.error_counts["write_error"] += 1
            return

        logger.info("Saved image %s -> %s", src, path)
        with self._lock:
            self.stats.images_saved += 1


def crawl(
    config: CrawlConfig,
    fetcher: Optional[Fetcher] = None,
    registry: Optional[DedupRegistry] = None,
    storage: Optional[Storage] = None,
) -> CrawlStats:
    """
    Crawl every seed in the config and download the qualifying images.

    Args:
        config: Seeds, output directory, User-Agent, image allow-list and pool size.
        fetcher: HTTP fetcher; a PageFetcher built from the config by default.
        registry: Dedup registry shared by all workers; a fresh one by default.
        storage: Image writer; a DirectoryWriter on config.output_dir by default.

    Returns:
        Crawl statistics.
    """
    return Crawler(config, fetcher=fetcher, registry=registry, storage=storage).run()
