"""
Concurrent crawler that follows same-scope links from seed URLs and downloads embedded images.
"""
from imgcrawler.config import CrawlConfig
from imgcrawler.core import Crawler, CrawlStats, crawl
from imgcrawler.registry import DedupRegistry

__version__ = "1.0.0"
__all__ = ["crawl", "Crawler", "CrawlConfig", "CrawlStats", "DedupRegistry"]
