"""
Command-line interface for the crawler.
"""
from __future__ import annotations

import argparse
import logging
import signal
import sys
from typing import List, Optional

from imgcrawler.config import DEFAULT_TIMEOUT, DEFAULT_WORKERS, CrawlConfig
from imgcrawler.core import Crawler, CrawlStats

PROGRAM_NAME = "image-crawler"

logger = logging.getLogger(__name__)


def print_summary(stats: CrawlStats) -> None:
    """Print crawl summary to stderr."""
    sys.stderr.write("=" * 50 + "\n")
    sys.stderr.write("CRAWL SUMMARY\n")
    sys.stderr.write("=" * 50 + "\n\n")

    sys.stderr.write(f"Pages crawled:     {stats.pages_crawled}\n")
    sys.stderr.write(f"Pages failed:      {stats.pages_failed}\n")
    sys.stderr.write(f"Images saved:      {stats.images_saved}\n")
    sys.stderr.write(f"Images skipped:    {stats.images_skipped}\n")
    sys.stderr.write(f"Images failed:     {stats.images_failed}\n\n")

    if stats.error_counts:
        sys.stderr.write("Errors by type:\n")
        for error_type, count in sorted(stats.error_counts.items()):
            if error_type == "connection_error":
                label = "Connection errors"
            elif error_type == "write_error":
                label = "Write errors"
            else:
                label = f"HTTP {error_type}"
            sys.stderr.write(f"  {label}: {count}\n")
    else:
        sys.stderr.write("No errors encountered.\n")

    sys.stderr.write("\n")


def setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s [%(threadName)s] %(name)s: %(message)s",
        stream=sys.stderr,
    )
    logging.getLogger("urllib3").setLevel(logging.WARNING)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=PROGRAM_NAME,
        description="Crawl pages within the scope of the seed URLs and download their images.",
    )
    parser.add_argument("--url", required=True, help="Seed URL(s), comma-separated")
    parser.add_argument(
        "--output-dir",
        help="Directory where images are written (default: current directory)",
    )
    parser.add_argument(
        "--image-format",
        help="Image formats to download, comma-separated, case-insensitive (default: all)",
    )
    parser.add_argument("--user-agent", help="User-Agent header sent with every request")
    parser.add_argument(
        "--workers", type=int, default=DEFAULT_WORKERS,
        help=f"Number of worker threads (default: {DEFAULT_WORKERS})",
    )
    parser.add_argument(
        "--timeout", type=float, default=DEFAULT_TIMEOUT,
        help=f"Request timeout in seconds (default: {DEFAULT_TIMEOUT:g})",
    )
    parser.add_argument("--verbose", action="store_true", help="Show progress and summary")
    return parser


def parse_config(argv: Optional[List[str]] = None) -> tuple[CrawlConfig, argparse.Namespace]:
    """Parse arguments into a CrawlConfig; exits with usage on invalid input."""
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        config = CrawlConfig.from_strings(
            urls=args.url,
            output_dir=args.output_dir,
            image_formats=args.image_format,
            user_agent=args.user_agent,
            workers=args.workers,
            timeout=args.timeout,
        )
    except ValueError as e:
        parser.error(str(e))
    return config, args


def install_signal_handlers(crawler: Crawler) -> None:
    """Stop the crawl gracefully on SIGINT/SIGTERM."""
    def signal_handler(signum, frame):
        logger.info("Received signal %s, stopping crawl...", signum)
        crawler.stop()

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the crawler CLI."""
    config, args = parse_config(argv)
    setup_logging(args.verbose)

    if args.verbose:
        sys.stderr.write(f"Seeds: {', '.join(config.seeds)}\n")
        sys.stderr.write(f"Output directory: {config.output_dir}\n")
        if config.image_formats:
            sys.stderr.write(f"Image formats: {', '.join(sorted(config.image_formats))}\n")
        sys.stderr.write("\n")

    crawler = Crawler(config)
    install_signal_handlers(crawler)
    stats = crawler.run()

    if args.verbose:
        print_summary(stats)

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
