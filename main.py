#!/usr/bin/env python3
"""
Main entry point for the sitemap crawler.
"""

import asyncio
import argparse
import logging
import sys
from typing import List, Optional, TextIO

from sitecrawler import __version__
from sitecrawler.crawler.scheduler import CrawlerScheduler
from sitecrawler.storage.sitemap import OutputWriteError
from sitecrawler.utils.config import (
    Config, ConfigError, load_config,
    DEFAULT_OUTPUT_FILE, DEFAULT_MAX_WORKERS, DEFAULT_MAX_QUEUED_TASKS
)
from sitecrawler.utils.logger import setup_logging, log_system_info
from sitecrawler.utils.monitoring import CrawlMetrics


class CrawlerApp:
    """Main application class for the crawler."""

    def __init__(self, stdout: Optional[TextIO] = None, stderr: Optional[TextIO] = None):
        self.stdout = stdout if stdout is not None else sys.stdout
        self.stderr = stderr if stderr is not None else sys.stderr
        self.logger = logging.getLogger(__name__)

    def run(self, config: Config) -> int:
        """Run one crawl and return the process exit code."""
        output_file = config.crawler.output_file
        try:
            output = open(output_file, 'w', encoding='utf-8')
        except OSError as e:
            print(f"Can't write {output_file}...", file=self.stderr)
            self.logger.error(f"Cannot open output file {output_file}: {e}")
            return 1

        with output:
            metrics = CrawlMetrics()
            if config.monitoring.metrics_enabled:
                port = config.monitoring.prometheus_port
                try:
                    metrics.start_server(port)
                except OSError as e:
                    print(f"Can't start metrics server on port {port}: {e}", file=self.stderr)
                    self.logger.error(f"Cannot start metrics server on port {port}: {e}")
                    return 1

            return self._crawl(config, output, metrics)

    def _crawl(self, config: Config, output: TextIO, metrics: CrawlMetrics) -> int:
        self.logger.info("=== CRAWLER STARTING ===")
        self.logger.info(f"Root URL: {config.crawler.root_url}")
        self.logger.info(f"Output file: {config.crawler.output_file}")

        scheduler = CrawlerScheduler(config, output,
                                     progress_stream=self.stdout,
                                     metrics=metrics)
        print("Crawling...", file=self.stdout)
        try:
            asyncio.run(scheduler.crawl())
        except OutputWriteError as e:
            print(f"\nError: {e}", file=self.stderr)
            self.logger.error(f"Fatal error: {e}", exc_info=True)
            return 1
        finally:
            self.logger.info("=== CRAWLER FINISHED ===")

        print("\nDone!", file=self.stdout)
        return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='crawler',
        description="Crawl every page of one host and write a JSON-lines sitemap.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  crawler https://example.com/
  crawler https://example.com/ out.txt 20 50000
  crawler https://example.com/ --config config.yaml
        """
    )

    parser.add_argument('root_url', nargs='?', help='Root page to start crawling from')
    parser.add_argument(
        'output_file', nargs='?',
        help=f'Output file (default: {DEFAULT_OUTPUT_FILE})'
    )
    parser.add_argument(
        'max_workers', nargs='?', type=int,
        help=f'Number of concurrent workers (default: {DEFAULT_MAX_WORKERS})'
    )
    parser.add_argument(
        'max_queued_tasks', nargs='?', type=int,
        help=f'Frontier capacity; tasks beyond it are dropped (default: {DEFAULT_MAX_QUEUED_TASKS})'
    )
    parser.add_argument('--config', help='Optional YAML configuration file')
    parser.add_argument('--log-level', help='Override the configured log level')
    parser.add_argument('--version', action='version', version=f'sitecrawler {__version__}')

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.root_url:
        parser.print_usage(sys.stderr)
        return 1

    try:
        config = load_config(
            args.config,
            root_url=args.root_url,
            output_file=args.output_file,
            max_workers=args.max_workers,
            max_queued_tasks=args.max_queued_tasks,
            log_level=args.log_level
        )
    except ConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    setup_logging(config.logging)
    log_system_info()

    app = CrawlerApp()
    try:
        return app.run(config)
    except KeyboardInterrupt:
        print("\nInterrupted by user", file=sys.stderr)
        return 1


if __name__ == '__main__':
    sys.exit(main())
