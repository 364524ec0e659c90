#!/usr/bin/env python3
"""
Command-line maintenance tool working directly on a snapshot file.

Usage:
    shortlinks-cli --snapshot data/urls.json shorten <url> [--validity N] [--shortcode CODE]
    shortlinks-cli --snapshot data/urls.json stats <shortcode>
    shortlinks-cli --snapshot data/urls.json list
    shortlinks-cli --snapshot data/urls.json cleanup
    shortlinks-cli --snapshot data/urls.json summary

Do not point it at the snapshot of a running server: the server rewrites the
file from its own memory on the next mutation.
"""

import argparse
import asyncio
import json
import os
import sys
from typing import List, Optional

from .common.logging_config import setup_logging
from .results import ServiceResult
from .service import URLShortenerService
from .shortcode import ShortCodeGenerator
from .store.memory import InMemoryURLStore
from .store.snapshot import SnapshotFile


class ShortlinksCLI:
    """Command-line interface over a snapshot-backed store."""

    def __init__(self, snapshot_path: str, base_url: str, verbose: bool = False):
        """Initialize CLI."""
        self.logger = setup_logging(level="DEBUG" if verbose else "CRITICAL")
        store = InMemoryURLStore(
            snapshot=SnapshotFile(snapshot_path, logger=self.logger.getChild("snapshot")),
            logger=self.logger.getChild("store"),
        )
        self.service = URLShortenerService(
            store=store,
            short_code_generator=ShortCodeGenerator(logger=self.logger.getChild("shortcode")),
            base_url=base_url,
            logger=self.logger.getChild("service"),
        )

    async def initialize(self) -> None:
        await self.service.store.load()

    async def close(self) -> None:
        await self.service.close()

    def _emit(self, result: ServiceResult) -> int:
        if result.success:
            print(json.dumps({"success": True, "data": result.data}, indent=2, ensure_ascii=False))
            return 0

        print(json.dumps({"success": False, **result.to_error_dict()}, indent=2), file=sys.stderr)
        return 1

    async def shorten(self, url: str, validity: Optional[int] = None, shortcode: Optional[str] = None) -> int:
        """Shorten a URL."""
        return self._emit(await self.service.create_short_url(url, validity, shortcode))

    async def stats(self, shortcode: str) -> int:
        """Print statistics for a short code."""
        return self._emit(await self.service.get_statistics(shortcode))

    async def list_urls(self) -> int:
        """Print every stored URL."""
        return self._emit(await self.service.list_all())

    async def cleanup(self) -> int:
        """Remove expired URLs."""
        return self._emit(ServiceResult.ok(await self.service.run_cleanup()))

    async def summary(self) -> int:
        """Print store totals."""
        return self._emit(await self.service.get_store_statistics())


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="shortlinks-cli",
        description="Shortlinks maintenance CLI",
    )
    parser.add_argument(
        "--snapshot",
        default=os.getenv("SNAPSHOT_PATH", "data/urls.json"),
        help="Snapshot file path (default: from SNAPSHOT_PATH env)",
    )
    parser.add_argument(
        "--base-url",
        default=os.getenv("BASE_URL", "http://localhost:5000"),
        help="Base URL for short links (default: from BASE_URL env)",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Verbose output",
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to execute")

    shorten_parser = subparsers.add_parser("shorten", help="Shorten a URL")
    shorten_parser.add_argument("url", help="URL to shorten")
    shorten_parser.add_argument("--validity", type=int, help="Validity in minutes (default 30)")
    shorten_parser.add_argument("--shortcode", help="Custom shortcode")

    stats_parser = subparsers.add_parser("stats", help="Get URL statistics")
    stats_parser.add_argument("shortcode", help="Shortcode to get stats for")

    subparsers.add_parser("list", help="List all URLs")
    subparsers.add_parser("cleanup", help="Remove expired URLs")
    subparsers.add_parser("summary", help="Show store totals")

    return parser


async def run(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    cli = ShortlinksCLI(
        snapshot_path=args.snapshot,
        base_url=args.base_url,
        verbose=args.verbose,
    )

    try:
        await cli.initialize()

        if args.command == "shorten":
            return await cli.shorten(args.url, args.validity, args.shortcode)
        elif args.command == "stats":
            return await cli.stats(args.shortcode)
        elif args.command == "list":
            return await cli.list_urls()
        elif args.command == "cleanup":
            return await cli.cleanup()
        else:
            return await cli.summary()
    finally:
        await cli.close()


def main() -> None:
    sys.exit(asyncio.run(run()))


if __name__ == "__main__":
    main()
