#!/usr/bin/env python3
"""
Newsster feed runner

Drives a FeedController from the terminal: loads the first page for a
category and language, scrolls forward, and optionally switches filter
to show the feed restarting.

Usage:
    python -m newsster.main                          # Default category/language
    python -m newsster.main --category technology    # Pick a category
    python -m newsster.main --source rss --pages 3   # RSS feeds, 3 extra pages
    python -m newsster.main --switch-to world        # Restart on a new filter
"""

import argparse
import asyncio
import logging
import sys
from typing import Optional

from .config.settings import settings
from .news.api_client import NewsApiSource
from .news.fetcher import FeedSource
from .news.models import FilterCriteria
from .news.sources import DataSource
from .paging.controller import FeedController, FeedSnapshot
from .paging.load_state import describe
from .paging.subscription import Subscription

logger = logging.getLogger(__name__)


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(description="Paginated news feed runner")

    parser.add_argument(
        "--category",
        choices=settings.available_categories,
        default=settings.default_category,
        help=f"Category to show (default: {settings.default_category})",
    )

    parser.add_argument(
        "--language",
        default=settings.default_language,
        help=f"Two-letter language code (default: {settings.default_language})",
    )

    parser.add_argument(
        "--source",
        choices=["api", "rss"],
        default=settings.feed_source,
        help=f"Data source: api or rss (default: {settings.feed_source})",
    )

    parser.add_argument(
        "--pages",
        type=int,
        default=1,
        help="Pages to append after the first one (default: 1)",
    )

    parser.add_argument(
        "--switch-to",
        choices=settings.available_categories,
        help="Switch to this category after loading",
    )

    parser.add_argument(
        "--retry",
        action="store_true",
        help="Retry once if a load fails",
    )

    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Debug logging",
    )

    return parser.parse_args(argv)


def build_source(name: str) -> DataSource:
    """Create the data source named on the command line."""
    if name == "api":
        return NewsApiSource(
            api_key=settings.news_api_key,
            base_url=settings.news_api_url,
            page_size=settings.page_size,
            timeout=settings.request_timeout,
        )
    if name == "rss":
        return FeedSource(page_size=settings.page_size, feeds_file=settings.feeds_file)
    raise ValueError(f"Unknown data source: {name}")


def format_snapshot(snapshot: FeedSnapshot) -> str:
    """One status line for a snapshot, plus the error if one is showing."""
    state = snapshot.state
    line = (
        f"[#{snapshot.generation} {snapshot.criteria}] {len(snapshot)} articles | "
        f"refresh={describe(state.refresh)} "
        f"prepend={describe(state.prepend)} "
        f"append={describe(state.append)}"
    )
    error = state.first_error()
    if error is not None:
        line += f"\n   Error: {error.message}"
    return line


async def render(subscription: Subscription[FeedSnapshot]) -> Optional[FeedSnapshot]:
    """Print snapshots until the controller shuts down."""
    last = None
    async for snapshot in subscription:
        if last is not None and snapshot.generation != last.generation:
            print("   -- filter changed, view replaced --")
        print(format_snapshot(snapshot))
        last = snapshot
    return last


async def run_feed(args: argparse.Namespace, source: DataSource) -> Optional[FeedSnapshot]:
    """Load, scroll and optionally switch filter, printing every snapshot."""
    controller = FeedController(source, FilterCriteria(args.category, args.language))
    printer = asyncio.create_task(render(controller.subscribe(latest_only=False)))

    controller.start()
    await controller.join()

    for _ in range(args.pages):
        if not controller.append():
            break
        await controller.join()

    if args.retry and controller.retry():
        await controller.join()

    if args.switch_to:
        controller.set_category(args.switch_to)
        await controller.join()

    final = controller.snapshot
    controller.shutdown()
    await printer

    if final is not None:
        for i, article in enumerate(final.articles[:10]):
            print(f"   {i + 1}. {article.title[:70]} ({article.source})")
    return final


async def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )

    try:
        source = build_source(args.source)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    logger.debug("Using %s source, page size %d", args.source, settings.page_size)

    if args.source == "api" and not settings.news_api_key:
        print("Error: NEWS_API_KEY not set in .env file", file=sys.stderr)
        return 1

    print("=" * 60)
    print(f"Newsster feed: {args.category}/{args.language} via {args.source}")
    print("=" * 60)

    try:
        final = await run_feed(args, source)
    finally:
        await source.aclose()

    if final is None or final.state.has_error:
        return 1
    return 0


def cli() -> None:
    """CLI entry point."""
    sys.exit(asyncio.run(main()))


if __name__ == "__main__":
    cli()
