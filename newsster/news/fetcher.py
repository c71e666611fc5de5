"""RSS-backed data source for the paginated feed.

Looks up the feeds configured for the active category and language,
parses them concurrently and serves the merged entries page by page.
Cursors are the ``(published, link)`` key of the article at a page edge;
a page holds the articles strictly older (append) or strictly newer
(prepend) than that key, so entries published in between never shift
pages that were already handed out.
"""

import asyncio
import bisect
import logging
import re
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

import feedparser

from .feed_loader import get_feed_urls
from .models import (
    END_OF_PAGES,
    Article,
    FilterCriteria,
    LoadDirection,
    Page,
    PageToken,
)
from .sources import DataSource, SourceError

logger = logging.getLogger(__name__)

OLDEST = datetime.min.replace(tzinfo=timezone.utc)

ArticleKey = tuple[datetime, str]


def article_key(article: Article) -> ArticleKey:
    """Sort key of an article; the feed is ordered by it, newest first."""
    return (article.published or OLDEST, article.link)


def encode_key(key: ArticleKey) -> str:
    published, link = key
    return f"{published.isoformat()}|{link}"


def decode_key(cursor: PageToken) -> ArticleKey:
    if cursor is END_OF_PAGES:
        raise SourceError("Cannot fetch past the end of the feed")
    published, sep, link = cursor.partition("|")
    try:
        if not sep:
            raise ValueError("missing separator")
        when = datetime.fromisoformat(published)
    except ValueError as e:
        raise SourceError(f"Malformed cursor: {cursor!r}") from e
    if when.tzinfo is None:
        when = when.replace(tzinfo=timezone.utc)
    return (when, link)


class FeedSource(DataSource):
    """
    Serves articles from the RSS feeds in the feed catalog.

    Every fetch re-reads the feeds. Paging is keyed on the articles
    themselves, so repeating a fetch with the same cursor returns the
    same slice of the feed even after new entries appear at the top.
    """

    def __init__(self, page_size: int = 20, feeds_file: Optional[Path] = None):
        """
        Initialize feed source.

        Args:
            page_size: Articles per page
            feeds_file: Path to feeds.json (default: data/feeds.json)
        """
        if page_size < 1:
            raise ValueError("page_size must be positive")
        self.page_size = page_size
        self.feeds_file = feeds_file

    async def fetch(
        self,
        criteria: FilterCriteria,
        direction: LoadDirection,
        cursor: Optional[PageToken],
    ) -> Page:
        key = None if cursor is None else decode_key(cursor)
        urls = get_feed_urls(criteria.category, criteria.language, self.feeds_file)
        if not urls:
            logger.info("[FETCHER] No feeds configured for %s", criteria)
            return Page(items=())

        articles = await self.fetch_all(urls)
        # ascending view of the newest-first list, for bisect
        keys = [article_key(a) for a in reversed(articles)]

        if key is None:
            start = 0
            end = self.page_size
        elif direction is LoadDirection.PREPEND:
            newer = len(keys) - bisect.bisect_right(keys, key)
            start = max(0, newer - self.page_size)
            end = newer
        else:
            start = len(keys) - bisect.bisect_left(keys, key)
            end = start + self.page_size

        items = tuple(articles[start:end])
        if not items:
            return Page(items=())

        end = start + len(items)
        next_token = (
            encode_key(article_key(items[-1])) if end < len(articles) else END_OF_PAGES
        )
        prev_token = encode_key(article_key(items[0])) if start > 0 else END_OF_PAGES
        logger.debug(
            "[FETCHER] %s page at %d: %d of %d articles",
            direction.value,
            start,
            len(items),
            len(articles),
        )
        return Page(items=items, next_token=next_token, prev_token=prev_token)

    async def fetch_all(self, urls: list[str]) -> list[Article]:
        """
        Fetch articles from the given feeds concurrently.

        Returns:
            List of Article sorted by publication date (newest first),
            one per link

        Raises:
            SourceError: If every feed failed
        """
        loop = asyncio.get_running_loop()
        tasks = [loop.run_in_executor(None, self._fetch_feed, url) for url in urls]
        results = await asyncio.gather(*tasks, return_exceptions=True)

        articles = {}
        failed_feeds = 0
        for url, result in zip(urls, results):
            if isinstance(result, list):
                for article in result:
                    articles.setdefault(article.link, article)
            else:
                failed_feeds += 1
                logger.warning("[FETCHER] Feed failed: %s (%s)", url, result)

        logger.info(
            "[FETCHER] Fetched %d articles from %d feeds (%d failed)",
            len(articles),
            len(urls) - failed_feeds,
            failed_feeds,
        )
        if failed_feeds == len(urls):
            raise SourceError(f"All {failed_feeds} feeds failed")

        return sorted(articles.values(), key=article_key, reverse=True)

    def _fetch_feed(self, feed_url: str) -> list[Article]:
        """
        Fetch and parse a single RSS feed.

        Raises:
            SourceError: If the feed could not be read at all
        """
        feed = feedparser.parse(feed_url)
        if feed.get("bozo") and not feed.entries:
            raise SourceError(f"Unreadable feed {feed_url}: {feed.get('bozo_exception')}")

        source = feed.feed.get("title", feed_url)
        articles = []
        for entry in feed.entries:
            articles.append(
                Article(
                    title=entry.get("title", ""),
                    link=entry.get("link", ""),
                    summary=self._clean_summary(entry.get("summary", "")),
                    published=self._parse_date(entry),
                    source=source,
                    image_url=self._image_url(entry),
                )
            )
        return articles

    def _parse_date(self, entry: feedparser.FeedParserDict) -> Optional[datetime]:
        """Parse entry date from various RSS formats."""
        if entry.get("published_parsed"):
            dt = datetime(*entry.published_parsed[:6])
            return dt.replace(tzinfo=timezone.utc)

        if entry.get("updated_parsed"):
            dt = datetime(*entry.updated_parsed[:6])
            return dt.replace(tzinfo=timezone.utc)

        return None

    def _image_url(self, entry: feedparser.FeedParserDict) -> Optional[str]:
        for media in entry.get("media_content", []) or []:
            if media.get("url"):
                return media["url"]
        return None

    def _clean_summary(self, summary: str, max_length: int = 500) -> str:
        """Clean HTML and truncate summary."""
        clean = re.sub(r"<[^>]+>", "", summary)
        clean = re.sub(r"\s+", " ", clean).strip()

        if len(clean) > max_length:
            clean = clean[:max_length] + "..."

        return clean
