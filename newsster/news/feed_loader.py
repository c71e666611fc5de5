"""Load feed sources from JSON configuration."""

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)


@dataclass
class FeedEntry:
    """A feed source from feeds.json."""

    name: str
    xml_url: str
    category: str
    language: str = "en"
    enabled: bool = True
    html_url: Optional[str] = None


def load_feeds(path: Optional[Path] = None) -> list[FeedEntry]:
    """
    Load feed entries from JSON file.

    Args:
        path: Path to feeds.json. Auto-detected if not provided.

    Returns:
        List of enabled FeedEntry objects.
    """
    if path is None:
        path = Path(__file__).parent.parent.parent / "data" / "feeds.json"

    if not path.exists():
        logger.warning("[FEEDS] Feed file not found: %s", path)
        return []

    with open(path, encoding="utf-8") as f:
        data = json.load(f)

    feeds = []
    for entry in data.get("feeds", []):
        feed = FeedEntry(
            name=entry["name"],
            xml_url=entry["xml_url"],
            category=entry.get("category", "general"),
            language=entry.get("language", "en"),
            enabled=entry.get("enabled", True),
            html_url=entry.get("html_url"),
        )
        if feed.enabled:
            feeds.append(feed)

    logger.info("[FEEDS] Loaded %d enabled feeds from %s", len(feeds), path.name)
    return feeds


def get_feed_urls(
    category: str, language: str, path: Optional[Path] = None
) -> list[str]:
    """
    Get feed URLs matching a category and language.

    Args:
        category: Category name, e.g. "technology"
        language: Two-letter language code
        path: Path to feeds.json.

    Returns:
        List of RSS feed URLs for the filter.
    """
    feeds = load_feeds(path)
    return [
        f.xml_url
        for f in feeds
        if f.category == category and f.language == language
    ]
