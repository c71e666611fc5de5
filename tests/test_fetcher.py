"""Tests for the RSS source and the feed catalog."""

import json
import time

import feedparser
import pytest

from newsster.news import fetcher
from newsster.news.feed_loader import get_feed_urls, load_feeds
from newsster.news.fetcher import FeedSource
from newsster.news.models import END_OF_PAGES, FilterCriteria, LoadDirection
from newsster.news.sources import SourceError

TECH = FilterCriteria("technology", "en")


@pytest.fixture
def feeds_file(tmp_path):
    path = tmp_path / "feeds.json"
    path.write_text(
        json.dumps(
            {
                "feeds": [
                    {"name": "One", "xml_url": "https://one.example/rss",
                     "category": "technology", "language": "en"},
                    {"name": "Two", "xml_url": "https://two.example/rss",
                     "category": "technology", "language": "en"},
                    {"name": "Deutsch", "xml_url": "https://de.example/rss",
                     "category": "technology", "language": "de"},
                    {"name": "Off", "xml_url": "https://off.example/rss",
                     "category": "technology", "language": "en", "enabled": False},
                ]
            }
        )
    )
    return path


def fake_feed(name, hours):
    """A parsed feed with one entry per value in ``hours`` (hour of day)."""
    entries = [
        feedparser.FeedParserDict(
            title=f"{name} {hour}",
            link=f"https://{name}.example/{hour}",
            summary="<p>Some   <b>bold</b> text</p>",
            published_parsed=time.struct_time((2026, 10, 18, hour, 0, 0, 0, 291, 0)),
        )
        for hour in hours
    ]
    return feedparser.FeedParserDict(
        feed=feedparser.FeedParserDict(title=name), entries=entries, bozo=0
    )


def test_catalog_filters_by_category_language_and_enabled(feeds_file):
    assert len(load_feeds(feeds_file)) == 3
    assert get_feed_urls("technology", "en", feeds_file) == [
        "https://one.example/rss",
        "https://two.example/rss",
    ]
    assert get_feed_urls("sports", "en", feeds_file) == []


def test_missing_catalog_is_empty(tmp_path):
    assert load_feeds(tmp_path / "missing.json") == []


async def test_pages_merge_feeds_newest_first(feeds_file, monkeypatch):
    feeds = {
        "https://one.example/rss": fake_feed("one", [1, 3, 5]),
        "https://two.example/rss": fake_feed("two", [2, 4]),
    }
    monkeypatch.setattr(fetcher.feedparser, "parse", lambda url: feeds[url])
    source = FeedSource(page_size=2, feeds_file=feeds_file)

    first = await source.fetch(TECH, LoadDirection.REFRESH, None)
    assert [a.title for a in first.items] == ["one 5", "two 4"]
    assert first.next_token == "2026-10-18T04:00:00+00:00|https://two.example/4"
    assert first.prev_token is END_OF_PAGES
    assert first.items[0].summary == "Some bold text"

    middle = await source.fetch(TECH, LoadDirection.APPEND, first.next_token)
    assert [a.title for a in middle.items] == ["one 3", "two 2"]

    last = await source.fetch(TECH, LoadDirection.APPEND, middle.next_token)
    assert [a.title for a in last.items] == ["one 1"]
    assert last.next_token is END_OF_PAGES

    back = await source.fetch(TECH, LoadDirection.PREPEND, last.prev_token)
    assert back == middle


async def test_one_failing_feed_is_skipped(feeds_file, monkeypatch):
    def parse(url):
        if "two" in url:
            raise OSError("connection reset")
        return fake_feed("one", [1])

    monkeypatch.setattr(fetcher.feedparser, "parse", parse)
    source = FeedSource(feeds_file=feeds_file)

    page = await source.fetch(TECH, LoadDirection.REFRESH, None)
    assert [a.title for a in page.items] == ["one 1"]


async def test_all_feeds_failing_raises(feeds_file, monkeypatch):
    broken = feedparser.FeedParserDict(
        feed=feedparser.FeedParserDict(), entries=[], bozo=1, bozo_exception="timeout"
    )
    monkeypatch.setattr(fetcher.feedparser, "parse", lambda url: broken)
    source = FeedSource(feeds_file=feeds_file)

    with pytest.raises(SourceError):
        await source.fetch(TECH, LoadDirection.REFRESH, None)


async def test_no_feeds_for_filter_is_empty_last_page(feeds_file):
    source = FeedSource(feeds_file=feeds_file)

    page = await source.fetch(FilterCriteria("sports", "en"), LoadDirection.REFRESH, None)
    assert page.items == ()
    assert page.is_last and page.is_first


async def test_malformed_cursor(feeds_file):
    source = FeedSource(feeds_file=feeds_file)
    with pytest.raises(SourceError):
        await source.fetch(TECH, LoadDirection.APPEND, "ten")


async def test_new_entry_does_not_shift_later_pages(feeds_file, monkeypatch):
    feeds = {
        "https://one.example/rss": fake_feed("one", [1, 2, 3, 4]),
        "https://two.example/rss": fake_feed("two", []),
    }
    monkeypatch.setattr(fetcher.feedparser, "parse", lambda url: feeds[url])
    source = FeedSource(page_size=2, feeds_file=feeds_file)

    first = await source.fetch(TECH, LoadDirection.REFRESH, None)
    feeds["https://one.example/rss"] = fake_feed("one", [1, 2, 3, 4, 5])
    second = await source.fetch(TECH, LoadDirection.APPEND, first.next_token)
    again = await source.fetch(TECH, LoadDirection.APPEND, first.next_token)

    titles = [a.title for a in first.items + second.items]
    assert titles == ["one 4", "one 3", "one 2", "one 1"]
    assert again == second

    newer = await source.fetch(TECH, LoadDirection.PREPEND, second.prev_token)
    assert [a.title for a in newer.items] == ["one 4", "one 3"]


async def test_same_link_in_two_feeds_appears_once(feeds_file, monkeypatch):
    monkeypatch.setattr(fetcher.feedparser, "parse", lambda url: fake_feed("shared", [7]))
    source = FeedSource(feeds_file=feeds_file)

    page = await source.fetch(TECH, LoadDirection.REFRESH, None)
    assert [a.title for a in page.items] == ["shared 7"]
