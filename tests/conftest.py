"""Shared fixtures and fake data sources for the feed tests."""

import asyncio
from typing import Optional

import pytest

from newsster.news.models import (
    END_OF_PAGES,
    Article,
    FilterCriteria,
    LoadDirection,
    Page,
    PageToken,
)
from newsster.news.sources import DataSource


def make_page(
    count: int,
    label: str,
    next_token: PageToken = END_OF_PAGES,
    prev_token: PageToken = END_OF_PAGES,
) -> Page:
    """Build a page of ``count`` articles titled ``label-0``, ``label-1``..."""
    items = tuple(
        Article(
            title=f"{label}-{i}",
            link=f"https://example.com/{label}/{i}",
            summary="",
            published=None,
            source="test",
        )
        for i in range(count)
    )
    return Page(items=items, next_token=next_token, prev_token=prev_token)


class FakeSource(DataSource):
    """
    In-memory data source.

    Pages are looked up by category, then by cursor. Queued failures are
    raised by the next fetches in order, and a category with a gate
    blocks until the gate is set.
    """

    def __init__(self, pages: Optional[dict] = None):
        self.pages: dict[str, dict[Optional[PageToken], Page]] = pages or {}
        self.calls: list[tuple[FilterCriteria, LoadDirection, Optional[PageToken]]] = []
        self.failures: list[Exception] = []
        self.gates: dict[str, asyncio.Event] = {}
        self.closed = False

    def hold(self, category: str) -> asyncio.Event:
        gate = asyncio.Event()
        self.gates[category] = gate
        return gate

    async def fetch(self, criteria, direction, cursor):
        self.calls.append((criteria, direction, cursor))
        gate = self.gates.get(criteria.category)
        if gate is not None:
            await gate.wait()
        if self.failures:
            raise self.failures.pop(0)
        return self.pages[criteria.category][cursor]

    async def aclose(self):
        self.closed = True


@pytest.fixture
def tech():
    return FilterCriteria(category="tech", language="en")


@pytest.fixture
def world():
    return FilterCriteria(category="world", language="en")


@pytest.fixture
def source():
    """Two-page tech feed, one-page world feed, and a three-page middle-start feed."""
    return FakeSource(
        {
            "tech": {
                None: make_page(20, "tech1", next_token="p2"),
                "p2": make_page(20, "tech2", prev_token="p1"),
            },
            "world": {
                None: make_page(5, "world1"),
            },
            "science": {
                None: make_page(10, "sci2", next_token="s3", prev_token="s1"),
                "s1": make_page(10, "sci1", next_token="s2"),
                "s3": make_page(10, "sci3", prev_token="s2"),
            },
        }
    )
