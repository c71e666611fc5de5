"""Articles, filters and the data sources that page through them."""

from .api_client import NewsApiSource
from .fetcher import FeedSource
from .models import (
    END_OF_PAGES,
    Article,
    Boundary,
    FilterCriteria,
    LoadDirection,
    Page,
    PageToken,
)
from .sources import DataSource, SourceError

__all__ = [
    "END_OF_PAGES",
    "Article",
    "Boundary",
    "DataSource",
    "FeedSource",
    "FilterCriteria",
    "LoadDirection",
    "NewsApiSource",
    "Page",
    "PageToken",
    "SourceError",
]
