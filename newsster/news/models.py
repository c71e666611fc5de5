"""Data models for articles, filters and pages."""

from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum
from typing import Optional, Union


@dataclass(frozen=True)
class Article:
    """A single article in the feed."""

    title: str
    link: str
    summary: str
    published: Optional[datetime]
    source: str
    image_url: Optional[str] = None


@dataclass(frozen=True)
class FilterCriteria:
    """Active category/language filter driving what gets fetched."""

    category: str
    language: str

    def with_category(self, category: str) -> "FilterCriteria":
        return replace(self, category=category)

    def with_language(self, language: str) -> "FilterCriteria":
        return replace(self, language=language)

    def __str__(self) -> str:
        return f"{self.category}/{self.language}"


class Boundary(Enum):
    """Marker for a cursor that has run off the end of the data."""

    END = "end"

    def __repr__(self) -> str:
        return "END_OF_PAGES"


END_OF_PAGES = Boundary.END

# Opaque cursor from the data source, or the end marker.
# ``None`` is only ever used as the cursor of the initial load.
PageToken = Union[str, Boundary]


class LoadDirection(Enum):
    """Which kind of load a fetch belongs to."""

    REFRESH = "refresh"
    PREPEND = "prepend"
    APPEND = "append"


@dataclass(frozen=True)
class Page:
    """One page of articles plus the cursors on either side of it."""

    items: tuple[Article, ...]
    next_token: PageToken = END_OF_PAGES
    prev_token: PageToken = END_OF_PAGES

    @property
    def is_last(self) -> bool:
        return self.next_token is END_OF_PAGES

    @property
    def is_first(self) -> bool:
        return self.prev_token is END_OF_PAGES

    def __len__(self) -> int:
        return len(self.items)
