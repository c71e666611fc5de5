"""Data source contract for the paginated feed.

A data source turns ``(criteria, direction, cursor)`` into a ``Page`` or
raises. It holds no paging state of its own: the same call may be issued
again on retry and must behave the same way.
"""

from abc import ABC, abstractmethod
from typing import Optional

from .models import FilterCriteria, LoadDirection, Page, PageToken


class SourceError(Exception):
    """A data source could not produce the requested page."""


class DataSource(ABC):
    """Base class for everything the paginator can fetch from."""

    @abstractmethod
    async def fetch(
        self,
        criteria: FilterCriteria,
        direction: LoadDirection,
        cursor: Optional[PageToken],
    ) -> Page:
        """
        Fetch one page.

        Args:
            criteria: Active category/language filter
            direction: Kind of load (refresh, prepend or append)
            cursor: Token from a previous page, or None for the initial load

        Returns:
            The fetched Page

        Raises:
            SourceError: If the page could not be fetched
        """

    async def aclose(self) -> None:
        """Release transport resources."""
        return None
