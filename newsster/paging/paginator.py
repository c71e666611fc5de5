"""Multi-directional paging over a data source.

The paginator keeps the forward and backward cursors for one filter and
turns each fetch into load events: ``Loading`` before the request, then
``NotLoading`` with the page or ``Error`` with the cause. Events go to a
sink callable; the paginator never holds the accumulated pages itself.
"""

import logging
from typing import Callable, Optional

from ..news.models import END_OF_PAGES, FilterCriteria, LoadDirection, Page, PageToken
from ..news.sources import DataSource
from .load_state import LOADING, Error, LoadEvent, NotLoading

logger = logging.getLogger(__name__)

PageSink = Callable[[LoadEvent, Optional[Page]], None]


class Paginator:
    """
    Pages through a DataSource for a single FilterCriteria.

    At most one fetch per direction is in flight. Once cancelled, results
    are dropped at the point they would be published and new loads are
    refused.
    """

    def __init__(self, source: DataSource, criteria: FilterCriteria, sink: PageSink):
        """
        Initialize paginator.

        Args:
            source: Where pages come from
            criteria: Filter every fetch is made with
            sink: Receives (event, page) for every published event
        """
        self.source = source
        self.criteria = criteria
        self._sink = sink

        # None until the initial load seeds them
        self._next_token: Optional[PageToken] = None
        self._prev_token: Optional[PageToken] = None

        self._in_flight: set[LoadDirection] = set()
        # direction -> cursor it failed with, oldest failure first
        self._failures: dict[LoadDirection, Optional[PageToken]] = {}
        self._cancelled = False
        self.fetch_count = 0

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    @property
    def seeded(self) -> bool:
        return self._next_token is not None

    @property
    def last_failed(self) -> Optional[LoadDirection]:
        """Direction ``retry_last()`` would reissue, if any."""
        if not self._failures:
            return None
        return next(reversed(self._failures))

    def is_loading(self, direction: LoadDirection) -> bool:
        return direction in self._in_flight

    def is_exhausted(self, direction: LoadDirection) -> bool:
        """True once the source reported no more pages in this direction."""
        if direction is LoadDirection.APPEND:
            return self._next_token is END_OF_PAGES
        if direction is LoadDirection.PREPEND:
            return self._prev_token is END_OF_PAGES
        return False

    def cancel(self) -> None:
        self._cancelled = True

    async def load_initial(self) -> None:
        await self._load(LoadDirection.REFRESH, None)

    async def load_append(self) -> None:
        await self._load_edge(LoadDirection.APPEND, self._next_token)

    async def load_prepend(self) -> None:
        await self._load_edge(LoadDirection.PREPEND, self._prev_token)

    async def retry_last(self) -> None:
        """Reissue the most recent failed load with the cursor it used."""
        direction = self.last_failed
        if direction is None or self._cancelled or direction in self._in_flight:
            return
        cursor = self._failures.pop(direction)
        logger.info("[PAGER] Retrying %s for %s", direction.value, self.criteria)
        await self._load(direction, cursor)

    async def _load_edge(
        self, direction: LoadDirection, cursor: Optional[PageToken]
    ) -> None:
        if cursor is None:
            return
        if cursor is END_OF_PAGES:
            self._publish(LoadEvent(direction, NotLoading(end_of_data=True)))
            return
        await self._load(direction, cursor)

    async def _load(
        self, direction: LoadDirection, cursor: Optional[PageToken]
    ) -> None:
        if self._cancelled or direction in self._in_flight:
            return

        self._in_flight.add(direction)
        self._publish(LoadEvent(direction, LOADING))

        page: Optional[Page] = None
        error: Optional[Exception] = None
        try:
            self.fetch_count += 1
            page = await self.source.fetch(self.criteria, direction, cursor)
        except Exception as e:
            error = e
        finally:
            self._in_flight.discard(direction)

        if error is not None:
            logger.warning(
                "[PAGER] %s load failed for %s at %r: %s",
                direction.value,
                self.criteria,
                cursor,
                error,
            )
            self._failures.pop(direction, None)
            self._failures[direction] = cursor
            self._publish(LoadEvent(direction, Error(error)))
            return

        self._failures.pop(direction, None)
        self._accept(direction, page)

    def _accept(self, direction: LoadDirection, page: Page) -> None:
        if direction is LoadDirection.REFRESH:
            self._next_token = page.next_token
            self._prev_token = page.prev_token
            self._publish(LoadEvent(direction, NotLoading(page.is_last)), page)
            self._publish(LoadEvent(LoadDirection.APPEND, NotLoading(page.is_last)))
            self._publish(LoadEvent(LoadDirection.PREPEND, NotLoading(page.is_first)))
        elif direction is LoadDirection.APPEND:
            self._next_token = page.next_token
            self._publish(LoadEvent(direction, NotLoading(page.is_last)), page)
        else:
            self._prev_token = page.prev_token
            self._publish(LoadEvent(direction, NotLoading(page.is_first)), page)

        logger.debug(
            "[PAGER] %s page of %d for %s (next=%r, prev=%r)",
            direction.value,
            len(page),
            self.criteria,
            self._next_token,
            self._prev_token,
        )

    def _publish(self, event: LoadEvent, page: Optional[Page] = None) -> None:
        if self._cancelled:
            logger.debug(
                "[PAGER] Dropping %s event for cancelled %s",
                event.direction.value,
                self.criteria,
            )
            return
        self._sink(event, page)
