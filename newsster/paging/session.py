"""One feed session: a filter, a generation and the paginator serving it."""

import asyncio
import logging
from typing import Callable, Coroutine, Optional

from ..news.models import FilterCriteria, LoadDirection, Page
from ..news.sources import DataSource
from .load_state import LoadEvent
from .paginator import Paginator

logger = logging.getLogger(__name__)

SessionSink = Callable[[int, LoadEvent, Optional[Page]], None]


class FeedSession:
    """
    Binds one (criteria, generation) pair to one Paginator.

    Commands schedule paginator loads as asyncio tasks and return
    immediately. Each returns True if it scheduled work and False if it
    was a no-op, including a load toward an edge already reached. Every
    event is handed to the sink tagged with this session's generation;
    deciding whether that generation is still current is the caller's job.
    """

    def __init__(
        self,
        criteria: FilterCriteria,
        generation: int,
        source: DataSource,
        sink: SessionSink,
    ):
        self.criteria = criteria
        self.generation = generation
        self._sink = sink
        self.paginator = Paginator(source, criteria, self._forward)
        self._pending: dict[LoadDirection, asyncio.Task] = {}
        self._cancelled = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def is_pending(self, direction: LoadDirection) -> bool:
        return direction in self._pending

    def start(self) -> bool:
        if self._cancelled or self.paginator.seeded:
            return False
        if self.is_pending(LoadDirection.REFRESH):
            return False
        logger.info("[SESSION] #%d starting for %s", self.generation, self.criteria)
        self._spawn(LoadDirection.REFRESH, self.paginator.load_initial())
        return True

    def append(self) -> bool:
        if self._blocked(LoadDirection.APPEND):
            return False
        self._spawn(LoadDirection.APPEND, self.paginator.load_append())
        return True

    def prepend(self) -> bool:
        if self._blocked(LoadDirection.PREPEND):
            return False
        self._spawn(LoadDirection.PREPEND, self.paginator.load_prepend())
        return True

    def retry(self) -> bool:
        direction = self.paginator.last_failed
        if self._cancelled or direction is None or self.is_pending(direction):
            return False
        self._spawn(direction, self.paginator.retry_last())
        return True

    def cancel(self) -> None:
        """Stop the session; in-flight requests are abandoned."""
        if self._cancelled:
            return
        self._cancelled = True
        self.paginator.cancel()
        for task in list(self._pending.values()):
            task.cancel()
        logger.info("[SESSION] #%d cancelled (%s)", self.generation, self.criteria)

    async def join(self) -> None:
        """Wait until no load of this session is pending."""
        while self._pending:
            await asyncio.gather(*list(self._pending.values()), return_exceptions=True)

    def _blocked(self, direction: LoadDirection) -> bool:
        return (
            self._cancelled
            or self.is_pending(direction)
            or self.is_pending(LoadDirection.REFRESH)
            or not self.paginator.seeded
            or self.paginator.is_exhausted(direction)
        )

    def _spawn(self, direction: LoadDirection, coro: Coroutine) -> None:
        task = asyncio.get_running_loop().create_task(
            coro, name=f"feed-{self.generation}-{direction.value}"
        )
        self._pending[direction] = task
        task.add_done_callback(lambda t: self._done(direction, t))

    def _done(self, direction: LoadDirection, task: asyncio.Task) -> None:
        if self._pending.get(direction) is task:
            del self._pending[direction]
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error(
                "[SESSION] #%d %s task failed: %s",
                self.generation,
                direction.value,
                exc,
                exc_info=exc,
            )

    def _forward(self, event: LoadEvent, page: Optional[Page]) -> None:
        self._sink(self.generation, event, page)
