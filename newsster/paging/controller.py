"""Top-level feed controller.

Owns the filter and the current FeedSession. Every filter change bumps
the generation, cancels the running session and starts a fresh one;
events carrying any other generation are dropped before they reach the
consumer. Output is a stream of immutable ``FeedSnapshot`` values.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from ..news.models import Article, FilterCriteria, LoadDirection, Page
from ..news.sources import DataSource
from .filter_state import FilterState
from .load_state import CombinedLoadState, LoadEvent, reduce
from .session import FeedSession
from .subscription import Broadcast, Subscription

logger = logging.getLogger(__name__)


class ControllerPhase(Enum):
    UNINITIALIZED = "uninitialized"
    ACTIVE = "active"
    SHUTDOWN = "shutdown"


@dataclass(frozen=True)
class FeedSnapshot:
    """What the consumer renders: pages so far plus load state."""

    generation: int
    criteria: FilterCriteria
    pages: tuple[Page, ...]
    state: CombinedLoadState

    @property
    def articles(self) -> tuple[Article, ...]:
        return tuple(article for page in self.pages for article in page.items)

    def __len__(self) -> int:
        return sum(len(page) for page in self.pages)


class FeedController:
    """
    Reactive paginated feed over a DataSource.

    All commands are synchronous and must be called from the event loop
    thread; they return True when they did something and False when they
    were a no-op. Fetching happens in tasks owned by the current session.
    """

    def __init__(self, source: DataSource, initial: FilterCriteria):
        """
        Initialize controller.

        Args:
            source: Data source every session fetches from
            initial: Starting filter, typically read from user preferences
        """
        self.source = source
        self._filter = FilterState(initial)
        self._phase = ControllerPhase.UNINITIALIZED
        self._generation = 0
        self._session: Optional[FeedSession] = None

        self._pages: list[Page] = []
        self._state = CombinedLoadState()
        self._snapshot: Optional[FeedSnapshot] = None
        self._output: Broadcast[FeedSnapshot] = Broadcast()

    @property
    def phase(self) -> ControllerPhase:
        return self._phase

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def criteria(self) -> FilterCriteria:
        return self._filter.get()

    @property
    def session(self) -> Optional[FeedSession]:
        return self._session

    @property
    def snapshot(self) -> Optional[FeedSnapshot]:
        return self._snapshot

    def subscribe(self, latest_only: bool = True) -> Subscription[FeedSnapshot]:
        """
        Open an output stream; it starts with the latest snapshot.

        By default a subscriber that falls behind only keeps the newest
        snapshot. Pass ``latest_only=False`` to receive every one.
        """
        subscription = self._output.subscribe(latest_only)
        if self._snapshot is not None:
            subscription.push(self._snapshot)
        return subscription

    def filter_changes(self) -> Subscription[FilterCriteria]:
        return self._filter.changes()

    # Commands

    def start(self) -> bool:
        if self._phase is not ControllerPhase.UNINITIALIZED:
            return False
        self._phase = ControllerPhase.ACTIVE
        self._restart()
        return True

    def set_filter(self, criteria: FilterCriteria) -> bool:
        """Switch to a new filter. Returns False if nothing changed."""
        if self._phase is ControllerPhase.SHUTDOWN:
            return False
        if not self._filter.set(criteria):
            return False
        if self._phase is ControllerPhase.ACTIVE:
            self._restart()
        return True

    def set_category(self, category: str) -> bool:
        return self.set_filter(self.criteria.with_category(category))

    def set_language(self, language: str) -> bool:
        return self.set_filter(self.criteria.with_language(language))

    def refresh(self) -> bool:
        """Reload the current filter from scratch under a new generation."""
        if self._phase is not ControllerPhase.ACTIVE:
            return False
        self._restart()
        return True

    def append(self) -> bool:
        if self._session is None:
            return False
        return self._session.append()

    def prepend(self) -> bool:
        if self._session is None:
            return False
        return self._session.prepend()

    def retry(self) -> bool:
        if self._session is None:
            return False
        return self._session.retry()

    def shutdown(self) -> None:
        if self._phase is ControllerPhase.SHUTDOWN:
            return
        if self._session is not None:
            self._session.cancel()
            self._session = None
        self._phase = ControllerPhase.SHUTDOWN
        self._output.close()
        self._filter.close()
        logger.info("[FEED] Shut down at generation %d", self._generation)

    async def join(self) -> None:
        """Wait for the current session's pending loads to settle."""
        while self._session is not None:
            session = self._session
            await session.join()
            if session is self._session:
                break

    # Internals

    def _restart(self) -> None:
        if self._session is not None:
            self._session.cancel()

        self._generation += 1
        criteria = self._filter.get()
        logger.info("[FEED] Generation %d for %s", self._generation, criteria)

        self._pages = []
        self._state = CombinedLoadState()
        self._publish()

        self._session = FeedSession(criteria, self._generation, self.source, self._on_event)
        self._session.start()

    def _on_event(self, generation: int, event: LoadEvent, page: Optional[Page]) -> None:
        if generation != self._generation or self._phase is not ControllerPhase.ACTIVE:
            logger.debug(
                "[FEED] Dropping stale %s event from generation %d (current %d)",
                event.direction.value,
                generation,
                self._generation,
            )
            return

        state = reduce(self._state, event)
        if page is None and state == self._state:
            return

        if page is not None:
            if event.direction is LoadDirection.REFRESH:
                self._pages = [page]
            elif event.direction is LoadDirection.APPEND:
                self._pages.append(page)
            else:
                self._pages.insert(0, page)

        self._state = state
        self._publish()

    def _publish(self) -> None:
        self._snapshot = FeedSnapshot(
            generation=self._generation,
            criteria=self._filter.get(),
            pages=tuple(self._pages),
            state=self._state,
        )
        self._output.publish(self._snapshot)
