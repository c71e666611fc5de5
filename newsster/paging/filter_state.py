"""Current category/language filter with change notifications."""

import logging

from ..news.models import FilterCriteria
from .subscription import Broadcast, Subscription

logger = logging.getLogger(__name__)


class FilterState:
    """
    Holds the active FilterCriteria.

    Every distinct transition is announced exactly once on each open
    ``changes()`` subscription. Setting the value it already holds is
    silent, which is what keeps the controller from restarting a feed
    for nothing.
    """

    def __init__(self, initial: FilterCriteria):
        self._value = initial
        self._changes: Broadcast[FilterCriteria] = Broadcast()

    def get(self) -> FilterCriteria:
        return self._value

    def set(self, criteria: FilterCriteria) -> bool:
        """Replace the filter. Returns True if the value actually changed."""
        if criteria == self._value:
            return False
        logger.debug("[FILTER] %s -> %s", self._value, criteria)
        self._value = criteria
        self._changes.publish(criteria)
        return True

    def changes(self) -> Subscription[FilterCriteria]:
        """Subscribe to filter values set after this call."""
        return self._changes.subscribe()

    def close(self) -> None:
        self._changes.close()
