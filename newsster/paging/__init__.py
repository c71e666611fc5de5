"""Reactive paginated feed: filter state, paging and session lifecycle."""

from .controller import ControllerPhase, FeedController, FeedSnapshot
from .filter_state import FilterState
from .load_state import (
    CombinedLoadState,
    Error,
    LoadEvent,
    LoadState,
    Loading,
    NotLoading,
    reduce,
)
from .paginator import Paginator
from .session import FeedSession
from .subscription import Broadcast, Subscription

__all__ = [
    "Broadcast",
    "CombinedLoadState",
    "ControllerPhase",
    "Error",
    "FeedController",
    "FeedSession",
    "FeedSnapshot",
    "FilterState",
    "LoadEvent",
    "LoadState",
    "Loading",
    "NotLoading",
    "Paginator",
    "Subscription",
    "reduce",
]
