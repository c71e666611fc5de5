"""Load-state model and the reducer that classifies paging events.

``LoadState`` is a closed variant with three cases: ``NotLoading``,
``Loading`` and ``Error``. ``CombinedLoadState`` holds one of them per
load direction and is what the consumer sees. ``reduce`` is pure: the
same previous state and event always produce the same result.
"""

from dataclasses import dataclass, field, replace
from typing import Optional, Union

from ..news.models import LoadDirection


@dataclass(frozen=True)
class NotLoading:
    """Idle. ``end_of_data`` is set once the direction is exhausted."""

    end_of_data: bool = False


@dataclass(frozen=True)
class Loading:
    """A fetch for the direction is in flight."""


@dataclass(frozen=True)
class Error:
    """The last fetch for the direction failed."""

    cause: Exception

    @property
    def message(self) -> str:
        return str(self.cause) or type(self.cause).__name__


LoadState = Union[NotLoading, Loading, Error]

LOADING = Loading()
IDLE = NotLoading(end_of_data=False)
EXHAUSTED = NotLoading(end_of_data=True)


@dataclass(frozen=True)
class LoadEvent:
    """A state update for one direction, as published by the paginator."""

    direction: LoadDirection
    state: LoadState


@dataclass(frozen=True)
class CombinedLoadState:
    """Per-direction load state exposed to the consumer."""

    refresh: LoadState = field(default=IDLE)
    prepend: LoadState = field(default=IDLE)
    append: LoadState = field(default=IDLE)

    def get(self, direction: LoadDirection) -> LoadState:
        return getattr(self, direction.value)

    def with_state(
        self, direction: LoadDirection, state: LoadState
    ) -> "CombinedLoadState":
        return replace(self, **{direction.value: state})

    @property
    def has_error(self) -> bool:
        return any(isinstance(s, Error) for s in self._states())

    @property
    def is_loading(self) -> bool:
        return any(isinstance(s, Loading) for s in self._states())

    @property
    def is_idle(self) -> bool:
        return all(isinstance(s, NotLoading) for s in self._states())

    def first_error(self) -> Optional[Error]:
        """
        Pick the error to show when more than one direction failed.

        Precedence is refresh, then append, then prepend.
        """
        for state in (self.refresh, self.append, self.prepend):
            if isinstance(state, Error):
                return state
        return None

    def _states(self) -> tuple[LoadState, LoadState, LoadState]:
        return (self.refresh, self.prepend, self.append)


def reduce(previous: CombinedLoadState, event: LoadEvent) -> CombinedLoadState:
    """Fold one paging event into the combined state."""
    state = event.state
    if not isinstance(state, (NotLoading, Loading, Error)):
        raise TypeError(f"Unknown load state: {state!r}")
    return previous.with_state(event.direction, state)


def describe(state: LoadState) -> str:
    """Short human-readable label for a load state."""
    if isinstance(state, Loading):
        return "loading"
    if isinstance(state, Error):
        return f"error: {state.message}"
    if isinstance(state, NotLoading):
        return "end" if state.end_of_data else "idle"
    raise TypeError(f"Unknown load state: {state!r}")
