"""Tests for FeedSession command gating and generation tagging."""

import asyncio

from newsster.news.models import LoadDirection
from newsster.paging.load_state import LOADING, LoadEvent
from newsster.paging.session import FeedSession


class TaggedRecorder:
    def __init__(self):
        self.received = []

    def __call__(self, generation, event, page):
        self.received.append((generation, event, page))


async def test_events_carry_generation(source, tech):
    recorder = TaggedRecorder()
    session = FeedSession(tech, 7, source, recorder)

    assert session.start() is True
    await session.join()

    assert recorder.received
    assert all(generation == 7 for generation, _, _ in recorder.received)


async def test_append_gated_until_initial_load_done(source, tech):
    session = FeedSession(tech, 1, source, TaggedRecorder())
    gate = source.hold("tech")

    session.start()
    assert session.append() is False
    assert session.prepend() is False

    gate.set()
    await session.join()
    assert session.append() is True
    await session.join()


async def test_duplicate_append_is_noop_while_pending(source, tech):
    session = FeedSession(tech, 1, source, TaggedRecorder())
    session.start()
    await session.join()

    gate = source.hold("tech")
    assert session.append() is True
    assert session.append() is False
    assert session.is_pending(LoadDirection.APPEND)

    gate.set()
    await session.join()
    appends = [c for c in source.calls if c[1] is LoadDirection.APPEND]
    assert len(appends) == 1


async def test_retry_only_with_failure(source, tech):
    session = FeedSession(tech, 1, source, TaggedRecorder())
    source.failures.append(ConnectionError("offline"))

    assert session.retry() is False
    session.start()
    await session.join()

    assert session.retry() is True
    await session.join()
    assert session.retry() is False
    assert session.paginator.seeded


async def test_cancel_aborts_in_flight_and_blocks_commands(source, tech):
    recorder = TaggedRecorder()
    session = FeedSession(tech, 1, source, recorder)
    source.hold("tech")

    session.start()
    await asyncio.sleep(0)
    session.cancel()
    await session.join()

    assert session.cancelled
    assert [event for _, event, _ in recorder.received] == [
        LoadEvent(LoadDirection.REFRESH, LOADING)
    ]
    assert session.start() is False
    assert session.append() is False
    assert session.retry() is False


async def test_commands_toward_reached_edge_are_refused(source, tech):
    session = FeedSession(tech, 1, source, TaggedRecorder())
    session.start()
    await session.join()

    assert session.prepend() is False
    assert session.append() is True
    await session.join()

    assert session.append() is False
    assert not session.is_pending(LoadDirection.APPEND)
    assert len(source.calls) == 2
