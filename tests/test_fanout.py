"""Tests for per-printer frame fan-out."""

import asyncio

import pytest

from camera_bridge.domain.errors import NotFound
from camera_bridge.domain.printers import DiscoveredPrinter
from camera_bridge.domain.sessions import PrinterSession
from camera_bridge.services.fanout import STREAM_CLOSED, StreamFanout
from camera_bridge.services.store import SessionStore
from tests.conftest import RecordingSink


def _fanout(*uids: str) -> StreamFanout:
    store = SessionStore()
    for uid in uids:
        printer = DiscoveredPrinter(uid=uid, name=uid, handle=None)
        store.put(
            PrinterSession(uid=uid, name=uid, ip="10.0.0.5", printer_info=printer)
        )
    return StreamFanout(store)


def test_subscribe_unknown_uid_raises_not_found() -> None:
    fanout = _fanout()

    with pytest.raises(NotFound):
        fanout.subscribe("P1", RecordingSink())


def test_publish_without_subscribers_discards_frame() -> None:
    fanout = _fanout("P1")

    assert fanout.publish("P1", {"frame": "a"}) == 0


def test_frame_reaches_every_subscriber_and_late_joiner_sees_only_next() -> None:
    fanout = _fanout("P1")
    first, second, late = RecordingSink(), RecordingSink(), RecordingSink()
    fanout.subscribe("P1", first)
    fanout.subscribe("P1", second)

    assert fanout.publish("P1", {"frame": "F1"}) == 2
    fanout.subscribe("P1", late)
    assert fanout.publish("P1", {"frame": "F2"}) == 3

    assert first.events == [{"frame": "F1"}, {"frame": "F2"}]
    assert second.events == [{"frame": "F1"}, {"frame": "F2"}]
    assert late.events == [{"frame": "F2"}]


def test_removed_subscriber_receives_nothing_more() -> None:
    fanout = _fanout("P1")
    kept, removed = RecordingSink(), RecordingSink()
    fanout.subscribe("P1", kept)
    fanout.subscribe("P1", removed)

    fanout.unsubscribe("P1", removed)
    fanout.publish("P1", {"frame": "F2"})
    fanout.publish("P1", {"frame": "F3"})

    assert removed.events == []
    assert kept.events == [{"frame": "F2"}, {"frame": "F3"}]


def test_unsubscribe_is_idempotent_and_drops_empty_entries() -> None:
    fanout = _fanout("P1")
    sink = RecordingSink()
    fanout.subscribe("P1", sink)

    fanout.unsubscribe("P1", sink)
    fanout.unsubscribe("P1", sink)
    fanout.unsubscribe("P2", sink)

    assert fanout.subscriber_count("P1") == 0
    assert "P1" not in fanout._subscribers


def test_subscribers_are_scoped_per_printer() -> None:
    fanout = _fanout("P1", "P2")
    sink = RecordingSink()
    fanout.subscribe("P2", sink)

    fanout.publish("P1", {"frame": "for-p1"})

    assert sink.events == []


def test_full_subscriber_queue_drops_frame_for_that_subscriber() -> None:
    fanout = _fanout("P1")
    slow: asyncio.Queue[dict[str, str]] = asyncio.Queue(maxsize=1)
    fast = RecordingSink()
    fanout.subscribe("P1", slow)
    fanout.subscribe("P1", fast)

    fanout.publish("P1", {"frame": "F1"})
    delivered = fanout.publish("P1", {"frame": "F2"})

    assert delivered == 1
    assert slow.get_nowait() == {"frame": "F1"}
    assert fast.events == [{"frame": "F1"}, {"frame": "F2"}]


def test_close_ends_every_stream_of_a_printer() -> None:
    fanout = _fanout("P1", "P2")
    first, second, other = RecordingSink(), RecordingSink(), RecordingSink()
    fanout.subscribe("P1", first)
    fanout.subscribe("P1", second)
    fanout.subscribe("P2", other)

    fanout.close("P1")
    fanout.publish("P1", {"frame": "late"})
    fanout.close("P1")

    assert first.events == [STREAM_CLOSED]
    assert second.events == [STREAM_CLOSED]
    assert other.events == []
    assert fanout.subscriber_count("P1") == 0
    assert "P1" not in fanout._subscribers
