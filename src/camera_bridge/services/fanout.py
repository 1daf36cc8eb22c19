"""Per-printer fan-out of camera frames to live stream subscribers."""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Protocol

from camera_bridge.domain.errors import NotFound
from camera_bridge.services.store import SessionStore

_logger = logging.getLogger(__name__)

STREAM_CLOSED: dict[str, str] = {"event": "closed"}


class FrameSink(Protocol):
    """Destination for published frame events."""

    def put_nowait(self, item: dict[str, str]) -> None:
        """Accept an event without blocking."""


@dataclass
class StreamFanout:
    """Delivers each published frame to the current subscribers of a printer.

    Nothing is buffered for printers without subscribers, and a late subscriber
    only sees frames published after it joined.
    """

    store: SessionStore
    _subscribers: dict[str, set[FrameSink]] = field(
        default_factory=dict, init=False, repr=False
    )

    def subscribe(self, uid: str, sink: FrameSink) -> None:
        """Register a sink for frames of a known printer."""
        if uid not in self.store:
            raise NotFound(f"Unknown printer uid {uid}")
        self._subscribers.setdefault(uid, set()).add(sink)
        _logger.info(
            "Stream subscriber added uid=%s count=%s", uid, len(self._subscribers[uid])
        )

    def unsubscribe(self, uid: str, sink: FrameSink) -> None:
        """Remove a sink; unknown sinks are ignored."""
        sinks = self._subscribers.get(uid)
        if sinks is None or sink not in sinks:
            return
        sinks.discard(sink)
        if not sinks:
            del self._subscribers[uid]
        _logger.info("Stream subscriber removed uid=%s count=%s", uid, len(sinks))

    def publish(self, uid: str, event: dict[str, str]) -> int:
        """Push an event to every subscriber and return how many accepted it."""
        sinks = self._subscribers.get(uid)
        if not sinks:
            return 0
        delivered = 0
        for sink in list(sinks):
            try:
                sink.put_nowait(event)
            except asyncio.QueueFull:
                _logger.warning("Dropping frame for slow subscriber uid=%s", uid)
                continue
            delivered += 1
        return delivered

    def close(self, uid: str) -> None:
        """Drop every subscriber of uid and tell each one the stream has ended."""
        sinks = self._subscribers.pop(uid, set())
        for sink in sinks:
            try:
                sink.put_nowait(STREAM_CLOSED)
            except asyncio.QueueFull:
                _logger.warning(
                    "Subscriber queue full, stream uid=%s ends on disconnect", uid
                )
        if sinks:
            _logger.info("Closed %s stream subscribers uid=%s", len(sinks), uid)

    def subscriber_count(self, uid: str) -> int:
        return len(self._subscribers.get(uid, ()))
