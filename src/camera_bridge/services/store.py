"""In-memory session storage."""

import logging
from collections import OrderedDict
from collections.abc import Iterator
from dataclasses import dataclass, field

from camera_bridge.domain.errors import NotFound
from camera_bridge.domain.sessions import PrinterSession

_logger = logging.getLogger(__name__)


@dataclass
class SessionStore:
    """Session map keyed by printer uid.

    Sessions are kept for the life of the process unless ``max_sessions`` is
    set, in which case the least recently used one is evicted.
    """

    max_sessions: int | None = None
    _sessions: OrderedDict[str, PrinterSession] = field(
        default_factory=OrderedDict, init=False, repr=False
    )

    def put(self, session: PrinterSession) -> list[PrinterSession]:
        """Insert or replace the session for its uid and return evicted ones."""
        self._sessions.pop(session.uid, None)
        self._sessions[session.uid] = session
        evicted: list[PrinterSession] = []
        if self.max_sessions is None:
            return evicted
        while len(self._sessions) > self.max_sessions:
            evicted_uid, evicted_session = self._sessions.popitem(last=False)
            _logger.info("Evicted printer session uid=%s", evicted_uid)
            evicted.append(evicted_session)
        return evicted

    def get(self, uid: str) -> PrinterSession:
        """Return the session for uid or raise NotFound."""
        session = self._sessions.get(uid)
        if session is None:
            raise NotFound(f"Unknown printer uid {uid}")
        self._sessions.move_to_end(uid)
        return session

    def __contains__(self, uid: object) -> bool:
        return uid in self._sessions

    def __len__(self) -> int:
        return len(self._sessions)

    def __iter__(self) -> Iterator[PrinterSession]:
        return iter(list(self._sessions.values()))
