"""Tests for in-memory session storage."""

import pytest

from camera_bridge.domain.errors import NotFound
from camera_bridge.domain.printers import DiscoveredPrinter
from camera_bridge.domain.sessions import PrinterSession
from camera_bridge.services.store import SessionStore


def _session(uid: str) -> PrinterSession:
    printer = DiscoveredPrinter(uid=uid, name=uid.lower(), handle=object())
    return PrinterSession(
        uid=uid, name=printer.name, ip="10.0.0.1", printer_info=printer
    )


def test_get_unknown_uid_raises_not_found() -> None:
    store = SessionStore()

    with pytest.raises(NotFound, match="Unknown printer uid P9"):
        store.get("P9")


def test_put_replaces_existing_session() -> None:
    store = SessionStore()
    first = _session("P1")
    second = _session("P1")

    store.put(first)
    store.put(second)

    assert len(store) == 1
    assert store.get("P1") is second


def test_unbounded_store_keeps_every_session() -> None:
    store = SessionStore()
    for index in range(50):
        store.put(_session(f"P{index}"))

    assert len(store) == 50


def test_max_sessions_evicts_least_recently_used() -> None:
    store = SessionStore(max_sessions=2)
    store.put(_session("P1"))
    store.put(_session("P2"))
    store.get("P1")

    store.put(_session("P3"))

    assert "P1" in store
    assert "P2" not in store
    assert [session.uid for session in store] == ["P1", "P3"]


def test_put_returns_evicted_sessions() -> None:
    store = SessionStore(max_sessions=1)
    first = _session("P1")

    assert store.put(first) == []
    assert store.put(_session("P2")) == [first]
    assert store.put(_session("P2")) == []
