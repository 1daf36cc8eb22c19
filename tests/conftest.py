"""Shared test fixtures."""

import asyncio
from dataclasses import dataclass, field

import pytest

from camera_bridge.config import Settings
from camera_bridge.containers import AppContainer, build_container
from camera_bridge.domain.printers import (
    ConnectOutcome,
    DiscoveredPrinter,
    FrameCallback,
    PrinterFinder,
)


@dataclass
class FakeConnection:
    """Fake authenticated printer handle that records camera calls."""

    camera: bool = True
    callback: FrameCallback | None = None
    requested: int = 0
    ended: int = 0
    cleared: int = 0
    stream_error: Exception | None = None

    @property
    def supports_camera(self) -> bool:
        return self.camera

    def set_frame_callback(self, callback: FrameCallback) -> None:
        self.callback = callback

    def clear_frame_callback(self) -> None:
        self.callback = None
        self.cleared += 1

    async def request_camera_stream(self) -> None:
        if self.stream_error is not None:
            raise self.stream_error
        self.requested += 1

    async def end_camera_stream(self) -> None:
        self.ended += 1

    def emit(self, frame: object) -> None:
        assert self.callback is not None
        self.callback(frame)


@dataclass
class FakePrinterFinder(PrinterFinder):
    """Fake finder with printers keyed by IP."""

    printers: dict[str, tuple[str, str]] = field(
        default_factory=lambda: {"10.0.0.5": ("P1", "Printer1")}
    )
    connection: FakeConnection = field(default_factory=FakeConnection)
    auth_info: object | None = "auth-token"
    auth_error: Exception | None = None
    gate: asyncio.Event | None = None
    reconnects: list[object | None] = field(default_factory=list)
    closed: bool = False

    async def find_by_ip(self, ip: str) -> DiscoveredPrinter:
        if ip not in self.printers:
            raise RuntimeError(f"No printer answered at {ip}")
        uid, name = self.printers[ip]
        return DiscoveredPrinter(uid=uid, name=name, handle={"uid": uid, "ip": ip})

    async def connect(self, printer: DiscoveredPrinter) -> ConnectOutcome:
        return await self._outcome()

    async def reconnect(
        self, printer: DiscoveredPrinter, auth_info: object | None = None
    ) -> ConnectOutcome:
        self.reconnects.append(auth_info)
        return await self._outcome()

    async def close(self) -> None:
        self.closed = True

    async def _outcome(self) -> ConnectOutcome:
        if self.gate is not None:
            await self.gate.wait()
        if self.auth_error is not None:
            raise self.auth_error
        return ConnectOutcome(self.connection, self.auth_info)


@dataclass(eq=False)
class RecordingSink:
    """Frame sink that keeps every event it receives."""

    events: list[dict[str, str]] = field(default_factory=list)

    def put_nowait(self, item: dict[str, str]) -> None:
        self.events.append(item)


@pytest.fixture
def settings() -> Settings:
    return Settings(
        sdk_module="tests.fake_sdk:PrinterFinder",
        stream_ping_seconds=1,
        environment="test",
    )


@pytest.fixture
def finder() -> FakePrinterFinder:
    return FakePrinterFinder()


@pytest.fixture
def container(settings: Settings, finder: FakePrinterFinder) -> AppContainer:
    return build_container(settings, finder=finder)
