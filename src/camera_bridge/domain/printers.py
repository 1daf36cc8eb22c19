"""Boundary types exchanged with the printer SDK adapter."""

from collections.abc import Callable
from dataclasses import dataclass
from typing import Protocol

FrameCallback = Callable[[object], None]


class PrinterConnection(Protocol):
    """Authenticated printer handle as seen by the session registry."""

    @property
    def supports_camera(self) -> bool:
        """Whether the handle exposes the camera stream methods."""

    def set_frame_callback(self, callback: FrameCallback) -> None:
        """Register the single frame notification callback."""

    def clear_frame_callback(self) -> None:
        """Unregister the frame callback when the SDK supports it."""

    async def request_camera_stream(self) -> None:
        """Ask the printer to start streaming camera frames."""

    async def end_camera_stream(self) -> None:
        """Ask the printer to stop streaming camera frames."""


@dataclass(frozen=True)
class DiscoveredPrinter:
    """Result of a discovery by IP."""

    uid: str
    name: str | None
    handle: object


@dataclass(frozen=True)
class ConnectOutcome:
    """Classified result of a connect or reconnect call."""

    connection: PrinterConnection
    auth_info: object | None = None


class PrinterFinder(Protocol):
    """Interface for printer discovery and authentication."""

    async def find_by_ip(self, ip: str) -> DiscoveredPrinter:
        """Discover a printer at the given address."""

    async def connect(self, printer: DiscoveredPrinter) -> ConnectOutcome:
        """Run the first-time authentication flow."""

    async def reconnect(
        self, printer: DiscoveredPrinter, auth_info: object | None = None
    ) -> ConnectOutcome:
        """Re-authenticate, reusing stored credentials when present."""

    async def close(self) -> None:
        """Release SDK resources."""
