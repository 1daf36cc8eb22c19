"""Domain models for printer sessions."""

import asyncio
from dataclasses import dataclass, field
from enum import StrEnum

from camera_bridge.domain.printers import DiscoveredPrinter, PrinterConnection


class PrinterState(StrEnum):
    """Connection lifecycle of a discovered printer."""

    OFFLINE = "Offline"
    UNAUTHENTICATED = "Unauthenticated"
    AUTHENTICATING = "Authenticating"
    IDLE = "Idle"
    FAILED = "Failed"


class CameraEncoding(StrEnum):
    """Output formatting for published camera frames."""

    BINARY = "binary"
    BASE64 = "base64"

    @classmethod
    def parse(cls, raw: str | None) -> "CameraEncoding":
        """Return binary only when asked for explicitly, data URIs otherwise."""
        if raw is not None and raw.strip().lower() == cls.BINARY:
            return cls.BINARY
        return cls.BASE64


@dataclass
class PrinterSession:
    """In-memory record of one discovered printer."""

    uid: str
    name: str | None
    ip: str
    printer_info: DiscoveredPrinter
    state: PrinterState = PrinterState.UNAUTHENTICATED
    connection: PrinterConnection | None = None
    auth_info: object | None = None
    last_frame: bytes | None = None
    camera_encoding: CameraEncoding = CameraEncoding.BASE64
    camera_active: bool = False
    lock: asyncio.Lock = field(default_factory=asyncio.Lock, repr=False)

    @property
    def has_auth_info(self) -> bool:
        return self.auth_info is not None

    def summary(self) -> dict[str, object]:
        """Return the public view used by the connect endpoint."""
        return {
            "uid": self.uid,
            "name": self.name,
            "ip": self.ip,
            "state": self.state.value,
        }
