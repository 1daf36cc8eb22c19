"""Printer session state machine."""

import asyncio
import logging
from dataclasses import dataclass

from camera_bridge.domain.errors import (
    AuthenticationError,
    BridgeError,
    DiscoveryError,
    InvalidArgument,
    NotAuthenticated,
    StreamError,
    UnsupportedCapability,
)
from camera_bridge.domain.printers import (
    FrameCallback,
    PrinterConnection,
    PrinterFinder,
)
from camera_bridge.domain.sessions import CameraEncoding, PrinterSession, PrinterState
from camera_bridge.services.fanout import StreamFanout
from camera_bridge.services.frames import frame_payload, normalize_frame
from camera_bridge.services.store import SessionStore

_logger = logging.getLogger(__name__)

AUTH_MODES = frozenset({"connect", "reauth"})


@dataclass
class SessionRegistry:
    """Tracks discovery, authentication and camera state per printer."""

    finder: PrinterFinder
    store: SessionStore
    fanout: StreamFanout
    auth_failure_policy: str = "keep"

    async def connect_by_ip(self, ip: str | None) -> PrinterSession:
        """Discover a printer by IP and start a fresh unauthenticated session."""
        if not ip or not ip.strip():
            raise InvalidArgument("ip is required")
        ip = ip.strip()
        try:
            printer = await self.finder.find_by_ip(ip)
        except BridgeError:
            raise
        except Exception as exc:
            raise DiscoveryError(str(exc)) from exc
        session = PrinterSession(
            uid=printer.uid,
            name=printer.name,
            ip=ip,
            printer_info=printer,
        )
        evicted = self.store.put(session)
        _logger.info(
            "Discovered printer uid=%s name=%s ip=%s", printer.uid, printer.name, ip
        )
        for stale in evicted:
            await self._release(stale)
        return session

    async def authenticate(
        self, uid: str | None, mode: str | None = None
    ) -> PrinterSession:
        """Run the connect or reauth flow and store the resulting connection."""
        session = self.store.get(_require_uid(uid))
        mode = (mode or "connect").strip().lower()
        if mode not in AUTH_MODES:
            raise InvalidArgument(f"Unknown authentication mode {mode}")
        if session.lock.locked() and session.state == PrinterState.AUTHENTICATING:
            raise AuthenticationError(
                f"Authentication already in progress for {session.uid}"
            )

        async with session.lock:
            previous_state = session.state
            self._set_state(session, PrinterState.AUTHENTICATING)
            try:
                if mode == "reauth":
                    outcome = await self.finder.reconnect(
                        session.printer_info, session.auth_info
                    )
                else:
                    outcome = await self.finder.connect(session.printer_info)
            except Exception as exc:
                self._apply_auth_failure(session, previous_state)
                if isinstance(exc, BridgeError):
                    raise
                raise AuthenticationError(str(exc)) from exc

            session.connection = outcome.connection
            if outcome.auth_info is not None:
                session.auth_info = outcome.auth_info
            self._set_state(session, PrinterState.IDLE)
        return session

    async def start_camera(
        self, uid: str | None, encoding: str | CameraEncoding | None = None
    ) -> dict[str, object]:
        """Register the frame callback and ask the printer to stream."""
        session = self.store.get(_require_uid(uid))

        async with session.lock:
            connection = _require_camera(session)
            session.camera_encoding = CameraEncoding.parse(encoding)
            connection.set_frame_callback(self._frame_callback(session))
            try:
                await connection.request_camera_stream()
            except Exception as exc:
                raise StreamError(str(exc)) from exc
            session.camera_active = True
        _logger.info(
            "Camera started uid=%s encoding=%s", session.uid, session.camera_encoding
        )
        return {
            "uid": session.uid,
            "active": True,
            "encoding": session.camera_encoding.value,
        }

    async def stop_camera(self, uid: str | None) -> dict[str, object]:
        """End the camera stream; subscribers and the last frame are kept."""
        session = self.store.get(_require_uid(uid))

        async with session.lock:
            connection = _require_camera(session)
            try:
                await connection.end_camera_stream()
            except Exception as exc:
                raise StreamError(str(exc)) from exc
            connection.clear_frame_callback()
            session.camera_active = False
        _logger.info("Camera stopped uid=%s", session.uid)
        return {"uid": session.uid, "active": False}

    def get_session(self, uid: str | None) -> PrinterSession:
        return self.store.get(_require_uid(uid))

    def get_state(self, uid: str | None) -> PrinterState:
        return self.get_session(uid).state

    def get_latest_frame(self, uid: str | None) -> bytes | None:
        return self.get_session(uid).last_frame

    def handle_frame(self, session: PrinterSession, frame: object) -> None:
        """Store a camera frame and fan it out to stream subscribers."""
        data = normalize_frame(frame)
        session.last_frame = data
        self.fanout.publish(
            session.uid, frame_payload(session.uid, data, session.camera_encoding)
        )

    def _frame_callback(self, session: PrinterSession) -> FrameCallback:
        loop = asyncio.get_running_loop()

        def on_frame(frame: object) -> None:
            try:
                running = asyncio.get_running_loop()
            except RuntimeError:
                running = None
            if running is loop:
                self.handle_frame(session, frame)
            else:
                loop.call_soon_threadsafe(self.handle_frame, session, frame)

        return on_frame

    async def _release(self, session: PrinterSession) -> None:
        """Stop the camera of an evicted session and end its streams."""
        self.fanout.close(session.uid)
        connection = session.connection
        if connection is None or not session.camera_active:
            return
        connection.clear_frame_callback()
        session.camera_active = False
        try:
            await connection.end_camera_stream()
        except Exception:
            _logger.exception("Failed to end camera stream for uid=%s", session.uid)

    def _apply_auth_failure(
        self, session: PrinterSession, previous_state: PrinterState
    ) -> None:
        if self.auth_failure_policy == "revert":
            self._set_state(session, previous_state)
        elif self.auth_failure_policy == "failed":
            self._set_state(session, PrinterState.FAILED)
        _logger.warning(
            "Authentication failed uid=%s policy=%s state=%s",
            session.uid,
            self.auth_failure_policy,
            session.state,
        )

    def _set_state(self, session: PrinterSession, state: PrinterState) -> None:
        if session.state != state:
            _logger.info(
                "Printer state uid=%s %s -> %s", session.uid, session.state, state
            )
        session.state = state


def _require_uid(uid: str | None) -> str:
    if not uid:
        raise InvalidArgument("uid is required")
    return uid


def _require_camera(session: PrinterSession) -> PrinterConnection:
    connection = session.connection
    if connection is None:
        raise NotAuthenticated(
            "Printer is not authenticated yet. Call /api/authenticate first."
        )
    if not connection.supports_camera:
        raise UnsupportedCapability(
            f"Printer {session.uid} connection does not expose camera streaming"
        )
    return connection
