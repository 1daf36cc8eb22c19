"""Classification of raw SDK connect results.

The SDK has returned ``(printer, authInfo)`` pairs, records with named fields
and bare printer objects across its releases. Everything shape-dependent lives
here so the session registry only ever sees :class:`ConnectOutcome`.
"""

import inspect
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass

from camera_bridge.domain.printers import ConnectOutcome, FrameCallback

SET_FRAME_NOTIFICATION = "setCameraFrameNotification"
UNSET_FRAME_NOTIFICATION = "unsetCameraFrameNotification"
REQUEST_STREAM = "RequestCameraStream"
END_STREAM = "EndCameraStream"

_CONNECTION_METHODS = (SET_FRAME_NOTIFICATION, REQUEST_STREAM, END_STREAM)
_CONNECTION_FIELDS = ("printer", "connection")
_AUTH_INFO_FIELDS = ("authInfo", "auth_info")


def looks_like_connection(value: object) -> bool:
    """Return True when the value exposes any camera stream method."""
    if value is None or isinstance(value, str | bytes):
        return False
    return any(callable(getattr(value, name, None)) for name in _CONNECTION_METHODS)


def normalize_connect_result(result: object) -> ConnectOutcome:
    """Map a raw connect/reconnect result to a connection and auth info."""
    if _is_pair(result):
        first, second = result[0], result[1]
        if looks_like_connection(second) and not looks_like_connection(first):
            return ConnectOutcome(SdkConnection(second), _none_if_empty(first))
        return ConnectOutcome(SdkConnection(first), _none_if_empty(second))

    connection = _first_field(result, _CONNECTION_FIELDS, looks_like_connection)
    if connection is not None:
        auth_info = _first_field(result, _AUTH_INFO_FIELDS, lambda value: True)
        return ConnectOutcome(SdkConnection(connection), _none_if_empty(auth_info))

    return ConnectOutcome(SdkConnection(result), None)


def _is_pair(value: object) -> bool:
    return (
        isinstance(value, Sequence)
        and not isinstance(value, str | bytes | bytearray)
        and len(value) == 2
    )


def _first_field(
    record: object, names: tuple[str, ...], accept: Callable[[object], bool]
) -> object | None:
    for name in names:
        if isinstance(record, Mapping):
            candidate = record.get(name)
        else:
            candidate = getattr(record, name, None)
        if candidate is not None and accept(candidate):
            return candidate
    return None


def _none_if_empty(value: object) -> object | None:
    if value is None or value == "" or value is False:
        return None
    return value


async def settle(value: object) -> object:
    """Await SDK return values that are awaitable, pass others through."""
    if inspect.isawaitable(value):
        return await value
    return value


@dataclass
class SdkConnection:
    """Wraps a raw SDK printer object behind the registry's connection API."""

    raw: object

    @property
    def supports_camera(self) -> bool:
        return all(
            callable(getattr(self.raw, name, None))
            for name in _CONNECTION_METHODS
        )

    def set_frame_callback(self, callback: FrameCallback) -> None:
        getattr(self.raw, SET_FRAME_NOTIFICATION)(callback)

    def clear_frame_callback(self) -> None:
        unset = getattr(self.raw, UNSET_FRAME_NOTIFICATION, None)
        if callable(unset):
            unset()

    async def request_camera_stream(self) -> None:
        await settle(getattr(self.raw, REQUEST_STREAM)())

    async def end_camera_stream(self) -> None:
        await settle(getattr(self.raw, END_STREAM)())
