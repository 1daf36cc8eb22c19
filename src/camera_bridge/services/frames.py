"""Camera frame normalization and output formatting."""

import base64
import binascii
import logging
from datetime import UTC, datetime

from camera_bridge.domain.sessions import CameraEncoding

_logger = logging.getLogger(__name__)

JPEG_DATA_URI_PREFIX = "data:image/jpeg;base64,"


def normalize_frame(frame: object) -> bytes:
    """Convert an SDK frame into raw bytes.

    Text frames are base64 (standard or URL-safe, padding optional), optionally
    behind a data URI header; everything up to the last comma is dropped.
    Unrecognized shapes and undecodable text yield empty bytes.
    """
    if isinstance(frame, bytes):
        return frame
    if isinstance(frame, bytearray | memoryview):
        return bytes(frame)
    if isinstance(frame, str):
        try:
            return base64.b64decode(_standard_base64(frame.rsplit(",", 1)[-1]))
        except (binascii.Error, ValueError):
            _logger.warning("Dropping camera frame with invalid base64 text")
            return b""
    if isinstance(frame, list | tuple) and all(_is_byte(value) for value in frame):
        return bytes(frame)
    _logger.warning("Unrecognized camera frame type %s", type(frame).__name__)
    return b""


def format_frame(data: bytes, encoding: CameraEncoding) -> str:
    """Encode frame bytes as plain base64 or as a JPEG data URI."""
    encoded = base64.b64encode(data).decode("ascii")
    if encoding == CameraEncoding.BINARY:
        return encoded
    return f"{JPEG_DATA_URI_PREFIX}{encoded}"


def frame_payload(uid: str, data: bytes, encoding: CameraEncoding) -> dict[str, str]:
    """Build the event published to stream subscribers."""
    return {
        "uid": uid,
        "encoding": encoding.value,
        "frame": format_frame(data, encoding),
        "ts": datetime.now(tz=UTC).isoformat(),
    }


def _is_byte(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and 0 <= value < 256


def _standard_base64(text: str) -> str:
    payload = "".join(text.split()).replace("-", "+").replace("_", "/")
    return payload + "=" * (-len(payload) % 4)
