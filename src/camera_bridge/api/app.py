"""FastAPI application factory."""

import asyncio
import json
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import FileResponse, HTMLResponse, JSONResponse, Response
from sse_starlette.sse import EventSourceResponse
from starlette.exceptions import HTTPException

from camera_bridge.api.cors import PermissiveCorsMiddleware
from camera_bridge.api.models import (
    AuthenticateRequest,
    ConnectByIpRequest,
    PrinterRequest,
    StartCameraRequest,
)
from camera_bridge.api.viewer import VIEWER_HTML
from camera_bridge.app_logging import configure_logging
from camera_bridge.containers import AppContainer
from camera_bridge.domain.errors import BridgeError
from camera_bridge.domain.sessions import CameraEncoding, PrinterState
from camera_bridge.services.fanout import STREAM_CLOSED, StreamFanout
from camera_bridge.services.frames import format_frame

logger = logging.getLogger(__name__)


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging()
    settings = container.settings

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        logger.info("Camera bridge ready, printer SDK %s", settings.sdk_module)
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container
    app.add_middleware(PermissiveCorsMiddleware)

    @app.exception_handler(BridgeError)
    async def bridge_error_handler(request: Request, exc: BridgeError) -> JSONResponse:
        logger.warning("%s %s failed: %s", request.method, request.url.path, exc)
        return JSONResponse({"error": str(exc)}, status_code=500)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        return JSONResponse({"error": "Invalid JSON body"}, status_code=500)

    @app.exception_handler(HTTPException)
    async def http_error_handler(request: Request, exc: HTTPException) -> JSONResponse:
        return JSONResponse({"error": exc.detail}, status_code=exc.status_code)

    @app.exception_handler(Exception)
    async def unexpected_error_handler(
        request: Request, exc: Exception
    ) -> JSONResponse:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse({"error": str(exc)}, status_code=500)

    @app.get("/api/health")
    async def health(request: Request) -> dict[str, object]:
        """Health check with bridge diagnostics."""
        state_container: AppContainer = request.app.state.container
        return {
            "ok": True,
            "sdkModule": state_container.settings.sdk_module,
            "sessions": len(state_container.store),
            "environment": state_container.settings.environment,
        }

    @app.post("/api/connectByIp")
    async def connect_by_ip(
        request: Request, body: ConnectByIpRequest | None = None
    ) -> dict[str, object]:
        """Discover a printer by IP address."""
        state_container: AppContainer = request.app.state.container
        payload = body or ConnectByIpRequest()
        session = await state_container.registry.connect_by_ip(payload.ip)
        return session.summary()

    @app.post("/api/authenticate")
    async def authenticate(
        request: Request, body: AuthenticateRequest | None = None
    ) -> dict[str, object]:
        """Authenticate a discovered printer (``mode`` is connect or reauth)."""
        state_container: AppContainer = request.app.state.container
        payload = body or AuthenticateRequest()
        session = await state_container.registry.authenticate(payload.uid, payload.mode)
        return _auth_response(session.uid, session.state, session.has_auth_info)

    @app.post("/api/reauth")
    async def reauth(
        request: Request, body: PrinterRequest | None = None
    ) -> dict[str, object]:
        """Re-authenticate with stored auth info."""
        state_container: AppContainer = request.app.state.container
        payload = body or PrinterRequest()
        session = await state_container.registry.authenticate(payload.uid, "reauth")
        return _auth_response(session.uid, session.state, session.has_auth_info)

    @app.post("/api/startCamera")
    async def start_camera(
        request: Request, body: StartCameraRequest | None = None
    ) -> dict[str, object]:
        state_container: AppContainer = request.app.state.container
        payload = body or StartCameraRequest()
        return await state_container.registry.start_camera(
            payload.uid, payload.encoding
        )

    @app.post("/api/stopCamera")
    async def stop_camera(
        request: Request, body: PrinterRequest | None = None
    ) -> dict[str, object]:
        state_container: AppContainer = request.app.state.container
        payload = body or PrinterRequest()
        return await state_container.registry.stop_camera(payload.uid)

    @app.get("/api/state/{uid}")
    async def printer_state(uid: str, request: Request) -> dict[str, object]:
        state_container: AppContainer = request.app.state.container
        return {"uid": uid, "state": state_container.registry.get_state(uid).value}

    @app.get("/api/camera/latest/{uid}")
    async def latest_frame(uid: str, request: Request) -> dict[str, object]:
        """Return the most recent frame as a JPEG data URI."""
        state_container: AppContainer = request.app.state.container
        frame = state_container.registry.get_latest_frame(uid)
        return {
            "uid": uid,
            "frame": format_frame(frame, CameraEncoding.BASE64) if frame else None,
        }

    @app.get("/api/camera/stream/{uid}")
    async def camera_stream(uid: str, request: Request) -> EventSourceResponse:
        """Stream published camera frames as server-sent events."""
        state_container: AppContainer = request.app.state.container
        state_container.registry.get_session(uid)
        return EventSourceResponse(
            frame_events(
                state_container.fanout,
                uid,
                queue_size=state_container.settings.stream_queue_size,
            ),
            ping=state_container.settings.stream_ping_seconds,
        )

    @app.get("/", response_model=None)
    async def index(request: Request) -> Response:
        """Serve the viewer page."""
        state_container: AppContainer = request.app.state.container
        static_dir = state_container.settings.static_dir
        if static_dir is not None and (static_dir / "index.html").is_file():
            return FileResponse(static_dir / "index.html")
        return HTMLResponse(VIEWER_HTML)

    @app.get("/{path:path}", response_model=None)
    async def static_file(path: str, request: Request) -> FileResponse:
        state_container: AppContainer = request.app.state.container
        static_dir = state_container.settings.static_dir
        if static_dir is None:
            raise HTTPException(status_code=404, detail="Not found")
        return FileResponse(resolve_static_path(static_dir, path))

    return app


async def frame_events(
    fanout: StreamFanout, uid: str, queue_size: int = 0
) -> AsyncIterator[dict[str, str]]:
    """Yield SSE frame events until the client goes away or the stream closes."""
    queue: asyncio.Queue[dict[str, str]] = asyncio.Queue(maxsize=queue_size)
    fanout.subscribe(uid, queue)
    try:
        while True:
            event = await queue.get()
            if event is STREAM_CLOSED:
                break
            yield {"event": "frame", "data": json.dumps(event)}
    finally:
        fanout.unsubscribe(uid, queue)


def resolve_static_path(static_dir: Path, path: str) -> Path:
    """Resolve a request path inside the static directory."""
    root = static_dir.resolve()
    target = (root / path.lstrip("/")).resolve()
    if not target.is_relative_to(root):
        raise HTTPException(status_code=403, detail="Forbidden")
    if not target.is_file():
        raise HTTPException(status_code=404, detail="Not found")
    return target


def _auth_response(
    uid: str, state: PrinterState, has_auth_info: bool
) -> dict[str, object]:
    return {"uid": uid, "state": state.value, "hasAuthInfo": has_auth_info}
