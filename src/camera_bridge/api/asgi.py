"""ASGI entrypoint for the camera bridge."""

from camera_bridge.api.app import create_app
from camera_bridge.containers import build_container

app = create_app(build_container())
