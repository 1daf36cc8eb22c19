"""Run the camera bridge with uvicorn."""

import uvicorn

from camera_bridge.api.app import create_app
from camera_bridge.config import Settings
from camera_bridge.containers import build_container


def main() -> None:
    """Serve the bridge on the configured host and port."""
    settings = Settings()
    app = create_app(build_container(settings))
    uvicorn.run(app, host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
