"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from camera_bridge.adapters.sdk_finder import SdkPrinterFinder
from camera_bridge.config import Settings, parse_auth_failure_policy
from camera_bridge.domain.printers import PrinterFinder
from camera_bridge.services.fanout import StreamFanout
from camera_bridge.services.registry import SessionRegistry
from camera_bridge.services.store import SessionStore


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    finder: PrinterFinder
    store: SessionStore
    fanout: StreamFanout
    registry: SessionRegistry
    close_resources: Callable[[], Awaitable[None]]


def build_container(
    settings: Settings | None = None, finder: PrinterFinder | None = None
) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    resolved_finder = finder or SdkPrinterFinder(
        sdk_module=resolved_settings.sdk_module,
        client_id=resolved_settings.sdk_client_id,
        client_secret=resolved_settings.sdk_client_secret,
    )
    store = SessionStore(max_sessions=resolved_settings.max_sessions)
    fanout = StreamFanout(store)
    registry = SessionRegistry(
        finder=resolved_finder,
        store=store,
        fanout=fanout,
        auth_failure_policy=parse_auth_failure_policy(
            resolved_settings.auth_failure_policy
        ),
    )

    async def close_resources() -> None:
        await resolved_finder.close()

    return AppContainer(
        settings=resolved_settings,
        finder=resolved_finder,
        store=store,
        fanout=fanout,
        registry=registry,
        close_resources=close_resources,
    )
