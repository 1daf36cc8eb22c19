"""Printer SDK adapter loaded from a configurable module path."""

import importlib
import logging
from collections.abc import Mapping
from dataclasses import dataclass, field

from camera_bridge.adapters.sdk_results import normalize_connect_result, settle
from camera_bridge.config import parse_sdk_module
from camera_bridge.domain.errors import DiscoveryError
from camera_bridge.domain.printers import ConnectOutcome, DiscoveredPrinter

_logger = logging.getLogger(__name__)


@dataclass
class SdkPrinterFinder:
    """Adapts the vendor ``PrinterFinder`` to the registry's finder interface.

    The SDK module is imported on first use so the bridge can start, and report
    health, on machines where the vendor runtime is not installed.
    """

    sdk_module: str
    client_id: str | None = None
    client_secret: str | None = None
    sdk: object | None = field(default=None, repr=False)

    def load(self) -> object:
        """Import the SDK module and construct its printer finder once."""
        if self.sdk is not None:
            return self.sdk
        module_name, attribute = parse_sdk_module(self.sdk_module)
        try:
            module = importlib.import_module(module_name)
        except ImportError as exc:
            raise DiscoveryError(
                f"Printer SDK module {module_name!r} could not be imported: {exc}"
            ) from exc
        factory = getattr(module, attribute, None)
        if factory is None:
            raise DiscoveryError(
                f"Printer SDK module {module_name!r} does not export {attribute}"
            )
        self.sdk = factory(**self._credentials()) if callable(factory) else factory
        _logger.info("Loaded printer SDK finder from %s", self.sdk_module)
        return self.sdk

    def _credentials(self) -> dict[str, str]:
        credentials: dict[str, str] = {}
        if self.client_id:
            credentials["client_id"] = self.client_id
        if self.client_secret:
            credentials["client_secret"] = self.client_secret
        return credentials

    async def find_by_ip(self, ip: str) -> DiscoveredPrinter:
        """Discover a printer and extract its uid and display name."""
        handle = await settle(self.load().findByIp(ip))
        uid = _read_field(handle, "uid")
        if uid in (None, ""):
            raise DiscoveryError(f"Printer at {ip} returned no usable identifier")
        name = _read_field(handle, "name")
        return DiscoveredPrinter(
            uid=str(uid),
            name=None if name is None else str(name),
            handle=handle,
        )

    async def connect(self, printer: DiscoveredPrinter) -> ConnectOutcome:
        """Run the SDK connect flow for a discovered printer."""
        result = await settle(self.load().connectPrinter(printer.handle))
        return normalize_connect_result(result)

    async def reconnect(
        self, printer: DiscoveredPrinter, auth_info: object | None = None
    ) -> ConnectOutcome:
        """Run the SDK reconnect flow, with stored auth info when present."""
        finder = self.load()
        if auth_info is not None:
            result = await settle(finder.reconnectPrinter(printer.handle, auth_info))
        else:
            result = await settle(finder.reconnectPrinter(printer.handle))
        return normalize_connect_result(result)

    async def close(self) -> None:
        """Close the SDK finder if it exposes a close hook."""
        if self.sdk is None:
            return
        close = getattr(self.sdk, "close", None)
        if callable(close):
            await settle(close())
        self.sdk = None


def _read_field(record: object, name: str) -> object | None:
    if isinstance(record, Mapping):
        return record.get(name)
    return getattr(record, name, None)

