"""Error taxonomy for the camera bridge.

Messages coming back from the printer SDK are passed through verbatim; some of
them tell the operator what to configure (for example missing credentials).
"""


class BridgeError(Exception):
    """Base class for errors surfaced to HTTP clients."""


class InvalidArgument(BridgeError):
    """A required request field is missing or empty."""


class NotFound(BridgeError):
    """The printer uid has never been discovered."""


class NotAuthenticated(BridgeError):
    """A camera operation was requested before authentication."""


class UnsupportedCapability(BridgeError):
    """The connected printer object exposes no camera methods."""


class DiscoveryError(BridgeError):
    """The SDK failed to find a printer."""


class AuthenticationError(BridgeError):
    """The SDK connect or reconnect flow failed."""


class StreamError(BridgeError):
    """The SDK failed to start or end the camera stream."""
