"""Error taxonomy for startup and request admission."""
from __future__ import annotations


class ServerError(Exception):
    """Base class for errors raised by the server package."""


class StoreConnectionError(ServerError, ConnectionError):
    """The backing store could not be reached. Fatal at startup."""

    def __init__(self, uri: str, cause: BaseException | None = None) -> None:
        self.uri = uri
        self.cause = cause
        detail = f": {cause}" if cause is not None else ""
        super().__init__(f"store connection failed for {uri}{detail}")


class OriginPolicyViolation(ServerError):
    """A request origin is not permitted by the active origin policy."""

    def __init__(self, origin: str, environment_name: str) -> None:
        self.origin = origin
        self.environment_name = environment_name
        super().__init__("Not allowed by CORS")
