from __future__ import annotations

import contextlib
from abc import ABC, abstractmethod
from collections.abc import Iterator
from typing import Final

ALLOWED_METHODS: Final[tuple[str, ...]] = ("GET", "POST", "PUT", "DELETE")


class TransportError(Exception):
    """Base class for remote store errors."""


class TransportTimeout(TransportError):
    """Raised when a store request times out."""


class RequestRuleError(TransportError):
    """Raised before any I/O when a method/id/payload combination is not allowed."""


class EmptyResponseError(TransportError):
    """Raised when a GET returns no body text."""


def validate_request(method: str, resource_id: str | None, payload: str | None) -> str:
    """Check the method/argument rules and return the normalized (upper-case) method.

    - GET and DELETE cannot carry a payload.
    - GET and POST cannot carry a resource id.
    - PUT and DELETE require a resource id.
    - POST and PUT require a payload.
    """

    verb = method.strip().upper()
    if verb not in ALLOWED_METHODS:
        raise RequestRuleError(
            f"Invalid HTTP method: {method}\n(Allowed methods: {', '.join(ALLOWED_METHODS)})"
        )
    if verb in {"GET", "DELETE"} and payload is not None:
        raise RequestRuleError("GET and DELETE requests cannot have a payload")
    if verb in {"GET", "POST"} and resource_id is not None:
        raise RequestRuleError("GET and POST requests cannot have a resource id")
    if verb in {"PUT", "DELETE"} and (resource_id is None or not resource_id.strip()):
        raise RequestRuleError("PUT and DELETE requests require a resource id")
    if verb in {"POST", "PUT"} and (payload is None or not payload.strip()):
        raise RequestRuleError("POST and PUT requests require a payload")
    return verb


class RemoteStore(ABC):
    """Record store reachable through GET/POST/PUT/DELETE on a single resource."""

    @abstractmethod
    def request(
        self,
        method: str,
        resource_id: str | None = None,
        payload: str | None = None,
    ) -> str:
        """Send one request and return the response body text.

        Implementations must call `validate_request()` before any I/O and raise
        `EmptyResponseError` when a GET yields blank text.
        """

    @contextlib.contextmanager
    def session(self) -> Iterator[RemoteStore]:
        """Hold connection state (if any) for the duration of this context."""

        yield self

    def fetch_all(self) -> str:
        return self.request("GET")

    def create(self, payload: str) -> str:
        return self.request("POST", payload=payload)

    def update(self, resource_id: str, payload: str) -> str:
        return self.request("PUT", resource_id=resource_id, payload=payload)

    def delete(self, resource_id: str) -> str:
        return self.request("DELETE", resource_id=resource_id)
