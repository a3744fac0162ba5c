from __future__ import annotations

import contextlib
import logging
from collections.abc import Iterator
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path
from typing import Final

import requests

from .base import (
    EmptyResponseError,
    RemoteStore,
    TransportError,
    TransportTimeout,
    validate_request,
)

logger = logging.getLogger(__name__)

_JSON_CONTENT_TYPE: Final[str] = "application/json; charset=utf-8"


@dataclass(frozen=True)
class HttpStoreConfig:
    endpoint: str
    resource: str = "people"
    base_url: str = "https://crudcrud.com/api"
    timeout_s: float = 10.0
    trace_path: Path | None = None

    @property
    def url(self) -> str:
        return f"{self.base_url.rstrip('/')}/{self.endpoint.strip('/')}/{self.resource.strip('/')}"


def _utc_ts() -> str:
    return datetime.now(UTC).strftime("%Y-%m-%dT%H:%M:%S.%fZ")


def _short_text(text: str, max_chars: int = 120) -> str:
    flat = " ".join(text.split())
    if len(flat) > max_chars:
        return flat[:max_chars] + "..."
    return flat


class HttpStore(RemoteStore):
    """`requests`-backed store for a crudcrud-style REST resource."""

    def __init__(self, config: HttpStoreConfig) -> None:
        self._validate_config(config)
        self._config = config
        self._trace_seq = 0
        self._session_depth = 0
        self._session: requests.Session | None = None

    @staticmethod
    def _validate_config(config: HttpStoreConfig) -> None:
        if not config.endpoint.strip():
            raise ValueError("endpoint must not be empty")
        if not config.resource.strip():
            raise ValueError("resource must not be empty")
        if not config.base_url.strip():
            raise ValueError("base_url must not be empty")
        if config.timeout_s <= 0:
            raise ValueError("timeout_s must be > 0")

    @property
    def url(self) -> str:
        return self._config.url

    def _trace(self, message: str) -> None:
        trace_path = self._config.trace_path
        if trace_path is None:
            return
        # Best-effort tracing: never let trace failures break a request.
        with contextlib.suppress(OSError):
            trace_path.parent.mkdir(parents=True, exist_ok=True)
            with trace_path.open("a", encoding="utf-8") as f:
                f.write(f"{_utc_ts()} {message}\n")

    def close(self) -> None:
        session = self._session
        if session is None:
            return
        self._session = None
        session.close()

    @contextlib.contextmanager
    def session(self) -> Iterator[HttpStore]:
        """Reuse one HTTP connection pool for the duration of this context."""

        self._session_depth += 1
        if self._session_depth == 1:
            self._session = requests.Session()
        try:
            yield self
        finally:
            self._session_depth -= 1
            if self._session_depth <= 0:
                self._session_depth = 0
                self.close()

    def request(
        self,
        method: str,
        resource_id: str | None = None,
        payload: str | None = None,
    ) -> str:
        verb = validate_request(method, resource_id, payload)

        url = self.url
        if resource_id is not None:
            url = f"{url}/{resource_id}"

        self._trace_seq += 1
        seq = self._trace_seq
        self._trace(f"#{seq} REQ {verb} {url} body={_short_text(payload or '')}")
        logger.debug("%s %s", verb, url)

        headers = {"Content-Type": _JSON_CONTENT_TYPE} if payload is not None else None
        data = payload.encode("utf-8") if payload is not None else None
        requester = self._session if self._session is not None else requests
        try:
            response = requester.request(
                verb,
                url,
                data=data,
                headers=headers,
                timeout=self._config.timeout_s,
            )
            response.raise_for_status()
        except requests.Timeout as exc:
            self._trace(f"#{seq} ERR timeout")
            logger.warning("%s %s timed out", verb, url)
            raise TransportTimeout(
                f"Request to {url} timed out after {self._config.timeout_s:.1f}s"
            ) from exc
        except requests.HTTPError as exc:
            status = exc.response.status_code if exc.response is not None else "?"
            self._trace(f"#{seq} ERR status={status}")
            logger.warning("%s %s failed with status %s", verb, url, status)
            raise TransportError(f"Request to {url} failed: {status}") from exc
        except requests.RequestException as exc:
            self._trace(f"#{seq} ERR {exc}")
            logger.warning("%s %s failed: %s", verb, url, exc)
            raise TransportError(f"Request to {url} failed: {exc}") from exc

        body = response.text
        self._trace(f"#{seq} RESP {response.status_code} body={_short_text(body)}")

        if verb == "GET" and not body.strip():
            raise EmptyResponseError("Response body was empty")
        return body
