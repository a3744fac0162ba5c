from __future__ import annotations

import json
import re
import secrets
from collections.abc import Callable, Iterable
from typing import Any

from .base import RemoteStore, TransportError, validate_request

_TRAILING_COMMA_RE = re.compile(r",\s*([}\]])")
_MISSING_VALUE_RE = re.compile(r":\s*(?=[,}])")

DEFAULT_RECORDS: tuple[dict[str, Any], ...] = (
    {"_id": "64b7f0c2a1d3e4f5a6b7c8d9", "name": "Ada", "age": 36},
    {"_id": "64b7f0c2a1d3e4f5a6b7c8da", "name": "Alan", "city": "London"},
)


def _new_id() -> str:
    return secrets.token_hex(12)


def parse_lenient_object(payload: str) -> dict[str, Any]:
    """Parse payload text the way a lenient document store would.

    Accepts trailing commas and empty values (`"name":,`), which are read as `null`.
    """

    normalized = _MISSING_VALUE_RE.sub(":null", payload)
    normalized = _TRAILING_COMMA_RE.sub(r"\1", normalized)
    try:
        data: Any = json.loads(normalized)
    except json.JSONDecodeError as exc:
        raise TransportError(f"Payload rejected (400): {exc}") from exc
    if not isinstance(data, dict):
        raise TransportError("Payload rejected (400): expected a JSON object")
    return data


class DummyStore(RemoteStore):
    """In-memory store used for --dry-run.

    Records keep insertion order; `_id` values are assigned on create.
    """

    def __init__(
        self,
        records: Iterable[dict[str, Any]] = DEFAULT_RECORDS,
        *,
        id_factory: Callable[[], str] = _new_id,
    ) -> None:
        self._records: dict[str, dict[str, Any]] = {}
        self._id_factory = id_factory
        for record in records:
            record_id = record.get("_id")
            if not isinstance(record_id, str) or not record_id:
                raise ValueError("Seed records must contain a non-empty string _id")
            self._records[record_id] = dict(record)
        self.calls: list[tuple[str, str | None]] = []

    def request(
        self,
        method: str,
        resource_id: str | None = None,
        payload: str | None = None,
    ) -> str:
        verb = validate_request(method, resource_id, payload)
        self.calls.append((verb, resource_id))

        if verb == "GET":
            return json.dumps(list(self._records.values()))

        if verb == "POST":
            assert payload is not None
            record = parse_lenient_object(payload)
            record_id = self._id_factory()
            record["_id"] = record_id
            self._records[record_id] = record
            return json.dumps(record)

        assert resource_id is not None
        if resource_id not in self._records:
            raise TransportError(f"Request to dummy/{resource_id} failed: 404")

        if verb == "PUT":
            assert payload is not None
            record = parse_lenient_object(payload)
            record["_id"] = resource_id
            self._records[resource_id] = record
            return ""

        del self._records[resource_id]
        return ""
