from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Final

_JSON_NUMBER_RE: Final[re.Pattern[str]] = re.compile(r"-?[0-9]+(?:\.[0-9]+)?(?:[eE][+-]?[0-9]+)?")


@dataclass(frozen=True, slots=True)
class AttributeEntry:
    name: str
    value: str | None


def is_valid_attribute_name(name: str) -> bool:
    """Attribute names must be non-blank and made of letters only."""

    return bool(name.strip()) and all(ch.isalpha() for ch in name)


def is_valid_attribute_value(value: str) -> bool:
    """Accept `""` (no value) or letters, digits and whitespace (not blank)."""

    if value == "":
        return True
    return bool(value.strip()) and all(ch.isalnum() or ch.isspace() for ch in value)


def _is_number(value: str) -> bool:
    # JSON number grammar, ASCII digits only.
    return _JSON_NUMBER_RE.fullmatch(value) is not None


def _value_repr(value: str | None) -> str:
    if value is None:
        return ""
    if _is_number(value):
        return value
    return f'"{value}"'


def serialize_payload(entries: Iterable[AttributeEntry]) -> str:
    """Serialize entries into JSON-object text, in insertion order.

    Numeric values are emitted bare, other values quoted without escaping.

    Notes:
        - Every field keeps a trailing comma, including the last one.
        - A `None` value emits nothing after the colon (`"name":,`).
    """

    parts = ["{"]
    for entry in entries:
        parts.append(f'"{entry.name}":{_value_repr(entry.value)},')
    parts.append("}")
    return "".join(parts)
