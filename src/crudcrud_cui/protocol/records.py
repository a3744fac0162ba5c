from __future__ import annotations

import json
from typing import Any, Final

BACK_ENTRY: Final[str] = "Back"

_STRUCTURAL_CHARS: Final[frozenset[str]] = frozenset(',"{}[]')
_ID_LABEL: Final[str] = "_id"
_ID_SEPARATOR: Final[str] = ":"
_PRETTY_INDENT: Final[int] = 2


class RecordParseError(ValueError):
    """Raised when remote record text cannot be turned into menu blocks."""


class MissingIdentifierError(RecordParseError):
    """Raised when a selected record block has no `_id` field."""


def pretty_print_json(text: str) -> str:
    """Re-serialize a JSON array as indented text with one field per line.

    `extract_blocks()` relies on exactly this layout: structural lines (`[`, `{`,
    `},` ...) become blank once stripped, which is what separates the records.
    """

    try:
        data: Any = json.loads(text)
    except json.JSONDecodeError as exc:
        raise RecordParseError(f"Response is not valid JSON: {exc}") from exc
    if not isinstance(data, list):
        raise RecordParseError(f"Response must be a JSON array, got {type(data).__name__}")
    return json.dumps(data, indent=_PRETTY_INDENT, ensure_ascii=False)


def strip_structural_chars(text: str) -> str:
    """Drop JSON punctuation (`, " { } [ ]`), keeping line breaks."""

    return "".join(ch for ch in text if ch not in _STRUCTURAL_CHARS)


def extract_blocks(pretty_json: str) -> list[str]:
    """Split pretty-printed JSON array text into one display block per element.

    Returns the blocks followed by `BACK_ENTRY`. Malformed or non-array input is
    not detected here; callers pass the output of `pretty_print_json()`.
    """

    blocks: list[str] = []
    current: list[str] = []
    for raw_line in strip_structural_chars(pretty_json).splitlines():
        line = raw_line.strip()
        if line:
            current.append(line)
            continue
        if current:
            blocks.append("\n".join(current))
            current = []
    if current:
        blocks.append("\n".join(current))

    blocks.append(BACK_ENTRY)
    return blocks


def extract_identifier(block: str) -> str:
    """Return the `_id` value of a record block.

    The value starts right after the first `_id` label and its `:` separator
    (plus the single space the pretty printer emits) and ends at the next line
    break or the end of the block.
    """

    label_at = block.find(_ID_LABEL)
    if label_at < 0:
        raise MissingIdentifierError("Record identifier (_id) not found")

    start = label_at + len(_ID_LABEL)
    if block.startswith(_ID_SEPARATOR, start):
        start += len(_ID_SEPARATOR)
    if block.startswith(" ", start):
        start += 1

    end = block.find("\n", start)
    if end < 0:
        end = len(block)
    return block[start:end]
