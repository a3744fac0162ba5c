from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Final

from ..protocol.records import extract_blocks, extract_identifier, pretty_print_json
from ..transport.base import RemoteStore, TransportError
from .menu import MenuNavigator

logger = logging.getLogger(__name__)

CHOOSE_TITLE: Final[str] = "---- Choose a record (↑,↓) ----"


@dataclass(frozen=True, slots=True)
class ChooseResult:
    success: bool
    object_id: str | None = None


def choose_object(store: RemoteStore, navigator: MenuNavigator) -> ChooseResult:
    """Let the user pick one remote record and return its `_id`.

    Picking the trailing "Back" entry returns `ChooseResult(success=False)`.
    """

    try:
        response = store.fetch_all()
    except TransportError as exc:
        raise type(exc)(f"Fetching failed:\n{exc}") from exc

    blocks = extract_blocks(pretty_print_json(response))
    index = navigator.select_index(CHOOSE_TITLE, blocks)
    if index is None or index == len(blocks) - 1:
        return ChooseResult(success=False)

    object_id = extract_identifier(blocks[index])
    logger.debug("Chose record %s", object_id)
    return ChooseResult(success=True, object_id=object_id)
