#!/usr/bin/env python3
from __future__ import annotations

import json
import sys
from pathlib import Path

from crudcrud_cui.transport.dummy import DEFAULT_RECORDS, DummyStore
from crudcrud_cui.ui.app import CrudApp
from crudcrud_cui.ui.terminal import RichTerminal


def main(argv: list[str]) -> int:
    records = list(DEFAULT_RECORDS)
    if argv:
        records = json.loads(Path(argv[0]).read_text(encoding="utf-8"))
        if not isinstance(records, list):
            raise SystemExit("Invalid demo records: expected a JSON array root")
    return CrudApp(RichTerminal(), DummyStore(records), loading_delay_s=1.0).run()


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
