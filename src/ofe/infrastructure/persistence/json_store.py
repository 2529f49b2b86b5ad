"""JSON document store backing every repository.

The whole database is one JSON document (``{"<table>": [rows...]}``).  A
unit of work loads it once, repositories read and write the in-memory copy,
and ``write()`` replaces the file atomically.  One lock per file serializes
units of work within the process.
"""

from __future__ import annotations

import json
import os
import tempfile
import threading
from pathlib import Path

TABLES = (
    "orders",
    "assets",
    "bookings",
    "self_bookings",
    "line_items",
    "reskins",
    "scans",
    "pricing_configs",
    "transport_rates",
    "service_types",
    "cities",
    "platforms",
    "system_actors",
)

_locks: dict[Path, threading.RLock] = {}
_registry_lock = threading.Lock()


def _lock_for(path: Path) -> threading.RLock:
    with _registry_lock:
        if path not in _locks:
            _locks[path] = threading.RLock()
        return _locks[path]


class JsonDocumentStore:

    def __init__(self, file_path: Path) -> None:
        self._file_path = Path(file_path).resolve()
        self.lock = _lock_for(self._file_path)

    @property
    def file_path(self) -> Path:
        return self._file_path

    def load(self) -> dict[str, list[dict]]:
        self._ensure_file()
        document = json.loads(self._file_path.read_text(encoding="utf-8"))
        for table in TABLES:
            document.setdefault(table, [])
        return document

    def write(self, document: dict[str, list[dict]]) -> None:
        self._file_path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{self._file_path.name}.", dir=self._file_path.parent
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(document, fh, indent=2)
                fh.write("\n")
            os.replace(tmp_name, self._file_path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def _ensure_file(self) -> None:
        if not self._file_path.exists():
            self.write({table: [] for table in TABLES})


class JsonTable:
    """Row access to one table of a loaded document."""

    table = ""

    def __init__(self, document: dict[str, list[dict]]) -> None:
        self._document = document

    @property
    def _rows(self) -> list[dict]:
        return self._document.setdefault(self.table, [])

    def _find_raw(self, key: str, value) -> dict | None:
        for raw in self._rows:
            if raw.get(key) == value:
                return raw
        return None

    def _upsert(self, raw: dict, key: str = "id") -> None:
        # Upsert: replace if exists, otherwise append
        rows = self._rows
        for i, existing in enumerate(rows):
            if existing.get(key) == raw[key]:
                rows[i] = raw
                return
        rows.append(raw)
