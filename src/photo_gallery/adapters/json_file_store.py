"""JSON-file backed key-value storage."""

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path

from photo_gallery.services.store import KeyValueStore

logger = logging.getLogger(__name__)


@dataclass
class JsonFileKeyValueStore(KeyValueStore):
    """Stores string values in one JSON object file, like browser storage."""

    path: Path

    def get(self, key: str) -> str | None:
        """Return the stored value for a key."""
        value = self._read().get(key)
        return value if isinstance(value, str) else None

    def set(self, key: str, value: str) -> None:
        """Store a value, replacing the file atomically."""
        entries = self._read()
        entries[key] = value
        self._write(entries)

    def delete(self, key: str) -> None:
        """Remove a key if present."""
        entries = self._read()
        if entries.pop(key, None) is not None:
            self._write(entries)

    def _read(self) -> dict[str, object]:
        if not self.path.exists():
            return {}
        # Unreadable contents are dropped; the next write replaces the file.
        try:
            payload = json.loads(self.path.read_text(encoding="utf-8"))
        except ValueError as exc:
            logger.warning("Ignoring malformed storage file %s: %s", self.path, exc)
            return {}
        if not isinstance(payload, dict):
            logger.warning("Ignoring storage file %s: not a JSON object", self.path)
            return {}
        return payload

    def _write(self, entries: dict[str, object]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_name(f"{self.path.name}.tmp")
        tmp_path.write_text(json.dumps(entries), encoding="utf-8")
        os.replace(tmp_path, self.path)
