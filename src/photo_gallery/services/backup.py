"""Backup export and restore of the full gallery state."""

import json
import logging
from dataclasses import dataclass
from datetime import date
from pathlib import Path

from pydantic import ValidationError

from photo_gallery.domain.actions import ReplaceState
from photo_gallery.domain.models import State, serialize_state
from photo_gallery.errors import InvalidDocument
from photo_gallery.services.authorization import AdminPolicy
from photo_gallery.services.store import StateStore

logger = logging.getLogger(__name__)


def export_state(state: State) -> str:
    """Serialize the full state, user included, as an indented JSON document."""
    return json.dumps(serialize_state(state), indent=2, ensure_ascii=False)


def export_filename(day: date) -> str:
    return f"photo-gallery-backup-{day.isoformat()}.json"


def import_state(document: str | bytes) -> State:
    """Parse and validate an exported document.

    The document must be an object with an ``albums`` list and a ``user`` key,
    whose value may be null. Album, photo and user shapes are validated too.
    """
    try:
        payload = json.loads(document)
    except ValueError as exc:
        raise InvalidDocument(f"File is not valid JSON: {exc}") from exc
    if not isinstance(payload, dict):
        raise InvalidDocument("Invalid data structure in file: expected an object")
    if not isinstance(payload.get("albums"), list):
        raise InvalidDocument("Invalid data structure in file: 'albums' must be a list")
    if "user" not in payload:
        raise InvalidDocument("Invalid data structure in file: missing 'user'")
    try:
        return State.model_validate(payload)
    except ValidationError as exc:
        raise InvalidDocument(f"Invalid data structure in file: {exc}") from exc


@dataclass
class BackupService:
    """Writes backups to disk and restores them into the store."""

    store: StateStore
    admin_policy: AdminPolicy

    def export_to(self, directory: Path, today: date | None = None) -> Path:
        """Write the current state into ``directory`` and return the file path."""
        path = directory / export_filename(today or date.today())
        path.write_text(export_state(self.store.get_state()), encoding="utf-8")
        logger.info("Exported gallery backup to %s", path)
        return path

    def import_document(self, document: str | bytes) -> State:
        """Replace the whole state with an imported document."""
        imported = import_state(document)
        if imported.user is not None:
            user = imported.user.model_copy(
                update={"is_admin": self.admin_policy(imported.user.email)}
            )
            imported = imported.model_copy(update={"user": user})
        state = self.store.dispatch(ReplaceState(imported))
        logger.info("Imported gallery backup with %d albums", len(state.albums))
        return state

    def import_from(self, path: Path) -> State:
        """Read a backup file and replace the whole state with it."""
        return self.import_document(path.read_bytes())
