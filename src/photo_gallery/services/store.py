"""State store with load/save persistence."""

import json
import logging
from dataclasses import dataclass, field
from typing import Protocol

from pydantic import ValidationError

from photo_gallery.domain.actions import Action, CreateAlbum
from photo_gallery.domain.models import State, User, serialize_state
from photo_gallery.errors import DuplicateAlbumName, PersistenceCorrupt
from photo_gallery.services.reducer import GalleryReducer

logger = logging.getLogger(__name__)


class KeyValueStore(Protocol):
    """Local string key-value storage."""

    def get(self, key: str) -> str | None:
        """Return the stored value for a key, if present."""

    def set(self, key: str, value: str) -> None:
        """Store a value under a key."""

    def delete(self, key: str) -> None:
        """Remove a key if present."""


def parse_saved_state(raw: str) -> State:
    """Parse a persisted state document, accepting the legacy album list.

    Raises PersistenceCorrupt for anything that is neither a bare album list
    nor an object carrying an ``albums`` field.
    """
    try:
        saved = json.loads(raw)
        if isinstance(saved, list):
            return State.model_validate({"albums": saved, "user": None})
        if isinstance(saved, dict) and "albums" in saved:
            albums = saved["albums"] if isinstance(saved["albums"], list) else []
            state = State.model_validate({"albums": albums, "user": None})
            return state.model_copy(update={"user": _saved_user(saved.get("user"))})
    except (ValueError, ValidationError) as exc:
        raise PersistenceCorrupt(f"Saved state is malformed: {exc}") from exc
    raise PersistenceCorrupt("Saved state has an unrecognized shape")


def _saved_user(raw: object) -> User | None:
    if not raw:
        return None
    try:
        return User.model_validate(raw)
    except ValidationError as exc:
        logger.warning("Discarding malformed saved user: %s", exc)
        return None


def load_state(storage: KeyValueStore, key: str) -> State:
    """Load the persisted state, falling back to an empty state."""
    try:
        raw = storage.get(key)
        if raw is None:
            return State()
        return parse_saved_state(raw)
    except (OSError, ValueError, PersistenceCorrupt):
        logger.exception("Could not load state from local storage")
        return State()


@dataclass
class StateStore:
    """Owns the current state and persists every accepted transition."""

    storage: KeyValueStore
    key: str
    reducer: GalleryReducer
    _state: State = field(default_factory=State)

    @classmethod
    def load(
        cls, storage: KeyValueStore, key: str, reducer: GalleryReducer
    ) -> "StateStore":
        """Create a store seeded from local storage."""
        return cls(
            storage=storage,
            key=key,
            reducer=reducer,
            _state=load_state(storage, key),
        )

    def get_state(self) -> State:
        """Return the current state snapshot."""
        return self._state

    def dispatch(self, action: Action) -> State:
        """Apply an action, persist the new state and return it."""
        current = self._state
        if isinstance(action, CreateAlbum) and current.has_album_named(action.name):
            raise DuplicateAlbumName(action.name)
        updated = self.reducer(current, action)
        if updated is current:
            return current
        self._state = updated
        self._save(updated)
        return updated

    def _save(self, state: State) -> None:
        try:
            self.storage.set(self.key, json.dumps(serialize_state(state)))
        except (OSError, TypeError, ValueError):
            logger.exception("Could not save state to local storage")
