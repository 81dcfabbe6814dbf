"""Tests for the state store and its persistence contract."""

import json
import logging

import pytest

from photo_gallery.domain.actions import AddPhotos, CreateAlbum, DeleteAlbum, Login
from photo_gallery.domain.models import Album, State
from photo_gallery.errors import DuplicateAlbumName, PersistenceCorrupt
from photo_gallery.services.reducer import GalleryReducer
from photo_gallery.services.store import StateStore, load_state, parse_saved_state
from tests.conftest import InMemoryKeyValueStore, make_photo

KEY = "photoGalleryState"

ALBUM_DOC = {
    "id": "album-1",
    "name": "Trip",
    "photos": [{"id": "photo-a", "url": "data:image/png;base64,AA==", "name": "a.png"}],
    "coverPhotoId": "photo-a",
}


def test_load_missing_value_returns_empty_state() -> None:
    assert load_state(InMemoryKeyValueStore(), KEY) == State()


def test_load_legacy_album_list() -> None:
    storage = InMemoryKeyValueStore({KEY: json.dumps([ALBUM_DOC])})

    state = load_state(storage, KEY)

    assert state.user is None
    assert state.albums == (Album.model_validate(ALBUM_DOC),)


def test_load_current_format_with_user() -> None:
    raw = json.dumps(
        {"albums": [ALBUM_DOC], "user": {"email": "a@b.c", "isAdmin": False}}
    )

    state = parse_saved_state(raw)

    assert state.albums[0].cover_photo_id == "photo-a"
    assert state.user is not None
    assert state.user.email == "a@b.c"


def test_load_defaults_invalid_albums_and_missing_user() -> None:
    state = parse_saved_state(json.dumps({"albums": "nope"}))

    assert state == State()


def test_load_keeps_albums_when_saved_user_is_malformed() -> None:
    raw = json.dumps({"albums": [ALBUM_DOC], "user": {"email": "x"}})

    state = parse_saved_state(raw)

    assert state.albums == (Album.model_validate(ALBUM_DOC),)
    assert state.user is None


@pytest.mark.parametrize("raw", ["{not json", '"text"', '{"other": 1}', "42"])
def test_load_unrecognized_values_fall_back_to_empty(raw: str, caplog) -> None:
    storage = InMemoryKeyValueStore({KEY: raw})

    with caplog.at_level(logging.ERROR, logger="photo_gallery"):
        state = load_state(storage, KEY)

    assert state == State()
    assert "Could not load state" in caplog.text


def test_parse_saved_state_raises_persistence_corrupt() -> None:
    with pytest.raises(PersistenceCorrupt):
        parse_saved_state("[1, 2, 3]")


def test_dispatch_persists_new_state(
    store: StateStore, storage: InMemoryKeyValueStore
) -> None:
    state = store.dispatch(CreateAlbum("Trip", album_id="album-1"))

    assert store.get_state() is state
    saved = json.loads(storage.values[KEY])
    assert saved == {
        "albums": [{"id": "album-1", "name": "Trip", "photos": []}],
        "user": None,
    }


def test_dispatch_noop_does_not_persist(
    store: StateStore, storage: InMemoryKeyValueStore
) -> None:
    store.dispatch(DeleteAlbum("missing"))

    assert storage.writes == 0


def test_dispatch_duplicate_album_raises_and_keeps_state(store: StateStore) -> None:
    store.dispatch(CreateAlbum("Trip"))
    before = store.get_state()

    with pytest.raises(DuplicateAlbumName):
        store.dispatch(CreateAlbum("Trip"))

    assert store.get_state() is before


def test_save_failure_is_logged_not_raised(
    store: StateStore, storage: InMemoryKeyValueStore, caplog
) -> None:
    storage.fail_writes = True

    with caplog.at_level(logging.ERROR, logger="photo_gallery"):
        state = store.dispatch(Login("someone@example.com"))

    assert store.get_state() is state
    assert "Could not save state" in caplog.text


def test_saved_state_reloads_equal(
    store: StateStore, storage: InMemoryKeyValueStore, reducer: GalleryReducer
) -> None:
    store.dispatch(CreateAlbum("Trip", album_id="album-1"))
    store.dispatch(AddPhotos("album-1", (make_photo("photo-a"),)))
    store.dispatch(Login("someone@example.com"))

    reloaded = StateStore.load(storage, KEY, reducer)

    assert reloaded.get_state() == store.get_state()
