"""Pure state transitions for the gallery."""

from collections.abc import Callable
from dataclasses import dataclass

from photo_gallery.domain.actions import (
    Action,
    AddPhotos,
    CreateAlbum,
    DeleteAlbum,
    DeletePhoto,
    Login,
    Logout,
    ReplaceState,
    SetCoverPhoto,
)
from photo_gallery.domain.models import Album, Photo, State, User
from photo_gallery.services.authorization import AdminPolicy


@dataclass(frozen=True)
class GalleryReducer:
    """Apply actions to a state without mutating it.

    Transitions that change nothing return the input state itself, so callers
    can compare references to decide whether anything needs persisting.
    """

    admin_policy: AdminPolicy

    def __call__(self, state: State, action: Action) -> State:  # noqa: PLR0911
        match action:
            case Login(email=email):
                user = User(email=email, is_admin=self.admin_policy(email))
                return state.model_copy(update={"user": user})
            case Logout():
                return state.model_copy(update={"user": None})
            case CreateAlbum(name=name, album_id=album_id):
                if state.has_album_named(name):
                    return state
                album = Album(id=album_id, name=name)
                return state.model_copy(update={"albums": (*state.albums, album)})
            case DeleteAlbum(album_id=album_id):
                albums = tuple(a for a in state.albums if a.id != album_id)
                if len(albums) == len(state.albums):
                    return state
                return state.model_copy(update={"albums": albums})
            case AddPhotos(album_id=album_id, photos=photos):
                return _update_album(state, album_id, lambda a: _add_photos(a, photos))
            case DeletePhoto(album_id=album_id, photo_id=photo_id):
                return _update_album(
                    state, album_id, lambda a: _delete_photo(a, photo_id)
                )
            case SetCoverPhoto(album_id=album_id, photo_id=photo_id):
                return _update_album(
                    state,
                    album_id,
                    lambda a: a.model_copy(update={"cover_photo_id": photo_id}),
                )
            case ReplaceState(new_state=new_state):
                return new_state
            case _:
                return state


def _update_album(
    state: State, album_id: str, change: Callable[[Album], Album]
) -> State:
    """Replace the matching album with ``change(album)``."""
    target = state.find_album(album_id)
    if target is None:
        return state
    updated = change(target)
    if updated is target:
        return state
    albums = tuple(updated if a.id == album_id else a for a in state.albums)
    return state.model_copy(update={"albums": albums})


def _add_photos(album: Album, photos: tuple[Photo, ...]) -> Album:
    if not photos:
        return album
    updated = (*album.photos, *photos)
    cover = album.cover_photo_id or updated[0].id
    return album.model_copy(update={"photos": updated, "cover_photo_id": cover})


def _delete_photo(album: Album, photo_id: str) -> Album:
    remaining = tuple(p for p in album.photos if p.id != photo_id)
    if len(remaining) == len(album.photos):
        return album
    cover = album.cover_photo_id
    if cover == photo_id:
        cover = remaining[0].id if remaining else None
    return album.model_copy(update={"photos": remaining, "cover_photo_id": cover})
