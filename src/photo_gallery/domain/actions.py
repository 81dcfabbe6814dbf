"""State transitions accepted by the gallery reducer."""

from dataclasses import dataclass, field

from photo_gallery.domain.models import Photo, State, new_album_id


@dataclass(frozen=True)
class Login:
    email: str


@dataclass(frozen=True)
class Logout:
    pass


@dataclass(frozen=True)
class CreateAlbum:
    """Create an album; the id is fixed when the action is built."""

    name: str
    album_id: str = field(default_factory=new_album_id)


@dataclass(frozen=True)
class DeleteAlbum:
    album_id: str


@dataclass(frozen=True)
class AddPhotos:
    album_id: str
    photos: tuple[Photo, ...]


@dataclass(frozen=True)
class DeletePhoto:
    album_id: str
    photo_id: str


@dataclass(frozen=True)
class SetCoverPhoto:
    album_id: str
    photo_id: str


@dataclass(frozen=True)
class ReplaceState:
    new_state: State


Action = (
    Login
    | Logout
    | CreateAlbum
    | DeleteAlbum
    | AddPhotos
    | DeletePhoto
    | SetCoverPhoto
    | ReplaceState
)
