"""Domain models for the photo gallery."""

from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field


class Photo(BaseModel):
    """A single image owned by an album."""

    model_config = ConfigDict(frozen=True)

    id: str
    url: str
    name: str


class Album(BaseModel):
    """A named, ordered collection of photos with an optional cover."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    name: str
    photos: tuple[Photo, ...] = ()
    cover_photo_id: str | None = Field(default=None, alias="coverPhotoId")

    def find_photo(self, photo_id: str) -> Photo | None:
        """Return the photo with the given id, if present."""
        for photo in self.photos:
            if photo.id == photo_id:
                return photo
        return None


class User(BaseModel):
    """The locally signed-in user."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    email: str
    is_admin: bool = Field(alias="isAdmin")


class State(BaseModel):
    """Root aggregate persisted and exported as a whole."""

    model_config = ConfigDict(frozen=True)

    albums: tuple[Album, ...] = ()
    user: User | None = None

    def find_album(self, album_id: str) -> Album | None:
        """Return the album with the given id, if present."""
        for album in self.albums:
            if album.id == album_id:
                return album
        return None

    def has_album_named(self, name: str) -> bool:
        """Return True when an album already uses this exact name."""
        return any(album.name == name for album in self.albums)

    def all_photos(self) -> list[Photo]:
        """Flatten every album's photos in album order."""
        return [photo for album in self.albums for photo in album.photos]


def serialize_state(state: State) -> dict[str, object]:
    """Return the JSON-ready document for a state.

    Unset covers are omitted while ``user`` is always present, so the result
    matches both the persisted and the export document shape.
    """
    return {
        "albums": [
            album.model_dump(mode="json", by_alias=True, exclude_none=True)
            for album in state.albums
        ],
        "user": state.user.model_dump(mode="json", by_alias=True)
        if state.user
        else None,
    }


def new_album_id() -> str:
    return f"album-{uuid4().hex}"


def new_photo_id() -> str:
    return f"photo-{uuid4().hex}"
