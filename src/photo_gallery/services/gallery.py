"""Application service behind the gallery UI."""

import asyncio
import logging
from collections.abc import AsyncIterator, Sequence
from dataclasses import dataclass
from pathlib import Path

from photo_gallery.domain.actions import (
    AddPhotos,
    CreateAlbum,
    DeleteAlbum,
    DeletePhoto,
    Login,
    Logout,
    SetCoverPhoto,
)
from photo_gallery.domain.models import Album, Photo, State, new_photo_id
from photo_gallery.domain.search import SearchEvent
from photo_gallery.errors import NotAuthorized, UnknownAlbum, UnknownPhoto
from photo_gallery.services.credentials import CredentialService
from photo_gallery.services.images import to_data_url
from photo_gallery.services.search import SearchOrchestrator
from photo_gallery.services.store import StateStore

logger = logging.getLogger(__name__)


@dataclass
class GalleryService:
    """Coordinates the store, credential storage and AI search."""

    store: StateStore
    credentials: CredentialService
    search: SearchOrchestrator

    def state(self) -> State:
        return self.store.get_state()

    def login(self, email: str) -> State:
        """Sign in with an email; admin rights come from the admin policy."""
        return self.store.dispatch(Login(email.strip()))

    def logout(self) -> State:
        return self.store.dispatch(Logout())

    def create_album(self, name: str) -> Album:
        """Create a new album and return it."""
        self._require_admin()
        cleaned = name.strip()
        if not cleaned:
            raise ValueError("Album name must not be empty")
        action = CreateAlbum(cleaned)
        self.store.dispatch(action)
        return self._album(action.album_id)

    def delete_album(self, album_id: str) -> State:
        self._require_admin()
        return self.store.dispatch(DeleteAlbum(album_id))

    def add_photos(
        self, album_id: str, uploads: Sequence[tuple[str, bytes]]
    ) -> list[Photo]:
        """Add uploaded images to an album in a single transition."""
        self._require_admin()
        self._album(album_id)
        photos = tuple(
            Photo(id=new_photo_id(), url=to_data_url(content), name=name)
            for name, content in uploads
        )
        if photos:
            self.store.dispatch(AddPhotos(album_id, photos))
        return list(photos)

    async def add_photo_files(
        self, album_id: str, paths: Sequence[Path]
    ) -> list[Photo]:
        """Read image files concurrently and add the readable ones together."""
        self._require_admin()
        self._album(album_id)
        contents = await asyncio.gather(
            *(asyncio.to_thread(path.read_bytes) for path in paths),
            return_exceptions=True,
        )
        uploads: list[tuple[str, bytes]] = []
        for path, content in zip(paths, contents, strict=True):
            if isinstance(content, BaseException):
                logger.warning("Skipping unreadable photo %s: %s", path, content)
                continue
            uploads.append((path.name, content))
        return self.add_photos(album_id, uploads)

    def delete_photo(self, album_id: str, photo_id: str) -> State:
        self._require_admin()
        return self.store.dispatch(DeletePhoto(album_id, photo_id))

    def set_cover_photo(self, album_id: str, photo_id: str) -> State:
        """Make an existing photo the album's cover."""
        self._require_admin()
        album = self.store.get_state().find_album(album_id)
        if album is None or album.find_photo(photo_id) is None:
            raise UnknownPhoto(album_id, photo_id)
        return self.store.dispatch(SetCoverPhoto(album_id, photo_id))

    def corpus(self) -> list[Photo]:
        """Return every photo across all albums."""
        return self.store.get_state().all_photos()

    def stream_face_search(self, image_bytes: bytes) -> AsyncIterator[SearchEvent]:
        """Search all photos for the face in an uploaded image."""
        return self.search.stream_face_search(
            self.credentials.get(), to_data_url(image_bytes), self.corpus()
        )

    def stream_text_search(self, query_text: str) -> AsyncIterator[SearchEvent]:
        """Search all photos for a free-text description."""
        return self.search.stream_text_search(
            self.credentials.get(), query_text, self.corpus()
        )

    def _require_admin(self) -> None:
        user = self.store.get_state().user
        if user is None or not user.is_admin:
            raise NotAuthorized("Only the administrator can change albums")

    def _album(self, album_id: str) -> Album:
        album = self.store.get_state().find_album(album_id)
        if album is None:
            raise UnknownAlbum(album_id)
        return album


def cover_photo(album: Album) -> Photo | None:
    """Return the album's cover, defaulting to its first photo."""
    if album.cover_photo_id:
        cover = album.find_photo(album.cover_photo_id)
        if cover is not None:
            return cover
    return album.photos[0] if album.photos else None
