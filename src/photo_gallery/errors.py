"""Domain exceptions for the photo gallery.

Local data-integrity problems are recovered with safe defaults; every
user-initiated operation that cannot complete raises one of these so the
caller can tell a credential problem from a bad document or a plain failure.
"""


class GalleryError(RuntimeError):
    """Base exception for all gallery failures."""


class PersistenceCorrupt(GalleryError):
    """Raised when saved state cannot be parsed into a valid State."""


class DuplicateAlbumName(GalleryError):
    """Raised when an album with the same name already exists."""

    def __init__(self, name: str) -> None:
        super().__init__(f"An album named {name!r} already exists")
        self.name = name


class InvalidDocument(GalleryError):
    """Raised when an import document does not have the export shape."""


class MissingCredential(GalleryError):
    """Raised when a search is requested without a stored credential."""

    def __init__(self) -> None:
        super().__init__("Set an API key before using AI search")


class InvalidCredential(GalleryError):
    """Raised when the remote service rejects the credential."""


class RemoteSearchFailure(GalleryError):
    """Raised when a remote inference call fails for any other reason."""


class InvalidSearchQuery(GalleryError):
    """Raised when a text search is requested with a blank query."""


class NotAuthorized(GalleryError):
    """Raised when a non-admin attempts an admin-only operation."""


class UnknownPhoto(GalleryError):
    """Raised when a photo id does not belong to the referenced album."""

    def __init__(self, album_id: str, photo_id: str) -> None:
        super().__init__(f"Photo {photo_id!r} is not in album {album_id!r}")
        self.album_id = album_id
        self.photo_id = photo_id


class UnknownAlbum(GalleryError):
    """Raised when an album id does not exist."""

    def __init__(self, album_id: str) -> None:
        super().__init__(f"Album {album_id!r} does not exist")
        self.album_id = album_id
