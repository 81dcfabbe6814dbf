"""FastAPI application factory for the local gallery UI."""

import json
import logging
from collections.abc import AsyncIterator
from datetime import date

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse, Response, StreamingResponse

from photo_gallery.api.models import (
    CoverRequest,
    CreateAlbumRequest,
    CredentialRequest,
    FaceSearchRequest,
    LoginRequest,
    TextSearchRequest,
    UploadPhotosRequest,
)
from photo_gallery.app_logging import configure_logging
from photo_gallery.containers import AppContainer
from photo_gallery.domain.models import serialize_state
from photo_gallery.domain.search import (
    SearchCompleted,
    SearchEvent,
    SearchFailed,
    SearchProgress,
)
from photo_gallery.errors import (
    DuplicateAlbumName,
    GalleryError,
    InvalidCredential,
    InvalidDocument,
    InvalidSearchQuery,
    MissingCredential,
    NotAuthorized,
    UnknownAlbum,
    UnknownPhoto,
)
from photo_gallery.services.backup import export_filename, export_state

_ERROR_STATUS: dict[type[GalleryError], int] = {
    DuplicateAlbumName: status.HTTP_409_CONFLICT,
    InvalidDocument: status.HTTP_400_BAD_REQUEST,
    InvalidSearchQuery: status.HTTP_400_BAD_REQUEST,
    UnknownAlbum: status.HTTP_404_NOT_FOUND,
    UnknownPhoto: status.HTTP_404_NOT_FOUND,
    NotAuthorized: status.HTTP_403_FORBIDDEN,
}


def create_app(container: AppContainer) -> FastAPI:  # noqa: PLR0915
    """Create a FastAPI app configured with dependencies."""
    configure_logging()
    logger = logging.getLogger(__name__)

    app = FastAPI()
    app.state.container = container

    @app.exception_handler(GalleryError)
    async def gallery_error_handler(
        request: Request, exc: GalleryError
    ) -> JSONResponse:
        status_code = _ERROR_STATUS.get(
            type(exc), status.HTTP_500_INTERNAL_SERVER_ERROR
        )
        if status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
            logger.error("Unhandled gallery error: %s", exc)
        return JSONResponse(status_code=status_code, content={"detail": str(exc)})

    @app.exception_handler(ValueError)
    async def value_error_handler(request: Request, exc: ValueError) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST, content={"detail": str(exc)}
        )

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.get("/state")
    async def get_state(request: Request) -> dict[str, object]:
        return serialize_state(_container(request).store.get_state())

    @app.post("/session/login")
    async def login(body: LoginRequest, request: Request) -> dict[str, object]:
        return serialize_state(_container(request).gallery_service.login(body.email))

    @app.post("/session/logout")
    async def logout(request: Request) -> dict[str, object]:
        return serialize_state(_container(request).gallery_service.logout())

    @app.post("/albums", status_code=status.HTTP_201_CREATED)
    async def create_album(
        body: CreateAlbumRequest, request: Request
    ) -> dict[str, object]:
        album = _container(request).gallery_service.create_album(body.name)
        return album.model_dump(mode="json", by_alias=True, exclude_none=True)

    @app.delete("/albums/{album_id}")
    async def delete_album(album_id: str, request: Request) -> dict[str, object]:
        state = _container(request).gallery_service.delete_album(album_id)
        return serialize_state(state)

    @app.post("/albums/{album_id}/photos", status_code=status.HTTP_201_CREATED)
    async def upload_photos(
        album_id: str, body: UploadPhotosRequest, request: Request
    ) -> dict[str, object]:
        """Add a batch of base64-encoded images to an album."""
        photos = _container(request).gallery_service.add_photos(
            album_id, [(image.name, image.content()) for image in body.photos]
        )
        return {"photo_ids": [photo.id for photo in photos]}

    @app.delete("/albums/{album_id}/photos/{photo_id}")
    async def delete_photo(
        album_id: str, photo_id: str, request: Request
    ) -> dict[str, object]:
        state = _container(request).gallery_service.delete_photo(album_id, photo_id)
        return serialize_state(state)

    @app.put("/albums/{album_id}/cover")
    async def set_cover(
        album_id: str, body: CoverRequest, request: Request
    ) -> dict[str, object]:
        state = _container(request).gallery_service.set_cover_photo(
            album_id, body.photo_id
        )
        return serialize_state(state)

    @app.put("/credential")
    async def save_credential(
        body: CredentialRequest, request: Request
    ) -> dict[str, bool]:
        stored = _container(request).credential_service.save(body.api_key)
        return {"stored": stored}

    @app.delete("/credential")
    async def clear_credential(request: Request) -> dict[str, bool]:
        _container(request).credential_service.clear()
        return {"stored": False}

    @app.get("/export")
    async def export_backup(request: Request) -> Response:
        """Download the full state as a dated backup document."""
        document = export_state(_container(request).store.get_state())
        filename = export_filename(date.today())
        return Response(
            content=document,
            media_type="application/json",
            headers={"Content-Disposition": f'attachment; filename="{filename}"'},
        )

    @app.post("/import")
    async def import_backup(request: Request) -> dict[str, object]:
        """Replace the whole state with an uploaded backup document."""
        document = await request.body()
        state = _container(request).backup_service.import_document(document)
        return serialize_state(state)

    @app.post("/search/text")
    async def search_text(
        body: TextSearchRequest, request: Request
    ) -> StreamingResponse:
        events = _container(request).gallery_service.stream_text_search(body.query)
        return StreamingResponse(
            _ndjson(events), media_type="application/x-ndjson"
        )

    @app.post("/search/face")
    async def search_face(
        body: FaceSearchRequest, request: Request
    ) -> StreamingResponse:
        events = _container(request).gallery_service.stream_face_search(
            body.image.content()
        )
        return StreamingResponse(
            _ndjson(events), media_type="application/x-ndjson"
        )

    return app


def _container(request: Request) -> AppContainer:
    return request.app.state.container


async def _ndjson(events: AsyncIterator[SearchEvent]) -> AsyncIterator[str]:
    async for event in events:
        yield json.dumps(_event_payload(event)) + "\n"


def _event_payload(event: SearchEvent) -> dict[str, object]:
    if isinstance(event, SearchProgress):
        return {"type": "progress", "percent": event.percent}
    if isinstance(event, SearchCompleted):
        return {
            "type": "completed",
            "result": event.result.model_dump(mode="json", by_alias=True),
        }
    return {
        "type": "failed",
        "code": _failure_code(event),
        "message": str(event.error),
    }


def _failure_code(event: SearchFailed) -> str:
    if isinstance(event.error, MissingCredential):
        return "missing_credential"
    if isinstance(event.error, InvalidCredential):
        return "invalid_credential"
    if isinstance(event.error, InvalidSearchQuery):
        return "invalid_query"
    return "remote_failure"
