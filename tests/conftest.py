"""Shared test fixtures."""

import asyncio
import logging
from dataclasses import dataclass, field

import pytest

from photo_gallery.config import Settings
from photo_gallery.containers import AppContainer
from photo_gallery.domain.actions import Login
from photo_gallery.domain.models import Album, Photo, State
from photo_gallery.errors import GalleryError
from photo_gallery.services.authorization import email_admin_policy
from photo_gallery.services.backup import BackupService
from photo_gallery.services.credentials import CredentialService
from photo_gallery.services.gallery import GalleryService
from photo_gallery.services.reducer import GalleryReducer
from photo_gallery.services.search import (
    AISearchAdapter,
    SearchClient,
    SearchOrchestrator,
)
from photo_gallery.services.store import KeyValueStore, StateStore

ADMIN_EMAIL = "admin@example.com"


@dataclass
class InMemoryKeyValueStore(KeyValueStore):
    """In-memory key-value storage for tests."""

    values: dict[str, str] = field(default_factory=dict)
    fail_writes: bool = False
    writes: int = 0

    def get(self, key: str) -> str | None:
        return self.values.get(key)

    def set(self, key: str, value: str) -> None:
        if self.fail_writes:
            raise OSError("disk full")
        self.writes += 1
        self.values[key] = value

    def delete(self, key: str) -> None:
        self.values.pop(key, None)


@dataclass
class FakeSearchClient(SearchClient):
    """Fake search client answering each batch from a queue of payloads."""

    responses: list[dict[str, object] | GalleryError] = field(default_factory=list)
    calls: list[dict[str, object]] = field(default_factory=list)
    closed: bool = False

    async def classify(  # noqa: PLR0913
        self,
        *,
        model: str,
        reasoning_effort: str | None,
        store: bool,
        prompt: str,
        image_urls: list[str],
        schema: dict[str, object],
    ) -> dict[str, object]:
        self.calls.append({"prompt": prompt, "image_urls": image_urls})
        await asyncio.sleep(0)
        response = (
            self.responses.pop(0) if self.responses else {"matched_indices": []}
        )
        if isinstance(response, GalleryError):
            raise response
        return response

    async def close(self) -> None:
        self.closed = True


@dataclass
class FakeSearchClientFactory:
    """Hands out one fake client and records the credentials used."""

    client: FakeSearchClient = field(default_factory=FakeSearchClient)
    credentials: list[str] = field(default_factory=list)

    def __call__(self, credential: str) -> FakeSearchClient:
        self.credentials.append(credential)
        return self.client


def make_photo(photo_id: str, name: str | None = None) -> Photo:
    return Photo(
        id=photo_id,
        url=f"data:image/jpeg;base64,{photo_id}",
        name=name or f"{photo_id}.jpg",
    )


def make_adapter(
    factory: FakeSearchClientFactory, batch_size: int = 2
) -> AISearchAdapter:
    return AISearchAdapter(
        client_factory=factory,
        model="gpt-5.2",
        reasoning_effort="low",
        store=False,
        batch_size=batch_size,
    )


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        admin_email=ADMIN_EMAIL,
        storage_path=tmp_path / "storage.json",
    )


@pytest.fixture
def reducer() -> GalleryReducer:
    return GalleryReducer(email_admin_policy(ADMIN_EMAIL))


@pytest.fixture
def storage() -> InMemoryKeyValueStore:
    return InMemoryKeyValueStore()


@pytest.fixture
def store(storage: InMemoryKeyValueStore, reducer: GalleryReducer) -> StateStore:
    return StateStore(storage=storage, key="photoGalleryState", reducer=reducer)


@pytest.fixture
def admin_store(store: StateStore) -> StateStore:
    store.dispatch(Login(ADMIN_EMAIL))
    return store


@pytest.fixture
def sample_state() -> State:
    return State(
        albums=(
            Album(
                id="album-1",
                name="Trip",
                photos=(make_photo("photo-a"), make_photo("photo-b")),
                cover_photo_id="photo-a",
            ),
            Album(id="album-2", name="Empty"),
        ),
        user=None,
    )


@pytest.fixture
def search_factory() -> FakeSearchClientFactory:
    return FakeSearchClientFactory()


@pytest.fixture
def container(
    settings: Settings,
    storage: InMemoryKeyValueStore,
    store: StateStore,
    search_factory: FakeSearchClientFactory,
) -> AppContainer:
    credential_service = CredentialService(storage, settings.credential_key)
    search_orchestrator = SearchOrchestrator(make_adapter(search_factory))
    gallery_service = GalleryService(
        store=store,
        credentials=credential_service,
        search=search_orchestrator,
    )
    backup_service = BackupService(
        store=store, admin_policy=email_admin_policy(settings.admin_email)
    )
    return AppContainer(
        settings=settings,
        store=store,
        credential_service=credential_service,
        search_orchestrator=search_orchestrator,
        gallery_service=gallery_service,
        backup_service=backup_service,
    )


@pytest.fixture(autouse=True)
def _propagate_app_logs() -> None:
    # configure_logging() detaches the app logger from root; caplog listens on root.
    logging.getLogger("photo_gallery").propagate = True
