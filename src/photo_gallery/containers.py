"""Dependency container wiring for the application."""

from dataclasses import dataclass
from functools import partial

from photo_gallery.adapters.json_file_store import JsonFileKeyValueStore
from photo_gallery.adapters.openai_search_client import OpenAISearchClient
from photo_gallery.config import Settings
from photo_gallery.services.authorization import email_admin_policy
from photo_gallery.services.backup import BackupService
from photo_gallery.services.credentials import CredentialService
from photo_gallery.services.gallery import GalleryService
from photo_gallery.services.reducer import GalleryReducer
from photo_gallery.services.search import AISearchAdapter, SearchOrchestrator
from photo_gallery.services.store import StateStore


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    store: StateStore
    credential_service: CredentialService
    search_orchestrator: SearchOrchestrator
    gallery_service: GalleryService
    backup_service: BackupService


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    storage = JsonFileKeyValueStore(resolved_settings.storage_path)
    admin_policy = email_admin_policy(resolved_settings.admin_email)
    store = StateStore.load(
        storage, resolved_settings.state_key, GalleryReducer(admin_policy)
    )
    credential_service = CredentialService(storage, resolved_settings.credential_key)
    search_adapter = AISearchAdapter(
        client_factory=partial(
            OpenAISearchClient.create,
            timeout_seconds=resolved_settings.openai_timeout_seconds,
        ),
        model=resolved_settings.openai_model,
        reasoning_effort=resolved_settings.openai_reasoning_effort,
        store=resolved_settings.openai_store,
        batch_size=resolved_settings.search_batch_size,
    )
    search_orchestrator = SearchOrchestrator(search_adapter)
    gallery_service = GalleryService(
        store=store,
        credentials=credential_service,
        search=search_orchestrator,
    )
    backup_service = BackupService(store=store, admin_policy=admin_policy)

    return AppContainer(
        settings=resolved_settings,
        store=store,
        credential_service=credential_service,
        search_orchestrator=search_orchestrator,
        gallery_service=gallery_service,
        backup_service=backup_service,
    )
