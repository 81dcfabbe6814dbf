"""AI-assisted photo search over the gallery corpus."""

import asyncio
import logging
from collections.abc import AsyncIterator, Awaitable, Callable, Sequence
from dataclasses import dataclass, field
from typing import Protocol

from pydantic import ValidationError

from photo_gallery.domain.models import Photo
from photo_gallery.domain.search import (
    BatchMatches,
    QueryType,
    SearchCompleted,
    SearchEvent,
    SearchFailed,
    SearchProgress,
    SearchResult,
)
from photo_gallery.errors import (
    GalleryError,
    InvalidSearchQuery,
    MissingCredential,
    RemoteSearchFailure,
)

logger = logging.getLogger(__name__)

MATCH_SCHEMA: dict[str, object] = {
    "type": "object",
    "properties": {
        "matched_indices": {
            "type": "array",
            "items": {"type": "integer", "minimum": 0},
        }
    },
    "required": ["matched_indices"],
    "additionalProperties": False,
}

FACE_PROMPT = (
    "The first image is a reference photo of a person. "
    "The remaining {count} images are candidates numbered 0 to {last}. "
    "Return the indices of the candidates in which the same person's face appears."
)

TEXT_PROMPT = (
    "The following {count} images are numbered 0 to {last}. "
    "Return the indices of the images that match this description: {query}"
)

ProgressCallback = Callable[[int], None]


class SearchClient(Protocol):
    """Interface for one remote inference call per batch."""

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
        """Return the structured decision for one batch of images."""

    async def close(self) -> None:
        """Release the client's network resources."""


SearchClientFactory = Callable[[str], SearchClient]


def progress_percent(done: int, total: int) -> int:
    """Return ``round(100 * done / total)`` rounding halves up."""
    return (200 * done + total) // (2 * total)


@dataclass
class AISearchAdapter:
    """Splits the corpus into batches and asks the remote service about each."""

    client_factory: SearchClientFactory
    model: str
    reasoning_effort: str | None
    store: bool
    batch_size: int = 10

    async def find_matching_faces(
        self,
        credential: str,
        query_image: str,
        corpus: Sequence[Photo],
        on_progress: ProgressCallback,
    ) -> list[Photo]:
        """Return corpus photos showing the same face as the query image."""
        return await self._run(
            credential,
            corpus,
            on_progress,
            build_prompt=lambda batch: FACE_PROMPT.format(
                count=len(batch), last=len(batch) - 1
            ),
            leading_images=[query_image],
        )

    async def find_photos_by_description(
        self,
        credential: str,
        query_text: str,
        corpus: Sequence[Photo],
        on_progress: ProgressCallback,
    ) -> list[Photo]:
        """Return corpus photos matching a free-text description."""
        return await self._run(
            credential,
            corpus,
            on_progress,
            build_prompt=lambda batch: TEXT_PROMPT.format(
                count=len(batch), last=len(batch) - 1, query=query_text
            ),
            leading_images=[],
        )

    async def _run(  # noqa: PLR0913
        self,
        credential: str,
        corpus: Sequence[Photo],
        on_progress: ProgressCallback,
        *,
        build_prompt: Callable[[Sequence[Photo]], str],
        leading_images: list[str],
    ) -> list[Photo]:
        batches = [
            corpus[start : start + self.batch_size]
            for start in range(0, len(corpus), self.batch_size)
        ]
        if not batches:
            on_progress(100)
            return []

        client = self.client_factory(credential)
        matches: list[Photo] = []
        try:
            for done, batch in enumerate(batches, start=1):
                raw = await client.classify(
                    model=self.model,
                    reasoning_effort=self.reasoning_effort,
                    store=self.store,
                    prompt=build_prompt(batch),
                    image_urls=[*leading_images, *(photo.url for photo in batch)],
                    schema=MATCH_SCHEMA,
                )
                matches.extend(_select(batch, raw))
                on_progress(progress_percent(done, len(batches)))
        finally:
            await client.close()
        return matches


def _select(batch: Sequence[Photo], raw: dict[str, object]) -> list[Photo]:
    """Pick matched photos in batch order, ignoring out-of-range indices."""
    try:
        decision = BatchMatches.model_validate(raw)
    except ValidationError as exc:
        raise RemoteSearchFailure(f"Unexpected search response: {exc}") from exc
    indices = sorted({i for i in decision.matched_indices if 0 <= i < len(batch)})
    return [batch[i] for i in indices]


def _require_credential(credential: str | None) -> str:
    if not credential or not credential.strip():
        raise MissingCredential
    return credential.strip()


@dataclass
class SearchOrchestrator:
    """Runs one AI search at a time and reports its progress."""

    adapter: AISearchAdapter
    _lock: asyncio.Lock = field(default_factory=asyncio.Lock, init=False, repr=False)
    _tasks: set[asyncio.Task[None]] = field(
        default_factory=set, init=False, repr=False
    )

    async def search_by_face(
        self,
        credential: str | None,
        query_image: str,
        corpus: Sequence[Photo],
        on_progress: ProgressCallback,
    ) -> list[Photo]:
        """Search the corpus for photos showing the face in ``query_image``."""
        key = _require_credential(credential)
        async with self._lock:
            logger.info("Starting face search over %d photos", len(corpus))
            results = await self.adapter.find_matching_faces(
                key, query_image, corpus, on_progress
            )
        logger.info("Face search matched %d photos", len(results))
        return results

    async def search_by_text(
        self,
        credential: str | None,
        query_text: str,
        corpus: Sequence[Photo],
        on_progress: ProgressCallback,
    ) -> list[Photo]:
        """Search the corpus for photos matching a description."""
        if not query_text.strip():
            raise InvalidSearchQuery("Enter some words to search for")
        key = _require_credential(credential)
        async with self._lock:
            logger.info("Starting text search over %d photos", len(corpus))
            results = await self.adapter.find_photos_by_description(
                key, query_text.strip(), corpus, on_progress
            )
        logger.info("Text search matched %d photos", len(results))
        return results

    def stream_face_search(
        self, credential: str | None, query_image: str, corpus: Sequence[Photo]
    ) -> AsyncIterator[SearchEvent]:
        """Yield progress events, then one completed or failed event."""
        return self._stream(
            "face",
            query_image,
            lambda on_progress: self.search_by_face(
                credential, query_image, corpus, on_progress
            ),
        )

    def stream_text_search(
        self, credential: str | None, query_text: str, corpus: Sequence[Photo]
    ) -> AsyncIterator[SearchEvent]:
        """Yield progress events, then one completed or failed event."""
        return self._stream(
            "text",
            query_text,
            lambda on_progress: self.search_by_text(
                credential, query_text, corpus, on_progress
            ),
        )

    async def _stream(
        self,
        query_type: QueryType,
        query: str,
        run: Callable[[ProgressCallback], Awaitable[list[Photo]]],
    ) -> AsyncIterator[SearchEvent]:
        events: asyncio.Queue[SearchEvent] = asyncio.Queue()

        async def worker() -> None:
            try:
                photos = await run(
                    lambda percent: events.put_nowait(SearchProgress(percent))
                )
            except GalleryError as exc:
                events.put_nowait(SearchFailed(exc))
            except Exception as exc:
                logger.exception("AI search failed")
                events.put_nowait(SearchFailed(RemoteSearchFailure(str(exc))))
            else:
                result = SearchResult(
                    query_type=query_type, query=query, results=tuple(photos)
                )
                events.put_nowait(SearchCompleted(result))

        # Abandoned streams leave the search running to completion.
        task = asyncio.create_task(worker())
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

        while True:
            event = await events.get()
            yield event
            if not isinstance(event, SearchProgress):
                break
