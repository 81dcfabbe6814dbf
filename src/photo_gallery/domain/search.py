"""Models for AI search queries, remote decisions and progress events."""

from dataclasses import dataclass
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from photo_gallery.domain.models import Photo
from photo_gallery.errors import GalleryError

QueryType = Literal["face", "text"]


class BatchMatches(BaseModel):
    """Structured output for one remote batch decision."""

    matched_indices: list[int] = Field(default_factory=list)


class SearchResult(BaseModel):
    """Outcome of a completed search, ready to render."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    query_type: QueryType = Field(alias="queryType")
    query: str
    results: tuple[Photo, ...] = ()


@dataclass(frozen=True)
class SearchProgress:
    """Percentage of batches completed so far."""

    percent: int


@dataclass(frozen=True)
class SearchCompleted:
    result: SearchResult


@dataclass(frozen=True)
class SearchFailed:
    error: GalleryError


SearchEvent = SearchProgress | SearchCompleted | SearchFailed
