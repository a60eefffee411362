from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class SessionPhase(str, Enum):
    LOADING = "loading"
    RENDERING = "rendering"
    READY = "ready"
    FAILED = "failed"


class ThumbnailState(str, Enum):
    PENDING = "pending"
    READY = "ready"
    FAILED = "failed"


class Thumbnail(BaseModel):
    """Rasterized page preview (PNG)."""
    model_config = ConfigDict(frozen=True)

    png: bytes = Field(repr=False)
    width: int
    height: int


class SourceDocument(BaseModel):
    """Raw bytes of the loaded PDF and its page count. Replaced, never mutated."""
    model_config = ConfigDict(frozen=True)

    data: bytes = Field(repr=False)
    page_count: int = Field(ge=1)


class PageEntry(BaseModel):
    """One logical page. `source_index` is fixed for the lifetime of the entry."""

    source_index: int = Field(ge=0, frozen=True)
    render_generation: int = Field(frozen=True)
    thumbnail: Optional[Thumbnail] = None
    thumbnail_state: ThumbnailState = ThumbnailState.PENDING
    error: Optional[str] = None

    def set_thumbnail(self, thumbnail: Thumbnail) -> None:
        self.thumbnail = thumbnail
        self.thumbnail_state = ThumbnailState.READY
        self.error = None

    def mark_failed(self, reason: str) -> None:
        self.thumbnail = None
        self.thumbnail_state = ThumbnailState.FAILED
        self.error = reason
