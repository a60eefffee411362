"""Request and response bodies for the workspace API."""
from typing import List, Optional

from pydantic import BaseModel

from organizer.models.page import SessionPhase, ThumbnailState


class PageView(BaseModel):
    position: int
    source_index: int
    thumbnail_state: ThumbnailState
    error: Optional[str] = None


class WorkspaceView(BaseModel):
    workspace_id: str
    generation: int
    phase: Optional[SessionPhase] = None
    status: str
    page_count: int = 0
    order: List[int] = []
    pages: List[PageView] = []
    error: Optional[str] = None


class MoveRequest(BaseModel):
    """Final positions as reported by the drag source (old index -> new index)."""
    from_position: int
    to_position: int


class DropRequest(BaseModel):
    """Insertion slot computed from pointer geometry; must resolve to an integer in [0, len]."""
    from_position: int
    slot: float


class DownloadView(BaseModel):
    handle_id: str
    filename: str
    url: str
    expires_in: float


class PrintView(BaseModel):
    surface_id: str
    url: str
