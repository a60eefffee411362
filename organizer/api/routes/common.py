"""Shared state and helpers for workspace routes: registry, services, and id checks."""
import asyncio
import logging
from typing import Dict, List, Optional

from fastapi import HTTPException

from organizer import config
from organizer.core.errors import NoDocumentLoaded
from organizer.core.load_session import LoadSession
from organizer.core.workspace import Workspace
from organizer.security.validators import validate_id
from organizer.services.rebuild import PikepdfRebuildService
from organizer.services.thumbnails import Pdf2ImageThumbnailService
from organizer.storage.local import LocalStorage

logger = logging.getLogger(__name__)

WORKSPACES: Dict[str, Workspace] = {}

thumbnail_service = Pdf2ImageThumbnailService()
rebuild_service = PikepdfRebuildService()
storage = LocalStorage()


def create_workspace() -> Workspace:
    workspace = Workspace(thumbnail_service, rebuild_service, storage, storage_dir=storage.base_path)
    WORKSPACES[workspace.workspace_id] = workspace
    return workspace


def get_workspace(workspace_id: str) -> Workspace:
    """Look up a workspace or raise 404 (malformed ids are treated as unknown)."""
    try:
        validate_id(workspace_id)
    except ValueError:
        raise HTTPException(status_code=404, detail="Workspace not found")
    workspace = WORKSPACES.get(workspace_id)
    if workspace is None:
        raise HTTPException(status_code=404, detail="Workspace not found")
    workspace.touch()
    return workspace


def require_session(workspace: Workspace) -> LoadSession:
    session = workspace.session
    if session is None or not session.is_loaded:
        raise HTTPException(status_code=409, detail=NoDocumentLoaded().message)
    return session


def sweep_idle_workspaces(
    idle_seconds: float = config.WORKSPACE_IDLE_SECONDS, now: Optional[float] = None
) -> List[str]:
    """Close and unregister every workspace idle for at least `idle_seconds`."""
    expired = [wid for wid, ws in WORKSPACES.items() if ws.idle_for(now) >= idle_seconds]
    for workspace_id in expired:
        WORKSPACES.pop(workspace_id).close()
        logger.info("Closed idle workspace", extra={"workspace_id": workspace_id})
    return expired


async def sweep_idle_workspaces_forever(interval: float = config.WORKSPACE_SWEEP_SECONDS) -> None:
    while True:
        await asyncio.sleep(interval)
        sweep_idle_workspaces()
