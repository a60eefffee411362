"""Create workspaces, load a PDF into one, and report its state."""
import logging

from fastapi import APIRouter, File, HTTPException, UploadFile

from organizer.api.routes.common import WORKSPACES, create_workspace, get_workspace
from organizer.core.errors import LoadFailure, StaleGenerationResult
from organizer.core.workspace import Workspace
from organizer.models.workspace import PageView, WorkspaceView
from organizer.security.validators import ensure_pdf_bytes, validate_file_size, validate_upload

logger = logging.getLogger(__name__)

router = APIRouter()


def workspace_view(workspace: Workspace) -> WorkspaceView:
    session = workspace.session
    view = WorkspaceView(
        workspace_id=workspace.workspace_id,
        generation=workspace.generation,
        status=workspace.status.message,
    )
    if session is None:
        return view
    view.phase = session.phase
    view.error = session.error
    view.page_count = session.page_count
    view.order = session.order.source_indices()
    view.pages = [
        PageView(
            position=position,
            source_index=entry.source_index,
            thumbnail_state=entry.thumbnail_state,
            error=entry.error,
        )
        for position, entry in enumerate(session.order)
    ]
    return view


@router.post("/workspaces", status_code=201)
def new_workspace():
    return workspace_view(create_workspace())


@router.get("/workspaces/{workspace_id}")
def workspace_state(workspace_id: str):
    return workspace_view(get_workspace(workspace_id))


@router.delete("/workspaces/{workspace_id}")
async def delete_workspace(workspace_id: str):
    workspace = get_workspace(workspace_id)
    workspace.close()
    WORKSPACES.pop(workspace.workspace_id, None)
    return {"status": "deleted"}


@router.post("/workspaces/{workspace_id}/document")
async def load_document(workspace_id: str, file: UploadFile = File(...)):
    """
    Replace the workspace's document. Non-PDF uploads are rejected with 400 and
    leave the current document untouched; thumbnails render in the background.
    """
    workspace = get_workspace(workspace_id)
    try:
        validate_upload(file)
        data = await file.read()
        validate_file_size(len(data))
        ensure_pdf_bytes(data)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    try:
        await workspace.start_load(data)
    except StaleGenerationResult:
        return {"status": "superseded"}
    except LoadFailure as e:
        raise HTTPException(status_code=422, detail=str(e))
    return workspace_view(workspace)
