"""Page thumbnails and drag-reorder of the loaded document."""
from typing import Optional

from fastapi import APIRouter, HTTPException
from fastapi.responses import JSONResponse, Response

from organizer.api.routes.common import get_workspace, require_session
from organizer.models.page import ThumbnailState
from organizer.models.workspace import DropRequest, MoveRequest
from organizer.services.thumbnails import render_placeholder

router = APIRouter()


@router.get("/workspaces/{workspace_id}/pages/{source_index}/thumbnail")
def page_thumbnail(workspace_id: str, source_index: int, generation: Optional[int] = None):
    workspace = get_workspace(workspace_id)
    if generation is not None and generation != workspace.generation:
        raise HTTPException(status_code=410, detail="Document was replaced")
    session = require_session(workspace)
    entry = session.order.entry_for_source(source_index)
    if entry is None:
        raise HTTPException(status_code=404, detail=f"Page {source_index} does not exist")
    headers = {"X-Thumbnail-State": entry.thumbnail_state.value}
    if entry.thumbnail_state == ThumbnailState.READY:
        return Response(entry.thumbnail.png, media_type="image/png", headers=headers)
    if entry.thumbnail_state == ThumbnailState.FAILED:
        return Response(render_placeholder(), media_type="image/png", headers=headers)
    return JSONResponse(status_code=202, content={"state": entry.thumbnail_state.value}, headers=headers)


@router.post("/workspaces/{workspace_id}/move")
def move_page(workspace_id: str, body: MoveRequest):
    workspace = get_workspace(workspace_id)
    session = require_session(workspace)
    changed = workspace.reorder.on_move(session, body.from_position, body.to_position)
    return {"changed": changed, "order": session.order.source_indices()}


@router.post("/workspaces/{workspace_id}/drop")
def drop_page(workspace_id: str, body: DropRequest):
    workspace = get_workspace(workspace_id)
    session = require_session(workspace)
    changed = workspace.reorder.drop(session, body.from_position, body.slot)
    return {"changed": changed, "order": session.order.source_indices()}
