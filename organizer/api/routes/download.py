"""Export the reordered PDF and serve it as a short-lived download."""
from urllib.parse import quote

from fastapi import APIRouter, HTTPException
from fastapi.responses import FileResponse

from organizer.api.routes.common import get_workspace
from organizer.core.errors import NoDocumentLoaded, RebuildFailure
from organizer.models.workspace import DownloadView
from organizer.security.validators import validate_id

router = APIRouter()


@router.post("/workspaces/{workspace_id}/export")
async def export_pdf(workspace_id: str):
    workspace = get_workspace(workspace_id)
    try:
        handle = await workspace.export.export(workspace.session)
    except NoDocumentLoaded as e:
        raise HTTPException(status_code=409, detail=str(e))
    except RebuildFailure as e:
        raise HTTPException(status_code=500, detail=str(e))
    if handle is None:
        return {"status": "superseded"}
    return DownloadView(
        handle_id=handle.handle_id,
        filename=handle.filename,
        url=f"/workspaces/{workspace.workspace_id}/downloads/{handle.handle_id}",
        expires_in=workspace.export.revoke_delay,
    )


@router.get("/workspaces/{workspace_id}/downloads/{handle_id}")
def download(workspace_id: str, handle_id: str):
    workspace = get_workspace(workspace_id)
    try:
        validate_id(handle_id)
    except ValueError:
        raise HTTPException(status_code=404, detail="Download not found")
    handle = workspace.export.get_download(handle_id)
    if handle is None:
        raise HTTPException(status_code=404, detail="Download not found or expired")
    return FileResponse(
        handle.path,
        filename=handle.filename,
        media_type=handle.media_type,
        headers={"Content-Disposition": f'attachment; filename="{quote(handle.filename)}"'},
    )
