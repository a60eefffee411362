"""Print the reordered PDF through a hidden browser frame."""
from fastapi import APIRouter, HTTPException
from fastapi.responses import HTMLResponse, Response

from organizer.api.print_surfaces import PRINT_PAGE, PRINT_SURFACES, WebPrintHost, WebPrintSurface
from organizer.api.routes.common import get_workspace
from organizer.core.errors import NoDocumentLoaded, RebuildFailure
from organizer.models.workspace import PrintView
from organizer.security.validators import validate_id

router = APIRouter()

# How long a "loaded" report waits for the go-ahead to open the dialog
PRINT_SIGNAL_TIMEOUT = 10.0


def _get_surface(surface_id: str) -> WebPrintSurface:
    try:
        validate_id(surface_id)
    except ValueError:
        raise HTTPException(status_code=404, detail="Print surface not found")
    surface = PRINT_SURFACES.get(surface_id)
    if surface is None or surface.released:
        raise HTTPException(status_code=404, detail="Print surface not found or released")
    return surface


@router.post("/workspaces/{workspace_id}/print")
async def print_pdf(workspace_id: str):
    workspace = get_workspace(workspace_id)
    try:
        surface = await workspace.export.print_output(workspace.session, WebPrintHost(workspace.workspace_id))
    except NoDocumentLoaded as e:
        raise HTTPException(status_code=409, detail=str(e))
    except RebuildFailure as e:
        raise HTTPException(status_code=500, detail=str(e))
    if surface is None:
        return {"status": "superseded"}
    return PrintView(surface_id=surface.surface_id, url=f"/print/{surface.surface_id}")


@router.get("/print/{surface_id}", response_class=HTMLResponse)
def print_page(surface_id: str):
    surface = _get_surface(surface_id)
    return PRINT_PAGE.format(surface_id=surface.surface_id)


@router.get("/print/{surface_id}/document")
def print_document(surface_id: str):
    """Serve the rebuilt bytes inline so the frame renders them."""
    surface = _get_surface(surface_id)
    return Response(
        surface.data,
        media_type="application/pdf",
        headers={"Content-Disposition": 'inline; filename="print.pdf"'},
    )


@router.post("/print/{surface_id}/loaded")
async def print_loaded(surface_id: str):
    surface = _get_surface(surface_id)
    surface.mark_loaded()
    return {"print": await surface.wait_print_signal(PRINT_SIGNAL_TIMEOUT)}


@router.post("/print/{surface_id}/dismissed")
def print_dismissed(surface_id: str):
    surface = _get_surface(surface_id)
    surface.mark_dismissed()
    return {"status": "dismissed"}
