from fastapi import APIRouter

from organizer.api.routes.common import WORKSPACES

router = APIRouter()


@router.get("/health")
def health():
    return {"status": "ok", "workspaces": len(WORKSPACES)}
