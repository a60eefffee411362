import asyncio
import contextlib
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from organizer import config
from organizer.api.routes import (
    health,
    workspaces,
    reorder,
    download,
    printing,
)
from organizer.api.routes.common import WORKSPACES, sweep_idle_workspaces_forever
from organizer.logger import setup_logging

logger = logging.getLogger(__name__)

app = FastAPI(
    title="PDF Page Organizer API",
    version="0.1",
    description="Load a PDF, preview its pages, drag them into a new order, then export or print the result.",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router, tags=["Health"])
app.include_router(workspaces.router, tags=["Workspaces"])
app.include_router(reorder.router, tags=["Organize"])
app.include_router(download.router, tags=["Export"])
app.include_router(printing.router, tags=["Export"])


@app.on_event("startup")
async def startup_event():
    setup_logging(config.LOG_LEVEL)
    app.state.sweeper = asyncio.create_task(sweep_idle_workspaces_forever())
    logger.info("PDF organizer started", extra={"storage_dir": config.STORAGE_DIR})


@app.on_event("shutdown")
async def shutdown_event():
    app.state.sweeper.cancel()
    with contextlib.suppress(asyncio.CancelledError):
        await app.state.sweeper
    closing = list(WORKSPACES.values())
    WORKSPACES.clear()
    for workspace in closing:
        workspace.close()
    # let in-flight renders observe the new generation and finish
    await asyncio.gather(*(w.wait_thumbnails() for w in closing))
