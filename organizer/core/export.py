"""Snapshot the order, rebuild the PDF, and deliver it as a download or to a print surface."""
import asyncio
import logging
import os
import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict, Optional, Set

from organizer.core.errors import (
    NoDocumentLoaded,
    OrganizerError,
    PrintSurfaceError,
    RebuildFailure,
    StaleGenerationResult,
)
from organizer.core.load_session import GenerationCounter, LoadSession
from organizer.core.status import StatusChannel, StatusPhase
from organizer.services.rebuild import DocumentRebuildService
from organizer.storage.base import Storage

logger = logging.getLogger(__name__)

PDF_MEDIA_TYPE = "application/pdf"


@dataclass
class DownloadHandle:
    handle_id: str
    filename: str
    path: str
    media_type: str = PDF_MEDIA_TYPE


class PrintSurface:
    """Off-screen document frame that is fed the rebuilt bytes.

    The host signals `mark_loaded` once the frame has the whole document and
    `mark_dismissed` when the dialog closes. `open_dialog` before load is an error.
    """

    def __init__(self, data: bytes, surface_id: Optional[str] = None) -> None:
        self.surface_id = surface_id or str(uuid.uuid4())
        self.data = data
        self.dialog_opened = False
        self.released = False
        self._loaded = asyncio.Event()
        self._dismissed = asyncio.Event()

    @property
    def loaded(self) -> bool:
        return self._loaded.is_set()

    def mark_loaded(self) -> None:
        self._loaded.set()

    def mark_dismissed(self) -> None:
        self._dismissed.set()

    async def wait_loaded(self) -> None:
        await self._loaded.wait()

    async def wait_dismissed(self) -> None:
        await self._dismissed.wait()

    def open_dialog(self) -> None:
        if self.released:
            raise PrintSurfaceError("Print surface was already released.")
        if not self.loaded:
            raise PrintSurfaceError("Print requested before the document finished loading.")
        self.dialog_opened = True
        self._show_dialog()

    def release(self) -> None:
        if self.released:
            return
        self.released = True
        self.data = b""
        self._on_release()

    def _show_dialog(self) -> None:
        pass

    def _on_release(self) -> None:
        pass


class PrintHost(ABC):
    @abstractmethod
    def create_surface(self, data: bytes) -> PrintSurface:
        pass


class ExportController:
    """Export and print paths for one workspace. Repeatable; never touches the session."""

    def __init__(
        self,
        counter: GenerationCounter,
        rebuild: DocumentRebuildService,
        status: StatusChannel,
        storage: Storage,
        *,
        storage_dir: str,
        filename: str,
        revoke_delay: float,
        print_load_timeout: float,
        print_release_delay: float,
    ) -> None:
        self._counter = counter
        self._rebuild = rebuild
        self._status = status
        self._storage = storage
        self._storage_dir = storage_dir
        self.filename = filename
        self.revoke_delay = revoke_delay
        self.print_load_timeout = print_load_timeout
        self.print_release_delay = print_release_delay
        self._downloads: Dict[str, DownloadHandle] = {}
        self._timers: Dict[str, asyncio.TimerHandle] = {}
        self._print_tasks: Set[asyncio.Task] = set()

    async def build_output(
        self, session: Optional[LoadSession], message: str = "Building reordered PDF..."
    ) -> bytes:
        """Rebuild the source with pages in the order observed at call time."""
        if session is None or not session.is_loaded:
            raise NoDocumentLoaded()
        tag = session.generation
        data = session.source.data
        snapshot = session.order.snapshot()
        self._status.set(StatusPhase.BUILDING, message)
        try:
            output = await asyncio.to_thread(self._rebuild.compose, data, snapshot)
        except Exception as e:
            self._counter.ensure_current(tag)
            if isinstance(e, RebuildFailure):
                failure = e
            else:
                failure = RebuildFailure("Could not build reordered PDF.", details=str(e))
            self._status.error(failure.message)
            logger.error("Rebuild failed", extra={"generation": tag, "error": str(failure)})
            raise failure
        self._counter.ensure_current(tag)
        logger.info("Rebuilt PDF", extra={"generation": tag, "pages": len(snapshot), "size": len(output)})
        return output

    async def export(self, session: Optional[LoadSession]) -> Optional[DownloadHandle]:
        try:
            output = await self.build_output(session)
        except StaleGenerationResult:
            logger.debug("Discarding export for superseded document")
            return None

        handle_id = str(uuid.uuid4())
        path = os.path.join(self._storage_dir, handle_id, self.filename)
        self._storage.save(path, output)
        handle = DownloadHandle(handle_id=handle_id, filename=self.filename, path=path)
        self._downloads[handle_id] = handle
        loop = asyncio.get_running_loop()
        self._timers[handle_id] = loop.call_later(self.revoke_delay, self.revoke, handle_id)
        self._status.set(StatusPhase.EXPORTED, f"Exported {self.filename}")
        return handle

    def get_download(self, handle_id: str) -> Optional[DownloadHandle]:
        return self._downloads.get(handle_id)

    def revoke(self, handle_id: str) -> None:
        timer = self._timers.pop(handle_id, None)
        if timer is not None:
            timer.cancel()
        handle = self._downloads.pop(handle_id, None)
        if handle is None:
            return
        try:
            self._storage.delete(handle.path)
        except OSError as e:
            logger.warning("Could not remove export artifact", extra={"path": handle.path, "error": str(e)})
        logger.debug("Revoked download", extra={"handle_id": handle_id})

    def revoke_all(self) -> None:
        for handle_id in list(self._downloads):
            self.revoke(handle_id)

    def discard(self) -> None:
        """Revoke every download and remove this controller's storage directory."""
        self.revoke_all()
        try:
            self._storage.delete_tree(self._storage_dir)
        except OSError as e:
            logger.warning("Could not remove export directory", extra={"path": self._storage_dir, "error": str(e)})

    async def print_output(self, session: Optional[LoadSession], host: PrintHost) -> Optional[PrintSurface]:
        """Hand the rebuilt PDF to a new print surface; the dialog opens once it has loaded."""
        try:
            output = await self.build_output(session, "Preparing print PDF...")
        except StaleGenerationResult:
            logger.debug("Discarding print for superseded document")
            return None

        surface = host.create_surface(output)
        task = asyncio.create_task(self._drive_print(surface, session.generation))
        self._print_tasks.add(task)
        task.add_done_callback(self._print_tasks.discard)
        return surface

    async def _drive_print(self, surface: PrintSurface, tag: int) -> None:
        try:
            try:
                await asyncio.wait_for(surface.wait_loaded(), self.print_load_timeout)
            except asyncio.TimeoutError:
                if self._counter.is_current(tag):
                    self._status.error("Print preview did not load.")
                return
            surface.open_dialog()
            if self._counter.is_current(tag):
                self._status.set(StatusPhase.PRINT_OPENED, "Print dialog opened.")
            try:
                await asyncio.wait_for(surface.wait_dismissed(), self.print_release_delay)
            except asyncio.TimeoutError:
                logger.debug("Print dialog not dismissed in time; releasing surface")
        except OrganizerError as e:
            logger.error("Print failed", extra={"surface_id": surface.surface_id, "error": str(e)})
        finally:
            surface.release()
