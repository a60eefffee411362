"""One client's organizer: generation counter, current LoadSession and its controllers."""
import asyncio
import logging
import os
import time
import uuid
from typing import Callable, List, Optional

from organizer import config
from organizer.core.errors import LoadFailure
from organizer.core.export import ExportController
from organizer.core.load_session import GenerationCounter, LoadSession
from organizer.core.reorder import ReorderController
from organizer.core.status import StatusChannel, StatusPhase
from organizer.models.page import PageEntry, SessionPhase, SourceDocument
from organizer.security.validators import ensure_pdf_bytes
from organizer.services.rebuild import DocumentRebuildService
from organizer.services.thumbnails import PageThumbnailService
from organizer.storage.base import Storage
from organizer.utils.output_names import make_export_filename
from organizer.workers.thumbnail_worker import render_thumbnails

logger = logging.getLogger(__name__)

ViewListener = Callable[[int, PageEntry], None]


class Workspace:
    def __init__(
        self,
        thumbnails: PageThumbnailService,
        rebuild: DocumentRebuildService,
        storage: Storage,
        *,
        workspace_id: Optional[str] = None,
        storage_dir: str = config.STORAGE_DIR,
        thumbnail_scale: float = config.THUMBNAIL_SCALE,
        thumbnail_concurrency: int = config.THUMBNAIL_CONCURRENCY,
        max_pages: int = config.MAX_PAGES,
        export_filename: str = config.EXPORT_FILENAME,
        revoke_delay: float = config.DOWNLOAD_REVOKE_SECONDS,
        print_load_timeout: float = config.PRINT_LOAD_TIMEOUT_SECONDS,
        print_release_delay: float = config.PRINT_RELEASE_SECONDS,
    ) -> None:
        self.workspace_id = workspace_id or str(uuid.uuid4())
        self.counter = GenerationCounter()
        self.status = StatusChannel()
        self.session: Optional[LoadSession] = None
        self.thumbnail_scale = thumbnail_scale
        self.thumbnail_concurrency = thumbnail_concurrency
        self.max_pages = max_pages
        self._thumbnails = thumbnails
        self._view_listeners: List[ViewListener] = []
        self._pipelines: set = set()
        self.last_access = time.monotonic()
        self.reorder = ReorderController()
        self.export = ExportController(
            self.counter,
            rebuild,
            self.status,
            storage,
            storage_dir=os.path.join(storage_dir, self.workspace_id),
            filename=make_export_filename(export_filename),
            revoke_delay=revoke_delay,
            print_load_timeout=print_load_timeout,
            print_release_delay=print_release_delay,
        )

    def touch(self) -> None:
        self.last_access = time.monotonic()

    def idle_for(self, now: Optional[float] = None) -> float:
        return (time.monotonic() if now is None else now) - self.last_access

    @property
    def generation(self) -> int:
        return self.counter.current

    def on_entry_updated(self, listener: ViewListener) -> None:
        """Register a view callback; it receives the entry's display position, not its source index."""
        self._view_listeners.append(listener)

    async def start_load(self, data: bytes) -> LoadSession:
        """Supersede the current session with one for `data` and start rendering thumbnails.

        Raises LoadFailure if `data` is not a readable PDF and
        StaleGenerationResult if another load started while this one was parsing.
        """
        tag = self.counter.advance()
        session = LoadSession(tag, self.counter)
        self.session = session
        self.status.set(StatusPhase.LOADING, "Loading PDF...")
        logger.info("Loading document", extra={"workspace_id": self.workspace_id, "generation": tag, "size": len(data)})

        try:
            try:
                ensure_pdf_bytes(data)
            except ValueError as e:
                raise LoadFailure(str(e)) from e
            page_count = await self._thumbnails.open(data)
            self.counter.ensure_current(tag)
            if page_count < 1:
                raise LoadFailure("PDF has no pages.")
            if page_count > self.max_pages:
                raise LoadFailure(f"PDF exceeds maximum page limit ({self.max_pages}).")
        except LoadFailure as e:
            self.counter.ensure_current(tag)
            session.fail(str(e))
            self.status.error(f"Could not load PDF: {e.message}")
            raise

        session.attach(SourceDocument(data=data, page_count=page_count))
        self.status.set(StatusPhase.RENDERING, "Rendering thumbnails...")
        task = asyncio.create_task(self._run_pipeline(session))
        self._pipelines.add(task)
        task.add_done_callback(self._pipelines.discard)
        return session

    async def _run_pipeline(self, session: LoadSession) -> None:
        await render_thumbnails(
            session,
            self.counter,
            self._thumbnails,
            scale=self.thumbnail_scale,
            concurrency=self.thumbnail_concurrency,
            on_update=self._notify_view,
        )
        if not session.is_current:
            return
        session.phase = SessionPhase.READY
        self.status.set(StatusPhase.LOADED, f"Loaded {session.page_count} pages. Drag to reorder.")

    def _notify_view(self, position: int, entry: PageEntry) -> None:
        for listener in list(self._view_listeners):
            listener(position, entry)

    def close(self) -> None:
        """Invalidate outstanding work and drop export artifacts."""
        self.counter.advance()
        self.session = None
        self.export.discard()

    async def wait_thumbnails(self) -> None:
        """Wait until every thumbnail pipeline started so far has finished."""
        pending = list(self._pipelines)
        while pending:
            await asyncio.gather(*pending)
            pending = [t for t in self._pipelines if not t.done()]
