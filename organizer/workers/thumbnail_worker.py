"""Background thumbnail pipeline for a LoadSession."""
import asyncio
import logging
from typing import Optional

from organizer.core.errors import PageRenderFailure
from organizer.core.load_session import EntryUpdated, GenerationCounter, LoadSession
from organizer.models.page import PageEntry
from organizer.services.thumbnails import PageThumbnailService

logger = logging.getLogger(__name__)


async def render_thumbnails(
    session: LoadSession,
    counter: GenerationCounter,
    service: PageThumbnailService,
    *,
    scale: float,
    concurrency: int = 1,
    on_update: Optional[EntryUpdated] = None,
) -> None:
    """Render every page of `session`, at most `concurrency` at a time.

    Requests are issued in page order; completions may land in any order.
    Each resumption checks the session's generation before touching state,
    so work for a superseded load is skipped or dropped, never applied.
    """
    if session.source is None:
        return
    data = session.source.data
    tag = session.generation
    semaphore = asyncio.Semaphore(max(1, concurrency))

    async def render_one(entry: PageEntry) -> None:
        async with semaphore:
            if not counter.is_current(tag):
                return
            try:
                thumbnail = await service.render_page(data, entry.source_index, scale)
                failure = None
            except PageRenderFailure as e:
                thumbnail, failure = None, e
            except Exception as e:
                thumbnail, failure = None, PageRenderFailure(entry.source_index, str(e))

        if not counter.is_current(tag):
            logger.debug(
                "Dropping stale thumbnail",
                extra={"source_index": entry.source_index, "generation": tag},
            )
            return

        if failure is not None:
            logger.warning(str(failure), extra={"generation": tag})
            entry.mark_failed(failure.details or failure.message)
        else:
            entry.set_thumbnail(thumbnail)

        if on_update is not None:
            on_update(session.order.position_of(entry), entry)

    in_page_order = sorted(session.order, key=lambda e: e.source_index)
    tasks = [asyncio.create_task(render_one(entry)) for entry in in_page_order]
    for task in tasks:
        session.track(task)
    await asyncio.gather(*tasks)
