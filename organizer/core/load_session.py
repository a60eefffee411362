"""State for one "load a document" lifecycle and the generation tags that guard it."""
import asyncio
from typing import Callable, Optional, Set

from organizer.core.errors import StaleGenerationResult
from organizer.core.order_model import OrderModel
from organizer.models.page import PageEntry, SessionPhase, SourceDocument

# Called with (display position, entry) whenever an entry's thumbnail settles
EntryUpdated = Callable[[int, PageEntry], None]


class GenerationCounter:
    """Monotonic tag source; one per workspace."""

    def __init__(self) -> None:
        self._current = 0

    @property
    def current(self) -> int:
        return self._current

    def advance(self) -> int:
        self._current += 1
        return self._current

    def is_current(self, tag: int) -> bool:
        return tag == self._current

    def ensure_current(self, tag: int) -> None:
        if tag != self._current:
            raise StaleGenerationResult(tag, self._current)


class LoadSession:
    """Owns the source bytes, the order and the outstanding thumbnail work for one load."""

    def __init__(self, generation: int, counter: GenerationCounter) -> None:
        self.generation = generation
        self.source: Optional[SourceDocument] = None
        self.order = OrderModel()
        self.phase = SessionPhase.LOADING
        self.error: Optional[str] = None
        self.pending: Set[asyncio.Task] = set()
        self._counter = counter

    @property
    def is_current(self) -> bool:
        return self._counter.is_current(self.generation)

    @property
    def page_count(self) -> int:
        return self.source.page_count if self.source else 0

    @property
    def is_loaded(self) -> bool:
        return self.source is not None and self.phase in (SessionPhase.RENDERING, SessionPhase.READY)

    def attach(self, source: SourceDocument) -> None:
        self.source = source
        self.order = OrderModel.identity(source.page_count, self.generation)
        self.phase = SessionPhase.RENDERING

    def fail(self, reason: str) -> None:
        self.source = None
        self.order = OrderModel()
        self.phase = SessionPhase.FAILED
        self.error = reason

    def track(self, task: asyncio.Task) -> None:
        self.pending.add(task)
        task.add_done_callback(self.pending.discard)
