"""Authoritative page order for one loaded document.

The model is the single source of truth for the arrangement. Views are
updated from it; nothing reads the order back out of a view.
"""
import logging
import math
import numbers
from typing import Any, Iterator, List, Optional, Sequence, Tuple

from organizer.core.errors import OrderInvariantError
from organizer.models.page import PageEntry

logger = logging.getLogger(__name__)


def as_position(value: Any) -> int:
    """Integer value of `value`, or ValueError for bools, fractions and non-numbers."""
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        raise ValueError(f"Not a position: {value!r}")
    if isinstance(value, numbers.Integral):
        return int(value)
    if not math.isfinite(value) or not float(value).is_integer():
        raise ValueError(f"Not a whole position: {value!r}")
    return int(value)


class OrderModel:
    """Ordered sequence of PageEntry; always a permutation of [0, N).

    Only `move` mutates the sequence. Entries are never added or removed
    after construction.
    """

    def __init__(self, entries: Sequence[PageEntry] = ()) -> None:
        self._entries: List[PageEntry] = list(entries)
        self._verify()

    @classmethod
    def identity(cls, page_count: int, generation: int) -> "OrderModel":
        return cls(
            PageEntry(source_index=i, render_generation=generation)
            for i in range(page_count)
        )

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[PageEntry]:
        return iter(list(self._entries))

    def entry_at(self, position: int) -> PageEntry:
        return self._entries[position]

    def position_of(self, entry: PageEntry) -> int:
        """Display position of `entry` (identity lookup); ValueError if absent."""
        for position, candidate in enumerate(self._entries):
            if candidate is entry:
                return position
        raise ValueError(f"Page {entry.source_index} is not part of this order")

    def entry_for_source(self, source_index: int) -> Optional[PageEntry]:
        for entry in self._entries:
            if entry.source_index == source_index:
                return entry
        return None

    def source_indices(self) -> List[int]:
        return [e.source_index for e in self._entries]

    def snapshot(self) -> Tuple[int, ...]:
        """Atomic, immutable copy of the current source-index sequence."""
        return tuple(e.source_index for e in self._entries)

    def move(self, entry: PageEntry, new_position: int) -> bool:
        """Move `entry` to `new_position` (clamped). Returns False for a no-op.

        Raises ValueError for a position that is not a whole number; the order
        is left untouched in that case.
        """
        position = as_position(new_position)
        if not self._entries:
            return False
        current = self.position_of(entry)
        target = min(max(position, 0), len(self._entries) - 1)
        if target == current:
            return False
        entries = list(self._entries)
        moved = entries.pop(current)
        entries.insert(target, moved)
        self._verify(entries)
        self._entries = entries
        logger.debug(
            "Moved page",
            extra={"source_index": moved.source_index, "from_position": current, "to_position": target},
        )
        return True

    def _verify(self, entries: Optional[Sequence[PageEntry]] = None) -> None:
        indices = [e.source_index for e in (self._entries if entries is None else entries)]
        if sorted(indices) != list(range(len(indices))):
            raise OrderInvariantError("Page order is not a permutation", details=f"order={indices}")
