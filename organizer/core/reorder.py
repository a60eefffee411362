"""Turns drag gestures into OrderModel moves.

The controller does not depend on any gesture library: a reorder source
reports `on_move(from, to)` with final positions, or `drop(from, slot)` with
an insertion slot derived from pointer geometry.
"""
import logging
from typing import Any

from organizer.core.load_session import LoadSession
from organizer.core.order_model import as_position
from organizer.models.page import PageEntry

logger = logging.getLogger(__name__)


class ReorderController:
    def move_entry(self, session: LoadSession, entry: PageEntry, new_position: int) -> bool:
        """Move `entry` to `new_position`, clamped to the ends. Returns True if the order changed."""
        if not self._accepts(session):
            return False
        try:
            return session.order.move(entry, new_position)
        except ValueError as e:
            logger.warning("Ignoring move: %s", e)
            return False

    def on_move(self, session: LoadSession, from_position: Any, to_position: Any) -> bool:
        if not self._accepts(session):
            return False
        try:
            src = as_position(from_position)
            dst = as_position(to_position)
        except ValueError as e:
            logger.warning("Ignoring move: %s", e)
            return False
        if not 0 <= src < len(session.order):
            logger.warning("Ignoring move from position %s outside 0..%s", src, len(session.order) - 1)
            return False
        return session.order.move(session.order.entry_at(src), dst)

    def drop(self, session: LoadSession, from_position: Any, slot: Any) -> bool:
        """Apply a drop into insertion gap `slot` (0 = before the first page, len = after the last)."""
        if not self._accepts(session):
            return False
        length = len(session.order)
        try:
            src = as_position(from_position)
            gap = as_position(slot)
        except ValueError as e:
            logger.warning("Ignoring drop: %s", e)
            return False
        if not 0 <= src < length or not 0 <= gap <= length:
            logger.warning("Ignoring drop outside the grid", extra={"from_position": src, "slot": gap})
            return False
        # Removing the dragged page closes its gap, shifting later slots down by one
        target = gap - 1 if gap > src else gap
        return session.order.move(session.order.entry_at(src), target)

    @staticmethod
    def _accepts(session: LoadSession) -> bool:
        if not session.is_current:
            logger.info("Ignoring reorder on superseded document", extra={"generation": session.generation})
            return False
        return session.is_loaded
