"""User-visible status text for a workspace. Informational only."""
import logging
from enum import Enum

logger = logging.getLogger(__name__)


class StatusPhase(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    RENDERING = "rendering"
    LOADED = "loaded"
    BUILDING = "building"
    EXPORTED = "exported"
    PRINT_OPENED = "print_dialog_opened"
    ERROR = "error"


class StatusChannel:
    def __init__(self) -> None:
        self.phase = StatusPhase.IDLE
        self.message = ""

    def set(self, phase: StatusPhase, message: str) -> None:
        self.phase = phase
        self.message = message
        logger.info(message, extra={"status_phase": phase.value})

    def error(self, message: str) -> None:
        self.set(StatusPhase.ERROR, message)
