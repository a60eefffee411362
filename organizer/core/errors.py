"""Error taxonomy for the page organizer."""
from typing import Optional


class OrganizerError(Exception):
    """Base class for every error raised by the organizer core."""

    def __init__(self, message: str, details: Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} ({self.details})"
        return self.message


class LoadFailure(OrganizerError):
    """The uploaded bytes could not be opened as a PDF document."""


class PageRenderFailure(OrganizerError):
    """A single page thumbnail could not be rendered."""

    def __init__(self, source_index: int, reason: Optional[str] = None) -> None:
        self.source_index = source_index
        super().__init__(f"Failed to render page {source_index + 1}", details=reason)


class RebuildFailure(OrganizerError):
    """The rebuild service could not produce output for the current order."""


class NoDocumentLoaded(OrganizerError):
    """Export or print was requested before a document was loaded."""

    def __init__(self, message: str = "No PDF loaded.") -> None:
        super().__init__(message)


class StaleGenerationResult(OrganizerError):
    """A result arrived for a load that has since been superseded."""

    def __init__(self, tag: int, current: int) -> None:
        self.tag = tag
        self.current = current
        super().__init__("Result belongs to a superseded document", details=f"tag={tag} current={current}")


class PrintSurfaceError(OrganizerError):
    """The print surface was driven out of order (e.g. print before load)."""


class OrderInvariantError(OrganizerError):
    """The order stopped being a permutation of the source pages."""
