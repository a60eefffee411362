"""Recompose a PDF from an ordered list of its own pages."""
import io
import logging
from abc import ABC, abstractmethod
from typing import Any, List, Sequence

import pikepdf

from organizer.core.errors import RebuildFailure

logger = logging.getLogger(__name__)


class DocumentRebuildService(ABC):
    """Primitive steps plus `compose`, which runs them in order.

    Implementations copy original page objects; nothing is rasterized.
    """

    @abstractmethod
    def load(self, data: bytes) -> Any:
        pass

    @abstractmethod
    def create(self) -> Any:
        pass

    @abstractmethod
    def copy_pages(self, source: Any, indices: Sequence[int]) -> List[Any]:
        pass

    @abstractmethod
    def append(self, output: Any, pages: List[Any]) -> None:
        pass

    @abstractmethod
    def serialize(self, output: Any) -> bytes:
        pass

    def close(self, handle: Any) -> None:
        pass

    def compose(self, data: bytes, indices: Sequence[int]) -> bytes:
        """Page i of the result is source page indices[i]."""
        source = self.load(data)
        try:
            output = self.create()
            try:
                self.append(output, self.copy_pages(source, indices))
                return self.serialize(output)
            finally:
                self.close(output)
        finally:
            self.close(source)


class PikepdfRebuildService(DocumentRebuildService):
    def load(self, data: bytes) -> pikepdf.Pdf:
        try:
            return pikepdf.open(io.BytesIO(data))
        except pikepdf.PdfError as e:
            raise RebuildFailure("Could not open source PDF for rebuild.", details=str(e)) from e

    def create(self) -> pikepdf.Pdf:
        return pikepdf.new()

    def copy_pages(self, source: pikepdf.Pdf, indices: Sequence[int]) -> List[pikepdf.Page]:
        n = len(source.pages)
        bad = [i for i in indices if not 0 <= i < n]
        if bad:
            raise RebuildFailure(
                f"Page index(es) {bad} do not exist. PDF has {n} page(s) (valid: 0-{n - 1})."
            )
        return [source.pages[i] for i in indices]

    def append(self, output: pikepdf.Pdf, pages: List[pikepdf.Page]) -> None:
        for page in pages:
            output.pages.append(page)

    def serialize(self, output: pikepdf.Pdf) -> bytes:
        buf = io.BytesIO()
        try:
            output.save(buf, deterministic_id=True)
        except pikepdf.PdfError as e:
            raise RebuildFailure("Could not write rebuilt PDF.", details=str(e)) from e
        return buf.getvalue()

    def close(self, handle: pikepdf.Pdf) -> None:
        handle.close()
