"""Page thumbnail rendering (pypdf for page counts, pdf2image/Pillow for rasters)."""
import asyncio
import io
import logging
from abc import ABC, abstractmethod
from functools import lru_cache

from PIL import Image, ImageDraw
from pdf2image import convert_from_bytes
from pypdf import PdfReader

from organizer.core.errors import LoadFailure, PageRenderFailure
from organizer.models.page import Thumbnail

logger = logging.getLogger(__name__)

# PDF user space is 72 units per inch; scale 1.0 == 72 dpi
POINTS_PER_INCH = 72


class PageThumbnailService(ABC):
    @abstractmethod
    async def open(self, data: bytes) -> int:
        """Return the page count of `data`; raise LoadFailure if it is not a readable PDF."""

    @abstractmethod
    async def render_page(self, data: bytes, index: int, scale: float) -> Thumbnail:
        """Rasterize zero-based page `index` at `scale`; raise PageRenderFailure on error."""


def count_pages(data: bytes) -> int:
    try:
        reader = PdfReader(io.BytesIO(data))
        if reader.is_encrypted:
            raise LoadFailure("Encrypted PDFs are not supported.")
        return len(reader.pages)
    except LoadFailure:
        raise
    except Exception as e:
        raise LoadFailure("Could not read PDF.", details=str(e)) from e


def image_to_thumbnail(img: Image.Image) -> Thumbnail:
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return Thumbnail(png=buf.getvalue(), width=img.width, height=img.height)


@lru_cache(maxsize=8)
def render_placeholder(width: int = 200) -> bytes:
    """Grey page with a red cross, shown for pages whose thumbnail failed."""
    height = int(width * 1.414)
    img = Image.new("RGB", (width, height), (230, 230, 230))
    draw = ImageDraw.Draw(img)
    m = int(width * 0.2)
    line = max(2, width // 30)
    draw.line((m, m, width - m, height - m), fill=(204, 51, 51), width=line)
    draw.line((width - m, m, m, height - m), fill=(204, 51, 51), width=line)
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()


class Pdf2ImageThumbnailService(PageThumbnailService):
    """Renders pages through poppler (pdf2image) in a worker thread."""

    async def open(self, data: bytes) -> int:
        return await asyncio.to_thread(count_pages, data)

    async def render_page(self, data: bytes, index: int, scale: float) -> Thumbnail:
        return await asyncio.to_thread(self._render, data, index, scale)

    @staticmethod
    def _render(data: bytes, index: int, scale: float) -> Thumbnail:
        try:
            images = convert_from_bytes(
                data,
                dpi=POINTS_PER_INCH * scale,
                first_page=index + 1,
                last_page=index + 1,
                fmt="png",
            )
        except Exception as e:
            logger.warning("pdf2image failed", extra={"source_index": index, "error": str(e)})
            raise PageRenderFailure(index, str(e)) from e
        if not images:
            raise PageRenderFailure(index, "renderer returned no image")
        return image_to_thumbnail(images[0])
