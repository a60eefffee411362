"""Shared fixtures: fixture PDFs whose pages are identifiable by MediaBox width."""
import io

import pikepdf
import pytest
from pypdf import PdfReader

from organizer.core.workspace import Workspace
from organizer.services.rebuild import PikepdfRebuildService
from organizer.storage.local import LocalStorage
from fakes import FakeThumbnailService

BASE_WIDTH = 100
WIDTH_STEP = 10


def _make_pdf(page_count: int) -> bytes:
    pdf = pikepdf.new()
    for i in range(page_count):
        pdf.add_blank_page(page_size=(BASE_WIDTH + WIDTH_STEP * i, 200))
    buf = io.BytesIO()
    pdf.save(buf)
    return buf.getvalue()


def _source_order(data: bytes) -> list[int]:
    """Source page index of every output page, recovered from its width."""
    reader = PdfReader(io.BytesIO(data))
    return [
        (round(float(page.mediabox.width)) - BASE_WIDTH) // WIDTH_STEP
        for page in reader.pages
    ]


@pytest.fixture
def make_pdf():
    return _make_pdf


@pytest.fixture
def source_order():
    return _source_order


@pytest.fixture
def make_workspace(tmp_path):
    """Factory for workspaces backed by a fake renderer and the real pikepdf rebuild."""

    def factory(thumbnails=None, rebuild=None, **kwargs):
        kwargs.setdefault("revoke_delay", 30.0)
        kwargs.setdefault("print_load_timeout", 1.0)
        kwargs.setdefault("print_release_delay", 1.0)
        return Workspace(
            thumbnails or FakeThumbnailService(),
            rebuild or PikepdfRebuildService(),
            LocalStorage(str(tmp_path)),
            storage_dir=str(tmp_path),
            **kwargs,
        )

    return factory
