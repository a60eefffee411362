"""Tests for the pikepdf-backed DocumentRebuildService."""
import io

import pikepdf
import pytest

from organizer.core.errors import RebuildFailure
from organizer.services.rebuild import PikepdfRebuildService


@pytest.fixture
def service():
    return PikepdfRebuildService()


class TestPikepdfRebuildService:
    def test_compose_identity(self, service, make_pdf, source_order):
        assert source_order(service.compose(make_pdf(4), (0, 1, 2, 3))) == [0, 1, 2, 3]

    def test_compose_permutation(self, service, make_pdf, source_order):
        assert source_order(service.compose(make_pdf(3), (2, 0, 1))) == [2, 0, 1]

    def test_compose_is_deterministic(self, service, make_pdf):
        data = make_pdf(3)
        assert service.compose(data, (1, 2, 0)) == service.compose(data, (1, 2, 0))

    def test_page_content_is_preserved(self, service):
        src = pikepdf.new()
        src.add_blank_page(page_size=(300, 400))
        src.pages[0].obj.Contents = src.make_stream(b"0 0 m 10 10 l S")
        src.add_blank_page(page_size=(500, 600))
        buf = io.BytesIO()
        src.save(buf)

        out = pikepdf.open(io.BytesIO(service.compose(buf.getvalue(), (1, 0))))
        assert [float(p.mediabox[2]) for p in out.pages] == [500, 300]
        assert out.pages[1].obj.Contents.read_bytes() == b"0 0 m 10 10 l S"

    def test_out_of_range_index(self, service, make_pdf):
        with pytest.raises(RebuildFailure):
            service.compose(make_pdf(2), (0, 2))

    def test_corrupt_source(self, service):
        with pytest.raises(RebuildFailure):
            service.compose(b"%PDF-1.4 nonsense", (0,))

    def test_primitives(self, service, make_pdf, source_order):
        source = service.load(make_pdf(3))
        output = service.create()
        pages = service.copy_pages(source, [1, 2, 0])
        assert len(pages) == 3
        service.append(output, pages)
        data = service.serialize(output)
        service.close(output)
        service.close(source)
        assert source_order(data) == [1, 2, 0]
