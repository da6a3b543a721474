from __future__ import annotations

import fitz  # PyMuPDF
import pytest

from briefpdf.layout.canvas import CanvasClosedError, CanvasState, ImageDecodeError, PageCanvas
from briefpdf.layout.text import measure_height


def _png_bytes(width: int = 12, height: int = 6) -> bytes:
    pix = fitz.Pixmap(fitz.csRGB, fitz.IRect(0, 0, width, height), False)
    pix.clear_with(200)
    return pix.tobytes("png")


def test_draw_text_returns_measured_height() -> None:
    canv = PageCanvas()
    text = "Layout engines measure before they draw. " * 10
    drawn = canv.draw_text(text, 50, 120, 300, font="Helvetica", size=10, line_gap=2)
    assert drawn == measure_height(text, 300, font_name="Helvetica", font_size=10, line_gap=2)


def test_finalize_returns_pdf_bytes_and_closes_canvas() -> None:
    canv = PageCanvas(title="Sample")
    canv.draw_rect(10, 10, 100, 50, fill="#FF0000", stroke="#000000")
    data = canv.finalize()
    assert data.startswith(b"%PDF")
    assert canv.state == CanvasState.FINALIZED
    with pytest.raises(CanvasClosedError):
        canv.draw_line(0, 0, 10, 10)
    with pytest.raises(CanvasClosedError):
        canv.finalize()


def test_stamp_visits_every_page_after_content_is_closed() -> None:
    canv = PageCanvas()
    canv.new_page()
    canv.new_page()
    assert canv.page_count == 3

    with pytest.raises(CanvasClosedError):
        canv.stamp_pages(lambda number, total: None)

    calls = []
    canv.close_content()
    canv.stamp_pages(lambda number, total: calls.append((number, total)))
    assert calls == [(1, 3), (2, 3), (3, 3)]

    with pytest.raises(CanvasClosedError):
        canv.stamp_pages(lambda number, total: None)
    with pytest.raises(CanvasClosedError):
        canv.new_page()

    data = canv.finalize()
    with fitz.open(stream=data, filetype="pdf") as doc:
        assert doc.page_count == 3


def test_stamped_text_lands_on_the_right_page() -> None:
    canv = PageCanvas()
    canv.draw_text("first body", 50, 100, 300)
    canv.new_page()
    canv.draw_text("second body", 50, 100, 300)
    canv.close_content()
    canv.stamp_pages(lambda number, total: canv.draw_text(f"stamp {number}/{total}", 50, 800, 300))
    data = canv.finalize()

    with fitz.open(stream=data, filetype="pdf") as doc:
        first, second = doc[0].get_text(), doc[1].get_text()
    assert "first body" in first and "stamp 1/2" in first
    assert "second body" in second and "stamp 2/2" in second
    assert "stamp 2/2" not in first


def test_draw_image_rejects_malformed_bytes() -> None:
    canv = PageCanvas()
    with pytest.raises(ImageDecodeError):
        canv.draw_image(b"definitely not an image", 10, 10, 40, 20)


def test_draw_image_accepts_png() -> None:
    canv = PageCanvas()
    canv.draw_image(_png_bytes(), 10, 10, 40, 20)
    data = canv.finalize()
    with fitz.open(stream=data, filetype="pdf") as doc:
        assert len(doc[0].get_images()) == 1
