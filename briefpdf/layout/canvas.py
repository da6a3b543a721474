"""
Drawing surface for the layout engine.

Coordinates are top-down: (x, y) is measured from the top-left corner of the
page, the way the cursor moves. Conversion to ReportLab's bottom-up space
happens here and nowhere else.

Pages are buffered instead of written as they complete, so that a second pass
(`stamp_pages`) can revisit every page once the total page count is known.
"""
from __future__ import annotations

import io
from enum import Enum
from typing import Callable, Iterable, List, Optional, Tuple

from reportlab.lib.utils import ImageReader
from reportlab.pdfgen import canvas

from .. import config
from .style import _hex
from .text import text_height, wrap_text


class CanvasClosedError(RuntimeError):
    pass


class ImageDecodeError(ValueError):
    pass


class CanvasState(str, Enum):
    DRAWING = "drawing"
    STAMPING = "stamping"
    FINALIZED = "finalized"


class _BufferedCanvas(canvas.Canvas):
    """Canvas that keeps completed pages in memory until they are flushed."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self._buffered_pages: List[dict] = []

    def showPage(self):
        self._buffered_pages.append(dict(self.__dict__))
        self._startPage()

    def flush_pages(self, before_flush: Callable[[int, int], None]) -> None:
        pages = list(self._buffered_pages)
        total = len(pages)
        for number, state in enumerate(pages, start=1):
            self.__dict__.update(state)
            before_flush(number, total)
            canvas.Canvas.showPage(self)
        self._buffered_pages = []


class PageCanvas:
    def __init__(
        self,
        page_size: Tuple[float, float] = config.PAGE_SIZE,
        title: str = "",
        author: str = "",
        invariant: bool = False,
    ) -> None:
        self.width, self.height = page_size
        self._buffer = io.BytesIO()
        self._canv = _BufferedCanvas(self._buffer, pagesize=page_size, invariant=int(invariant))
        if title:
            self._canv.setTitle(title)
        if author:
            self._canv.setAuthor(author)
        self._canv.setCreator("briefpdf")
        self.page_index = 0
        self.state = CanvasState.DRAWING
        self._stamped = False

    # ---------- state ----------
    def _check_open(self) -> None:
        if self.state == CanvasState.FINALIZED:
            raise CanvasClosedError("Canvas already finalized")

    @property
    def page_count(self) -> int:
        return self.page_index + 1

    def _y(self, top: float) -> float:
        return self.height - top

    # ---------- primitives ----------
    def draw_rect(
        self,
        x: float,
        y: float,
        w: float,
        h: float,
        fill: Optional[str] = None,
        stroke: Optional[str] = None,
        line_width: float = 0.5,
        radius: float = 0.0,
    ) -> None:
        self._check_open()
        c = self._canv
        if fill:
            c.setFillColor(_hex(fill))
        if stroke:
            c.setStrokeColor(_hex(stroke))
            c.setLineWidth(line_width)
        do_fill = 1 if fill else 0
        do_stroke = 1 if stroke else 0
        if radius > 0:
            c.roundRect(x, self._y(y + h), w, h, radius=radius, stroke=do_stroke, fill=do_fill)
        else:
            c.rect(x, self._y(y + h), w, h, stroke=do_stroke, fill=do_fill)

    def draw_line(self, x1: float, y1: float, x2: float, y2: float, color: str = "#CCCCCC", line_width: float = 0.5) -> None:
        self._check_open()
        self._canv.setStrokeColor(_hex(color))
        self._canv.setLineWidth(line_width)
        self._canv.line(x1, self._y(y1), x2, self._y(y2))

    def draw_circle(self, cx: float, cy: float, r: float, fill: str) -> None:
        self._check_open()
        self._canv.setFillColor(_hex(fill))
        self._canv.circle(cx, self._y(cy), r, stroke=0, fill=1)

    def draw_lines(
        self,
        lines: Iterable[str],
        x: float,
        y: float,
        width: float,
        font: str = "Helvetica",
        size: float = 11.0,
        color: str = "#000000",
        align: str = "left",
        line_gap: float = 3.0,
    ) -> float:
        """Draw pre-wrapped lines with their box top at y; return consumed height."""
        self._check_open()
        c = self._canv
        c.setFont(font, size)
        c.setFillColor(_hex(color))
        count = 0
        for i, line in enumerate(lines):
            # baseline sits at ~80% of the em box
            baseline = self._y(y + i * (size + line_gap) + size * 0.8)
            if align == "right":
                c.drawRightString(x + width, baseline, line)
            elif align == "center":
                c.drawCentredString(x + width / 2, baseline, line)
            else:
                c.drawString(x, baseline, line)
            count += 1
        return text_height(count, size, line_gap)

    def draw_text(
        self,
        text: str,
        x: float,
        y: float,
        width: float,
        font: str = "Helvetica",
        size: float = 11.0,
        color: str = "#000000",
        align: str = "left",
        line_gap: float = 3.0,
    ) -> float:
        lines = wrap_text(text, font, size, width)
        return self.draw_lines(lines, x, y, width, font=font, size=size, color=color, align=align, line_gap=line_gap)

    def draw_image(self, data: bytes, x: float, y: float, w: float, h: float) -> None:
        self._check_open()
        try:
            reader = ImageReader(io.BytesIO(data))
            self._canv.drawImage(reader, x, self._y(y + h), width=w, height=h, mask="auto", preserveAspectRatio=True)
        except Exception as exc:
            raise ImageDecodeError(f"Could not decode image ({len(data or b'')} bytes): {exc}") from exc

    # ---------- pages ----------
    def new_page(self) -> None:
        self._check_open()
        if self.state != CanvasState.DRAWING:
            raise CanvasClosedError("Content pages are closed; no new pages can be started")
        self._canv.showPage()
        self.page_index += 1

    def close_content(self) -> None:
        self._check_open()
        if self.state == CanvasState.DRAWING:
            self._canv.showPage()
            self.state = CanvasState.STAMPING

    def stamp_pages(self, stamp: Callable[[int, int], None]) -> None:
        """
        Revisit every buffered page, calling stamp(page_number, total_pages)
        while that page is current. Each page is written out afterwards, so
        this runs once.
        """
        self._check_open()
        if self.state != CanvasState.STAMPING:
            raise CanvasClosedError("Close content before stamping pages")
        if self._stamped:
            raise CanvasClosedError("Pages were already stamped")
        self._stamped = True
        self._canv.flush_pages(stamp)

    def finalize(self) -> bytes:
        self._check_open()
        self.close_content()
        if not self._stamped:
            self._stamped = True
            self._canv.flush_pages(lambda number, total: None)
        self._canv.save()
        self.state = CanvasState.FINALIZED
        return self._buffer.getvalue()
