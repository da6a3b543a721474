"""
Document assembly: walk sections and blocks, break pages, then stamp footers.

generate() owns the whole lifecycle of one canvas. Nothing is shared between
calls, so independent documents can be generated side by side.
"""
from __future__ import annotations

import logging
import uuid
from pathlib import Path
from typing import List, Optional, Union

from .. import config
from .blocks import Cursor, DocumentSpec, Placement, RenderedDocument
from .canvas import PageCanvas
from .header import HeaderRenderer
from .paging import PageBreaker, PageGeometry
from .renderers import draw_block, draw_section_title, measure_block
from .style import load_style

logger = logging.getLogger(__name__)


def _footer_note(spec: DocumentSpec) -> str:
    if spec.footer_note:
        return spec.footer_note
    return f"Generated on {spec.created_at:%Y-%m-%d %H:%M}"


def generate(
    spec: DocumentSpec,
    output_path: Optional[Union[str, Path]] = None,
    *,
    header: Optional[HeaderRenderer] = None,
    geometry: Optional[PageGeometry] = None,
    theme: Optional[str] = None,
    invariant: bool = False,
) -> RenderedDocument:
    """
    Lay out `spec` into a PDF.

    Every section after the first starts on a fresh page. Each block is
    measured, given room by the page breaker, drawn, and the cursor advances
    by the drawn height plus BLOCK_SPACING. Footers ("Page N of M") are
    stamped in a second pass once the page count is known.

    Any exception while drawing aborts the document and propagates. When
    `output_path` is given the bytes are written there; the caller owns
    cleanup if that write fails.
    """
    geometry = geometry or PageGeometry()
    style = load_style(theme or spec.theme)
    header = header or HeaderRenderer(style, geometry=geometry)

    canv = PageCanvas(page_size=geometry.page_size, title=spec.title, author=spec.author, invariant=invariant)
    cursor = Cursor(geometry.margin_left, geometry.content_top)
    breaker = PageBreaker(canv, header, cursor, geometry, page_title=spec.title)
    width = geometry.content_width
    placements: List[Placement] = []

    if not spec.sections:
        header.render_header(canv, spec.title)

    for section_index, section in enumerate(spec.sections):
        breaker.page_title = section.title or spec.title
        if section_index == 0:
            header.render_header(canv, breaker.page_title)
        else:
            breaker.new_page()

        if section.title:
            breaker.ensure_space(config.SECTION_TITLE_HEIGHT)
            drawn = draw_section_title(canv, section.title, cursor.x, cursor.y, width, style)
            cursor.y += drawn + config.BLOCK_SPACING

        for block in section.blocks:
            needed = measure_block(block, width, style)
            breaker.ensure_space(needed)
            top = cursor.y
            drawn = draw_block(canv, block, cursor.x, top, width, style)
            placements.append(
                Placement(
                    section_index=section_index,
                    page_index=canv.page_index,
                    y=top,
                    height=drawn,
                    kind=type(block).__name__,
                )
            )
            cursor.y += drawn + config.BLOCK_SPACING

    canv.close_content()
    note = _footer_note(spec)
    canv.stamp_pages(lambda number, total: header.render_footer(canv, number, total, note=note))
    page_count = canv.page_count
    stream = canv.finalize()

    path: Optional[Path] = None
    if output_path is not None:
        path = Path(output_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("wb") as fh:
            fh.write(stream)

    document_id = uuid.uuid4().hex
    logger.info("Rendered %r: %d page(s), %d block(s)", spec.title, page_count, len(placements))
    return RenderedDocument(
        stream=stream,
        page_count=page_count,
        document_id=document_id,
        path=path,
        placements=tuple(placements),
    )
