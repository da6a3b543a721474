from __future__ import annotations

from pathlib import Path
from typing import List, Optional, Sequence

import fitz  # PyMuPDF


def _render_page_to_png(doc: fitz.Document, page_index: int, out_path: Path, min_px: int = 1200) -> None:
    page = doc.load_page(page_index)

    # scale so the short side of the image is at least min_px pixels
    rect = page.rect
    short_side = min(rect.width, rect.height)
    zoom = max(1.0, min_px / float(short_side))
    mat = fitz.Matrix(zoom, zoom)

    pix = page.get_pixmap(matrix=mat, alpha=False)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    pix.save(str(out_path))


def preview_path(pdf_path: Path, page_index: int) -> Path:
    return pdf_path.with_name(f"{pdf_path.stem}-page{page_index + 1}.png")


def render_previews(pdf_path: Path, pages: Optional[Sequence[int]] = None, min_px: int = 1200) -> List[Path]:
    """Render the given pages (default: the first) of a generated PDF to PNG."""
    if not pdf_path.exists():
        raise FileNotFoundError(f"PDF not found: {pdf_path}")
    outputs: List[Path] = []
    with fitz.open(pdf_path) as doc:
        for index in pages or (0,):
            if index < 0 or index >= doc.page_count:
                raise ValueError(f"Page {index} out of range for {pdf_path.name} ({doc.page_count} pages)")
            out_path = preview_path(pdf_path, index)
            _render_page_to_png(doc, index, out_path, min_px=min_px)
            outputs.append(out_path)
    return outputs
