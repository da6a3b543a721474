from __future__ import annotations

from typing import List

from reportlab.pdfbase.pdfmetrics import stringWidth


MIN_FONT_SIZE = 7.0


def text_height(line_count: int, font_size: float, line_gap: float) -> float:
    """Height of `line_count` stacked lines; the gap sits only between lines."""
    if line_count <= 0:
        return 0.0
    return line_count * float(font_size) + (line_count - 1) * float(line_gap)


def fit_font(text: str, font_name: str, base_size: float, max_width: float) -> float:
    """
    Shrink the font until a single line fits `max_width`, down to MIN_FONT_SIZE.
    """
    size = float(base_size)
    while size > MIN_FONT_SIZE:
        if stringWidth(text, font_name, size) <= max_width:
            return size
        size -= 0.5
    return MIN_FONT_SIZE


def _wrap_words(text: str, font_name: str, font_size: float, max_width: float) -> List[str]:
    """
    Word wrap one paragraph. A single word wider than the line is kept whole
    on its own line.
    """
    words = (text or "").split()
    if not words:
        return [""]

    lines: List[str] = []
    cur: List[str] = []

    for w in words:
        test = " ".join(cur + [w])
        if stringWidth(test, font_name, font_size) <= max_width:
            cur.append(w)
            continue

        if cur:
            lines.append(" ".join(cur))
            cur = [w]
        else:
            lines.append(w)

    if cur:
        lines.append(" ".join(cur))

    return lines


def wrap_text(text: str, font_name: str, font_size: float, max_width: float) -> List[str]:
    """Wrap text to `max_width`, honouring explicit newlines."""
    paragraphs = str(text or "").splitlines() or [""]
    lines: List[str] = []
    for paragraph in paragraphs:
        lines.extend(_wrap_words(paragraph, font_name, font_size, max(1.0, max_width)))
    return lines


def measure_height(
    text: str,
    width: float,
    font_name: str = "Helvetica",
    font_size: float = 11.0,
    line_gap: float = 3.0,
) -> float:
    """Height `PageCanvas.draw_text` will consume for the same arguments."""
    lines = wrap_text(text, font_name, font_size, width)
    return text_height(len(lines), font_size, line_gap)
