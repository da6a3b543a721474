"""
Block renderers.

Every block kind has a measure function and a draw function. Both go through
the same layout helper, so the height reported before drawing is exactly the
height the drawing consumes.
"""
from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, NamedTuple, Sequence, Tuple

from reportlab.pdfbase.pdfmetrics import stringWidth

from .. import config
from .blocks import (
    AnswerKind,
    ColorSwatchBlock,
    FieldListBlock,
    ParagraphBlock,
    QACardBlock,
    RawStructuredTextBlock,
    RiskBlock,
    TitleBlock,
)
from .canvas import PageCanvas
from .structured import ClassifiedLine, LineKind, classify_line
from .style import _s, normalize_hex, severity_color
from .text import fit_font, text_height, wrap_text

logger = logging.getLogger(__name__)

TITLE_LINE_GAP = 4.0

QA_PADDING = 12.0
QA_ANSWER_GAP = 8.0
QA_TEXT_OFFSET = 45.0
QA_BADGE_RADIUS = 11.0

STRUCT_BLANK_HEIGHT = 6.0
STRUCT_ROW_SPACING = 4.0
STRUCT_BANNER_HEIGHT = 24.0
STRUCT_INDENT_PER_SPACE = 3.0
STRUCT_BULLET_OFFSET = 10.0
STRUCT_KEY_MAX_SHARE = 0.4

RISK_MITIGATION_INDENT = 20.0

NO_COLORS_TEXT = "No colors specified"
NOT_ANSWERED_TEXT = "Not answered yet"


def _font(style: dict) -> str:
    return str(_s(style, "font_name", "Helvetica"))


def _bold(style: dict) -> str:
    return str(_s(style, "bold_font_name", "Helvetica-Bold"))


def _body(style: dict) -> float:
    return float(_s(style, "body_size", 11))


def _small(style: dict) -> float:
    return float(_s(style, "small_size", 10))


def _gap(style: dict) -> float:
    return float(_s(style, "line_gap", 3))


def _ellipsize(text: str, font_name: str, size: float, max_width: float) -> str:
    if stringWidth(text, font_name, size) <= max_width:
        return text
    while text and stringWidth(text + "...", font_name, size) > max_width:
        text = text[:-1]
    return text.rstrip() + "..."


# ---------- section sub-header ----------
def draw_section_title(canv: PageCanvas, title: str, x: float, y: float, width: float, style: dict) -> float:
    bold = _bold(style)
    primary = str(_s(style, "primary_color", "#2C5282"))
    section_style = str(_s(style, "section_style", "bar"))
    h = config.SECTION_TITLE_HEIGHT
    size = fit_font(title, bold, float(_s(style, "section_size", 13)), width - 30)
    text_y = y + (h - size) / 2

    if section_style == "bar_left":
        canv.draw_rect(x, y, 6, h, fill=primary)
        canv.draw_lines([title], x + 15, text_y, width - 15, font=bold, size=size, color=primary)
        return h

    if section_style == "underline":
        canv.draw_lines([title], x, text_y, width, font=bold, size=size, color=primary)
        canv.draw_line(x, y + h, x + width, y + h, color=str(_s(style, "rule_color", "#CCCCCC")))
        return h

    canv.draw_rect(x, y, width, h, fill=str(_s(style, "section_fill", "#F0F0F0")))
    canv.draw_lines([title], x + 15, text_y, width - 30, font=bold, size=size, color=str(_s(style, "text_color", "#333333")))
    return h


# ---------- title ----------
def _measure_title(block: TitleBlock, width: float, style: dict) -> float:
    lines = wrap_text(block.text, _bold(style), float(_s(style, "title_size", 24)), width)
    return text_height(len(lines), float(_s(style, "title_size", 24)), TITLE_LINE_GAP)


def _draw_title(canv: PageCanvas, block: TitleBlock, x: float, y: float, width: float, style: dict) -> float:
    return canv.draw_text(
        block.text,
        x,
        y,
        width,
        font=_bold(style),
        size=float(_s(style, "title_size", 24)),
        color=str(_s(style, "text_color", "#1F2937")),
        align="center",
        line_gap=TITLE_LINE_GAP,
    )


# ---------- field list ----------
def _measure_fields(block: FieldListBlock, width: float, style: dict) -> float:
    return len(block.items) * (config.FIELD_LINE_HEIGHT + config.FIELD_ITEM_SPACING)


def _draw_fields(canv: PageCanvas, block: FieldListBlock, x: float, y: float, width: float, style: dict) -> float:
    font, bold = _font(style), _bold(style)
    size = _body(style)
    text_color = str(_s(style, "text_color", "#1F2937"))
    step = config.FIELD_LINE_HEIGHT + config.FIELD_ITEM_SPACING
    text_x = x + 18

    for i, (label, value) in enumerate(block.items):
        top = y + i * step
        text_top = top + (config.FIELD_LINE_HEIGHT - size) / 2
        canv.draw_circle(x + 6, top + config.FIELD_LINE_HEIGHT / 2, 2, fill=str(_s(style, "primary_color", "#2C5282")))

        label_text = f"{label}:"
        label_w = stringWidth(label_text, bold, size) + 4
        canv.draw_lines([label_text], text_x, text_top, label_w, font=bold, size=size, color=text_color)

        available = max(10.0, width - 18 - label_w)
        value_size = fit_font(value, font, size, available)
        value_text = _ellipsize(value, font, value_size, available)
        canv.draw_lines([value_text], text_x + label_w, text_top + (size - value_size), available, font=font, size=value_size, color=text_color)

    return _measure_fields(block, width, style)


# ---------- paragraph ----------
def _paragraph_layout(block: ParagraphBlock, width: float, style: dict) -> Tuple[List[str], int, float]:
    pad = config.PARAGRAPH_PADDING
    size, gap = _body(style), _gap(style)
    lines = wrap_text(block.text, _font(style), size, width - 2 * pad)
    natural = text_height(len(lines), size, gap) + 2 * pad
    height = min(natural, config.PARAGRAPH_MAX_HEIGHT)
    visible = len(lines)
    while visible > 0 and text_height(visible, size, gap) > height - 2 * pad:
        visible -= 1
    return lines, visible, height


def _measure_paragraph(block: ParagraphBlock, width: float, style: dict) -> float:
    return _paragraph_layout(block, width, style)[2]


def _draw_paragraph(canv: PageCanvas, block: ParagraphBlock, x: float, y: float, width: float, style: dict) -> float:
    lines, visible, height = _paragraph_layout(block, width, style)
    pad = config.PARAGRAPH_PADDING
    if visible < len(lines):
        logger.warning("Paragraph truncated to %d of %d lines to fit its box", visible, len(lines))
    canv.draw_rect(
        x,
        y,
        width,
        height,
        fill=str(_s(style, "box_fill", "#F8FAFC")),
        stroke=str(_s(style, "box_stroke", "#E5E7EB")),
        radius=6,
    )
    canv.draw_lines(
        lines[:visible],
        x + pad,
        y + pad,
        width - 2 * pad,
        font=_font(style),
        size=_body(style),
        color=str(_s(style, "text_color", "#1F2937")),
        line_gap=_gap(style),
    )
    return height


# ---------- swatches ----------
def swatch_rows(count: int) -> List[int]:
    per_row = config.SWATCHES_PER_ROW
    return [min(per_row, count - start) for start in range(0, max(0, count), per_row)]


def swatch_grid_height(count: int) -> float:
    rows = len(swatch_rows(count))
    if rows == 0:
        return 0.0
    return rows * (config.SWATCH_SIZE + config.SWATCH_LABEL_HEIGHT) + (rows - 1) * config.SWATCH_SPACING


def _draw_swatches(canv: PageCanvas, hex_colors: Sequence[str], x: float, y: float, style: dict) -> float:
    size = config.SWATCH_SIZE
    pitch_x = size + config.SWATCH_SPACING
    pitch_y = size + config.SWATCH_LABEL_HEIGHT + config.SWATCH_SPACING
    label_size = float(_s(style, "swatch_label_size", 7))

    for i, raw in enumerate(hex_colors):
        row, col = divmod(i, config.SWATCHES_PER_ROW)
        sx = x + col * pitch_x
        sy = y + row * pitch_y
        fill = normalize_hex(raw) or "#FFFFFF"
        canv.draw_rect(sx, sy, size, size, fill=fill, stroke=str(_s(style, "swatch_stroke", "#CCCCCC")))
        canv.draw_lines(
            [str(raw)],
            sx - config.SWATCH_SPACING / 2,
            sy + size + 3,
            size + config.SWATCH_SPACING,
            font=_font(style),
            size=label_size,
            color=str(_s(style, "text_color", "#1F2937")),
            align="center",
        )
    return swatch_grid_height(len(hex_colors))


def _measure_swatch_block(block: ColorSwatchBlock, width: float, style: dict) -> float:
    if not block.hex_colors:
        return text_height(1, _small(style), _gap(style))
    return swatch_grid_height(len(block.hex_colors))


def _draw_swatch_block(canv: PageCanvas, block: ColorSwatchBlock, x: float, y: float, width: float, style: dict) -> float:
    if not block.hex_colors:
        return canv.draw_lines([NO_COLORS_TEXT], x, y, width, font=_font(style), size=_small(style), color=str(_s(style, "empty_color", "#999999")))
    return _draw_swatches(canv, block.hex_colors, x, y, style)


# ---------- Q&A card ----------
def _answer_text(block: QACardBlock) -> str:
    if block.answer_kind == AnswerKind.COLOR_SWATCH_LIST:
        return NO_COLORS_TEXT
    answer = str(block.answer or "").strip()
    return f"{block.answer_prefix}{answer}" if answer else NOT_ANSWERED_TEXT


def _qa_layout(block: QACardBlock, width: float, style: dict) -> Tuple[List[str], float, List[str], float, float]:
    text_w = width - 60
    body, small, gap = _body(style), _small(style), _gap(style)
    q_lines = wrap_text(block.question, _bold(style), body, text_w)
    q_h = text_height(len(q_lines), body, gap)
    if block.answer_kind == AnswerKind.COLOR_SWATCH_LIST and block.colors:
        a_lines: List[str] = []
        a_h = swatch_grid_height(len(block.colors))
    else:
        a_lines = wrap_text(_answer_text(block), _font(style), small, text_w)
        a_h = text_height(len(a_lines), small, gap)
    height = q_h + a_h + 2 * QA_PADDING + QA_ANSWER_GAP
    return q_lines, q_h, a_lines, a_h, height


def _measure_qa(block: QACardBlock, width: float, style: dict) -> float:
    return _qa_layout(block, width, style)[4]


def _draw_qa(canv: PageCanvas, block: QACardBlock, x: float, y: float, width: float, style: dict) -> float:
    q_lines, q_h, a_lines, _a_h, height = _qa_layout(block, width, style)
    body, small, gap = _body(style), _small(style), _gap(style)

    canv.draw_rect(
        x,
        y,
        width,
        height,
        fill=str(_s(style, "card_fill", "#F9F9F9")),
        stroke=str(_s(style, "card_stroke", "#EEEEEE")),
        radius=6,
    )

    # numbered badge
    badge_cx = x + 22
    badge_cy = y + QA_PADDING + QA_BADGE_RADIUS
    canv.draw_circle(badge_cx, badge_cy, QA_BADGE_RADIUS, fill=str(_s(style, "badge_fill", "#2C5282")))
    canv.draw_lines(
        [str(block.index)],
        badge_cx - QA_BADGE_RADIUS,
        badge_cy - 4,
        2 * QA_BADGE_RADIUS,
        font=_bold(style),
        size=9,
        color="#FFFFFF",
        align="center",
    )

    text_x = x + QA_TEXT_OFFSET
    text_w = width - 60
    canv.draw_lines(q_lines, text_x, y + QA_PADDING, text_w, font=_bold(style), size=body, color=str(_s(style, "text_color", "#222222")), line_gap=gap)

    answer_y = y + QA_PADDING + q_h + QA_ANSWER_GAP
    if a_lines:
        answered = block.answer_kind == AnswerKind.TEXT and str(block.answer or "").strip()
        color = str(_s(style, "answer_color", "#006600")) if answered else str(_s(style, "empty_color", "#999999"))
        canv.draw_lines(a_lines, text_x, answer_y, text_w, font=_font(style), size=small, color=color, line_gap=gap)
    else:
        _draw_swatches(canv, block.colors, text_x, answer_y, style)

    return height


# ---------- raw structured text ----------
class _Row(NamedTuple):
    line: ClassifiedLine
    lines: List[str]
    extra: List[str]
    offset: float
    height: float


def _structured_layout(block: RawStructuredTextBlock, width: float, style: dict) -> List[_Row]:
    font, bold = _font(style), _bold(style)
    size, body, gap = _small(style), _body(style), _gap(style)
    rows: List[_Row] = []

    for raw in block.lines:
        cl = classify_line(raw)
        if cl.kind == LineKind.BLANK:
            rows.append(_Row(cl, [], [], 0.0, STRUCT_BLANK_HEIGHT))
        elif cl.kind == LineKind.BANNER:
            rows.append(_Row(cl, [cl.text], [], 0.0, STRUCT_BANNER_HEIGHT + STRUCT_ROW_SPACING))
        elif cl.kind == LineKind.SUBHEADER:
            lines = wrap_text(cl.text, bold, body, width)
            rows.append(_Row(cl, lines, [], 0.0, text_height(len(lines), body, gap) + STRUCT_ROW_SPACING))
        elif cl.kind == LineKind.BULLET:
            indent = min(cl.indent * STRUCT_INDENT_PER_SPACE, width / 3)
            lines = wrap_text(cl.text, font, size, width - indent - STRUCT_BULLET_OFFSET)
            rows.append(_Row(cl, lines, [], indent, text_height(len(lines), size, gap) + STRUCT_ROW_SPACING))
        elif cl.kind == LineKind.KEY_VALUE:
            key_w = stringWidth(f"{cl.text}:", bold, size) + 6
            if key_w <= width * STRUCT_KEY_MAX_SHARE:
                values = wrap_text(cl.value, font, size, width - key_w)
                h = text_height(len(values), size, gap)
                rows.append(_Row(cl, [f"{cl.text}:"], values, key_w, h + STRUCT_ROW_SPACING))
            else:
                keys = wrap_text(f"{cl.text}:", bold, size, width)
                values = wrap_text(cl.value, font, size, width)
                h = text_height(len(keys) + len(values), size, gap)
                rows.append(_Row(cl, keys, values, -1.0, h + STRUCT_ROW_SPACING))
        else:
            lines = wrap_text(cl.text, font, size, width)
            rows.append(_Row(cl, lines, [], 0.0, text_height(len(lines), size, gap) + STRUCT_ROW_SPACING))

    return rows


def _measure_structured(block: RawStructuredTextBlock, width: float, style: dict) -> float:
    return sum(row.height for row in _structured_layout(block, width, style))


def _draw_structured(canv: PageCanvas, block: RawStructuredTextBlock, x: float, y: float, width: float, style: dict) -> float:
    font, bold = _font(style), _bold(style)
    size, body, gap = _small(style), _body(style), _gap(style)
    text_color = str(_s(style, "text_color", "#1F2937"))
    primary = str(_s(style, "primary_color", "#2C5282"))
    rows = _structured_layout(block, width, style)
    top = y

    for row in rows:
        kind = row.line.kind
        if kind == LineKind.BANNER:
            canv.draw_rect(x, top, width, STRUCT_BANNER_HEIGHT, fill=str(_s(style, "banner_fill", "#E8F4F8")))
            banner_size = fit_font(row.lines[0], bold, body, width - 20)
            canv.draw_lines(row.lines, x + 10, top + (STRUCT_BANNER_HEIGHT - banner_size) / 2, width - 20, font=bold, size=banner_size, color=primary)
        elif kind == LineKind.SUBHEADER:
            canv.draw_lines(row.lines, x, top, width, font=bold, size=body, color=primary, line_gap=gap)
        elif kind == LineKind.BULLET:
            bullet_x = x + row.offset
            canv.draw_circle(bullet_x + 3, top + size / 2, 1.5, fill=text_color)
            canv.draw_lines(
                row.lines,
                bullet_x + STRUCT_BULLET_OFFSET,
                top,
                width - row.offset - STRUCT_BULLET_OFFSET,
                font=font,
                size=size,
                color=text_color,
                line_gap=gap,
            )
        elif kind == LineKind.KEY_VALUE:
            if row.offset >= 0:
                canv.draw_lines(row.lines, x, top, row.offset, font=bold, size=size, color=text_color)
                canv.draw_lines(row.extra, x + row.offset, top, width - row.offset, font=font, size=size, color=text_color, line_gap=gap)
            else:
                key_h = canv.draw_lines(row.lines, x, top, width, font=bold, size=size, color=text_color, line_gap=gap)
                canv.draw_lines(row.extra, x, top + key_h + gap, width, font=font, size=size, color=text_color, line_gap=gap)
        elif kind == LineKind.TEXT:
            canv.draw_lines(row.lines, x, top, width, font=font, size=size, color=text_color, line_gap=gap)
        top += row.height

    return sum(row.height for row in rows)


# ---------- risk ----------
def _risk_layout(block: RiskBlock, width: float, style: dict) -> Tuple[List[str], float, List[str], float]:
    body, small, gap = _body(style), _small(style), _gap(style)
    description = block.description.strip() or "Unspecified risk"
    head = wrap_text(f"{description} [{block.severity} Risk]", _bold(style), body, width - STRUCT_BULLET_OFFSET)
    head_h = text_height(len(head), body, gap)
    mitigation: List[str] = []
    height = head_h
    if block.mitigation.strip():
        mitigation = wrap_text(f"Mitigation: {block.mitigation.strip()}", _font(style), small, width - RISK_MITIGATION_INDENT)
        height += gap + text_height(len(mitigation), small, gap)
    return head, head_h, mitigation, height


def _measure_risk(block: RiskBlock, width: float, style: dict) -> float:
    return _risk_layout(block, width, style)[3]


def _draw_risk(canv: PageCanvas, block: RiskBlock, x: float, y: float, width: float, style: dict) -> float:
    head, head_h, mitigation, height = _risk_layout(block, width, style)
    body, small, gap = _body(style), _small(style), _gap(style)
    color = severity_color(block.severity)

    canv.draw_circle(x + 3, y + body / 2, 2.5, fill=color)
    canv.draw_lines(head, x + STRUCT_BULLET_OFFSET, y, width - STRUCT_BULLET_OFFSET, font=_bold(style), size=body, color=color, line_gap=gap)
    if mitigation:
        canv.draw_lines(
            mitigation,
            x + RISK_MITIGATION_INDENT,
            y + head_h + gap,
            width - RISK_MITIGATION_INDENT,
            font=_font(style),
            size=small,
            color=str(_s(style, "text_color", "#1F2937")),
            line_gap=gap,
        )
    return height


# ---------- dispatch ----------
class BlockRenderer(NamedTuple):
    measure: Callable[[Any, float, dict], float]
    draw: Callable[[PageCanvas, Any, float, float, float, dict], float]


BLOCK_RENDERERS: Dict[type, BlockRenderer] = {
    TitleBlock: BlockRenderer(_measure_title, _draw_title),
    FieldListBlock: BlockRenderer(_measure_fields, _draw_fields),
    ParagraphBlock: BlockRenderer(_measure_paragraph, _draw_paragraph),
    QACardBlock: BlockRenderer(_measure_qa, _draw_qa),
    ColorSwatchBlock: BlockRenderer(_measure_swatch_block, _draw_swatch_block),
    RawStructuredTextBlock: BlockRenderer(_measure_structured, _draw_structured),
    RiskBlock: BlockRenderer(_measure_risk, _draw_risk),
}


def renderer_for(block) -> BlockRenderer:
    try:
        return BLOCK_RENDERERS[type(block)]
    except KeyError:
        raise TypeError(f"No renderer for block type {type(block).__name__}") from None


def measure_block(block, width: float, style: dict) -> float:
    return renderer_for(block).measure(block, width, style)


def draw_block(canv: PageCanvas, block, x: float, y: float, width: float, style: dict) -> float:
    return renderer_for(block).draw(canv, block, x, y, width, style)
