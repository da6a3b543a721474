from __future__ import annotations

from reportlab.pdfbase.pdfmetrics import stringWidth

from briefpdf.layout.text import MIN_FONT_SIZE, fit_font, measure_height, text_height, wrap_text


def test_text_height_counts_gaps_between_lines_only() -> None:
    assert text_height(0, 11, 3) == 0
    assert text_height(1, 11, 3) == 11
    assert text_height(3, 11, 3) == 3 * 11 + 2 * 3


def test_wrap_text_stays_within_width() -> None:
    text = "The quick brown fox jumps over the lazy dog " * 12
    lines = wrap_text(text, "Helvetica", 11, 200)
    assert len(lines) > 1
    assert all(stringWidth(line, "Helvetica", 11) <= 200 for line in lines)
    assert " ".join(lines).split() == text.split()


def test_wrap_text_honours_newlines_and_empty_input() -> None:
    assert wrap_text("first\nsecond", "Helvetica", 11, 400) == ["first", "second"]
    assert wrap_text("", "Helvetica", 11, 400) == [""]
    assert wrap_text(None, "Helvetica", 11, 400) == [""]


def test_long_word_is_kept_whole() -> None:
    word = "x" * 200
    assert wrap_text(word, "Helvetica", 11, 50) == [word]


def test_measure_height_matches_wrapped_line_count() -> None:
    text = "word " * 150
    lines = wrap_text(text, "Helvetica", 10, 300)
    assert measure_height(text, 300, font_size=10, line_gap=2) == text_height(len(lines), 10, 2)


def test_fit_font_shrinks_but_not_below_minimum() -> None:
    assert fit_font("short", "Helvetica-Bold", 18, 200) == 18
    shrunk = fit_font("A considerably longer project title", "Helvetica-Bold", 18, 200)
    assert MIN_FONT_SIZE <= shrunk < 18
    assert fit_font("x" * 500, "Helvetica-Bold", 18, 50) == MIN_FONT_SIZE
