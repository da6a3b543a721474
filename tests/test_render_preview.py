from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace

import pytest

from briefpdf.layout.assembler import generate
from briefpdf.layout.blocks import DocumentSpec, ParagraphBlock, Section
from briefpdf.pipeline.preview import render_previews


class DummyPixmap:
    def save(self, path: str) -> None:
        Path(path).write_text("preview", encoding="utf-8")


class DummyPage:
    rect = SimpleNamespace(width=595.0, height=842.0)

    def get_pixmap(self, matrix=None, alpha=False) -> DummyPixmap:  # noqa: ARG002 - signature matches fitz
        return DummyPixmap()


class DummyDoc:
    def __init__(self) -> None:
        self.page_count = 3
        self.closed = False

    def __enter__(self) -> "DummyDoc":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:  # noqa: ANN001 - test helper
        self.closed = True

    def load_page(self, index: int) -> DummyPage:  # noqa: ARG002 - test helper
        return DummyPage()


def test_render_previews_closes_document(monkeypatch, tmp_path) -> None:
    doc = DummyDoc()
    pdf_path = tmp_path / "sample.pdf"
    pdf_path.write_bytes(b"%PDF")

    def fake_open(path: str) -> DummyDoc:  # noqa: ARG001 - test helper
        return doc

    monkeypatch.setattr("briefpdf.pipeline.preview.fitz.open", fake_open)
    previews = render_previews(pdf_path, pages=(0, 2))
    assert doc.closed is True
    assert [p.name for p in previews] == ["sample-page1.png", "sample-page3.png"]
    assert all(path.exists() for path in previews)

    with pytest.raises(ValueError):
        render_previews(pdf_path, pages=(5,))


def test_render_previews_missing_pdf(tmp_path) -> None:
    with pytest.raises(FileNotFoundError):
        render_previews(tmp_path / "missing.pdf")


def test_render_preview_of_generated_document(tmp_path) -> None:
    pdf_path = tmp_path / "brief.pdf"
    generate(DocumentSpec(title="Preview", sections=[Section("Intro", [ParagraphBlock("Hello")])]), pdf_path)
    (png,) = render_previews(pdf_path, min_px=300)
    assert png.read_bytes().startswith(b"\x89PNG")
