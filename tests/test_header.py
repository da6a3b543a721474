from __future__ import annotations

import logging

import fitz  # PyMuPDF
import requests

from briefpdf import config
from briefpdf.layout import header as header_module
from briefpdf.layout.canvas import PageCanvas
from briefpdf.layout.header import LOGO_UNAVAILABLE, HeaderRenderer, fetch_logo
from briefpdf.layout.style import load_style


class FakeResponse:
    def __init__(self, content: bytes, status: int = 200) -> None:
        self.content = content
        self.status_code = status

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")


def _png_bytes() -> bytes:
    pix = fitz.Pixmap(fitz.csRGB, fitz.IRect(0, 0, 24, 8), False)
    pix.clear_with(255)
    return pix.tobytes("png")


def _page_text(canv: PageCanvas) -> str:
    data = canv.finalize()
    with fitz.open(stream=data, filetype="pdf") as doc:
        return doc[0].get_text()


def test_fetch_logo_failure_returns_none(caplog) -> None:
    with caplog.at_level(logging.WARNING, logger="briefpdf.layout.header"):
        assert fetch_logo("https://logo.invalid/logo.png", timeout=0.1) is None
    assert "Could not load logo" in caplog.text


def test_fetch_logo_passes_timeout(monkeypatch) -> None:
    seen = {}

    def fake_get(url, timeout=None):
        seen["url"], seen["timeout"] = url, timeout
        return FakeResponse(b"bytes")

    monkeypatch.setattr(header_module.requests, "get", fake_get)
    assert fetch_logo("https://example.com/logo.png", timeout=2.5) == b"bytes"
    assert seen == {"url": "https://example.com/logo.png", "timeout": 2.5}


def test_fetch_logo_http_error_and_empty_body(monkeypatch) -> None:
    monkeypatch.setattr(header_module.requests, "get", lambda url, timeout=None: FakeResponse(b"", 404))
    assert fetch_logo("https://example.com/missing.png") is None
    monkeypatch.setattr(header_module.requests, "get", lambda url, timeout=None: FakeResponse(b""))
    assert fetch_logo("https://example.com/empty.png") is None


def test_unreachable_logo_falls_back_to_brand_name() -> None:
    renderer = HeaderRenderer(load_style(), logo_url="https://logo.invalid/logo.png")
    canv = PageCanvas()
    renderer.render_header(canv, "Project Information")
    text = _page_text(canv)
    assert config.BRAND_NAME in text
    assert "Project Information" in text


def test_undecodable_logo_shows_placeholder(monkeypatch) -> None:
    monkeypatch.setattr(header_module.requests, "get", lambda url, timeout=None: FakeResponse(b"<html>not a png</html>"))
    renderer = HeaderRenderer(load_style(), logo_url="https://example.com/logo.png")
    canv = PageCanvas()
    renderer.render_header(canv, "Branding")
    assert LOGO_UNAVAILABLE in _page_text(canv)


def test_logo_is_fetched_once_per_renderer(monkeypatch) -> None:
    calls = []

    def fake_get(url, timeout=None):
        calls.append(url)
        return FakeResponse(_png_bytes())

    monkeypatch.setattr(header_module.requests, "get", fake_get)
    renderer = HeaderRenderer(load_style(), logo_url="https://example.com/logo.png")
    canv = PageCanvas()
    renderer.render_header(canv, "One")
    canv.new_page()
    renderer.render_header(canv, "Two")
    data = canv.finalize()

    assert calls == ["https://example.com/logo.png"]
    with fitz.open(stream=data, filetype="pdf") as doc:
        assert all(len(page.get_images()) == 1 for page in doc)
        assert config.BRAND_NAME not in doc[0].get_text()


def test_empty_logo_url_skips_fetch(monkeypatch) -> None:
    def fail(*args, **kwargs):  # noqa: ARG001 - test helper
        raise AssertionError("logo should not be fetched")

    monkeypatch.setattr(header_module.requests, "get", fail)
    renderer = HeaderRenderer(load_style(), logo_url="")
    assert renderer.logo() is None


def test_footer_shows_page_of_total() -> None:
    renderer = HeaderRenderer(load_style(), logo_url="")
    canv = PageCanvas()
    canv.close_content()
    canv.stamp_pages(lambda number, total: renderer.render_footer(canv, number, total, note="Generated today"))
    text = _page_text(canv)
    assert "Page 1 of 1" in text
    assert "Generated today" in text
