from __future__ import annotations

import logging
from typing import Optional

import requests

from .. import config
from .canvas import ImageDecodeError, PageCanvas
from .paging import PageGeometry
from .style import _s
from .text import fit_font

logger = logging.getLogger(__name__)

LOGO_UNAVAILABLE = "logo unavailable"
TITLE_BOX_WIDTH = 220.0


def fetch_logo(url: str, timeout: float = config.LOGO_FETCH_TIMEOUT) -> Optional[bytes]:
    """
    Single attempt, bounded by `timeout`. Any failure is logged and reported
    as None so the header can fall back to text.
    """
    try:
        resp = requests.get(url, timeout=timeout)
        resp.raise_for_status()
    except requests.RequestException as exc:
        logger.warning("Could not load logo from %s: %s", url, exc)
        return None
    if not resp.content:
        logger.warning("Logo response from %s was empty", url)
        return None
    return resp.content


class HeaderRenderer:
    """
    Draws the banner at the top of every page and the page-number footer.

    The logo is fetched lazily on the first header and memoized, success or
    failure, so redrawing the header after a page break never refetches.
    """

    def __init__(
        self,
        style: dict,
        geometry: Optional[PageGeometry] = None,
        logo_url: Optional[str] = None,
        brand_name: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> None:
        self.style = style
        self.geometry = geometry or PageGeometry()
        # an empty string disables the logo fetch
        self.logo_url = config.LOGO_URL if logo_url is None else logo_url
        self.brand_name = brand_name or config.BRAND_NAME
        self.timeout = config.LOGO_FETCH_TIMEOUT if timeout is None else timeout
        self._logo: Optional[bytes] = None
        self._logo_loaded = False

    def logo(self) -> Optional[bytes]:
        if not self._logo_loaded:
            self._logo_loaded = True
            if self.logo_url:
                self._logo = fetch_logo(self.logo_url, timeout=self.timeout)
        return self._logo

    def _draw_placeholder(self, canv: PageCanvas, text: str) -> None:
        g = self.geometry
        canv.draw_lines(
            [text],
            g.margin_left,
            g.header_height / 2 - 6,
            TITLE_BOX_WIDTH,
            font=str(_s(self.style, "font_name", "Helvetica")),
            size=12,
            color=str(_s(self.style, "header_text", "#FFFFFF")),
        )

    def render_header(self, canv: PageCanvas, page_title: str) -> None:
        g = self.geometry
        bold = str(_s(self.style, "bold_font_name", "Helvetica-Bold"))
        text_color = str(_s(self.style, "header_text", "#FFFFFF"))

        canv.draw_rect(0, 0, g.page_width, g.header_height, fill=str(_s(self.style, "header_fill", "#131313")))

        data = self.logo()
        if data is None:
            self._draw_placeholder(canv, self.brand_name)
        else:
            logo_w, logo_h = config.LOGO_SIZE
            try:
                canv.draw_image(data, g.margin_left, (g.header_height - logo_h) / 2, logo_w, logo_h)
            except ImageDecodeError as exc:
                logger.warning("Logo image unusable: %s", exc)
                self._draw_placeholder(canv, LOGO_UNAVAILABLE)

        title = str(page_title or "").strip()
        if title:
            size = fit_font(title, bold, float(_s(self.style, "header_title_size", 18)), TITLE_BOX_WIDTH)
            canv.draw_lines(
                [title],
                g.page_width - g.margin_right - TITLE_BOX_WIDTH,
                (g.header_height - size) / 2,
                TITLE_BOX_WIDTH,
                font=bold,
                size=size,
                color=text_color,
                align="right",
            )

        canv.draw_line(0, g.header_height, g.page_width, g.header_height, color=str(_s(self.style, "header_rule", "#444444")), line_width=1)

    def render_footer(self, canv: PageCanvas, page_number: int, total_pages: int, note: str = "") -> None:
        g = self.geometry
        font = str(_s(self.style, "font_name", "Helvetica"))
        size = float(_s(self.style, "footer_size", 8))
        muted = str(_s(self.style, "muted_color", "#6B7280"))
        y = g.page_height - config.FOOTER_OFFSET

        canv.draw_line(g.margin_left, y - 8, g.page_width - g.margin_right, y - 8, color=str(_s(self.style, "rule_color", "#CCCCCC")))
        if note:
            # keep the note clear of the centred page number
            note_width = g.content_width / 2 - 40
            note_size = fit_font(note, font, size, note_width)
            canv.draw_lines([note], g.margin_left, y, note_width, font=font, size=note_size, color=muted)
        canv.draw_lines(
            [f"Page {page_number} of {total_pages}"],
            g.margin_left,
            y,
            g.content_width,
            font=font,
            size=size,
            color=muted,
            align="center",
        )
