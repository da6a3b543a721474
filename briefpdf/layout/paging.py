from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Tuple

from .. import config
from .blocks import Cursor
from .canvas import PageCanvas

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PageGeometry:
    page_size: Tuple[float, float] = config.PAGE_SIZE
    margin_left: float = config.MARGIN_LEFT
    margin_right: float = config.MARGIN_RIGHT
    header_height: float = config.HEADER_HEIGHT
    top_margin: float = config.TOP_MARGIN
    bottom_margin: float = config.BOTTOM_MARGIN

    @property
    def page_width(self) -> float:
        return self.page_size[0]

    @property
    def page_height(self) -> float:
        return self.page_size[1]

    @property
    def content_top(self) -> float:
        return self.top_margin + self.header_height

    @property
    def content_width(self) -> float:
        return self.page_width - self.margin_left - self.margin_right

    @property
    def usable_height(self) -> float:
        return self.page_height - self.content_top - self.bottom_margin


class PageBreaker:
    """
    Decides when the next block no longer fits and starts a new page,
    redrawing the running header and resetting the cursor.
    """

    def __init__(self, canv: PageCanvas, header, cursor: Cursor, geometry: PageGeometry, page_title: str = "") -> None:
        self.canv = canv
        self.header = header
        self.cursor = cursor
        self.geometry = geometry
        self.page_title = page_title

    @property
    def remaining_height(self) -> float:
        return self.geometry.page_height - self.cursor.y - self.geometry.bottom_margin

    def new_page(self) -> None:
        self.canv.new_page()
        self.header.render_header(self.canv, self.page_title)
        self.cursor.x = self.geometry.margin_left
        self.cursor.y = self.geometry.content_top
        self.cursor.page_index = self.canv.page_index

    def ensure_space(self, needed: float) -> bool:
        """
        Start a new page when `needed` does not fit in what is left of this
        one. A block taller than a whole page still gets exactly one break
        and then overflows the bottom margin.
        """
        if self.remaining_height >= needed:
            return False
        self.new_page()
        if needed > self.geometry.usable_height:
            logger.warning(
                "Block of %.1fpt exceeds usable page height %.1fpt; drawing with overflow",
                needed,
                self.geometry.usable_height,
            )
        return True
