from __future__ import annotations

from pathlib import Path
from typing import Optional
import json

from reportlab.lib.pagesizes import A4


PACKAGE_DIR = Path(__file__).resolve().parent
BASE_DIR = PACKAGE_DIR.parent
OUT_DIR = BASE_DIR / "out"
DB_PATH = OUT_DIR / "briefpdf.db"
PDF_DIR_NAME = "pdfs"
PDF_URL_PREFIX = "/uploads/pdfs"
STYLE_PRESET_PATH = PACKAGE_DIR / "assets" / "styles.json"

# Page geometry (points). y grows downward from the top edge of the page.
PAGE_SIZE = A4
MARGIN_LEFT = 50.0
MARGIN_RIGHT = 50.0
HEADER_HEIGHT = 90.0
TOP_MARGIN = 30.0
BOTTOM_MARGIN = 60.0
FOOTER_OFFSET = 30.0

BLOCK_SPACING = 14.0
SECTION_TITLE_HEIGHT = 26.0

FIELD_LINE_HEIGHT = 14.0
FIELD_ITEM_SPACING = 6.0

PARAGRAPH_PADDING = 15.0
PARAGRAPH_MAX_HEIGHT = 250.0

SWATCH_SIZE = 32.0
SWATCH_SPACING = 15.0
SWATCHES_PER_ROW = 8
SWATCH_LABEL_HEIGHT = 12.0

BRAND_NAME = "Maya Business Club"
LOGO_URL: Optional[str] = "https://mayabusinessclub.com/wp-content/uploads/2025/11/logo-horizontal-maya-vct.png"
LOGO_FETCH_TIMEOUT = 5.0
LOGO_SIZE = (120.0, 40.0)

DEFAULT_THEME = "maya_dark"
DEFAULT_CURRENCY = "MAD"


def load_style_preset() -> dict:
    with STYLE_PRESET_PATH.open("r", encoding="utf-8") as handle:
        return json.load(handle)


def set_out_dir(path: Path) -> None:
    global OUT_DIR, DB_PATH
    OUT_DIR = path
    DB_PATH = OUT_DIR / "briefpdf.db"
