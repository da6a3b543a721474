from __future__ import annotations

import re
from typing import Dict, Optional

from reportlab.lib import colors

from .. import config


HEX_PATTERN = re.compile(r"^#?([0-9a-fA-F]{3}|[0-9a-fA-F]{6})$")

THEME_OVERRIDES: Dict[str, Dict[str, str]] = {
    "maya_dark": {
        "header_fill": "#131313",
        "header_text": "#FFFFFF",
        "header_rule": "#444444",
        "primary_color": "#2C5282",
        "badge_fill": "#2C5282",
        "section_style": "bar",
    },
    "structor_indigo": {
        "header_fill": "#4F46E5",
        "header_text": "#FFFFFF",
        "header_rule": "#06B6D4",
        "primary_color": "#4F46E5",
        "badge_fill": "#7C3AED",
        "section_fill": "#F3F4F6",
        "banner_fill": "#EEF2FF",
        "section_style": "bar_left",
    },
    "structor_detailed": {
        "header_fill": "#312E81",
        "header_text": "#FFFFFF",
        "header_rule": "#06B6D4",
        "primary_color": "#4F46E5",
        "badge_fill": "#7C3AED",
        "banner_fill": "#EEF2FF",
        "rule_color": "#C7D2FE",
        "section_style": "underline",
    },
}


SEVERITY_COLORS: Dict[str, str] = {
    "high": "#ef4444",
    "medium": "#f59e0b",
}
LOW_SEVERITY_COLOR = "#10b981"


def normalize_hex(value: str) -> Optional[str]:
    """Return '#rrggbb' for a 3/6 digit hex string, or None when it is not one."""
    match = HEX_PATTERN.match(str(value or "").strip())
    if not match:
        return None
    digits = match.group(1).lower()
    if len(digits) == 3:
        digits = "".join(ch * 2 for ch in digits)
    return "#" + digits


def _hex(value: str, default=colors.black) -> colors.Color:
    normalized = normalize_hex(value)
    if normalized is None:
        return default
    return colors.HexColor(normalized)


def _s(style: dict, key: str, default):
    return style.get(key, default)


def severity_color(severity: str) -> str:
    return SEVERITY_COLORS.get(str(severity or "").strip().lower(), LOW_SEVERITY_COLOR)


def load_style(theme: Optional[str] = None) -> dict:
    style = config.load_style_preset()
    style.update(THEME_OVERRIDES.get(theme or config.DEFAULT_THEME, {}))
    return style
