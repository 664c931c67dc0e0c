"""WCAG colour contrast helpers."""

from __future__ import annotations

import re
from typing import Dict, Optional, Tuple

HEX_COLOR = re.compile(r"^#?([0-9a-f]{2})([0-9a-f]{2})([0-9a-f]{2})$", re.IGNORECASE)
WHITE = (255, 255, 255)

RGB = Tuple[int, int, int]


def parse_hex(value: str) -> Optional[RGB]:
    """Parse a six-digit hex colour such as ``#1a1a1a``."""
    if not value:
        return None
    match = HEX_COLOR.match(value.strip())
    if not match:
        return None
    return tuple(int(part, 16) for part in match.groups())  # type: ignore[return-value]


def relative_luminance(rgb: RGB) -> float:
    def channel(c: int) -> float:
        c = c / 255.0
        return c / 12.92 if c <= 0.03928 else ((c + 0.055) / 1.055) ** 2.4

    r, g, b = rgb
    return 0.2126 * channel(r) + 0.7152 * channel(g) + 0.0722 * channel(b)


def contrast_ratio(fg: RGB, bg: RGB) -> float:
    lum_fg = relative_luminance(fg)
    lum_bg = relative_luminance(bg)
    lighter = max(lum_fg, lum_bg)
    darker = min(lum_fg, lum_bg)
    return (lighter + 0.05) / (darker + 0.05)


def resolve_color(variables: Dict[str, str], name: str) -> Optional[RGB]:
    """Look up a colour token, falling back to white for ``color-white``."""
    value = variables.get(name)
    if value is None:
        return WHITE if name == "color-white" else None
    return parse_hex(value)
