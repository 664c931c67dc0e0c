"""Helpers for reporting fragments and reading CSS lengths."""

from __future__ import annotations

import re

WHITESPACE_PATTERN = re.compile(r"\s+")
PX_PATTERN = re.compile(r"^\s*(-?\d+(?:\.\d+)?)px\s*$", re.IGNORECASE)


def normalize_text(value: str, limit: int = 140) -> str:
    """Collapse whitespace and cut long fragments for reporting."""
    clean = WHITESPACE_PATTERN.sub(" ", value or "").strip()
    if len(clean) > limit:
        return clean[: limit - 3] + "..."
    return clean


def parse_px(value: str | None) -> float | None:
    """Return the numeric part of a ``NNpx`` length, or None."""
    if not value:
        return None
    match = PX_PATTERN.match(value)
    if not match:
        return None
    return float(match.group(1))
