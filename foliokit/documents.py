"""Loading page documents and stylesheets from the site root."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, List

from .config import SiteConfig
from .errors import MissingFileError
from .models import PageDocument, Stylesheet

logger = logging.getLogger("foliokit.documents")


def _read(path: Path) -> str:
    if not path.is_file():
        raise MissingFileError(f"File does not exist: {path}")
    return path.read_text(encoding="utf-8")


def load_page(config: SiteConfig, name: str) -> PageDocument:
    path = config.resolve(name)
    return PageDocument(path=path, name=name, text=_read(path))


def load_stylesheet(config: SiteConfig, name: str) -> Stylesheet:
    path = config.resolve(name)
    return Stylesheet(path=path, name=name, text=_read(path))


class SiteContext:
    """Per-run view of the site: configuration plus files read so far.

    Files are read at most once per run; nothing is shared between runs.
    """

    def __init__(self, config: SiteConfig) -> None:
        self.config = config
        self._pages: Dict[str, PageDocument] = {}
        self._stylesheets: Dict[str, Stylesheet] = {}

    def page(self, name: str) -> PageDocument:
        if name not in self._pages:
            self._pages[name] = load_page(self.config, name)
        return self._pages[name]

    def stylesheet(self, name: str) -> Stylesheet:
        if name not in self._stylesheets:
            self._stylesheets[name] = load_stylesheet(self.config, name)
        return self._stylesheets[name]

    def existing_pages(self) -> List[PageDocument]:
        """Configured pages that are present, in configuration order."""
        pages: List[PageDocument] = []
        for name in self.config.pages:
            try:
                pages.append(self.page(name))
            except MissingFileError:
                logger.debug("Page %s is missing; leaving it out", name)
        return pages

    def existing_stylesheets(self, names: List[str]) -> List[Stylesheet]:
        sheets: List[Stylesheet] = []
        for name in names:
            try:
                sheets.append(self.stylesheet(name))
            except MissingFileError:
                logger.debug("Stylesheet %s is missing; leaving it out", name)
        return sheets
