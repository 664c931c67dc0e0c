"""Data models used throughout the checker."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

from bs4 import BeautifulSoup

PASSED = "passed"
FAILED = "failed"
SKIPPED = "skipped"


@dataclass
class PageDocument:
    """An HTML page read from the site root."""

    path: Path
    name: str
    text: str
    _soup: Optional[BeautifulSoup] = field(default=None, repr=False, compare=False)

    @property
    def soup(self) -> BeautifulSoup:
        if self._soup is None:
            self._soup = BeautifulSoup(self.text, "html.parser")
        return self._soup


@dataclass
class Stylesheet:
    """A CSS file read from the site root."""

    path: Path
    name: str
    text: str


@dataclass
class LinkRecord:
    """An anchor discovered while scanning a page."""

    tag: str
    href: str
    target: Optional[str]
    rel: List[str]
    classes: List[str]


@dataclass
class ImageRecord:
    """An ``img`` element and the attributes the checks care about."""

    tag: str
    index: int
    src: Optional[str]
    alt: Optional[str]
    decorative: bool
    width: Optional[str]
    height: Optional[str]
    loading: Optional[str]
    classes: List[str]
    style: Dict[str, str]


@dataclass
class Violation:
    """A single broken convention, pointing at the offending fragment."""

    check: str
    path: str
    message: str
    fragment: str = ""

    def __str__(self) -> str:
        if self.fragment:
            return f"{self.path}: {self.message} -> {self.fragment}"
        return f"{self.path}: {self.message}"


@dataclass
class CheckOutcome:
    """Result of running one check against one file (or the whole site)."""

    check: str
    path: str
    status: str
    violations: List[Violation] = field(default_factory=list)
    reason: str = ""


@dataclass
class CheckReport:
    """Ordered outcomes of a checker run."""

    outcomes: List[CheckOutcome] = field(default_factory=list)

    @property
    def failed(self) -> List[CheckOutcome]:
        return [outcome for outcome in self.outcomes if outcome.status == FAILED]

    @property
    def passed(self) -> List[CheckOutcome]:
        return [outcome for outcome in self.outcomes if outcome.status == PASSED]

    @property
    def skipped(self) -> List[CheckOutcome]:
        return [outcome for outcome in self.outcomes if outcome.status == SKIPPED]

    @property
    def violations(self) -> List[Violation]:
        return [v for outcome in self.failed for v in outcome.violations]

    @property
    def ok(self) -> bool:
        return not self.failed


@dataclass
class Finding:
    """What a check reports; the runner turns it into a Violation."""

    message: str
    fragment: str = ""
    path: Optional[str] = None
