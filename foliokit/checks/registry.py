"""Registry of named checks."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, Iterable, List, Optional

from ..config import SiteConfig
from ..models import Finding

PAGE = "page"
STYLESHEET = "stylesheet"
SITE = "site"

CATEGORIES = (
    "accessibility",
    "navigation",
    "performance",
    "icons",
    "publications",
    "layout",
    "styling",
    "validation",
    "compatibility",
)

FileSelector = Callable[[SiteConfig], List[str]]


@dataclass(frozen=True)
class CheckSpec:
    """A registered check and the files it runs against."""

    name: str
    category: str
    scope: str
    func: Callable[..., Iterable[Finding]]
    description: str
    selector: Optional[FileSelector] = None

    def targets(self, config: SiteConfig) -> List[str]:
        """Site-relative files this check runs against; empty for site checks."""
        if self.selector is not None:
            return [name for name in self.selector(config) if name]
        if self.scope == PAGE:
            return list(config.pages)
        if self.scope == STYLESHEET:
            return list(config.stylesheets)
        return []


REGISTRY: Dict[str, CheckSpec] = {}


def check(
    name: str,
    *,
    category: str,
    scope: str = PAGE,
    files: Optional[FileSelector] = None,
) -> Callable[[Callable[..., Iterable[Finding]]], Callable[..., Iterable[Finding]]]:
    """Register a check function under ``name``."""
    if category not in CATEGORIES:
        raise ValueError(f"Unknown check category: {category}")

    def decorator(func: Callable[..., Iterable[Finding]]) -> Callable[..., Iterable[Finding]]:
        if name in REGISTRY:
            raise ValueError(f"Duplicate check name: {name}")
        doc = (func.__doc__ or "").strip().splitlines()
        REGISTRY[name] = CheckSpec(
            name=name,
            category=category,
            scope=scope,
            func=func,
            description=doc[0] if doc else name,
            selector=files,
        )
        return func

    return decorator
