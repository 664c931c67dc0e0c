"""HTML extraction helpers shared by the page checks."""

from __future__ import annotations

import re
from typing import Dict, Iterable, List, Optional, Tuple

from bs4 import BeautifulSoup, Tag

from .models import ImageRecord, LinkRecord

HEADING_PATTERN = re.compile(r"^h([1-6])$")
WEB_SCHEMES = ("http://", "https://")


def class_list(tag: Tag) -> List[str]:
    """Return the class tokens of a tag as a list."""
    value = tag.get("class")
    if value is None:
        return []
    if isinstance(value, str):
        return value.split()
    return list(value)


def has_class(tag: Tag, name: str) -> bool:
    return name in class_list(tag)


def attr_text(tag: Tag, name: str) -> Optional[str]:
    """Return an attribute as a single string (multi-valued ones joined)."""
    value = tag.get(name)
    if value is None:
        return None
    if isinstance(value, list):
        return " ".join(value)
    return str(value)


def parse_style(style: Optional[str]) -> Dict[str, str]:
    """Split an inline ``style`` attribute into a property mapping."""
    declarations: Dict[str, str] = {}
    if not style:
        return declarations
    for part in style.split(";"):
        if ":" not in part:
            continue
        name, value = part.split(":", 1)
        declarations[name.strip().lower()] = value.strip()
    return declarations


def opening_tag(tag: Tag) -> str:
    """Render just the start tag of an element for violation messages."""
    parts = [tag.name]
    for name, value in tag.attrs.items():
        if isinstance(value, list):
            value = " ".join(value)
        parts.append(f'{name}="{value}"')
    return "<" + " ".join(parts) + ">"


def is_external(href: Optional[str]) -> bool:
    return bool(href) and href.startswith(WEB_SCHEMES)


def is_internal_page(href: Optional[str]) -> bool:
    return bool(href) and not href.startswith("http") and href.endswith(".html")


def _link_record(tag: Tag) -> LinkRecord:
    rel = tag.get("rel") or []
    if isinstance(rel, str):
        rel = rel.split()
    return LinkRecord(
        tag=opening_tag(tag),
        href=attr_text(tag, "href") or "",
        target=attr_text(tag, "target"),
        rel=[token.lower() for token in rel],
        classes=class_list(tag),
    )


def anchors(soup: BeautifulSoup | Tag) -> List[Tag]:
    return soup.find_all("a")


def external_links(soup: BeautifulSoup | Tag) -> List[LinkRecord]:
    """Anchors whose href starts with a web scheme."""
    return [
        _link_record(tag)
        for tag in soup.find_all("a", href=True)
        if is_external(attr_text(tag, "href"))
    ]


def internal_links(soup: BeautifulSoup | Tag) -> List[LinkRecord]:
    """Anchors pointing at another page of the site."""
    return [
        _link_record(tag)
        for tag in soup.find_all("a", href=True)
        if is_internal_page(attr_text(tag, "href"))
    ]


def heading_levels(soup: BeautifulSoup | Tag) -> List[int]:
    """Heading levels in document order."""
    return [
        int(HEADING_PATTERN.match(tag.name).group(1))
        for tag in soup.find_all(HEADING_PATTERN)
    ]


def is_decorative(tag: Tag) -> bool:
    return (
        (attr_text(tag, "role") or "").lower() == "presentation"
        or (attr_text(tag, "aria-hidden") or "").lower() == "true"
    )


def images(soup: BeautifulSoup | Tag) -> List[ImageRecord]:
    """Describe every ``img`` element in document order."""
    records: List[ImageRecord] = []
    for index, tag in enumerate(soup.find_all("img")):
        records.append(
            ImageRecord(
                tag=opening_tag(tag),
                index=index,
                src=attr_text(tag, "src"),
                alt=attr_text(tag, "alt"),
                decorative=is_decorative(tag),
                width=attr_text(tag, "width"),
                height=attr_text(tag, "height"),
                loading=attr_text(tag, "loading"),
                classes=class_list(tag),
                style=parse_style(attr_text(tag, "style")),
            )
        )
    return records


def is_container(tag: Tag) -> bool:
    classes = class_list(tag)
    return tag.name == "div" and bool(classes) and classes[0].startswith("container")


def preceding_structure(tag: Tag) -> Tuple[int, int]:
    """Count ``section`` elements and container divs opened before ``tag``."""
    sections = len(tag.find_all_previous("section"))
    containers = sum(1 for candidate in tag.find_all_previous("div") if is_container(candidate))
    return sections, containers


def _normalize_resource(url: Optional[str]) -> Optional[str]:
    if not url:
        return None
    if url.startswith("//"):
        return "https:" + url
    if url.startswith(WEB_SCHEMES):
        return url
    return None


def external_resources(soup: BeautifulSoup | Tag) -> List[str]:
    """Externally hosted link, script and image URLs in discovery order."""
    resources: List[str] = []
    lookups: Iterable[Tuple[str, str]] = (("link", "href"), ("script", "src"), ("img", "src"))
    for name, attribute in lookups:
        for tag in soup.find_all(name):
            url = _normalize_resource(attr_text(tag, attribute))
            if url:
                resources.append(url)
    return resources


def visible_text(tag: Tag) -> str:
    return " ".join(tag.stripped_strings)
