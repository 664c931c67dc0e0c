"""Icon font usage."""

from __future__ import annotations

import re
from typing import Iterator, List, Optional

from bs4 import Tag

from .. import markup
from ..documents import SiteContext
from ..models import Finding, PageDocument
from .registry import check

FONT_AWESOME = "font-awesome"
BOOTSTRAP_ICONS = "bootstrap-icons"
LIBRARY_PREFIXES = {FONT_AWESOME: "fa", BOOTSTRAP_ICONS: "bi"}
ICON_NAME = re.compile(r"^(fa|bi)-[\w-]+$")


def icon_library(tag: Tag) -> Optional[str]:
    """Which icon font an ``<i>`` element belongs to, if any."""
    classes = markup.class_list(tag)
    for library, prefix in LIBRARY_PREFIXES.items():
        if prefix in classes and any(cls.startswith(prefix + "-") for cls in classes):
            return library
    return None


def icons(page: PageDocument) -> List[Tag]:
    return [tag for tag in page.soup.find_all("i") if icon_library(tag) is not None]


def _stylesheet_hrefs(page: PageDocument) -> List[str]:
    return [markup.attr_text(tag, "href") or "" for tag in page.soup.find_all("link", href=True)]


@check("icon-classes", category="icons")
def icon_classes(page: PageDocument, site: SiteContext) -> Iterator[Finding]:
    """Icons pair the library base class with a named icon class."""
    for tag in page.soup.find_all("i", class_=True):
        classes = markup.class_list(tag)
        named = [cls for cls in classes if ICON_NAME.match(cls)]
        if not named:
            continue
        prefix = named[0].split("-", 1)[0]
        if prefix not in classes:
            yield Finding(f"icon class {named[0]} is used without the {prefix} base class", markup.opening_tag(tag))


@check("icon-stylesheets", category="icons")
def icon_stylesheets(page: PageDocument, site: SiteContext) -> Iterator[Finding]:
    """Icon fonts in use are loaded by a stylesheet link."""
    used = {icon_library(tag) for tag in icons(page)}
    hrefs = _stylesheet_hrefs(page)
    for library in sorted(lib for lib in used if lib):
        if not any(library in href and ".css" in href for href in hrefs):
            yield Finding(f"page uses {library} icons but does not load its stylesheet")


@check("icon-aria-hidden", category="icons")
def icon_aria_hidden(page: PageDocument, site: SiteContext) -> Iterator[Finding]:
    """Icons are hidden from assistive technology."""
    for tag in icons(page):
        if (markup.attr_text(tag, "aria-hidden") or "").lower() != "true":
            yield Finding('icon is missing aria-hidden="true"', markup.opening_tag(tag))


@check("social-link-labels", category="icons")
def social_link_labels(page: PageDocument, site: SiteContext) -> Iterator[Finding]:
    """Social links show an icon and a text label."""
    for nav in page.soup.find_all("nav", class_="social-links"):
        for link in nav.find_all("a", class_="social-link"):
            if not any(icon_library(tag) for tag in link.find_all("i")):
                yield Finding("social link has no icon", markup.opening_tag(link))
            if not any(span.get_text(strip=True) for span in link.find_all("span")):
                yield Finding("social link has no <span> text label", markup.opening_tag(link))
