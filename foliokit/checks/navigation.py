"""Bootstrap 5 navbar conventions."""

from __future__ import annotations

import re
from typing import Dict, Iterator, Optional

from bs4 import Tag

from .. import markup
from ..documents import SiteContext
from ..models import Finding, PageDocument
from .registry import SITE, check

LEGACY_MARGIN = re.compile(r"^m[lr]-\d+$")
NAVIGATION_SCRIPT = "js/navigation.js"


def _navbar(page: PageDocument) -> Optional[Tag]:
    return page.soup.find("nav", class_="navbar")


@check("responsive-navbar", category="navigation")
def responsive_navbar(page: PageDocument, site: SiteContext) -> Iterator[Finding]:
    """The navbar expands at a breakpoint and collapses behind a toggler."""
    navbar = _navbar(page)
    if navbar is None:
        yield Finding('page has no <nav class="navbar">')
        return
    if not any(cls.startswith("navbar-expand") for cls in markup.class_list(navbar)):
        yield Finding("navbar has no navbar-expand-* class", markup.opening_tag(navbar))
    if navbar.find(class_="navbar-toggler") is None:
        yield Finding("navbar has no navbar-toggler button", markup.opening_tag(navbar))
    collapse = navbar.find(class_="navbar-collapse")
    if collapse is None or not markup.has_class(collapse, "collapse"):
        yield Finding("navbar has no .navbar-collapse.collapse element", markup.opening_tag(navbar))


@check("bootstrap5-attributes", category="navigation")
def bootstrap5_attributes(page: PageDocument, site: SiteContext) -> Iterator[Finding]:
    """Toggles use data-bs-* attributes and logical spacing classes."""
    soup = page.soup
    target = site.config.navbar_target
    if soup.find(attrs={"data-bs-toggle": "collapse"}) is None:
        yield Finding('no element uses data-bs-toggle="collapse"')
    if target and soup.find(attrs={"data-bs-target": target}) is None:
        yield Finding(f'no element uses data-bs-target="{target}"')
    for tag in soup.find_all(attrs={"data-toggle": True}):
        yield Finding("legacy data-toggle attribute", markup.opening_tag(tag))
    for tag in soup.find_all(attrs={"data-target": True}):
        yield Finding("legacy data-target attribute", markup.opening_tag(tag))

    lists = soup.find_all("ul")
    if not any(markup.has_class(tag, "ms-auto") for tag in lists):
        yield Finding("no <ul> uses the ms-auto class")
    for tag in soup.find_all(class_=True):
        for cls in markup.class_list(tag):
            if cls == "ml-auto" or cls == "mr-auto" or LEGACY_MARGIN.match(cls):
                yield Finding(f"legacy spacing class {cls}", markup.opening_tag(tag))


@check("navbar-brand", category="navigation")
def navbar_brand(page: PageDocument, site: SiteContext) -> Iterator[Finding]:
    """The navbar brand is present and carries the configured text."""
    brand = page.soup.find(class_="navbar-brand")
    if brand is None:
        yield Finding("page has no .navbar-brand")
        return
    expected = site.config.brand_text
    if expected and expected not in markup.visible_text(brand):
        yield Finding(f'navbar brand does not read "{expected}"', markup.opening_tag(brand))


@check("navigation-script", category="navigation")
def navigation_script(page: PageDocument, site: SiteContext) -> Iterator[Finding]:
    """Pages include the navigation behaviour script."""
    sources = [markup.attr_text(tag, "src") for tag in page.soup.find_all("script", src=True)]
    if NAVIGATION_SCRIPT not in sources:
        yield Finding(f'page does not load "{NAVIGATION_SCRIPT}"')


def _structure(page: PageDocument) -> Dict[str, int]:
    navbar = _navbar(page)
    if navbar is None:
        return {"brand": 0, "toggler": 0, "collapse": 0, "items": 0}
    return {
        "brand": len(navbar.find_all(class_="navbar-brand")),
        "toggler": len(navbar.find_all(class_="navbar-toggler")),
        "collapse": len(navbar.find_all(class_="navbar-collapse")),
        "items": len(navbar.find_all(class_="nav-item")),
    }


@check("navigation-consistency", category="navigation", scope=SITE)
def navigation_consistency(site: SiteContext) -> Iterator[Finding]:
    """Every page shares the first page's navbar structure."""
    pages = site.existing_pages()
    if len(pages) < 2:
        return
    reference = pages[0]
    expected = _structure(reference)
    for page in pages[1:]:
        actual = _structure(page)
        for key in ("brand", "toggler", "collapse"):
            if actual[key] != expected[key]:
                yield Finding(
                    f"navbar has {actual[key]} {key} element(s), {reference.name} has {expected[key]}",
                    path=page.name,
                )
        if abs(actual["items"] - expected["items"]) > 1:
            yield Finding(
                f"navbar has {actual['items']} nav items, {reference.name} has {expected['items']}",
                path=page.name,
            )
