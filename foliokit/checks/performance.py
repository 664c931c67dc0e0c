"""Performance hints: external requests, font loading and layout shift."""

from __future__ import annotations

import re
from collections import Counter
from typing import Iterator

from .. import markup
from ..documents import SiteContext
from ..models import Finding, ImageRecord, PageDocument
from ..utils import parse_px
from .registry import check

FONT_STYLESHEET = "fonts.googleapis.com/css"
FONT_HOSTS = ("https://fonts.googleapis.com", "https://fonts.gstatic.com")
FONT_URL = re.compile(r"fonts\.googleapis\.com/css2\?[^\"']+")
DIMENSION = re.compile(r"^\s*\d+\s*$")


@check("external-resources", category="performance")
def external_resources(page: PageDocument, site: SiteContext) -> Iterator[Finding]:
    """External stylesheets, scripts and images stay within budget and are never repeated."""
    resources = markup.external_resources(page.soup)
    counts = Counter(resources)
    limit = site.config.max_external_resources
    if len(counts) > limit:
        yield Finding(
            f"page loads {len(counts)} distinct external resources, limit is {limit}",
            ", ".join(counts),
        )
    for url, count in counts.items():
        if count > 1:
            yield Finding(f"external resource loaded {count} times", url)


@check("font-preconnect", category="performance")
def font_preconnect(page: PageDocument, site: SiteContext) -> Iterator[Finding]:
    """Pages using Google Fonts preconnect to both font hosts."""
    if FONT_STYLESHEET not in page.text:
        return
    preconnects = {
        markup.attr_text(tag, "href")
        for tag in page.soup.find_all("link", href=True)
        if "preconnect" in (markup.attr_text(tag, "rel") or "").split()
    }
    for host in FONT_HOSTS:
        if host not in preconnects:
            yield Finding(f"Google Fonts used without a preconnect hint for {host}")


@check("font-display-swap", category="performance")
def font_display_swap(page: PageDocument, site: SiteContext) -> Iterator[Finding]:
    """Google Fonts URLs request display=swap."""
    for url in FONT_URL.findall(page.text):
        if "display=swap" not in url:
            yield Finding("font URL is missing display=swap", url)


def _has_dimension(image: ImageRecord, name: str) -> bool:
    value = getattr(image, name)
    if value is not None and DIMENSION.match(value):
        return True
    return parse_px(image.style.get(name)) is not None


@check("image-dimensions", category="performance")
def image_dimensions(page: PageDocument, site: SiteContext) -> Iterator[Finding]:
    """Images declare width and height to avoid layout shift."""
    for image in markup.images(page.soup):
        missing = [name for name in ("width", "height") if not _has_dimension(image, name)]
        if missing:
            yield Finding(f"image does not declare {' or '.join(missing)}", image.tag)


@check("lazy-loading", category="performance")
def lazy_loading(page: PageDocument, site: SiteContext) -> Iterator[Finding]:
    """Images below the fold load lazily."""
    config = site.config
    for index, tag in enumerate(page.soup.find_all("img")):
        if index == 0:
            continue
        sections, containers = markup.preceding_structure(tag)
        below_fold = sections >= config.fold_sections or containers >= config.fold_containers
        if below_fold and (markup.attr_text(tag, "loading") or "").lower() != "lazy":
            yield Finding('below-the-fold image is missing loading="lazy"', markup.opening_tag(tag))
