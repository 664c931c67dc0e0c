"""Responsive layout conventions."""

from __future__ import annotations

from typing import Iterator

from bs4 import Tag

from .. import markup
from ..documents import SiteContext
from ..models import Finding, PageDocument
from ..utils import parse_px
from .registry import check

NARROWEST_VIEWPORT = 320
MAX_MIN_WIDTH = 768
LARGE_IMAGE_WIDTH = 1000
FONT_SIZE_RANGE = (12, 72)
FLUID_IMAGE_CLASSES = ("img-fluid", "img-responsive")


def _styled(page: PageDocument) -> Iterator[tuple]:
    for tag in page.soup.find_all(style=True):
        yield tag, markup.parse_style(markup.attr_text(tag, "style"))


def _fills_container(style) -> bool:
    return "max-width" in style or style.get("width") == "100%"


@check("viewport-meta", category="layout")
def viewport_meta(page: PageDocument, site: SiteContext) -> Iterator[Finding]:
    """Pages declare a device-width viewport at scale 1."""
    meta = page.soup.find("meta", attrs={"name": "viewport"})
    if meta is None:
        yield Finding('page has no <meta name="viewport">')
        return
    content = (markup.attr_text(meta, "content") or "").replace(" ", "")
    if "width=device-width" not in content:
        yield Finding("viewport meta lacks width=device-width", markup.opening_tag(meta))
    if "initial-scale=1" not in content:
        yield Finding("viewport meta lacks initial-scale=1", markup.opening_tag(meta))


@check("responsive-grid", category="layout")
def responsive_grid(page: PageDocument, site: SiteContext) -> Iterator[Finding]:
    """Content sits in containers, and rows hold col-* columns."""
    soup = page.soup
    if not any(markup.is_container(tag) for tag in soup.find_all("div", class_=True)):
        yield Finding("page has no .container or .container-fluid div")
    rows = soup.find_all(class_="row")
    has_columns = any(
        cls.startswith("col-") for tag in soup.find_all(class_=True) for cls in markup.class_list(tag)
    )
    if rows and not has_columns:
        yield Finding("page uses .row without any col-* columns", markup.opening_tag(rows[0]))
    hero = soup.find(class_=lambda value: bool(value) and "hero" in value)
    if hero is not None and not rows:
        yield Finding("hero section does not use the responsive grid", markup.opening_tag(hero))


@check("fixed-widths", category="layout")
def fixed_widths(page: PageDocument, site: SiteContext) -> Iterator[Finding]:
    """Inline widths never force horizontal scrolling on small screens."""
    for tag, style in _styled(page):
        width = parse_px(style.get("width"))
        if width is not None and width > NARROWEST_VIEWPORT and not _fills_container(style):
            yield Finding(
                f"inline width {width:g}px exceeds {NARROWEST_VIEWPORT}px without max-width",
                markup.opening_tag(tag),
            )
        min_width = parse_px(style.get("min-width"))
        if min_width is not None and min_width > MAX_MIN_WIDTH:
            yield Finding(f"inline min-width {min_width:g}px exceeds {MAX_MIN_WIDTH}px", markup.opening_tag(tag))


def _responsive(tag: Tag, site: SiteContext) -> bool:
    classes = markup.class_list(tag)
    if any(cls in site.config.responsive_image_classes for cls in classes):
        return True
    return _fills_container(markup.parse_style(markup.attr_text(tag, "style")))


@check("responsive-images", category="layout")
def responsive_images(page: PageDocument, site: SiteContext) -> Iterator[Finding]:
    """Images scale down with their container."""
    for tag in page.soup.find_all("img"):
        if not _responsive(tag, site):
            yield Finding("image has no responsive class or max-width", markup.opening_tag(tag))
            continue
        style = markup.parse_style(markup.attr_text(tag, "style"))
        width = parse_px(style.get("width"))
        fluid = any(cls in FLUID_IMAGE_CLASSES for cls in markup.class_list(tag))
        if width is not None and width >= LARGE_IMAGE_WIDTH and not (fluid or _fills_container(style)):
            yield Finding(f"image is fixed at {width:g}px wide", markup.opening_tag(tag))


def _scrollable(tag: Tag) -> bool:
    for parent in [tag, *tag.parents]:
        if not isinstance(parent, Tag):
            continue
        if markup.has_class(parent, "table-responsive"):
            return True
        overflow = markup.parse_style(markup.attr_text(parent, "style")).get("overflow-x")
        if overflow == "auto":
            return True
    return False


@check("responsive-tables", category="layout")
def responsive_tables(page: PageDocument, site: SiteContext) -> Iterator[Finding]:
    """Tables scroll horizontally on narrow screens."""
    for table in page.soup.find_all("table"):
        if not _scrollable(table):
            yield Finding("table is not wrapped in .table-responsive", markup.opening_tag(table))


@check("readable-font-sizes", category="layout")
def readable_font_sizes(page: PageDocument, site: SiteContext) -> Iterator[Finding]:
    """Inline font sizes stay readable."""
    low, high = FONT_SIZE_RANGE
    for tag, style in _styled(page):
        size = parse_px(style.get("font-size"))
        if size is not None and not low <= size <= high:
            yield Finding(f"inline font-size {size:g}px is outside {low}-{high}px", markup.opening_tag(tag))
