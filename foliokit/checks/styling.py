"""Consistent element styling and design tokens."""

from __future__ import annotations

import re
from typing import Iterator

from .. import css, markup
from ..documents import SiteContext
from ..models import Finding, PageDocument
from .registry import SITE, check

NUMERIC_VALUE = re.compile(r"^([\d.]+)")
SPACING_PROPERTIES = (
    "margin",
    "padding",
    "gap",
    "margin-bottom",
    "margin-top",
    "padding-bottom",
    "padding-top",
)
REQUIRED_COLORS = ("color-primary", "color-secondary", "color-accent", "color-text", "color-background")
REQUIRED_FONT_SIZES = ("font-size-h1", "font-size-h2", "font-size-h3", "font-size-base")
MIN_SPACING_TOKENS = 4


@check("section-heading-elements", category="styling")
def section_heading_elements(page: PageDocument, site: SiteContext) -> Iterator[Finding]:
    """Section headings are h2 elements."""
    for tag in page.soup.find_all(class_="section-heading"):
        if tag.name != "h2":
            yield Finding(f".section-heading is a <{tag.name}>, expected <h2>", markup.opening_tag(tag))


@check(
    "publication-entry-elements",
    category="styling",
    files=lambda config: [config.publications_page] if config.publications_page else [],
)
def publication_entry_elements(page: PageDocument, site: SiteContext) -> Iterator[Finding]:
    """Publication entries are article elements."""
    entries = page.soup.find_all(class_="publication-entry")
    if not entries:
        yield Finding("page has no .publication-entry elements")
    for tag in entries:
        if tag.name != "article":
            yield Finding(f".publication-entry is a <{tag.name}>, expected <article>", markup.opening_tag(tag))


@check("news-items", category="styling", files=lambda config: config.news_pages)
def news_items(page: PageDocument, site: SiteContext) -> Iterator[Finding]:
    """Entries of a news list carry the news-item class."""
    for news_list in page.soup.find_all(["ul", "ol"], class_="news-list"):
        for item in news_list.find_all("li", recursive=False):
            if not markup.has_class(item, "news-item"):
                yield Finding("news list entry is missing the news-item class", markup.opening_tag(item))


@check("list-classes", category="styling")
def list_classes(page: PageDocument, site: SiteContext) -> Iterator[Finding]:
    """Classed lists use one of the list-* utility classes."""
    for tag in page.soup.find_all(["ul", "ol"], class_=True):
        classes = markup.class_list(tag)
        if "navbar-nav" in classes:
            continue
        if not any("list" in cls for cls in classes):
            yield Finding("list has classes but no list-* class", markup.opening_tag(tag))


@check("design-tokens", category="styling", scope=SITE)
def design_tokens(site: SiteContext) -> Iterator[Finding]:
    """The variables stylesheet declares spacing, colour and type scale tokens."""
    sheet = site.stylesheet(site.config.variables_stylesheet)
    variables = css.custom_properties(sheet.text)
    spacing = [
        name
        for name, value in variables.items()
        if name.startswith("spacing-") and NUMERIC_VALUE.match(value)
    ]
    if len(spacing) < MIN_SPACING_TOKENS:
        yield Finding(
            f"only {len(spacing)} numeric --spacing-* tokens, expected at least {MIN_SPACING_TOKENS}",
            path=sheet.name,
        )
    for name in REQUIRED_COLORS + REQUIRED_FONT_SIZES:
        if name not in variables:
            yield Finding(f"design token --{name} is not declared", path=sheet.name)


def _uses_token(value: str) -> bool:
    if "var(--" in value:
        return True
    return all(part in ("0", "auto") for part in value.split())


@check("spacing-tokens", category="styling", scope=SITE)
def spacing_tokens(site: SiteContext) -> Iterator[Finding]:
    """Publication entry spacing comes from the design tokens."""
    sheet = site.stylesheet(site.config.touch_stylesheet)
    for rule in css.iter_rules(css.parse_stylesheet(sheet.text)):
        if not any(selector.startswith(".publication-entry") for selector in rule.selectors):
            continue
        declarations = rule.declaration_map()
        for name in SPACING_PROPERTIES:
            value = declarations.get(name)
            if value is not None and not _uses_token(value):
                yield Finding(
                    f"{name} on {rule.prelude.strip()} does not use a var(--*) token",
                    f"{name}: {value}",
                    path=sheet.name,
                )
