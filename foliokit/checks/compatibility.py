"""Cross-browser hygiene for pages and stylesheets."""

from __future__ import annotations

import re
from typing import Iterator
from urllib.parse import urlparse

from .. import css, markup
from ..documents import SiteContext
from ..models import Finding, PageDocument, Stylesheet
from ..utils import normalize_text
from .registry import SITE, STYLESHEET, check

BOOTSTRAP5_REFERENCE = re.compile(r"bootstrap/5\.|bootstrap@5\.|bootstrap\.min\.css", re.IGNORECASE)
DEPRECATED_ELEMENTS = ("center", "font", "marquee")
GENERIC_FAMILY = re.compile(r"\b(serif|sans-serif|monospace|cursive|fantasy|system-ui)\b", re.IGNORECASE)
RGB_FUNCTION = re.compile(r"rgba?\([^)]+\)", re.IGNORECASE)
RGB_WELL_FORMED = re.compile(r"^rgba?\(\s*\d+\s*,\s*\d+\s*,\s*\d+", re.IGNORECASE)
MODERN_FEATURES = (
    re.compile(r"display:\s*grid", re.IGNORECASE),
    re.compile(r"display:\s*flex", re.IGNORECASE),
    re.compile(r"var\(--"),
    re.compile(r"transition:", re.IGNORECASE),
)
ROOT_BLOCK = re.compile(r":root\s*\{")
FONT_SMOOTHING_PREFIXES = ("-webkit-font-smoothing", "-moz-osx-font-smoothing")
ARIA_ATTRIBUTES = {
    "aria-activedescendant",
    "aria-atomic",
    "aria-autocomplete",
    "aria-busy",
    "aria-checked",
    "aria-controls",
    "aria-current",
    "aria-describedby",
    "aria-details",
    "aria-disabled",
    "aria-expanded",
    "aria-haspopup",
    "aria-hidden",
    "aria-invalid",
    "aria-label",
    "aria-labelledby",
    "aria-level",
    "aria-live",
    "aria-modal",
    "aria-orientation",
    "aria-owns",
    "aria-pressed",
    "aria-readonly",
    "aria-required",
    "aria-selected",
    "aria-sort",
}


@check("bootstrap5-reference", category="compatibility")
def bootstrap5_reference(page: PageDocument, site: SiteContext) -> Iterator[Finding]:
    """Pages load Bootstrap 5."""
    sources = [markup.attr_text(tag, "href") or "" for tag in page.soup.find_all("link", href=True)]
    sources += [markup.attr_text(tag, "src") or "" for tag in page.soup.find_all("script", src=True)]
    if not any(BOOTSTRAP5_REFERENCE.search(source) for source in sources):
        yield Finding("page does not reference Bootstrap 5")


@check("deprecated-elements", category="compatibility")
def deprecated_elements(page: PageDocument, site: SiteContext) -> Iterator[Finding]:
    """No presentational HTML elements."""
    for tag in page.soup.find_all(DEPRECATED_ELEMENTS):
        yield Finding(f"deprecated <{tag.name}> element", markup.opening_tag(tag))


@check("link-behaviour", category="compatibility")
def link_behaviour(page: PageDocument, site: SiteContext) -> Iterator[Finding]:
    """Navigation works without scripts: real hrefs and no javascript: links."""
    nav = page.soup.find("nav")
    if nav is not None and nav.find("a", href=True) is None:
        yield Finding("nav contains no link with an href", markup.opening_tag(nav))
    for tag in page.soup.find_all("a", href=True):
        if (markup.attr_text(tag, "href") or "").strip().lower().startswith("javascript:"):
            yield Finding("link uses a javascript: href", markup.opening_tag(tag))


@check("cdn-hosts", category="compatibility")
def cdn_hosts(page: PageDocument, site: SiteContext) -> Iterator[Finding]:
    """Resources served from a CDN come from a trusted host."""
    trusted = set(site.config.trusted_cdns)
    for url in markup.external_resources(page.soup):
        host = urlparse(url).hostname or ""
        if "cdn" in host and host not in trusted:
            yield Finding(f"resource is served from untrusted CDN {host}", url)


@check("resource-types", category="compatibility")
def resource_types(page: PageDocument, site: SiteContext) -> Iterator[Finding]:
    """Stylesheets use rel="stylesheet" and scripts are not typed as CSS."""
    for tag in page.soup.find_all("link", href=True):
        href = (markup.attr_text(tag, "href") or "").split("?", 1)[0]
        if href.endswith(".css") and "stylesheet" not in (markup.attr_text(tag, "rel") or "").split():
            yield Finding('.css link is missing rel="stylesheet"', markup.opening_tag(tag))
    for tag in page.soup.find_all("script", src=True):
        if (markup.attr_text(tag, "type") or "").lower() == "text/css":
            yield Finding('script is typed as "text/css"', markup.opening_tag(tag))


@check("aria-attributes", category="compatibility")
def aria_attributes(page: PageDocument, site: SiteContext) -> Iterator[Finding]:
    """Only standard ARIA attributes are used."""
    for tag in page.soup.find_all(True):
        for name in tag.attrs:
            if name.startswith("aria-") and name not in ARIA_ATTRIBUTES:
                yield Finding(f"non-standard ARIA attribute {name}", markup.opening_tag(tag))


@check("font-smoothing-prefixes", category="compatibility", scope=STYLESHEET)
def font_smoothing_prefixes(sheet: Stylesheet, site: SiteContext) -> Iterator[Finding]:
    """Font smoothing is declared with both vendor prefixes."""
    if "font-smoothing" not in sheet.text:
        return
    for prefix in FONT_SMOOTHING_PREFIXES:
        if prefix not in sheet.text:
            yield Finding(f"font smoothing is declared without {prefix}")


@check("font-fallbacks", category="compatibility", scope=STYLESHEET)
def font_fallbacks(sheet: Stylesheet, site: SiteContext) -> Iterator[Finding]:
    """Font stacks end in a fallback."""
    for rule in css.iter_rules(css.parse_stylesheet(sheet.text)):
        for decl in rule.declarations or []:
            if decl.name.lower() != "font-family":
                continue
            value = decl.value
            if "," in value or GENERIC_FAMILY.search(value) or "var(--font-" in value:
                continue
            if value.strip().lower() == "inherit":
                continue
            yield Finding("font-family has no fallback", f"{rule.prelude.strip()} {{ font-family: {value} }}")


@check("color-functions", category="compatibility", scope=STYLESHEET)
def color_functions(sheet: Stylesheet, site: SiteContext) -> Iterator[Finding]:
    """rgb() and rgba() colours use comma-separated integer channels."""
    for color in RGB_FUNCTION.findall(sheet.text):
        if not RGB_WELL_FORMED.match(color):
            yield Finding("colour function is not in rgb(r, g, b) form", color)


@check("browser-hacks", category="compatibility", scope=STYLESHEET)
def browser_hacks(sheet: Stylesheet, site: SiteContext) -> Iterator[Finding]:
    """No legacy Internet Explorer hacks."""
    for rule in css.iter_rules(css.parse_stylesheet(sheet.text)):
        if re.search(r"\*\s*html\b", rule.prelude):
            yield Finding("star-html selector hack", normalize_text(rule.prelude))
        for decl in rule.declarations or []:
            if decl.name.startswith(("_", "*")):
                yield Finding("underscore or star property hack", f"{decl.name}: {decl.value}")
            if decl.value.rstrip().endswith("\\9"):
                yield Finding("backslash-nine value hack", f"{decl.name}: {decl.value}")


@check("modern-css", category="compatibility", scope=SITE)
def modern_css(site: SiteContext) -> Iterator[Finding]:
    """The stylesheets use modern layout features, with tokens in :root."""
    sheets = site.existing_stylesheets(site.config.stylesheets)
    if not sheets:
        return
    combined = "\n".join(sheet.text for sheet in sheets)
    if "var(--" in combined and not ROOT_BLOCK.search(combined):
        yield Finding("custom properties are used but no :root block declares them")
    if not any(pattern.search(combined) for pattern in MODERN_FEATURES):
        yield Finding("stylesheets use none of grid, flexbox, custom properties or transitions")
