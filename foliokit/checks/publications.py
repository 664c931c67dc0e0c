"""Structure of the publications list."""

from __future__ import annotations

import re
from typing import Iterator

from .. import markup
from ..documents import SiteContext
from ..models import Finding, PageDocument
from .registry import check

YEAR = re.compile(r"\b(19|20)\d{2}\b")
REQUIRED_FIELDS = ("publication-authors", "publication-title", "publication-venue")


def _publications_page(config):
    return [config.publications_page] if config.publications_page else []


@check("publication-entries", category="publications", files=_publications_page)
def publication_entries(page: PageDocument, site: SiteContext) -> Iterator[Finding]:
    """Each publication lists authors, an h3 title and a dated venue."""
    entries = page.soup.find_all("article", class_="publication-entry")
    if not entries:
        yield Finding("page has no article.publication-entry elements")
        return
    for entry in entries:
        fragment = markup.opening_tag(entry)
        for name in REQUIRED_FIELDS:
            element = entry.find(class_=name)
            if element is None:
                yield Finding(f"publication has no .{name}", fragment)
            elif not markup.visible_text(element):
                yield Finding(f"publication .{name} is empty", fragment)
        title = entry.find(class_="publication-title")
        if title is not None and title.name != "h3":
            yield Finding("publication title is not an h3", markup.opening_tag(title))
        venue = entry.find(class_="publication-venue")
        if venue is not None and markup.visible_text(venue) and not YEAR.search(markup.visible_text(venue)):
            yield Finding("publication venue has no year", markup.opening_tag(venue))


@check("publication-authorship", category="publications", files=_publications_page)
def publication_authorship(page: PageDocument, site: SiteContext) -> Iterator[Finding]:
    """The site owner is highlighted inside each author list."""
    for entry in page.soup.find_all("article", class_="publication-entry"):
        authors = entry.find(class_="publication-authors")
        if authors is None or authors.find(class_="current-author") is None:
            yield Finding("publication authors do not highlight .current-author", markup.opening_tag(entry))


@check("publication-types", category="publications", files=_publications_page)
def publication_types(page: PageDocument, site: SiteContext) -> Iterator[Finding]:
    """Articles declare a known data-pub-type."""
    allowed = site.config.publication_types
    for article in page.soup.find_all("article"):
        kind = markup.attr_text(article, "data-pub-type")
        if kind is None:
            yield Finding("article has no data-pub-type", markup.opening_tag(article))
        elif kind not in allowed:
            yield Finding(f'unknown publication type "{kind}"', markup.opening_tag(article))


@check("publication-links", category="publications", files=_publications_page)
def publication_links(page: PageDocument, site: SiteContext) -> Iterator[Finding]:
    """Links inside publications open safely in a new tab."""
    for entry in page.soup.find_all("article", class_="publication-entry"):
        for link in markup.external_links(entry):
            if link.target != "_blank" or not {"noopener", "noreferrer"} <= set(link.rel):
                yield Finding('publication link needs target="_blank" rel="noopener noreferrer"', link.tag)


@check("publication-sections", category="publications", files=_publications_page)
def publication_sections(page: PageDocument, site: SiteContext) -> Iterator[Finding]:
    """Publications are grouped under the expected section headings."""
    soup = page.soup
    if soup.find("section", class_="publication-section") is None:
        yield Finding("page has no section.publication-section")
    if soup.find("main") is None:
        yield Finding("page has no <main> element")
    headings = [
        markup.visible_text(tag).lower()
        for tag in soup.find_all("h2", class_="section-heading")
    ]
    for name in site.config.publication_sections:
        if not any(name.lower() in heading for heading in headings):
            yield Finding(f'no h2.section-heading for "{name}"')
