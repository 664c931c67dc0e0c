"""HTML5 document structure and stylesheet sanity."""

from __future__ import annotations

from collections import Counter
from html.parser import HTMLParser
from typing import Iterator, List, Optional

from .. import css, markup
from ..documents import SiteContext
from ..models import Finding, PageDocument, Stylesheet
from .registry import STYLESHEET, check

BALANCED_TAGS = ("div", "section", "article", "nav", "header", "footer", "main", "ul", "ol", "li")
DOCUMENT_TAGS = ("html", "head", "body")
REQUIRED_TOKEN_PREFIXES = ("color-primary", "font-", "spacing-")


class TagCounter(HTMLParser):
    """Counts start and end tags as written, without repairing the tree."""

    def __init__(self) -> None:
        super().__init__(convert_charrefs=True)
        self.opened: Counter = Counter()
        self.closed: Counter = Counter()
        self.doctype: Optional[str] = None
        self.body_in_head = False
        self._in_head = False

    def handle_decl(self, decl: str) -> None:
        if self.doctype is None:
            self.doctype = decl

    def handle_starttag(self, tag, attrs) -> None:
        self.opened[tag] += 1
        if tag == "head":
            self._in_head = True
        elif tag == "body" and self._in_head:
            self.body_in_head = True

    def handle_startendtag(self, tag, attrs) -> None:
        self.opened[tag] += 1
        self.closed[tag] += 1

    def handle_endtag(self, tag) -> None:
        self.closed[tag] += 1
        if tag == "head":
            self._in_head = False


def count_tags(text: str) -> TagCounter:
    counter = TagCounter()
    counter.feed(text)
    counter.close()
    return counter


@check("document-structure", category="validation")
def document_structure(page: PageDocument, site: SiteContext) -> Iterator[Finding]:
    """Pages have a doctype, html/head/body and balanced containers."""
    counter = count_tags(page.text)
    if (counter.doctype or "").strip().lower() != "doctype html":
        yield Finding("page does not start with <!DOCTYPE html>")
    for tag in DOCUMENT_TAGS:
        if not counter.opened[tag]:
            yield Finding(f"page has no <{tag}> element")
        if not counter.closed[tag]:
            yield Finding(f"page has no </{tag}> closing tag")
    for tag in BALANCED_TAGS:
        if counter.opened[tag] != counter.closed[tag]:
            yield Finding(
                f"<{tag}> opened {counter.opened[tag]} times but closed {counter.closed[tag]} times"
            )
    if counter.body_in_head:
        yield Finding("<body> appears inside <head>")
    soup = page.soup
    for tag in ("nav", "main"):
        if soup.find(tag) is None:
            yield Finding(f"page has no <{tag}> element")


@check("document-metadata", category="validation")
def document_metadata(page: PageDocument, site: SiteContext) -> Iterator[Finding]:
    """Pages declare a title, a UTF-8 charset and a viewport."""
    soup = page.soup
    title = soup.find("title")
    if title is None or not title.get_text(strip=True):
        yield Finding("page has no non-empty <title>")
    charset = soup.find("meta", charset=True)
    if charset is None:
        yield Finding("page has no <meta charset>")
    elif (markup.attr_text(charset, "charset") or "").lower() != "utf-8":
        yield Finding("page charset is not utf-8", markup.opening_tag(charset))
    if soup.find("meta", attrs={"name": "viewport"}) is None:
        yield Finding('page has no <meta name="viewport">')


@check("anchor-href", category="validation")
def anchor_href(page: PageDocument, site: SiteContext) -> Iterator[Finding]:
    """Every anchor has an href."""
    for tag in page.soup.find_all("a"):
        if tag.get("href") is None:
            yield Finding("anchor has no href", markup.opening_tag(tag))


@check("unique-ids", category="validation")
def unique_ids(page: PageDocument, site: SiteContext) -> Iterator[Finding]:
    """Element ids are unique within a page."""
    ids = Counter(markup.attr_text(tag, "id") for tag in page.soup.find_all(id=True))
    for value, count in ids.items():
        if count > 1:
            yield Finding(f'id "{value}" is used {count} times')


@check("stylesheet-linked", category="validation")
def stylesheet_linked(page: PageDocument, site: SiteContext) -> Iterator[Finding]:
    """Pages link at least one local stylesheet from css/."""
    links = [
        tag
        for tag in page.soup.find_all("link", href=True)
        if "stylesheet" in (markup.attr_text(tag, "rel") or "").split()
    ]
    if not links:
        yield Finding('page has no <link rel="stylesheet">')
    elif not any("css/" in (markup.attr_text(tag, "href") or "") for tag in links):
        yield Finding("page links no stylesheet from css/")


@check("stylesheet-syntax", category="validation", scope=STYLESHEET)
def stylesheet_syntax(sheet: Stylesheet, site: SiteContext) -> Iterator[Finding]:
    """Stylesheets are non-empty with balanced braces and parentheses."""
    if not sheet.text.strip():
        yield Finding("stylesheet is empty")
        return
    opens, closes, open_parens, close_parens = css.count_delimiters(sheet.text)
    if opens != closes:
        yield Finding(f"stylesheet has {opens} '{{' but {closes} '}}'")
    if open_parens != close_parens:
        yield Finding(f"stylesheet has {open_parens} '(' but {close_parens} ')'")


@check(
    "root-tokens",
    category="validation",
    scope=STYLESHEET,
    files=lambda config: [config.variables_stylesheet],
)
def root_tokens(sheet: Stylesheet, site: SiteContext) -> Iterator[Finding]:
    """The variables stylesheet declares its tokens in a :root block."""
    variables = css.custom_properties(sheet.text)
    if not variables:
        yield Finding("stylesheet has no :root custom properties")
        return
    names: List[str] = list(variables)
    for prefix in REQUIRED_TOKEN_PREFIXES:
        if not any(name.startswith(prefix) for name in names):
            yield Finding(f"no --{prefix}* custom property in :root")
