"""Accessibility conventions: links, landmarks, headings, alt text, contrast, touch targets."""

from __future__ import annotations

import re
from typing import Iterator

from bs4 import Tag

from .. import contrast, css, markup
from ..documents import SiteContext
from ..models import Finding, PageDocument, Stylesheet
from ..utils import normalize_text, parse_px
from .registry import SITE, STYLESHEET, check

ISOLATION_TOKENS = ("noopener", "noreferrer")
UNLABELLED_INPUT_TYPES = {"hidden", "submit", "button"}
LETTER = re.compile(r"[a-zA-Z]")
MIN_PX = re.compile(r"(\d+(?:\.\d+)?)px")


@check("external-link-security", category="accessibility")
def external_link_security(page: PageDocument, site: SiteContext) -> Iterator[Finding]:
    """External links open in a new tab with noopener and noreferrer."""
    for link in markup.external_links(page.soup):
        if link.target != "_blank":
            yield Finding('external link is missing target="_blank"', link.tag)
        missing = [token for token in ISOLATION_TOKENS if token not in link.rel]
        if missing:
            yield Finding(f"external link rel is missing {', '.join(missing)}", link.tag)


@check("internal-link-target", category="accessibility")
def internal_link_target(page: PageDocument, site: SiteContext) -> Iterator[Finding]:
    """Links to other pages of the site stay in the same tab."""
    for link in markup.internal_links(page.soup):
        if link.target == "_blank":
            yield Finding('internal link must not use target="_blank"', link.tag)


@check("link-text", category="accessibility")
def link_text(page: PageDocument, site: SiteContext) -> Iterator[Finding]:
    """Links expose text, an aria-label or a title."""
    for tag in markup.anchors(page.soup):
        if LETTER.search(markup.visible_text(tag)):
            continue
        if (markup.attr_text(tag, "aria-label") or "").strip():
            continue
        if (markup.attr_text(tag, "title") or "").strip():
            continue
        yield Finding("link has no descriptive text, aria-label or title", markup.opening_tag(tag))


@check("skip-link", category="accessibility")
def skip_link(page: PageDocument, site: SiteContext) -> Iterator[Finding]:
    """Pages start with a skip link to the main content."""
    soup = page.soup
    has_skip = soup.find(class_="skip-link") is not None or "skip to main content" in page.text.lower()
    if not has_skip:
        yield Finding("page has no skip navigation link")
    if soup.find("a", href="#main-content") is None:
        yield Finding('page has no link to "#main-content"')


@check("main-landmark", category="accessibility")
def main_landmark(page: PageDocument, site: SiteContext) -> Iterator[Finding]:
    """Pages have a main landmark the skip link can target."""
    soup = page.soup
    mains = soup.find_all("main")
    if not mains and soup.find(attrs={"role": "main"}) is None:
        yield Finding("page has no <main> element or role=\"main\" landmark")
        return
    if mains and not any(markup.attr_text(tag, "id") == "main-content" for tag in mains):
        yield Finding('<main> element must have id="main-content"', markup.opening_tag(mains[0]))


@check("nav-labels", category="accessibility")
def nav_labels(page: PageDocument, site: SiteContext) -> Iterator[Finding]:
    """Every nav element is labelled."""
    for nav in page.soup.find_all("nav"):
        label = (markup.attr_text(nav, "aria-label") or "").strip()
        labelledby = (markup.attr_text(nav, "aria-labelledby") or "").strip()
        if not label and not labelledby:
            yield Finding("nav element has no aria-label or aria-labelledby", markup.opening_tag(nav))


@check("heading-hierarchy", category="accessibility")
def heading_hierarchy(page: PageDocument, site: SiteContext) -> Iterator[Finding]:
    """At least one h1, and no heading level skipped going deeper."""
    levels = markup.heading_levels(page.soup)
    if 1 not in levels:
        yield Finding("page has no h1 heading")
    for previous, current in zip(levels, levels[1:]):
        if current - previous > 1:
            yield Finding(f"heading level jumps from h{previous} to h{current}", f"h{previous} -> h{current}")


def _inside(tag: Tag, keyword: str) -> bool:
    for parent in tag.parents:
        if any(keyword in cls for cls in markup.class_list(parent)):
            return True
    return False


@check("keyboard-access", category="accessibility")
def keyboard_access(page: PageDocument, site: SiteContext) -> Iterator[Finding]:
    """Links and buttons stay reachable from the keyboard."""
    for tag in markup.anchors(page.soup):
        if tag.get("href") is None:
            yield Finding("link has no href and cannot receive focus", markup.opening_tag(tag))
        if markup.attr_text(tag, "tabindex") == "-1" and not (
            _inside(tag, "collapse") or _inside(tag, "modal")
        ):
            yield Finding('link uses tabindex="-1" outside a collapse or modal', markup.opening_tag(tag))
    for button in page.soup.find_all("button"):
        if markup.attr_text(button, "tabindex") == "-1":
            yield Finding('button must not use tabindex="-1"', markup.opening_tag(button))
        if not (markup.attr_text(button, "type") or "").strip():
            yield Finding("button has no type attribute", markup.opening_tag(button))


@check("social-links-keyboard", category="accessibility")
def social_links_keyboard(page: PageDocument, site: SiteContext) -> Iterator[Finding]:
    """Social links have an href and are never removed from the tab order."""
    for nav in page.soup.find_all("nav", class_="social-links"):
        for tag in nav.find_all("a"):
            if not (markup.attr_text(tag, "href") or ""):
                yield Finding("social link has no href", markup.opening_tag(tag))
            if markup.attr_text(tag, "tabindex") == "-1":
                yield Finding('social link uses tabindex="-1"', markup.opening_tag(tag))


@check("section-labels", category="accessibility")
def section_labels(page: PageDocument, site: SiteContext) -> Iterator[Finding]:
    """Sections labelled by id point at a heading with that id."""
    soup = page.soup
    for section in soup.find_all("section"):
        label_id = (markup.attr_text(section, "aria-labelledby") or "").strip()
        if not label_id:
            continue
        target = soup.find(id=label_id)
        if target is None or not markup.HEADING_PATTERN.match(target.name):
            yield Finding(
                f'aria-labelledby="{label_id}" does not match a heading id',
                markup.opening_tag(section),
            )


@check("form-labels", category="accessibility")
def form_labels(page: PageDocument, site: SiteContext) -> Iterator[Finding]:
    """Form controls are labelled."""
    soup = page.soup
    for control in soup.find_all(["input", "textarea", "select"]):
        if control.name == "input" and (markup.attr_text(control, "type") or "").lower() in UNLABELLED_INPUT_TYPES:
            continue
        if (markup.attr_text(control, "aria-label") or "").strip():
            continue
        if (markup.attr_text(control, "aria-labelledby") or "").strip():
            continue
        if (markup.attr_text(control, "title") or "").strip():
            continue
        control_id = markup.attr_text(control, "id")
        if control_id and soup.find("label", attrs={"for": control_id}) is not None:
            continue
        yield Finding("form control has no label", markup.opening_tag(control))


@check("image-alt", category="accessibility")
def image_alt(page: PageDocument, site: SiteContext) -> Iterator[Finding]:
    """Images carry descriptive alternative text unless decorative."""
    config = site.config
    for image in markup.images(page.soup):
        if image.alt is None:
            yield Finding("image is missing an alt attribute", image.tag)
            continue
        if image.decorative:
            continue
        alt = image.alt.strip()
        if not alt:
            yield Finding("image alt text is empty", image.tag)
        elif len(alt) < config.min_alt_length:
            yield Finding(f"image alt text is shorter than {config.min_alt_length} characters", image.tag)
        elif alt.lower() in config.generic_alt_terms:
            yield Finding(f'image alt text "{alt}" is a generic placeholder', image.tag)


@check("hero-image-alt", category="accessibility")
def hero_image_alt(page: PageDocument, site: SiteContext) -> Iterator[Finding]:
    """The hero portrait has alt text naming the person or role."""
    keywords = [keyword.lower() for keyword in site.config.hero_alt_keywords]
    for tag in page.soup.find_all("img", class_="hero-image"):
        alt = (markup.attr_text(tag, "alt") or "").strip()
        if len(alt) <= 10:
            yield Finding("hero image alt text should be longer than 10 characters", markup.opening_tag(tag))
        elif keywords and not any(keyword in alt.lower() for keyword in keywords):
            yield Finding("hero image alt text does not name the person or role", markup.opening_tag(tag))


@check(
    "focus-styles",
    category="accessibility",
    scope=STYLESHEET,
    files=lambda config: config.focus_stylesheets,
)
def focus_styles(sheet: Stylesheet, site: SiteContext) -> Iterator[Finding]:
    """Stylesheets define :focus-visible rules with an outline."""
    if ":focus-visible" not in sheet.text:
        yield Finding("stylesheet defines no :focus-visible styles")
        return
    for rule in css.iter_rules(css.parse_stylesheet(sheet.text)):
        if ":focus-visible" not in rule.prelude:
            continue
        if not any(name.startswith("outline") for name in rule.declaration_map()):
            yield Finding(":focus-visible rule does not set an outline", normalize_text(rule.prelude))


@check("color-contrast", category="accessibility", scope=SITE)
def color_contrast(site: SiteContext) -> Iterator[Finding]:
    """Declared colour token pairs meet their minimum contrast ratio."""
    config = site.config
    sheet = site.stylesheet(config.variables_stylesheet)
    variables = css.custom_properties(sheet.text)
    for pair in config.contrast_pairs:
        fg = contrast.resolve_color(variables, pair.text)
        bg = contrast.resolve_color(variables, pair.background)
        if fg is None or bg is None:
            continue
        ratio = contrast.contrast_ratio(fg, bg)
        if ratio < pair.min_ratio:
            yield Finding(
                f"--{pair.text} on --{pair.background} has contrast {ratio:.2f}, needs {pair.min_ratio}",
                f"--{pair.text}: {variables.get(pair.text)}",
                path=sheet.name,
            )


@check("touch-targets", category="accessibility", scope=SITE)
def touch_targets(site: SiteContext) -> Iterator[Finding]:
    """Interactive elements are at least the minimum touch size."""
    config = site.config
    sheet = site.stylesheet(config.touch_stylesheet)
    for selector in config.touch_target_selectors:
        for rule in css.find_rules(sheet.text, selector):
            value = rule.declaration_map().get("min-height")
            match = MIN_PX.search(value or "")
            if match and float(match.group(1)) < config.touch_target_min:
                yield Finding(
                    f"{selector} min-height is below {config.touch_target_min}px",
                    f"min-height: {value}",
                    path=sheet.name,
                )
    for rule in css.find_rules(sheet.text, ".nav-link"):
        if not any(name.startswith("padding") for name in rule.declaration_map()):
            yield Finding(".nav-link rule sets no padding", ".nav-link", path=sheet.name)

    for page in site.existing_pages():
        for button in page.soup.find_all("button"):
            classes = markup.class_list(button)
            if not any("btn" in cls for cls in classes) and "navbar-toggler" not in classes:
                yield Finding(
                    "button has neither a btn nor a navbar-toggler class",
                    markup.opening_tag(button),
                    path=page.name,
                )
        for tag in page.soup.find_all(["a", "button"], style=True):
            width = parse_px(markup.parse_style(markup.attr_text(tag, "style")).get("width"))
            if width is not None and 0 < width < 20:
                yield Finding(
                    "interactive element is narrower than 20px",
                    markup.opening_tag(tag),
                    path=page.name,
                )
