"""Headless-browser verification of the navigation script."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, List, Optional

from playwright.async_api import (
    Error as PlaywrightError,
    Page,
    TimeoutError as PlaywrightTimeoutError,
    async_playwright,
)

from .config import SiteConfig
from .devserver import PreviewServer
from .errors import MissingFileError
from .models import FAILED, PASSED, SKIPPED, CheckOutcome, Violation

logger = logging.getLogger("foliokit.browser")

CHECK_NAME = "navigation-behaviour"
SCROLL_THRESHOLD = 50
MOBILE_VIEWPORT = {"width": 375, "height": 740}

ANCHOR_PROBE = """
() => {
  const navbar = document.querySelector('.navbar');
  const links = Array.from(document.querySelectorAll('a[href^="#"]'));
  const link = links.find((a) => {
    const href = a.getAttribute('href');
    return href && href !== '#' && document.querySelector(href);
  });
  if (!link) { return null; }
  const calls = [];
  const original = window.scrollTo.bind(window);
  window.scrollTo = function (...args) { calls.push(args[0]); return original(...args); };
  const hashBefore = window.location.hash;
  const target = document.querySelector(link.getAttribute('href'));
  const expected = target.offsetTop - (navbar ? navbar.offsetHeight : 0);
  link.click();
  window.scrollTo = original;
  const last = calls.length ? calls[calls.length - 1] : null;
  return {
    href: link.getAttribute('href'),
    expected: expected,
    top: last && typeof last === 'object' ? last.top : null,
    behavior: last && typeof last === 'object' ? last.behavior : null,
    hashChanged: window.location.hash !== hashBefore,
  };
}
"""

COLLAPSE_PROBE = """
() => {
  const collapse = document.querySelector('.navbar-collapse');
  const link = document.querySelector('.navbar-nav .nav-link');
  if (!collapse || !link) { return null; }
  let hidden = false;
  const instance = { hide() { hidden = true; collapse.classList.remove('show'); } };
  window.bootstrap = window.bootstrap || {};
  window.bootstrap.Collapse = { getInstance: (node) => (node === collapse ? instance : null) };
  const block = (event) => event.preventDefault();
  document.addEventListener('click', block);
  collapse.classList.add('show');
  link.click();
  document.removeEventListener('click', block);
  return { hidden: hidden, stillShown: collapse.classList.contains('show') };
}
"""


async def _block_external(page: Page, origin: str) -> None:
    async def handler(route) -> None:
        if route.request.url.startswith(origin):
            await route.continue_()
        else:
            await route.abort()

    await page.route("**/*", handler)


async def _check_scroll(page: Page, timeout_ms: float) -> List[str]:
    problems: List[str] = []
    has_navbar = await page.evaluate("() => !!document.querySelector('.navbar')")
    if not has_navbar:
        return ["page has no .navbar"]
    await page.evaluate(
        "() => { const s = document.createElement('div'); s.style.height = '4000px'; document.body.appendChild(s); }"
    )
    await page.evaluate(f"() => window.scrollTo(0, {SCROLL_THRESHOLD * 4})")
    try:
        await page.wait_for_function(
            "() => document.querySelector('.navbar').classList.contains('navbar-scrolled')",
            timeout=timeout_ms,
        )
    except PlaywrightTimeoutError:
        problems.append(f"navbar-scrolled is not added after scrolling past {SCROLL_THRESHOLD}px")
    await page.evaluate("() => window.scrollTo(0, 0)")
    try:
        await page.wait_for_function(
            "() => !document.querySelector('.navbar').classList.contains('navbar-scrolled')",
            timeout=timeout_ms,
        )
    except PlaywrightTimeoutError:
        problems.append("navbar-scrolled is not removed after scrolling back to the top")
    return problems


async def _check_anchor(page: Page) -> List[str]:
    result: Optional[Dict[str, Any]] = await page.evaluate(ANCHOR_PROBE)
    if result is None:
        logger.info("No in-page anchor with an existing target; skipping smooth scroll probe")
        return []
    problems: List[str] = []
    href = result["href"]
    if result["hashChanged"]:
        problems.append(f"clicking {href} changed the location hash instead of scrolling")
    if result["top"] is None:
        problems.append(f"clicking {href} did not call window.scrollTo")
        return problems
    if abs(result["top"] - result["expected"]) > 1:
        problems.append(f"clicking {href} scrolled to {result['top']}, expected {result['expected']}")
    if result["behavior"] != "smooth":
        problems.append(f"clicking {href} did not request smooth scrolling")
    return problems


async def _check_collapse(page: Page) -> List[str]:
    await page.set_viewport_size(MOBILE_VIEWPORT)
    result: Optional[Dict[str, Any]] = await page.evaluate(COLLAPSE_PROBE)
    if result is None:
        return ["page has no .navbar-collapse with .navbar-nav .nav-link entries"]
    if not result["hidden"] or result["stillShown"]:
        return ["clicking a nav link does not collapse the expanded mobile menu"]
    return []


async def verify_navigation(
    config: SiteConfig,
    base_url: str,
    page_name: str = "index.html",
    timeout: float = 10.0,
) -> List[Violation]:
    """Load ``page_name`` from ``base_url`` in headless Chromium and exercise the navigation script."""
    if not config.resolve(page_name).is_file():
        raise MissingFileError(f"File does not exist: {config.resolve(page_name)}")
    timeout_ms = timeout * 1000
    problems: List[str] = []
    async with async_playwright() as playwright:
        browser = await playwright.chromium.launch(headless=True)
        try:
            page = await browser.new_page()
            page.set_default_timeout(timeout_ms)
            await _block_external(page, base_url)
            logger.info("Loading %s", base_url + page_name)
            await page.goto(base_url + page_name, wait_until="load")
            problems.extend(await _check_scroll(page, timeout_ms))
            problems.extend(await _check_anchor(page))
            problems.extend(await _check_collapse(page))
        finally:
            await browser.close()
    return [Violation(check=CHECK_NAME, path=page_name, message=problem) for problem in problems]


def run_browser_checks(config: SiteConfig, page_name: str = "index.html") -> CheckOutcome:
    """Serve the site on an ephemeral port and verify it; browser failures fail the outcome."""
    try:
        if not config.resolve(page_name).is_file():
            raise MissingFileError(f"File does not exist: {config.resolve(page_name)}")
        with PreviewServer(config, host="127.0.0.1", port=0) as preview:
            violations = asyncio.run(verify_navigation(config, preview.url, page_name))
    except MissingFileError as exc:
        if not config.strict:
            logger.info("Skipping %s: %s", CHECK_NAME, exc)
            return CheckOutcome(check=CHECK_NAME, path=page_name, status=SKIPPED, reason=str(exc))
        violations = [Violation(check=CHECK_NAME, path=page_name, message=str(exc))]
    except PlaywrightError as exc:
        logger.error("Browser verification could not run: %s", exc)
        violations = [Violation(check=CHECK_NAME, path=page_name, message=f"browser error: {exc}")]
    status = FAILED if violations else PASSED
    return CheckOutcome(check=CHECK_NAME, path=page_name, status=status, violations=violations)
