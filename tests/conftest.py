"""Shared fixtures: throwaway sites written into tmp_path."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Callable, Dict, List

import pytest

from foliokit.checker import run_checks
from foliokit.config import SiteConfig, load_config
from foliokit.models import Violation

PAGE_TEMPLATE = """<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="utf-8">
<meta name="viewport" content="width=device-width, initial-scale=1">
<title>Test page</title>
{head}
</head>
<body>
{body}
</body>
</html>
"""


def html_page(body: str, head: str = "") -> str:
    return PAGE_TEMPLATE.format(head=head, body=body)


@pytest.fixture()
def make_site(tmp_path: Path) -> Callable[..., SiteConfig]:
    """Write ``files`` (site-relative path -> text) and return a config for them."""

    def _make(files: Dict[str, str], **overrides: Any) -> SiteConfig:
        for name, text in files.items():
            target = tmp_path / name
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(text, encoding="utf-8")
        return load_config(tmp_path, overrides=overrides)

    return _make


@pytest.fixture()
def site_config(tmp_path: Path) -> SiteConfig:
    return load_config(tmp_path)


@pytest.fixture()
def page():
    """Build a full HTML document around a body fragment."""
    return html_page


@pytest.fixture()
def check_page(make_site) -> Callable[..., List[Violation]]:
    """Run one check against a single ``index.html`` and return its violations."""

    def _check(name: str, html: str, files: Dict[str, str] | None = None, **overrides: Any) -> List[Violation]:
        config = make_site({"index.html": html, **(files or {})}, pages=["index.html"], **overrides)
        report = run_checks(config, names=[name])
        return report.violations

    return _check


@pytest.fixture()
def check_site(make_site) -> Callable[..., List[Violation]]:
    """Run one check against a set of files and return its violations."""

    def _check(name: str, files: Dict[str, str], **overrides: Any) -> List[Violation]:
        config = make_site(files, **overrides)
        return run_checks(config, names=[name]).violations

    return _check
