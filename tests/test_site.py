"""The portfolio site shipped in this repository follows its own conventions."""

from __future__ import annotations

from pathlib import Path

import pytest

from foliokit.checker import run_checks
from foliokit.config import load_config
from foliokit.models import FAILED

REPO_ROOT = Path(__file__).resolve().parent.parent


@pytest.fixture(scope="module")
def report():
    return run_checks(load_config(REPO_ROOT))


def test_site_passes_every_check(report):
    failures = [str(violation) for violation in report.violations]
    assert failures == []
    assert report.ok


def test_present_pages_are_checked(report):
    checked = {outcome.path for outcome in report.passed}
    assert {"index.html", "publications.html", "css/variables.css", "css/components.css"} <= checked


def test_absent_pages_are_skipped_not_failed(report):
    skipped = {outcome.path for outcome in report.skipped}
    assert "awards.html" in skipped
    assert "css/portfolio-item.css" in skipped


def test_strict_mode_reports_absent_pages():
    config = load_config(REPO_ROOT, overrides={"strict": True})
    report = run_checks(config, names=["heading-hierarchy"])
    failed = {outcome.path for outcome in report.outcomes if outcome.status == FAILED}
    assert failed == {"awards.html", "teaching.html", "outreach.html", "news.html", "resume.html"}
