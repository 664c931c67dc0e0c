"""Check selection and the missing-file policy of the runner."""

from __future__ import annotations

import pytest

from foliokit.checker import SITE_PATH, all_checks, run_checks, select_checks
from foliokit.checks.registry import CATEGORIES, PAGE, SITE, STYLESHEET
from foliokit.errors import ConfigError
from foliokit.models import FAILED, PASSED, SKIPPED


def test_every_category_has_checks():
    categories = {spec.category for spec in all_checks()}
    assert categories == set(CATEGORIES)
    assert {spec.scope for spec in all_checks()} == {PAGE, STYLESHEET, SITE}


def test_check_names_are_unique_and_described():
    names = [spec.name for spec in all_checks()]
    assert len(names) == len(set(names))
    assert all(spec.description and spec.description != spec.name for spec in all_checks())


def test_select_by_name_and_category():
    selected = select_checks(names=["skip-link"], categories=["icons"])
    assert [spec.name for spec in selected][0] == "skip-link"
    assert {spec.category for spec in selected} == {"accessibility", "icons"}
    assert select_checks() == all_checks()


def test_select_unknown_names():
    with pytest.raises(ConfigError, match="Unknown check: no-such-check"):
        select_checks(names=["no-such-check"])
    with pytest.raises(ConfigError, match="Unknown check category"):
        select_checks(categories=["vibes"])


def test_missing_pages_are_skipped_when_lenient(make_site, page):
    config = make_site({"index.html": page("<h1>x</h1>")}, pages=["index.html", "gone.html"])
    report = run_checks(config, names=["heading-hierarchy"])
    assert [(o.path, o.status) for o in report.outcomes] == [
        ("index.html", PASSED),
        ("gone.html", SKIPPED),
    ]
    assert report.ok
    assert "gone.html" in report.skipped[0].reason


def test_missing_pages_fail_when_strict(make_site, page):
    config = make_site({"index.html": page("<h1>x</h1>")}, pages=["index.html", "gone.html"], strict=True)
    report = run_checks(config, names=["heading-hierarchy"])
    assert [(o.path, o.status) for o in report.outcomes] == [
        ("index.html", PASSED),
        ("gone.html", FAILED),
    ]
    assert not report.ok
    (violation,) = report.violations
    assert violation.path == "gone.html"


def test_site_checks_report_missing_stylesheet(make_site):
    config = make_site({}, strict=False)
    (outcome,) = run_checks(config, names=["color-contrast"]).outcomes
    assert (outcome.path, outcome.status) == (SITE_PATH, SKIPPED)

    config = make_site({}, strict=True)
    (outcome,) = run_checks(config, names=["color-contrast"]).outcomes
    assert outcome.status == FAILED


def test_violation_paths_and_fragments(make_site, page):
    config = make_site({"index.html": page("<h2>x</h2>" + "<center>" + "x" * 300 + "</center>")}, pages=["index.html"])
    report = run_checks(config, names=["heading-hierarchy", "deprecated-elements"])
    assert [v.check for v in report.violations] == ["heading-hierarchy", "deprecated-elements"]
    assert all(v.path == "index.html" for v in report.violations)
    assert str(report.violations[1]) == "index.html: deprecated <center> element -> <center>"


def test_runs_are_independent(make_site, page, tmp_path):
    config = make_site({"index.html": page("<h1>x</h1>")}, pages=["index.html"])
    assert run_checks(config, names=["heading-hierarchy"]).ok
    (tmp_path / "index.html").write_text(page("<h2>x</h2>"), encoding="utf-8")
    assert not run_checks(config, names=["heading-hierarchy"]).ok
