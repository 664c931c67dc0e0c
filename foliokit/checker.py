"""Run registered checks against a site and collect a report."""

from __future__ import annotations

import logging
from typing import Iterable, List, Optional

from .checks import (  # noqa: F401  (registers checks)
    accessibility,
    compatibility,
    icons,
    layout,
    navigation,
    performance,
    publications,
    styling,
    validation,
)
from .checks.registry import CATEGORIES, PAGE, REGISTRY, SITE, CheckSpec
from .config import SiteConfig
from .documents import SiteContext
from .errors import ConfigError, MissingFileError
from .models import FAILED, PASSED, SKIPPED, CheckOutcome, CheckReport, Finding, Violation
from .utils import normalize_text

logger = logging.getLogger("foliokit.checker")

SITE_PATH = "<site>"


def all_checks() -> List[CheckSpec]:
    return list(REGISTRY.values())


def select_checks(
    names: Optional[Iterable[str]] = None,
    categories: Optional[Iterable[str]] = None,
) -> List[CheckSpec]:
    """Pick checks by name and/or category, keeping registration order.

    With neither filter every registered check is returned.
    """
    names = list(names or [])
    categories = list(categories or [])
    unknown = [name for name in names if name not in REGISTRY]
    if unknown:
        raise ConfigError(f"Unknown check: {', '.join(unknown)}")
    bad_categories = [category for category in categories if category not in CATEGORIES]
    if bad_categories:
        raise ConfigError(f"Unknown check category: {', '.join(bad_categories)}")
    if not names and not categories:
        return all_checks()
    return [
        spec
        for spec in REGISTRY.values()
        if spec.name in names or spec.category in categories
    ]


def _outcome(spec: CheckSpec, path: str, findings: Iterable[Finding]) -> CheckOutcome:
    violations = [
        Violation(
            check=spec.name,
            path=finding.path or path,
            message=finding.message,
            fragment=normalize_text(finding.fragment),
        )
        for finding in findings
    ]
    status = FAILED if violations else PASSED
    return CheckOutcome(check=spec.name, path=path, status=status, violations=violations)


def _missing(spec: CheckSpec, path: str, exc: MissingFileError, strict: bool) -> CheckOutcome:
    if strict:
        logger.warning("%s: %s is missing", spec.name, path)
        violation = Violation(check=spec.name, path=path, message=str(exc))
        return CheckOutcome(check=spec.name, path=path, status=FAILED, violations=[violation])
    logger.info("Skipping %s for %s: file not found", spec.name, path)
    return CheckOutcome(check=spec.name, path=path, status=SKIPPED, reason=str(exc))


def run_check(spec: CheckSpec, site: SiteContext) -> List[CheckOutcome]:
    """Run one check over each of its target files (or once for site checks)."""
    strict = site.config.strict
    if spec.scope == SITE:
        try:
            findings = list(spec.func(site))
        except MissingFileError as exc:
            return [_missing(spec, SITE_PATH, exc, strict)]
        return [_outcome(spec, SITE_PATH, findings)]

    outcomes: List[CheckOutcome] = []
    for name in spec.targets(site.config):
        try:
            document = site.page(name) if spec.scope == PAGE else site.stylesheet(name)
            findings = list(spec.func(document, site))
        except MissingFileError as exc:
            outcomes.append(_missing(spec, name, exc, strict))
            continue
        outcomes.append(_outcome(spec, name, findings))
    return outcomes


def run_checks(
    config: SiteConfig,
    names: Optional[Iterable[str]] = None,
    categories: Optional[Iterable[str]] = None,
) -> CheckReport:
    """Run the selected checks sequentially and collect their outcomes."""
    specs = select_checks(names, categories)
    site = SiteContext(config)
    report = CheckReport()
    logger.info("Running %d check(s) against %s", len(specs), config.root)
    for spec in specs:
        outcomes = run_check(spec, site)
        for outcome in outcomes:
            logger.debug("%s %s: %s", spec.name, outcome.path, outcome.status)
        report.outcomes.extend(outcomes)
    logger.info(
        "%d passed, %d failed, %d skipped",
        len(report.passed),
        len(report.failed),
        len(report.skipped),
    )
    return report
