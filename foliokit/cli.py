"""Command-line entry point for the site build tasks and convention checker."""

from __future__ import annotations

import argparse
import logging
import sys
import time
from pathlib import Path
from typing import Any, Dict, Iterable, Sequence

from . import build, devserver
from .checker import all_checks, run_checks
from .checks.registry import CATEGORIES
from .config import SiteConfig, load_config
from .errors import FolioError
from .models import CheckReport

logger = logging.getLogger("foliokit.cli")

DEFAULT_COMMAND = "vendor"


def _ensure_command_prefix(argv: Sequence[str], commands: Iterable[str]) -> Sequence[str]:
    if not argv:
        return (DEFAULT_COMMAND,)
    first = argv[0]
    if first in commands or first in ("-h", "--help"):
        return argv
    return (DEFAULT_COMMAND, *argv)


def _add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--root",
        default=".",
        type=Path,
        help="Site root containing the HTML pages and css/ directory",
    )
    parser.add_argument(
        "--config",
        default=None,
        type=Path,
        help="YAML configuration file (default: foliokit.yml under the root, if present)",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )


def _add_check_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--strict",
        action="store_true",
        help="Fail checks whose configured files are missing instead of skipping them",
    )
    parser.add_argument(
        "--only",
        action="append",
        default=[],
        metavar="NAME",
        help="Run only the named check (repeatable)",
    )
    parser.add_argument(
        "--category",
        action="append",
        default=[],
        choices=CATEGORIES,
        help="Run only checks in this category (repeatable)",
    )
    parser.add_argument(
        "--browser",
        action="store_true",
        help="Also verify the navigation script in headless Chromium",
    )
    parser.add_argument(
        "--list",
        action="store_true",
        help="List the available checks and exit",
    )


def _add_dev_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--host", default=None, help="Interface to bind (default from config)")
    parser.add_argument("--port", type=int, default=None, help="Port to listen on (default from config)")


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Build, serve and check the portfolio site.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    commands = {
        "vendor": "Remove legacy vendor files and copy the UI framework into vendor/",
        "clean": "Remove legacy vendor files",
        "css": "Write .min.css siblings for the site stylesheets",
        "dev": "Serve the site locally and reload browsers on change",
        "check": "Run the markup and stylesheet convention checks",
    }
    for name, help_text in commands.items():
        sub = subparsers.add_parser(name, help=help_text)
        _add_common_arguments(sub)
        if name == "check":
            _add_check_arguments(sub)
        elif name == "dev":
            _add_dev_arguments(sub)

    argv = list(sys.argv[1:] if argv is None else argv)
    argv = list(_ensure_command_prefix(argv, subparsers.choices.keys()))
    return parser.parse_args(argv)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        force=True,
    )


def _load(args: argparse.Namespace) -> SiteConfig:
    overrides: Dict[str, Any] = {}
    if getattr(args, "strict", False):
        overrides["strict"] = True
    return load_config(root=args.root, path=args.config, overrides=overrides)


def _list_checks() -> None:
    for spec in all_checks():
        sys.stdout.write(f"{spec.name:28} {spec.category:14} {spec.scope:10} {spec.description}\n")
    sys.stdout.flush()


def _print_report(report: CheckReport) -> None:
    for outcome in report.failed:
        sys.stdout.write(f"FAIL {outcome.check} [{outcome.path}]\n")
        for violation in outcome.violations:
            sys.stdout.write(f"  - {violation}\n")
    sys.stdout.write(
        f"{len(report.passed)} passed, {len(report.failed)} failed, {len(report.skipped)} skipped\n"
    )
    sys.stdout.flush()


def _run_check(args: argparse.Namespace, config: SiteConfig) -> int:
    if args.list:
        _list_checks()
        return 0
    start = time.perf_counter()
    report = run_checks(config, names=args.only, categories=args.category)
    if args.browser:
        from .browser import run_browser_checks

        report.outcomes.append(run_browser_checks(config))
    logger.debug("Checks finished in %.2fs", time.perf_counter() - start)
    _print_report(report)
    return 0 if report.ok else 1


def main(argv: Sequence[str] | None = None) -> int:
    args = parse_args(argv)
    _configure_logging(args.verbose)
    try:
        config = _load(args)
        if args.command == "check":
            return _run_check(args, config)
        if args.command == "clean":
            build.clean_vendor(config)
        elif args.command == "vendor":
            build.run_vendor(config)
        elif args.command == "css":
            build.minify_stylesheets(config)
        elif args.command == "dev":
            devserver.serve(config, host=args.host, port=args.port)
    except FolioError as exc:
        logger.error("%s", exc)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
