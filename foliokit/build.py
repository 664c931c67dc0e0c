"""Build tasks: vendor cleanup and sync, stylesheet minification."""

from __future__ import annotations

import fnmatch
import io
import logging
import shutil
import tarfile
from pathlib import Path, PurePosixPath
from typing import List, Optional

import requests

from . import css
from .config import SiteConfig
from .errors import BuildError

logger = logging.getLogger("foliokit.build")

CSS_DIRECTORY = "css"
MIN_SUFFIX = ".min.css"
TARBALL_PREFIX = "package"
FETCH_TIMEOUT = 30


def clean_vendor(config: SiteConfig) -> List[Path]:
    """Remove legacy vendor directories; returns the ones that existed."""
    removed: List[Path] = []
    for relative in config.vendor.legacy:
        target = config.resolve(relative)
        if not target.exists():
            continue
        try:
            if target.is_dir():
                shutil.rmtree(target)
            else:
                target.unlink()
        except OSError as exc:
            raise BuildError(f"Could not remove {target}: {exc}") from exc
        logger.info("Removed legacy vendor path %s", relative)
        removed.append(target)
    return removed


def _package_dir(config: SiteConfig) -> Path:
    return config.resolve(config.vendor.node_modules) / config.vendor.package


def _is_excluded(relative: str, patterns: List[str]) -> bool:
    return any(fnmatch.fnmatch(relative, pattern) for pattern in patterns)


def tarball_url(config: SiteConfig) -> str:
    vendor = config.vendor
    return f"{vendor.registry.rstrip('/')}/{vendor.package}/-/{vendor.package}-{vendor.version}.tgz"


def _extract_package(data: bytes, destination: Path) -> int:
    count = 0
    with tarfile.open(fileobj=io.BytesIO(data), mode="r:gz") as archive:
        for member in archive.getmembers():
            if not member.isfile():
                continue
            parts = PurePosixPath(member.name).parts
            if not parts or parts[0] != TARBALL_PREFIX or ".." in parts:
                logger.debug("Ignoring tarball entry %s", member.name)
                continue
            target = destination.joinpath(*parts[1:])
            target.parent.mkdir(parents=True, exist_ok=True)
            source = archive.extractfile(member)
            if source is None:
                continue
            with source, target.open("wb") as handle:
                shutil.copyfileobj(source, handle)
            count += 1
    return count


def fetch_vendor_package(config: SiteConfig, session: Optional[requests.Session] = None) -> Path:
    """Download the configured npm tarball and unpack it into the dependency cache."""
    url = tarball_url(config)
    session = session or requests.Session()
    logger.info("Fetching %s", url)
    try:
        resp = session.get(url, timeout=FETCH_TIMEOUT)
        resp.raise_for_status()
    except requests.RequestException as exc:
        raise BuildError(f"Could not download {url}: {exc}") from exc

    destination = _package_dir(config)
    try:
        count = _extract_package(resp.content, destination)
    except (OSError, tarfile.TarError) as exc:
        raise BuildError(f"Could not unpack {url}: {exc}") from exc
    logger.info("Unpacked %d file(s) into %s", count, destination)
    return destination


def sync_vendor(config: SiteConfig, session: Optional[requests.Session] = None) -> List[Path]:
    """Copy the framework's distribution tree into the vendor directory.

    Files matching ``vendor.exclude`` (relative to the distribution root) are
    left out. Running it twice leaves the same tree behind.
    """
    vendor = config.vendor
    source = _package_dir(config) / vendor.source
    if not source.is_dir() and vendor.fetch_missing:
        fetch_vendor_package(config, session=session)
    if not source.is_dir():
        raise BuildError(
            f"{source} does not exist; install {vendor.package} or enable vendor.fetch_missing"
        )

    destination = config.resolve(vendor.destination)
    copied: List[Path] = []
    try:
        for path in sorted(source.rglob("*")):
            if not path.is_file():
                continue
            relative = path.relative_to(source).as_posix()
            if _is_excluded(relative, vendor.exclude):
                logger.debug("Excluding %s", relative)
                continue
            target = destination / relative
            target.parent.mkdir(parents=True, exist_ok=True)
            shutil.copy2(path, target)
            copied.append(target)
    except OSError as exc:
        raise BuildError(f"Could not copy {source} to {destination}: {exc}") from exc
    logger.info("Copied %d file(s) from %s to %s", len(copied), source, vendor.destination)
    return copied


def run_vendor(config: SiteConfig, session: Optional[requests.Session] = None) -> List[Path]:
    clean_vendor(config)
    return sync_vendor(config, session=session)


def minified_path(path: Path) -> Path:
    return path.with_name(path.name[: -len(".css")] + MIN_SUFFIX)


def minify_stylesheets(config: SiteConfig, directory: str = CSS_DIRECTORY) -> List[Path]:
    """Write a ``.min.css`` sibling for every source stylesheet in ``directory``."""
    source_dir = config.resolve(directory)
    written: List[Path] = []
    if not source_dir.is_dir():
        logger.warning("No stylesheet directory at %s", source_dir)
        return written
    for path in sorted(source_dir.glob("*.css")):
        if path.name.endswith(MIN_SUFFIX):
            continue
        target = minified_path(path)
        try:
            text = path.read_text(encoding="utf-8")
            result = css.minify(text)
            target.write_text(result, encoding="utf-8")
        except OSError as exc:
            raise BuildError(f"Could not minify {path}: {exc}") from exc
        logger.info("Minified %s (%d -> %d bytes)", path.name, len(text), len(result))
        written.append(target)
    return written
