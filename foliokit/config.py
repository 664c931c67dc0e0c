"""Configuration objects and constants for the checker and build tasks."""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import yaml

from .errors import ConfigError

CONFIG_FILENAME = "foliokit.yml"

DEFAULT_PAGES = [
    "index.html",
    "publications.html",
    "awards.html",
    "teaching.html",
    "outreach.html",
    "news.html",
    "resume.html",
]

DEFAULT_STYLESHEETS = [
    "css/variables.css",
    "css/base.css",
    "css/components.css",
    "css/utilities.css",
    "css/portfolio-item.css",
]

DEFAULTS: Dict[str, Any] = {
    "pages": list(DEFAULT_PAGES),
    "stylesheets": list(DEFAULT_STYLESHEETS),
    "variables_stylesheet": "css/variables.css",
    "focus_stylesheets": ["css/base.css", "css/components.css"],
    "touch_stylesheet": "css/components.css",
    "publications_page": "publications.html",
    "news_pages": ["index.html", "news.html"],
    "strict": False,
    "max_external_resources": 15,
    "contrast_pairs": [
        {"text": "color-text", "background": "color-background", "min_ratio": 4.5},
        {"text": "color-link", "background": "color-background", "min_ratio": 4.5},
        {"text": "color-primary", "background": "color-white", "min_ratio": 3.0},
        {"text": "color-accent", "background": "color-white", "min_ratio": 3.0},
        {"text": "color-secondary", "background": "color-background", "min_ratio": 3.0},
    ],
    "generic_alt_terms": ["image", "photo", "picture", "img"],
    "min_alt_length": 3,
    "touch_target_min": 44,
    "touch_target_selectors": [".social-link"],
    "fold": {"sections": 1, "containers": 2},
    "brand_text": None,
    "hero_alt_keywords": [],
    "navbar_target": "#navbarResponsive",
    "publication_sections": [
        "Journal Papers",
        "Conference Proceedings",
        "Workshop Papers",
        "Tutorials",
    ],
    "publication_types": ["journal", "conference", "workshop", "tutorial"],
    "responsive_image_classes": ["img-fluid", "img-responsive", "hero-image", "visitor-map"],
    "trusted_cdns": [
        "cdnjs.cloudflare.com",
        "cdn.jsdelivr.net",
        "unpkg.com",
        "fonts.googleapis.com",
        "fonts.gstatic.com",
    ],
    "vendor": {
        "package": "bootstrap",
        "version": "5.3.3",
        "node_modules": "node_modules",
        "source": "dist",
        "destination": "vendor/bootstrap",
        "exclude": ["css/bootstrap-grid*", "css/bootstrap-reboot*"],
        "legacy": ["vendor/jquery"],
        "fetch_missing": False,
        "registry": "https://registry.npmjs.org",
    },
    "dev": {
        "host": "localhost",
        "port": 3000,
        "watch": ["css/*.css", "*.html"],
        "poll_interval": 0.5,
    },
}


@dataclass
class ContrastPair:
    """A text/background token pair and the ratio it must reach."""

    text: str
    background: str
    min_ratio: float


@dataclass
class VendorConfig:
    """Where the UI framework is copied from and to."""

    package: str = "bootstrap"
    version: str = "5.3.3"
    node_modules: str = "node_modules"
    source: str = "dist"
    destination: str = "vendor/bootstrap"
    exclude: List[str] = field(default_factory=list)
    legacy: List[str] = field(default_factory=list)
    fetch_missing: bool = False
    registry: str = "https://registry.npmjs.org"


@dataclass
class DevServerConfig:
    """Settings for the local preview server."""

    host: str = "localhost"
    port: int = 3000
    watch: List[str] = field(default_factory=list)
    poll_interval: float = 0.5


@dataclass
class SiteConfig:
    """Top-level settings shared by the checker, build tasks and dev server."""

    root: Path
    pages: List[str] = field(default_factory=lambda: list(DEFAULT_PAGES))
    stylesheets: List[str] = field(default_factory=lambda: list(DEFAULT_STYLESHEETS))
    variables_stylesheet: str = "css/variables.css"
    focus_stylesheets: List[str] = field(default_factory=list)
    touch_stylesheet: str = "css/components.css"
    publications_page: Optional[str] = "publications.html"
    news_pages: List[str] = field(default_factory=list)
    strict: bool = False
    max_external_resources: int = 15
    contrast_pairs: List[ContrastPair] = field(default_factory=list)
    generic_alt_terms: Tuple[str, ...] = ("image", "photo", "picture", "img")
    min_alt_length: int = 3
    touch_target_min: int = 44
    touch_target_selectors: List[str] = field(default_factory=list)
    fold_sections: int = 1
    fold_containers: int = 2
    brand_text: Optional[str] = None
    hero_alt_keywords: List[str] = field(default_factory=list)
    navbar_target: str = "#navbarResponsive"
    publication_sections: List[str] = field(default_factory=list)
    publication_types: List[str] = field(default_factory=list)
    responsive_image_classes: List[str] = field(default_factory=list)
    trusted_cdns: List[str] = field(default_factory=list)
    vendor: VendorConfig = field(default_factory=VendorConfig)
    dev: DevServerConfig = field(default_factory=DevServerConfig)

    def resolve(self, relative: str) -> Path:
        """Return the absolute path of a site-relative file."""
        return self.root / relative


def merge_into(base: Dict[str, Any], override: Dict[str, Any]) -> None:
    """Recursively merge override into base dict."""
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(base.get(key), dict):
            merge_into(base[key], value)
        else:
            base[key] = value


def _read_yaml(path: Path) -> Dict[str, Any]:
    try:
        with path.open("r", encoding="utf-8") as stream:
            data = yaml.safe_load(stream) or {}
    except yaml.YAMLError as exc:
        raise ConfigError(f"Could not parse {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"{path} must contain a mapping at the top level")
    return data


def _check_keys(data: Dict[str, Any], defaults: Dict[str, Any], prefix: str = "") -> None:
    for key, value in data.items():
        if key not in defaults:
            raise ConfigError(f"Unknown configuration key: {prefix}{key}")
        if isinstance(value, dict) and isinstance(defaults[key], dict):
            _check_keys(value, defaults[key], prefix=f"{prefix}{key}.")


def _string_list(data: Dict[str, Any], key: str) -> List[str]:
    value = data[key]
    if not isinstance(value, list):
        raise TypeError(f"{key} must be a list, not {type(value).__name__}")
    return [str(item) for item in value]


def build_config(root: Path, data: Dict[str, Any]) -> SiteConfig:
    """Turn a merged settings mapping into a typed SiteConfig."""
    try:
        pairs = [
            ContrastPair(
                text=str(pair["text"]).lstrip("-"),
                background=str(pair["background"]).lstrip("-"),
                min_ratio=float(pair["min_ratio"]),
            )
            for pair in data["contrast_pairs"]
        ]
    except (KeyError, TypeError, ValueError) as exc:
        raise ConfigError(f"Invalid contrast_pairs entry: {exc}") from exc

    try:
        fold = data["fold"]
        return SiteConfig(
            root=root,
            pages=_string_list(data, "pages"),
            stylesheets=_string_list(data, "stylesheets"),
            variables_stylesheet=data["variables_stylesheet"],
            focus_stylesheets=_string_list(data, "focus_stylesheets"),
            touch_stylesheet=data["touch_stylesheet"],
            publications_page=data["publications_page"],
            news_pages=_string_list(data, "news_pages"),
            strict=bool(data["strict"]),
            max_external_resources=int(data["max_external_resources"]),
            contrast_pairs=pairs,
            generic_alt_terms=tuple(term.lower() for term in _string_list(data, "generic_alt_terms")),
            min_alt_length=int(data["min_alt_length"]),
            touch_target_min=int(data["touch_target_min"]),
            touch_target_selectors=_string_list(data, "touch_target_selectors"),
            fold_sections=int(fold["sections"]),
            fold_containers=int(fold["containers"]),
            brand_text=data["brand_text"],
            hero_alt_keywords=_string_list(data, "hero_alt_keywords"),
            navbar_target=data["navbar_target"],
            publication_sections=_string_list(data, "publication_sections"),
            publication_types=_string_list(data, "publication_types"),
            responsive_image_classes=_string_list(data, "responsive_image_classes"),
            trusted_cdns=_string_list(data, "trusted_cdns"),
            vendor=VendorConfig(**data["vendor"]),
            dev=DevServerConfig(**data["dev"]),
        )
    except (KeyError, TypeError, ValueError) as exc:
        raise ConfigError(f"Invalid configuration value: {exc}") from exc


def load_config(
    root: str | Path = ".",
    path: str | Path | None = None,
    overrides: Optional[Dict[str, Any]] = None,
) -> SiteConfig:
    """Load configuration from YAML, merging with defaults.

    ``path`` defaults to ``foliokit.yml`` under ``root`` when that file exists.
    ``overrides`` are applied last, which is how the CLI injects flags such as
    ``--strict``.
    """
    root_path = Path(root).resolve()
    data: Dict[str, Any] = copy.deepcopy(DEFAULTS)

    config_path = Path(path) if path is not None else root_path / CONFIG_FILENAME
    if path is not None and not config_path.exists():
        raise ConfigError(f"Configuration file does not exist: {config_path}")
    if config_path.exists():
        user = _read_yaml(config_path)
        _check_keys(user, DEFAULTS)
        merge_into(data, user)

    if overrides:
        _check_keys(overrides, DEFAULTS)
        merge_into(data, overrides)

    return build_config(root_path, data)
