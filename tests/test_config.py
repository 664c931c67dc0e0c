"""Configuration loading and merging."""

from __future__ import annotations

import pytest

from foliokit.config import CONFIG_FILENAME, DEFAULT_PAGES, load_config
from foliokit.errors import ConfigError


def test_defaults_without_file(tmp_path):
    config = load_config(tmp_path)
    assert config.root == tmp_path.resolve()
    assert config.pages == DEFAULT_PAGES
    assert config.strict is False
    assert config.max_external_resources == 15
    assert config.fold_sections == 1
    assert config.fold_containers == 2
    assert config.vendor.destination == "vendor/bootstrap"
    assert config.dev.port == 3000
    ratios = {(pair.text, pair.background): pair.min_ratio for pair in config.contrast_pairs}
    assert ratios[("color-text", "color-background")] == 4.5
    assert ratios[("color-accent", "color-white")] == 3.0


def test_yaml_file_is_deep_merged(tmp_path):
    (tmp_path / CONFIG_FILENAME).write_text(
        "brand_text: Dr. Example\nfold:\n  containers: 3\nvendor:\n  version: 5.3.0\n",
        encoding="utf-8",
    )
    config = load_config(tmp_path)
    assert config.brand_text == "Dr. Example"
    assert config.fold_containers == 3
    assert config.fold_sections == 1
    assert config.vendor.version == "5.3.0"
    assert config.vendor.package == "bootstrap"


def test_explicit_path_and_overrides(tmp_path):
    custom = tmp_path / "other.yml"
    custom.write_text("strict: false\npages: [home.html]\n", encoding="utf-8")
    config = load_config(tmp_path, path=custom, overrides={"strict": True})
    assert config.pages == ["home.html"]
    assert config.strict is True


def test_contrast_tokens_accept_leading_dashes(tmp_path):
    (tmp_path / CONFIG_FILENAME).write_text(
        "contrast_pairs:\n  - {text: --color-ink, background: --color-paper, min_ratio: 7}\n",
        encoding="utf-8",
    )
    (pair,) = load_config(tmp_path).contrast_pairs
    assert (pair.text, pair.background, pair.min_ratio) == ("color-ink", "color-paper", 7.0)


def test_missing_explicit_file_raises(tmp_path):
    with pytest.raises(ConfigError):
        load_config(tmp_path, path=tmp_path / "nope.yml")


def test_unknown_key_raises(tmp_path):
    (tmp_path / CONFIG_FILENAME).write_text("vendor:\n  flavour: vanilla\n", encoding="utf-8")
    with pytest.raises(ConfigError, match="vendor.flavour"):
        load_config(tmp_path)


def test_malformed_yaml_raises(tmp_path):
    (tmp_path / CONFIG_FILENAME).write_text("pages: [index.html\n", encoding="utf-8")
    with pytest.raises(ConfigError):
        load_config(tmp_path)


def test_non_mapping_raises(tmp_path):
    (tmp_path / CONFIG_FILENAME).write_text("- just\n- a list\n", encoding="utf-8")
    with pytest.raises(ConfigError):
        load_config(tmp_path)


def test_config_error_is_a_value_error(tmp_path):
    with pytest.raises(ValueError):
        load_config(tmp_path, overrides={"no_such_key": 1})


def test_resolve_is_relative_to_root(site_config):
    assert site_config.resolve("css/base.css") == site_config.root / "css" / "base.css"
    assert site_config.vendor.exclude == ["css/bootstrap-grid*", "css/bootstrap-reboot*"]


@pytest.mark.parametrize(
    "text",
    [
        "fold: 3\n",
        "max_external_resources: lots\n",
        "pages: index.html\n",
        "vendor: 5\n",
        "fold:\n  sections: many\n",
    ],
)
def test_wrong_value_types_raise_config_error(tmp_path, text):
    (tmp_path / CONFIG_FILENAME).write_text(text, encoding="utf-8")
    with pytest.raises(ConfigError, match="Invalid configuration value"):
        load_config(tmp_path)
