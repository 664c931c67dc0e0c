from __future__ import annotations

import pytest

from foliokit.contrast import WHITE, contrast_ratio, parse_hex, relative_luminance, resolve_color


def test_parse_hex():
    assert parse_hex("#1a1a1a") == (26, 26, 26)
    assert parse_hex("FFFFFF") == (255, 255, 255)
    assert parse_hex("#fff") is None
    assert parse_hex("rgb(0, 0, 0)") is None


def test_luminance_extremes():
    assert relative_luminance((0, 0, 0)) == 0.0
    assert relative_luminance(WHITE) == pytest.approx(1.0)


def test_black_on_white_is_twenty_one():
    assert contrast_ratio((0, 0, 0), WHITE) == pytest.approx(21.0)
    assert contrast_ratio(WHITE, (0, 0, 0)) == pytest.approx(21.0)


def test_dark_text_on_white_meets_body_minimum():
    ratio = contrast_ratio(parse_hex("#1a1a1a"), parse_hex("#ffffff"))
    assert ratio >= 4.5
    assert ratio == contrast_ratio(parse_hex("#1a1a1a"), parse_hex("#ffffff"))


def test_light_grey_on_white_fails():
    assert contrast_ratio(parse_hex("#cccccc"), WHITE) < 3.0


def test_resolve_color_falls_back_to_white():
    variables = {"color-text": "#1a1a1a", "color-odd": "tomato"}
    assert resolve_color(variables, "color-text") == (26, 26, 26)
    assert resolve_color(variables, "color-white") == WHITE
    assert resolve_color(variables, "color-odd") is None
    assert resolve_color(variables, "color-missing") is None
