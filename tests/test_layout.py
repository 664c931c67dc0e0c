from __future__ import annotations


def bare_page(body, head=""):
    return f'<!DOCTYPE html><html lang="en"><head><title>t</title>{head}</head><body>{body}</body></html>'


def test_viewport_meta(check_page, page):
    assert check_page("viewport-meta", page("<p>x</p>")) == []
    assert [v.message for v in check_page("viewport-meta", bare_page("<p>x</p>"))] == [
        'page has no <meta name="viewport">'
    ]
    zoomed = bare_page("<p>x</p>", head='<meta name="viewport" content="width=1024">')
    assert [v.message for v in check_page("viewport-meta", zoomed)] == [
        "viewport meta lacks width=device-width",
        "viewport meta lacks initial-scale=1",
    ]


def test_responsive_grid(check_page, page):
    good = page(
        '<header class="hero"><div class="container"><div class="row">'
        '<div class="col-md-6">a</div></div></div></header>'
    )
    assert check_page("responsive-grid", good) == []
    found = [v.message for v in check_page("responsive-grid", page('<div class="row"><div>a</div></div>'))]
    assert found == [
        "page has no .container or .container-fluid div",
        "page uses .row without any col-* columns",
    ]
    hero = page('<div class="container-fluid"><header class="hero">Hi</header></div>')
    assert [v.message for v in check_page("responsive-grid", hero)] == [
        "hero section does not use the responsive grid"
    ]


def test_fixed_widths(check_page, page):
    html = page(
        '<div style="width: 600px">too wide</div>'
        '<div style="width: 600px; max-width: 100%">capped</div>'
        '<div style="width: 300px">fits</div>'
        '<div style="min-width: 900px">stretches</div>'
    )
    assert [v.message for v in check_page("fixed-widths", html)] == [
        "inline width 600px exceeds 320px without max-width",
        "inline min-width 900px exceeds 768px",
    ]


def test_responsive_images(check_page, page):
    html = page(
        '<img class="img-fluid" src="a.png" alt="Fluid image">'
        '<img src="b.png" alt="Capped image" style="max-width: 100%">'
        '<img src="c.png" alt="Bare image">'
        '<img class="hero-image" src="d.png" alt="Huge hero" style="width: 1200px">'
    )
    found = check_page("responsive-images", html)
    assert [v.message for v in found] == [
        "image has no responsive class or max-width",
        "image is fixed at 1200px wide",
    ]


def test_responsive_tables(check_page, page):
    html = page(
        '<div class="table-responsive"><table><tr><td>a</td></tr></table></div>'
        '<div style="overflow-x: auto"><table><tr><td>b</td></tr></table></div>'
        '<table class="plain"><tr><td>c</td></tr></table>'
    )
    (violation,) = check_page("responsive-tables", html)
    assert violation.fragment == '<table class="plain">'


def test_readable_font_sizes(check_page, page):
    html = page(
        '<p style="font-size: 10px">tiny</p>'
        '<p style="font-size: 16px">fine</p>'
        '<p style="font-size: 96px">huge</p>'
        '<p style="font-size: 1.2rem">relative</p>'
    )
    assert [v.message for v in check_page("readable-font-sizes", html)] == [
        "inline font-size 10px is outside 12-72px",
        "inline font-size 96px is outside 12-72px",
    ]
