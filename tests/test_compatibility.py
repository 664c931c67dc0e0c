from __future__ import annotations

BOOTSTRAP = '<link rel="stylesheet" href="vendor/bootstrap/css/bootstrap.min.css">'


def test_bootstrap5_reference(check_page, page):
    assert check_page("bootstrap5-reference", page("<p>x</p>", head=BOOTSTRAP)) == []
    cdn = '<script src="https://cdn.jsdelivr.net/npm/bootstrap@5.3.3/dist/js/bootstrap.bundle.min.js"></script>'
    assert check_page("bootstrap5-reference", page(cdn)) == []
    old = '<link rel="stylesheet" href="https://stackpath.example/bootstrap/4.6.0/css/bootstrap.css">'
    assert len(check_page("bootstrap5-reference", page("<p>x</p>", head=old))) == 1


def test_deprecated_elements(check_page, page):
    html = page("<center>a</center><p><font>b</font></p><marquee>c</marquee><p>fine</p>")
    assert [v.message for v in check_page("deprecated-elements", html)] == [
        "deprecated <center> element",
        "deprecated <font> element",
        "deprecated <marquee> element",
    ]


def test_link_behaviour(check_page, page):
    assert check_page("link-behaviour", page('<nav aria-label="Main"><a href="a.html">A</a></nav>')) == []
    html = page('<nav aria-label="Main"><span>menu</span></nav><a href="javascript:void(0)">open</a>')
    assert [v.message for v in check_page("link-behaviour", html)] == [
        "nav contains no link with an href",
        "link uses a javascript: href",
    ]


def test_cdn_hosts(check_page, page):
    head = (
        '<link rel="stylesheet" href="https://cdn.jsdelivr.net/npm/x.css">'
        '<script src="https://cdn.sketchy.example/lib.js"></script>'
        '<script src="https://example.org/lib.js"></script>'
    )
    (violation,) = check_page("cdn-hosts", page("<p>x</p>", head=head))
    assert violation.message == "resource is served from untrusted CDN cdn.sketchy.example"
    assert violation.fragment == "https://cdn.sketchy.example/lib.js"


def test_resource_types(check_page, page):
    head = (
        '<link rel="stylesheet" href="css/a.css">'
        '<link href="css/b.css?v=2">'
        '<script src="js/c.js" type="text/css"></script>'
    )
    assert [v.message for v in check_page("resource-types", page("<p>x</p>", head=head))] == [
        '.css link is missing rel="stylesheet"',
        'script is typed as "text/css"',
    ]


def test_aria_attributes(check_page, page):
    html = page('<button type="button" aria-expanded="false" aria-labeledby="x">a</button>')
    (violation,) = check_page("aria-attributes", html)
    assert violation.message == "non-standard ARIA attribute aria-labeledby"


def test_font_smoothing_prefixes(check_site):
    assert check_site("font-smoothing-prefixes", {"css/base.css": "body { color: red; }"}) == []
    (violation,) = check_site("font-smoothing-prefixes", {"css/base.css": "body { -webkit-font-smoothing: antialiased; }"})
    assert violation.message == "font smoothing is declared without -moz-osx-font-smoothing"


def test_font_fallbacks(check_site):
    text = (
        'body { font-family: "Inter", Arial, sans-serif; }\n'
        "h1 { font-family: var(--font-family-base); }\n"
        "code { font-family: monospace; }\n"
        "p { font-family: inherit; }\n"
        '.fancy { font-family: "Lobster"; }\n'
    )
    (violation,) = check_site("font-fallbacks", {"css/base.css": text})
    assert violation.fragment == '.fancy { font-family: "Lobster" }'


def test_color_functions(check_site):
    text = ".a { color: rgba(26, 26, 26, 0.08); }\n.b { color: rgb(10 20 30 / 50%); }\n"
    (violation,) = check_site("color-functions", {"css/base.css": text})
    assert violation.fragment == "rgb(10 20 30 / 50%)"


def test_browser_hacks(check_site):
    text = (
        "* html .a { color: red; }\n"
        ".b { _height: 1px; }\n"
        ".c { color: red\\9; }\n"
        ".d { color: blue; }\n"
    )
    assert [v.message for v in check_site("browser-hacks", {"css/base.css": text})] == [
        "star-html selector hack",
        "underscore or star property hack",
        "backslash-nine value hack",
    ]


def test_modern_css(check_site):
    assert check_site("modern-css", {"css/base.css": ".a { display: flex; }"}) == []


def test_modern_css_reports_orphan_tokens(check_site):
    found = [v.message for v in check_site("modern-css", {"css/base.css": ".a { color: var(--color-text); }"})]
    assert found == ["custom properties are used but no :root block declares them"]


def test_modern_css_reports_legacy_only(check_site):
    found = [v.message for v in check_site("modern-css", {"css/base.css": ".a { float: left; }"})]
    assert found == ["stylesheets use none of grid, flexbox, custom properties or transitions"]
