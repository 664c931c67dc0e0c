"""Vendor sync, legacy cleanup and stylesheet minification."""

from __future__ import annotations

import io
import tarfile

import pytest
import requests

from foliokit import build
from foliokit.errors import BuildError

DIST_FILES = {
    "css/bootstrap.min.css": ".btn{display:inline-block}",
    "css/bootstrap-grid.css": ".row{display:flex}",
    "css/bootstrap-reboot.min.css": "body{margin:0}",
    "js/bootstrap.bundle.min.js": "/* bundle */",
}


def write_dist(root, files=DIST_FILES):
    for relative, text in files.items():
        target = root / "node_modules" / "bootstrap" / "dist" / relative
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(text, encoding="utf-8")


def tarball(files):
    buffer = io.BytesIO()
    with tarfile.open(fileobj=buffer, mode="w:gz") as archive:
        for name, text in files.items():
            data = text.encode("utf-8")
            info = tarfile.TarInfo(name)
            info.size = len(data)
            archive.addfile(info, io.BytesIO(data))
    return buffer.getvalue()


class FakeResponse:
    def __init__(self, content=b"", status=200):
        self.content = content
        self.status_code = status

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")


class FakeSession:
    def __init__(self, response):
        self.response = response
        self.calls = []

    def get(self, url, timeout=None):
        self.calls.append((url, timeout))
        return self.response


def vendor_tree(config):
    destination = config.resolve(config.vendor.destination)
    return sorted(path.relative_to(destination).as_posix() for path in destination.rglob("*") if path.is_file())


def test_clean_vendor_removes_legacy_paths(make_site, tmp_path):
    config = make_site({"vendor/jquery/jquery.min.js": "/* old */"})
    removed = build.clean_vendor(config)
    assert removed == [tmp_path / "vendor" / "jquery"]
    assert not (tmp_path / "vendor" / "jquery").exists()
    assert build.clean_vendor(config) == []


def test_sync_vendor_copies_dist_without_excluded_files(make_site, tmp_path):
    config = make_site({})
    write_dist(tmp_path)
    build.sync_vendor(config)
    assert vendor_tree(config) == ["css/bootstrap.min.css", "js/bootstrap.bundle.min.js"]
    assert (tmp_path / "vendor/bootstrap/css/bootstrap.min.css").read_text(encoding="utf-8") == ".btn{display:inline-block}"


def test_sync_vendor_is_idempotent(make_site, tmp_path):
    config = make_site({})
    write_dist(tmp_path)
    first = build.run_vendor(config)
    tree = vendor_tree(config)
    second = build.run_vendor(config)
    assert first == second
    assert vendor_tree(config) == tree


def test_sync_vendor_without_source_raises(make_site):
    config = make_site({})
    with pytest.raises(BuildError, match="does not exist"):
        build.sync_vendor(config)


def test_tarball_url(make_site):
    config = make_site({}, vendor={"version": "5.3.0", "registry": "https://registry.example/"})
    assert build.tarball_url(config) == "https://registry.example/bootstrap/-/bootstrap-5.3.0.tgz"


def test_sync_vendor_fetches_missing_package(make_site, tmp_path):
    config = make_site({}, vendor={"fetch_missing": True})
    data = tarball(
        {
            "package/package.json": "{}",
            "package/dist/css/bootstrap.min.css": ".btn{}",
            "package/dist/css/bootstrap-grid.css": ".row{}",
            "package/../escape.txt": "nope",
            "other/readme.md": "ignored",
        }
    )
    session = FakeSession(FakeResponse(data))
    build.sync_vendor(config, session=session)
    assert session.calls == [(build.tarball_url(config), build.FETCH_TIMEOUT)]
    assert (tmp_path / "node_modules/bootstrap/package.json").is_file()
    assert not (tmp_path / "node_modules/escape.txt").exists()
    assert vendor_tree(config) == ["css/bootstrap.min.css"]


def test_fetch_errors_become_build_errors(make_site):
    config = make_site({}, vendor={"fetch_missing": True})
    with pytest.raises(BuildError, match="Could not download"):
        build.sync_vendor(config, session=FakeSession(FakeResponse(status=404)))
    with pytest.raises(BuildError, match="Could not unpack"):
        build.sync_vendor(config, session=FakeSession(FakeResponse(b"not a tarball")))


def test_minify_stylesheets(make_site, tmp_path):
    config = make_site(
        {
            "css/base.css": "body {\n  margin: 0;\n}\n",
            "css/components.css": ".a { color: red; }\n.a { padding: 0; }\n",
            "css/base.min.css": "stale",
        }
    )
    written = build.minify_stylesheets(config)
    assert [path.name for path in written] == ["base.min.css", "components.min.css"]
    assert (tmp_path / "css/base.min.css").read_text(encoding="utf-8") == "body{margin:0}"
    assert (tmp_path / "css/components.min.css").read_text(encoding="utf-8") == ".a{color:red;padding:0}"
    assert not (tmp_path / "css/base.min.min.css").exists()


def test_minify_stylesheets_without_directory(make_site):
    assert build.minify_stylesheets(make_site({})) == []
