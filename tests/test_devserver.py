"""Reload injection, file watching and the preview server."""

from __future__ import annotations

import asyncio
import os

import pytest
import requests
from httpx import ASGITransport, AsyncClient

from foliokit.devserver import (
    RELOAD_PATH,
    RELOAD_SNIPPET,
    FileWatcher,
    PreviewServer,
    ReloadState,
    create_app,
    inject_reload_script,
)


def test_inject_before_closing_body():
    html = "<html><body><p>x</p></BODY></html>"
    injected = inject_reload_script(html)
    assert injected == "<html><body><p>x</p>" + RELOAD_SNIPPET + "</BODY></html>"


def test_inject_appends_without_body():
    assert inject_reload_script("<p>x</p>") == "<p>x</p>" + RELOAD_SNIPPET


def test_reload_state_bumps():
    state = ReloadState()
    assert state.version == 0
    assert state.bump() == 1
    assert state.version == 1


def touch(path, text, mtime):
    path.write_text(text, encoding="utf-8")
    os.utime(path, (mtime, mtime))


def test_watcher_poll_detects_changes(tmp_path):
    (tmp_path / "css").mkdir()
    touch(tmp_path / "index.html", "<p>a</p>", 1_000_000)
    touch(tmp_path / "css" / "base.css", "a{}", 1_000_000)
    state = ReloadState()
    watcher = FileWatcher(tmp_path, ["css/*.css", "*.html"], state)
    assert set(watcher.snapshot()) == {tmp_path / "index.html", tmp_path / "css" / "base.css"}
    watcher.poll()
    version = state.version
    assert watcher.poll() is False

    touch(tmp_path / "css" / "base.css", "a{color:red}", 1_000_100)
    assert watcher.poll() is True
    assert state.version == version + 1

    touch(tmp_path / "css" / "base.min.css", "a{}", 1_000_200)
    assert watcher.poll() is False

    touch(tmp_path / "about.html", "<p>b</p>", 1_000_300)
    assert watcher.poll() is True
    (tmp_path / "about.html").unlink()
    assert watcher.poll() is True
    assert state.version == version + 3


def test_watcher_thread_starts_and_stops(tmp_path):
    watcher = FileWatcher(tmp_path, ["*.html"], ReloadState(), interval=0.05)
    watcher.start()
    assert watcher._thread.is_alive()
    watcher.stop()
    assert not watcher._thread.is_alive()


@pytest.fixture()
def preview_site(make_site):
    return make_site(
        {
            "index.html": "<!DOCTYPE html><html><body><h1>Home</h1></body></html>",
            "css/base.css": "body{margin:0}",
        }
    )


def get(app, *paths):
    async def fetch_all():
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://preview") as client:
            return [await client.get(path) for path in paths]

    return asyncio.run(fetch_all())


def test_app_injects_reload_client(preview_site):
    (resp,) = get(create_app(preview_site, ReloadState()), "/")
    assert resp.status_code == 200
    assert RELOAD_SNIPPET in resp.text
    assert resp.text.index(RELOAD_SNIPPET) < resp.text.index("</body>")
    assert resp.headers["cache-control"] == "no-store"
    assert int(resp.headers["content-length"]) == len(resp.content)


def test_app_reports_reload_version(preview_site):
    state = ReloadState()
    app = create_app(preview_site, state)
    (before,) = get(app, RELOAD_PATH)
    state.bump()
    (after,) = get(app, RELOAD_PATH + "?t=1")
    assert before.json() == {"version": 0}
    assert after.json() == {"version": 1}


def test_app_serves_static_files_unchanged(preview_site):
    css, missing = get(create_app(preview_site, ReloadState()), "/css/base.css", "/nope.html")
    assert css.text == "body{margin:0}"
    assert css.headers["content-type"].startswith("text/css")
    assert missing.status_code == 404


def test_preview_server_binds_ephemeral_port(preview_site):
    state = ReloadState()
    with PreviewServer(preview_site, state=state, port=0) as preview:
        assert preview.port > 0
        page = requests.get(preview.url, timeout=5)
        state.bump()
        version = requests.get(preview.url.rstrip("/") + RELOAD_PATH, timeout=5)
    assert RELOAD_SNIPPET in page.text
    assert version.json() == {"version": 1}
    assert not preview._thread.is_alive()
