"""Local preview server with polling file watcher and browser reload."""

from __future__ import annotations

import logging
import threading
import time
from pathlib import Path
from typing import Dict, List, Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import HTMLResponse, JSONResponse
from fastapi.staticfiles import StaticFiles

from .config import SiteConfig
from .errors import ServerError

logger = logging.getLogger("foliokit.devserver")

RELOAD_PATH = "/__livereload"
RELOAD_SNIPPET = """<script>
(function () {
  var version = null;
  function poll() {
    fetch("%s").then(function (resp) { return resp.json(); }).then(function (data) {
      if (version !== null && data.version !== version) { window.location.reload(); }
      version = data.version;
    }).catch(function () {}).then(function () { setTimeout(poll, 1000); });
  }
  poll();
})();
</script>
""" % RELOAD_PATH


def inject_reload_script(html: str) -> str:
    """Insert the reload client before ``</body>``, or append it."""
    index = html.lower().rfind("</body>")
    if index == -1:
        return html + RELOAD_SNIPPET
    return html[:index] + RELOAD_SNIPPET + html[index:]


class ReloadState:
    """Monotonic version counter shared by the watcher and request handlers."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._version = 0

    @property
    def version(self) -> int:
        with self._lock:
            return self._version

    def bump(self) -> int:
        with self._lock:
            self._version += 1
            return self._version


class FileWatcher:
    """Polls glob patterns under a root and bumps the reload state on change."""

    def __init__(
        self,
        root: Path,
        patterns: List[str],
        state: ReloadState,
        interval: float = 0.5,
    ) -> None:
        self.root = root
        self.patterns = patterns
        self.state = state
        self.interval = interval
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._snapshot: Dict[Path, float] = {}

    def snapshot(self) -> Dict[Path, float]:
        mtimes: Dict[Path, float] = {}
        for pattern in self.patterns:
            for path in self.root.glob(pattern):
                # Output of the css task must not retrigger itself.
                if path.name.endswith(".min.css") or not path.is_file():
                    continue
                try:
                    mtimes[path] = path.stat().st_mtime
                except OSError:
                    continue
        return mtimes

    def poll(self) -> bool:
        """Compare against the last snapshot; return True if anything changed."""
        current = self.snapshot()
        changed = current != self._snapshot
        if changed:
            paths = set(current) ^ set(self._snapshot) | {
                path for path in current if self._snapshot.get(path) not in (None, current[path])
            }
            for path in sorted(paths):
                logger.info("Changed: %s", path.relative_to(self.root).as_posix())
            version = self.state.bump()
            logger.debug("Reload version is now %d", version)
        self._snapshot = current
        return changed

    def _run(self) -> None:
        while not self._stop.wait(self.interval):
            self.poll()

    def start(self) -> None:
        self._snapshot = self.snapshot()
        self._thread = threading.Thread(target=self._run, name="foliokit-watcher", daemon=True)
        self._thread.start()

    def stop(self) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout=self.interval * 4)


def create_app(config: SiteConfig, state: ReloadState) -> FastAPI:
    """Build the preview app: reload endpoint, injecting middleware, static site root."""
    app = FastAPI(title="foliokit preview", docs_url=None, redoc_url=None, openapi_url=None)

    @app.middleware("http")
    async def inject_reload_client(request: Request, call_next):
        response = await call_next(request)
        is_html = response.headers.get("content-type", "").startswith("text/html")
        if request.method != "GET" or response.status_code != 200 or not is_html:
            response.headers["Cache-Control"] = "no-store"
            return response
        body = b"".join([chunk async for chunk in response.body_iterator])
        html = inject_reload_script(body.decode("utf-8"))
        return HTMLResponse(content=html, headers={"Cache-Control": "no-store"})

    @app.get(RELOAD_PATH)
    async def reload_version() -> JSONResponse:
        return JSONResponse({"version": state.version})

    app.mount("/", StaticFiles(directory=str(config.root), html=True), name="site")
    return app


def _uvicorn_config(app: FastAPI, host: str, port: int) -> uvicorn.Config:
    return uvicorn.Config(app, host=host, port=port, log_config=None, access_log=False)


class PreviewServer:
    """Runs the preview app under uvicorn on a background thread.

    Use as a context manager; ``port=0`` binds an ephemeral port, readable
    from :attr:`url` once started.
    """

    def __init__(
        self,
        config: SiteConfig,
        state: Optional[ReloadState] = None,
        host: str = "127.0.0.1",
        port: int = 0,
        startup_timeout: float = 10.0,
    ) -> None:
        self.state = state or ReloadState()
        self.host = host
        self.startup_timeout = startup_timeout
        self.server = uvicorn.Server(_uvicorn_config(create_app(config, self.state), host, port))
        self._thread: Optional[threading.Thread] = None

    @property
    def port(self) -> int:
        return self.server.servers[0].sockets[0].getsockname()[1]

    @property
    def url(self) -> str:
        return f"http://{self.host}:{self.port}/"

    def start(self) -> None:
        self._thread = threading.Thread(target=self.server.run, name="foliokit-preview", daemon=True)
        self._thread.start()
        deadline = time.monotonic() + self.startup_timeout
        while not self.server.started:
            if not self._thread.is_alive() or time.monotonic() > deadline:
                raise ServerError(f"Preview server did not start on {self.host}")
            time.sleep(0.05)
        logger.debug("Preview server listening at %s", self.url)

    def stop(self) -> None:
        self.server.should_exit = True
        if self._thread is not None:
            self._thread.join(timeout=self.startup_timeout)

    def __enter__(self) -> "PreviewServer":
        self.start()
        return self

    def __exit__(self, *exc_info) -> None:
        self.stop()


def serve(config: SiteConfig, host: Optional[str] = None, port: Optional[int] = None) -> None:
    """Serve the site until interrupted, reloading browsers on file changes."""
    state = ReloadState()
    watcher = FileWatcher(config.root, config.dev.watch, state, interval=config.dev.poll_interval)
    bound_host = host or config.dev.host
    bound_port = config.dev.port if port is None else port
    server = uvicorn.Server(_uvicorn_config(create_app(config, state), bound_host, bound_port))
    watcher.start()
    logger.info("Serving %s at http://%s:%d/", config.root, bound_host, bound_port)
    try:
        server.run()
    except KeyboardInterrupt:
        logger.info("Stopping dev server")
    finally:
        watcher.stop()
