"""Local preview sessions: one loopback HTTP listener per rendered report.

A :class:`PreviewRegistry` is owned by whichever entry point runs the event
loop (the tool server or a CLI command) and tracks the ports it has handed
out. Ports are claimed by binding a socket synchronously, so two launches in
the same loop never race for the same port.
"""

from __future__ import annotations

import asyncio
import contextlib
import errno
import logging
import socket
import webbrowser
from pathlib import Path
from typing import Any, Dict, Literal, Mapping, Optional

import uvicorn

from core.config import Settings, get_settings
from core.errors import PreviewLaunchError
from preview.app import create_preview_app
from preview.content import find_app_html, inject_config
from reporting.generator import ReportGenerator

logger = logging.getLogger(__name__)

SessionState = Literal["unstarted", "listening", "closed", "auto-closed"]


class _PreviewServer(uvicorn.Server):
    """uvicorn server that leaves signal handling to the host process."""

    def install_signal_handlers(self) -> None:
        pass

    @contextlib.contextmanager
    def capture_signals(self):
        yield


def bind_socket(host: str, port: int) -> socket.socket:
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
    try:
        sock.bind((host, port))
    except OSError:
        sock.close()
        raise
    return sock


def preview_url(host: str, port: int) -> str:
    # A wildcard bind is not a browsable address.
    if host in ("", "0.0.0.0"):
        host = "localhost"
    return f"http://{host}:{port}"


class PreviewSession:
    """A running preview listener."""

    def __init__(
        self,
        registry: "PreviewRegistry",
        port: int,
        url: str,
        html: str,
        auto_close_seconds: float | None,
    ):
        self.port = port
        self.url = url
        self.html = html
        self.auto_close_seconds = auto_close_seconds
        self.state: SessionState = "unstarted"
        self._registry = registry
        self._server: Optional[uvicorn.Server] = None
        self._task: Optional[asyncio.Task] = None
        self._timer: Optional[asyncio.TimerHandle] = None
        self._closed = asyncio.Event()

    @property
    def is_open(self) -> bool:
        return self.state in ("unstarted", "listening")

    def close(self) -> None:
        """Stop the listener and release the port. Safe to call repeatedly."""
        self._shutdown("closed")

    def _auto_close(self) -> None:
        logger.info("Preview on port %d auto-closed", self.port)
        self._shutdown("auto-closed")

    def _shutdown(self, state: SessionState) -> None:
        if not self.is_open:
            return
        self.state = state
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        if self._server is not None:
            self._server.should_exit = True
        self._registry._release(self)
        self._closed.set()

    async def wait_closed(self) -> None:
        """Block until the session is closed and the listener has stopped."""
        await self._closed.wait()
        if self._task is not None:
            with contextlib.suppress(asyncio.CancelledError):
                await self._task


class PreviewRegistry:
    """Tracks the preview sessions started from one event loop."""

    def __init__(
        self,
        settings: Settings | None = None,
        *,
        open_browser: bool | None = None,
        generator: ReportGenerator | None = None,
    ):
        self.settings = settings or get_settings()
        self.open_browser = (
            self.settings.preview_open_browser if open_browser is None else open_browser
        )
        self.generator = generator or ReportGenerator()
        self.sessions: Dict[int, PreviewSession] = {}

    @property
    def active_ports(self) -> list[int]:
        return sorted(self.sessions)

    def next_port(self, preferred_port: int) -> int:
        port = preferred_port
        while port in self.sessions:
            port += 1
        return port

    def resolve_html(
        self,
        app_name: str,
        config: Mapping[str, Any],
        custom_html: str | None = None,
    ) -> str:
        if custom_html is not None:
            return custom_html

        path = find_app_html(
            app_name, self.settings.apps_dist_dir, self.settings.apps_source_dir
        )
        if path is None:
            logger.warning("No built UI found for %s", app_name)
            return self.generator.render_app_not_found(
                app_name, dict(config), f"index.html not found for {app_name}"
            )
        try:
            html = path.read_text(encoding="utf-8")
        except OSError as exc:
            logger.warning("Could not read %s: %s", path, exc)
            return self.generator.render_app_not_found(app_name, dict(config), str(exc))
        return inject_config(html, config)

    def _claim_port(self, preferred_port: int) -> tuple[int, socket.socket]:
        host = self.settings.preview_host
        port = self.next_port(preferred_port)
        try:
            return port, bind_socket(host, port)
        except OSError as exc:
            if exc.errno != errno.EADDRINUSE:
                raise PreviewLaunchError(f"Cannot bind {host}:{port}: {exc}") from exc
            logger.info("Port %d in use, trying %d", port, port + 1)

        retry = self.next_port(port + 1)
        try:
            return retry, bind_socket(host, retry)
        except OSError as exc:
            raise PreviewLaunchError(f"Cannot bind {host}:{retry}: {exc}") from exc

    async def launch(
        self,
        app_name: str,
        config: Mapping[str, Any],
        preferred_port: int = 3456,
        auto_close_seconds: float | None = None,
        custom_html: str | None = None,
    ) -> PreviewSession:
        """Serve a page on loopback and open it in the browser.

        ``custom_html`` is served verbatim; otherwise the named app's built
        page is served with ``config`` injected. ``auto_close_seconds``
        defaults to the configured auto-close window; zero disables it.
        """
        if auto_close_seconds is None:
            auto_close_seconds = self.settings.auto_close_seconds
        html = self.resolve_html(app_name, config, custom_html)

        port, sock = self._claim_port(preferred_port)
        url = preview_url(self.settings.preview_host, port)
        session = PreviewSession(self, port, url, html, auto_close_seconds or None)
        self.sessions[port] = session

        app = create_preview_app(html, self.settings.apps_dist_dir / "assets")
        server = _PreviewServer(
            uvicorn.Config(
                app,
                log_config=None,
                access_log=False,
                lifespan="off",
            )
        )
        session._server = server
        session._task = asyncio.create_task(server.serve(sockets=[sock]))

        while not server.started:
            if session._task.done():
                break
            await asyncio.sleep(0.01)

        if not server.started:
            session.close()
            sock.close()
            exc = session._task.exception() if not session._task.cancelled() else None
            raise PreviewLaunchError(f"Preview listener failed on port {port}: {exc}")

        if session.is_open:
            session.state = "listening"
            logger.info("%s preview at %s", app_name, url)
            if auto_close_seconds and auto_close_seconds > 0:
                loop = asyncio.get_running_loop()
                session._timer = loop.call_later(auto_close_seconds, session._auto_close)
            if self.open_browser:
                self._open_browser(url)
        return session

    @staticmethod
    def _open_browser(url: str) -> None:
        try:
            opened = webbrowser.open(url)
        except (webbrowser.Error, OSError) as exc:
            logger.warning("Could not open browser for %s: %s", url, exc)
            return
        if not opened:
            logger.warning("No browser available to open %s", url)

    def close(self, port: int) -> None:
        session = self.sessions.get(port)
        if session is not None:
            session.close()

    def close_all(self) -> None:
        for session in list(self.sessions.values()):
            session.close()

    def _release(self, session: PreviewSession) -> None:
        if self.sessions.get(session.port) is session:
            del self.sessions[session.port]


__all__ = ["PreviewRegistry", "PreviewSession", "bind_socket", "preview_url"]
