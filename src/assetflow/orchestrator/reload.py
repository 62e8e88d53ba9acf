from __future__ import annotations

"""Live-reload session.

The session owns one transport and the lifecycle
`uninitialized -> active -> stopped`. `start` is idempotent and only takes
effect once; if the transport fails to start the session stays
uninitialized. `notify` is a no-op unless the session is active, so
callers never need to check the reload toggle themselves.
"""

import asyncio
import enum
import threading
from pathlib import Path
from typing import Optional, Protocol

from livereload import Server
from livereload.handlers import LiveReloadHandler
from tornado.ioloop import IOLoop

from .config import ServerConfig
from .logging import get_logger

log = get_logger("assetflow.reload")


class ReloadTransport(Protocol):
    def start(self, root: Path) -> None: ...

    def reload(self) -> None: ...

    def stop(self) -> None: ...


class LiveReloadTransport:
    """Serve `root` with livereload on a background thread.

    `start` returns once the server's IO loop is running, and re-raises
    whatever stopped it from getting there (e.g. a port already in use).
    """

    def __init__(self, server: ServerConfig):
        self.server = server
        self._ioloop: Optional[IOLoop] = None
        self._thread: Optional[threading.Thread] = None
        self._ready = threading.Event()
        self._error: Optional[BaseException] = None

    def start(self, root: Path) -> None:
        root.mkdir(parents=True, exist_ok=True)
        self._thread = threading.Thread(
            target=self._serve, args=(root,), name="assetflow-livereload", daemon=True
        )
        self._thread.start()
        if not self._ready.wait(timeout=5.0):
            raise TimeoutError(f"Live-reload server did not start within 5s for {root}")
        if self._error is not None:
            self._ioloop = None
            raise self._error
        log.info(
            "Serving %s at http://%s:%d", root, self.server.host, self.server.port
        )

    def _serve(self, root: Path) -> None:
        # tornado needs an asyncio loop bound to this thread
        asyncio.set_event_loop(asyncio.new_event_loop())
        self._ioloop = IOLoop.current()
        # Runs only once serve() has bound its sockets and started the loop
        self._ioloop.add_callback(self._ready.set)
        try:
            Server().serve(
                root=str(root),
                host=self.server.host,
                port=self.server.port,
                liveport=self.server.live_port,
                open_url_delay=0.5 if self.server.open_browser else None,
                restart_delay=0,
            )
        except Exception as e:  # noqa: BLE001
            self._error = e
            self._ready.set()

    def reload(self) -> None:
        if self._ioloop is None:
            return
        self._ioloop.add_callback(LiveReloadHandler.reload_waiters, "*")

    def stop(self) -> None:
        if self._ioloop is not None:
            self._ioloop.add_callback(self._ioloop.stop)
        if self._thread is not None:
            self._thread.join(timeout=5.0)


class SessionState(str, enum.Enum):
    UNINITIALIZED = "uninitialized"
    ACTIVE = "active"
    STOPPED = "stopped"


class ReloadSession:
    def __init__(self, transport: ReloadTransport):
        self.transport = transport
        self.state = SessionState.UNINITIALIZED
        self.root: Optional[Path] = None
        self.notifications = 0
        self._lock = threading.Lock()

    @property
    def active(self) -> bool:
        return self.state is SessionState.ACTIVE

    def start(self, root: Path) -> None:
        with self._lock:
            if self.state is not SessionState.UNINITIALIZED:
                log.debug("Reload session already %s; ignoring start", self.state.value)
                return
            self.transport.start(root)
            self.root = root
            self.state = SessionState.ACTIVE
        log.info("Reload session active for %s", root)

    def notify(self) -> None:
        if not self.active:
            return
        self.notifications += 1
        log.info("Reload browsers (#%d)", self.notifications)
        self.transport.reload()

    def stop(self) -> None:
        with self._lock:
            if not self.active:
                return
            self.state = SessionState.STOPPED
            self.transport.stop()
        log.info("Reload session stopped")
