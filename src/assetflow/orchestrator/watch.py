from __future__ import annotations

"""Watch scheduler: file-system events -> composite re-runs.

watchdog delivers events on its observer thread; they are handed to the
asyncio loop, where every matching binding starts its own run. Runs for the
same binding are never coalesced or cancelled.
"""

import asyncio
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Optional, Set

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from .core import Runnable, TaskResult
from .logging import get_logger
from .utils import glob_base, matches

log = get_logger("assetflow.watch")


@dataclass(frozen=True)
class WatchBinding:
    name: str
    patterns: tuple[str, ...]
    target: Runnable

    def matches(self, path: Path, root: Path) -> bool:
        return any(matches(p, path, root) for p in self.patterns)


class _Handler(FileSystemEventHandler):
    def __init__(self, scheduler: "WatchScheduler"):
        self.scheduler = scheduler

    def on_any_event(self, event: FileSystemEvent) -> None:
        if event.is_directory or event.event_type in ("opened", "closed", "closed_no_write"):
            return
        paths = [event.src_path]
        dest = getattr(event, "dest_path", "")
        if dest:
            paths.append(dest)
        for p in paths:
            self.scheduler.loop.call_soon_threadsafe(
                self.scheduler.dispatch, Path(str(p))
            )


class WatchScheduler:
    def __init__(
        self,
        bindings: Iterable[WatchBinding],
        root: Path,
        loop: Optional[asyncio.AbstractEventLoop] = None,
    ):
        self.bindings: List[WatchBinding] = list(bindings)
        self.root = root
        self.loop = loop or asyncio.get_running_loop()
        self.observer: Optional[Observer] = None
        self.in_flight: Set[asyncio.Task] = set()
        self.runs = 0

    @property
    def armed(self) -> bool:
        return self.observer is not None

    def watch_dirs(self) -> List[Path]:
        dirs: Set[Path] = set()
        for b in self.bindings:
            for pattern in b.patterns:
                dirs.add(self.root / glob_base(pattern))
        # Nested directories are covered by a recursive watch on the parent
        out = sorted(dirs)
        return [d for d in out if not any(o != d and o in d.parents for o in out)]

    def arm(self) -> None:
        if self.armed:
            return
        observer = Observer()
        handler = _Handler(self)
        for d in self.watch_dirs():
            if not d.is_dir():
                log.warning("Not watching missing directory: %s", d)
                continue
            observer.schedule(handler, str(d), recursive=True)
            log.info("Watching %s", d)
        observer.daemon = True
        observer.start()
        self.observer = observer

    def stop(self) -> None:
        if self.observer is None:
            return
        self.observer.stop()
        self.observer.join(timeout=5.0)
        self.observer = None

    def dispatch(self, path: Path) -> List[asyncio.Task]:
        """Start one independent run for every binding matching `path`."""
        started: List[asyncio.Task] = []
        for binding in self.bindings:
            if not binding.matches(path, self.root):
                continue
            log.info("Change in %s -> %s", path, binding.name)
            t = self.loop.create_task(self._run(binding, path))
            self.in_flight.add(t)
            t.add_done_callback(self.in_flight.discard)
            started.append(t)
        return started

    async def _run(self, binding: WatchBinding, path: Path) -> TaskResult:
        self.runs += 1
        result = await binding.target.run()
        if result.ok:
            log.info("Rebuilt %s after change in %s", binding.name, path.name)
        else:
            log.error(
                "Rebuild %s failed (%s); still watching",
                binding.name,
                ", ".join(result.failed),
            )
        return result

    async def drain(self) -> None:
        while self.in_flight:
            await asyncio.gather(*list(self.in_flight))
