from __future__ import annotations

"""Task registry and the named composites built from it.

Primitive tasks come from `@task`-decorated functions in `assetflow.tasks`;
the reload and watch primitives are built here because they close over the
reload session and the watch scheduler owned by this object.
"""

import importlib
import pkgutil
from typing import Dict, List, Optional

from .config import BuildConfig
from .core import Runnable, Task, TaskSpec, from_spec, make_task, parallel, sequence
from .logging import get_logger
from .reload import LiveReloadTransport, ReloadSession
from .watch import WatchBinding, WatchScheduler

log = get_logger("assetflow.pipeline")

TASKS_PACKAGE = "assetflow.tasks"

REQUIRED = (
    "clean",
    "build_scripts",
    "lint_scripts",
    "build_styles",
    "build_svgs",
    "svg_sprite",
    "optimize_images",
    "copy_files",
    "copy_libs",
)

COMMANDS = ("build", "watch", "scripts", "styles", "assets", "copy", "copy-libs")


class MissingTasksError(RuntimeError):
    def __init__(self, missing: List[str]):
        self.missing = missing
        super().__init__("Missing required tasks: " + ", ".join(missing))


def discover_tasks(package: str = TASKS_PACKAGE) -> Dict[str, TaskSpec]:
    """Import all modules in the tasks package and collect decorated functions."""
    specs: Dict[str, TaskSpec] = {}
    try:
        pkg = importlib.import_module(package)
    except ModuleNotFoundError:
        log.warning("No tasks package found.")
        return specs
    for m in pkgutil.iter_modules(pkg.__path__, prefix=f"{package}."):
        try:
            mod = importlib.import_module(m.name)
        except Exception as e:  # noqa: BLE001
            log.warning("Failed to import %s: %s", m.name, e)
            continue
        for attr_name in dir(mod):
            obj = getattr(mod, attr_name)
            spec = getattr(obj, "_task_spec", None)
            if isinstance(spec, TaskSpec):
                specs[spec.name] = spec
    return specs


class Pipelines:
    """Every named composite for one process, built once from one config."""

    def __init__(
        self,
        config: BuildConfig,
        specs: Optional[Dict[str, TaskSpec]] = None,
        session: Optional[ReloadSession] = None,
    ):
        self.config = config
        specs = discover_tasks() if specs is None else specs
        missing = [r for r in REQUIRED if r not in specs]
        if missing:
            raise MissingTasksError(missing)
        self.tasks: Dict[str, Task] = {n: from_spec(s, config) for n, s in specs.items()}
        self.session = session or ReloadSession(LiveReloadTransport(config.server))
        self.scheduler: Optional[WatchScheduler] = None

        t = self.tasks
        self.tasks["reload_browser"] = make_task(
            "reload_browser", "reload", self._notify, config
        )
        self.tasks["start_server"] = make_task(
            "start_server", "reload", self._start_server, config
        )
        self.tasks["watch_source"] = make_task(
            "watch_source", None, self._arm_watch, config
        )

        self.scripts = parallel(t["build_scripts"], t["lint_scripts"], name="scripts")
        self.styles = t["build_styles"]
        self.assets = sequence(
            t["build_svgs"], t["svg_sprite"], t["optimize_images"], name="assets"
        )
        self.copy = t["copy_files"]
        self.copy_libs = t["copy_libs"]
        self.default = sequence(
            t["clean"],
            parallel(
                t["build_scripts"],
                t["lint_scripts"],
                t["build_styles"],
                t["build_svgs"],
                t["svg_sprite"],
                t["optimize_images"],
                t["copy_files"],
                t["copy_libs"],
                name="build-all",
            ),
            name="default",
        )
        self.watch = sequence(
            self.default, t["start_server"], t["watch_source"], name="watch"
        )

    def command(self, name: str) -> Runnable:
        table = {
            "build": self.default,
            "watch": self.watch,
            "scripts": self.scripts,
            "styles": self.styles,
            "assets": self.assets,
            "copy": self.copy,
            "copy-libs": self.copy_libs,
        }
        if name not in table:
            raise KeyError(f"Unknown command: {name}")
        return table[name]

    def bindings(self) -> List[WatchBinding]:
        p = self.config.paths
        reload = self.tasks["reload_browser"]

        def bind(name: str, target: Runnable, *patterns: str) -> WatchBinding:
            return WatchBinding(
                name=name,
                patterns=patterns,
                target=sequence(target, reload, name=f"watch-{name}"),
            )

        return [
            bind("scripts", self.scripts, p.scripts.watch_glob),
            bind("copy-libs", self.copy_libs, p.libs.input),
            bind("styles", self.styles, p.styles.input),
            bind("assets", self.assets, p.svgs.input, p.images.input),
            bind("copy", self.copy, p.copy.input),
        ]

    def _notify(self, config: BuildConfig) -> None:
        self.session.notify()

    def _start_server(self, config: BuildConfig) -> None:
        self.session.start(config.resolve(config.paths.reload))

    async def _arm_watch(self, config: BuildConfig) -> None:
        if self.scheduler is None:
            self.scheduler = WatchScheduler(self.bindings(), config.root)
        self.scheduler.arm()

    def shutdown(self) -> None:
        if self.scheduler is not None:
            self.scheduler.stop()
        self.session.stop()
