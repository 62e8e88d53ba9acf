from __future__ import annotations

import asyncio
import enum
import inspect
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Optional, Sequence as Seq, Union

from .config import BuildConfig, FEATURES
from .logging import get_logger


# Work receives the build config; it may be a plain function (run in a worker
# thread) or a coroutine function (awaited on the loop).
Work = Callable[[BuildConfig], Union[None, Awaitable[None]]]


@dataclass
class TaskSpec:
    name: str
    feature: Optional[str]
    fn: Work


def task(name: str, feature: Optional[str] = None):
    """Decorator to declare a build task on a function.

    The wrapped function receives the `BuildConfig` and performs its file I/O
    directly. `feature` names the toggle that gates it; `None` means always on.
    """
    if feature is not None and feature not in FEATURES:
        raise ValueError(f"Unknown feature for task {name}: {feature}")

    def deco(fn: Work):
        spec = TaskSpec(name=name, feature=feature, fn=fn)
        setattr(fn, "_task_spec", spec)
        return fn

    return deco


class Status(str, enum.Enum):
    OK = "ok"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass(frozen=True)
class TaskResult:
    name: str
    status: Status
    error: Optional[BaseException] = None
    failed: tuple[str, ...] = field(default_factory=tuple)

    @property
    def ok(self) -> bool:
        return self.status is not Status.FAILED


class Runnable:
    """Anything that can be awaited for a `TaskResult`: tasks and composites."""

    name: str

    async def run(self) -> TaskResult:  # pragma: no cover - interface
        raise NotImplementedError


class Task(Runnable):
    """A named unit of work gated by one feature toggle.

    A disabled task completes as a successful no-op. Exceptions raised by the
    work become a failed result; they never escape `run()`.
    """

    def __init__(
        self, name: str, feature: Optional[str], work: Work, config: BuildConfig
    ):
        self.name = name
        self.feature = feature
        self.work = work
        self.config = config
        self.logger = get_logger(f"assetflow.task.{name}")

    def __repr__(self) -> str:
        return f"Task({self.name!r}, feature={self.feature!r})"

    async def run(self) -> TaskResult:
        if not self.config.settings.enabled(self.feature):
            self.logger.info("Skip (disabled: %s): %s", self.feature, self.name)
            return TaskResult(self.name, Status.SKIPPED)
        self.logger.info("Run: %s", self.name)
        try:
            if inspect.iscoroutinefunction(self.work):
                await self.work(self.config)
            else:
                await asyncio.to_thread(self.work, self.config)
        except Exception as e:  # noqa: BLE001
            self.logger.exception("Task failed: %s", self.name)
            return TaskResult(self.name, Status.FAILED, error=e, failed=(self.name,))
        self.logger.info("Done: %s", self.name)
        return TaskResult(self.name, Status.OK)


def make_task(name: str, feature: Optional[str], work: Work, config: BuildConfig) -> Task:
    return Task(name, feature, work, config)


def from_spec(spec: TaskSpec, config: BuildConfig) -> Task:
    return Task(spec.name, spec.feature, spec.fn, config)


class Sequence(Runnable):
    """Children run strictly in order; the first failure stops the chain."""

    def __init__(self, *children: Runnable, name: str = "sequence"):
        self.name = name
        self.children: Seq[Runnable] = children
        self.logger = get_logger(f"assetflow.{name}")

    def __repr__(self) -> str:
        return f"Sequence({', '.join(c.name for c in self.children)})"

    async def run(self) -> TaskResult:
        for child in self.children:
            result = await child.run()
            if not result.ok:
                self.logger.error(
                    "Stopped after %s failed (%s)", child.name, ", ".join(result.failed)
                )
                return TaskResult(
                    self.name, Status.FAILED, error=result.error, failed=result.failed
                )
        return TaskResult(self.name, Status.OK)


class Parallel(Runnable):
    """Children start together; completes once every child has completed."""

    def __init__(self, *children: Runnable, name: str = "parallel"):
        self.name = name
        self.children: Seq[Runnable] = children
        self.logger = get_logger(f"assetflow.{name}")

    def __repr__(self) -> str:
        return f"Parallel({', '.join(c.name for c in self.children)})"

    async def run(self) -> TaskResult:
        results = await asyncio.gather(*(child.run() for child in self.children))
        failed = tuple(name for r in results if not r.ok for name in r.failed)
        if failed:
            error = next(r.error for r in results if not r.ok)
            return TaskResult(self.name, Status.FAILED, error=error, failed=failed)
        return TaskResult(self.name, Status.OK)


def sequence(*children: Runnable, name: str = "sequence") -> Sequence:
    return Sequence(*children, name=name)


def parallel(*children: Runnable, name: str = "parallel") -> Parallel:
    return Parallel(*children, name=name)
