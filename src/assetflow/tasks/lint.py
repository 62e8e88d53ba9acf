"""Script linting.

Reports problems as warnings and never fails the build on them; only an
unreadable file fails the task.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import List

import esprima
from esprima.error_handler import Error as EsprimaError

from ..orchestrator import task
from ..orchestrator.config import BuildConfig
from ..orchestrator.logging import get_logger
from ..orchestrator.utils import expand_glob


@dataclass(frozen=True)
class Problem:
    path: Path
    line: int
    message: str

    def __str__(self) -> str:
        return f"{self.path}:{self.line}: {self.message}"


def _field(err, key: str, default=None):
    # Fatal errors are Error objects; tolerant ones come back as dicts
    if isinstance(err, dict):
        return err.get(key, default)
    return getattr(err, key, default)


def _problem(path: Path, err) -> Problem:
    message = _field(err, "description") or _field(err, "message") or str(err)
    return Problem(path, int(_field(err, "lineNumber", 0) or 0), str(message))


def lint_source(source: str, path: Path) -> List[Problem]:
    problems: List[Problem] = []
    try:
        tree = esprima.parseScript(source, {"tolerant": True})
    except EsprimaError as e:
        return [_problem(path, e)]
    for err in getattr(tree, "errors", None) or []:
        problems.append(_problem(path, err))

    try:
        tokens = esprima.tokenize(source, {"loc": True})
    except EsprimaError:
        # Already reported by the tolerant parse
        tokens = []
    for token in tokens:
        if token.type == "Punctuator" and token.value in ("==", "!="):
            problems.append(
                Problem(
                    path,
                    token.loc.start.line,
                    f"Expected '{token.value}=' and instead saw '{token.value}'",
                )
            )

    for lineno, line in enumerate(source.splitlines(), start=1):
        if line != line.rstrip():
            problems.append(Problem(path, lineno, "Trailing whitespace"))
    return sorted(problems, key=lambda p: p.line)


@task(name="lint_scripts", feature="scripts")
def lint_scripts(config: BuildConfig) -> List[Problem]:
    logger = get_logger("assetflow.task.lint_scripts")
    problems: List[Problem] = []
    for p in expand_glob(config.paths.scripts.watch_glob, config.root):
        rel = p.relative_to(config.root)
        problems.extend(lint_source(p.read_text(encoding="utf-8"), rel))
    for problem in problems:
        logger.warning("%s", problem)
    logger.info("Lint: %d problem(s)", len(problems))
    return problems
