"""Verbatim copies: static files and prebuilt script libraries."""

from __future__ import annotations

import shutil
from pathlib import Path
from typing import List

from ..orchestrator import task
from ..orchestrator.config import AssetPaths, BuildConfig
from ..orchestrator.logging import get_logger
from ..orchestrator.utils import expand_glob, relative_to_base


def copy_matches(paths: AssetPaths, config: BuildConfig) -> List[Path]:
    out_dir = config.resolve(paths.output)
    written: List[Path] = []
    for f in expand_glob(paths.input, config.root):
        dest = out_dir / relative_to_base(f, paths.input, config.root)
        dest.parent.mkdir(parents=True, exist_ok=True)
        shutil.copy2(f, dest)
        written.append(dest)
    return written


@task(name="copy_files", feature="copy")
def copy_files(config: BuildConfig):
    written = copy_matches(config.paths.copy, config)
    get_logger("assetflow.task.copy_files").info("Copied %d file(s)", len(written))


@task(name="copy_libs", feature="libs")
def copy_libs(config: BuildConfig):
    written = copy_matches(config.paths.libs, config)
    get_logger("assetflow.task.copy_libs").info("Copied %d lib(s)", len(written))
