"""Sass/SCSS compilation into a stamped `.css` plus `.min.css` pair."""

from __future__ import annotations

from pathlib import Path

import sass

from ..orchestrator import task
from ..orchestrator.config import BuildConfig
from ..orchestrator.logging import get_logger
from ..orchestrator.utils import expand_glob, relative_to_base
from .steps import Asset, minified_pair, minify_css, run_steps


def compile_file(path: Path) -> str:
    return sass.compile(
        filename=str(path),
        output_style="expanded",
        source_comments=True,
        include_paths=[str(path.parent)],
    )


@task(name="build_styles", feature="styles")
def build_styles(config: BuildConfig):
    logger = get_logger("assetflow.task.build_styles")
    paths = config.paths.styles
    out_dir = config.resolve(paths.output)
    steps = minified_pair(config.banner, out_dir, minify_css)

    count = 0
    for src in expand_glob(paths.input, config.root):
        # Partials are only pulled in through @import
        if src.name.startswith("_"):
            continue
        rel = relative_to_base(src, paths.input, config.root).with_suffix(".css")
        run_steps(Asset(rel, compile_file(src)), steps)
        count += 1
    logger.info("Compiled %d stylesheet(s) into %s", count, out_dir)
