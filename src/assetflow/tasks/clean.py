from __future__ import annotations

import os
import shutil

from ..orchestrator import task
from ..orchestrator.config import BuildConfig
from ..orchestrator.logging import get_logger


@task(name="clean", feature="clean")
def clean(config: BuildConfig):
    """Remove the whole output directory and recreate it empty."""
    logger = get_logger("assetflow.task.clean")
    out = config.resolve(config.paths.output)
    root = config.root.resolve()
    target = out.resolve()
    if target == root or target in root.parents:
        raise ValueError(f"Refusing to clean {target}: it contains the project root")
    if os.path.exists(target):
        shutil.rmtree(target)
        logger.info("Removed %s", target)
    target.mkdir(parents=True, exist_ok=True)
