"""Raster image compression with Pillow."""

from __future__ import annotations

import shutil
from pathlib import Path

from PIL import Image

from ..orchestrator import task
from ..orchestrator.config import BuildConfig
from ..orchestrator.logging import get_logger
from ..orchestrator.utils import expand_glob, relative_to_base

JPEG_QUALITY = 70


def optimize_image(src: Path, dest: Path) -> None:
    dest.parent.mkdir(parents=True, exist_ok=True)
    with Image.open(src) as img:
        fmt = img.format
        if fmt == "JPEG":
            if img.mode not in ("RGB", "L", "CMYK"):
                img = img.convert("RGB")
            img.save(dest, "JPEG", quality=JPEG_QUALITY, progressive=True, optimize=True)
        elif fmt == "PNG":
            img.save(dest, "PNG", optimize=True)
        elif fmt == "GIF":
            img.save(dest, "GIF", save_all=True, optimize=True, interlace=True)
        else:
            shutil.copy2(src, dest)


@task(name="optimize_images", feature="images")
def optimize_images(config: BuildConfig):
    logger = get_logger("assetflow.task.optimize_images")
    paths = config.paths.images
    out_dir = config.resolve(paths.output)
    files = expand_glob(paths.input, config.root)
    for f in files:
        optimize_image(f, out_dir / relative_to_base(f, paths.input, config.root))
    logger.info("Optimized %d image(s) into %s", len(files), out_dir)
