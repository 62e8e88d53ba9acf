"""SVG optimisation and sprite assembly."""

from __future__ import annotations

import xml.etree.ElementTree as ET
from pathlib import Path
from typing import List

from scour import scour

from ..orchestrator import task
from ..orchestrator.config import BuildConfig
from ..orchestrator.logging import get_logger
from ..orchestrator.utils import expand_glob

SVG_NS = "http://www.w3.org/2000/svg"
SPRITE_NAME = "sprite.svg"

ET.register_namespace("", SVG_NS)
ET.register_namespace("xlink", "http://www.w3.org/1999/xlink")


def _options(id_prefix: str | None = None):
    options = scour.sanitizeOptions()
    options.strip_comments = True
    options.remove_metadata = True
    options.enable_viewboxing = True
    options.strip_xml_prolog = True
    options.indent_type = "none"
    options.newlines = False
    if id_prefix is not None:
        options.shorten_ids = True
        options.shorten_ids_prefix = id_prefix
    return options


def optimize_svg(text: str, id_prefix: str | None = None) -> str:
    return scour.scourString(text, _options(id_prefix))


def build_sprite(files: List[Path]) -> str:
    """Store every SVG as a `<symbol id=stem>` inside one inline SVG."""
    root = ET.Element(f"{{{SVG_NS}}}svg")
    for f in files:
        el = ET.fromstring(optimize_svg(f.read_text(encoding="utf-8"), f"{f.stem}-"))
        symbol = ET.SubElement(root, f"{{{SVG_NS}}}symbol", id=f.stem)
        view_box = el.get("viewBox")
        if view_box:
            symbol.set("viewBox", view_box)
        for child in list(el):
            symbol.append(child)
    return ET.tostring(root, encoding="unicode")


@task(name="build_svgs", feature="svgs")
def build_svgs(config: BuildConfig):
    logger = get_logger("assetflow.task.build_svgs")
    paths = config.paths.svgs
    out_dir = config.resolve(paths.output)
    files = expand_glob(paths.input, config.root)
    out_dir.mkdir(parents=True, exist_ok=True)
    for f in files:
        (out_dir / f.name).write_text(
            optimize_svg(f.read_text(encoding="utf-8")), encoding="utf-8"
        )
    logger.info("Optimized %d SVG(s) into %s", len(files), out_dir)


@task(name="svg_sprite", feature="sprite")
def svg_sprite(config: BuildConfig):
    logger = get_logger("assetflow.task.svg_sprite")
    paths = config.paths.svgs
    files = expand_glob(paths.input, config.root)
    if not files:
        logger.info("No SVGs for sprite")
        return
    out = config.resolve(paths.output) / SPRITE_NAME
    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_text(build_sprite(files), encoding="utf-8")
    logger.info("Wrote sprite with %d symbol(s): %s", len(files), out)
