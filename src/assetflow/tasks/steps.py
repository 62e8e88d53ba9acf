"""Per-file transform steps shared by the script and style tasks.

A step takes an `Asset` and returns one; `run_steps` applies a list of them in
order. Steps that write are the only ones with side effects.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Callable, Iterable

import rcssmin
import rjsmin


@dataclass(frozen=True)
class Asset:
    name: Path  # output path relative to the output directory
    text: str


Step = Callable[[Asset], Asset]


def run_steps(asset: Asset, steps: Iterable[Step]) -> Asset:
    for step in steps:
        asset = step(asset)
    return asset


def stamp(banner: str) -> Step:
    def _stamp(asset: Asset) -> Asset:
        return replace(asset, text=banner + asset.text)

    return _stamp


def optimize(asset: Asset) -> Asset:
    lines = [line.rstrip() for line in asset.text.splitlines()]
    text = re.sub(r"\n{3,}", "\n\n", "\n".join(lines)).strip("\n")
    return replace(asset, text=text + "\n")


def write(out_dir: Path) -> Step:
    def _write(asset: Asset) -> Asset:
        target = out_dir / asset.name
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(asset.text, encoding="utf-8")
        return asset

    return _write


def rename(suffix: str = ".min") -> Step:
    def _rename(asset: Asset) -> Asset:
        name = asset.name
        return replace(asset, name=name.with_name(name.stem + suffix + name.suffix))

    return _rename


def minify_js(asset: Asset) -> Asset:
    return replace(asset, text=rjsmin.jsmin(asset.text))


def minify_css(asset: Asset) -> Asset:
    return replace(asset, text=rcssmin.cssmin(asset.text))


def minified_pair(
    banner: str, out_dir: Path, minify: Step, polish: Step = optimize
) -> list[Step]:
    """Stamp, write, then write a `.min` twin re-stamped with the same banner."""
    return [
        stamp(banner),
        polish,
        write(out_dir),
        rename(".min"),
        minify,
        polish,
        stamp(banner),
        write(out_dir),
    ]
