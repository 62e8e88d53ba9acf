"""Script bundling.

Each entry directly under the scripts input is one unit:
- a `.js` file is processed on its own;
- a directory is concatenated into `<dir>.js`. With polyfill separation on,
  `<dir>.js` leaves out `*.polyfill.js` files and a second bundle
  `<dir>.polyfills.js` carries every file.

Every bundle then goes through the shared minified-pair steps, producing
`<name>.js` and `<name>.min.js`, both stamped with the banner.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import List, Union

from ..orchestrator import task
from ..orchestrator.config import BuildConfig
from ..orchestrator.logging import get_logger
from ..orchestrator.utils import expand_glob
from .steps import Asset, minified_pair, minify_js, run_steps

POLYFILLS_SUFFIX = ".polyfills"


@dataclass(frozen=True)
class SingleFile:
    path: Path


@dataclass(frozen=True)
class DirectoryGroup:
    path: Path


ScriptUnit = Union[SingleFile, DirectoryGroup]


def discover_units(config: BuildConfig) -> List[ScriptUnit]:
    units: List[ScriptUnit] = []
    for p in expand_glob(config.paths.scripts.input, config.root, include_dirs=True):
        if p.is_dir():
            units.append(DirectoryGroup(p))
        elif p.suffix == ".js":
            units.append(SingleFile(p))
    return units


def _concat(files: List[Path]) -> str:
    return "\n".join(f.read_text(encoding="utf-8") for f in files)


def bundles(unit: ScriptUnit, polyfill_suffix: str, separate: bool) -> List[Asset]:
    """Map one unit to the one or two bundles it produces."""
    if isinstance(unit, SingleFile):
        return [Asset(Path(unit.path.name), unit.path.read_text(encoding="utf-8"))]

    files = sorted(f for f in unit.path.glob("*.js") if f.is_file())
    name = unit.path.name
    if not separate or not polyfill_suffix:
        groups = [(f"{name}.js", files)]
    else:
        main = [f for f in files if not f.name.endswith(polyfill_suffix)]
        groups = [(f"{name}.js", main), (f"{name}{POLYFILLS_SUFFIX}.js", files)]
    # Nothing to concatenate means no bundle at all
    return [Asset(Path(n), _concat(fs)) for n, fs in groups if fs]


@task(name="build_scripts", feature="scripts")
def build_scripts(config: BuildConfig):
    """Concatenate, stamp and minify scripts into the scripts output directory."""
    logger = get_logger("assetflow.task.build_scripts")
    paths = config.paths.scripts
    out_dir = config.resolve(paths.output)
    steps = minified_pair(config.banner, out_dir, minify_js)
    separate = config.settings.polyfills

    count = 0
    for unit in discover_units(config):
        for asset in bundles(unit, paths.polyfills or "", separate):
            run_steps(asset, steps)
            count += 1
            logger.debug("Wrote %s (+ .min)", asset.name)
    logger.info("Built %d script bundle(s) into %s", count, out_dir)
