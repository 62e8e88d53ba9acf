from __future__ import annotations

"""Build configuration: feature toggles, path roles, banner metadata.

Everything here is read once at startup into frozen dataclasses and passed by
reference to the task factories. Defaults mirror a stock front-end layout
(`src/` in, `dist/` out), so an empty or missing config file is valid.
"""

import datetime
import json
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Iterable, Optional

import yaml

from .utils import _get

DEFAULT_CONFIG = "assetflow.yaml"

FEATURES = (
    "clean",
    "scripts",
    "libs",
    "polyfills",
    "styles",
    "svgs",
    "sprite",
    "images",
    "copy",
    "reload",
)

BANNER_TEMPLATE = (
    "/*! {name} v{version} | (c) {year} {author} | {license} License | {repository} */\n"
)


class ConfigError(ValueError):
    """Raised when the config file is malformed or names unknown keys."""


@dataclass(frozen=True)
class Settings:
    clean: bool = True
    scripts: bool = True
    libs: bool = True
    polyfills: bool = True
    styles: bool = True
    svgs: bool = True
    sprite: bool = True
    images: bool = True
    copy: bool = True
    reload: bool = True

    def enabled(self, feature: Optional[str]) -> bool:
        if feature is None:
            return True
        return bool(getattr(self, feature))

    def without(self, disabled: Iterable[str]) -> "Settings":
        disabled = list(disabled)
        unknown = [f for f in disabled if f not in FEATURES]
        if unknown:
            raise ConfigError(f"Unknown feature(s): {', '.join(unknown)}")
        return replace(self, **{f: False for f in disabled})


@dataclass(frozen=True)
class AssetPaths:
    input: str
    output: str
    watch: Optional[str] = None
    polyfills: Optional[str] = None

    @property
    def watch_glob(self) -> str:
        return self.watch or self.input


@dataclass(frozen=True)
class PathConfig:
    input: str = "src/"
    output: str = "dist/"
    scripts: AssetPaths = AssetPaths(
        input="src/js/*",
        watch="src/js/**/*.js",
        polyfills=".polyfill.js",
        output="dist/js/",
    )
    libs: AssetPaths = AssetPaths(input="src/libs/*", output="dist/js/")
    styles: AssetPaths = AssetPaths(
        input="src/sass/**/*.{scss,sass}", output="dist/css/"
    )
    images: AssetPaths = AssetPaths(
        input="src/img/**/*.{jpg,jpeg,gif,png}", output="dist/img/"
    )
    svgs: AssetPaths = AssetPaths(input="src/svg/*.svg", output="dist/img/")
    copy: AssetPaths = AssetPaths(input="src/copy/**/*", output="dist/")
    reload: str = "dist/"


@dataclass(frozen=True)
class ProjectMeta:
    name: str = "project"
    version: str = "0.0.0"
    author: str = ""
    license: str = "MIT"
    repository: str = ""

    def banner(self, year: Optional[int] = None) -> str:
        return BANNER_TEMPLATE.format(
            name=self.name,
            version=self.version,
            year=year or datetime.date.today().year,
            author=self.author,
            license=self.license,
            repository=self.repository,
        )


@dataclass(frozen=True)
class ServerConfig:
    host: str = "127.0.0.1"
    port: int = 3000
    live_port: int = 35729
    open_browser: bool = True


@dataclass(frozen=True)
class BuildConfig:
    root: Path
    settings: Settings = Settings()
    paths: PathConfig = PathConfig()
    project: ProjectMeta = ProjectMeta()
    server: ServerConfig = ServerConfig()

    def resolve(self, path: str) -> Path:
        return self.root / path

    @property
    def banner(self) -> str:
        return self.project.banner()


def _load_settings(raw: dict) -> Settings:
    if not isinstance(raw, dict):
        raise ConfigError("`settings` must be a mapping of feature -> bool")
    unknown = sorted(set(raw) - set(FEATURES))
    if unknown:
        raise ConfigError(f"Unknown feature(s) in settings: {', '.join(unknown)}")
    return Settings(**{k: bool(v) for k, v in raw.items()})


def _load_paths(raw: dict) -> PathConfig:
    if not isinstance(raw, dict):
        raise ConfigError("`paths` must be a mapping")
    known = {f.name for f in fields(PathConfig)}
    unknown = sorted(set(raw) - known)
    if unknown:
        raise ConfigError(f"Unknown path role(s): {', '.join(unknown)}")
    defaults = PathConfig()
    values = {}
    for key, val in raw.items():
        current = getattr(defaults, key)
        if isinstance(current, AssetPaths):
            if not isinstance(val, dict):
                raise ConfigError(f"`paths.{key}` must be a mapping")
            try:
                values[key] = replace(current, **val)
            except TypeError as e:
                raise ConfigError(f"Bad keys in `paths.{key}`: {e}") from e
        else:
            values[key] = str(val)
    return replace(defaults, **values)


def _meta_from_package_json(path: Path) -> ProjectMeta:
    with open(path, "r", encoding="utf-8") as f:
        pkg = json.load(f)
    author = pkg.get("author", "")
    repo = pkg.get("repository", "")
    return ProjectMeta(
        name=str(pkg.get("name", ProjectMeta.name)),
        version=str(pkg.get("version", ProjectMeta.version)),
        author=author.get("name", "") if isinstance(author, dict) else str(author),
        license=str(pkg.get("license", ProjectMeta.license)),
        repository=repo.get("url", "") if isinstance(repo, dict) else str(repo),
    )


def _load_project(raw: Optional[dict], root: Path) -> ProjectMeta:
    if raw is None:
        pkg_json = root / "package.json"
        if pkg_json.exists():
            return _meta_from_package_json(pkg_json)
        return ProjectMeta()
    if not isinstance(raw, dict):
        raise ConfigError("`project` must be a mapping")
    try:
        return ProjectMeta(**{k: str(v) for k, v in raw.items()})
    except TypeError as e:
        raise ConfigError(f"Bad keys in `project`: {e}") from e


def _load_server(raw: dict) -> ServerConfig:
    return ServerConfig(
        host=str(_get(raw, "host", default=ServerConfig.host)),
        port=int(_get(raw, "port", default=ServerConfig.port)),
        live_port=int(_get(raw, "live_port", default=ServerConfig.live_port)),
        open_browser=bool(_get(raw, "open_browser", default=ServerConfig.open_browser)),
    )


def load_config(
    path: str | Path = DEFAULT_CONFIG, disabled: Iterable[str] = ()
) -> BuildConfig:
    """Read the YAML config at `path`; a missing file yields the defaults."""
    p = Path(path)
    root = p.resolve().parent
    params: dict = {}
    if p.exists():
        with open(p, "r", encoding="utf-8") as f:
            try:
                params = yaml.safe_load(f) or {}
            except yaml.YAMLError as e:
                raise ConfigError(f"Invalid YAML in {p}: {e}") from e
    if not isinstance(params, dict):
        raise ConfigError(f"{p} must contain a mapping at top level")

    settings = _load_settings(params.get("settings") or {}).without(disabled)
    return BuildConfig(
        root=root,
        settings=settings,
        paths=_load_paths(params.get("paths") or {}),
        project=_load_project(params.get("project"), root),
        server=_load_server(params.get("server") or {}),
    )
