# tests/test_config.py

from __future__ import annotations

import json
from pathlib import Path

import pytest

from assetflow.orchestrator.config import FEATURES, ConfigError, Settings, load_config

from .conftest import write


def test_missing_file_gives_defaults(tmp_path: Path) -> None:
    cfg = load_config(tmp_path / "assetflow.yaml")
    assert cfg.root == tmp_path.resolve()
    assert all(cfg.settings.enabled(f) for f in FEATURES)
    assert cfg.paths.scripts.input == "src/js/*"
    assert cfg.paths.scripts.watch_glob == "src/js/**/*.js"
    assert cfg.paths.libs.watch_glob == "src/libs/*"
    assert cfg.paths.reload == "dist/"
    assert cfg.server.live_port == 35729


def test_yaml_overrides(tmp_path: Path) -> None:
    path = write(
        tmp_path / "assetflow.yaml",
        "settings:\n  clean: false\n  sprite: no\n"
        "paths:\n  output: build/\n  styles:\n    output: build/css/\n"
        "project:\n  name: site\n  version: 2.0.0\n"
        "server:\n  port: 8080\n  open_browser: false\n",
    )
    cfg = load_config(path)
    assert cfg.settings.clean is False
    assert cfg.settings.sprite is False
    assert cfg.settings.scripts is True
    assert cfg.paths.output == "build/"
    assert cfg.paths.styles.output == "build/css/"
    assert cfg.paths.styles.input == "src/sass/**/*.{scss,sass}"
    assert cfg.project.name == "site"
    assert cfg.server.port == 8080
    assert cfg.server.open_browser is False


def test_disabled_features_from_cli(tmp_path: Path) -> None:
    cfg = load_config(tmp_path / "missing.yaml", disabled=["reload", "images"])
    assert not cfg.settings.reload
    assert not cfg.settings.images
    assert cfg.settings.styles


@pytest.mark.parametrize(
    "text",
    [
        "settings:\n  minify: true\n",
        "paths:\n  fonts:\n    input: a\n",
        "paths:\n  styles:\n    bogus: a\n",
        "- a\n- b\n",
        "settings: [1, 2\n",
    ],
)
def test_bad_config_raises(tmp_path: Path, text: str) -> None:
    path = write(tmp_path / "assetflow.yaml", text)
    with pytest.raises(ConfigError):
        load_config(path)


def test_unknown_disabled_feature() -> None:
    with pytest.raises(ConfigError):
        Settings().without(["nope"])


def test_project_meta_from_package_json(tmp_path: Path) -> None:
    write(
        tmp_path / "package.json",
        json.dumps(
            {
                "name": "site",
                "version": "3.1.0",
                "author": {"name": "Ann"},
                "license": "ISC",
                "repository": {"type": "git", "url": "https://git.example/site"},
            }
        ),
    )
    cfg = load_config(tmp_path / "assetflow.yaml")
    assert cfg.project.banner(year=2025) == (
        "/*! site v3.1.0 | (c) 2025 Ann | ISC License | https://git.example/site */\n"
    )


def test_config_is_immutable(tmp_path: Path) -> None:
    cfg = load_config(tmp_path / "assetflow.yaml")
    with pytest.raises(Exception):
        cfg.settings.clean = False  # type: ignore[misc]
