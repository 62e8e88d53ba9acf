# tests/conftest.py

from __future__ import annotations

from dataclasses import replace
from pathlib import Path

import pytest

from assetflow.orchestrator.config import BuildConfig, ProjectMeta, Settings

from .fakes import FakeTransport

BANNER_META = ProjectMeta(
    name="demo",
    version="1.2.3",
    author="Jane Doe",
    license="MIT",
    repository="https://example.com/demo.git",
)


def write(path: Path, text: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


@pytest.fixture()
def project(tmp_path: Path) -> Path:
    """
    A small source tree in the default layout (src/ -> dist/).

    Images are left out here; tests that need them create them with Pillow.
    """
    write(tmp_path / "src/js/main.js", "var answer = 42;\nconsole.log(answer);\n")
    write(tmp_path / "src/js/bundle/x.js", "var x = 1;\n")
    write(tmp_path / "src/js/bundle/y.js", "var y = 2;\n")
    write(tmp_path / "src/js/bundle/y.polyfill.js", "var yPolyfill = 3;\n")
    write(tmp_path / "src/libs/vendor.js", "/* vendor */\n")
    write(tmp_path / "src/sass/main.scss", "$c: #ff0000;\n.a { color: $c; }\n")
    write(tmp_path / "src/sass/_partial.scss", ".p { margin: 0; }\n")
    write(
        tmp_path / "src/svg/icon.svg",
        '<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 10 10">'
        '<!-- comment --><rect width="10" height="10"/></svg>',
    )
    write(tmp_path / "src/copy/robots.txt", "User-agent: *\n")
    write(tmp_path / "src/copy/fonts/readme.txt", "fonts\n")
    return tmp_path


@pytest.fixture()
def make_config(project: Path):
    """Build a config for the fixture project with the given toggles."""

    def _make(**toggles: bool) -> BuildConfig:
        return BuildConfig(
            root=project,
            settings=replace(Settings(), **toggles),
            project=BANNER_META,
        )

    return _make


@pytest.fixture()
def config(make_config) -> BuildConfig:
    return make_config()


@pytest.fixture()
def transport() -> FakeTransport:
    return FakeTransport()
