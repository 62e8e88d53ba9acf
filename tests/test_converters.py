# tests/test_converters.py

from __future__ import annotations

import xml.etree.ElementTree as ET
from pathlib import Path

import pytest
from PIL import Image

from assetflow.tasks.clean import clean
from assetflow.tasks.copy import copy_libs
from assetflow.tasks.images import optimize_image
from assetflow.tasks.lint import lint_scripts, lint_source
from assetflow.tasks.styles import build_styles
from assetflow.tasks.svgs import SVG_NS, build_svgs, svg_sprite

from .conftest import write


def test_lint_reports_loose_equality_and_whitespace() -> None:
    problems = lint_source("if (a == 1) {  \n  b();\n}\n", Path("x.js"))
    messages = [p.message for p in problems]
    assert any("'=='" in m for m in messages)
    assert "Trailing whitespace" in messages
    assert all(p.line == 1 for p in problems)


def test_lint_reports_syntax_errors() -> None:
    problems = lint_source("var = ;", Path("bad.js"))
    assert problems
    assert problems[0].path == Path("bad.js")


def test_lint_scripts_does_not_fail_on_problems(config, project: Path) -> None:
    write(project / "src/js/loose.js", "if (a != b) { c(); }\n")
    problems = lint_scripts(config)
    assert [str(p.path) for p in problems] == ["src/js/loose.js"]


def test_styles_skip_partials_and_stamp_both(config, project: Path) -> None:
    build_styles(config)
    css = (project / "dist/css/main.css").read_text()
    mini = (project / "dist/css/main.min.css").read_text()
    assert css.startswith(config.banner) and mini.startswith(config.banner)
    assert "color: #ff0000" in css
    assert ".a{color:#ff0000}" in mini.replace(";}", "}")
    assert not (project / "dist/css/_partial.css").exists()


def test_invalid_stylesheet_raises(config, project: Path) -> None:
    write(project / "src/sass/main.scss", ".a { color: ")
    with pytest.raises(Exception):
        build_styles(config)


def test_svgs_are_optimized(config, project: Path) -> None:
    build_svgs(config)
    out = (project / "dist/img/icon.svg").read_text()
    assert "comment" not in out
    assert "<rect" in out


def test_sprite_has_one_symbol_per_file(config, project: Path) -> None:
    write(
        project / "src/svg/arrow.svg",
        '<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 4 4"><path d="M0 0L4 4"/></svg>',
    )
    svg_sprite(config)
    root = ET.parse(project / "dist/img/sprite.svg").getroot()
    symbols = root.findall(f"{{{SVG_NS}}}symbol")
    assert [s.get("id") for s in symbols] == ["arrow", "icon"]
    assert symbols[0].get("viewBox") == "0 0 4 4"
    assert not (project / "dist/img/sprite.svg").read_text().startswith("<?xml")


def test_sprite_without_svgs_writes_nothing(config, project: Path) -> None:
    (project / "src/svg/icon.svg").unlink()
    svg_sprite(config)
    assert not (project / "dist/img/sprite.svg").exists()


@pytest.mark.parametrize("name,fmt", [("a.jpg", "JPEG"), ("a.png", "PNG"), ("a.gif", "GIF")])
def test_optimize_image_keeps_format(tmp_path: Path, name: str, fmt: str) -> None:
    src = tmp_path / "in" / name
    src.parent.mkdir()
    Image.new("RGB", (16, 16), "blue").save(src)
    dest = tmp_path / "out" / name
    optimize_image(src, dest)
    with Image.open(dest) as img:
        assert img.format == fmt
        assert img.size == (16, 16)


def test_copy_libs(config, project: Path) -> None:
    copy_libs(config)
    assert (project / "dist/js/vendor.js").read_text() == "/* vendor */\n"


def test_clean_refuses_project_root(make_config, project: Path) -> None:
    from dataclasses import replace

    config = make_config()
    config = replace(config, paths=replace(config.paths, output="."))
    with pytest.raises(ValueError):
        clean(config)
    assert (project / "src").exists()


def test_lint_reports_tolerated_errors() -> None:
    problems = lint_source("return 1;\n", Path("top.js"))
    assert len(problems) == 1
    assert problems[0].line == 1
    assert "return" in problems[0].message.lower()


def test_clean_recreates_empty_output(config, project: Path) -> None:
    write(project / "dist/old/file.txt", "stale")
    clean(config)
    assert (project / "dist").is_dir()
    assert list((project / "dist").iterdir()) == []


def test_clean_creates_missing_output(config, project: Path) -> None:
    clean(config)
    assert (project / "dist").is_dir()
