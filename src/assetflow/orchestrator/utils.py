from __future__ import annotations

"""Small helpers for config lookups and glob handling.

Globs understand `*` and `?` (never crossing `/`), `**` (any depth) and
`{a,b}` alternation. Every other character, `[` included, matches itself.
They are always relative to the project root.
"""

import os
import re
from functools import lru_cache
from pathlib import Path
from typing import Dict, List

_WILDCARDS = "*?{"


def _get(d: Dict, *keys, default=None):
    cur = d
    for k in keys:
        if not isinstance(cur, dict):
            return default
        cur = cur.get(k)
        if cur is None:
            return default
    return cur


def _normalize(pattern: str) -> str:
    pattern = pattern.replace("\\", "/")
    while pattern.startswith("./"):
        pattern = pattern[2:]
    return pattern


def expand_braces(pattern: str) -> List[str]:
    """Expand the first `{a,b}` group (recursively) into separate patterns."""
    start = pattern.find("{")
    if start < 0:
        return [pattern]
    depth = 0
    parts: List[str] = []
    last = start + 1
    for i in range(start, len(pattern)):
        ch = pattern[i]
        if ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                parts.append(pattern[last:i])
                head, tail = pattern[:start], pattern[i + 1 :]
                out: List[str] = []
                for part in parts:
                    out.extend(expand_braces(head + part + tail))
                return out
        elif ch == "," and depth == 1:
            parts.append(pattern[last:i])
            last = i + 1
    # Unbalanced brace: treat literally
    return [pattern]


def _translate(pattern: str) -> str:
    out: List[str] = []
    i, n = 0, len(pattern)
    while i < n:
        if pattern.startswith("**/", i):
            out.append("(?:.*/)?")
            i += 3
            continue
        if pattern.startswith("**", i):
            out.append(".*")
            i += 2
            continue
        ch = pattern[i]
        if ch == "*":
            out.append("[^/]*")
        elif ch == "?":
            out.append("[^/]")
        else:
            out.append(re.escape(ch))
        i += 1
    return "".join(out)


@lru_cache(maxsize=256)
def compile_glob(pattern: str) -> "re.Pattern[str]":
    alternatives = [_translate(p) for p in expand_braces(_normalize(pattern))]
    return re.compile("^(?:" + "|".join(alternatives) + ")/?$")


def glob_base(pattern: str) -> str:
    """Return the leading directory of a glob that holds no wildcards."""
    static: List[str] = []
    for part in _normalize(pattern).split("/"):
        if any(ch in part for ch in _WILDCARDS):
            break
        static.append(part)
    else:
        # No wildcard at all: the pattern names a file or directory itself
        if static and static[-1]:
            static = static[:-1]
    return "/".join(p for p in static if p) or "."


def matches(pattern: str, path: Path, root: Path) -> bool:
    try:
        rel = Path(os.path.abspath(path)).relative_to(os.path.abspath(root))
    except ValueError:
        return False
    return bool(compile_glob(pattern).match(rel.as_posix()))


def expand_glob(pattern: str, root: Path, include_dirs: bool = False) -> List[Path]:
    """List paths under `root` matching `pattern`, sorted for stable output."""
    base = root / glob_base(pattern)
    if not base.exists():
        return []
    regex = compile_glob(pattern)
    paths: List[Path] = []
    for cur, dirs, files in os.walk(base):
        dirs.sort()
        names = list(files) + (list(dirs) if include_dirs else [])
        for name in names:
            p = Path(cur) / name
            if regex.match(p.relative_to(root).as_posix()):
                paths.append(p)
    return sorted(paths)


def relative_to_base(path: Path, pattern: str, root: Path) -> Path:
    """Path of a glob match relative to the glob's static base directory."""
    return path.relative_to(root / glob_base(pattern))
