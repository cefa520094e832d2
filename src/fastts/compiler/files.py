# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Expansion of ``files`` / ``include`` / ``exclude`` into concrete file names."""

from __future__ import annotations

import os
import re
from collections.abc import Iterable, Sequence
from pathlib import Path
from typing import Final

from ..paths import normalize_slashes

TS_SUPPORTED_EXTENSIONS: Final[tuple[str, ...]] = (".ts", ".tsx", ".d.ts", ".mts", ".d.mts", ".cts", ".d.cts")
JS_SUPPORTED_EXTENSIONS: Final[tuple[str, ...]] = (".js", ".jsx", ".mjs", ".cjs")
DEFAULT_INCLUDE: Final[tuple[str, ...]] = ("**/*",)
DEFAULT_EXCLUDE_DIRS: Final[tuple[str, ...]] = ("node_modules", "bower_components", "jspm_packages")

_WILDCARD_CHARS = re.compile(r"[*?]")


def _component_regex(component: str) -> str:
    if component == "**":
        return r"(?:[^/.][^/]*/)*"
    pieces: list[str] = []
    for char in component:
        if char == "*":
            pieces.append("[^/]*")
        elif char == "?":
            pieces.append("[^/]")
        else:
            pieces.append(re.escape(char))
    body = "".join(pieces)
    if _WILDCARD_CHARS.search(component) and not component.startswith("."):
        body = r"(?!\.)" + body
    return body + "/"


def pattern_to_regex(pattern: str, *, for_exclude: bool = False) -> re.Pattern[str]:
    """Translate a tsconfig glob into a regex matched against absolute paths.

    A trailing component without wildcards or an extension names a directory
    and implicitly matches everything beneath it. Exclude patterns also match
    any descendant of the matched path.

    Args:
        pattern: Absolute, slash-normalised glob pattern.
        for_exclude: ``True`` when compiling an exclude pattern.

    Returns:
        re.Pattern[str]: Compiled expression.
    """

    components = normalize_slashes(pattern).rstrip("/").split("/")
    last = components[-1]
    if last == "**":
        components.append("*")
    elif not for_exclude and not _WILDCARD_CHARS.search(last) and "." not in last:
        components.extend(["**", "*"])
    regex = "".join(_component_regex(component) for component in components)
    regex = regex[:-1]
    if for_exclude:
        regex += "(?:/.*)?"
    return re.compile(f"^{regex}$")


def _wildcard_root(pattern: str) -> Path:
    root: list[str] = []
    for component in normalize_slashes(pattern).split("/"):
        if _WILDCARD_CHARS.search(component):
            break
        root.append(component)
    candidate = Path("/".join(root) or "/")
    while not candidate.is_dir() and candidate != candidate.parent:
        candidate = candidate.parent
    return candidate


def _has_extension(name: str, extensions: Iterable[str]) -> bool:
    return any(name.endswith(extension) for extension in extensions)


def _strip_extension(name: str, extensions: Sequence[str]) -> str:
    for extension in sorted(extensions, key=len, reverse=True):
        if name.endswith(extension):
            return name[: -len(extension)]
    return name


def expand_file_specs(
    *,
    files: Sequence[str] | None,
    include: Sequence[str] | None,
    exclude: Sequence[str] | None,
    base_dir: Path,
    allow_js: bool = False,
    out_dir: Path | None = None,
) -> list[str]:
    """Return the project's input files in compiler order.

    Explicit ``files`` entries come first, followed by wildcard matches sorted
    by path. When a ``.ts`` file and a same-named declaration or JavaScript file
    both match, only the higher-priority extension is kept.

    Args:
        files: Absolute explicit file paths, if declared.
        include: Absolute include globs, if declared.
        exclude: Absolute exclude globs, if declared.
        base_dir: Directory anchoring the default include/exclude lists.
        allow_js: Whether JavaScript inputs are accepted.
        out_dir: Output directory excluded by default.

    Returns:
        list[str]: Normalised absolute file names.
    """

    extensions = TS_SUPPORTED_EXTENSIONS + (JS_SUPPORTED_EXTENSIONS if allow_js else ())
    result: list[str] = [normalize_slashes(entry) for entry in files or ()]
    seen = set(result)

    if include is None:
        include = () if files is not None else [str(base_dir / pattern) for pattern in DEFAULT_INCLUDE]
    if exclude is None:
        exclude = [str(base_dir / name) for name in DEFAULT_EXCLUDE_DIRS]
        if out_dir is not None:
            exclude = [*exclude, str(out_dir)]

    include_regexes = [pattern_to_regex(pattern) for pattern in include]
    exclude_regexes = [pattern_to_regex(pattern, for_exclude=True) for pattern in exclude]

    matched: dict[str, str] = {}
    for root in sorted({_wildcard_root(pattern) for pattern in include}):
        for directory, dirnames, filenames in os.walk(root):
            current = normalize_slashes(directory)
            dirnames[:] = sorted(
                name
                for name in dirnames
                if not any(regex.match(f"{current}/{name}") for regex in exclude_regexes)
            )
            for filename in sorted(filenames):
                candidate = f"{current}/{filename}"
                if candidate in seen or not _has_extension(filename, extensions):
                    continue
                if not any(regex.match(candidate) for regex in include_regexes):
                    continue
                if any(regex.match(candidate) for regex in exclude_regexes):
                    continue
                stem = _strip_extension(candidate, extensions)
                previous = matched.get(stem)
                if previous is None or _priority(candidate) < _priority(previous):
                    matched[stem] = candidate

    for candidate in sorted(matched.values()):
        if candidate not in seen:
            seen.add(candidate)
            result.append(candidate)
    return result


def _priority(name: str) -> int:
    for extension in sorted(_EXTENSION_PRIORITY, key=len, reverse=True):
        if name.endswith(extension):
            return _EXTENSION_PRIORITY[extension]
    return len(_EXTENSION_PRIORITY)


_EXTENSION_PRIORITY: Final[dict[str, int]] = {
    ".ts": 0,
    ".tsx": 0,
    ".mts": 0,
    ".cts": 0,
    ".d.ts": 1,
    ".d.mts": 1,
    ".d.cts": 1,
    ".js": 2,
    ".jsx": 2,
    ".mjs": 2,
    ".cjs": 2,
}


__all__ = ["DEFAULT_EXCLUDE_DIRS", "DEFAULT_INCLUDE", "expand_file_specs", "pattern_to_regex"]
