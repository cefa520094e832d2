# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Helpers for reading ``package.json`` manifests and their export maps."""

from __future__ import annotations

import json
from collections.abc import Callable, Collection, Mapping
from pathlib import Path
from typing import Any, Final

from ..constants import PACKAGE_JSON_FILENAME

ReadFile = Callable[[str], str | None]

_SCOPE_PREFIX: Final[str] = "@"
_TYPES_SCOPE_SEPARATOR: Final[str] = "__"


def default_read_file(path: str) -> str | None:
    """Return the UTF-8 text of ``path`` or ``None`` when it cannot be read."""

    try:
        return Path(path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError):
        return None


def read_package_json(directory: Path, read_file: ReadFile | None = None) -> dict[str, Any] | None:
    """Load ``package.json`` from ``directory``.

    Malformed manifests are treated as absent, matching how the compiler
    ignores packages it cannot interpret.

    Args:
        directory: Package directory to inspect.
        read_file: Optional reader; defaults to reading from disk.

    Returns:
        dict[str, Any] | None: Parsed manifest, or ``None``.
    """

    reader = read_file or default_read_file
    text = reader(str(directory / PACKAGE_JSON_FILENAME))
    if text is None:
        return None
    try:
        data = json.loads(text)
    except json.JSONDecodeError:
        return None
    return data if isinstance(data, dict) else None


def split_package_name(specifier: str) -> tuple[str, str]:
    """Split a bare specifier into package name and subpath.

    ``"@scope/pkg/lib/a"`` becomes ``("@scope/pkg", "lib/a")`` and ``"pkg"``
    becomes ``("pkg", "")``.
    """

    parts = specifier.split("/")
    count = 2 if specifier.startswith(_SCOPE_PREFIX) and len(parts) > 1 else 1
    return "/".join(parts[:count]), "/".join(parts[count:])


def mangle_scoped_package_name(name: str) -> str:
    """Return the ``@types`` directory name for ``name`` (``@a/b`` → ``a__b``)."""

    if name.startswith(_SCOPE_PREFIX) and "/" in name:
        scope, package = name[1:].split("/", 1)
        return f"{scope}{_TYPES_SCOPE_SEPARATOR}{package}"
    return name


def _resolve_target(target: Any, match: str, conditions: Collection[str]) -> str | None:
    if isinstance(target, str):
        return target.replace("*", match) if target.startswith("./") else None
    if isinstance(target, list):
        for item in target:
            if (resolved := _resolve_target(item, match, conditions)) is not None:
                return resolved
        return None
    if isinstance(target, Mapping):
        for condition, value in target.items():
            if condition != "default" and condition not in conditions:
                continue
            if (resolved := _resolve_target(value, match, conditions)) is not None:
                return resolved
    return None


def _match_subpath_map(mapping: Mapping[str, Any], key: str, conditions: Collection[str]) -> str | None:
    if key in mapping and "*" not in key:
        return _resolve_target(mapping[key], "", conditions)
    best_pattern: str | None = None
    best_prefix = -1
    for pattern in mapping:
        star = pattern.find("*")
        if star < 0:
            continue
        prefix, suffix = pattern[:star], pattern[star + 1 :]
        if len(key) < len(prefix) + len(suffix):
            continue
        if key.startswith(prefix) and key.endswith(suffix) and len(prefix) > best_prefix:
            best_pattern, best_prefix = pattern, len(prefix)
    if best_pattern is None:
        return None
    suffix_length = len(best_pattern) - best_prefix - 1
    match = key[best_prefix : len(key) - suffix_length]
    return _resolve_target(mapping[best_pattern], match, conditions)


def resolve_exports(exports: Any, subpath: str, conditions: Collection[str]) -> str | None:
    """Resolve ``subpath`` through a package ``exports`` field.

    Args:
        exports: Raw ``exports`` value from the manifest.
        subpath: Subpath below the package name, empty for the package root.
        conditions: Active export conditions; ``default`` always applies.

    Returns:
        str | None: Package-relative target (``./dist/a.js``) or ``None``.
    """

    if isinstance(exports, (str, list)):
        mapping: Mapping[str, Any] = {".": exports}
    elif isinstance(exports, Mapping):
        mapping = exports if any(key.startswith(".") for key in exports) else {".": exports}
    else:
        return None
    key = f"./{subpath}" if subpath else "."
    return _match_subpath_map(mapping, key, conditions)


def resolve_imports(imports: Any, specifier: str, conditions: Collection[str]) -> str | None:
    """Resolve a ``#``-prefixed specifier through a package ``imports`` field."""

    if not isinstance(imports, Mapping):
        return None
    return _match_subpath_map(imports, specifier, conditions)


__all__ = [
    "ReadFile",
    "default_read_file",
    "mangle_scoped_package_name",
    "read_package_json",
    "resolve_exports",
    "resolve_imports",
    "split_package_name",
]
