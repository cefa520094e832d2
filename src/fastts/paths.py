# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Path helpers aware of TypeScript's multi-part file extensions."""

from __future__ import annotations

import re
from pathlib import PurePath

from .constants import TS_DECLARATION_EXTENSIONS, TS_EXTENSIONS

_SEPARATORS = re.compile(r"[\\/]+")


def is_ts_declaration_file(name: str | PurePath) -> bool:
    """Return ``True`` when ``name`` is a pure type declaration file."""

    text = str(name)
    return any(text.endswith(extension) for extension in TS_DECLARATION_EXTENSIONS)


def is_ts_source_file(name: str | PurePath) -> bool:
    """Return ``True`` when ``name`` is a TypeScript source, never a declaration.

    Only the last suffix is inspected so ``app.spec.ts`` still qualifies.
    """

    return PurePath(str(name)).suffix in TS_EXTENSIONS and not is_ts_declaration_file(name)


def ts_extension(name: str | PurePath) -> str:
    """Return the TypeScript-relevant extension of ``name``.

    Declaration files report their compound extension (``.d.ts``), every other
    file reports its last suffix.
    """

    text = str(name)
    for extension in TS_DECLARATION_EXTENSIONS:
        if text.endswith(extension):
            return extension
    return PurePath(text).suffix


def normalize_slashes(path: str) -> str:
    """Collapse runs of either separator into a single forward slash."""

    return _SEPARATORS.sub("/", path)


__all__ = [
    "is_ts_declaration_file",
    "is_ts_source_file",
    "normalize_slashes",
    "ts_extension",
]
