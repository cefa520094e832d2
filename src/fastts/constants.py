# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Shared constants for configuration loading, resolution and dispatch."""

from __future__ import annotations

from typing import Final

DEFAULT_CONFIG_FILENAME: Final[str] = "tsconfig.json"
INLINE_CONFIG_NAME: Final[str] = "<configObject>"
PACKAGE_JSON_FILENAME: Final[str] = "package.json"

TS_EXTENSIONS: Final[frozenset[str]] = frozenset({".ts", ".tsx", ".mts", ".cts"})
TS_DECLARATION_EXTENSIONS: Final[frozenset[str]] = frozenset({".d.ts", ".d.mts", ".d.cts"})

# Rollup-style hosts prefix virtual module ids with a NUL byte.
HOST_INTERNAL_PREFIX: Final[str] = "\0"

DEFAULT_TRANSFORMER: Final[str] = "esbuild"

ISOLATED_MODULES_DOCS: Final[str] = "https://www.typescriptlang.org/tsconfig#isolatedModules"

# Emitted by esbuild whenever require() calls are converted while producing ESM output.
BENIGN_WARNING_PREFIXES: Final[tuple[str, ...]] = ('Converting "require" to "esm"',)

__all__ = [
    "BENIGN_WARNING_PREFIXES",
    "DEFAULT_CONFIG_FILENAME",
    "DEFAULT_TRANSFORMER",
    "HOST_INTERNAL_PREFIX",
    "INLINE_CONFIG_NAME",
    "ISOLATED_MODULES_DOCS",
    "PACKAGE_JSON_FILENAME",
    "TS_DECLARATION_EXTENSIONS",
    "TS_EXTENSIONS",
]
