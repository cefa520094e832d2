# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Configuration parsing and module resolution with TypeScript compiler semantics."""

from __future__ import annotations

from .resolver import ModuleResolutionCache, ModuleResolver, is_relative_specifier
from .tsconfig import (
    ConfigHost,
    FileSystemHost,
    RecordingHost,
    parse_config_content,
    parse_json_text,
    read_config_file,
)
from .types import (
    CompilerOptions,
    ConfigObject,
    JsxEmit,
    ModuleKind,
    ModuleResolutionKind,
    ParsedConfig,
    ResolvedModule,
    ScriptTarget,
)

__all__ = [
    "CompilerOptions",
    "ConfigHost",
    "ConfigObject",
    "FileSystemHost",
    "JsxEmit",
    "ModuleKind",
    "ModuleResolutionCache",
    "ModuleResolutionKind",
    "ModuleResolver",
    "ParsedConfig",
    "RecordingHost",
    "ResolvedModule",
    "ScriptTarget",
    "is_relative_specifier",
    "parse_config_content",
    "parse_json_text",
    "read_config_file",
]
