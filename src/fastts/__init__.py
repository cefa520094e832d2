# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Fast TypeScript transpilation honouring ``tsconfig.json`` and compiler module resolution."""

from __future__ import annotations

__version__ = "0.1.0"

from .config.sources import Deferred, Disabled, InlineSource, PathSource, UseDefault, reduce_config_source
from .errors import BackendLoadError, FastTsError, StartupConfigurationError, TransformError
from .plugin import FastTypescriptPlugin, PluginContext, fast_typescript
from .resolution import ResolutionKind, ResolveOutcome

__all__ = [
    "BackendLoadError",
    "Deferred",
    "Disabled",
    "FastTsError",
    "FastTypescriptPlugin",
    "InlineSource",
    "PathSource",
    "PluginContext",
    "ResolutionKind",
    "ResolveOutcome",
    "StartupConfigurationError",
    "TransformError",
    "UseDefault",
    "__version__",
    "fast_typescript",
    "reduce_config_source",
]
