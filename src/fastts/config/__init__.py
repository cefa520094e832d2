# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Configuration sources, chain loading and option normalisation."""

from __future__ import annotations

from .loader import ConfigChainLoader
from .models import ConfigChainResult, ResolvedOptions
from .normalizer import ISOLATED_MODULES_WARNING, normalize_options
from .sources import (
    ConfigArgument,
    ConfigSource,
    Deferred,
    Disabled,
    InlineSource,
    PathSource,
    ResolvedSource,
    UseDefault,
    reduce_config_source,
)

__all__ = [
    "ISOLATED_MODULES_WARNING",
    "ConfigArgument",
    "ConfigChainLoader",
    "ConfigChainResult",
    "ConfigSource",
    "Deferred",
    "Disabled",
    "InlineSource",
    "PathSource",
    "ResolvedOptions",
    "ResolvedSource",
    "UseDefault",
    "normalize_options",
    "reduce_config_source",
]
