# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Immutable results of configuration loading."""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

from ..compiler.types import CompilerOptions
from ..diagnostics import Diagnostic


class ResolvedOptions(BaseModel):
    """Inheritance-merged compiler options anchored at a base directory."""

    model_config = ConfigDict(frozen=True)

    compiler_options: CompilerOptions = Field(default_factory=CompilerOptions)
    base_dir: Path


class ConfigChainResult(BaseModel):
    """Outcome of loading a configuration source.

    Attributes:
        options: Merged options, not yet normalised.
        chain: Absolute paths of every configuration file read, in encounter
            order and without ``package.json`` manifests.
        warnings: Warning diagnostics to surface to the host.
        file_names: Input files selected by ``files``/``include``/``exclude``.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    options: ResolvedOptions
    chain: tuple[str, ...] = ()
    warnings: tuple[Diagnostic, ...] = ()
    file_names: tuple[str, ...] = ()


__all__ = ["ConfigChainResult", "ResolvedOptions"]
