# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Freeze merged options into the build's authoritative compiler options."""

from __future__ import annotations

from typing import Final

from ..constants import ISOLATED_MODULES_DOCS
from ..diagnostics import Diagnostic
from .models import ResolvedOptions

ISOLATED_MODULES_WARNING: Final[str] = (
    f"'isolatedModules' option should be set to true in tsconfig. See {ISOLATED_MODULES_DOCS} for details."
)


def normalize_options(resolved: ResolvedOptions) -> tuple[ResolvedOptions, list[Diagnostic]]:
    """Force ``isolatedModules`` on for per-file transpilation.

    Every backend compiles one file at a time without type information, which
    is only sound when the project opts into isolated modules. Projects that
    do not are still built, with a single warning.

    Args:
        resolved: Merged options returned by the chain loader.

    Returns:
        tuple[ResolvedOptions, list[Diagnostic]]: Options with
        ``isolatedModules`` set to ``True`` and zero or one warning.
    """

    options = resolved.compiler_options
    if options.isolated_modules is True:
        return resolved, []
    updated = options.model_copy(update={"isolated_modules": True})
    return resolved.model_copy(update={"compiler_options": updated}), [Diagnostic.warning(ISOLATED_MODULES_WARNING)]


__all__ = ["ISOLATED_MODULES_WARNING", "normalize_options"]
