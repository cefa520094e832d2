# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Closed set of configuration sources and the reduction of user arguments to it.

Callers may pass ``True``/``False``, a path, a tsconfig-shaped mapping, a
zero-argument callable or an explicit source object. :func:`reduce_config_source`
collapses all of those into one of four concrete variants, invoking callables
exactly once.
"""

from __future__ import annotations

import json
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any, TypeAlias

from ..errors import StartupConfigurationError


@dataclass(frozen=True, slots=True)
class UseDefault:
    """Load ``tsconfig.json`` from the project root."""


@dataclass(frozen=True, slots=True)
class Disabled:
    """Run without any configuration file."""


@dataclass(frozen=True, slots=True)
class PathSource:
    """Load the configuration file at ``path`` (relative to the project root)."""

    path: str


@dataclass(frozen=True, slots=True)
class InlineSource:
    """Use an in-memory tsconfig document."""

    document: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class Deferred:
    """Compute the configuration argument lazily by calling ``factory`` once."""

    factory: Callable[[], Any]


ResolvedSource: TypeAlias = UseDefault | Disabled | PathSource | InlineSource
ConfigSource: TypeAlias = ResolvedSource | Deferred
ConfigArgument: TypeAlias = bool | str | Mapping[str, Any] | Callable[[], Any] | ConfigSource

_RESOLVED_TYPES = (UseDefault, Disabled, PathSource, InlineSource)


def _describe(value: Any) -> str:
    try:
        return json.dumps(value)
    except (TypeError, ValueError):
        return repr(value)


def _reduce_static(value: Any) -> ResolvedSource:
    if isinstance(value, _RESOLVED_TYPES):
        return value
    if value is True:
        return UseDefault()
    if value is False or value == "":
        return Disabled()
    if isinstance(value, str):
        return PathSource(value)
    if isinstance(value, Mapping):
        return InlineSource(dict(value))
    raise StartupConfigurationError(f"Invalid value '{_describe(value)}' for tsconfig parameter.")


def reduce_config_source(value: ConfigArgument) -> ResolvedSource:
    """Reduce a user-supplied configuration argument to a concrete source.

    Args:
        value: Configuration argument in any accepted shape.

    Returns:
        ResolvedSource: One of :class:`UseDefault`, :class:`Disabled`,
        :class:`PathSource` or :class:`InlineSource`.

    Raises:
        StartupConfigurationError: If the value, or the value returned by a
            deferred factory, has an unsupported shape.
    """

    if isinstance(value, Deferred):
        value = value.factory
    if callable(value) and not isinstance(value, _RESOLVED_TYPES):
        result = value()
        if not isinstance(result, (bool, str, Mapping, *_RESOLVED_TYPES)):
            raise StartupConfigurationError(
                "Wrong return type from function parameter: "
                f"expected a TsConfigJson object, got '{type(result).__name__}'.",
            )
        value = result
    return _reduce_static(value)


__all__ = [
    "ConfigArgument",
    "ConfigSource",
    "Deferred",
    "Disabled",
    "InlineSource",
    "PathSource",
    "ResolvedSource",
    "UseDefault",
    "reduce_config_source",
]
