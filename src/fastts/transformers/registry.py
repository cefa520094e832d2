# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Transformer registry and the per-build dispatcher driving one backend."""

from __future__ import annotations

import json
import logging
from collections.abc import Callable, Iterator, Mapping
from dataclasses import replace
from enum import Enum

from ..compiler.types import CompilerOptions
from ..constants import BENIGN_WARNING_PREFIXES
from ..errors import FastTsError, StartupConfigurationError
from ..paths import is_ts_source_file
from .base import TransformBackend, TransformOutcome, WarnCallback
from .bridge import NodeBridge
from .esbuild import EsbuildBackend
from .sucrase import SucraseBackend
from .swc import SwcBackend

LOGGER = logging.getLogger(__name__)

BackendFactory = Callable[[NodeBridge], TransformBackend]


class TransformerRegistry(Mapping[str, BackendFactory]):
    """Read-only mapping from transformer name to backend factory."""

    def __init__(self) -> None:
        self._factories: dict[str, BackendFactory] = {}

    def register(self, name: str, factory: BackendFactory) -> None:
        """Register ``factory`` under ``name``.

        Raises:
            ValueError: If ``name`` is already registered.
        """

        if name in self._factories:
            raise ValueError(f"Transformer '{name}' already registered")
        self._factories[name] = factory

    def try_get(self, name: object) -> BackendFactory | None:
        """Return the factory registered for ``name`` or ``None``."""

        return self._factories.get(name) if isinstance(name, str) else None

    def __getitem__(self, name: str) -> BackendFactory:
        return self._factories[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._factories)

    def __len__(self) -> int:
        return len(self._factories)


DEFAULT_REGISTRY = TransformerRegistry()
DEFAULT_REGISTRY.register(EsbuildBackend.name, EsbuildBackend)
DEFAULT_REGISTRY.register(SwcBackend.name, SwcBackend)
DEFAULT_REGISTRY.register(SucraseBackend.name, SucraseBackend)


def is_transformer_name(value: object, registry: TransformerRegistry = DEFAULT_REGISTRY) -> bool:
    """Return ``True`` when ``value`` names a registered transformer."""

    return registry.try_get(value) is not None


def unknown_transformer_message(name: object) -> str:
    """Return the error message used for an unregistered transformer name."""

    try:
        rendered = json.dumps(name)
    except (TypeError, ValueError):
        rendered = repr(name)
    return f"Unknown transformer name {rendered}"


def is_benign_warning(message: str) -> bool:
    """Return ``True`` for backend notices that are expected when emitting ESM."""

    return message.startswith(BENIGN_WARNING_PREFIXES)


class DispatcherState(str, Enum):
    """Lifecycle of a :class:`TransformerDispatcher`."""

    UNSELECTED = "unselected"
    LOADING = "loading"
    CONFIGURED = "configured"
    ACTIVE = "active"
    FAILED = "failed"


class TransformerDispatcher:
    """Own the single backend selected for one build.

    The dispatcher moves through ``UNSELECTED -> LOADING -> CONFIGURED ->
    ACTIVE``; any error while loading or configuring moves it to ``FAILED``
    and is re-raised. Only ``ACTIVE`` dispatchers transform files.
    """

    def __init__(
        self,
        name: object,
        *,
        registry: TransformerRegistry = DEFAULT_REGISTRY,
        bridge: NodeBridge | None = None,
    ) -> None:
        """Initialise the dispatcher.

        Args:
            name: Transformer name selected by the user.
            registry: Registry the name is looked up in.
            bridge: Node bridge handed to the backend factory.
        """

        self.name = name
        self._registry = registry
        self._bridge = bridge or NodeBridge()
        self._backend: TransformBackend | None = None
        self.state = DispatcherState.UNSELECTED

    @property
    def backend(self) -> TransformBackend | None:
        """Return the loaded backend, if any."""

        return self._backend

    def load(self) -> TransformBackend:
        """Instantiate and load the selected backend.

        Returns:
            TransformBackend: Loaded backend.

        Raises:
            StartupConfigurationError: If the name is not registered.
            BackendLoadError: If the backend package cannot be loaded.
        """

        self._require(DispatcherState.UNSELECTED)
        factory = self._registry.try_get(self.name)
        if factory is None:
            self.state = DispatcherState.FAILED
            raise StartupConfigurationError(unknown_transformer_message(self.name))
        self.state = DispatcherState.LOADING
        backend = factory(self._bridge)
        try:
            backend.load()
        except FastTsError:
            self.state = DispatcherState.FAILED
            raise
        self._backend = backend
        return backend

    def configure(self, options: CompilerOptions, warn: WarnCallback) -> None:
        """Hand the normalised options to the backend exactly once."""

        self._require(DispatcherState.LOADING)
        backend = self._loaded_backend()
        try:
            backend.configure(options, warn)
        except FastTsError:
            self.state = DispatcherState.FAILED
            raise
        self.state = DispatcherState.CONFIGURED

    def activate(self) -> None:
        """Allow transforms to be dispatched."""

        self._require(DispatcherState.CONFIGURED)
        self.state = DispatcherState.ACTIVE

    def transform(self, source: str, path: str) -> TransformOutcome:
        """Route ``path`` to the backend and filter its warnings.

        Args:
            source: File contents.
            path: Absolute file path.

        Returns:
            TransformOutcome: Skip for non-TypeScript files, otherwise the
            backend's outcome without benign warnings.
        """

        self._require(DispatcherState.ACTIVE)
        backend = self._loaded_backend()
        if not is_ts_source_file(path):
            return TransformOutcome.skip()
        outcome = backend.transform_file(source, path)
        kept = tuple(warning for warning in outcome.warnings if not is_benign_warning(warning.message))
        if len(kept) != len(outcome.warnings):
            outcome = replace(outcome, warnings=kept)
        return outcome

    def _require(self, expected: DispatcherState) -> None:
        if self.state is not expected:
            raise RuntimeError(
                f"Transformer dispatcher is {self.state.value}; expected {expected.value}",
            )

    def _loaded_backend(self) -> TransformBackend:
        if self._backend is None:
            raise RuntimeError("Transformer dispatcher has no loaded backend")
        return self._backend


__all__ = [
    "DEFAULT_REGISTRY",
    "BackendFactory",
    "DispatcherState",
    "TransformerDispatcher",
    "TransformerRegistry",
    "is_benign_warning",
    "is_transformer_name",
    "unknown_transformer_message",
]
