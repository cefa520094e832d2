# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Host-facing plugin wiring configuration, resolution and transformation together.

A host drives :class:`FastTypescriptPlugin` through four hooks:
``build_start`` once per build, ``resolve_id`` for each import request,
``transform`` for each loaded file and ``build_end`` when the build finishes.
All per-build state lives in a :class:`BuildSession` created by
``build_start`` and discarded by ``build_end``.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import NoReturn, Protocol

from . import __version__
from .compiler.resolver import ModuleResolutionCache, ModuleResolver
from .config.loader import ConfigChainLoader
from .config.models import ResolvedOptions
from .config.normalizer import normalize_options
from .config.sources import ConfigArgument, ResolvedSource, reduce_config_source
from .constants import DEFAULT_TRANSFORMER
from .errors import FastTsError, StartupConfigurationError, TransformError
from .resolution import ResolutionCache, ResolveOutcome
from .transformers.base import OutcomeKind, TransformOutcome
from .transformers.bridge import NodeBridge
from .transformers.registry import (
    DEFAULT_REGISTRY,
    TransformerDispatcher,
    TransformerRegistry,
    is_transformer_name,
    unknown_transformer_message,
)

LOGGER = logging.getLogger(__name__)

PLUGIN_NAME = "fast-typescript"

BridgeFactory = Callable[[Path], NodeBridge]


class PluginContext(Protocol):
    """Services the host exposes to plugin hooks."""

    @property
    def watch_mode(self) -> bool:
        """Return ``True`` when the host rebuilds on file changes."""
        ...

    def warn(self, message: str, *, file: str | None = None, location: tuple[int, int] | None = None) -> None:
        """Report a non-fatal message, optionally located at ``(line, column)``."""
        ...

    def error(self, error: FastTsError) -> NoReturn:
        """Abort the current phase with ``error``."""
        ...

    def add_watch_file(self, path: str) -> None:
        """Ask the host to rebuild when ``path`` changes."""
        ...


def simple_error(context: PluginContext, error: object) -> NoReturn:
    """Report ``error`` through the host's single error path without a traceback."""

    if isinstance(error, FastTsError):
        context.error(error)
    message = str(error) if isinstance(error, (Exception, str)) else "Unexpected error"
    context.error(FastTsError(message))


@dataclass(slots=True)
class BuildSession:
    """State owned by exactly one build."""

    options: ResolvedOptions
    chain: tuple[str, ...]
    file_names: tuple[str, ...]
    dispatcher: TransformerDispatcher
    resolution: ResolutionCache


class FastTypescriptPlugin:
    """Transpile TypeScript with a fast backend while honouring ``tsconfig.json``."""

    name = PLUGIN_NAME
    version = __version__

    def __init__(
        self,
        config: ConfigArgument = True,
        transformer: object = DEFAULT_TRANSFORMER,
        *,
        project_root: Path | None = None,
        registry: TransformerRegistry = DEFAULT_REGISTRY,
        bridge_factory: BridgeFactory | None = None,
    ) -> None:
        """Initialise the plugin.

        A transformer name passed as ``config`` selects that transformer with
        the default configuration. Problems with either argument are kept and
        reported when the first build starts.

        Args:
            config: Configuration argument (see :func:`reduce_config_source`).
            transformer: Name of the backend to use.
            project_root: Directory used for the default ``tsconfig.json``,
                relative configuration paths and npm package lookup.
            registry: Registry of available backends.
            bridge_factory: Builds the Node bridge for a project directory.
        """

        self.project_root = (project_root or Path.cwd()).resolve()
        self.registry = registry
        self._bridge_factory = bridge_factory or NodeBridge
        self._startup_error: FastTsError | None = None
        self._source: ResolvedSource | None = None
        self.session: BuildSession | None = None

        if is_transformer_name(config, registry):
            transformer, config = config, True
        self.transformer = transformer

        if registry.try_get(transformer) is None:
            self._startup_error = StartupConfigurationError(unknown_transformer_message(transformer))
            return
        try:
            self._source = reduce_config_source(config)
        except StartupConfigurationError as exc:
            self._startup_error = exc

    def build_start(self, context: PluginContext) -> None:
        """Load configuration, configure the backend and reset every cache."""

        self.session = None
        if self._startup_error is not None or self._source is None:
            simple_error(context, self._startup_error or "Unexpected error")

        dispatcher = TransformerDispatcher(
            self.transformer,
            registry=self.registry,
            bridge=self._bridge_factory(self.project_root),
        )
        try:
            dispatcher.load()
            loaded = ConfigChainLoader(self.project_root).load(self._source)
        except FastTsError as exc:
            simple_error(context, exc)

        for warning in loaded.warnings:
            context.warn(warning.message, file=warning.file)
        resolved, warnings = normalize_options(loaded.options)
        for warning in warnings:
            context.warn(warning.message)

        try:
            dispatcher.configure(resolved.compiler_options, context.warn)
            dispatcher.activate()
        except FastTsError as exc:
            simple_error(context, exc)

        resolver = ModuleResolver(resolved.compiler_options, cache=ModuleResolutionCache())
        self.session = BuildSession(
            options=resolved,
            chain=loaded.chain,
            file_names=loaded.file_names,
            dispatcher=dispatcher,
            resolution=ResolutionCache(resolver),
        )
        LOGGER.debug("build started with %s, %d config file(s)", self.transformer, len(loaded.chain))

        if context.watch_mode:
            for path in loaded.chain:
                context.add_watch_file(path)

    def resolve_id(self, specifier: str, importer: str | None, *, is_entry: bool = False) -> ResolveOutcome:
        """Resolve an import request using the compiler's lookup rules."""

        return self._active_session().resolution.resolve(specifier, importer, is_entry=is_entry)

    def transform(self, context: PluginContext, source: str, path: str) -> TransformOutcome | None:
        """Transform one file.

        Args:
            context: Host services for warnings and errors.
            source: File contents.
            path: Absolute file path.

        Returns:
            TransformOutcome | None: Successful outcome, or ``None`` when the
            file is not handled by this plugin.
        """

        outcome = self._active_session().dispatcher.transform(source, path)
        for warning in outcome.warnings:
            location = (warning.line, warning.column or 0) if warning.line is not None else None
            context.warn(warning.message, file=path, location=location)
        if outcome.kind is OutcomeKind.FAILURE:
            context.error(TransformError(outcome.message, path=path))
        if outcome.kind is OutcomeKind.SKIP:
            return None
        return outcome

    def build_end(self) -> None:
        """Discard the per-build session."""

        self.session = None

    def _active_session(self) -> BuildSession:
        if self.session is None:
            raise RuntimeError("build_start() must complete before files are resolved or transformed")
        return self.session


def fast_typescript(
    config: ConfigArgument = True,
    transformer: object = DEFAULT_TRANSFORMER,
    *,
    project_root: Path | None = None,
) -> FastTypescriptPlugin:
    """Return a :class:`FastTypescriptPlugin` for ``config`` and ``transformer``."""

    return FastTypescriptPlugin(config, transformer, project_root=project_root)


__all__ = [
    "PLUGIN_NAME",
    "BuildSession",
    "FastTypescriptPlugin",
    "PluginContext",
    "fast_typescript",
    "simple_error",
]
