# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Per-build cache of import resolutions handed back to the host."""

from __future__ import annotations

import logging
from concurrent.futures import Future
from dataclasses import dataclass
from enum import Enum
from threading import Lock
from typing import Protocol

from .compiler.types import ResolvedModule
from .constants import HOST_INTERNAL_PREFIX
from .paths import is_ts_declaration_file, is_ts_source_file

LOGGER = logging.getLogger(__name__)


class ResolutionKind(str, Enum):
    """How the host should treat a resolution request."""

    PASS_THROUGH = "pass-through"
    DECLINED = "declined"
    RESOLVED = "resolved"


@dataclass(frozen=True, slots=True)
class ResolveOutcome:
    """Answer to a single resolution request.

    ``PASS_THROUGH`` means the request was not eligible and nothing was
    cached; ``DECLINED`` means the host should fall back to its own resolution.
    """

    kind: ResolutionKind
    path: str | None = None

    @classmethod
    def pass_through(cls) -> ResolveOutcome:
        return cls(ResolutionKind.PASS_THROUGH)

    @classmethod
    def declined(cls) -> ResolveOutcome:
        return cls(ResolutionKind.DECLINED)

    @classmethod
    def resolved(cls, path: str) -> ResolveOutcome:
        return cls(ResolutionKind.RESOLVED, path)


class Resolver(Protocol):
    """Anything able to resolve a specifier relative to an importing file."""

    def resolve(self, specifier: str, importer: str) -> ResolvedModule | None:
        """Return the resolved module or ``None``."""
        ...


class ResolutionCache:
    """Memoise resolver answers for the lifetime of one build.

    Entries are keyed by the specifier alone, so the first importer to ask for
    a specifier determines the answer for every later importer. Concurrent
    first requests for one specifier share a single resolver call.
    """

    def __init__(self, resolver: Resolver) -> None:
        self._resolver = resolver
        self._lock = Lock()
        self._entries: dict[str, Future[ResolveOutcome]] = {}

    def resolve(self, specifier: str, importer: str | None, *, is_entry: bool = False) -> ResolveOutcome:
        """Resolve ``specifier`` imported from ``importer``.

        Args:
            specifier: Module specifier as written in the importing file.
            importer: Absolute path of the importing file, if any.
            is_entry: ``True`` when the host is resolving a build entry point.

        Returns:
            ResolveOutcome: Pass-through, declined or resolved path.
        """

        if not importer or is_entry or not is_ts_source_file(importer) or specifier.startswith(HOST_INTERNAL_PREFIX):
            return ResolveOutcome.pass_through()

        with self._lock:
            future = self._entries.get(specifier)
            owner = future is None
            if future is None:
                future = Future()
                self._entries[specifier] = future

        if owner:
            try:
                outcome = self._lookup(specifier, importer)
            except Exception as exc:
                with self._lock:
                    self._entries.pop(specifier, None)
                future.set_exception(exc)
                raise
            future.set_result(outcome)
        return future.result()

    def _lookup(self, specifier: str, importer: str) -> ResolveOutcome:
        module = self._resolver.resolve(specifier, importer)
        if module is None or is_ts_declaration_file(module.resolved_file_name):
            LOGGER.debug("declining %r from %s", specifier, importer)
            return ResolveOutcome.declined()
        return ResolveOutcome.resolved(module.resolved_file_name)

    def __contains__(self, specifier: object) -> bool:
        with self._lock:
            return specifier in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


__all__ = ["ResolutionCache", "ResolutionKind", "ResolveOutcome", "Resolver"]
