# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Contract shared by every transform backend."""

from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, ClassVar

from ..compiler.types import CompilerOptions
from ..errors import BackendLoadError
from .bridge import MODULE_NOT_FOUND, BridgeCallError, NodeBridge, is_compatible

LOGGER = logging.getLogger(__name__)

WarnCallback = Callable[[str], None]


class OutcomeKind(str, Enum):
    """Result category of a single file transform."""

    SUCCESS = "success"
    SKIP = "skip"
    FAILURE = "failure"


@dataclass(frozen=True, slots=True)
class TransformWarning:
    """Non-fatal backend message, optionally located in the source."""

    message: str
    line: int | None = None
    column: int | None = None


@dataclass(frozen=True, slots=True)
class TransformOutcome:
    """Normalised result of transforming one file."""

    kind: OutcomeKind
    code: str = ""
    map: str | None = None
    message: str = ""
    warnings: tuple[TransformWarning, ...] = field(default=())

    @classmethod
    def success(
        cls,
        code: str,
        source_map: Any = None,
        warnings: tuple[TransformWarning, ...] = (),
    ) -> TransformOutcome:
        """Return a successful outcome; mapping-shaped source maps are serialised."""

        if source_map is not None and not isinstance(source_map, str):
            source_map = json.dumps(source_map)
        return cls(OutcomeKind.SUCCESS, code=code, map=source_map or None, warnings=warnings)

    @classmethod
    def skip(cls) -> TransformOutcome:
        return cls(OutcomeKind.SKIP)

    @classmethod
    def failure(cls, message: str) -> TransformOutcome:
        return cls(OutcomeKind.FAILURE, message=message)


class TransformBackend(ABC):
    """One external transpiler driven through a :class:`NodeBridge`.

    Subclasses translate compiler options into the backend's option vocabulary
    in :meth:`configure` and must not mutate shared state in
    :meth:`transform_file`, which may run concurrently.
    """

    name: ClassVar[str]
    package: ClassVar[str]
    minimum_version: ClassVar[str | None] = None

    def __init__(self, bridge: NodeBridge) -> None:
        self.bridge = bridge
        self.version: str | None = None

    def load(self) -> None:
        """Verify the backend package is installed and recent enough.

        Raises:
            BackendLoadError: If the package is missing, fails to load or is
                older than :attr:`minimum_version`.
        """

        try:
            version = self.bridge.package_version(self.package)
        except BridgeCallError as exc:
            if exc.code == MODULE_NOT_FOUND:
                raise BackendLoadError(
                    f"Transformer '{self.name}' requires the optional dependency '{self.package}'; "
                    f"install it with `npm install --save-dev {self.package}`.",
                    missing_dependency=True,
                ) from None
            raise BackendLoadError(exc.message) from None
        if not is_compatible(version, self.minimum_version):
            raise BackendLoadError(
                f"Transformer '{self.name}' requires {self.package} >= {self.minimum_version}, "
                f"found {version or 'an unknown version'}.",
            )
        LOGGER.debug("loaded %s %s", self.package, version)
        self.version = version

    @abstractmethod
    def configure(self, options: CompilerOptions, warn: WarnCallback) -> None:
        """Translate ``options`` into the backend's transform options."""

    @abstractmethod
    def transform_file(self, source: str, path: str) -> TransformOutcome:
        """Transform ``source`` read from ``path``."""


__all__ = [
    "OutcomeKind",
    "TransformBackend",
    "TransformOutcome",
    "TransformWarning",
    "WarnCallback",
]
