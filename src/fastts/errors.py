# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Exception hierarchy for fatal build errors.

Every fatal condition is a user configuration or environment problem rather
than an internal fault, so hosts report these errors by message alone.
"""

from __future__ import annotations


class FastTsError(Exception):
    """Base class for fatal errors reported to the host."""

    @property
    def message(self) -> str:
        """Return the human-readable message carried by the error.

        Returns:
            str: Message passed when the error was raised.
        """

        return str(self.args[0]) if self.args else ""


class StartupConfigurationError(FastTsError):
    """Raised for invalid configuration sources, config files or transformer names."""


class BackendLoadError(FastTsError):
    """Raised when the selected transform backend cannot be loaded."""

    def __init__(self, message: str, *, missing_dependency: bool = False) -> None:
        """Initialise the error.

        Args:
            message: Description of the load failure.
            missing_dependency: ``True`` when the backend package is not installed.
        """

        super().__init__(message)
        self.missing_dependency = missing_dependency


class TransformError(FastTsError):
    """Raised when a backend rejects or fails on a single source file."""

    def __init__(self, message: str, *, path: str) -> None:
        """Initialise the error.

        Args:
            message: Backend message, kept verbatim.
            path: Source file the backend failed on.
        """

        super().__init__(message)
        self.path = path


__all__ = [
    "BackendLoadError",
    "FastTsError",
    "StartupConfigurationError",
    "TransformError",
]
