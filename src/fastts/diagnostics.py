# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Diagnostic records produced while reading and validating configuration."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum


class Severity(str, Enum):
    """Severity of a configuration diagnostic."""

    ERROR = "error"
    WARNING = "warning"


@dataclass(frozen=True, slots=True)
class Diagnostic:
    """Human-readable configuration message with a severity and optional origin."""

    severity: Severity
    message: str
    file: str | None = None

    @classmethod
    def error(cls, message: str, *, file: str | None = None) -> Diagnostic:
        """Return an error diagnostic for ``message``."""

        return cls(Severity.ERROR, message, file)

    @classmethod
    def warning(cls, message: str, *, file: str | None = None) -> Diagnostic:
        """Return a warning diagnostic for ``message``."""

        return cls(Severity.WARNING, message, file)

    @property
    def is_error(self) -> bool:
        """Return ``True`` when the diagnostic aborts the build."""

        return self.severity is Severity.ERROR


def first_error(diagnostics: Iterable[Diagnostic]) -> Diagnostic | None:
    """Return the first error-severity diagnostic, if any."""

    return next((diagnostic for diagnostic in diagnostics if diagnostic.is_error), None)


def warnings_only(diagnostics: Iterable[Diagnostic]) -> list[Diagnostic]:
    """Return every warning-severity diagnostic in original order."""

    return [diagnostic for diagnostic in diagnostics if diagnostic.severity is Severity.WARNING]


__all__ = ["Diagnostic", "Severity", "first_error", "warnings_only"]
