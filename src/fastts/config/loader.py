# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Load a configuration source and its ``extends`` chain into merged options."""

from __future__ import annotations

import logging
import os
from pathlib import Path

from ..compiler.tsconfig import ConfigHost, FileSystemHost, RecordingHost, parse_config_content, read_config_file
from ..compiler.types import ParsedConfig
from ..constants import DEFAULT_CONFIG_FILENAME, INLINE_CONFIG_NAME
from ..diagnostics import first_error, warnings_only
from ..errors import StartupConfigurationError
from .models import ConfigChainResult, ResolvedOptions
from .sources import Disabled, InlineSource, PathSource, ResolvedSource, UseDefault

LOGGER = logging.getLogger(__name__)


class ConfigChainLoader:
    """Resolve a :class:`ResolvedSource` into merged options and its file chain."""

    def __init__(self, project_root: Path | None = None, *, host: ConfigHost | None = None) -> None:
        """Initialise the loader.

        Args:
            project_root: Directory relative configuration paths are resolved
                against; defaults to the current working directory.
            host: Optional file access used for every configuration read.
        """

        self.project_root = (project_root or Path.cwd()).resolve()
        self._host = host or FileSystemHost()

    def load(self, source: ResolvedSource) -> ConfigChainResult:
        """Load ``source`` and return the merged, un-normalised result.

        Args:
            source: Concrete configuration source.

        Returns:
            ConfigChainResult: Merged options, chain record and warnings.

        Raises:
            StartupConfigurationError: On the first error diagnostic raised by
                reading, parsing or validating the configuration.
        """

        if isinstance(source, Disabled):
            return ConfigChainResult(options=ResolvedOptions(base_dir=Path.cwd()))
        if isinstance(source, UseDefault):
            source = PathSource(str(self.project_root / DEFAULT_CONFIG_FILENAME))
        if isinstance(source, PathSource):
            return self._load_file(source.path)
        if isinstance(source, InlineSource):
            return self._load_inline(source)
        raise StartupConfigurationError(f"Invalid value '{source!r}' for tsconfig parameter.")

    def _load_file(self, path: str) -> ConfigChainResult:
        config_path = os.path.normpath(os.path.join(self.project_root, path))
        base_dir = Path(config_path).parent
        chain = [config_path]
        raw, problem = read_config_file(config_path, self._host)
        if problem is not None:
            raise StartupConfigurationError(problem.message) from None
        recorder = RecordingHost(self._host)
        parsed = parse_config_content(raw or {}, recorder, base_dir, config_file_name=config_path)
        chain.extend(recorder.files_read)
        LOGGER.debug("configuration chain for %s: %s", config_path, chain)
        return self._finish(parsed, base_dir, chain)

    def _load_inline(self, source: InlineSource) -> ConfigChainResult:
        base_dir = Path.cwd()
        recorder = RecordingHost(self._host)
        parsed = parse_config_content(source.document, recorder, base_dir, config_file_name=INLINE_CONFIG_NAME)
        return self._finish(parsed, base_dir, list(recorder.files_read))

    @staticmethod
    def _finish(parsed: ParsedConfig, base_dir: Path, chain: list[str]) -> ConfigChainResult:
        error = first_error(parsed.errors)
        if error is not None:
            raise StartupConfigurationError(error.message) from None
        return ConfigChainResult(
            options=ResolvedOptions(compiler_options=parsed.options, base_dir=base_dir),
            chain=tuple(chain),
            warnings=tuple(warnings_only(parsed.errors)),
            file_names=parsed.file_names,
        )


__all__ = ["ConfigChainLoader"]
