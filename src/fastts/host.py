# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Minimal in-process host that runs the plugin over a project's files."""

from __future__ import annotations

import logging
import os
from collections.abc import Sequence
from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from pathlib import Path
from threading import Lock
from typing import Final, NoReturn

from .compiler.types import JsxEmit
from .errors import FastTsError
from .logging import warn as log_warn
from .plugin import BuildSession, FastTypescriptPlugin

LOGGER = logging.getLogger(__name__)

_OUTPUT_EXTENSIONS: Final[dict[str, str]] = {
    ".ts": ".js",
    ".tsx": ".js",
    ".mts": ".mjs",
    ".cts": ".cjs",
}
_PRESERVED_JSX: Final[frozenset[JsxEmit]] = frozenset({JsxEmit.PRESERVE, JsxEmit.REACT_NATIVE})


@dataclass(frozen=True, slots=True)
class HostWarning:
    """Warning reported by the plugin during a build."""

    message: str
    file: str | None = None
    location: tuple[int, int] | None = None

    def render(self) -> str:
        """Return ``file:line:column: message`` (or just the message)."""

        if self.file is None:
            return self.message
        if self.location is None:
            return f"{self.file}: {self.message}"
        line, column = self.location
        return f"{self.file}:{line}:{column}: {self.message}"


class ConsoleBuildContext:
    """:class:`~fastts.plugin.PluginContext` printing warnings with Rich.

    Fatal errors are raised to the caller unchanged.
    """

    def __init__(self, *, watch_mode: bool = False, use_emoji: bool = True, quiet: bool = False) -> None:
        self._watch_mode = watch_mode
        self._use_emoji = use_emoji
        self._quiet = quiet
        self._lock = Lock()
        self.warnings: list[HostWarning] = []
        self.watch_files: list[str] = []

    @property
    def watch_mode(self) -> bool:
        return self._watch_mode

    def warn(self, message: str, *, file: str | None = None, location: tuple[int, int] | None = None) -> None:
        warning = HostWarning(message, file, location)
        with self._lock:
            self.warnings.append(warning)
        if not self._quiet:
            log_warn(warning.render(), use_emoji=self._use_emoji)

    def error(self, error: FastTsError) -> NoReturn:
        raise error from None

    def add_watch_file(self, path: str) -> None:
        with self._lock:
            self.watch_files.append(path)


@dataclass(slots=True)
class BuildReport:
    """Summary of a :class:`ProjectBuild` run."""

    outputs: list[Path] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    warnings: int = 0


def output_path(source: Path, session: BuildSession, out_dir: Path | None) -> Path:
    """Return where the JavaScript for ``source`` is written.

    Without an output directory the file is written next to its source;
    otherwise its location relative to ``rootDir`` (or the configuration's base
    directory) is preserved beneath ``out_dir``.
    """

    options = session.options.compiler_options
    suffix = _OUTPUT_EXTENSIONS.get(source.suffix, ".js")
    if source.suffix == ".tsx" and options.jsx in _PRESERVED_JSX:
        suffix = ".jsx"
    if out_dir is None:
        return source.with_suffix(suffix)
    root = options.root_dir or session.options.base_dir
    relative = os.path.relpath(source, root)
    if relative.startswith(os.pardir):
        relative = source.name
    return (out_dir / relative).with_suffix(suffix)


class ProjectBuild:
    """Drive one plugin build over a list of files using a thread pool."""

    def __init__(
        self,
        plugin: FastTypescriptPlugin,
        context: ConsoleBuildContext,
        *,
        out_dir: Path | None = None,
        jobs: int | None = None,
    ) -> None:
        """Initialise the build.

        Args:
            plugin: Plugin instance to drive.
            context: Host context receiving warnings and errors.
            out_dir: Output directory overriding the configuration's ``outDir``.
            jobs: Maximum number of concurrent transforms.
        """

        self.plugin = plugin
        self.context = context
        self.out_dir = out_dir
        self.jobs = jobs

    def run(self, files: Sequence[str | Path] | None = None) -> BuildReport:
        """Transform ``files`` (or the configuration's file list) and write the results.

        Raises:
            FastTsError: On the first fatal configuration or transform error;
                pending transforms are cancelled.
        """

        self.plugin.build_start(self.context)
        try:
            session = self.plugin.session
            if session is None:
                raise RuntimeError("build_start() did not create a build session")
            inputs = [str(Path(name).resolve()) for name in files] if files else list(session.file_names)
            out_dir = self.out_dir or session.options.compiler_options.out_dir
            report = BuildReport()
            with ThreadPoolExecutor(max_workers=self.jobs) as executor:
                futures: dict[Future[Path | None], str] = {
                    executor.submit(self._transform_one, session, path, out_dir): path for path in inputs
                }
                try:
                    for future in as_completed(futures):
                        written = future.result()
                        if written is None:
                            report.skipped.append(futures[future])
                        else:
                            report.outputs.append(written)
                except BaseException:
                    for future in futures:
                        future.cancel()
                    raise
        finally:
            self.plugin.build_end()
        report.outputs.sort()
        report.skipped.sort()
        report.warnings = len(self.context.warnings)
        return report

    def _transform_one(self, session: BuildSession, path: str, out_dir: Path | None) -> Path | None:
        source = Path(path)
        result = self.plugin.transform(self.context, source.read_text(encoding="utf-8"), path)
        if result is None:
            LOGGER.debug("skipped %s", path)
            return None
        target = output_path(source, session, out_dir)
        target.parent.mkdir(parents=True, exist_ok=True)
        code = result.code
        if result.map is not None:
            map_path = target.with_name(target.name + ".map")
            map_path.write_text(result.map, encoding="utf-8")
            body = code.rstrip("\n")
            code = f"{body}\n//# sourceMappingURL={map_path.name}\n"
        target.write_text(code, encoding="utf-8")
        LOGGER.debug("wrote %s", target)
        return target


__all__ = ["BuildReport", "ConsoleBuildContext", "HostWarning", "ProjectBuild", "output_path"]
