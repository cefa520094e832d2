# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Reading and inheritance-merging of ``tsconfig.json`` documents.

The public surface mirrors the compiler API consumed by build tools:
:func:`read_config_file` turns a file into a raw document (or one fatal
diagnostic) and :func:`parse_config_content` follows ``extends`` links,
converts ``compilerOptions`` and expands the file specs.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Final, Protocol

import json5

from ..constants import DEFAULT_CONFIG_FILENAME, PACKAGE_JSON_FILENAME
from ..diagnostics import Diagnostic
from .files import expand_file_specs
from .options import convert_compiler_options, validate_compiler_options
from .package_json import default_read_file, read_package_json, resolve_exports, split_package_name
from .types import CompilerOptions, ConfigObject, ParsedConfig

LOGGER = logging.getLogger(__name__)

_LIST_KEYS: Final[tuple[str, ...]] = ("files", "include", "exclude")
_EXTENDS_CONDITIONS: Final[tuple[str, ...]] = ("types", "node", "require")
_JSON_SUFFIX: Final[str] = ".json"


class ConfigHost(Protocol):
    """File-system access used while reading configuration files."""

    def read_file(self, path: str) -> str | None:
        """Return the text of ``path`` or ``None`` when it cannot be read."""
        ...

    def file_exists(self, path: str) -> bool:
        """Return ``True`` when ``path`` names an existing regular file."""
        ...


class FileSystemHost:
    """:class:`ConfigHost` reading straight from the local file system."""

    def read_file(self, path: str) -> str | None:
        return default_read_file(path)

    def file_exists(self, path: str) -> bool:
        return os.path.isfile(path)


class RecordingHost:
    """:class:`ConfigHost` wrapper recording every configuration file it reads.

    Reads of ``package.json`` happen only as a side effect of resolving
    package-style ``extends`` targets and are never recorded.
    """

    def __init__(self, inner: ConfigHost | None = None) -> None:
        self._inner = inner or FileSystemHost()
        self.files_read: list[str] = []

    def read_file(self, path: str) -> str | None:
        if os.path.basename(path) != PACKAGE_JSON_FILENAME:
            self.files_read.append(os.path.normpath(path))
        return self._inner.read_file(path)

    def file_exists(self, path: str) -> bool:
        return self._inner.file_exists(path)


def parse_json_text(file_name: str, text: str) -> tuple[dict[str, Any] | None, Diagnostic | None]:
    """Parse JSON-with-comments ``text`` belonging to ``file_name``.

    Args:
        file_name: Name used when attributing diagnostics.
        text: Raw file contents.

    Returns:
        tuple[dict[str, Any] | None, Diagnostic | None]: Parsed object or a
        single error diagnostic.
    """

    try:
        data = json5.loads(text)
    except ValueError as exc:
        return None, Diagnostic.error(f"Failed to parse file '{file_name}': {exc}", file=file_name)
    if not isinstance(data, dict):
        name = os.path.basename(file_name) or DEFAULT_CONFIG_FILENAME
        return None, Diagnostic.error(f"The root value of a '{name}' file must be an object.", file=file_name)
    return data, None


def read_config_file(path: str, host: ConfigHost | None = None) -> tuple[dict[str, Any] | None, Diagnostic | None]:
    """Read and parse the configuration file at ``path``.

    Args:
        path: Absolute path of the configuration file.
        host: Optional host used for file access.

    Returns:
        tuple[dict[str, Any] | None, Diagnostic | None]: Raw document or the
        single diagnostic explaining why it could not be read.
    """

    reader = host or FileSystemHost()
    text = reader.read_file(path)
    if text is None:
        return None, Diagnostic.error(f"Cannot read file '{path}'.", file=path)
    return parse_json_text(path, text)


@dataclass(slots=True)
class _Layer:
    """Converted contribution of one configuration file."""

    options: dict[str, Any] = field(default_factory=dict)
    files: list[str] | None = None
    include: list[str] | None = None
    exclude: list[str] | None = None
    references: list[dict[str, Any]] = field(default_factory=list)
    watch_options: dict[str, Any] | None = None
    compile_on_save: bool | None = None

    def extended_by(self, derived: _Layer) -> _Layer:
        """Return the merge of ``self`` (base) overridden by ``derived``."""

        watch_options = None
        if self.watch_options is not None or derived.watch_options is not None:
            watch_options = {**(self.watch_options or {}), **(derived.watch_options or {})}
        return _Layer(
            options={**self.options, **derived.options},
            files=derived.files if derived.files is not None else self.files,
            include=derived.include if derived.include is not None else self.include,
            exclude=derived.exclude if derived.exclude is not None else self.exclude,
            references=derived.references,
            watch_options=watch_options,
            compile_on_save=(derived.compile_on_save if derived.compile_on_save is not None else self.compile_on_save),
        )


def _absolute(entries: Sequence[str] | None, base_dir: Path) -> list[str] | None:
    if entries is None:
        return None
    return [os.path.normpath(os.path.join(base_dir, entry)) for entry in entries]


def _is_relative_spec(spec: str) -> bool:
    return spec.startswith(("./", "../", ".\\", "..\\")) or spec in {".", ".."} or os.path.isabs(spec)


class _ConfigParser:
    """Recursive ``extends`` walker accumulating diagnostics."""

    def __init__(self, host: ConfigHost) -> None:
        self._host = host
        self.diagnostics: list[Diagnostic] = []

    def parse(
        self,
        raw: Mapping[str, Any],
        base_dir: Path,
        file_name: str,
        stack: tuple[str, ...],
    ) -> _Layer:
        document = self._validate_document(raw, file_name)
        own = self._own_layer(document, base_dir, file_name)
        merged_base: _Layer | None = None
        for spec in self._extends_entries(document.extends):
            layer = self._parse_extended(spec, base_dir, file_name, stack)
            if layer is None:
                continue
            merged_base = layer if merged_base is None else merged_base.extended_by(layer)
        return own if merged_base is None else merged_base.extended_by(own)

    def _parse_extended(
        self,
        spec: str,
        base_dir: Path,
        file_name: str,
        stack: tuple[str, ...],
    ) -> _Layer | None:
        path = self._resolve_extends(spec, base_dir, file_name)
        if path is None:
            return None
        if path in stack:
            chain = " -> ".join((*stack, path))
            self.diagnostics.append(
                Diagnostic.error(f"Circularity detected while resolving configuration: {chain}", file=file_name),
            )
            return None
        LOGGER.debug("extending %s with %s", file_name, path)
        data, problem = read_config_file(path, self._host)
        if problem is not None:
            self.diagnostics.append(problem)
        if data is None:
            return None
        return self.parse(data, Path(path).parent, path, (*stack, path))

    def _validate_document(self, raw: Mapping[str, Any], file_name: str) -> ConfigObject:
        cleaned: dict[str, Any] = dict(raw)
        extends = cleaned.get("extends")
        if extends is not None and not (
            isinstance(extends, str) or (isinstance(extends, list) and all(isinstance(item, str) for item in extends))
        ):
            self._type_error("extends", "string or Array", file_name)
            cleaned.pop("extends")
        for key in _LIST_KEYS:
            value = cleaned.get(key)
            if value is not None and not (isinstance(value, list) and all(isinstance(item, str) for item in value)):
                self._type_error(key, "Array", file_name)
                cleaned.pop(key)
        for key in ("compilerOptions", "watchOptions"):
            value = cleaned.get(key)
            if value is not None and not isinstance(value, dict):
                self._type_error(key, "object", file_name)
                cleaned.pop(key)
        references = cleaned.get("references")
        if references is not None and not (
            isinstance(references, list) and all(isinstance(item, dict) for item in references)
        ):
            self._type_error("references", "Array", file_name)
            cleaned.pop("references")
        compile_on_save = cleaned.get("compileOnSave")
        if compile_on_save is not None and not isinstance(compile_on_save, bool):
            self._type_error("compileOnSave", "boolean", file_name)
            cleaned.pop("compileOnSave")
        return ConfigObject.model_validate(cleaned)

    def _type_error(self, key: str, expected: str, file_name: str) -> None:
        self.diagnostics.append(
            Diagnostic.error(f"Compiler option '{key}' requires a value of type {expected}.", file=file_name),
        )

    def _own_layer(self, document: ConfigObject, base_dir: Path, file_name: str) -> _Layer:
        options, problems = convert_compiler_options(
            document.compiler_options or {},
            base_dir,
            file_name=file_name,
        )
        self.diagnostics.extend(problems)

        references = [
            {**reference, "path": os.path.normpath(os.path.join(base_dir, reference["path"]))}
            for reference in document.references or ()
            if isinstance(reference.get("path"), str)
        ]
        return _Layer(
            options=options,
            files=_absolute(document.files, base_dir),
            include=_absolute(document.include, base_dir),
            exclude=_absolute(document.exclude, base_dir),
            references=references,
            watch_options=document.watch_options,
            compile_on_save=document.compile_on_save,
        )

    @staticmethod
    def _extends_entries(extends: str | list[str] | None) -> list[str]:
        if extends is None:
            return []
        return [extends] if isinstance(extends, str) else list(extends)

    def _resolve_extends(self, spec: str, base_dir: Path, file_name: str) -> str | None:
        if _is_relative_spec(spec):
            candidate = os.path.normpath(os.path.join(base_dir, spec))
            if self._host.file_exists(candidate):
                return candidate
            if not candidate.endswith(_JSON_SUFFIX) and self._host.file_exists(candidate + _JSON_SUFFIX):
                return candidate + _JSON_SUFFIX
        elif (resolved := self._resolve_extends_package(spec, base_dir)) is not None:
            return resolved
        self.diagnostics.append(Diagnostic.error(f"File '{spec}' not found.", file=file_name))
        return None

    def _resolve_extends_package(self, spec: str, base_dir: Path) -> str | None:
        name, subpath = split_package_name(spec)
        for directory in (base_dir, *base_dir.parents):
            package_dir = directory / "node_modules" / name
            if not package_dir.is_dir():
                continue
            manifest = read_package_json(package_dir, self._host.read_file)
            candidates: list[str] = []
            if manifest is not None and "exports" in manifest:
                target = resolve_exports(manifest["exports"], subpath, _EXTENDS_CONDITIONS)
                if target is not None:
                    candidates.append(target)
            if subpath:
                candidates.extend([subpath, subpath + _JSON_SUFFIX])
            else:
                tsconfig_field = manifest.get("tsconfig") if manifest else None
                if isinstance(tsconfig_field, str):
                    candidates.append(tsconfig_field)
                candidates.append(DEFAULT_CONFIG_FILENAME)
            for candidate in candidates:
                path = os.path.normpath(os.path.join(package_dir, candidate))
                if self._host.file_exists(path):
                    return path
        return None


def parse_config_content(
    raw: Mapping[str, Any],
    host: ConfigHost,
    base_dir: Path,
    *,
    config_file_name: str | None = None,
) -> ParsedConfig:
    """Merge ``raw`` with its ``extends`` chain and convert it.

    Args:
        raw: Root configuration document.
        host: File access used for every extended file.
        base_dir: Directory relative paths in ``raw`` are resolved against.
        config_file_name: Absolute path of the root file, or a synthetic name
            for in-memory configurations.

    Returns:
        ParsedConfig: Converted options, expanded file names and every
        diagnostic raised while parsing.
    """

    file_name = config_file_name or str(base_dir / DEFAULT_CONFIG_FILENAME)
    parser = _ConfigParser(host)
    stack = (os.path.normpath(file_name),) if os.path.isabs(file_name) else ()
    layer = parser.parse(raw, base_dir, file_name, stack)
    diagnostics = list(parser.diagnostics)
    diagnostics.extend(validate_compiler_options(layer.options, file_name=file_name))

    options = CompilerOptions.model_validate(layer.options)
    file_names = expand_file_specs(
        files=layer.files,
        include=layer.include,
        exclude=layer.exclude,
        base_dir=base_dir,
        allow_js=bool(options.allow_js),
        out_dir=options.out_dir,
    )
    return ParsedConfig(
        options=options,
        file_names=tuple(file_names),
        project_references=tuple(layer.references),
        watch_options=layer.watch_options,
        errors=tuple(diagnostics),
    )


__all__ = [
    "ConfigHost",
    "FileSystemHost",
    "RecordingHost",
    "parse_config_content",
    "parse_json_text",
    "read_config_file",
]
