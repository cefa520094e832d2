# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Module resolution following the TypeScript compiler's lookup rules.

:class:`ModuleResolver` implements the ``classic``, ``node10``, ``node16``,
``nodenext`` and ``bundler`` strategies for the subset of behaviour that
matters when feeding real source files to a transpiler: ``paths`` and
``baseUrl`` mapping, extension probing and substitution, ``moduleSuffixes``,
``package.json`` entry points, ``exports``/``imports`` maps, ``@types``
fallbacks and symlink handling.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Sequence
from pathlib import Path
from threading import Lock
from typing import Any, Final, Literal

from ..paths import ts_extension
from .package_json import (
    mangle_scoped_package_name,
    read_package_json,
    resolve_exports,
    resolve_imports,
    split_package_name,
)
from .types import CompilerOptions, ModuleResolutionKind, ResolvedModule

LOGGER = logging.getLogger(__name__)

ImportMode = Literal["import", "require"]
_CacheKey = tuple[str, str, str]

_TS_PROBE_EXTENSIONS: Final[tuple[str, ...]] = (".ts", ".tsx", ".d.ts")
_JS_PROBE_EXTENSIONS: Final[tuple[str, ...]] = (".js", ".jsx")
_JS_TO_TS: Final[dict[str, tuple[str, ...]]] = {
    ".js": (".ts", ".tsx", ".d.ts"),
    ".jsx": (".tsx", ".d.ts"),
    ".mjs": (".mts", ".d.mts"),
    ".cjs": (".cts", ".d.cts"),
}
_JS_EXPLICIT: Final[dict[str, tuple[str, ...]]] = {
    ".js": (".js", ".jsx"),
    ".jsx": (".jsx",),
    ".mjs": (".mjs",),
    ".cjs": (".cjs",),
}
_TS_EXACT_EXTENSIONS: Final[tuple[str, ...]] = (".d.ts", ".d.mts", ".d.cts", ".ts", ".tsx", ".mts", ".cts")
_ESM_EXTENSIONS: Final[frozenset[str]] = frozenset({".mts", ".mjs"})
_CJS_EXTENSIONS: Final[frozenset[str]] = frozenset({".cts", ".cjs"})
_NODE_MODULES: Final[str] = "node_modules"
_EXPORTS_BY_DEFAULT: Final[frozenset[ModuleResolutionKind]] = frozenset(
    {ModuleResolutionKind.NODE16, ModuleResolutionKind.NODENEXT, ModuleResolutionKind.BUNDLER},
)
_MISS: Final[object] = object()


class ModuleResolutionCache:
    """Thread-safe memo shared by every resolution performed during one build.

    Entries are keyed by the importing directory, the specifier and the import
    mode, which is exactly the information the resolver's answer depends on.
    Parsed ``package.json`` manifests are memoised alongside.
    """

    def __init__(self) -> None:
        self._lock = Lock()
        self._resolutions: dict[_CacheKey, ResolvedModule | None] = {}
        self._manifests: dict[str, dict[str, Any] | None] = {}

    def lookup(self, key: _CacheKey) -> ResolvedModule | None | object:
        """Return the cached result for ``key`` or a private miss sentinel."""

        with self._lock:
            return self._resolutions.get(key, _MISS)

    def store(self, key: _CacheKey, value: ResolvedModule | None) -> None:
        """Record ``value`` as the resolution result for ``key``."""

        with self._lock:
            self._resolutions[key] = value

    def package_json(self, directory: str) -> dict[str, Any] | None:
        """Return the (memoised) manifest found in ``directory``."""

        with self._lock:
            if directory in self._manifests:
                return self._manifests[directory]
        manifest = read_package_json(Path(directory))
        with self._lock:
            self._manifests.setdefault(directory, manifest)
        return manifest

    def clear(self) -> None:
        """Drop every memoised entry."""

        with self._lock:
            self._resolutions.clear()
            self._manifests.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._resolutions)


def is_relative_specifier(specifier: str) -> bool:
    """Return ``True`` for ``./``, ``../`` or rooted specifiers."""

    return (
        specifier in {".", ".."}
        or specifier.startswith(("./", "../", ".\\", "..\\"))
        or os.path.isabs(specifier)
    )


class ModuleResolver:
    """Resolve import specifiers to files for a fixed set of compiler options.

    Every lookup runs in two passes like the compiler's: TypeScript sources
    and declarations first, then JavaScript implementation files when the
    first pass finds nothing. The second pass runs whatever ``allowJs`` says;
    that option only decides whether such files join a program.
    """

    def __init__(
        self,
        options: CompilerOptions,
        *,
        cache: ModuleResolutionCache | None = None,
        javascript: bool = False,
    ) -> None:
        """Initialise the resolver.

        Args:
            options: Frozen compiler options driving the lookup rules.
            cache: Optional shared cache; a private one is created otherwise.
            javascript: Look for JavaScript implementation files only. Used
                for the fallback pass.
        """

        self._options = options
        self.cache = cache if cache is not None else ModuleResolutionCache()
        self._kind = options.effective_module_resolution()
        self._use_exports = (
            options.resolve_package_json_exports
            if options.resolve_package_json_exports is not None
            else self._kind in _EXPORTS_BY_DEFAULT
        )
        self._javascript = javascript
        self._probe_extensions = _JS_PROBE_EXTENSIONS if javascript else _TS_PROBE_EXTENSIONS
        self._entry_fields: tuple[str, ...] = ("main",) if javascript else ("types", "typings", "main")
        self._suffixes: tuple[str, ...] = tuple(options.module_suffixes or ("",))
        self._fallback = None if javascript else ModuleResolver(options, cache=self.cache, javascript=True)

    @property
    def kind(self) -> ModuleResolutionKind:
        """Return the effective resolution strategy."""

        return self._kind

    def resolve(self, specifier: str, importer: str) -> ResolvedModule | None:
        """Resolve ``specifier`` imported from ``importer``.

        Args:
            specifier: Module specifier exactly as written in the source.
            importer: Absolute path of the importing file.

        Returns:
            ResolvedModule | None: Resolution result, or ``None`` when the
            specifier cannot be mapped to a file.
        """

        containing_dir = os.path.dirname(os.path.abspath(importer))
        mode = self._import_mode(importer)
        key: _CacheKey = (containing_dir, specifier, mode)
        cached = self.cache.lookup(key)
        if cached is not _MISS:
            return cached  # type: ignore[return-value]
        path = self._resolve_path(specifier, containing_dir, mode)
        if path is None and self._fallback is not None:
            path = self._fallback._resolve_path(specifier, containing_dir, mode)
        result = self._to_resolved_module(path) if path is not None else None
        LOGGER.debug("resolved %r from %s -> %s", specifier, importer, result and result.resolved_file_name)
        self.cache.store(key, result)
        return result

    def _to_resolved_module(self, path: str) -> ResolvedModule:
        final = path if self._options.preserve_symlinks else os.path.realpath(path)
        return ResolvedModule(
            resolved_file_name=final,
            extension=ts_extension(final),
            is_external_library_import=_NODE_MODULES in Path(path).parts,
        )

    # Import mode and conditions -------------------------------------------------

    def _import_mode(self, importer: str) -> ImportMode:
        if self._kind is ModuleResolutionKind.BUNDLER:
            return "import"
        if self._kind not in (ModuleResolutionKind.NODE16, ModuleResolutionKind.NODENEXT):
            return "require"
        suffix = Path(importer).suffix
        if suffix in _ESM_EXTENSIONS:
            return "import"
        if suffix in _CJS_EXTENSIONS:
            return "require"
        manifest = self._nearest_package_json(os.path.dirname(os.path.abspath(importer)))
        if manifest is not None and manifest[1].get("type") == "module":
            return "import"
        return "require"

    def _conditions(self, mode: ImportMode) -> list[str]:
        conditions = [] if self._javascript else ["types"]
        if self._kind is not ModuleResolutionKind.BUNDLER:
            conditions.append("node")
        conditions.append(mode)
        conditions.extend(self._options.custom_conditions or ())
        return conditions

    def _nearest_package_json(self, directory: str) -> tuple[str, dict[str, Any]] | None:
        for candidate in (directory, *map(str, Path(directory).parents)):
            manifest = self.cache.package_json(candidate)
            if manifest is not None:
                return candidate, manifest
        return None

    # Strategies ---------------------------------------------------------------

    def _resolve_path(self, specifier: str, containing_dir: str, mode: ImportMode) -> str | None:
        if self._kind is ModuleResolutionKind.CLASSIC:
            return self._resolve_classic(specifier, containing_dir)
        return self._resolve_node_like(specifier, containing_dir, mode)

    def _resolve_classic(self, specifier: str, containing_dir: str) -> str | None:
        if is_relative_specifier(specifier):
            return self._load_module_from_file(os.path.normpath(os.path.join(containing_dir, specifier)))
        if (mapped := self._resolve_with_paths_or_base_url(specifier)) is not None:
            return mapped
        for directory in (containing_dir, *map(str, Path(containing_dir).parents)):
            found = self._load_module_from_file(os.path.normpath(os.path.join(directory, specifier)))
            if found is not None:
                return found
        if self._javascript:
            return None
        name, subpath = split_package_name(specifier)
        for directory in (containing_dir, *map(str, Path(containing_dir).parents)):
            types_dir = os.path.join(directory, _NODE_MODULES, "@types", mangle_scoped_package_name(name))
            if (found := self._load_from_package(types_dir, subpath, [])) is not None:
                return found
        return None

    def _resolve_node_like(self, specifier: str, containing_dir: str, mode: ImportMode) -> str | None:
        esm_strict = mode == "import" and self._kind in (ModuleResolutionKind.NODE16, ModuleResolutionKind.NODENEXT)
        if is_relative_specifier(specifier):
            candidate = os.path.normpath(os.path.join(containing_dir, specifier))
            if esm_strict:
                return self._load_module_from_file(candidate, allow_extensionless=False)
            return self._load_as_file_or_directory(candidate)
        if specifier.startswith("#") and self._kind in _EXPORTS_BY_DEFAULT:
            return self._resolve_package_import(specifier, containing_dir, mode)
        if (mapped := self._resolve_with_paths_or_base_url(specifier)) is not None:
            return mapped
        return self._load_from_node_modules(specifier, containing_dir, self._conditions(mode))

    def _resolve_with_paths_or_base_url(self, specifier: str) -> str | None:
        options = self._options
        if options.paths:
            base = options.base_url or options.paths_base_path
            pattern, star_match = _match_paths_pattern(list(options.paths), specifier)
            if pattern is not None and base is not None:
                for substitution in options.paths[pattern]:
                    candidate = os.path.normpath(os.path.join(base, substitution.replace("*", star_match)))
                    if (found := self._load_as_file_or_directory(candidate)) is not None:
                        return found
        if options.base_url is not None:
            return self._load_as_file_or_directory(os.path.normpath(os.path.join(options.base_url, specifier)))
        return None

    def _resolve_package_import(self, specifier: str, containing_dir: str, mode: ImportMode) -> str | None:
        nearest = self._nearest_package_json(containing_dir)
        if nearest is None:
            return None
        package_dir, manifest = nearest
        target = resolve_imports(manifest.get("imports"), specifier, self._conditions(mode))
        if target is None:
            return None
        return self._load_module_from_file(os.path.normpath(os.path.join(package_dir, target)), allow_extensionless=False)

    def _load_from_node_modules(self, specifier: str, containing_dir: str, conditions: Sequence[str]) -> str | None:
        name, subpath = split_package_name(specifier)
        types_name = mangle_scoped_package_name(name)
        for directory in (containing_dir, *map(str, Path(containing_dir).parents)):
            if os.path.basename(directory) == _NODE_MODULES:
                continue
            node_modules = os.path.join(directory, _NODE_MODULES)
            if not os.path.isdir(node_modules):
                continue
            found = self._load_from_package(os.path.join(node_modules, name), subpath, conditions)
            if found is None and not self._javascript:
                types_dir = os.path.join(node_modules, "@types", types_name)
                found = self._load_from_package(types_dir, subpath, conditions)
            if found is not None:
                return found
        return None

    # Files, directories and packages -----------------------------------------

    def _load_from_package(self, package_dir: str, subpath: str, conditions: Sequence[str]) -> str | None:
        if not os.path.isdir(package_dir):
            return None
        manifest = self.cache.package_json(package_dir)
        if self._use_exports and manifest is not None and "exports" in manifest:
            target = resolve_exports(manifest["exports"], subpath, conditions)
            if target is None:
                return None
            return self._load_module_from_file(
                os.path.normpath(os.path.join(package_dir, target)),
                allow_extensionless=False,
            )
        if subpath:
            return self._load_as_file_or_directory(os.path.join(package_dir, subpath))
        return self._load_from_directory(package_dir)

    def _load_as_file_or_directory(self, candidate: str) -> str | None:
        found = self._load_module_from_file(candidate)
        if found is None and os.path.isdir(candidate):
            found = self._load_from_directory(candidate)
        return found

    def _load_from_directory(self, directory: str) -> str | None:
        manifest = self.cache.package_json(directory)
        if manifest is not None:
            for field in self._entry_fields:
                entry = manifest.get(field)
                if not isinstance(entry, str):
                    continue
                candidate = os.path.normpath(os.path.join(directory, entry))
                found = self._load_module_from_file(candidate)
                if found is None and os.path.isdir(candidate):
                    found = self._load_module_from_file(os.path.join(candidate, "index"))
                if found is not None:
                    return found
        return self._load_module_from_file(os.path.join(directory, "index"))

    def _load_module_from_file(self, candidate: str, *, allow_extensionless: bool = True) -> str | None:
        options = self._options
        for exact in _TS_EXACT_EXTENSIONS:
            if candidate.endswith(exact):
                if self._javascript:
                    return None
                stem = candidate[: -len(exact)]
                return self._first_file(stem + suffix + exact for suffix in self._suffixes)
        suffix_ext = Path(candidate).suffix
        if suffix_ext in _JS_TO_TS:
            stem = candidate[: -len(suffix_ext)]
            extensions = _JS_EXPLICIT[suffix_ext] if self._javascript else _JS_TO_TS[suffix_ext]
            return self._first_file(stem + suffix + ext for ext in extensions for suffix in self._suffixes)
        if suffix_ext == ".json":
            if options.resolve_json_module:
                return self._first_file([candidate])
            return None
        if allow_extensionless:
            found = self._first_file(
                candidate + suffix + ext for ext in self._probe_extensions for suffix in self._suffixes
            )
            if found is not None:
                return found
        if suffix_ext and options.allow_arbitrary_extensions and not self._javascript:
            stem = candidate[: -len(suffix_ext)]
            return self._first_file([f"{stem}.d{suffix_ext}.ts"])
        return None

    @staticmethod
    def _first_file(candidates: Any) -> str | None:
        for candidate in candidates:
            if os.path.isfile(candidate):
                return candidate
        return None


def _match_paths_pattern(patterns: Sequence[str], specifier: str) -> tuple[str | None, str]:
    """Return the ``paths`` key matching ``specifier`` and the text captured by ``*``.

    Exact keys win; otherwise the wildcard key with the longest prefix does.
    """

    if specifier in patterns:
        return specifier, ""
    best: str | None = None
    best_prefix = -1
    for pattern in patterns:
        star = pattern.find("*")
        if star < 0:
            continue
        prefix, suffix = pattern[:star], pattern[star + 1 :]
        if (
            len(specifier) >= len(prefix) + len(suffix)
            and specifier.startswith(prefix)
            and specifier.endswith(suffix)
            and len(prefix) > best_prefix
        ):
            best, best_prefix = pattern, len(prefix)
    if best is None:
        return None, ""
    suffix_length = len(best) - best_prefix - 1
    return best, specifier[best_prefix : len(specifier) - suffix_length]


__all__ = ["ModuleResolutionCache", "ModuleResolver", "is_relative_specifier"]
