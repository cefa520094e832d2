# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Typed views over TypeScript compiler options and parser results."""

from __future__ import annotations

from enum import Enum, IntEnum
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from ..diagnostics import Diagnostic


class ScriptTarget(IntEnum):
    """Language level of emitted JavaScript, ordered like the compiler's enum."""

    ES3 = 0
    ES5 = 1
    ES2015 = 2
    ES2016 = 3
    ES2017 = 4
    ES2018 = 5
    ES2019 = 6
    ES2020 = 7
    ES2021 = 8
    ES2022 = 9
    ES2023 = 10
    ES2024 = 11
    ESNEXT = 99

    @property
    def label(self) -> str:
        """Return the lowercase spelling used by tsconfig files."""

        return self.name.lower()


class ModuleKind(str, Enum):
    """Module system of emitted code."""

    NONE = "none"
    COMMONJS = "commonjs"
    AMD = "amd"
    UMD = "umd"
    SYSTEM = "system"
    ES2015 = "es2015"
    ES2020 = "es2020"
    ES2022 = "es2022"
    ESNEXT = "esnext"
    NODE16 = "node16"
    NODE18 = "node18"
    NODE20 = "node20"
    NODENEXT = "nodenext"
    PRESERVE = "preserve"

    @property
    def is_es_module(self) -> bool:
        """Return ``True`` for ES2015 or later module kinds."""

        return self in _ES_MODULE_KINDS

    @property
    def is_node(self) -> bool:
        """Return ``True`` for the Node.js module kinds (``node16`` through ``nodenext``)."""

        return self in NODE_MODULE_KINDS


NODE_MODULE_KINDS = frozenset({ModuleKind.NODE16, ModuleKind.NODE18, ModuleKind.NODE20, ModuleKind.NODENEXT})
_ES_MODULE_KINDS = frozenset({ModuleKind.ES2015, ModuleKind.ES2020, ModuleKind.ES2022, ModuleKind.ESNEXT}) | NODE_MODULE_KINDS


class ModuleResolutionKind(str, Enum):
    """Algorithm used to map import specifiers to files."""

    CLASSIC = "classic"
    NODE10 = "node10"
    NODE16 = "node16"
    NODENEXT = "nodenext"
    BUNDLER = "bundler"


class JsxEmit(str, Enum):
    """Treatment of JSX syntax in ``.tsx`` files."""

    PRESERVE = "preserve"
    REACT = "react"
    REACT_NATIVE = "react-native"
    REACT_JSX = "react-jsx"
    REACT_JSXDEV = "react-jsxdev"


class CompilerOptions(BaseModel):
    """Converted ``compilerOptions`` relevant to transpilation and resolution.

    Options the core does not interpret are retained as extra fields under
    their tsconfig (camelCase) names so they survive merging and display.
    """

    model_config = ConfigDict(
        frozen=True,
        extra="allow",
        populate_by_name=True,
        alias_generator=to_camel,
    )

    target: ScriptTarget | None = None
    module: ModuleKind | None = None
    module_resolution: ModuleResolutionKind | None = None
    jsx: JsxEmit | None = None
    jsx_factory: str | None = None
    jsx_fragment_factory: str | None = None
    jsx_import_source: str | None = None
    isolated_modules: bool | None = None
    experimental_decorators: bool | None = None
    emit_decorator_metadata: bool | None = None
    use_define_for_class_fields: bool | None = None
    verbatim_module_syntax: bool | None = None
    always_strict: bool | None = None
    es_module_interop: bool | None = None
    import_helpers: bool | None = None
    allow_js: bool | None = None
    resolve_json_module: bool | None = None
    allow_arbitrary_extensions: bool | None = None
    preserve_symlinks: bool | None = None
    resolve_package_json_exports: bool | None = None
    base_url: Path | None = None
    paths: dict[str, list[str]] | None = None
    paths_base_path: Path | None = None
    root_dir: Path | None = None
    root_dirs: list[Path] | None = None
    out_dir: Path | None = None
    type_roots: list[Path] | None = None
    module_suffixes: list[str] | None = None
    custom_conditions: list[str] | None = None
    ignore_deprecations: str | None = None

    def effective_module(self) -> ModuleKind:
        """Return ``module`` or the compiler's default derived from ``target``."""

        if self.module is not None:
            return self.module
        target = self.target if self.target is not None else ScriptTarget.ES5
        return ModuleKind.ES2015 if target >= ScriptTarget.ES2015 else ModuleKind.COMMONJS

    def effective_module_resolution(self) -> ModuleResolutionKind:
        """Return ``moduleResolution`` or the compiler's default derived from ``module``."""

        if self.module_resolution is not None:
            return self.module_resolution
        module = self.effective_module()
        if module is ModuleKind.COMMONJS:
            return ModuleResolutionKind.NODE10
        if module is ModuleKind.NODENEXT:
            return ModuleResolutionKind.NODENEXT
        if module.is_node:
            return ModuleResolutionKind.NODE16
        if module is ModuleKind.PRESERVE:
            return ModuleResolutionKind.BUNDLER
        return ModuleResolutionKind.CLASSIC

    def to_tsconfig(self) -> dict[str, Any]:
        """Return the options as a JSON-friendly tsconfig ``compilerOptions`` mapping."""

        data = self.model_dump(mode="json", by_alias=True, exclude_none=True)
        if self.target is not None:
            data["target"] = self.target.label
        data.pop("pathsBasePath", None)
        return data


class ConfigObject(BaseModel):
    """Top-level tsconfig document after structural validation.

    Only ``compilerOptions`` and the inheritance/file keys are interpreted;
    any other key is carried through untouched.
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    extends: str | list[str] | None = None
    compiler_options: dict[str, Any] | None = Field(default=None, alias="compilerOptions")
    files: list[str] | None = None
    include: list[str] | None = None
    exclude: list[str] | None = None
    references: list[dict[str, Any]] | None = None
    watch_options: dict[str, Any] | None = Field(default=None, alias="watchOptions")
    compile_on_save: bool | None = Field(default=None, alias="compileOnSave")


class ParsedConfig(BaseModel):
    """Result of parsing a tsconfig document and its ``extends`` chain."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    options: CompilerOptions = Field(default_factory=CompilerOptions)
    file_names: tuple[str, ...] = ()
    project_references: tuple[dict[str, Any], ...] = ()
    watch_options: dict[str, Any] | None = None
    errors: tuple[Diagnostic, ...] = ()


class ResolvedModule(BaseModel):
    """Successful module resolution."""

    model_config = ConfigDict(frozen=True)

    resolved_file_name: str
    extension: str
    is_external_library_import: bool = False


__all__ = [
    "CompilerOptions",
    "ConfigObject",
    "JsxEmit",
    "ModuleKind",
    "ModuleResolutionKind",
    "NODE_MODULE_KINDS",
    "ParsedConfig",
    "ResolvedModule",
    "ScriptTarget",
]
