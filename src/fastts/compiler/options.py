# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Compiler option declarations and raw ``compilerOptions`` conversion.

The tables mirror the option vocabulary of TypeScript 5.x closely enough for
real-world ``tsconfig.json`` files to convert without spurious "unknown
option" errors. Conversion follows the compiler's reporting conventions: every
problem becomes a :class:`~fastts.diagnostics.Diagnostic` and the offending
option is dropped, so one bad entry never hides the others.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Final

from ..diagnostics import Diagnostic
from .types import JsxEmit, ModuleKind, ModuleResolutionKind, ScriptTarget


class OptionType(str, Enum):
    """Value shape accepted by a compiler option."""

    BOOLEAN = "boolean"
    STRING = "string"
    NUMBER = "number"
    OBJECT = "object"
    LIST = "Array"
    ENUM = "enum"


@dataclass(frozen=True, slots=True)
class OptionDeclaration:
    """Describe how one compiler option is validated and converted."""

    name: str
    type: OptionType
    is_path: bool = False
    element: OptionType = OptionType.STRING
    choices: Mapping[str, Any] | None = None


TARGET_CHOICES: Final[dict[str, ScriptTarget]] = {
    "es3": ScriptTarget.ES3,
    "es5": ScriptTarget.ES5,
    "es6": ScriptTarget.ES2015,
    "es2015": ScriptTarget.ES2015,
    "es2016": ScriptTarget.ES2016,
    "es2017": ScriptTarget.ES2017,
    "es2018": ScriptTarget.ES2018,
    "es2019": ScriptTarget.ES2019,
    "es2020": ScriptTarget.ES2020,
    "es2021": ScriptTarget.ES2021,
    "es2022": ScriptTarget.ES2022,
    "es2023": ScriptTarget.ES2023,
    "es2024": ScriptTarget.ES2024,
    "esnext": ScriptTarget.ESNEXT,
}

MODULE_CHOICES: Final[dict[str, ModuleKind]] = {
    "none": ModuleKind.NONE,
    "commonjs": ModuleKind.COMMONJS,
    "amd": ModuleKind.AMD,
    "system": ModuleKind.SYSTEM,
    "umd": ModuleKind.UMD,
    "es6": ModuleKind.ES2015,
    "es2015": ModuleKind.ES2015,
    "es2020": ModuleKind.ES2020,
    "es2022": ModuleKind.ES2022,
    "esnext": ModuleKind.ESNEXT,
    "node16": ModuleKind.NODE16,
    "node18": ModuleKind.NODE18,
    "node20": ModuleKind.NODE20,
    "nodenext": ModuleKind.NODENEXT,
    "preserve": ModuleKind.PRESERVE,
}

MODULE_RESOLUTION_CHOICES: Final[dict[str, ModuleResolutionKind]] = {
    "node": ModuleResolutionKind.NODE10,
    "node10": ModuleResolutionKind.NODE10,
    "classic": ModuleResolutionKind.CLASSIC,
    "node16": ModuleResolutionKind.NODE16,
    "nodenext": ModuleResolutionKind.NODENEXT,
    "bundler": ModuleResolutionKind.BUNDLER,
}

JSX_CHOICES: Final[dict[str, JsxEmit]] = {
    "preserve": JsxEmit.PRESERVE,
    "react-native": JsxEmit.REACT_NATIVE,
    "react": JsxEmit.REACT,
    "react-jsx": JsxEmit.REACT_JSX,
    "react-jsxdev": JsxEmit.REACT_JSXDEV,
}

_BOOLEAN_OPTIONS: Final[tuple[str, ...]] = (
    "allowArbitraryExtensions",
    "allowImportingTsExtensions",
    "allowJs",
    "allowSyntheticDefaultImports",
    "allowUmdGlobalAccess",
    "allowUnreachableCode",
    "allowUnusedLabels",
    "alwaysStrict",
    "assumeChangesOnlyAffectDirectDependencies",
    "checkJs",
    "composite",
    "declaration",
    "declarationMap",
    "disableReferencedProjectLoad",
    "disableSizeLimit",
    "disableSolutionSearching",
    "disableSourceOfProjectReferenceRedirect",
    "downlevelIteration",
    "emitBOM",
    "emitDeclarationOnly",
    "emitDecoratorMetadata",
    "erasableSyntaxOnly",
    "esModuleInterop",
    "exactOptionalPropertyTypes",
    "experimentalDecorators",
    "explainFiles",
    "extendedDiagnostics",
    "forceConsistentCasingInFileNames",
    "importHelpers",
    "incremental",
    "inlineSourceMap",
    "inlineSources",
    "isolatedDeclarations",
    "isolatedModules",
    "keyofStringsOnly",
    "libReplacement",
    "listEmittedFiles",
    "listFiles",
    "noCheck",
    "noEmit",
    "noEmitHelpers",
    "noEmitOnError",
    "noErrorTruncation",
    "noFallthroughCasesInSwitch",
    "noImplicitAny",
    "noImplicitOverride",
    "noImplicitReturns",
    "noImplicitThis",
    "noImplicitUseStrict",
    "noLib",
    "noPropertyAccessFromIndexSignature",
    "noResolve",
    "noStrictGenericChecks",
    "noUncheckedIndexedAccess",
    "noUncheckedSideEffectImports",
    "noUnusedLocals",
    "noUnusedParameters",
    "preserveConstEnums",
    "preserveSymlinks",
    "preserveValueImports",
    "pretty",
    "removeComments",
    "resolveJsonModule",
    "resolvePackageJsonExports",
    "resolvePackageJsonImports",
    "rewriteRelativeImportExtensions",
    "skipDefaultLibCheck",
    "skipLibCheck",
    "sourceMap",
    "strict",
    "strictBindCallApply",
    "strictBuiltinIteratorReturn",
    "strictFunctionTypes",
    "strictNullChecks",
    "strictPropertyInitialization",
    "stripInternal",
    "suppressExcessPropertyErrors",
    "suppressImplicitAnyIndexErrors",
    "traceResolution",
    "useDefineForClassFields",
    "useUnknownInCatchVariables",
    "verbatimModuleSyntax",
)

_STRING_OPTIONS: Final[tuple[str, ...]] = (
    "charset",
    "ignoreDeprecations",
    "jsxFactory",
    "jsxFragmentFactory",
    "jsxImportSource",
    "mapRoot",
    "reactNamespace",
    "sourceRoot",
)

_PATH_OPTIONS: Final[tuple[str, ...]] = (
    "baseUrl",
    "declarationDir",
    "generateCpuProfile",
    "generateTrace",
    "out",
    "outDir",
    "outFile",
    "rootDir",
    "tsBuildInfoFile",
)


def _build_declarations() -> dict[str, OptionDeclaration]:
    declarations: dict[str, OptionDeclaration] = {}
    for name in _BOOLEAN_OPTIONS:
        declarations[name] = OptionDeclaration(name, OptionType.BOOLEAN)
    for name in _STRING_OPTIONS:
        declarations[name] = OptionDeclaration(name, OptionType.STRING)
    for name in _PATH_OPTIONS:
        declarations[name] = OptionDeclaration(name, OptionType.STRING, is_path=True)
    declarations.update(
        {
            "maxNodeModuleJsDepth": OptionDeclaration("maxNodeModuleJsDepth", OptionType.NUMBER),
            "paths": OptionDeclaration("paths", OptionType.OBJECT),
            "lib": OptionDeclaration("lib", OptionType.LIST),
            "types": OptionDeclaration("types", OptionType.LIST),
            "moduleSuffixes": OptionDeclaration("moduleSuffixes", OptionType.LIST),
            "customConditions": OptionDeclaration("customConditions", OptionType.LIST),
            "plugins": OptionDeclaration("plugins", OptionType.LIST, element=OptionType.OBJECT),
            "rootDirs": OptionDeclaration("rootDirs", OptionType.LIST, is_path=True),
            "typeRoots": OptionDeclaration("typeRoots", OptionType.LIST, is_path=True),
            "target": OptionDeclaration("target", OptionType.ENUM, choices=TARGET_CHOICES),
            "module": OptionDeclaration("module", OptionType.ENUM, choices=MODULE_CHOICES),
            "moduleResolution": OptionDeclaration(
                "moduleResolution",
                OptionType.ENUM,
                choices=MODULE_RESOLUTION_CHOICES,
            ),
            "jsx": OptionDeclaration("jsx", OptionType.ENUM, choices=JSX_CHOICES),
            "newLine": OptionDeclaration("newLine", OptionType.ENUM, choices={"crlf": "crlf", "lf": "lf"}),
            "moduleDetection": OptionDeclaration(
                "moduleDetection",
                OptionType.ENUM,
                choices={"auto": "auto", "legacy": "legacy", "force": "force"},
            ),
            "importsNotUsedAsValues": OptionDeclaration(
                "importsNotUsedAsValues",
                OptionType.ENUM,
                choices={"remove": "remove", "preserve": "preserve", "error": "error"},
            ),
        },
    )
    return declarations


OPTION_DECLARATIONS: Final[dict[str, OptionDeclaration]] = _build_declarations()

DEPRECATED_OPTIONS: Final[frozenset[str]] = frozenset(
    {
        "charset",
        "importsNotUsedAsValues",
        "keyofStringsOnly",
        "noImplicitUseStrict",
        "noStrictGenericChecks",
        "out",
        "preserveValueImports",
        "suppressExcessPropertyErrors",
        "suppressImplicitAnyIndexErrors",
    },
)
DEPRECATIONS_SILENCED_BY: Final[str] = "5.0"

_PATHS_BASE_KEY: Final[str] = "pathsBasePath"


def _type_error(name: str, expected: str, file_name: str | None) -> Diagnostic:
    return Diagnostic.error(f"Compiler option '{name}' requires a value of type {expected}.", file=file_name)


def _resolve_path(value: str, base_dir: Path) -> Path:
    return Path(os.path.normpath(os.path.join(base_dir, value)))


def _convert_scalar(
    declaration: OptionDeclaration,
    value: Any,
    base_dir: Path,
    file_name: str | None,
) -> tuple[Any, Diagnostic | None]:
    if declaration.type is OptionType.BOOLEAN:
        if isinstance(value, bool):
            return value, None
        return None, _type_error(declaration.name, "boolean", file_name)
    if declaration.type is OptionType.NUMBER:
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return value, None
        return None, _type_error(declaration.name, "number", file_name)
    if declaration.type is OptionType.STRING:
        if not isinstance(value, str):
            return None, _type_error(declaration.name, "string", file_name)
        return (_resolve_path(value, base_dir) if declaration.is_path else value), None
    if declaration.type is OptionType.ENUM:
        choices = declaration.choices or {}
        if isinstance(value, str) and value.lower() in choices:
            return choices[value.lower()], None
        expected = ", ".join(f"'{choice}'" for choice in choices)
        return None, Diagnostic.error(
            f"Argument for '--{declaration.name}' option must be: {expected}.",
            file=file_name,
        )
    return None, _type_error(declaration.name, declaration.type.value, file_name)


def _convert_list(
    declaration: OptionDeclaration,
    value: Any,
    base_dir: Path,
    file_name: str | None,
) -> tuple[Any, Diagnostic | None]:
    if not isinstance(value, list):
        return None, _type_error(declaration.name, "Array", file_name)
    expected_type = dict if declaration.element is OptionType.OBJECT else str
    if not all(isinstance(item, expected_type) for item in value):
        return None, _type_error(declaration.name, "Array", file_name)
    if declaration.is_path:
        return [_resolve_path(item, base_dir) for item in value], None
    return list(value), None


def _convert_paths(value: Any, file_name: str | None) -> tuple[Any, Diagnostic | None]:
    if not isinstance(value, dict):
        return None, _type_error("paths", "object", file_name)
    converted: dict[str, list[str]] = {}
    for pattern, substitutions in value.items():
        if not isinstance(substitutions, list) or not all(isinstance(item, str) for item in substitutions):
            return None, Diagnostic.error(
                f"Substitutions for pattern '{pattern}' should be an array.",
                file=file_name,
            )
        converted[pattern] = list(substitutions)
    return converted, None


def convert_compiler_options(
    raw: Mapping[str, Any],
    base_dir: Path,
    *,
    file_name: str | None = None,
) -> tuple[dict[str, Any], list[Diagnostic]]:
    """Convert a raw ``compilerOptions`` mapping into typed option values.

    Path-valued options are resolved against ``base_dir``, the directory of the
    configuration file declaring them. When ``paths`` is declared the same
    directory is recorded as ``pathsBasePath`` so mapped substitutions resolve
    relative to their declaring file even without ``baseUrl``.

    Args:
        raw: ``compilerOptions`` object as read from a configuration file.
        base_dir: Directory used to resolve relative path options.
        file_name: Configuration file name used for diagnostic attribution.

    Returns:
        tuple[dict[str, Any], list[Diagnostic]]: Converted options keyed by
        their tsconfig names and the diagnostics raised during conversion.
    """

    converted: dict[str, Any] = {}
    diagnostics: list[Diagnostic] = []
    for name, value in raw.items():
        declaration = OPTION_DECLARATIONS.get(name)
        if declaration is None:
            diagnostics.append(Diagnostic.error(f"Unknown compiler option '{name}'.", file=file_name))
            continue
        if value is None:
            converted[name] = None
            continue
        if declaration.type is OptionType.LIST:
            result, problem = _convert_list(declaration, value, base_dir, file_name)
        elif declaration.type is OptionType.OBJECT:
            result, problem = _convert_paths(value, file_name)
        else:
            result, problem = _convert_scalar(declaration, value, base_dir, file_name)
        if problem is not None:
            diagnostics.append(problem)
            continue
        converted[name] = result
    if converted.get("paths") is not None:
        converted[_PATHS_BASE_KEY] = base_dir
    return converted, diagnostics


def validate_compiler_options(
    options: Mapping[str, Any],
    *,
    file_name: str | None = None,
) -> list[Diagnostic]:
    """Return deprecation warnings and option-combination errors for merged options.

    Args:
        options: Converted, inheritance-merged compiler options.
        file_name: Configuration file name used for diagnostic attribution.

    Returns:
        list[Diagnostic]: Diagnostics describing the problems found.
    """

    diagnostics: list[Diagnostic] = []
    if options.get("ignoreDeprecations") != DEPRECATIONS_SILENCED_BY:
        deprecated = [name for name in options if name in DEPRECATED_OPTIONS and options[name] is not None]
        if options.get("target") is ScriptTarget.ES3:
            deprecated.append("target=ES3")
        for name in deprecated:
            diagnostics.append(
                Diagnostic.warning(
                    f"Option '{name}' is deprecated and will stop functioning in TypeScript 5.5. "
                    f"Specify compilerOption '\"ignoreDeprecations\": \"{DEPRECATIONS_SILENCED_BY}\"' "
                    "to silence this warning.",
                    file=file_name,
                ),
            )

    if options.get("emitDecoratorMetadata") and not options.get("experimentalDecorators"):
        diagnostics.append(
            Diagnostic.error(
                "Option 'emitDecoratorMetadata' cannot be specified without specifying option "
                "'experimentalDecorators'.",
                file=file_name,
            ),
        )

    jsx = options.get("jsx")
    if jsx in (JsxEmit.REACT_JSX, JsxEmit.REACT_JSXDEV):
        for name in ("jsxFactory", "jsxFragmentFactory"):
            if options.get(name):
                diagnostics.append(
                    Diagnostic.error(
                        f"Option '{name}' cannot be specified when option 'jsx' is '{jsx.value}'.",
                        file=file_name,
                    ),
                )

    diagnostics.extend(_module_resolution_diagnostics(options, file_name))
    return diagnostics


_NODE_RESOLUTION_SPELLING: Final[dict[ModuleResolutionKind, str]] = {
    ModuleResolutionKind.NODE16: "Node16",
    ModuleResolutionKind.NODENEXT: "NodeNext",
}


def _module_resolution_diagnostics(options: Mapping[str, Any], file_name: str | None) -> list[Diagnostic]:
    resolution = options.get("moduleResolution")
    if resolution is None:
        return []
    module = options.get("module")
    if module is None:
        target = options.get("target")
        if target is None:
            target = ScriptTarget.ES5
        module = ModuleKind.ES2015 if target >= ScriptTarget.ES2015 else ModuleKind.COMMONJS

    if resolution in _NODE_RESOLUTION_SPELLING and not module.is_node:
        spelling = _NODE_RESOLUTION_SPELLING[resolution]
        return [
            Diagnostic.error(
                f"Option 'module' must be set to '{spelling}' when option 'moduleResolution' is set to '{spelling}'.",
                file=file_name,
            ),
        ]
    if resolution is ModuleResolutionKind.BUNDLER and not (module.is_es_module or module is ModuleKind.PRESERVE):
        return [
            Diagnostic.error(
                "Option 'bundler' can only be used when 'module' is set to 'preserve' or to 'es2015' or later.",
                file=file_name,
            ),
        ]
    return []


__all__ = [
    "DEPRECATED_OPTIONS",
    "JSX_CHOICES",
    "MODULE_CHOICES",
    "MODULE_RESOLUTION_CHOICES",
    "OPTION_DECLARATIONS",
    "OptionDeclaration",
    "OptionType",
    "TARGET_CHOICES",
    "convert_compiler_options",
    "validate_compiler_options",
]
