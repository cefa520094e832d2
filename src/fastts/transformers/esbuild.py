# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""esbuild backend."""

from __future__ import annotations

import re
from pathlib import PurePath
from typing import Any, Final

from ..compiler.types import CompilerOptions, JsxEmit, ScriptTarget
from .base import TransformBackend, TransformOutcome, TransformWarning, WarnCallback
from .bridge import BridgeCallError, NodeBridge

_LOADERS: Final[dict[str, str]] = {
    ".ts": "ts",
    ".tsx": "tsx",
    ".cts": "ts",
    ".mts": "ts",
}

_JSX_MODES: Final[dict[JsxEmit | None, str | None]] = {
    None: None,
    JsxEmit.PRESERVE: "preserve",
    JsxEmit.REACT: "transform",
    JsxEmit.REACT_JSX: "automatic",
    JsxEmit.REACT_JSXDEV: "automatic",
    JsxEmit.REACT_NATIVE: "preserve",
}

ES3_WARNING: Final[str] = (
    "ES3 target is not supported by esbuild, so ES5 will be used instead.\n"
    "Please set the 'target' option in tsconfig.json to at least ES5 to disable this warning or, "
    "if you really need ES3 output, use either swc or sucrase rather than esbuild."
)

DECORATOR_METADATA_ERROR: Final[str] = (
    "esbuild cannot emit decorator metadata. Set 'emitDecoratorMetadata' to false in tsconfig.json "
    "or use the 'swc' transformer instead."
)

# ``@`` only appears in code as a decorator once literals and comments are blanked.
_DECORATOR: Final[re.Pattern[str]] = re.compile(r"(?<![\w$\\])@[A-Za-z_$]")
# Characters after which ``/`` starts a regular expression rather than a division.
_REGEX_PRECEDERS: Final[frozenset[str]] = frozenset("(,=:[!&|?{};+-*%<>~^")


def _blank(chars: list[str], start: int, end: int) -> None:
    for index in range(start, min(end, len(chars))):
        if chars[index] != "\n":
            chars[index] = " "


def _quoted_end(source: str, start: int, quote: str) -> int:
    index = start + 1
    while index < len(source):
        char = source[index]
        if char == "\\":
            index += 2
            continue
        if char == quote or char == "\n":
            return index + 1
        index += 1
    return len(source)


def _regex_end(source: str, start: int) -> int:
    index = start + 1
    in_class = False
    while index < len(source):
        char = source[index]
        if char == "\\":
            index += 2
            continue
        if char == "\n":
            return index
        if char == "[":
            in_class = True
        elif char == "]":
            in_class = False
        elif char == "/" and not in_class:
            return index + 1
        index += 1
    return len(source)


def strip_literals(source: str) -> str:
    """Return ``source`` with comments and string, template and regex text blanked.

    Line breaks survive and code inside template ``${...}`` substitutions is
    kept, so what remains is the code esbuild would parse.
    """

    chars = list(source)
    length = len(source)
    braces: list[bool] = []  # True where the matching ``}`` resumes a template literal
    in_template = False
    previous = ""
    index = 0
    while index < length:
        if in_template:
            start = index
            while index < length:
                if source[index] == "\\":
                    index += 2
                elif source[index] == "`":
                    index += 1
                    in_template = False
                    previous = "`"
                    break
                elif source.startswith("${", index):
                    index += 2
                    braces.append(True)
                    in_template = False
                    previous = "{"
                    break
                else:
                    index += 1
            _blank(chars, start, index)
            continue

        char = source[index]
        following = source[index + 1] if index + 1 < length else ""
        if char == "/" and following == "/":
            end = source.find("\n", index)
            end = length if end < 0 else end
        elif char == "/" and following == "*":
            end = source.find("*/", index + 2)
            end = length if end < 0 else end + 2
        elif char in "'\"":
            end = _quoted_end(source, index, char)
            previous = char
        elif char == "/" and (not previous or previous in _REGEX_PRECEDERS):
            end = _regex_end(source, index)
            previous = "/"
        else:
            if char == "`":
                in_template = True
                _blank(chars, index, index + 1)
            elif char == "{":
                braces.append(False)
            elif char == "}" and braces and braces.pop():
                in_template = True
                _blank(chars, index, index + 1)
            if not char.isspace():
                previous = char
            index += 1
            continue
        _blank(chars, index, end)
        index = end
    return "".join(chars)


def contains_decorator(source: str) -> bool:
    """Return ``True`` when ``source`` applies a decorator anywhere, parameters included."""

    return _DECORATOR.search(strip_literals(source)) is not None


class EsbuildBackend(TransformBackend):
    """Transform files with ``esbuild.transformSync``."""

    name = "esbuild"
    package = "esbuild"
    minimum_version = "0.18.0"

    def __init__(self, bridge: NodeBridge) -> None:
        super().__init__(bridge)
        self._options: dict[str, Any] = {}
        self._reject_decorator_metadata = False

    def configure(self, options: CompilerOptions, warn: WarnCallback) -> None:
        # esbuild defaults to esnext; TypeScript 5 defaults to ES5.
        target = options.target if options.target is not None else ScriptTarget.ES5
        if target is ScriptTarget.ES3:
            warn(ES3_WARNING)
            target = ScriptTarget.ES5

        self._reject_decorator_metadata = bool(options.emit_decorator_metadata)
        self._options = {
            "format": "esm",
            "charset": "utf8",
            "sourcemap": True,
            "sourcesContent": False,
            "target": target.label,
            "jsx": _JSX_MODES[options.jsx],
            "jsxDev": options.jsx is JsxEmit.REACT_JSXDEV,
            "jsxFactory": options.jsx_factory,
            "jsxFragment": options.jsx_fragment_factory,
            "jsxImportSource": options.jsx_import_source,
            "jsxSideEffects": True,
            "minify": False,
            "treeShaking": False,
            "ignoreAnnotations": True,
            "logLevel": "silent",
            "tsconfigRaw": {
                "compilerOptions": {
                    "alwaysStrict": options.always_strict,
                    "experimentalDecorators": options.experimental_decorators,
                    "importsNotUsedAsValues": "preserve",
                    "preserveValueImports": True,
                    "verbatimModuleSyntax": options.verbatim_module_syntax,
                    "useDefineForClassFields": options.use_define_for_class_fields,
                },
            },
        }

    @property
    def transform_options(self) -> dict[str, Any]:
        """Return a copy of the options shared by every file."""

        return dict(self._options)

    def transform_file(self, source: str, path: str) -> TransformOutcome:
        loader = _LOADERS.get(PurePath(path).suffix)
        if loader is None:
            return TransformOutcome.skip()
        if self._reject_decorator_metadata and contains_decorator(source):
            return TransformOutcome.failure(DECORATOR_METADATA_ERROR)
        options = {**self._options, "loader": loader, "sourcefile": path}
        try:
            result = self.bridge.call(self.package, "transformSync", source, options)
        except BridgeCallError as exc:
            return TransformOutcome.failure(exc.message)
        warnings = tuple(_convert_warning(warning) for warning in result.get("warnings") or ())
        return TransformOutcome.success(result.get("code", ""), result.get("map"), warnings)


def _convert_warning(warning: dict[str, Any]) -> TransformWarning:
    location = warning.get("location") or {}
    return TransformWarning(
        message=str(warning.get("text", "")),
        line=location.get("line"),
        column=location.get("column"),
    )


__all__ = ["DECORATOR_METADATA_ERROR", "ES3_WARNING", "EsbuildBackend", "contains_decorator", "strip_literals"]
