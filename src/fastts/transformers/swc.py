# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""swc backend."""

from __future__ import annotations

from pathlib import PurePath
from typing import Any, Final

from ..compiler.types import CompilerOptions, JsxEmit, ScriptTarget
from .base import TransformBackend, TransformOutcome, WarnCallback
from .bridge import BridgeCallError, NodeBridge

# swc has no 'es6' spelling and tops out at es2022 for the versions supported here.
_NEWEST_TARGET: Final[ScriptTarget] = ScriptTarget.ES2022
_PRESERVED_JSX: Final[frozenset[JsxEmit | None]] = frozenset({None, JsxEmit.PRESERVE, JsxEmit.REACT_NATIVE})


def swc_target(target: ScriptTarget) -> str:
    """Return the ``jsc.target`` spelling for ``target``."""

    return min(target, _NEWEST_TARGET).label


class SwcBackend(TransformBackend):
    """Transform files with ``@swc/core``'s ``transformSync``."""

    name = "swc"
    package = "@swc/core"
    minimum_version = "1.3.0"

    def __init__(self, bridge: NodeBridge) -> None:
        super().__init__(bridge)
        self._options: dict[str, Any] = {}
        self._parser: dict[str, Any] = {}
        self._transform: dict[str, Any] = {}
        self._react: dict[str, Any] = {}
        self._preserve_jsx = True

    def configure(self, options: CompilerOptions, warn: WarnCallback) -> None:
        target = options.target if options.target is not None else ScriptTarget.ES5
        jsx = options.jsx
        self._preserve_jsx = jsx in _PRESERVED_JSX

        self._react = {
            "runtime": "automatic" if jsx in (JsxEmit.REACT_JSX, JsxEmit.REACT_JSXDEV) else "classic",
            "development": jsx is JsxEmit.REACT_JSXDEV,
            "pragma": options.jsx_factory,
            "pragmaFrag": options.jsx_fragment_factory,
            "importSource": options.jsx_import_source,
            "throwIfNamespace": True,
            "useBuiltins": True,
        }
        self._transform = {
            "decoratorMetadata": options.emit_decorator_metadata,
            "legacyDecorator": True,
            "useDefineForClassFields": options.use_define_for_class_fields,
        }
        self._parser = {
            "syntax": "typescript",
            "dynamicImport": True,
            "decorators": options.experimental_decorators,
        }
        self._options = {
            "configFile": False,
            "swcrc": False,
            "isModule": True,
            "module": {
                "type": "es6",
                "strict": False,
                "strictMode": False,
                "importInterop": "none",
                "ignoreDynamic": True,
            },
            "sourceMaps": True,
            "inputSourceMap": False,
            "inlineSourcesContent": False,
            "minify": False,
            "jsc": {
                "target": swc_target(target),
                "loose": False,
                "keepClassNames": True,
                "externalHelpers": options.import_helpers,
            },
        }

    def options_for(self, path: str) -> dict[str, Any]:
        """Return the complete swc options for transforming ``path``.

        Parser and transform sections are rebuilt per call so concurrent
        transforms never share mutable option objects.
        """

        is_tsx = PurePath(path).suffix == ".tsx"
        parser = {**self._parser, "tsx": is_tsx}
        transform = {**self._transform, "react": dict(self._react) if is_tsx and not self._preserve_jsx else None}
        return {
            **self._options,
            "filename": path,
            "jsc": {**self._options["jsc"], "parser": parser, "transform": transform},
        }

    def transform_file(self, source: str, path: str) -> TransformOutcome:
        try:
            result = self.bridge.call(self.package, "transformSync", source, self.options_for(path))
        except BridgeCallError as exc:
            return TransformOutcome.failure(exc.message)
        return TransformOutcome.success(result.get("code", ""), result.get("map"))


__all__ = ["SwcBackend", "swc_target"]
