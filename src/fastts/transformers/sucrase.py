# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""sucrase backend."""

from __future__ import annotations

from typing import Any, Final

from ..compiler.types import CompilerOptions, JsxEmit
from .base import TransformBackend, TransformOutcome, WarnCallback
from .bridge import BridgeCallError, NodeBridge

_TRANSFORMED_JSX: Final[frozenset[JsxEmit]] = frozenset({JsxEmit.REACT, JsxEmit.REACT_JSX, JsxEmit.REACT_JSXDEV})


class SucraseBackend(TransformBackend):
    """Transform files with ``sucrase.transform``.

    sucrase only strips types and optionally compiles JSX; it never lowers
    newer syntax, so ``target`` has no effect.
    """

    name = "sucrase"
    package = "sucrase"
    minimum_version = "3.20.0"

    def __init__(self, bridge: NodeBridge) -> None:
        super().__init__(bridge)
        self._options: dict[str, Any] = {}

    def configure(self, options: CompilerOptions, warn: WarnCallback) -> None:
        transforms = ["typescript"]
        settings: dict[str, Any] = {
            "disableESTransforms": True,
            "preserveDynamicImport": True,
            "injectCreateRequireForImportRequire": False,
            "enableLegacyTypeScriptModuleInterop": options.es_module_interop is False,
            "enableLegacyBabel5ModuleInterop": False,
        }
        jsx = options.jsx
        if jsx in _TRANSFORMED_JSX:
            transforms.append("jsx")
            settings.update(
                jsxRuntime="classic" if jsx is JsxEmit.REACT else "automatic",
                production=jsx in (JsxEmit.REACT, JsxEmit.REACT_JSX),
                jsxPragma=options.jsx_factory,
                jsxFragmentPragma=options.jsx_fragment_factory,
                jsxImportSource=options.jsx_import_source,
            )
        self._options = {"transforms": transforms, **settings}

    def transform_file(self, source: str, path: str) -> TransformOutcome:
        options = {
            **self._options,
            "transforms": list(self._options["transforms"]),
            "filePath": path,
            "sourceMapOptions": {"compiledFilename": path},
        }
        try:
            result = self.bridge.call(self.package, "transform", source, options)
        except BridgeCallError as exc:
            return TransformOutcome.failure(exc.message)
        return TransformOutcome.success(result.get("code", ""), result.get("sourceMap"))


__all__ = ["SucraseBackend"]
