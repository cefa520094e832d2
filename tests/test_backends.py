# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tests for the esbuild, swc and sucrase option translation and transforms."""

from __future__ import annotations

import json

import pytest

from fastts.compiler.types import CompilerOptions, JsxEmit, ScriptTarget
from fastts.errors import BackendLoadError
from fastts.transformers.base import OutcomeKind
from fastts.transformers.esbuild import (
    DECORATOR_METADATA_ERROR,
    ES3_WARNING,
    EsbuildBackend,
    contains_decorator,
    strip_literals,
)
from fastts.transformers.sucrase import SucraseBackend
from fastts.transformers.swc import SwcBackend, swc_target


def _configured(backend_type, bridge, **options):
    backend = backend_type(bridge)
    warnings: list[str] = []
    backend.configure(CompilerOptions(**options), warnings.append)
    return backend, warnings


# Loading ------------------------------------------------------------------


def test_load_records_installed_version(bridge, fake_node) -> None:
    backend = EsbuildBackend(bridge)

    backend.load()

    assert backend.version == "0.19.12"
    assert fake_node.requests[0]["op"] == "version"


def test_load_missing_package_names_the_dependency(bridge, fake_node) -> None:
    fake_node.missing.add("@swc/core")

    with pytest.raises(BackendLoadError) as excinfo:
        SwcBackend(bridge).load()

    assert excinfo.value.missing_dependency is True
    assert excinfo.value.message == (
        "Transformer 'swc' requires the optional dependency '@swc/core'; "
        "install it with `npm install --save-dev @swc/core`."
    )


def test_load_other_failures_keep_the_original_message(bridge) -> None:
    bridge._runner = lambda request: {"ok": False, "code": "ERR_REQUIRE_ESM", "message": "require() of ES Module"}

    with pytest.raises(BackendLoadError) as excinfo:
        SucraseBackend(bridge).load()

    assert excinfo.value.missing_dependency is False
    assert excinfo.value.message == "require() of ES Module"


def test_load_rejects_outdated_versions(bridge, fake_node) -> None:
    fake_node.versions["esbuild"] = "0.17.19"

    with pytest.raises(BackendLoadError, match=r"requires esbuild >= 0\.18\.0, found 0\.17\.19\.$"):
        EsbuildBackend(bridge).load()


# esbuild ------------------------------------------------------------------


def test_esbuild_target_translation(bridge) -> None:
    default, _ = _configured(EsbuildBackend, bridge)
    es2015, warnings = _configured(EsbuildBackend, bridge, target=ScriptTarget.ES2015)
    esnext, _ = _configured(EsbuildBackend, bridge, target=ScriptTarget.ESNEXT)

    assert default.transform_options["target"] == "es5"
    assert es2015.transform_options["target"] == "es2015"
    assert esnext.transform_options["target"] == "esnext"
    assert warnings == []


def test_esbuild_downgrades_es3_with_a_warning(bridge) -> None:
    backend, warnings = _configured(EsbuildBackend, bridge, target=ScriptTarget.ES3)

    assert backend.transform_options["target"] == "es5"
    assert warnings == [ES3_WARNING]


def test_esbuild_fixed_options_and_jsx_translation(bridge) -> None:
    backend, _ = _configured(
        EsbuildBackend,
        bridge,
        jsx=JsxEmit.REACT_JSXDEV,
        jsx_import_source="preact",
        use_define_for_class_fields=False,
    )
    options = backend.transform_options

    assert options["format"] == "esm"
    assert options["sourcemap"] is True
    assert options["sourcesContent"] is False
    assert options["minify"] is False
    assert options["treeShaking"] is False
    assert options["jsx"] == "automatic"
    assert options["jsxDev"] is True
    assert options["jsxImportSource"] == "preact"
    assert options["tsconfigRaw"]["compilerOptions"]["useDefineForClassFields"] is False
    assert options["tsconfigRaw"]["compilerOptions"]["importsNotUsedAsValues"] == "preserve"


def test_esbuild_transform_sends_loader_and_collects_warnings(bridge, fake_node) -> None:
    fake_node.handler = lambda request: {
        "code": "export const a = 1;\n",
        "map": '{"version":3}',
        "warnings": [{"text": "Unsupported syntax", "location": {"line": 3, "column": 4}}],
    }
    backend, _ = _configured(EsbuildBackend, bridge, target=ScriptTarget.ES2020)

    outcome = backend.transform_file("export const a: number = 1;", "/src/a.tsx")

    request = fake_node.calls[0]
    assert request["function"] == "transformSync"
    assert request["options"]["loader"] == "tsx"
    assert request["options"]["sourcefile"] == "/src/a.tsx"
    assert "jsxFactory" not in request["options"]
    assert outcome.kind is OutcomeKind.SUCCESS
    assert outcome.code == "export const a = 1;\n"
    assert outcome.map == '{"version":3}'
    assert [(warning.message, warning.line, warning.column) for warning in outcome.warnings] == [
        ("Unsupported syntax", 3, 4),
    ]


def test_esbuild_skips_files_without_a_loader(bridge, fake_node) -> None:
    backend, _ = _configured(EsbuildBackend, bridge)

    assert backend.transform_file("", "/src/a.js").kind is OutcomeKind.SKIP
    assert fake_node.calls == []


def test_esbuild_rejects_decorator_metadata_only_when_decorators_are_present(bridge, fake_node) -> None:
    backend, _ = _configured(
        EsbuildBackend,
        bridge,
        experimental_decorators=True,
        emit_decorator_metadata=True,
    )

    decorated = backend.transform_file("@Component({})\nexport class A {}\n", "/src/a.ts")
    plain = backend.transform_file("export const email = 'a@b.c';\n", "/src/b.ts")

    assert decorated.kind is OutcomeKind.FAILURE
    assert decorated.message == DECORATOR_METADATA_ERROR
    assert plain.kind is OutcomeKind.SUCCESS
    assert len(fake_node.calls) == 1


def test_esbuild_detects_inline_parameter_decorators(bridge, fake_node) -> None:
    backend, _ = _configured(
        EsbuildBackend,
        bridge,
        experimental_decorators=True,
        emit_decorator_metadata=True,
    )
    source = "export class Service {\n  constructor(@Inject(TOKEN) private dep: Dep) {}\n}\n"

    outcome = backend.transform_file(source, "/src/service.ts")

    assert outcome.kind is OutcomeKind.FAILURE
    assert outcome.message == DECORATOR_METADATA_ERROR
    assert fake_node.calls == []


def test_esbuild_ignores_at_signs_in_literals_and_comments(bridge, fake_node) -> None:
    backend, _ = _configured(
        EsbuildBackend,
        bridge,
        experimental_decorators=True,
        emit_decorator_metadata=True,
    )
    source = (
        "// @ts-check\n"
        "/**\n * @param width pixels\n */\n"
        "export const styles = css`\n  @media (max-width: ${width}px) {\n    color: red;\n  }\n`;\n"
        "export const email = /\w+@example\.com/;\n"
        'export const handle = "@someone";\n'
    )

    outcome = backend.transform_file(source, "/src/styles.ts")

    assert outcome.kind is OutcomeKind.SUCCESS
    assert len(fake_node.calls) == 1


@pytest.mark.parametrize(
    ("source", "expected"),
    [
        ("@Component({})\nexport class A {}\n", True),
        ("export class A {\n  @Input() name = '';\n}\n", True),
        ("class A { m(@Arg() a: string) {} }", True),
        ("export default @sealed class A {}", True),
        ("const t = `${items.map((x) => x)} @media`;", False),
        ("const t = `${`nested @inner`} done`;", False),
        ("const ratio = total / count; // @todo\n", False),
        ("const a = 'it''s'; /* @deprecated */", False),
    ],
)
def test_contains_decorator(source: str, expected: bool) -> None:
    assert contains_decorator(source) is expected


def test_strip_literals_keeps_code_and_line_breaks() -> None:
    stripped = strip_literals("const a = `x\n${b}`; // c\nf('d')")

    assert stripped.splitlines() == ["const a =   ", "  b  ;     ", "f(   )"]


def test_esbuild_backend_errors_become_failures(bridge, fake_node) -> None:
    def explode(request):
        raise RuntimeError('Transform failed with 1 error:\n/src/a.ts:1:6: ERROR: Expected ";"')

    fake_node.handler = explode
    backend, _ = _configured(EsbuildBackend, bridge)

    outcome = backend.transform_file("let a b", "/src/a.ts")

    assert outcome.kind is OutcomeKind.FAILURE
    assert outcome.message.startswith("Transform failed with 1 error:")


# swc ----------------------------------------------------------------------


@pytest.mark.parametrize(
    ("target", "expected"),
    [
        (ScriptTarget.ES3, "es3"),
        (ScriptTarget.ES5, "es5"),
        (ScriptTarget.ES2015, "es2015"),
        (ScriptTarget.ES2022, "es2022"),
        (ScriptTarget.ES2023, "es2022"),
        (ScriptTarget.ES2024, "es2022"),
        (ScriptTarget.ESNEXT, "es2022"),
    ],
)
def test_swc_target(target: ScriptTarget, expected: str) -> None:
    assert swc_target(target) == expected


def test_swc_options_for_typescript_and_tsx(bridge) -> None:
    backend, _ = _configured(
        SwcBackend,
        bridge,
        target=ScriptTarget.ES2019,
        jsx=JsxEmit.REACT_JSX,
        experimental_decorators=True,
        emit_decorator_metadata=True,
    )

    ts_options = backend.options_for("/src/a.ts")
    tsx_options = backend.options_for("/src/view.tsx")

    assert ts_options["jsc"]["target"] == "es2019"
    assert ts_options["jsc"]["parser"] == {
        "syntax": "typescript",
        "dynamicImport": True,
        "decorators": True,
        "tsx": False,
    }
    assert ts_options["jsc"]["transform"]["react"] is None
    assert ts_options["jsc"]["transform"]["decoratorMetadata"] is True
    assert tsx_options["jsc"]["parser"]["tsx"] is True
    assert tsx_options["jsc"]["transform"]["react"]["runtime"] == "automatic"
    assert tsx_options["filename"] == "/src/view.tsx"
    assert ts_options["module"]["type"] == "es6"
    assert ts_options["sourceMaps"] is True
    assert ts_options["swcrc"] is False


def test_swc_classic_runtime_for_react_and_preserve_skips_react(bridge) -> None:
    classic, _ = _configured(SwcBackend, bridge, jsx=JsxEmit.REACT, jsx_factory="h")
    preserved, _ = _configured(SwcBackend, bridge, jsx=JsxEmit.PRESERVE)

    react = classic.options_for("/src/a.tsx")["jsc"]["transform"]["react"]
    assert react["runtime"] == "classic"
    assert react["pragma"] == "h"
    assert preserved.options_for("/src/a.tsx")["jsc"]["transform"]["react"] is None
    assert classic.options_for("/src/a.ts")["jsc"]["target"] == "es5"


def test_swc_options_are_independent_per_call(bridge) -> None:
    backend, _ = _configured(SwcBackend, bridge, jsx=JsxEmit.REACT)

    first = backend.options_for("/src/a.tsx")
    first["jsc"]["parser"]["tsx"] = "mutated"
    first["jsc"]["transform"]["react"]["runtime"] = "mutated"
    second = backend.options_for("/src/b.tsx")

    assert second["jsc"]["parser"]["tsx"] is True
    assert second["jsc"]["transform"]["react"]["runtime"] == "classic"


def test_swc_transform_serialises_source_maps(bridge, fake_node) -> None:
    fake_node.handler = lambda request: {"code": "export {};\n", "map": {"version": 3, "mappings": ""}}
    backend, _ = _configured(SwcBackend, bridge)

    outcome = backend.transform_file("export {};", "/src/a.ts")

    assert outcome.kind is OutcomeKind.SUCCESS
    assert json.loads(outcome.map) == {"version": 3, "mappings": ""}
    assert fake_node.calls[0]["package"] == "@swc/core"


# sucrase ------------------------------------------------------------------


def test_sucrase_typescript_only_by_default(bridge) -> None:
    backend, _ = _configured(SucraseBackend, bridge, es_module_interop=False)

    options = backend._options

    assert options["transforms"] == ["typescript"]
    assert options["enableLegacyTypeScriptModuleInterop"] is True
    assert options["disableESTransforms"] is True
    assert "jsxRuntime" not in options


@pytest.mark.parametrize(
    ("jsx", "runtime", "production"),
    [
        (JsxEmit.REACT, "classic", True),
        (JsxEmit.REACT_JSX, "automatic", True),
        (JsxEmit.REACT_JSXDEV, "automatic", False),
    ],
)
def test_sucrase_jsx_modes(bridge, jsx: JsxEmit, runtime: str, production: bool) -> None:
    backend, _ = _configured(SucraseBackend, bridge, jsx=jsx)

    assert backend._options["transforms"] == ["typescript", "jsx"]
    assert backend._options["jsxRuntime"] == runtime
    assert backend._options["production"] is production


def test_sucrase_transform_uses_file_path_and_source_map(bridge, fake_node) -> None:
    fake_node.handler = lambda request: {"code": "const a = 1;", "sourceMap": {"version": 3}}
    backend, _ = _configured(SucraseBackend, bridge)

    outcome = backend.transform_file("const a: number = 1;", "/src/a.ts")

    request = fake_node.calls[0]
    assert request["function"] == "transform"
    assert request["options"]["filePath"] == "/src/a.ts"
    assert request["options"]["sourceMapOptions"] == {"compiledFilename": "/src/a.ts"}
    assert outcome.code == "const a = 1;"
    assert json.loads(outcome.map) == {"version": 3}
