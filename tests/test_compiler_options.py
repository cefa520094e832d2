# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tests for compiler option conversion and validation."""

from __future__ import annotations

from pathlib import Path

from fastts.compiler.options import convert_compiler_options, validate_compiler_options
from fastts.compiler.types import CompilerOptions, JsxEmit, ModuleKind, ModuleResolutionKind, ScriptTarget
from fastts.diagnostics import Severity


def test_convert_parses_enums_case_insensitively(tmp_path: Path) -> None:
    converted, problems = convert_compiler_options(
        {"target": "ES2017", "module": "ESNext", "jsx": "react-jsx", "strict": True},
        tmp_path,
    )

    assert problems == []
    assert converted["target"] is ScriptTarget.ES2017
    assert converted["module"] is ModuleKind.ESNEXT
    assert converted["jsx"] is JsxEmit.REACT_JSX
    assert converted["strict"] is True


def test_convert_resolves_path_options_against_base_dir(tmp_path: Path) -> None:
    converted, problems = convert_compiler_options(
        {"baseUrl": "./src", "outDir": "../dist", "paths": {"@/*": ["./*"]}},
        tmp_path / "project",
    )

    assert problems == []
    assert converted["baseUrl"] == tmp_path / "project" / "src"
    assert converted["outDir"] == tmp_path / "dist"
    assert converted["pathsBasePath"] == tmp_path / "project"


def test_convert_reports_and_drops_invalid_entries(tmp_path: Path) -> None:
    converted, problems = convert_compiler_options(
        {"bogus": 1, "strict": "yes", "target": "es1999", "lib": "dom", "isolatedModules": True},
        tmp_path,
        file_name="tsconfig.json",
    )

    messages = [problem.message for problem in problems]
    assert "Unknown compiler option 'bogus'." in messages
    assert "Compiler option 'strict' requires a value of type boolean." in messages
    assert "Compiler option 'lib' requires a value of type Array." in messages
    assert any(message.startswith("Argument for '--target' option must be: 'es3', 'es5'") for message in messages)
    assert all(problem.severity is Severity.ERROR and problem.file == "tsconfig.json" for problem in problems)
    assert converted == {"isolatedModules": True}


def test_validate_warns_about_deprecated_options() -> None:
    problems = validate_compiler_options({"out": Path("/tmp/out.js"), "target": ScriptTarget.ES3})

    assert [problem.severity for problem in problems] == [Severity.WARNING, Severity.WARNING]
    assert problems[0].message.startswith("Option 'out' is deprecated and will stop functioning in TypeScript 5.5.")
    assert "'target=ES3'" in problems[1].message


def test_validate_deprecations_silenced_by_ignore_deprecations() -> None:
    problems = validate_compiler_options({"out": Path("/tmp/out.js"), "ignoreDeprecations": "5.0"})

    assert problems == []


def test_validate_option_combinations() -> None:
    decorators = validate_compiler_options({"emitDecoratorMetadata": True})
    node16 = validate_compiler_options(
        {"moduleResolution": ModuleResolutionKind.NODE16, "module": ModuleKind.ESNEXT},
    )
    bundler = validate_compiler_options(
        {"moduleResolution": ModuleResolutionKind.BUNDLER, "module": ModuleKind.COMMONJS},
    )

    assert [problem.message for problem in decorators] == [
        "Option 'emitDecoratorMetadata' cannot be specified without specifying option 'experimentalDecorators'.",
    ]
    assert [problem.message for problem in node16] == [
        "Option 'module' must be set to 'Node16' when option 'moduleResolution' is set to 'Node16'.",
    ]
    assert bundler[0].is_error


def test_effective_module_resolution_defaults() -> None:
    assert CompilerOptions().effective_module_resolution() is ModuleResolutionKind.NODE10
    es2015 = CompilerOptions(target=ScriptTarget.ES2015)
    assert es2015.effective_module() is ModuleKind.ES2015
    assert es2015.effective_module_resolution() is ModuleResolutionKind.CLASSIC
    assert CompilerOptions(module=ModuleKind.NODENEXT).effective_module_resolution() is ModuleResolutionKind.NODENEXT
    assert CompilerOptions(module=ModuleKind.PRESERVE).effective_module_resolution() is ModuleResolutionKind.BUNDLER


def test_to_tsconfig_uses_tsconfig_spelling(tmp_path: Path) -> None:
    converted, _ = convert_compiler_options(
        {"target": "es2020", "isolatedModules": True, "paths": {"x": ["y"]}, "strict": True},
        tmp_path,
    )

    rendered = CompilerOptions.model_validate(converted).to_tsconfig()

    assert rendered == {
        "target": "es2020",
        "isolatedModules": True,
        "paths": {"x": ["y"]},
        "strict": True,
    }


def test_newer_targets_and_node_module_kinds_are_accepted(tmp_path: Path) -> None:
    converted, problems = convert_compiler_options({"target": "ES2024", "module": "Node20"}, tmp_path)

    assert problems == []
    assert converted["target"] is ScriptTarget.ES2024
    assert converted["module"] is ModuleKind.NODE20
    options = CompilerOptions.model_validate(converted)
    assert options.effective_module_resolution() is ModuleResolutionKind.NODE16
    assert CompilerOptions(module=ModuleKind.NODE18).effective_module_resolution() is ModuleResolutionKind.NODE16
    assert validate_compiler_options({"moduleResolution": ModuleResolutionKind.NODE16, "module": ModuleKind.NODE18}) == []
    assert ModuleKind.NODE20.is_es_module
