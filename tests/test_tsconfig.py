# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tests for tsconfig reading, ``extends`` merging and file expansion."""

from __future__ import annotations

import os
from pathlib import Path

from fastts.compiler.tsconfig import (
    FileSystemHost,
    RecordingHost,
    parse_config_content,
    parse_json_text,
    read_config_file,
)
from fastts.compiler.types import JsxEmit, ScriptTarget


def test_parse_json_text_accepts_comments_and_trailing_commas() -> None:
    data, problem = parse_json_text(
        "tsconfig.json",
        """
        {
          // strictness
          "compilerOptions": { "strict": true, },
          /* inputs */
          "include": ["src"],
        }
        """,
    )

    assert problem is None
    assert data == {"compilerOptions": {"strict": True}, "include": ["src"]}


def test_parse_json_text_rejects_non_object_roots() -> None:
    data, problem = parse_json_text("/p/tsconfig.json", "[1, 2]")

    assert data is None
    assert problem is not None
    assert problem.message == "The root value of a 'tsconfig.json' file must be an object."


def test_parse_json_text_reports_syntax_errors() -> None:
    _, problem = parse_json_text("/p/tsconfig.json", "{ nope")

    assert problem is not None
    assert problem.message.startswith("Failed to parse file '/p/tsconfig.json': ")


def test_read_config_file_reports_missing_file(tmp_path: Path) -> None:
    path = str(tmp_path / "tsconfig.json")

    data, problem = read_config_file(path)

    assert data is None
    assert problem is not None
    assert problem.message == f"Cannot read file '{path}'."


def test_extends_chain_merges_in_order_and_records_reads(tmp_path: Path, write_json) -> None:
    base = write_json(tmp_path / "configs" / "base.json", {"compilerOptions": {"target": "es5", "strict": True}})
    middle = write_json(
        tmp_path / "configs" / "middle.json",
        {"extends": "./base.json", "compilerOptions": {"target": "es2017", "jsxFactory": "h"}},
    )
    root = {"extends": "./configs/middle", "compilerOptions": {"target": "es2020"}, "files": []}
    host = RecordingHost()

    parsed = parse_config_content(root, host, tmp_path, config_file_name=str(tmp_path / "tsconfig.json"))

    assert parsed.errors == ()
    assert parsed.options.target is ScriptTarget.ES2020
    assert parsed.options.jsx_factory == "h"
    assert parsed.options.to_tsconfig()["strict"] is True
    assert host.files_read == [str(middle), str(base)]


def test_extends_array_later_entries_override_earlier(tmp_path: Path, write_json) -> None:
    write_json(tmp_path / "a.json", {"compilerOptions": {"target": "es2015", "jsxFactory": "a"}})
    write_json(tmp_path / "b.json", {"compilerOptions": {"target": "es2018"}})

    parsed = parse_config_content(
        {"extends": ["./a.json", "./b.json"], "files": []},
        FileSystemHost(),
        tmp_path,
        config_file_name=str(tmp_path / "tsconfig.json"),
    )

    assert parsed.options.target is ScriptTarget.ES2018
    assert parsed.options.jsx_factory == "a"


def test_extends_package_never_records_package_json(tmp_path: Path, write_json) -> None:
    package_dir = tmp_path / "node_modules" / "@tsconfig" / "node18"
    write_json(package_dir / "package.json", {"name": "@tsconfig/node18", "version": "1.0.0"})
    shared = write_json(package_dir / "tsconfig.json", {"compilerOptions": {"target": "es2022"}})
    host = RecordingHost()

    parsed = parse_config_content(
        {"extends": "@tsconfig/node18/tsconfig.json", "files": []},
        host,
        tmp_path,
        config_file_name=str(tmp_path / "tsconfig.json"),
    )

    assert parsed.errors == ()
    assert parsed.options.target is ScriptTarget.ES2022
    assert host.files_read == [str(shared)]


def test_extends_package_root_uses_default_file(tmp_path: Path, write_json) -> None:
    package_dir = tmp_path / "node_modules" / "shared-config"
    write_json(package_dir / "package.json", {"name": "shared-config"})
    write_json(package_dir / "tsconfig.json", {"compilerOptions": {"jsx": "preserve"}})

    parsed = parse_config_content(
        {"extends": "shared-config", "files": []},
        FileSystemHost(),
        tmp_path / "src",
        config_file_name=str(tmp_path / "src" / "tsconfig.json"),
    )

    assert parsed.errors == ()
    assert parsed.options.jsx is JsxEmit.PRESERVE


def test_extends_missing_file_is_an_error(tmp_path: Path) -> None:
    parsed = parse_config_content(
        {"extends": "./missing.json", "files": []},
        FileSystemHost(),
        tmp_path,
        config_file_name=str(tmp_path / "tsconfig.json"),
    )

    assert [error.message for error in parsed.errors] == ["File './missing.json' not found."]


def test_extends_cycle_is_reported(tmp_path: Path, write_json) -> None:
    first = tmp_path / "tsconfig.json"
    second = write_json(tmp_path / "other.json", {"extends": "./tsconfig.json"})
    write_json(first, {"extends": "./other.json"})

    parsed = parse_config_content(
        {"extends": "./other.json", "files": []},
        FileSystemHost(),
        tmp_path,
        config_file_name=str(first),
    )

    messages = [error.message for error in parsed.errors]
    assert messages == [f"Circularity detected while resolving configuration: {first} -> {second} -> {first}"]


def test_invalid_top_level_shapes_are_errors(tmp_path: Path) -> None:
    parsed = parse_config_content(
        {"include": "src", "compilerOptions": [], "files": []},
        FileSystemHost(),
        tmp_path,
        config_file_name=str(tmp_path / "tsconfig.json"),
    )

    messages = {error.message for error in parsed.errors}
    assert "Compiler option 'include' requires a value of type Array." in messages
    assert "Compiler option 'compilerOptions' requires a value of type object." in messages


def test_include_expands_typescript_inputs(tmp_path: Path, touch) -> None:
    touch(tmp_path / "src" / "a.ts")
    touch(tmp_path / "src" / "a.d.ts")
    touch(tmp_path / "src" / "nested" / "b.tsx")
    touch(tmp_path / "src" / "types.d.ts")
    touch(tmp_path / "src" / "c.js")
    touch(tmp_path / "node_modules" / "dep" / "index.ts")
    touch(tmp_path / "dist" / "out.ts")

    parsed = parse_config_content(
        {"compilerOptions": {"outDir": "dist"}},
        FileSystemHost(),
        tmp_path,
        config_file_name=str(tmp_path / "tsconfig.json"),
    )

    root = tmp_path.as_posix()
    assert parsed.file_names == (
        f"{root}/src/a.ts",
        f"{root}/src/nested/b.tsx",
        f"{root}/src/types.d.ts",
    )


def test_files_come_first_and_allow_js_adds_javascript(tmp_path: Path, touch) -> None:
    touch(tmp_path / "lib" / "legacy.js")
    touch(tmp_path / "lib" / "modern.ts")
    entry = touch(tmp_path / "entry.ts")

    parsed = parse_config_content(
        {"files": ["entry.ts"], "include": ["lib"], "compilerOptions": {"allowJs": True}},
        FileSystemHost(),
        tmp_path,
        config_file_name=str(tmp_path / "tsconfig.json"),
    )

    root = tmp_path.as_posix()
    assert parsed.file_names == (
        os.path.normpath(entry).replace(os.sep, "/"),
        f"{root}/lib/legacy.js",
        f"{root}/lib/modern.ts",
    )
