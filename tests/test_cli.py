# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""CLI tests for the ``fastts`` application."""

from __future__ import annotations

import json
import os
from pathlib import Path

import pytest
from typer.testing import CliRunner

from fastts import plugin as plugin_module
from fastts.cli.app import app
from fastts.config import ISOLATED_MODULES_WARNING
from fastts.transformers.bridge import NodeBridge


@pytest.fixture
def fake_bridges(monkeypatch: pytest.MonkeyPatch, fake_node):
    monkeypatch.setattr(plugin_module, "NodeBridge", lambda cwd: NodeBridge(cwd, runner=fake_node))
    return fake_node


def test_transformers_lists_backends() -> None:
    result = CliRunner().invoke(app, ["transformers"])

    assert result.exit_code == 0
    assert result.stdout.splitlines() == [
        "esbuild\tesbuild (default)",
        "swc\t@swc/core",
        "sucrase\tsucrase",
    ]


def test_show_config_json(tmp_path: Path, monkeypatch: pytest.MonkeyPatch, write_json, touch) -> None:
    base = write_json(tmp_path / "tsconfig.base.json", {"compilerOptions": {"strict": True}})
    root = write_json(
        tmp_path / "tsconfig.json",
        {"extends": "./tsconfig.base.json", "compilerOptions": {"target": "ES2020"}, "include": ["src"]},
    )
    touch(tmp_path / "src" / "index.ts")
    monkeypatch.chdir(tmp_path)

    result = CliRunner().invoke(app, ["show-config", "--json"])

    assert result.exit_code == 0, result.output
    payload = json.loads(result.stdout)
    assert payload["compilerOptions"] == {"isolatedModules": True, "strict": True, "target": "es2020"}
    assert payload["configFiles"] == [str(root.resolve()), str(base.resolve())]
    assert payload["fileNames"] == [f"{tmp_path.resolve().as_posix()}/src/index.ts"]
    assert payload["warnings"] == [ISOLATED_MODULES_WARNING]
    assert payload["baseDir"] == str(tmp_path.resolve())


def test_show_config_reports_errors(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(tmp_path)

    result = CliRunner().invoke(app, ["show-config", "--project", "missing.json", "--no-emoji"])

    assert result.exit_code == 1
    assert "Cannot read file" in result.output
    assert "missing.json" in result.output


def test_resolve_prints_path_or_decision(tmp_path: Path, monkeypatch: pytest.MonkeyPatch, write_json, touch) -> None:
    write_json(tmp_path / "tsconfig.json", {"compilerOptions": {"isolatedModules": True}, "files": []})
    touch(tmp_path / "src" / "main.ts")
    helper = touch(tmp_path / "src" / "helper.ts")
    touch(tmp_path / "src" / "shapes.d.ts")
    monkeypatch.chdir(tmp_path)
    runner = CliRunner()

    resolved = runner.invoke(app, ["resolve", "./helper", "--importer", "src/main.ts"])
    declined = runner.invoke(app, ["resolve", "./shapes", "-i", "src/main.ts"])
    passed = runner.invoke(app, ["resolve", "./helper", "-i", "src/main.js"])

    assert resolved.exit_code == 0, resolved.output
    assert resolved.stdout.strip() == os.path.realpath(helper)
    assert declined.stdout.strip() == "declined"
    assert passed.stdout.strip() == "pass-through"


def test_build_writes_outputs(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
    fake_bridges,
    write_json,
    touch,
) -> None:
    write_json(
        tmp_path / "tsconfig.json",
        {"compilerOptions": {"isolatedModules": True, "rootDir": "src"}, "include": ["src"]},
    )
    touch(tmp_path / "src" / "a.ts", "export const a = 1;\n")
    monkeypatch.chdir(tmp_path)

    result = CliRunner().invoke(app, ["build", "--out-dir", "out", "--no-emoji", "-j", "2"])

    assert result.exit_code == 0, result.output
    assert (tmp_path / "out" / "a.js").is_file()
    assert (tmp_path / "out" / "a.js.map").is_file()
    assert "Transpiled 1 file(s) with esbuild, skipped 0, 0 warning(s)" in result.output
    assert fake_bridges.calls[0]["package"] == "esbuild"


def test_build_without_config_file_fails(tmp_path: Path, monkeypatch: pytest.MonkeyPatch, fake_bridges) -> None:
    monkeypatch.chdir(tmp_path)

    result = CliRunner().invoke(app, ["build", "--no-emoji"])

    assert result.exit_code == 1
    assert "Cannot read file" in result.output
    assert fake_bridges.calls == []


def test_build_reports_transform_errors_with_path(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
    fake_bridges,
    touch,
) -> None:
    def explode(request):
        raise RuntimeError("Unexpected end of file")

    fake_bridges.handler = explode
    source = touch(tmp_path / "broken.ts", "let a =")
    monkeypatch.chdir(tmp_path)

    result = CliRunner().invoke(app, ["build", str(source), "--no-config", "-t", "sucrase", "--no-emoji"])

    assert result.exit_code == 1
    assert f"{source.resolve()}: Unexpected end of file" in result.output


def test_build_rejects_unknown_transformer(tmp_path: Path, monkeypatch: pytest.MonkeyPatch, fake_bridges) -> None:
    monkeypatch.chdir(tmp_path)

    result = CliRunner().invoke(app, ["build", "--no-config", "-t", "babel", "--no-emoji"])

    assert result.exit_code == 1
    assert 'Unknown transformer name "babel"' in result.output
    assert fake_bridges.requests == []
