# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Shared pytest fixtures."""

from __future__ import annotations

import json
from collections.abc import Callable, Mapping
from pathlib import Path
from typing import Any, NoReturn

import pytest

from fastts.errors import FastTsError
from fastts.transformers.bridge import MODULE_NOT_FOUND, NodeBridge

DEFAULT_VERSIONS: dict[str, str] = {
    "esbuild": "0.19.12",
    "@swc/core": "1.3.107",
    "sucrase": "3.35.0",
}


class FakeNode:
    """Stand-in for the ``node`` child process used by :class:`NodeBridge`.

    Version requests answer from :attr:`versions`; packages listed in
    :attr:`missing` fail with ``MODULE_NOT_FOUND``. Calls are answered by
    :attr:`handler`, which echoes the source back by default.
    """

    def __init__(self) -> None:
        self.versions: dict[str, str | None] = dict(DEFAULT_VERSIONS)
        self.missing: set[str] = set()
        self.requests: list[dict[str, Any]] = []
        self.handler: Callable[[Mapping[str, Any]], Any] = self.echo

    @staticmethod
    def echo(request: Mapping[str, Any]) -> dict[str, Any]:
        return {
            "code": f"// compiled\n{request['source']}",
            "map": json.dumps({"version": 3, "sources": [request["options"].get("sourcefile", "")]}),
            "warnings": [],
        }

    @property
    def calls(self) -> list[dict[str, Any]]:
        return [request for request in self.requests if request["op"] == "call"]

    def __call__(self, request: Mapping[str, Any]) -> Mapping[str, Any]:
        self.requests.append(dict(request))
        package = request["package"]
        if package in self.missing:
            return {"ok": False, "code": MODULE_NOT_FOUND, "message": f"Cannot find module '{package}'"}
        if request["op"] == "version":
            return {"ok": True, "result": self.versions.get(package)}
        try:
            return {"ok": True, "result": self.handler(request)}
        except RuntimeError as exc:
            return {"ok": False, "code": None, "message": str(exc)}


class RecordingContext:
    """Plugin context collecting warnings and watch files; errors are raised."""

    def __init__(self, *, watch_mode: bool = False) -> None:
        self.watch_mode = watch_mode
        self.warnings: list[tuple[str, str | None, tuple[int, int] | None]] = []
        self.watch_files: list[str] = []

    @property
    def messages(self) -> list[str]:
        return [message for message, _, _ in self.warnings]

    def warn(self, message: str, *, file: str | None = None, location: tuple[int, int] | None = None) -> None:
        self.warnings.append((message, file, location))

    def error(self, error: FastTsError) -> NoReturn:
        raise error

    def add_watch_file(self, path: str) -> None:
        self.watch_files.append(path)


@pytest.fixture
def fake_node() -> FakeNode:
    return FakeNode()


@pytest.fixture
def bridge(fake_node: FakeNode, tmp_path: Path) -> NodeBridge:
    return NodeBridge(tmp_path, runner=fake_node)


@pytest.fixture
def bridge_factory(fake_node: FakeNode) -> Callable[[Path], NodeBridge]:
    def factory(cwd: Path) -> NodeBridge:
        return NodeBridge(cwd, runner=fake_node)

    return factory


@pytest.fixture
def context() -> RecordingContext:
    return RecordingContext()


@pytest.fixture
def write_json() -> Callable[[Path, Any], Path]:
    """Return a helper writing ``data`` as JSON to ``path``, creating parents."""

    def _write(path: Path, data: Any) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(data, indent=2), encoding="utf-8")
        return path

    return _write


@pytest.fixture
def touch() -> Callable[..., Path]:
    """Return a helper creating a file (and its parents) with optional text."""

    def _touch(path: Path, text: str = "") -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
        return path

    return _touch
