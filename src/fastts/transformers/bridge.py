# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Invoke npm-packaged transpilers through a short-lived ``node`` process.

Each request is a JSON document written to the child's stdin; the child
``require``s the package from the project directory, runs the requested
synchronous API and prints a JSON reply. Failures inside the child are
reported in the reply rather than through the exit status so the original
JavaScript error message and code survive intact.
"""

from __future__ import annotations

import json
import logging
import re
from collections.abc import Callable, Mapping
from pathlib import Path
from typing import Any, Final

from packaging.version import InvalidVersion, Version

from ..process import CommandOptions, run_command

LOGGER = logging.getLogger(__name__)

NODE_EXECUTABLE: Final[str] = "node"
MODULE_NOT_FOUND: Final[str] = "MODULE_NOT_FOUND"

_BRIDGE_SCRIPT: Final[str] = r"""
const fs = require('fs');
const path = require('path');
const { createRequire } = require('module');

function packageVersion(req, name) {
    let dir = path.dirname(req.resolve(name));
    for (;;) {
        const candidate = path.join(dir, 'package.json');
        if (fs.existsSync(candidate)) {
            const manifest = JSON.parse(fs.readFileSync(candidate, 'utf8'));
            if (manifest.name === name) return manifest.version;
        }
        const parent = path.dirname(dir);
        if (parent === dir) return null;
        dir = parent;
    }
}

let input = '';
process.stdin.setEncoding('utf8');
process.stdin.on('data', chunk => { input += chunk; });
process.stdin.on('end', () => {
    const request = JSON.parse(input);
    const reply = value => process.stdout.write(JSON.stringify(value));
    const failure = err => reply({
        ok: false,
        code: (err && err.code) || null,
        message: err instanceof Error ? err.message : typeof err === 'string' ? err : 'Unexpected error',
    });
    const req = createRequire(path.join(request.cwd, '__fastts__.js'));
    let mod;
    try {
        mod = req(request.package);
    } catch (err) {
        failure(err);
        return;
    }
    try {
        if (request.op === 'version') {
            reply({ ok: true, result: packageVersion(req, request.package) });
            return;
        }
        const api = mod[request.function] || (mod.default && mod.default[request.function]);
        reply({ ok: true, result: api(request.source, request.options) });
    } catch (err) {
        failure(err);
    }
});
"""

Runner = Callable[[Mapping[str, Any]], Mapping[str, Any]]


class BridgeCallError(Exception):
    """Raised when the child process reports a failure."""

    def __init__(self, message: str, *, code: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.code = code


def prune_none(value: Any) -> Any:
    """Return ``value`` with ``None`` entries removed from nested mappings."""

    if isinstance(value, Mapping):
        return {key: prune_none(item) for key, item in value.items() if item is not None}
    if isinstance(value, list):
        return [prune_none(item) for item in value]
    return value


_VERSION_PATTERN = re.compile(r"(\d+(?:\.\d+)+)")


def normalize_version(raw: str | None) -> str | None:
    """Return the dotted version contained in ``raw`` or ``None``."""

    if not raw:
        return None
    match = _VERSION_PATTERN.search(raw)
    candidate = match.group(1) if match else raw.strip()
    try:
        Version(candidate)
    except InvalidVersion:
        return None
    return candidate


def is_compatible(actual: str | None, expected: str | None) -> bool:
    """Return whether ``actual`` satisfies the ``expected`` minimum version.

    Args:
        actual: Installed version string.
        expected: Minimum version string, or ``None`` for no requirement.

    Returns:
        bool: ``True`` when the installed version meets the minimum.
    """

    if expected is None:
        return True
    if actual is None:
        return False
    try:
        return Version(actual) >= Version(expected)
    except InvalidVersion:
        return False


class NodeBridge:
    """Call functions exported by npm packages installed in a project."""

    def __init__(self, cwd: Path | None = None, *, runner: Runner | None = None, timeout: float | None = None) -> None:
        """Initialise the bridge.

        Args:
            cwd: Project directory packages are resolved from.
            runner: Optional replacement for the subprocess round trip, taking
                the request document and returning the reply document.
            timeout: Per-call timeout in seconds for the default runner.
        """

        self.cwd = (cwd or Path.cwd()).resolve()
        self._runner = runner or self._run_node
        self._timeout = timeout

    def package_version(self, package: str) -> str | None:
        """Return the installed version of ``package``.

        Raises:
            BridgeCallError: If the package cannot be loaded.
        """

        return normalize_version(self._request({"op": "version", "package": package}))

    def call(self, package: str, function: str, source: str, options: Mapping[str, Any]) -> Any:
        """Invoke ``package.function(source, options)`` and return its result.

        Args:
            package: npm package name.
            function: Exported synchronous function to call.
            source: First argument, the source text.
            options: Second argument; ``None`` entries are dropped.

        Returns:
            Any: JSON-decoded return value.

        Raises:
            BridgeCallError: If the package cannot be loaded or the call throws.
        """

        return self._request(
            {
                "op": "call",
                "package": package,
                "function": function,
                "source": source,
                "options": prune_none(options),
            },
        )

    def _request(self, request: dict[str, Any]) -> Any:
        reply = self._runner({**request, "cwd": str(self.cwd)})
        if not reply.get("ok"):
            raise BridgeCallError(str(reply.get("message") or "Unexpected error"), code=reply.get("code"))
        return reply.get("result")

    def _run_node(self, request: Mapping[str, Any]) -> Mapping[str, Any]:
        try:
            completed = run_command(
                [NODE_EXECUTABLE, "-e", _BRIDGE_SCRIPT],
                options=CommandOptions(
                    cwd=self.cwd,
                    check=False,
                    capture_output=True,
                    timeout=self._timeout,
                    input=json.dumps(request),
                ),
            )
        except FileNotFoundError as exc:
            raise BridgeCallError(str(exc)) from None
        output = completed.stdout.strip()
        if not output:
            message = completed.stderr.strip() or f"node exited with status {completed.returncode}"
            raise BridgeCallError(message)
        try:
            return json.loads(output)
        except json.JSONDecodeError:
            LOGGER.debug("unparseable bridge reply: %s", output)
            raise BridgeCallError(f"Unexpected output from node: {output[:200]}") from None


__all__ = [
    "MODULE_NOT_FOUND",
    "BridgeCallError",
    "NodeBridge",
    "Runner",
    "is_compatible",
    "normalize_version",
    "prune_none",
]
