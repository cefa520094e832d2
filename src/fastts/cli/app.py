# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Command line interface for transpiling and inspecting TypeScript projects."""

from __future__ import annotations

import json
import logging
from pathlib import Path

import typer

from ..compiler.resolver import ModuleResolver
from ..config.loader import ConfigChainLoader
from ..config.normalizer import normalize_options
from ..config.sources import Disabled, PathSource, ResolvedSource, UseDefault
from ..constants import DEFAULT_TRANSFORMER
from ..errors import FastTsError, TransformError
from ..host import ConsoleBuildContext, ProjectBuild
from ..logging import fail, ok, section, warn
from ..plugin import FastTypescriptPlugin
from ..resolution import ResolutionCache, ResolutionKind
from ..transformers.registry import DEFAULT_REGISTRY
from .typer_ext import create_typer

app = create_typer(
    name="fastts",
    help="Transpile TypeScript with esbuild, swc or sucrase using tsconfig.json semantics.",
    no_args_is_help=True,
    add_completion=False,
)


def _config_source(project: str | None, no_config: bool) -> ResolvedSource:
    if no_config:
        return Disabled()
    if project:
        return PathSource(project)
    return UseDefault()


def _report_error(exc: FastTsError, *, use_emoji: bool) -> typer.Exit:
    message = f"{exc.path}: {exc.message}" if isinstance(exc, TransformError) else exc.message
    fail(message, use_emoji=use_emoji)
    return typer.Exit(code=1)


@app.callback()
def main_callback(
    debug: bool = typer.Option(False, "--debug", help="Log internal debug messages to stderr."),
) -> None:
    """Transpile TypeScript with esbuild, swc or sucrase using tsconfig.json semantics."""

    if debug:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")


@app.command("build", help="Transpile files listed on the command line or selected by tsconfig.json.")
def build_command(
    files: list[Path] | None = typer.Argument(None, help="Files to transpile.", show_default=False),
    project: str | None = typer.Option(None, "--project", "-p", help="Path to the tsconfig file."),
    transformer: str = typer.Option(DEFAULT_TRANSFORMER, "--transformer", "-t", help="Backend to transpile with."),
    out_dir: Path | None = typer.Option(None, "--out-dir", "-o", help="Directory for emitted JavaScript."),
    no_config: bool = typer.Option(False, "--no-config", help="Ignore tsconfig.json entirely."),
    jobs: int | None = typer.Option(None, "--jobs", "-j", min=1, help="Maximum concurrent transforms."),
    emoji: bool = typer.Option(True, "--emoji/--no-emoji", help="Decorate messages with emoji."),
) -> None:
    """Transpile files and write ``.js`` output with source maps."""

    plugin = FastTypescriptPlugin(_config_source(project, no_config), transformer, project_root=Path.cwd())
    context = ConsoleBuildContext(use_emoji=emoji)
    try:
        report = ProjectBuild(plugin, context, out_dir=out_dir, jobs=jobs).run(files or None)
    except FastTsError as exc:
        raise _report_error(exc, use_emoji=emoji) from None

    for output in report.outputs:
        typer.echo(str(output))
    ok(
        f"Transpiled {len(report.outputs)} file(s) with {transformer}, "
        f"skipped {len(report.skipped)}, {report.warnings} warning(s)",
        use_emoji=emoji,
    )


@app.command("show-config", help="Print the merged compiler options and the configuration chain.")
def show_config_command(
    project: str | None = typer.Option(None, "--project", "-p", help="Path to the tsconfig file."),
    as_json: bool = typer.Option(False, "--json", help="Emit a single JSON document."),
    emoji: bool = typer.Option(True, "--emoji/--no-emoji", help="Decorate messages with emoji."),
) -> None:
    """Print the effective configuration."""

    try:
        loaded = ConfigChainLoader(Path.cwd()).load(_config_source(project, False))
    except FastTsError as exc:
        raise _report_error(exc, use_emoji=emoji) from None
    resolved, extra = normalize_options(loaded.options)
    warnings = [diagnostic.message for diagnostic in (*loaded.warnings, *extra)]
    compiler_options = resolved.compiler_options.to_tsconfig()

    if as_json:
        payload = {
            "baseDir": str(resolved.base_dir),
            "compilerOptions": compiler_options,
            "configFiles": list(loaded.chain),
            "fileNames": list(loaded.file_names),
            "warnings": warnings,
        }
        typer.echo(json.dumps(payload, indent=2, sort_keys=True))
        return

    section("Compiler options", use_color=False)
    typer.echo(json.dumps(compiler_options, indent=2, sort_keys=True))
    section("Configuration files", use_color=False)
    for path in loaded.chain:
        typer.echo(path)
    for message in warnings:
        warn(message, use_emoji=emoji)


@app.command("resolve", help="Resolve an import specifier the way the build would.")
def resolve_command(
    specifier: str = typer.Argument(..., help="Module specifier as written in the source."),
    importer: Path = typer.Option(..., "--importer", "-i", help="File containing the import."),
    project: str | None = typer.Option(None, "--project", "-p", help="Path to the tsconfig file."),
    emoji: bool = typer.Option(True, "--emoji/--no-emoji", help="Decorate messages with emoji."),
) -> None:
    """Print the resolved path, ``declined`` or ``pass-through``."""

    try:
        loaded = ConfigChainLoader(Path.cwd()).load(_config_source(project, False))
    except FastTsError as exc:
        raise _report_error(exc, use_emoji=emoji) from None
    resolved, _ = normalize_options(loaded.options)
    cache = ResolutionCache(ModuleResolver(resolved.compiler_options))
    outcome = cache.resolve(specifier, str(importer.resolve()))
    typer.echo(outcome.path if outcome.kind is ResolutionKind.RESOLVED else outcome.kind.value)


@app.command("transformers", help="List the available transformers.")
def transformers_command() -> None:
    """List transformer names and the npm package each one needs."""

    for name, factory in DEFAULT_REGISTRY.items():
        package = getattr(factory, "package", "")
        marker = " (default)" if name == DEFAULT_TRANSFORMER else ""
        typer.echo(f"{name}\t{package}{marker}")


def main() -> None:
    """Run the ``fastts`` application."""

    app()


__all__ = ["app", "main"]
