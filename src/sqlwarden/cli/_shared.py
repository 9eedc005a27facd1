"""Shared helpers for the commands that run the handler against local DuckDB."""

from __future__ import annotations

import asyncio
import dataclasses
import sys
from collections.abc import Callable
from pathlib import Path

import click

from sqlwarden.adapters.duckdb import DuckDBGateway
from sqlwarden.cli._output import emit_envelope
from sqlwarden.config import SkillConfig, load_config_file
from sqlwarden.context import SkillContext
from sqlwarden.handler import execute
from sqlwarden.querylog import cleanup_old_logs


def resolve_text_stdin(value: str | None, from_stdin: bool, *, name: str = "SQL") -> str:
    """Resolve input from positional argument or stdin. Exactly one source required."""
    if value and from_stdin:
        raise click.UsageError(f"Provide {name} as an argument or --from-stdin, not both.")
    if from_stdin:
        if sys.stdin.isatty():
            raise click.UsageError("--from-stdin requires piped input (stdin is a terminal).")
        text = sys.stdin.read().strip()
        if not text:
            raise click.UsageError("--from-stdin: stdin was empty.")
        return text
    if not value:
        raise click.UsageError(f"Missing argument '{name}'. Provide {name} or use --from-stdin.")
    return value


def parse_db(values: tuple[str, ...]) -> dict[str, str]:
    """Parse repeated --db NAME=PATH values."""
    databases: dict[str, str] = {}
    for value in values:
        if "=" not in value:
            raise click.BadParameter(
                f"Expected NAME=PATH, got '{value}'",
                param_hint="'--db'",
            )
        name, path = value.split("=", 1)
        databases[name.strip()] = path.strip()
    return databases


def load_settings(
    config_path: Path | None, db_values: tuple[str, ...] = ()
) -> tuple[SkillConfig, dict[str, str]]:
    """Merge the config file with --db options.

    Without an explicit allow-list, every database the gateway knows about
    is allowed.
    """
    if config_path is not None:
        config, databases = load_config_file(config_path)
    else:
        config, databases = SkillConfig(), {}
    databases.update(parse_db(db_values))
    if not databases:
        databases = {"default": ":memory:"}
    if config.allowed_databases is None:
        config = dataclasses.replace(config, allowed_databases=sorted(databases))
    return config, databases


def config_option(fn: Callable) -> Callable:
    return click.option(
        "--config",
        "config_path",
        type=click.Path(exists=True, dir_okay=False, path_type=Path),
        envvar="SQLWARDEN_CONFIG",
        default=None,
        help="TOML config file.",
    )(fn)


def gateway_options(fn: Callable) -> Callable:
    """Options shared by every command that talks to the DuckDB gateway."""
    options = [
        click.option(
            "--db",
            "db_values",
            multiple=True,
            help="Database as NAME=PATH (repeatable). Defaults to an in-memory 'default'.",
        ),
        click.option(
            "--database", default="default", show_default=True, help="Target database name."
        ),
        click.option("--timeout", type=int, default=None, help="Timeout override in milliseconds."),
        click.option(
            "--format",
            "output_format",
            type=click.Choice(["json", "text"]),
            default="text",
            help="Output format.",
        ),
    ]
    for option in reversed(options):
        fn = option(fn)
    return config_option(fn)


async def _run(params: dict[str, object], context: SkillContext) -> dict:
    gateway = context.gateway_client
    try:
        return await execute(params, context)
    finally:
        gateway.close()


def run_action(
    params: dict[str, object],
    *,
    config_path: Path | None,
    db_values: tuple[str, ...],
    output_format: str,
) -> None:
    """Run one handler call against the local gateway and print the envelope."""
    try:
        config, databases = load_settings(config_path, db_values)
    except click.BadParameter as e:
        click.echo(f"error: {e.format_message()}", err=True)
        raise SystemExit(1) from e

    if config.audit_log:
        cleanup_old_logs()

    context = SkillContext(gateway_client=DuckDBGateway(databases), config=config)
    envelope = asyncio.run(_run(params, context))
    emit_envelope(envelope, output_format)
    if not envelope["metadata"]["success"]:
        raise SystemExit(1)


def parse_params(values: tuple[str, ...]) -> list[object]:
    """Bind values from repeated --param options; numeric text binds as a number."""
    params: list[object] = []
    for value in values:
        for cast in (int, float):
            try:
                params.append(cast(value))
                break
            except ValueError:
                continue
        else:
            params.append(value)
    return params
