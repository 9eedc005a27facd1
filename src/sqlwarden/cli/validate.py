"""The `validate` command: run the policy gate without dispatching anything."""

from __future__ import annotations

import dataclasses
import json
from pathlib import Path

import click

from sqlwarden.cli._shared import config_option, resolve_text_stdin
from sqlwarden.config import SkillConfig, load_config_file
from sqlwarden.diagnostics.render import render_json, render_text
from sqlwarden.policy import Action, StatementRequest, evaluate


@click.command()
@click.argument("sql", required=False, default=None)
@click.option("--from-stdin", is_flag=True, help="Read SQL from stdin instead of argument.")
@click.option(
    "--action",
    type=click.Choice(["query", "execute", "explain"]),
    default="query",
    help="Action the SQL would be submitted as.",
)
@click.option("--database", default="default", show_default=True, help="Target database name.")
@click.option(
    "--allow",
    "allowed",
    multiple=True,
    help="Allowed database name (repeatable, * for all). Overrides the config file.",
)
@click.option("--confirm", is_flag=True, help="Treat an execute request as confirmed.")
@click.option("--deep", is_flag=True, help="Also verify read-only SQL by parsing it.")
@click.option("--dialect", default=None, help="SQL dialect for --deep (postgres, duckdb, etc.)")
@config_option
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["json", "text"]),
    default="text",
    help="Output format.",
)
def validate(
    sql: str | None,
    from_stdin: bool,
    action: str,
    database: str,
    allowed: tuple[str, ...],
    confirm: bool,
    deep: bool,
    dialect: str | None,
    config_path: Path | None,
    output_format: str,
) -> None:
    """Check SQL against the admission policy without executing it."""
    sql = resolve_text_stdin(sql, from_stdin)
    config = load_config_file(config_path)[0] if config_path is not None else SkillConfig()
    overrides: dict[str, object] = {}
    if allowed:
        overrides["allowed_databases"] = list(allowed)
    if deep:
        overrides["deep_classify"] = True
    if dialect:
        overrides["dialect"] = dialect
    config = dataclasses.replace(config, **overrides)

    request = StatementRequest(
        action=Action(action),
        sql=sql,
        database=database,
        confirm=True if confirm else None,
    )
    decision = evaluate(request, config)
    if output_format == "json":
        click.echo(json.dumps(render_json(decision), indent=2))
    else:
        click.echo(render_text(decision))
    if not decision.allowed:
        raise SystemExit(1)
