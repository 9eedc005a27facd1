"""The `explain` command: show the execution plan of a read-only statement."""

from __future__ import annotations

from pathlib import Path

import click

from sqlwarden.cli._shared import gateway_options, resolve_text_stdin, run_action


@click.command()
@click.argument("sql", required=False, default=None)
@click.option("--from-stdin", is_flag=True, help="Read SQL from stdin instead of argument.")
@gateway_options
def explain(
    sql: str | None,
    from_stdin: bool,
    config_path: Path | None,
    db_values: tuple[str, ...],
    database: str,
    timeout: int | None,
    output_format: str,
) -> None:
    """Show the query plan without running the statement."""
    sql = resolve_text_stdin(sql, from_stdin)
    run_action(
        {"action": "explain", "sql": sql, "database": database, "timeout": timeout},
        config_path=config_path,
        db_values=db_values,
        output_format=output_format,
    )
