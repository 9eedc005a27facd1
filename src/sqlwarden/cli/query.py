"""The `query` command: run a read-only statement through the handler."""

from __future__ import annotations

from pathlib import Path

import click

from sqlwarden.cli._shared import gateway_options, parse_params, resolve_text_stdin, run_action


@click.command()
@click.argument("sql", required=False, default=None)
@click.option("--from-stdin", is_flag=True, help="Read SQL from stdin instead of argument.")
@click.option("--param", "bind", multiple=True, help="Positional bind value (repeatable).")
@click.option("--max-rows", type=int, default=None, help="Row limit override.")
@gateway_options
def query(
    sql: str | None,
    from_stdin: bool,
    bind: tuple[str, ...],
    max_rows: int | None,
    config_path: Path | None,
    db_values: tuple[str, ...],
    database: str,
    timeout: int | None,
    output_format: str,
) -> None:
    """Run a read-only query (SELECT, WITH, EXPLAIN).

    Writes are rejected here; use `sqlwarden exec --confirm` for them.
    """
    sql = resolve_text_stdin(sql, from_stdin)
    run_action(
        {
            "action": "query",
            "sql": sql,
            "database": database,
            "params": parse_params(bind),
            "timeout": timeout,
            "maxRows": max_rows,
        },
        config_path=config_path,
        db_values=db_values,
        output_format=output_format,
    )
