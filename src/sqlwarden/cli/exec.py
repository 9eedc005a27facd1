"""The `exec` command: run a write statement that the caller has confirmed.

In agent workflows the harness should require human approval before
passing --confirm.
"""

from __future__ import annotations

from pathlib import Path

import click

from sqlwarden.cli._shared import gateway_options, parse_params, resolve_text_stdin, run_action


@click.command("exec")
@click.argument("sql", required=False, default=None)
@click.option("--from-stdin", is_flag=True, help="Read SQL from stdin instead of argument.")
@click.option("--param", "bind", multiple=True, help="Positional bind value (repeatable).")
@click.option("--confirm", is_flag=True, help="Confirm the write. Without it nothing runs.")
@gateway_options
def exec_cmd(
    sql: str | None,
    from_stdin: bool,
    bind: tuple[str, ...],
    confirm: bool,
    config_path: Path | None,
    db_values: tuple[str, ...],
    database: str,
    timeout: int | None,
    output_format: str,
) -> None:
    """Execute a write statement (INSERT, UPDATE, DELETE, DDL)."""
    sql = resolve_text_stdin(sql, from_stdin)
    run_action(
        {
            "action": "execute",
            "sql": sql,
            "database": database,
            "params": parse_params(bind),
            "confirm": True if confirm else None,
            "timeout": timeout,
        },
        config_path=config_path,
        db_values=db_values,
        output_format=output_format,
    )
