"""The `schema` command: list tables and describe their columns."""

from __future__ import annotations

from pathlib import Path

import click

from sqlwarden.cli._shared import gateway_options, run_action


@click.group("schema")
def schema() -> None:
    """Browse tables and columns."""


@schema.command("ls")
@click.argument("schema_name", required=False, default=None)
@gateway_options
def ls(
    schema_name: str | None,
    config_path: Path | None,
    db_values: tuple[str, ...],
    database: str,
    timeout: int | None,
    output_format: str,
) -> None:
    """List tables, optionally only those in SCHEMA_NAME."""
    params: dict[str, object] = {"action": "list_tables", "database": database, "timeout": timeout}
    if schema_name:
        params["schema"] = schema_name
    run_action(params, config_path=config_path, db_values=db_values, output_format=output_format)


@schema.command("show")
@click.argument("table_ref")
@gateway_options
def show(
    table_ref: str,
    config_path: Path | None,
    db_values: tuple[str, ...],
    database: str,
    timeout: int | None,
    output_format: str,
) -> None:
    """Show columns of a table. TABLE_REF is schema.table or just table."""
    run_action(
        {"action": "describe_table", "table": table_ref, "database": database, "timeout": timeout},
        config_path=config_path,
        db_values=db_values,
        output_format=output_format,
    )
