"""CLI entry point."""

from __future__ import annotations

import logging

import click

from sqlwarden.cli.exec import exec_cmd
from sqlwarden.cli.explain import explain
from sqlwarden.cli.query import query
from sqlwarden.cli.redact import redact
from sqlwarden.cli.schema import schema
from sqlwarden.cli.validate import validate


@click.group()
@click.version_option(package_name="sqlwarden")
@click.option("-v", "--verbose", is_flag=True, help="Log pipeline decisions to stderr.")
def main(verbose: bool) -> None:
    """sqlwarden: SQL admission control for proxied database access."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")


main.add_command(validate)
main.add_command(redact)
main.add_command(query)
main.add_command(exec_cmd)
main.add_command(explain)
main.add_command(schema)
