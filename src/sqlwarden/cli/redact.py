"""The `redact` command: scrub credentials from text, e.g. a pasted error message."""

from __future__ import annotations

import click

from sqlwarden.cli._shared import resolve_text_stdin
from sqlwarden.redact import redact as redact_text


@click.command()
@click.argument("text", required=False, default=None)
@click.option("--from-stdin", is_flag=True, help="Read text from stdin instead of argument.")
def redact(text: str | None, from_stdin: bool) -> None:
    """Print TEXT with hosts, ports, users, passwords and secrets replaced."""
    click.echo(redact_text(resolve_text_stdin(text, from_stdin, name="TEXT")))
