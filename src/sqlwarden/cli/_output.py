"""Shared output formatting for CLI commands."""

from __future__ import annotations

import json

import click


def emit_envelope(envelope: dict, output_format: str) -> None:
    """Print a handler envelope as JSON, or as its result text plus the error code."""
    if output_format == "json":
        click.echo(json.dumps(envelope, indent=2, default=str))
        return

    click.echo(envelope["result"])
    error = envelope["metadata"].get("error")
    if error:
        retry = "retriable" if error["retriable"] else "not retriable"
        click.echo(f"  = code: {error['code']} ({retry})")
