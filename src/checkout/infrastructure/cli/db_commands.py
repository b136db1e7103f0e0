"""CLI commands for the database schema."""

from __future__ import annotations

import click

from checkout.infrastructure.bootstrap import engine
from checkout.infrastructure.persistence.database import create_schema


@click.command("init")
def db_init() -> None:
    """Create any missing tables."""
    create_schema(engine())
    click.echo("Schema ready.")
