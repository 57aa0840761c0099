"""mappings command: print the loaded Discord ↔ GitHub account table."""

from __future__ import annotations

import click
from rich.console import Console
from rich.table import Table

from reviewpolice_cli.services import load_identity

console = Console()


@click.command("mappings")
@click.pass_context
def mappings_cmd(ctx):
    """Show the account mappings the bot would load."""
    source = ctx.obj["mapping_source"]
    identity = load_identity(source)
    if not len(identity):
        console.print(f"[yellow]No account mappings found in {source.description}.[/yellow]")
        return

    table = Table(title=f"Account mappings ({source.description})", header_style="bold cyan")
    table.add_column("Discord id", style="bold")
    table.add_column("GitHub login")
    for discord_id, login in identity.pairs():
        table.add_row(discord_id, login)

    console.print(table)
