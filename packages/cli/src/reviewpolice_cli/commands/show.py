"""show command: list a GitHub user's review requests."""

from __future__ import annotations

import asyncio

import click
from rich.console import Console
from rich.table import Table

from reviewpolice_cli.services import build_pull_request_source
from reviewpolice_core.classifier import KINDS, ReviewRequestClassifier

console = Console()


@click.command("show")
@click.option("--login", required=True, help="GitHub login of the reviewer.")
@click.option("--type", "kind", type=click.Choice(KINDS), default="all", show_default=True)
@click.pass_context
def show_cmd(ctx, login: str, kind: str):
    """Show open PRs on which LOGIN is a requested reviewer.

    ``accepted`` lists PRs where LOGIN is the only reviewer left,
    ``unaccepted`` the ones still shared with other reviewers.
    """
    source = build_pull_request_source(ctx.obj["config"])
    requests = asyncio.run(ReviewRequestClassifier(source).classify(login, kind))

    qualifier = f" {kind}" if kind != "all" else ""
    if not requests:
        console.print(f"[yellow]{login} has no{qualifier} review requests.[/yellow]")
        return

    title = f"Review requests for {login}" + (f" ({kind})" if qualifier else "")
    table = Table(title=title, header_style="bold cyan")
    table.add_column("PR", style="bold", width=6)
    table.add_column("Title", max_width=60)
    table.add_column("URL")
    for r in requests:
        table.add_row(f"#{r.pull_number}", r.title, r.url)

    console.print(table)
