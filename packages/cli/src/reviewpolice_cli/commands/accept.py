"""accept command: accept review requests from the terminal."""

from __future__ import annotations

import asyncio
import re

import click
from rich.console import Console
from rich.table import Table

from reviewpolice_cli.services import build_pull_request_source
from reviewpolice_core import messages
from reviewpolice_core.acceptance import ReviewAcceptance
from reviewpolice_core.classifier import ReviewRequestClassifier
from reviewpolice_core.identity import IdentityMapper

console = Console()


def parse_selection(text: str, allowed: set[int]) -> list[int]:
    """Parse "10, 55" or "10 55" into PR numbers, keeping order and dropping repeats."""
    numbers: list[int] = []
    for token in re.split(r"[\s,]+", text.strip()):
        if not token:
            continue
        try:
            number = int(token.lstrip("#"))
        except ValueError:
            raise click.UsageError(f"Not a PR number: {token!r}")
        if number not in allowed:
            raise click.UsageError(f"PR #{number} is not one of your unaccepted review requests.")
        if number not in numbers:
            numbers.append(number)
    if not numbers:
        raise click.UsageError("No PRs selected.")
    return numbers


@click.command("accept")
@click.option("--login", required=True, help="GitHub login of the reviewer accepting.")
@click.option("--pr", "pull_numbers", type=int, multiple=True, help="PR number to accept. Repeatable.")
@click.option("--yes", is_flag=True, default=False, help="Skip the confirmation prompt.")
@click.pass_context
def accept_cmd(ctx, login: str, pull_numbers: tuple[int, ...], yes: bool):
    """Accept review requests as LOGIN by removing the other requested reviewers.

    Without --pr, lists LOGIN's unaccepted review requests and asks which to
    accept. Nothing is posted to Discord.
    """
    source = build_pull_request_source(ctx.obj["config"])

    selected = list(pull_numbers)
    if not selected:
        requests = asyncio.run(ReviewRequestClassifier(source).unaccepted(login))
        if not requests:
            console.print("[yellow]Sorry, you don't have any unaccepted review requests...[/yellow]")
            return

        table = Table(title=f"Unaccepted review requests for {login}", header_style="bold cyan")
        table.add_column("PR", style="bold", width=6)
        table.add_column("Title", max_width=60)
        for r in requests:
            table.add_row(f"#{r.pull_number}", r.title)
        console.print(table)

        answer = click.prompt("PRs to accept (comma or space separated)")
        selected = parse_selection(answer, {r.pull_number for r in requests})

    if not yes:
        click.confirm(
            f"Remove the other requested reviewers from {len(selected)} PR(s) as {login}?",
            abort=True,
        )

    acceptance = ReviewAcceptance(source, IdentityMapper([]))
    results = asyncio.run(acceptance.accept(login, selected))
    for result in results:
        style = "green" if result.succeeded else "yellow"
        console.print(f"[{style}]{messages.outcome_line(result)}[/{style}]")
