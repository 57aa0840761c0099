"""CLI entry point for reviewpolice.

Commands:
  serve     run the Discord bot and the webhook transport
  show      list a GitHub user's review requests
  accept    accept review requests from the terminal
  mappings  print the Discord ↔ GitHub account table
"""

from __future__ import annotations

import importlib.metadata

import click
from rich.console import Console

from reviewpolice_cli.commands.accept import accept_cmd
from reviewpolice_cli.commands.mappings import mappings_cmd
from reviewpolice_cli.commands.serve import serve_cmd
from reviewpolice_cli.commands.show import show_cmd

console = Console()


@click.group()
@click.version_option(
    version=importlib.metadata.version("reviewpolice"),
    prog_name="reviewpolice",
)
@click.option(
    "--config",
    "config_path",
    default=".reviewpolice.yml",
    show_default=True,
    help="Path to the configuration file.",
    envvar="REVIEWPOLICE_CONFIG",
)
@click.option("--repo", default=None, help="GitHub repository (owner/name). Overrides the config file.")
@click.pass_context
def main(ctx: click.Context, config_path: str, repo: str | None):
    """Review Police: GitHub pull request review duty, announced in Discord."""
    from reviewpolice_cli.services import build_mapping_source
    from reviewpolice_core.config import load_config

    ctx.ensure_object(dict)

    config = load_config(config_path, cli_overrides={"repository": repo})

    ctx.obj["config"] = config
    ctx.obj["mapping_source"] = build_mapping_source(config)


main.add_command(serve_cmd)
main.add_command(show_cmd)
main.add_command(accept_cmd)
main.add_command(mappings_cmd)
