"""serve command: run the bot, the webhook transport and the correlator sweep."""

from __future__ import annotations

import asyncio
import logging

import click
from rich.console import Console
from rich.logging import RichHandler

from reviewpolice_cli.services import build_pull_request_source, load_identity
from reviewpolice_core.chat.discord_bot import ReviewPoliceBot
from reviewpolice_core.config import MODES, validate_serve_config
from reviewpolice_core.correlator import NotificationCorrelator
from reviewpolice_core.errors import ConfigError
from reviewpolice_core.handlers.registry import build_handler_table
from reviewpolice_core.webhooks.dispatcher import WebhookDispatcher
from reviewpolice_core.webhooks.listener import WebhookListener
from reviewpolice_core.webhooks.relay import SmeeRelay

console = Console()
logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True)],
        force=True,
    )


async def run_service(config: dict, source, identity) -> None:
    """Build every long-lived service once and run until the bot disconnects."""
    correlator = NotificationCorrelator(
        grace_window=float(config["grace_window_seconds"]),
        opened_ttl=float(config["opened_ttl_seconds"]),
    )
    bot = ReviewPoliceBot(
        source,
        identity,
        channel_id=int(config["discord_channel_id"]),
        guild_id=int(config["discord_guild_id"]),
    )
    handlers = build_handler_table(correlator, source, identity, config.get("product_owner"))
    dispatcher = WebhookDispatcher(config["webhook_secret"], bot.notifier, handlers)
    logger.info("Handling GitHub events: %s", ", ".join(dispatcher.event_names))

    tasks = [asyncio.create_task(correlator.run_sweeper(float(config["sweep_interval_seconds"])))]
    listener = None
    if config["mode"] == "relay":
        relay = SmeeRelay(config["smee_url"], dispatcher, reconnect_delay=float(config["relay_reconnect_seconds"]))
        tasks.append(asyncio.create_task(relay.run()))
    else:
        listener = WebhookListener(
            dispatcher,
            host=config["listen_host"],
            port=int(config["listen_port"]),
            path=config["webhook_path"],
        )
        await listener.start()

    try:
        async with bot:
            await bot.start(config["discord_token"])
    finally:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        if listener is not None:
            await listener.stop()
        await correlator.aclose()


@click.command("serve")
@click.option("--mode", type=click.Choice(MODES), default=None, help="Webhook transport. Overrides the config file.")
@click.option("--port", "listen_port", type=int, default=None, help="Port for the webhook listener.")
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default="INFO",
    show_default=True,
)
@click.pass_context
def serve_cmd(ctx, mode: str | None, listen_port: int | None, log_level: str):
    """Run the Review Police bot.

    Starts the Discord bot and either listens for GitHub webhooks (mode
    ``listen``) or follows a smee.io channel (mode ``relay``).
    """
    config = dict(ctx.obj["config"])
    if mode:
        config["mode"] = mode
    if listen_port:
        config["listen_port"] = listen_port

    try:
        validate_serve_config(config)
    except ConfigError as e:
        raise click.UsageError(str(e))

    configure_logging(log_level)
    identity = load_identity(ctx.obj["mapping_source"])
    if not len(identity):
        logger.warning("No account mappings loaded; everyone will be mentioned by GitHub login.")
    source = build_pull_request_source(config)

    try:
        asyncio.run(run_service(config, source, identity))
    except KeyboardInterrupt:
        console.print("[dim]Stopped.[/dim]")
