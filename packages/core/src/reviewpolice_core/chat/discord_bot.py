"""Discord side of Review Police.

DiscordChatNotifier posts embeds to the configured channel and resolves guild
member mentions. ReviewPoliceBot is the discord.py client carrying the
``/show`` and ``/accept`` slash commands and the select menu that ``/accept``
answers with.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Optional

import discord
from discord import app_commands

from reviewpolice_core import messages
from reviewpolice_core.acceptance import ReviewAcceptance
from reviewpolice_core.chat.base import ChatNotifier, Notification
from reviewpolice_core.classifier import ReviewRequestClassifier

if TYPE_CHECKING:
    from reviewpolice_core.gh.base import PullRequestSource
    from reviewpolice_core.identity import IdentityMapper
    from reviewpolice_core.models import ReviewRequest

logger = logging.getLogger(__name__)

ACCEPT_SELECT_ID = "accept-pr-response"

# Discord caps a select menu at 25 options.
MAX_SELECT_OPTIONS = 25

UNMAPPED_USER = (
    "I don't know who {name} is on GitHub. Ask an admin to add a Discord to GitHub account mapping first."
)


def to_embed(notification: Notification) -> discord.Embed:
    return discord.Embed(title=notification.title, description=notification.description, url=notification.url)


class DiscordChatNotifier(ChatNotifier):
    def __init__(self, client: discord.Client, channel_id: int, guild_id: int):
        self._client = client
        self._channel_id = int(channel_id)
        self._guild_id = int(guild_id)

    async def send_notification(self, notification: Notification) -> discord.Message:
        channel = self._client.get_channel(self._channel_id) or await self._client.fetch_channel(self._channel_id)
        return await channel.send(embed=to_embed(notification))

    async def resolve_mention(self, chat_id: str) -> str:
        guild = self._client.get_guild(self._guild_id) or await self._client.fetch_guild(self._guild_id)
        member = await guild.fetch_member(int(chat_id))
        return member.mention


class AcceptSelect(discord.ui.Select):
    def __init__(self, bot: ReviewPoliceBot, requests: list[ReviewRequest]):
        options = [
            discord.SelectOption(
                label=r.title[:100] or f"PR #{r.pull_number}",
                description=f"PR #{r.pull_number}",
                value=str(r.pull_number),
            )
            for r in requests[:MAX_SELECT_OPTIONS]
        ]
        super().__init__(
            custom_id=ACCEPT_SELECT_ID,
            placeholder="Select a PR",
            min_values=1,
            max_values=len(options),
            options=options,
        )
        self._bot = bot

    async def callback(self, interaction: discord.Interaction) -> None:
        await self._bot.accept_selected(interaction, [int(v) for v in self.values])


class AcceptView(discord.ui.View):
    def __init__(self, bot: ReviewPoliceBot, requests: list[ReviewRequest], timeout: float = 300.0):
        super().__init__(timeout=timeout)
        self.add_item(AcceptSelect(bot, requests))


class ReviewPoliceBot(discord.Client):
    """The Discord client. Slash commands are registered to one guild on start-up."""

    def __init__(
        self,
        source: PullRequestSource,
        identity: IdentityMapper,
        channel_id: int,
        guild_id: int,
        intents: discord.Intents | None = None,
    ):
        super().__init__(intents=intents or discord.Intents.default())
        self.tree = app_commands.CommandTree(self)
        self.identity = identity
        self.guild_id = int(guild_id)
        self.notifier = DiscordChatNotifier(self, channel_id, guild_id)
        self.classifier = ReviewRequestClassifier(source)
        self.acceptance = ReviewAcceptance(source, identity, self.notifier)

    async def setup_hook(self) -> None:
        guild = discord.Object(id=self.guild_id)
        register_commands(self.tree, self, guild)
        synced = await self.tree.sync(guild=guild)
        logger.info("Registered %d slash command(s) in guild %s", len(synced), self.guild_id)

    async def on_ready(self) -> None:
        logger.info("Discord bot logged in as %s", self.user)

    # ------------------------------------------------------------------ #
    # Commands                                                             #
    # ------------------------------------------------------------------ #

    async def show(self, interaction: discord.Interaction, user: Optional[discord.abc.User] = None, kind: str = "all"):
        target = user or interaction.user
        # Looking up someone else is posted publicly; your own list is private.
        ephemeral = user is None
        login = self.identity.to_login(str(target.id))
        if login is None:
            await interaction.response.send_message(UNMAPPED_USER.format(name=target.display_name), ephemeral=True)
            return

        await interaction.response.defer(ephemeral=ephemeral, thinking=True)
        requests = await self.classifier.classify(login, kind)
        await interaction.followup.send(embed=to_embed(messages.review_request_list(requests, kind)), ephemeral=ephemeral)

    async def accept(self, interaction: discord.Interaction) -> None:
        login = self.identity.to_login(str(interaction.user.id))
        if login is None:
            await interaction.response.send_message(
                UNMAPPED_USER.format(name=interaction.user.display_name), ephemeral=True
            )
            return

        await interaction.response.defer(ephemeral=True, thinking=True)
        requests = await self.classifier.unaccepted(login)
        if not requests:
            embed = discord.Embed(
                title="Accept review request", description="Sorry, you don't have any unaccepted review requests..."
            )
            await interaction.followup.send(embed=embed, ephemeral=True)
            return

        await interaction.followup.send("Choose from the PRs below:", view=AcceptView(self, requests), ephemeral=True)

    async def accept_selected(self, interaction: discord.Interaction, pull_numbers: list[int]) -> None:
        login = self.identity.to_login(str(interaction.user.id))
        if login is None:
            await interaction.response.send_message(
                UNMAPPED_USER.format(name=interaction.user.display_name), ephemeral=True
            )
            return

        # GitHub round trips can outlast the 3 second interaction deadline.
        await interaction.response.defer()

        async def acknowledge(text: str) -> None:
            await interaction.edit_original_response(content=text, view=None)

        await self.acceptance.accept_selection(login, pull_numbers, acknowledge)


def register_commands(tree: app_commands.CommandTree, bot: ReviewPoliceBot, guild: discord.abc.Snowflake) -> None:
    """Add the bot's slash commands to ``tree`` for ``guild``."""

    @tree.command(name="show", description="Show open PRs for which you have been assigned as a reviewer", guild=guild)
    @app_commands.describe(
        user="Show open PRs for which the specified user has been assigned as a reviewer",
        kind="Use 'All', 'Unaccepted' or 'Accepted' to show the corresponding review requests (defaults to 'All').",
    )
    @app_commands.rename(kind="type")
    @app_commands.choices(
        kind=[
            app_commands.Choice(name="All", value="all"),
            app_commands.Choice(name="Accepted", value="accepted"),
            app_commands.Choice(name="Unaccepted", value="unaccepted"),
        ]
    )
    async def show(
        interaction: discord.Interaction,
        user: Optional[discord.User] = None,
        kind: Optional[app_commands.Choice[str]] = None,
    ) -> None:
        await bot.show(interaction, user, kind.value if kind else "all")

    @tree.command(name="accept", description="Accept the review request for a particular PR in GitHub", guild=guild)
    async def accept(interaction: discord.Interaction) -> None:
        await bot.accept(interaction)

    @tree.error
    async def on_command_error(interaction: discord.Interaction, error: app_commands.AppCommandError) -> None:
        logger.error("Slash command failed: %s", error, exc_info=error)
        text = "Something went wrong while handling that command. Try again later."
        if interaction.response.is_done():
            await interaction.followup.send(text, ephemeral=True)
        else:
            await interaction.response.send_message(text, ephemeral=True)
