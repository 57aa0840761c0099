"""Chat notification sink interface.

Handlers and the acceptance workflow only ever talk to a ChatNotifier. The
Discord bot implements it in production; tests use a recording fake.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class Notification:
    """Platform-neutral message content. Rendered as an embed by the bot."""

    title: str
    description: str
    url: str | None = None


class ChatNotifier(ABC):
    """Best-effort chat capability handed to every webhook handler.

    Errors are not recovered here. They propagate to the caller, which logs
    them.
    """

    @abstractmethod
    async def send_notification(self, notification: Notification) -> Any:
        """Post the notification to the configured channel and return a message handle."""

    @abstractmethod
    async def resolve_mention(self, chat_id: str) -> str:
        """Return the display handle (mention) for a chat user id."""
