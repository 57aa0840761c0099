"""Relay webhook transport for development.

GitHub posts to a smee.io channel; this client follows the channel's
server-sent event stream and feeds each delivery to the dispatcher, so the
bot can run on a machine GitHub cannot reach.

smee.io forwards the body as parsed JSON, so the signed bytes have to be
rebuilt. GitHub sends compact JSON with non-ASCII characters unescaped, and
re-serializing the same way reproduces them.
"""

from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import dataclass
from typing import Any, AsyncIterable, AsyncIterator, Callable

import aiohttp

from reviewpolice_core.webhooks.dispatcher import WebhookDispatcher, WebhookEnvelope

logger = logging.getLogger(__name__)

DEFAULT_RECONNECT_DELAY = 5.0

# Control events smee.io sends on the stream besides deliveries.
_CONTROL_EVENTS = {"ready", "ping"}


@dataclass
class ServerSentEvent:
    event: str = "message"
    data: str = ""
    id: str | None = None


async def iter_events(lines: AsyncIterable[bytes]) -> AsyncIterator[ServerSentEvent]:
    """Parse a ``text/event-stream`` body into events.

    Only the ``event``, ``data`` and ``id`` fields are used; comments and
    ``retry`` are ignored.
    """
    event = ServerSentEvent()
    data: list[str] = []
    async for raw in lines:
        line = raw.decode("utf-8").rstrip("\r\n")
        if not line:
            if data:
                event.data = "\n".join(data)
                yield event
            event = ServerSentEvent()
            data = []
            continue
        if line.startswith(":"):
            continue
        field, _, value = line.partition(":")
        if value.startswith(" "):
            value = value[1:]
        if field == "event":
            event.event = value
        elif field == "data":
            data.append(value)
        elif field == "id":
            event.id = value
    if data:
        event.data = "\n".join(data)
        yield event


def to_envelope(message: dict[str, Any]) -> WebhookEnvelope | None:
    """Build a dispatcher envelope from one smee.io message, or None if it is not a delivery."""
    name = message.get("x-github-event")
    if not name or "body" not in message:
        return None
    signature = message.get("x-hub-signature-256") or message.get("x-hub-signature") or ""
    payload = json.dumps(message["body"], separators=(",", ":"), ensure_ascii=False).encode("utf-8")
    return WebhookEnvelope(id=message.get("x-github-delivery", ""), name=name, signature=signature, payload=payload)


class SmeeRelay:
    def __init__(
        self,
        url: str,
        dispatcher: WebhookDispatcher,
        reconnect_delay: float = DEFAULT_RECONNECT_DELAY,
        session_factory: Callable[[], aiohttp.ClientSession] = aiohttp.ClientSession,
    ):
        self.url = url
        self.reconnect_delay = reconnect_delay
        self._dispatcher = dispatcher
        self._session_factory = session_factory

    async def run(self) -> None:
        """Follow the channel forever, reconnecting after a fixed delay when the stream drops."""
        while True:
            try:
                await self._consume()
                logger.warning("Relay stream from %s ended", self.url)
            except (aiohttp.ClientError, asyncio.TimeoutError) as e:
                logger.warning("Relay connection to %s failed: %s", self.url, e)
            await asyncio.sleep(self.reconnect_delay)

    async def _consume(self) -> None:
        timeout = aiohttp.ClientTimeout(total=None, sock_read=None)
        async with self._session_factory() as session:
            async with session.get(self.url, headers={"Accept": "text/event-stream"}, timeout=timeout) as response:
                response.raise_for_status()
                logger.info("Forwarding webhooks from %s", self.url)
                async for event in iter_events(response.content):
                    await self.handle_event(event)

    async def handle_event(self, event: ServerSentEvent) -> None:
        if event.event in _CONTROL_EVENTS:
            return
        try:
            message = json.loads(event.data)
        except json.JSONDecodeError:
            logger.warning("Ignoring relay event that is not JSON: %.80s", event.data)
            return
        envelope = to_envelope(message) if isinstance(message, dict) else None
        if envelope is None:
            logger.debug("Ignoring relay event without a GitHub delivery")
            return
        await self._dispatcher.receive(envelope)
