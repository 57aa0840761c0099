"""Inbound GitHub webhook verification and routing.

Both transports (the direct listener and the smee.io relay) hand every
delivery to the same WebhookDispatcher. The dispatcher checks the HMAC
signature, looks the event name up in a static handler table, and calls the
handler with the chat notifier and the decoded payload. It never interprets
payload contents itself.

Nothing raised here reaches the transport: bad signatures and handler
failures are logged and dropped.
"""

from __future__ import annotations

import hashlib
import hmac
import json
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Mapping

from reviewpolice_core.errors import WebhookVerificationError

if TYPE_CHECKING:
    from reviewpolice_core.chat.base import ChatNotifier

logger = logging.getLogger(__name__)

Handler = Callable[["ChatNotifier", dict[str, Any]], Awaitable[None]]

_DIGESTS = {"sha256": hashlib.sha256, "sha1": hashlib.sha1}


@dataclass(frozen=True)
class WebhookEnvelope:
    id: str
    name: str
    signature: str
    payload: bytes


def sign(secret: str, payload: bytes, algorithm: str = "sha256") -> str:
    """Return the ``<algorithm>=<hexdigest>`` header value GitHub would send."""
    digest = hmac.new(secret.encode("utf-8"), msg=payload, digestmod=_DIGESTS[algorithm]).hexdigest()
    return f"{algorithm}={digest}"


def verify_signature(secret: str, payload: bytes, signature: str | None) -> None:
    """Raise WebhookVerificationError unless ``signature`` matches ``payload``.

    Accepts ``sha256=`` (X-Hub-Signature-256) and the legacy ``sha1=``
    (X-Hub-Signature) forms.
    """
    if not signature or "=" not in signature:
        raise WebhookVerificationError("missing or malformed signature header")
    algorithm, received = signature.split("=", 1)
    if algorithm not in _DIGESTS:
        raise WebhookVerificationError(f"unsupported signature algorithm {algorithm!r}")
    expected = sign(secret, payload, algorithm).split("=", 1)[1]
    if not hmac.compare_digest(expected, received):
        raise WebhookVerificationError("signature mismatch")


class WebhookDispatcher:
    def __init__(self, secret: str, notifier: ChatNotifier, handlers: Mapping[str, Handler]):
        if not secret:
            raise ValueError("A webhook secret is required to verify deliveries.")
        self._secret = secret
        self._notifier = notifier
        # Copied so the table cannot change after start-up.
        self._handlers = dict(handlers)

    @property
    def event_names(self) -> list[str]:
        return sorted(self._handlers)

    async def receive(self, envelope: WebhookEnvelope) -> bool:
        """Verify and route one delivery. Returns False when it was dropped as unverified."""
        try:
            verify_signature(self._secret, envelope.payload, envelope.signature)
        except WebhookVerificationError as e:
            logger.warning("Dropping webhook delivery %s (%s): %s", envelope.id, envelope.name, e)
            return False

        handler = self._handlers.get(envelope.name)
        if handler is None:
            logger.debug("No handler for %s event (delivery %s)", envelope.name, envelope.id)
            return True

        logger.info("Webhook received: %s (delivery: %s)", envelope.name, envelope.id)
        try:
            payload = json.loads(envelope.payload)
            await handler(self._notifier, payload)
        except Exception:
            logger.exception("Error handling %s event (delivery %s)", envelope.name, envelope.id)
        return True
