"""Handler for the GitHub ``pull_request_review`` webhook event.

Only ``submitted`` reviews matter: an approval pings the product owner, a
change request pings the pull request author.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from reviewpolice_core import messages

if TYPE_CHECKING:
    from reviewpolice_core.chat.base import ChatNotifier
    from reviewpolice_core.identity import IdentityMapper

logger = logging.getLogger(__name__)


class PullRequestReviewEventHandler:
    def __init__(self, identity: IdentityMapper, product_owner: str | None = None):
        self._identity = identity
        self._product_owner = product_owner

    async def __call__(self, notifier: ChatNotifier, payload: dict[str, Any]) -> None:
        if payload.get("action") != "submitted":
            return

        review = payload.get("review") or {}
        pr = payload.get("pull_request") or {}
        state = (review.get("state") or "").lower()
        number = pr.get("number")
        title = pr.get("title", "")
        url = pr.get("html_url", "")

        if state == "approved":
            reviewer = await messages.mention(notifier, self._identity, (review.get("user") or {}).get("login", ""))
            owner = ""
            if self._product_owner:
                owner = await messages.mention(notifier, self._identity, self._product_owner)
            else:
                logger.warning("PR #%s approved but no product owner is configured", number)
            await notifier.send_notification(messages.review_approved(owner, reviewer, number, title, url))
        elif state == "changes_requested":
            author = await messages.mention(notifier, self._identity, (pr.get("user") or {}).get("login", ""))
            await notifier.send_notification(messages.changes_requested(author, number, title, url))
        else:
            logger.debug("Ignoring %s review on PR #%s", state or "unknown", number)
