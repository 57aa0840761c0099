"""Handler for the GitHub ``pull_request`` webhook event.

``opened`` and ``review_requested`` go through the correlator so an
auto-assigned burst of reviewers becomes one message. ``reopened`` and
``closed`` are notified directly using the reviewer list currently on
GitHub.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from reviewpolice_core import messages

if TYPE_CHECKING:
    from reviewpolice_core.chat.base import ChatNotifier
    from reviewpolice_core.correlator import NotificationCorrelator
    from reviewpolice_core.gh.base import PullRequestSource
    from reviewpolice_core.identity import IdentityMapper

logger = logging.getLogger(__name__)


class PullRequestEventHandler:
    def __init__(self, correlator: NotificationCorrelator, source: PullRequestSource, identity: IdentityMapper):
        self._correlator = correlator
        self._source = source
        self._identity = identity

    async def __call__(self, notifier: ChatNotifier, payload: dict[str, Any]) -> None:
        action = payload.get("action")
        pr = payload.get("pull_request") or {}
        number = pr.get("number", payload.get("number"))
        if number is None:
            logger.warning("pull_request %s event without a pull request number; ignoring", action)
            return

        if action == "opened":
            await self._correlator.opened(number)
        elif action == "review_requested":
            await self._review_requested(notifier, payload, pr, number)
        elif action == "reopened":
            await self._reopened(notifier, pr, number)
        elif action == "closed":
            if pr.get("merged"):
                await notifier.send_notification(messages.merged(number, pr.get("title", ""), pr.get("html_url", "")))
            else:
                await self._closed(notifier, pr, number)
        else:
            logger.debug("Ignoring pull_request action %r for PR #%s", action, number)

    async def _review_requested(self, notifier: ChatNotifier, payload: dict, pr: dict, number: int) -> None:
        reviewer = (payload.get("requested_reviewer") or {}).get("login")
        if not reviewer:
            # Team review requests carry requested_team instead of a user.
            logger.debug("PR #%s: review requested from a team; ignoring", number)
            return

        title = pr.get("title", "")
        url = pr.get("html_url", "")

        async def notify(reviewers: list[str]) -> None:
            mentions = await messages.mention_all(notifier, self._identity, reviewers)
            await notifier.send_notification(messages.review_requested(mentions, number, title, url))

        await self._correlator.review_requested(number, reviewer, notify)

    async def _current_reviewers(self, pr: dict, number: int) -> tuple[list[str], str, str]:
        current = await self._source.get_pull_request(number)
        if current is not None:
            return current.reviewers, current.title, current.url
        logger.warning("PR #%s not found on GitHub; using reviewers from the event payload", number)
        reviewers = [r.get("login") for r in pr.get("requested_reviewers") or [] if r.get("login")]
        return reviewers, pr.get("title", ""), pr.get("html_url", "")

    async def _reopened(self, notifier: ChatNotifier, pr: dict, number: int) -> None:
        reviewers, title, url = await self._current_reviewers(pr, number)
        mentions = await messages.mention_all(notifier, self._identity, reviewers)
        await notifier.send_notification(messages.reopened(mentions, number, title, url))

    async def _closed(self, notifier: ChatNotifier, pr: dict, number: int) -> None:
        reviewers, title, url = await self._current_reviewers(pr, number)
        mentions = await messages.mention_all(notifier, self._identity, reviewers)
        await notifier.send_notification(messages.closed(mentions, number, title, url))
