"""Review acceptance workflow.

Accepting a review request means removing every *other* requested reviewer
from the pull request, so the actor is left as the sole reviewer. The
actor's own request is never touched.

The sequence is read-then-mutate against GitHub with no transaction around
it. Two actors accepting the same pull request at the same time can remove
each other; that race is accepted.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Awaitable, Callable, Iterable

from reviewpolice_core import messages
from reviewpolice_core.errors import (
    AcceptanceError,
    AlreadySoleReviewerError,
    PullRequestNotFoundError,
    ReviewerRemovalError,
    ReviewNotRequestedError,
)

if TYPE_CHECKING:
    from reviewpolice_core.chat.base import ChatNotifier
    from reviewpolice_core.gh.base import PullRequestSource
    from reviewpolice_core.identity import IdentityMapper

logger = logging.getLogger(__name__)


class Outcome(str, Enum):
    SUCCESS = "success"
    NOT_FOUND = "not_found"
    NOT_REQUESTED = "not_requested"
    ALREADY_SOLE = "already_sole"
    REMOVAL_FAILED = "removal_failed"
    ERROR = "error"


_OUTCOME_FOR_ERROR = {
    PullRequestNotFoundError: Outcome.NOT_FOUND,
    ReviewNotRequestedError: Outcome.NOT_REQUESTED,
    AlreadySoleReviewerError: Outcome.ALREADY_SOLE,
    ReviewerRemovalError: Outcome.REMOVAL_FAILED,
}


@dataclass(frozen=True)
class ItemResult:
    pull_number: int
    outcome: Outcome
    title: str = ""
    url: str = ""
    removed: tuple[str, ...] = field(default_factory=tuple)

    @property
    def succeeded(self) -> bool:
        return self.outcome is Outcome.SUCCESS


class ReviewAcceptance:
    def __init__(self, source: PullRequestSource, identity: IdentityMapper, notifier: ChatNotifier | None = None):
        self._source = source
        self._identity = identity
        self._notifier = notifier

    async def accept(self, actor: str, pull_numbers: Iterable[int]) -> list[ItemResult]:
        """Accept each selected pull request in order, one result per number.

        Items are processed sequentially so results come back in selection
        order. A failing item never aborts the rest of the batch: unexpected
        errors (a GitHub outage, say) are logged and reported as ``ERROR``.
        """
        results: list[ItemResult] = []
        for number in pull_numbers:
            try:
                result = await self._accept_one(actor, number)
            except AcceptanceError as e:
                result = ItemResult(pull_number=number, outcome=_OUTCOME_FOR_ERROR[type(e)])
            except Exception:
                # Earlier items may already be mutated on GitHub.
                logger.exception("Accept PR #%d for %s failed", number, actor)
                result = ItemResult(pull_number=number, outcome=Outcome.ERROR)
            logger.info("Accept PR #%d for %s: %s", number, actor, result.outcome.value)
            results.append(result)
        return results

    async def _accept_one(self, actor: str, number: int) -> ItemResult:
        pull_request = await self._source.get_pull_request(number)
        if pull_request is None:
            raise PullRequestNotFoundError(number)

        if not pull_request.is_requested(actor):
            raise ReviewNotRequestedError(number)

        remaining = [login for login in pull_request.reviewers if login != actor]
        logger.debug("PR #%d: %d other reviewer(s) to remove", number, len(remaining))
        if not remaining:
            raise AlreadySoleReviewerError(number)

        if not await self._source.delete_requested_reviewers(number, remaining):
            raise ReviewerRemovalError(number, remaining)

        return ItemResult(
            pull_number=number,
            outcome=Outcome.SUCCESS,
            title=pull_request.title,
            url=pull_request.url,
            removed=tuple(remaining),
        )

    async def accept_selection(
        self,
        actor: str,
        pull_numbers: Iterable[int],
        acknowledge: Callable[[str], Awaitable[object]],
    ) -> list[ItemResult]:
        """Run a batch for a chat selection and report it.

        Always sends exactly one acknowledgement (one line per selected pull
        request). Afterwards, if anything succeeded, posts a single batched
        notification mentioning the reviewers that were removed.
        """
        results = await self.accept(actor, pull_numbers)
        await acknowledge(messages.acknowledgement(results))

        succeeded = [r for r in results if r.succeeded]
        if succeeded and self._notifier is not None:
            actor_mention = await messages.mention(self._notifier, self._identity, actor)
            lines = []
            for r in succeeded:
                removed_mentions = await messages.mention_all(self._notifier, self._identity, r.removed)
                lines.append(messages.bailed_out_line(removed_mentions, actor_mention, r.pull_number, r.title, r.url))
            await self._notifier.send_notification(messages.reviewers_bailed_out(lines))
        return results
