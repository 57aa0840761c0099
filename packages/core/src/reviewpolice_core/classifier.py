"""Review-request classification.

"Accepted" is derived, not stored: a request counts as accepted once every
other requested reviewer has been removed from the pull request, leaving the
user as the sole outstanding reviewer. The acceptance workflow produces that
state by removing the others.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Iterable

if TYPE_CHECKING:
    from reviewpolice_core.gh.base import PullRequestSource
    from reviewpolice_core.models import PullRequest, ReviewRequest

KINDS = ("all", "accepted", "unaccepted")


def all_requests(pull_requests: Iterable[PullRequest], username: str) -> list[ReviewRequest]:
    return [r for pr in pull_requests for r in pr.review_requests if r.reviewer == username]


def accepted_requests(pull_requests: Iterable[PullRequest], username: str) -> list[ReviewRequest]:
    results = []
    for pr in pull_requests:
        if len(pr.review_requests) == 1 and pr.review_requests[0].reviewer == username:
            results.append(pr.review_requests[0])
    return results


def unaccepted_requests(pull_requests: Iterable[PullRequest], username: str) -> list[ReviewRequest]:
    return [
        r for pr in pull_requests if len(pr.review_requests) > 1 for r in pr.review_requests if r.reviewer == username
    ]


_VIEWS = {
    "all": all_requests,
    "accepted": accepted_requests,
    "unaccepted": unaccepted_requests,
}


class ReviewRequestClassifier:
    """Fetches open pull requests and classifies a user's review requests.

    Every call re-fetches; nothing is cached between calls.
    """

    def __init__(self, source: PullRequestSource):
        self._source = source

    async def classify(self, username: str, kind: str = "all") -> list[ReviewRequest]:
        try:
            view = _VIEWS[kind]
        except KeyError:
            raise ValueError(f"Unknown review request type: {kind!r}. Choose one of {', '.join(KINDS)}.")
        pull_requests = await self._source.list_open_pull_requests()
        return view(pull_requests, username)

    async def all(self, username: str) -> list[ReviewRequest]:
        return await self.classify(username, "all")

    async def accepted(self, username: str) -> list[ReviewRequest]:
        return await self.classify(username, "accepted")

    async def unaccepted(self, username: str) -> list[ReviewRequest]:
        return await self.classify(username, "unaccepted")
