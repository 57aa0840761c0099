"""Pull request value objects.

Built from the live GitHub response and never mutated afterwards. Nothing
here is cached between operations; callers always re-fetch.
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class ReviewRequest:
    """One (pull request, reviewer) pairing."""

    pull_number: int
    title: str
    url: str
    reviewer: str  # GitHub login


@dataclass(frozen=True)
class PullRequest:
    """The parts of a GitHub pull request this bot cares about.

    ``review_requests`` holds the *currently outstanding* requested reviewers
    only. Reviewers that already submitted a review, or were removed, are not
    listed, since GitHub drops them from ``requested_reviewers``.
    """

    number: int
    title: str
    url: str
    status: str  # "open" | "closed"
    review_requests: tuple[ReviewRequest, ...] = field(default_factory=tuple)

    @property
    def reviewers(self) -> list[str]:
        return [r.reviewer for r in self.review_requests]

    def is_requested(self, login: str) -> bool:
        return login in self.reviewers


def build_pull_request(number: int, title: str, url: str, status: str, reviewers: list[str]) -> PullRequest:
    """Assemble a PullRequest, keeping at most one request per reviewer."""
    seen: set[str] = set()
    requests = []
    for login in reviewers:
        if login in seen:
            continue
        seen.add(login)
        requests.append(ReviewRequest(pull_number=number, title=title, url=url, reviewer=login))
    return PullRequest(number=number, title=title, url=url, status=status, review_requests=tuple(requests))
