"""Abstract pull-request source.

The classifier, the acceptance workflow and the webhook handlers depend on
this interface rather than on PyGithub, so tests can hand them an in-memory
fake and production hands them GitHubPullRequestSource.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Iterable

if TYPE_CHECKING:
    from reviewpolice_core.models import PullRequest


class PullRequestSource(ABC):
    @abstractmethod
    async def list_open_pull_requests(self) -> list[PullRequest]:
        """Return every open pull request, freshly fetched."""

    @abstractmethod
    async def get_pull_request(self, number: int) -> PullRequest | None:
        """Return the pull request with this number, or None if it does not exist."""

    @abstractmethod
    async def delete_requested_reviewers(self, number: int, logins: Iterable[str]) -> bool:
        """Remove the given logins from the requested reviewers.

        Returns True when GitHub accepted the removal, False otherwise.
        """
