from __future__ import annotations

import asyncio
import logging
from typing import Iterable

from github import Github, GithubException, UnknownObjectException

from reviewpolice_core.gh.base import PullRequestSource
from reviewpolice_core.models import PullRequest, build_pull_request

logger = logging.getLogger(__name__)


def get_repo(repo_name: str, auth):
    return Github(auth=auth).get_repo(repo_name)


def get_pull(repo, pr_number: int):
    return repo.get_pull(pr_number)


def get_pull_requests(repo, state: str = "open"):
    return repo.get_pulls(state=state)


def to_pull_request(pr) -> PullRequest:
    """Convert a PyGithub PullRequest into our immutable value object."""
    reviewers = [user.login for user in (pr.requested_reviewers or [])]
    return build_pull_request(
        number=pr.number,
        title=pr.title or "",
        url=pr.html_url,
        status=pr.state,
        reviewers=reviewers,
    )


class GitHubPullRequestSource(PullRequestSource):
    """Pull-request source backed by a PyGithub repository object.

    PyGithub is synchronous; every call is pushed onto a worker thread so
    the event loop keeps serving webhooks and Discord interactions while
    GitHub answers.
    """

    def __init__(self, repo):
        self._repo = repo

    async def list_open_pull_requests(self) -> list[PullRequest]:
        return await asyncio.to_thread(self._list_open)

    async def get_pull_request(self, number: int) -> PullRequest | None:
        return await asyncio.to_thread(self._get, number)

    async def delete_requested_reviewers(self, number: int, logins: Iterable[str]) -> bool:
        return await asyncio.to_thread(self._delete_reviewers, number, list(logins))

    def _list_open(self) -> list[PullRequest]:
        return [to_pull_request(pr) for pr in get_pull_requests(self._repo)]

    def _get(self, number: int) -> PullRequest | None:
        try:
            return to_pull_request(get_pull(self._repo, number))
        except UnknownObjectException:
            return None

    def _delete_reviewers(self, number: int, logins: list[str]) -> bool:
        try:
            get_pull(self._repo, number).delete_review_request(reviewers=logins)
        except GithubException as e:
            logger.warning("Removing reviewers %s from PR #%d failed: %s", logins, number, e)
            return False
        return True
