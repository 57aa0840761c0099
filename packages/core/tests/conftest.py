"""Shared fakes for reviewpolice_core tests."""

from types import SimpleNamespace

import pytest

from reviewpolice_core.chat.base import ChatNotifier
from reviewpolice_core.gh.base import PullRequestSource
from reviewpolice_core.identity import IdentityMapper
from reviewpolice_core.models import build_pull_request


def make_pr(number, reviewers, title=None, status="open"):
    return build_pull_request(
        number=number,
        title=title or f"PR {number}",
        url=f"https://github.com/acme/app/pull/{number}",
        status=status,
        reviewers=list(reviewers),
    )


class FakePullRequestSource(PullRequestSource):
    """In-memory GitHub. Removals really remove, unless the PR is in ``fail_removal``."""

    def __init__(self, pull_requests=(), fail_removal=()):
        self.pull_requests = {pr.number: pr for pr in pull_requests}
        self.fail_removal = set(fail_removal)
        self.list_calls = 0
        self.get_calls = []
        self.removals = []

    async def list_open_pull_requests(self):
        self.list_calls += 1
        return [pr for pr in self.pull_requests.values() if pr.status == "open"]

    async def get_pull_request(self, number):
        self.get_calls.append(number)
        return self.pull_requests.get(number)

    async def delete_requested_reviewers(self, number, logins):
        logins = list(logins)
        self.removals.append((number, logins))
        if number in self.fail_removal:
            return False
        pr = self.pull_requests[number]
        self.pull_requests[number] = make_pr(
            pr.number, [r for r in pr.reviewers if r not in logins], title=pr.title, status=pr.status
        )
        return True


class RecordingNotifier(ChatNotifier):
    def __init__(self):
        self.sent = []

    async def send_notification(self, notification):
        self.sent.append(notification)
        return notification

    async def resolve_mention(self, chat_id):
        return f"<@{chat_id}>"


class FakeClock:
    def __init__(self, now=1000.0):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def identity():
    return IdentityMapper(
        [
            SimpleNamespace(discord_id="111", github_login="alice"),
            SimpleNamespace(discord_id="222", github_login="bob"),
            SimpleNamespace(discord_id="333", github_login="carol"),
        ]
    )


@pytest.fixture
def clock():
    return FakeClock()
