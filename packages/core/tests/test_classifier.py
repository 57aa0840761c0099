"""Tests for review-request classification."""

import pytest

from conftest import FakePullRequestSource, make_pr
from reviewpolice_core.classifier import (
    ReviewRequestClassifier,
    accepted_requests,
    all_requests,
    unaccepted_requests,
)

PULLS = [
    make_pr(1, ["alice"]),  # alice is the sole reviewer
    make_pr(2, ["alice", "bob"]),  # shared
    make_pr(3, ["bob"]),
    make_pr(4, []),  # nobody requested
]


def _numbers(requests):
    return [r.pull_number for r in requests]


class TestViews:
    def test_all_lists_every_request_for_user(self):
        assert _numbers(all_requests(PULLS, "alice")) == [1, 2]

    def test_accepted_means_sole_outstanding_reviewer(self):
        assert _numbers(accepted_requests(PULLS, "alice")) == [1]
        assert _numbers(accepted_requests(PULLS, "bob")) == [3]

    def test_unaccepted_means_shared_with_others(self):
        assert _numbers(unaccepted_requests(PULLS, "alice")) == [2]
        assert _numbers(unaccepted_requests(PULLS, "bob")) == [2]

    def test_accepted_and_unaccepted_partition_all(self):
        for user in ("alice", "bob", "carol"):
            every = set(_numbers(all_requests(PULLS, user)))
            accepted = set(_numbers(accepted_requests(PULLS, user)))
            unaccepted = set(_numbers(unaccepted_requests(PULLS, user)))
            assert accepted | unaccepted == every
            assert not accepted & unaccepted

    def test_pr_without_reviewers_contributes_nothing(self):
        empty = [make_pr(4, [])]
        assert all_requests(empty, "alice") == []
        assert accepted_requests(empty, "alice") == []
        assert unaccepted_requests(empty, "alice") == []

    def test_unknown_user_has_no_requests(self):
        assert all_requests(PULLS, "carol") == []

    def test_requests_carry_title_and_url(self):
        (request,) = accepted_requests(PULLS, "alice")
        assert request.title == "PR 1"
        assert request.url == "https://github.com/acme/app/pull/1"
        assert request.reviewer == "alice"


class TestReviewRequestClassifier:
    @pytest.mark.asyncio
    async def test_refetches_on_every_call(self):
        source = FakePullRequestSource(PULLS)
        classifier = ReviewRequestClassifier(source)

        assert _numbers(await classifier.all("alice")) == [1, 2]
        assert _numbers(await classifier.accepted("alice")) == [1]
        assert _numbers(await classifier.unaccepted("alice")) == [2]
        assert source.list_calls == 3

    @pytest.mark.asyncio
    async def test_sees_changes_between_calls(self):
        source = FakePullRequestSource(PULLS)
        classifier = ReviewRequestClassifier(source)
        assert _numbers(await classifier.unaccepted("alice")) == [2]

        await source.delete_requested_reviewers(2, ["bob"])

        assert await classifier.unaccepted("alice") == []
        assert _numbers(await classifier.accepted("alice")) == [1, 2]

    @pytest.mark.asyncio
    async def test_ignores_closed_pull_requests(self):
        source = FakePullRequestSource([make_pr(5, ["alice"], status="closed")])
        assert await ReviewRequestClassifier(source).all("alice") == []

    @pytest.mark.asyncio
    async def test_unknown_kind_raises(self):
        classifier = ReviewRequestClassifier(FakePullRequestSource(PULLS))
        with pytest.raises(ValueError, match="Unknown review request type"):
            await classifier.classify("alice", "pending")
