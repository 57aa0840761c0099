"""Exception types shared across reviewpolice_core."""

from __future__ import annotations


class ConfigError(ValueError):
    """Raised when required configuration is missing or malformed."""


class WebhookVerificationError(Exception):
    """The signature on an inbound webhook delivery did not match."""


class AcceptanceError(Exception):
    """Base class for per-item outcomes of the review acceptance workflow.

    Raised inside a single item and caught at the item boundary. It is never
    allowed to abort sibling items in the same batch.
    """

    def __init__(self, pull_number: int, message: str = ""):
        super().__init__(message or f"PR #{pull_number}")
        self.pull_number = pull_number


class PullRequestNotFoundError(AcceptanceError):
    pass


class ReviewNotRequestedError(AcceptanceError):
    pass


class AlreadySoleReviewerError(AcceptanceError):
    """The actor is already the only requested reviewer. Not a failure."""


class ReviewerRemovalError(AcceptanceError):
    """GitHub reported failure while removing the other reviewers."""

    def __init__(self, pull_number: int, reviewers: list[str]):
        super().__init__(pull_number, f"could not remove {', '.join(reviewers)} from PR #{pull_number}")
        self.reviewers = reviewers
