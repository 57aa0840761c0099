"""The webhook handler table.

Built once at start-up from explicitly constructed services. Adding an event
means adding a line here; nothing is discovered at runtime.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from reviewpolice_core.handlers.pull_request import PullRequestEventHandler
from reviewpolice_core.handlers.pull_request_review import PullRequestReviewEventHandler

if TYPE_CHECKING:
    from reviewpolice_core.correlator import NotificationCorrelator
    from reviewpolice_core.gh.base import PullRequestSource
    from reviewpolice_core.identity import IdentityMapper
    from reviewpolice_core.webhooks.dispatcher import Handler


def build_handler_table(
    correlator: NotificationCorrelator,
    source: PullRequestSource,
    identity: IdentityMapper,
    product_owner: str | None = None,
) -> dict[str, Handler]:
    return {
        "pull_request": PullRequestEventHandler(correlator, source, identity),
        "pull_request_review": PullRequestReviewEventHandler(identity, product_owner),
    }
