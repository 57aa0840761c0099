"""Message texts posted to chat.

Everything the bot says lives here so handlers stay focused on deciding
*when* to say it.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Iterable

from reviewpolice_core.chat.base import Notification

if TYPE_CHECKING:
    from reviewpolice_core.acceptance import ItemResult
    from reviewpolice_core.chat.base import ChatNotifier
    from reviewpolice_core.identity import IdentityMapper
    from reviewpolice_core.models import ReviewRequest

COURT_DUTY = "Review Police court duty"


def pr_link(number: int, title: str, url: str) -> str:
    return f"[#{number}: {title}]({url})"


async def mention(notifier: ChatNotifier, identity: IdentityMapper, login: str) -> str:
    """Mention a GitHub user in chat, or fall back to their login when unmapped."""
    chat_id = identity.to_discord_id(login)
    if chat_id is None:
        return f"@{login}"
    return await notifier.resolve_mention(chat_id)


async def mention_all(notifier: ChatNotifier, identity: IdentityMapper, logins: Iterable[str]) -> str:
    return " ".join([await mention(notifier, identity, login) for login in logins])


def _addressed(mentions: str, text: str) -> str:
    return f"{mentions}: {text}" if mentions else text


def review_requested(mentions: str, number: int, title: str, url: str) -> Notification:
    text = (
        f"You have been summoned for review duty on pull request {pr_link(number, title, url)}. "
        "Please either accept the review request by using the /accept command, or ignore this message."
    )
    return Notification(title=COURT_DUTY, description=_addressed(mentions, text), url=url)


def reopened(mentions: str, number: int, title: str, url: str) -> Notification:
    text = (
        f"The pull request {pr_link(number, title, url)} has been re-opened. "
        "You are back on for review-duty, get a move on! 👮"
    )
    return Notification(title=COURT_DUTY, description=_addressed(mentions, text), url=url)


def closed(mentions: str, number: int, title: str, url: str) -> Notification:
    text = (
        f"The pull request {pr_link(number, title, url)} has been closed. "
        "You have been set free from review duty this time, I'll catch you next time 🚓"
    )
    return Notification(title=COURT_DUTY, description=_addressed(mentions, text), url=url)


def merged(number: int, title: str, url: str) -> Notification:
    return Notification(
        title="Review Police merge notice",
        description=f"The pull request {pr_link(number, title, url)} has been merged. Good job everybody! 👍",
        url=url,
    )


def review_approved(owner_mention: str, reviewer_mention: str, number: int, title: str, url: str) -> Notification:
    text = (
        f"Pull request {pr_link(number, title, url)} has been approved by {reviewer_mention}, "
        "it is now up to you to decide its destiny."
    )
    return Notification(title="How does the judge respond?", description=_addressed(owner_mention, text), url=url)


def changes_requested(author_mention: str, number: int, title: str, url: str) -> Notification:
    text = (
        "The judge has ruled to take this to a higher instance. Changes have been requested for the pull request "
        f"{pr_link(number, title, url)}. Address the comments, then re-request the review in GitHub."
    )
    return Notification(title="A verdict has been made", description=_addressed(author_mention, text), url=url)


def reviewers_bailed_out(lines: list[str]) -> Notification:
    """Batched notice for every pull request whose other reviewers were removed."""
    return Notification(title="Review Police: Court Duty", description="\n".join(lines))


def bailed_out_line(removed_mentions: str, actor_mention: str, number: int, title: str, url: str) -> str:
    return _addressed(
        removed_mentions,
        f"{actor_mention} has bailed you out of review duty on {pr_link(number, title, url)}. "
        "I'll catch you next time 🚓",
    )


_OUTCOME_TEXT = {
    "success": "Your friends have been bailed out of review duty. The review is all yours.",
    "not_found": (
        "I don't know what you're going on about... Come on, get on out of here! "
        "The pull request with number {number} does not exist!"
    ),
    "not_requested": (
        "Trying to bail your friends out of review duty, huh? Not gonna happen this time. "
        "Your review has not been requested for this pull request, try another one."
    ),
    "already_sole": (
        "Trying to work double shifts, eh? You have already accepted this review request, try another one."
    ),
    "removal_failed": (
        "Your friends could not be bailed out of review duty this time. Something went wrong when trying to "
        "remove other reviewers from the pull request. Try again or do it manually in GitHub."
    ),
    "error": "Something went wrong while talking to GitHub about this pull request. Try again later.",
}


def outcome_line(result: ItemResult) -> str:
    text = _OUTCOME_TEXT[result.outcome.value].format(number=result.pull_number)
    return f"PR #{result.pull_number}: {text}"


def acknowledgement(results: list[ItemResult]) -> str:
    header = f"PR{'s have' if len(results) > 1 else ' has'} been selected. Use /accept again to select more PRs."
    return "\n".join([header, *(outcome_line(r) for r in results)])


def review_request_list(requests: list[ReviewRequest], kind: str) -> Notification:
    if not requests:
        qualifier = f" {kind}" if kind in ("accepted", "unaccepted") else ""
        return Notification(
            title="Show review requests",
            description=f"You are free to leave, for now... You have no{qualifier} review requests. "
            "I will catch you later 🚓",
        )
    lines = [f"{pr_link(r.pull_number, r.title, r.url)}" for r in requests]
    return Notification(title="Show review requests", description="\n".join(lines))
