"""Pull request notification correlator.

When a pull request is opened with auto-assigned reviewers, GitHub fires one
``review_requested`` delivery per reviewer within a second or two. Handling
each one on its own would ping the channel once per reviewer. The correlator
batches such a burst into a single notification per pull request.

Lifecycle of an entry, keyed by pull request number:

    absent --opened--> NEW --review_requested--> ACCUMULATING --grace window--> absent
                                                                (notification fired)

A ``review_requested`` for a pull request with no live entry (a reviewer
added long after opening) is notified immediately on its own.

Entries carry monotonic deadlines. They are checked on every relevant event
and by ``sweep()``, so a timer that fires late and an event that arrives late
cannot both claim the same entry. All mutation of an entry happens under a
per-pull-request asyncio.Lock; notifying happens outside it.

State is in-memory only. Pending entries are lost on restart; GitHub's
requested-reviewer list stays the source of truth, so at worst one combined
notification is missed.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import time
from dataclasses import dataclass, field
from typing import AsyncIterator, Awaitable, Callable

logger = logging.getLogger(__name__)

Notify = Callable[[list[str]], Awaitable[object]]

DEFAULT_GRACE_WINDOW = 5.0
DEFAULT_OPENED_TTL = 60.0


@dataclass
class PendingNotification:
    pull_number: int
    created_at: float
    reviewers_seen: list[str] = field(default_factory=list)
    deadline: float | None = None  # set when the first reviewer arrives
    fired: bool = False
    notify: Notify | None = field(default=None, repr=False)

    @property
    def state(self) -> str:
        return "new" if self.deadline is None else "accumulating"


class NotificationCorrelator:
    def __init__(
        self,
        grace_window: float = DEFAULT_GRACE_WINDOW,
        opened_ttl: float = DEFAULT_OPENED_TTL,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.grace_window = grace_window
        self.opened_ttl = opened_ttl
        self._clock = clock
        self._entries: dict[int, PendingNotification] = {}
        self._locks: dict[int, asyncio.Lock] = {}
        self._lock_users: dict[int, int] = {}
        self._timers: dict[int, asyncio.Task] = {}

    # ------------------------------------------------------------------ #
    # Events                                                               #
    # ------------------------------------------------------------------ #

    async def opened(self, pull_number: int) -> None:
        async with self._locked(pull_number):
            due = self._pop_stale(pull_number, self._clock())
            if pull_number not in self._entries:
                self._entries[pull_number] = PendingNotification(pull_number=pull_number, created_at=self._clock())
                logger.debug("PR #%d opened; waiting for reviewer requests", pull_number)
        if due is not None:
            await self._deliver(due)

    async def review_requested(self, pull_number: int, reviewer: str, notify: Notify) -> None:
        """Record a reviewer request, or notify it right away if no burst is in progress.

        ``notify`` is called with the list of reviewer logins to announce.
        For a burst, the callback given with the first reviewer is the one
        used when the grace window closes.
        """
        ad_hoc = False
        async with self._locked(pull_number):
            now = self._clock()
            due = self._pop_stale(pull_number, now)
            entry = self._entries.get(pull_number)
            if entry is None:
                ad_hoc = True
            else:
                if reviewer not in entry.reviewers_seen:
                    entry.reviewers_seen.append(reviewer)
                if entry.deadline is None:
                    entry.deadline = now + self.grace_window
                    entry.notify = notify
                    self._arm(entry)
                    logger.debug("PR #%d: collecting reviewers for %.1fs", pull_number, self.grace_window)

        if due is not None:
            await self._deliver(due)
        if ad_hoc:
            logger.info("PR #%d: ad hoc review request for %s", pull_number, reviewer)
            await notify([reviewer])

    # ------------------------------------------------------------------ #
    # Expiry                                                               #
    # ------------------------------------------------------------------ #

    async def sweep(self) -> int:
        """Fire every overdue entry and drop expired NEW ones. Returns how many fired."""
        fired = 0
        for pull_number in list(self._entries):
            async with self._locked(pull_number):
                due = self._pop_stale(pull_number, self._clock())
            if due is not None:
                await self._deliver(due)
                fired += 1
        return fired

    async def run_sweeper(self, interval: float) -> None:
        while True:
            await asyncio.sleep(interval)
            await self.sweep()

    async def aclose(self) -> None:
        """Cancel pending timers and forget every entry."""
        timers = list(self._timers.values())
        for task in timers:
            task.cancel()
        await asyncio.gather(*timers, return_exceptions=True)
        self._timers.clear()
        if self._entries:
            logger.info("Discarding %d pending notification(s)", len(self._entries))
        self._entries.clear()

    def pending(self, pull_number: int) -> PendingNotification | None:
        return self._entries.get(pull_number)

    # ------------------------------------------------------------------ #
    # Internals                                                            #
    # ------------------------------------------------------------------ #

    @contextlib.asynccontextmanager
    async def _locked(self, pull_number: int) -> AsyncIterator[None]:
        """Hold the pull request's lock. The lock is dropped once nobody holds or awaits it."""
        lock = self._locks.get(pull_number)
        if lock is None:
            lock = self._locks[pull_number] = asyncio.Lock()
        self._lock_users[pull_number] = self._lock_users.get(pull_number, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._lock_users[pull_number] -= 1
            if not self._lock_users[pull_number]:
                del self._lock_users[pull_number]
                del self._locks[pull_number]

    def _is_expired(self, entry: PendingNotification, now: float) -> bool:
        if entry.deadline is None:
            return now - entry.created_at >= self.opened_ttl
        return now >= entry.deadline

    def _pop_stale(self, pull_number: int, now: float) -> PendingNotification | None:
        """Remove an expired entry. Returns it when it is an overdue burst to deliver.

        Caller must hold the pull request's lock.
        """
        entry = self._entries.get(pull_number)
        if entry is None or not self._is_expired(entry, now):
            return None
        del self._entries[pull_number]
        timer = self._timers.pop(pull_number, None)
        if timer is not None and timer is not asyncio.current_task():
            timer.cancel()
        if entry.deadline is None:
            logger.debug("PR #%d: no reviewer requested within %.0fs; forgetting it", pull_number, self.opened_ttl)
            return None
        entry.fired = True
        return entry

    def _arm(self, entry: PendingNotification) -> None:
        self._timers[entry.pull_number] = asyncio.create_task(self._fire_after(entry, self.grace_window))

    async def _fire_after(self, entry: PendingNotification, delay: float) -> None:
        await asyncio.sleep(delay)
        async with self._locked(entry.pull_number):
            # The entry may already have been flushed by sweep() or a late event.
            if self._entries.get(entry.pull_number) is not entry:
                return
            entry.fired = True
            del self._entries[entry.pull_number]
            self._timers.pop(entry.pull_number, None)
        await self._deliver(entry)

    async def _deliver(self, entry: PendingNotification) -> None:
        logger.info("PR #%d: notifying %d reviewer(s)", entry.pull_number, len(entry.reviewers_seen))
        if entry.notify is None:
            return
        try:
            await entry.notify(list(entry.reviewers_seen))
        except Exception:
            logger.exception("PR #%d: review request notification failed", entry.pull_number)
