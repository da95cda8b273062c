"""
Deferred Callbacks
===================
Wall-clock scheduled events for the single-threaded frame loop.

Events run from ``run_due`` at the start of a frame, never in the middle of
one. Each event carries the ``SessionToken`` of the session that scheduled
it; cancelling the token turns every pending event of that session into a
no-op, so a restart can never be touched by the previous session's work.
"""

import logging
from dataclasses import dataclass
from typing import Callable, List


logger = logging.getLogger(__name__)


class SessionToken:
    """Identity of one game session. Cancelled when the session is discarded."""

    def __init__(self, session_id: int):
        self.session_id = session_id
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True

    def __repr__(self) -> str:
        state = 'cancelled' if self.cancelled else 'live'
        return f'SessionToken({self.session_id}, {state})'


@dataclass
class ScheduledEvent:
    """A callback due at a wall-clock time (milliseconds)."""
    due_ms: float
    callback: Callable[[], None]
    token: SessionToken
    name: str = ''


class Scheduler:
    """Pending deferred callbacks, kept in scheduling order."""

    def __init__(self):
        self.pending: List[ScheduledEvent] = []

    def schedule(self, due_ms: float, callback: Callable[[], None],
                 token: SessionToken, name: str = '') -> ScheduledEvent:
        event = ScheduledEvent(due_ms, callback, token, name)
        self.pending.append(event)
        return event

    def run_due(self, now_ms: float) -> int:
        """
        Run every event due at or before now_ms.

        Stale events (cancelled token) are dropped without running.
        Returns the number of callbacks actually run.
        """
        ran = 0
        due = []
        still_pending = []
        for event in self.pending:
            if event.token.cancelled:
                logger.debug('Dropping stale event %s from %r', event.name, event.token)
                continue
            if event.due_ms <= now_ms:
                due.append(event)
            else:
                still_pending.append(event)
        # Replace first so callbacks may schedule follow-up events
        self.pending = still_pending

        for event in sorted(due, key=lambda e: e.due_ms):
            if event.token.cancelled:
                continue
            event.callback()
            ran += 1
        return ran

    def postpone(self, delay_ms: float) -> None:
        """Push every pending event back, e.g. by the length of a pause."""
        if delay_ms <= 0:
            return
        for event in self.pending:
            event.due_ms += delay_ms

    def clear(self) -> None:
        self.pending = []

    def __len__(self) -> int:
        return sum(1 for event in self.pending if not event.token.cancelled)
