"""
Per-operation transaction boundary.

Each facade operation opens a `Journal`. Every effect applied along the way
registers a compensating action, and every notification is staged rather
than published. On success the staged notifications are appended to the
event log in order; on failure the compensations run newest-first and the
staged notifications are dropped, so the operation presents as never having
happened. `settle()` marks the point after which the effects already
applied belong to an external call and are no longer unwound.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Callable, Iterator, List, Tuple

from .events import Event, EventLog, Notification

logger = logging.getLogger(__name__)

Compensation = Callable[[], None]


class Journal:
    def __init__(self, operation: str) -> None:
        self.operation = operation
        self._compensations: List[Tuple[str, Compensation]] = []
        self._staged: List[Notification] = []

    def on_rollback(self, label: str, undo: Compensation) -> None:
        self._compensations.append((label, undo))

    def emit(self, event: Event, **fields: Any) -> Notification:
        notification = Notification(event=event, fields=fields)
        self._staged.append(notification)
        return notification

    def settle(self) -> None:
        """
        Drop every compensation registered so far.

        Called once an external call has consumed the operation's effects;
        from here on a failure can no longer hand those effects back.
        """
        self._compensations.clear()

    @property
    def staged(self) -> Tuple[Notification, ...]:
        return tuple(self._staged)

    def rollback(self) -> None:
        self._staged.clear()
        while self._compensations:
            label, undo = self._compensations.pop()
            try:
                undo()
            except Exception:
                # Keep unwinding; the original failure is what the caller sees.
                logger.exception("%s: compensation %r failed during rollback", self.operation, label)

    def commit(self, log: EventLog) -> None:
        self._compensations.clear()
        log.extend(self._staged)
        self._staged.clear()


@contextmanager
def transaction(operation: str, log: EventLog) -> Iterator[Journal]:
    journal = Journal(operation)
    try:
        yield journal
    except Exception as exc:
        logger.warning("%s rolled back: %s: %s", operation, type(exc).__name__, exc)
        journal.rollback()
        raise
    journal.commit(log)
