"""
Dashboard refresh notifications.

The collector does not know how the dashboard is delivered. Whenever its
state changes it emits a ``RefreshEvent`` on an ``EventBus``; the delivery
layer subscribes to it.
"""

import logging
from dataclasses import dataclass
from typing import Callable, List

logger = logging.getLogger(__name__)

DASHBOARD_ROOM = "dashboard"


@dataclass(frozen=True)
class RefreshEvent:
    room: str = DASHBOARD_ROOM


Subscriber = Callable[[RefreshEvent], None]


class EventBus:
    """
    Synchronous fan-out of events to subscribers.

    A subscriber that raises is logged and skipped; it never prevents the
    other subscribers, or the emitter, from running.
    """

    def __init__(self):
        self._subscribers: List[Subscriber] = []

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """
        Register a subscriber.

        Returns:
            A function that removes the subscription
        """
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def emit(self, event: RefreshEvent) -> None:
        for callback in list(self._subscribers):
            try:
                callback(event)
            except Exception as e:
                logger.error(f"Event subscriber {callback!r} failed: {e}", exc_info=True)

    def push_refresh(self, room: str = DASHBOARD_ROOM) -> None:
        self.emit(RefreshEvent(room=room))
