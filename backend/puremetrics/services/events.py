"""Change notifications for anything that renders manager state."""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable

from puremetrics.core.logging import get_logger
from puremetrics.models.base import utc_now

logger = get_logger(__name__)


@dataclass(frozen=True)
class StateChange:
    collection: str
    reason: str
    at: datetime = field(default_factory=utc_now)


Subscriber = Callable[[StateChange], None]


class StateObserver:
    """Synchronous fan-out of StateChange events to registered callbacks.

    A subscriber that raises is logged and skipped; the change that triggered
    the notification has already been applied and saved.
    """

    def __init__(self):
        self._subscribers: list[Subscriber] = []
        self._logger = logger.bind(component="state_observer")

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Register ``callback`` and return a function that unregisters it."""
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def emit(self, collection: str, reason: str) -> StateChange:
        change = StateChange(collection=collection, reason=reason)
        for callback in list(self._subscribers):
            try:
                callback(change)
            except Exception as e:
                self._logger.warning(
                    "subscriber_failed",
                    collection=collection,
                    reason=reason,
                    error=str(e),
                )
        return change

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)
