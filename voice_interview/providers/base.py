from typing import List

import structlog

from ..application.events import ProviderEvent
from ..core.interfaces import CallProvider, EventListener, Subscription

logger = structlog.get_logger(__name__)


class _ListenerSubscription(Subscription):
    def __init__(self, provider: "EventEmitterCallProvider", listener: EventListener):
        self._provider = provider
        self._listener = listener
        self.active = True

    def cancel(self) -> None:
        if not self.active:
            return
        self.active = False
        self._provider._remove(self._listener)


class EventEmitterCallProvider(CallProvider):
    """Listener bookkeeping shared by concrete call providers."""

    def __init__(self):
        self._listeners: List[EventListener] = []

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    def subscribe(self, listener: EventListener) -> Subscription:
        self._listeners.append(listener)
        return _ListenerSubscription(self, listener)

    def _remove(self, listener: EventListener) -> None:
        try:
            self._listeners.remove(listener)
        except ValueError:
            logger.debug("listener_already_removed")

    def emit(self, event: ProviderEvent) -> None:
        # Listeners may unsubscribe while handling an event.
        for listener in list(self._listeners):
            listener(event)
