from abc import ABC, abstractmethod
from typing import Any, Callable, Dict

from ..application.events import ProviderEvent
from ..application.feedback import FeedbackRequest, FeedbackResult

EventListener = Callable[[ProviderEvent], None]


class Subscription(ABC):
    @abstractmethod
    def cancel(self) -> None:
        """Stop delivering events to the listener. Safe to call twice."""
        pass


class CallProvider(ABC):
    @abstractmethod
    def subscribe(self, listener: EventListener) -> Subscription:
        """Deliver every provider event to ``listener`` until cancelled."""
        pass

    @abstractmethod
    async def start(self, target_id: str, parameters: Dict[str, Any]) -> None:
        """Start a call against ``target_id``. Raises if the provider rejects it."""
        pass

    @abstractmethod
    async def stop(self) -> None:
        """Hang up the current call."""
        pass


class FeedbackService(ABC):
    @abstractmethod
    async def create_feedback(self, request: FeedbackRequest) -> FeedbackResult:
        """Generate feedback for a finished interview transcript."""
        pass
