from .application.interview_session import CallStatus, SessionContext, SessionType
from .application.transcript import MessageRole, TranscriptBuffer, TranscriptMessage
from .managers.call_session import CallSessionController, NavigationIntent, NavigationKind
from .managers.feedback import FeedbackDispatcher, HttpFeedbackService

__all__ = [
    "CallSessionController",
    "CallStatus",
    "FeedbackDispatcher",
    "HttpFeedbackService",
    "MessageRole",
    "NavigationIntent",
    "NavigationKind",
    "SessionContext",
    "SessionType",
    "TranscriptBuffer",
    "TranscriptMessage",
]
