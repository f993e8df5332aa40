from typing import Any, Dict


class InterviewCallError(Exception):
    """Base class for errors raised or reported by a call session."""

    def __init__(self, message: str, details: Dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": type(self).__name__,
            "message": self.message,
            "details": self.details,
        }


class InvalidTransitionError(InterviewCallError):
    """A command was issued in a call status that does not allow it."""


class ProviderStartFailure(InterviewCallError):
    """The call provider rejected the start command."""


class ProviderRuntimeError(InterviewCallError):
    """The call provider reported an error while the call was running."""


class FeedbackDispatchFailure(InterviewCallError):
    """Feedback could not be generated for a finished session."""
