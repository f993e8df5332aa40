"""Events emitted by a call provider.

Payloads follow the browser voice SDK's message shape so the client can
relay them verbatim over the websocket.
"""
from typing import Annotated, Any, Dict, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

from .transcript import MessageRole


class ProviderEvent(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")


class CallStarted(ProviderEvent):
    type: Literal["call-start"] = "call-start"


class CallEnded(ProviderEvent):
    type: Literal["call-end"] = "call-end"


class TranscriptEvent(ProviderEvent):
    type: Literal["transcript"] = "transcript"
    role: MessageRole
    transcript: str = ""
    kind: Literal["final", "partial"] = Field(default="partial", alias="transcriptType")

    @property
    def is_final(self) -> bool:
        return self.kind == "final"


class SpeechStarted(ProviderEvent):
    type: Literal["speech-start"] = "speech-start"


class SpeechEnded(ProviderEvent):
    type: Literal["speech-end"] = "speech-end"


class ProviderErrorEvent(ProviderEvent):
    type: Literal["error"] = "error"
    details: Any = None


AnyProviderEvent = Annotated[
    Union[CallStarted, CallEnded, TranscriptEvent, SpeechStarted, SpeechEnded, ProviderErrorEvent],
    Field(discriminator="type"),
]

_event_adapter: TypeAdapter = TypeAdapter(AnyProviderEvent)


def parse_provider_event(payload: Dict[str, Any]) -> ProviderEvent:
    """Validate a raw provider message; raises pydantic.ValidationError."""
    return _event_adapter.validate_python(payload)
