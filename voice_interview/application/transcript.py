from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Tuple


class MessageRole(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"


@dataclass(frozen=True)
class TranscriptMessage:
    role: MessageRole
    content: str

    def to_dict(self) -> Dict[str, str]:
        return {"role": self.role.value, "content": self.content}


@dataclass
class TranscriptBuffer:
    """Finalized conversation turns plus the utterance still being spoken.

    ``pending_utterance`` is display-only and is never part of a snapshot.
    """
    history: List[TranscriptMessage] = field(default_factory=list)
    pending_utterance: str = ""

    def append_final(self, role: MessageRole | str, content: str) -> TranscriptMessage:
        message = TranscriptMessage(role=MessageRole(role), content=content)
        self.history.append(message)
        self.pending_utterance = ""
        return message

    def set_partial(self, text: str) -> None:
        self.pending_utterance = text or ""

    def snapshot(self) -> Tuple[TranscriptMessage, ...]:
        return tuple(self.history)

    def reset(self) -> None:
        self.history = []
        self.pending_utterance = ""

    @property
    def last_message(self) -> str:
        return self.history[-1].content if self.history else ""

    def to_payload(self) -> List[Dict[str, str]]:
        return [message.to_dict() for message in self.history]

    def __len__(self) -> int:
        return len(self.history)
