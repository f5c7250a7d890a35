"""Conversation data models."""

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional


class Role(Enum):
    """Author of a message."""
    USER = "user"
    ASSISTANT = "assistant"


@dataclass(frozen=True)
class Message:
    """A single entry in the session's message log."""
    role: Role
    content: str
    translation: Optional[str] = None

    def to_dict(self) -> dict:
        data = {"role": self.role.value, "content": self.content}
        if self.translation is not None:
            data["translation"] = self.translation
        return data


@dataclass(frozen=True)
class ChatReply:
    """Assistant reply split into its Danish text and English gloss."""
    danish: str
    english: str = ""


@dataclass(frozen=True)
class ChatExchange:
    """One round trip: what the user said and what came back."""
    utterance: str
    reply: ChatReply

    def to_messages(self) -> List[Message]:
        """Split the exchange into the user and assistant messages."""
        return [
            Message(role=Role.USER, content=self.utterance),
            Message(
                role=Role.ASSISTANT,
                content=self.reply.danish,
                translation=self.reply.english,
            ),
        ]


class TurnPhase(Enum):
    """Where the current turn is in the pipeline."""
    IDLE = "idle"
    RECORDING = "recording"
    TRANSCRIBING = "transcribing"
    THINKING = "thinking"
    SPEAKING = "speaking"


@dataclass
class ProcessingState:
    """Independent pipeline flags, mutated only by the turn orchestrator."""
    transcribing: bool = False
    thinking: bool = False
    speaking: bool = False

    @property
    def busy(self) -> bool:
        return self.transcribing or self.thinking or self.speaking

    def clear(self) -> None:
        self.transcribing = False
        self.thinking = False
        self.speaking = False

    def snapshot(self) -> "ProcessingState":
        return ProcessingState(
            transcribing=self.transcribing,
            thinking=self.thinking,
            speaking=self.speaking,
        )


@dataclass
class TurnMetrics:
    """Wall-clock markers for one turn, used by the timing debug channel."""
    recording_start: float = 0.0
    transcription_start: float = 0.0
    chat_start: float = 0.0
    response_start: float = 0.0
