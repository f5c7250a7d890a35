"""Data models for the SnakDansk application."""

from .conversation import (
    Role,
    Message,
    ChatReply,
    ChatExchange,
    TurnPhase,
    ProcessingState,
    TurnMetrics,
)
from .results import TurnResult, TurnStatus, ErrorKind
from .audio import AudioEncoding, AudioStats
from .events import AudioEvent
from .transcription import TranscriptionResult
from .topics import Topic, TOPICS, get_topic

__all__ = [
    "Role",
    "Message",
    "ChatReply",
    "ChatExchange",
    "TurnPhase",
    "ProcessingState",
    "TurnMetrics",
    "TurnResult",
    "TurnStatus",
    "ErrorKind",
    "AudioEncoding",
    "AudioStats",
    "AudioEvent",
    "TranscriptionResult",
    "Topic",
    "TOPICS",
    "get_topic",
]
