"""Result type returned by turn orchestrator operations."""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from .conversation import Message


class TurnStatus(Enum):
    """Outcome of an orchestrator operation."""
    COMPLETED = "completed"
    SKIPPED = "skipped"    # nothing to do (empty audio, empty transcript)
    FAILED = "failed"
    REJECTED = "rejected"  # guard refused the action


class ErrorKind(Enum):
    """Which stage of the pipeline failed."""
    TRANSCRIPTION = "transcription"
    SYNTHESIS = "synthesis"
    PLAYBACK = "playback"
    CHAT = "chat"
    USER_MEDIA = "user_media"
    BUSY = "busy"


@dataclass
class TurnResult:
    """Success/failure variant for a turn operation."""
    status: TurnStatus
    error_kind: Optional[ErrorKind] = None
    error: Optional[str] = None
    transcript: Optional[str] = None
    messages: List[Message] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.status in (TurnStatus.COMPLETED, TurnStatus.SKIPPED)

    @property
    def retryable(self) -> bool:
        """Whether the UI should offer the user another attempt."""
        return self.status == TurnStatus.FAILED and self.error_kind in (
            ErrorKind.TRANSCRIPTION,
            ErrorKind.CHAT,
            ErrorKind.USER_MEDIA,
        )

    @classmethod
    def completed(cls, transcript: Optional[str] = None,
                  messages: Optional[List[Message]] = None) -> "TurnResult":
        return cls(TurnStatus.COMPLETED, transcript=transcript, messages=list(messages or []))

    @classmethod
    def skipped(cls, reason: str, transcript: Optional[str] = None) -> "TurnResult":
        return cls(TurnStatus.SKIPPED, error=reason, transcript=transcript)

    @classmethod
    def failed(cls, kind: ErrorKind, error: str, transcript: Optional[str] = None,
               messages: Optional[List[Message]] = None) -> "TurnResult":
        return cls(TurnStatus.FAILED, error_kind=kind, error=error,
                   transcript=transcript, messages=list(messages or []))

    @classmethod
    def rejected(cls, reason: str) -> "TurnResult":
        return cls(TurnStatus.REJECTED, error_kind=ErrorKind.BUSY, error=reason)
