"""Abstract base classes for speech backends."""

from abc import ABC, abstractmethod
import logging

from ..models.audio import AudioEncoding
from ..models.transcription import TranscriptionResult

logger = logging.getLogger(__name__)


class AbstractTranscriptionBackend(ABC):
    """Abstract base class for speech-to-text backends."""

    service_name = "transcription"

    def __init__(self, language: str = "da-DK"):
        """Initialize backend with language preference."""
        self.language = language

    @abstractmethod
    async def transcribe(self, audio: bytes,
                         encoding: AudioEncoding = AudioEncoding.WEBM_OPUS,
                         sample_rate: int = 16000) -> TranscriptionResult:
        """Transcribe one recorded utterance.

        Args:
            audio: Encoded audio bytes
            encoding: How ``audio`` is encoded
            sample_rate: Sample rate of the audio in Hz

        Returns:
            TranscriptionResult whose text joins every recognized segment

        Raises:
            TranscriptionError: If the upstream call fails
        """

    @abstractmethod
    def initialize(self) -> bool:
        """Initialize backend resources and verify configuration."""

    def cleanup(self) -> None:
        """Clean up backend resources."""


class AbstractSynthesisBackend(ABC):
    """Abstract base class for text-to-speech backends."""

    service_name = "synthesis"

    @abstractmethod
    async def synthesize(self, text: str) -> bytes:
        """Synthesize ``text`` and return encoded audio bytes.

        Raises:
            SynthesisError: If the upstream call fails or returns no audio
        """

    @abstractmethod
    def initialize(self) -> bool:
        """Initialize backend resources and verify configuration."""

    def cleanup(self) -> None:
        """Clean up backend resources."""
