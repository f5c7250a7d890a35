"""Speech-to-text and text-to-speech for SnakDansk."""

from .base import AbstractTranscriptionBackend, AbstractSynthesisBackend
from .cache import SpeechCache
from .bridge import SpeechBridge
from .google_backend import GoogleSpeechBackend
from .google_tts import GoogleTextToSpeechBackend
from .whisper_backend import WhisperTranscriptionBackend

__all__ = [
    "AbstractTranscriptionBackend",
    "AbstractSynthesisBackend",
    "SpeechCache",
    "SpeechBridge",
    "GoogleSpeechBackend",
    "GoogleTextToSpeechBackend",
    "WhisperTranscriptionBackend",
]
