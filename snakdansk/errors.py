"""Error taxonomy for SnakDansk."""


class SnakDanskError(Exception):
    """Base class for all application errors."""


class TranscriptionError(SnakDanskError):
    """Speech-to-text failed upstream or the audio was malformed."""


class SynthesisError(SnakDanskError):
    """Text-to-speech failed upstream or returned no audio content."""


class PlaybackError(SnakDanskError):
    """Synthesized audio could not be decoded or played."""


class ChatError(SnakDanskError):
    """Chat completion failed upstream or returned a non-OK status."""


class UserMediaError(SnakDanskError):
    """The microphone could not be opened."""
