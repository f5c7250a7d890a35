"""Audio-related data models."""

from dataclasses import dataclass
from enum import Enum


class AudioEncoding(Enum):
    """Encodings accepted by the transcription backends."""
    WEBM_OPUS = "WEBM_OPUS"   # browser MediaRecorder output
    LINEAR16 = "LINEAR16"     # raw 16-bit PCM from the local microphone


@dataclass
class AudioStats:
    """Audio recording statistics."""
    is_recording: bool
    duration_seconds: float
    sample_rate: int
    chunk_size: int
    total_chunks: int
    total_bytes: int
    level: float
    peak_level: float
