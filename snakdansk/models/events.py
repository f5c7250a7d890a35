"""Event models and topic names for the pub/sub layer."""

from dataclasses import dataclass
from typing import Optional

AUDIO_FRAME_TOPIC = "audio.frame"
TURN_STATE_TOPIC = "turn.state"
TURN_MESSAGES_TOPIC = "turn.messages"
TURN_ERROR_TOPIC = "turn.error"


@dataclass
class AudioEvent:
    """Audio chunk event with metadata."""
    chunk_id: str
    audio_data: bytes
    timestamp: float  # Unix timestamp when chunk was captured
    sequence_number: int
    level: float = 0.0
    sample_rate: int = 16000
    channels: int = 1
    chunk_duration_ms: Optional[int] = None

    def __post_init__(self):
        """Calculate chunk duration if not provided."""
        if self.chunk_duration_ms is None and self.audio_data:
            # 16-bit audio, 2 bytes per sample
            bytes_per_second = self.sample_rate * self.channels * 2
            self.chunk_duration_ms = int(len(self.audio_data) / bytes_per_second * 1000)
