"""Microphone capture, level metering and playback."""

from .capture import AudioCapture
from .level import AudioLevelMeter
from .playback import AudioPlayer

__all__ = [
    'AudioCapture',
    'AudioLevelMeter',
    'AudioPlayer',
]
