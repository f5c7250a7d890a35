"""Live microphone level metering in the frequency domain."""

import logging
from typing import Optional

import numpy as np
from scipy.signal import get_window

logger = logging.getLogger(__name__)


class AudioLevelMeter:
    """Normalized input level derived from byte-scaled frequency data.

    Mirrors what a browser AnalyserNode reports: Blackman-windowed FFT
    magnitudes, smoothed over time, converted to dB and mapped onto 0-255.
    The level is the mean bin value divided by ``divisor``, clamped to 1.0.
    """

    def __init__(self,
                 divisor: float = 128.0,
                 smoothing: float = 0.8,
                 min_decibels: float = -100.0,
                 max_decibels: float = -30.0):
        if divisor <= 0:
            raise ValueError("divisor must be positive")
        if not 0.0 <= smoothing < 1.0:
            raise ValueError("smoothing must be in [0, 1)")
        self.divisor = divisor
        self.smoothing = smoothing
        self.min_decibels = min_decibels
        self.max_decibels = max_decibels
        self.level = 0.0
        self._previous: Optional[np.ndarray] = None

    def byte_frequency_data(self, pcm: bytes) -> np.ndarray:
        """Byte-scaled (0-255) magnitude spectrum of one chunk of 16-bit PCM."""
        samples = np.frombuffer(pcm, dtype=np.int16).astype(np.float64) / 32768.0
        n = len(samples)
        if n == 0:
            return np.zeros(0)

        windowed = samples * get_window("blackman", n, fftbins=False)
        magnitudes = np.abs(np.fft.rfft(windowed))[: n // 2] / n

        if self._previous is not None and self._previous.shape == magnitudes.shape:
            magnitudes = self.smoothing * self._previous + (1.0 - self.smoothing) * magnitudes
        self._previous = magnitudes

        with np.errstate(divide="ignore"):
            decibels = 20.0 * np.log10(magnitudes)
        scale = 255.0 / (self.max_decibels - self.min_decibels)
        return np.clip((decibels - self.min_decibels) * scale, 0.0, 255.0)

    def update(self, pcm: bytes) -> float:
        """Feed one chunk and return the new level in [0, 1]."""
        data = self.byte_frequency_data(pcm)
        if data.size == 0:
            return self.level
        self.level = min(float(np.floor(data).mean()) / self.divisor, 1.0)
        return self.level

    def reset(self) -> None:
        self.level = 0.0
        self._previous = None
