"""Microphone capture with scoped device acquisition and live level metering."""

import time
import logging
from datetime import datetime
from threading import Thread, Event, Lock
from typing import Optional, Callable, List

import pyaudio

from ..errors import UserMediaError
from ..models.audio import AudioStats
from ..models.events import AudioEvent
from .level import AudioLevelMeter

logger = logging.getLogger(__name__)


class AudioCapture:
    """Records one utterance at a time from the default input device.

    The PyAudio instance and input stream exist only between
    ``start_recording()`` and ``stop_recording()``; they are released on stop,
    on a read error, and when opening the device fails.
    """

    def __init__(
        self,
        callback: Optional[Callable[[AudioEvent], None]] = None,
        sample_rate: int = 16000,
        chunk_size: int = 1024,
        channels: int = 1,
        format: int = pyaudio.paInt16,
        level_meter: Optional[AudioLevelMeter] = None,
        input_device_index: Optional[int] = None,
    ):
        """Initialize audio capture with specified parameters.

        Args:
            callback: Receives an AudioEvent for every captured chunk
            sample_rate: Audio sample rate (16kHz matches the transcription config)
            chunk_size: Size of each audio chunk in samples, also the level cadence
            channels: Number of audio channels (1 for mono)
            format: Audio format (16-bit signed int)
            level_meter: Meter updated once per chunk
            input_device_index: PyAudio input device, None for the default
        """
        self.audio_event_callback = callback
        self.sample_rate = sample_rate
        self.chunk_size = chunk_size
        self.channels = channels
        self.format = format
        self.input_device_index = input_device_index
        self.level_meter = level_meter or AudioLevelMeter()

        self.recording_thread: Optional[Thread] = None
        self.stop_event = Event()
        self.is_recording = False

        self.start_time: Optional[datetime] = None
        self.total_chunks = 0
        self.peak_level = 0.0

        self._frames: List[bytes] = []
        self._frames_lock = Lock()
        self._release_lock = Lock()
        self.pyaudio_instance: Optional[pyaudio.PyAudio] = None
        self.stream = None

    @property
    def level(self) -> float:
        return self.level_meter.level if self.is_recording else 0.0

    def start_recording(self) -> None:
        """Open the microphone and start recording in a background thread.

        Raises:
            UserMediaError: If the input device cannot be opened
        """
        if self.is_recording:
            logger.warning("Recording already in progress")
            return

        logger.info("Starting audio recording")
        self.__open_audio_stream()

        self.stop_event.clear()
        self.start_time = datetime.now()
        self.total_chunks = 0
        self.peak_level = 0.0
        self.level_meter.reset()
        with self._frames_lock:
            self._frames = []

        self.recording_thread = Thread(target=self._record_continuously, daemon=True)
        self.recording_thread.name = "AudioCaptureThread"
        self.is_recording = True
        self.recording_thread.start()

    def stop_recording(self) -> bytes:
        """Stop recording, release the device and return the captured PCM."""
        if not self.is_recording:
            logger.warning("No recording in progress")
            return b""

        logger.info("Stopping audio recording")
        self.stop_event.set()

        if self.recording_thread and self.recording_thread.is_alive():
            self.recording_thread.join(timeout=2.0)
            if self.recording_thread.is_alive():
                logger.warning("Recording thread did not stop cleanly")

        # the thread normally releases on exit; this covers a thread that never ran
        self.__release()
        self.is_recording = False
        self.level_meter.reset()

        with self._frames_lock:
            audio = b"".join(self._frames)
            self._frames = []
        logger.info(f"Recording stopped. Total chunks: {self.total_chunks}, bytes: {len(audio)}")
        return audio

    def close(self) -> None:
        """Stop any recording in progress and drop the captured audio."""
        if self.is_recording:
            self.stop_recording()
        self.__release()

    def __enter__(self) -> "AudioCapture":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def __open_audio_stream(self) -> None:
        try:
            self.pyaudio_instance = pyaudio.PyAudio()
            self.stream = self.pyaudio_instance.open(
                format=self.format,
                channels=self.channels,
                rate=self.sample_rate,
                input=True,
                frames_per_buffer=self.chunk_size,
                input_device_index=self.input_device_index,
            )
        except (OSError, IOError) as e:
            self.__release()
            raise UserMediaError(f"Could not open microphone: {e}") from e
        logger.info(f"Audio stream opened: {self.sample_rate}Hz, "
                    f"{self.chunk_size} samples/chunk")

    def __release(self) -> None:
        with self._release_lock:
            stream, self.stream = self.stream, None
            instance, self.pyaudio_instance = self.pyaudio_instance, None
        if stream is not None:
            try:
                stream.stop_stream()
                stream.close()
            except OSError as e:
                logger.warning(f"Error closing input stream: {e}")
        if instance is not None:
            instance.terminate()

    def __read_audio_chunk(self) -> bytes:
        audio_chunk = self.stream.read(self.chunk_size, exception_on_overflow=False)
        self.total_chunks += 1
        with self._frames_lock:
            self._frames.append(audio_chunk)
        return audio_chunk

    def __publish_audio_event(self, audio_chunk: bytes, level: float) -> None:
        if self.audio_event_callback is None:
            return
        self.audio_event_callback(AudioEvent(
            chunk_id=f"chunk_{self.total_chunks}",
            audio_data=audio_chunk,
            timestamp=time.time(),
            sequence_number=self.total_chunks,
            level=level,
            sample_rate=self.sample_rate,
            channels=self.channels,
        ))

    def _record_continuously(self) -> None:
        """Internal method: continuous recording loop in background thread."""
        try:
            while not self.stop_event.is_set():
                audio_chunk = self.__read_audio_chunk()
                level = self.level_meter.update(audio_chunk)
                self.peak_level = max(self.peak_level, level)
                self.__publish_audio_event(audio_chunk, level)
        except OSError as e:
            logger.error(f"Audio read failed, ending capture: {e}")
        finally:
            self.__release()

    def get_recording_stats(self) -> AudioStats:
        """Get current recording statistics."""
        duration = 0.0
        if self.start_time:
            duration = (datetime.now() - self.start_time).total_seconds()

        with self._frames_lock:
            total_bytes = sum(len(frame) for frame in self._frames)

        return AudioStats(
            is_recording=self.is_recording,
            duration_seconds=duration,
            sample_rate=self.sample_rate,
            chunk_size=self.chunk_size,
            total_chunks=self.total_chunks,
            total_bytes=total_bytes,
            level=self.level,
            peak_level=self.peak_level,
        )
