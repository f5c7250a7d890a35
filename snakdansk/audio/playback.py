"""Speaker playback for synthesized MP3 clips."""

import io
import logging
from threading import Event
from typing import Optional

import pyaudio
import soundfile as sf

from ..errors import PlaybackError

logger = logging.getLogger(__name__)


class AudioPlayer:
    """Decode an encoded clip and play it to completion on the output device.

    ``play()`` blocks until the last frame has been written and the stream
    has drained, so callers run it in an executor and await it. The output
    device is opened per clip and released before ``play()`` returns.
    """

    def __init__(self, frames_per_buffer: int = 2048,
                 output_device_index: Optional[int] = None):
        self.frames_per_buffer = frames_per_buffer
        self.output_device_index = output_device_index
        self._abort = Event()
        self.is_playing = False

    def decode(self, audio: bytes):
        """Decode MP3 (or any libsndfile format) into int16 frames."""
        if not audio:
            raise PlaybackError("No audio content to play")
        try:
            data, sample_rate = sf.read(io.BytesIO(audio), dtype="int16", always_2d=True)
        except RuntimeError as e:
            raise PlaybackError(f"Could not decode audio: {e}") from e
        return data, sample_rate

    def play(self, audio: bytes) -> None:
        """Play one clip and return when it has finished (or was stopped)."""
        data, sample_rate = self.decode(audio)
        channels = data.shape[1]
        self._abort.clear()

        pa = pyaudio.PyAudio()
        stream = None
        self.is_playing = True
        try:
            stream = pa.open(
                format=pyaudio.paInt16,
                channels=channels,
                rate=sample_rate,
                output=True,
                frames_per_buffer=self.frames_per_buffer,
                output_device_index=self.output_device_index,
            )
            logger.debug(f"Playing {len(data)} frames at {sample_rate}Hz, {channels} channel(s)")
            for start in range(0, len(data), self.frames_per_buffer):
                if self._abort.is_set():
                    logger.info("Playback stopped before end of clip")
                    break
                stream.write(data[start:start + self.frames_per_buffer].tobytes())
        except OSError as e:
            raise PlaybackError(f"Audio output failed: {e}") from e
        finally:
            self.is_playing = False
            if stream is not None:
                stream.stop_stream()
                stream.close()
            pa.terminate()

    def stop(self) -> None:
        """Abort the clip currently playing, if any."""
        self._abort.set()
