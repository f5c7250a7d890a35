"""Speech bridge: audio to text and text to audio."""

import time
import logging
from typing import Optional

from .base import AbstractTranscriptionBackend, AbstractSynthesisBackend
from .cache import SpeechCache
from ..errors import TranscriptionError, SynthesisError
from ..models.audio import AudioEncoding
from ..utils.debug import DebugLog, debug_log

logger = logging.getLogger(__name__)


class SpeechBridge:
    """Pairs one transcription backend and one synthesis backend.

    Synthesized clips are cached by key. The key defaults to the text, but
    callers may pass their own so that, for instance, an English gloss that
    happens to match an earlier Danish sentence is synthesized separately.
    """

    def __init__(self,
                 transcriber: AbstractTranscriptionBackend,
                 synthesizer: AbstractSynthesisBackend,
                 cache: Optional[SpeechCache] = None,
                 debug: Optional[DebugLog] = None):
        self.transcriber = transcriber
        self.synthesizer = synthesizer
        self.cache = cache if cache is not None else SpeechCache()
        self.debug = debug or debug_log

    async def transcribe(self, audio: bytes,
                         encoding: AudioEncoding = AudioEncoding.WEBM_OPUS,
                         sample_rate: int = 16000) -> str:
        """Transcribe recorded audio to Danish text.

        Returns:
            The top transcript of every segment joined by single spaces, or ""
            when nothing was recognized

        Raises:
            TranscriptionError: If the backend call fails
        """
        start = time.monotonic()
        try:
            result = await self.transcriber.transcribe(audio, encoding=encoding, sample_rate=sample_rate)
        except TranscriptionError:
            raise
        except Exception as e:
            raise TranscriptionError(f"{self.transcriber.service_name} failed: {e}") from e

        self.debug.transcription("Transcription received",
                                 {"text": result.text, "segments": len(result.segments)})
        self.debug.timing(start, "Transcription")
        return result.text

    async def synthesize(self, text: str, cache_key: Optional[str] = None) -> bytes:
        """Synthesize ``text``, reusing the cached clip for ``cache_key`` if present.

        Raises:
            SynthesisError: If the backend call fails or returns no audio
        """
        key = cache_key or text
        cached = self.cache.get(key)
        if cached is not None:
            self.debug.speech("Speech cache hit", {"key": key})
            return cached

        start = time.monotonic()
        try:
            audio = await self.synthesizer.synthesize(text)
        except SynthesisError:
            raise
        except Exception as e:
            raise SynthesisError(f"{self.synthesizer.service_name} failed: {e}") from e
        if not audio:
            raise SynthesisError("No audio content received from Text-to-Speech API")

        self.cache.put(key, audio)
        self.debug.speech("Speech synthesized", {"key": key, "bytes": len(audio)})
        self.debug.timing(start, "Synthesis")
        return audio

    def clear_cache(self) -> None:
        """Drop every cached clip. Requests already in flight are unaffected."""
        self.cache.clear()
        logger.info("Speech cache cleared")

    def cleanup(self) -> None:
        self.transcriber.cleanup()
        self.synthesizer.cleanup()
