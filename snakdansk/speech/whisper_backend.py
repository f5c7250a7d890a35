"""OpenAI Whisper transcription backend."""

import io
import time
import wave
import logging
from datetime import datetime

import aiohttp

from .base import AbstractTranscriptionBackend
from ..errors import TranscriptionError
from ..models.audio import AudioEncoding
from ..models.transcription import TranscriptionResult

logger = logging.getLogger(__name__)


def pcm_to_wav(pcm: bytes, sample_rate: int, channels: int = 1) -> bytes:
    """Wrap raw 16-bit PCM in a WAV container."""
    buffer = io.BytesIO()
    with wave.open(buffer, 'wb') as wf:
        wf.setnchannels(channels)
        wf.setsampwidth(2)
        wf.setframerate(sample_rate)
        wf.writeframes(pcm)
    return buffer.getvalue()


class WhisperTranscriptionBackend(AbstractTranscriptionBackend):
    """Transcribes through the OpenAI audio transcription endpoint."""

    service_name = "OpenAI Whisper"

    def __init__(self, api_key: str, model: str = "whisper-1",
                 language: str = "da-DK", base_url: str = "https://api.openai.com/v1"):
        super().__init__(language)
        self.api_key = api_key
        self.model = model
        self.url = f"{base_url.rstrip('/')}/audio/transcriptions"

    def initialize(self) -> bool:
        if not self.api_key:
            raise ValueError("OpenAI API key is required for Whisper transcription")
        logger.info(f"Whisper backend initialized with model: {self.model}")
        return True

    async def transcribe(self, audio: bytes,
                         encoding: AudioEncoding = AudioEncoding.WEBM_OPUS,
                         sample_rate: int = 16000) -> TranscriptionResult:
        start_time = time.time()
        if encoding == AudioEncoding.LINEAR16:
            payload, filename, content_type = pcm_to_wav(audio, sample_rate), "audio.wav", "audio/wav"
        else:
            payload, filename, content_type = audio, "audio.webm", "audio/webm"

        form = aiohttp.FormData()
        form.add_field("file", payload, filename=filename, content_type=content_type)
        form.add_field("model", self.model)
        # Whisper takes ISO-639-1, not a locale
        form.add_field("language", self.language.split("-")[0].lower())

        headers = {"Authorization": f"Bearer {self.api_key}"}
        try:
            async with aiohttp.ClientSession() as session:
                async with session.post(self.url, headers=headers, data=form) as response:
                    if response.status != 200:
                        error_text = await response.text()
                        raise TranscriptionError(f"Whisper API error: {response.status} - {error_text}")
                    result = await response.json()
        except aiohttp.ClientError as e:
            raise TranscriptionError(f"Whisper request failed: {e}") from e

        text = (result.get("text") or "").strip()
        return TranscriptionResult(
            text=text,
            processing_time=time.time() - start_time,
            timestamp=datetime.now(),
            service=self.service_name,
            language=self.language,
            segments=[text] if text else [],
        )
