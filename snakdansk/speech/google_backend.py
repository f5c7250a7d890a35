"""Google Speech-to-Text transcription backend."""

import asyncio
import time
import logging
from datetime import datetime
from typing import Optional

from google.cloud import speech
from google.api_core import exceptions as gax_exceptions
from google.oauth2 import service_account

from .base import AbstractTranscriptionBackend
from ..errors import TranscriptionError
from ..models.audio import AudioEncoding
from ..models.transcription import TranscriptionResult

logger = logging.getLogger(__name__)


class GoogleSpeechBackend(AbstractTranscriptionBackend):
    """Google Speech-to-Text API backend for transcription."""

    service_name = "Google Speech-to-Text"

    def __init__(self,
                 credentials: Optional[service_account.Credentials] = None,
                 language: str = "da-DK",
                 model: str = "latest_long"):
        """Initialize Google Speech backend.

        Args:
            credentials: Service account credentials; None uses application default credentials
            language: Language code (e.g., 'da-DK')
            model: Recognition model, 'latest_long' handles utterances of any length
        """
        super().__init__(language)
        self.credentials = credentials
        self.model = model
        self.client: Optional[speech.SpeechClient] = None

    def initialize(self) -> bool:
        """Create the Speech client."""
        self.client = speech.SpeechClient(credentials=self.credentials)
        project_id = getattr(self.credentials, "project_id", None)
        logger.info(f"Google Speech-to-Text backend initialized (project: {project_id})")
        return True

    def build_config(self, encoding: AudioEncoding, sample_rate: int) -> speech.RecognitionConfig:
        return speech.RecognitionConfig(
            encoding=speech.RecognitionConfig.AudioEncoding[encoding.value],
            sample_rate_hertz=sample_rate,
            language_code=self.language,
            model=self.model,
        )

    async def transcribe(self, audio: bytes,
                         encoding: AudioEncoding = AudioEncoding.WEBM_OPUS,
                         sample_rate: int = 16000) -> TranscriptionResult:
        """Transcribe audio using Google Speech-to-Text."""
        if self.client is None:
            raise TranscriptionError("Google Speech backend is not initialized")

        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self._recognize, audio, encoding, sample_rate)

    def _recognize(self, audio: bytes, encoding: AudioEncoding, sample_rate: int) -> TranscriptionResult:
        start_time = time.time()
        logger.debug(f"Audio size: {len(audio)} bytes; encoding: {encoding.value}; "
                     f"sample rate: {sample_rate}; language: {self.language}")

        config = self.build_config(encoding, sample_rate)
        try:
            response = self.client.recognize(
                config=config,
                audio=speech.RecognitionAudio(content=audio),
            )
        except gax_exceptions.ServiceUnavailable as e:
            logger.error("Google STT service unavailable")
            raise TranscriptionError(f"Google Speech service unavailable: {e}") from e
        except gax_exceptions.GoogleAPICallError as e:
            logger.error("Google STT API call error: %s", e)
            raise TranscriptionError(f"Google Speech API error: {e}") from e
        processing_time = time.time() - start_time

        segments = [
            result.alternatives[0].transcript
            for result in response.results
            if result.alternatives
        ]
        confidences = [
            result.alternatives[0].confidence
            for result in response.results
            if result.alternatives
        ]
        if not segments:
            logger.debug("--- NO SPEECH DETECTED ---")
        else:
            logger.debug(f"Transcribed {len(segments)} segment(s) in {processing_time:.3f}s")

        return TranscriptionResult(
            text=" ".join(segments),
            processing_time=processing_time,
            timestamp=datetime.now(),
            service=self.service_name,
            language=self.language,
            segments=segments,
            confidence=min(confidences) if confidences else None,
        )
