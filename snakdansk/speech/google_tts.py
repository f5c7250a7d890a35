"""Google Text-to-Speech synthesis backend."""

import asyncio
import logging
from typing import Optional

from google.cloud import texttospeech
from google.api_core import exceptions as gax_exceptions
from google.oauth2 import service_account

from .base import AbstractSynthesisBackend
from ..errors import SynthesisError

logger = logging.getLogger(__name__)


class GoogleTextToSpeechBackend(AbstractSynthesisBackend):
    """Danish Neural2 voice, MP3 output."""

    service_name = "Google Text-to-Speech"

    def __init__(self,
                 credentials: Optional[service_account.Credentials] = None,
                 language: str = "da-DK",
                 voice: str = "da-DK-Neural2-D",
                 pitch: float = 0.0,
                 speaking_rate: float = 1.0):
        self.credentials = credentials
        self.voice = texttospeech.VoiceSelectionParams(language_code=language, name=voice)
        self.audio_config = texttospeech.AudioConfig(
            audio_encoding=texttospeech.AudioEncoding.MP3,
            pitch=pitch,
            speaking_rate=speaking_rate,
        )
        self.client: Optional[texttospeech.TextToSpeechClient] = None

    def initialize(self) -> bool:
        self.client = texttospeech.TextToSpeechClient(credentials=self.credentials)
        logger.info(f"Google Text-to-Speech backend initialized (voice: {self.voice.name})")
        return True

    async def synthesize(self, text: str) -> bytes:
        if self.client is None:
            raise SynthesisError("Google Text-to-Speech backend is not initialized")

        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self._synthesize, text)

    def _synthesize(self, text: str) -> bytes:
        try:
            response = self.client.synthesize_speech(
                input=texttospeech.SynthesisInput(text=text),
                voice=self.voice,
                audio_config=self.audio_config,
            )
        except gax_exceptions.GoogleAPICallError as e:
            logger.error("Google TTS API call error: %s", e)
            raise SynthesisError(f"Google Text-to-Speech API error: {e}") from e

        if not response.audio_content:
            raise SynthesisError("No audio content received from Text-to-Speech API")

        logger.debug(f"Synthesized {len(text)} chars -> {len(response.audio_content)} bytes")
        return bytes(response.audio_content)
