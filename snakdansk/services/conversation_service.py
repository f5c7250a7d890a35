"""Builds the speech, chat and orchestration components from configuration."""

import logging
from typing import Optional

from ..audio.capture import AudioCapture
from ..audio.level import AudioLevelMeter
from ..audio.playback import AudioPlayer
from ..chat import ChatCompletionAdapter, ChatCompletionEngine, HttpChatClient
from ..config import SnakDanskConfig
from ..models.audio import AudioEncoding
from ..models.topics import get_topic
from ..speech import (
    AbstractTranscriptionBackend,
    GoogleSpeechBackend,
    GoogleTextToSpeechBackend,
    SpeechBridge,
    SpeechCache,
    WhisperTranscriptionBackend,
)
from ..speech.credentials import load_google_credentials
from ..utils.debug import debug_log
from .publisher import TurnPublisher
from .turn_orchestrator import TurnOrchestrator

logger = logging.getLogger(__name__)


class ConversationService:
    """Creates and owns the service objects one process needs."""

    def __init__(self, config: SnakDanskConfig):
        """Initialize conversation service.

        Args:
            config: Application configuration
        """
        self.config = config
        self._credentials = None
        self._speech_bridge: Optional[SpeechBridge] = None
        self._chat_adapter: Optional[ChatCompletionAdapter] = None

    def _google_credentials(self):
        if self._credentials is None:
            self._credentials = load_google_credentials(self.config)
        return self._credentials

    def _create_transcription_backend(self) -> AbstractTranscriptionBackend:
        backend_name = self.config.get('transcription.backend', 'google')
        language = self.config.get('transcription.language', 'da-DK')

        logger.info(f"Initializing {backend_name} transcription backend...")
        if backend_name == 'google':
            backend = GoogleSpeechBackend(
                credentials=self._google_credentials(),
                language=language,
                model=self.config.get('transcription.model', 'latest_long'),
            )
        elif backend_name == 'whisper':
            backend = WhisperTranscriptionBackend(
                api_key=self.config.get_openai_api_key(),
                model=self.config.get('openai.transcription_model', 'whisper-1'),
                language=language,
                base_url=self.config.get('openai.base_url', 'https://api.openai.com/v1'),
            )
        else:
            raise ValueError(f"Unknown transcription backend: {backend_name}")

        if not backend.initialize():
            raise RuntimeError(f"{backend.service_name} backend failed to initialize")
        return backend

    def _create_synthesis_backend(self) -> GoogleTextToSpeechBackend:
        backend = GoogleTextToSpeechBackend(
            credentials=self._google_credentials(),
            language=self.config.get('speech.language', 'da-DK'),
            voice=self.config.get('speech.voice', 'da-DK-Neural2-D'),
            pitch=self.config.get('speech.pitch', 0.0),
            speaking_rate=self.config.get('speech.speaking_rate', 1.0),
        )
        if not backend.initialize():
            raise RuntimeError("Google Text-to-Speech backend failed to initialize")
        return backend

    def get_speech_bridge(self) -> SpeechBridge:
        if self._speech_bridge is None:
            cache = SpeechCache(
                capacity=self.config.get('speech.cache_capacity', 256),
                ttl_seconds=self.config.get('speech.cache_ttl_seconds'),
            )
            self._speech_bridge = SpeechBridge(
                transcriber=self._create_transcription_backend(),
                synthesizer=self._create_synthesis_backend(),
                cache=cache,
                debug=debug_log,
            )
            logger.info("✅ Speech bridge ready")
        return self._speech_bridge

    def get_chat_adapter(self) -> ChatCompletionAdapter:
        if self._chat_adapter is None:
            engine = ChatCompletionEngine(
                api_key=self.config.get_openai_api_key(),
                model=self.config.get('openai.chat_model', 'gpt-4o-mini'),
                base_url=self.config.get('openai.base_url', 'https://api.openai.com/v1'),
            )
            self._chat_adapter = ChatCompletionAdapter(
                engine,
                temperature=self.config.get('chat.temperature', 0.7),
                max_tokens=self.config.get('chat.max_tokens', 500),
                structured_replies=self.config.get('chat.structured_replies', True),
                debug=debug_log,
            )
        return self._chat_adapter

    def create_orchestrator(self, topic_id: str, remote_url: Optional[str] = None) -> TurnOrchestrator:
        """Wire a turn orchestrator for the terminal client.

        Args:
            topic_id: Topic catalog id, e.g. 'weather'
            remote_url: Base URL of a SnakDansk server to chat through instead of calling the model directly
        """
        topic = get_topic(topic_id)
        chat_client = HttpChatClient(remote_url) if remote_url else self.get_chat_adapter()

        publisher = TurnPublisher()
        sample_rate = self.config.get('audio.sample_rate', 16000)
        capture = AudioCapture(
            callback=publisher.publish_audio_frame,
            sample_rate=sample_rate,
            chunk_size=self.config.get('audio.chunk_size', 1024),
            channels=self.config.get('audio.channels', 1),
            level_meter=AudioLevelMeter(divisor=self.config.get('audio.level_divisor', 128.0)),
        )

        return TurnOrchestrator(
            topic=topic.describe(),
            speech_bridge=self.get_speech_bridge(),
            chat_client=chat_client,
            capture=capture,
            player=AudioPlayer(),
            publisher=publisher,
            debug=debug_log,
            translation_pause=self.config.get('speech.translation_pause_seconds', 1.0),
            encoding=AudioEncoding.LINEAR16,
            sample_rate=sample_rate,
        )

    def shutdown(self) -> None:
        if self._speech_bridge is not None:
            self._speech_bridge.cleanup()
        logger.info("Conversation service shut down")
