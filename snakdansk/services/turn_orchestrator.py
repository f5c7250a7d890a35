"""Drives one conversational turn: record, transcribe, chat, speak."""

import asyncio
import time
import logging
from typing import List, Optional

from ..errors import (
    ChatError,
    PlaybackError,
    SnakDanskError,
    SynthesisError,
    TranscriptionError,
    UserMediaError,
)
from ..models.audio import AudioEncoding
from ..models.conversation import (
    ChatExchange,
    Message,
    ProcessingState,
    TurnMetrics,
    TurnPhase,
)
from ..models.results import ErrorKind, TurnResult
from ..speech.bridge import SpeechBridge
from ..utils.debug import DebugLog, debug_log
from .publisher import TurnPublisher

logger = logging.getLogger(__name__)

TRANSLATION_CACHE_PREFIX = "en_"


class TurnOrchestrator:
    """Owns the recording toggle, the turn pipeline and the session's message log.

    Only one turn runs at a time: ``toggle_recording()`` is rejected while a
    turn is transcribing, thinking or speaking. All state is mutated from the
    event loop the coroutines run on; blocking capture and playback calls are
    pushed to the default executor.
    """

    def __init__(self,
                 topic: str,
                 speech_bridge: SpeechBridge,
                 chat_client,
                 capture=None,
                 player=None,
                 publisher: Optional[TurnPublisher] = None,
                 debug: Optional[DebugLog] = None,
                 translation_pause: float = 1.0,
                 encoding: AudioEncoding = AudioEncoding.LINEAR16,
                 sample_rate: int = 16000):
        """Initialize the orchestrator.

        Args:
            topic: Conversation topic embedded in the chat prompt
            speech_bridge: Transcription and synthesis
            chat_client: Anything with ``async complete(utterance, topic) -> ChatReply``
            capture: Microphone source with start_recording/stop_recording/level/close
            player: Clip player with a blocking play(audio) and stop()
            publisher: Receives state, message and error events
            debug: Diagnostic channels
            translation_pause: Seconds between the Danish clip and the English one
            encoding: Encoding of the audio handed over by ``capture``
            sample_rate: Sample rate of that audio
        """
        self.topic = topic
        self.bridge = speech_bridge
        self.chat = chat_client
        self.capture = capture
        self.player = player
        self.publisher = publisher or TurnPublisher()
        self.debug = debug or debug_log
        self.translation_pause = translation_pause
        self.encoding = encoding
        self.sample_rate = sample_rate

        self.messages: List[Message] = []
        self.state = ProcessingState()
        self.is_recording = False
        self.metrics = TurnMetrics()
        self._closed = False
        self._stopping = False

    @property
    def phase(self) -> TurnPhase:
        if self.state.speaking:
            return TurnPhase.SPEAKING
        if self.state.thinking:
            return TurnPhase.THINKING
        if self.state.transcribing:
            return TurnPhase.TRANSCRIBING
        if self.is_recording:
            return TurnPhase.RECORDING
        return TurnPhase.IDLE

    @property
    def audio_level(self) -> float:
        if not self.is_recording or self.capture is None:
            return 0.0
        return self.capture.level

    def can_record(self) -> bool:
        return not self.state.busy and not self._stopping and not self._closed

    async def toggle_recording(self) -> TurnResult:
        """Start recording when idle; when recording, stop and run the turn."""
        if self.is_recording:
            return await self._finish_recording()

        if self._stopping:
            logger.info("Recording toggle ignored while the capture is stopping")
            return TurnResult.rejected("Still stopping the previous recording")
        if not self.can_record():
            logger.info(f"Recording toggle ignored while {self.phase.value}")
            return TurnResult.rejected(f"Cannot start recording while {self.phase.value}")
        if self.capture is None:
            return self._fail(ErrorKind.USER_MEDIA, UserMediaError("No microphone configured"),
                              "Failed to get audio stream")

        self.metrics = TurnMetrics(recording_start=time.monotonic())
        try:
            self.capture.start_recording()
        except UserMediaError as e:
            return self._fail(ErrorKind.USER_MEDIA, e, "Failed to get audio stream")

        self.is_recording = True
        self._publish_state()
        logger.info("Recording started")
        return TurnResult.completed()

    async def _finish_recording(self) -> TurnResult:
        self.is_recording = False
        self._stopping = True
        self._publish_state()
        loop = asyncio.get_running_loop()
        try:
            audio = await loop.run_in_executor(None, self.capture.stop_recording)
        finally:
            self._stopping = False
        self.debug.timing(self.metrics.recording_start, "Recording")
        return await self.on_recording_stopped(audio)

    async def on_recording_stopped(self, audio: Optional[bytes]) -> TurnResult:
        """Transcribe a finished recording and, if anything was said, send it."""
        if not audio:
            logger.debug("Recording stopped with no audio")
            return TurnResult.skipped("No audio recorded")

        self.metrics.transcription_start = time.monotonic()
        self._set_flags(transcribing=True)
        try:
            text = await self.bridge.transcribe(audio, encoding=self.encoding, sample_rate=self.sample_rate)
        except TranscriptionError as e:
            return self._fail(ErrorKind.TRANSCRIPTION, e, "Transcription failed")
        finally:
            self._set_flags(transcribing=False)
        self.debug.timing(self.metrics.transcription_start, "Transcription")

        text = text.strip()
        if not text:
            logger.info("Nothing recognized in recording")
            return TurnResult.skipped("No speech recognized", transcript="")

        self.debug.transcription("Transcription received", {"text": text})
        return await self.send_turn(text)

    async def send_turn(self, text: str) -> TurnResult:
        """Send one utterance to the chat service, log the exchange and speak the reply."""
        self.metrics.chat_start = time.monotonic()
        self.debug.chat("Sending message", {"content": text, "topic": self.topic})
        self._set_flags(thinking=True)
        try:
            reply = await self.chat.complete(text, self.topic)
        except ChatError as e:
            return self._fail(ErrorKind.CHAT, e, "Chat API call failed", transcript=text)
        finally:
            self._set_flags(thinking=False)

        self.metrics.response_start = time.monotonic()
        self.debug.timing(self.metrics.chat_start, "Chat round trip")

        new_messages = ChatExchange(utterance=text, reply=reply).to_messages()
        self.messages.extend(new_messages)
        self.publisher.publish_messages(new_messages)

        if reply.danish:
            spoken = await self.speak(reply.danish, reply.english or None)
            if not spoken.ok:
                return TurnResult.failed(spoken.error_kind, spoken.error,
                                         transcript=text, messages=new_messages)
        return TurnResult.completed(transcript=text, messages=new_messages)

    async def speak(self, text: str, translation: Optional[str] = None) -> TurnResult:
        """Play ``text``, pause, then play ``translation``; strictly one clip at a time."""
        self._set_flags(speaking=True)
        try:
            audio = await self.bridge.synthesize(text)
            await self._play(audio)

            if translation and not self._closed:
                await asyncio.sleep(self.translation_pause)
                translation_audio = await self.bridge.synthesize(
                    translation, cache_key=f"{TRANSLATION_CACHE_PREFIX}{translation}"
                )
                await self._play(translation_audio)
        except SynthesisError as e:
            return self._fail(ErrorKind.SYNTHESIS, e, "Speech synthesis failed")
        except PlaybackError as e:
            return self._fail(ErrorKind.PLAYBACK, e, "Speech playback failed")
        finally:
            self._set_flags(speaking=False)

        self.debug.timing(self.metrics.response_start or time.monotonic(), "Reply spoken")
        return TurnResult.completed()

    async def _play(self, audio: bytes) -> None:
        if self.player is None or self._closed:
            return
        loop = asyncio.get_running_loop()
        await loop.run_in_executor(None, self.player.play, audio)

    def reset(self) -> None:
        """Start a fresh session: drop the message log."""
        self.messages.clear()
        logger.info("Session reset")

    def close(self) -> None:
        """Release the microphone and stop playback."""
        self._closed = True
        if self.player is not None:
            self.player.stop()
        if self.capture is not None:
            self.capture.close()
        self.is_recording = False
        logger.info("Turn orchestrator closed")

    def _set_flags(self, **flags: bool) -> None:
        for name, value in flags.items():
            setattr(self.state, name, value)
        self._publish_state()

    def _publish_state(self) -> None:
        self.publisher.publish_state(self.phase, self.state.snapshot())

    def _fail(self, kind: ErrorKind, error: SnakDanskError, context: str,
              transcript: Optional[str] = None) -> TurnResult:
        self.debug.error(error, context)
        logger.warning(f"{context}: {error}")
        result = TurnResult.failed(kind, str(error), transcript=transcript)
        self.publisher.publish_error(result)
        return result
