"""Pytest configuration and fixtures for SnakDansk tests."""

import os
import time
import logging
import tempfile
from datetime import datetime
from types import SimpleNamespace
from unittest.mock import Mock, patch

import numpy as np
import pytest

from snakdansk.models.audio import AudioEncoding
from snakdansk.models.conversation import ChatReply
from snakdansk.models.transcription import TranscriptionResult
from snakdansk.services.publisher import TurnPublisher
from snakdansk.services.turn_orchestrator import TurnOrchestrator
from snakdansk.speech.base import AbstractSynthesisBackend, AbstractTranscriptionBackend
from snakdansk.speech.bridge import SpeechBridge
from snakdansk.speech.cache import SpeechCache
from snakdansk.utils.debug import DebugLog


# Configure logging for tests
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def pytest_configure(config):
    config.addinivalue_line("markers", "unit: fast tests without external services")
    config.addinivalue_line("markers", "integration: multi-component tests with fake backends")
    config.addinivalue_line("markers", "hardware: tests that need a real microphone and speaker")
    config.addinivalue_line("markers", "slow: tests that take more than a second")


def pytest_collection_modifyitems(config, items):
    if os.environ.get("SNAKDANSK_HARDWARE_TESTS") == "1":
        return
    skip_hardware = pytest.mark.skip(reason="set SNAKDANSK_HARDWARE_TESTS=1 to run hardware tests")
    for item in items:
        if "hardware" in item.keywords:
            item.add_marker(skip_hardware)


class FakeTranscriber(AbstractTranscriptionBackend):
    """Returns canned text, or raises ``error``."""

    service_name = "fake-stt"

    def __init__(self, text: str = "Hvordan er vejret i dag", error: Exception = None):
        super().__init__()
        self.text = text
        self.error = error
        self.calls = []
        self.cleaned_up = False

    def initialize(self) -> bool:
        return True

    async def transcribe(self, audio, encoding=AudioEncoding.WEBM_OPUS, sample_rate=16000):
        self.calls.append((audio, encoding, sample_rate))
        if self.error is not None:
            raise self.error
        return TranscriptionResult(
            text=self.text,
            processing_time=0.0,
            timestamp=datetime.now(),
            service=self.service_name,
            segments=[self.text] if self.text else [],
        )

    def cleanup(self) -> None:
        self.cleaned_up = True


class FakeSynthesizer(AbstractSynthesisBackend):
    """Returns ``b"mp3:" + text`` so every clip is traceable to its text."""

    service_name = "fake-tts"

    def __init__(self, error: Exception = None, empty: bool = False):
        self.error = error
        self.empty = empty
        self.calls = []

    def initialize(self) -> bool:
        return True

    async def synthesize(self, text):
        self.calls.append(text)
        if self.error is not None:
            raise self.error
        if self.empty:
            return b""
        return f"mp3:{text}".encode("utf-8")


class FakeChat:
    """Stands in for ChatCompletionAdapter / HttpChatClient."""

    def __init__(self, reply: ChatReply = None, error: Exception = None):
        self.reply = reply or ChatReply(danish="Det er solrigt i dag", english="It is sunny today")
        self.error = error
        self.calls = []

    async def complete(self, utterance, topic):
        self.calls.append((utterance, topic))
        if self.error is not None:
            raise self.error
        return self.reply


class FakePlayer:
    """Records (audio, start, end) for each clip; ``duration`` simulates clip length."""

    def __init__(self, duration: float = 0.0, error: Exception = None):
        self.duration = duration
        self.error = error
        self.played = []
        self.stopped = False

    def play(self, audio):
        start = time.monotonic()
        if self.error is not None:
            raise self.error
        time.sleep(self.duration)
        self.played.append((audio, start, time.monotonic()))

    def stop(self):
        self.stopped = True


class FakeCapture:
    """Microphone double with the AudioCapture surface the orchestrator uses."""

    def __init__(self, audio: bytes = b"\x01\x00" * 1600, start_error: Exception = None):
        self.audio = audio
        self.start_error = start_error
        self.is_recording = False
        self.level = 0.42
        self.starts = 0
        self.closed = False

    def start_recording(self):
        if self.start_error is not None:
            raise self.start_error
        self.starts += 1
        self.is_recording = True

    def stop_recording(self):
        self.is_recording = False
        return self.audio

    def close(self):
        self.closed = True
        self.is_recording = False


@pytest.fixture
def fakes():
    """The fake collaborator classes, for tests that need custom instances."""
    return SimpleNamespace(
        Transcriber=FakeTranscriber,
        Synthesizer=FakeSynthesizer,
        Chat=FakeChat,
        Player=FakePlayer,
        Capture=FakeCapture,
    )


@pytest.fixture
def fake_transcriber():
    return FakeTranscriber()


@pytest.fixture
def fake_synthesizer():
    return FakeSynthesizer()


@pytest.fixture
def fake_chat():
    return FakeChat()


@pytest.fixture
def fake_player():
    return FakePlayer()


@pytest.fixture
def fake_capture():
    return FakeCapture()


@pytest.fixture
def speech_bridge(fake_transcriber, fake_synthesizer):
    return SpeechBridge(fake_transcriber, fake_synthesizer, cache=SpeechCache(capacity=16))


@pytest.fixture
def mock_publisher():
    """Publisher double; keeps pub/sub out of orchestrator unit tests."""
    return Mock(spec=TurnPublisher)


@pytest.fixture
def make_orchestrator(speech_bridge, fake_chat, fake_capture, fake_player, mock_publisher):
    """Factory for a TurnOrchestrator wired to fakes; keyword arguments override any collaborator."""
    def factory(**overrides):
        kwargs = dict(
            topic="Vejret (Weather)",
            speech_bridge=speech_bridge,
            chat_client=fake_chat,
            capture=fake_capture,
            player=fake_player,
            publisher=mock_publisher,
            debug=DebugLog(enabled=True),
            translation_pause=0.0,
        )
        kwargs.update(overrides)
        return TurnOrchestrator(**kwargs)
    return factory


@pytest.fixture
def temp_data_dir():
    """Create temporary directory for test data."""
    with tempfile.TemporaryDirectory() as temp_dir:
        yield temp_dir


@pytest.fixture
def sample_audio_chunk():
    """Generate a sample audio chunk for testing."""
    # 1024 samples of 16-bit audio (sine wave)
    sample_rate = 16000
    duration = 1024 / sample_rate
    freq = 440  # A4 note

    t = np.linspace(0, duration, 1024, False)
    wave_data = np.sin(2 * np.pi * freq * t)

    audio_data = (wave_data * 32767).astype(np.int16)
    return audio_data.tobytes()


@pytest.fixture
def mock_pyaudio():
    """Mock PyAudio for testing without actual audio hardware."""
    with patch('pyaudio.PyAudio') as mock_pyaudio_class:
        mock_pyaudio_instance = Mock()
        mock_stream = Mock()

        def read_chunk(frames, exception_on_overflow=True):
            time.sleep(0.005)
            return b'\x00' * (frames * 2)  # Silent audio

        mock_stream.read.side_effect = read_chunk
        mock_stream.stop_stream.return_value = None
        mock_stream.close.return_value = None

        mock_pyaudio_instance.open.return_value = mock_stream
        mock_pyaudio_instance.terminate.return_value = None
        mock_pyaudio_instance.get_sample_size.return_value = 2

        mock_pyaudio_class.return_value = mock_pyaudio_instance

        yield {
            'class': mock_pyaudio_class,
            'instance': mock_pyaudio_instance,
            'stream': mock_stream
        }


@pytest.fixture
def audio_test_data():
    """Generate various audio test data patterns."""
    def generate_audio(pattern="sine", duration_seconds=1.0, sample_rate=16000, amplitude=1.0):
        """Generate audio data for testing.

        Args:
            pattern: Type of audio pattern ('sine', 'noise', 'silence')
            duration_seconds: Duration of audio
            sample_rate: Sample rate in Hz
            amplitude: Peak amplitude in [0, 1]

        Returns:
            bytes: 16-bit PCM audio data
        """
        samples = int(duration_seconds * sample_rate)

        if pattern == "sine":
            t = np.linspace(0, duration_seconds, samples, False)
            wave_data = np.sin(2 * np.pi * 440 * t)
        elif pattern == "noise":
            wave_data = np.random.default_rng(1234).uniform(-1, 1, samples)
        elif pattern == "silence":
            wave_data = np.zeros(samples)
        else:
            raise ValueError(f"Unknown pattern: {pattern}")

        audio_data = (wave_data * amplitude * 32767).astype(np.int16)
        return audio_data.tobytes()

    return generate_audio
