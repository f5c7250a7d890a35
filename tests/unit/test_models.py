"""Unit tests for conversation models, results and the topic catalog."""

import pytest

from snakdansk.models.conversation import (
    ChatExchange,
    ChatReply,
    Message,
    ProcessingState,
    Role,
)
from snakdansk.models.events import AudioEvent
from snakdansk.models.results import ErrorKind, TurnResult, TurnStatus
from snakdansk.models.topics import TOPICS, get_topic


@pytest.mark.unit
class TestConversationModels:

    def test_exchange_to_messages(self):
        exchange = ChatExchange("Hej", ChatReply("Hej med dig", "Hello to you"))

        user, assistant = exchange.to_messages()

        assert user == Message(Role.USER, "Hej")
        assert user.translation is None
        assert assistant.role == Role.ASSISTANT
        assert assistant.content == "Hej med dig"
        assert assistant.translation == "Hello to you"

    def test_message_to_dict(self):
        assert Message(Role.USER, "Hej").to_dict() == {"role": "user", "content": "Hej"}
        assert Message(Role.ASSISTANT, "Hej", "Hi").to_dict() == {
            "role": "assistant", "content": "Hej", "translation": "Hi",
        }

    def test_processing_state(self):
        state = ProcessingState()
        assert not state.busy

        state.thinking = True
        snapshot = state.snapshot()
        state.clear()

        assert snapshot.busy
        assert snapshot is not state
        assert not state.busy

    def test_audio_event_duration(self):
        event = AudioEvent("chunk_1", b"\x00" * 3200, 0.0, 1)
        assert event.chunk_duration_ms == 100


@pytest.mark.unit
class TestTurnResult:

    def test_completed_and_skipped_are_ok(self):
        assert TurnResult.completed().ok
        assert TurnResult.skipped("No audio recorded").ok

    def test_rejected(self):
        result = TurnResult.rejected("busy")

        assert result.status == TurnStatus.REJECTED
        assert result.error_kind == ErrorKind.BUSY
        assert not result.ok
        assert not result.retryable

    @pytest.mark.parametrize("kind,retryable", [
        (ErrorKind.TRANSCRIPTION, True),
        (ErrorKind.CHAT, True),
        (ErrorKind.USER_MEDIA, True),
        (ErrorKind.SYNTHESIS, False),
        (ErrorKind.PLAYBACK, False),
    ])
    def test_retryable_kinds(self, kind, retryable):
        assert TurnResult.failed(kind, "boom").retryable is retryable


@pytest.mark.unit
class TestTopics:

    def test_catalog(self):
        assert [t.title for t in TOPICS] == [
            "Vejret", "Sport", "Aktuelle Begivenheder", "Ferier", "Shopping", "Restauranter og Caféer",
        ]

    def test_describe(self):
        assert get_topic("weather").describe() == "Vejret (Weather)"

    def test_unknown_topic(self):
        with pytest.raises(KeyError, match="weather"):
            get_topic("politics")
