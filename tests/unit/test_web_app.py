"""Unit tests for the HTTP API."""

import asyncio
import base64

import pytest
from aiohttp import test_utils

from snakdansk.errors import ChatError, SynthesisError, TranscriptionError
from snakdansk.models.audio import AudioEncoding
from snakdansk.models.conversation import ChatReply
from snakdansk.speech.bridge import SpeechBridge
from snakdansk.web.app import BadRequest, create_app, decode_data_url


def data_url(audio: bytes) -> str:
    return "data:audio/webm;codecs=opus;base64," + base64.b64encode(audio).decode("ascii")


def call_api(app, method, path, **kwargs):
    """Send one request to ``app`` and return (status, content type, body)."""
    async def run():
        async with test_utils.TestClient(test_utils.TestServer(app)) as client:
            response = await client.request(method, path, **kwargs)
            if response.content_type == "application/json":
                body = await response.json()
            else:
                body = await response.read()
            return response.status, response.content_type, body
    return asyncio.run(run())


@pytest.fixture
def app(speech_bridge, fake_chat):
    return create_app(speech_bridge, fake_chat)


@pytest.mark.unit
class TestDecodeDataUrl:

    def test_payload_after_first_comma(self):
        assert decode_data_url(data_url(b"webm-bytes")) == b"webm-bytes"

    @pytest.mark.parametrize("value", ["no-comma", "data:audio/webm;base64,***", "data:audio/webm;base64,"])
    def test_invalid(self, value):
        with pytest.raises(BadRequest):
            decode_data_url(value)


@pytest.mark.unit
class TestChatEndpoint:

    def test_reply(self, app, fake_chat):
        status, _, body = call_api(app, "POST", "/api/chat",
                                   json={"message": "Hvordan er vejret?", "topic": "Vejret (Weather)"})

        assert status == 200
        assert body == {"message": {"role": "assistant",
                                    "content": "Det er solrigt i dag",
                                    "translation": "It is sunny today"}}
        assert fake_chat.calls == [("Hvordan er vejret?", "Vejret (Weather)")]

    def test_reply_without_gloss_has_empty_translation(self, speech_bridge, fakes):
        app = create_app(speech_bridge, fakes.Chat(reply=ChatReply("Hej")))

        _, _, body = call_api(app, "POST", "/api/chat", json={"message": "Hej", "topic": "Sport"})

        assert body["message"]["translation"] == ""

    def test_upstream_failure(self, speech_bridge, fakes):
        app = create_app(speech_bridge, fakes.Chat(error=ChatError("Chat API error: 429 - slow down")))

        status, _, body = call_api(app, "POST", "/api/chat", json={"message": "Hej", "topic": "Sport"})

        assert status == 500
        assert body == {"error": "Error processing chat request"}

    @pytest.mark.parametrize("payload", [{"message": "Hej"}, {"message": "", "topic": "Sport"}, ["Hej"]])
    def test_invalid_body(self, app, fake_chat, payload):
        status, _, body = call_api(app, "POST", "/api/chat", json=payload)

        assert status == 400
        assert "error" in body
        assert fake_chat.calls == []

    def test_malformed_json(self, app):
        status, _, body = call_api(app, "POST", "/api/chat", data="{not json",
                                   headers={"Content-Type": "application/json"})

        assert status == 400
        assert body["error"].startswith("Invalid JSON body")

    def test_body_not_utf8(self, app, fake_chat):
        status, content_type, body = call_api(app, "POST", "/api/chat",
                                              data=b'{"message": "\xff\xfe", "topic": "Sport"}',
                                              headers={"Content-Type": "application/json"})

        assert status == 400
        assert content_type == "application/json"
        assert body["error"].startswith("Invalid JSON body")
        assert fake_chat.calls == []


@pytest.mark.unit
class TestTranscribeEndpoint:

    def test_transcribes_webm_opus(self, app, fake_transcriber):
        status, _, body = call_api(app, "POST", "/api/transcribe", json={"audio": data_url(b"webm")})

        assert status == 200
        assert body == {"text": "Hvordan er vejret i dag"}
        assert fake_transcriber.calls == [(b"webm", AudioEncoding.WEBM_OPUS, 16000)]

    def test_bad_audio(self, app, fake_transcriber):
        status, _, _ = call_api(app, "POST", "/api/transcribe", json={"audio": "not a data url"})

        assert status == 400
        assert fake_transcriber.calls == []

    def test_upstream_failure(self, fakes, fake_chat):
        bridge = SpeechBridge(fakes.Transcriber(error=TranscriptionError("bad encoding")), fakes.Synthesizer())

        status, _, body = call_api(create_app(bridge, fake_chat), "POST", "/api/transcribe",
                                   json={"audio": data_url(b"webm")})

        assert status == 500
        assert body == {"error": "Error transcribing audio"}


@pytest.mark.unit
class TestSpeechEndpoint:

    def test_returns_mpeg(self, app):
        status, content_type, body = call_api(app, "POST", "/api/speech", json={"text": "Hej"})

        assert status == 200
        assert content_type == "audio/mpeg"
        assert body == b"mp3:Hej"

    def test_cache_key_is_honoured(self, app, speech_bridge, fake_synthesizer):
        async def twice():
            async with test_utils.TestClient(test_utils.TestServer(app)) as client:
                for _ in range(2):
                    response = await client.post("/api/speech", json={"text": "Sport", "cache_key": "en_Sport"})
                    assert response.status == 200

        asyncio.run(twice())

        assert fake_synthesizer.calls == ["Sport"]
        assert "en_Sport" in speech_bridge.cache

    def test_upstream_failure(self, fakes, fake_chat):
        bridge = SpeechBridge(fakes.Transcriber(), fakes.Synthesizer(error=SynthesisError("quota")))

        status, _, body = call_api(create_app(bridge, fake_chat), "POST", "/api/speech", json={"text": "Hej"})

        assert status == 500
        assert body == {"error": "Error synthesizing speech"}

    def test_empty_text(self, app):
        status, _, _ = call_api(app, "POST", "/api/speech", json={"text": ""})
        assert status == 400


@pytest.mark.unit
def test_topics(app):
    status, _, body = call_api(app, "GET", "/api/topics")

    assert status == 200
    ids = [topic["id"] for topic in body["topics"]]
    assert ids == ["weather", "sports", "current-events", "vacation", "shopping", "restaurants"]
    assert body["topics"][0]["title"] == "Vejret"
