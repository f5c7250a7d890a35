"""Unit tests for the aiohttp-based clients against local stand-in servers."""

import asyncio

import pytest
from aiohttp import web, test_utils

from snakdansk.chat.client import HttpChatClient
from snakdansk.chat.openai_engine import ChatCompletionEngine
from snakdansk.errors import ChatError, TranscriptionError
from snakdansk.models.audio import AudioEncoding
from snakdansk.speech.whisper_backend import WhisperTranscriptionBackend, pcm_to_wav


def serve(handler, path, scenario):
    """Run ``scenario(base_url)`` against a server answering ``path`` with ``handler``."""
    async def run():
        app = web.Application()
        app.router.add_post(path, handler)
        async with test_utils.TestServer(app) as server:
            return await scenario(str(server.make_url("/")).rstrip("/"))

    return asyncio.run(run())


@pytest.mark.unit
class TestChatCompletionEngine:

    def test_sends_request_and_returns_stripped_content(self):
        seen = {}

        async def handler(request):
            seen["auth"] = request.headers["Authorization"]
            seen["body"] = await request.json()
            return web.json_response({"choices": [{"message": {"content": "  Hej med dig  "}}]})

        async def scenario(base_url):
            engine = ChatCompletionEngine("sk-test", model="gpt-4o-mini", base_url=f"{base_url}/v1")
            return await engine.send_messages([{"role": "user", "content": "Hej"}],
                                              temperature=0.3, max_tokens=50,
                                              response_format={"type": "json_object"})

        reply = serve(handler, "/v1/chat/completions", scenario)

        assert reply == "Hej med dig"
        assert seen["auth"] == "Bearer sk-test"
        assert seen["body"] == {
            "model": "gpt-4o-mini",
            "messages": [{"role": "user", "content": "Hej"}],
            "temperature": 0.3,
            "max_tokens": 50,
            "response_format": {"type": "json_object"},
        }

    def test_non_ok_status(self):
        async def handler(request):
            return web.Response(status=429, text="rate limited")

        async def scenario(base_url):
            return await ChatCompletionEngine("sk-test", base_url=base_url).send_messages([])

        with pytest.raises(ChatError, match="429 - rate limited"):
            serve(handler, "/chat/completions", scenario)

    def test_malformed_body(self):
        async def handler(request):
            return web.json_response({"choices": []})

        async def scenario(base_url):
            return await ChatCompletionEngine("sk-test", base_url=base_url).send_messages([])

        with pytest.raises(ChatError, match="Malformed"):
            serve(handler, "/chat/completions", scenario)

    def test_null_content(self):
        async def handler(request):
            return web.json_response({"choices": [{"message": {"content": None}}]})

        async def scenario(base_url):
            return await ChatCompletionEngine("sk-test", base_url=base_url).send_messages([])

        with pytest.raises(ChatError, match="no content"):
            serve(handler, "/chat/completions", scenario)


@pytest.mark.unit
class TestHttpChatClient:

    def test_reply(self):
        async def handler(request):
            body = await request.json()
            assert body == {"message": "Hej", "topic": "Sport (Sports)"}
            return web.json_response({"message": {"role": "assistant", "content": "Hej!", "translation": "Hi!"}})

        async def scenario(base_url):
            return await HttpChatClient(base_url + "/").complete("Hej", "Sport (Sports)")

        reply = serve(handler, "/api/chat", scenario)

        assert reply.danish == "Hej!"
        assert reply.english == "Hi!"

    def test_non_ok_status(self):
        async def handler(request):
            return web.json_response({"error": "Error processing chat request"}, status=500)

        async def scenario(base_url):
            return await HttpChatClient(base_url).complete("Hej", "Sport")

        with pytest.raises(ChatError, match="HTTP error! status: 500"):
            serve(handler, "/api/chat", scenario)

    def test_malformed_body(self):
        async def handler(request):
            return web.json_response({"text": "Hej"})

        async def scenario(base_url):
            return await HttpChatClient(base_url).complete("Hej", "Sport")

        with pytest.raises(ChatError, match="Malformed"):
            serve(handler, "/api/chat", scenario)

    def test_unreachable_server(self):
        # port 1 is reserved and closed
        with pytest.raises(ChatError, match="Chat request failed"):
            asyncio.run(HttpChatClient("http://127.0.0.1:1").complete("Hej", "Sport"))


@pytest.mark.unit
class TestWhisperTranscriptionBackend:

    def test_pcm_is_wrapped_as_wav(self):
        async def handler(request):
            form = await request.post()
            upload = form["file"]
            assert upload.filename == "audio.wav"
            assert upload.file.read()[:4] == b"RIFF"
            assert form["model"] == "whisper-1"
            assert form["language"] == "da"
            return web.json_response({"text": " Hej med dig "})

        async def scenario(base_url):
            backend = WhisperTranscriptionBackend("sk-test", base_url=base_url)
            return await backend.transcribe(b"\x00\x00" * 160, encoding=AudioEncoding.LINEAR16)

        result = serve(handler, "/audio/transcriptions", scenario)

        assert result.text == "Hej med dig"
        assert result.segments == ["Hej med dig"]
        assert result.service == "OpenAI Whisper"

    def test_error_status(self):
        async def handler(request):
            return web.Response(status=400, text="Invalid file format")

        async def scenario(base_url):
            return await WhisperTranscriptionBackend("sk-test", base_url=base_url).transcribe(b"webm")

        with pytest.raises(TranscriptionError, match="400"):
            serve(handler, "/audio/transcriptions", scenario)

    def test_initialize_requires_key(self):
        with pytest.raises(ValueError):
            WhisperTranscriptionBackend("").initialize()


@pytest.mark.unit
def test_pcm_to_wav_header():
    wav = pcm_to_wav(b"\x01\x00" * 100, sample_rate=16000)

    assert wav[:4] == b"RIFF"
    assert wav[8:12] == b"WAVE"
    assert len(wav) == 44 + 200
