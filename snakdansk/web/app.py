"""aiohttp application exposing chat, transcription and speech endpoints."""

import base64
import binascii
import logging
from typing import Type, TypeVar

from aiohttp import web
from pydantic import BaseModel, ValidationError

from ..chat import ChatCompletionAdapter
from ..errors import ChatError, SynthesisError, TranscriptionError
from ..models.audio import AudioEncoding
from ..models.topics import TOPICS
from ..speech.bridge import SpeechBridge
from .schemas import (
    AssistantMessage,
    ChatRequest,
    ChatResponse,
    ErrorResponse,
    SpeechRequest,
    TopicInfo,
    TopicsResponse,
    TranscribeRequest,
    TranscribeResponse,
)

logger = logging.getLogger(__name__)

SPEECH_BRIDGE = web.AppKey("speech_bridge", SpeechBridge)
CHAT_ADAPTER = web.AppKey("chat_adapter", ChatCompletionAdapter)

ModelT = TypeVar("ModelT", bound=BaseModel)

routes = web.RouteTableDef()


def _error(message: str, status: int) -> web.Response:
    return web.json_response(ErrorResponse(error=message).model_dump(), status=status)


class BadRequest(Exception):
    pass


async def _parse(request: web.Request, model: Type[ModelT]) -> ModelT:
    try:
        payload = await request.json()
    except ValueError as e:
        # JSONDecodeError and UnicodeDecodeError
        raise BadRequest(f"Invalid JSON body: {e}") from e
    try:
        return model.model_validate(payload)
    except ValidationError as e:
        raise BadRequest(f"Invalid request: {e.errors()[0]['msg']}") from e


def decode_data_url(data_url: str) -> bytes:
    """Decode the base64 payload after the first comma of a data URL."""
    _, sep, payload = data_url.partition(",")
    if not sep:
        raise BadRequest("audio must be a base64 data URL")
    try:
        audio = base64.b64decode(payload, validate=True)
    except binascii.Error as e:
        raise BadRequest(f"audio is not valid base64: {e}") from e
    if not audio:
        raise BadRequest("audio is empty")
    return audio


@routes.post("/api/chat")
async def chat(request: web.Request) -> web.Response:
    try:
        body = await _parse(request, ChatRequest)
    except BadRequest as e:
        return _error(str(e), 400)

    try:
        reply = await request.app[CHAT_ADAPTER].complete(body.message, body.topic)
    except ChatError as e:
        logger.error(f"Chat API Error: {e}")
        return _error("Error processing chat request", 500)

    response = ChatResponse(message=AssistantMessage(content=reply.danish, translation=reply.english))
    return web.json_response(response.model_dump())


@routes.post("/api/transcribe")
async def transcribe(request: web.Request) -> web.Response:
    try:
        body = await _parse(request, TranscribeRequest)
        audio = decode_data_url(body.audio)
    except BadRequest as e:
        return _error(str(e), 400)

    try:
        text = await request.app[SPEECH_BRIDGE].transcribe(audio, encoding=AudioEncoding.WEBM_OPUS)
    except TranscriptionError as e:
        logger.error(f"Transcription Error: {e}")
        return _error("Error transcribing audio", 500)

    return web.json_response(TranscribeResponse(text=text).model_dump())


@routes.post("/api/speech")
async def speech(request: web.Request) -> web.Response:
    try:
        body = await _parse(request, SpeechRequest)
    except BadRequest as e:
        return _error(str(e), 400)

    try:
        audio = await request.app[SPEECH_BRIDGE].synthesize(body.text, cache_key=body.cache_key)
    except SynthesisError as e:
        logger.error(f"Speech synthesis Error: {e}")
        return _error("Error synthesizing speech", 500)

    return web.Response(body=audio, content_type="audio/mpeg")


@routes.get("/api/topics")
async def topics(request: web.Request) -> web.Response:
    response = TopicsResponse(topics=[
        TopicInfo(id=t.id, title=t.title, english_title=t.english_title, icon=t.icon)
        for t in TOPICS
    ])
    return web.json_response(response.model_dump())


def create_app(speech_bridge: SpeechBridge, chat_adapter: ChatCompletionAdapter) -> web.Application:
    app = web.Application()
    app[SPEECH_BRIDGE] = speech_bridge
    app[CHAT_ADAPTER] = chat_adapter
    app.add_routes(routes)

    async def _cleanup(app: web.Application) -> None:
        app[SPEECH_BRIDGE].cleanup()

    app.on_cleanup.append(_cleanup)
    return app


def run_server(app: web.Application, host: str = "127.0.0.1", port: int = 8080) -> None:
    logger.info(f"Serving SnakDansk API on http://{host}:{port}")
    web.run_app(app, host=host, port=port, print=None)
