"""Client for a running SnakDansk server's chat endpoint."""

import logging

import aiohttp

from ..errors import ChatError
from ..models.conversation import ChatReply

logger = logging.getLogger(__name__)


class HttpChatClient:
    """Same interface as ChatCompletionAdapter, backed by ``POST /api/chat``."""

    def __init__(self, base_url: str):
        self.url = f"{base_url.rstrip('/')}/api/chat"
        logger.info(f"HttpChatClient using: {self.url}")

    async def complete(self, utterance: str, topic: str) -> ChatReply:
        try:
            async with aiohttp.ClientSession() as session:
                async with session.post(self.url, json={"message": utterance, "topic": topic}) as response:
                    if response.status != 200:
                        raise ChatError(f"HTTP error! status: {response.status}")
                    data = await response.json()
        except aiohttp.ClientError as e:
            raise ChatError(f"Chat request failed: {e}") from e

        message = data.get("message") if isinstance(data, dict) else None
        if not isinstance(message, dict) or not isinstance(message.get("content"), str):
            raise ChatError(f"Malformed chat response: {data!r}")
        return ChatReply(danish=message["content"], english=message.get("translation") or "")
