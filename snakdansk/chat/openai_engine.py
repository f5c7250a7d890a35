"""Chat completion engine for sending conversations to the OpenAI API."""

import logging
import aiohttp
from typing import Dict, List, Optional

from ..errors import ChatError

logger = logging.getLogger(__name__)


class ChatCompletionEngine:
    """Simple engine for sending a message list and getting the reply text."""

    def __init__(self, api_key: str, model: str = "gpt-4o-mini",
                 base_url: str = "https://api.openai.com/v1"):
        """Initialize chat completion engine.

        Args:
            api_key: OpenAI API key
            model: Chat model to use
            base_url: API root, overridable for compatible endpoints
        """
        self.api_key = api_key
        self.model = model
        self.url = f"{base_url.rstrip('/')}/chat/completions"

        logger.info(f"ChatCompletionEngine initialized with model: {model}")

    async def send_messages(self, messages: List[Dict[str, str]], temperature: float = 0.7,
                            max_tokens: int = 500,
                            response_format: Optional[Dict[str, str]] = None) -> str:
        """Send a conversation and get the assistant's reply.

        Args:
            messages: Chat messages ({"role": ..., "content": ...})
            temperature: Temperature for response generation (0.0 to 1.0)
            max_tokens: Maximum tokens in response
            response_format: Optional response format, e.g. {"type": "json_object"}

        Returns:
            Reply text

        Raises:
            ChatError: If the API call fails or the body is malformed
        """
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json"
        }

        data = {
            "model": self.model,
            "messages": messages,
            "temperature": temperature,
            "max_tokens": max_tokens
        }
        if response_format:
            data["response_format"] = response_format

        try:
            async with aiohttp.ClientSession() as session:
                async with session.post(self.url, headers=headers, json=data) as response:
                    if response.status != 200:
                        error_text = await response.text()
                        raise ChatError(f"Chat API error: {response.status} - {error_text}")

                    result = await response.json()
        except aiohttp.ClientError as e:
            raise ChatError(f"Chat API request failed: {e}") from e

        try:
            content = result["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as e:
            raise ChatError(f"Malformed chat completion response: {result!r}") from e
        if content is None:
            raise ChatError("Chat completion returned no content")
        return content.strip()
