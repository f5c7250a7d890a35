"""Chat completion adapter: Danish reply with an English gloss for one utterance."""

import json
import re
import time
import logging
from typing import Optional

from .openai_engine import ChatCompletionEngine
from ..errors import ChatError
from ..models.conversation import ChatReply
from ..utils.debug import DebugLog, debug_log

logger = logging.getLogger(__name__)

SYSTEM_PROMPT_TEMPLATE = (
    "You are a friendly Danish language learning assistant.\n"
    "Communicate primarily in Danish, providing English translations in parentheses.\n"
    "Current conversation topic: {topic}.\n"
    "If the user makes language mistakes, correct them gently in Danish.\n"
    "Keep responses natural and conversational."
)

STRUCTURED_PROMPT_TEMPLATE = (
    "You are a friendly Danish language learning assistant.\n"
    "Current conversation topic: {topic}.\n"
    "If the user makes language mistakes, correct them gently in Danish.\n"
    "Keep responses natural and conversational.\n"
    'Answer with a JSON object with exactly two string fields: "danish" holds your '
    'reply in Danish, "english" holds its English translation.'
)

_FIRST_PARENTHESIZED = re.compile(r"\((.*?)\)")


def build_system_prompt(topic: str, structured: bool = True) -> str:
    template = STRUCTURED_PROMPT_TEMPLATE if structured else SYSTEM_PROMPT_TEMPLATE
    return template.format(topic=topic)


def split_parenthesized(reply: str) -> ChatReply:
    """Split a "Danish (English)" reply.

    Text before the first "(" is the Danish part and the first parenthesized
    span is the gloss. Later spans are dropped and an aside inside the Danish
    sentence truncates it; replies without both parentheses are all Danish.
    """
    if "(" in reply and ")" in reply:
        danish = reply.split("(", 1)[0].strip()
        match = _FIRST_PARENTHESIZED.search(reply)
        return ChatReply(danish=danish, english=match.group(1) if match else "")
    return ChatReply(danish=reply, english="")


def parse_reply(reply: str) -> ChatReply:
    """Decode the model reply, preferring the labeled JSON form."""
    try:
        payload = json.loads(reply)
    except ValueError:
        payload = None

    if isinstance(payload, dict) and isinstance(payload.get("danish"), str):
        english = payload.get("english")
        return ChatReply(
            danish=payload["danish"].strip(),
            english=english.strip() if isinstance(english, str) else "",
        )
    return split_parenthesized(reply)


class ChatCompletionAdapter:
    """Produces a ChatReply for a user utterance within a topic."""

    def __init__(self, engine: ChatCompletionEngine, temperature: float = 0.7,
                 max_tokens: int = 500, structured_replies: bool = True,
                 debug: Optional[DebugLog] = None):
        self.engine = engine
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.structured_replies = structured_replies
        self.debug = debug or debug_log

    async def complete(self, utterance: str, topic: str) -> ChatReply:
        """Ask the model for a reply to ``utterance``.

        Raises:
            ChatError: On any upstream failure; no partial result is returned
        """
        messages = [
            {"role": "system", "content": build_system_prompt(topic, self.structured_replies)},
            {"role": "user", "content": utterance},
        ]
        response_format = {"type": "json_object"} if self.structured_replies else None

        self.debug.chat("Sending message", {"content": utterance, "topic": topic})
        start = time.monotonic()
        try:
            reply = await self.engine.send_messages(
                messages,
                temperature=self.temperature,
                max_tokens=self.max_tokens,
                response_format=response_format,
            )
        except ChatError:
            raise
        except Exception as e:
            raise ChatError(f"Chat completion failed: {e}") from e
        self.debug.timing(start, "Chat completion")

        parsed = parse_reply(reply)
        self.debug.chat("Reply received", {"danish": parsed.danish, "english": parsed.english})
        return parsed
