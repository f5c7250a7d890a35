"""Chat completion for SnakDansk."""

from .openai_engine import ChatCompletionEngine
from .adapter import ChatCompletionAdapter, build_system_prompt, parse_reply, split_parenthesized
from .client import HttpChatClient

__all__ = [
    "ChatCompletionEngine",
    "ChatCompletionAdapter",
    "HttpChatClient",
    "build_system_prompt",
    "parse_reply",
    "split_parenthesized",
]
