"""Terminal user interface for SnakDansk."""

from .conversation_screen import ConversationScreen
from .keyboard_input import create_input_handler

__all__ = ["ConversationScreen", "create_input_handler"]
