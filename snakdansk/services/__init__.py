"""Services layer for SnakDansk application logic."""

from .publisher import TurnPublisher
from .turn_orchestrator import TurnOrchestrator
from .conversation_service import ConversationService

__all__ = [
    "TurnPublisher",
    "TurnOrchestrator",
    "ConversationService",
]
