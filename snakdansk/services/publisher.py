"""Turn event publisher for pub/sub UI updates."""

import logging
from typing import List

from pubsub import pub

from ..models.conversation import Message, ProcessingState, TurnPhase
from ..models.events import (
    AUDIO_FRAME_TOPIC,
    TURN_ERROR_TOPIC,
    TURN_MESSAGES_TOPIC,
    TURN_STATE_TOPIC,
    AudioEvent,
)
from ..models.results import TurnResult

logger = logging.getLogger(__name__)


class TurnPublisher:
    """Publishes captured audio frames, state changes, new messages and failures using pubsub.pub."""

    def __init__(self,
                 state_topic: str = TURN_STATE_TOPIC,
                 messages_topic: str = TURN_MESSAGES_TOPIC,
                 error_topic: str = TURN_ERROR_TOPIC,
                 audio_topic: str = AUDIO_FRAME_TOPIC):
        self.state_topic = state_topic
        self.messages_topic = messages_topic
        self.error_topic = error_topic
        self.audio_topic = audio_topic
        logger.info(f"TurnPublisher initialized with topics: {state_topic}, {messages_topic}, "
                    f"{error_topic}, {audio_topic}")

    def publish_audio_frame(self, event: AudioEvent) -> None:
        """Called from the capture thread for every chunk."""
        pub.sendMessage(self.audio_topic, event=event)

    def publish_state(self, phase: TurnPhase, state: ProcessingState) -> None:
        pub.sendMessage(self.state_topic, phase=phase, state=state)
        logger.debug(f"Published turn state: {phase.value}")

    def publish_messages(self, messages: List[Message]) -> None:
        pub.sendMessage(self.messages_topic, messages=messages)
        logger.debug(f"Published {len(messages)} message(s)")

    def publish_error(self, result: TurnResult) -> None:
        pub.sendMessage(self.error_topic, result=result)
        logger.debug(f"Published turn error: {result.error_kind}")
