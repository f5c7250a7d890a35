"""Conversation topics offered to the learner."""

from dataclasses import dataclass
from typing import Dict, List


@dataclass(frozen=True)
class Topic:
    id: str
    title: str           # Danish
    english_title: str
    icon: str

    def describe(self) -> str:
        """Text embedded in the system prompt."""
        return f"{self.title} ({self.english_title})"


TOPICS: List[Topic] = [
    Topic("weather", "Vejret", "Weather", "🌤️"),
    Topic("sports", "Sport", "Sports", "⚽"),
    Topic("current-events", "Aktuelle Begivenheder", "Current Events", "📰"),
    Topic("vacation", "Ferier", "Vacations", "✈️"),
    Topic("shopping", "Shopping", "Shopping", "🛍️"),
    Topic("restaurants", "Restauranter og Caféer", "Restaurants and Cafes", "🍽️"),
]

_BY_ID: Dict[str, Topic] = {topic.id: topic for topic in TOPICS}


def get_topic(topic_id: str) -> Topic:
    """Look up a topic by id. Raises KeyError for unknown ids."""
    try:
        return _BY_ID[topic_id]
    except KeyError:
        known = ", ".join(_BY_ID)
        raise KeyError(f"Unknown topic '{topic_id}' (known: {known})") from None
