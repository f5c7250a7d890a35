"""Request and response bodies for the HTTP API."""

from typing import List, Optional

from pydantic import BaseModel, Field


class ChatRequest(BaseModel):
    message: str = Field(min_length=1)
    topic: str = Field(min_length=1)


class AssistantMessage(BaseModel):
    role: str = "assistant"
    content: str
    translation: str = ""


class ChatResponse(BaseModel):
    message: AssistantMessage


class TranscribeRequest(BaseModel):
    audio: str = Field(min_length=1, description="base64 data URL of a webm recording")


class TranscribeResponse(BaseModel):
    text: str


class SpeechRequest(BaseModel):
    text: str = Field(min_length=1)
    cache_key: Optional[str] = None


class TopicInfo(BaseModel):
    id: str
    title: str
    english_title: str
    icon: str


class TopicsResponse(BaseModel):
    topics: List[TopicInfo]


class ErrorResponse(BaseModel):
    error: str
