"""Provider-agnostic message models for chat history."""

from pydantic import BaseModel
from abc import ABC


class BaseMessage(ABC, BaseModel):
    """Base model for messages exchanged with an LLM.

    Attributes:
        author: Role associated with the message.
        content: Text payload of the message.
    """

    author: str
    content: str


class SystemMessage(BaseMessage):
    """Message authored by the system to steer behavior."""

    author: str = "system"


class UserMessage(BaseMessage):
    """Message authored by an end user or by the auto-continue controller."""

    author: str = "user"


class AssistantMessage(BaseMessage):
    """Message authored by the assistant. Tool calls travel in-band inside ``content``."""

    author: str = "assistant"
