"""Conversation models."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field


class ChatMessage(BaseModel):
    """A single role-tagged message, as sent to the language model."""

    role: Literal["system", "user", "assistant"]
    content: str
    timestamp: datetime = Field(default_factory=datetime.now)

    @property
    def is_user(self) -> bool:
        return self.role == "user"

    def to_prompt(self) -> dict:
        return {"role": self.role, "content": self.content}
