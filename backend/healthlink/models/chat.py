"""
Chat Models - chat flow input/output and stored conversation turns.
"""

from typing import List, Literal, Optional
from pydantic import BaseModel, Field, field_validator


class ChatInput(BaseModel):
    """Input of the chat flow."""
    message: str = Field(..., min_length=1, description="The user message to the AI assistant.")
    health_stats: Optional[str] = Field(
        None, alias="healthStats", description="The current health stats of the user."
    )
    tasks: Optional[str] = Field(None, description="The current tasks of the user.")
    chat_history: Optional[str] = Field(
        None, alias="chatHistory", description="The chat history of the user."
    )

    @field_validator("message")
    @classmethod
    def message_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Message must not be blank")
        return value

    class Config:
        populate_by_name = True


class ChatOutput(BaseModel):
    """Output of the chat flow."""
    response: str = Field(..., description="The response from the AI assistant.")
    suggestions: Optional[List[str]] = Field(
        None, description="Suggestions from the AI assistant based on the input."
    )


class ChatMessage(BaseModel):
    """A single message as shown in the conversation view."""
    id: str
    sender: Literal["user", "assistant"]
    content: str
    suggestions: Optional[List[str]] = None


class ChatTurn(BaseModel):
    """Stored chat turn (chatHistory/{autoId})."""
    id: str
    prompt: str
    response: str = ""
    timestamp: Optional[str] = None
