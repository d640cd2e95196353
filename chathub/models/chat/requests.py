from typing import Literal

from pydantic import BaseModel, Field


class CreateChatRequest(BaseModel):
    title: str = Field("New chat", min_length=1, max_length=100)
    hub_id: str | None = Field(None, description="Hub the chat belongs to")
    agent_id: str | None = Field(None, description="Agent answering in this chat")
    model_name: str | None = Field(None, description="Model used when the agent does not set one")


class UpdateChatRequest(BaseModel):
    title: str | None = Field(None, min_length=1, max_length=100)
    status: Literal["active", "archived"] | None = None


class AddMessageRequest(BaseModel):
    content: str = Field(..., min_length=1, max_length=10000, description="Message content")
    role: Literal["user", "assistant", "system"] = "user"
