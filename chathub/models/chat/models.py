from datetime import datetime
from dataclasses import dataclass, field
from typing import Any

from chathub.models.chat.responses import ChatMessageResponse, ChatResponse


@dataclass
class ChatMessage:
    id: str
    chat_id: str
    role: str
    content: str
    created_at: datetime
    model: str | None = None

    def to_response(self) -> ChatMessageResponse:
        return ChatMessageResponse(
            id=self.id,
            chat_id=self.chat_id,
            role=self.role,
            content=self.content,
            model=self.model,
            created_at=self.created_at,
        )


@dataclass
class Chat:
    id: str
    user_id: str
    hub_id: str | None
    agent_id: str | None
    title: str
    model_name: str | None
    status: str
    created_at: datetime
    updated_at: datetime
    last_message_at: datetime | None = None
    message_count: int = 0
    context: list[Any] = field(default_factory=list)

    def to_response(self) -> ChatResponse:
        return ChatResponse(
            id=self.id,
            hub_id=self.hub_id,
            agent_id=self.agent_id,
            title=self.title,
            model_name=self.model_name,
            status=self.status,
            created_at=self.created_at,
            updated_at=self.updated_at,
            last_message_at=self.last_message_at,
            message_count=self.message_count,
        )


@dataclass
class ChatWithMessages:
    chat: Chat
    messages: list[ChatMessage]
