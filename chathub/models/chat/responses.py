from datetime import datetime
from pydantic import BaseModel


class ChatMessageResponse(BaseModel):
    id: str
    chat_id: str
    role: str
    content: str
    model: str | None
    created_at: datetime


class ChatResponse(BaseModel):
    id: str
    hub_id: str | None
    agent_id: str | None
    title: str
    model_name: str | None
    status: str
    created_at: datetime
    updated_at: datetime
    last_message_at: datetime | None
    message_count: int


class ChatWithMessagesResponse(BaseModel):
    chat: ChatResponse
    messages: list[ChatMessageResponse]


class ChatListResponse(BaseModel):
    chats: list[ChatResponse]
    page: int
    limit: int
    total: int
    pages: int


class AddMessageResponse(BaseModel):
    message: ChatMessageResponse
    reply: ChatMessageResponse | None


class ChatMessageListResponse(BaseModel):
    messages: list[ChatMessageResponse]


class DeleteChatResponse(BaseModel):
    id: str
    message: str
