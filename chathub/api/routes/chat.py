import math
from typing import Annotated, Literal

from fastapi import APIRouter, HTTPException, Query, status

from chathub.api.dependencies import AuthContextDep, ChatServiceDep
from chathub.models.chat.requests import (
    AddMessageRequest,
    CreateChatRequest,
    UpdateChatRequest,
)
from chathub.models.chat.responses import (
    AddMessageResponse,
    ChatListResponse,
    ChatMessageListResponse,
    ChatResponse,
    ChatWithMessagesResponse,
    DeleteChatResponse,
)
from chathub.services.agent_service import HubNotFoundError
from chathub.services.chat_service import AgentNotFoundError

router = APIRouter(
    prefix="/chats",
    tags=["chats"],
)


def _chat_not_found() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail="Chat not found",
    )


@router.post("", response_model=ChatResponse, status_code=status.HTTP_201_CREATED)
async def create_chat(
    request_body: CreateChatRequest,
    context: AuthContextDep,
    chat_service: ChatServiceDep,
) -> ChatResponse:
    try:
        chat = chat_service.create_chat(context.user_id, request_body)
    except HubNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Hub not found")
    except AgentNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Agent not found")

    return chat.to_response()


@router.get("", response_model=ChatListResponse)
async def list_chats(
    context: AuthContextDep,
    chat_service: ChatServiceDep,
    page: Annotated[int, Query(ge=1)] = 1,
    limit: Annotated[int, Query(ge=1, le=100)] = 20,
    status_filter: Annotated[Literal["active", "archived"], Query(alias="status")] = "active",
    hub_id: str | None = None,
) -> ChatListResponse:
    result = chat_service.list_chats(
        context.user_id,
        page=page,
        limit=limit,
        status=status_filter,
        hub_id=hub_id,
    )

    return ChatListResponse(
        chats=[c.to_response() for c in result.chats],
        page=page,
        limit=limit,
        total=result.total,
        pages=math.ceil(result.total / limit),
    )


@router.get("/{chat_id}", response_model=ChatWithMessagesResponse)
async def get_chat(
    chat_id: str,
    context: AuthContextDep,
    chat_service: ChatServiceDep,
) -> ChatWithMessagesResponse:
    found = chat_service.get_chat_with_messages(chat_id, context.user_id)
    if found is None:
        raise _chat_not_found()

    return ChatWithMessagesResponse(
        chat=found.chat.to_response(),
        messages=[m.to_response() for m in found.messages],
    )


@router.patch("/{chat_id}", response_model=ChatResponse)
async def update_chat(
    chat_id: str,
    request_body: UpdateChatRequest,
    context: AuthContextDep,
    chat_service: ChatServiceDep,
) -> ChatResponse:
    chat = chat_service.update_chat(chat_id, context.user_id, request_body)
    if chat:
        return chat.to_response()

    raise _chat_not_found()


@router.delete("/{chat_id}", response_model=DeleteChatResponse)
async def delete_chat(
    chat_id: str,
    context: AuthContextDep,
    chat_service: ChatServiceDep,
) -> DeleteChatResponse:
    chat = chat_service.delete_chat(chat_id, context.user_id)
    if chat is None:
        raise _chat_not_found()

    return DeleteChatResponse(id=chat_id, message=f"Chat '{chat.title}' has been deleted")


@router.post("/{chat_id}/messages", response_model=AddMessageResponse, status_code=status.HTTP_201_CREATED)
async def add_message(
    chat_id: str,
    request_body: AddMessageRequest,
    context: AuthContextDep,
    chat_service: ChatServiceDep,
) -> AddMessageResponse:
    """
    Add a message to a chat.

    User messages are answered within the same request; `reply` holds the
    assistant message. If generation fails the reply carries a fixed
    apology text instead of an error status.
    """
    added = await chat_service.add_message(chat_id, context.user_id, request_body)
    if added is None:
        raise _chat_not_found()

    return AddMessageResponse(
        message=added.message.to_response(),
        reply=added.reply.to_response() if added.reply else None,
    )


@router.get("/{chat_id}/messages", response_model=ChatMessageListResponse)
async def get_messages(
    chat_id: str,
    context: AuthContextDep,
    chat_service: ChatServiceDep,
) -> ChatMessageListResponse:
    messages = chat_service.get_messages(chat_id, context.user_id)
    if messages is not None:
        return ChatMessageListResponse(messages=[m.to_response() for m in messages])

    raise _chat_not_found()


@router.delete("/{chat_id}/messages/{message_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_message(
    chat_id: str,
    message_id: str,
    context: AuthContextDep,
    chat_service: ChatServiceDep,
) -> None:
    if not chat_service.delete_message(chat_id, message_id, context.user_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Message not found",
        )
