from dataclasses import dataclass
from uuid import uuid4

import structlog

from chathub.db.chat_repo import ChatRepo
from chathub.models.chat.models import Chat, ChatMessage, ChatWithMessages
from chathub.models.chat.requests import AddMessageRequest, CreateChatRequest, UpdateChatRequest
from chathub.services.agent_service import AgentService, HubNotFoundError
from chathub.services.generation_service import GenerationService
from chathub.services.hub_service import HubService
from chathub.services.ollama.ollama_types import DEFAULT_TEMPERATURE, GenerationOptions
from prompts.chat_prompts import DEFAULT_SYSTEM_PROMPT, FALLBACK_MESSAGE
from utils import not_none


logger = structlog.get_logger(__name__)


class AgentNotFoundError(Exception):
    """Raised when a chat refers to an agent the user does not own"""
    pass


@dataclass
class ChatPage:
    chats: list[Chat]
    total: int


@dataclass
class AddedMessages:
    message: ChatMessage
    reply: ChatMessage | None


class ChatService:
    def __init__(
        self,
        generation_service: GenerationService,
        chat_repo: ChatRepo,
        hub_service: HubService,
        agent_service: AgentService,
    ) -> None:
        self._generation_service = generation_service
        self._chat_repo = chat_repo
        self._hub_service = hub_service
        self._agent_service = agent_service

    def create_chat(self, user_id: str, request: CreateChatRequest) -> Chat:
        model_name = request.model_name

        if request.hub_id is not None:
            hub = self._hub_service.get_hub(request.hub_id, user_id)
            if hub is None:
                raise HubNotFoundError(request.hub_id)
            model_name = model_name or hub.default_model

        if request.agent_id is not None and self._agent_service.get_agent(request.agent_id, user_id) is None:
            raise AgentNotFoundError(request.agent_id)

        return self._chat_repo.create_chat(
            chat_id=str(uuid4()),
            user_id=user_id,
            title=request.title,
            hub_id=request.hub_id,
            agent_id=request.agent_id,
            model_name=model_name,
        )

    def get_chat(self, chat_id: str, user_id: str) -> Chat | None:
        return self._chat_repo.get_chat_by_id_and_user(chat_id, user_id)

    def get_chat_with_messages(self, chat_id: str, user_id: str) -> ChatWithMessages | None:
        chat = self.get_chat(chat_id, user_id)
        if chat is None:
            return None
        return ChatWithMessages(chat=chat, messages=self._chat_repo.get_messages(chat_id))

    def list_chats(
        self,
        user_id: str,
        page: int = 1,
        limit: int = 20,
        status: str = "active",
        hub_id: str | None = None,
    ) -> ChatPage:
        chats, total = self._chat_repo.list_chats_by_user(
            user_id=user_id,
            status=status,
            hub_id=hub_id,
            limit=limit,
            offset=(page - 1) * limit,
        )
        return ChatPage(chats=chats, total=total)

    def update_chat(self, chat_id: str, user_id: str, request: UpdateChatRequest) -> Chat | None:
        if self.get_chat(chat_id, user_id) is None:
            return None

        self._chat_repo.update_chat(chat_id, title=request.title, status=request.status)
        return not_none(self.get_chat(chat_id, user_id), f"Chat {chat_id} for user {user_id}")

    def delete_chat(self, chat_id: str, user_id: str) -> Chat | None:
        chat = self.get_chat(chat_id, user_id)
        if chat is None:
            return None

        self._chat_repo.soft_delete_chat(chat_id)
        return chat

    def get_messages(self, chat_id: str, user_id: str) -> list[ChatMessage] | None:
        if self.get_chat(chat_id, user_id) is None:
            return None
        return self._chat_repo.get_messages(chat_id)

    def delete_message(self, chat_id: str, message_id: str, user_id: str) -> bool:
        if self.get_chat(chat_id, user_id) is None:
            return False
        return self._chat_repo.delete_message(chat_id, message_id)

    async def add_message(self, chat_id: str, user_id: str, request: AddMessageRequest) -> AddedMessages | None:
        """
        Store a message and, for user messages, the assistant's reply.

        The reply is generated within the same request. Generation failures
        are logged and answered with FALLBACK_MESSAGE so every user message
        ends up followed by exactly one assistant message.
        """
        chat = self.get_chat(chat_id, user_id)
        if chat is None:
            return None

        message = self._chat_repo.add_message(
            message_id=str(uuid4()),
            chat_id=chat_id,
            role=request.role,
            content=request.content,
        )

        if request.role != "user":
            return AddedMessages(message=message, reply=None)

        reply = await self._generate_reply(chat, request.content)
        return AddedMessages(message=message, reply=reply)

    def _hub_temperature(self, chat: Chat) -> float:
        hub = self._hub_service.get_hub(chat.hub_id, chat.user_id) if chat.hub_id else None
        return hub.default_temperature if hub is not None else DEFAULT_TEMPERATURE

    def _reply_options(self, chat: Chat) -> GenerationOptions:
        agent = self._agent_service.find_agent(chat.agent_id) if chat.agent_id else None

        if agent is None:
            return self._generation_service.resolve_options(
                model=chat.model_name,
                system=DEFAULT_SYSTEM_PROMPT,
                context=chat.context,
                temperature=self._hub_temperature(chat),
            )

        return self._generation_service.resolve_options(
            model=agent.model or chat.model_name,
            system=agent.full_system_prompt(),
            context=chat.context,
            temperature=agent.temperature,
        )

    async def _generate_reply(self, chat: Chat, content: str) -> ChatMessage:
        options = self._reply_options(chat)

        try:
            result = await self._generation_service.generate_response(content, options)
        except Exception as e:
            logger.exception("chat_reply_failed", chat_id=chat.id, model=options.model, error=str(e))
            return self._chat_repo.add_message(
                message_id=str(uuid4()),
                chat_id=chat.id,
                role="assistant",
                content=FALLBACK_MESSAGE,
                model=options.model,
            )

        reply = self._chat_repo.add_message(
            message_id=str(uuid4()),
            chat_id=chat.id,
            role="assistant",
            content=result.response,
            model=result.model,
        )
        self._chat_repo.update_context(chat.id, result.context)
        return reply
