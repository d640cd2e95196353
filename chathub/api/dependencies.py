from dataclasses import dataclass
from typing import Annotated

import httpx
from fastapi import Depends, Request

from chathub.request_context import RequestContext
from chathub.db.agent_repo import AgentRepo
from chathub.db.api_key_repo import ApiKeyRepo
from chathub.db.chat_repo import ChatRepo
from chathub.db.database import Database
from chathub.db.hub_repo import HubRepo
from chathub.db.user_repo import UserRepo
from chathub.services.agent_service import AgentService
from chathub.services.api_key_service import ApiKeyService
from chathub.services.auth_service import AuthService
from chathub.services.chat_service import ChatService
from chathub.services.generation_service import GenerationService
from chathub.services.generation_stream_service import GenerationStreamService
from chathub.services.hub_service import HubService
from chathub.services.ollama.errors import PermissionDeniedError
from chathub.services.ollama.ollama_client import OllamaClient
from chathub.services.user_service import UserService
from chathub.settings import Settings


@dataclass
class Services:
    """Everything the routes need, built once per application"""
    database: Database
    ollama_client: OllamaClient
    generation_service: GenerationService
    generation_stream_service: GenerationStreamService
    api_key_service: ApiKeyService
    auth_service: AuthService
    user_service: UserService
    hub_service: HubService
    agent_service: AgentService
    chat_service: ChatService


def build_services(
    app_settings: Settings,
    http_client: httpx.AsyncClient | None = None,
    database: Database | None = None,
) -> Services:
    """
    Wire repositories and services together.

    Tests pass an http_client backed by httpx.MockTransport and a database
    pointing at a temporary file.
    """
    database = database or Database(app_settings.db_path, app_settings.preserve_old_db)

    user_repo = UserRepo(database)
    api_key_repo = ApiKeyRepo(database)
    hub_repo = HubRepo(database)
    agent_repo = AgentRepo(database)
    chat_repo = ChatRepo(database)

    ollama_client = OllamaClient(
        base_url=app_settings.ollama_url,
        timeout=app_settings.ollama_timeout / 1000,
        probe_timeout=app_settings.ollama_probe_timeout / 1000,
        pull_timeout=app_settings.ollama_pull_timeout / 1000,
        http_client=http_client,
    )
    generation_service = GenerationService(
        client=ollama_client,
        default_model=app_settings.ollama_default_model,
        embedding_model=app_settings.ollama_embedding_model,
    )

    api_key_service = ApiKeyService(api_key_repo)
    hub_service = HubService(hub_repo)
    agent_service = AgentService(agent_repo, hub_service)

    return Services(
        database=database,
        ollama_client=ollama_client,
        generation_service=generation_service,
        generation_stream_service=GenerationStreamService(generation_service),
        api_key_service=api_key_service,
        auth_service=AuthService(api_key_service, user_repo),
        user_service=UserService(user_repo, api_key_service),
        hub_service=hub_service,
        agent_service=agent_service,
        chat_service=ChatService(
            generation_service=generation_service,
            chat_repo=chat_repo,
            hub_service=hub_service,
            agent_service=agent_service,
        ),
    )


def get_services(request: Request) -> Services:
    return request.app.state.services


def get_generation_service(request: Request) -> GenerationService:
    return get_services(request).generation_service


def get_generation_stream_service(request: Request) -> GenerationStreamService:
    return get_services(request).generation_stream_service


def get_api_key_service(request: Request) -> ApiKeyService:
    return get_services(request).api_key_service


def get_auth_service(request: Request) -> AuthService:
    return get_services(request).auth_service


def get_user_service(request: Request) -> UserService:
    return get_services(request).user_service


def get_hub_service(request: Request) -> HubService:
    return get_services(request).hub_service


def get_agent_service(request: Request) -> AgentService:
    return get_services(request).agent_service


def get_chat_service(request: Request) -> ChatService:
    return get_services(request).chat_service


def get_auth_context(
    request: Request,
    auth_service: Annotated[AuthService, Depends(get_auth_service)],
) -> RequestContext:
    """Authenticate request via the X-API-Key header and return context"""
    return auth_service.authenticate(request)


def get_admin_context(
    context: Annotated[RequestContext, Depends(get_auth_context)],
) -> RequestContext:
    if not context.is_admin:
        raise PermissionDeniedError("Only administrators can manage models")
    return context


# Type annotations for dependencies
GenerationServiceDep = Annotated[GenerationService, Depends(get_generation_service)]
GenerationStreamServiceDep = Annotated[GenerationStreamService, Depends(get_generation_stream_service)]
ApiKeyServiceDep = Annotated[ApiKeyService, Depends(get_api_key_service)]
UserServiceDep = Annotated[UserService, Depends(get_user_service)]
HubServiceDep = Annotated[HubService, Depends(get_hub_service)]
AgentServiceDep = Annotated[AgentService, Depends(get_agent_service)]
ChatServiceDep = Annotated[ChatService, Depends(get_chat_service)]
AuthContextDep = Annotated[RequestContext, Depends(get_auth_context)]
AdminContextDep = Annotated[RequestContext, Depends(get_admin_context)]
