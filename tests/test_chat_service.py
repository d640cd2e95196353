import asyncio
import json

import httpx
import pytest

from chathub.api.dependencies import Services
from chathub.models.agent.requests import CreateAgentRequest
from chathub.models.agent.responses import ExampleInteraction
from chathub.models.chat.requests import AddMessageRequest, CreateChatRequest
from chathub.models.hub.requests import CreateHubRequest
from chathub.services.agent_service import HubNotFoundError
from chathub.services.chat_service import AgentNotFoundError
from prompts.chat_prompts import DEFAULT_SYSTEM_PROMPT, FALLBACK_MESSAGE


@pytest.fixture
def user_id(services: Services) -> str:
    result = services.user_service.register_user("Ana", "ana@example.com")
    assert result is not None
    return result.user.id


def _send(services: Services, chat_id: str, user_id: str, content: str):
    return asyncio.run(services.chat_service.add_message(chat_id, user_id, AddMessageRequest(content=content)))


def test_reply_is_stored_verbatim_and_context_saved(services: Services, fake_ollama, user_id: str) -> None:
    fake_ollama.generate_body["response"] = "Olá! Como posso ajudar?"
    chat = services.chat_service.create_chat(user_id, CreateChatRequest(title="Greetings"))

    added = _send(services, chat.id, user_id, "Olá!")

    assert added.message.content == "Olá!"
    assert added.message.role == "user"
    assert added.reply.role == "assistant"
    assert added.reply.content == "Olá! Como posso ajudar?"
    assert added.reply.model == "mistral:latest"

    body = fake_ollama.body_of("/api/generate")
    assert body["prompt"] == "Olá!"
    assert body["system"] == DEFAULT_SYSTEM_PROMPT
    assert body["options"]["temperature"] == 0.7
    assert services.chat_service.get_chat(chat.id, user_id).context == [1, 2, 3]


def test_stored_context_is_replayed_on_next_turn(services: Services, fake_ollama, user_id: str) -> None:
    chat = services.chat_service.create_chat(user_id, CreateChatRequest())

    _send(services, chat.id, user_id, "first")
    fake_ollama.requests.clear()
    _send(services, chat.id, user_id, "second")

    assert fake_ollama.body_of("/api/generate")["context"] == [1, 2, 3]


def test_generation_failure_stores_fallback_reply(services: Services, fake_ollama, user_id: str) -> None:
    fake_ollama.unreachable = True
    chat = services.chat_service.create_chat(user_id, CreateChatRequest())

    added = _send(services, chat.id, user_id, "Hello?")

    assert added.reply.content == FALLBACK_MESSAGE
    messages = services.chat_service.get_messages(chat.id, user_id)
    assert [(m.role, m.content) for m in messages] == [
        ("user", "Hello?"),
        ("assistant", FALLBACK_MESSAGE),
    ]


def test_upstream_error_during_generate_stores_fallback_reply(services: Services, fake_ollama, user_id: str) -> None:
    fake_ollama.generate_status = 500
    fake_ollama.generate_body = {"error": "model crashed"}
    chat = services.chat_service.create_chat(user_id, CreateChatRequest())

    added = _send(services, chat.id, user_id, "hi")

    assert "/api/generate" in fake_ollama.paths()
    assert added.reply.content == FALLBACK_MESSAGE
    messages = services.chat_service.get_messages(chat.id, user_id)
    assert [(m.role, m.content) for m in messages] == [("user", "hi"), ("assistant", FALLBACK_MESSAGE)]
    assert services.chat_service.get_chat(chat.id, user_id).context == []


def test_timeout_during_generate_keeps_previous_context(services: Services, fake_ollama, user_id: str) -> None:
    chat = services.chat_service.create_chat(user_id, CreateChatRequest())
    _send(services, chat.id, user_id, "first")

    fake_ollama.generate_error = httpx.ReadTimeout("timed out")
    fake_ollama.generate_body["context"] = [9, 9]
    added = _send(services, chat.id, user_id, "second")

    assert added.reply.content == FALLBACK_MESSAGE
    messages = services.chat_service.get_messages(chat.id, user_id)
    assert [(m.role, m.content) for m in messages] == [
        ("user", "first"),
        ("assistant", "Hello there"),
        ("user", "second"),
        ("assistant", FALLBACK_MESSAGE),
    ]
    assert services.chat_service.get_chat(chat.id, user_id).context == [1, 2, 3]


def test_unavailable_model_falls_back_without_generating(services: Services, fake_ollama, user_id: str) -> None:
    chat = services.chat_service.create_chat(user_id, CreateChatRequest(model_name="phi3"))

    added = _send(services, chat.id, user_id, "Hello?")

    assert added.reply.content == FALLBACK_MESSAGE
    assert "/api/generate" not in fake_ollama.paths()
    assert services.chat_service.get_chat(chat.id, user_id).context == []


def test_agent_configuration_drives_the_reply(services: Services, fake_ollama, user_id: str) -> None:
    agent = services.agent_service.create_agent(user_id, CreateAgentRequest(
        name="Chef",
        system_prompt="You are a chef.",
        model="llama3:8b",
        temperature=0.3,
        traits=["patient", "precise"],
        tone="formal",
        expertise=["baking"],
        examples=[ExampleInteraction(input="Bread?", output="Flour, water, salt.")],
    ))
    chat = services.chat_service.create_chat(user_id, CreateChatRequest(agent_id=agent.id, model_name="mistral:latest"))

    _send(services, chat.id, user_id, "How do I start?")

    body = fake_ollama.body_of("/api/generate")
    assert body["model"] == "llama3:8b"
    assert body["options"]["temperature"] == 0.3
    assert body["system"] == agent.full_system_prompt()


def test_deleted_agent_falls_back_to_default_prompt(services: Services, fake_ollama, user_id: str) -> None:
    agent = services.agent_service.create_agent(user_id, CreateAgentRequest(name="Temp", model="llama3:8b"))
    chat = services.chat_service.create_chat(user_id, CreateChatRequest(agent_id=agent.id))
    services.agent_service.delete_agent(agent.id, user_id)

    _send(services, chat.id, user_id, "Hi")

    body = fake_ollama.body_of("/api/generate")
    assert body["system"] == DEFAULT_SYSTEM_PROMPT
    assert body["model"] == "mistral:latest"


def test_non_user_message_gets_no_reply(services: Services, fake_ollama, user_id: str) -> None:
    chat = services.chat_service.create_chat(user_id, CreateChatRequest())

    added = asyncio.run(services.chat_service.add_message(
        chat.id, user_id, AddMessageRequest(content="Note", role="system")
    ))

    assert added.reply is None
    assert "/api/generate" not in fake_ollama.paths()


def test_chat_uses_hub_default_model(services: Services, fake_ollama, user_id: str) -> None:
    hub = services.hub_service.create_hub(user_id, CreateHubRequest(name="Work", default_model="llama3:8b"))
    chat = services.chat_service.create_chat(user_id, CreateChatRequest(hub_id=hub.id))

    _send(services, chat.id, user_id, "Hi")

    assert chat.model_name == "llama3:8b"
    assert json.loads(fake_ollama.requests[-1].content)["model"] == "llama3:8b"


def test_chat_rejects_foreign_hub_and_agent(services: Services, user_id: str) -> None:
    other = services.user_service.register_user("Bruno", "bruno@example.com").user.id
    hub = services.hub_service.create_hub(other, CreateHubRequest(name="Private"))
    agent = services.agent_service.create_agent(other, CreateAgentRequest(name="Theirs"))

    with pytest.raises(HubNotFoundError):
        services.chat_service.create_chat(user_id, CreateChatRequest(hub_id=hub.id))
    with pytest.raises(AgentNotFoundError):
        services.chat_service.create_chat(user_id, CreateChatRequest(agent_id=agent.id))


def test_messages_of_other_users_chat_are_hidden(services: Services, user_id: str) -> None:
    other = services.user_service.register_user("Bruno", "bruno@example.com").user.id
    chat = services.chat_service.create_chat(user_id, CreateChatRequest())

    assert services.chat_service.get_chat(chat.id, other) is None
    assert services.chat_service.get_messages(chat.id, other) is None
    assert asyncio.run(services.chat_service.add_message(chat.id, other, AddMessageRequest(content="x"))) is None


def test_agentless_chat_uses_hub_temperature(services: Services, fake_ollama, user_id: str) -> None:
    hub = services.hub_service.create_hub(user_id, CreateHubRequest(name="Ideas", default_temperature=1.5))
    chat = services.chat_service.create_chat(user_id, CreateChatRequest(hub_id=hub.id))

    _send(services, chat.id, user_id, "Brainstorm")

    assert fake_ollama.body_of("/api/generate")["options"]["temperature"] == 1.5


def test_agent_temperature_wins_over_hub_temperature(services: Services, fake_ollama, user_id: str) -> None:
    hub = services.hub_service.create_hub(user_id, CreateHubRequest(name="Ideas", default_temperature=1.5))
    agent = services.agent_service.create_agent(user_id, CreateAgentRequest(name="Calm", temperature=0.2))
    chat = services.chat_service.create_chat(user_id, CreateChatRequest(hub_id=hub.id, agent_id=agent.id))

    _send(services, chat.id, user_id, "Brainstorm")

    assert fake_ollama.body_of("/api/generate")["options"]["temperature"] == 0.2


def test_deleted_hub_falls_back_to_default_temperature(services: Services, fake_ollama, user_id: str) -> None:
    hub = services.hub_service.create_hub(user_id, CreateHubRequest(name="Ideas", default_temperature=1.5))
    chat = services.chat_service.create_chat(user_id, CreateChatRequest(hub_id=hub.id))
    services.hub_service.delete_hub(hub.id, user_id)

    _send(services, chat.id, user_id, "Brainstorm")

    assert fake_ollama.body_of("/api/generate")["options"]["temperature"] == 0.7
