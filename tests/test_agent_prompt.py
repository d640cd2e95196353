from datetime import datetime, timezone

from chathub.models.agent.models import Agent
from chathub.models.agent.responses import ExampleInteraction


def _agent(**overrides) -> Agent:
    now = datetime.now(timezone.utc)
    fields = dict(
        id="a1",
        user_id="u1",
        hub_id=None,
        name="Helper",
        description=None,
        system_prompt="You are a chef.",
        model=None,
        temperature=0.7,
        personality_type="assistant",
        tone="friendly",
        status="active",
        created_at=now,
        updated_at=now,
    )
    fields.update(overrides)
    return Agent(**fields)


def test_plain_agent_uses_base_prompt_only() -> None:
    assert _agent().full_system_prompt() == "You are a chef."


def test_empty_base_prompt_uses_default() -> None:
    assert _agent(system_prompt="").full_system_prompt() == "You are a helpful AI assistant."


def test_full_prompt_composition() -> None:
    agent = _agent(
        traits=["patient", "precise"],
        tone="formal",
        expertise=["baking", "pastry"],
        examples=[
            ExampleInteraction(input="Bread?", output="Flour, water, salt."),
            ExampleInteraction(input="Cake?", output="Eggs and sugar."),
        ],
    )

    assert agent.full_system_prompt() == (
        "You are a chef."
        "\n\nPersonality traits: patient, precise."
        "\n\nCommunication tone: formal."
        "\n\nAreas of expertise: baking, pastry."
        "\n\nExample interactions:"
        "\n1. User: Bread?\nAssistant: Flour, water, salt."
        "\n2. User: Cake?\nAssistant: Eggs and sugar."
    )


def test_default_tone_is_not_mentioned() -> None:
    assert "Communication tone" not in _agent(tone="friendly", traits=["calm"]).full_system_prompt()
