from typing import Literal

from pydantic import BaseModel, Field

from chathub.models.agent.responses import ExampleInteraction


PersonalityType = Literal["assistant", "expert", "creative", "analytical", "casual", "custom"]
Tone = Literal["formal", "friendly", "casual", "professional", "enthusiastic"]


class CreateAgentRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=50)
    description: str | None = Field(None, max_length=500)
    hub_id: str | None = Field(None, description="Hub the agent belongs to")
    system_prompt: str = Field("You are a helpful AI assistant.", min_length=1, max_length=2000)
    model: str | None = Field(None, description="Overrides the chat model when set")
    temperature: float = Field(0.7, ge=0.0, le=2.0)
    personality_type: PersonalityType = "assistant"
    traits: list[str] = Field(default_factory=list, max_length=20)
    tone: Tone = "friendly"
    expertise: list[str] = Field(default_factory=list, max_length=20)
    examples: list[ExampleInteraction] = Field(default_factory=list, max_length=10)


class UpdateAgentRequest(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=50)
    description: str | None = Field(None, max_length=500)
    system_prompt: str | None = Field(None, min_length=1, max_length=2000)
    model: str | None = None
    temperature: float | None = Field(None, ge=0.0, le=2.0)
    personality_type: PersonalityType | None = None
    traits: list[str] | None = Field(None, max_length=20)
    tone: Tone | None = None
    expertise: list[str] | None = Field(None, max_length=20)
    examples: list[ExampleInteraction] | None = Field(None, max_length=10)
    status: Literal["active", "archived"] | None = None
