from datetime import datetime
from pydantic import BaseModel, Field


class ExampleInteraction(BaseModel):
    input: str = Field(..., min_length=1, max_length=1000)
    output: str = Field(..., min_length=1, max_length=2000)


class AgentResponse(BaseModel):
    id: str
    hub_id: str | None
    name: str
    description: str | None
    system_prompt: str
    model: str | None
    temperature: float
    personality_type: str
    traits: list[str]
    tone: str
    expertise: list[str]
    examples: list[ExampleInteraction]
    status: str
    created_at: datetime
    updated_at: datetime


class AgentListResponse(BaseModel):
    agents: list[AgentResponse]


class DeleteAgentResponse(BaseModel):
    id: str
    message: str
