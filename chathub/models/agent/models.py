from dataclasses import dataclass, field
from datetime import datetime

from chathub.models.agent.responses import AgentResponse, ExampleInteraction

DEFAULT_AGENT_SYSTEM_PROMPT = "You are a helpful AI assistant."
DEFAULT_TONE = "friendly"


@dataclass
class Agent:
    id: str
    user_id: str
    hub_id: str | None
    name: str
    description: str | None
    system_prompt: str
    model: str | None
    temperature: float
    personality_type: str
    tone: str
    status: str
    created_at: datetime
    updated_at: datetime
    traits: list[str] = field(default_factory=list)
    expertise: list[str] = field(default_factory=list)
    examples: list[ExampleInteraction] = field(default_factory=list)

    def full_system_prompt(self) -> str:
        """Base prompt followed by traits, a non-default tone, expertise and numbered examples"""
        prompt = self.system_prompt or DEFAULT_AGENT_SYSTEM_PROMPT

        if self.traits:
            prompt += f"\n\nPersonality traits: {', '.join(self.traits)}."

        if self.tone and self.tone != DEFAULT_TONE:
            prompt += f"\n\nCommunication tone: {self.tone}."

        if self.expertise:
            prompt += f"\n\nAreas of expertise: {', '.join(self.expertise)}."

        if self.examples:
            prompt += "\n\nExample interactions:"
            for i, example in enumerate(self.examples, start=1):
                prompt += f"\n{i}. User: {example.input}\nAssistant: {example.output}"

        return prompt

    def to_response(self) -> AgentResponse:
        return AgentResponse(
            id=self.id,
            hub_id=self.hub_id,
            name=self.name,
            description=self.description,
            system_prompt=self.system_prompt,
            model=self.model,
            temperature=self.temperature,
            personality_type=self.personality_type,
            traits=self.traits,
            tone=self.tone,
            expertise=self.expertise,
            examples=self.examples,
            status=self.status,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )
