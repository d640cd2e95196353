from dataclasses import dataclass
from datetime import datetime

from chathub.models.hub.responses import HubResponse


@dataclass
class Hub:
    id: str
    user_id: str
    name: str
    description: str | None
    icon: str
    color: str
    category: str
    default_model: str | None
    default_temperature: float
    status: str
    created_at: datetime
    updated_at: datetime
    chat_count: int = 0
    agent_count: int = 0

    def to_response(self) -> HubResponse:
        return HubResponse(
            id=self.id,
            name=self.name,
            description=self.description,
            icon=self.icon,
            color=self.color,
            category=self.category,
            default_model=self.default_model,
            default_temperature=self.default_temperature,
            status=self.status,
            created_at=self.created_at,
            updated_at=self.updated_at,
            chat_count=self.chat_count,
            agent_count=self.agent_count,
        )
