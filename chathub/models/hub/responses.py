from datetime import datetime
from pydantic import BaseModel


class HubResponse(BaseModel):
    id: str
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
    chat_count: int
    agent_count: int


class HubListResponse(BaseModel):
    hubs: list[HubResponse]


class DeleteHubResponse(BaseModel):
    id: str
    message: str
