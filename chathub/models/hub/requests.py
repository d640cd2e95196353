from typing import Literal

from pydantic import BaseModel, Field


HubCategory = Literal["work", "personal", "education", "research", "creative", "other"]
HEX_COLOR_PATTERN = r"^#([A-Fa-f0-9]{6}|[A-Fa-f0-9]{3})$"


class CreateHubRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=50, description="Hub name")
    description: str | None = Field(None, max_length=500)
    icon: str = Field("folder", max_length=50)
    color: str = Field("#3b82f6", pattern=HEX_COLOR_PATTERN)
    category: HubCategory = "other"
    default_model: str | None = Field(None, description="Model used by chats in this hub unless overridden")
    default_temperature: float = Field(0.7, ge=0.0, le=2.0)


class UpdateHubRequest(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=50)
    description: str | None = Field(None, max_length=500)
    icon: str | None = Field(None, max_length=50)
    color: str | None = Field(None, pattern=HEX_COLOR_PATTERN)
    category: HubCategory | None = None
    default_model: str | None = None
    default_temperature: float | None = Field(None, ge=0.0, le=2.0)
    status: Literal["active", "archived"] | None = None
