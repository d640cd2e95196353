from datetime import datetime
from pydantic import BaseModel, Field


class UserResponse(BaseModel):
    id: str
    name: str
    email: str
    role: str
    created_at: datetime


class RegisterUserResponse(BaseModel):
    user: UserResponse
    api_key: str = Field(..., description="The user's first API key (only shown once)")
