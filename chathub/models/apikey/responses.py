from datetime import datetime
from pydantic import BaseModel, Field


class ApiKeyResponse(BaseModel):
    """Key metadata; the key itself is never returned after creation"""
    id: str
    name: str
    created_at: datetime
    revoked_at: datetime | None = None
    in_use: bool = Field(False, description="Whether this key authenticated the current request")


class CreateApiKeyResponse(BaseModel):
    id: str
    name: str
    key: str = Field(..., description="Plaintext key, shown only in this response")
    created_at: datetime


class ListApiKeysResponse(BaseModel):
    keys: list[ApiKeyResponse]


class RevokeApiKeyResponse(BaseModel):
    id: str
    message: str
