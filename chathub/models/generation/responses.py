from datetime import datetime
from typing import Any

from pydantic import BaseModel


class StatusResponse(BaseModel):
    success: bool
    message: str
    models: list[dict[str, Any]] = []
    error: str | None = None


class ModelListResponse(BaseModel):
    success: bool
    models: list[dict[str, Any]]


class GenerateResponse(BaseModel):
    success: bool
    response: str
    context: list[Any]
    model: str
    created_at: datetime
    done: bool


class EmbeddingsResponse(BaseModel):
    success: bool
    embeddings: list[float]
    model: str


class DeleteModelResponse(BaseModel):
    success: bool
    message: str


class CheckModelResponse(BaseModel):
    success: bool
    model: str
    available: bool
