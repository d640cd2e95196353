from typing import Any

from pydantic import BaseModel, Field


class GenerateRequest(BaseModel):
    prompt: str = Field(..., min_length=1, max_length=10000, description="Prompt text")
    model: str | None = Field(None, description="Model name; the configured default is used when omitted")
    system: str | None = Field(None, max_length=10000)
    context: list[Any] | None = Field(None, description="Opaque context returned by a previous generation")
    temperature: float | None = Field(None, ge=0.0, le=2.0)
    top_p: float | None = Field(None, ge=0.0, le=1.0)
    top_k: int | None = Field(None, ge=1, le=100)
    stream: bool = False


class EmbeddingsRequest(BaseModel):
    text: str = Field(..., min_length=1, max_length=5000)
    model: str | None = None


class PullModelRequest(BaseModel):
    model: str = Field(..., min_length=1, max_length=200, description="Model name, e.g. mistral:latest")
