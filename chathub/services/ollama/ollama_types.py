from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any


DEFAULT_TEMPERATURE = 0.7
DEFAULT_TOP_P = 0.9
DEFAULT_TOP_K = 40


@dataclass
class GenerationOptions:
    """Fully resolved parameters for a single generation call"""
    model: str
    system: str = ""
    context: list[Any] = field(default_factory=list)
    temperature: float = DEFAULT_TEMPERATURE
    top_p: float = DEFAULT_TOP_P
    top_k: int = DEFAULT_TOP_K

    def to_payload(self, prompt: str, stream: bool) -> dict[str, Any]:
        return {
            "model": self.model,
            "prompt": prompt,
            "system": self.system,
            "context": self.context,
            "stream": stream,
            "options": {
                "temperature": self.temperature,
                "top_p": self.top_p,
                "top_k": self.top_k,
            },
        }


@dataclass
class GenerationResult:
    success: bool
    response: str
    context: list[Any]
    model: str
    created_at: datetime
    done: bool = True
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "success": self.success,
            "response": self.response,
            "context": self.context,
            "model": self.model,
            "created_at": self.created_at.isoformat(),
            "done": self.done,
        }
        if self.error is not None:
            data["error"] = self.error
        return data


@dataclass
class ChunkRecord:
    """One decoded line of the generate stream"""
    response: str
    done: bool
    context: list[Any] | None = None
    model: str | None = None
    created_at: str | None = None
    raw: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "ChunkRecord":
        fragment = payload.get("response")
        done = bool(payload.get("done", False))
        context = payload.get("context") if done else None
        return cls(
            response=fragment if isinstance(fragment, str) else "",
            done=done,
            context=context if isinstance(context, list) else None,
            model=payload.get("model"),
            created_at=payload.get("created_at"),
            raw=payload,
        )


@dataclass
class ModelDescriptor:
    name: str
    size: int | None = None
    digest: str | None = None
    modified_at: str | None = None
    details: dict[str, Any] | None = None

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "ModelDescriptor":
        return cls(
            name=payload.get("name") or payload.get("model") or "",
            size=payload.get("size"),
            digest=payload.get("digest"),
            modified_at=payload.get("modified_at"),
            details=payload.get("details"),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "size": self.size,
            "digest": self.digest,
            "modified_at": self.modified_at,
            "details": self.details,
        }


@dataclass
class PullProgressEvent:
    status: str
    digest: str | None = None
    total: int | None = None
    completed: int | None = None
    raw: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "PullProgressEvent":
        return cls(
            status=str(payload.get("status", "")),
            digest=payload.get("digest"),
            total=payload.get("total"),
            completed=payload.get("completed"),
            raw=payload,
        )

    @property
    def percentage(self) -> float | None:
        if not self.total or self.completed is None:
            return None
        return round(self.completed / self.total * 100, 1)


class PullOutcome(str, Enum):
    SUCCEEDED = "succeeded"
    # The stream ended without an explicit "success" status
    COMPLETED_UNCONFIRMED = "completed_unconfirmed"


@dataclass
class PullResult:
    outcome: PullOutcome
    model: str
    message: str


@dataclass
class EmbeddingResult:
    embeddings: list[float]
    model: str


@dataclass
class ConnectionStatus:
    success: bool
    models: list[ModelDescriptor]
    message: str
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "success": self.success,
            "models": [m.to_dict() for m in self.models],
            "message": self.message,
        }
        if self.error is not None:
            data["error"] = self.error
        return data


def utc_now() -> datetime:
    return datetime.now(timezone.utc)
