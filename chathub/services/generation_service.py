import inspect
from datetime import datetime
from typing import Any, AsyncGenerator, Awaitable, Callable

import structlog

from chathub.services.ollama.chunk_decoder import GenerationAccumulator
from chathub.services.ollama.errors import (
    GenerationError,
    ModelUnavailableError,
    UpstreamProtocolError,
)
from chathub.services.ollama.ollama_client import OllamaClient
from chathub.services.ollama.ollama_types import (
    DEFAULT_TEMPERATURE,
    DEFAULT_TOP_K,
    DEFAULT_TOP_P,
    ChunkRecord,
    ConnectionStatus,
    EmbeddingResult,
    GenerationOptions,
    GenerationResult,
    ModelDescriptor,
    PullOutcome,
    PullProgressEvent,
    PullResult,
    utc_now,
)


logger = structlog.get_logger(__name__)

ChunkCallback = Callable[[str, ChunkRecord], Awaitable[None] | None]
ProgressCallback = Callable[[PullProgressEvent], Awaitable[None] | None]


async def _invoke(callback: Callable[..., Any], *args: Any) -> None:
    result = callback(*args)
    if inspect.isawaitable(result):
        await result


def _split_model_tag(name: str) -> tuple[str, str]:
    base, _, tag = name.strip().partition(":")
    return base, tag or "latest"


def _model_matches(requested: str, candidate: str) -> bool:
    """`mistral` and `mistral:latest` name the same model"""
    return _split_model_tag(requested) == _split_model_tag(candidate)


def _parse_timestamp(value: Any) -> datetime:
    if isinstance(value, str):
        try:
            return datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            pass
    return utc_now()


class GenerationStream:
    """
    Lazy, single-use stream of generate records.

    Iterating checks model availability, then yields every decoded record in
    arrival order. Once the upstream signals completion (or closes the
    connection) `result` holds the final GenerationResult. A failure ends the
    iteration with an exception; records already yielded stay delivered.
    """

    def __init__(self, service: "GenerationService", prompt: str, options: GenerationOptions) -> None:
        self._service = service
        self._prompt = prompt
        self.options = options
        self._accumulator = GenerationAccumulator()
        self._started = False
        self.result: GenerationResult | None = None

    def __aiter__(self) -> AsyncGenerator[ChunkRecord, None]:
        if self._started:
            raise RuntimeError("GenerationStream can only be iterated once")
        self._started = True
        return self._iterate()

    async def _iterate(self) -> AsyncGenerator[ChunkRecord, None]:
        await self._service.ensure_model_available(self.options.model)

        async for record in self._service.client.stream_generate(self._prompt, self.options):
            self._accumulator.add(record)
            yield record

        self.result = GenerationResult(
            success=True,
            response=self._accumulator.text,
            context=self._accumulator.context,
            model=self._accumulator.model or self.options.model,
            created_at=utc_now(),
            done=self._accumulator.done,
        )

    def final_result(self) -> GenerationResult:
        if self.result is None:
            raise UpstreamProtocolError("Generation stream was not read to the end")
        return self.result


class PullStream:
    """Single-use stream of pull progress events; `result` is set once the stream ends"""

    def __init__(self, client: OllamaClient, model: str) -> None:
        self._client = client
        self.model = model
        self.result: PullResult | None = None

    async def __aiter__(self) -> AsyncGenerator[PullProgressEvent, None]:
        confirmed = False
        async for event in self._client.stream_pull(self.model):
            if event.status == "success":
                confirmed = True
            yield event

        if confirmed:
            self.result = PullResult(
                outcome=PullOutcome.SUCCEEDED,
                model=self.model,
                message=f"Model {self.model} downloaded successfully",
            )
        else:
            logger.warning("ollama_pull_unconfirmed", model=self.model)
            self.result = PullResult(
                outcome=PullOutcome.COMPLETED_UNCONFIRMED,
                model=self.model,
                message=f"Download of model {self.model} finished without confirmation",
            )

    def final_result(self) -> PullResult:
        if self.result is None:
            raise UpstreamProtocolError(f"Pull of model {self.model} was not read to the end")
        return self.result


class GenerationService:
    """Public generation surface used by route handlers and the chat service"""

    def __init__(
        self,
        client: OllamaClient,
        default_model: str,
        embedding_model: str = "nomic-embed-text",
    ) -> None:
        self.client = client
        self.default_model = default_model
        self.embedding_model = embedding_model

    def resolve_options(
        self,
        model: str | None = None,
        system: str | None = None,
        context: list[Any] | None = None,
        temperature: float | None = None,
        top_p: float | None = None,
        top_k: int | None = None,
    ) -> GenerationOptions:
        return GenerationOptions(
            model=model or self.default_model,
            system=system or "",
            context=list(context) if context else [],
            temperature=temperature if temperature is not None else DEFAULT_TEMPERATURE,
            top_p=top_p if top_p is not None else DEFAULT_TOP_P,
            top_k=top_k if top_k is not None else DEFAULT_TOP_K,
        )

    async def test_connection(self) -> ConnectionStatus:
        return await self.client.test_connection()

    async def get_available_models(self) -> list[ModelDescriptor]:
        return await self.client.list_models()

    async def is_model_available(self, name: str) -> bool:
        if not name:
            return False
        try:
            models = await self.get_available_models()
        except GenerationError as e:
            logger.warning("model_availability_unknown", model=name, error=e.message)
            return False
        return any(_model_matches(name, m.name) for m in models)

    async def ensure_model_available(self, name: str) -> None:
        if not await self.is_model_available(name):
            raise ModelUnavailableError(name)

    async def generate_response(
        self,
        prompt: str,
        options: GenerationOptions | None = None,
    ) -> GenerationResult:
        options = options or self.resolve_options()
        await self.ensure_model_available(options.model)

        data = await self.client.generate(prompt, options)
        response_text = data.get("response")
        if not isinstance(response_text, str):
            raise UpstreamProtocolError("Generating response failed: no response text in reply")

        context = data.get("context")
        return GenerationResult(
            success=True,
            response=response_text,
            context=context if isinstance(context, list) else [],
            model=data.get("model") or options.model,
            created_at=_parse_timestamp(data.get("created_at")),
            done=bool(data.get("done", True)),
        )

    def stream_response(
        self,
        prompt: str,
        options: GenerationOptions | None = None,
    ) -> GenerationStream:
        return GenerationStream(self, prompt, options or self.resolve_options())

    async def generate_stream_response(
        self,
        prompt: str,
        options: GenerationOptions | None,
        on_chunk: ChunkCallback | None = None,
    ) -> GenerationResult:
        stream = self.stream_response(prompt, options)
        async for record in stream:
            if record.response and on_chunk is not None:
                await _invoke(on_chunk, record.response, record)

        return stream.final_result()

    async def generate_embeddings(self, text: str, model: str | None = None) -> EmbeddingResult:
        return await self.client.embeddings(text, model or self.embedding_model)

    def stream_pull(self, name: str) -> PullStream:
        return PullStream(self.client, name)

    async def pull_model(
        self,
        name: str,
        on_progress: ProgressCallback | None = None,
    ) -> PullResult:
        stream = self.stream_pull(name)
        async for event in stream:
            if on_progress is not None:
                await _invoke(on_progress, event)

        return stream.final_result()

    async def delete_model(self, name: str) -> str:
        await self.client.delete_model(name)
        return f"Model {name} removed successfully"
