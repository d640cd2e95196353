from typing import Any, AsyncGenerator

import httpx
import structlog

from chathub.services.ollama.chunk_decoder import decode_stream
from chathub.services.ollama.errors import (
    GenerationError,
    TransportFailureError,
    UpstreamProtocolError,
)
from chathub.services.ollama.ollama_types import (
    ChunkRecord,
    ConnectionStatus,
    EmbeddingResult,
    GenerationOptions,
    ModelDescriptor,
    PullProgressEvent,
)


logger = structlog.get_logger(__name__)

MAX_ERROR_BODY_LENGTH = 300


class OllamaClient:
    """
    Thin async HTTP client for the Ollama REST API.

    Every call carries its own timeout: a short one for the connectivity
    probe, the configured one for generation, and a long one for pulls.
    Streaming calls are consumed inside `client.stream(...)`, so the upstream
    connection is released however iteration ends.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 120.0,
        probe_timeout: float = 5.0,
        pull_timeout: float = 300.0,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.probe_timeout = probe_timeout
        self.pull_timeout = pull_timeout
        self._client = http_client or httpx.AsyncClient()
        self._owns_client = http_client is None

    def _url(self, path: str) -> str:
        return f"{self.base_url}{path}"

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    # ------------------------------------------------------------------
    # Model discovery
    # ------------------------------------------------------------------
    async def test_connection(self) -> ConnectionStatus:
        """Probe the listing endpoint; never raises"""
        try:
            models = await self._list_models(timeout=self.probe_timeout)
        except GenerationError as e:
            logger.warning("ollama_probe_failed", base_url=self.base_url, error=e.message)
            return ConnectionStatus(
                success=False,
                models=[],
                message="Failed to connect to Ollama",
                error=e.message,
            )

        return ConnectionStatus(
            success=True,
            models=models,
            message="Connected to Ollama",
        )

    async def list_models(self) -> list[ModelDescriptor]:
        return await self._list_models(timeout=self.timeout)

    async def _list_models(self, timeout: float) -> list[ModelDescriptor]:
        data = await self._request_json("GET", "/api/tags", "Listing models", timeout=timeout)
        raw_models = data.get("models") or []
        if not isinstance(raw_models, list):
            raise UpstreamProtocolError("Listing models failed: 'models' is not a list")

        return [
            ModelDescriptor.from_payload(item)
            for item in raw_models
            if isinstance(item, dict)
        ]

    # ------------------------------------------------------------------
    # Generation
    # ------------------------------------------------------------------
    async def generate(self, prompt: str, options: GenerationOptions) -> dict[str, Any]:
        return await self._request_json(
            "POST",
            "/api/generate",
            "Generating response",
            json=options.to_payload(prompt, stream=False),
        )

    async def stream_generate(
        self,
        prompt: str,
        options: GenerationOptions,
    ) -> AsyncGenerator[ChunkRecord, None]:
        async for payload in self._stream_records(
            "/api/generate",
            options.to_payload(prompt, stream=True),
            "Streaming response",
            timeout=self.timeout,
        ):
            yield ChunkRecord.from_payload(payload)

    async def embeddings(self, text: str, model: str) -> EmbeddingResult:
        data = await self._request_json(
            "POST",
            "/api/embeddings",
            "Generating embeddings",
            json={"model": model, "prompt": text},
        )
        vector = data.get("embedding")
        if not isinstance(vector, list):
            raise UpstreamProtocolError("Generating embeddings failed: no embedding in response")

        return EmbeddingResult(
            embeddings=[float(value) for value in vector],
            model=data.get("model") or model,
        )

    # ------------------------------------------------------------------
    # Model management
    # ------------------------------------------------------------------
    async def stream_pull(self, name: str) -> AsyncGenerator[PullProgressEvent, None]:
        logger.info("ollama_pull_started", model=name)
        async for payload in self._stream_records(
            "/api/pull",
            {"name": name, "stream": True},
            f"Pulling model {name}",
            timeout=self.pull_timeout,
        ):
            yield PullProgressEvent.from_payload(payload)

    async def delete_model(self, name: str) -> None:
        await self._send("DELETE", "/api/delete", f"Deleting model {name}", json={"name": name})
        logger.info("ollama_model_deleted", model=name)

    # ------------------------------------------------------------------
    # Transport helpers
    # ------------------------------------------------------------------
    async def _send(
        self,
        method: str,
        path: str,
        action: str,
        json: dict[str, Any] | None = None,
        timeout: float | None = None,
    ) -> httpx.Response:
        try:
            response = await self._client.request(
                method,
                self._url(path),
                json=json,
                timeout=timeout if timeout is not None else self.timeout,
            )
        except httpx.TimeoutException as e:
            raise TransportFailureError(f"{action} timed out: {e}") from e
        except httpx.HTTPError as e:
            raise TransportFailureError(f"{action} failed: {e}") from e

        await self._check_status(response, action)
        return response

    async def _request_json(
        self,
        method: str,
        path: str,
        action: str,
        json: dict[str, Any] | None = None,
        timeout: float | None = None,
    ) -> dict[str, Any]:
        response = await self._send(method, path, action, json=json, timeout=timeout)
        try:
            data = response.json()
        except ValueError as e:
            raise UpstreamProtocolError(f"{action} failed: invalid JSON response") from e
        if not isinstance(data, dict):
            raise UpstreamProtocolError(f"{action} failed: unexpected response payload")
        return data

    async def _stream_records(
        self,
        path: str,
        payload: dict[str, Any],
        action: str,
        timeout: float,
    ) -> AsyncGenerator[dict[str, Any], None]:
        try:
            async with self._client.stream(
                "POST",
                self._url(path),
                json=payload,
                timeout=timeout,
            ) as response:
                await self._check_status(response, action)
                async for record in decode_stream(response.aiter_bytes()):
                    if "error" in record:
                        raise UpstreamProtocolError(f"{action} failed: {record['error']}")
                    yield record
        except httpx.TimeoutException as e:
            raise TransportFailureError(f"{action} timed out: {e}") from e
        except httpx.HTTPError as e:
            raise TransportFailureError(f"{action} failed: {e}") from e

    async def _check_status(self, response: httpx.Response, action: str) -> None:
        if not response.is_error:
            return

        body = (await response.aread()).decode("utf-8", errors="replace")
        detail = body[:MAX_ERROR_BODY_LENGTH]
        try:
            upstream_error = response.json().get("error")
        except (ValueError, AttributeError):
            upstream_error = None
        if isinstance(upstream_error, str):
            detail = upstream_error

        raise TransportFailureError(
            f"{action} failed with HTTP {response.status_code}: {detail}"
        )
