"""Scripted stand-in for the Ollama HTTP API, served through httpx.MockTransport."""

import json
from typing import Any, AsyncIterator

import httpx


async def byte_stream(chunks: list[bytes], error: Exception | None = None) -> AsyncIterator[bytes]:
    for chunk in chunks:
        yield chunk
    if error is not None:
        raise error


def ndjson(*records: dict[str, Any]) -> bytes:
    return b"".join(json.dumps(r).encode() + b"\n" for r in records)


class FakeOllama:
    """
    Scripted stand-in for the Ollama HTTP API.

    Tests tweak the attributes, then inspect `requests` to see which
    endpoints were hit.
    """

    def __init__(self) -> None:
        self.models = ["mistral:latest", "llama3:8b"]
        self.generate_body: dict[str, Any] = {
            "model": "mistral:latest",
            "created_at": "2024-05-01T12:00:00Z",
            "response": "Hello there",
            "done": True,
            "context": [1, 2, 3],
        }
        self.generate_status = 200
        self.generate_error: Exception | None = None
        self.stream_chunks = [
            ndjson({"model": "mistral:latest", "response": "Hel", "done": False}),
            ndjson({"model": "mistral:latest", "response": "lo", "done": False}),
            ndjson({"model": "mistral:latest", "response": "", "done": True, "context": [1, 2]}),
        ]
        self.stream_error: Exception | None = None
        self.pull_chunks = [
            ndjson({"status": "pulling manifest"}),
            ndjson({"status": "downloading", "digest": "sha256:abc", "total": 200, "completed": 50}),
            ndjson({"status": "success"}),
        ]
        self.embedding = [0.1, 0.2, 0.3]
        self.unreachable = False
        self.requests: list[httpx.Request] = []

    def paths(self) -> list[str]:
        return [r.url.path for r in self.requests]

    def body_of(self, path: str) -> dict[str, Any]:
        for request in self.requests:
            if request.url.path == path:
                return json.loads(request.content)
        raise AssertionError(f"No request to {path}")

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.unreachable:
            raise httpx.ConnectError("Connection refused", request=request)

        path = request.url.path
        if path == "/api/tags":
            return httpx.Response(200, json={"models": [{"name": name, "size": 1} for name in self.models]})

        if path == "/api/generate":
            body = json.loads(request.content)
            if body["stream"]:
                return httpx.Response(200, content=byte_stream(self.stream_chunks, self.stream_error))
            if self.generate_error is not None:
                raise self.generate_error
            return httpx.Response(self.generate_status, json=self.generate_body)

        if path == "/api/embeddings":
            return httpx.Response(200, json={"embedding": self.embedding})

        if path == "/api/pull":
            return httpx.Response(200, content=byte_stream(self.pull_chunks))

        if path == "/api/delete":
            return httpx.Response(200)

        return httpx.Response(404, json={"error": "not found"})

    def http_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self.handler))
