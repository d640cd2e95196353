import asyncio

import httpx
import pytest

from chathub.services.generation_service import GenerationService
from chathub.services.ollama.errors import ModelUnavailableError, TransportFailureError, UpstreamProtocolError
from chathub.services.ollama.ollama_client import OllamaClient
from chathub.services.ollama.ollama_types import PullOutcome
from fake_ollama import FakeOllama, ndjson


def _service(fake: FakeOllama) -> GenerationService:
    client = OllamaClient("http://ollama.test", http_client=fake.http_client())
    return GenerationService(client, default_model="mistral:latest")


def test_resolve_options_fills_defaults() -> None:
    options = _service(FakeOllama()).resolve_options()

    assert options.model == "mistral:latest"
    assert options.system == ""
    assert options.context == []
    assert (options.temperature, options.top_p, options.top_k) == (0.7, 0.9, 40)


def test_resolve_options_keeps_explicit_zero_temperature() -> None:
    options = _service(FakeOllama()).resolve_options(model="llama3:8b", temperature=0.0, top_k=5)

    assert options.model == "llama3:8b"
    assert options.temperature == 0.0
    assert options.top_k == 5


def test_model_without_tag_matches_latest() -> None:
    service = _service(FakeOllama())

    assert asyncio.run(service.is_model_available("mistral"))
    assert asyncio.run(service.is_model_available("llama3:8b"))
    assert not asyncio.run(service.is_model_available("llama3"))


def test_is_model_available_is_false_when_listing_fails() -> None:
    fake = FakeOllama()
    fake.unreachable = True

    assert asyncio.run(_service(fake).is_model_available("mistral:latest")) is False


def test_generate_response_returns_result() -> None:
    fake = FakeOllama()
    service = _service(fake)

    result = asyncio.run(service.generate_response("Hi", service.resolve_options(context=[9])))

    assert result.success
    assert result.response == "Hello there"
    assert result.context == [1, 2, 3]
    assert result.model == "mistral:latest"
    assert fake.body_of("/api/generate")["context"] == [9]


def test_unavailable_model_never_reaches_generate() -> None:
    fake = FakeOllama()
    service = _service(fake)

    with pytest.raises(ModelUnavailableError, match="Model phi3 is not available"):
        asyncio.run(service.generate_response("Hi", service.resolve_options(model="phi3")))

    assert "/api/generate" not in fake.paths()


def test_unavailable_model_never_opens_stream() -> None:
    fake = FakeOllama()
    service = _service(fake)
    chunks = []

    with pytest.raises(ModelUnavailableError):
        asyncio.run(service.generate_stream_response(
            "Hi", service.resolve_options(model="phi3"), on_chunk=lambda text, record: chunks.append(text)
        ))

    assert chunks == []
    assert "/api/generate" not in fake.paths()


def test_stream_callbacks_fire_in_order_for_non_empty_fragments() -> None:
    fake = FakeOllama()
    service = _service(fake)
    fragments = []

    async def on_chunk(text, record):
        fragments.append(text)

    result = asyncio.run(service.generate_stream_response("Hi", None, on_chunk=on_chunk))

    assert fragments == ["Hel", "lo"]
    assert result.response == "Hello"
    assert result.context == [1, 2]
    assert result.done


def test_stream_failure_keeps_delivered_fragments() -> None:
    fake = FakeOllama()
    fake.stream_chunks = [ndjson({"response": "Hel", "done": False})]
    fake.stream_error = httpx.ReadTimeout("read timed out")
    service = _service(fake)
    fragments = []

    with pytest.raises(TransportFailureError):
        asyncio.run(service.generate_stream_response("Hi", None, on_chunk=lambda text, r: fragments.append(text)))

    assert fragments == ["Hel"]


def test_stream_without_done_record_still_completes() -> None:
    fake = FakeOllama()
    fake.stream_chunks = [b'{"response":"Hel","done":false}\n{"response":"lo","done":false}']
    service = _service(fake)

    result = asyncio.run(service.generate_stream_response("Hi", None))

    assert result.response == "Hello"
    assert result.context == []
    assert not result.done


def test_generation_stream_is_single_use() -> None:
    stream = _service(FakeOllama()).stream_response("Hi")

    async def consume_twice():
        async for _ in stream:
            pass
        async for _ in stream:
            pass

    with pytest.raises(RuntimeError):
        asyncio.run(consume_twice())
    assert stream.result is not None
    assert stream.result.response == "Hello"


def test_final_result_requires_a_finished_stream() -> None:
    service = _service(FakeOllama())

    with pytest.raises(UpstreamProtocolError):
        service.stream_response("Hi").final_result()
    with pytest.raises(UpstreamProtocolError):
        service.stream_pull("llama3:8b").final_result()


def test_pull_with_success_status_succeeds() -> None:
    fake = FakeOllama()
    statuses = []

    result = asyncio.run(_service(fake).pull_model("llama3:8b", on_progress=lambda e: statuses.append(e.status)))

    assert statuses == ["pulling manifest", "downloading", "success"]
    assert result.outcome == PullOutcome.SUCCEEDED
    assert fake.body_of("/api/pull") == {"name": "llama3:8b", "stream": True}


def test_pull_ending_without_success_is_unconfirmed() -> None:
    fake = FakeOllama()
    fake.pull_chunks = [ndjson({"status": "pulling manifest"})]

    result = asyncio.run(_service(fake).pull_model("llama3:8b"))

    assert result.outcome == PullOutcome.COMPLETED_UNCONFIRMED


def test_delete_model_message() -> None:
    message = asyncio.run(_service(FakeOllama()).delete_model("llama3:8b"))

    assert message == "Model llama3:8b removed successfully"


def test_malformed_line_between_records_does_not_interrupt_accumulation() -> None:
    fake = FakeOllama()
    fake.stream_chunks = [
        b'{"response":"Hel","done":false}\nnot-json\n',
        b'{"response":"lo","done":false}\n{"response":"","done":true,"context":[1,2]}\n',
    ]

    result = asyncio.run(_service(fake).generate_stream_response("Hi", None))

    assert result.response == "Hello"
    assert result.context == [1, 2]
