import json

import httpx

from fake_ollama import ndjson


def _lines(response) -> list[dict]:
    return [json.loads(line) for line in response.text.splitlines() if line]


def test_status_reports_connection(client) -> None:
    response = client.get("/api/ollama/status")

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["message"] == "Connected to Ollama"
    assert [m["name"] for m in body["models"]] == ["mistral:latest", "llama3:8b"]


def test_status_unreachable_is_not_an_http_error(client, fake_ollama) -> None:
    fake_ollama.unreachable = True

    response = client.get("/api/ollama/status")

    assert response.status_code == 200
    assert response.json()["success"] is False
    assert response.json()["error"]


def test_list_models_unreachable_is_bad_gateway(client, fake_ollama) -> None:
    fake_ollama.unreachable = True

    response = client.get("/api/ollama/models")

    assert response.status_code == 502
    assert response.json()["success"] is False
    assert response.json()["error"] == "TransportFailureError"


def test_generate(client, fake_ollama) -> None:
    response = client.post("/api/ollama/generate", json={"prompt": "Hi", "temperature": 0.1})

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["response"] == "Hello there"
    assert body["context"] == [1, 2, 3]
    assert body["model"] == "mistral:latest"
    assert fake_ollama.body_of("/api/generate")["options"]["temperature"] == 0.1


def test_generate_unknown_model_is_not_found(client, fake_ollama) -> None:
    response = client.post("/api/ollama/generate", json={"prompt": "Hi", "model": "phi3"})

    assert response.status_code == 404
    assert response.json() == {
        "success": False,
        "message": "Model phi3 is not available",
        "error": "ModelUnavailableError",
    }
    assert "/api/generate" not in fake_ollama.paths()


def test_generate_upstream_failure_is_bad_gateway(client, fake_ollama) -> None:
    fake_ollama.generate_status = 500
    fake_ollama.generate_body = {"error": "boom"}

    response = client.post("/api/ollama/generate", json={"prompt": "Hi"})

    assert response.status_code == 502
    assert "boom" in response.json()["message"]


def test_generate_validates_input(client) -> None:
    assert client.post("/api/ollama/generate", json={"prompt": ""}).status_code == 422
    assert client.post("/api/ollama/generate", json={"prompt": "x" * 10001}).status_code == 422
    assert client.post("/api/ollama/generate", json={"prompt": "Hi", "temperature": 2.5}).status_code == 422
    assert client.post("/api/ollama/generate", json={"prompt": "Hi", "top_k": 0}).status_code == 422


def test_generate_stream_emits_chunks_then_done(client) -> None:
    response = client.post("/api/ollama/generate", json={"prompt": "Hi", "stream": True})

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("application/x-ndjson")
    assert _lines(response) == [
        {"type": "chunk", "content": "Hel", "done": False},
        {"type": "chunk", "content": "lo", "done": False},
        {"type": "done"},
    ]


def test_generate_stream_failure_ends_with_error_event(client, fake_ollama) -> None:
    fake_ollama.stream_chunks = [ndjson({"response": "Hel", "done": False})]
    fake_ollama.stream_error = httpx.ReadTimeout("read timed out")

    lines = _lines(client.post("/api/ollama/generate", json={"prompt": "Hi", "stream": True}))

    assert lines[0] == {"type": "chunk", "content": "Hel", "done": False}
    assert lines[-1]["type"] == "error"
    assert "timed out" in lines[-1]["message"]
    assert len(lines) == 2


def test_generate_stream_unknown_model_emits_error_event(client, fake_ollama) -> None:
    lines = _lines(client.post("/api/ollama/generate", json={"prompt": "Hi", "model": "phi3", "stream": True}))

    assert lines == [{"type": "error", "message": "Model phi3 is not available"}]
    assert "/api/generate" not in fake_ollama.paths()


def test_embeddings_requires_authentication(client, register) -> None:
    assert client.post("/api/ollama/embeddings", json={"text": "hello"}).status_code == 401

    response = client.post("/api/ollama/embeddings", json={"text": "hello"}, headers=register())

    assert response.status_code == 200
    assert response.json() == {"success": True, "embeddings": [0.1, 0.2, 0.3], "model": "nomic-embed-text"}


def test_pull_requires_admin_and_never_reaches_upstream(client, fake_ollama, register) -> None:
    response = client.post("/api/ollama/pull", json={"model": "llama3:8b"}, headers=register())

    assert response.status_code == 403
    assert response.json()["message"] == "Only administrators can manage models"
    assert fake_ollama.requests == []


def test_delete_requires_admin_and_never_reaches_upstream(client, fake_ollama, register) -> None:
    response = client.delete("/api/ollama/models/llama3:8b", headers=register())

    assert response.status_code == 403
    assert fake_ollama.requests == []


def test_pull_streams_progress_and_result(client, admin_headers) -> None:
    lines = _lines(client.post("/api/ollama/pull", json={"model": "llama3:8b"}, headers=admin_headers))

    assert [line["type"] for line in lines] == ["progress", "progress", "progress", "result"]
    assert lines[1]["percentage"] == 25.0
    assert lines[-1] == {
        "type": "result",
        "success": True,
        "status": "succeeded",
        "message": "Model llama3:8b downloaded successfully",
        "model": "llama3:8b",
    }


def test_unconfirmed_pull_is_verified(client, fake_ollama, admin_headers) -> None:
    fake_ollama.pull_chunks = [ndjson({"status": "pulling manifest"})]

    lines = _lines(client.post("/api/ollama/pull", json={"model": "llama3:8b"}, headers=admin_headers))

    assert lines[-1]["status"] == "completed_unconfirmed"
    assert lines[-1]["verified"] is True
    assert fake_ollama.paths()[-1] == "/api/tags"


def test_delete_model_as_admin(client, fake_ollama, admin_headers) -> None:
    response = client.delete("/api/ollama/models/llama3:8b", headers=admin_headers)

    assert response.status_code == 200
    assert response.json() == {"success": True, "message": "Model llama3:8b removed successfully"}
    assert fake_ollama.body_of("/api/delete") == {"name": "llama3:8b"}


def test_check_model(client, register) -> None:
    headers = register()

    assert client.get("/api/ollama/model/mistral/check", headers=headers).json() == {
        "success": True,
        "model": "mistral",
        "available": True,
    }
    assert client.get("/api/ollama/model/phi3/check", headers=headers).json()["available"] is False
