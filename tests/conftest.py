"""Shared fixtures: a scripted Ollama upstream, a temporary database and a test app."""

from typing import Callable

import pytest
from fastapi.testclient import TestClient

from chathub.api.dependencies import Services, build_services
from chathub.db.database import Database
from chathub.settings import Settings
from fake_ollama import FakeOllama
from main import create_app


ADMIN_KEY = "test-admin-key"


@pytest.fixture
def fake_ollama() -> FakeOllama:
    return FakeOllama()


@pytest.fixture
def test_settings(tmp_path) -> Settings:
    return Settings(
        db_path=str(tmp_path / "chathub.db"),
        admin_api_key=ADMIN_KEY,
        ollama_url="http://ollama.test",
        ollama_default_model="mistral:latest",
        log_level="WARNING",
    )


@pytest.fixture
def services(test_settings: Settings, fake_ollama: FakeOllama) -> Services:
    built = build_services(
        test_settings,
        http_client=fake_ollama.http_client(),
        database=Database(test_settings.db_path, preserve_old_db=False),
    )
    built.database.setup()
    return built


@pytest.fixture
def client(services: Services, test_settings: Settings):
    app = create_app(services=services, app_settings=test_settings)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def register(client: TestClient) -> Callable[..., dict[str, str]]:
    """Register a user and return headers authenticating as them"""

    def _register(name: str = "Ana", email: str = "ana@example.com") -> dict[str, str]:
        response = client.post("/users/register", json={"name": name, "email": email})
        assert response.status_code == 201
        return {"X-API-Key": response.json()["api_key"]}

    return _register


@pytest.fixture
def admin_headers() -> dict[str, str]:
    return {"X-API-Key": ADMIN_KEY}
