from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    app_name: str = "ChatHub"
    app_version: str = "0.1.0"
    environment: str = "development"
    db_path: str = "data/chathub.db"
    preserve_old_db: bool = False
    admin_api_key: str = "dev-admin-key-12345"
    log_level: str = "INFO"
    cors_origins: list[str] = ["*"]

    # Ollama inference service; timeouts are in milliseconds
    ollama_url: str = "http://localhost:11434"
    ollama_default_model: str = "mistral:latest"
    ollama_embedding_model: str = "nomic-embed-text"
    ollama_timeout: int = 120_000
    ollama_probe_timeout: int = 5_000
    ollama_pull_timeout: int = 300_000

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


settings = Settings()
