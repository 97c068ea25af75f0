import pytest

from app import config
from app.config import DEFAULT_ADMIN_KEY, Settings, load_settings

ENV_VARS = [
    "DATABASE_URL", "STORAGE_BACKEND", "ADMIN_KEY", "OPENAI_API_KEY", "OPENAI_BASE_URL",
    "AZURE_OPENAI_ENDPOINT", "AZURE_OPENAI_API_KEY", "AZURE_OPENAI_API_VERSION", "CHAT_MODEL",
    "MAX_COMPLETION_TOKENS", "SCRAPE_TIMEOUT", "CAMPUS_NAME", "SEED_INITIAL_CONTENT",
    "CORS_ORIGINS", "LOG_LEVEL",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr(config, "load_dotenv", lambda: None)


def test_defaults():
    settings = load_settings()
    assert settings.storage_backend == "database"
    assert settings.admin_key == DEFAULT_ADMIN_KEY
    assert settings.uses_default_admin_key
    assert settings.max_completion_tokens == 4096
    assert settings.scrape_timeout == 15
    assert settings.seed_initial_content is True
    assert settings.cors_origins == ["*"]
    assert not settings.uses_azure
    assert settings.azure_openai_api_version == "2024-10-21"


def test_values_are_read_and_stripped(monkeypatch):
    monkeypatch.setenv("ADMIN_KEY", " s3cret ")
    monkeypatch.setenv("STORAGE_BACKEND", "Memory")
    monkeypatch.setenv("SCRAPE_TIMEOUT", "5")
    monkeypatch.setenv("SEED_INITIAL_CONTENT", "false")
    monkeypatch.setenv("CORS_ORIGINS", "http://a.test, http://b.test")

    settings = load_settings()
    assert settings.admin_key == "s3cret"
    assert not settings.uses_default_admin_key
    assert settings.storage_backend == "memory"
    assert settings.scrape_timeout == 5
    assert settings.seed_initial_content is False
    assert settings.cors_origins == ["http://a.test", "http://b.test"]


def test_invalid_values_raise(monkeypatch):
    monkeypatch.setenv("SCRAPE_TIMEOUT", "soon")
    with pytest.raises(ValueError):
        load_settings()
    with pytest.raises(ValueError):
        Settings(storage_backend="redis")


def test_foundry_endpoint_is_rewritten_to_classic(monkeypatch):
    monkeypatch.setenv("AZURE_OPENAI_ENDPOINT", "https://myres.services.ai.azure.com/api/projects/x")
    monkeypatch.setenv("AZURE_OPENAI_API_VERSION", "2025-04-14")

    settings = load_settings()
    assert settings.uses_azure
    assert settings.azure_openai_endpoint == "https://myres.openai.azure.com"
    assert settings.azure_openai_api_version == "2024-10-21"
