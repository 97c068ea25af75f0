import os
from dataclasses import dataclass
from typing import List, Optional
from urllib.parse import urlparse

from dotenv import load_dotenv

DEFAULT_ADMIN_KEY = "dev-admin-key-12345"
STORAGE_BACKENDS = ("database", "memory")


# Strip whitespace (trailing space in App Service settings causes 404s)
def _getenv(key: str, default: str = None) -> str:
    val = os.getenv(key) or default
    return val.strip() if val else val


def _getint(key: str, default: int) -> int:
    raw = _getenv(key)
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{key} must be an integer, got {raw!r}")


def _getbool(key: str, default: bool) -> bool:
    raw = _getenv(key)
    if not raw:
        return default
    return raw.lower() in ("1", "true", "yes", "on")


def _parse_origins(raw: str) -> List[str]:
    raw = (raw or "").strip()
    if not raw or raw == "*":
        return ["*"]
    return [o.strip() for o in raw.split(",") if o.strip()]


def _classic_azure_endpoint(endpoint: Optional[str], api_version: str):
    """
    The OpenAI SDK requires the classic Azure OpenAI endpoint (openai.azure.com).
    Foundry URLs (services.ai.azure.com) are converted to the classic form.
    """
    if endpoint and "services.ai.azure.com" in endpoint:
        parsed = urlparse(endpoint)
        resource_name = parsed.netloc.split(".")[0]
        endpoint = f"https://{resource_name}.openai.azure.com"
        if api_version and api_version >= "2025-01-01":
            api_version = "2024-10-21"
    return endpoint, api_version


@dataclass
class Settings:
    database_url: str = "sqlite:///./campus_assistant.db"
    storage_backend: str = "database"
    admin_key: str = DEFAULT_ADMIN_KEY

    openai_api_key: Optional[str] = None
    openai_base_url: Optional[str] = None
    azure_openai_endpoint: Optional[str] = None
    azure_openai_api_key: Optional[str] = None
    azure_openai_api_version: str = "2024-10-21"
    chat_model: str = "gpt-4o-mini"
    max_completion_tokens: int = 4096

    scrape_timeout: int = 15
    campus_name: str = "Madhav Institute of Technology & Science (MITS), Gwalior"
    seed_initial_content: bool = True
    cors_origins: List[str] = None
    log_level: str = "INFO"

    def __post_init__(self):
        if self.storage_backend not in STORAGE_BACKENDS:
            raise ValueError(
                f"STORAGE_BACKEND must be one of {STORAGE_BACKENDS}, got {self.storage_backend!r}"
            )
        if self.cors_origins is None:
            self.cors_origins = ["*"]

    @property
    def uses_default_admin_key(self) -> bool:
        return self.admin_key == DEFAULT_ADMIN_KEY

    @property
    def uses_azure(self) -> bool:
        return bool(self.azure_openai_endpoint)


def load_settings() -> Settings:
    """Read settings from the environment, loading a .env file first."""
    load_dotenv()

    azure_endpoint, azure_version = _classic_azure_endpoint(
        _getenv("AZURE_OPENAI_ENDPOINT"),
        _getenv("AZURE_OPENAI_API_VERSION", "2024-10-21"),
    )

    return Settings(
        database_url=_getenv("DATABASE_URL", "sqlite:///./campus_assistant.db"),
        storage_backend=_getenv("STORAGE_BACKEND", "database").lower(),
        admin_key=_getenv("ADMIN_KEY", DEFAULT_ADMIN_KEY),
        openai_api_key=_getenv("OPENAI_API_KEY"),
        openai_base_url=_getenv("OPENAI_BASE_URL"),
        azure_openai_endpoint=azure_endpoint,
        azure_openai_api_key=_getenv("AZURE_OPENAI_API_KEY"),
        azure_openai_api_version=azure_version,
        chat_model=_getenv("CHAT_MODEL", "gpt-4o-mini"),
        max_completion_tokens=_getint("MAX_COMPLETION_TOKENS", 4096),
        scrape_timeout=_getint("SCRAPE_TIMEOUT", 15),
        campus_name=_getenv("CAMPUS_NAME", Settings.campus_name),
        seed_initial_content=_getbool("SEED_INITIAL_CONTENT", True),
        cors_origins=_parse_origins(_getenv("CORS_ORIGINS", "*")),
        log_level=_getenv("LOG_LEVEL", "INFO").upper(),
    )
