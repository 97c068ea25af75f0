from types import SimpleNamespace

import httpx
import openai
import pytest
from fastapi.testclient import TestClient

from app.config import Settings
from app.context import AppContext
from app.llm_client import StructuredAnswer
from app.main import create_app
from app.scraper import ScrapeResult
from app.storage import MemoryStorage

ADMIN_KEY = "test-admin-key"


class FakeLLMClient:
    """Stands in for LLMClient; returns queued answers or raises queued errors."""

    def __init__(self):
        self.calls = []
        self.outcomes = []

    def respond_with(self, summary, bullets=None, has_answer=True):
        self.outcomes.append(
            StructuredAnswer(summary=summary, bullets=bullets or [], hasAnswer=has_answer)
        )

    def fail_with(self, error):
        self.outcomes.append(error)

    def generate_chat_response(self, user_message, context):
        self.calls.append({"user_message": user_message, "context": context})
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


class FakeScraper:
    """Stands in for scrape_page; results and errors keyed by URL."""

    def __init__(self):
        self.pages = {}
        self.calls = []

    def add(self, url, title, content):
        self.pages[url] = ScrapeResult(url=url, title=title, content=content)

    def fail(self, url, error):
        self.pages[url] = error

    def __call__(self, url):
        self.calls.append(url)
        result = self.pages[url]
        if isinstance(result, Exception):
            raise result
        return result


class FakeCompletions:
    def __init__(self, outcomes):
        self.outcomes = list(outcomes)
        self.calls = []

    def create(self, **kwargs):
        self.calls.append(kwargs)
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


def fake_openai_client(*outcomes):
    completions = FakeCompletions(outcomes)
    return SimpleNamespace(chat=SimpleNamespace(completions=completions)), completions


def completion(content):
    return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])


def api_status_error(cls, status_code, message="error"):
    request = httpx.Request("POST", "https://api.openai.com/v1/chat/completions")
    response = httpx.Response(status_code, request=request)
    return cls(message, response=response, body=None)


def rate_limit_error():
    return api_status_error(openai.RateLimitError, 429, "Rate limit reached for requests")


@pytest.fixture
def settings():
    return Settings(
        storage_backend="memory",
        admin_key=ADMIN_KEY,
        seed_initial_content=False,
        openai_api_key="sk-test",
    )


@pytest.fixture
def storage():
    return MemoryStorage()


@pytest.fixture
def llm():
    return FakeLLMClient()


@pytest.fixture
def scraper():
    return FakeScraper()


@pytest.fixture
def ctx(settings, storage, llm, scraper):
    return AppContext(settings=settings, storage=storage, llm_client=llm, scraper=scraper)


@pytest.fixture
def client(ctx):
    with TestClient(create_app(context=ctx)) as c:
        yield c


@pytest.fixture
def admin_headers():
    return {"x-admin-key": ADMIN_KEY}
