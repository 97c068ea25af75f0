import logging
from dataclasses import dataclass
from functools import partial
from typing import Callable

from app.config import Settings
from app.llm_client import LLMClient
from app.scraper import ScrapeResult, scrape_page
from app.storage import Storage, create_storage

logger = logging.getLogger(__name__)


@dataclass
class AppContext:
    """Process-wide handles, built once at startup and injected into handlers."""
    settings: Settings
    storage: Storage
    llm_client: LLMClient
    scraper: Callable[[str], ScrapeResult]

    def close(self) -> None:
        self.storage.close()


def build_context(settings: Settings) -> AppContext:
    if settings.uses_default_admin_key:
        logger.warning("ADMIN_KEY is not set, using the insecure development default")

    return AppContext(
        settings=settings,
        storage=create_storage(settings),
        llm_client=LLMClient.from_settings(settings),
        scraper=partial(scrape_page, timeout=settings.scrape_timeout),
    )
