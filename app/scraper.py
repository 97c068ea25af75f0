import logging
import re
from dataclasses import dataclass

import requests
from bs4 import BeautifulSoup

from app.errors import ContentError, NetworkError

logger = logging.getLogger(__name__)

HEADERS = {
    "User-Agent": "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/125.0 Safari/537.36",
    "Accept-Language": "en-US,en;q=0.9",
}
DEFAULT_TIMEOUT = 15
DEFAULT_TITLE = "Campus Page"

MAX_CONTENT_CHARS = 10_000
MIN_CONTENT_CHARS = 50
MIN_ELEMENT_CHARS = 10

BOILERPLATE_TAGS = ["script", "style", "nav", "header", "footer", "iframe", "noscript"]
TEXT_SELECTOR = "p, h1, h2, h3, h4, h5, h6, li, td, th, div.content, article, section"


@dataclass
class ScrapeResult:
    url: str
    title: str
    content: str


def fetch_html(url: str, timeout: int = DEFAULT_TIMEOUT) -> str:
    try:
        r = requests.get(url, headers=HEADERS, timeout=timeout)
        r.raise_for_status()
    except requests.Timeout as e:
        raise NetworkError(f"Timed out fetching {url} after {timeout}s") from e
    except requests.RequestException as e:
        raise NetworkError(f"Failed to fetch {url}: {e}") from e
    return r.text


def extract_page(html: str):
    """Return (title, text) for a page after dropping boilerplate elements."""
    soup = BeautifulSoup(html, "html.parser")
    for tag in soup(BOILERPLATE_TAGS):
        tag.decompose()

    title = soup.title.get_text(strip=True) if soup.title else ""
    if not title:
        h1 = soup.find("h1")
        title = h1.get_text(strip=True) if h1 else ""

    parts = []
    for el in soup.select(TEXT_SELECTOR):
        text = el.get_text().strip()
        if len(text) > MIN_ELEMENT_CHARS:
            parts.append(text)

    text = re.sub(r"\s+", " ", "\n".join(parts)).strip()
    return title or DEFAULT_TITLE, text


def scrape_page(url: str, timeout: int = DEFAULT_TIMEOUT) -> ScrapeResult:
    html = fetch_html(url, timeout=timeout)
    title, text = extract_page(html)

    if len(text) < MIN_CONTENT_CHARS:
        raise ContentError(f"Insufficient content extracted from {url}")

    logger.info("Scraped %s (%d chars, title=%r)", url, len(text), title)
    return ScrapeResult(url=url, title=title, content=text[:MAX_CONTENT_CHARS])
