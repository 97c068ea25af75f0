from dataclasses import dataclass
from typing import Iterable, List

from app.models import ScrapedContentRecord

TOP_K = 5
MIN_WORD_CHARS = 2
VERBATIM_BONUS = 50
# Sentence punctuation trimmed from the ends of query words; "+", "#" etc. are kept ("c++", "c#")
WORD_EDGE_PUNCTUATION = "?!.,;:'\"()[]{}<>"


@dataclass
class ScoredContent:
    url: str
    title: str
    content: str
    score: int


def query_words(query: str) -> List[str]:
    words = (w.strip(WORD_EDGE_PUNCTUATION) for w in query.lower().split())
    return [w for w in words if len(w) > MIN_WORD_CHARS]


def score_content(title: str, content: str, query: str) -> int:
    """Keyword-frequency score of a page for a query; never negative."""
    query_lower = query.lower()
    haystack = f"{title} {content}".lower()

    score = sum(haystack.count(word) for word in query_words(query))
    if query_lower and query_lower in haystack:
        score += VERBATIM_BONUS
    return score


def find_relevant_content(
    items: Iterable[ScrapedContentRecord], query: str, limit: int = TOP_K
) -> List[ScoredContent]:
    scored = [
        ScoredContent(
            url=item.url,
            title=item.title,
            content=item.content,
            score=score_content(item.title, item.content, query),
        )
        for item in items
    ]
    # sorted() is stable, so equal scores keep their stored order
    ranked = sorted((s for s in scored if s.score > 0), key=lambda s: s.score, reverse=True)
    return ranked[:limit]
