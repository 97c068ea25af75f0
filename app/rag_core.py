import logging
from typing import List, Optional

from app.context import AppContext
from app.llm_client import StructuredAnswer
from app.models import ChatResponse, Message, Source
from app.relevance import ScoredContent, find_relevant_content
from app.session_manager import get_or_create_session, save_message

logger = logging.getLogger(__name__)

EMPTY_KNOWLEDGE_BASE_MESSAGE = (
    "I don't have any information about the campus yet. The knowledge base needs to be "
    "populated first. Please contact the administrator to set up the content."
)


def build_context(relevant: List[ScoredContent]) -> str:
    return "\n\n---\n\n".join(
        f"[Source {idx}: {item.title} - {item.url}]\n{item.content}"
        for idx, item in enumerate(relevant, start=1)
    )


def format_answer(answer: StructuredAnswer) -> str:
    """Summary line, then the bullets as a numbered list."""
    text = answer.summary
    if answer.bullets:
        text += "\n\n" + "\n".join(f"{idx}. {b}" for idx, b in enumerate(answer.bullets, start=1))
    return text.strip()


def answer_question(ctx: AppContext, question: str, session_id: Optional[str]) -> ChatResponse:
    storage = ctx.storage

    session_id = get_or_create_session(storage, session_id)
    # Persisted before the model is called; a failed call leaves it unanswered
    save_message(storage, session_id, "user", question)

    all_content = storage.list_content()
    if not all_content:
        logger.info("Knowledge base is empty, skipping LLM call")
        record = save_message(storage, session_id, "assistant", EMPTY_KNOWLEDGE_BASE_MESSAGE)
        return ChatResponse(message=Message.from_record(record), sessionId=session_id)

    relevant = find_relevant_content(all_content, question)
    logger.info("Found %d relevant content pieces", len(relevant))

    sources = [Source(title=item.title, url=item.url) for item in relevant]
    answer = ctx.llm_client.generate_chat_response(question, build_context(relevant))

    attached: Optional[List[Source]] = sources if answer.hasAnswer and sources else None
    record = save_message(storage, session_id, "assistant", format_answer(answer), attached)

    return ChatResponse(message=Message.from_record(record), sessionId=session_id)
