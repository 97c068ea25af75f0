import logging
from typing import List, Optional

from app.models import ChatMessageRecord, Message, Source
from app.storage import Storage

logger = logging.getLogger(__name__)


def get_or_create_session(storage: Storage, session_id: Optional[str]) -> str:
    """
    Get existing session or create a new one.
    An unknown session id is not adopted; a fresh session is created instead.
    """
    if session_id:
        session = storage.get_session(session_id)
        if session:
            return session.id
        logger.info("Unknown session %s, starting a new one", session_id)

    return storage.create_session().id


def save_message(
    storage: Storage,
    session_id: str,
    role: str,
    content: str,
    sources: Optional[List[Source]] = None,
) -> ChatMessageRecord:
    """
    Save a single chat message and update session updated_at.
    """
    return storage.add_message(session_id, role, content, sources)


def get_chat_history(storage: Storage, session_id: str) -> List[Message]:
    """
    Get all messages of a session in chronological order.
    """
    return [Message.from_record(m) for m in storage.get_session_messages(session_id)]
