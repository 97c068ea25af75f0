"""
Storage capability for scraped pages, sessions and chat messages.

Two backends implement the same interface: `DatabaseStorage` (SQLAlchemy)
and `MemoryStorage` (process-local dicts, for tests and throwaway runs).
The backend is chosen once at startup by `create_storage`.
"""
import logging
import threading
import uuid
from abc import ABC, abstractmethod
from datetime import datetime, timedelta
from typing import Dict, List, Optional

from sqlalchemy.exc import IntegrityError

from app.config import Settings
from app.models import ChatMessageRecord, ScrapedContentRecord, SessionRecord, Source
from db.database import init_db, make_engine, make_session_factory
from db.models import ChatMessage, ConversationSession, ScrapedContent

logger = logging.getLogger(__name__)


def _new_id() -> str:
    return str(uuid.uuid4())


def _dump_sources(sources: Optional[List[Source]]):
    if not sources:
        return None
    return [s.model_dump() for s in sources]


class Storage(ABC):

    @abstractmethod
    def get_content(self, url: str) -> Optional[ScrapedContentRecord]:
        ...

    @abstractmethod
    def list_content(self) -> List[ScrapedContentRecord]:
        ...

    @abstractmethod
    def save_content(self, url: str, title: str, content: str) -> ScrapedContentRecord:
        """Insert a page, or replace title/content/scraped_at when the URL is already stored."""

    @abstractmethod
    def create_session(self) -> SessionRecord:
        ...

    @abstractmethod
    def get_session(self, session_id: str) -> Optional[SessionRecord]:
        ...

    @abstractmethod
    def add_message(
        self,
        session_id: str,
        role: str,
        content: str,
        sources: Optional[List[Source]] = None,
    ) -> ChatMessageRecord:
        """Append a message and bump the session's updated_at."""

    @abstractmethod
    def get_session_messages(self, session_id: str) -> List[ChatMessageRecord]:
        """Messages of a session, oldest first."""

    def close(self) -> None:
        pass


# =========================
# SQLALCHEMY BACKEND
# =========================

class DatabaseStorage(Storage):

    def __init__(self, database_url: str):
        self.engine = make_engine(database_url)
        self.SessionLocal = make_session_factory(self.engine)
        init_db(self.engine)

    def get_content(self, url: str) -> Optional[ScrapedContentRecord]:
        db = self.SessionLocal()
        try:
            row = db.query(ScrapedContent).filter_by(url=url).first()
            return ScrapedContentRecord.model_validate(row) if row else None
        finally:
            db.close()

    def list_content(self) -> List[ScrapedContentRecord]:
        db = self.SessionLocal()
        try:
            rows = db.query(ScrapedContent).all()
            return [ScrapedContentRecord.model_validate(r) for r in rows]
        finally:
            db.close()

    def _find_content(self, db, url: str) -> Optional[ScrapedContent]:
        return db.query(ScrapedContent).filter_by(url=url).first()

    def save_content(self, url: str, title: str, content: str) -> ScrapedContentRecord:
        db = self.SessionLocal()
        try:
            row = self._find_content(db, url)
            if row:
                row.title = title
                row.content = content
                row.scraped_at = datetime.utcnow()
            else:
                row = ScrapedContent(
                    id=_new_id(),
                    url=url,
                    title=title,
                    content=content,
                    scraped_at=datetime.utcnow(),
                )
                db.add(row)
            try:
                db.commit()
            except IntegrityError:
                # Another request inserted the same URL first; update its row instead
                db.rollback()
                logger.info("Concurrent insert for %s, updating existing row", url)
                row = db.query(ScrapedContent).filter_by(url=url).one()
                row.title = title
                row.content = content
                row.scraped_at = datetime.utcnow()
                db.commit()
            db.refresh(row)
            return ScrapedContentRecord.model_validate(row)
        finally:
            db.close()

    def create_session(self) -> SessionRecord:
        db = self.SessionLocal()
        try:
            now = datetime.utcnow()
            row = ConversationSession(id=_new_id(), created_at=now, updated_at=now)
            db.add(row)
            db.commit()
            db.refresh(row)
            return SessionRecord.model_validate(row)
        finally:
            db.close()

    def get_session(self, session_id: str) -> Optional[SessionRecord]:
        db = self.SessionLocal()
        try:
            row = db.query(ConversationSession).filter_by(id=session_id).first()
            return SessionRecord.model_validate(row) if row else None
        finally:
            db.close()

    def add_message(self, session_id, role, content, sources=None) -> ChatMessageRecord:
        db = self.SessionLocal()
        try:
            now = datetime.utcnow()
            # Timestamps are the only ordering key, so keep them strictly increasing per session
            last = (
                db.query(ChatMessage.timestamp)
                .filter_by(session_id=session_id)
                .order_by(ChatMessage.timestamp.desc())
                .first()
            )
            if last and now <= last[0]:
                now = last[0] + timedelta(microseconds=1)

            msg = ChatMessage(
                id=_new_id(),
                session_id=session_id,
                role=role,
                content=content,
                sources=_dump_sources(sources),
                timestamp=now,
            )
            db.add(msg)

            session = db.query(ConversationSession).filter_by(id=session_id).first()
            if session:
                session.updated_at = now

            db.commit()
            db.refresh(msg)
            return ChatMessageRecord.model_validate(msg)
        finally:
            db.close()

    def get_session_messages(self, session_id: str) -> List[ChatMessageRecord]:
        db = self.SessionLocal()
        try:
            rows = (
                db.query(ChatMessage)
                .filter_by(session_id=session_id)
                .order_by(ChatMessage.timestamp.asc())
                .all()
            )
            return [ChatMessageRecord.model_validate(r) for r in rows]
        finally:
            db.close()

    def close(self) -> None:
        self.engine.dispose()


# =========================
# IN-MEMORY BACKEND
# =========================

class MemoryStorage(Storage):

    def __init__(self):
        self._lock = threading.Lock()
        self._content: Dict[str, ScrapedContentRecord] = {}
        self._sessions: Dict[str, SessionRecord] = {}
        self._messages: Dict[str, List[ChatMessageRecord]] = {}

    def get_content(self, url):
        return self._content.get(url)

    def list_content(self):
        return list(self._content.values())

    def save_content(self, url, title, content):
        with self._lock:
            existing = self._content.get(url)
            record = ScrapedContentRecord(
                id=existing.id if existing else _new_id(),
                url=url,
                title=title,
                content=content,
                scraped_at=datetime.utcnow(),
            )
            self._content[url] = record
            return record

    def create_session(self):
        now = datetime.utcnow()
        record = SessionRecord(id=_new_id(), created_at=now, updated_at=now)
        with self._lock:
            self._sessions[record.id] = record
            self._messages[record.id] = []
        return record

    def get_session(self, session_id):
        return self._sessions.get(session_id)

    def add_message(self, session_id, role, content, sources=None):
        with self._lock:
            session = self._sessions.get(session_id)
            if session is None:
                raise KeyError(f"Unknown session {session_id}")
            record = ChatMessageRecord(
                id=_new_id(),
                session_id=session_id,
                role=role,
                content=content,
                sources=sources or None,
                timestamp=datetime.utcnow(),
            )
            self._messages[session_id].append(record)
            self._sessions[session_id] = session.model_copy(update={"updated_at": record.timestamp})
            return record

    def get_session_messages(self, session_id):
        return list(self._messages.get(session_id, []))


def create_storage(settings: Settings) -> Storage:
    if settings.storage_backend == "memory":
        logger.info("Using in-memory storage")
        return MemoryStorage()
    logger.info("Using database storage")
    return DatabaseStorage(settings.database_url)
