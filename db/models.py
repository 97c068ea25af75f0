from sqlalchemy import Column, String, DateTime, Text, JSON, ForeignKey
from datetime import datetime
from .database import Base


class ScrapedContent(Base):
    __tablename__ = "scraped_content"

    id = Column(String, primary_key=True, index=True)
    url = Column(Text, unique=True, nullable=False, index=True)
    title = Column(Text, nullable=False)
    content = Column(Text, nullable=False)
    scraped_at = Column(DateTime, default=datetime.utcnow, nullable=False)


class ConversationSession(Base):
    __tablename__ = "conversation_sessions"

    id = Column(String, primary_key=True, index=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, nullable=False)


class ChatMessage(Base):
    __tablename__ = "chat_messages"

    id = Column(String, primary_key=True, index=True)
    session_id = Column(String, ForeignKey("conversation_sessions.id"), index=True, nullable=False)
    role = Column(String, nullable=False)  # user / assistant
    content = Column(Text, nullable=False)
    sources = Column(JSON, nullable=True)  # [{"title": ..., "url": ...}]
    timestamp = Column(DateTime, default=datetime.utcnow, nullable=False)
