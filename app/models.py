from datetime import datetime
from typing import List, Literal, Optional
from urllib.parse import urlparse

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Source(BaseModel):
    title: str
    url: str


# =========================
# STORED RECORDS
# =========================

class ScrapedContentRecord(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    url: str
    title: str
    content: str
    scraped_at: datetime


class SessionRecord(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    created_at: datetime
    updated_at: datetime


class ChatMessageRecord(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    session_id: str
    role: Literal["user", "assistant"]
    content: str
    sources: Optional[List[Source]] = None
    timestamp: datetime


# =========================
# API SHAPES
# =========================

class ChatRequest(BaseModel):
    message: str = Field(min_length=1, max_length=1000)
    sessionId: Optional[str] = None


class Message(BaseModel):
    id: str
    role: Literal["user", "assistant"]
    content: str
    timestamp: datetime
    sources: Optional[List[Source]] = None

    @classmethod
    def from_record(cls, record: ChatMessageRecord) -> "Message":
        return cls(
            id=record.id,
            role=record.role,
            content=record.content,
            timestamp=record.timestamp,
            sources=record.sources or None,
        )


class ChatResponse(BaseModel):
    message: Message
    sessionId: str


class ScrapeRequest(BaseModel):
    url: str

    @field_validator("url")
    @classmethod
    def must_be_http_url(cls, value: str) -> str:
        value = value.strip()
        parsed = urlparse(value)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ValueError("url must be an absolute http(s) URL")
        return value


class ContentOut(BaseModel):
    id: str
    url: str
    title: str
    content: str
    scrapedAt: datetime

    @classmethod
    def from_record(cls, record: ScrapedContentRecord) -> "ContentOut":
        return cls(
            id=record.id,
            url=record.url,
            title=record.title,
            content=record.content,
            scrapedAt=record.scraped_at,
        )
