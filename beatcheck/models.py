"""
BeatCheck Data Models
=====================

Pydantic data models shared by the fetcher, the content resolver and the
storage layer. ``New*`` models are produced by this package; the storage
layer assigns identity and timestamps and hands back ``Feed``/``Article``.
"""

from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, Field, field_validator


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class NewFeed(BaseModel):
    """Feed discovered from a URL, not yet persisted."""
    title: str = Field(..., description="Feed title")
    url: str = Field(..., min_length=1, description="Feed document URL")
    site_url: Optional[str] = Field(default=None, description="Human-facing site URL")
    description: Optional[str] = Field(default=None, description="Feed description")

    def __str__(self) -> str:
        return f"NewFeed({self.title}:{self.url})"


class Feed(BaseModel):
    """Persisted feed as returned by the storage layer."""
    id: int = Field(..., description="Database primary key")
    title: str = Field(..., description="Feed title")
    url: str = Field(..., min_length=1, description="Feed document URL")
    site_url: Optional[str] = Field(default=None, description="Human-facing site URL")
    description: Optional[str] = Field(default=None, description="Feed description")
    last_fetched: Optional[datetime] = Field(default=None, description="Last fetch attempt")
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)

    def __str__(self) -> str:
        return f"Feed({self.title or self.url})"


class NewArticle(BaseModel):
    """Feed entry mapped to an article record, not yet persisted.

    ``guid`` together with ``feed_id`` is the natural deduplication key.
    ``url`` may be empty when the entry carries no link.
    """
    feed_id: int = Field(..., description="Owning feed ID")
    guid: str = Field(..., min_length=1, description="Entry identifier")
    title: str = Field(default="Untitled", description="Entry title")
    url: str = Field(default="", description="Entry link, possibly empty")
    author: Optional[str] = Field(default=None, description="First listed author")
    content: Optional[str] = Field(default=None, description="Raw HTML fragment")
    content_text: Optional[str] = Field(default=None, description="Plain text rendering of content")
    published_at: Optional[datetime] = Field(default=None, description="Publication date (UTC)")

    @field_validator("published_at")
    @classmethod
    def ensure_timezone(cls, v):
        """Naive datetimes are treated as UTC."""
        if v is not None and v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v

    def __str__(self) -> str:
        return f"NewArticle({self.title[:50]})"


class Article(NewArticle):
    """Persisted article as returned by the storage layer."""
    id: int = Field(..., description="Database primary key")
    fetched_at: datetime = Field(default_factory=_utcnow)
    is_read: bool = Field(default=False)
    is_starred: bool = Field(default=False)
    feed_title: Optional[str] = Field(default=None, description="Joined feed title")

    def __str__(self) -> str:
        return f"Article({self.id}:{self.title[:50]})"
