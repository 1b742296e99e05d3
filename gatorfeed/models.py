"""Records stored in and returned by the database."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID


@dataclass(frozen=True)
class User:
    id: UUID
    created_at: datetime
    updated_at: datetime
    name: str


@dataclass(frozen=True)
class Feed:
    id: UUID
    created_at: datetime
    updated_at: datetime
    name: str
    url: str
    user_id: UUID
    last_fetched_at: datetime | None = None


@dataclass(frozen=True)
class FeedFollow:
    id: UUID
    created_at: datetime
    updated_at: datetime
    user_id: UUID
    feed_id: UUID


@dataclass(frozen=True)
class FeedFollowRow:
    """A feed follow joined with the names of its feed and user."""

    id: UUID
    created_at: datetime
    updated_at: datetime
    user_id: UUID
    feed_id: UUID
    feed_name: str
    user_name: str


@dataclass(frozen=True)
class Post:
    id: UUID
    created_at: datetime
    updated_at: datetime
    title: str
    url: str
    description: str
    published_at: datetime
    feed_id: UUID


@dataclass(frozen=True)
class PostRow:
    """A post from an outer join; every field is absent when no post matched."""

    id: UUID | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    title: str | None = None
    url: str | None = None
    description: str | None = None
    published_at: datetime | None = None
    feed_id: UUID | None = None