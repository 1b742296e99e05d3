"""Storage of users, feeds, follows and posts in SQLite."""

from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Iterator
from uuid import UUID

from .models import Feed, FeedFollowRow, Post, PostRow, User


class NotFoundError(LookupError):
    """A query that returns one row found none."""


class DuplicateError(ValueError):
    """An insert broke a uniqueness constraint."""


_SCHEMA = """
CREATE TABLE IF NOT EXISTS users (
    id TEXT PRIMARY KEY,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL,
    name TEXT NOT NULL UNIQUE
);
CREATE TABLE IF NOT EXISTS feeds (
    id TEXT PRIMARY KEY,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL,
    name TEXT NOT NULL,
    url TEXT NOT NULL UNIQUE,
    user_id TEXT NOT NULL REFERENCES users (id) ON DELETE CASCADE,
    last_fetched_at TEXT
);
CREATE TABLE IF NOT EXISTS feed_follows (
    id TEXT PRIMARY KEY,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL,
    user_id TEXT NOT NULL REFERENCES users (id) ON DELETE CASCADE,
    feed_id TEXT NOT NULL REFERENCES feeds (id) ON DELETE CASCADE,
    UNIQUE (user_id, feed_id)
);
CREATE TABLE IF NOT EXISTS posts (
    id TEXT PRIMARY KEY,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL,
    title TEXT NOT NULL,
    url TEXT NOT NULL UNIQUE,
    description TEXT NOT NULL,
    published_at TEXT NOT NULL,
    feed_id TEXT NOT NULL REFERENCES feeds (id) ON DELETE CASCADE
);
"""

_FEED_COLUMNS = "id, created_at, updated_at, name, url, user_id, last_fetched_at"
_USER_COLUMNS = "id, created_at, updated_at, name"


def _encode_time(value: datetime) -> str:
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc)
    return value.isoformat(timespec="microseconds")


def _decode_time(value: str | None) -> datetime | None:
    return None if value is None else datetime.fromisoformat(value)


def _decode_uuid(value: str | None) -> UUID | None:
    return None if value is None else UUID(value)


def _user(row: tuple) -> User:
    return User(UUID(row[0]), _decode_time(row[1]), _decode_time(row[2]), row[3])


def _feed(row: tuple) -> Feed:
    return Feed(
        id=UUID(row[0]),
        created_at=_decode_time(row[1]),
        updated_at=_decode_time(row[2]),
        name=row[3],
        url=row[4],
        user_id=UUID(row[5]),
        last_fetched_at=_decode_time(row[6]),
    )


def _follow(row: tuple) -> FeedFollowRow:
    return FeedFollowRow(
        id=UUID(row[0]),
        created_at=_decode_time(row[1]),
        updated_at=_decode_time(row[2]),
        user_id=UUID(row[3]),
        feed_id=UUID(row[4]),
        feed_name=row[5],
        user_name=row[6],
    )


def _post(row: tuple) -> Post:
    return Post(
        id=UUID(row[0]),
        created_at=_decode_time(row[1]),
        updated_at=_decode_time(row[2]),
        title=row[3],
        url=row[4],
        description=row[5],
        published_at=_decode_time(row[6]),
        feed_id=UUID(row[7]),
    )


def _post_row(row: tuple) -> PostRow:
    return PostRow(
        id=_decode_uuid(row[0]),
        created_at=_decode_time(row[1]),
        updated_at=_decode_time(row[2]),
        title=row[3],
        url=row[4],
        description=row[5],
        published_at=_decode_time(row[6]),
        feed_id=_decode_uuid(row[7]),
    )


class Queries:
    """The queries the application runs against its database."""

    def __init__(self, conn: sqlite3.Connection) -> None:
        conn.isolation_level = None
        conn.execute("PRAGMA foreign_keys = ON")
        self._conn = conn

    def create_schema(self) -> None:
        """Create the tables if they do not exist yet."""
        self._conn.executescript(_SCHEMA)

    @contextmanager
    def transaction(self) -> Iterator["Queries"]:
        """Run the enclosed queries atomically; nested use joins the outer one."""
        if self._conn.in_transaction:
            yield self
        else:
            self._conn.execute("BEGIN")
            try:
                yield self
            except BaseException:
                self._conn.execute("ROLLBACK")
                raise
            self._conn.execute("COMMIT")

    def close(self) -> None:
        self._conn.close()

    def _execute(self, sql: str, params: tuple = ()) -> sqlite3.Cursor:
        try:
            return self._conn.execute(sql, params)
        except sqlite3.IntegrityError as exc:
            if str(exc).startswith("UNIQUE constraint failed"):
                raise DuplicateError(str(exc)) from exc
            raise

    def _one(self, sql: str, params: tuple = ()) -> tuple:
        row = self._execute(sql, params).fetchone()
        if row is None:
            raise NotFoundError("no rows in result set")
        return row

    # users

    def create_user(self, user_id: UUID, created_at: datetime,
                    updated_at: datetime, name: str) -> User:
        row = self._one(
            "INSERT INTO users (id, created_at, updated_at, name) "
            f"VALUES (?, ?, ?, ?) RETURNING {_USER_COLUMNS}",
            (str(user_id), _encode_time(created_at), _encode_time(updated_at), name),
        )
        return _user(row)

    def delete_users(self) -> None:
        self._execute("DELETE FROM users")

    def get_user(self, name: str) -> User:
        row = self._one(
            f"SELECT {_USER_COLUMNS} FROM users WHERE name = ? LIMIT 1", (name,)
        )
        return _user(row)

    def get_users(self) -> list[str]:
        return [row[0] for row in self._execute("SELECT name FROM users")]

    # feeds

    def create_feed(self, feed_id: UUID, created_at: datetime, updated_at: datetime,
                    name: str, url: str, user_id: UUID) -> Feed:
        row = self._one(
            "INSERT INTO feeds (id, created_at, updated_at, name, url, user_id) "
            f"VALUES (?, ?, ?, ?, ?, ?) RETURNING {_FEED_COLUMNS}",
            (str(feed_id), _encode_time(created_at), _encode_time(updated_at),
             name, url, str(user_id)),
        )
        return _feed(row)

    def get_feed_by_url(self, url: str) -> Feed:
        row = self._one(
            f"SELECT {_FEED_COLUMNS} FROM feeds WHERE url = ? LIMIT 1", (url,)
        )
        return _feed(row)

    def get_feeds(self) -> list[Feed]:
        return [_feed(row) for row in self._execute(f"SELECT {_FEED_COLUMNS} FROM feeds")]

    def get_next_feed_to_fetch(self) -> Feed:
        """Return the feed fetched longest ago, never-fetched feeds first."""
        row = self._one(
            f"SELECT {_FEED_COLUMNS} FROM feeds "
            "ORDER BY last_fetched_at IS NOT NULL, last_fetched_at LIMIT 1"
        )
        return _feed(row)

    def mark_feed_fetched(self, feed_id: UUID) -> None:
        now = _encode_time(datetime.now(timezone.utc))
        self._execute(
            "UPDATE feeds SET updated_at = ?, last_fetched_at = ? WHERE id = ?",
            (now, now, str(feed_id)),
        )

    # feed follows

    def _select_follows(self, where: str, params: tuple) -> sqlite3.Cursor:
        return self._execute(
            "SELECT feed_follows.id, feed_follows.created_at, feed_follows.updated_at, "
            "feed_follows.user_id, feed_follows.feed_id, feeds.name, users.name "
            "FROM feed_follows "
            "INNER JOIN users ON users.id = feed_follows.user_id "
            "INNER JOIN feeds ON feeds.id = feed_follows.feed_id "
            f"WHERE {where}",
            params,
        )

    def create_feed_follow(self, follow_id: UUID, created_at: datetime,
                           updated_at: datetime, user_id: UUID,
                           feed_id: UUID) -> FeedFollowRow:
        with self.transaction():
            self._execute(
                "INSERT INTO feed_follows (id, created_at, updated_at, user_id, feed_id) "
                "VALUES (?, ?, ?, ?, ?)",
                (str(follow_id), _encode_time(created_at), _encode_time(updated_at),
                 str(user_id), str(feed_id)),
            )
            row = self._select_follows("feed_follows.id = ?", (str(follow_id),)).fetchone()
        if row is None:
            raise NotFoundError("no rows in result set")
        return _follow(row)

    def delete_feed_follow(self, user_id: UUID, feed_id: UUID) -> None:
        self._execute(
            "DELETE FROM feed_follows WHERE user_id = ? AND feed_id = ?",
            (str(user_id), str(feed_id)),
        )

    def get_feed_follows_for_user(self, user_id: UUID) -> list[FeedFollowRow]:
        cursor = self._select_follows("feed_follows.user_id = ?", (str(user_id),))
        return [_follow(row) for row in cursor]

    # posts

    def create_post(self, post_id: UUID, created_at: datetime, updated_at: datetime,
                    title: str, url: str, description: str,
                    published_at: datetime, feed_id: UUID) -> Post:
        row = self._one(
            "INSERT INTO posts (id, created_at, updated_at, title, url, description, "
            "published_at, feed_id) VALUES (?, ?, ?, ?, ?, ?, ?, ?) "
            "RETURNING id, created_at, updated_at, title, url, description, "
            "published_at, feed_id",
            (str(post_id), _encode_time(created_at), _encode_time(updated_at),
             title, url, description, _encode_time(published_at), str(feed_id)),
        )
        return _post(row)

    def get_posts_for_user(self, user_id: UUID, limit: int) -> list[PostRow]:
        """Return the newest posts of the feeds the user follows."""
        if limit < 0:
            raise ValueError("LIMIT must not be negative")
        cursor = self._execute(
            "SELECT posts.id, posts.created_at, posts.updated_at, posts.title, "
            "posts.url, posts.description, posts.published_at, posts.feed_id "
            "FROM feed_follows "
            "LEFT JOIN feeds ON feed_follows.feed_id = feeds.id "
            "LEFT JOIN posts ON feeds.id = posts.feed_id "
            "WHERE feed_follows.user_id = ? "
            "ORDER BY posts.updated_at IS NULL DESC, posts.updated_at DESC "
            "LIMIT ?",
            (str(user_id), limit),
        )
        return [_post_row(row) for row in cursor]


def connect(url: str) -> Queries:
    """Open the SQLite database named by ``url`` and make sure its tables exist.

    Accepts ``sqlite:///path``, ``sqlite://`` (in memory), ``:memory:`` or a
    plain file path.
    """
    if url.startswith("sqlite://"):
        location = url[len("sqlite://"):]
        if location.startswith("/"):
            location = location[1:]
        location = location or ":memory:"
    elif "://" in url:
        raise ValueError(f"unsupported database URL: {url}")
    else:
        location = url
    queries = Queries(sqlite3.connect(location))
    queries.create_schema()
    return queries