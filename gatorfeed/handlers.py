"""Handlers for each command of the feed aggregator."""

from __future__ import annotations

import contextlib
import re
import sys
import time
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from uuid import uuid4

from .commands import Command, CommandError, State
from .database import NotFoundError
from .models import User
from .scraper import scrape_feeds

_NANOSECOND = Decimal("0.000000001")
_MICROSECOND = Decimal("0.000001")
_UNIT_SECONDS = {
    "ns": _NANOSECOND,
    "us": _MICROSECOND,
    "\u00b5s": _MICROSECOND,
    "\u03bcs": _MICROSECOND,
    "ms": Decimal("0.001"),
    "s": Decimal(1),
    "m": Decimal(60),
    "h": Decimal(3600),
}
_COMPONENT = re.compile(r"([0-9]*(?:\.[0-9]*)?)([^0-9.]*)")
_INTEGER = re.compile(r"[+-]?[0-9]+")
_RULE = "==============================================="


def _now() -> datetime:
    return datetime.now(timezone.utc)


def parse_duration(text: str) -> timedelta:
    """Parse a duration such as ``1m30s``, ``1.5h`` or ``250ms``."""
    rest = text
    negative = False
    if rest[:1] in ("-", "+"):
        negative = rest[0] == "-"
        rest = rest[1:]
    if rest == "0":
        return timedelta(0)
    if not rest:
        raise ValueError(f'invalid duration "{text}"')
    total = Decimal(0)
    position = 0
    while position < len(rest):
        match = _COMPONENT.match(rest, position)
        number, unit = match.groups()
        if number in ("", "."):
            raise ValueError(f'invalid duration "{text}"')
        if not unit:
            raise ValueError(f'missing unit in duration "{text}"')
        if unit not in _UNIT_SECONDS:
            raise ValueError(f'unknown unit "{unit}" in duration "{text}"')
        total += Decimal(number) * _UNIT_SECONDS[unit]
        position = match.end()
    microseconds = int(total * 1_000_000)
    return timedelta(microseconds=-microseconds if negative else microseconds)


def _parse_int(text: str) -> int:
    if _INTEGER.fullmatch(text) is None:
        raise ValueError(f'invalid integer "{text}"')
    return int(text)


def handle_login(state: State, command: Command) -> None:
    if not command.args:
        raise CommandError("Expect a single argument, the username.")
    name = command.args[0]
    try:
        state.db.get_user(name)
    except NotFoundError:
        print(f"Failed to login as {name}", file=sys.stderr)
        raise
    state.cfg.set_user(name)
    print(f"Username set to {state.cfg.current_user_name}", end="")


def handle_register(state: State, command: Command) -> None:
    if not command.args:
        raise CommandError("Expect a single argument, the username.")
    now = _now()
    user = state.db.create_user(uuid4(), now, now, command.args[0])
    print(f"User {user.name} created", end="")
    state.cfg.set_user(user.name)


def handle_reset(state: State, command: Command) -> None:
    state.db.delete_users()


def handle_users(state: State, command: Command) -> None:
    for name in state.db.get_users():
        if name == state.cfg.current_user_name:
            print(f"* {name} (current)")
        else:
            print(f"* {name}")


def handle_agg(state: State, command: Command) -> None:
    """Scrape the next due feed every interval, forever."""
    if len(command.args) != 1:
        raise CommandError("Expect a single argument, the time between requests.")
    spec = command.args[0]
    try:
        interval = parse_duration(spec)
    except ValueError:
        return
    print(f"Collecting feeds every {spec}")
    if interval <= timedelta(0):
        raise CommandError("non-positive interval for ticker")
    seconds = interval.total_seconds()
    next_tick = time.monotonic()
    while True:
        with contextlib.suppress(Exception):
            scrape_feeds(state)
        next_tick += seconds
        now = time.monotonic()
        if next_tick < now:
            next_tick += ((now - next_tick) // seconds + 1) * seconds
        time.sleep(next_tick - now)


def handle_add_feed(state: State, command: Command, user: User) -> None:
    if len(command.args) != 2:
        raise CommandError("Expect 2 arguments, the feed name and url.")
    name, url = command.args
    now = _now()
    feed = state.db.create_feed(uuid4(), now, now, name, url, user.id)
    state.db.create_feed_follow(uuid4(), now, now, user.id, feed.id)
    print(f"Followed {feed.name} ({feed.url})")


def handle_feeds(state: State, command: Command) -> None:
    for feed in state.db.get_feeds():
        print(feed.name)
        print(feed.url)


def handle_follow(state: State, command: Command, user: User) -> None:
    if len(command.args) != 1:
        raise CommandError("Expect 1 argument, the url.")
    feed = state.db.get_feed_by_url(command.args[0])
    now = _now()
    follow = state.db.create_feed_follow(uuid4(), now, now, user.id, feed.id)
    print(follow.user_name)
    print(follow.feed_name)


def handle_following(state: State, command: Command, user: User) -> None:
    for follow in state.db.get_feed_follows_for_user(user.id):
        print(follow.feed_name)


def handle_unfollow(state: State, command: Command, user: User) -> None:
    if len(command.args) != 1:
        raise CommandError("Expect a single argument, the feed url.")
    feed = state.db.get_feed_by_url(command.args[0])
    state.db.delete_feed_follow(user.id, feed.id)


def handle_browse(state: State, command: Command, user: User) -> None:
    limit = 2
    if len(command.args) == 1:
        limit = _parse_int(command.args[0])
    for post in state.db.get_posts_for_user(user.id, limit):
        print(post.title or "")
        print(_RULE)
        print(post.description or "")
        print(post.url or "")