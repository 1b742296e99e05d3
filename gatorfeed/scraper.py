"""Fetching RSS feeds and storing their items as posts."""

from __future__ import annotations

import html
import re
import urllib.error
import urllib.request
from datetime import datetime, timedelta, timezone
from typing import Callable
from uuid import uuid4

from .commands import State
from .database import DuplicateError
from .models import Post
from .rssfeed import RSSFeed, parse_feed

USER_AGENT = "gator"

_MONTHS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun",
           "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")
_RFC1123Z = re.compile(
    r"(?:Mon|Tue|Wed|Thu|Fri|Sat|Sun), (\d{2}) (" + "|".join(_MONTHS) + r") (\d{4}) "
    r"(\d{2}):(\d{2}):(\d{2})(?:\.(\d+))? ([+-])(\d{2})(\d{2})"
)


def fetch_feed(url: str, timeout: float | None = None) -> RSSFeed:
    """Download and parse the RSS document at ``url``."""
    request = urllib.request.Request(url, headers={"User-Agent": USER_AGENT})
    try:
        with urllib.request.urlopen(request, timeout=timeout) as response:
            body = response.read()
    except urllib.error.HTTPError as exc:
        with exc:
            body = exc.read()
    feed = parse_feed(body)
    # Only the channel's own text is unescaped; item text is kept as received.
    feed.channel.title = html.unescape(feed.channel.title)
    feed.channel.description = html.unescape(feed.channel.description)
    return feed


def parse_pub_date(text: str) -> datetime:
    """Parse an RFC 1123 date with a numeric zone, e.g. ``Mon, 02 Jan 2006 15:04:05 -0700``."""
    match = _RFC1123Z.fullmatch(text)
    if match is None:
        raise ValueError(f'cannot parse "{text}" as an RFC 1123 date')
    day, month, year, hour, minute, second, fraction, sign, zone_h, zone_m = match.groups()
    offset = timedelta(hours=int(zone_h), minutes=int(zone_m))
    if sign == "-":
        offset = -offset
    microsecond = int((fraction or "").ljust(6, "0")[:6])
    return datetime(
        int(year), _MONTHS.index(month) + 1, int(day),
        int(hour), int(minute), int(second), microsecond,
        tzinfo=timezone(offset),
    )


def scrape_feeds(state: State,
                 fetch: Callable[[str], RSSFeed] = fetch_feed) -> list[Post]:
    """Fetch the feed due next and store its new items; return the posts created."""
    feed = state.db.get_next_feed_to_fetch()
    state.db.mark_feed_fetched(feed.id)
    rss = fetch(feed.url)
    created: list[Post] = []
    for item in rss.channel.items:
        published = parse_pub_date(item.pub_date)
        now = datetime.now(timezone.utc)
        try:
            post = state.db.create_post(
                uuid4(), now, now, item.title, item.link,
                item.description, published, feed.id,
            )
        except DuplicateError:
            continue
        created.append(post)
    return created