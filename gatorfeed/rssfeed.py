"""RSS documents and their parser."""

from __future__ import annotations

import xml.etree.ElementTree as ET
from dataclasses import dataclass, field


@dataclass
class RSSItem:
    title: str = ""
    link: str = ""
    description: str = ""
    pub_date: str = ""


@dataclass
class RSSChannel:
    title: str = ""
    link: str = ""
    description: str = ""
    items: list[RSSItem] = field(default_factory=list)


@dataclass
class RSSFeed:
    channel: RSSChannel = field(default_factory=RSSChannel)


def _local_name(tag: str) -> str:
    return tag.rsplit("}", 1)[-1].split(":")[-1]


def _own_text(element: ET.Element) -> str:
    """Character data directly inside ``element``, leaving out child elements."""
    parts = [element.text or ""]
    parts.extend(child.tail or "" for child in element)
    return "".join(parts)


_ITEM_FIELDS = {"title": "title", "link": "link",
                "description": "description", "pubDate": "pub_date"}
_CHANNEL_FIELDS = {"title": "title", "link": "link", "description": "description"}


def _parse_item(element: ET.Element) -> RSSItem:
    item = RSSItem()
    for child in element:
        attribute = _ITEM_FIELDS.get(_local_name(child.tag))
        if attribute is not None:
            setattr(item, attribute, _own_text(child))
    return item


def _fill_channel(channel: RSSChannel, element: ET.Element) -> None:
    for child in element:
        name = _local_name(child.tag)
        if name == "item":
            channel.items.append(_parse_item(child))
        elif name in _CHANNEL_FIELDS:
            setattr(channel, _CHANNEL_FIELDS[name], _own_text(child))


def parse_feed(data: bytes | str) -> RSSFeed:
    """Parse an RSS document; elements are matched by local name."""
    try:
        root = ET.fromstring(data)
    except ET.ParseError as exc:
        raise ValueError(f"invalid RSS document: {exc}") from exc
    feed = RSSFeed()
    for child in root:
        if _local_name(child.tag) == "channel":
            _fill_channel(feed.channel, child)
    return feed