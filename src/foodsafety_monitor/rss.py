"""RSS/Atom feed helpers built on feedparser."""

from __future__ import annotations

import asyncio
import calendar
from datetime import datetime, timezone
from typing import Any, List, Optional

import feedparser

from .http_client import HTTPClient
from .logging_config import get_logger
from .models import CollectorStats
from .normalizer import parse_datetime

logger = get_logger("rss")


async def fetch_feed(
    url: str,
    *,
    http_client: Optional[HTTPClient] = None,
    stats: Optional[CollectorStats] = None,
    timeout: Optional[float] = None,
) -> feedparser.FeedParserDict:
    """Fetch and parse an RSS feed asynchronously."""
    client = http_client or HTTPClient()
    response = await client.get_async(url, stats=stats, timeout=timeout)
    return await parse_feed_text(response.text)


async def parse_feed_text(text: str) -> feedparser.FeedParserDict:
    """Parse RSS feed text asynchronously.

    Raises ``ValueError`` when the document is not a usable feed at all.
    """
    feed = await asyncio.to_thread(feedparser.parse, text)
    if feed.bozo and not feed.entries:
        raise ValueError(f"Feed parse error: {getattr(feed, 'bozo_exception', 'unknown error')}")
    if feed.bozo:
        logger.warning("Feed parsing had issues: %s", getattr(feed, "bozo_exception", None))
    return feed


def entry_published_at(entry: Any) -> Optional[datetime]:
    """Return an entry's publication time as an aware UTC datetime."""
    for attr in ("published_parsed", "updated_parsed"):
        parsed = entry.get(attr)
        if parsed:
            return datetime.fromtimestamp(calendar.timegm(parsed), tz=timezone.utc)

    for attr in ("published", "updated"):
        dt = parse_datetime(entry.get(attr))
        if dt is not None:
            return dt if dt.tzinfo else dt.replace(tzinfo=timezone.utc)
    return None


def entry_tags(entry: Any) -> List[str]:
    """Feed ``<category>`` values of an entry."""
    tags = []
    for tag in entry.get("tags") or []:
        term = tag.get("term")
        if term:
            tags.append(term)
    return tags


def entry_link(entry: Any) -> Optional[str]:
    return entry.get("link") or entry.get("id") or None
