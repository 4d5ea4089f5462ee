"""
Shared helpers for feed ingestion through proxy instances.
"""
from __future__ import annotations

import logging
from typing import List, Optional

import feedparser

from crawler.infra.http import Deadline, HttpFetcher
from crawler.schemas.models import FeedEntry
from utils.security import redact_secrets

logger = logging.getLogger(__name__)

DEFAULT_MAX_ITEMS = 20
DEFAULT_TIMEOUT = 15.0


def parse_feed_entries(feed_content: bytes, max_items: int = DEFAULT_MAX_ITEMS) -> List[FeedEntry]:
    feed = feedparser.parse(feed_content)
    entries = list(getattr(feed, "entries", []))
    if not entries and getattr(feed, "bozo", False):
        raise ValueError(f"unparseable feed: {getattr(feed, 'bozo_exception', 'unknown error')}")
    items: List[FeedEntry] = []
    for entry in entries[:max_items]:
        items.append(
            FeedEntry(
                title=entry.get("title", ""),
                link=entry.get("link", ""),
                description=entry.get("summary") or entry.get("description") or "",
                pub_date=entry.get("published") or entry.get("updated") or "",
            )
        )
    return items


def fetch_feed(
    fetcher: HttpFetcher,
    url: str,
    max_items: int = DEFAULT_MAX_ITEMS,
    timeout: float = DEFAULT_TIMEOUT,
    deadline: Optional[Deadline] = None,
) -> List[FeedEntry]:
    """
    Retrieve and parse one feed within a bounded time.

    Any failure (network, timeout, HTTP status, malformed payload) is logged
    against the feed URL and yields an empty list; nothing is raised.
    """
    bounded = deadline.child(timeout) if deadline else Deadline(timeout)
    try:
        response = fetcher.fetch(url, bounded)
        return parse_feed_entries(response.content, max_items)
    except Exception as exc:
        logger.warning("Failed to fetch feed %s: %s", url, redact_secrets(str(exc)))
        return []
