"""
Turns raw records from any strategy into ranked, de-duplicated items.
"""
from __future__ import annotations

import math
from typing import Iterable, List, Optional
from urllib.parse import quote

from crawler.extractors.clean import clean_title, is_absolute_url
from crawler.pipelines.dedupe import dedupe_by_key, title_key
from crawler.schemas.models import TrendRecord
from trending.models import Platform, TrendingItem

HOT_UNIT = 10_000
HOT_SUFFIX = "万"


def format_hot(value: Optional[float], suffix: str = HOT_SUFFIX) -> str:
    """
    Abbreviate a raw magnitude in units of ten thousand, rounding down.

    A missing or zero magnitude yields an empty string.
    """
    if value is None or not math.isfinite(value) or value == 0:
        return ""
    return f"{int(value // HOT_UNIT)}{suffix}"


def build_link(record: TrendRecord, title: str, search_url: Optional[str]) -> str:
    """
    Return the record's own link when it is absolute, otherwise a search link
    built from the platform template. Returns "" when neither is available.
    """
    if record.url and is_absolute_url(record.url):
        return record.url
    if not search_url:
        return ""
    return search_url.format(
        query=quote(title, safe=""),
        tag=quote(title.lstrip("#"), safe=""),
    )


def normalize_records(
    platform: Platform,
    records: Iterable[TrendRecord],
) -> List[TrendingItem]:
    cleaned: List[TrendRecord] = []
    for record in records:
        title = clean_title(record.title)
        if not title:
            continue
        link = build_link(record, title, platform.search_url)
        if not link:
            # an item without an absolute link is not publishable
            continue
        cleaned.append(record.model_copy(update={"title": title, "url": link}))

    unique = dedupe_by_key(cleaned, key_fn=lambda record: title_key(record.title))
    if platform.max_items:
        unique = unique[: platform.max_items]

    items: List[TrendingItem] = []
    for rank, record in enumerate(unique, start=1):
        hot = format_hot(record.hot_value) or (record.hot_text or "")
        items.append(
            TrendingItem(
                rank=rank,
                title=record.title,
                url=record.url,
                hot=hot,
                platform_id=platform.id,
            )
        )
    return items
