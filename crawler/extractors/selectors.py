"""
CSS-selector based title extraction for scraped trending pages.
"""
from __future__ import annotations

from typing import List, Optional

from bs4 import BeautifulSoup

from crawler.schemas.models import TrendRecord


def select_titles(
    html: str,
    selector: str,
    limit: Optional[int] = None,
    min_length: int = 1,
    max_length: Optional[int] = None,
    link_attr: Optional[str] = None,
) -> List[TrendRecord]:
    """
    Collect element texts matching `selector`, in document order.

    Wide selectors tend to hit the same text several times (cards repeated in
    sidebars, mobile/desktop duplicates), so exact repeats are dropped here.
    `limit` caps how many matched elements are inspected, not how many
    records come out.
    """
    soup = BeautifulSoup(html, "lxml")
    nodes = soup.select(selector)
    if limit:
        nodes = nodes[:limit]

    seen = set()
    records: List[TrendRecord] = []
    for node in nodes:
        title = node.get_text().strip()
        if not title or len(title) < min_length:
            continue
        if max_length is not None and len(title) >= max_length:
            continue
        if title in seen:
            continue
        seen.add(title)
        url = node.get(link_attr) if link_attr else None
        records.append(TrendRecord(title=title, url=url if isinstance(url, str) else None))
    return records
