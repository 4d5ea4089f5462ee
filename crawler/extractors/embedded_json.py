"""
Utilities for extracting trending entries from JSON blobs embedded in pages.
"""
from __future__ import annotations

import json
import logging
import re
from typing import Any, Dict, Iterator, List, Optional

from bs4 import BeautifulSoup

from crawler.schemas.models import TrendRecord

logger = logging.getLogger(__name__)

_YT_INITIAL_DATA = re.compile(r"var ytInitialData = ({.+?});", re.DOTALL)


def find_script_json(html: str, pattern: re.Pattern) -> Optional[Dict[str, Any]]:
    soup = BeautifulSoup(html, "lxml")
    for tag in soup.find_all("script"):
        text = tag.string or tag.get_text() or ""
        match = pattern.search(text)
        if not match:
            continue
        try:
            payload = json.loads(match.group(1))
        except json.JSONDecodeError:
            logger.debug("Embedded JSON matched %s but did not decode", pattern.pattern)
            continue
        if isinstance(payload, dict):
            return payload
    return None


def parse_yt_initial_data(html: str, limit: int = 20) -> List[TrendRecord]:
    data = find_script_json(html, _YT_INITIAL_DATA)
    if not data:
        return []
    records: List[TrendRecord] = []
    for video in _iter_video_renderers(data):
        runs = (video.get("title") or {}).get("runs") or [{}]
        video_id = video.get("videoId")
        records.append(
            TrendRecord(
                title=runs[0].get("text", ""),
                url=f"https://www.youtube.com/watch?v={video_id}" if video_id else None,
                hot_text=(video.get("viewCountText") or {}).get("simpleText"),
            )
        )
        if len(records) >= limit:
            break
    return records


def _iter_video_renderers(data: Dict[str, Any]) -> Iterator[Dict[str, Any]]:
    tabs = data.get("contents", {}).get("twoColumnBrowseResultsRenderer", {}).get("tabs") or [{}]
    sections = (
        tabs[0].get("tabRenderer", {}).get("content", {}).get("sectionListRenderer", {}).get("contents") or []
    )
    for section in sections:
        for item in section.get("itemSectionRenderer", {}).get("contents") or []:
            video = item.get("videoRenderer")
            if isinstance(video, dict):
                yield video
