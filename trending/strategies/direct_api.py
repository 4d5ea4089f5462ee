"""
Strategy for platforms' own public JSON endpoints.

Each vendor payload has its own shape, so the strategy is paired with a named
mapper that pulls title, link and magnitude out of it.
"""
from __future__ import annotations

from typing import Any, Callable, Dict, List, Optional

from crawler.infra.http import Deadline
from crawler.schemas.models import TrendRecord
from trending.models import Source, SourceKind
from trending.strategies.base import Strategy, StrategyContext, option_int

PayloadMapper = Callable[[Any], List[TrendRecord]]


def _dig(payload: Any, *path: str) -> Any:
    current = payload
    for key in path:
        if not isinstance(current, dict):
            return None
        current = current.get(key)
    return current


def map_weibo(payload: Any) -> List[TrendRecord]:
    records = []
    for item in _dig(payload, "data", "realtime") or []:
        title = item.get("word") or item.get("note")
        records.append(TrendRecord(title=title, hot_value=item.get("num")))
    return records


def map_bilibili(payload: Any) -> List[TrendRecord]:
    records = []
    for item in _dig(payload, "data", "list") or []:
        bvid = item.get("bvid")
        records.append(
            TrendRecord(
                title=item.get("title"),
                url=f"https://www.bilibili.com/video/{bvid}" if bvid else None,
                hot_value=_dig(item, "stat", "view"),
            )
        )
    return records


def _zhihu_link(target: Dict[str, Any]) -> Optional[str]:
    url = target.get("url")
    if url:
        # the API hands out its own endpoint; the web page lives under /question/
        return url.replace("://api.zhihu.com/questions/", "://www.zhihu.com/question/")
    if target.get("id"):
        return f"https://www.zhihu.com/question/{target['id']}"
    return None


def map_zhihu(payload: Any) -> List[TrendRecord]:
    records = []
    entries = payload.get("data") if isinstance(payload, dict) else None
    for item in entries or []:
        target = item.get("target") or {}
        records.append(
            TrendRecord(
                title=target.get("title") or item.get("title"),
                url=_zhihu_link(target),
                hot_text=item.get("detail_text"),
            )
        )
    return records


def map_douyin(payload: Any) -> List[TrendRecord]:
    return [
        TrendRecord(title=item.get("word"), hot_value=item.get("hot_value"))
        for item in _dig(payload, "data", "word_list") or []
    ]


def map_toutiao(payload: Any) -> List[TrendRecord]:
    entries = payload.get("data") if isinstance(payload, dict) else None
    return [
        TrendRecord(title=item.get("Title"), url=item.get("Url"), hot_value=item.get("HotValue"))
        for item in entries or []
    ]


API_MAPPERS: Dict[str, PayloadMapper] = {
    "weibo": map_weibo,
    "bilibili": map_bilibili,
    "zhihu": map_zhihu,
    "douyin": map_douyin,
    "toutiao": map_toutiao,
}


class DirectApiStrategy(Strategy):
    kind = SourceKind.DIRECT_API

    def __init__(
        self,
        source: Source,
        mapper: PayloadMapper,
        limit: Optional[int] = 30,
        label: Optional[str] = None,
    ) -> None:
        super().__init__(source, limit=limit, label=label)
        self.mapper = mapper

    def collect(self, ctx: StrategyContext, deadline: Deadline) -> List[TrendRecord]:
        url = self.source.resolve(ctx.instance)
        payload = ctx.fetcher.get_json(url, deadline, headers=self.source.extra_headers or None)
        return self.mapper(payload)

    @classmethod
    def from_config(cls, source: Source, options: Dict[str, Any]) -> "DirectApiStrategy":
        mapper_name = options.get("mapper")
        if mapper_name not in API_MAPPERS:
            raise ValueError(f"Unknown direct-api mapper '{mapper_name}'")
        return cls(
            source,
            mapper=API_MAPPERS[mapper_name],
            limit=option_int(options, "limit", 30),
            label=options.get("label"),
        )
