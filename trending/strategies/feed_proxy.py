"""
Strategy that reads a feed re-served by the selected proxy instance.
"""
from __future__ import annotations

from typing import Any, Dict, List

from crawler.infra.http import Deadline
from crawler.ingesters.rss_base import fetch_feed
from crawler.schemas.models import TrendRecord
from trending.models import Source, SourceKind
from trending.strategies.base import Strategy, StrategyContext, option_int


class FeedProxyStrategy(Strategy):
    kind = SourceKind.FEED_PROXY

    def collect(self, ctx: StrategyContext, deadline: Deadline) -> List[TrendRecord]:
        url = self.source.resolve(ctx.instance)
        entries = fetch_feed(
            ctx.fetcher,
            url,
            max_items=self.limit or ctx.feed_max_items,
            timeout=ctx.timeout,
            deadline=deadline,
        )
        return [TrendRecord(title=entry.title, url=entry.link) for entry in entries]

    @classmethod
    def from_config(cls, source: Source, options: Dict[str, Any]) -> "FeedProxyStrategy":
        return cls(source, limit=option_int(options, "limit"), label=options.get("label"))
