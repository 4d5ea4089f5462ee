"""
High-level orchestration for the trending snapshot.
"""
from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from datetime import datetime, timezone
from typing import Dict, List, Optional, Sequence

from crawler.infra.http import Deadline, HttpFetcher
from trending.adapter import PlatformAdapter
from trending.models import AggregateDocument, Platform, PlatformReport, PlatformSnapshot, StrategyOutcome
from trending.strategies.base import StrategyContext

logger = logging.getLogger(__name__)


def utc_timestamp(now: Optional[datetime] = None) -> str:
    now = now or datetime.now(timezone.utc)
    return now.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class TrendingPipeline:
    """
    Fans out one task per platform and folds the results into a single
    AggregateDocument. A platform that fails or comes back empty still gets
    its key in the document.
    """

    def __init__(
        self,
        platforms: Sequence[Platform],
        fetcher: Optional[HttpFetcher] = None,
        fetch_timeout: float = 15.0,
        feed_max_items: int = 20,
    ) -> None:
        ids = [platform.id for platform in platforms]
        if len(ids) != len(set(ids)):
            raise ValueError("platform ids must be unique")
        self.platforms = list(platforms)
        self.adapters = [PlatformAdapter(platform) for platform in self.platforms]
        # one Session is shared by all workers; strategies only issue plain GETs through it
        self.fetcher = fetcher or HttpFetcher()
        self.fetch_timeout = fetch_timeout
        self.feed_max_items = feed_max_items
        self._reports: Dict[str, PlatformReport] = {}

    def run(self, instance: str, deadline: Optional[Deadline] = None) -> AggregateDocument:
        last_updated = utc_timestamp()
        deadline = deadline or Deadline.unbounded()
        ctx = StrategyContext(
            fetcher=self.fetcher,
            instance=instance,
            deadline=deadline,
            timeout=self.fetch_timeout,
            feed_max_items=self.feed_max_items,
        )

        slots: Dict[str, PlatformSnapshot] = {}
        max_workers = max(1, len(self.adapters))
        logger.info("Fetching %d platforms via %s", len(self.adapters), instance)

        with ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="platform") as executor:
            future_map = {executor.submit(adapter.fetch, ctx): adapter for adapter in self.adapters}
            for future in as_completed(future_map):
                adapter = future_map[future]
                platform = adapter.platform
                try:
                    items, report = future.result()
                except Exception as exc:  # pragma: no cover - safety net
                    logger.error("Platform %s crashed: %s", platform.id, exc)
                    items = []
                    report = PlatformReport(
                        platform_id=platform.id,
                        attempts=[StrategyOutcome.failed("adapter", str(exc))],
                    )
                slots[platform.id] = PlatformSnapshot(name=platform.name, icon=platform.icon, items=tuple(items))
                self._reports[platform.id] = report
                logger.info("%s: %d items (%s)", platform.id, len(items), report.winner or "exhausted")

        # keep catalogue order rather than completion order
        ordered = {
            platform.id: slots.get(platform.id, PlatformSnapshot(name=platform.name, icon=platform.icon))
            for platform in self.platforms
        }
        return AggregateDocument(last_updated=last_updated, platforms=ordered)

    def get_reports(self) -> List[PlatformReport]:
        return [self._reports[p.id] for p in self.platforms if p.id in self._reports]
