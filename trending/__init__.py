"""
Public API for the trending snapshot pipeline.
"""
from __future__ import annotations

from typing import List, Optional

from crawler.infra.http import Deadline, HttpFetcher
from trending.config_loader import ConfigurationError, build_platforms, load_sources_config, proxy_instances
from trending.instances import InstanceSelector
from trending.models import AggregateDocument, SnapshotResult
from trending.pipeline import TrendingPipeline
from trending.settings import TrendingSettings, load_settings


def build_snapshot(
    settings: Optional[TrendingSettings] = None,
    only: Optional[List[str]] = None,
    fetcher: Optional[HttpFetcher] = None,
) -> SnapshotResult:
    """
    Run one full acquisition pass: pick a proxy instance, fetch every
    configured platform concurrently and return the assembled document.

    Configuration problems raise ConfigurationError; source failures never
    raise and only show up as empty platforms.
    """
    settings = settings or load_settings()
    config = load_sources_config(settings.config_path)
    platforms = build_platforms(config, only=only)
    fetcher = fetcher or HttpFetcher()
    deadline = Deadline(settings.run_timeout)

    selector = InstanceSelector(
        proxy_instances(config, settings.proxy_instances),
        fetcher=fetcher,
        probe_timeout=settings.probe_timeout,
    )
    instance = selector.select(deadline)

    pipeline = TrendingPipeline(
        platforms,
        fetcher=fetcher,
        fetch_timeout=settings.fetch_timeout,
        feed_max_items=settings.feed_max_items,
    )
    document = pipeline.run(instance, deadline=deadline)
    return SnapshotResult(document=document, reports=pipeline.get_reports(), instance=instance)


__all__ = [
    "AggregateDocument",
    "ConfigurationError",
    "SnapshotResult",
    "TrendingSettings",
    "build_snapshot",
    "load_settings",
]
