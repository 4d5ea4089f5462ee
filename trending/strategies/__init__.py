"""
Fetch strategies and the default kind registry used by the config loader.
"""
from __future__ import annotations

from trending.models import SourceKind
from trending.strategies.base import Strategy, StrategyContext, StrategyRegistry
from trending.strategies.direct_api import API_MAPPERS, DirectApiStrategy
from trending.strategies.feed_proxy import FeedProxyStrategy
from trending.strategies.html_page import PAGE_PARSERS, HtmlPageStrategy
from trending.strategies.static import StaticFallbackStrategy


def default_registry() -> StrategyRegistry:
    registry = StrategyRegistry()
    registry.register(SourceKind.FEED_PROXY, FeedProxyStrategy.from_config)
    registry.register(SourceKind.DIRECT_API, DirectApiStrategy.from_config)
    registry.register(SourceKind.HTML_PAGE, HtmlPageStrategy.from_config)
    registry.register(SourceKind.STATIC_FALLBACK, StaticFallbackStrategy.from_config)
    return registry


__all__ = [
    "API_MAPPERS",
    "PAGE_PARSERS",
    "DirectApiStrategy",
    "FeedProxyStrategy",
    "HtmlPageStrategy",
    "StaticFallbackStrategy",
    "Strategy",
    "StrategyContext",
    "StrategyRegistry",
    "default_registry",
]
