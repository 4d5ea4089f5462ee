"""
Core data structures shared by the trending snapshot pipeline.
"""
from __future__ import annotations

import json
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Tuple

from crawler.schemas.models import TrendRecord


class SourceKind(str, Enum):
    FEED_PROXY = "feed-proxy"
    DIRECT_API = "direct-api"
    HTML_PAGE = "html-page"
    STATIC_FALLBACK = "static-fallback"


class AttemptState(str, Enum):
    NOT_TRIED = "not-tried"
    SUCCEEDED = "succeeded"
    FAILED_EMPTY = "failed-empty"


@dataclass(frozen=True)
class Source:
    """
    Endpoint descriptor. `url` may contain an `{instance}` placeholder that is
    filled with the selected proxy base at fetch time.
    """

    url: str
    kind: SourceKind
    headers: Tuple[Tuple[str, str], ...] = ()

    def resolve(self, instance: str) -> str:
        if "{instance}" not in self.url:
            return self.url
        return self.url.replace("{instance}", instance.rstrip("/"))

    @property
    def extra_headers(self) -> Dict[str, str]:
        return dict(self.headers)


@dataclass
class StrategyOutcome:
    """Tagged result of one strategy attempt: records on success, an error otherwise."""

    strategy: str
    state: AttemptState
    records: List[TrendRecord] = field(default_factory=list)
    error: Optional[str] = None
    latency_ms: Optional[float] = None

    @classmethod
    def succeeded(cls, strategy: str, records: List[TrendRecord]) -> "StrategyOutcome":
        return cls(strategy=strategy, state=AttemptState.SUCCEEDED, records=list(records))

    @classmethod
    def failed(cls, strategy: str, error: str) -> "StrategyOutcome":
        return cls(strategy=strategy, state=AttemptState.FAILED_EMPTY, error=error)

    @property
    def ok(self) -> bool:
        return self.state is AttemptState.SUCCEEDED and bool(self.records)


@dataclass(frozen=True)
class Platform:
    id: str
    name: str
    icon: str
    strategies: Tuple[Any, ...]
    search_url: Optional[str] = None
    max_items: Optional[int] = None


@dataclass(frozen=True)
class TrendingItem:
    rank: int
    title: str
    url: str
    hot: str
    platform_id: str

    def to_dict(self) -> Dict[str, Any]:
        return {"rank": self.rank, "title": self.title, "url": self.url, "hot": self.hot}


@dataclass(frozen=True)
class PlatformSnapshot:
    name: str
    icon: str
    items: Tuple[TrendingItem, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "icon": self.icon,
            "items": [item.to_dict() for item in self.items],
        }


@dataclass
class PlatformReport:
    """Bookkeeping for one platform run, used for status payloads and logs."""

    platform_id: str
    attempts: List[StrategyOutcome] = field(default_factory=list)
    winner: Optional[str] = None
    item_count: int = 0
    latency_ms: Optional[float] = None

    @property
    def exhausted(self) -> bool:
        return self.winner is None


@dataclass(frozen=True)
class AggregateDocument:
    last_updated: str
    platforms: Mapping[str, PlatformSnapshot]

    def __post_init__(self) -> None:
        object.__setattr__(self, "platforms", MappingProxyType(dict(self.platforms)))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "lastUpdated": self.last_updated,
            "platforms": {key: snapshot.to_dict() for key, snapshot in self.platforms.items()},
        }

    def to_json(self, indent: Optional[int] = 2) -> str:
        return json.dumps(self.to_dict(), ensure_ascii=False, indent=indent)

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "AggregateDocument":
        platforms: Dict[str, PlatformSnapshot] = {}
        for key, entry in (payload.get("platforms") or {}).items():
            items = tuple(
                TrendingItem(
                    rank=int(raw["rank"]),
                    title=raw["title"],
                    url=raw["url"],
                    hot=raw.get("hot") or "",
                    platform_id=key,
                )
                for raw in entry.get("items") or []
            )
            platforms[key] = PlatformSnapshot(name=entry.get("name", key), icon=entry.get("icon", ""), items=items)
        return cls(last_updated=payload["lastUpdated"], platforms=platforms)

    @classmethod
    def from_json(cls, raw: str) -> "AggregateDocument":
        return cls.from_dict(json.loads(raw))


@dataclass
class SnapshotResult:
    document: AggregateDocument
    reports: List[PlatformReport]
    instance: str
