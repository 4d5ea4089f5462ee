"""
Last-resort strategy for platforms without a dependable live endpoint.
"""
from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence

from crawler.infra.http import Deadline
from crawler.schemas.models import TrendRecord
from trending.models import Source, SourceKind
from trending.strategies.base import Strategy, StrategyContext, option_int


class StaticFallbackStrategy(Strategy):
    kind = SourceKind.STATIC_FALLBACK
    needs_network = False

    def __init__(
        self,
        source: Source,
        values: Sequence[str],
        title_prefix: str = "",
        limit: Optional[int] = None,
        label: Optional[str] = None,
    ) -> None:
        super().__init__(source, limit=limit, label=label)
        self.values = tuple(values)
        self.title_prefix = title_prefix

    @property
    def name(self) -> str:
        return self.label or f"{self.kind.value}:{len(self.values)} values"

    def collect(self, ctx: StrategyContext, deadline: Deadline) -> List[TrendRecord]:
        return [TrendRecord(title=f"{self.title_prefix}{value}") for value in self.values]

    @classmethod
    def from_config(cls, source: Source, options: Dict[str, Any]) -> "StaticFallbackStrategy":
        values = options.get("values") or []
        if isinstance(values, str):
            values = [token.strip() for token in values.split(",")]
        values = [str(value) for value in values if str(value).strip()]
        if not values:
            raise ValueError("static-fallback strategy requires at least one value")
        return cls(
            source,
            values=values,
            title_prefix=options.get("title_prefix", ""),
            limit=option_int(options, "limit"),
            label=options.get("label"),
        )
