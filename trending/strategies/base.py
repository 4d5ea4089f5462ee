"""
Strategy protocol + registry for pluggable fetch steps.
"""
from __future__ import annotations

import abc
import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, Optional

from crawler.infra.http import Deadline, HttpFetcher
from crawler.schemas.models import TrendRecord
from trending.models import Source, SourceKind, StrategyOutcome
from utils.security import redact_secrets

logger = logging.getLogger(__name__)


@dataclass
class StrategyContext:
    """Everything a strategy needs from the run it belongs to."""

    fetcher: HttpFetcher
    instance: str
    deadline: Deadline
    timeout: float = 15.0
    feed_max_items: int = 20


def option_int(options: Dict[str, Any], key: str, default: Optional[int] = None) -> Optional[int]:
    """Read an integer catalogue option; a blank value means `default`."""
    value = options.get(key)
    if value is None or value == "":
        return default
    return int(value)


class Strategy(abc.ABC):
    """
    One fetch+parse step of a platform's fallback chain.

    Subclasses implement `collect`, which may raise freely; `run` turns
    whatever happens into a tagged `StrategyOutcome`.
    """

    kind: SourceKind
    needs_network = True

    def __init__(self, source: Source, limit: Optional[int] = None, label: Optional[str] = None) -> None:
        self.source = source
        self.limit = limit
        self.label = label

    @property
    def name(self) -> str:
        return self.label or f"{self.kind.value}:{self.source.url}"

    @abc.abstractmethod
    def collect(self, ctx: StrategyContext, deadline: Deadline) -> List[TrendRecord]:
        ...

    def run(self, ctx: StrategyContext) -> StrategyOutcome:
        start = time.time()
        if self.needs_network and ctx.deadline.expired:
            outcome = StrategyOutcome.failed(self.name, "run deadline exhausted before start")
        else:
            try:
                records = self.collect(ctx, ctx.deadline.child(ctx.timeout))
            except Exception as exc:
                message = redact_secrets(str(exc)) or exc.__class__.__name__
                logger.warning("Strategy %s failed: %s", self.name, message)
                outcome = StrategyOutcome.failed(self.name, message)
            else:
                records = [record for record in records if record.title]
                if self.limit:
                    records = records[: self.limit]
                if records:
                    outcome = StrategyOutcome.succeeded(self.name, records)
                else:
                    outcome = StrategyOutcome.failed(self.name, "no records")
        outcome.latency_ms = (time.time() - start) * 1000
        return outcome

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} {self.name}>"


StrategyBuilder = Callable[[Source, Dict[str, Any]], Strategy]


class StrategyRegistry:
    """
    Maps source kinds to builders that turn catalogue entries into strategies.
    """

    def __init__(self) -> None:
        self._builders: Dict[SourceKind, StrategyBuilder] = {}

    def register(self, kind: SourceKind, builder: StrategyBuilder) -> None:
        if kind in self._builders:
            raise ValueError(f"Strategy kind '{kind.value}' already registered")
        self._builders[kind] = builder

    def build(self, source: Source, options: Dict[str, Any]) -> Strategy:
        try:
            builder = self._builders[source.kind]
        except KeyError:
            raise ValueError(f"No strategy registered for kind '{source.kind.value}'") from None
        return builder(source, options)

    def kinds(self) -> Iterable[SourceKind]:
        return self._builders.keys()
