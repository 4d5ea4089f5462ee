"""
Per-platform fallback chain: run strategies in order until one yields records.
"""
from __future__ import annotations

import logging
import time
from typing import List, Optional, Sequence, Tuple

from trending.models import AttemptState, Platform, PlatformReport, StrategyOutcome, TrendingItem
from trending.normalize import normalize_records
from trending.strategies.base import Strategy, StrategyContext

logger = logging.getLogger(__name__)


def run_fallback_chain(
    strategies: Sequence[Strategy],
    ctx: StrategyContext,
    label: str = "",
) -> Tuple[Optional[StrategyOutcome], List[StrategyOutcome]]:
    """
    Execute `strategies` strictly in order and stop at the first one with
    records. Returns the winning outcome (or None when the chain is exhausted)
    together with one outcome per strategy; strategies after the winner are
    never invoked and are reported as not tried.
    """
    attempts: List[StrategyOutcome] = []
    winner: Optional[StrategyOutcome] = None
    for strategy in strategies:
        if winner is not None:
            attempts.append(StrategyOutcome(strategy=strategy.name, state=AttemptState.NOT_TRIED))
            continue
        logger.debug("%s: trying %s", label, strategy.name)
        outcome = strategy.run(ctx)
        attempts.append(outcome)
        if outcome.ok:
            winner = outcome
        else:
            logger.info("%s: %s returned nothing (%s)", label, strategy.name, outcome.error or "empty")
    return winner, attempts


class PlatformAdapter:
    def __init__(self, platform: Platform) -> None:
        self.platform = platform

    @property
    def name(self) -> str:
        return self.platform.id

    def fetch(self, ctx: StrategyContext) -> Tuple[List[TrendingItem], PlatformReport]:
        start = time.time()
        winner, attempts = run_fallback_chain(self.platform.strategies, ctx, label=self.platform.id)
        items: List[TrendingItem] = []
        if winner is not None:
            items = normalize_records(self.platform, winner.records)
            if not items:
                # every record was blank after cleanup, which leaves the platform empty
                winner.state = AttemptState.FAILED_EMPTY
                winner.error = "no usable titles after normalization"
                winner = None
        report = PlatformReport(
            platform_id=self.platform.id,
            attempts=attempts,
            winner=winner.strategy if winner else None,
            item_count=len(items),
            latency_ms=(time.time() - start) * 1000,
        )
        if report.exhausted:
            logger.warning("%s: all %d strategies exhausted", self.platform.id, len(attempts))
        return items, report
