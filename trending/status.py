"""
Status helpers for a finished run.

The payload is meant for logs and CI artifacts: which strategy won per
platform, what failed on the way, and how long it took.
"""
from __future__ import annotations

from typing import Any, Dict, List

from trending.models import AggregateDocument, PlatformReport, StrategyOutcome
from utils.security import redact_secrets


def _attempt_to_dict(outcome: StrategyOutcome) -> Dict[str, Any]:
    return {
        "strategy": outcome.strategy,
        "state": outcome.state.value,
        "records": len(outcome.records),
        "error": redact_secrets(outcome.error) if outcome.error else None,
        "latency_ms": round(outcome.latency_ms, 1) if outcome.latency_ms is not None else None,
    }


def _report_to_dict(report: PlatformReport) -> Dict[str, Any]:
    return {
        "platform": report.platform_id,
        "winner": report.winner,
        "items": report.item_count,
        "exhausted": report.exhausted,
        "latency_ms": round(report.latency_ms, 1) if report.latency_ms is not None else None,
        "attempts": [_attempt_to_dict(outcome) for outcome in report.attempts],
    }


def build_status(document: AggregateDocument, reports: List[PlatformReport], instance: str) -> Dict[str, Any]:
    platforms = [_report_to_dict(report) for report in reports]
    return {
        "generated_at": document.last_updated,
        "instance": instance,
        "platform_count": len(document.platforms),
        "degraded": sorted(key for key, snapshot in document.platforms.items() if not snapshot.items),
        "platforms": platforms,
    }
