import unittest
from typing import List
from unittest.mock import MagicMock

import requests

from crawler.infra.http import Deadline, HttpFetcher
from crawler.schemas.models import TrendRecord
from trending.adapter import PlatformAdapter, run_fallback_chain
from trending.models import AttemptState, Platform, Source, SourceKind
from trending.strategies import DirectApiStrategy, FeedProxyStrategy
from trending.strategies.base import Strategy, StrategyContext
from trending.strategies.direct_api import map_bilibili


class _ScriptedStrategy(Strategy):
    kind = SourceKind.DIRECT_API

    def __init__(self, label: str, titles: List[str], error: Exception = None) -> None:
        super().__init__(Source(url=f"https://example.com/{label}", kind=SourceKind.DIRECT_API), label=label)
        self.titles = titles
        self.error = error
        self.calls = 0

    def collect(self, ctx, deadline):
        self.calls += 1
        if self.error:
            raise self.error
        return [TrendRecord(title=title) for title in self.titles]


def _context(fetcher=None) -> StrategyContext:
    return StrategyContext(
        fetcher=fetcher or MagicMock(spec=HttpFetcher),
        instance="https://rsshub.example",
        deadline=Deadline.unbounded(),
        timeout=1.0,
    )


class FallbackChainTests(unittest.TestCase):
    def test_first_non_empty_strategy_wins_and_later_ones_are_skipped(self):
        a = _ScriptedStrategy("A", [])
        b = _ScriptedStrategy("B", [], error=requests.ConnectionError("refused"))
        c = _ScriptedStrategy("C", ["one", "two", "three"])
        d = _ScriptedStrategy("D", ["never"])
        platform = Platform(id="demo", name="Demo", icon="*", strategies=(a, b, c, d), search_url="https://s/{query}")

        items, report = PlatformAdapter(platform).fetch(_context())

        self.assertEqual([item.title for item in items], ["one", "two", "three"])
        self.assertEqual([item.rank for item in items], [1, 2, 3])
        self.assertEqual((a.calls, b.calls, c.calls, d.calls), (1, 1, 1, 0))
        self.assertEqual(report.winner, "C")
        self.assertEqual(
            [attempt.state for attempt in report.attempts],
            [AttemptState.FAILED_EMPTY, AttemptState.FAILED_EMPTY, AttemptState.SUCCEEDED, AttemptState.NOT_TRIED],
        )
        self.assertIn("refused", report.attempts[1].error)

    def test_exhausted_chain_yields_empty_items_without_raising(self):
        chain = [_ScriptedStrategy("A", []), _ScriptedStrategy("B", [], error=ValueError("bad json"))]
        platform = Platform(id="demo", name="Demo", icon="*", strategies=tuple(chain))

        items, report = PlatformAdapter(platform).fetch(_context())

        self.assertEqual(items, [])
        self.assertTrue(report.exhausted)
        self.assertEqual(report.item_count, 0)

    def test_expired_run_deadline_skips_network_strategies(self):
        a = _ScriptedStrategy("A", ["x"])
        ctx = _context()
        ctx.deadline = Deadline(0.001)
        ctx.deadline.cancel()

        winner, attempts = run_fallback_chain([a], ctx)

        self.assertIsNone(winner)
        self.assertEqual(a.calls, 0)
        self.assertEqual(attempts[0].state, AttemptState.FAILED_EMPTY)


class BilibiliScenarioTests(unittest.TestCase):
    def test_direct_api_after_two_empty_proxy_routes(self):
        fetcher = MagicMock(spec=HttpFetcher)
        fetcher.fetch.side_effect = requests.ConnectionError("proxy down")
        fetcher.get_json.return_value = {
            "code": 0,
            "data": {
                "list": [
                    {"title": "视频一", "bvid": "BV1aa", "stat": {"view": 50000}},
                    {"title": "视频二", "bvid": "BV1bb", "stat": {"view": 120000}},
                    {"title": "视频三", "bvid": "BV1cc", "stat": {"view": 9999999}},
                ]
            },
        }
        platform = Platform(
            id="bilibili",
            name="Bilibili",
            icon="📺",
            strategies=(
                FeedProxyStrategy(Source(url="{instance}/bilibili/hot-search", kind=SourceKind.FEED_PROXY)),
                FeedProxyStrategy(Source(url="{instance}/bilibili/ranking/0/3/1", kind=SourceKind.FEED_PROXY)),
                DirectApiStrategy(
                    Source(url="https://api.bilibili.com/x/web-interface/ranking/v2", kind=SourceKind.DIRECT_API),
                    mapper=map_bilibili,
                    limit=20,
                ),
            ),
        )

        items, report = PlatformAdapter(platform).fetch(_context(fetcher))

        self.assertEqual([item.rank for item in items], [1, 2, 3])
        self.assertEqual([item.hot for item in items], ["5万", "12万", "999万"])
        self.assertEqual(
            [item.url for item in items],
            [
                "https://www.bilibili.com/video/BV1aa",
                "https://www.bilibili.com/video/BV1bb",
                "https://www.bilibili.com/video/BV1cc",
            ],
        )
        requested = [call.args[0] for call in fetcher.fetch.call_args_list]
        self.assertEqual(
            requested,
            ["https://rsshub.example/bilibili/hot-search", "https://rsshub.example/bilibili/ranking/0/3/1"],
        )
        self.assertEqual(report.winner, platform.strategies[2].name)


if __name__ == "__main__":
    unittest.main()
