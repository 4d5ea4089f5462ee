import json
import re
import threading
import unittest
from unittest.mock import MagicMock

import requests

from crawler.infra.http import HttpFetcher
from crawler.schemas.models import TrendRecord
from trending import build_snapshot
from trending.models import AggregateDocument, Platform, Source, SourceKind
from trending.pipeline import TrendingPipeline
from trending.settings import DEFAULT_CONFIG_PATH, TrendingSettings
from trending.status import build_status
from trending.strategies.base import Strategy


class _RendezvousStrategy(Strategy):
    kind = SourceKind.DIRECT_API

    def __init__(self, barrier, title):
        super().__init__(Source(url="https://example.com/api", kind=SourceKind.DIRECT_API), label="rendezvous")
        self.barrier = barrier
        self.title = title

    def collect(self, ctx, deadline):
        # raises BrokenBarrierError unless the other platform is in flight at the same time
        self.barrier.wait(timeout=2)
        return [TrendRecord(title=self.title)]


class _StaticStrategy(Strategy):
    kind = SourceKind.DIRECT_API

    def __init__(self, titles, error=None):
        super().__init__(Source(url="https://example.com/api", kind=SourceKind.DIRECT_API), label="static")
        self.titles = titles
        self.error = error

    def collect(self, ctx, deadline):
        if self.error:
            raise self.error
        return [TrendRecord(title=title, hot_value=10000 * (i + 1)) for i, title in enumerate(self.titles)]


def _platform(pid, *strategies):
    return Platform(id=pid, name=pid.title(), icon="#", strategies=strategies, search_url="https://s.example/?q={query}")


class PipelineTests(unittest.TestCase):
    def setUp(self):
        self.platforms = [
            _platform("twitter", _StaticStrategy(["a", "b"])),
            _platform("zhihu", _StaticStrategy([], error=TimeoutError("timed out")), _StaticStrategy([])),
            _platform("toutiao", _StaticStrategy(["c"])),
        ]
        self.pipeline = TrendingPipeline(self.platforms, fetcher=MagicMock(spec=HttpFetcher))

    def test_failed_platform_is_isolated_and_still_present(self):
        document = self.pipeline.run("https://rsshub.example")

        self.assertEqual(list(document.platforms), ["twitter", "zhihu", "toutiao"])
        self.assertEqual(document.platforms["zhihu"].items, ())
        self.assertEqual([i.title for i in document.platforms["twitter"].items], ["a", "b"])
        self.assertEqual([i.title for i in document.platforms["toutiao"].items], ["c"])

    def test_ranks_contiguous_for_every_platform(self):
        document = self.pipeline.run("https://rsshub.example")
        for snapshot in document.platforms.values():
            self.assertEqual([item.rank for item in snapshot.items], list(range(1, len(snapshot.items) + 1)))

    def test_document_is_immutable(self):
        document = self.pipeline.run("https://rsshub.example")
        with self.assertRaises(TypeError):
            document.platforms["extra"] = None  # type: ignore[index]

    def test_json_round_trip_preserves_shape(self):
        document = self.pipeline.run("https://rsshub.example")
        payload = json.loads(document.to_json())

        self.assertEqual(set(payload), {"lastUpdated", "platforms"})
        self.assertRegex(payload["lastUpdated"], r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}\.\d{3}Z$")
        self.assertEqual(
            payload["platforms"]["twitter"]["items"][0],
            {"rank": 1, "title": "a", "url": "https://s.example/?q=a", "hot": "1万"},
        )

        restored = AggregateDocument.from_json(document.to_json())
        self.assertEqual(restored.last_updated, document.last_updated)
        self.assertEqual(dict(restored.platforms), dict(document.platforms))

    def test_status_lists_degraded_platforms(self):
        document = self.pipeline.run("https://rsshub.example")
        status = build_status(document, self.pipeline.get_reports(), "https://rsshub.example")

        self.assertEqual(status["degraded"], ["zhihu"])
        zhihu = next(entry for entry in status["platforms"] if entry["platform"] == "zhihu")
        self.assertTrue(zhihu["exhausted"])
        self.assertEqual([a["state"] for a in zhihu["attempts"]], ["failed-empty", "failed-empty"])
        self.assertTrue(re.search("timed out", zhihu["attempts"][0]["error"]))

    def test_platforms_are_fetched_concurrently(self):
        barrier = threading.Barrier(2)
        pipeline = TrendingPipeline(
            [_platform("left", _RendezvousStrategy(barrier, "l")), _platform("right", _RendezvousStrategy(barrier, "r"))],
            fetcher=MagicMock(spec=HttpFetcher),
        )

        document = pipeline.run("https://rsshub.example")

        self.assertEqual([i.title for i in document.platforms["left"].items], ["l"])
        self.assertEqual([i.title for i in document.platforms["right"].items], ["r"])

    def test_duplicate_platform_ids_rejected(self):
        with self.assertRaises(ValueError):
            TrendingPipeline([_platform("a", _StaticStrategy(["x"])), _platform("a", _StaticStrategy(["y"]))])


class BuildSnapshotTests(unittest.TestCase):
    def test_everything_down_still_yields_every_platform(self):
        fetcher = MagicMock(spec=HttpFetcher)
        fetcher.probe.return_value = False
        fetcher.fetch.side_effect = requests.ConnectionError("offline")
        fetcher.get_json.side_effect = requests.ConnectionError("offline")
        fetcher.get_text.side_effect = requests.ConnectionError("offline")
        settings = TrendingSettings(config_path=DEFAULT_CONFIG_PATH, output_path=None, fetch_timeout=1.0)

        result = build_snapshot(settings, fetcher=fetcher)

        self.assertEqual(result.instance, "https://rsshub.pseudoyu.com")
        platforms = result.document.platforms
        self.assertEqual(list(platforms), ["twitter", "bilibili", "instagram", "zhihu", "baidu", "toutiao"])
        self.assertEqual(len(platforms["instagram"].items), 20)
        self.assertEqual(platforms["instagram"].items[0].url, "https://www.instagram.com/explore/tags/love/")
        for key in ("twitter", "bilibili", "zhihu", "baidu", "toutiao"):
            self.assertEqual(platforms[key].items, ())


if __name__ == "__main__":
    unittest.main()
