import os
import tempfile
import textwrap
import unittest
from pathlib import Path
from unittest.mock import patch

from trending.config_loader import ConfigurationError, build_platforms, load_sources_config, proxy_instances
from trending.settings import DEFAULT_CONFIG_PATH, load_settings
from trending.strategies import DirectApiStrategy, FeedProxyStrategy, HtmlPageStrategy, StaticFallbackStrategy


class PackagedCatalogueTests(unittest.TestCase):
    def setUp(self) -> None:
        self.config = load_sources_config(DEFAULT_CONFIG_PATH)

    def test_default_platforms_in_catalogue_order(self):
        platforms = build_platforms(self.config)
        self.assertEqual(
            [p.id for p in platforms],
            ["twitter", "bilibili", "instagram", "zhihu", "baidu", "toutiao"],
        )

    def test_bilibili_chain_is_two_proxy_routes_then_api(self):
        bilibili = next(p for p in build_platforms(self.config) if p.id == "bilibili")
        self.assertEqual(
            [type(s) for s in bilibili.strategies],
            [FeedProxyStrategy, FeedProxyStrategy, DirectApiStrategy],
        )

    def test_disabled_platforms_can_be_selected_explicitly(self):
        platforms = build_platforms(self.config, only=["tiktok", "youtube"])
        tiktok, youtube = platforms
        self.assertEqual([type(s) for s in tiktok.strategies], [HtmlPageStrategy, StaticFallbackStrategy])
        self.assertIsNotNone(youtube.strategies[-1].parser)

    def test_unknown_platform_selection_is_an_error(self):
        with self.assertRaises(ConfigurationError):
            build_platforms(self.config, only=["myspace"])

    def test_proxy_instances_env_override_wins(self):
        self.assertEqual(proxy_instances(self.config)[0], "https://rsshub.pseudoyu.com")
        self.assertEqual(proxy_instances(self.config, ["https://mine.example"]), ["https://mine.example"])


class CatalogueValidationTests(unittest.TestCase):
    def _write(self, body: str) -> Path:
        handle = tempfile.NamedTemporaryFile("w", suffix=".yaml", delete=False, encoding="utf-8")
        handle.write(textwrap.dedent(body))
        handle.close()
        self.addCleanup(os.unlink, handle.name)
        return Path(handle.name)

    def test_missing_file_is_fatal(self):
        with self.assertRaises(ConfigurationError):
            load_sources_config(Path(tempfile.gettempdir()) / "does-not-exist-platforms.yaml")

    def test_unknown_kind_is_fatal(self):
        path = self._write(
            """
            proxy_instances: [https://a.example]
            platforms:
              demo:
                strategies:
                  - kind: carrier-pigeon
                    url: https://example.com
            """
        )
        with self.assertRaises(ConfigurationError):
            build_platforms(load_sources_config(path))

    def test_unknown_mapper_is_fatal(self):
        path = self._write(
            """
            platforms:
              demo:
                strategies:
                  - kind: direct-api
                    url: https://example.com/api
                    mapper: nope
            """
        )
        with self.assertRaises(ConfigurationError):
            build_platforms(load_sources_config(path))

    @patch.dict(os.environ, {"DEMO_FEED_URL": "https://feeds.example/hot"})
    def test_env_placeholders_are_expanded(self):
        path = self._write(
            """
            platforms:
              demo:
                name: Demo
                strategies:
                  - kind: feed-proxy
                    url: ${DEMO_FEED_URL}
            """
        )
        platform = build_platforms(load_sources_config(path))[0]
        self.assertEqual(platform.strategies[0].source.url, "https://feeds.example/hot")

    def test_quoted_limits_are_coerced(self):
        path = self._write(
            """
            platforms:
              demo:
                strategies:
                  - kind: feed-proxy
                    url: https://feeds.example/hot
                    limit: "5"
                  - kind: html-page
                    url: https://example.com/trends
                    selector: li a
                    limit: "3"
                  - kind: static-fallback
                    values: [a, b, c]
                    limit: "2"
            """
        )
        platform = build_platforms(load_sources_config(path))[0]
        self.assertEqual([s.limit for s in platform.strategies], [5, 3, 2])

    def test_non_numeric_limit_is_fatal(self):
        path = self._write(
            """
            platforms:
              demo:
                strategies:
                  - kind: static-fallback
                    values: [a]
                    limit: many
            """
        )
        with self.assertRaises(ConfigurationError):
            build_platforms(load_sources_config(path))

    def test_missing_proxy_instances_is_fatal(self):
        with self.assertRaises(ConfigurationError):
            proxy_instances({"platforms": {}})


class SettingsTests(unittest.TestCase):
    @patch.dict(
        os.environ,
        {
            "TRENDING_FETCH_TIMEOUT": "abc",
            "TRENDING_RUN_TIMEOUT": "0",
            "TRENDING_PROXY_INSTANCES": "https://a.example, https://b.example",
            "TRENDING_OUTPUT_PATH": "out/snapshot.json",
        },
    )
    def test_env_values_with_fallbacks(self):
        settings = load_settings()
        self.assertEqual(settings.fetch_timeout, 15.0)
        self.assertEqual(settings.run_timeout, 0.0)
        self.assertEqual(settings.proxy_instances, ["https://a.example", "https://b.example"])
        self.assertEqual(settings.output_path, Path("out/snapshot.json"))


if __name__ == "__main__":
    unittest.main()
