"""Unit tests for the command-line entry point."""

import unittest
from unittest.mock import MagicMock, patch

from daily_feed import main as feed_main
from daily_feed.config import Settings
from daily_feed.errors import ConfigurationError
from daily_feed.pipeline.workflow import FeedRunner, WorkflowResult

from fakes import InMemoryStore


class TestBuildRegistry(unittest.TestCase):
    def test_registers_keyed_providers(self):
        settings = Settings(tavily_api_key="t", serpapi_api_key="s", google_news_rss=True)

        registry = feed_main.build_registry(settings)

        self.assertEqual(registry.names(), ["tavily", "google", "google_news"])

    def test_rss_only(self):
        registry = feed_main.build_registry(Settings())

        self.assertEqual(registry.names(), ["google_news"])

    def test_no_providers_raises(self):
        with self.assertRaises(ConfigurationError):
            feed_main.build_registry(Settings(google_news_rss=False))


class TestBuildRunner(unittest.TestCase):
    def test_missing_gemini_key_raises(self):
        with self.assertRaises(ConfigurationError):
            feed_main.build_runner({}, Settings(), store=InMemoryStore())

    @patch("daily_feed.main.LLMService")
    def test_wires_runner(self, mock_llm_cls):
        settings = Settings(
            gemini_api_key="g", gemini_fallback_models=["gemini-1.5-flash"], tavily_api_key="t"
        )

        runner = feed_main.build_runner(
            {"feed": {"delay_between_users": 5}}, settings, store=InMemoryStore()
        )

        self.assertIsInstance(runner, FeedRunner)
        self.assertEqual(runner.delay_between_users, 5)
        mock_llm_cls.assert_called_once_with(
            "g", model="gemini-2.0-flash", fallback_models=["gemini-1.5-flash"]
        )
        self.assertEqual(
            [f.name() for f in runner.controller.acquirer.fetchers],
            ["direct", "reader", "extraction_api"],
        )


class TestMain(unittest.TestCase):
    @patch("daily_feed.main.Settings.from_env")
    def test_configuration_error_exits_nonzero(self, mock_from_env):
        mock_from_env.return_value = Settings()

        self.assertEqual(feed_main.main([]), 1)

    @patch("daily_feed.main.build_runner")
    @patch("daily_feed.main.Settings.from_env")
    def test_runs_selected_users(self, mock_from_env, mock_build_runner):
        mock_from_env.return_value = Settings(gemini_api_key="g")
        runner = MagicMock()
        runner.run_all.return_value = [WorkflowResult(user_id="u1", stored=4)]
        mock_build_runner.return_value = runner

        self.assertEqual(feed_main.main(["--user", "u1"]), 0)
        runner.run_all.assert_called_once_with(["u1"])


if __name__ == "__main__":
    unittest.main()
