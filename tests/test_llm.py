"""Unit tests for the Gemini LLM service."""

import unittest
from unittest.mock import MagicMock, patch

from daily_feed.errors import TransientProviderError
from daily_feed.services.llm import LLMService


def gemini_response(text):
    response = MagicMock()
    response.text = text
    return response


@patch("daily_feed.services.llm.genai.Client")
class TestLLMService(unittest.TestCase):
    def test_returns_first_model_response(self, mock_client_cls):
        client = mock_client_cls.return_value
        client.models.generate_content.return_value = gemini_response("0.8")

        service = LLMService("key", model="gemini-2.0-flash")

        self.assertEqual(service.generate_completion("score this"), "0.8")
        client.models.generate_content.assert_called_once_with(
            model="gemini-2.0-flash", contents="score this"
        )
        mock_client_cls.assert_called_once_with(api_key="key")

    def test_falls_back_to_next_model(self, mock_client_cls):
        client = mock_client_cls.return_value
        client.models.generate_content.side_effect = [
            RuntimeError("429 RESOURCE_EXHAUSTED"),
            gemini_response(""),
            gemini_response("query text"),
        ]

        service = LLMService("key", model="a", fallback_models=["b", "c"])

        self.assertEqual(service.generate_completion("p"), "query text")
        models = [c.kwargs["model"] for c in client.models.generate_content.call_args_list]
        self.assertEqual(models, ["a", "b", "c"])

    def test_all_models_failing_raises(self, mock_client_cls):
        client = mock_client_cls.return_value
        client.models.generate_content.side_effect = RuntimeError("unavailable")

        service = LLMService("key", model="a", fallback_models=["b"])

        with self.assertRaises(TransientProviderError) as ctx:
            service.generate_completion("p")
        self.assertEqual(ctx.exception.provider, "gemini")
        self.assertEqual(client.models.generate_content.call_count, 2)

    def test_duplicate_fallbacks_are_ignored(self, _mock_client_cls):
        service = LLMService("key", model="a", fallback_models=["a", "", "b"])

        self.assertEqual(service.models, ["a", "b"])

    def test_client_init_failure(self, mock_client_cls):
        mock_client_cls.side_effect = ValueError("bad key")

        service = LLMService("key")

        self.assertIsNone(service.client)
        with self.assertRaises(TransientProviderError):
            service.generate_completion("p")

    def test_summary_prompt_truncates_content(self, mock_client_cls):
        client = mock_client_cls.return_value
        client.models.generate_content.return_value = gemini_response("  A summary.  ")

        service = LLMService("key")
        summary = service.generate_summary("word " + "x" * 30000)

        self.assertEqual(summary, "A summary.")
        prompt = client.models.generate_content.call_args.kwargs["contents"]
        self.assertIn("Summarize the article", prompt)
        self.assertNotIn("x" * 20000, prompt)


if __name__ == "__main__":
    unittest.main()
