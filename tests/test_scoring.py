"""Unit tests for query generation, summarization and evaluation."""

import unittest
from unittest.mock import MagicMock

from daily_feed.errors import ScoreParseError, TransientProviderError
from daily_feed.models import DEFAULT_EVAL_CRITERIA
from daily_feed.pipeline.query import QueryGenerator
from daily_feed.pipeline.scoring import Evaluator, Summarizer, normalize_score, parse_score


class TestParseScore(unittest.TestCase):
    def test_plain_and_decorated_numbers(self):
        self.assertEqual(parse_score("0.85"), 0.85)
        self.assertEqual(parse_score("  0.7\n"), 0.7)
        self.assertEqual(parse_score("```0.9```"), 0.9)
        self.assertEqual(parse_score("85%"), 85.0)
        self.assertEqual(parse_score("0.6 - mostly relevant"), 0.6)
        self.assertEqual(parse_score(".5"), 0.5)

    def test_unreadable_responses_raise(self):
        for text in ("", "   ", "Score: 0.8", "high", None):
            with self.subTest(text=text):
                with self.assertRaises(ScoreParseError):
                    parse_score(text)


class TestNormalizeScore(unittest.TestCase):
    def test_ranges(self):
        self.assertEqual(normalize_score(0.42), 0.42)
        self.assertEqual(normalize_score(1.0), 1.0)
        self.assertEqual(normalize_score(85), 0.85)
        self.assertEqual(normalize_score(100), 1.0)
        self.assertEqual(normalize_score(250), 1.0)
        self.assertEqual(normalize_score(-0.3), 0.0)


class TestEvaluator(unittest.TestCase):
    def test_percentage_is_normalized(self):
        llm = MagicMock()
        llm.generate_completion.return_value = "85"

        self.assertEqual(Evaluator(llm).evaluate("summary", "AI"), 0.85)

    def test_out_of_range_is_clamped(self):
        llm = MagicMock()
        llm.generate_completion.return_value = "250"

        self.assertEqual(Evaluator(llm).evaluate("summary", "AI"), 1.0)

    def test_unparseable_response_fails_closed(self):
        llm = MagicMock()
        llm.generate_completion.return_value = "This article is highly relevant!"

        self.assertEqual(Evaluator(llm).evaluate("summary", "AI"), 0.0)

    def test_model_failure_propagates(self):
        llm = MagicMock()
        llm.generate_completion.side_effect = TransientProviderError("gemini", "quota")

        with self.assertRaises(TransientProviderError):
            Evaluator(llm).evaluate("summary", "AI")

    def test_prompt_uses_default_criteria_when_empty(self):
        prompt = Evaluator(MagicMock()).build_prompt("A summary", "Rust", "  ")

        self.assertIn("Evaluation Criteria", prompt)
        self.assertIn(DEFAULT_EVAL_CRITERIA, prompt)
        self.assertIn('"Rust"', prompt)
        self.assertIn("A summary", prompt)

    def test_prompt_uses_custom_criteria(self):
        prompt = Evaluator(MagicMock()).build_prompt("s", "Rust", "Only long-form pieces")

        self.assertIn("Only long-form pieces", prompt)
        self.assertNotIn(DEFAULT_EVAL_CRITERIA, prompt)


class TestSummarizer(unittest.TestCase):
    def test_strips_summary(self):
        llm = MagicMock()
        llm.generate_summary.return_value = "  A concise summary.\n"

        self.assertEqual(Summarizer(llm).summarize("content"), "A concise summary.")
        llm.generate_summary.assert_called_once_with("content")


class TestQueryGenerator(unittest.TestCase):
    def test_cleans_quotes_and_whitespace(self):
        llm = MagicMock()
        llm.generate_completion.return_value = '  "rust async runtimes 2026"\n'

        query = QueryGenerator(llm).generate("Rust, async")

        self.assertEqual(query, "rust async runtimes 2026")
        prompt = llm.generate_completion.call_args.args[0]
        self.assertIn("Rust, async", prompt)

    def test_truncates_long_queries(self):
        llm = MagicMock()
        llm.generate_completion.return_value = "q" * 500

        self.assertEqual(len(QueryGenerator(llm).generate("AI")), 380)
        self.assertEqual(len(QueryGenerator(llm, max_length=50).generate("AI")), 50)

    def test_empty_interests_rejected_without_call(self):
        llm = MagicMock()

        with self.assertRaises(ValueError):
            QueryGenerator(llm).generate("   ")
        llm.generate_completion.assert_not_called()

    def test_model_failure_propagates(self):
        llm = MagicMock()
        llm.generate_completion.side_effect = TransientProviderError("gemini", "down")

        with self.assertRaises(TransientProviderError):
            QueryGenerator(llm).generate("AI")


if __name__ == "__main__":
    unittest.main()
