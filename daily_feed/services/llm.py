"""
LLM Service Module.

This module provides the LLMService class, which interfaces with the Google
Gemini API to write search queries, summarize article content and score
summaries against a user's interests.
"""

import logging
from typing import List, Optional, Protocol, Sequence

from google import genai
from daily_feed.errors import TransientProviderError

logger = logging.getLogger(__name__)


class LanguageModel(Protocol):
    """Completion capability used by the feed pipeline."""

    def generate_completion(self, prompt: str) -> str:
        """Returns the model's text response to a prompt."""

    def generate_summary(self, content: str) -> str:
        """Returns a condensed summary of article content."""


class LLMService(LanguageModel):
    """
    Service for interacting with the Google Gemini API.

    Requests go to ``model`` first and then to each of ``fallback_models``
    in order. A call fails only when every model has failed.
    """

    _SUMMARY_PROMPT = """
        You are a news editor preparing a personal daily reading list.

        Task: Summarize the article below in 3 to 5 sentences.
        - Keep the key facts, names and numbers.
        - Say what is new and why it matters.
        - Do not add opinions or information that is not in the article.
        - Return plain text only, no headings or bullet points.

        Article:
        {content}
        """

    MAX_SUMMARY_INPUT = 20000

    def __init__(
        self,
        api_key: str,
        model: str = "gemini-2.0-flash",
        fallback_models: Optional[Sequence[str]] = None,
    ):
        self.api_key = api_key
        self.models: List[str] = [model] + [
            m for m in (fallback_models or []) if m and m != model
        ]
        self.client: Optional[genai.Client] = None
        try:
            self.client = genai.Client(api_key=api_key)
        except Exception as e:  # pylint: disable=broad-exception-caught
            logger.error("Failed to initialize Gemini client: %s", e)
            self.client = None

    def generate_completion(self, prompt: str) -> str:
        """Sends a prompt, falling back across models on failure."""
        if not self.client:
            raise TransientProviderError("gemini", "client not initialized")

        last_error: Optional[Exception] = None
        for attempt, model in enumerate(self.models, start=1):
            try:
                response = self.client.models.generate_content(model=model, contents=prompt)
            except Exception as e:  # pylint: disable=broad-exception-caught
                logger.warning(
                    "Gemini model %s failed (attempt %d/%d): %s",
                    model,
                    attempt,
                    len(self.models),
                    e,
                )
                last_error = e
                continue

            text = response.text if response.text else ""
            if not text.strip():
                logger.warning("Gemini model %s returned an empty response", model)
                last_error = ValueError("empty response")
                continue
            return text

        raise TransientProviderError("gemini", f"all models failed: {last_error}")

    def generate_summary(self, content: str) -> str:
        """Summarizes article content."""
        prompt = self._SUMMARY_PROMPT.format(content=content[: self.MAX_SUMMARY_INPUT])
        summary = self.generate_completion(prompt).strip()
        logger.info("Generated summary (length: %d)", len(summary))
        return summary
