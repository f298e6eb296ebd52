"""
Search query generation.
"""

import logging

from daily_feed.services.llm import LanguageModel

logger = logging.getLogger(__name__)


class QueryGenerator:
    """Turns a free-text interest statement into one search query."""

    _QUERY_PROMPT = """You are a news curator. The user likes: "{interests}".
Generate ONE specific, high-quality search query to find recent news articles for this user.
The query MUST be under 350 characters.
Return ONLY the query text. Do not use quotes."""

    # Tavily rejects queries over 400 characters
    DEFAULT_MAX_LENGTH = 380

    def __init__(self, llm: LanguageModel, max_length: int = DEFAULT_MAX_LENGTH):
        self.llm = llm
        self.max_length = max_length

    def clean_query(self, raw: str) -> str:
        """Trims whitespace and wrapping quotes, then truncates."""
        query = raw.strip().strip("\"'").strip()
        return query[: self.max_length]

    def generate(self, interests: str) -> str:
        """Asks the model for a query.

        Raises ValueError for empty interests and TransientProviderError
        when the model call fails.
        """
        if not interests or not interests.strip():
            raise ValueError("interests must not be empty")

        raw = self.llm.generate_completion(self._QUERY_PROMPT.format(interests=interests.strip()))
        query = self.clean_query(raw)
        logger.info("Generated search query: %s", query)
        return query
