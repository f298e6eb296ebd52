"""
Base classes and interfaces for search providers.

This module defines the contract that all search providers must follow.
"""

from typing import Protocol, List
from daily_feed.models import CandidateArticle


class SearchProvider(Protocol):
    """
    Protocol for search providers.

    Classes implementing this protocol query one external search backend
    and return its results as CandidateArticle records tagged with the
    provider's name.
    """

    def name(self) -> str:
        """Returns the provider identifier, e.g. "tavily"."""

    def search_news(self, query: str, max_results: int) -> List[CandidateArticle]:
        """Searches for recent news articles."""
