"""
Base interface for content fetchers.
"""

from typing import Protocol


class ContentFetcher(Protocol):
    """
    Protocol for content fetchers.

    A fetcher turns a URL into readable text, raising
    TransientProviderError when it cannot.
    """

    def name(self) -> str:
        """Returns the fetcher identifier used in logs."""

    def fetch(self, url: str) -> str:
        """Fetches a URL and returns its extracted text."""
